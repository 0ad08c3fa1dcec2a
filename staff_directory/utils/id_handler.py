"""
ID Handler module for consistent MongoDB ObjectId handling throughout the application.
"""
from typing import Any, Dict, List, Optional, Union
from bson import ObjectId


class IdHandler:
    """
    Centralized helpers for converting between ObjectIds and their string form.
    """

    @staticmethod
    def ensure_object_id(id_value: Any) -> Optional[ObjectId]:
        """
        Safely convert a string or ObjectId to an ObjectId.
        Returns None if conversion is not possible.

        Args:
            id_value: Value to convert to ObjectId (string or ObjectId)

        Returns:
            ObjectId or None if conversion failed
        """
        if id_value is None:
            return None

        if isinstance(id_value, ObjectId):
            return id_value

        if isinstance(id_value, str) and ObjectId.is_valid(id_value):
            return ObjectId(id_value)

        return None

    @staticmethod
    def format_object_ids(data: Union[Dict[str, Any], List[Dict[str, Any]], None]) -> Union[
        Dict[str, Any], List[Dict[str, Any]], None]:
        """
        Convert ObjectId to strings in a document or list of documents.
        Works recursively for nested dictionaries and lists.

        Args:
            data: MongoDB document or list of documents

        Returns:
            Document(s) with ObjectIds converted to strings
        """
        if data is None:
            return None

        if isinstance(data, list):
            return [IdHandler.format_object_ids(item) for item in data]
        elif isinstance(data, dict):
            result = {}
            for key, value in data.items():
                if isinstance(value, ObjectId):
                    result[key] = str(value)
                elif isinstance(value, (dict, list)):
                    result[key] = IdHandler.format_object_ids(value)
                else:
                    result[key] = value
            return result
        else:
            return data
