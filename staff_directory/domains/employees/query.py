"""
Directory query engine: search, sort and pagination over employees.

The pure part (build_query) turns request parameters into a Mongo filter,
sort order and skip/limit window. Sorting always ends with _id
ascending so that records with equal sort keys keep one fixed order, which
is what makes consecutive pages disjoint and complete.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ASCENDING, DESCENDING
from pymongo.collation import Collation, CollationStrength

from staff_directory.core.config import settings
from staff_directory.core.errors import InvalidArgument
from staff_directory.domains.employees.repository import EmployeeRepository
from staff_directory.domains.users.repository import UserRepository


class SortKey(str, Enum):
    NAME = "name"
    EMAIL = "email"
    DESIGNATION = "designation"
    SALARY = "salary"
    CREATED_AT = "created_at"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


SEARCH_FIELDS = ("name", "email", "designation")

# Strength 2 compares base letters and accents but ignores case
CASE_INSENSITIVE = Collation(locale="en", strength=CollationStrength.SECONDARY)


@dataclass
class QueryParams:
    search: Optional[str] = None
    sort_key: SortKey = SortKey.CREATED_AT
    sort_direction: SortDirection = SortDirection.DESC
    page: int = 1
    page_size: int = field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE)


@dataclass
class DirectoryQuery:
    filter: Dict[str, Any]
    sort: List[Tuple[str, int]]
    collation: Collation
    skip: int
    limit: int


@dataclass
class Page:
    data: List[Dict[str, Any]]
    total: int
    page: int
    pages: int
    limit: int

    @property
    def pagination(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "page": self.page,
            "pages": self.pages,
            "limit": self.limit,
        }


def build_filter(search: Optional[str]) -> Dict[str, Any]:
    """
    Build the search filter.

    The search text is matched literally (regex metacharacters escaped) and
    case-insensitively as a substring of name, email or designation. The text
    is used as given, surrounding whitespace included; only None or "" mean
    no filter.
    """
    if not search:
        return {}
    pattern = re.escape(search)
    return {"$or": [{name: {"$regex": pattern, "$options": "i"}} for name in SEARCH_FIELDS]}


def page_count(total: int, page_size: int) -> int:
    """Number of pages needed for total records: ceil(total / page_size)."""
    return -(-total // page_size)


def build_query(params: QueryParams) -> DirectoryQuery:
    """
    Translate query parameters into a storage query.

    Raises:
        InvalidArgument: If page or page_size is not a positive integer, or
            the sort key/direction is unknown
    """
    if isinstance(params.page, bool) or not isinstance(params.page, int) or params.page < 1:
        raise InvalidArgument("page", "page must be a positive integer")
    if isinstance(params.page_size, bool) or not isinstance(params.page_size, int) or params.page_size < 1:
        raise InvalidArgument("limit", "limit must be a positive integer")

    try:
        sort_key = SortKey(params.sort_key)
    except ValueError:
        raise InvalidArgument("sort", f"Cannot sort by {params.sort_key}")
    try:
        sort_direction = SortDirection(params.sort_direction)
    except ValueError:
        raise InvalidArgument("order", f"Unknown sort order {params.sort_direction}")

    direction = ASCENDING if sort_direction == SortDirection.ASC else DESCENDING
    sort = [(sort_key.value, direction), ("_id", ASCENDING)]

    return DirectoryQuery(
        filter=build_filter(params.search),
        sort=sort,
        collation=CASE_INSENSITIVE,
        skip=(params.page - 1) * params.page_size,
        limit=params.page_size,
    )


class DirectoryQueryEngine:
    """
    Runs directory queries against storage and joins creator identities.
    """

    def __init__(
            self,
            employee_repo: Optional[EmployeeRepository] = None,
            user_repo: Optional[UserRepository] = None
    ):
        self.employee_repo = employee_repo or EmployeeRepository()
        self.user_repo = user_repo or UserRepository()

    async def query(self, params: QueryParams) -> Page:
        """
        Fetch one page of the filtered, sorted directory.

        A page past the last one is not an error: it comes back empty with
        the true total and page count.

        Args:
            params: Search, sort and pagination parameters

        Returns:
            Page of employees with creator identities resolved
        """
        storage_query = build_query(params)

        records = await self.employee_repo.find_many(
            storage_query.filter,
            skip=storage_query.skip,
            limit=storage_query.limit,
            sort=storage_query.sort,
            collation=storage_query.collation
        )
        total = await self.employee_repo.count(storage_query.filter)

        return Page(
            data=await self.resolve_creators(records),
            total=total,
            page=params.page,
            pages=page_count(total, params.page_size),
            limit=params.page_size,
        )

    async def resolve_creators(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Replace each record's created_by ID with {_id, name, email} of that user.

        All creators on the page are looked up in one query. A creator that no
        longer exists keeps its ID with empty name and email.
        """
        creator_ids = sorted({r["created_by"] for r in records if r.get("created_by")})
        identities = await self.user_repo.find_display_identities(creator_ids) if creator_ids else {}

        resolved = []
        for record in records:
            enriched = dict(record)
            creator_id = record.get("created_by")
            if creator_id:
                enriched["created_by"] = identities.get(
                    creator_id,
                    {"_id": creator_id, "name": None, "email": None}
                )
            resolved.append(enriched)
        return resolved
