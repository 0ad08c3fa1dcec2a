"""
Client-local derivations over already fetched employee records.

Nothing here talks to the server. sort_records approximates the server's
collation (case-insensitive strings with accents sorting beside their base
letter, numeric salary, _id ascending on ties) so a loaded page can be
re-sorted without a round trip.
"""
import unicodedata
from typing import Any, Dict, List

from staff_directory.domains.employees.query import SortDirection, SortKey

UNKNOWN_DESIGNATION = "Unknown"


def _fold_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def _sort_value(record: Dict[str, Any], sort_key: SortKey):
    value = record.get(sort_key.value)
    if sort_key == SortKey.SALARY:
        return float(value or 0)
    if value is None:
        return ("", "")
    text = str(value).casefold()
    # Base letters first, then accents: "emile" < "émile" < "eve"
    return (_fold_accents(text), text)


def sort_records(
        records: List[Dict[str, Any]],
        sort_key: SortKey,
        direction: SortDirection = SortDirection.ASC
) -> List[Dict[str, Any]]:
    """
    Return records re-sorted by sort_key.

    Only meaningful within one loaded page: ordering the whole directory
    has to happen on the server before pagination.
    """
    sort_key = SortKey(sort_key)
    # Stable sorts: order by the tiebreak first, then by the key
    by_id = sorted(records, key=lambda r: str(r.get("_id", "")))
    return sorted(
        by_id,
        key=lambda r: _sort_value(r, sort_key),
        reverse=SortDirection(direction) == SortDirection.DESC
    )


def designation_counts(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Count employees per designation for charting.

    Returns:
        [{"name": designation, "employees": count}] in first-seen order
    """
    counts: Dict[str, int] = {}
    for record in records:
        designation = record.get("designation") or UNKNOWN_DESIGNATION
        counts[designation] = counts.get(designation, 0) + 1
    return [{"name": name, "employees": count} for name, count in counts.items()]
