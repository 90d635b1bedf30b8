from datetime import date
from typing import Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")


def today_iso() -> str:
    return date.today().isoformat()


def resolve_date_range(date_from: Optional[str], date_to: Optional[str]) -> Tuple[str, str]:
    """Missing bounds default to today, as the export date pickers do."""
    today = today_iso()
    return date_from or today, date_to or today


def filter_by_date_range(records: Iterable[T], date_from: str, date_to: str) -> List[T]:
    """Keep records whose `date` falls inside [date_from, date_to]. Both ends inclusive."""
    start = date.fromisoformat(date_from)
    end = date.fromisoformat(date_to)
    return [r for r in records if start <= date.fromisoformat(r.date) <= end]


def sort_by_date(records: Iterable[T]) -> List[T]:
    return sorted(records, key=lambda r: (r.date, r.created_at))
