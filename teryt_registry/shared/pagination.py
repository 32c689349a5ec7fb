from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, List, TypeVar

from teryt_registry.shared.errors import PageOutOfRange

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    page: int
    page_size: int
    total: int


def offset_for(page: int, page_size: int) -> int:
    # strony numerowane od 1
    return (page - 1) * page_size


def last_page(total: int, page_size: int) -> int:
    """Ostatnia poprawna strona. Pusty wynik nadal ma stronę 1 (z zerem wierszy)."""
    if total <= 0:
        return 1
    return (total + page_size - 1) // page_size


def ensure_page_in_range(*, total: int, page: int, page_size: int) -> None:
    """Strona za ostatnią niepustą = błąd (PageOutOfRange), a nie pusta lista.

    Klient odróżnia wtedy "za daleko" od "brak wyników" (page=1, data=[]).
    """
    last = last_page(total, page_size)
    if page > last:
        raise PageOutOfRange(
            message=f"Strona {page} poza zakresem (ostatnia: {last}).",
            details={"field": "page", "page": page, "last_page": last, "total": total},
        )
