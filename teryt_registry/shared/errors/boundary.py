from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar, cast

from teryt_registry.shared.errors.domains import DomainError, Internal

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def service_boundary(operation: str) -> Callable[[F], F]:
    """Granica serwisu: nic nieskategoryzowanego nie wychodzi na zewnątrz.

    - DomainError: rollback + propagacja bez zmian
    - cokolwiek innego (SQLAlchemyError, bug): rollback, log, Internal

    Dekorowana metoda musi należeć do obiektu z atrybutem `_db` (Session).
    """

    def deco(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(self, *args: Any, **kwargs: Any) -> Any:
            try:
                return fn(self, *args, **kwargs)
            except DomainError as e:
                self._db.rollback()
                logger.info("%s rejected: %s (%s)", operation, e.code, e.message)
                raise
            except Exception as e:
                self._db.rollback()
                logger.exception("%s failed unexpectedly", operation)
                raise Internal(
                    message="Wewnętrzny błąd serwera.",
                    details={"operation": operation},
                ) from e

        return cast(F, wrapper)

    return deco
