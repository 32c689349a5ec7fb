from __future__ import annotations

import logging

from teryt_registry.shared.request_context import get_request_context

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [req=%(request_id)s actor=%(principal_id)s] %(message)s"

_configured = False


class RequestContextFilter(logging.Filter):
    """Dokleja request_id / principal_id z contextvar do każdego rekordu."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_request_context()
        record.request_id = ctx.request_id or "-"
        record.principal_id = ctx.principal_id or "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger("teryt_registry")
    root.setLevel(level.upper())
    root.addHandler(handler)
    root.propagate = False
    _configured = True
