import logging
import sys
from contextvars import ContextVar

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s %(request_path)s: %(message)s"

# Path of the request being served; "-" outside a request (startup, CLI).
request_path_var: ContextVar[str] = ContextVar("request_path", default="-")


class RequestPathFilter(logging.Filter):
    """Stamps every record with the current request path so relay and render logs can be told apart."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_path = request_path_var.get()
        return True


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configure root logger for the gateway; ``level`` usually comes from ``settings.log_level``."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestPathFilter())
    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        root.handlers.clear()
    root.addHandler(handler)
    # Outbound relay calls go through httpx; keep its per-request chatter out of the app log.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
