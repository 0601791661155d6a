import logging
import os

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_configured = False


def configure_logging(level: str | None = None) -> None:
    global _configured
    if _configured:
        return

    raw_level = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    resolved = logging.getLevelName(raw_level)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(resolved)
    root.addHandler(handler)

    # SQL echo is noisy; keep the engine at WARNING unless debugging explicitly.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
