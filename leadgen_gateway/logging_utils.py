import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def append_ndjson(path: Path | None, record: dict[str, Any]) -> None:
    """Append one JSON object as a single line.

    Failures are logged and never raised.
    """

    if path is None:
        return
    try:
        ensure_dir(path.parent)
        line = json.dumps(record, ensure_ascii=True, separators=(",", ":"), default=str)
        with path.open("a", encoding="utf-8") as f:
            f.write(line)
            f.write("\n")
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Could not append audit record to %s: %s", path, exc)
