from typing import Any

from ..logging_utils import utc_now_iso


def success(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data, "timestamp": utc_now_iso()}


def failure(error: str, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "error": error}
    body.update({key: value for key, value in extra.items() if value is not None})
    body["timestamp"] = utc_now_iso()
    return body
