from typing import Any, Dict, Optional, Union

JOB_STATUSES = ("pending", "running", "review", "revising", "done", "failed", "success")

# "success" is stored by other writers but cannot be set through updateStatus
SETTABLE_STATUSES = ("pending", "running", "review", "revising", "done", "failed")

FINISHED_STATUSES = ("done", "failed")

# SQLite stores signed 64-bit integers
SQLITE_INT_LIMIT = 2 ** 63


def coerce_str(value: Any) -> str:
    """Missing values become the empty string; everything else is stringified."""
    if value is None:
        return ""
    return str(value)


def coerce_priority(value: Any) -> Union[int, float]:
    """
    Coerce a caller-supplied priority to a number.

    Raises:
        ValueError: If the value is not numeric
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = value
    else:
        text = str(value).strip()
        number = float(text) if text else 0.0
    if isinstance(number, float) and number.is_integer() and abs(number) < SQLITE_INT_LIMIT:
        return int(number)
    if isinstance(number, int) and not -SQLITE_INT_LIMIT <= number < SQLITE_INT_LIMIT:
        return float(number)
    return number


def validate_status_update(job_id: str, status: str) -> Optional[str]:
    """
    Returns an error message, or None when the update is acceptable.
    """
    if not job_id or not status:
        return "Missing id or status"
    if status not in SETTABLE_STATUSES:
        return "Invalid status"
    return None


def status_fields(status: str, now: int) -> Dict[str, Any]:
    """
    Columns written by a status update.

    status and updated_at are always set; started_at is stamped on every
    move to running, finished_at on every move to done or failed.
    """
    fields: Dict[str, Any] = {"status": status, "updated_at": now}
    if status == "running":
        fields["started_at"] = now
    if status in FINISHED_STATUSES:
        fields["finished_at"] = now
    return fields
