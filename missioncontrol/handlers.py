"""
Mission control operation handlers.

Each handler takes (params, respond) and calls respond(ok, payload, error)
exactly once. Validation happens before the store is touched.
"""

from typing import Any, Callable, Dict, Optional

from .database import now_ms
from .errors import (
    ErrorCodes,
    InvalidRequestError,
    NotFoundError,
    NotImplementedFeatureError,
    error_shape,
    responds,
)
from .logger import get_logger
from .repository import JobRepository
from .schema import coerce_priority, coerce_str, status_fields, validate_status_update

Respond = Callable[[bool, Optional[Dict[str, Any]], Optional[Dict[str, Any]]], None]


def _repository() -> JobRepository:
    return JobRepository()


def _require_id(params: Dict[str, Any]) -> str:
    job_id = coerce_str(params.get("id"))
    if not job_id:
        raise InvalidRequestError("Missing job id")
    return job_id


@responds("missionControl.list", "Failed to list jobs")
def list_jobs(params: Dict[str, Any]) -> Dict[str, Any]:
    jobs = _repository().list_recent()
    get_logger().debug("Listed jobs", count=len(jobs))
    return {"ok": True, "jobs": jobs}


@responds("missionControl.get", "Failed to get job")
def get_job(params: Dict[str, Any]) -> Dict[str, Any]:
    job_id = _require_id(params)
    job = _repository().get(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    return {"ok": True, "job": job}


@responds("missionControl.updateStatus", "Failed to update status")
def update_status(params: Dict[str, Any]) -> Dict[str, Any]:
    job_id = coerce_str(params.get("id"))
    status = coerce_str(params.get("status"))

    problem = validate_status_update(job_id, status)
    if problem:
        raise InvalidRequestError(problem)

    fields = status_fields(status, now_ms())
    # A missing row is not reported; the update simply matches nothing
    matched = _repository().update_fields(job_id, fields)
    get_logger().info("Updated job status", job_id=job_id, status=status, matched=matched)
    return {"ok": True}


@responds("missionControl.delete", "Failed to delete job")
def delete_job(params: Dict[str, Any]) -> Dict[str, Any]:
    job_id = _require_id(params)
    deleted = _repository().delete(job_id)
    get_logger().info("Deleted job", job_id=job_id, deleted=deleted)
    return {"ok": True, "deleted": deleted}


@responds("missionControl.create", "Failed to create job")
def create_job(params: Dict[str, Any]) -> Dict[str, Any]:
    type_ = params.get("type")
    title = params.get("title")
    job_id = _repository().create(
        created_at=now_ms(),
        type="task" if type_ is None else str(type_),
        title=coerce_str(title),
        description=params.get("description"),
        priority=coerce_priority(params.get("priority")),
        agent_id=params.get("agent_id"),
        tags=params.get("tags"),
    )
    get_logger().info("Created job", job_id=job_id, type=type_ or "task")
    return {"ok": True, "id": job_id}


@responds("missionControl.spawn", "Failed to spawn job")
def spawn_job(params: Dict[str, Any]) -> Dict[str, Any]:
    raise NotImplementedFeatureError("Mission control spawn not yet implemented")


HANDLERS: Dict[str, Callable[[Optional[Dict[str, Any]], Respond], None]] = {
    "missionControl.list": list_jobs,
    "missionControl.get": get_job,
    "missionControl.updateStatus": update_status,
    "missionControl.delete": delete_job,
    "missionControl.create": create_job,
    "missionControl.spawn": spawn_job,
}


def dispatch(method: str, params: Optional[Dict[str, Any]], respond: Respond) -> None:
    """Route a named operation to its handler."""
    handler = HANDLERS.get(method)
    if handler is None:
        get_logger().warning("Unknown method", method=method)
        respond(False, None, error_shape(ErrorCodes.INVALID_REQUEST, f"Unknown method: {method}"))
        return
    handler(params, respond)
