"""
Jobs Repository.

Responsibilities:
- CRUD operations for the jobs table.
- Confidence history cleanup and lookup (rows are written by the verifier).
- Transaction-safe writes.

Non-Responsibilities:
- No input validation.
- No status transition rules.
"""

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update

from .database import Job, JobConfidenceHistory, job_to_dict, session_scope

LIST_LIMIT = 100


class JobRepository:
    """Reads and writes job rows through the shared engine."""

    def list_recent(self, limit: int = LIST_LIMIT) -> List[Dict[str, Any]]:
        with session_scope() as session:
            stmt = select(Job).order_by(Job.created_at.desc()).limit(limit)
            return [job_to_dict(job) for job in session.scalars(stmt)]

    def get(self, job_id: str) -> Optional[Dict[str, Any]]:
        with session_scope() as session:
            job = session.get(Job, job_id)
            return job_to_dict(job) if job is not None else None

    def create(
        self,
        created_at: int,
        type: str = "task",
        title: str = "",
        description: Optional[str] = None,
        priority: Any = 0,
        agent_id: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> str:
        """Insert a pending job and return its new id."""
        job_id = str(uuid.uuid4())
        with session_scope() as session:
            session.add(
                Job(
                    id=job_id,
                    type=type,
                    title=title,
                    description=description,
                    status="pending",
                    priority=priority,
                    agent_id=agent_id,
                    created_at=created_at,
                    updated_at=None,
                    tags=tags,
                )
            )
        return job_id

    def update_fields(self, job_id: str, fields: Dict[str, Any]) -> int:
        """Apply fields to the job row. Returns the number of rows matched."""
        with session_scope() as session:
            result = session.execute(
                update(Job)
                .where(Job.id == job_id)
                .values(**fields)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount

    def delete(self, job_id: str) -> bool:
        """
        Remove a job and its confidence history in one transaction.

        Returns:
            True if the job row itself was removed
        """
        with session_scope() as session:
            session.execute(
                delete(JobConfidenceHistory).where(JobConfidenceHistory.job_id == job_id)
            )
            result = session.execute(delete(Job).where(Job.id == job_id))
            return result.rowcount > 0

    def confidence_history(self, job_id: str) -> List[Dict[str, Any]]:
        with session_scope() as session:
            stmt = (
                select(JobConfidenceHistory)
                .where(JobConfidenceHistory.job_id == job_id)
                .order_by(JobConfidenceHistory.recorded_at, JobConfidenceHistory.id)
            )
            return [
                {
                    "id": row.id,
                    "job_id": row.job_id,
                    "confidence": row.confidence,
                    "recorded_at": row.recorded_at,
                }
                for row in session.scalars(stmt)
            ]
