"""
Bug Service - CRUD, filtered listing and statistics for bugs.

Validation happens here before anything reaches the session, so the store
only ever sees sanitized, enumerated values.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Any, Dict, List, Optional, Tuple
from fastapi import Depends
import logging
import uuid

from models import Bug, BugStatus, BugPriority, BugSeverity
from database import get_async_db
from exceptions import BugNotFoundError, InvalidIdError, ValidationError
from schemas.bug import BugStats
from utils.bug_validation import (
    sanitize_bug_data,
    validate_bug_data,
    validate_status_patch,
)

logger = logging.getLogger(__name__)

# Wire name -> column
SORT_COLUMNS = {
    "createdAt": Bug.created_at,
    "updatedAt": Bug.updated_at,
    "title": Bug.title,
    "status": Bug.status,
    "priority": Bug.priority,
    "severity": Bug.severity,
}

FILTER_COLUMNS = {
    "status": (Bug.status, BugStatus),
    "priority": (Bug.priority, BugPriority),
    "severity": (Bug.severity, BugSeverity),
    "createdBy": (Bug.created_by, None),
}


def parse_bug_id(bug_id: str) -> str:
    """Reject ids that are not UUIDs before touching the store."""
    try:
        return str(uuid.UUID(str(bug_id)))
    except ValueError:
        raise InvalidIdError("bug")


def _apply_fields(bug: Bug, data: Dict[str, Any]) -> None:
    bug.title = data["title"]
    bug.description = data["description"]
    bug.priority = BugPriority(data["priority"])
    bug.severity = BugSeverity(data["severity"])
    bug.created_by = data["createdBy"]
    if data.get("status"):
        bug.status = BugStatus(data["status"])


class BugService:
    """Service for bug CRUD operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: Dict[str, Any], creator_id: Optional[str] = None) -> Bug:
        """Create a bug from a full body. Status is optional and defaults to open."""
        data = sanitize_bug_data(data)
        result = validate_bug_data(data)
        if not result.is_valid:
            raise ValidationError("Validation failed", details=result.errors)

        bug = Bug(status=BugStatus.OPEN, creator_id=creator_id)
        _apply_fields(bug, data)
        self.db.add(bug)
        await self.db.commit()
        await self.db.refresh(bug)

        logger.info(f"Created bug {bug.id} ({bug.priority.value}/{bug.severity.value})")
        return bug

    async def get(self, bug_id: str) -> Bug:
        bug_id = parse_bug_id(bug_id)
        result = await self.db.execute(select(Bug).where(Bug.id == bug_id))
        bug = result.scalars().first()
        if not bug:
            raise BugNotFoundError(bug_id)
        return bug

    async def replace(self, bug_id: str, data: Dict[str, Any]) -> Bug:
        """
        Full update. Every required field, status included, must be resupplied;
        a body carrying only {status} fails here even if the rest is unchanged.
        """
        bug = await self.get(bug_id)
        data = sanitize_bug_data(data)
        result = validate_bug_data(data, require_status=True)
        if not result.is_valid:
            raise ValidationError("Validation failed", details=result.errors)

        _apply_fields(bug, data)
        await self.db.commit()
        await self.db.refresh(bug)

        logger.info(f"Replaced bug {bug.id}")
        return bug

    async def patch_status(self, bug_id: str, data: Dict[str, Any]) -> Bug:
        """Partial patch. Only status is required or inspected."""
        bug = await self.get(bug_id)
        data = sanitize_bug_data({"status": data.get("status")})
        result = validate_status_patch(data)
        if not result.is_valid:
            raise ValidationError("Validation failed", details=result.errors)

        previous = bug.status
        bug.status = BugStatus(data["status"])
        await self.db.commit()
        await self.db.refresh(bug)

        logger.info(f"Bug {bug.id} status {previous.value} -> {bug.status.value}")
        return bug

    async def delete(self, bug_id: str) -> bool:
        bug = await self.get(bug_id)
        await self.db.delete(bug)
        await self.db.commit()
        logger.info(f"Deleted bug {bug.id}")
        return True

    async def list(
        self,
        filters: Optional[Dict[str, Optional[str]]] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        order: str = "desc",
    ) -> Tuple[List[Bug], int]:
        """
        List bugs with exact-match filters, sorting and 1-indexed pagination.

        Returns:
            (bugs on the requested page, total matching bugs)
        """
        where_clauses = []
        for key, value in (filters or {}).items():
            if value is None or key not in FILTER_COLUMNS:
                continue
            column, enum_cls = FILTER_COLUMNS[key]
            value = value.strip()
            if enum_cls is not None:
                try:
                    value = enum_cls(value.lower())
                except ValueError:
                    allowed = ", ".join(m.value for m in enum_cls)
                    message = f"{key.capitalize()} must be one of: {allowed}"
                    raise ValidationError("Validation failed", details=[{"field": key, "message": message}])
            where_clauses.append(column == value)

        sort_column = SORT_COLUMNS[sort_by]
        ordering = sort_column.asc() if order == "asc" else sort_column.desc()

        count_stmt = select(func.count(Bug.id))
        if where_clauses:
            count_stmt = count_stmt.where(*where_clauses)
        count_result = await self.db.execute(count_stmt)
        total = count_result.scalar() or 0

        stmt = (
            select(Bug)
            .order_by(ordering, Bug.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        if where_clauses:
            stmt = stmt.where(*where_clauses)
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def stats(self) -> BugStats:
        """Total plus per-status, per-priority and per-severity counts."""
        count_result = await self.db.execute(select(func.count(Bug.id)))
        total = count_result.scalar() or 0

        return BugStats(
            total=total,
            by_status=await self._count_by(Bug.status),
            by_priority=await self._count_by(Bug.priority),
            by_severity=await self._count_by(Bug.severity),
        )

    async def _count_by(self, column) -> Dict[str, int]:
        result = await self.db.execute(
            select(column, func.count(Bug.id)).group_by(column)
        )
        return {value.value: count for value, count in result.all() if count}


async def get_bug_service(db: AsyncSession = Depends(get_async_db)) -> BugService:
    """Dependency injection provider."""
    return BugService(db)
