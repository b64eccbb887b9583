from sqlalchemy import Column, String, ForeignKey, DateTime, Enum, Index
from sqlalchemy.orm import declarative_base
from datetime import datetime
from enum import Enum as PyEnum
import uuid

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


# Enums
class UserRole(str, PyEnum):
    """User privilege levels."""
    USER = "user"
    ADMIN = "admin"


class BugStatus(str, PyEnum):
    """Workflow column of a bug. Any status may follow any other."""
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class BugPriority(str, PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class BugSeverity(str, PyEnum):
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"


def _enum_column(enum_cls, name: str, **kwargs) -> Column:
    return Column(
        Enum(enum_cls, values_callable=lambda x: [e.value for e in x], name=name),
        **kwargs
    )


class User(Base):
    """User authentication and basic information"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash, never serialized
    role = _enum_column(UserRole, "userrole", default=UserRole.USER, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Bug(Base):
    """Tracked work item shown on the board"""
    __tablename__ = "bugs"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(100), nullable=False)
    description = Column(String(1000), nullable=False)
    status = _enum_column(BugStatus, "bugstatus", default=BugStatus.OPEN, nullable=False, index=True)
    priority = _enum_column(BugPriority, "bugpriority", nullable=False, index=True)
    severity = _enum_column(BugSeverity, "bugseverity", nullable=False)
    created_by = Column(String(50), nullable=False)
    # Informational only: no cascade, no ownership checks
    creator_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_bugs_status_priority", "status", "priority"),
    )

    @property
    def age_in_days(self) -> int:
        if self.created_at is None:
            return 0
        return (datetime.utcnow() - self.created_at).days
