import secrets
import time
import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

from ..enums import HookRunStatus, HookStatus, TriggerType

Base = declarative_base()


def generate_hook_id() -> str:
    return str(uuid.uuid4())


def generate_run_id() -> str:
    return f"run_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


class UserModel(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(String, unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    is_superuser = Column(Boolean, default=False)
    hooks = relationship("HookModel", back_populates="user")


class HookModel(Base):
    __tablename__ = "hooks"
    id = Column(String, primary_key=True, default=generate_hook_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    user = relationship("UserModel", back_populates="hooks")
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    trigger_type = Column(
        Enum(*[t.value for t in TriggerType], name="hook_trigger_type"),
        nullable=False,
    )
    trigger_config = Column(JSON, nullable=False, default=dict)
    # Ordered list of {id, order, type, config}
    actions = Column(JSON, nullable=False, default=list)
    status = Column(
        Enum(*[s.value for s in HookStatus], name="hook_status"),
        nullable=False,
        default=HookStatus.ACTIVE.value,
    )
    is_active = Column(Boolean, nullable=False, default=True)
    last_executed_at = Column(DateTime(timezone=True), nullable=True)
    last_checked_at = Column(DateTime(timezone=True), nullable=True)
    # Provider-assigned subscription id for ONCHAIN hooks
    alchemy_webhook_id = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )
    runs = relationship(
        "HookRunModel",
        back_populates="hook",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_hooks_user_id", "user_id"),
        Index("ix_hooks_trigger_type", "trigger_type"),
        Index("ix_hooks_status", "status"),
    )

    @property
    def sorted_actions(self) -> list[dict]:
        """Actions in execution order."""
        return sorted(self.actions or [], key=lambda a: int(a.get("order") or 0))


class HookRunModel(Base):
    __tablename__ = "hook_runs"
    id = Column(String, primary_key=True, default=generate_run_id)
    hook_id = Column(
        String, ForeignKey("hooks.id", ondelete="CASCADE"), nullable=False
    )
    hook = relationship("HookModel", back_populates="runs")
    status = Column(
        Enum(*[s.value for s in HookRunStatus], name="hook_run_status"),
        nullable=False,
        default=HookRunStatus.PENDING.value,
    )
    triggered_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    completed_at = Column(DateTime(timezone=True), nullable=True)
    error = Column(Text, nullable=True)
    # {triggerContext, actions: [...], totalDuration, failedAt}
    meta = Column(JSON, nullable=False, default=dict)

    __table_args__ = (Index("ix_hook_runs_hook_id_triggered_at", "hook_id", "triggered_at"),)
