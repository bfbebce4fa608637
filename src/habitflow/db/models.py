"""ORM models for users, habits, the completion ledger and the follow graph.

The completion ledger's core contract lives in the schema: one row per
(habit_id, period_key), enforced by a unique constraint that the insert path
relies on for race safety.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from habitflow.db.base import Base, BigIntPK

# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Registered account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    habits: Mapped[list[Habit]] = relationship("Habit", back_populates="user")


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------


class Habit(Base):
    """A recurring habit owned by one user."""

    __tablename__ = "habits"
    __table_args__ = (
        CheckConstraint("frequency IN ('daily', 'weekly')", name="ck_habits_frequency"),
        UniqueConstraint("user_id", "name_key", name="uq_habits_user_name_key"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # name.casefold(), unique per owner
    name_key: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    frequency: Mapped[str] = mapped_column(String(16), nullable=False)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped[User] = relationship("User", back_populates="habits")
    completions: Mapped[list[HabitCompletion]] = relationship(
        "HabitCompletion",
        back_populates="habit",
        order_by="HabitCompletion.period_key.desc()",
        passive_deletes=True,
    )


class HabitCompletion(Base):
    """One recorded completion of a habit for one period. Immutable."""

    __tablename__ = "habit_completions"
    __table_args__ = (
        UniqueConstraint("habit_id", "period_key", name="uq_habit_completions_habit_period"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    habit_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    period_key: Mapped[date] = mapped_column(Date, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    habit: Mapped[Habit] = relationship("Habit", back_populates="completions")


# ---------------------------------------------------------------------------
# Social
# ---------------------------------------------------------------------------


class Follow(Base):
    """Directed follow edge: follower observes following's activity."""

    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follows_follower_following"),
        CheckConstraint("follower_id <> following_id", name="ck_follows_no_self_follow"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    follower_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    following_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
