from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from .errors import InvalidArgumentError


class _DescribedEnum(str, Enum):
    """String enum whose members carry a display name and a description."""

    def __new__(cls, value: str, display_name: str, description: str):
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.display_name = display_name
        obj.description = description
        return obj

    def __str__(self) -> str:
        return self.value

    # PUBLIC_INTERFACE
    @classmethod
    def from_string(cls, value: Optional[str]):
        """
        Resolve a member from its token ("IN_PROGRESS") or display name ("In Progress"),
        ignoring case.

        Raises:
            InvalidArgumentError: if value is None or matches no member.
        """
        label = cls.__name__
        if value is None:
            raise InvalidArgumentError(f"{label} value cannot be null", argument=label)
        needle = value.strip().lower()
        for member in cls:
            if member.value.lower() == needle or member.display_name.lower() == needle:
                return member
        raise InvalidArgumentError(f"Invalid {label}: {value}", argument=label)


# PUBLIC_INTERFACE
class TaskStatus(_DescribedEnum):
    """Lifecycle state of a task."""

    PENDING = ("PENDING", "Pending", "Task is waiting to be started")
    IN_PROGRESS = ("IN_PROGRESS", "In Progress", "Task is currently being worked on")
    COMPLETED = ("COMPLETED", "Completed", "Task has been completed")
    CANCELLED = ("CANCELLED", "Cancelled", "Task has been cancelled")


# PUBLIC_INTERFACE
class TaskPriority(_DescribedEnum):
    """Task priority; members are ordered by ``level`` (LOW=1 .. CRITICAL=4)."""

    LOW = ("LOW", "Low", "Low priority task")
    MEDIUM = ("MEDIUM", "Medium", "Medium priority task")
    HIGH = ("HIGH", "High", "High priority task")
    CRITICAL = ("CRITICAL", "Critical", "Critical priority - requires immediate attention")

    @property
    def level(self) -> int:
        return list(TaskPriority).index(self) + 1

    def is_higher_than(self, other: "TaskPriority") -> bool:
        return self.level > other.level

    def is_lower_than(self, other: "TaskPriority") -> bool:
        return self.level < other.level


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(kw_only=True)
class BaseEntity:
    """
    Common identity and timestamps for stored records.

    Fields:
    - id: random UUID string, fixed once the entity exists
    - created_at: local creation timestamp
    - updated_at: local timestamp of the last mutation, never earlier than created_at
    """

    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("id cannot be changed once assigned")
        super().__setattr__(name, value)

    def touch(self) -> None:
        """Bump updated_at; successive calls always yield strictly later values."""
        now = datetime.now()
        if now <= self.updated_at:
            now = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now


# PUBLIC_INTERFACE
@dataclass(kw_only=True)
class Category(BaseEntity):
    """A named grouping for tasks with an optional ``#RRGGBB`` color."""

    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None

    def rename(self, name: Optional[str]) -> None:
        self.name = name
        self.touch()

    def set_description(self, description: Optional[str]) -> None:
        self.description = description
        self.touch()

    def set_color(self, color: Optional[str]) -> None:
        self.color = color
        self.touch()


# PUBLIC_INTERFACE
@dataclass(kw_only=True)
class Task(BaseEntity):
    """
    A unit of work.

    ``category_id`` is a weak reference: the task never owns the category and the
    referenced category may have been deleted since it was assigned.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    category_id: Optional[str] = None
    starred: bool = False

    # Status transitions. None of them is guarded: any state may move to any other.

    def complete(self) -> None:
        self.set_status(TaskStatus.COMPLETED)

    def start(self) -> None:
        self.set_status(TaskStatus.IN_PROGRESS)

    def cancel(self) -> None:
        self.set_status(TaskStatus.CANCELLED)

    def set_status(self, status: TaskStatus) -> None:
        self.status = status
        self.touch()

    def toggle_starred(self) -> None:
        self.starred = not self.starred
        self.touch()

    def set_starred(self, starred: bool) -> None:
        self.starred = starred
        self.touch()

    def set_title(self, title: Optional[str]) -> None:
        self.title = title
        self.touch()

    def set_description(self, description: Optional[str]) -> None:
        self.description = description
        self.touch()

    def set_priority(self, priority: TaskPriority) -> None:
        self.priority = priority
        self.touch()

    def set_due_date(self, due_date: Optional[datetime]) -> None:
        self.due_date = due_date
        self.touch()

    def assign_category(self, category_id: str) -> None:
        self.category_id = category_id
        self.touch()

    def clear_category(self) -> None:
        self.category_id = None
        self.touch()

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    @property
    def is_overdue(self) -> bool:
        """True when a due date is set, has passed, and the task is still open."""
        return self.is_overdue_at(datetime.now())

    def is_overdue_at(self, now: datetime) -> bool:
        if self.due_date is None:
            return False
        if self.status in (TaskStatus.COMPLETED, TaskStatus.CANCELLED):
            return False
        return self.due_date < now
