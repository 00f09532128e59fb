from __future__ import annotations

from datetime import date, datetime
from typing import Callable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Category, Task, TaskPriority, TaskStatus

# Shared type for incoming dates which can be a date, datetime, or ISO8601 string
DueDateInput = Union[date, datetime, str]


# PUBLIC_INTERFACE
def parse_datetime_input(value: Optional[DueDateInput]) -> Optional[datetime]:
    """
    Normalize date input into a naive local datetime.
    - If value is a string, attempt to parse via datetime.fromisoformat; if time is missing, set to 00:00.
    - If value is a date (not datetime), convert to datetime at 00:00.
    - If value is a datetime, return as-is.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, 0, 0, 0)

    if isinstance(value, str):
        s = value.strip()
        try:
            return datetime.fromisoformat(s)
        except ValueError:
            try:
                d = date.fromisoformat(s)
                return datetime(d.year, d.month, d.day, 0, 0, 0)
            except ValueError as e:
                raise ValueError(
                    "Invalid date format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
                ) from e

    raise ValueError("Invalid type for date; expected date, datetime, or ISO8601 string.")


def _parse_enum_token(enum_cls, value):
    """Accept tokens or display names in any case ("in progress", "HIGH")."""
    if isinstance(value, str) and not isinstance(value, enum_cls):
        # from_string raises InvalidArgumentError, a ValueError, which pydantic reports as 422
        return enum_cls.from_string(value)
    return value


# ---- categories ----

# PUBLIC_INTERFACE
class CategoryCreate(BaseModel):
    """
    Schema for creating a category. Content rules (length, color format) are
    enforced by the category validator so every failure is reported together.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "Work", "description": "Office tasks", "color": "#3498db"}
        }
    )

    name: Optional[str] = Field(default=None, description="Unique category name (<= 100 chars)")
    description: Optional[str] = Field(default=None, description="Optional description (<= 500 chars)")
    color: Optional[str] = Field(default=None, description="Optional color in #RRGGBB format")

    def to_entity(self) -> Category:
        return Category(name=self.name, description=self.description, color=self.color)


# PUBLIC_INTERFACE
class CategoryUpdate(CategoryCreate):
    """
    Schema for updating a category. Only the fields that are provided are changed.
    """

    def apply_to(self, category: Category) -> Category:
        if self.name is not None:
            category.rename(self.name)
        if self.description is not None:
            category.set_description(self.description)
        if self.color is not None:
            category.set_color(self.color)
        return category


# PUBLIC_INTERFACE
class CategoryOut(BaseModel):
    """Schema returned by the API for a category."""

    id: str = Field(..., description="Unique identifier of the category")
    name: str = Field(..., description="Category name")
    description: Optional[str] = Field(default=None, description="Optional description")
    color: Optional[str] = Field(default=None, description="#RRGGBB color, if any")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @classmethod
    def from_entity(cls, category: Category) -> "CategoryOut":
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            color=category.color,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )


# ---- tasks ----

# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a task. Status always starts as PENDING.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "2 litres",
                "priority": "HIGH",
                "due_date": "2025-02-01T18:00:00",
                "category_id": None,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title (<= 200 chars)")
    description: Optional[str] = Field(default=None, description="Optional description (<= 1000 chars)")
    priority: Optional[TaskPriority] = Field(default=None, description="LOW, MEDIUM, HIGH or CRITICAL")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )
    category_id: Optional[str] = Field(default=None, description="ID of an existing category")

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v):
        return _parse_enum_token(TaskPriority, v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return parse_datetime_input(v)

    def to_entity(self) -> Task:
        task = Task(title=self.title, description=self.description, due_date=self.due_date)
        if self.priority is not None:
            task.priority = self.priority
        return task


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for updating a task.
    All fields are optional; only provided fields will be updated. Sending
    "due_date": null explicitly clears the due date.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk and bread",
                "status": "IN_PROGRESS",
                "starred": True,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title (<= 200 chars)")
    description: Optional[str] = Field(default=None, description="Optional description")
    status: Optional[TaskStatus] = Field(default=None, description="PENDING, IN_PROGRESS, COMPLETED or CANCELLED")
    priority: Optional[TaskPriority] = Field(default=None, description="LOW, MEDIUM, HIGH or CRITICAL")
    due_date: Optional[datetime] = Field(default=None, description="Due date/time as ISO8601")
    category_id: Optional[str] = Field(default=None, description="ID of an existing category")
    starred: Optional[bool] = Field(default=None, description="Starred flag")

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return _parse_enum_token(TaskStatus, v)

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v):
        return _parse_enum_token(TaskPriority, v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return parse_datetime_input(v)

    def apply_to(self, task: Task) -> Task:
        """Copy every provided field onto task (category_id is handled by the caller)."""
        if self.title is not None:
            task.set_title(self.title)
        if self.description is not None:
            task.set_description(self.description)
        if self.status is not None:
            task.set_status(self.status)
        if self.priority is not None:
            task.set_priority(self.priority)
        if self.due_date is not None or "due_date" in self.model_fields_set:
            # Respect explicit nulling of due_date
            task.set_due_date(self.due_date)
        if self.starred is not None:
            task.set_starred(self.starred)
        return task


# PUBLIC_INTERFACE
class PriorityUpdate(BaseModel):
    """Body for PUT /tasks/{id}/priority."""

    priority: Optional[TaskPriority] = Field(default=None, description="LOW, MEDIUM, HIGH or CRITICAL")

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v):
        return _parse_enum_token(TaskPriority, v)


# PUBLIC_INTERFACE
class DueDateUpdate(BaseModel):
    """Body for PUT /tasks/{id}/due-date; null clears the due date."""

    due_date: Optional[datetime] = Field(default=None, description="Due date/time as ISO8601, or null")

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return parse_datetime_input(v)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task. The category is flattened into
    category_id/category_name; category_name is null when the referenced
    category no longer exists.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "0b8f4c7e-4a0e-4f57-9f71-3c1e6b2a9d10",
                "title": "Buy milk",
                "description": None,
                "status": "PENDING",
                "priority": "MEDIUM",
                "due_date": "2025-02-01T18:00:00",
                "category_id": "4d5c0c62-0b7a-4d8e-8f0e-1f9b2d3c4a5b",
                "category_name": "Work",
                "starred": False,
                "overdue": False,
                "created_at": "2025-01-25T10:15:30.123456",
                "updated_at": "2025-01-26T09:00:00.000001",
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Short title")
    description: Optional[str] = Field(default=None, description="Optional description")
    status: TaskStatus = Field(..., description="Lifecycle status")
    priority: TaskPriority = Field(..., description="Priority")
    due_date: Optional[datetime] = Field(default=None, description="Due date/time as an ISO8601 datetime")
    category_id: Optional[str] = Field(default=None, description="Referenced category ID")
    category_name: Optional[str] = Field(default=None, description="Referenced category name")
    starred: bool = Field(..., description="Starred flag")
    overdue: bool = Field(..., description="Due date has passed and the task is still open")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @classmethod
    def from_entity(
        cls,
        task: Task,
        resolve_category: Callable[[Optional[str]], Optional[Category]],
    ) -> "TaskOut":
        category = resolve_category(task.category_id)
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status,
            priority=task.priority,
            due_date=task.due_date,
            category_id=task.category_id,
            category_name=category.name if category is not None else None,
            starred=task.starred,
            overdue=task.is_overdue,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


# PUBLIC_INTERFACE
class TaskStats(BaseModel):
    """Counts per status plus the overall total."""

    total: int = Field(..., description="Total number of tasks")
    by_status: dict[str, int] = Field(..., description="Number of tasks per status token")


# PUBLIC_INTERFACE
class ErrorOut(BaseModel):
    """Error body returned for every failure raised by the tracker core."""

    error: str = Field(..., description="Failure kind")
    message: str = Field(..., description="Human-readable message")
    detail: List[str] = Field(default_factory=list, description="Individual validation errors, if any")
