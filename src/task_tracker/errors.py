"""
Failure kinds raised by the stores, validators and services.

Every failure carries its context as attributes so the HTTP layer can decide
how to present it. The message produced by ``str()`` is meant for humans.
"""
from __future__ import annotations

from typing import Iterable, List, Optional


class TrackerError(Exception):
    """Base class for every failure raised by the tracker core."""


class InvalidArgumentError(TrackerError, ValueError):
    """A caller passed a structurally invalid argument (e.g. an empty ID)."""

    def __init__(self, message: str, argument: Optional[str] = None) -> None:
        super().__init__(message)
        self.argument = argument


class ValidationError(TrackerError):
    """Entity content violates one or more domain rules."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


class NotFoundError(TrackerError, LookupError):
    """A referenced entity does not exist."""

    entity = "Entity"

    def __init__(self, identifier: str, field: str = "id") -> None:
        self.identifier = identifier
        self.field = field
        label = "ID" if field == "id" else field
        super().__init__(f"{self.entity} not found with {label}: {identifier}")

    @classmethod
    def for_id(cls, identifier: str) -> "NotFoundError":
        return cls(identifier, field="id")


class TaskNotFoundError(NotFoundError):
    entity = "Task"


class CategoryNotFoundError(NotFoundError):
    entity = "Category"

    @classmethod
    def for_name(cls, name: str) -> "CategoryNotFoundError":
        return cls(name, field="name")


class DuplicateEntityError(TrackerError):
    """A uniqueness constraint would be violated."""

    def __init__(self, entity: str, identifier: str) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} already exists: {identifier}")
