"""
Validation pipeline for tasks and categories.

A ``Validator`` runs four phases in a fixed order: required fields, formats,
lengths, business rules. Each phase is a tuple of independent checks; a check
takes the entity and yields zero or more human-readable error strings. All
phases always run and their errors are concatenated. Validators never look at
stored state, so uniqueness is left to the services.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Callable, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .errors import ValidationError
from .models import Category, Task

logger = logging.getLogger(__name__)

T = TypeVar("T")
Check = Callable[[T], Iterable[str]]

PHASES: Tuple[str, ...] = ("required", "format", "length", "business")

NULL_ENTITY_ERROR = "Entity cannot be null"

MAX_TASK_TITLE_LENGTH = 200
MAX_TASK_DESCRIPTION_LENGTH = 1000
MAX_CATEGORY_NAME_LENGTH = 100
MAX_CATEGORY_DESCRIPTION_LENGTH = 500

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def _exceeds(value: Optional[str], max_length: int) -> bool:
    return value is not None and len(value) > max_length


# PUBLIC_INTERFACE
class Validator(Generic[T]):
    """
    Fixed four-phase driver over per-entity checks.

    Args:
        label: entity kind used in log messages.
        required/format/length/business: ordered checks for each phase.
    """

    def __init__(
        self,
        label: str,
        *,
        required: Sequence[Check] = (),
        format: Sequence[Check] = (),
        length: Sequence[Check] = (),
        business: Sequence[Check] = (),
    ) -> None:
        self.label = label
        self._phases: Dict[str, Tuple[Check, ...]] = {
            "required": tuple(required),
            "format": tuple(format),
            "length": tuple(length),
            "business": tuple(business),
        }

    def errors_for_phase(self, phase: str, entity: T) -> List[str]:
        """Run a single phase against a non-null entity."""
        errors: List[str] = []
        for check in self._phases[phase]:
            errors.extend(check(entity))
        return errors

    def get_errors(self, entity: Optional[T]) -> List[str]:
        """Return every rule violation for entity; an empty list means valid."""
        if entity is None:
            return [NULL_ENTITY_ERROR]
        errors: List[str] = []
        for phase in PHASES:
            errors.extend(self.errors_for_phase(phase, entity))
        return errors

    def validate(self, entity: Optional[T]) -> None:
        """
        Raises:
            ValidationError: carrying every violation, if there is at least one.
        """
        logger.debug("Validating %s", self.label)
        errors = self.get_errors(entity)
        if errors:
            logger.info("%s validation failed: %s", self.label, "; ".join(errors))
            raise ValidationError(errors)

    def is_valid(self, entity: Optional[T]) -> bool:
        return not self.get_errors(entity)


# ---- task checks ----

def _task_title_required(task: Task) -> Iterable[str]:
    if _is_blank(task.title):
        yield "Task title is required and cannot be empty"


def _task_status_required(task: Task) -> Iterable[str]:
    if task.status is None:
        yield "Task status cannot be null"


def _task_priority_required(task: Task) -> Iterable[str]:
    if task.priority is None:
        yield "Task priority cannot be null"


def _task_title_length(task: Task) -> Iterable[str]:
    if _exceeds(task.title, MAX_TASK_TITLE_LENGTH):
        yield (
            f"Task title cannot exceed {MAX_TASK_TITLE_LENGTH} characters "
            f"(current: {len(task.title)})"
        )


def _task_description_length(task: Task) -> Iterable[str]:
    if _exceeds(task.description, MAX_TASK_DESCRIPTION_LENGTH):
        yield (
            f"Task description cannot exceed {MAX_TASK_DESCRIPTION_LENGTH} characters "
            f"(current: {len(task.description)})"
        )


def _task_due_date_in_past(task: Task) -> Iterable[str]:
    # Past due dates are accepted; they are only worth a log line.
    if task.due_date is not None and task.due_date < datetime.now():
        logger.warning("Task %s has due date in the past: %s", task.id, task.due_date.isoformat())
    return ()


# ---- category checks ----

def _category_name_required(category: Category) -> Iterable[str]:
    if _is_blank(category.name):
        yield "Category name is required and cannot be empty"


def _category_color_format(category: Category) -> Iterable[str]:
    if category.color and not is_valid_hex_color(category.color):
        yield f"Category color must be in hex format (#RRGGBB), got: {category.color}"


def _category_name_length(category: Category) -> Iterable[str]:
    if _exceeds(category.name, MAX_CATEGORY_NAME_LENGTH):
        yield (
            f"Category name cannot exceed {MAX_CATEGORY_NAME_LENGTH} characters "
            f"(current: {len(category.name)})"
        )


def _category_description_length(category: Category) -> Iterable[str]:
    if _exceeds(category.description, MAX_CATEGORY_DESCRIPTION_LENGTH):
        yield (
            f"Category description cannot exceed {MAX_CATEGORY_DESCRIPTION_LENGTH} characters "
            f"(current: {len(category.description)})"
        )


def _category_name_whitespace(category: Category) -> Iterable[str]:
    name = category.name
    if name is None:
        return
    if name.strip() == "":
        yield "Category name cannot contain only whitespace"
    elif name != name.strip():
        logger.debug("Category name %r has leading/trailing whitespace", name)


# ---- standalone helpers ----

# PUBLIC_INTERFACE
def is_valid_hex_color(color: Optional[str]) -> bool:
    """Return True for '#RRGGBB' strings (hex digits in either case)."""
    if not color:
        return False
    return HEX_COLOR_PATTERN.fullmatch(color) is not None


# PUBLIC_INTERFACE
def is_valid_title(title: Optional[str]) -> bool:
    return not _is_blank(title) and not _exceeds(title, MAX_TASK_TITLE_LENGTH)


# PUBLIC_INTERFACE
def is_valid_category_name(name: Optional[str]) -> bool:
    return not _is_blank(name) and not _exceeds(name, MAX_CATEGORY_NAME_LENGTH)


task_validator: Validator[Task] = Validator(
    "Task",
    required=(_task_title_required, _task_status_required, _task_priority_required),
    length=(_task_title_length, _task_description_length),
    business=(_task_due_date_in_past,),
)

category_validator: Validator[Category] = Validator(
    "Category",
    required=(_category_name_required,),
    format=(_category_color_format,),
    length=(_category_name_length, _category_description_length),
    business=(_category_name_whitespace,),
)
