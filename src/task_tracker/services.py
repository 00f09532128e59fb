"""
Business services orchestrating validation, storage and cross-entity links.

Services keep no state of their own; they are handed their repositories (and
optionally a validator) at construction, so tests can build isolated instances.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from .errors import (
    CategoryNotFoundError,
    InvalidArgumentError,
    TaskNotFoundError,
)
from .models import Category, Task, TaskPriority, TaskStatus
from .repositories import CategoryRepository, TaskRepository
from .settings import CATEGORY_DELETE_POLICIES
from .validators import Validator, category_validator, task_validator

logger = logging.getLogger(__name__)


def _require(value: Optional[str], argument: str, label: str) -> str:
    if value is None or value.strip() == "":
        raise InvalidArgumentError(f"{label} cannot be null or empty", argument=argument)
    return value


# PUBLIC_INTERFACE
class TaskService:
    """Task lifecycle, queries and category assignment."""

    def __init__(
        self,
        task_repository: TaskRepository,
        category_repository: CategoryRepository,
        validator: Optional[Validator[Task]] = None,
    ) -> None:
        if task_repository is None or category_repository is None:
            raise InvalidArgumentError("TaskService requires task and category repositories")
        self._tasks = task_repository
        self._categories = category_repository
        self._validator = validator or task_validator

    # ---- CRUD ----

    def create_task(self, task: Task) -> Task:
        self._validator.validate(task)
        saved = self._tasks.save(task)
        logger.info("Created task %s (%r)", saved.id, saved.title)
        return saved

    def update_task(self, task: Task) -> Task:
        self._validator.validate(task)
        if not self._tasks.exists_by_id(task.id):
            raise TaskNotFoundError.for_id(task.id)
        # Fields may have been assigned directly, bypassing the mutators
        task.touch()
        saved = self._tasks.save(task)
        logger.info("Updated task %s", saved.id)
        return saved

    def get_task_by_id(self, task_id: str) -> Task:
        _require(task_id, "task_id", "Task ID")
        task = self._tasks.find_by_id(task_id)
        if task is None:
            raise TaskNotFoundError.for_id(task_id)
        return task

    def delete_task(self, task_id: str) -> None:
        _require(task_id, "task_id", "Task ID")
        if not self._tasks.delete_by_id(task_id):
            raise TaskNotFoundError.for_id(task_id)
        logger.info("Deleted task %s", task_id)

    # ---- state transitions ----

    def complete_task(self, task_id: str) -> Task:
        task = self.get_task_by_id(task_id)
        task.complete()
        return self._save_transition(task, "completed")

    def start_task(self, task_id: str) -> Task:
        task = self.get_task_by_id(task_id)
        task.start()
        return self._save_transition(task, "started")

    def cancel_task(self, task_id: str) -> Task:
        task = self.get_task_by_id(task_id)
        task.cancel()
        return self._save_transition(task, "cancelled")

    def toggle_starred(self, task_id: str) -> Task:
        task = self.get_task_by_id(task_id)
        task.toggle_starred()
        return self._save_transition(task, "starred" if task.starred else "unstarred")

    def set_priority(self, task_id: str, priority: Optional[TaskPriority]) -> Task:
        if priority is None:
            raise InvalidArgumentError("Priority cannot be null", argument="priority")
        task = self.get_task_by_id(task_id)
        task.set_priority(priority)
        return self._save_transition(task, f"priority set to {priority.value}")

    def set_due_date(self, task_id: str, due_date: Optional[datetime]) -> Task:
        task = self.get_task_by_id(task_id)
        task.set_due_date(due_date)
        return self._save_transition(task, "due date cleared" if due_date is None else "due date set")

    def assign_category(self, task_id: str, category_id: str) -> Task:
        """
        Point a task at an existing category.

        Raises:
            InvalidArgumentError: if either id is empty.
            TaskNotFoundError / CategoryNotFoundError: if either entity is missing.
        """
        _require(task_id, "task_id", "Task ID")
        _require(category_id, "category_id", "Category ID")
        task = self.get_task_by_id(task_id)
        category = self._categories.find_by_id(category_id)
        if category is None:
            raise CategoryNotFoundError.for_id(category_id)
        task.assign_category(category.id)
        # The category may have been deleted since it was read; there is no
        # cross-store lock, this only narrows the window.
        if not self._categories.exists_by_id(category.id):
            raise CategoryNotFoundError.for_id(category_id)
        saved = self._tasks.save(task)
        logger.info("Assigned task %s to category %s (%r)", task_id, category.id, category.name)
        return saved

    def unassign_category(self, task_id: str) -> Task:
        task = self.get_task_by_id(task_id)
        task.clear_category()
        return self._save_transition(task, "category cleared")

    def _save_transition(self, task: Task, what: str) -> Task:
        saved = self._tasks.save(task)
        logger.info("Task %s %s", saved.id, what)
        return saved

    # ---- queries ----

    def get_all_tasks(self) -> List[Task]:
        return self._tasks.find_all()

    def get_tasks_by_status(self, status: Optional[TaskStatus]) -> List[Task]:
        if status is None:
            return self.get_all_tasks()
        return self._tasks.find_by_status(status)

    def get_tasks_by_priority(self, priority: Optional[TaskPriority]) -> List[Task]:
        if priority is None:
            return self.get_all_tasks()
        return self._tasks.find_by_priority(priority)

    def get_tasks_by_category(self, category_id: Optional[str]) -> List[Task]:
        if category_id is None or category_id.strip() == "":
            return self.get_all_tasks()
        if not self._categories.exists_by_id(category_id):
            return []
        return self._tasks.find_by_category(category_id)

    def get_starred_tasks(self) -> List[Task]:
        return self._tasks.find_starred()

    def get_overdue_tasks(self) -> List[Task]:
        return self._tasks.find_overdue()

    def get_tasks_due_between(self, start: Optional[datetime], end: Optional[datetime]) -> List[Task]:
        return self._tasks.find_by_due_date_between(start, end)

    def search_tasks(self, keyword: Optional[str]) -> List[Task]:
        return self._tasks.search_by_title(keyword)

    def count_by_status(self, status: Optional[TaskStatus]) -> int:
        if status is None:
            return 0
        return len(self._tasks.find_by_status(status))

    def get_total_count(self) -> int:
        return self._tasks.count()


# PUBLIC_INTERFACE
class CategoryService:
    """
    Category lifecycle with name uniqueness.

    Args:
        category_repository: where categories live.
        task_repository: only needed for the 'clear' delete policy.
        delete_policy: 'keep' leaves tasks pointing at a deleted category,
            'clear' removes the reference from those tasks.
    """

    def __init__(
        self,
        category_repository: CategoryRepository,
        task_repository: Optional[TaskRepository] = None,
        delete_policy: str = "keep",
        validator: Optional[Validator[Category]] = None,
    ) -> None:
        if category_repository is None:
            raise InvalidArgumentError("CategoryService requires a category repository")
        if delete_policy not in CATEGORY_DELETE_POLICIES:
            raise InvalidArgumentError(f"Unknown category delete policy: {delete_policy}", argument="delete_policy")
        if delete_policy == "clear" and task_repository is None:
            raise InvalidArgumentError("The 'clear' delete policy needs a task repository", argument="task_repository")
        self._categories = category_repository
        self._tasks = task_repository
        self._delete_policy = delete_policy
        self._validator = validator or category_validator

    def create_category(self, category: Category) -> Category:
        self._validator.validate(category)
        saved = self._categories.save_if_name_free(category)
        logger.info("Created category %s (%r)", saved.id, saved.name)
        return saved

    def update_category(self, category: Category) -> Category:
        """
        Store changes to an existing category.

        Raises:
            ValidationError: if the category breaks a content rule.
            CategoryNotFoundError: if no category with this id is stored.
            DuplicateEntityError: if another category already uses the name.
        """
        self._validator.validate(category)
        if not self._categories.exists_by_id(category.id):
            raise CategoryNotFoundError.for_id(category.id)
        category.touch()
        saved = self._categories.save_if_name_free(category)
        logger.info("Updated category %s (%r)", saved.id, saved.name)
        return saved

    def get_category_by_id(self, category_id: str) -> Category:
        _require(category_id, "category_id", "Category ID")
        category = self._categories.find_by_id(category_id)
        if category is None:
            raise CategoryNotFoundError.for_id(category_id)
        return category

    def get_category_by_name(self, name: str) -> Category:
        _require(name, "name", "Category name")
        category = self._categories.find_by_name(name)
        if category is None:
            raise CategoryNotFoundError.for_name(name)
        return category

    def find_category(self, category_id: Optional[str]) -> Optional[Category]:
        """Lenient lookup used to resolve a task's weak category reference."""
        if not category_id:
            return None
        return self._categories.find_by_id(category_id)

    def delete_category(self, category_id: str) -> None:
        _require(category_id, "category_id", "Category ID")
        if not self._categories.delete_by_id(category_id):
            raise CategoryNotFoundError.for_id(category_id)
        if self._delete_policy == "clear":
            self._tasks.clear_category(category_id)
        logger.info("Deleted category %s", category_id)

    def exists_by_name(self, name: Optional[str]) -> bool:
        if name is None or name.strip() == "":
            return False
        return self._categories.exists_by_name(name)

    def get_all_categories(self) -> List[Category]:
        return self._categories.find_all()

    def get_total_count(self) -> int:
        return self._categories.count()
