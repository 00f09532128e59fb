from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from threading import RLock
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from .errors import DuplicateEntityError, InvalidArgumentError
from .models import BaseEntity, Category, Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseEntity)


def _require_id(entity_id: Optional[str]) -> str:
    if entity_id is None or entity_id == "":
        raise InvalidArgumentError("ID cannot be null or empty", argument="id")
    return entity_id


# PUBLIC_INTERFACE
class Repository(ABC, Generic[E]):
    """Abstract storage contract for entities keyed by their string ID."""

    @abstractmethod
    def save(self, entity: E) -> E:
        """Insert or overwrite the entity stored under entity.id and return it."""

    @abstractmethod
    def find_by_id(self, entity_id: str) -> Optional[E]:
        """Return the entity with the given id, or None if absent."""

    @abstractmethod
    def find_all(self) -> List[E]:
        """Return a snapshot list of every stored entity."""

    @abstractmethod
    def delete_by_id(self, entity_id: str) -> bool:
        """Remove an entity. Return True if it existed, False otherwise."""

    @abstractmethod
    def exists_by_id(self, entity_id: str) -> bool:
        """Return whether an entity with the given id is stored."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored entities."""

    @abstractmethod
    def delete_all(self) -> None:
        """Remove every stored entity."""

    def delete(self, entity: E) -> bool:
        if entity is None:
            raise InvalidArgumentError("Entity cannot be null", argument="entity")
        return self.delete_by_id(entity.id)


class InMemoryRepository(Repository[E]):
    """
    Thread-safe in-memory repository.

    A single lock guards the map, so each single-key operation is atomic and
    visible to every reader once it returns. Entities are copied on the way in
    and out; callers never hold a reference into the map. Scans copy the
    matching entities while holding the lock, but two successive calls may of
    course observe different states.
    """

    label = "Entity"

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, E] = {}
        logger.info("%s repository initialized", self.label)

    def save(self, entity: E) -> E:
        if entity is None:
            raise InvalidArgumentError(f"{self.label} cannot be null", argument="entity")
        if not entity.id:
            raise InvalidArgumentError(f"{self.label} ID cannot be null or empty", argument="id")
        stored = copy.copy(entity)
        with self._lock:
            is_update = entity.id in self._items
            self._items[entity.id] = stored
        logger.debug("%s %s: %s", "Updated" if is_update else "Created", self.label.lower(), entity.id)
        return copy.copy(stored)

    def find_by_id(self, entity_id: str) -> Optional[E]:
        _require_id(entity_id)
        with self._lock:
            item = self._items.get(entity_id)
            return None if item is None else copy.copy(item)

    def find_all(self) -> List[E]:
        return self._select(lambda _: True)

    def delete_by_id(self, entity_id: str) -> bool:
        _require_id(entity_id)
        with self._lock:
            removed = self._items.pop(entity_id, None) is not None
        if removed:
            logger.debug("Deleted %s: %s", self.label.lower(), entity_id)
        return removed

    def exists_by_id(self, entity_id: str) -> bool:
        _require_id(entity_id)
        with self._lock:
            return entity_id in self._items

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def delete_all(self) -> None:
        with self._lock:
            previous = len(self._items)
            self._items.clear()
        logger.info("Deleted all %s entries (%d removed)", self.label.lower(), previous)

    def _select(self, predicate: Callable[[E], bool]) -> List[E]:
        """Return copies of every stored entity matching predicate."""
        with self._lock:
            return [copy.copy(item) for item in self._items.values() if predicate(item)]


# PUBLIC_INTERFACE
class TaskRepository(InMemoryRepository[Task]):
    """In-memory task store with linear-scan queries."""

    label = "Task"

    def find_by_status(self, status: Optional[TaskStatus]) -> List[Task]:
        if status is None:
            return []
        return self._select(lambda t: t.status == status)

    def find_by_priority(self, priority: Optional[TaskPriority]) -> List[Task]:
        if priority is None:
            return []
        return self._select(lambda t: t.priority == priority)

    def find_by_category(self, category_id: Optional[str]) -> List[Task]:
        if not category_id:
            return []
        return self._select(lambda t: t.category_id == category_id)

    def find_starred(self) -> List[Task]:
        return self._select(lambda t: t.starred)

    def find_overdue(self) -> List[Task]:
        now = datetime.now()
        return self._select(lambda t: t.is_overdue_at(now))

    def find_by_due_date_between(self, start: Optional[datetime], end: Optional[datetime]) -> List[Task]:
        """Tasks whose due date lies in [start, end]; an open bound matches nothing."""
        if start is None or end is None:
            return []
        return self._select(lambda t: t.due_date is not None and start <= t.due_date <= end)

    def search_by_title(self, keyword: Optional[str]) -> List[Task]:
        """
        Case-insensitive substring search on the title.
        A missing or blank keyword returns every task.
        """
        if keyword is None or keyword.strip() == "":
            return self.find_all()
        needle = keyword.lower()
        return self._select(lambda t: t.title is not None and needle in t.title.lower())

    def clear_category(self, category_id: str) -> int:
        """Drop the reference to category_id from every task. Returns how many changed."""
        _require_id(category_id)
        changed = 0
        with self._lock:
            for task_id, task in list(self._items.items()):
                if task.category_id == category_id:
                    updated = copy.copy(task)
                    updated.clear_category()
                    self._items[task_id] = updated
                    changed += 1
        if changed:
            logger.info("Cleared category %s from %d task(s)", category_id, changed)
        return changed


# PUBLIC_INTERFACE
class CategoryRepository(InMemoryRepository[Category]):
    """In-memory category store."""

    label = "Category"

    def find_by_name(self, name: Optional[str]) -> Optional[Category]:
        """Exact, case-sensitive name lookup."""
        if name is None:
            return None
        matches = self._select(lambda c: c.name == name)
        return matches[0] if matches else None

    def exists_by_name(self, name: Optional[str]) -> bool:
        return self.find_by_name(name) is not None

    def save_if_name_free(self, category: Category) -> Category:
        """
        Save category unless another category (different id) already holds its name.

        The name check and the write happen under one lock acquisition, so two
        concurrent callers cannot both claim the same name.

        Returns:
            The stored copy of category.

        Raises:
            DuplicateEntityError: if the name is taken by another category.
        """
        with self._lock:
            existing = self.find_by_name(category.name)
            if existing is not None and existing.id != category.id:
                raise DuplicateEntityError("Category", category.name)
            return self.save(category)
