from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from .repositories import CategoryRepository, TaskRepository
from .services import CategoryService, TaskService
from .settings import Settings


@dataclass(frozen=True)
class Services:
    """The stores and services backing one application instance."""

    task_repository: TaskRepository
    category_repository: CategoryRepository
    tasks: TaskService
    categories: CategoryService


# PUBLIC_INTERFACE
def build_services(settings: Settings) -> Services:
    """
    Create fresh stores and wire the services on top of them. Each call yields
    an independent, empty tracker.
    """
    task_repository = TaskRepository()
    category_repository = CategoryRepository()
    return Services(
        task_repository=task_repository,
        category_repository=category_repository,
        tasks=TaskService(task_repository, category_repository),
        categories=CategoryService(
            category_repository,
            task_repository,
            delete_policy=settings.category_delete_policy,
        ),
    )


def get_task_service(request: Request) -> TaskService:
    """Dependency returning the task service of the running app."""
    return request.app.state.services.tasks


def get_category_service(request: Request) -> CategoryService:
    """Dependency returning the category service of the running app."""
    return request.app.state.services.categories
