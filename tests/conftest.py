from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from task_tracker.main import create_app
from task_tracker.repositories import CategoryRepository, TaskRepository
from task_tracker.services import CategoryService, TaskService
from task_tracker.settings import Settings


def make_settings(**overrides) -> Settings:
    values = dict(
        host="127.0.0.1",
        port=8080,
        cors_allow_origins=["*"],
        log_level=logging.INFO,
        category_delete_policy="keep",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def task_repo() -> TaskRepository:
    return TaskRepository()


@pytest.fixture()
def category_repo() -> CategoryRepository:
    return CategoryRepository()


@pytest.fixture()
def task_service(task_repo: TaskRepository, category_repo: CategoryRepository) -> TaskService:
    return TaskService(task_repo, category_repo)


@pytest.fixture()
def category_service(category_repo: CategoryRepository, task_repo: TaskRepository) -> CategoryService:
    return CategoryService(category_repo, task_repo)


@pytest.fixture()
def client() -> TestClient:
    """A client for a freshly created app; every test starts with empty stores."""
    return TestClient(create_app(make_settings()))


@pytest.fixture()
def clearing_client() -> TestClient:
    """Like client, but deleting a category clears it from referencing tasks."""
    return TestClient(create_app(make_settings(category_delete_policy="clear")))
