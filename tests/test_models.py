from datetime import datetime, timedelta

import pytest

from task_tracker.errors import InvalidArgumentError
from task_tracker.models import Category, Task, TaskPriority, TaskStatus


class TestEntityIdentity:
    def test_new_entities_get_distinct_ids(self):
        a, b = Task(title="A"), Task(title="B")
        assert a.id and b.id
        assert a.id != b.id

    def test_id_cannot_be_reassigned(self):
        task = Task(title="A")
        with pytest.raises(AttributeError):
            task.id = "other"

    def test_updated_at_never_before_created_at(self):
        created = datetime(2025, 1, 2, 12, 0, 0)
        category = Category(name="Work", created_at=created, updated_at=created - timedelta(days=1))
        assert category.updated_at == created

    def test_touch_is_strictly_increasing_even_if_clock_lags(self):
        task = Task(title="A")
        future = datetime.now() + timedelta(hours=1)
        task.updated_at = future
        task.touch()
        assert task.updated_at > future


class TestTaskDefaults:
    def test_defaults(self):
        task = Task(title="Buy milk")
        assert task.status is TaskStatus.PENDING
        assert task.priority is TaskPriority.MEDIUM
        assert task.starred is False
        assert task.category_id is None
        assert task.due_date is None
        assert task.description is None


class TestTaskTransitions:
    def test_complete_sets_status_and_bumps_updated_at(self):
        task = Task(title="A")
        before = task.updated_at
        task.complete()
        assert task.status is TaskStatus.COMPLETED
        assert task.is_completed
        assert task.updated_at > before

    def test_transitions_are_unguarded(self):
        task = Task(title="A")
        task.cancel()
        task.complete()
        assert task.status is TaskStatus.COMPLETED
        task.start()
        assert task.status is TaskStatus.IN_PROGRESS

    def test_toggle_starred(self):
        task = Task(title="A")
        task.toggle_starred()
        assert task.starred is True
        task.toggle_starred()
        assert task.starred is False

    def test_category_reference(self):
        task = Task(title="A")
        task.assign_category("cat-1")
        assert task.category_id == "cat-1"
        task.clear_category()
        assert task.category_id is None

    def test_every_setter_bumps_updated_at(self):
        task = Task(title="A")
        for mutate in (
            lambda: task.set_title("B"),
            lambda: task.set_description("d"),
            lambda: task.set_priority(TaskPriority.HIGH),
            lambda: task.set_due_date(datetime.now()),
            lambda: task.set_starred(True),
        ):
            before = task.updated_at
            mutate()
            assert task.updated_at > before


class TestOverdue:
    def test_no_due_date_is_never_overdue(self):
        assert Task(title="A").is_overdue is False

    @pytest.mark.parametrize("status", [TaskStatus.PENDING, TaskStatus.IN_PROGRESS])
    def test_past_due_open_task_is_overdue(self, status):
        task = Task(title="A", status=status, due_date=datetime.now() - timedelta(days=1))
        assert task.is_overdue is True

    @pytest.mark.parametrize("status", [TaskStatus.COMPLETED, TaskStatus.CANCELLED])
    def test_closed_task_is_never_overdue(self, status):
        task = Task(title="A", status=status, due_date=datetime.now() - timedelta(days=1))
        assert task.is_overdue is False

    def test_future_due_date_is_not_overdue(self):
        task = Task(title="A", due_date=datetime.now() + timedelta(days=1))
        assert task.is_overdue is False

    def test_due_exactly_now_is_not_overdue(self):
        now = datetime(2025, 5, 1, 9, 0, 0)
        task = Task(title="A", due_date=now)
        assert task.is_overdue_at(now) is False
        assert task.is_overdue_at(now + timedelta(microseconds=1)) is True


class TestEnums:
    def test_priority_levels_are_ordered(self):
        assert [p.level for p in TaskPriority] == [1, 2, 3, 4]
        assert TaskPriority.CRITICAL.is_higher_than(TaskPriority.HIGH)
        assert TaskPriority.LOW.is_lower_than(TaskPriority.MEDIUM)
        assert not TaskPriority.MEDIUM.is_higher_than(TaskPriority.MEDIUM)

    def test_from_string_accepts_token_and_display_name(self):
        assert TaskStatus.from_string("in_progress") is TaskStatus.IN_PROGRESS
        assert TaskStatus.from_string("In Progress") is TaskStatus.IN_PROGRESS
        assert TaskPriority.from_string("critical") is TaskPriority.CRITICAL

    @pytest.mark.parametrize("value", [None, "urgent"])
    def test_from_string_rejects_unknown(self, value):
        with pytest.raises(InvalidArgumentError):
            TaskPriority.from_string(value)

    def test_tokens_and_display_names(self):
        assert str(TaskStatus.PENDING) == "PENDING"
        assert TaskStatus.IN_PROGRESS.display_name == "In Progress"
        assert TaskPriority("HIGH") is TaskPriority.HIGH
