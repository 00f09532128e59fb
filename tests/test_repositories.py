import threading
from datetime import datetime, timedelta

import pytest

from task_tracker.errors import DuplicateEntityError, InvalidArgumentError
from task_tracker.models import Category, Task, TaskPriority, TaskStatus
from task_tracker.repositories import CategoryRepository, TaskRepository


def ids(entities):
    return {e.id for e in entities}


class TestGenericStore:
    def test_save_rejects_missing_entity_or_id(self, task_repo):
        with pytest.raises(InvalidArgumentError):
            task_repo.save(None)
        with pytest.raises(InvalidArgumentError):
            task_repo.save(Task(id="", title="A"))

    @pytest.mark.parametrize("bad_id", [None, ""])
    def test_id_arguments_are_required(self, task_repo, bad_id):
        with pytest.raises(InvalidArgumentError):
            task_repo.find_by_id(bad_id)
        with pytest.raises(InvalidArgumentError):
            task_repo.delete_by_id(bad_id)
        with pytest.raises(InvalidArgumentError):
            task_repo.exists_by_id(bad_id)

    def test_round_trip(self, task_repo):
        task = Task(title="Write report", description="Q3", priority=TaskPriority.HIGH,
                    due_date=datetime(2030, 1, 1, 9, 30), starred=True)
        task_repo.save(task)
        found = task_repo.find_by_id(task.id)
        assert found == task
        assert found is not task

    def test_missing_id_returns_none(self, task_repo):
        assert task_repo.find_by_id("nope") is None

    def test_stored_entity_is_isolated_from_callers(self, task_repo):
        task = Task(title="Original")
        returned = task_repo.save(task)
        task.title = "changed after save"
        returned.title = "changed on returned copy"
        fetched = task_repo.find_by_id(task.id)
        fetched.title = "changed on fetched copy"
        assert task_repo.find_by_id(task.id).title == "Original"

    def test_save_overwrites_existing_entry(self, task_repo):
        task = task_repo.save(Task(title="v1"))
        task.set_title("v2")
        task_repo.save(task)
        assert task_repo.count() == 1
        assert task_repo.find_by_id(task.id).title == "v2"

    def test_delete_by_id_is_true_then_false(self, task_repo):
        task = task_repo.save(Task(title="A"))
        assert task_repo.delete_by_id(task.id) is True
        assert task_repo.delete_by_id(task.id) is False
        assert task_repo.exists_by_id(task.id) is False

    def test_delete_entity(self, task_repo):
        task = task_repo.save(Task(title="A"))
        assert task_repo.delete(task) is True
        with pytest.raises(InvalidArgumentError):
            task_repo.delete(None)

    def test_count_find_all_and_delete_all(self, task_repo):
        saved = [task_repo.save(Task(title=f"T{i}")) for i in range(3)]
        assert task_repo.count() == 3
        assert ids(task_repo.find_all()) == ids(saved)
        task_repo.delete_all()
        assert task_repo.count() == 0
        assert task_repo.find_all() == []

    def test_find_all_is_a_snapshot(self, task_repo):
        task_repo.save(Task(title="A"))
        snapshot = task_repo.find_all()
        task_repo.save(Task(title="B"))
        assert len(snapshot) == 1


class TestConcurrency:
    def test_concurrent_writers_lose_no_updates(self, task_repo):
        writers, per_writer = 8, 250
        barrier = threading.Barrier(writers)

        def write():
            barrier.wait()
            for i in range(per_writer):
                task_repo.save(Task(title=f"task {i}"))

        threads = [threading.Thread(target=write) for _ in range(writers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert task_repo.count() == writers * per_writer
        assert len(task_repo.find_all()) == writers * per_writer

    def test_concurrent_name_claims_admit_one_winner(self, category_repo):
        contenders = 16
        barrier = threading.Barrier(contenders)
        winners, conflicts = [], []

        def claim():
            barrier.wait()
            try:
                winners.append(category_repo.save_if_name_free(Category(name="Work")))
            except DuplicateEntityError as e:
                conflicts.append(e)

        threads = [threading.Thread(target=claim) for _ in range(contenders)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert category_repo.count() == 1
        assert len(winners) == 1
        assert len(conflicts) == contenders - 1


class TestTaskQueries:
    @pytest.fixture()
    def seeded(self, task_repo):
        now = datetime.now()
        tasks = {
            "report": Task(title="Complete report", priority=TaskPriority.HIGH, category_id="work",
                           due_date=now - timedelta(days=2)),
            "milk": Task(title="Buy milk", starred=True, due_date=now + timedelta(days=1)),
            "done": Task(title="Incomplete draft", status=TaskStatus.COMPLETED,
                         due_date=now - timedelta(days=5), category_id="work"),
            "call": Task(title="Call mom", status=TaskStatus.IN_PROGRESS, priority=TaskPriority.LOW,
                         due_date=now - timedelta(hours=1), starred=True),
        }
        for task in tasks.values():
            task_repo.save(task)
        return tasks

    def test_find_by_status(self, task_repo, seeded):
        assert ids(task_repo.find_by_status(TaskStatus.PENDING)) == ids([seeded["report"], seeded["milk"]])
        assert task_repo.find_by_status(TaskStatus.CANCELLED) == []
        assert task_repo.find_by_status(None) == []

    def test_find_by_priority(self, task_repo, seeded):
        assert ids(task_repo.find_by_priority(TaskPriority.HIGH)) == {seeded["report"].id}
        assert task_repo.find_by_priority(None) == []

    def test_find_by_category(self, task_repo, seeded):
        assert ids(task_repo.find_by_category("work")) == ids([seeded["report"], seeded["done"]])
        assert task_repo.find_by_category("unknown") == []

    def test_find_starred(self, task_repo, seeded):
        assert ids(task_repo.find_starred()) == ids([seeded["milk"], seeded["call"]])

    def test_find_overdue_excludes_closed_and_future(self, task_repo, seeded):
        assert ids(task_repo.find_overdue()) == ids([seeded["report"], seeded["call"]])

    def test_find_by_due_date_between_is_inclusive(self, task_repo):
        start, end = datetime(2030, 1, 1), datetime(2030, 1, 31, 23, 59)
        on_start = task_repo.save(Task(title="start", due_date=start))
        on_end = task_repo.save(Task(title="end", due_date=end))
        task_repo.save(Task(title="before", due_date=start - timedelta(seconds=1)))
        task_repo.save(Task(title="after", due_date=end + timedelta(seconds=1)))
        task_repo.save(Task(title="no due date"))
        assert ids(task_repo.find_by_due_date_between(start, end)) == ids([on_start, on_end])
        assert task_repo.find_by_due_date_between(None, end) == []
        assert task_repo.find_by_due_date_between(start, None) == []

    @pytest.mark.parametrize("keyword", [None, "", "   "])
    def test_blank_search_returns_everything(self, task_repo, seeded, keyword):
        assert ids(task_repo.search_by_title(keyword)) == ids(task_repo.find_all())

    def test_search_is_case_insensitive_substring(self, task_repo, seeded):
        assert ids(task_repo.search_by_title("COMPLETE")) == ids([seeded["report"], seeded["done"]])
        assert task_repo.search_by_title("nothing like this") == []

    def test_clear_category(self, task_repo, seeded):
        assert task_repo.clear_category("work") == 2
        assert task_repo.find_by_category("work") == []
        assert task_repo.find_by_id(seeded["report"].id).category_id is None
        assert task_repo.find_by_id(seeded["milk"].id).title == "Buy milk"


class TestCategoryQueries:
    def test_find_by_name_is_exact_and_case_sensitive(self, category_repo):
        work = category_repo.save(Category(name="Work"))
        assert category_repo.find_by_name("Work") == work
        assert category_repo.find_by_name("work") is None
        assert category_repo.find_by_name(None) is None
        assert category_repo.exists_by_name("Work") is True
        assert category_repo.exists_by_name("Wor") is False

    def test_save_if_name_free(self, category_repo):
        work = Category(name="Work")
        saved = category_repo.save_if_name_free(work)
        assert saved == work
        assert saved is not work
        with pytest.raises(DuplicateEntityError) as excinfo:
            category_repo.save_if_name_free(Category(name="Work"))
        assert excinfo.value.identifier == "Work"
        assert category_repo.count() == 1
        # Re-saving the holder of the name is not a conflict
        work.set_color("#000000")
        assert category_repo.save_if_name_free(work).color == "#000000"
        assert category_repo.find_by_id(work.id).color == "#000000"


def test_stores_are_independent():
    a, b = TaskRepository(), TaskRepository()
    a.save(Task(title="only in a"))
    assert b.count() == 0
    assert CategoryRepository().count() == 0
