"""Unit tests for TaskStore mutations, persistence and derived views."""

from __future__ import annotations

import json
from datetime import timedelta

import pytest

from taskdeck.adapters.task_storage import TASKS_STORAGE_KEY
from taskdeck.models import (
    NotFoundError,
    PersistenceError,
    Subtask,
    TaskChanges,
    TaskFilter,
    ValidationError,
)
from taskdeck.repositories import TaskRepository
from taskdeck.services import TaskStore


class RecordingRepository(TaskRepository):
    """Repository that remembers every save and can be told to fail."""

    def __init__(self, tasks=(), fail: bool = False):
        self.tasks = list(tasks)
        self.fail = fail
        self.saves: list[list] = []

    def load(self):
        return list(self.tasks)

    def save(self, tasks):
        if self.fail:
            raise PersistenceError("disk full")
        self.saves.append([t.model_copy(deep=True) for t in tasks])


def _orders(store: TaskStore) -> dict[int, int]:
    return {task.id: task.order for task in store.all_tasks}


@pytest.fixture()
def two_tasks(task_factory):
    return [
        task_factory(1, order=0, priority="high", completed=False),
        task_factory(2, order=1, priority="low", completed=True),
    ]


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


class TestAdd:
    def test_first_task_gets_order_zero(self, store):
        task = store.add("Write report")
        assert task.order == 0

    def test_order_follows_max_existing_order(self, make_store, task_factory):
        store, _ = make_store([task_factory(1, order=4), task_factory(2, order=9)])
        task = store.add("Next")
        assert task.order == 10

    def test_order_follows_max_after_delete(self, store):
        store.add("a")
        middle = store.add("b")
        store.add("c")
        store.delete(middle.id)
        assert store.add("d").order == 3

    def test_sets_defaults_and_timestamps(self, store, clock):
        task = store.add("  Plan sprint  ", "high", tags=["work", "work", " q1 "])
        assert task.title == "Plan sprint"
        assert task.priority == "high"
        assert task.completed is False
        assert task.description == ""
        assert task.tags == ["work", "q1"]
        assert task.subtasks == []
        assert task.created_at == clock.now
        assert task.updated_at == clock.now

    def test_subtasks_from_titles(self, store):
        task = store.add("Trip", subtasks=["Book flight", "Pack"])
        assert [s.title for s in task.subtasks] == ["Book flight", "Pack"]
        assert all(not s.completed for s in task.subtasks)
        assert len({s.id for s in task.subtasks}) == 2

    def test_ids_are_unique(self, store):
        ids = {store.add(f"t{i}").id for i in range(5)}
        assert len(ids) == 5

    def test_new_ids_exceed_loaded_ids(self, make_store, task_factory):
        store, _ = make_store([task_factory(5000)])
        assert store.add("later").id > 5000

    @pytest.mark.parametrize("title", ["", "   "])
    def test_blank_title_rejected(self, store, title):
        with pytest.raises(ValidationError):
            store.add(title)
        assert store.all_tasks == []

    @pytest.mark.parametrize("subtasks", [["   "], ["ok", ""]])
    def test_blank_subtask_title_rejected(self, store, subtasks):
        with pytest.raises(ValidationError):
            store.add("Task", subtasks=subtasks)
        assert store.all_tasks == []

    def test_subtask_titles_are_stripped(self, store):
        task = store.add("Task", subtasks=["  Pack  "])
        assert task.subtasks[0].title == "Pack"

    def test_blank_tag_rejected(self, store):
        with pytest.raises(ValidationError):
            store.add("Task", tags=["work", " "])
        assert store.all_tasks == []

    def test_invalid_priority_rejected(self, store):
        with pytest.raises(ValidationError):
            store.add("Task", "urgent")
        assert store.all_tasks == []

    def test_persists_collection(self, store, kv_store):
        task = store.add("Saved")
        payload = json.loads(kv_store.get(TASKS_STORAGE_KEY))
        assert [record["id"] for record in payload] == [task.id]
        assert "createdAt" in payload[0]


# ---------------------------------------------------------------------------
# update / toggle / delete
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_applies_only_supplied_fields(self, store, clock):
        task = store.add("Original", "low", description="keep me")
        clock.advance(minutes=5)
        updated = store.update(task.id, {"title": "Renamed"})
        assert updated.title == "Renamed"
        assert updated.description == "keep me"
        assert updated.priority == "low"
        assert updated.created_at == task.created_at
        assert updated.updated_at == clock.now

    def test_accepts_task_changes(self, store):
        task = store.add("Original")
        updated = store.update(task.id, TaskChanges(priority="high"))
        assert updated.priority == "high"

    def test_clears_due_date(self, store, clock):
        task = store.add("Due", due_date=clock.now + timedelta(days=1))
        assert store.update(task.id, {"due_date": None}).due_date is None

    @pytest.mark.parametrize("field", ["id", "created_at", "updated_at", "order"])
    def test_protected_fields_rejected(self, store, clock, field):
        task = store.add("Task")
        value = 999 if field in ("id", "order") else clock.now + timedelta(days=1)
        with pytest.raises(ValidationError):
            store.update(task.id, {field: value})
        assert store.get_by_id(task.id) == task

    def test_cannot_move_onto_another_tasks_order(self, store):
        a = store.add("a")
        b = store.add("b")
        with pytest.raises(ValidationError):
            store.update(a.id, {"order": b.order})
        assert _orders(store) == {a.id: 0, b.id: 1}

    def test_tags_are_stripped(self, store):
        task = store.add("Task")
        assert store.update(task.id, {"tags": [" x ", "x", "y"]}).tags == ["x", "y"]

    @pytest.mark.parametrize("tags", [[""], ["ok", "   "]])
    def test_blank_tags_rejected(self, store, tags):
        task = store.add("Task", tags=["keep"])
        with pytest.raises(ValidationError):
            store.update(task.id, {"tags": tags})
        assert store.get_by_id(task.id).tags == ["keep"]

    def test_blank_subtask_title_rejected(self, store):
        task = store.add("Task")
        with pytest.raises(ValidationError):
            store.update(task.id, {"subtasks": [{"id": 1, "title": " "}]})
        assert store.get_by_id(task.id).subtasks == []

    def test_supplied_subtask_ids_not_reissued(self, make_store, task_factory):
        store, _ = make_store([task_factory(1)])
        store.update(1, {"subtasks": [{"id": 5000, "title": "given"}]})
        added = store.add_subtask(1, "generated")
        assert added.id > 5000
        assert len({s.id for s in store.get_by_id(1).subtasks}) == 2

    def test_blank_title_leaves_state_unchanged(self, store):
        task = store.add("Keep")
        with pytest.raises(ValidationError):
            store.update(task.id, {"title": "  "})
        assert store.get_by_id(task.id) == task

    def test_unknown_id_raises(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            store.update(42, {"title": "x"})
        assert exc_info.value.task_id == 42


class TestToggleCompleted:
    def test_twice_restores_value(self, store, clock):
        task = store.add("Flip")
        clock.advance(seconds=1)
        first = store.toggle_completed(task.id)
        clock.advance(seconds=1)
        second = store.toggle_completed(task.id)
        assert first.completed is True
        assert second.completed is task.completed
        assert second.updated_at >= first.updated_at

    def test_unknown_id_raises(self, store):
        with pytest.raises(NotFoundError):
            store.toggle_completed(7)


class TestDelete:
    def test_returns_removed_task(self, store):
        task = store.add("Gone")
        removed = store.delete(task.id)
        assert removed.id == task.id
        assert store.get_by_id(task.id) is None

    def test_keeps_order_gaps(self, store):
        a = store.add("a")
        b = store.add("b")
        c = store.add("c")
        store.delete(b.id)
        assert _orders(store) == {a.id: 0, c.id: 2}

    def test_unknown_id_leaves_collection(self, store):
        store.add("stay")
        with pytest.raises(NotFoundError):
            store.delete(12345)
        assert len(store.all_tasks) == 1


# ---------------------------------------------------------------------------
# reorder
# ---------------------------------------------------------------------------


class TestReorder:
    def test_assigns_positions(self, store):
        a, b, c = store.add("a"), store.add("b"), store.add("c")
        result = store.reorder([c.id, a.id, b.id])
        assert [t.id for t in result] == [c.id, a.id, b.id]
        assert _orders(store) == {c.id: 0, a.id: 1, b.id: 2}
        assert [t.id for t in store.all_tasks] == [c.id, a.id, b.id]

    def test_accepts_tasks(self, store):
        a, b = store.add("a"), store.add("b")
        store.reorder([b, a])
        assert [t.id for t in store.all_tasks] == [b.id, a.id]

    def test_idempotent(self, store):
        a, b, c = store.add("a"), store.add("b"), store.add("c")
        store.reorder([b.id, c.id, a.id])
        first = _orders(store)
        store.reorder([b.id, c.id, a.id])
        assert _orders(store) == first

    def test_densifies_after_delete(self, store):
        a, b, c = store.add("a"), store.add("b"), store.add("c")
        store.delete(b.id)
        store.reorder([a.id, c.id])
        assert _orders(store) == {a.id: 0, c.id: 1}

    @pytest.mark.parametrize(
        "sequence_of",
        [
            lambda ids: ids[:-1],
            lambda ids: ids + [ids[0]],
            lambda ids: [ids[0], ids[0], ids[2]],
            lambda ids: [ids[0], ids[1], 999999],
        ],
        ids=["missing", "extra", "duplicate", "unknown"],
    )
    def test_invalid_sequence_leaves_state(self, store, sequence_of):
        ids = [store.add(name).id for name in ("a", "b", "c")]
        before = store.all_tasks
        with pytest.raises(ValidationError):
            store.reorder(sequence_of(ids))
        assert store.all_tasks == before


# ---------------------------------------------------------------------------
# subtasks
# ---------------------------------------------------------------------------


class TestSubtasks:
    def test_add_subtask(self, store, clock):
        task = store.add("Parent")
        clock.advance(minutes=1)
        subtask = store.add_subtask(task.id, " Child ")
        parent = store.get_by_id(task.id)
        assert subtask.title == "Child"
        assert subtask.completed is False
        assert parent.subtasks == [subtask]
        assert parent.updated_at == clock.now

    def test_add_subtask_blank_title(self, store):
        task = store.add("Parent")
        with pytest.raises(ValidationError):
            store.add_subtask(task.id, "")

    def test_add_subtask_unknown_task(self, store):
        with pytest.raises(NotFoundError):
            store.add_subtask(1, "Child")

    def test_toggle_subtask(self, store):
        task = store.add("Parent", subtasks=["one", "two"])
        first, second = task.subtasks
        updated = store.toggle_subtask(task.id, first.id)
        assert updated.get_subtask(first.id).completed is True
        assert updated.get_subtask(second.id).completed is False

    def test_delete_subtask(self, store):
        task = store.add("Parent", subtasks=["one", "two"])
        updated = store.delete_subtask(task.id, task.subtasks[0].id)
        assert [s.title for s in updated.subtasks] == ["two"]

    @pytest.mark.parametrize("operation", ["toggle_subtask", "delete_subtask"])
    def test_unknown_subtask_is_noop(self, store, clock, operation):
        task = store.add("Parent", subtasks=["one"])
        clock.advance(hours=1)
        result = getattr(store, operation)(task.id, 424242)
        assert result.subtasks == task.subtasks
        assert result.updated_at == task.updated_at
        assert store.get_by_id(task.id) == task

    def test_supplied_subtask_ids_not_reissued(self, store):
        task = store.add("Parent", subtasks=[Subtask(id=100, title="given")])
        added = store.add_subtask(task.id, "new")
        assert added.id != 100
        assert task.id != 100
        assert len(store.get_by_id(task.id).subtasks) == 2


# ---------------------------------------------------------------------------
# tags
# ---------------------------------------------------------------------------


class TestTags:
    def test_add_tag_twice_keeps_one(self, make_store, two_tasks):
        store, _ = make_store(two_tasks)
        store.add_tag(1, "x")
        store.add_tag(1, "x")
        assert store.get_by_id(1).tags.count("x") == 1

    def test_add_existing_tag_does_not_persist(self, task_factory, clock):
        repository = RecordingRepository([task_factory(1, tags=["x"])])
        store = TaskStore(repository, clock=clock)
        store.add_tag(1, "x")
        assert repository.saves == []

    def test_remove_tag(self, make_store, task_factory):
        store, _ = make_store([task_factory(1, tags=["a", "b"])])
        assert store.remove_tag(1, "a").tags == ["b"]

    def test_remove_missing_tag_is_noop(self, make_store, task_factory):
        store, _ = make_store([task_factory(1, tags=["a"])])
        before = store.get_by_id(1)
        assert store.remove_tag(1, "zzz") == before

    def test_blank_tag_rejected(self, store):
        task = store.add("Task")
        with pytest.raises(ValidationError):
            store.add_tag(task.id, " ")

    def test_unknown_task(self, store):
        with pytest.raises(NotFoundError):
            store.add_tag(3, "x")

    def test_all_tags_sorted_and_unique(self, make_store, task_factory):
        store, _ = make_store(
            [task_factory(1, tags=["work", "home"]), task_factory(2, tags=["home", "admin"])]
        )
        assert store.all_tags == ["admin", "home", "work"]


# ---------------------------------------------------------------------------
# filter and derived views
# ---------------------------------------------------------------------------


class TestFilter:
    def test_pending_scenario(self, make_store, two_tasks):
        store, _ = make_store(two_tasks)
        store.set_filter({"status": "pending"})
        assert [t.id for t in store.filtered_tasks] == [1]
        assert store.high_priority_count == 1
        assert store.completion_percentage == 0

    def test_conjunction_of_constraints(self, make_store, task_factory, clock):
        store, _ = make_store(
            [
                task_factory(1, priority="high", tags=["work"], title="Report"),
                task_factory(2, priority="high", tags=["home"], title="Report"),
                task_factory(3, priority="low", tags=["work"], title="Report"),
                task_factory(4, priority="high", tags=["work"], title="Other"),
            ]
        )
        store.set_filter(
            TaskFilter(priority="high", tags=["work"], search_query="REPORT")
        )
        assert [t.id for t in store.filtered_tasks] == [1]

    def test_filtered_is_subset(self, make_store, task_factory):
        store, _ = make_store(
            [task_factory(i, completed=i % 2 == 0, priority="medium") for i in range(1, 7)]
        )
        store.set_filter({"status": "completed", "priority": "medium"})
        all_ids = {t.id for t in store.all_tasks}
        filtered = store.filtered_tasks
        assert {t.id for t in filtered} <= all_ids
        assert all(t.completed and t.priority == "medium" for t in filtered)

    def test_search_matches_description_and_tags(self, make_store, task_factory):
        store, _ = make_store(
            [
                task_factory(1, description="call the Plumber"),
                task_factory(2, tags=["plumbing"]),
                task_factory(3),
            ]
        )
        store.set_filter({"search_query": "plumb"})
        assert [t.id for t in store.filtered_tasks] == [1, 2]

    def test_blank_search_ignored(self, make_store, two_tasks):
        store, _ = make_store(two_tasks)
        store.set_filter({"search_query": "   "})
        assert len(store.filtered_tasks) == 2

    def test_overdue_filter(self, make_store, task_factory, clock):
        store, _ = make_store(
            [
                task_factory(1, due_date=clock.now - timedelta(hours=1)),
                task_factory(2, due_date=clock.now + timedelta(hours=1)),
                task_factory(3, due_date=clock.now - timedelta(hours=1), completed=True),
            ]
        )
        store.set_filter({"show_overdue": True})
        assert [t.id for t in store.filtered_tasks] == [1]
        assert [t.id for t in store.overdue_tasks] == [1]

    def test_update_filter_merges(self, store):
        store.set_filter({"status": "pending"})
        merged = store.update_filter(priority="low")
        assert merged.status == "pending"
        assert merged.priority == "low"

    def test_update_filter_accepts_camel_case(self, store):
        store.set_filter({"searchQuery": "a", "status": "pending"})
        merged = store.update_filter(searchQuery="b", showOverdue=True)
        assert merged.search_query == "b"
        assert merged.show_overdue is True
        assert merged.status == "pending"

    def test_update_filter_rejects_unknown_keys(self, store):
        store.set_filter({"status": "pending"})
        with pytest.raises(ValidationError):
            store.update_filter(colour="red")
        assert store.filter.status == "pending"

    def test_clear_filter(self, store):
        store.set_filter({"status": "pending"})
        assert store.clear_filter().is_empty()

    def test_invalid_filter_rejected(self, store):
        with pytest.raises(ValidationError):
            store.set_filter({"status": "archived"})
        assert store.filter.is_empty()

    def test_filter_property_is_a_copy(self, store):
        snapshot = store.filter
        snapshot.status = "completed"
        assert store.filter.status is None

    def test_views_follow_mutations(self, store):
        store.set_filter({"status": "pending"})
        task = store.add("Fresh")
        assert [t.id for t in store.filtered_tasks] == [task.id]
        store.toggle_completed(task.id)
        assert store.filtered_tasks == []
        assert store.pending_tasks == []


class TestDerivedViews:
    def test_completion_percentage_bounds(self, store):
        assert store.completion_percentage == 0
        task = store.add("only")
        assert store.completion_percentage == 0
        store.toggle_completed(task.id)
        assert store.completion_percentage == 100

    def test_completion_percentage_rounds_half_up(self, make_store, task_factory):
        tasks = [task_factory(i, completed=i == 1) for i in range(1, 9)]
        store, _ = make_store(tasks)
        assert store.completion_percentage == 13

    def test_completed_and_pending_lists(self, make_store, two_tasks):
        store, _ = make_store(two_tasks)
        assert [t.id for t in store.completed_tasks] == [2]
        assert [t.id for t in store.pending_tasks] == [1]

    def test_priority_counts_exclude_completed(self, make_store, task_factory):
        store, _ = make_store(
            [
                task_factory(1, priority="high"),
                task_factory(2, priority="high", completed=True),
                task_factory(3, priority="medium"),
                task_factory(4, priority="low"),
                task_factory(5, priority="low"),
            ]
        )
        assert store.priority_counts == {"high": 1, "medium": 1, "low": 2}
        assert store.medium_priority_count == 1
        assert store.low_priority_count == 2

    def test_completion_analytics(self, make_store, task_factory, clock):
        now = clock.now
        store, _ = make_store(
            [
                task_factory(1, completed=True, updated_at=now),
                task_factory(2, completed=True, updated_at=now - timedelta(days=3)),
                task_factory(3, completed=True, updated_at=now - timedelta(days=20)),
                task_factory(4, completed=True, updated_at=now - timedelta(days=45)),
                task_factory(5, completed=False, updated_at=now),
            ]
        )
        assert store.completed_today == 1
        assert store.completed_this_week == 2
        assert store.completed_this_month == 3

    def test_toggle_counts_as_completed_today(self, store):
        task = store.add("Now")
        store.toggle_completed(task.id)
        assert store.completed_today == 1

    def test_stats_snapshot(self, make_store, two_tasks):
        store, _ = make_store(two_tasks)
        stats = store.stats()
        assert stats.total == 2
        assert stats.filtered == 2
        assert stats.completed == 1
        assert stats.pending == 1
        assert stats.completion_percentage == 50
        assert stats.high_priority == 1
        assert stats.low_priority == 0

    def test_returned_tasks_are_copies(self, store):
        task = store.add("Original")
        copy = store.get_by_id(task.id)
        copy.title = "Changed"
        assert store.get_by_id(task.id).title == "Original"


# ---------------------------------------------------------------------------
# persistence behaviour
# ---------------------------------------------------------------------------


class TestPersistence:
    def test_every_mutation_saves(self, clock):
        repository = RecordingRepository()
        store = TaskStore(repository, clock=clock)
        task = store.add("a")
        store.update(task.id, {"title": "b"})
        store.toggle_completed(task.id)
        store.add_subtask(task.id, "sub")
        store.add_tag(task.id, "t")
        store.reorder([task.id])
        store.delete(task.id)
        assert len(repository.saves) == 7
        assert repository.saves[-1] == []

    def test_filter_changes_do_not_save(self, clock):
        repository = RecordingRepository()
        store = TaskStore(repository, clock=clock)
        store.set_filter({"status": "pending"})
        store.clear_filter()
        assert repository.saves == []

    def test_save_failure_keeps_mutation(self, clock):
        repository = RecordingRepository(fail=True)
        store = TaskStore(repository, clock=clock)
        task = store.add("Unsaved")
        assert store.get_by_id(task.id) is not None
        assert isinstance(store.last_persistence_error, PersistenceError)

    def test_successful_save_clears_error(self, clock):
        repository = RecordingRepository(fail=True)
        store = TaskStore(repository, clock=clock)
        store.add("first")
        repository.fail = False
        store.add("second")
        assert store.last_persistence_error is None

    def test_reload_sees_saved_tasks(self, store, adapter, clock):
        task = store.add("Durable", "high", tags=["x"], due_date=clock.now)
        reloaded = TaskStore(adapter, clock=clock)
        assert reloaded.all_tasks == [task]
