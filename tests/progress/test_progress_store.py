import json

import pytest

from src.gameplan.gameplan.attendance.model import AttendanceRecord
from src.gameplan.gameplan.core.exceptions import ValidationError
from src.gameplan.gameplan.progress.model import TaskItem
from src.gameplan.gameplan.progress.store import FileKeyValueStore, ProgressStore, file_store_factory, store_file_name


def test_empty_store_loads_defaults(tmp_path):
    store = ProgressStore(FileKeyValueStore(tmp_path / "s1.json"))

    state = store.load_state()

    assert state.tasks == {"Exercise": [], "Practice": []}
    assert state.attendance == {}
    assert state.streak.streak == 0
    assert state.streak.last_saved_date == ""


def test_values_survive_a_new_store_instance(tmp_path):
    path = tmp_path / "s1.json"
    first = ProgressStore(FileKeyValueStore(path))
    first.save_tasks({"Exercise": [TaskItem(id=1, name="Sprints", completed=True)], "Practice": []})
    first.save_attendance({"2025-01-01": AttendanceRecord("2025-01-01", True, "2025-01-01T09:00:00+00:00")})
    first.save_streak(4)
    first.save_last_saved_date("2025-01-01")

    second = ProgressStore(FileKeyValueStore(path)).load_state()

    assert second.tasks["Exercise"] == [TaskItem(id=1, name="Sprints", completed=True)]
    assert second.attendance["2025-01-01"].timestamp == "2025-01-01T09:00:00+00:00"
    assert second.streak.streak == 4
    assert second.streak.last_saved_date == "2025-01-01"


def test_keys_are_stored_as_strings(tmp_path):
    path = tmp_path / "s1.json"
    store = ProgressStore(FileKeyValueStore(path))
    store.save_streak(2)
    store.save_attendance({"2025-01-01": AttendanceRecord("2025-01-01")})

    raw = json.loads(path.read_text(encoding="utf-8"))

    assert raw["streak"] == "2"
    assert json.loads(raw["attendanceDates"]) == {"2025-01-01": {"marked": True}}


def test_corrupt_file_is_reported(tmp_path):
    path = tmp_path / "s1.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValidationError):
        ProgressStore(FileKeyValueStore(path)).load_state()


@pytest.mark.parametrize("content", ["[1, 2]", "\"text\"", "42"])
def test_non_object_file_is_reported_and_left_alone(tmp_path, content):
    path = tmp_path / "s1.json"
    path.write_text(content, encoding="utf-8")
    store = ProgressStore(FileKeyValueStore(path))

    with pytest.raises(ValidationError):
        store.load_state()
    with pytest.raises(ValidationError):
        store.save_streak(3)

    assert path.read_text(encoding="utf-8") == content


@pytest.mark.parametrize(
    "key, value",
    [
        ("tasks", "[]"),
        ("tasks", json.dumps({"Exercise": "Sprints"})),
        ("tasks", json.dumps({"Exercise": ["Sprints"]})),
        ("attendanceDates", json.dumps({"2025-01-01": True})),
        ("attendanceDates", "[\"2025-01-01\"]"),
    ],
)
def test_malformed_values_are_reported(tmp_path, key, value):
    path = tmp_path / "s1.json"
    path.write_text(json.dumps({key: value}), encoding="utf-8")

    with pytest.raises(ValidationError):
        ProgressStore(FileKeyValueStore(path)).load_state()


def test_profile_cache_round_trip(tmp_path):
    store = ProgressStore(FileKeyValueStore(tmp_path / "t1.json"))
    assert store.load_trainer_data() == {}

    store.save_trainer_data({"name": "Coach", "trainerID": "t1"})
    store.save_student_data({"name": "Alex"})

    assert store.load_trainer_data() == {"name": "Coach", "trainerID": "t1"}
    assert store.load_student_data() == {"name": "Alex"}


def test_factory_keeps_users_apart(tmp_path):
    factory = file_store_factory(tmp_path)
    factory("s1").save_streak(3)

    assert factory("s2").load_streak().streak == 0
    assert factory("s1").load_streak().streak == 3
    assert factory("../escape").load_streak().streak == 0
    assert not (tmp_path.parent / "escape.json").exists()


def test_similar_uids_get_their_own_files(tmp_path):
    factory = file_store_factory(tmp_path)
    factory("a.b").save_streak(1)
    factory("a_b").save_streak(2)

    assert store_file_name("a.b") != store_file_name("a_b")
    assert factory("a.b").load_streak().streak == 1
    assert factory("a_b").load_streak().streak == 2
    assert len(list(tmp_path.glob("*.json"))) == 2
