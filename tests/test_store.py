"""
Tests for the workout store, serializers and config loader.

Covers:
- WorkoutStore workouts, sets, templates and custom exercises
- Document validation and legacy document upgrade
- Compact set-string parsing
- YAML config loading and user overrides
"""

import json

import pytest

from liftlog.core.config import DEFAULT_NUM_SETS, MAX_SETS, MIN_SETS
from liftlog.core.engine import compute_personal_best
from liftlog.core.engine.config_loader import (
    configured_user_ids,
    default_data_dir,
    load_app_config,
    user_display_name,
)
from liftlog.core.models import WorkoutSet
from liftlog.io.serializers import (
    ValidationError,
    dict_to_workout,
    dict_to_workout_exercise,
    history_entry_to_dict,
    parse_sets_string,
    personal_best_to_dict,
    workout_to_dict,
)
from liftlog.io.workout_store import WorkoutStore


@pytest.fixture
def store(temp_data_dir):
    s = WorkoutStore(temp_data_dir, users=["tom", "tomer"])
    s.init()
    return s


# =============================================================================
# STORE: WORKOUTS
# =============================================================================


class TestWorkoutStore:
    """Workout lifecycle in the JSONL store."""

    def test_init_creates_files(self, temp_data_dir):
        s = WorkoutStore(temp_data_dir / "nested", users=["tom"])
        assert not s.exists()
        s.init()
        assert s.exists()
        assert s.templates_path.read_text().strip() == "[]"
        assert s.custom_exercises_path.exists()

    def test_load_without_init_raises(self, temp_data_dir):
        s = WorkoutStore(temp_data_dir / "missing", users=["tom"])
        with pytest.raises(FileNotFoundError):
            s.load_all()

    def test_create_and_get(self, store):
        w = store.create_workout("tom", "Push Day", date="2024-03-01")
        loaded = store.get_workout(w.id)
        assert loaded.workout_name == "Push Day"
        assert loaded.date == "2024-03-01"
        assert not loaded.is_completed
        assert loaded.created_at
        assert loaded.exercises == []

    def test_unknown_user_rejected(self, store):
        with pytest.raises(ValidationError):
            store.create_workout("alice", "Push Day")
        with pytest.raises(ValidationError):
            store.load_workouts("")

    def test_blank_name_rejected(self, store):
        with pytest.raises(ValidationError):
            store.create_workout("tom", "   ")

    def test_bad_date_rejected(self, store):
        with pytest.raises(ValidationError):
            store.create_workout("tom", "Push Day", date="2024-13-01")

    def test_get_unknown_raises_key_error(self, store):
        with pytest.raises(KeyError):
            store.get_workout("nope")
        with pytest.raises(KeyError):
            store.delete_workout("nope")

    def test_load_workouts_per_user_most_recent_first(self, store):
        store.create_workout("tom", "A", date="2024-03-01")
        store.create_workout("tom", "C", date="2024-03-05")
        store.create_workout("tomer", "B", date="2024-03-03")
        store.create_workout("tom", "D", date="2024-03-05")

        names = [w.workout_name for w in store.load_workouts("tom")]
        assert names[2] == "A"
        assert set(names[:2]) == {"C", "D"}
        assert [w.workout_name for w in store.load_workouts("tomer")] == ["B"]

    def test_same_day_workouts_ordered_by_creation(self, store):
        first = store.create_workout("tom", "Legs", date="2024-03-01")
        second = store.create_workout("tom", "Legs", date="2024-03-01")
        for w in (first, second):
            store.add_exercise(w.id, "squat")
            store.replace_sets(w.id, 0, parse_sets_string("3x10@80"))

        assert first.created_at != second.created_at
        assert store.load_workouts("tom")[0].id == second.id
        pb = compute_personal_best(store.load_workouts("tom"), "squat")
        assert pb.completed_workout_id == second.id

    def test_template_prefills_exercises(self, store):
        t = store.create_template("tom", "Push Day", ["bench-press", "overhead-press"])
        w = store.create_workout("tom", template=t, num_sets=4)
        assert w.workout_name == "Push Day"
        assert w.template_id == t.id
        assert [e.exercise_id for e in w.exercises] == ["bench-press", "overhead-press"]
        assert [e.order for e in w.exercises] == [1, 2]
        assert all(len(e.sets) == 4 and not any(s.has_data for s in e.sets) for e in w.exercises)

    def test_set_count_limits(self, store):
        w = store.create_workout("tom", "Legs")
        with pytest.raises(ValidationError):
            store.add_exercise(w.id, "squat", MIN_SETS - 1)
        with pytest.raises(ValidationError):
            store.add_exercise(w.id, "squat", MAX_SETS + 1)

    def test_log_sets_and_complete(self, store):
        w = store.create_workout("tom", "Legs", date="2024-03-01")
        store.add_exercise(w.id, "squat")
        store.replace_sets(w.id, 0, parse_sets_string("3x10@80"))
        store.complete_workout(w.id)

        loaded = store.get_workout(w.id)
        assert loaded.is_completed
        assert loaded.exercises[0].sets == [WorkoutSet(kg=80, reps=10)] * 3

        pb = compute_personal_best(store.load_workouts("tom"), "squat")
        assert pb.completed_kg == 80
        assert pb.recommended_kg == 82.5

    def test_update_single_set(self, store):
        w = store.create_workout("tom", "Legs")
        store.add_exercise(w.id, "squat")
        store.update_set(w.id, 0, 1, 60.0, 8)
        sets = store.get_workout(w.id).exercises[0].sets
        assert sets[1] == WorkoutSet(kg=60.0, reps=8)
        assert not sets[0].has_data

    def test_update_set_out_of_range(self, store):
        w = store.create_workout("tom", "Legs")
        store.add_exercise(w.id, "squat")
        with pytest.raises(IndexError):
            store.update_set(w.id, 0, DEFAULT_NUM_SETS, 60.0, 8)
        with pytest.raises(IndexError):
            store.update_set(w.id, 3, 0, 60.0, 8)

    def test_add_and_remove_sets_respect_limits(self, store):
        w = store.create_workout("tom", "Legs")
        store.add_exercise(w.id, "squat", num_sets=MAX_SETS)
        with pytest.raises(ValidationError):
            store.add_set(w.id, 0)

        for _ in range(MAX_SETS - MIN_SETS):
            store.remove_set(w.id, 0)
        assert len(store.get_workout(w.id).exercises[0].sets) == MIN_SETS
        with pytest.raises(ValidationError):
            store.remove_set(w.id, 0)

    def test_replace_sets_count_checked(self, store):
        w = store.create_workout("tom", "Legs")
        store.add_exercise(w.id, "squat")
        with pytest.raises(ValidationError):
            store.replace_sets(w.id, 0, parse_sets_string("80x10"))

    def test_remove_exercise_and_notes(self, store):
        w = store.create_workout("tom", "Legs")
        store.add_exercise(w.id, "squat")
        store.add_exercise(w.id, "deadlift")
        store.set_notes(w.id, 1, "belt on top set")
        store.remove_exercise(w.id, 0)

        exercises = store.get_workout(w.id).exercises
        assert [e.exercise_id for e in exercises] == ["deadlift"]
        assert exercises[0].notes == "belt on top set"
        assert exercises[0].order == 2

    def test_find_in_progress_and_reopen(self, store):
        w = store.create_workout("tom", "Legs", date="2024-03-01")
        assert store.find_in_progress("tom").id == w.id

        store.complete_workout(w.id)
        assert store.find_in_progress("tom") is None

        store.reopen_workout(w.id)
        assert store.find_in_progress("tom").id == w.id

    def test_save_bumps_updated_at_keeps_created_at(self, store):
        w = store.create_workout("tom", "Legs")
        w.workout_name = "Leg Day"
        w.created_at = "tampered"
        w.updated_at = ""
        saved = store.save_workout(w)
        assert saved.created_at != "tampered"
        assert saved.updated_at
        assert store.get_workout(w.id).workout_name == "Leg Day"

    def test_delete(self, store):
        w = store.create_workout("tom", "Legs")
        store.delete_workout(w.id)
        assert store.load_workouts("tom") == []

    def test_corrupt_line_reports_line_number(self, store):
        store.create_workout("tom", "Legs")
        with open(store.workouts_path, "a", encoding="utf-8") as f:
            f.write("{not json\n")
        with pytest.raises(ValidationError, match="line 2"):
            store.load_all()

    def test_one_document_per_line(self, store):
        store.create_workout("tom", "A")
        store.create_workout("tom", "B")
        lines = [l for l in store.workouts_path.read_text().splitlines() if l]
        assert len(lines) == 2
        assert json.loads(lines[0])["workoutName"] == "A"


# =============================================================================
# STORE: TEMPLATES AND CUSTOM EXERCISES
# =============================================================================


class TestTemplatesAndCustomExercises:
    """Templates and user-created exercises."""

    def test_template_crud(self, store):
        t = store.create_template("tom", "  Pull Day  ", ["lat-pulldown"])
        assert t.name == "Pull Day"
        assert store.get_template(t.id).exercise_ids == ["lat-pulldown"]

        store.update_template(t.id, name="Back Day", exercise_ids=["deadlift", "lat-pulldown"])
        updated = store.get_template(t.id)
        assert updated.name == "Back Day"
        assert updated.exercise_ids == ["deadlift", "lat-pulldown"]

        store.delete_template(t.id)
        assert store.load_templates("tom") == []
        with pytest.raises(KeyError):
            store.get_template(t.id)

    def test_templates_are_per_user(self, store):
        store.create_template("tom", "Push")
        store.create_template("tomer", "Legs")
        assert [t.name for t in store.load_templates("tomer")] == ["Legs"]

    def test_template_name_required(self, store):
        with pytest.raises(ValidationError):
            store.create_template("tom", "")
        t = store.create_template("tom", "Push")
        with pytest.raises(ValidationError):
            store.update_template(t.id, name=" ")

    def test_add_custom_exercise(self, store):
        ex = store.add_custom_exercise("tom", "Cable Row", ["pull", "upper-body"])
        assert ex.exercise_id == "custom-cable-row"
        assert ex.is_custom
        assert [e.exercise_id for e in store.load_custom_exercises("tom")] == ["custom-cable-row"]
        assert store.load_custom_exercises("tomer") == []

    def test_duplicate_custom_exercise_rejected(self, store):
        store.add_custom_exercise("tom", "Cable Row", ["pull"])
        with pytest.raises(ValidationError):
            store.add_custom_exercise("tom", "cable row", ["pull"])

    def test_same_custom_name_for_different_users(self, store):
        store.add_custom_exercise("tom", "Cable Row", ["pull"])
        store.add_custom_exercise("tomer", "Cable Row", ["pull"])
        for user in ("tom", "tomer"):
            assert [e.exercise_id for e in store.load_custom_exercises(user)] == [
                "custom-cable-row"
            ]

    def test_custom_exercise_validation(self, store):
        with pytest.raises(ValidationError):
            store.add_custom_exercise("tom", "Cable Row", [])
        with pytest.raises(ValidationError):
            store.add_custom_exercise("tom", "Cable Row", ["arms"])
        with pytest.raises(ValidationError):
            store.add_custom_exercise("tom", "!!!", ["pull"])


# =============================================================================
# SERIALIZERS
# =============================================================================


class TestSerializers:
    """Document conversion and legacy upgrade."""

    def _doc(self, **overrides) -> dict:
        doc = {
            "id": "w1",
            "userId": "tom",
            "workoutName": "Push Day",
            "date": "2024-03-01",
            "exercises": [
                {
                    "id": "e1",
                    "exerciseId": "bench-press",
                    "order": 1,
                    "sets": [{"kg": 50, "reps": 10}, {"kg": None, "reps": None}],
                    "notes": "",
                    "photos": [],
                }
            ],
            "isCompleted": True,
            "createdAt": "2024-03-01T10:00:00",
            "updatedAt": "2024-03-01T11:00:00",
        }
        doc.update(overrides)
        return doc

    def test_workout_dict_keys(self):
        workout = dict_to_workout(self._doc())
        d = workout_to_dict(workout)
        assert d["exercises"][0]["exerciseId"] == "bench-press"
        assert d["exercises"][0]["sets"][1] == {"kg": None, "reps": None}
        assert d["isCompleted"] is True
        assert "templateId" not in d

    def test_underscore_id_accepted(self):
        doc = self._doc()
        doc["_id"] = doc.pop("id")
        assert dict_to_workout(doc).id == "w1"

    def test_negative_values_rejected(self):
        doc = self._doc()
        doc["exercises"][0]["sets"][0]["kg"] = -5
        with pytest.raises(ValidationError):
            dict_to_workout(doc)

    def test_non_numeric_reps_rejected(self):
        doc = self._doc()
        doc["exercises"][0]["sets"][0]["reps"] = "ten"
        with pytest.raises(ValidationError):
            dict_to_workout(doc)

    def test_bad_date_rejected(self):
        with pytest.raises(ValidationError):
            dict_to_workout(self._doc(date="01/03/2024"))

    def test_missing_user_rejected(self):
        with pytest.raises(ValidationError):
            dict_to_workout(self._doc(userId=None))

    @pytest.mark.parametrize("value", ["false", 1, None])
    def test_non_boolean_completed_rejected(self, value):
        with pytest.raises(ValidationError):
            dict_to_workout(self._doc(isCompleted=value))

    def test_legacy_flat_fields_upgraded(self):
        ex = dict_to_workout_exercise(
            {"exerciseId": "squat", "scaleKg": 80, "set1Reps": 10, "set2Reps": 9, "set3Reps": None},
            position=2,
        )
        assert ex.order == 2
        assert ex.id == "ex-2"
        assert ex.sets == [
            WorkoutSet(kg=80, reps=10),
            WorkoutSet(kg=80, reps=9),
            WorkoutSet(kg=80, reps=None),
        ]

    def test_legacy_without_fields_gets_empty_sets(self):
        ex = dict_to_workout_exercise({"exerciseId": "squat"})
        assert ex.sets == [WorkoutSet()] * DEFAULT_NUM_SETS

    def test_legacy_workout_type_name(self):
        doc = self._doc(workoutType="push")
        del doc["workoutName"]
        assert dict_to_workout(doc).workout_name == "Tom's Push Day"

    def test_personal_best_json_shape(self):
        workout = dict_to_workout(self._doc())
        pb = compute_personal_best([workout], "bench-press")
        d = personal_best_to_dict(pb)
        assert d["exerciseId"] == "bench-press"
        assert d["completedKg"] == 50
        assert d["completedReps"] == [10]
        assert d["recommendedKg"] == 52.5

    def test_history_entry_json_shape(self):
        from liftlog.core.engine import compute_exercise_history

        workout = dict_to_workout(self._doc())
        d = history_entry_to_dict(compute_exercise_history([workout], "bench-press")[0])
        assert d["isPB"] is True
        assert d["isCompleted"] is True
        assert d["workoutId"] == "w1"


class TestParseSetsString:
    """Compact set-string parsing."""

    def test_single_sets(self):
        assert parse_sets_string("50x10, 50x12, 52.5x9") == [
            WorkoutSet(kg=50, reps=10),
            WorkoutSet(kg=50, reps=12),
            WorkoutSet(kg=52.5, reps=9),
        ]

    def test_unit_and_spaces(self):
        assert parse_sets_string("52.5kg x 9") == [WorkoutSet(kg=52.5, reps=9)]

    def test_repeat_form(self):
        assert parse_sets_string("3x10@50") == [WorkoutSet(kg=50, reps=10)] * 3

    def test_missing_values(self):
        assert parse_sets_string("-x10, 50x-") == [
            WorkoutSet(kg=None, reps=10),
            WorkoutSet(kg=50, reps=None),
        ]

    @pytest.mark.parametrize("bad", ["", " , ", "fifty x ten", "50", "0x10@50"])
    def test_invalid(self, bad):
        with pytest.raises(ValidationError):
            parse_sets_string(bad)


# =============================================================================
# CONFIG
# =============================================================================


class TestConfigLoader:
    """Bundled liftlog.yaml merged with the user's config.yaml."""

    def test_bundled_defaults(self):
        cfg = load_app_config()
        assert configured_user_ids(cfg) == ["tom", "tomer"]
        assert cfg["default_num_sets"] == DEFAULT_NUM_SETS
        assert user_display_name("tomer", cfg) == "Tomer"
        assert user_display_name("sam", cfg) == "Sam"

    def test_user_override(self, liftlog_home):
        (liftlog_home / "config.yaml").write_text(
            "users:\n  - id: sam\n    name: Sam\ndefault_num_sets: 4\n"
        )
        cfg = load_app_config()
        assert configured_user_ids(cfg) == ["sam"]
        assert cfg["default_num_sets"] == 4

    def test_set_count_clamped(self, liftlog_home):
        (liftlog_home / "config.yaml").write_text("default_num_sets: 12\n")
        assert load_app_config()["default_num_sets"] == MAX_SETS

    def test_broken_user_file_warns(self, liftlog_home):
        (liftlog_home / "config.yaml").write_text("users: [unclosed\n")
        with pytest.warns(UserWarning):
            cfg = load_app_config()
        assert configured_user_ids(cfg) == ["tom", "tomer"]

    def test_data_dir_defaults_to_home(self, liftlog_home):
        assert default_data_dir() == liftlog_home

    def test_store_uses_configured_users(self, liftlog_home, temp_data_dir):
        (liftlog_home / "config.yaml").write_text("users:\n  - id: sam\n    name: Sam\n")
        s = WorkoutStore(temp_data_dir)
        s.init()
        s.create_workout("sam", "Push")
        with pytest.raises(ValidationError):
            s.create_workout("tom", "Push")
