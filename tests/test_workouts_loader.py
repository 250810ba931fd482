"""
Tests for workout catalogs, the YAML loader and timing configuration.

User-override tests point HOME at a temporary directory so that
~/.hangboard-timer/ resolves inside it.
"""

import pytest

from hangboard_timer.core.config import TIMING_VARIANTS, TimingProfile, get_timing
from hangboard_timer.core.holds import WORKOUT_REGISTRY, get_workout, visible_workouts
from hangboard_timer.core.holds.base import HoldDefinition, WorkoutDefinition
from hangboard_timer.core.holds.loader import hold_from_dict, load_workouts_from_yaml, workout_from_dict


@pytest.fixture
def user_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    user_dir = tmp_path / ".hangboard-timer"
    (user_dir / "workouts").mkdir(parents=True)
    return user_dir


class TestBundledWorkouts:
    def test_registry_has_programs(self):
        assert {"a", "b", "test"} <= set(WORKOUT_REGISTRY)

    def test_workout_a(self):
        a = get_workout("a")
        assert len(a.holds) == 8
        assert a.holds[0].hold_id == "jug"
        assert a.holds[0].skip_progression
        edge = a.find_hold("large-edge")
        assert (edge.default_set1_weight, edge.default_set2_weight) == (5.0, 15.0)
        assert all(h.num_sets == 2 for h in a.holds)

    def test_workout_b_shapes(self):
        b = get_workout("b")
        assert b.find_hold("b-pullup").is_rest_only
        assert b.find_hold("b-chisel").num_sets == 3
        assert b.find_hold("b-big-open").num_sets == 1
        assert b.find_hold("b-jug").reps_per_set == 1
        assert b.find_hold("b-jug").hang_secs == 10

    def test_test_workout_shares_a(self):
        test = get_workout("test")
        a = get_workout("a")
        assert test.hidden
        assert test.weights_key == "a"
        assert test.timing == "quick"
        assert [h.hold_id for h in test.holds] == [h.hold_id for h in a.holds]
        assert all(h.reps_per_set == 2 and h.hang_secs == 2 for h in test.holds)

    def test_visible_workouts_hide_test(self):
        ids = [w.workout_id for w in visible_workouts()]
        assert "test" not in ids
        assert "a" in ids

    def test_unknown_workout(self):
        with pytest.raises(ValueError, match="Unknown workout") as excinfo:
            get_workout("zz")
        assert excinfo.value.__cause__ is None
        assert "a, " in str(excinfo.value)

    def test_hidden_workout_reachable_by_id(self):
        assert get_workout("test").hidden


class TestDefinitions:
    def test_num_sets_must_be_positive(self):
        with pytest.raises(ValueError):
            HoldDefinition(hold_id="x", name="X", num_sets=0)

    def test_negative_duration_rejected(self):
        with pytest.raises(ValueError):
            HoldDefinition(hold_id="x", name="X", break_secs=-1)

    def test_duplicate_hold_ids_rejected(self):
        h = HoldDefinition(hold_id="x", name="X")
        with pytest.raises(ValueError, match="duplicate"):
            WorkoutDefinition(workout_id="w", display_name="W", holds=(h, h))

    def test_empty_workout_rejected(self):
        with pytest.raises(ValueError):
            WorkoutDefinition(workout_id="w", display_name="W", holds=())

    def test_weights_key_defaults_to_id(self):
        w = WorkoutDefinition(workout_id="w", display_name="W", holds=(HoldDefinition(hold_id="x", name="X"),))
        assert w.weights_key == "w"

    def test_duration_overrides(self):
        timing = TIMING_VARIANTS["standard"]
        h = HoldDefinition(hold_id="x", name="X", hang_secs=10, break_secs=60)
        assert h.duration_for("hanging", timing) == 10
        assert h.duration_for("break", timing) == 60
        assert h.duration_for("prep", timing) == 10
        assert h.duration_for("resting", timing) == 3
        assert h.duration_for("done", timing) == 0


class TestLoaderParsing:
    def test_hold_requires_name(self):
        with pytest.raises(ValueError, match="name"):
            hold_from_dict({"id": "x"})

    def test_workout_requires_holds(self):
        with pytest.raises(ValueError, match="holds"):
            workout_from_dict({"workout_id": "w", "display_name": "W"})

    def test_hold_defaults_apply_to_every_hold(self):
        w = workout_from_dict({
            "workout_id": "w",
            "display_name": "W",
            "hold_defaults": {"break_secs": 5},
            "holds": [{"id": "x", "name": "X"}, {"id": "y", "name": "Y", "break_secs": 90}],
        })
        assert [h.break_secs for h in w.holds] == [5, 5]

    def test_optional_fields(self):
        h = hold_from_dict({"id": "x", "name": "X", "default_set1_weight": -2.5, "num_sets": 1, "reps_per_set": 3})
        assert h.default_set1_weight == -2.5
        assert h.num_sets == 1
        assert h.reps_per_set == 3
        assert h.prep_secs is None


class TestUserOverrides:
    def test_user_file_merges_over_bundled_header(self, user_home):
        (user_home / "workouts" / "a.yaml").write_text("display_name: My Repeaters\n")
        workouts = load_workouts_from_yaml()
        assert workouts["a"].display_name == "My Repeaters"
        assert len(workouts["a"].holds) == 8

    def test_user_holds_replace_bundled_list(self, user_home):
        (user_home / "workouts" / "a.yaml").write_text(
            "holds:\n  - {id: only, name: Only One, num_sets: 1}\n"
        )
        workouts = load_workouts_from_yaml()
        assert [h.hold_id for h in workouts["a"].holds] == ["only"]
        # the quick test copy follows program a
        assert [h.hold_id for h in workouts["test"].holds] == ["only"]

    def test_user_only_workout_is_loaded(self, user_home):
        (user_home / "workouts" / "mine.yaml").write_text(
            "workout_id: mine\ndisplay_name: Mine\nholds:\n  - {id: edge, name: Edge}\n"
        )
        assert "mine" in load_workouts_from_yaml()

    def test_invalid_user_workout_is_skipped_with_warning(self, user_home):
        (user_home / "workouts" / "broken.yaml").write_text("workout_id: broken\ndisplay_name: Broken\n")
        with pytest.warns(UserWarning, match="broken"):
            workouts = load_workouts_from_yaml()
        assert "broken" not in workouts
        assert "a" in workouts


class TestTiming:
    def test_standard(self):
        assert get_timing("standard") == TimingProfile(10, 7, 3, 180, 7, 6)

    def test_quick(self):
        assert get_timing("quick") == TimingProfile(3, 2, 1, 5, 2, 2)

    def test_unknown_variant(self):
        with pytest.raises(ValueError, match="Unknown timing variant"):
            get_timing("glacial")

    def test_user_override(self, user_home):
        (user_home / "timing.yaml").write_text("timing:\n  standard:\n    break_secs: 120\n")
        timing = get_timing("standard")
        assert timing.break_secs == 120
        assert timing.hang_secs == 7

    def test_user_defined_variant(self, user_home):
        (user_home / "timing.yaml").write_text(
            "timing:\n  endurance:\n"
            "    prep_secs: 5\n    hang_secs: 10\n    rest_secs: 5\n"
            "    break_secs: 240\n    set1_reps: 6\n    set2_reps: 6\n"
        )
        assert get_timing("endurance").hang_secs == 10

    def test_incomplete_user_variant(self, user_home):
        (user_home / "timing.yaml").write_text("timing:\n  half:\n    prep_secs: 5\n")
        with pytest.raises(ValueError, match="incomplete"):
            get_timing("half")

    def test_invalid_profile(self):
        with pytest.raises(ValueError):
            TimingProfile(prep_secs=1, hang_secs=1, rest_secs=1, break_secs=1, set1_reps=0, set2_reps=1)
