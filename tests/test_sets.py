"""
Tests for first-set progression and within-session set generation.

Reference calibration: 100 kg x 8 -> 1RM 126.2467.  Heavy rep_max is 15,
so the week-0 target is 52% = 65.648, rounded prefer-down to 65 on a
2.5 kg ladder; week-0 reps are 15 - 4 = 11.
"""

import pytest

from meso_scheduler.core.equipment import generate_weight_options
from meso_scheduler.core.errors import ConfigurationError
from meso_scheduler.core.models import Calibration, Exercise
from meso_scheduler.core.sets import SetTarget, first_set_target, generate_sets

BARBELL = generate_weight_options(20, 2.5, 200)
HEAVY = (5, 15)


def _exercise(progression: str = "Rep", rep_range: str = "Heavy") -> Exercise:
    return Exercise(
        exercise_id="bench",
        name="Bench press",
        equipment_id="bar",
        rep_range=rep_range,  # type: ignore[arg-type]
        primary_muscle_groups=["chest"],
        preferred_progression=progression,  # type: ignore[arg-type]
    )


def _calibration(weight: float = 100, reps: int = 8) -> Calibration:
    return Calibration(calibration_id="cal", exercise_id="bench", weight=weight, reps=reps)


# ===========================================================================
# First-set progression
# ===========================================================================


class TestRepProgression:
    """+2 reps a week; at the top of the window, next weight and reset."""

    @pytest.mark.parametrize(
        "week, expected",
        [(0, (11, 65)), (1, (13, 65)), (2, (15, 65)), (3, (11, 67.5)), (4, (13, 67.5))],
    )
    def test_weekly_sequence(self, week, expected):
        assert first_set_target(_exercise("Rep"), _calibration(), BARBELL, week) == expected

    def test_top_of_ladder_caps_reps(self):
        options = [40, 50, 60]
        results = [first_set_target(_exercise("Rep"), _calibration(), options, w) for w in range(4)]
        assert results == [(11, 60), (13, 60), (15, 60), (15, 60)]

    def test_lighter_rep_range_uses_its_window(self):
        # Light: rep_max 30 -> pct 85%, 126.2467 * 0.85 = 107.31 -> 107.5 is
        # above target, so prefer-down gives 105
        reps, weight = first_set_target(_exercise("Rep", "Light"), _calibration(), BARBELL, 0)
        assert reps == 26
        assert weight == 105


class TestLoadProgression:
    """Weight rises to max(next legal weight, legal weight at +2%)."""

    @pytest.mark.parametrize(
        "week, expected",
        [(0, (11, 65)), (1, (11, 67.5)), (2, (11, 70)), (3, (11, 72.5))],
    )
    def test_single_increment_dominates_on_coarse_ladder(self, week, expected):
        assert first_set_target(_exercise("Load"), _calibration(), BARBELL, week) == expected

    def test_two_percent_dominates_on_fine_ladder(self):
        options = generate_weight_options(50, 0.5, 100)
        # 65.648 -> 65.5; 65.5 * 1.02 = 66.81 -> 67.0 beats 66.0
        assert first_set_target(_exercise("Load"), _calibration(), options, 0) == (11, 65.5)
        assert first_set_target(_exercise("Load"), _calibration(), options, 1) == (11, 67.0)

    def test_top_of_ladder_adds_reps(self):
        options = [40, 50, 60]
        results = [first_set_target(_exercise("Load"), _calibration(), options, w) for w in range(4)]
        assert results == [(11, 60), (13, 60), (15, 60), (15, 60)]


class TestFirstSetErrors:
    def test_empty_ladder_raises(self):
        with pytest.raises(ConfigurationError):
            first_set_target(_exercise(), _calibration(), [], 0)

    def test_all_options_above_target_rounds_up(self):
        assert first_set_target(_exercise(), _calibration(), [70, 80], 0) == (11, 70)


# ===========================================================================
# Within-session sets
# ===========================================================================


class TestGenerateSets:
    """Each set drops 2 reps; below rep_min the weight drops instead."""

    def test_rep_drop(self):
        sets = generate_sets(11, 65, 4, HEAVY, BARBELL, 3)
        assert sets == [
            SetTarget(11, 65, 3),
            SetTarget(9, 65, 3),
            SetTarget(7, 65, 3),
            SetTarget(5, 65, 3),
        ]

    def test_weight_drop_below_rep_min(self):
        sets = generate_sets(11, 65, 6, HEAVY, BARBELL, 2)
        # 65 / 1.02 = 63.73 -> 62.5; 62.5 / 1.02 = 61.27 -> 60
        assert [(s.reps, s.weight) for s in sets] == [
            (11, 65), (9, 65), (7, 65), (5, 65), (5, 62.5), (5, 60),
        ]

    def test_no_lighter_weight_holds_reps_at_min(self):
        sets = generate_sets(11, 65, 6, HEAVY, [65], 1)
        assert [(s.reps, s.weight) for s in sets] == [
            (11, 65), (9, 65), (7, 65), (5, 65), (5, 65), (5, 65),
        ]

    def test_weights_are_legal(self):
        sets = generate_sets(15, 100, 8, HEAVY, BARBELL, 0)
        assert all(s.weight in BARBELL for s in sets)
        assert all(s.reps >= 5 for s in sets)

    def test_zero_sets(self):
        assert generate_sets(11, 65, 0, HEAVY, BARBELL, 3) == []


class TestDeloadSets:
    """Deload halves reps; the second half of the week also halves weight."""

    def test_first_half_keeps_weight(self):
        sets = generate_sets(
            15, 70, 3, HEAVY, BARBELL, 0,
            is_deload=True, session_index=0, sessions_per_week=2,
        )
        # 15 // 2 = 7, then 5; 3 < 5 -> 70 / 1.02 = 68.63 -> 67.5
        assert [(s.reps, s.weight) for s in sets] == [(7, 70), (5, 70), (5, 67.5)]
        assert all(s.rir is None for s in sets)

    def test_second_half_halves_weight(self):
        sets = generate_sets(
            15, 70, 2, HEAVY, BARBELL, 0,
            is_deload=True, session_index=1, sessions_per_week=2,
        )
        assert [(s.reps, s.weight) for s in sets] == [(7, 35), (5, 35)]

    @pytest.mark.parametrize("session_index, halved", [(0, False), (1, True), (2, True)])
    def test_odd_session_count_split(self, session_index, halved):
        sets = generate_sets(
            13, 80, 1, HEAVY, BARBELL, 1,
            is_deload=True, session_index=session_index, sessions_per_week=3,
        )
        assert sets[0].reps == 6
        assert sets[0].weight == (40 if halved else 80)

    def test_halved_weight_rounds_down_onto_ladder(self):
        # floor(67.5 / 2) = 33 -> 32.5
        sets = generate_sets(
            11, 67.5, 1, HEAVY, BARBELL, None,
            is_deload=True, session_index=1, sessions_per_week=2,
        )
        assert sets[0].weight == 32.5
