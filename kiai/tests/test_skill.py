from math import isclose

from hypothesis import given
from hypothesis.strategies import floats, integers, lists
import pytest

from kiai import Circle, Position
from kiai.osu.skills import OsuStrainSkill
from kiai.skill import DifficultyObject, StrainDecaySkill, weighted_sum

peaks = lists(floats(0, 1000), max_size=50)


def test_weighted_sum():
    assert weighted_sum([], 0.9) == 0
    assert weighted_sum([1.0], 0.9) == 1.0
    assert isclose(weighted_sum([1.0, 2.0, 3.0], 0.9), 3 + 2 * 0.9 + 0.81)


@given(peaks)
def test_weighted_sum_ignores_zero_sections(values):
    assert weighted_sum(values + [0.0, 0.0], 0.9) == weighted_sum(values, 0.9)


@given(peaks, floats(0, 1000))
def test_weighted_sum_grows_with_peaks(values, extra):
    base = weighted_sum(values, 0.9)
    assert weighted_sum(values + [extra], 0.9) >= base - 1e-9


@given(peaks)
def test_weighted_sum_is_order_independent(values):
    assert isclose(
        weighted_sum(values, 0.9),
        weighted_sum(list(reversed(values)), 0.9),
        abs_tol=1e-9,
    )


class Constant(StrainDecaySkill):
    """Every object adds one unit of strain which halves every second.
    """
    strain_decay_base = 0.5

    def strain_value_of(self, current):
        return 1.0


def make_objects(times, clock_rate=1.0):
    hit_objects = [Circle(Position(0, 0), time, 0) for time in times]
    objects = []
    for ix in range(1, len(hit_objects)):
        objects.append(DifficultyObject(
            hit_objects[ix],
            hit_objects[ix - 1],
            clock_rate,
            objects,
            len(objects),
        ))
    return objects


def test_difficulty_object():
    a, b, c = make_objects([0, 100, 300, 600], clock_rate=2.0)
    assert b.start_time == 150
    assert b.delta_time == 100
    assert b.previous(0) is a
    assert b.previous(1) is None
    assert c.previous(1) is a


def test_sections():
    skill = Constant()
    for ob in make_objects([0, 100, 500, 1300]):
        skill.process(ob)

    # sections end at 400, 800 and 1200; the last is still open
    peaks = skill.current_strain_peaks()
    assert len(peaks) == 4
    assert peaks[0] == 1.0
    assert peaks[1] == pytest.approx(1 + 0.5 ** 0.4)
    # the empty section holds the decayed strain at its start
    assert peaks[2] == pytest.approx((1 + 0.5 ** 0.4) * 0.5 ** 0.3)
    assert len(skill.object_strains) == 3


def test_difficulty_value_matches_weighted_sum():
    skill = Constant()
    for ob in make_objects(range(0, 5000, 50)):
        skill.process(ob)

    assert skill.difficulty_value() == weighted_sum(
        skill.current_strain_peaks(),
        skill.decay_weight,
    )


def test_count_top_weighted_strains():
    skill = Constant()
    assert skill.count_top_weighted_strains(0.0) == 0.0

    for ob in make_objects(range(0, 1000, 100)):
        skill.process(ob)

    n = len(skill.object_strains)
    assert skill.count_top_weighted_strains(0.0) == n
    count = skill.count_top_weighted_strains(skill.difficulty_value())
    assert 0 < count <= 1.1 * n


def reduced_value(values):
    skill = OsuStrainSkill()
    skill.strain_peaks = list(values)
    return skill.difficulty_value()


def test_reduced_sections():
    assert reduced_value([]) == 0
    # the hardest section is scaled by the baseline
    assert isclose(reduced_value([100.0]), 75.0)
    # past the reduced sections only the decay applies
    assert reduced_value([100.0] * 20) > reduced_value([100.0] * 10)


@given(lists(floats(0, 1000), min_size=1, max_size=50),
       integers(0, 49),
       floats(0, 1000))
def test_reduced_sections_grow_with_a_peak(values, ix, extra):
    base = reduced_value(values)
    raised = list(values)
    raised[ix % len(values)] += extra
    assert reduced_value(raised) >= base - 1e-9 * max(1.0, base)


@given(peaks, floats(0, 1000))
def test_reduced_sections_grow_with_a_section(values, extra):
    base = reduced_value(values)
    assert reduced_value(values + [extra]) >= base - 1e-9 * max(1.0, base)
