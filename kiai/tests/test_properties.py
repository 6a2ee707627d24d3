from math import isfinite

from hypothesis import given, settings
from hypothesis.strategies import integers, sampled_from
import pytest

from kiai import Difficulty, GameMode, HoldNote, Performance, Spinner
from kiai.score_state import accuracy
from kiai.strategies import beatmaps, mods, score_states

# the calculators are slow enough to trip the default deadline
calculation_settings = settings(
    deadline=None,
    max_examples=25,
    report_multiple_bugs=False,
)


@given(beatmaps(min_objects=1), mods())
@calculation_settings
def test_gradual_matches_batch(beatmap, mods):
    difficulty = Difficulty(mods=mods)
    results = difficulty.gradual_difficulty(beatmap).collect()
    assert results

    batch = difficulty.calculate(beatmap)
    assert results[-1].stars == pytest.approx(batch.stars)
    assert results[-1].max_combo == batch.max_combo


@given(beatmaps(), mods())
@calculation_settings
def test_stars_are_finite(beatmap, mods):
    attributes = Difficulty(mods=mods).calculate(beatmap)
    assert isfinite(attributes.stars)
    assert attributes.stars >= 0
    assert attributes.max_combo >= 0


@given(beatmaps(min_objects=0, max_objects=0))
@calculation_settings
def test_no_objects_no_stars(beatmap):
    attributes = Difficulty().calculate(beatmap)
    assert attributes.stars == 0
    assert attributes.max_combo == 0


@given(beatmaps(min_objects=2), integers(0, 40))
@calculation_settings
def test_passed_objects_combo_grows(beatmap, passed):
    smaller = Difficulty(passed_objects=passed).calculate(beatmap)
    larger = Difficulty(passed_objects=passed + 1).calculate(beatmap)
    assert smaller.max_combo <= larger.max_combo


@given(beatmaps(min_objects=1), mods())
@calculation_settings
def test_pp_is_finite(beatmap, mods):
    performance = Performance(mods=mods).calculate(beatmap)
    assert isfinite(performance.pp)
    assert performance.pp >= 0


@given(sampled_from(list(GameMode)), score_states())
def test_accuracy_is_a_fraction(mode, state):
    value = accuracy(mode, state, lazer=False)
    assert 0 <= value <= 1


def shifted(ob, offset):
    if isinstance(ob, (HoldNote, Spinner)):
        return ob._with(time=ob.time + offset, end_time=ob.end_time + offset)
    return ob._with(time=ob.time + offset)


@given(
    sampled_from([GameMode.osu, GameMode.catch, GameMode.mania])
    .flatmap(lambda mode: beatmaps(mode, min_objects=1)),
)
@calculation_settings
def test_duplicated_timeline_is_not_easier(beatmap):
    # far enough apart that nothing stacks across the copies
    offset = max(ob.end_time for ob in beatmap.hit_objects) + 5000
    doubled = beatmap._with(
        hit_objects=list(beatmap.hit_objects) + [
            shifted(ob, offset) for ob in beatmap.hit_objects
        ],
    )
    original = Difficulty().calculate(beatmap)
    assert Difficulty().calculate(doubled).stars >= original.stars - 1e-9
