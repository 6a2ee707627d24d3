import json

import pytest

import kiai.example_data.beatmaps
from kiai import (
    Beatmap,
    Difficulty,
    GameMode,
    InvalidModifier,
    InvalidRange,
)
from kiai.catch import CatchDifficultyAttributes
from kiai.mania import ManiaDifficultyAttributes
from kiai.osu import OsuDifficultyAttributes
from kiai.taiko import TaikoDifficultyAttributes


@pytest.fixture(params=list(GameMode), ids=lambda mode: mode.name)
def beatmap(request):
    return kiai.example_data.beatmaps.example_for_mode(request.param)


def empty(mode):
    return Beatmap.parse(
        f'osu file format v14\n\n[General]\nMode: {int(mode)}\n',
    )


def test_positive_stars(beatmap):
    attributes = Difficulty().calculate(beatmap)
    assert attributes.mode == beatmap.mode
    assert attributes.stars > 0
    assert not attributes.is_convert
    assert attributes.max_combo > 0


@pytest.mark.parametrize('mode', list(GameMode), ids=lambda mode: mode.name)
def test_empty_beatmap(mode):
    attributes = Difficulty().calculate(empty(mode))
    assert attributes.stars == 0
    assert attributes.max_combo == 0


def test_no_passed_objects(beatmap):
    attributes = Difficulty(passed_objects=0).calculate(beatmap)
    full = Difficulty().calculate(beatmap)
    assert attributes.stars == 0
    assert attributes.max_combo == 0
    assert type(attributes) is type(full)


def test_single_standard_object():
    beatmap = kiai.example_data.beatmaps.standard()
    attributes = Difficulty(passed_objects=1).calculate(beatmap)
    assert attributes.aim == 0
    assert attributes.speed == 0
    assert attributes.stars == 0
    assert attributes.max_combo > 0


def test_passed_objects(beatmap):
    full = Difficulty().calculate(beatmap)
    partial = Difficulty(passed_objects=10).calculate(beatmap)
    assert partial.max_combo < full.max_combo
    assert partial.stars <= full.stars

    everything = Difficulty(passed_objects=10000).calculate(beatmap)
    assert everything == full


def test_negative_passed_objects():
    with pytest.raises(ValueError):
        Difficulty(passed_objects=-1)


def test_speed_mods_raise_stars():
    beatmap = kiai.example_data.beatmaps.standard()
    nomod = Difficulty().calculate(beatmap).stars
    assert Difficulty(mods='DT').calculate(beatmap).stars > nomod
    assert Difficulty(mods='HT').calculate(beatmap).stars < nomod
    assert Difficulty(clock_rate=1.5).calculate(beatmap).stars == (
        Difficulty(mods='DT').calculate(beatmap).stars
    )


def test_osu_attributes():
    beatmap = kiai.example_data.beatmaps.standard()
    attributes = Difficulty().calculate(beatmap)
    assert isinstance(attributes, OsuDifficultyAttributes)
    assert attributes.n_circles == beatmap.n_circles
    assert attributes.n_sliders == beatmap.n_sliders
    assert attributes.n_spinners == beatmap.n_spinners
    # every slider has a head and a tail, and this map has repeats
    assert attributes.max_combo > beatmap.n_objects + beatmap.n_sliders
    assert attributes.aim > 0
    assert attributes.speed > 0
    assert attributes.flashlight == 0
    assert attributes.slider_factor > 0
    assert attributes.great_hit_window < attributes.ok_hit_window
    assert attributes.ok_hit_window < attributes.meh_hit_window


def test_osu_flashlight():
    beatmap = kiai.example_data.beatmaps.standard()
    attributes = Difficulty(mods='FL').calculate(beatmap)
    assert attributes.flashlight > 0
    assert attributes.stars > Difficulty().calculate(beatmap).stars


def test_taiko_attributes():
    beatmap = kiai.example_data.beatmaps.taiko()
    attributes = Difficulty().calculate(beatmap)
    assert isinstance(attributes, TaikoDifficultyAttributes)
    assert attributes.max_combo == beatmap.n_circles
    assert attributes.stamina > 0
    assert attributes.rhythm >= 0
    assert attributes.color >= 0
    assert attributes.great_hit_window < attributes.ok_hit_window


def test_catch_attributes():
    beatmap = kiai.example_data.beatmaps.catch()
    attributes = Difficulty().calculate(beatmap)
    assert isinstance(attributes, CatchDifficultyAttributes)
    # circles and the head and tail of every slider are fruits
    assert attributes.n_fruits >= beatmap.n_circles + 2 * beatmap.n_sliders
    assert attributes.n_droplets > 0
    assert attributes.n_tiny_droplets > 0
    assert attributes.max_combo == (
        attributes.n_fruits + attributes.n_droplets
    )


def test_catch_hardrock_offsets():
    beatmap = kiai.example_data.beatmaps.catch()
    plain = Difficulty().calculate(beatmap)
    offset = Difficulty(hardrock_offsets=True).calculate(beatmap)
    assert offset.n_fruits == plain.n_fruits
    assert offset.stars != plain.stars

    # hard rock offsets fruits unless told otherwise
    hard_rock = Difficulty(mods='HR').calculate(beatmap)
    no_offsets = Difficulty(
        mods='HR',
        hardrock_offsets=False,
    ).calculate(beatmap)
    assert hard_rock.stars != no_offsets.stars


def test_mania_attributes():
    beatmap = kiai.example_data.beatmaps.mania()
    attributes = Difficulty().calculate(beatmap)
    assert isinstance(attributes, ManiaDifficultyAttributes)
    assert attributes.n_objects == beatmap.n_objects
    assert attributes.n_hold_notes == beatmap.n_holds
    assert attributes.max_combo == beatmap.n_objects + beatmap.n_holds


@pytest.mark.parametrize('mode', [
    GameMode.taiko,
    GameMode.catch,
    GameMode.mania,
])
def test_converts(mode):
    beatmap = kiai.example_data.beatmaps.standard().convert(mode)
    attributes = Difficulty().calculate(beatmap)
    assert attributes.mode == mode
    assert attributes.is_convert
    assert attributes.stars > 0


def test_strains(beatmap):
    strains = Difficulty().strains(beatmap)
    assert strains.mode == beatmap.mode
    assert strains.section_length > 0

    series = [
        value for name, value in strains._asdict().items()
        if name not in ('mode', 'section_length')
    ]
    assert series
    lengths = {len(values) for values in series}
    assert len(lengths) == 1
    assert all(peak >= 0 for values in series for peak in values)

    # the map spans at least as many sections as the strain series
    last = max(ob.end_time for ob in beatmap.hit_objects)
    assert lengths.pop() <= last / strains.section_length + 2


def test_from_dict():
    beatmap = kiai.example_data.beatmaps.standard()
    difficulty = Difficulty.from_dict({
        'mods': 'HR',
        'passedObjects': 20,
        'arWithMods': True,
        'ar': 9,
    })
    assert difficulty.passed_objects == 20
    assert difficulty.overrides.ar_with_mods
    assert difficulty.calculate(beatmap) == Difficulty(
        mods='HR',
        passed_objects=20,
        ar=9,
        ar_with_mods=True,
    ).calculate(beatmap)


def test_unknown_option():
    with pytest.raises(TypeError):
        Difficulty(approach_rate=9)
    with pytest.raises(TypeError):
        Difficulty.from_dict({'passedObject': 1})


def test_invalid_options():
    with pytest.raises(InvalidModifier):
        Difficulty(mods='ZZ')
    with pytest.raises(InvalidRange):
        Difficulty(clock_rate=1000)
    with pytest.raises(InvalidRange):
        Difficulty(od=30)


def test_results_serialize(beatmap):
    attributes = Difficulty().calculate(beatmap)
    as_dict = attributes.to_dict()
    assert as_dict['mode'] == int(beatmap.mode)
    assert json.loads(attributes.to_json()) == as_dict
    assert str(attributes).startswith(type(attributes).__name__)
    assert 'stars=' in str(attributes)

    strains = Difficulty().strains(beatmap)
    assert json.loads(strains.to_json()) == strains.to_dict()
