from math import isclose

from hypothesis import given
from hypothesis.strategies import floats, sampled_from
import pytest

import kiai.example_data.beatmaps
from kiai import (
    BeatmapAttributesBuilder,
    GameMode,
    InvalidModifier,
    InvalidRange,
    ModifierSet,
)
from kiai.attributes import hit_windows


def build(**kwargs):
    return BeatmapAttributesBuilder(**kwargs).build()


def test_defaults_without_beatmap():
    attributes = build()
    assert attributes.mode == GameMode.osu
    assert isclose(attributes.ar, 5)
    assert isclose(attributes.od, 5)
    assert attributes.cs == 5
    assert attributes.hp == 5
    assert attributes.clock_rate == 1

    windows = attributes.hit_windows
    assert isclose(windows.ar, 1200)
    assert isclose(windows.od_great, 50)
    assert isclose(windows.od_ok, 100)
    assert isclose(windows.od_meh, 150)


def test_beatmap_attributes():
    beatmap = kiai.example_data.beatmaps.standard()
    attributes = build(beatmap=beatmap)
    assert isclose(attributes.ar, 9)
    assert isclose(attributes.od, 8)
    assert attributes.cs == 4
    assert attributes.hp == 5


def test_hard_rock():
    attributes = build(mods='HR', ar=8, cs=4, od=8, hp=5)
    assert isclose(attributes.ar, 10)
    assert isclose(attributes.od, 10)
    assert isclose(attributes.cs, 5.2)
    assert isclose(attributes.hp, 7)


def test_easy():
    attributes = build(mods='EZ', ar=8, cs=4, od=8, hp=5)
    assert isclose(attributes.ar, 4)
    assert isclose(attributes.od, 4)
    assert isclose(attributes.cs, 2)
    assert isclose(attributes.hp, 2.5)


def test_double_time():
    attributes = build(mods='DT', ar=9, od=8)
    assert attributes.clock_rate == 1.5
    # 600ms of preempt at 1.5x is 400ms, which is AR 10.33
    assert isclose(attributes.hit_windows.ar, 400)
    assert isclose(attributes.ar, 31 / 3)
    assert attributes.od > 8


def test_clock_rate_override():
    attributes = build(mods='DT', clock_rate=1.0, ar=9)
    assert attributes.clock_rate == 1.0
    assert isclose(attributes.ar, 9)


def test_override_with_mods():
    attributes = build(mods='HR', ar=9.5, ar_with_mods=True, od=3)
    assert isclose(attributes.ar, 9.5)
    assert isclose(attributes.od, 4.2)


def test_overrides_above_ten():
    assert isclose(build(ar=11).ar, 11)
    assert isclose(build(ar=11, ar_with_mods=True).ar, 11)
    assert isclose(build(mods='EZ', ar=11).ar, 5.5)

    # only hard rock is capped
    assert isclose(build(mods='HR', ar=9).ar, 10)

    mods = {'acronym': 'DA', 'settings': {'approach_rate': 11}}
    assert isclose(build(mods=mods).ar, 11)


def test_difficulty_adjust():
    mods = {'acronym': 'DA', 'settings': {'overall_difficulty': 2}}
    attributes = build(mods=mods, od=8)
    # explicit overrides win over difficulty adjust
    assert isclose(attributes.od, 8)
    assert isclose(build(mods=mods).od, 2)


def test_convert_mode():
    beatmap = kiai.example_data.beatmaps.standard()
    builder = BeatmapAttributesBuilder(beatmap=beatmap, mode='taiko')
    assert builder.mode == GameMode.taiko
    assert builder.beatmap.mode == GameMode.taiko
    windows = builder.build().hit_windows
    assert windows.od_meh is None


def test_mania_windows():
    plain = build(mode='mania', od=8)
    assert isclose(plain.hit_windows.od_great, 40)
    assert plain.hit_windows.od_ok is None

    hard_rock = build(mode='mania', od=8, mods='HR')
    assert isclose(hard_rock.hit_windows.od_great, 40 / 1.4)
    easy = build(mode='mania', od=8, mods='EZ')
    assert isclose(easy.hit_windows.od_great, 56)


@pytest.mark.parametrize('kwargs', [
    {'ar': 21},
    {'cs': -21},
    {'hp': 20.5},
    {'od': -100},
    {'clock_rate': 0},
    {'clock_rate': 101},
])
def test_invalid_range(kwargs):
    with pytest.raises(InvalidRange):
        build(**kwargs)


def test_invalid_range_attributes():
    with pytest.raises(InvalidRange) as e:
        build(ar=25)

    assert e.value.name == 'ar'
    assert e.value.value == 25
    assert (e.value.lower, e.value.upper) == (-20, 20)


def test_invalid_speed_change():
    with pytest.raises(InvalidRange):
        build(mods={'acronym': 'DT', 'settings': {'speed_change': 200}})


def test_invalid_mods():
    with pytest.raises(InvalidModifier):
        build(mods='ZZ')


def test_from_dict():
    attributes = BeatmapAttributesBuilder.from_dict({
        'mods': 'DT',
        'clockRate': 1.2,
        'arWithMods': True,
        'ar': 9,
        'od': None,
    }).build()
    assert attributes.clock_rate == 1.2
    assert isclose(attributes.hit_windows.ar, 600 / 1.2)


def test_from_dict_unknown_option():
    with pytest.raises(TypeError):
        BeatmapAttributesBuilder.from_dict({'approachRate': 9})


def test_to_dict():
    attributes = build(mods='HR')
    as_dict = attributes.to_dict()
    assert as_dict['mode'] == 0
    assert set(as_dict['hit_windows']) == {'ar', 'od_great', 'od_ok', 'od_meh'}
    assert str(attributes).startswith('BeatmapAttributes(')


modes = sampled_from(list(GameMode))
difficulties = floats(-20, 20)
clock_rates = floats(0.01, 100)


@given(modes, difficulties, difficulties, clock_rates)
def test_hit_windows_are_not_negative(mode, ar, od, clock_rate):
    windows = hit_windows(mode, ar, od, ModifierSet(), clock_rate)
    for window in windows:
        assert window is None or window >= 0


@given(modes, difficulties, difficulties, clock_rates)
def test_hit_windows_do_not_grow_with_od(mode, od, delta, clock_rate):
    higher = min(od + abs(delta), 20)
    mods = ModifierSet()
    low = hit_windows(mode, 5, od, mods, clock_rate)
    high = hit_windows(mode, 5, higher, mods, clock_rate)
    assert high.od_great <= low.od_great + 1e-9
    if low.od_ok is not None:
        assert high.od_ok <= low.od_ok + 1e-9
    if low.od_meh is not None:
        assert high.od_meh <= low.od_meh + 1e-9
