from math import isclose

import pytest

import kiai.example_data.beatmaps
from kiai import (
    Beatmap,
    Circle,
    GameMode,
    HoldNote,
    ParseFailure,
    Slider,
    Spinner,
    UnsupportedConversion,
)
from kiai.position import Position


@pytest.fixture
def beatmap():
    return kiai.example_data.beatmaps.standard()


def test_version(beatmap):
    assert beatmap.format_version == 14


def test_display_name(beatmap):
    assert beatmap.display_name == 'kiai - Standard Fixture [Normal]'


def test_parse_section_general(beatmap):
    assert beatmap.mode == GameMode.osu
    assert beatmap.stack_leniency == 0.7
    assert not beatmap.is_convert


def test_parse_section_metadata(beatmap):
    assert beatmap.title == 'Standard Fixture'
    assert beatmap.artist == 'kiai'
    assert beatmap.creator == 'kiai'
    assert beatmap.version == 'Normal'
    assert beatmap.beatmap_id == 0
    assert beatmap.beatmap_set_id == -1


def test_parse_section_difficulty(beatmap):
    assert beatmap.hp == 5
    assert beatmap.cs == 4
    assert beatmap.od == 8
    assert beatmap.ar == 9
    assert beatmap.slider_multiplier == 1.6
    assert beatmap.slider_tick_rate == 1


def test_parse_section_timing_points(beatmap):
    timing_points = beatmap.timing_points
    assert len(timing_points) == 3

    first, velocity, last = timing_points
    assert not first.inherited
    assert isclose(first.bpm, 180)
    assert velocity.inherited
    assert velocity.parent is first
    assert isclose(velocity.slider_velocity, 100 / 75)
    assert velocity.bpm is None
    assert last.kiai_mode


def test_parse_section_events(beatmap):
    assert beatmap.n_breaks == 1
    assert beatmap.breaks[0].start_time == 12000
    assert beatmap.breaks[0].end_time == 14500


def test_parse_section_hit_objects(beatmap):
    assert beatmap.n_circles == 40
    assert beatmap.n_sliders == 5
    assert beatmap.n_spinners == 1
    assert beatmap.n_holds == 0
    assert beatmap.n_objects == 46

    times = [ob.time for ob in beatmap.hit_objects]
    assert times == sorted(times)

    first = beatmap.hit_objects[0]
    assert isinstance(first, Circle)
    assert first.position == Position(64, 64)
    assert first.time == 0

    spinner = beatmap.hit_objects[-1]
    assert isinstance(spinner, Spinner)
    assert spinner.end_time == 19667


def test_slider(beatmap):
    slider = next(ob for ob in beatmap.hit_objects if isinstance(ob, Slider))
    assert slider.time == 4333
    assert slider.repeat == 1
    assert slider.end_time > slider.time


def test_bpm(beatmap):
    assert isclose(beatmap.bpm, 180)


def test_parse_missing_header():
    with pytest.raises(ParseFailure):
        Beatmap.parse('[General]\nMode: 0\n')


def test_parse_invalid_mode():
    with pytest.raises(ParseFailure):
        Beatmap.parse('osu file format v14\n\n[General]\nMode: 7\n')


def test_parse_malformed_hit_object():
    with pytest.raises(ParseFailure):
        Beatmap.parse(
            'osu file format v14\n\n[HitObjects]\n256,192\n',
        )


def test_parse_bad_bytes():
    with pytest.raises(ParseFailure):
        Beatmap.from_bytes(b'osu file format v14\n\xff\xfe\xfa')


def test_unknown_hit_object_type_is_skipped():
    beatmap = Beatmap.parse(
        'osu file format v14\n'
        '\n'
        '[HitObjects]\n'
        '256,192,100,1,0,0:0:0:0:\n'
        '256,192,200,0,0,0:0:0:0:\n',
    )
    assert beatmap.n_objects == 1


def test_defaults():
    beatmap = Beatmap.parse('osu file format v14\n')
    assert beatmap.mode == GameMode.osu
    assert beatmap.od == 5
    assert beatmap.ar == 5
    assert beatmap.n_objects == 0


def test_ar_defaults_to_od():
    beatmap = Beatmap.parse(
        'osu file format v14\n'
        '\n'
        '[Difficulty]\n'
        'OverallDifficulty:7\n',
    )
    assert beatmap.ar == 7


def test_convert_to_own_mode(beatmap):
    assert beatmap.convert(GameMode.osu) is beatmap


@pytest.mark.parametrize('mode', [
    GameMode.taiko,
    GameMode.catch,
    GameMode.mania,
])
def test_convert(beatmap, mode):
    converted = beatmap.convert(mode)
    assert converted.mode == mode
    assert converted.is_convert
    assert converted.n_objects > 0
    # the source is unchanged
    assert beatmap.mode == GameMode.osu
    assert not beatmap.is_convert


def test_convert_to_mania_with_key_mod(beatmap):
    converted = beatmap.convert('mania', '4K')
    assert converted.cs == 4
    assert all(
        isinstance(ob, (Circle, HoldNote)) for ob in converted.hit_objects
    )
    assert converted.n_holds == beatmap.n_sliders + beatmap.n_spinners


def test_unsupported_conversion():
    taiko = kiai.example_data.beatmaps.taiko()
    with pytest.raises(UnsupportedConversion) as e:
        taiko.convert(GameMode.osu)

    assert str(e.value) == 'Cannot convert taiko to osu'
    # unsupported conversions are type errors
    assert isinstance(e.value, TypeError)


@pytest.mark.parametrize('mode', list(GameMode))
def test_example_beatmaps(mode):
    beatmap = kiai.example_data.beatmaps.example_for_mode(mode)
    assert beatmap.mode == mode
    assert beatmap.n_objects > 0


def test_mania_example():
    beatmap = kiai.example_data.beatmaps.mania()
    assert beatmap.cs == 4
    assert beatmap.n_holds == 6
