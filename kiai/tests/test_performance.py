import json

import pytest

import kiai.example_data.beatmaps
from kiai import Difficulty, GameMode, InconsistentState, Performance
from kiai.osu import OsuPerformanceAttributes
from kiai.performance import performance_attributes
from kiai.score_state import accuracy


@pytest.fixture(params=list(GameMode), ids=lambda mode: mode.name)
def beatmap(request):
    return kiai.example_data.beatmaps.example_for_mode(request.param)


def test_positive_pp(beatmap):
    performance = Performance().calculate(beatmap)
    assert performance.mode == beatmap.mode
    assert performance.pp > 0
    assert performance.difficulty == Difficulty().calculate(beatmap)


def test_misses_lower_pp(beatmap):
    perfect = Performance().calculate(beatmap).pp
    assert Performance(misses=2).calculate(beatmap).pp < perfect


def test_accuracy_lowers_pp(beatmap):
    perfect = Performance(accuracy=100).calculate(beatmap).pp
    assert Performance(accuracy=90).calculate(beatmap).pp < perfect


def test_from_difficulty_attributes(beatmap):
    difficulty = Difficulty(mods='HD').calculate(beatmap)
    performance = Performance(mods='HD', misses=1, accuracy=97)
    assert performance.calculate(difficulty) == performance.calculate(beatmap)


def test_reuse_performance_attributes(beatmap):
    performance = Performance(accuracy=98).calculate(beatmap)
    again = Performance(accuracy=95).calculate(performance)
    assert again.difficulty == performance.difficulty
    assert again.pp < performance.pp


def test_unknown_source():
    with pytest.raises(TypeError):
        Performance().calculate('not a beatmap')


def test_unknown_option():
    with pytest.raises(TypeError):
        Performance(n_300=5)
    with pytest.raises(TypeError):
        Performance.from_dict({'nMiss': 1})


def test_from_dict():
    beatmap = kiai.example_data.beatmaps.standard()
    performance = Performance.from_dict({
        'mods': 'HDDT',
        'accuracy': 90,
        'nMisses': 2,
        'combo': None,
        'hitresultPriority': 'WorstCase',
        'passedObjects': 30,
    })
    assert performance.counts['misses'] == 2
    assert performance.calculate(beatmap) == Performance(
        mods='HDDT',
        accuracy=90,
        misses=2,
        hitresult_priority='worst_case',
        passed_objects=30,
    ).calculate(beatmap)


def test_inconsistent_state():
    beatmap = kiai.example_data.beatmaps.standard()
    with pytest.raises(InconsistentState):
        Performance(misses=beatmap.n_objects + 1).calculate(beatmap)
    with pytest.raises(InconsistentState):
        Performance(combo=100000).calculate(beatmap)


def test_osu_attributes():
    beatmap = kiai.example_data.beatmaps.standard()
    performance = Performance(accuracy=99).calculate(beatmap)
    assert isinstance(performance, OsuPerformanceAttributes)
    assert performance.pp_aim > 0
    assert performance.pp_speed > 0
    assert performance.pp_acc > 0
    assert performance.pp_flashlight == 0
    assert performance.effective_miss_count == 0
    assert performance.speed_deviation is not None

    flashlight = Performance(mods='FL', accuracy=99).calculate(beatmap)
    assert flashlight.pp_flashlight > 0


def test_osu_combo_breaks():
    beatmap = kiai.example_data.beatmaps.standard()
    full = Performance(accuracy=97, lazer=False).calculate(beatmap)
    broken = Performance(
        accuracy=97,
        combo=full.difficulty.max_combo // 2,
        lazer=False,
    ).calculate(beatmap)
    assert full.effective_miss_count == 0
    assert broken.effective_miss_count > 0
    assert broken.pp < full.pp


def test_osu_lazer_and_stable():
    beatmap = kiai.example_data.beatmaps.standard()
    lazer = Performance(accuracy=95).calculate(beatmap)
    stable = Performance(accuracy=95, lazer=False).calculate(beatmap)
    assert lazer.pp > 0
    assert stable.pp > 0
    # each score reaches the accuracy in its own judgement system
    assert accuracy(
        GameMode.osu,
        lazer.state,
        lazer.difficulty,
    ) == pytest.approx(0.95, abs=0.005)
    assert accuracy(
        GameMode.osu,
        stable.state,
        lazer=False,
    ) == pytest.approx(0.95, abs=0.005)


def test_no_objects_is_zero():
    beatmap = kiai.example_data.beatmaps.standard()
    performance = Performance(passed_objects=0).calculate(beatmap)
    assert performance.pp == 0


def test_performance_attributes_function():
    beatmap = kiai.example_data.beatmaps.taiko()
    calculator = Performance(misses=3)
    difficulty = calculator.difficulty.calculate(beatmap)
    state = calculator.state(difficulty)
    assert performance_attributes(
        difficulty,
        calculator.mods,
        state,
    ) == calculator.calculate(difficulty)


def test_speed_mods_raise_pp():
    beatmap = kiai.example_data.beatmaps.standard()
    nomod = Performance().calculate(beatmap).pp
    assert Performance(mods='DT').calculate(beatmap).pp > nomod
    assert Performance(mods='HT').calculate(beatmap).pp < nomod


def test_results_serialize(beatmap):
    performance = Performance(misses=1).calculate(beatmap)
    as_dict = performance.to_dict()
    assert as_dict['mode'] == int(beatmap.mode)
    assert as_dict['difficulty'] == performance.difficulty.to_dict()
    assert json.loads(performance.to_json()) == as_dict
    assert str(performance).startswith(type(performance).__name__)
    assert 'pp=' in str(performance)
