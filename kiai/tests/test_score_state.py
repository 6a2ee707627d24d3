from hypothesis import given
from hypothesis.strategies import data, floats, integers
import pytest

import kiai.example_data.beatmaps
from kiai import (
    Difficulty,
    GameMode,
    HitResultPriority,
    InconsistentState,
    ScoreState,
)
from kiai.score_state import accuracy, distribute, resolve


@pytest.fixture(scope='module')
def attributes():
    return {
        mode: Difficulty().calculate(
            kiai.example_data.beatmaps.example_for_mode(mode),
        )
        for mode in GameMode
    }


def test_score_state_defaults():
    state = ScoreState()
    assert all(value == 0 for value in state)
    assert state.total_hits(GameMode.osu) == 0


def test_score_state_negative():
    with pytest.raises(InconsistentState):
        ScoreState(n300=-1)


def test_score_state_from_dict():
    state = ScoreState.from_dict({'maxCombo': 10, 'nGeki': 2, 'n300': 5})
    assert state == ScoreState(max_combo=10, n_geki=2, n300=5)


def test_total_hits():
    state = ScoreState(n_geki=1, n_katu=2, n300=3, n100=4, n50=5, misses=6)
    assert state.total_hits(GameMode.osu) == 18
    assert state.total_hits(GameMode.taiko) == 13
    assert state.total_hits(GameMode.catch) == 20
    assert state.total_hits(GameMode.mania) == 21


@pytest.mark.parametrize('value,expected', [
    (None, HitResultPriority.best_case),
    ('BestCase', HitResultPriority.best_case),
    ('worstCase', HitResultPriority.worst_case),
    ('worst_case', HitResultPriority.worst_case),
    (HitResultPriority.worst_case, HitResultPriority.worst_case),
])
def test_priority_parse(value, expected):
    assert HitResultPriority.parse(value) is expected


def test_priority_parse_invalid():
    with pytest.raises(ValueError):
        HitResultPriority.parse('AverageCase')


def test_accuracy():
    assert accuracy(GameMode.osu, ScoreState()) == 0
    assert accuracy(GameMode.osu, ScoreState(n300=1, n100=1)) == 400 / 600
    assert accuracy(GameMode.taiko, ScoreState(n300=1, n100=1)) == 0.75
    assert accuracy(
        GameMode.catch,
        ScoreState(n300=2, n100=1, n50=1, n_katu=1, misses=1),
    ) == 4 / 6
    assert accuracy(
        GameMode.mania,
        ScoreState(n_geki=1, n300=1),
        lazer=False,
    ) == 1
    assert accuracy(GameMode.mania, ScoreState(n_geki=1, n300=1)) == (
        605 / 610
    )


def test_distribute():
    assert distribute([30, 10, 5], 4, 120, True) == ([4, 0, 0], 0)
    assert distribute([30, 10, 5], 4, 20, True) == ([0, 0, 4], 0)
    counts, error = distribute([30, 10, 5], 4, 60, True)
    assert error == 0
    assert counts == [1, 3, 0]

    counts, error = distribute([30, 10, 5], 4, 60, False)
    assert error == 0
    assert counts[0] <= 1
    assert sum(counts) == 4


def test_distribute_unreachable():
    counts, error = distribute([2, 1], 3, 5, True)
    assert counts == [2, 1]
    assert error == 0

    # the closest split to an odd target with even weights
    counts, error = distribute([60, 40], 1, 50, True)
    assert counts == [1, 0]
    assert error == 10


def test_resolve_perfect(attributes):
    osu = attributes[GameMode.osu]
    state = resolve(GameMode.osu, osu)
    assert state.n300 == osu.n_circles + osu.n_sliders + osu.n_spinners
    assert state.n100 == state.n50 == state.misses == 0
    assert state.max_combo == osu.max_combo
    assert state.slider_end_hits == osu.n_sliders
    assert state.large_tick_hits == osu.n_large_ticks


def test_resolve_misses_reduce_combo(attributes):
    osu = attributes[GameMode.osu]
    state = resolve(GameMode.osu, osu, misses=3)
    assert state.misses == 3
    assert state.max_combo == osu.max_combo - 3


def test_resolve_combo(attributes):
    osu = attributes[GameMode.osu]
    assert resolve(GameMode.osu, osu, combo=5).max_combo == 5
    with pytest.raises(InconsistentState):
        resolve(GameMode.osu, osu, combo=osu.max_combo + 1)


@pytest.mark.parametrize('mode', list(GameMode), ids=lambda mode: mode.name)
def test_resolve_too_many_misses(attributes, mode):
    with pytest.raises(InconsistentState):
        resolve(mode, attributes[mode], misses=10000)


def test_resolve_counts_exceed_objects(attributes):
    osu = attributes[GameMode.osu]
    with pytest.raises(InconsistentState):
        resolve(GameMode.osu, osu, n300=osu.n_circles, n100=osu.n_sliders,
                n50=osu.n_spinners + 1)


def test_resolve_counts_do_not_add_up(attributes):
    taiko = attributes[GameMode.taiko]
    with pytest.raises(InconsistentState):
        resolve(GameMode.taiko, taiko, n300=1, n100=1)


def test_resolve_explicit_counts(attributes):
    taiko = attributes[GameMode.taiko]
    state = resolve(GameMode.taiko, taiko, n100=3, misses=2)
    assert state.n100 == 3
    assert state.misses == 2
    assert state.n300 == taiko.max_combo - 5


def test_resolve_invalid_accuracy(attributes):
    with pytest.raises(InconsistentState):
        resolve(GameMode.osu, attributes[GameMode.osu], accuracy=101)
    with pytest.raises(InconsistentState):
        resolve(GameMode.osu, attributes[GameMode.osu], accuracy=-1)
    # a perfect accuracy is impossible with misses
    with pytest.raises(InconsistentState):
        resolve(GameMode.osu, attributes[GameMode.osu], accuracy=100,
                misses=5)


def test_resolve_negative_count(attributes):
    with pytest.raises(InconsistentState):
        resolve(GameMode.osu, attributes[GameMode.osu], n100=-1)


def test_resolve_priority(attributes):
    osu = attributes[GameMode.osu]
    best = resolve(GameMode.osu, osu, accuracy=90, lazer=False,
                   priority='BestCase')
    worst = resolve(GameMode.osu, osu, accuracy=90, lazer=False,
                    priority='WorstCase')
    assert best.n300 >= worst.n300
    assert best.n100 <= worst.n100
    assert accuracy(GameMode.osu, best) == pytest.approx(
        accuracy(GameMode.osu, worst),
        abs=0.005,
    )


def test_resolve_mania_stable_has_no_greats(attributes):
    mania = attributes[GameMode.mania]
    state = resolve(GameMode.mania, mania, lazer=False)
    assert state.n_geki == mania.n_objects
    assert state.n300 == 0


@pytest.mark.parametrize('target', [100, 99, 95, 90, 80, 60])
@pytest.mark.parametrize('lazer', [True, False])
def test_resolve_mania_accuracy(attributes, target, lazer):
    mania = attributes[GameMode.mania]
    state = resolve(GameMode.mania, mania, accuracy=target, lazer=lazer)
    assert state.total_hits(GameMode.mania) == mania.n_objects
    assert accuracy(GameMode.mania, state, lazer=lazer) == pytest.approx(
        target / 100,
        abs=0.005,
    )


def test_resolve_catch(attributes):
    catch = attributes[GameMode.catch]
    perfect = resolve(GameMode.catch, catch)
    assert perfect.n300 == catch.n_fruits
    assert perfect.n100 == catch.n_droplets
    assert perfect.n50 == catch.n_tiny_droplets
    assert perfect.n_katu == 0

    best = resolve(GameMode.catch, catch, misses=2)
    assert best.n300 == catch.n_fruits
    assert best.n100 == catch.n_droplets - 2
    worst = resolve(GameMode.catch, catch, misses=2, priority='worst_case')
    assert worst.n300 == catch.n_fruits - 2
    assert worst.n100 == catch.n_droplets

    state = resolve(GameMode.catch, catch, accuracy=98)
    assert state.n50 + state.n_katu == catch.n_tiny_droplets
    assert accuracy(GameMode.catch, state) == pytest.approx(0.98, abs=0.01)


def test_resolve_catch_inconsistent(attributes):
    catch = attributes[GameMode.catch]
    with pytest.raises(InconsistentState):
        resolve(GameMode.catch, catch, n300=catch.n_fruits + 1)
    with pytest.raises(InconsistentState):
        resolve(GameMode.catch, catch, n50=1, n_katu=catch.n_tiny_droplets)


@given(data())
def test_osu_stable_round_trip(attributes, data):
    osu = attributes[GameMode.osu]
    total = osu.n_circles + osu.n_sliders + osu.n_spinners
    misses = data.draw(integers(0, total))
    n50 = data.draw(integers(0, total - misses))
    n100 = data.draw(integers(0, total - misses - n50))
    n300 = total - misses - n50 - n100
    state = ScoreState(n300=n300, n100=n100, n50=n50, misses=misses)
    target = accuracy(GameMode.osu, state)

    for priority in HitResultPriority:
        resolved = resolve(
            GameMode.osu,
            osu,
            accuracy=target * 100,
            misses=misses,
            lazer=False,
            priority=priority,
        )
        assert resolved.misses == misses
        assert resolved.total_hits(GameMode.osu) == total
        assert accuracy(GameMode.osu, resolved) == pytest.approx(target)


@given(data())
def test_taiko_round_trip(attributes, data):
    taiko = attributes[GameMode.taiko]
    total = taiko.max_combo
    misses = data.draw(integers(0, total))
    n100 = data.draw(integers(0, total - misses))
    state = ScoreState(n300=total - misses - n100, n100=n100, misses=misses)

    resolved = resolve(
        GameMode.taiko,
        taiko,
        accuracy=accuracy(GameMode.taiko, state) * 100,
        misses=misses,
    )
    assert resolved.n300 == state.n300
    assert resolved.n100 == state.n100


@given(floats(0, 100))
def test_resolved_accuracy_is_close(attributes, target):
    osu = attributes[GameMode.osu]
    try:
        state = resolve(GameMode.osu, osu, accuracy=target, lazer=False)
    except InconsistentState:
        # only accuracies below an all-meh score are unreachable
        assert target < 100 / 6 + 0.1
        return
    assert accuracy(GameMode.osu, state) == pytest.approx(
        target / 100,
        abs=0.01,
    )


@pytest.mark.parametrize('mode', list(GameMode), ids=lambda mode: mode.name)
def test_perfect_score_ignores_priority(attributes, mode):
    difficulty = attributes[mode]
    states = [
        resolve(
            mode,
            difficulty,
            accuracy=100,
            misses=0,
            combo=difficulty.max_combo,
            priority=priority,
        )
        for priority in HitResultPriority
    ]
    assert states[0] == states[1]
    assert states[0].misses == 0
    assert states[0].max_combo == difficulty.max_combo
