from math import isclose

from hypothesis import given
from hypothesis.strategies import floats, sampled_from
import pytest

from kiai.utils import (
    difficulty_range,
    inverse_difficulty_range,
    lazyval,
    logistic,
    no_default,
    options_from_dict,
    reverse_lerp,
    snake_case,
)


def test_lazyval():
    calls = []

    class C:
        @lazyval
        def value(self):
            calls.append(1)
            return 5

    c = C()
    assert c.value == 5
    assert c.value == 5
    assert len(calls) == 1

    c.value = 3
    assert c.value == 3


def test_no_default():
    with pytest.raises(TypeError):
        no_default()


def test_reverse_lerp():
    assert reverse_lerp(5, 0, 10) == 0.5
    assert reverse_lerp(-5, 0, 10) == 0
    assert reverse_lerp(15, 0, 10) == 1


def test_logistic():
    assert logistic(3, 3, 1) == 0.5
    assert logistic(3, 3, 1, max_value=4) == 2
    # large exponents do not overflow
    assert logistic(-1000, 0, 1) == 0


def test_difficulty_range():
    assert difficulty_range(0, 1800, 1200, 450) == 1800
    assert difficulty_range(5, 1800, 1200, 450) == 1200
    assert difficulty_range(10, 1800, 1200, 450) == 450
    assert isclose(difficulty_range(11, 1800, 1200, 450), 300)


ranges = sampled_from([
    (1800, 1200, 450),
    (80, 50, 20),
    (200, 140, 80),
])


@given(floats(-20, 20), ranges)
def test_inverse_difficulty_range(difficulty, bounds):
    value = difficulty_range(difficulty, *bounds)
    assert isclose(
        inverse_difficulty_range(value, *bounds),
        difficulty,
        abs_tol=1e-9,
    )


@pytest.mark.parametrize('name,expected', [
    ('ar', 'ar'),
    ('arWithMods', 'ar_with_mods'),
    ('nGeki', 'n_geki'),
    ('n300', 'n300'),
    ('WorstCase', 'worst_case'),
    ('passed_objects', 'passed_objects'),
])
def test_snake_case(name, expected):
    assert snake_case(name) == expected


def test_options_from_dict():
    assert options_from_dict({
        'clockRate': 1.5,
        'od': None,
        'nMisses': 2,
    }, {'n_misses': 'misses'}) == {'clock_rate': 1.5, 'misses': 2}
