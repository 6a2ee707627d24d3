from math import isclose

import pytest

import kiai.example_data.beatmaps
from kiai import Circle, Difficulty, Position, Spinner
from kiai.catch.objects import (
    HyperDashTracker,
    LegacyRandom,
    PalpableKind,
    PalpableObject,
    catch_width,
    palpable_objects,
)


def test_legacy_random_sequence():
    rng = LegacyRandom(1337)
    assert [rng.next_uint() for _ in range(3)] == [
        274941776,
        2661595948,
        3085529888,
    ]


def test_legacy_random_ranges():
    rng = LegacyRandom(42)
    for _ in range(1000):
        assert 0 <= rng.next() < 2 ** 31
        assert 0 <= rng.next_double() < 1
        assert -20 <= rng.next_range(-20, 20) < 20


def test_legacy_random_bools_share_a_draw():
    a = LegacyRandom(1337)
    b = LegacyRandom(1337)
    bits = [a.next_bool() for _ in range(32)]
    word = b.next_uint()
    assert bits == [bool(word >> n & 1) for n in range(32)]
    # the 33rd bool draws a new word
    a.next_bool()
    assert a.w == b.next_uint()


def circles(*points):
    return [Circle(Position(x, 192), time, 0) for x, time in points]


def test_fruits_keep_their_position():
    objects = palpable_objects(circles((100, 0), (110, 300)), False)
    assert [ob.x for ob in objects] == [100, 110]
    assert all(ob.kind is PalpableKind.fruit for ob in objects)


def test_hardrock_walk():
    # small movements are exaggerated
    objects = palpable_objects(circles((100, 0), (110, 300)), True)
    assert [ob.x for ob in objects] == [100, 120]


def test_hardrock_stack():
    objects = palpable_objects(circles((256, 0), (256, 100)), True)
    # the first roll goes left by 5 pixels with the client's seed
    assert [ob.x for ob in objects] == [256, 251]


def test_hardrock_long_gap():
    objects = palpable_objects(circles((100, 0), (100, 2000)), True)
    assert [ob.x for ob in objects] == [100, 100]


def test_banana_shower():
    spinner = Spinner(Position(256, 192), 1000, 0, 2000)
    bananas = palpable_objects([spinner], False)
    assert bananas
    assert all(ob.kind is PalpableKind.banana for ob in bananas)
    assert all(1000 <= ob.time <= 2000 for ob in bananas)
    assert all(0 <= ob.x <= 512 for ob in bananas)
    assert not any(ob.gives_combo for ob in bananas)

    times = [ob.time for ob in bananas]
    assert all(b - a <= 100 for a, b in zip(times, times[1:]))


def test_example_map_counts():
    beatmap = kiai.example_data.beatmaps.catch()
    objects = palpable_objects(beatmap.hit_objects, False)
    attributes = Difficulty().calculate(beatmap)

    def count(kind):
        return sum(ob.kind is kind for ob in objects)

    assert count(PalpableKind.fruit) == attributes.n_fruits
    assert count(PalpableKind.droplet) == attributes.n_droplets
    assert count(PalpableKind.tiny_droplet) == attributes.n_tiny_droplets
    assert count(PalpableKind.banana) > 0


def test_example_map_hardrock():
    beatmap = kiai.example_data.beatmaps.catch()
    plain = palpable_objects(beatmap.hit_objects, False)
    offset = palpable_objects(beatmap.hit_objects, True)

    assert [ob.kind for ob in plain] == [ob.kind for ob in offset]
    assert [ob.time for ob in plain] == [ob.time for ob in offset]
    assert [ob.x for ob in plain] != [ob.x for ob in offset]
    assert all(0 <= ob.x <= 512 for ob in offset)

    # the generator is seeded
    again = palpable_objects(beatmap.hit_objects, True)
    assert [ob.x for ob in again] == [ob.x for ob in offset]


def test_catch_width():
    assert isclose(catch_width(5), 106.75 * 0.8)
    assert catch_width(7) < catch_width(5) < catch_width(2)


def test_hyper_dash():
    tracker = HyperDashTracker(5)
    far = [
        PalpableObject(PalpableKind.fruit, 0, 0),
        PalpableObject(PalpableKind.fruit, 50, 512),
    ]
    for ob in far:
        tracker.feed(ob)
    assert far[0].hyper_dash
    assert not far[1].hyper_dash

    tracker = HyperDashTracker(5)
    near = [
        PalpableObject(PalpableKind.fruit, 0, 200),
        PalpableObject(PalpableKind.fruit, 500, 250),
    ]
    for ob in near:
        tracker.feed(ob)
    assert not near[0].hyper_dash
    assert near[0].distance_to_hyper_dash > 0


@pytest.mark.parametrize('x', [-50, 600])
def test_positions_are_clamped(x):
    ob = PalpableObject(PalpableKind.fruit, 0, x)
    assert 0 <= ob.x <= 512
