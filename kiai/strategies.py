"""Hypothesis strategies for property tests.
"""
from itertools import accumulate

from hypothesis.strategies import (
    booleans,
    composite,
    floats as _floats,
    integers,
    just,
    lists,
    one_of,
    sampled_from,
)

from kiai import (
    Beatmap,
    Circle,
    GameMode,
    HoldNote,
    Position,
    ScoreState,
    Spinner,
    TimingPoint,
)


def floats(*args, **kwargs):
    return _floats(*args, allow_nan=False, allow_infinity=False, **kwargs)


@composite
def positions(draw):
    return Position(
        x=draw(integers(0, Position.x_max)),
        y=draw(integers(0, Position.y_max)),
    )


def timing_points():
    return lists(
        floats(200, 1000).map(
            lambda ms_per_beat: TimingPoint(
                offset=0,
                ms_per_beat=ms_per_beat,
                meter=4,
                parent=None,
                kiai_mode=False,
            ),
        ),
        min_size=1,
        max_size=1,
    )


@composite
def _times(draw, min_size, max_size):
    # strictly increasing, at least 10ms apart
    gaps = draw(lists(
        integers(10, 1000),
        min_size=min_size,
        max_size=max_size,
    ))
    return list(accumulate(gaps))


@composite
def _hit_object(draw, mode, time):
    position = draw(positions())
    hitsound = draw(sampled_from([0, 2, 8]))
    if mode == GameMode.mania:
        if draw(booleans()):
            return HoldNote(
                position,
                time,
                hitsound,
                time + draw(integers(30, 500)),
            )
        return Circle(position, time, hitsound)

    # spinners are rare and only at the end of a short window
    if draw(integers(0, 19)) == 0:
        return Spinner(position, time, hitsound, time + 5)
    return Circle(position, time, hitsound)


@composite
def beatmaps(draw, mode=None, *, min_objects=0, max_objects=40):
    """Beatmaps of circles and spinners, or notes and hold notes in
    osu!mania.

    Parameters
    ----------
    mode : GameMode, optional
        The mode of the beatmaps. Drawn when not given.
    min_objects, max_objects : int, optional
        The bounds on the number of hit objects.
    """
    if mode is None:
        mode = draw(sampled_from(list(GameMode)))

    times = draw(_times(min_objects, max_objects))
    hit_objects = []
    for time in times:
        ob = draw(_hit_object(mode, time))
        # keep objects from overlapping in time
        if hit_objects and hit_objects[-1].end_time >= time:
            ob = Circle(ob.position, time, ob.hitsound)
        hit_objects.append(ob)

    if mode == GameMode.mania:
        cs = float(draw(integers(1, 10)))
    else:
        cs = draw(floats(0, 10))

    return Beatmap(
        format_version=14,
        mode=mode,
        stack_leniency=draw(floats(0.2, 1)),
        title='hypothesis',
        artist='hypothesis',
        creator='hypothesis',
        version=f'{mode.name}',
        beatmap_id=None,
        beatmap_set_id=None,
        hp=draw(floats(0, 10)),
        cs=cs,
        od=draw(floats(0, 10)),
        ar=draw(floats(0, 10)),
        slider_multiplier=1.4,
        slider_tick_rate=1.0,
        timing_points=draw(timing_points()),
        hit_objects=hit_objects,
        breaks=[],
    )


def mods():
    """Mod combinations which are valid together.
    """
    return one_of(
        just(''),
        sampled_from(['HD', 'HR', 'DT', 'HT', 'EZ', 'FL', 'NC', 'NF']),
        sampled_from(['HDHR', 'HDDT', 'HRDT', 'EZHT', 'HDFL', 'HDHRDT']),
    )


@composite
def score_states(draw, max_hits=100):
    """Arbitrary, not necessarily consistent, score states.
    """
    count = integers(0, max_hits)
    return ScoreState(
        max_combo=draw(count),
        n_geki=draw(count),
        n_katu=draw(count),
        n300=draw(count),
        n100=draw(count),
        n50=draw(count),
        misses=draw(count),
    )
