from collections import Counter, namedtuple
import inspect
import logging
import math
import re

import numpy as np

from .curve import Curve
from .errors import ParseFailure, UnsupportedConversion
from .game_mode import GameMode
from .mod import ModifierSet, circle_radius
from .position import Position, distance
from .utils import clamp, lazyval, no_default

log = logging.getLogger(__name__)

# beat length used before the first timing point or when a map has none
DEFAULT_BEAT_LENGTH = 1000.0

# maps before v5 were played with this audio offset
_legacy_offset = 24


def _get(cs, ix, default=no_default):
    try:
        return cs[ix]
    except IndexError:
        if default is no_default:
            raise
        return default


def _number(value, name, cast=float):
    """Parse a numeric field of a ``.osu`` line.

    Raises
    ------
    ParseFailure
        Raised when ``value`` is not a finite number.
    """
    try:
        parsed = float(value)
    except ValueError:
        raise ParseFailure(
            f'{name} should be a{"n int" if cast is int else " float"},'
            f' got {value!r}',
        )

    if not math.isfinite(parsed):
        raise ParseFailure(f'{name} should be finite, got {value!r}')

    return cast(parsed)


class TimingPoint:
    """A timing point assigns properties to an offset into a beatmap.

    Parameters
    ----------
    offset : float
        When this ``TimingPoint`` takes effect in milliseconds.
    ms_per_beat : float
        The milliseconds per beat, this is another representation of BPM.
        Inherited timing points store the negative inverse slider velocity
        percentage here.
    meter : int
        The number of beats per measure.
    parent : TimingPoint or None
        The parent of an inherited timing point. If this is not an inherited
        timing point the parent should be ``None``.
    kiai_mode : bool
        Whether or not kiai time effects are active.
    """
    def __init__(self, offset, ms_per_beat, meter, parent, kiai_mode):
        self.offset = offset
        self.ms_per_beat = ms_per_beat
        self.meter = meter
        self.parent = parent
        self.kiai_mode = kiai_mode

    @property
    def inherited(self):
        return self.parent is not None

    @property
    def beat_length(self):
        """The effective milliseconds per beat at this timing point.
        """
        ms_per_beat = (
            self.parent.ms_per_beat if self.inherited else self.ms_per_beat
        )
        if math.isnan(ms_per_beat):
            return DEFAULT_BEAT_LENGTH
        return clamp(ms_per_beat, 6, 60000)

    @property
    def slider_velocity(self):
        """The slider velocity multiplier set by this timing point.
        """
        if not self.inherited or self.ms_per_beat >= 0:
            return 1.0
        return clamp(-100 / self.ms_per_beat, 0.1, 10)

    @lazyval
    def bpm(self):
        """The bpm of this timing point.

        If this is an inherited timing point this value will be None.
        """
        if self.inherited:
            return None
        return 60000 / self.beat_length

    def __repr__(self):
        if self.inherited:
            inherited = 'inherited '
        else:
            inherited = ''
        return f'<{type(self).__qualname__}: {inherited}{self.offset:g}ms>'

    @classmethod
    def parse(cls, data, parent, format_version=14):
        """Parse a TimingPoint object from a line in a ``.osu`` file.

        Parameters
        ----------
        data : str
            The line to parse.
        parent : TimingPoint
            The last non-inherited timing point.
        format_version : int, optional
            The version of the file the line comes from.

        Returns
        -------
        timing_point : TimingPoint
            The parsed timing point.

        Raises
        ------
        ParseFailure
            Raised when ``data`` does not describe a ``TimingPoint`` object.
        """
        try:
            offset, ms_per_beat, *rest = data.split(',')
        except ValueError:
            raise ParseFailure(
                f'failed to parse {cls.__qualname__} from {data!r}',
            )

        offset = _number(offset, 'offset')
        if format_version < 5:
            offset += _legacy_offset

        try:
            ms_per_beat = float(ms_per_beat)
        except ValueError:
            raise ParseFailure(
                f'ms_per_beat should be a float, got {ms_per_beat!r}',
            )

        meter = _number(_get(rest, 0, '4'), 'meter', int)
        uninherited = bool(_number(_get(rest, 4, '1'), 'uninherited', int))
        kiai_mode = bool(_number(_get(rest, 5, '0'), 'effects', int) & 1)

        inherited = not uninherited or ms_per_beat < 0
        if inherited and parent is None:
            # an inherited point before any timing; osu! treats it as a
            # velocity change over the default beat length
            parent = cls(offset, DEFAULT_BEAT_LENGTH, meter, None, False)

        return cls(
            offset=offset,
            ms_per_beat=ms_per_beat,
            meter=meter,
            parent=parent if inherited else None,
            kiai_mode=kiai_mode,
        )


class HitObject:
    """An abstract hit element.

    Parameters
    ----------
    position : Position
        Where this element appears on the screen.
    time : float
        When this element appears in the map in milliseconds.
    hitsound : int
        The hitsound to play when this object is hit.
    addition : str, optional
        The hit sample string.
    """
    type_code = None

    def __init__(self, position, time, hitsound, addition='0:0:0:0:'):
        self.position = position
        self.time = time
        self.hitsound = hitsound
        self.addition = addition

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.position}, {self.time:g}ms>'

    @property
    def duration(self):
        return self.end_time - self.time

    def _with(self, **changes):
        kwargs = {
            name: changes.get(name, getattr(self, name))
            for name in inspect.signature(type(self)).parameters
        }
        return type(self)(**kwargs)

    def flip_vertical(self):
        """The ``HitObject`` as it would appear with hard rock enabled.
        """
        return self._with(position=self.position.flip_vertical())

    @property
    def is_kat(self):
        """Would this object be a kat (blue) note in osu!taiko.
        """
        return bool(self.hitsound & (2 | 8))

    @classmethod
    def parse(cls,
              data,
              timing_points,
              slider_multiplier,
              slider_tick_rate,
              format_version=14):
        """Parse a HitObject object from a line in a ``.osu`` file.

        Parameters
        ----------
        data : str
            The line to parse.
        timing_points : list[TimingPoint]
            The timing points in the map.
        slider_multiplier : float
            The slider multiplier for computing slider velocity.
        slider_tick_rate : float
            The slider tick rate for computing slider ticks.
        format_version : int, optional
            The version of the file the line comes from.

        Returns
        -------
        hit_object : HitObject or None
            The parsed hit object. This will be the concrete subclass given
            the type. ``None`` is returned for unknown object types.

        Raises
        ------
        ParseFailure
            Raised when ``data`` does not describe a ``HitObject`` object.
        """
        try:
            x, y, time, type_, hitsound, *rest = data.split(',')
        except ValueError:
            raise ParseFailure(f'not enough elements in line, got {data!r}')

        position = Position(_number(x, 'x', int), _number(y, 'y', int))
        time = _number(time, 'time')
        if format_version < 5:
            time += _legacy_offset
        type_ = _number(type_, 'type', int)
        hitsound = _number(hitsound, 'hitsound', int)

        if type_ & Circle.type_code:
            return Circle._parse(position, time, hitsound, rest)
        if type_ & Slider.type_code:
            return Slider._parse(
                position,
                time,
                hitsound,
                rest,
                timing_points=timing_points,
                slider_multiplier=slider_multiplier,
                slider_tick_rate=slider_tick_rate,
                format_version=format_version,
            )
        if type_ & Spinner.type_code:
            return Spinner._parse(
                position,
                time,
                hitsound,
                rest,
                format_version,
            )
        if type_ & HoldNote.type_code:
            return HoldNote._parse(position, time, hitsound, rest)

        log.warning('skipping hit object with unknown type %r', type_)
        return None


class Circle(HitObject):
    """A circle hit element.

    In osu!taiko this is a don or kat, in osu!catch a fruit and in osu!mania
    a single note.
    """
    type_code = 1

    @property
    def end_time(self):
        return self.time

    @classmethod
    def _parse(cls, position, time, hitsound, rest):
        if len(rest) > 1:
            raise ParseFailure(f'extra data: {rest!r}')

        return cls(position, time, hitsound, *rest)


class Spinner(HitObject):
    """A spinner hit element.

    Parameters
    ----------
    position : Position
        Where this spinner appears on the screen.
    time : float
        When this spinner starts in milliseconds.
    hitsound : int
        The hitsound of the spinner.
    end_time : float
        When this spinner ends in milliseconds.
    addition : str
        Hitsound additions.
    """
    type_code = 8

    def __init__(self,
                 position,
                 time,
                 hitsound,
                 end_time,
                 addition='0:0:0:0:'):
        super().__init__(position, time, hitsound, addition)
        self.end_time = max(end_time, time)

    @classmethod
    def _parse(cls, position, time, hitsound, rest, format_version=14):
        try:
            end_time, *rest = rest
        except ValueError:
            raise ParseFailure('missing end_time')

        end_time = _number(end_time, 'end_time')
        if format_version < 5:
            end_time += _legacy_offset

        if len(rest) > 1:
            raise ParseFailure(f'extra data: {rest!r}')

        return cls(position, time, hitsound, end_time, *rest)


class HoldNote(HitObject):
    """A hold note in osu!mania.

    Parameters
    ----------
    position : Position
        The x coordinate selects the column.
    time : float
        When this hold note starts in milliseconds.
    hitsound : int
        The hitsound of the note.
    end_time : float
        When this hold note must be released in milliseconds.
    addition : str
        Hitsound additions.
    """
    type_code = 128

    def __init__(self,
                 position,
                 time,
                 hitsound,
                 end_time,
                 addition='0:0:0:0:'):
        super().__init__(position, time, hitsound, addition)
        self.end_time = max(end_time, time)

    @classmethod
    def _parse(cls, position, time, hitsound, rest):
        try:
            raw, *rest = rest
        except ValueError:
            raise ParseFailure('missing end_time')

        end_time, _, addition = raw.partition(':')
        return cls(
            position,
            time,
            hitsound,
            _number(end_time, 'end_time'),
            addition or '0:0:0:0:',
        )


class SliderEvent(namedtuple('SliderEvent', 'kind time span progress')):
    """A point of interest along a slider.

    Parameters
    ----------
    kind : str
        One of ``'head'``, ``'tick'``, ``'repeat'``, ``'legacy_last_tick'``
        or ``'tail'``.
    time : float
        The time of the event in milliseconds.
    span : int
        The index of the span the event belongs to.
    progress : float
        The progress along the slider path in the range [0, 1].
    """
    __slots__ = ()


# sliders are cut to this length when generating events
_max_event_length = 100000

# how far before the end of a slider the legacy last tick sits
TAIL_LENIENCY = -36


def slider_events(start_time,
                  span_duration,
                  velocity,
                  tick_distance,
                  total_distance,
                  span_count):
    """Generate the nested events of a slider in time order.

    Parameters
    ----------
    start_time : float
        The start time of the slider.
    span_duration : float
        The time it takes to travel the path once.
    velocity : float
        The velocity of the slider in osu! pixels per millisecond.
    tick_distance : float
        The distance between ticks in osu! pixels.
    total_distance : float
        The length of the path.
    span_count : int
        The number of times the path is travelled.

    Yields
    ------
    event : SliderEvent
        The head, ticks, repeats, legacy last tick and tail of the slider.
    """
    length = min(_max_event_length, total_distance)
    tick_distance = clamp(tick_distance, 0, length)
    min_distance_from_end = velocity * 10

    yield SliderEvent('head', start_time, 0, 0.0)

    if tick_distance != 0:
        for span in range(span_count):
            span_start_time = start_time + span * span_duration
            reverse = span % 2 == 1

            ticks = []
            d = tick_distance
            while d <= length:
                if d >= length - min_distance_from_end:
                    break

                path_progress = d / length
                time_progress = 1 - path_progress if reverse else path_progress
                ticks.append(SliderEvent(
                    'tick',
                    span_start_time + time_progress * span_duration,
                    span,
                    path_progress,
                ))
                d += tick_distance

            if reverse:
                ticks.reverse()
            yield from ticks

            if span < span_count - 1:
                yield SliderEvent(
                    'repeat',
                    span_start_time + span_duration,
                    span,
                    (span + 1) % 2,
                )

    total_duration = span_count * span_duration
    final_span = span_count - 1
    final_span_start_time = start_time + final_span * span_duration

    legacy_last_tick_time = max(
        start_time + total_duration / 2,
        final_span_start_time + span_duration + TAIL_LENIENCY,
    )
    if span_duration > 0:
        progress = (legacy_last_tick_time - final_span_start_time)
        progress /= span_duration
    else:
        progress = 0.0
    if span_count % 2 == 0:
        progress = 1 - progress

    yield SliderEvent('legacy_last_tick', legacy_last_tick_time, final_span,
                      progress)
    yield SliderEvent('tail', start_time + total_duration, final_span,
                      float(span_count % 2))


class Slider(HitObject):
    """A slider hit element.

    Parameters
    ----------
    position : Position
        Where this slider appears on the screen.
    time : float
        When this slider appears in the map in milliseconds.
    hitsound : int
        The sound played on the body of the slider.
    curve : Curve
        The slider's path.
    repeat : int
        The number of spans, at least 1.
    length : float
        The length of this slider in osu! pixels as written in the file.
    ms_per_beat : float
        The milliseconds per beat during the segment of the beatmap that this
        slider appears in.
    velocity_multiplier : float
        The slider velocity of the active inherited timing point.
    slider_multiplier : float
        The base slider velocity of the beatmap.
    tick_rate : float
        The number of ticks per beat.
    format_version : int
        The version of the file the slider was read from; older versions
        ignore the slider velocity when spacing ticks.
    edge_sounds : list[int]
        A list of hitsounds for each edge.
    edge_additions : list[str]
        A list of additions for each edge.
    addition : str
        Hitsound additions.
    """
    type_code = 2

    def __init__(self,
                 position,
                 time,
                 hitsound,
                 curve,
                 repeat,
                 length,
                 ms_per_beat,
                 velocity_multiplier,
                 slider_multiplier,
                 tick_rate,
                 format_version,
                 edge_sounds,
                 edge_additions,
                 addition='0:0:0:0:'):
        super().__init__(position, time, hitsound, addition)
        self.curve = curve
        self.repeat = repeat
        self.length = length
        self.ms_per_beat = ms_per_beat
        self.velocity_multiplier = velocity_multiplier
        self.slider_multiplier = slider_multiplier
        self.tick_rate = tick_rate
        self.format_version = format_version
        self.edge_sounds = edge_sounds
        self.edge_additions = edge_additions

    @property
    def span_count(self):
        return self.repeat

    @property
    def distance(self):
        """The length of the travelled path.
        """
        return self.curve.length

    @property
    def scoring_distance(self):
        return 100 * self.slider_multiplier * self.velocity_multiplier

    @property
    def velocity(self):
        """The velocity in osu! pixels per millisecond.
        """
        return self.scoring_distance / self.ms_per_beat

    @property
    def tick_distance(self):
        if self.tick_rate <= 0:
            return 0.0
        distance = self.scoring_distance / self.tick_rate
        if self.format_version < 8:
            distance /= self.velocity_multiplier
        return distance

    @lazyval
    def span_duration(self):
        velocity = self.velocity
        if velocity <= 0:
            return 0.0
        return self.distance / velocity

    @lazyval
    def end_time(self):
        return self.time + self.span_duration * self.repeat

    def position_at(self, progress):
        """The position at ``progress`` along the path.
        """
        return self.curve(progress)

    @lazyval
    def end_position(self):
        """Where the slider ends after the final span.
        """
        return self.curve(self.repeat % 2)

    @lazyval
    def events(self):
        """The nested events of this slider.

        Returns
        -------
        events : list[SliderEvent]
            The head, ticks, repeats, legacy last tick and tail in time
            order.
        """
        return list(slider_events(
            self.time,
            self.span_duration,
            self.velocity,
            self.tick_distance,
            self.distance,
            self.repeat,
        ))

    @property
    def n_ticks(self):
        return sum(e.kind == 'tick' for e in self.events)

    @property
    def n_repeats(self):
        return sum(e.kind == 'repeat' for e in self.events)

    def flip_vertical(self):
        return self._with(
            position=self.position.flip_vertical(),
            curve=self.curve.flip_vertical(),
        )

    @classmethod
    def _parse(cls,
               position,
               time,
               hitsound,
               rest,
               timing_points,
               slider_multiplier,
               slider_tick_rate,
               format_version):
        try:
            group_1, *rest = rest
        except ValueError:
            raise ParseFailure(f'missing required slider data in {rest!r}')

        try:
            slider_type, *raw_points = group_1.split('|')
        except ValueError:
            raise ParseFailure(
                'expected slider type and points in the first'
                f' element of rest, {rest!r}',
            )

        points = [position]
        for point in raw_points:
            try:
                x, y = point.split(':')
            except ValueError:
                raise ParseFailure(
                    f'expected points in the form x:y, got {point!r}',
                )

            points.append(Position(_number(x, 'x', int), _number(y, 'y', int)))

        try:
            repeat, *rest = rest
        except ValueError:
            raise ParseFailure(f'missing repeat in {rest!r}')

        repeat = _number(repeat, 'repeat', int)
        if repeat > 9000:
            raise ParseFailure(f'repeat count is way too high: {repeat}')
        repeat = max(repeat, 1)

        try:
            pixel_length, *rest = rest
        except ValueError:
            pixel_length = '0'

        pixel_length = _number(pixel_length, 'pixel_length')

        try:
            raw_edge_sounds_grouped, *rest = rest
        except ValueError:
            raw_edge_sounds_grouped = ''

        edge_sounds = [
            _number(edge_sound, 'edge_sound', int)
            for edge_sound in raw_edge_sounds_grouped.split('|')
            if edge_sound
        ]

        try:
            edge_additions_grouped, *rest = rest
        except ValueError:
            edge_additions_grouped = ''

        if edge_additions_grouped:
            edge_additions = edge_additions_grouped.split('|')
        else:
            edge_additions = []

        if len(rest) > 1:
            raise ParseFailure(f'extra data: {rest!r}')

        tp = timing_point_at(timing_points, time)
        if tp is None:
            ms_per_beat = DEFAULT_BEAT_LENGTH
            velocity_multiplier = 1.0
        else:
            ms_per_beat = tp.beat_length
            velocity_multiplier = tp.slider_velocity

        try:
            curve = Curve.from_kind_and_points(
                slider_type,
                points,
                pixel_length if pixel_length > 0 else None,
            )
        except ValueError as e:
            raise ParseFailure(str(e))

        return cls(
            position,
            time,
            hitsound,
            curve,
            repeat,
            pixel_length,
            ms_per_beat,
            velocity_multiplier,
            slider_multiplier,
            slider_tick_rate,
            format_version,
            edge_sounds,
            edge_additions,
            *rest,
        )


def timing_point_at(timing_points, time):
    """Get the :class:`kiai.beatmap.TimingPoint` at the given time.

    Parameters
    ----------
    timing_points : list[TimingPoint]
        The timing points of a map.
    time : float
        The time to lookup the :class:`kiai.beatmap.TimingPoint` for.

    Returns
    -------
    timing_point : TimingPoint or None
        The last timing point starting at or before ``time``, the first
        timing point if ``time`` is before all of them, or ``None`` when
        there are no timing points.
    """
    for tp in reversed(timing_points):
        if tp.offset <= time:
            return tp

    if timing_points:
        return timing_points[0]
    return None


class Break(namedtuple('Break', 'start_time end_time')):
    """A break period in milliseconds.
    """
    __slots__ = ()

    @classmethod
    def parse(cls, data):
        kind, start_time, end_time, *_ = data.split(',')
        return cls(_number(start_time, 'start_time'),
                   _number(end_time, 'end_time'))


def _get_as_str(groups, section, field, default=no_default):
    """Lookup a field from a given section.

    Parameters
    ----------
    groups : dict[str, dict[str, str]]
        The grouped osu! file.
    section : str
        The section to read from.
    field : str
        The field to read.
    default : any, optional
        A value to return if ``field`` is not in ``groups[section]``.

    Returns
    -------
    value : str
        ``groups[section][field]`` or default if ``field`` is not in
        ``groups[section]``.

    Raises
    ------
    ParseFailure
        Raised when the field is missing and no default is given.
    """
    try:
        mapping = groups[section]
    except KeyError:
        if default is no_default:
            raise ParseFailure(f'missing section {section!r}')
        return default

    try:
        return mapping[field]
    except KeyError:
        if default is no_default:
            raise ParseFailure(
                f'missing field {field!r} in section {section!r}',
            )
        return default


def _get_as_int(groups, section, field, default=no_default):
    v = _get_as_str(groups, section, field, default)

    if v is default:
        return v

    try:
        return int(v)
    except ValueError:
        raise ParseFailure(
            f'field {field!r} in section {section!r} should be an int,'
            f' got {v!r}',
        )


def _get_as_float(groups, section, field, default=no_default):
    v = _get_as_str(groups, section, field, default)

    if v is default:
        return v

    try:
        value = float(v)
    except ValueError:
        raise ParseFailure(
            f'field {field!r} in section {section!r} should be a float,'
            f' got {v!r}',
        )

    if not math.isfinite(value):
        raise ParseFailure(
            f'field {field!r} in section {section!r} should be finite,'
            f' got {v!r}',
        )
    return value


def _clamped(value, lower, upper, name):
    if lower <= value <= upper:
        return value
    log.warning('clamping %s=%r to [%r, %r]', name, value, lower, upper)
    return clamp(value, lower, upper)


def resolve_stacking(hit_objects, preempt, stack_leniency, format_version):
    """Compute the stack height of every hit object.

    Parameters
    ----------
    hit_objects : sequence[HitObject]
        The objects in time order.
    preempt : float
        The approach time in milliseconds for the mod adjusted approach rate.
    stack_leniency : float
        The stack leniency of the beatmap.
    format_version : int
        The version of the beatmap file. Maps before version 6 use the old
        stacking rules.

    Returns
    -------
    stack_heights : list[int]
        The stack height of each object. Objects are drawn
        ``height * radius / 10`` osu! pixels up and to the left of their
        position.
    """
    if format_version < 6:
        return _stack_heights_old(hit_objects, preempt * stack_leniency)
    return _stack_heights(hit_objects, preempt * stack_leniency)


# objects closer than this are stacked
_stack_distance = 3


def _end_position(hit_object):
    if isinstance(hit_object, Slider):
        return hit_object.end_position
    return hit_object.position


def _stack_heights(hit_objects, stack_threshold):
    stack_height = [0] * len(hit_objects)

    for i in range(len(hit_objects) - 1, 0, -1):
        ob_i = hit_objects[i]
        i_index = i

        if stack_height[i] != 0 or isinstance(ob_i, Spinner):
            continue

        if isinstance(ob_i, Circle):
            for n in range(i - 1, -1, -1):
                ob_n = hit_objects[n]
                if isinstance(ob_n, Spinner):
                    continue

                if ob_i.time - ob_n.end_time > stack_threshold:
                    break

                if (isinstance(ob_n, Slider) and
                        distance(ob_n.end_position,
                                 ob_i.position) < _stack_distance):
                    offset = stack_height[i_index] - stack_height[n] + 1

                    for j in range(n + 1, i + 1):
                        # objects stacked under the slider's end are moved
                        # below it rather than above it
                        dist = distance(
                            ob_n.end_position,
                            hit_objects[j].position,
                        )
                        if dist < _stack_distance:
                            stack_height[j] -= offset

                    # the slider itself is handled by the outer loop
                    break

                if distance(ob_n.position, ob_i.position) < _stack_distance:
                    stack_height[n] = stack_height[i_index] + 1
                    ob_i = ob_n
                    i_index = n

        elif isinstance(ob_i, Slider):
            # the first slider in a possible stack; from here on we always
            # stack positive
            for n in range(i - 1, -1, -1):
                ob_n = hit_objects[n]
                if isinstance(ob_n, Spinner):
                    continue

                if ob_i.time - ob_n.time > stack_threshold:
                    break

                if (distance(_end_position(ob_n), ob_i.position) <
                        _stack_distance):
                    stack_height[n] = stack_height[i_index] + 1
                    ob_i = ob_n
                    i_index = n

    return stack_height


def _stack_heights_old(hit_objects, stack_threshold):
    stack_height = [0] * len(hit_objects)

    for i, ob_i in enumerate(hit_objects):
        if stack_height[i] != 0 and not isinstance(ob_i, Slider):
            continue

        start_time = ob_i.end_time
        slider_stack = 0
        if isinstance(ob_i, Slider):
            slider_end = ob_i.position_at(1)
        else:
            slider_end = ob_i.position

        for j in range(i + 1, len(hit_objects)):
            ob_j = hit_objects[j]
            if ob_j.time - stack_threshold > start_time:
                break

            if distance(ob_j.position, ob_i.position) < _stack_distance:
                stack_height[i] += 1
                start_time = ob_j.end_time
            elif distance(ob_j.position, slider_end) < _stack_distance:
                # objects stacked on a slider's end are bumped down and right
                slider_stack += 1
                stack_height[j] -= slider_stack
                start_time = ob_j.end_time

    return stack_height


class Beatmap:
    """A beatmap in any of the four game modes.

    Parameters
    ----------
    format_version : int
        The version of the beatmap file.
    mode : GameMode
        The game mode.
    stack_leniency : float
        How often closely placed hit objects will be stacked together.
    title : str
        The title of the song.
    artist : str
        The name of the song artist.
    creator : str
        The username of the mapper.
    version : str
        The name of the beatmap's difficulty.
    beatmap_id : int or None
        The id of this single beatmap. Old beatmaps did not store this in the
        file.
    beatmap_set_id : int or None
        The id of this beatmap set.
    hp : float
        The ``HP`` attribute of the beatmap.
    cs : float
        The ``CS`` attribute of the beatmap. In osu!mania this is the key
        count.
    od : float
        The ``OD`` attribute of the beatmap.
    ar : float
        The ``AR`` attribute of the beatmap.
    slider_multiplier : float
        The multiplier for slider velocity.
    slider_tick_rate : float
        How often slider ticks appear.
    timing_points : list[TimingPoint]
        The timing points the the map.
    hit_objects : list[HitObject]
        The hit objects in the map. They are sorted by start time.
    breaks : list[Break]
        The break periods of the map.
    is_convert : bool, optional
        Was this beatmap converted from osu!standard.
    """
    _version_regex = re.compile(r'^osu file format v(\d+)$')

    def __init__(self,
                 *,
                 format_version,
                 mode,
                 stack_leniency,
                 title,
                 artist,
                 creator,
                 version,
                 beatmap_id,
                 beatmap_set_id,
                 hp,
                 cs,
                 od,
                 ar,
                 slider_multiplier,
                 slider_tick_rate,
                 timing_points,
                 hit_objects,
                 breaks,
                 is_convert=False):
        self.format_version = format_version
        self.mode = mode
        self.stack_leniency = stack_leniency
        self.title = title
        self.artist = artist
        self.creator = creator
        self.version = version
        self.beatmap_id = beatmap_id
        self.beatmap_set_id = beatmap_set_id
        self.hp = hp
        self.cs = cs
        self.od = od
        self.ar = ar
        self.slider_multiplier = slider_multiplier
        self.slider_tick_rate = slider_tick_rate
        self.timing_points = timing_points
        self.hit_objects = tuple(sorted(hit_objects, key=lambda ob: ob.time))
        self.breaks = breaks
        self.is_convert = is_convert

    @property
    def display_name(self):
        """The name of the map as it appears in game.
        """
        return f'{self.artist} - {self.title} [{self.version}]'

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.display_name}>'

    def _count(self, type_):
        return sum(isinstance(ob, type_) for ob in self.hit_objects)

    @lazyval
    def n_circles(self):
        return self._count(Circle)

    @lazyval
    def n_sliders(self):
        return self._count(Slider)

    @lazyval
    def n_spinners(self):
        return self._count(Spinner)

    @lazyval
    def n_holds(self):
        return self._count(HoldNote)

    @property
    def n_breaks(self):
        return len(self.breaks)

    @property
    def n_objects(self):
        return len(self.hit_objects)

    def timing_point_at(self, time):
        """Get the :class:`kiai.beatmap.TimingPoint` at the given time.
        """
        return timing_point_at(self.timing_points, time)

    @lazyval
    def bpm(self):
        """The bpm that is active for the longest part of the map.
        """
        uninherited = [tp for tp in self.timing_points if not tp.inherited]
        if not uninherited:
            return 60000 / DEFAULT_BEAT_LENGTH

        if self.hit_objects:
            last_time = max(ob.end_time for ob in self.hit_objects)
        else:
            last_time = uninherited[-1].offset

        durations = Counter()
        for n, tp in enumerate(uninherited):
            if tp.offset > last_time:
                break
            if n + 1 < len(uninherited):
                end = uninherited[n + 1].offset
            else:
                end = last_time
            # the first point counts from the start of the map
            start = 0 if n == 0 else tp.offset
            durations[tp.beat_length] += max(end - start, 0)

        if not durations:
            return uninherited[0].bpm

        beat_length, _ = durations.most_common(1)[0]
        return 60000 / beat_length

    def _with(self, **changes):
        kwargs = {
            name: changes.get(name, getattr(self, name))
            for name in inspect.signature(type(self)).parameters
        }
        return type(self)(**kwargs)

    def convert(self, mode, mods=None):
        """Convert this beatmap to another game mode.

        Parameters
        ----------
        mode : GameMode or str
            The mode to convert to.
        mods : ModifierSet, optional
            The mods of the play. Key mods select the key count when
            converting to osu!mania.

        Returns
        -------
        beatmap : Beatmap
            ``self`` when the beatmap is already in ``mode``, otherwise a new
            beatmap with ``is_convert`` set.

        Raises
        ------
        UnsupportedConversion
            Raised when the beatmap is not an osu!standard map and ``mode`` is
            not its own mode.
        """
        mode = GameMode.parse(mode)
        if mode == self.mode:
            return self

        if self.mode != GameMode.osu:
            raise UnsupportedConversion(self.mode, mode)

        mods = ModifierSet.parse(mods)
        log.debug('converting %r to %s', self, mode.name)
        if mode == GameMode.taiko:
            return self._with(
                mode=mode,
                hit_objects=_taiko_objects(self),
                is_convert=True,
            )
        if mode == GameMode.catch:
            return self._with(mode=mode, is_convert=True)

        key_count = mods.mania_keys or self._mania_key_count()
        return self._with(
            mode=mode,
            cs=float(key_count),
            hit_objects=_mania_objects(self.hit_objects, key_count),
            is_convert=True,
        )

    def _mania_key_count(self):
        rounded_cs = round(self.cs)
        rounded_od = round(self.od)

        if not self.hit_objects:
            return 7

        n_long = self.n_sliders + self.n_spinners + self.n_holds
        percent_special = n_long / len(self.hit_objects)

        if percent_special < 0.2:
            return 7
        if percent_special < 0.3 or rounded_cs >= 5:
            return 7 if rounded_od > 5 else 6
        if percent_special > 0.6:
            return 5 if rounded_od > 4 else 4
        return max(4, min(rounded_od + 1, 7))

    @classmethod
    def from_path(cls, path):
        """Read in a ``Beatmap`` object from a file on disk.

        Parameters
        ----------
        path : str or pathlib.Path
            The path to the file to read from.

        Returns
        -------
        beatmap : Beatmap
            The parsed beatmap object.

        Raises
        ------
        ParseFailure
            Raised when the file cannot be parsed as a ``.osu`` file.
        """
        with open(path, encoding='utf-8-sig') as file:
            return cls.from_file(file)

    @classmethod
    def from_file(cls, file):
        """Read in a ``Beatmap`` object from an open file object.

        Parameters
        ----------
        file : file-like
            The file object to read from.

        Returns
        -------
        beatmap : Beatmap
            The parsed beatmap object.
        """
        return cls.parse(file.read())

    @classmethod
    def from_bytes(cls, data):
        """Read in a ``Beatmap`` object from the raw bytes of a ``.osu``
        file.
        """
        try:
            text = data.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise ParseFailure(f'beatmap is not utf-8: {e}')
        return cls.parse(text)

    _mapping_groups = frozenset({
        'General',
        'Editor',
        'Metadata',
        'Difficulty',
    })

    @classmethod
    def _find_groups(cls, lines):
        """Split the input data into the named groups.

        Parameters
        ----------
        lines : iterator[str]
            The raw lines from the file.

        Returns
        -------
        groups : dict[str, list[str] or dict[str, str]]
            The lines in the section. If the section is a mapping section
            the the value will be a dict from key to value.
        """
        groups = {}

        current_group = None
        group_buffer = []

        def commit_group():
            nonlocal group_buffer

            if current_group is None:
                # we are not building a group, just return
                return

            # we are currently building a group
            if current_group in cls._mapping_groups:
                # build a dict from the ``Key: Value`` line format.
                mapping = {}
                for line in group_buffer:
                    key, _, value = line.partition(':')
                    mapping[key.strip()] = value.strip()
                group_buffer = mapping

            groups[current_group] = group_buffer
            group_buffer = []

        for line in lines:
            # some (presumably manually edited) beatmaps have whitespace at
            # the beginning or end of lines
            line = line.strip()
            if not line or line.startswith('//'):
                continue

            if line[0] == '[' and line[-1] == ']':
                commit_group()
                current_group = line[1:-1]
            else:
                group_buffer.append(line)

        commit_group()
        return groups

    @classmethod
    def parse(cls, data):
        """Parse a ``Beatmap`` from text in the ``.osu`` format.

        Parameters
        ----------
        data : str
            The data to parse.

        Returns
        -------
        beatmap : Beatmap
            The parsed beatmap object.

        Raises
        ------
        ParseFailure
            Raised when the data cannot be parsed in the ``.osu`` format.
        """
        data = data.lstrip('\ufeff').lstrip()
        lines = iter(data.splitlines())
        line = next(lines, '')
        match = cls._version_regex.match(line.strip())
        if match is None:
            raise ParseFailure(
                f'missing osu file format specifier in: {line!r}',
            )

        format_version = int(match.group(1))
        groups = cls._find_groups(lines)

        mode = _get_as_int(groups, 'General', 'Mode', 0)
        try:
            mode = GameMode(mode)
        except ValueError:
            raise ParseFailure(f'invalid mode: {mode!r}')

        timing_points = []
        # the parent starts as None because the first timing point should
        # not be inherited
        parent = None
        for raw_timing_point in groups.get('TimingPoints', []):
            timing_point = TimingPoint.parse(
                raw_timing_point,
                parent,
                format_version,
            )
            if not timing_point.inherited:
                parent = timing_point
            timing_points.append(timing_point)
        timing_points.sort(key=lambda tp: tp.offset)

        slider_multiplier = _clamped(
            _get_as_float(groups, 'Difficulty', 'SliderMultiplier', 1.4),
            0.4,
            3.6,
            'SliderMultiplier',
        )
        slider_tick_rate = _clamped(
            _get_as_float(groups, 'Difficulty', 'SliderTickRate', 1.0),
            0.5,
            8,
            'SliderTickRate',
        )

        hit_objects = []
        for raw_hit_object in groups.get('HitObjects', []):
            hit_object = HitObject.parse(
                raw_hit_object,
                timing_points,
                slider_multiplier,
                slider_tick_rate,
                format_version,
            )
            if hit_object is not None:
                hit_objects.append(hit_object)

        breaks = []
        for event in groups.get('Events', []):
            if event.startswith(('2,', 'Break,')):
                try:
                    breaks.append(Break.parse(event))
                except ValueError:
                    raise ParseFailure(f'malformed break: {event!r}')

        od = _get_as_float(groups, 'Difficulty', 'OverallDifficulty', 5.0)
        return cls(
            format_version=format_version,
            mode=mode,
            stack_leniency=_get_as_float(
                groups,
                'General',
                'StackLeniency',
                0.7,
            ),
            title=_get_as_str(groups, 'Metadata', 'Title', ''),
            artist=_get_as_str(groups, 'Metadata', 'Artist', ''),
            creator=_get_as_str(groups, 'Metadata', 'Creator', ''),
            version=_get_as_str(groups, 'Metadata', 'Version', ''),
            beatmap_id=_get_as_int(groups, 'Metadata', 'BeatmapID', None),
            beatmap_set_id=_get_as_int(
                groups,
                'Metadata',
                'BeatmapSetID',
                None,
            ),
            hp=_get_as_float(groups, 'Difficulty', 'HPDrainRate', 5.0),
            cs=_get_as_float(groups, 'Difficulty', 'CircleSize', 5.0),
            od=od,
            # old maps didn't have an AR so the OD is used as a default
            ar=_get_as_float(groups, 'Difficulty', 'ApproachRate', od),
            slider_multiplier=slider_multiplier,
            slider_tick_rate=slider_tick_rate,
            timing_points=timing_points,
            hit_objects=hit_objects,
            breaks=breaks,
        )


def _taiko_objects(beatmap):
    """The hit objects of an osu!standard map converted to osu!taiko.

    Short sliders become a run of hits, the rest become drum rolls.
    """
    out = []
    for ob in beatmap.hit_objects:
        if not isinstance(ob, Slider):
            out.append(ob)
            continue

        spans = ob.repeat
        distance = ob.distance * spans
        taiko_velocity = 100 * beatmap.slider_multiplier
        beat_length = ob.ms_per_beat / ob.velocity_multiplier
        taiko_duration = int(distance / taiko_velocity * beat_length)

        osu_velocity = taiko_velocity * (1000 / beat_length)
        if beatmap.format_version >= 8:
            beat_length = ob.ms_per_beat

        tick_spacing = min(
            beat_length / beatmap.slider_tick_rate,
            taiko_duration / spans,
        )

        if not (tick_spacing > 0 and
                distance / osu_velocity * 1000 < 2 * beat_length):
            out.append(ob)
            continue

        samples = ob.edge_sounds or [ob.hitsound]
        i = 0
        j = ob.time
        while j <= ob.time + taiko_duration + tick_spacing / 8:
            out.append(Circle(ob.position, j, samples[i]))
            i = (i + 1) % len(samples)
            if np.isclose(tick_spacing, 0):
                break
            j += tick_spacing

    return out


def _mania_objects(hit_objects, key_count):
    """The hit objects of an osu!standard map converted to osu!mania.

    Every object keeps the column of its x coordinate; sliders and spinners
    become hold notes.
    """
    out = []
    width = Position.x_max / key_count
    for ob in hit_objects:
        column = clamp(int(ob.position.x // width), 0, key_count - 1)
        position = Position((column + 0.5) * width, 192)
        if isinstance(ob, Circle):
            out.append(Circle(position, ob.time, ob.hitsound))
        else:
            out.append(HoldNote(position, ob.time, ob.hitsound, ob.end_time))
    return out


def stack_offset(cs, height):
    """The distance an object at ``height`` is moved along each axis.
    """
    return height * circle_radius(cs) / 10
