"""The fruits, droplets and bananas of an osu!catch map.

osu!catch plays the objects of an osu!standard map from their x coordinate.
Sliders become juice streams of fruits, droplets and tiny droplets and
spinners become banana showers. The objects are then offset with the same
seeded random number generator as the osu! client so that the positions
match the game.
"""
import enum

from ..beatmap import Slider, Spinner
from ..position import Position
from ..utils import clamp

RNG_SEED = 1337

# a quarter of a frame at 60fps of grace time for hyperdashes
HYPER_DASH_LENIENCY = 1000 / 60 / 4
BASE_DASH_SPEED = 1.0
ALLOWED_CATCH_RANGE = 0.8
BASE_CATCHER_SIZE = 106.75

_MASK32 = 0xFFFFFFFF
_INT_MASK = 0x7FFFFFFF
_INT_TO_REAL = 1.0 / (_INT_MASK + 1.0)


class LegacyRandom:
    """The xorshift random number generator of the osu! client.

    Parameters
    ----------
    seed : int
        The seed.
    """
    def __init__(self, seed):
        self.x = seed & _MASK32
        self.y = 842502087
        self.z = 3579807591
        self.w = 273326509
        self._bit_buffer = 0
        self._bit_index = 32

    def next_uint(self):
        t = (self.x ^ (self.x << 11)) & _MASK32
        self.x = self.y
        self.y = self.z
        self.z = self.w
        self.w = (self.w ^ (self.w >> 19) ^ t ^ (t >> 8)) & _MASK32
        return self.w

    def next(self):
        """A random non-negative 31 bit integer.
        """
        return self.next_uint() & _INT_MASK

    def next_double(self):
        """A random float in [0, 1).
        """
        return _INT_TO_REAL * self.next()

    def next_range(self, lower, upper):
        """A random integer in [lower, upper), truncated towards zero.
        """
        return int(lower + self.next_double() * (upper - lower))

    def next_bool(self):
        if self._bit_index == 32:
            self._bit_buffer = self.next_uint()
            self._bit_index = 1
            return bool(self._bit_buffer & 1)

        self._bit_index += 1
        self._bit_buffer >>= 1
        return bool(self._bit_buffer & 1)


class PalpableKind(enum.Enum):
    fruit = 'fruit'
    droplet = 'droplet'
    tiny_droplet = 'tiny_droplet'
    banana = 'banana'


class PalpableObject:
    """Something the catcher can catch.

    Parameters
    ----------
    kind : PalpableKind
        What the object is.
    time : float
        When the object reaches the catcher.
    x : float
        The horizontal position in osu! pixels, in [0, 512].
    """
    __slots__ = ('kind', 'time', 'x', 'hyper_dash', 'distance_to_hyper_dash')

    def __init__(self, kind, time, x):
        self.kind = kind
        self.time = time
        self.x = clamp(x, 0, Position.x_max)
        self.hyper_dash = False
        self.distance_to_hyper_dash = 0.0

    @property
    def end_time(self):
        return self.time

    @property
    def gives_combo(self):
        return self.kind in (PalpableKind.fruit, PalpableKind.droplet)

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: {self.kind.name}, {self.x:g},'
            f' {self.time:g}ms>'
        )


def _juice_stream(slider):
    out = []
    last_event = None
    for event in slider.events:
        # tiny droplets fill the gaps between every pair of events, the
        # legacy last tick included
        if last_event is not None:
            since_last = int(event.time) - int(last_event.time)
            if since_last > 80:
                spacing = since_last
                while spacing > 100:
                    spacing /= 2

                t = spacing
                while t < since_last:
                    progress = (
                        last_event.progress +
                        (t / since_last) *
                        (event.progress - last_event.progress)
                    )
                    out.append(PalpableObject(
                        PalpableKind.tiny_droplet,
                        t + last_event.time,
                        slider.position_at(progress).x,
                    ))
                    t += spacing

        last_event = event
        if event.kind == 'tick':
            kind = PalpableKind.droplet
        elif event.kind in ('head', 'repeat', 'tail'):
            kind = PalpableKind.fruit
        else:
            continue
        out.append(PalpableObject(
            kind,
            event.time,
            slider.position_at(event.progress).x,
        ))
    return out


def _banana_shower(spinner):
    duration = spinner.end_time - spinner.time
    if duration <= 0:
        return []

    spacing = duration
    while spacing > 100:
        spacing /= 2

    out = []
    time = spinner.time
    while time <= spinner.end_time:
        out.append(PalpableObject(PalpableKind.banana, time, 0))
        time += spacing
    return out


def _apply_random_offset(position, max_offset, rng):
    right = rng.next_bool()
    amount = min(20, rng.next_range(0, max(0, max_offset)))
    if right:
        if position + amount <= Position.x_max:
            return position + amount
        return position - amount
    if position - amount >= 0:
        return position - amount
    return position + amount


def _apply_offset(position, amount):
    if amount > 0:
        if position + amount < Position.x_max:
            return position + amount
    elif position + amount > 0:
        return position + amount
    return position


class _HardRockState:
    def __init__(self):
        self.last_position = None
        self.last_start_time = 0.0

    def apply(self, fruit, rng):
        position = fruit.x
        start_time = fruit.time

        # the client treats a previous position of exactly 0 as unset
        if self.last_position is None or self.last_position == 0:
            self.last_position = position
            self.last_start_time = start_time
            return

        position_diff = position - self.last_position
        time_diff = int(start_time - self.last_start_time)

        if time_diff > 1000:
            self.last_position = position
            self.last_start_time = start_time
            return

        if position_diff == 0:
            fruit.x = _apply_random_offset(position, time_diff / 4, rng)
            return

        # integer division matches the client
        if abs(position_diff) < time_diff // 3:
            position = _apply_offset(position, position_diff)

        fruit.x = position
        self.last_position = position
        self.last_start_time = start_time


def palpable_objects(hit_objects, hardrock_offsets):
    """Generate the catchable objects of a map.

    Parameters
    ----------
    hit_objects : iterable[HitObject]
        The hit objects in time order.
    hardrock_offsets : bool
        Offset the fruits as with hard rock.

    Returns
    -------
    objects : list[PalpableObject]
        The fruits, droplets, tiny droplets and bananas in the order they
        are generated, which is the order of the hit objects.
    """
    rng = LegacyRandom(RNG_SEED)
    hard_rock = _HardRockState()
    out = []

    for hit_object in hit_objects:
        if isinstance(hit_object, Slider):
            nested = _juice_stream(hit_object)
            # the client tracks the last control point, not the end of the
            # path, and the start time of the stream
            hard_rock.last_position = hit_object.curve.points[-1].x
            hard_rock.last_start_time = hit_object.time
            for ob in nested:
                if ob.kind is PalpableKind.tiny_droplet:
                    ob.x = clamp(ob.x + rng.next_range(-20, 20), 0,
                                 Position.x_max)
                elif ob.kind is PalpableKind.droplet:
                    # the client rolls a droplet rotation
                    rng.next()
            out.extend(nested)
        elif isinstance(hit_object, Spinner):
            for banana in _banana_shower(hit_object):
                banana.x = rng.next_double() * Position.x_max
                # type, rotation and colour
                rng.next()
                rng.next()
                rng.next()
                out.append(banana)
        else:
            fruit = PalpableObject(
                PalpableKind.fruit,
                hit_object.time,
                hit_object.position.x,
            )
            if hardrock_offsets:
                hard_rock.apply(fruit, rng)
            out.append(fruit)

    return out


def catch_width(cs):
    """The width of the catcher's catching area in osu! pixels.
    """
    scale = 1.0 - 0.7 * (cs - 5) / 5
    return BASE_CATCHER_SIZE * abs(scale) * ALLOWED_CATCH_RANGE


class HyperDashTracker:
    """Mark the objects which require a hyperdash to reach the next object.

    Objects are fed in order; each new object decides whether the one
    before it is a hyperdash.

    Parameters
    ----------
    cs : float
        The circle size of the map.
    """
    def __init__(self, cs):
        # the client uses the full catcher width here
        self.half_catcher_width = catch_width(cs) / 2 / ALLOWED_CATCH_RANGE
        self.last_direction = 0
        self.last_excess = self.half_catcher_width
        self.previous = None

    def feed(self, ob):
        previous = self.previous
        self.previous = ob
        if previous is None:
            return

        previous.hyper_dash = False
        previous.distance_to_hyper_dash = 0.0

        direction = 1 if ob.x > previous.x else -1
        time_to_next = (
            int(ob.time) - int(previous.time) - HYPER_DASH_LENIENCY
        )
        if direction == self.last_direction:
            margin = self.last_excess
        else:
            margin = self.half_catcher_width
        distance_to_next = abs(ob.x - previous.x) - margin
        distance_to_hyper = time_to_next * BASE_DASH_SPEED - distance_to_next

        if distance_to_hyper < 0:
            previous.hyper_dash = True
            self.last_excess = self.half_catcher_width
        else:
            previous.distance_to_hyper_dash = distance_to_hyper
            self.last_excess = clamp(
                distance_to_hyper,
                0,
                self.half_catcher_width,
            )
        self.last_direction = direction
