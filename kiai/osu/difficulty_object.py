import math

from ..beatmap import Slider, Spinner
from ..position import Position
from ..skill import DifficultyObject
from ..utils import lazyval

# distances are scaled so that every circle has this radius
NORMALIZED_RADIUS = 50
NORMALIZED_DIAMETER = NORMALIZED_RADIUS * 2

# objects closer together than this are treated as this far apart
MIN_DELTA_TIME = 25

MAXIMUM_SLIDER_RADIUS = NORMALIZED_RADIUS * 2.4
ASSUMED_SLIDER_RADIUS = NORMALIZED_RADIUS * 1.8

# the player may let go of the slider this long before its end
TAIL_LENIENCY = -36


class OsuObject:
    """A hit object as it is placed on the playfield.

    Parameters
    ----------
    hit_object : HitObject
        The hit object, already flipped for hard rock.
    radius : float
        The circle radius in osu! pixels.
    stack_offset : float
        How far the object is moved up and to the left by stacking.
    preempt : float
        The approach time in milliseconds, not adjusted for the clock rate.
    """
    def __init__(self, hit_object, radius, stack_offset, preempt):
        self.hit_object = hit_object
        self.time = hit_object.time
        self.end_time = hit_object.end_time
        self.radius = radius
        self.preempt = preempt
        self.fade_in = 400 * min(1, preempt / 450)

        self._offset = Position(-stack_offset, -stack_offset)
        self.position = hit_object.position + self._offset
        if isinstance(hit_object, Slider):
            self.end_position = hit_object.end_position + self._offset
        else:
            self.end_position = self.position

    @property
    def is_slider(self):
        return isinstance(self.hit_object, Slider)

    @property
    def is_spinner(self):
        return isinstance(self.hit_object, Spinner)

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.hit_object!r}>'

    def _nested(self):
        """The nested objects of a slider which the cursor must follow, as
        ``(kind, time, position)`` triples.
        """
        slider = self.hit_object
        out = []
        for event in slider.events:
            if event.kind == 'legacy_last_tick':
                continue
            if event.kind == 'tail':
                position = self.end_position
            else:
                position = slider.position_at(event.progress) + self._offset
            out.append((event.kind, event.time, position))
        return out

    @lazyval
    def lazy_cursor(self):
        """How a lazy player's cursor follows this slider.

        Returns
        -------
        end_position : Position
            Where the cursor is when the slider is finished.
        travel_distance : float
            The normalized distance the cursor moved.
        travel_time : float
            The time in milliseconds the slider has to be followed, not
            adjusted for the clock rate.
        """
        if not self.is_slider:
            return self.end_position, 0.0, 0.0

        slider = self.hit_object
        duration = slider.end_time - slider.time
        tracking_end_time = max(
            slider.time + duration + TAIL_LENIENCY,
            slider.time + duration / 2,
        )

        nested = self._nested()
        ticks = [n for n in nested if n[0] == 'tick']
        if ticks and ticks[-1][1] > tracking_end_time:
            # the final tick must be tracked, so it is visited last
            last_tick = ticks[-1]
            tracking_end_time = last_tick[1]
            nested.remove(last_tick)
            nested.append(last_tick)

        travel_time = tracking_end_time - slider.time

        span_duration = slider.span_duration
        if span_duration > 0:
            progress = travel_time / span_duration
        else:
            progress = 0.0
        if progress % 2 >= 1:
            progress = 1 - progress % 1
        else:
            progress %= 1

        end_position = slider.position_at(progress) + self._offset
        cursor = self.position
        scaling_factor = NORMALIZED_RADIUS / self.radius
        travel_distance = 0.0

        for i in range(1, len(nested)):
            kind, _, position = nested[i]
            movement = position - cursor
            movement_length = scaling_factor * movement.length
            required_movement = ASSUMED_SLIDER_RADIUS

            if i == len(nested) - 1:
                # the end may be reached through the lazy end position
                lazy_movement = end_position - cursor
                if lazy_movement.length < movement.length:
                    movement = lazy_movement
                movement_length = scaling_factor * movement.length
            elif kind == 'repeat':
                required_movement = NORMALIZED_RADIUS

            if movement_length > required_movement:
                ratio = (movement_length - required_movement) / movement_length
                cursor = cursor + movement * ratio
                travel_distance += movement_length * ratio

            if i == len(nested) - 1:
                end_position = cursor

        return end_position, travel_distance, travel_time

    @property
    def lazy_end_position(self):
        return self.lazy_cursor[0]

    def opacity_at(self, time, hidden):
        """The opacity of this object at ``time``.

        Parameters
        ----------
        time : float
            The time in milliseconds, not adjusted for the clock rate.
        hidden : bool
            Fade the object out as hidden does.

        Returns
        -------
        opacity : float
            The opacity in [0, 1]. Objects are treated as invisible once their
            start time has passed.
        """
        if time > self.time:
            return 0.0

        fade_in_start = self.time - self.preempt
        fade_in = min(max((time - fade_in_start) / self.fade_in, 0.0), 1.0)
        if not hidden:
            return fade_in

        fade_out_start = self.time - self.preempt + self.fade_in
        fade_out_duration = self.preempt * 0.3
        fade_out = min(max((time - fade_out_start) / fade_out_duration, 0.0),
                       1.0)
        return min(fade_in, 1.0 - fade_out)


class OsuDifficultyObject(DifficultyObject):
    """The movement to an osu!standard object from the previous object.

    Parameters
    ----------
    base : OsuObject
        The object.
    last : OsuObject
        The object before ``base``.
    last_last : OsuObject or None
        The object before ``last``.
    clock_rate : float
        The clock rate of the calculation.
    great_window : float
        The great hit window in milliseconds, adjusted for the clock rate.
    objects : list[OsuDifficultyObject]
        The difficulty objects so far.
    index : int
        The index of this object in ``objects``.

    Notes
    -----
    All distances are normalized to a circle radius of
    :data:`NORMALIZED_RADIUS`.
    """
    def __init__(self,
                 base,
                 last,
                 last_last,
                 clock_rate,
                 great_window,
                 objects,
                 index):
        super().__init__(base, last, clock_rate, objects, index)
        self.last_last = last_last
        self.strain_time = max(self.delta_time, MIN_DELTA_TIME)
        self.hit_window_great = 2 * great_window

        self.lazy_jump_distance = 0.0
        self.minimum_jump_distance = 0.0
        self.minimum_jump_time = 0.0
        self.travel_distance = 0.0
        self.travel_time = 0.0
        self.angle = None

        self._set_distances(clock_rate)

    def _set_distances(self, clock_rate):
        base = self.base
        last = self.last

        if base.is_slider:
            _, travel_distance, travel_time = base.lazy_cursor
            # bonus for repeat sliders
            repeats = base.hit_object.repeat - 1
            self.travel_distance = (
                travel_distance * (1 + repeats / 2.5) ** (1 / 2.5)
            )
            self.travel_time = max(travel_time / clock_rate, MIN_DELTA_TIME)

        if base.is_spinner or last.is_spinner:
            return

        scaling_factor = NORMALIZED_RADIUS / base.radius
        if base.radius < 30:
            small_circle_bonus = min(30 - base.radius, 5) / 50
            scaling_factor *= 1 + small_circle_bonus

        last_cursor = last.lazy_end_position
        self.lazy_jump_distance = (
            (base.position - last_cursor) * scaling_factor
        ).length
        self.minimum_jump_time = self.strain_time
        self.minimum_jump_distance = self.lazy_jump_distance

        if last.is_slider:
            last_travel_time = max(
                last.lazy_cursor[2] / clock_rate,
                MIN_DELTA_TIME,
            )
            self.minimum_jump_time = max(
                self.strain_time - last_travel_time,
                MIN_DELTA_TIME,
            )

            # the player either cuts the slider short or follows it through
            # to its end; assume the shorter of the two movements
            tail_jump_distance = (
                (last.end_position - base.position).length * scaling_factor
            )
            self.minimum_jump_distance = max(
                0,
                min(
                    self.lazy_jump_distance -
                    (MAXIMUM_SLIDER_RADIUS - ASSUMED_SLIDER_RADIUS),
                    tail_jump_distance - MAXIMUM_SLIDER_RADIUS,
                ),
            )

        last_last = self.last_last
        if last_last is not None and not last_last.is_spinner:
            v1 = last_last.lazy_end_position - last.position
            v2 = base.position - last_cursor
            self.angle = abs(math.atan2(v1.cross(v2), v1.dot(v2)))

    def opacity_at(self, time, hidden):
        return self.base.opacity_at(time, hidden)

    def get_doubletapness(self, next_):
        """How much ``next_`` can be hit together with this object by tapping
        twice with the same finger.

        Parameters
        ----------
        next_ : OsuDifficultyObject or None
            The object after this one.

        Returns
        -------
        doubletapness : float
            0 when the objects must be alternated, approaching 1 when they
            are easily doubletapped.
        """
        if next_ is None:
            return 0.0

        current_delta = max(1, self.delta_time)
        next_delta = max(1, next_.delta_time)
        delta_difference = abs(next_delta - current_delta)
        speed_ratio = current_delta / max(current_delta, delta_difference)
        if self.hit_window_great > 0:
            window_ratio = min(1, current_delta / self.hit_window_great) ** 2
        else:
            window_ratio = 1.0
        return 1.0 - speed_ratio ** (1 - window_ratio)
