"""The difficulty of single osu!standard objects.

Each evaluator looks at a difficulty object and a short window of the objects
before it and returns the raw difficulty contribution that the skills feed
into their strain.
"""
import math

from ..utils import (
    bpm_to_milliseconds,
    logistic,
    milliseconds_to_bpm,
    reverse_lerp,
    smootherstep,
    smoothstep,
)
from .difficulty_object import (
    MIN_DELTA_TIME,
    NORMALIZED_DIAMETER,
    NORMALIZED_RADIUS,
)

WIDE_ANGLE_MULTIPLIER = 1.5
ACUTE_ANGLE_MULTIPLIER = 1.95
SLIDER_MULTIPLIER = 1.35
VELOCITY_CHANGE_MULTIPLIER = 0.75
WIGGLE_MULTIPLIER = 1.02


def _wide_angle_bonus(angle):
    return smoothstep(angle, math.radians(40), math.radians(140))


def _acute_angle_bonus(angle):
    return smoothstep(angle, math.radians(140), math.radians(40))


def _velocity(current, last, with_sliders):
    velocity = current.lazy_jump_distance / current.strain_time
    if last.base.is_slider and with_sliders:
        # follow the slider path into the current object
        travel_velocity = last.travel_distance / last.travel_time
        movement_velocity = (
            current.minimum_jump_distance / current.minimum_jump_time
        )
        velocity = max(velocity, movement_velocity + travel_velocity)
    return velocity


def evaluate_aim(current, with_sliders):
    """The aim difficulty of moving to ``current``.

    Parameters
    ----------
    current : OsuDifficultyObject
        The object to evaluate.
    with_sliders : bool
        Reward the distance travelled while following sliders.

    Returns
    -------
    difficulty : float
        The difficulty, at least 0.
    """
    if current.base.is_spinner or current.index <= 1:
        return 0.0

    last = current.previous(0)
    if last.base.is_spinner:
        return 0.0
    last_last = current.previous(1)

    current_velocity = _velocity(current, last, with_sliders)
    previous_velocity = _velocity(last, last_last, with_sliders)

    wide_angle_bonus = 0.0
    acute_angle_bonus = 0.0
    velocity_change_bonus = 0.0
    wiggle_bonus = 0.0

    aim_strain = current_velocity

    short_time = min(current.strain_time, last.strain_time)
    long_time = max(current.strain_time, last.strain_time)

    # angles only matter when the rhythm stays the same
    if (long_time < 1.25 * short_time and
            current.angle is not None and
            last.angle is not None):
        current_angle = current.angle
        last_angle = last.angle

        angle_bonus = min(current_velocity, previous_velocity)

        wide_angle_bonus = _wide_angle_bonus(current_angle)
        acute_angle_bonus = _acute_angle_bonus(current_angle)

        # repeated angles are easier
        wide_angle_bonus *= 1 - min(
            wide_angle_bonus,
            _wide_angle_bonus(last_angle) ** 3,
        )
        acute_angle_bonus *= 0.08 + 0.92 * (
            1 - min(acute_angle_bonus, _acute_angle_bonus(last_angle) ** 3)
        )

        wide_angle_bonus *= angle_bonus * smootherstep(
            current.lazy_jump_distance,
            0,
            NORMALIZED_DIAMETER,
        )
        acute_angle_bonus *= (
            angle_bonus *
            smootherstep(
                milliseconds_to_bpm(current.strain_time, 2),
                300,
                400,
            ) *
            smootherstep(
                current.lazy_jump_distance,
                NORMALIZED_DIAMETER,
                NORMALIZED_DIAMETER * 2,
            )
        )

        wiggle_bonus = (
            angle_bonus *
            _wiggle_factor(current.lazy_jump_distance, current_angle) *
            _wiggle_factor(last.lazy_jump_distance, last_angle)
        )

    if max(previous_velocity, current_velocity) != 0:
        # use the average velocity over the whole object
        previous_velocity = (
            (last.lazy_jump_distance + last_last.travel_distance) /
            last.strain_time
        )
        current_velocity = (
            (current.lazy_jump_distance + last.travel_distance) /
            current.strain_time
        )

        velocity_difference = abs(previous_velocity - current_velocity)
        fastest = max(previous_velocity, current_velocity)
        if fastest > 0:
            distance_ratio = math.sin(
                math.pi / 2 * velocity_difference / fastest,
            ) ** 2
        else:
            distance_ratio = 0.0

        overlap_velocity_buff = min(
            NORMALIZED_DIAMETER * 1.25 / short_time,
            velocity_difference,
        )
        velocity_change_bonus = overlap_velocity_buff * distance_ratio
        velocity_change_bonus *= (short_time / long_time) ** 2

    aim_strain += wiggle_bonus * WIGGLE_MULTIPLIER
    aim_strain += max(
        acute_angle_bonus * ACUTE_ANGLE_MULTIPLIER,
        wide_angle_bonus * WIDE_ANGLE_MULTIPLIER +
        velocity_change_bonus * VELOCITY_CHANGE_MULTIPLIER,
    )

    if with_sliders and last.base.is_slider:
        aim_strain += (
            last.travel_distance / last.travel_time * SLIDER_MULTIPLIER
        )

    return aim_strain


def _wiggle_factor(jump_distance, angle):
    # jumps between a radius and three diameters with an angle under 110
    # degrees
    return (
        smootherstep(jump_distance, NORMALIZED_RADIUS, NORMALIZED_DIAMETER) *
        reverse_lerp(
            jump_distance,
            NORMALIZED_DIAMETER * 3,
            NORMALIZED_DIAMETER,
        ) ** 1.8 *
        smootherstep(angle, math.radians(110), math.radians(60))
    )


SINGLE_SPACING_THRESHOLD = NORMALIZED_DIAMETER * 1.25
MIN_SPEED_BONUS = 200
SPEED_BALANCING_FACTOR = 40
DISTANCE_MULTIPLIER = 0.9


def evaluate_speed(current, autopilot=False):
    """The tapping difficulty of ``current``.

    Parameters
    ----------
    current : OsuDifficultyObject
        The object to evaluate.
    autopilot : bool, optional
        Ignore the distance to the object.

    Returns
    -------
    difficulty : float
        The difficulty, at least 0.
    """
    if current.base.is_spinner:
        return 0.0

    previous = current.previous(0)
    strain_time = current.strain_time

    # cap the time to the great hit window
    if current.hit_window_great > 0:
        strain_time /= min(
            max((strain_time / current.hit_window_great) / 0.93, 0.92),
            1,
        )

    speed_bonus = 0.0
    if milliseconds_to_bpm(strain_time) > MIN_SPEED_BONUS:
        speed_bonus = 0.75 * (
            (bpm_to_milliseconds(MIN_SPEED_BONUS) - strain_time) /
            SPEED_BALANCING_FACTOR
        ) ** 2

    travel_distance = previous.travel_distance if previous is not None else 0
    distance = min(
        travel_distance + current.minimum_jump_distance,
        SINGLE_SPACING_THRESHOLD,
    )
    distance_bonus = (
        (distance / SINGLE_SPACING_THRESHOLD) ** 3.95 * DISTANCE_MULTIPLIER
    )
    if autopilot:
        distance_bonus = 0.0

    return (1 + speed_bonus + distance_bonus) * 1000 / strain_time


HISTORY_TIME_MAX = 5 * 1000
HISTORY_OBJECTS_MAX = 32
RHYTHM_OVERALL_MULTIPLIER = 0.95
RHYTHM_RATIO_MULTIPLIER = 12.0


class _Island:
    """A run of objects with the same delta time.
    """
    def __init__(self, epsilon, delta=None):
        self.epsilon = epsilon
        if delta is None:
            self.delta = None
            self.delta_count = 0
        else:
            self.delta = max(delta, MIN_DELTA_TIME)
            self.delta_count = 1

    def add_delta(self, delta):
        if self.delta is None:
            self.delta = max(delta, MIN_DELTA_TIME)
        self.delta_count += 1

    def is_similar_polarity(self, other):
        return self.delta_count % 2 == other.delta_count % 2

    def __eq__(self, other):
        if self.delta is None or other.delta is None:
            return (
                self.delta is other.delta and
                self.delta_count == other.delta_count
            )
        return (
            abs(self.delta - other.delta) < self.epsilon and
            self.delta_count == other.delta_count
        )

    __hash__ = None

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.delta}x{self.delta_count}>'


def evaluate_rhythm(current):
    """The rhythm complexity multiplier of ``current``.

    Parameters
    ----------
    current : OsuDifficultyObject
        The object to evaluate.

    Returns
    -------
    multiplier : float
        The multiplier to apply to the speed strain, at least 1 for objects
        other than spinners.
    """
    if current.base.is_spinner:
        return 0.0

    complexity_sum = 0.0
    epsilon = current.hit_window_great * 0.3

    island = _Island(epsilon)
    previous_island = _Island(epsilon)
    island_counts = []

    # the ratio at the start of the current island
    start_ratio = 0.0
    first_delta_switch = False

    historical_note_count = min(current.index, HISTORY_OBJECTS_MAX)

    rhythm_start = 0
    while (rhythm_start < historical_note_count - 2 and
           current.start_time - current.previous(rhythm_start).start_time <
           HISTORY_TIME_MAX):
        rhythm_start += 1

    previous = current.previous(rhythm_start)
    last = current.previous(rhythm_start + 1)

    # walk from the oldest object to the newest
    for i in range(rhythm_start, 0, -1):
        obj = current.previous(i - 1)

        time_decay = (
            (HISTORY_TIME_MAX - (current.start_time - obj.start_time)) /
            HISTORY_TIME_MAX
        )
        note_decay = (historical_note_count - i) / historical_note_count
        historical_decay = min(note_decay, time_decay)

        current_delta = obj.strain_time
        previous_delta = previous.strain_time
        last_delta = last.strain_time

        # deltas which are multiples of each other get a smaller bonus
        delta_difference_ratio = (
            min(previous_delta, current_delta) /
            max(previous_delta, current_delta)
        )
        current_ratio = 1.0 + RHYTHM_RATIO_MULTIPLIER * min(
            0.5,
            math.sin(math.pi / delta_difference_ratio) ** 2,
        )

        fraction = max(previous_delta / current_delta,
                       current_delta / previous_delta)
        fraction_multiplier = min(max(2.0 - fraction / 8.0, 0.0), 1.0)

        delta_difference = abs(previous_delta - current_delta)
        if epsilon > 0:
            window_penalty = min(
                1,
                max(0, delta_difference - epsilon) / epsilon,
            )
        else:
            window_penalty = 1.0 if delta_difference > 0 else 0.0

        effective_ratio = window_penalty * current_ratio * fraction_multiplier

        if first_delta_switch:
            if delta_difference < epsilon:
                island.add_delta(int(current_delta))
            else:
                # changes into or out of sliders are easier
                if obj.base.is_slider:
                    effective_ratio *= 0.125
                if previous.base.is_slider:
                    effective_ratio *= 0.3

                if island.is_similar_polarity(previous_island):
                    effective_ratio *= 0.5

                # 1/1 -> 1/2 -> 1/4 is not rewarded twice
                if (last_delta > previous_delta + epsilon and
                        previous_delta > current_delta + epsilon):
                    effective_ratio *= 0.125

                if previous_island.delta_count == island.delta_count:
                    effective_ratio *= 0.5

                for ix, (counted, count) in enumerate(island_counts):
                    if counted == island:
                        if previous_island == island:
                            count += 1
                        power = logistic(
                            island.delta,
                            58.33,
                            0.24,
                            2.75,
                        )
                        effective_ratio *= min(3.0 / count,
                                               (1.0 / count) ** power)
                        island_counts[ix] = (counted, count)
                        break
                else:
                    island_counts.append((island, 1))

                doubletapness = previous.get_doubletapness(obj)
                effective_ratio *= 1 - doubletapness * 0.75

                complexity_sum += (
                    math.sqrt(effective_ratio * start_ratio) *
                    historical_decay
                )

                start_ratio = effective_ratio
                previous_island = island

                if previous_delta + epsilon < current_delta:
                    # slowing down ends the island
                    first_delta_switch = False

                island = _Island(epsilon, int(current_delta))

        elif previous_delta > current_delta + epsilon:
            # speeding up starts a new island
            first_delta_switch = True

            if obj.base.is_slider:
                effective_ratio *= 0.6
            if previous.base.is_slider:
                effective_ratio *= 0.6

            start_ratio = effective_ratio
            island = _Island(epsilon, int(current_delta))

        last = previous
        previous = obj

    return math.sqrt(4 + complexity_sum * RHYTHM_OVERALL_MULTIPLIER) / 2.0


MAX_OPACITY_BONUS = 0.4
HIDDEN_BONUS = 0.2
MIN_VELOCITY = 0.5
FLASHLIGHT_SLIDER_MULTIPLIER = 1.3
MIN_ANGLE_MULTIPLIER = 0.2


def evaluate_flashlight(current, hidden):
    """The memorisation difficulty of ``current`` under flashlight.

    Parameters
    ----------
    current : OsuDifficultyObject
        The object to evaluate.
    hidden : bool
        Is hidden also active.

    Returns
    -------
    difficulty : float
        The difficulty, at least 0.
    """
    base = current.base
    if base.is_spinner:
        return 0.0

    scaling_factor = 52.0 / base.radius
    small_distance_nerf = 1.0
    cumulative_strain_time = 0.0
    result = 0.0
    last = current
    angle_repeat_count = 0.0

    for i in range(min(current.index, 10)):
        obj = current.previous(i)
        cumulative_strain_time += last.strain_time

        if not obj.base.is_spinner:
            jump_distance = (base.position - obj.base.end_position).length

            # objects inside the flashlight radius are easy to see
            if i == 0:
                small_distance_nerf = min(1.0, jump_distance / 75.0)

            # only the first object of a stack counts
            stack_nerf = min(
                1.0,
                (obj.lazy_jump_distance / scaling_factor) / 25.0,
            )

            opacity_bonus = 1.0 + MAX_OPACITY_BONUS * (
                1.0 - current.opacity_at(obj.base.time, hidden)
            )

            result += (
                stack_nerf *
                opacity_bonus *
                scaling_factor *
                jump_distance /
                cumulative_strain_time
            )

            if obj.angle is not None and current.angle is not None:
                # older objects count less
                if abs(obj.angle - current.angle) < 0.02:
                    angle_repeat_count += max(1.0 - 0.1 * i, 0.0)

        last = obj

    result = (small_distance_nerf * result) ** 2

    if hidden:
        result *= 1.0 + HIDDEN_BONUS

    result *= (
        MIN_ANGLE_MULTIPLIER +
        (1.0 - MIN_ANGLE_MULTIPLIER) / (angle_repeat_count + 1.0)
    )

    slider_bonus = 0.0
    if base.is_slider:
        pixel_travel_distance = base.lazy_cursor[1] / scaling_factor
        slider_bonus = max(
            0.0,
            pixel_travel_distance / current.travel_time - MIN_VELOCITY,
        ) ** 0.5
        # longer sliders need more memorisation
        slider_bonus *= pixel_travel_distance
        repeats = base.hit_object.repeat - 1
        if repeats > 0:
            slider_bonus /= repeats + 1

    return result + slider_bonus * FLASHLIGHT_SLIDER_MULTIPLIER
