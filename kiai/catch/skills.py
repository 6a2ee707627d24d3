import math

from ..skill import DifficultyObject, StrainDecaySkill
from ..utils import clamp

NORMALIZED_RADIUS = 41.0
ABSOLUTE_PLAYER_POSITIONING_ERROR = 16.0
DIRECTION_CHANGE_BONUS = 21.0


class CatchDifficultyObject(DifficultyObject):
    """A fruit or droplet prepared for difficulty calculation.

    Positions are scaled so that every circle size has the same catcher
    width.

    Parameters
    ----------
    base, last : PalpableObject
        The object and the one caught before it.
    clock_rate : float
        The clock rate of the calculation.
    half_catcher_width : float
        Half the effective width of the catcher.
    objects : list[CatchDifficultyObject]
        Every difficulty object so far.
    index : int
        The index of this object in ``objects``.
    """
    def __init__(self,
                 base,
                 last,
                 clock_rate,
                 half_catcher_width,
                 objects,
                 index):
        super().__init__(base, last, clock_rate, objects, index)
        scale = NORMALIZED_RADIUS / half_catcher_width
        self.normalized_position = base.x * scale
        self.last_normalized_position = last.x * scale
        # caps the strain at the equivalent of 375 bpm streams
        self.strain_time = max(40.0, self.delta_time)


class Movement(StrainDecaySkill):
    """Moving the catcher between objects.

    Parameters
    ----------
    clock_rate : float
        The clock rate, which also speeds up the catcher.
    """
    skill_multiplier = 900
    strain_decay_base = 0.2
    decay_weight = 0.94
    section_length = 750

    def __init__(self, clock_rate):
        super().__init__()
        self.catcher_speed_multiplier = clock_rate
        self.last_player_position = None
        self.last_distance_moved = 0.0
        self.last_strain_time = 0.0

    def strain_value_of(self, current):
        if self.last_player_position is None:
            self.last_player_position = current.last_normalized_position

        reach = NORMALIZED_RADIUS - ABSOLUTE_PLAYER_POSITIONING_ERROR
        player_position = clamp(
            self.last_player_position,
            current.normalized_position - reach,
            current.normalized_position + reach,
        )
        distance_moved = player_position - self.last_player_position

        weighted_strain_time = (
            current.strain_time + 13 + 3 / self.catcher_speed_multiplier
        )
        distance_addition = abs(distance_moved) ** 1.3 / 510
        sqrt_strain = math.sqrt(weighted_strain_time)
        edge_dash_bonus = 0.0

        if abs(distance_moved) > 0.1:
            last_moved = self.last_distance_moved
            if (abs(last_moved) > 0.1 and
                    math.copysign(1, distance_moved) !=
                    math.copysign(1, last_moved)):
                bonus_factor = min(50.0, abs(distance_moved)) / 50
                antiflow_factor = max(min(70.0, abs(last_moved)) / 70, 0.38)
                distance_addition += (
                    DIRECTION_CHANGE_BONUS /
                    math.sqrt(self.last_strain_time + 16) *
                    bonus_factor *
                    antiflow_factor *
                    max(1 - (weighted_strain_time / 1000) ** 3, 0)
                )

            # every movement gets a little weight to reward streams
            distance_addition += (
                12.5 *
                min(abs(distance_moved), NORMALIZED_RADIUS * 2) /
                (NORMALIZED_RADIUS * 6) /
                sqrt_strain
            )

        last = current.last
        if last.distance_to_hyper_dash <= 20.0:
            if not last.hyper_dash:
                edge_dash_bonus += 5.7
            else:
                # a hyperdash always lands on the object
                player_position = current.normalized_position

            distance_addition *= 1.0 + edge_dash_bonus * (
                (20 - last.distance_to_hyper_dash) / 20
            ) * (
                min(current.strain_time * self.catcher_speed_multiplier, 265) /
                265
            ) ** 1.5

        self.last_player_position = player_position
        self.last_distance_moved = distance_moved
        self.last_strain_time = current.strain_time
        return distance_addition / weighted_strain_time
