from collections import namedtuple
import logging
import math

from scipy.special import erf, erfinv

from ..game_mode import GameMode
from ..records import Record

log = logging.getLogger(__name__)


class TaikoPerformanceAttributes(
        Record,
        namedtuple(
            'TaikoPerformanceAttributes',
            (
                'mode',
                'pp',
                'pp_acc',
                'pp_difficulty',
                'effective_miss_count',
                'estimated_unstable_rate',
                'difficulty',
                'state',
            ),
        )):
    """The performance of an osu!taiko score.

    Parameters
    ----------
    mode : GameMode
        Always :attr:`GameMode.taiko`.
    pp : float
        The total performance points.
    pp_acc, pp_difficulty : float
        The performance of accuracy and of the map's difficulty.
    effective_miss_count : float
        The misses, scaled up for short maps.
    estimated_unstable_rate : float or None
        An upper bound of the unstable rate (ten times the hit error
        deviation). ``None`` when there were no greats.
    difficulty : TaikoDifficultyAttributes
        The difficulty the score was computed against.
    state : ScoreState
        The hit statistics of the score.
    """
    __slots__ = ()
    _summary = ('pp', 'pp_difficulty', 'pp_acc', 'estimated_unstable_rate')


def deviation_upper_bound(great_window, n_great, total_hits):
    """An upper bound of the hit error deviation at 99% confidence.

    Hit errors are assumed to be normally distributed around 0, so the
    fraction of greats bounds the deviation through the great window.
    """
    if n_great == 0 or great_window <= 0:
        return None

    z = 2.32634787404
    n = total_hits
    p = n_great / n
    p_lower = (
        (n * p + z * z / 2) / (n + z * z) -
        z / (n + z * z) * math.sqrt(n * p * (1 - p) + z * z / 4)
    )
    if p_lower <= 0:
        return None
    return great_window / (math.sqrt(2) * erfinv(p_lower))


class TaikoPerformanceCalculator:
    """Compute the performance of an osu!taiko score.

    Parameters
    ----------
    difficulty : TaikoDifficultyAttributes
        The difficulty of the map.
    mods : ModifierSet
        The mods of the score.
    state : ScoreState
        The full hit statistics.
    """
    def __init__(self, difficulty, mods, state):
        self.difficulty = difficulty
        self.mods = mods
        self.state = state
        self.total_hits = state.total_hits(GameMode.taiko)
        self.total_successful_hits = state.n300 + state.n100

    def effective_miss_count(self):
        misses = self.state.misses
        if self.total_successful_hits > 0:
            return max(1.0, 1000 / self.total_successful_hits) * misses
        return float(misses)

    def difficulty_value(self, effective_misses, unstable_rate):
        if unstable_rate is None:
            return 0.0

        difficulty = self.difficulty
        mods = self.mods
        stars = difficulty.stars

        base = 5 * max(1.0, stars / 0.115) - 4
        value = min(base ** 3 / 69052.51, base ** 2.25 / 1250)
        value *= 1 + 0.1 * max(0.0, stars - 10)

        length_bonus = 1 + 0.1 * min(1.0, self.total_hits / 1500)
        value *= length_bonus
        value *= 0.986 ** effective_misses

        if mods.easy:
            value *= 0.9
        if mods.hidden:
            value *= 1.025
        if mods.hard_rock:
            value *= 1.1
        if mods.flashlight:
            value *= max(
                1.0,
                1.05 -
                min(difficulty.mono_stamina_factor / 50, 1.0) * length_bonus,
            )

        # nearly single colour maps scale accuracy more harshly
        mono = difficulty.mono_stamina_factor
        shift = 500 - 100 * (mono * 3)
        return value * erf(shift / (math.sqrt(2) * unstable_rate)) ** (
            2 + mono
        )

    def accuracy_value(self, unstable_rate):
        difficulty = self.difficulty
        if difficulty.great_hit_window <= 0 or unstable_rate is None:
            return 0.0

        value = (70 / unstable_rate) ** 1.1 * difficulty.stars ** 0.4 * 100
        length_bonus = min(1.15, (self.total_hits / 1500) ** 0.3)

        if (self.mods.flashlight and
                self.mods.hidden and
                not difficulty.is_convert):
            value *= max(1.0, 1.05 * length_bonus)
        return value

    def calculate(self):
        """Compute the performance.

        Returns
        -------
        performance : TaikoPerformanceAttributes
            The performance of the score.
        """
        difficulty = self.difficulty
        mods = self.mods
        state = self.state

        effective_misses = self.effective_miss_count()

        deviation = None
        if self.total_hits > 0:
            deviation = deviation_upper_bound(
                difficulty.great_hit_window,
                state.n300,
                self.total_hits,
            )
        unstable_rate = None if deviation is None else deviation * 10

        multiplier = 1.13
        if mods.hidden and not difficulty.is_convert:
            multiplier *= 1.075
        if mods.easy:
            multiplier *= 0.95

        difficulty_value = self.difficulty_value(
            effective_misses,
            unstable_rate,
        )
        accuracy_value = self.accuracy_value(unstable_rate)
        pp = (
            difficulty_value ** 1.1 + accuracy_value ** 1.1
        ) ** (1 / 1.1) * multiplier

        log.debug('taiko: %s %s pp=%.4f', mods, state, pp)
        return TaikoPerformanceAttributes(
            mode=GameMode.taiko,
            pp=pp,
            pp_acc=accuracy_value,
            pp_difficulty=difficulty_value,
            effective_miss_count=effective_misses,
            estimated_unstable_rate=unstable_rate,
            difficulty=difficulty,
            state=state,
        )
