from collections import namedtuple
import logging

from ..game_mode import GameMode
from ..records import Record

log = logging.getLogger(__name__)


class ManiaPerformanceAttributes(
        Record,
        namedtuple(
            'ManiaPerformanceAttributes',
            'mode pp pp_difficulty difficulty state',
        )):
    """The performance of an osu!mania score.

    Parameters
    ----------
    mode : GameMode
        Always :attr:`GameMode.mania`.
    pp : float
        The total performance points.
    pp_difficulty : float
        The performance from the map's difficulty.
    difficulty : ManiaDifficultyAttributes
        The difficulty the score was computed against.
    state : ScoreState
        The hit statistics of the score.
    """
    __slots__ = ()
    _summary = ('pp', 'pp_difficulty')


def custom_accuracy(state):
    """Accuracy which weighs perfects (320) above greats (300).
    """
    total = state.total_hits(GameMode.mania)
    if total == 0:
        return 0.0
    return (
        320 * state.n_geki +
        300 * state.n300 +
        200 * state.n_katu +
        100 * state.n100 +
        50 * state.n50
    ) / (320 * total)


class ManiaPerformanceCalculator:
    """Compute the performance of an osu!mania score.

    Parameters
    ----------
    difficulty : ManiaDifficultyAttributes
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

    def calculate(self):
        """Compute the performance.

        Returns
        -------
        performance : ManiaPerformanceAttributes
            The performance of the score.
        """
        mods = self.mods
        state = self.state
        total_hits = state.total_hits(GameMode.mania)

        difficulty_value = (
            8 * max(self.difficulty.stars - 0.15, 0.05) ** 2.2 *
            max(0.0, 5 * custom_accuracy(state) - 4) *
            (1 + 0.1 * min(1.0, total_hits / 1500))
        )

        multiplier = 1.0
        if mods.no_fail:
            multiplier *= 0.75
        if mods.easy:
            multiplier *= 0.5

        pp = difficulty_value * multiplier
        log.debug('mania: %s %s pp=%.4f', mods, state, pp)
        return ManiaPerformanceAttributes(
            mode=GameMode.mania,
            pp=pp,
            pp_difficulty=difficulty_value,
            difficulty=self.difficulty,
            state=state,
        )
