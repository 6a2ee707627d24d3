from collections import namedtuple
import logging
import math

from ..game_mode import GameMode
from ..records import Record
from ..score_state import accuracy

log = logging.getLogger(__name__)


class CatchPerformanceAttributes(
        Record,
        namedtuple('CatchPerformanceAttributes', 'mode pp difficulty state')):
    """The performance of an osu!catch score.

    Parameters
    ----------
    mode : GameMode
        Always :attr:`GameMode.catch`.
    pp : float
        The total performance points.
    difficulty : CatchDifficultyAttributes
        The difficulty the score was computed against.
    state : ScoreState
        The hit statistics of the score.
    """
    __slots__ = ()
    _summary = ('pp',)


class CatchPerformanceCalculator:
    """Compute the performance of an osu!catch score.

    Parameters
    ----------
    difficulty : CatchDifficultyAttributes
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
        performance : CatchPerformanceAttributes
            The performance of the score.
        """
        difficulty = self.difficulty
        mods = self.mods
        state = self.state

        value = (5 * max(1.0, difficulty.stars / 0.0049) - 4) ** 2 / 100000

        # the objects which give combo
        n_combo_hits = state.n300 + state.n100 + state.misses
        length_bonus = 0.95 + 0.3 * min(1.0, n_combo_hits / 2500)
        if n_combo_hits > 2500:
            length_bonus += math.log10(n_combo_hits / 2500) * 0.475
        value *= length_bonus

        value *= 0.97 ** state.misses

        if difficulty.max_combo > 0:
            value *= min(
                state.max_combo ** 0.8 / difficulty.max_combo ** 0.8,
                1.0,
            )

        ar = difficulty.ar
        ar_factor = 1.0
        if ar > 9:
            ar_factor += 0.1 * (ar - 9)
        if ar > 10:
            ar_factor += 0.1 * (ar - 10)
        elif ar < 8:
            ar_factor += 0.025 * (8 - ar)
        value *= ar_factor

        if mods.hidden:
            if ar <= 10:
                value *= 1.05 + 0.075 * (10 - ar)
            else:
                value *= 1.01 + 0.04 * (11 - min(11.0, ar))

        if mods.flashlight:
            value *= 1.35 * length_bonus

        value *= accuracy(GameMode.catch, state) ** 5.5

        if mods.no_fail:
            value *= max(0.9, 1 - 0.02 * state.misses)

        log.debug('catch: %s %s pp=%.4f', mods, state, value)
        return CatchPerformanceAttributes(
            mode=GameMode.catch,
            pp=value,
            difficulty=difficulty,
            state=state,
        )
