"""Performance points of scores.
"""
import logging

from .beatmap import Beatmap
from .catch import CatchPerformanceCalculator
from .difficulty import Difficulty
from .game_mode import GameMode
from .mania import ManiaPerformanceCalculator
from .osu import OsuPerformanceCalculator
from .score_state import HitResultPriority, resolve
from .taiko import TaikoPerformanceCalculator
from .utils import options_from_dict

log = logging.getLogger(__name__)


def performance_attributes(difficulty, mods, state, lazer=True):
    """Compute the performance of a full score state.

    Parameters
    ----------
    difficulty : DifficultyAttributes
        The difficulty of the map, or of the part of it the score covers.
    mods : ModifierSet
        The mods of the score.
    state : ScoreState
        The hit statistics of the score.
    lazer : bool, optional
        Is this an osu!lazer score.

    Returns
    -------
    performance : PerformanceAttributes
        The mode specific performance attributes.
    """
    mode = difficulty.mode
    if mode == GameMode.osu:
        calculator = OsuPerformanceCalculator(difficulty, mods, state, lazer)
    elif mode == GameMode.taiko:
        calculator = TaikoPerformanceCalculator(difficulty, mods, state)
    elif mode == GameMode.catch:
        calculator = CatchPerformanceCalculator(difficulty, mods, state)
    elif mode == GameMode.mania:
        calculator = ManiaPerformanceCalculator(difficulty, mods, state)
    else:
        raise ValueError(f'unknown game mode: {mode!r}')
    return calculator.calculate()


class Performance:
    """Compute the performance of scores.

    Every option of :class:`~kiai.difficulty.Difficulty` is accepted and used
    when the performance is computed from a beatmap.

    Parameters
    ----------
    accuracy : float, optional
        The accuracy in percent, in [0, 100].
    combo : int, optional
        The max combo. Defaults to the map's max combo minus the misses.
    n_geki, n_katu, n300, n100, n50, misses : int, optional
        Hit counts. Counts which are not given are inferred from the
        accuracy, or assumed to be as good as possible.
    large_tick_hits, small_tick_hits, slider_end_hits : int, optional
        osu!lazer tick counts for osu!standard.
    hitresult_priority : HitResultPriority or str, optional
        Which hit results to prefer when the statistics are ambiguous.
    **difficulty_options
        Forwarded to :class:`~kiai.difficulty.Difficulty`.

    Raises
    ------
    TypeError
        Raised for unknown options.
    """
    def __init__(self,
                 *,
                 accuracy=None,
                 combo=None,
                 n_geki=None,
                 n_katu=None,
                 n300=None,
                 n100=None,
                 n50=None,
                 misses=None,
                 large_tick_hits=None,
                 small_tick_hits=None,
                 slider_end_hits=None,
                 hitresult_priority=HitResultPriority.best_case,
                 **difficulty_options):
        self.difficulty = Difficulty(**difficulty_options)
        self.accuracy = accuracy
        self.combo = combo
        self.counts = {
            'n_geki': n_geki,
            'n_katu': n_katu,
            'n300': n300,
            'n100': n100,
            'n50': n50,
            'misses': misses,
            'large_tick_hits': large_tick_hits,
            'small_tick_hits': small_tick_hits,
            'slider_end_hits': slider_end_hits,
        }
        self.hitresult_priority = HitResultPriority.parse(hitresult_priority)

    @classmethod
    def from_dict(cls, options):
        """Construct a calculator from a dict of options which may use the
        ``camelCase`` names, like ``{'nGeki': 3, 'hitresultPriority':
        'WorstCase'}``.
        """
        return cls(**options_from_dict(
            options,
            {'n_misses': 'misses', 'miss': 'misses'},
        ))

    @property
    def mods(self):
        return self.difficulty.mods

    @property
    def lazer(self):
        return self.difficulty.lazer

    def _difficulty_of(self, source):
        if isinstance(source, Beatmap):
            return self.difficulty.calculate(source)
        # performance attributes carry the difficulty they were computed
        # against
        difficulty = getattr(source, 'difficulty', None)
        if difficulty is not None:
            return difficulty
        if getattr(source, 'mode', None) is None:
            raise TypeError(
                'expected a Beatmap, difficulty attributes or performance'
                f' attributes, got {type(source).__name__}',
            )
        return source

    def state(self, source):
        """Resolve the full score state.

        Parameters
        ----------
        source : Beatmap, DifficultyAttributes or PerformanceAttributes
            The map of the score.

        Returns
        -------
        state : ScoreState
            The inferred hit statistics.

        Raises
        ------
        InconsistentState
            Raised when the statistics cannot describe a score on the map.
        """
        difficulty = self._difficulty_of(source)
        return self._resolve(difficulty)

    def _resolve(self, difficulty):
        return resolve(
            difficulty.mode,
            difficulty,
            accuracy=self.accuracy,
            combo=self.combo,
            lazer=self.lazer,
            classic=not self.lazer or self.mods.classic,
            priority=self.hitresult_priority,
            **self.counts,
        )

    def calculate(self, source):
        """Compute the performance of the score.

        Parameters
        ----------
        source : Beatmap, DifficultyAttributes or PerformanceAttributes
            The map of the score. Passing previously computed attributes
            skips the difficulty calculation; they must have been computed
            with the same mods.

        Returns
        -------
        performance : PerformanceAttributes
            The mode specific performance attributes.

        Raises
        ------
        InconsistentState
            Raised when the statistics cannot describe a score on the map.
        """
        difficulty = self._difficulty_of(source)
        state = self._resolve(difficulty)
        performance = performance_attributes(
            difficulty,
            self.mods,
            state,
            self.lazer,
        )
        log.info(
            '%s %s: %.2fpp (%.2f stars)',
            difficulty.mode.name,
            self.mods,
            performance.pp,
            difficulty.stars,
        )
        return performance
