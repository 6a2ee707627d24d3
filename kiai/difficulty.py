"""Star ratings and strain peaks of beatmaps.
"""
import logging

from .attributes import (
    CLOCK_RATE_RANGE,
    AttributeOverrides,
    BeatmapAttributesBuilder,
    check_range,
)
from .catch import CatchCalculator
from .game_mode import GameMode
from .mania import ManiaCalculator
from .mod import ModifierSet
from .osu import OsuCalculator
from .taiko import TaikoCalculator
from .utils import options_from_dict

log = logging.getLogger(__name__)

CALCULATORS = {
    GameMode.osu: OsuCalculator,
    GameMode.taiko: TaikoCalculator,
    GameMode.catch: CatchCalculator,
    GameMode.mania: ManiaCalculator,
}


def _check_passed_objects(passed_objects):
    if passed_objects is not None and passed_objects < 0:
        raise ValueError(
            f'passed_objects must not be negative, got {passed_objects!r}',
        )
    return passed_objects


class Difficulty:
    """Compute the difficulty of beatmaps.

    Parameters
    ----------
    mods : ModifierSet, int, str, dict or list, optional
        The mods of the play.
    clock_rate : float, optional
        Overrides the clock rate of the mods, in [0.01, 100].
    ar, cs, hp, od : float, optional
        Override the beatmap's attribute, in [-20, 20].
    ar_with_mods, cs_with_mods, hp_with_mods, od_with_mods : bool, optional
        Use the override as is instead of applying mods to it.
    passed_objects : int, optional
        Only rate the first ``passed_objects`` objects, as for a failed or
        in progress play. In osu!catch this counts fruits and droplets.
    hardrock_offsets : bool, optional
        Offset osu!catch fruits as with hard rock. Defaults to whether hard
        rock is active.
    lazer : bool, optional
        Rate osu!lazer scores. This only matters for performance.

    Raises
    ------
    InvalidModifier
        Raised when the mods cannot be resolved.
    InvalidRange
        Raised when an override or the clock rate is out of range.

    Examples
    --------
    >>> Difficulty(mods='HDDT').calculate(beatmap).stars  # doctest: +SKIP
    6.8412...
    """
    def __init__(self,
                 *,
                 mods=None,
                 clock_rate=None,
                 ar=None,
                 ar_with_mods=False,
                 cs=None,
                 cs_with_mods=False,
                 hp=None,
                 hp_with_mods=False,
                 od=None,
                 od_with_mods=False,
                 passed_objects=None,
                 hardrock_offsets=None,
                 lazer=True):
        self.mods = ModifierSet.parse(mods)
        if clock_rate is not None:
            check_range('clock_rate', clock_rate, CLOCK_RATE_RANGE)
        self.clock_rate = clock_rate
        self.overrides = AttributeOverrides(
            ar,
            ar_with_mods,
            cs,
            cs_with_mods,
            hp,
            hp_with_mods,
            od,
            od_with_mods,
        )
        self.passed_objects = _check_passed_objects(passed_objects)
        self.hardrock_offsets = hardrock_offsets
        self.lazer = lazer

    @classmethod
    def from_dict(cls, options):
        """Construct a calculator from a dict of options which may use the
        ``camelCase`` names, like ``{'passedObjects': 100}``.

        Raises
        ------
        TypeError
            Raised for unknown options.
        """
        return cls(**options_from_dict(options))

    def options(self):
        """The options of this calculator as keyword arguments.
        """
        return {
            'mods': self.mods,
            'clock_rate': self.clock_rate,
            **self.overrides._asdict(),
            'passed_objects': self.passed_objects,
            'hardrock_offsets': self.hardrock_offsets,
            'lazer': self.lazer,
        }

    def beatmap_attributes(self, beatmap):
        """The effective attributes of ``beatmap`` under these options.
        """
        return BeatmapAttributesBuilder(
            beatmap=beatmap,
            mods=self.mods,
            clock_rate=self.clock_rate,
            **self.overrides._asdict(),
        ).build()

    def calculator(self, beatmap):
        """A fresh calculator for ``beatmap`` which has not consumed any
        objects.
        """
        cls = CALCULATORS[beatmap.mode]
        attributes = self.beatmap_attributes(beatmap)
        if beatmap.mode == GameMode.catch:
            return cls(
                beatmap,
                self.mods,
                attributes,
                hardrock_offsets=self.hardrock_offsets,
            )
        return cls(beatmap, self.mods, attributes)

    def _run(self, beatmap):
        calculator = self.calculator(beatmap)
        if self.passed_objects is None:
            calculator.feed(calculator.n_units)
        else:
            calculator.feed(self.passed_objects)
        log.debug(
            'rated %r over %d of %d objects',
            beatmap,
            calculator.position,
            calculator.n_units,
        )
        return calculator

    def calculate(self, beatmap):
        """Compute the difficulty attributes of a beatmap.

        Parameters
        ----------
        beatmap : Beatmap
            The beatmap, in the mode to rate. Use :meth:`Beatmap.convert` to
            rate an osu!standard map in another mode.

        Returns
        -------
        attributes : DifficultyAttributes
            The mode specific difficulty attributes.
        """
        return self._run(beatmap).difficulty_attributes()

    def strains(self, beatmap):
        """Compute the strain peaks of each skill.

        Parameters
        ----------
        beatmap : Beatmap
            The beatmap.

        Returns
        -------
        strains : Strains
            The mode specific strain peaks, one per section of
            ``section_length`` milliseconds.
        """
        return self._run(beatmap).strains()

    def gradual_difficulty(self, beatmap):
        """Compute the difficulty one object at a time.

        ``passed_objects`` is ignored.

        Returns
        -------
        gradual : GradualDifficulty
            The gradual calculator.
        """
        from .gradual import GradualDifficulty
        return GradualDifficulty(self, beatmap)

    def gradual_performance(self, beatmap):
        """Compute the performance one object at a time.

        ``passed_objects`` is ignored.

        Returns
        -------
        gradual : GradualPerformance
            The gradual calculator.
        """
        from .gradual import GradualPerformance
        return GradualPerformance(self, beatmap)
