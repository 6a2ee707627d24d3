"""Effective beatmap attributes under mods and overrides.
"""
from collections import namedtuple
import logging

from .errors import InvalidRange
from .game_mode import GameMode
from .mod import ModifierSet
from .records import Record
from .utils import (
    difficulty_range,
    inverse_difficulty_range,
    options_from_dict,
)

log = logging.getLogger(__name__)

ATTRIBUTE_RANGE = (-20, 20)
CLOCK_RATE_RANGE = (0.01, 100)

# approach time at AR 0, 5 and 10
PREEMPT_RANGE = (1800, 1200, 450)

# hit windows of osu!standard (also used for osu!catch) at OD 0, 5 and 10
OSU_GREAT_RANGE = (80, 50, 20)
OSU_OK_RANGE = (140, 100, 60)
OSU_MEH_RANGE = (200, 150, 100)

TAIKO_GREAT_RANGE = (50, 35, 20)
TAIKO_OK_RANGE = (120, 80, 50)


def check_range(name, value, bounds):
    """Validate an option.

    Raises
    ------
    InvalidRange
        Raised when ``value`` lies outside of ``bounds``.
    """
    lower, upper = bounds
    if not lower <= value <= upper:
        raise InvalidRange(name, value, lower, upper)
    return value


class HitWindows(Record, namedtuple('HitWindows', 'ar od_great od_ok od_meh')):
    """Hit windows in wall-clock milliseconds.

    Parameters
    ----------
    ar : float
        The approach time (preempt) of hit objects.
    od_great : float
        The window to hit a great (300).
    od_ok : float or None
        The window to hit an ok (100). osu!mania does not report one.
    od_meh : float or None
        The window to hit a meh (50). Only osu!standard and osu!catch have
        one.
    """
    __slots__ = ()


class BeatmapAttributes(
        Record,
        namedtuple(
            'BeatmapAttributes',
            'mode ar od cs hp clock_rate hit_windows',
        )):
    """The attributes of a beatmap after applying mods and overrides.

    ``ar`` and ``od`` are adjusted for the clock rate: they are the values
    that produce the same hit windows at a clock rate of 1.
    """
    __slots__ = ()


class AttributeOverrides(
        namedtuple(
            'AttributeOverrides',
            'ar ar_with_mods cs cs_with_mods hp hp_with_mods od od_with_mods',
        )):
    """Explicit AR, CS, HP and OD values.

    A value of ``None`` means the beatmap's value is used. When the
    ``*_with_mods`` flag is set the value is used as is, otherwise it replaces
    the base value and mods are applied on top of it.
    """
    __slots__ = ()

    def __new__(cls,
                ar=None,
                ar_with_mods=False,
                cs=None,
                cs_with_mods=False,
                hp=None,
                hp_with_mods=False,
                od=None,
                od_with_mods=False):
        for name, value in (('ar', ar), ('cs', cs), ('hp', hp), ('od', od)):
            if value is not None:
                check_range(name, value, ATTRIBUTE_RANGE)

        return super().__new__(
            cls,
            ar,
            bool(ar_with_mods),
            cs,
            bool(cs_with_mods),
            hp,
            bool(hp_with_mods),
            od,
            bool(od_with_mods),
        )


def _modded(name, base, override, with_mods, mods, multiplier):
    if override is not None:
        if with_mods:
            return override
        base = override
    else:
        base = mods.difficulty_adjust.get(name, base)
    value = base * multiplier
    if multiplier > 1:
        # hard rock never pushes an attribute past 10
        value = min(value, 10)
    return value


def hit_windows(mode, ar, od, mods, clock_rate):
    """Compute the hit windows for mod adjusted attributes.

    Parameters
    ----------
    mode : GameMode
        The game mode.
    ar : float
        The mod adjusted approach rate.
    od : float
        The mod adjusted overall difficulty.
    mods : ModifierSet
        The mods. Only osu!mania reads them; its windows scale with hard rock
        and easy instead of its OD.
    clock_rate : float
        The clock rate to scale the windows by.

    Returns
    -------
    windows : HitWindows
        The windows in wall-clock milliseconds, never negative.
    """
    def scaled(value):
        return max(value, 0) / clock_rate

    preempt = scaled(difficulty_range(ar, *PREEMPT_RANGE))

    if mode == GameMode.taiko:
        return HitWindows(
            preempt,
            scaled(difficulty_range(od, *TAIKO_GREAT_RANGE)),
            scaled(difficulty_range(od, *TAIKO_OK_RANGE)),
            None,
        )

    if mode == GameMode.mania:
        great = 64 - 3 * od
        if mods.hard_rock:
            great /= 1.4
        elif mods.easy:
            great *= 1.4
        return HitWindows(preempt, scaled(great), None, None)

    return HitWindows(
        preempt,
        scaled(difficulty_range(od, *OSU_GREAT_RANGE)),
        scaled(difficulty_range(od, *OSU_OK_RANGE)),
        scaled(difficulty_range(od, *OSU_MEH_RANGE)),
    )


def resolve(mode, base, mods, clock_rate=None, overrides=None):
    """Compute the effective attributes of a beatmap.

    Parameters
    ----------
    mode : GameMode
        The game mode.
    base : tuple[float, float, float, float]
        The beatmap's ``(ar, cs, hp, od)``.
    mods : ModifierSet
        The mods of the play.
    clock_rate : float, optional
        Overrides the clock rate of the mods.
    overrides : AttributeOverrides, optional
        Explicit attribute values.

    Returns
    -------
    attributes : BeatmapAttributes
        The effective attributes.
    """
    overrides = overrides or AttributeOverrides()
    if clock_rate is None:
        clock_rate = mods.clock_rate
    check_range('clock_rate', clock_rate, CLOCK_RATE_RANGE)

    ar, cs, hp, od = base
    multiplier = mods.od_ar_hp_multiplier

    ar = _modded('ar', ar, overrides.ar, overrides.ar_with_mods, mods,
                 multiplier)
    cs = _modded('cs', cs, overrides.cs, overrides.cs_with_mods, mods,
                 mods.cs_multiplier)
    hp = _modded('hp', hp, overrides.hp, overrides.hp_with_mods, mods,
                 multiplier)
    if mode == GameMode.mania:
        od = _modded('od', od, overrides.od, overrides.od_with_mods, mods, 1)
    else:
        od = _modded('od', od, overrides.od, overrides.od_with_mods, mods,
                     multiplier)

    windows = hit_windows(mode, ar, od, mods, clock_rate)

    ar = inverse_difficulty_range(windows.ar, *PREEMPT_RANGE)
    if mode == GameMode.taiko:
        od = inverse_difficulty_range(windows.od_great, *TAIKO_GREAT_RANGE)
    elif mode == GameMode.mania:
        od = (64 - windows.od_great) / 3
    else:
        od = inverse_difficulty_range(windows.od_great, *OSU_GREAT_RANGE)

    return BeatmapAttributes(
        mode=mode,
        ar=ar,
        od=od,
        cs=cs,
        hp=hp,
        clock_rate=clock_rate,
        hit_windows=windows,
    )


class BeatmapAttributesBuilder:
    """Compute the effective attributes of a beatmap.

    Parameters
    ----------
    beatmap : Beatmap, optional
        The beatmap to read the base attributes and mode from. Without a
        beatmap every base attribute is 5.
    mode : GameMode, optional
        The mode to compute the attributes for. A beatmap is converted to this
        mode first.
    mods : ModifierSet, int, str, dict or list, optional
        The mods of the play.
    clock_rate : float, optional
        Overrides the clock rate of the mods, in [0.01, 100].
    ar, cs, hp, od : float, optional
        Override the beatmap's attribute, in [-20, 20].
    ar_with_mods, cs_with_mods, hp_with_mods, od_with_mods : bool, optional
        Use the override as is instead of applying mods to it.

    Raises
    ------
    InvalidModifier
        Raised when the mods cannot be resolved.
    InvalidRange
        Raised when an override or the clock rate is out of range.
    """
    def __init__(self,
                 *,
                 beatmap=None,
                 mode=None,
                 mods=None,
                 clock_rate=None,
                 ar=None,
                 ar_with_mods=False,
                 cs=None,
                 cs_with_mods=False,
                 hp=None,
                 hp_with_mods=False,
                 od=None,
                 od_with_mods=False):
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

        if mode is not None:
            mode = GameMode.parse(mode)
        if beatmap is not None and mode is not None:
            beatmap = beatmap.convert(mode, self.mods)
        self.beatmap = beatmap
        if mode is None:
            mode = GameMode.osu if beatmap is None else beatmap.mode
        self.mode = mode

    @classmethod
    def from_dict(cls, options):
        """Construct a builder from a dict of options which may use the
        ``camelCase`` names, like ``{'clockRate': 1.2, 'arWithMods': True}``.
        """
        return cls(**options_from_dict(options, {'map': 'beatmap'}))

    def build(self):
        """Compute the attributes.

        Returns
        -------
        attributes : BeatmapAttributes
            The effective attributes.
        """
        if self.beatmap is None:
            base = (5.0, 5.0, 5.0, 5.0)
        else:
            base = (self.beatmap.ar, self.beatmap.cs, self.beatmap.hp,
                    self.beatmap.od)

        attributes = resolve(
            self.mode,
            base,
            self.mods,
            self.clock_rate,
            self.overrides,
        )
        log.debug('resolved attributes %s with mods %s', attributes, self.mods)
        return attributes
