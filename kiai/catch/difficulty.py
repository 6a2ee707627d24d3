from collections import namedtuple
import logging
import math

from ..calculator import Calculator
from ..game_mode import GameMode
from ..records import Record
from .objects import (
    HyperDashTracker,
    PalpableKind,
    catch_width,
    palpable_objects,
)
from .skills import CatchDifficultyObject, Movement

log = logging.getLogger(__name__)

DIFFICULTY_MULTIPLIER = 0.153


class CatchDifficultyAttributes(
        Record,
        namedtuple(
            'CatchDifficultyAttributes',
            (
                'mode',
                'stars',
                'is_convert',
                'ar',
                'n_fruits',
                'n_droplets',
                'n_tiny_droplets',
                'max_combo',
            ),
        )):
    """The difficulty of an osu!catch map.

    Parameters
    ----------
    mode : GameMode
        Always :attr:`GameMode.catch`.
    stars : float
        The star rating.
    is_convert : bool
        Was the map converted from osu!standard.
    ar : float
        The approach rate adjusted for the clock rate.
    n_fruits : int
        The fruits, including the fruits at the ends of juice streams.
    n_droplets, n_tiny_droplets : int
        The droplets and tiny droplets of the juice streams.
    max_combo : int
        The maximum combo, the fruits plus the droplets.
    """
    __slots__ = ()
    _summary = ('stars', 'ar', 'n_fruits', 'n_droplets', 'max_combo')


class CatchStrains(
        Record,
        namedtuple('CatchStrains', 'mode section_length movement')):
    """The strain peaks of the osu!catch movement skill.
    """
    __slots__ = ()
    _summary = ('section_length',)


class CatchCalculator(Calculator):
    """The running difficulty calculation of an osu!catch map.

    A unit is one fruit or droplet.

    Parameters
    ----------
    beatmap : Beatmap
        The beatmap, already converted to osu!catch.
    mods : ModifierSet
        The mods of the play.
    attributes : BeatmapAttributes
        The effective attributes.
    hardrock_offsets : bool, optional
        Offset the fruits as with hard rock. Defaults to whether hard rock is
        active.
    """
    mode = GameMode.catch
    section_length = Movement.section_length

    def __init__(self, beatmap, mods, attributes, hardrock_offsets=None):
        super().__init__(beatmap, mods, attributes)
        if hardrock_offsets is None:
            hardrock_offsets = mods.hardrock_offsets
        self.hardrock_offsets = hardrock_offsets
        self.clock_rate = attributes.clock_rate

        self.units = []
        # the tiny droplets generated before each unit
        self._tiny_before = []
        n_tiny = 0
        for ob in palpable_objects(beatmap.hit_objects, hardrock_offsets):
            if ob.gives_combo:
                self.units.append(ob)
                self._tiny_before.append(n_tiny)
            elif ob.kind is PalpableKind.tiny_droplet:
                n_tiny += 1
        self._total_tiny = n_tiny

        cs = attributes.cs
        self.half_catcher_width = (
            catch_width(cs) *
            0.5 *
            # larger circle sizes are harder to play perfectly
            (1 - max(0, cs - 5.5) * 0.0625)
        )
        self.hyper_dash = HyperDashTracker(cs)
        self.movement = Movement(self.clock_rate)
        self.difficulty_objects = []

        self.n_fruits = 0
        self.n_droplets = 0

    @property
    def n_units(self):
        return len(self.units)

    @property
    def n_tiny_droplets(self):
        if self.position == self.n_units:
            return self._total_tiny
        if self.position == 0:
            return 0
        return self._tiny_before[self.position - 1]

    def _feed(self, ix):
        ob = self.units[ix]
        if ob.kind is PalpableKind.fruit:
            self.n_fruits += 1
        else:
            self.n_droplets += 1

        # decides whether the previous unit is a hyperdash
        self.hyper_dash.feed(ob)
        if ix == 0:
            return

        difficulty_object = CatchDifficultyObject(
            ob,
            self.units[ix - 1],
            self.clock_rate,
            self.half_catcher_width,
            self.difficulty_objects,
            len(self.difficulty_objects),
        )
        self.difficulty_objects.append(difficulty_object)
        self.movement.process(difficulty_object)

    def difficulty_attributes(self):
        if self.difficulty_objects:
            movement = self.movement.difficulty_value()
        else:
            movement = 0.0
        stars = math.sqrt(movement) * DIFFICULTY_MULTIPLIER

        log.debug(
            'catch: %d/%d objects, %s, stars=%.4f',
            self.position,
            self.n_units,
            self.mods,
            stars,
        )
        return CatchDifficultyAttributes(
            mode=self.mode,
            stars=stars,
            is_convert=self.beatmap.is_convert,
            ar=self.attributes.ar,
            n_fruits=self.n_fruits,
            n_droplets=self.n_droplets,
            n_tiny_droplets=self.n_tiny_droplets,
            max_combo=self.n_fruits + self.n_droplets,
        )

    def strains(self):
        return CatchStrains(
            mode=self.mode,
            section_length=self.movement.section_length,
            movement=self.movement.current_strain_peaks(),
        )
