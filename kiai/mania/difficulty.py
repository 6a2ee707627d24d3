from collections import namedtuple
import logging

from ..beatmap import HoldNote
from ..calculator import Calculator
from ..game_mode import GameMode
from ..position import Position
from ..records import Record
from .skills import ManiaDifficultyObject, Strain

log = logging.getLogger(__name__)

DIFFICULTY_MULTIPLIER = 0.018

# the key count of a map is its circle size, within these bounds
MIN_KEYS = 1
MAX_KEYS = 18


class ManiaDifficultyAttributes(
        Record,
        namedtuple(
            'ManiaDifficultyAttributes',
            (
                'mode',
                'stars',
                'is_convert',
                'n_objects',
                'n_hold_notes',
                'great_hit_window',
                'max_combo',
            ),
        )):
    """The difficulty of an osu!mania map.

    Parameters
    ----------
    mode : GameMode
        Always :attr:`GameMode.mania`.
    stars : float
        The star rating.
    is_convert : bool
        Was the map converted from osu!standard.
    n_objects : int
        The notes and hold notes.
    n_hold_notes : int
        The hold notes.
    great_hit_window : float
        The great window in milliseconds, adjusted for the clock rate.
    max_combo : int
        The maximum combo; hold notes count twice.
    """
    __slots__ = ()
    _summary = ('stars', 'n_objects', 'n_hold_notes', 'max_combo')


class ManiaStrains(
        Record,
        namedtuple('ManiaStrains', 'mode section_length strains')):
    """The strain peaks of osu!mania.
    """
    __slots__ = ()
    _summary = ('section_length',)


def key_count(beatmap):
    """The number of columns of an osu!mania beatmap.
    """
    return min(max(int(round(beatmap.cs)), MIN_KEYS), MAX_KEYS)


def column(hit_object, n_columns):
    """The column a note is in, from its x coordinate.
    """
    ix = int(hit_object.position.x * n_columns // Position.x_max)
    return min(max(ix, 0), n_columns - 1)


class ManiaCalculator(Calculator):
    """The running difficulty calculation of an osu!mania map.
    """
    mode = GameMode.mania

    def __init__(self, beatmap, mods, attributes):
        super().__init__(beatmap, mods, attributes)
        self.clock_rate = attributes.clock_rate
        self.n_columns = key_count(beatmap)

        # notes at the same rounded time are ordered by column
        self.notes = sorted(
            beatmap.hit_objects,
            key=lambda ob: (
                int(round(ob.time)),
                column(ob, self.n_columns),
            ),
        )
        self.strain = Strain(self.n_columns)
        self.difficulty_objects = []

        self.n_objects = 0
        self.n_hold_notes = 0

    @property
    def n_units(self):
        return len(self.notes)

    def _feed(self, ix):
        note = self.notes[ix]
        self.n_objects += 1
        if isinstance(note, HoldNote):
            self.n_hold_notes += 1

        if ix == 0:
            return

        difficulty_object = ManiaDifficultyObject(
            note,
            self.notes[ix - 1],
            column(note, self.n_columns),
            self.clock_rate,
            self.difficulty_objects,
            len(self.difficulty_objects),
        )
        self.difficulty_objects.append(difficulty_object)
        self.strain.process(difficulty_object)

    def difficulty_attributes(self):
        if self.difficulty_objects:
            strain = self.strain.difficulty_value()
        else:
            strain = 0.0
        stars = strain * DIFFICULTY_MULTIPLIER

        log.debug(
            'mania: %d/%d objects, %dK, %s, stars=%.4f',
            self.position,
            self.n_units,
            self.n_columns,
            self.mods,
            stars,
        )
        return ManiaDifficultyAttributes(
            mode=self.mode,
            stars=stars,
            is_convert=self.beatmap.is_convert,
            n_objects=self.n_objects,
            n_hold_notes=self.n_hold_notes,
            great_hit_window=self.attributes.hit_windows.od_great,
            max_combo=self.n_objects + self.n_hold_notes,
        )

    def strains(self):
        return ManiaStrains(
            mode=self.mode,
            section_length=self.strain.section_length,
            strains=self.strain.current_strain_peaks(),
        )
