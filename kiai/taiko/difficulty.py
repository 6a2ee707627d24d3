from collections import namedtuple
import logging
import math

from ..beatmap import DEFAULT_BEAT_LENGTH, Circle
from ..calculator import Calculator
from ..game_mode import GameMode
from ..records import Record
from ..skill import weighted_sum
from ..utils import norm
from .difficulty_object import TaikoDifficultyObject
from .skills import Colour, Reading, Rhythm, Stamina

log = logging.getLogger(__name__)

DIFFICULTY_MULTIPLIER = 0.084375
RHYTHM_MULTIPLIER = 0.2 * DIFFICULTY_MULTIPLIER
READING_MULTIPLIER = 0.1 * DIFFICULTY_MULTIPLIER
COLOUR_MULTIPLIER = 0.375 * DIFFICULTY_MULTIPLIER
STAMINA_MULTIPLIER = 0.375 * DIFFICULTY_MULTIPLIER


class TaikoDifficultyAttributes(
        Record,
        namedtuple(
            'TaikoDifficultyAttributes',
            (
                'mode',
                'stars',
                'is_convert',
                'stamina',
                'rhythm',
                'color',
                'reading',
                'mono_stamina_factor',
                'peak',
                'great_hit_window',
                'ok_hit_window',
                'max_combo',
            ),
        )):
    """The difficulty of an osu!taiko map.

    Parameters
    ----------
    mode : GameMode
        Always :attr:`GameMode.taiko`.
    stars : float
        The star rating.
    is_convert : bool
        Was the map converted from osu!standard.
    stamina, rhythm, color, reading : float
        The rating of each skill.
    mono_stamina_factor : float
        How much of the stamina rating comes from single colour streams, in
        [0, 1].
    peak : float
        The combined rating before it is rescaled into stars.
    great_hit_window, ok_hit_window : float
        The hit windows in milliseconds, adjusted for the clock rate.
    max_combo : int
        The number of hits, which is also the maximum combo.
    """
    __slots__ = ()
    _summary = ('stars', 'stamina', 'rhythm', 'color', 'reading', 'max_combo')


class TaikoStrains(
        Record,
        namedtuple(
            'TaikoStrains',
            'mode section_length color rhythm stamina reading'
            ' single_color_stamina',
        )):
    """The strain peaks of each osu!taiko skill.
    """
    __slots__ = ()
    _summary = ('section_length',)


def rescale(stars):
    """Compress large ratings onto the star scale.
    """
    if stars < 0:
        return stars
    return 10.43 * math.log(stars / 8 + 1)


class TaikoCalculator(Calculator):
    """The running difficulty calculation of an osu!taiko map.
    """
    mode = GameMode.taiko

    def __init__(self, beatmap, mods, attributes):
        super().__init__(beatmap, mods, attributes)
        self.clock_rate = attributes.clock_rate
        self.hit_objects = beatmap.hit_objects
        self.is_convert = beatmap.is_convert

        self.difficulty_objects = []
        self.notes = []
        self.mono_notes = {}

        self.rhythm = Rhythm()
        self.reading = Reading()
        self.colour = Colour()
        self.stamina = Stamina(single_colour=False,
                               is_convert=self.is_convert)
        self.single_colour_stamina = Stamina(single_colour=True,
                                             is_convert=self.is_convert)
        self.skills = (
            self.rhythm,
            self.reading,
            self.colour,
            self.stamina,
            self.single_colour_stamina,
        )
        self.max_combo = 0

    @property
    def n_units(self):
        return len(self.hit_objects)

    def _effective_bpm(self, time):
        timing_point = self.beatmap.timing_point_at(time)
        if timing_point is None:
            beat_length = DEFAULT_BEAT_LENGTH
            velocity = 1.0
        else:
            beat_length = timing_point.beat_length
            velocity = timing_point.slider_velocity
        return (
            60000 / beat_length *
            velocity *
            self.beatmap.slider_multiplier *
            self.clock_rate
        )

    def _feed(self, ix):
        hit_object = self.hit_objects[ix]
        if isinstance(hit_object, Circle):
            self.max_combo += 1

        # rhythm needs the two gaps before an object
        if ix < 2:
            return

        difficulty_object = TaikoDifficultyObject(
            hit_object,
            self.hit_objects[ix - 1],
            self.hit_objects[ix - 2],
            self.clock_rate,
            self.difficulty_objects,
            len(self.difficulty_objects),
            self.notes,
            self.mono_notes,
            self._effective_bpm(hit_object.time),
        )
        self.difficulty_objects.append(difficulty_object)
        for skill in self.skills:
            skill.process(difficulty_object)

    def _combined_rating(self, strain_length_bonus):
        relax = self.mods.relax
        peaks = []
        for rhythm, reading, colour, stamina in zip(
                self.rhythm.current_strain_peaks(),
                self.reading.current_strain_peaks(),
                self.colour.current_strain_peaks(),
                self.stamina.current_strain_peaks()):
            rhythm *= RHYTHM_MULTIPLIER
            reading *= READING_MULTIPLIER
            colour = 0.0 if relax else colour * COLOUR_MULTIPLIER
            stamina *= STAMINA_MULTIPLIER * strain_length_bonus
            if self.is_convert or relax:
                stamina /= 1.5

            peaks.append(norm(2, norm(1.5, colour, stamina), rhythm, reading))

        return weighted_sum(peaks, 0.9)

    def difficulty_attributes(self):
        windows = self.attributes.hit_windows

        if self.difficulty_objects:
            rhythm_value = self.rhythm.difficulty_value()
            reading_value = self.reading.difficulty_value()
            colour_value = self.colour.difficulty_value()
            stamina_value = self.stamina.difficulty_value()
            mono_value = self.single_colour_stamina.difficulty_value()
        else:
            rhythm_value = reading_value = colour_value = 0.0
            stamina_value = mono_value = 0.0

        rhythm = rhythm_value * RHYTHM_MULTIPLIER
        reading = reading_value * READING_MULTIPLIER
        colour = colour_value * COLOUR_MULTIPLIER
        stamina = stamina_value * STAMINA_MULTIPLIER
        mono_stamina = mono_value * STAMINA_MULTIPLIER

        if stamina == 0:
            mono_stamina_factor = 1.0
        else:
            mono_stamina_factor = (mono_stamina / stamina) ** 5

        difficult_strains = self.stamina.count_top_weighted_strains(
            stamina_value,
        )
        strain_length_bonus = (
            1 +
            min(max((difficult_strains - 1000) / 3700, 0), 0.15) +
            min(max(stamina - 7, 0), 0.05)
        )

        if self.difficulty_objects:
            peak = self._combined_rating(strain_length_bonus)
        else:
            peak = 0.0

        stars = rescale(peak * 1.4)
        if self.is_convert:
            stars *= 0.925
        if self.mods.relax:
            stars *= 0.6

        log.debug(
            'taiko: %d/%d objects, %s, stars=%.4f',
            self.position,
            self.n_units,
            self.mods,
            stars,
        )
        return TaikoDifficultyAttributes(
            mode=self.mode,
            stars=stars,
            is_convert=self.is_convert,
            stamina=stamina,
            rhythm=rhythm,
            color=colour,
            reading=reading,
            mono_stamina_factor=mono_stamina_factor,
            peak=peak,
            great_hit_window=windows.od_great,
            ok_hit_window=windows.od_ok,
            max_combo=self.max_combo,
        )

    def strains(self):
        return TaikoStrains(
            mode=self.mode,
            section_length=self.rhythm.section_length,
            color=self.colour.current_strain_peaks(),
            rhythm=self.rhythm.current_strain_peaks(),
            stamina=self.stamina.current_strain_peaks(),
            reading=self.reading.current_strain_peaks(),
            single_color_stamina=(
                self.single_colour_stamina.current_strain_peaks()
            ),
        )
