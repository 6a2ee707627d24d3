from collections import namedtuple
import logging
import math

from ..beatmap import Circle, Slider, Spinner, resolve_stacking, stack_offset
from ..calculator import Calculator
from ..game_mode import GameMode
from ..mod import circle_radius
from ..records import Record
from .difficulty_object import OsuDifficultyObject, OsuObject
from .skills import Aim, Flashlight, Speed, difficulty_to_performance

log = logging.getLogger(__name__)

DIFFICULTY_MULTIPLIER = 0.0675
PERFORMANCE_BASE_MULTIPLIER = 1.15

# circles smaller than this radius would break the distance normalization
MIN_RADIUS = 1.0


class OsuDifficultyAttributes(
        Record,
        namedtuple(
            'OsuDifficultyAttributes',
            (
                'mode',
                'stars',
                'is_convert',
                'aim',
                'aim_difficult_slider_count',
                'speed',
                'flashlight',
                'slider_factor',
                'speed_note_count',
                'aim_difficult_strain_count',
                'speed_difficult_strain_count',
                'ar',
                'od',
                'hp',
                'great_hit_window',
                'ok_hit_window',
                'meh_hit_window',
                'n_circles',
                'n_sliders',
                'n_large_ticks',
                'n_spinners',
                'max_combo',
            ),
        )):
    """The difficulty of an osu!standard map.

    Parameters
    ----------
    mode : GameMode
        Always :attr:`GameMode.osu`.
    stars : float
        The star rating.
    is_convert : bool
        Always ``False``; osu!standard maps are never converts.
    aim, speed, flashlight : float
        The rating of each skill. ``flashlight`` is 0 without the flashlight
        mod.
    aim_difficult_slider_count : float
        The number of sliders weighted by their aim difficulty.
    slider_factor : float
        The ratio of the aim rating without sliders to the aim rating.
    speed_note_count : float
        The number of notes weighted by their speed difficulty.
    aim_difficult_strain_count, speed_difficult_strain_count : float
        The number of objects whose strain is close to the top strains.
    ar, od, hp : float
        The effective attributes; ``ar`` and ``od`` are adjusted for the
        clock rate.
    great_hit_window, ok_hit_window, meh_hit_window : float
        The hit windows in milliseconds, adjusted for the clock rate.
    n_circles, n_sliders, n_spinners : int
        The object counts.
    n_large_ticks : int
        The number of slider ticks and repeats.
    max_combo : int
        The maximum combo.
    """
    __slots__ = ()
    _summary = ('stars', 'aim', 'speed', 'flashlight', 'max_combo')


class OsuStrains(
        Record,
        namedtuple(
            'OsuStrains',
            'mode section_length aim aim_no_sliders speed flashlight',
        )):
    """The strain peaks of each osu!standard skill.
    """
    __slots__ = ()
    _summary = ('section_length',)


def _combo(hit_object):
    if isinstance(hit_object, Slider):
        # head, ticks, repeats and tail
        return 2 + hit_object.n_ticks + hit_object.n_repeats
    return 1


class OsuCalculator(Calculator):
    """The running difficulty calculation of an osu!standard map.
    """
    mode = GameMode.osu

    def __init__(self, beatmap, mods, attributes):
        super().__init__(beatmap, mods, attributes)
        windows = attributes.hit_windows
        self.clock_rate = attributes.clock_rate

        # stacking uses the approach time before the clock rate is applied
        preempt = windows.ar * self.clock_rate

        hit_objects = beatmap.hit_objects
        if mods.hard_rock:
            hit_objects = [ob.flip_vertical() for ob in hit_objects]

        heights = resolve_stacking(
            hit_objects,
            preempt,
            beatmap.stack_leniency,
            beatmap.format_version,
        )
        radius = max(circle_radius(attributes.cs), MIN_RADIUS)
        self.objects = [
            OsuObject(ob, radius, stack_offset(attributes.cs, height), preempt)
            for ob, height in zip(hit_objects, heights)
        ]
        self.difficulty_objects = []

        self.aim = Aim(with_sliders=True)
        self.aim_no_sliders = Aim(with_sliders=False)
        self.speed = Speed(autopilot=mods.autopilot)
        self.flashlight = Flashlight(hidden=mods.hidden)
        self.skills = (
            self.aim,
            self.aim_no_sliders,
            self.speed,
            self.flashlight,
        )

        self.n_circles = 0
        self.n_sliders = 0
        self.n_spinners = 0
        self.n_large_ticks = 0
        self.max_combo = 0

    @property
    def n_units(self):
        return len(self.objects)

    def _feed(self, ix):
        ob = self.objects[ix]
        hit_object = ob.hit_object
        if isinstance(hit_object, Circle):
            self.n_circles += 1
        elif isinstance(hit_object, Slider):
            self.n_sliders += 1
            self.n_large_ticks += hit_object.n_ticks + hit_object.n_repeats
        elif isinstance(hit_object, Spinner):
            self.n_spinners += 1
        self.max_combo += _combo(hit_object)

        # the first object has nothing to move from
        if ix == 0:
            return

        difficulty_object = OsuDifficultyObject(
            ob,
            self.objects[ix - 1],
            self.objects[ix - 2] if ix > 1 else None,
            self.clock_rate,
            self.attributes.hit_windows.od_great,
            self.difficulty_objects,
            len(self.difficulty_objects),
        )
        self.difficulty_objects.append(difficulty_object)
        for skill in self.skills:
            skill.process(difficulty_object)

    def difficulty_attributes(self):
        mods = self.mods
        attributes = self.attributes
        windows = attributes.hit_windows

        if self.position == 0:
            aim_value = aim_no_sliders_value = speed_value = 0.0
            flashlight_value = 0.0
        else:
            aim_value = self.aim.difficulty_value()
            aim_no_sliders_value = self.aim_no_sliders.difficulty_value()
            speed_value = self.speed.difficulty_value()
            flashlight_value = self.flashlight.difficulty_value()

        aim_rating = math.sqrt(aim_value) * DIFFICULTY_MULTIPLIER
        aim_rating_no_sliders = (
            math.sqrt(aim_no_sliders_value) * DIFFICULTY_MULTIPLIER
        )
        speed_rating = math.sqrt(speed_value) * DIFFICULTY_MULTIPLIER
        flashlight_rating = 0.0
        if mods.flashlight:
            flashlight_rating = (
                math.sqrt(flashlight_value) * DIFFICULTY_MULTIPLIER
            )

        if aim_rating > 0:
            slider_factor = aim_rating_no_sliders / aim_rating
        else:
            slider_factor = 1.0

        speed_notes = self.speed.relevant_note_count()
        difficult_sliders = self.aim.difficult_sliders()
        aim_strain_count = self.aim.count_top_weighted_strains(aim_value)
        speed_strain_count = self.speed.count_top_weighted_strains(
            speed_value,
        )

        if mods.touch_device:
            aim_rating **= 0.8
            flashlight_rating **= 0.8

        if mods.relax:
            aim_rating *= 0.9
            speed_rating = 0.0
            flashlight_rating *= 0.7
        elif mods.autopilot:
            speed_rating *= 0.5
            aim_rating = 0.0
            flashlight_rating *= 0.4

        # a zero rating adds nothing, not the floor of the pp curve
        base_aim_performance = 0.0
        if aim_rating > 0:
            base_aim_performance = difficulty_to_performance(aim_rating)
        base_speed_performance = 0.0
        if speed_rating > 0:
            base_speed_performance = difficulty_to_performance(speed_rating)
        base_flashlight_performance = 0.0
        if flashlight_rating > 0:
            base_flashlight_performance = (
                Flashlight.difficulty_to_performance(flashlight_rating)
            )

        base_performance = (
            base_aim_performance ** 1.1 +
            base_speed_performance ** 1.1 +
            base_flashlight_performance ** 1.1
        ) ** (1.0 / 1.1)

        if base_performance > 0.00001:
            stars = (
                PERFORMANCE_BASE_MULTIPLIER ** (1 / 3) *
                0.027 *
                ((100000 / 2 ** (1 / 1.1) * base_performance) ** (1 / 3) +
                 4)
            )
        else:
            stars = 0.0

        log.debug(
            'osu: %d/%d objects, %s, stars=%.4f',
            self.position,
            self.n_units,
            mods,
            stars,
        )
        return OsuDifficultyAttributes(
            mode=self.mode,
            stars=stars,
            is_convert=False,
            aim=aim_rating,
            aim_difficult_slider_count=difficult_sliders,
            speed=speed_rating,
            flashlight=flashlight_rating,
            slider_factor=slider_factor,
            speed_note_count=speed_notes,
            aim_difficult_strain_count=aim_strain_count,
            speed_difficult_strain_count=speed_strain_count,
            ar=attributes.ar,
            od=attributes.od,
            hp=attributes.hp,
            great_hit_window=windows.od_great,
            ok_hit_window=windows.od_ok,
            meh_hit_window=windows.od_meh,
            n_circles=self.n_circles,
            n_sliders=self.n_sliders,
            n_large_ticks=self.n_large_ticks,
            n_spinners=self.n_spinners,
            max_combo=self.max_combo,
        )

    def strains(self):
        return OsuStrains(
            mode=self.mode,
            section_length=self.aim.section_length,
            aim=self.aim.current_strain_peaks(),
            aim_no_sliders=self.aim_no_sliders.current_strain_peaks(),
            speed=self.speed.current_strain_peaks(),
            flashlight=self.flashlight.current_strain_peaks(),
        )
