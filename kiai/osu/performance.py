from collections import namedtuple
import logging
import math

from scipy.special import erf, erfinv

from ..game_mode import GameMode
from ..records import Record
from ..score_state import accuracy
from ..utils import lerp, reverse_lerp
from .skills import Flashlight, difficulty_to_performance

log = logging.getLogger(__name__)

PERFORMANCE_BASE_MULTIPLIER = 1.15


class OsuPerformanceAttributes(
        Record,
        namedtuple(
            'OsuPerformanceAttributes',
            (
                'mode',
                'pp',
                'pp_acc',
                'pp_aim',
                'pp_speed',
                'pp_flashlight',
                'effective_miss_count',
                'speed_deviation',
                'difficulty',
                'state',
            ),
        )):
    """The performance of an osu!standard score.

    Parameters
    ----------
    mode : GameMode
        Always :attr:`GameMode.osu`.
    pp : float
        The total performance points.
    pp_acc, pp_aim, pp_speed, pp_flashlight : float
        The performance of each skill.
    effective_miss_count : float
        The misses, plus the slider breaks estimated from the combo.
    speed_deviation : float or None
        The estimated standard deviation of the hit errors on speed notes in
        milliseconds. ``None`` when nothing was hit.
    difficulty : OsuDifficultyAttributes
        The difficulty the score was computed against.
    state : ScoreState
        The hit statistics of the score.
    """
    __slots__ = ()
    _summary = ('pp', 'pp_aim', 'pp_speed', 'pp_acc', 'pp_flashlight')


def miss_penalty(miss_count, difficult_strain_count):
    """Scale a skill's performance for the misses, assuming the misses are
    on the hardest strains.
    """
    if difficult_strain_count <= 1:
        return 0.0
    log_count = math.log(difficult_strain_count)
    return 0.96 / (miss_count / (4 * log_count ** 0.94) + 1)


def calculate_deviation(great_window,
                        ok_window,
                        meh_window,
                        n_great,
                        n_ok,
                        n_meh):
    """Estimate the standard deviation of the hit errors.

    The great hits give a lower bound on the probability of hitting inside
    the great window at 99% confidence; assuming normally distributed hit
    errors this bounds the deviation. The oks and mehs are assumed to be
    spread uniformly over their windows.

    Returns
    -------
    deviation : float or None
        The deviation in milliseconds, ``None`` when nothing was hit.
    """
    if n_great + n_ok + n_meh <= 0:
        return None

    # misses and mehs say nothing about the great window
    n = max(1.0, n_great + n_ok)
    z = 2.32634787404
    p = n_great / n
    p_lower = (
        (n * p + z * z / 2) / (n + z * z) -
        z / (n + z * z) * math.sqrt(n * p * (1 - p) + z * z / 4)
    )

    limit = ok_window / math.sqrt(3)
    if p_lower <= 0 or great_window <= 0:
        deviation = limit
    else:
        deviation = great_window / (math.sqrt(2) * erfinv(p_lower))
        random_value = (
            math.sqrt(2 / math.pi) *
            ok_window *
            math.exp(-0.5 * (ok_window / deviation) ** 2) /
            (deviation * erf(ok_window / (math.sqrt(2) * deviation)))
        )
        if random_value >= 1:
            deviation = limit
        else:
            deviation *= math.sqrt(1 - random_value)
            deviation = min(deviation, limit)

    meh_variance = (
        meh_window ** 2 + ok_window * meh_window + ok_window ** 2
    ) / 3
    return math.sqrt(
        ((n_great + n_ok) * deviation ** 2 + n_meh * meh_variance) /
        (n_great + n_ok + n_meh),
    )


class OsuPerformanceCalculator:
    """Compute the performance of an osu!standard score.

    Parameters
    ----------
    difficulty : OsuDifficultyAttributes
        The difficulty of the map.
    mods : ModifierSet
        The mods of the score.
    state : ScoreState
        The full hit statistics.
    lazer : bool, optional
        Is this an osu!lazer score. Stable scores use classic slider
        accuracy.
    """
    def __init__(self, difficulty, mods, state, lazer=True):
        self.difficulty = difficulty
        self.mods = mods
        self.state = state
        self.lazer = lazer
        self.classic = not lazer or mods.classic

        self.total_hits = state.total_hits(GameMode.osu)
        self.total_successful_hits = state.n300 + state.n100 + state.n50
        self.accuracy = accuracy(
            GameMode.osu,
            state,
            difficulty,
            lazer=lazer,
            classic=self.classic,
        )

    def effective_miss_count(self):
        """The misses plus an estimate of the slider breaks.
        """
        difficulty = self.difficulty
        state = self.state
        misses = float(state.misses)

        if difficulty.n_sliders > 0:
            if self.classic:
                threshold = difficulty.max_combo - 0.1 * difficulty.n_sliders
                if state.max_combo < threshold:
                    misses = threshold / max(1, state.max_combo)
                misses = min(misses, state.n100 + state.n50 + state.misses)
            else:
                ends_dropped = difficulty.n_sliders - state.slider_end_hits
                ticks_missed = (
                    difficulty.n_large_ticks - state.large_tick_hits
                )
                threshold = difficulty.max_combo - ends_dropped
                if state.max_combo < threshold:
                    misses = threshold / max(1, state.max_combo)
                misses = min(misses, ticks_missed + state.misses)

        misses = max(float(state.misses), misses)
        return min(float(self.total_hits), misses)

    def length_bonus(self):
        total_hits = self.total_hits
        bonus = 0.95 + 0.4 * min(1.0, total_hits / 2000)
        if total_hits > 2000:
            bonus += math.log10(total_hits / 2000) * 0.5
        return bonus

    def speed_deviation(self):
        """Estimate the hit error deviation on the speed notes.
        """
        if self.total_successful_hits == 0:
            return None

        state = self.state
        speed_notes = self.difficulty.speed_note_count
        speed_notes += (self.total_hits - speed_notes) * 0.1

        # assume the misses and mehs are on speed notes first
        relevant_misses = min(state.misses, speed_notes)
        relevant_mehs = min(state.n50, speed_notes - relevant_misses)
        relevant_oks = min(
            state.n100,
            speed_notes - relevant_misses - relevant_mehs,
        )
        relevant_greats = max(
            0.0,
            speed_notes - relevant_misses - relevant_mehs - relevant_oks,
        )

        return calculate_deviation(
            self.difficulty.great_hit_window,
            self.difficulty.ok_hit_window,
            self.difficulty.meh_hit_window,
            relevant_greats,
            relevant_oks,
            relevant_mehs,
        )

    def aim_value(self, effective_misses):
        if self.mods.autopilot:
            return 0.0

        difficulty = self.difficulty
        state = self.state
        aim = difficulty.aim

        difficult_sliders = difficulty.aim_difficult_slider_count
        if difficulty.n_sliders > 0 and difficult_sliders > 0:
            if self.classic:
                possibly_dropped = state.n100 + state.n50 + state.misses
                improperly_followed = min(
                    possibly_dropped,
                    difficulty.max_combo - state.max_combo,
                )
            else:
                improperly_followed = (
                    difficulty.n_sliders -
                    state.slider_end_hits +
                    difficulty.n_large_ticks -
                    state.large_tick_hits
                )
            improperly_followed = min(
                max(improperly_followed, 0),
                difficult_sliders,
            )
            slider_factor = difficulty.slider_factor
            aim *= (
                (1 - slider_factor) *
                (1 - improperly_followed / difficult_sliders) ** 3 +
                slider_factor
            )

        value = difficulty_to_performance(aim)
        length_bonus = self.length_bonus()
        value *= length_bonus

        if effective_misses > 0:
            value *= miss_penalty(
                effective_misses,
                difficulty.aim_difficult_strain_count,
            )

        ar = difficulty.ar
        ar_factor = 0.0
        if not self.mods.relax:
            if ar > 10.33:
                ar_factor = 0.3 * (ar - 10.33)
            elif ar < 8:
                ar_factor = 0.05 * (8 - ar)
        value *= 1 + ar_factor * length_bonus

        if self.mods.blinds:
            value *= (
                1.3 +
                self.total_hits *
                (0.0016 / (1 + 2 * effective_misses)) *
                self.accuracy ** 16 *
                (1 - 0.003 * difficulty.hp ** 2)
            )
        elif self.mods.hidden or self.mods.traceable:
            value *= 1 + 0.04 * (12 - ar)

        value *= self.accuracy
        value *= 0.98 + difficulty.od ** 2 / 2500
        return value

    def speed_high_deviation_nerf(self, speed_deviation):
        """Scale down speed performance which is unlikely at the deviation
        of the hits.
        """
        speed_value = difficulty_to_performance(self.difficulty.speed)
        cutoff = 100 + 220 * (22 / speed_deviation) ** 6.5
        if speed_value <= cutoff:
            return 1.0

        scale = 50
        adjusted = scale * (
            math.log((speed_value - cutoff) / scale + 1) + cutoff / scale
        )
        adjusted = lerp(
            adjusted,
            speed_value,
            1 - reverse_lerp(speed_deviation, 22.0, 27.0),
        )
        return adjusted / speed_value

    def speed_value(self, effective_misses, speed_deviation):
        if self.mods.relax or speed_deviation is None:
            return 0.0

        difficulty = self.difficulty
        state = self.state

        value = difficulty_to_performance(difficulty.speed)
        length_bonus = self.length_bonus()
        value *= length_bonus

        if effective_misses > 0:
            value *= miss_penalty(
                effective_misses,
                difficulty.speed_difficult_strain_count,
            )

        ar = difficulty.ar
        ar_factor = 0.0
        if not self.mods.autopilot and ar > 10.33:
            ar_factor = 0.3 * (ar - 10.33)
        value *= 1 + ar_factor * length_bonus

        if self.mods.blinds:
            value *= 1.12
        elif self.mods.hidden or self.mods.traceable:
            value *= 1 + 0.04 * (12 - ar)

        value *= self.speed_high_deviation_nerf(speed_deviation)

        speed_notes = difficulty.speed_note_count
        difference = max(0.0, self.total_hits - speed_notes)
        relevant_greats = max(0.0, state.n300 - difference)
        relevant_oks = max(0.0, state.n100 - max(0.0, difference - state.n300))
        relevant_mehs = max(
            0.0,
            state.n50 - max(0.0, difference - state.n300 - state.n100),
        )
        if speed_notes == 0:
            relevant_accuracy = 0.0
        else:
            relevant_accuracy = (
                relevant_greats * 6 + relevant_oks * 2 + relevant_mehs
            ) / (speed_notes * 6)

        od = difficulty.od
        value *= (
            (0.95 + od ** 2 / 750) *
            ((self.accuracy + relevant_accuracy) / 2) ** ((14.5 - od) / 2)
        )
        return value

    def accuracy_value(self):
        if self.mods.relax:
            return 0.0

        difficulty = self.difficulty
        state = self.state

        n_objects = difficulty.n_circles
        if not self.classic:
            n_objects += difficulty.n_sliders

        if n_objects > 0:
            better_accuracy = (
                (state.n300 - (self.total_hits - n_objects)) * 6 +
                state.n100 * 2 +
                state.n50
            ) / (n_objects * 6)
        else:
            better_accuracy = 0.0
        better_accuracy = max(better_accuracy, 0.0)

        value = 1.52163 ** difficulty.od * better_accuracy ** 24 * 2.83
        value *= min(1.15, (n_objects / 1000) ** 0.3)

        if self.mods.blinds:
            value *= 1.14
        elif self.mods.hidden or self.mods.traceable:
            value *= 1.08

        if self.mods.flashlight:
            value *= 1.02
        return value

    def flashlight_value(self, effective_misses):
        if not self.mods.flashlight:
            return 0.0

        difficulty = self.difficulty
        total_hits = self.total_hits
        value = Flashlight.difficulty_to_performance(difficulty.flashlight)

        if effective_misses > 0:
            value *= 0.97 * (
                (1 - (effective_misses / total_hits) ** 0.775) **
                effective_misses ** 0.875
            )

        if difficulty.max_combo > 0:
            value *= min(
                self.state.max_combo ** 0.8 / difficulty.max_combo ** 0.8,
                1.0,
            )

        length_factor = 0.7 + 0.1 * min(1.0, total_hits / 200)
        if total_hits > 200:
            length_factor += 0.2 * min(1.0, (total_hits - 200) / 200)
        value *= length_factor

        value *= 0.5 + self.accuracy / 2
        value *= 0.98 + difficulty.od ** 2 / 2500
        return value

    def calculate(self):
        """Compute the performance.

        Returns
        -------
        performance : OsuPerformanceAttributes
            The performance of the score.
        """
        difficulty = self.difficulty
        state = self.state
        mods = self.mods

        if self.total_hits == 0:
            return OsuPerformanceAttributes(
                mode=GameMode.osu,
                pp=0.0,
                pp_acc=0.0,
                pp_aim=0.0,
                pp_speed=0.0,
                pp_flashlight=0.0,
                effective_miss_count=0.0,
                speed_deviation=None,
                difficulty=difficulty,
                state=state,
            )

        effective_misses = self.effective_miss_count()

        multiplier = PERFORMANCE_BASE_MULTIPLIER
        if mods.no_fail:
            multiplier *= max(0.9, 1 - 0.02 * effective_misses)
        if mods.spun_out:
            multiplier *= 1 - (difficulty.n_spinners / self.total_hits) ** 0.85

        if mods.relax:
            od = difficulty.od
            ok_multiplier = meh_multiplier = 1.0
            if od > 0:
                ok_multiplier = max(0.0, 1 - (od / 13.33) ** 1.8)
                meh_multiplier = max(0.0, 1 - (od / 13.33) ** 5)
            # oks and mehs are mostly misaimed under relax
            effective_misses = min(
                effective_misses +
                state.n100 * ok_multiplier +
                state.n50 * meh_multiplier,
                float(self.total_hits),
            )

        speed_deviation = self.speed_deviation()
        aim = self.aim_value(effective_misses)
        speed = self.speed_value(effective_misses, speed_deviation)
        acc = self.accuracy_value()
        flashlight = self.flashlight_value(effective_misses)

        pp = (
            aim ** 1.1 + speed ** 1.1 + acc ** 1.1 + flashlight ** 1.1
        ) ** (1 / 1.1) * multiplier

        log.debug('osu: %s %s pp=%.4f', mods, state, pp)
        return OsuPerformanceAttributes(
            mode=GameMode.osu,
            pp=pp,
            pp_acc=acc,
            pp_aim=aim,
            pp_speed=speed,
            pp_flashlight=flashlight,
            effective_miss_count=effective_misses,
            speed_deviation=speed_deviation,
            difficulty=difficulty,
            state=state,
        )
