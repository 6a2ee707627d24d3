"""The osu!taiko skills.
"""
from collections import deque

from ..beatmap import Circle
from ..skill import StrainDecaySkill, StrainSkill
from ..utils import clamp, logistic, reverse_lerp


def _repetition_penalty(notes_since):
    return min(1.0, 0.032 * notes_since)


class Colour(StrainDecaySkill):
    """Switching between dons and kats.

    Colour changes are rewarded when the streaks around them have different
    parity, and penalized when the same pair of streak lengths repeats.
    """
    strain_decay_base = 0.4
    mono_history_length = 5

    def __init__(self):
        super().__init__()
        self.mono_history = deque(maxlen=self.mono_history_length)
        self.previous_hit_type = None
        self.current_mono_length = 0

    def _same_pattern(self, start, count):
        history = self.mono_history
        return all(
            history[start + i] == history[len(history) - count + i]
            for i in range(count)
        )

    def _repetition_penalties(self):
        compare = 2
        penalty = 1.0
        self.mono_history.append(self.current_mono_length)

        for start in range(len(self.mono_history) - compare - 1, -1, -1):
            if not self._same_pattern(start, compare):
                continue
            notes_since = sum(
                self.mono_history[i]
                for i in range(start, len(self.mono_history))
            )
            penalty *= _repetition_penalty(notes_since)
            break

        return penalty

    def strain_value_of(self, current):
        # hits more than a second apart, and drum rolls or swells, reset the
        # colour pattern
        last_is_hit = isinstance(current.last, Circle)
        if not (current.is_hit and last_is_hit and current.delta_time < 1000):
            self.mono_history.clear()
            self.current_mono_length = 1 if current.is_hit else 0
            self.previous_hit_type = current.hit_type
            return 0.0

        strain = 0.0
        if (self.previous_hit_type is not None and
                current.hit_type != self.previous_hit_type):
            strain = 1.0
            if len(self.mono_history) < 2:
                strain = 0.0
            elif (self.mono_history[-1] + self.current_mono_length) % 2 == 0:
                # both streaks even or both odd
                strain = 0.0

            strain *= self._repetition_penalties()
            self.current_mono_length = 1
        else:
            self.current_mono_length += 1

        self.previous_hit_type = current.hit_type
        return strain


class Rhythm(StrainDecaySkill):
    """Reading and playing changes in the spacing of hits.
    """
    skill_multiplier = 10
    strain_decay_base = 0.0
    inner_strain_decay = 0.96
    rhythm_history_length = 8

    def __init__(self):
        super().__init__()
        self.rhythm_history = deque(maxlen=self.rhythm_history_length)
        self.rhythm_strain = 0.0
        self.notes_since_rhythm_change = 0

    def _reset(self):
        self.rhythm_strain = 0.0
        self.notes_since_rhythm_change = 0

    def _same_pattern(self, start, count):
        history = self.rhythm_history
        return all(
            history[start + i].rhythm ==
            history[len(history) - count + i].rhythm
            for i in range(count)
        )

    def _repetition_penalties(self, current):
        penalty = 1.0
        self.rhythm_history.append(current)

        for compare in range(2, self.rhythm_history_length // 2 + 1):
            for start in range(len(self.rhythm_history) - compare - 1, -1, -1):
                if not self._same_pattern(start, compare):
                    continue
                notes_since = current.index - self.rhythm_history[start].index
                penalty *= _repetition_penalty(notes_since)
                break

        return penalty

    @staticmethod
    def _pattern_length_penalty(length):
        short_penalty = min(0.15 * length, 1.0)
        long_penalty = clamp(2.5 - 0.15 * length, 0.0, 1.0)
        return min(short_penalty, long_penalty)

    def _speed_penalty(self, delta_time):
        if delta_time < 80:
            return 1.0
        if delta_time < 210:
            return max(0.0, 1.4 - 0.005 * delta_time)
        self._reset()
        return 0.0

    def strain_value_of(self, current):
        if not current.is_hit:
            self._reset()
            return 0.0

        self.rhythm_strain *= self.inner_strain_decay
        self.notes_since_rhythm_change += 1

        # an unchanged rhythm adds no strain
        if current.rhythm.difficulty == 0.0:
            return 0.0

        strain = current.rhythm.difficulty
        strain *= self._repetition_penalties(current)
        strain *= self._pattern_length_penalty(self.notes_since_rhythm_change)
        strain *= self._speed_penalty(current.delta_time)

        self.notes_since_rhythm_change = 0
        self.rhythm_strain += strain
        return self.rhythm_strain


def _speed_bonus(interval):
    return 20 / max(interval, 1)


def _available_fingers(current):
    change = current.previous_colour_change
    if change is not None and current.start_time - change.start_time < 300:
        return 2
    return 4


def evaluate_stamina(current):
    """The stamina needed to hit ``current``, assuming the player alternates
    between the available fingers of each colour.
    """
    if not current.is_hit:
        return 0.0

    strain = 0.5
    previous = current.previous(1)
    if previous is None:
        return strain

    previous_mono = current.previous_mono(_available_fingers(current) - 1)
    if previous_mono is not None:
        strain += (
            _speed_bonus(current.start_time - previous_mono.start_time) +
            0.5 * _speed_bonus(current.start_time - previous.start_time)
        )
    return strain


class Stamina(StrainSkill):
    """Hitting quickly for a long time.

    Parameters
    ----------
    single_colour : bool
        Only reward the stamina needed on single colour streams.
    is_convert : bool
        Is the map converted from osu!standard.
    """
    skill_multiplier = 1.1
    strain_decay_base = 0.4

    def __init__(self, single_colour, is_convert):
        super().__init__()
        self.single_colour = single_colour
        self.is_convert = is_convert
        self.current_strain = 0.0

    def strain_decay(self, ms):
        return self.strain_decay_base ** (ms / 1000)

    def calculate_initial_strain(self, time, current):
        if self.single_colour:
            return 0.0
        return self.current_strain * self.strain_decay(
            time - current.previous(0).start_time,
        )

    def strain_value_at(self, current):
        self.current_strain *= self.strain_decay(current.delta_time)
        difficulty = evaluate_stamina(current) * self.skill_multiplier

        index = current.streak_index
        if not self.single_colour and not self.is_convert:
            difficulty *= 1.0 + 0.5 * reverse_lerp(index, 5, 20)

        self.current_strain += difficulty

        if self.single_colour:
            return logistic(index, 10, 0.5, self.current_strain)
        return self.current_strain


class _VelocityRange:
    def __init__(self, lower, upper):
        self.center = (lower + upper) / 2
        self.range = upper - lower


_MID_VELOCITY = _VelocityRange(360, 480)
_HIGH_VELOCITY = _VelocityRange(480, 640)


def evaluate_reading(current):
    """The difficulty of reading ``current`` at its scroll speed.
    """
    effective_bpm = max(1.0, current.effective_bpm)

    mid_difficulty = 0.5 * logistic(
        effective_bpm,
        _MID_VELOCITY.center,
        1 / (_MID_VELOCITY.range / 10),
    )

    # the gap at which this hit would be a 1/4 at base scroll speed
    expected_delta_time = 21000 / effective_bpm
    density = expected_delta_time / max(1.0, current.delta_time)
    density_penalty = logistic(density, 0.925, 15)

    # dense patterns are easier to read at high scroll speeds
    high_difficulty = (1 - 0.33 * density_penalty) * logistic(
        effective_bpm,
        _HIGH_VELOCITY.center + 8 * density_penalty,
        1 / (_HIGH_VELOCITY.range / 10),
    )
    return mid_difficulty + high_difficulty


class Reading(StrainDecaySkill):
    """Reading hits at high scroll speeds.
    """
    strain_decay_base = 0.4

    def __init__(self):
        super().__init__()
        self.reading_strain = 0.0

    def strain_value_of(self, current):
        if not current.is_hit:
            return 0.0

        self.reading_strain *= logistic(current.streak_index, 4, -1 / 25,
                                        0.5) + 0.5
        self.reading_strain *= self.strain_decay_base
        self.reading_strain += evaluate_reading(current)
        return self.reading_strain
