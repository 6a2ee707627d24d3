from ..skill import DifficultyObject, StrainDecaySkill
from ..utils import logistic

INDIVIDUAL_DECAY_BASE = 0.125
OVERALL_DECAY_BASE = 0.30
RELEASE_THRESHOLD = 30


def _definitely_bigger(a, b):
    return a - b > 1


def _apply_decay(value, delta_time, decay_base):
    return value * decay_base ** (delta_time / 1000)


class ManiaDifficultyObject(DifficultyObject):
    """A note prepared for difficulty calculation.

    Parameters
    ----------
    base, last : HitObject
        The note and the note before it.
    column : int
        The column of ``base``.
    clock_rate : float
        The clock rate of the calculation.
    objects : list[ManiaDifficultyObject]
        Every difficulty object so far.
    index : int
        The index of this object in ``objects``.
    """
    def __init__(self, base, last, column, clock_rate, objects, index):
        super().__init__(base, last, clock_rate, objects, index)
        self.column = column


class Strain(StrainDecaySkill):
    """Pressing and holding keys across the columns.

    Each column has its own strain which rewards jacks; an overall strain
    rewards density. Notes pressed while another key is held are harder.

    Parameters
    ----------
    n_columns : int
        The key count.
    """
    strain_decay_base = 1.0

    def __init__(self, n_columns):
        super().__init__()
        self.start_times = [0.0] * n_columns
        self.end_times = [0.0] * n_columns
        self.individual_strains = [0.0] * n_columns
        self.highest_individual_strain = 0.0
        self.overall_strain = 1.0

    def strain_value_of(self, current):
        start_time = current.start_time
        end_time = current.end_time
        column = current.column

        is_overlapping = False
        # the lowest value possible with what is known so far
        closest_end_time = abs(end_time - start_time)
        hold_factor = 1.0
        hold_addition = 0.0

        for other_start, other_end in zip(self.start_times, self.end_times):
            # a previous note is held over the body of this one
            is_overlapping |= (
                _definitely_bigger(other_end, start_time) and
                _definitely_bigger(end_time, other_end) and
                _definitely_bigger(start_time, other_start)
            )
            if (_definitely_bigger(other_end, end_time) and
                    _definitely_bigger(start_time, other_start)):
                hold_factor = 1.25
            closest_end_time = min(closest_end_time, abs(end_time - other_end))

        # releasing together with another note is as easy as releasing one
        if is_overlapping:
            hold_addition = logistic(closest_end_time, RELEASE_THRESHOLD, 0.27)

        strains = self.individual_strains
        strains[column] = _apply_decay(
            strains[column],
            start_time - self.start_times[column],
            INDIVIDUAL_DECAY_BASE,
        )
        strains[column] += 2.0 * hold_factor

        # a chord is as hard as its hardest column
        if current.delta_time <= 1:
            self.highest_individual_strain = max(
                self.highest_individual_strain,
                strains[column],
            )
        else:
            self.highest_individual_strain = strains[column]

        self.overall_strain = _apply_decay(
            self.overall_strain,
            current.delta_time,
            OVERALL_DECAY_BASE,
        )
        self.overall_strain += (1 + hold_addition) * hold_factor

        self.start_times[column] = start_time
        self.end_times[column] = end_time

        # the skill strain becomes the strain of this note alone
        return (
            self.highest_individual_strain +
            self.overall_strain -
            self.current_strain
        )

    def calculate_initial_strain(self, time, current):
        elapsed = time - current.previous(0).start_time
        return (
            _apply_decay(
                self.highest_individual_strain,
                elapsed,
                INDIVIDUAL_DECAY_BASE,
            ) +
            _apply_decay(self.overall_strain, elapsed, OVERALL_DECAY_BASE)
        )
