"""Strain skills shared by every game mode.

A skill consumes difficulty objects in time order. Each object raises the
skill's strain, which decays exponentially between objects; the largest strain
inside each fixed length section of the map is recorded as that section's
peak. The peaks are then aggregated into a single difficulty value which gives
the hardest sections the most weight.
"""
import math

import numpy as np


class DifficultyObject:
    """A hit object prepared for difficulty calculation.

    Parameters
    ----------
    base : HitObject
        The hit object.
    last : HitObject
        The hit object before ``base``.
    clock_rate : float
        The clock rate of the calculation. All times are divided by this.
    objects : list[DifficultyObject]
        The list this object is appended to, used to look up the preceding
        objects.
    index : int
        The index of this object in ``objects``.
    """
    def __init__(self, base, last, clock_rate, objects, index):
        self.base = base
        self.last = last
        self.objects = objects
        self.index = index
        self.start_time = base.time / clock_rate
        self.end_time = base.end_time / clock_rate
        self.delta_time = (base.time - last.time) / clock_rate

    def previous(self, n):
        """The ``n``th object before this one, or ``None``.
        """
        ix = self.index - (n + 1)
        if ix < 0:
            return None
        return self.objects[ix]

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: {self.index},'
            f' {self.start_time:g}ms>'
        )


def weighted_sum(peaks, decay_weight):
    """Aggregate strain peaks into a difficulty value.

    Parameters
    ----------
    peaks : array-like[float]
        The strain peaks.
    decay_weight : float
        The weight of each peak relative to the next larger one.

    Returns
    -------
    difficulty : float
        ``sum(peak * decay_weight ** n)`` over the positive peaks sorted from
        largest to smallest.
    """
    peaks = np.asarray(peaks, dtype=float)
    peaks = np.sort(peaks[peaks > 0])[::-1]
    weights = decay_weight ** np.arange(len(peaks))
    return float(peaks @ weights)


class StrainSkill:
    """A skill which tracks the peak strain of each section of the map.

    Subclasses implement :meth:`strain_value_at` and
    :meth:`calculate_initial_strain`. ``section_length`` and ``decay_weight``
    may be overridden to tune the aggregation.
    """
    section_length = 400
    decay_weight = 0.9

    def __init__(self):
        self.strain_peaks = []
        self.object_strains = []
        self._current_section_peak = 0.0
        self._current_section_end = 0.0

    def strain_value_at(self, current):
        """Update the strain with ``current`` and return the new strain.
        """
        raise NotImplementedError('strain_value_at')

    def calculate_initial_strain(self, time, current):
        """The strain at ``time``, the start of a new section which contains
        ``current``, before ``current`` is processed.
        """
        raise NotImplementedError('calculate_initial_strain')

    def process(self, current):
        """Process the next difficulty object.

        Parameters
        ----------
        current : DifficultyObject
            The object, which must come after every object already processed.
        """
        section_length = self.section_length

        # the first object starts the first section at the next boundary
        if current.index == 0:
            self._current_section_end = (
                math.ceil(current.start_time / section_length) *
                section_length
            )

        while current.start_time > self._current_section_end:
            self.strain_peaks.append(self._current_section_peak)
            self._current_section_peak = self.calculate_initial_strain(
                self._current_section_end,
                current,
            )
            self._current_section_end += section_length

        strain = self.strain_value_at(current)
        self._current_section_peak = max(strain, self._current_section_peak)
        self.object_strains.append(strain)

    def current_strain_peaks(self):
        """The peaks of the finished sections followed by the peak of the
        current section.
        """
        return self.strain_peaks + [self._current_section_peak]

    def difficulty_value(self):
        """Aggregate the strain peaks into a difficulty value.
        """
        return weighted_sum(self.current_strain_peaks(), self.decay_weight)

    def count_top_weighted_strains(self, difficulty):
        """The number of objects with a strain close to the top strains.

        Parameters
        ----------
        difficulty : float
            The difficulty value of this skill.
        """
        if not self.object_strains:
            return 0.0

        # the top strain if every strain were the same
        consistent_top_strain = difficulty / 10
        if consistent_top_strain == 0:
            return float(len(self.object_strains))

        strains = np.asarray(self.object_strains)
        return float(np.sum(
            1.1 / (1 + np.exp(-10 * (strains / consistent_top_strain - 0.88))),
        ))


class StrainDecaySkill(StrainSkill):
    """A skill whose strain decays by a constant factor per second.

    Subclasses implement :meth:`strain_value_of`, the contribution of one
    object, and may set ``skill_multiplier`` and ``strain_decay_base``.
    """
    skill_multiplier = 1.0
    strain_decay_base = 1.0

    def __init__(self):
        super().__init__()
        self.current_strain = 0.0

    def strain_decay(self, ms):
        return self.strain_decay_base ** (ms / 1000)

    def strain_value_of(self, current):
        raise NotImplementedError('strain_value_of')

    def calculate_initial_strain(self, time, current):
        return self.current_strain * self.strain_decay(
            time - current.previous(0).start_time,
        )

    def strain_value_at(self, current):
        self.current_strain *= self.strain_decay(current.delta_time)
        self.current_strain += (
            self.strain_value_of(current) * self.skill_multiplier
        )
        return self.current_strain
