import math

import numpy as np

from ..skill import StrainDecaySkill, StrainSkill
from ..utils import lerp
from .evaluators import (
    evaluate_aim,
    evaluate_flashlight,
    evaluate_rhythm,
    evaluate_speed,
)


def difficulty_to_performance(difficulty):
    """The base performance of an aim or speed rating.
    """
    return (5.0 * max(1.0, difficulty / 0.0675) - 4.0) ** 3 / 100000.0


def _relevant_count(strains):
    """Count the strains, weighting each one by how close it is to the
    largest.
    """
    if not strains:
        return 0.0
    strains = np.asarray(strains)
    max_strain = strains.max()
    if max_strain == 0:
        return 0.0
    return float(np.sum(1.0 / (1.0 + np.exp(-(strains / max_strain * 12.0 -
                                                6.0)))))


class OsuStrainSkill(StrainSkill):
    """A strain skill which reduces the hardest sections before aggregating.

    The top ``reduced_section_count`` peaks are scaled by a factor growing
    from ``reduced_strain_baseline`` to 1 so that a few extreme spikes do not
    dominate the rating.
    """
    reduced_section_count = 10
    reduced_strain_baseline = 0.75

    def difficulty_value(self):
        strains = np.asarray(self.current_strain_peaks(), dtype=float)
        strains = np.sort(strains[strains > 0])[::-1]

        for i in range(min(len(strains), self.reduced_section_count)):
            scale = math.log10(lerp(
                1,
                10,
                min(max(i / self.reduced_section_count, 0), 1),
            ))
            strains[i] *= lerp(self.reduced_strain_baseline, 1.0, scale)

        strains = np.sort(strains)[::-1]
        weights = self.decay_weight ** np.arange(len(strains))
        return float(strains @ weights)


class Aim(OsuStrainSkill):
    """Moving the cursor between objects.

    Parameters
    ----------
    with_sliders : bool
        Reward the distance travelled while following sliders.
    """
    skill_multiplier = 25.18
    strain_decay_base = 0.15

    def __init__(self, with_sliders):
        super().__init__()
        self.with_sliders = with_sliders
        self.current_strain = 0.0
        self.slider_strains = []

    def strain_decay(self, ms):
        return self.strain_decay_base ** (ms / 1000)

    def calculate_initial_strain(self, time, current):
        return self.current_strain * self.strain_decay(
            time - current.previous(0).start_time,
        )

    def strain_value_at(self, current):
        self.current_strain *= self.strain_decay(current.delta_time)
        self.current_strain += (
            evaluate_aim(current, self.with_sliders) * self.skill_multiplier
        )
        if current.base.is_slider:
            self.slider_strains.append(self.current_strain)
        return self.current_strain

    def difficult_sliders(self):
        """The number of sliders weighted by how hard they are to aim.
        """
        return _relevant_count(self.slider_strains)


class Speed(OsuStrainSkill):
    """Tapping quickly.

    Parameters
    ----------
    autopilot : bool, optional
        Ignore the distance between objects.
    """
    skill_multiplier = 1.430
    strain_decay_base = 0.3
    reduced_section_count = 5

    def __init__(self, autopilot=False):
        super().__init__()
        self.autopilot = autopilot
        self.current_strain = 0.0
        self.current_rhythm = 0.0

    def strain_decay(self, ms):
        return self.strain_decay_base ** (ms / 1000)

    def calculate_initial_strain(self, time, current):
        return (
            self.current_strain *
            self.current_rhythm *
            self.strain_decay(time - current.previous(0).start_time)
        )

    def strain_value_at(self, current):
        self.current_strain *= self.strain_decay(current.strain_time)
        self.current_strain += (
            evaluate_speed(current, self.autopilot) * self.skill_multiplier
        )
        self.current_rhythm = evaluate_rhythm(current)
        return self.current_strain * self.current_rhythm

    def relevant_note_count(self):
        """The number of notes weighted by how hard they are to tap.
        """
        return _relevant_count(self.object_strains)


class Flashlight(StrainDecaySkill):
    """Memorising the object positions under flashlight.

    Parameters
    ----------
    hidden : bool
        Is hidden also active.
    """
    skill_multiplier = 0.05512
    strain_decay_base = 0.15

    def __init__(self, hidden):
        super().__init__()
        self.hidden = hidden

    def strain_value_of(self, current):
        return evaluate_flashlight(current, self.hidden)

    def difficulty_value(self):
        return float(sum(self.current_strain_peaks()))

    @staticmethod
    def difficulty_to_performance(difficulty):
        return 25 * difficulty ** 2
