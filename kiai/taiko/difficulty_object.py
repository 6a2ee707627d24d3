from collections import namedtuple
import enum

from ..beatmap import Circle
from ..skill import DifficultyObject


class HitType(enum.Enum):
    """The colour of an osu!taiko hit.
    """
    don = 'don'
    kat = 'kat'


class HitRhythm(namedtuple('HitRhythm', 'numerator denominator difficulty')):
    """The ratio between the gap before a hit and the gap before that.

    Parameters
    ----------
    numerator, denominator : int
        The ratio of the current gap to the previous gap.
    difficulty : float
        How hard it is to switch to this rhythm.
    """
    __slots__ = ()

    @property
    def ratio(self):
        return self.numerator / self.denominator


COMMON_RHYTHMS = (
    HitRhythm(1, 1, 0.0),
    HitRhythm(2, 1, 0.3),
    HitRhythm(1, 2, 0.5),
    HitRhythm(3, 1, 0.3),
    HitRhythm(1, 3, 0.35),
    # switching hands in full alternate makes this harder than 2/3
    HitRhythm(3, 2, 0.6),
    HitRhythm(2, 3, 0.4),
    HitRhythm(5, 4, 0.5),
    HitRhythm(4, 5, 0.7),
)


def closest_rhythm(ratio):
    """The common rhythm with the ratio nearest to ``ratio``.
    """
    return min(COMMON_RHYTHMS, key=lambda rhythm: abs(rhythm.ratio - ratio))


class TaikoDifficultyObject(DifficultyObject):
    """An osu!taiko object prepared for difficulty calculation.

    Parameters
    ----------
    base : HitObject
        The hit, drum roll or swell.
    last, last_last : HitObject
        The two objects before ``base``.
    clock_rate : float
        The clock rate of the calculation.
    objects : list[TaikoDifficultyObject]
        Every difficulty object so far.
    index : int
        The index of this object in ``objects``.
    notes : list[TaikoDifficultyObject]
        The hits so far. Hits are appended to this list.
    mono_notes : dict[HitType, list[TaikoDifficultyObject]]
        The hits so far by colour. Hits are appended to their colour's list.
    effective_bpm : float
        The scroll speed at ``base`` expressed as a bpm at base slider
        velocity.
    """
    def __init__(self,
                 base,
                 last,
                 last_last,
                 clock_rate,
                 objects,
                 index,
                 notes,
                 mono_notes,
                 effective_bpm):
        super().__init__(base, last, clock_rate, objects, index)
        self.effective_bpm = effective_bpm

        previous_length = (last.time - last_last.time) / clock_rate
        if previous_length > 0:
            self.rhythm = closest_rhythm(self.delta_time / previous_length)
        else:
            self.rhythm = COMMON_RHYTHMS[0]

        self.notes = notes
        self.mono_notes = None
        self.note_index = self.mono_index = None
        self.streak_start = None
        self.streak_index = 0

        if not isinstance(base, Circle):
            self.hit_type = None
            return

        self.hit_type = HitType.kat if base.is_kat else HitType.don
        self.note_index = len(notes)
        notes.append(self)
        self.mono_notes = mono_notes.setdefault(self.hit_type, [])
        self.mono_index = len(self.mono_notes)
        self.mono_notes.append(self)

        previous = self.previous_note(0)
        if previous is not None and previous.hit_type == self.hit_type:
            self.streak_start = previous.streak_start
            self.streak_index = previous.streak_index + 1
        else:
            self.streak_start = self

    @property
    def is_hit(self):
        return self.hit_type is not None

    def previous_note(self, n):
        """The ``n``th hit before this one, or ``None``.
        """
        if self.note_index is None:
            return None
        ix = self.note_index - (n + 1)
        if ix < 0:
            return None
        return self.notes[ix]

    def previous_mono(self, n):
        """The ``n``th hit of the same colour before this one, or ``None``.
        """
        if self.mono_index is None:
            return None
        ix = self.mono_index - (n + 1)
        if ix < 0:
            return None
        return self.mono_notes[ix]

    @property
    def previous_colour_change(self):
        """The last hit of the other colour before this hit's streak.
        """
        if self.streak_start is None:
            return None
        return self.streak_start.previous_note(0)
