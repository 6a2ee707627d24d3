from collections.abc import Mapping
import enum
import re

from .errors import InvalidModifier
from .utils import snake_case


class Mod(enum.IntEnum):
    """The legacy mod bits of osu!.
    """
    no_fail = 1
    easy = 1 << 1
    touch_device = 1 << 2
    hidden = 1 << 3
    hard_rock = 1 << 4
    sudden_death = 1 << 5
    double_time = 1 << 6
    relax = 1 << 7
    half_time = 1 << 8
    nightcore = 1 << 9  # always sent together with double_time
    flashlight = 1 << 10
    autoplay = 1 << 11
    spun_out = 1 << 12
    auto_pilot = 1 << 13
    perfect = 1 << 14  # always sent together with sudden_death
    key4 = 1 << 15
    key5 = 1 << 16
    key6 = 1 << 17
    key7 = 1 << 18
    key8 = 1 << 19
    fade_in = 1 << 20
    random = 1 << 21
    cinema = 1 << 22
    target_practice = 1 << 23
    key9 = 1 << 24
    coop = 1 << 25
    key1 = 1 << 26
    key3 = 1 << 27
    key2 = 1 << 28
    score_v2 = 1 << 29
    mirror = 1 << 30

    @classmethod
    def unpack(cls, bitmask):
        """Unpack a bitmask into the mods that are set.

        Parameters
        ----------
        bitmask : int
            The bitmask to unpack.

        Returns
        -------
        mods : list[Mod]
            The set mods in bit order. Implied bits are dropped: nightcore
            hides double_time and perfect hides sudden_death.

        Raises
        ------
        InvalidModifier
            Raised when the mask contains bits that are not osu! mods.
        """
        if bitmask < 0 or bitmask >> 31:
            raise InvalidModifier(f'invalid mod bits: {bitmask!r}')

        mods = [mod for mod in cls if bitmask & mod]
        if cls.nightcore in mods and cls.double_time in mods:
            mods.remove(cls.double_time)
        if cls.perfect in mods and cls.sudden_death in mods:
            mods.remove(cls.sudden_death)
        return mods


# acronym -> legacy bit; ``None`` for mods that only exist in lazer
_acronyms = {
    'NF': Mod.no_fail,
    'EZ': Mod.easy,
    'TD': Mod.touch_device,
    'HD': Mod.hidden,
    'HR': Mod.hard_rock,
    'SD': Mod.sudden_death,
    'DT': Mod.double_time,
    'RX': Mod.relax,
    'HT': Mod.half_time,
    'NC': Mod.nightcore,
    'FL': Mod.flashlight,
    'AT': Mod.autoplay,
    'SO': Mod.spun_out,
    'AP': Mod.auto_pilot,
    'PF': Mod.perfect,
    'FI': Mod.fade_in,
    'RD': Mod.random,
    'CN': Mod.cinema,
    'TP': Mod.target_practice,
    'CO': Mod.coop,
    'SV2': Mod.score_v2,
    'MR': Mod.mirror,
    '1K': Mod.key1,
    '2K': Mod.key2,
    '3K': Mod.key3,
    '4K': Mod.key4,
    '5K': Mod.key5,
    '6K': Mod.key6,
    '7K': Mod.key7,
    '8K': Mod.key8,
    '9K': Mod.key9,
    'DC': None,  # daycore
    'DA': None,  # difficulty adjust
    'CL': None,  # classic
    'BL': None,  # blinds
    'TC': None,  # traceable
    'SG': None,  # single tap
    'WU': None,  # wind up
    'WD': None,  # wind down
}

_bits = {bit: acronym for acronym, bit in _acronyms.items() if bit is not None}

# at most one mod of each group may be active
_exclusive_groups = [
    frozenset({'EZ', 'HR', 'DA'}),
    frozenset({'DT', 'NC', 'HT', 'DC', 'WU', 'WD'}),
    frozenset({'NF', 'SD', 'PF'}),
    frozenset({'RX', 'AP', 'AT', 'CN'}),
    frozenset({'HD', 'TC'}),
    frozenset({'1K', '2K', '3K', '4K', '5K', '6K', '7K', '8K', '9K'}),
]

_speed_defaults = {
    'DT': 1.5,
    'NC': 1.5,
    'HT': 0.75,
    'DC': 0.75,
}

_difficulty_adjust_settings = {
    'approach_rate': 'ar',
    'circle_size': 'cs',
    'drain_rate': 'hp',
    'overall_difficulty': 'od',
}

_split_acronyms = re.compile(r'[\s,|+]+')


class ModifierSet(Mapping):
    """An immutable set of gameplay modifiers.

    Parameters
    ----------
    value : ModifierSet, int, str, dict, iterable or None, optional
        The modifiers. This may be a legacy bitmask (``72`` is HDDT), a
        string of acronyms (``'HDDT'``, ``'+HD,DT'``), a dict with an
        ``acronym`` and optional ``settings`` (``{'acronym': 'DT',
        'settings': {'speed_change': 1.3}}``), or a list of any of these.

    Raises
    ------
    InvalidModifier
        Raised for unknown acronyms, malformed settings or mods which cannot
        be combined, like ``EZ`` and ``HR``.

    Notes
    -----
    A ``ModifierSet`` is a mapping from acronym to the settings of that mod.
    Settings keys are normalized to ``snake_case``.
    """
    __slots__ = ('_mods',)

    def __init__(self, value=None):
        mods = {}
        self._collect(value, mods)

        for group in _exclusive_groups:
            active = sorted(group & mods.keys())
            if len(active) > 1:
                raise InvalidModifier(
                    f'mods cannot be combined: {", ".join(active)}',
                )

        self._mods = mods

    @classmethod
    def parse(cls, value):
        """Resolve ``value`` into a ``ModifierSet``.

        Parameters
        ----------
        value : ModifierSet, int, str, dict, iterable or None
            See :class:`ModifierSet`.

        Returns
        -------
        mods : ModifierSet
            ``value`` itself when it is already a ``ModifierSet``.
        """
        if isinstance(value, cls):
            return value
        return cls(value)

    @classmethod
    def _collect(cls, value, mods):
        if value is None:
            return

        if isinstance(value, ModifierSet):
            for acronym, settings in value.items():
                cls._add(mods, acronym, settings)
        elif isinstance(value, bool):
            raise InvalidModifier(f'invalid mods: {value!r}')
        elif isinstance(value, int):
            for mod in Mod.unpack(value):
                cls._add(mods, _bits[mod], {})
        elif isinstance(value, str):
            for chunk in _split_acronyms.split(value.strip().upper()):
                if not chunk:
                    continue
                if chunk in _acronyms:
                    cls._add(mods, chunk, {})
                    continue
                if len(chunk) % 2:
                    raise InvalidModifier(f'malformed mods: {value!r}')
                for n in range(0, len(chunk), 2):
                    cls._add(mods, chunk[n:n + 2], {})
        elif isinstance(value, Mapping):
            try:
                acronym = value['acronym']
            except KeyError:
                raise InvalidModifier(f'mod is missing an acronym: {value!r}')
            settings = value.get('settings') or {}
            if not isinstance(settings, Mapping):
                raise InvalidModifier(
                    f'settings for {acronym} must be a mapping,'
                    f' got {settings!r}',
                )
            cls._add(mods, str(acronym).upper(), settings)
        else:
            try:
                items = iter(value)
            except TypeError:
                raise InvalidModifier(f'invalid mods: {value!r}')
            for item in items:
                cls._collect(item, mods)

    @staticmethod
    def _add(mods, acronym, settings):
        if acronym not in _acronyms:
            raise InvalidModifier(f'unknown mod: {acronym!r}')

        normalized = {}
        for key, value in settings.items():
            key = snake_case(key)
            if key == 'speed_change' or key in _difficulty_adjust_settings:
                if value is None:
                    continue
                try:
                    value = float(value)
                except (TypeError, ValueError):
                    raise InvalidModifier(
                        f'setting {key} of {acronym} must be a number,'
                        f' got {value!r}',
                    )
                if key == 'speed_change' and value <= 0:
                    raise InvalidModifier(
                        f'speed_change of {acronym} must be positive,'
                        f' got {value!r}',
                    )
            normalized[key] = value

        previous = mods.get(acronym)
        if previous:
            normalized = {**previous, **normalized}
        mods[acronym] = normalized

    def __getitem__(self, acronym):
        return dict(self._mods[acronym])

    def __iter__(self):
        return iter(self._mods)

    def __len__(self):
        return len(self._mods)

    def __contains__(self, acronym):
        return acronym in self._mods

    def __eq__(self, other):
        if not isinstance(other, ModifierSet):
            return NotImplemented
        return self._mods == other._mods

    def __hash__(self):
        return hash(frozenset(self._mods))

    def __str__(self):
        return ''.join(self._mods) or 'NM'

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self}>'

    @property
    def bits(self):
        """The legacy bitmask of these mods.

        Mods that have no legacy bit are left out. Nightcore and perfect set
        their implied bits as the osu! client does.
        """
        bits = 0
        for acronym in self._mods:
            bit = _acronyms[acronym]
            if bit is not None:
                bits |= bit
        if bits & Mod.nightcore:
            bits |= Mod.double_time
        if bits & Mod.perfect:
            bits |= Mod.sudden_death
        return bits

    def to_list(self):
        """The mods as a list of ``{'acronym': ..., 'settings': ...}`` dicts.
        """
        out = []
        for acronym, settings in self._mods.items():
            entry = {'acronym': acronym}
            if settings:
                entry['settings'] = dict(settings)
            out.append(entry)
        return out

    @property
    def clock_rate(self):
        """The rate at which the song plays under these mods.
        """
        for acronym, default in _speed_defaults.items():
            if acronym in self._mods:
                return self._mods[acronym].get('speed_change', default)
        return 1.0

    @property
    def od_ar_hp_multiplier(self):
        if 'HR' in self._mods:
            return 1.4
        if 'EZ' in self._mods:
            return 0.5
        return 1.0

    @property
    def cs_multiplier(self):
        if 'HR' in self._mods:
            return 1.3
        if 'EZ' in self._mods:
            return 0.5
        return 1.0

    @property
    def difficulty_adjust(self):
        """The attribute overrides set through the difficulty adjust mod.

        Returns
        -------
        overrides : dict[str, float]
            Mapping from ``'ar'``, ``'cs'``, ``'hp'`` or ``'od'`` to the value
            to use in place of the beatmap's base value.
        """
        settings = self._mods.get('DA', {})
        return {
            short: settings[long_]
            for long_, short in _difficulty_adjust_settings.items()
            if long_ in settings
        }

    @property
    def hardrock_offsets(self):
        """Should catch fruits be randomly offset as with hard rock.
        """
        return 'HR' in self._mods

    @property
    def classic(self):
        """Is classic (stable-like) slider accuracy active.
        """
        if 'CL' not in self._mods:
            return False
        return self._mods['CL'].get('no_slider_head_accuracy', True)

    @property
    def mania_keys(self):
        """The key count forced by a key mod, or ``None``.
        """
        for n in range(1, 10):
            if f'{n}K' in self._mods:
                return n
        return None

    hidden = property(lambda self: 'HD' in self._mods)
    hard_rock = property(lambda self: 'HR' in self._mods)
    easy = property(lambda self: 'EZ' in self._mods)
    flashlight = property(lambda self: 'FL' in self._mods)
    relax = property(lambda self: 'RX' in self._mods)
    autopilot = property(lambda self: 'AP' in self._mods)
    no_fail = property(lambda self: 'NF' in self._mods)
    spun_out = property(lambda self: 'SO' in self._mods)
    touch_device = property(lambda self: 'TD' in self._mods)
    blinds = property(lambda self: 'BL' in self._mods)
    traceable = property(lambda self: 'TC' in self._mods)


def circle_radius(cs):
    """Compute the ``CS`` attribute into a circle radius in osu! pixels.

    Parameters
    ----------
    cs : float
        The circle size.

    Returns
    -------
    radius : float
        The radius in osu! pixels.
    """
    return (512 / 16) * (1 - 0.7 * (cs - 5) / 5)
