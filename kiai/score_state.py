"""Hit statistics of a score and the inference of missing statistics.
"""
from collections import namedtuple
import enum
import logging
import math

from .errors import InconsistentState
from .game_mode import GameMode
from .records import Record
from .utils import options_from_dict, snake_case

log = logging.getLogger(__name__)


class HitResultPriority(enum.Enum):
    """Which hit results to prefer when statistics are ambiguous.
    """
    best_case = 'best_case'
    worst_case = 'worst_case'

    @classmethod
    def parse(cls, value):
        """Look up a priority by name, accepting ``'BestCase'`` and
        ``'bestCase'`` as well as ``'best_case'``.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.best_case
        try:
            return cls(snake_case(str(value)).replace('__', '_'))
        except ValueError:
            raise ValueError(f'unknown hit result priority: {value!r}')


class ScoreState(
        Record,
        namedtuple(
            'ScoreState',
            (
                'max_combo',
                'n_geki',
                'n_katu',
                'n300',
                'n100',
                'n50',
                'misses',
                'large_tick_hits',
                'small_tick_hits',
                'slider_end_hits',
            ),
        )):
    """The hit statistics of a score.

    Parameters
    ----------
    max_combo : int
        The highest combo reached.
    n_geki : int
        osu!mania perfects (the 320 judgement).
    n_katu : int
        osu!mania 200s; in osu!catch the missed tiny droplets.
    n300 : int
        Greats; in osu!catch the caught fruits.
    n100 : int
        Oks; in osu!catch the caught droplets.
    n50 : int
        Mehs; in osu!catch the caught tiny droplets.
    misses : int
        Misses; in osu!catch the missed fruits and droplets.
    large_tick_hits : int
        osu!standard slider ticks and repeats hit. Only used for osu!lazer
        scores.
    small_tick_hits : int
        Small ticks hit. Only used for osu!lazer scores.
    slider_end_hits : int
        osu!standard slider ends hit. Only used for osu!lazer scores.
    """
    __slots__ = ()
    _summary = ('max_combo', 'n300', 'n100', 'n50', 'misses')

    def __new__(cls,
                max_combo=0,
                n_geki=0,
                n_katu=0,
                n300=0,
                n100=0,
                n50=0,
                misses=0,
                large_tick_hits=0,
                small_tick_hits=0,
                slider_end_hits=0):
        counts = (
            max_combo,
            n_geki,
            n_katu,
            n300,
            n100,
            n50,
            misses,
            large_tick_hits,
            small_tick_hits,
            slider_end_hits,
        )
        for name, value in zip(cls._fields, counts):
            if value < 0:
                raise InconsistentState(f'{name} must not be negative')
        return super().__new__(cls, *map(int, counts))

    @classmethod
    def from_dict(cls, options):
        """Construct a state from a dict which may use the ``camelCase``
        names, like ``{'maxCombo': 100, 'nGeki': 2}``.
        """
        return cls(**options_from_dict(options))

    def total_hits(self, mode):
        """The number of judged objects in ``mode``.
        """
        mode = GameMode.parse(mode)
        if mode == GameMode.taiko:
            return self.n300 + self.n100 + self.misses
        if mode == GameMode.catch:
            return (
                self.n300 + self.n100 + self.n50 + self.n_katu + self.misses
            )
        if mode == GameMode.mania:
            return (
                self.n_geki +
                self.n_katu +
                self.n300 +
                self.n100 +
                self.n50 +
                self.misses
            )
        return self.n300 + self.n100 + self.n50 + self.misses


def osu_slider_accuracy(attributes, lazer, classic):
    """Does an osu!standard score count slider ends and ticks for
    accuracy.
    """
    return lazer and not classic and attributes.n_sliders > 0


def accuracy(mode, state, attributes=None, lazer=True, classic=False):
    """Compute the accuracy of a score.

    Parameters
    ----------
    mode : GameMode
        The game mode.
    state : ScoreState
        The hit statistics.
    attributes : DifficultyAttributes, optional
        The difficulty attributes of the map. Required for osu!lazer
        osu!standard scores, which count slider ticks and ends.
    lazer : bool, optional
        Is this an osu!lazer score.
    classic : bool, optional
        Is classic slider accuracy active.

    Returns
    -------
    accuracy : float
        The accuracy in the range [0, 1]. A score without any judgements has
        an accuracy of 0.
    """
    mode = GameMode.parse(mode)
    total = state.total_hits(mode)

    if mode == GameMode.taiko:
        if total == 0:
            return 0.0
        return (state.n300 + state.n100 / 2) / total

    if mode == GameMode.catch:
        if total == 0:
            return 0.0
        return (state.n300 + state.n100 + state.n50) / total

    if mode == GameMode.mania:
        if total == 0:
            return 0.0
        perfect = 305 if lazer else 300
        numerator = (
            perfect * state.n_geki +
            300 * state.n300 +
            200 * state.n_katu +
            100 * state.n100 +
            50 * state.n50
        )
        return numerator / (perfect * total)

    numerator = 300 * state.n300 + 100 * state.n100 + 50 * state.n50
    denominator = 300 * total
    if attributes is not None and osu_slider_accuracy(attributes,
                                                      lazer,
                                                      classic):
        numerator += (
            150 * min(state.slider_end_hits, attributes.n_sliders) +
            30 * min(state.large_tick_hits, attributes.n_large_ticks)
        )
        denominator += (
            150 * attributes.n_sliders + 30 * attributes.n_large_ticks
        )
    if denominator == 0:
        return 0.0
    return numerator / denominator


# the number of counts tried for each tier when searching for the closest
# accuracy
_SEARCH_WINDOW = 16


def _split_two(weights, count, target, best):
    high, low = weights
    exact = (target - count * low) / (high - low)
    candidates = {
        min(max(math.floor(exact), 0), count),
        min(max(math.ceil(exact), 0), count),
    }

    def key(n):
        error = abs(target - high * n - low * (count - n))
        return error, -n if best else n

    n = min(candidates, key=key)
    return [n, count - n], key(n)[0]


def distribute(weights, count, target, best):
    """Split ``count`` objects among hit result tiers.

    Parameters
    ----------
    weights : list[int]
        The integer value of each tier, strictly decreasing.
    count : int
        The number of objects to split.
    target : int
        The requested total value.
    best : bool
        Prefer the highest tiers when several splits are equally close.
        Otherwise prefer the lowest tiers.

    Returns
    -------
    counts : list[int]
        The number of objects in each tier.
    error : int
        The distance of the total value from ``target``.
    """
    if len(weights) == 1:
        return [count], abs(target - weights[0] * count)
    if len(weights) == 2:
        return _split_two(weights, count, target, best)

    top = weights[0]
    # the top count range where the remaining tiers can make up the rest
    lower = (target - count * weights[1]) / (top - weights[1])
    upper = (target - count * weights[-1]) / (top - weights[-1])
    lower = min(max(math.ceil(lower), 0), count)
    upper = min(max(math.floor(upper), 0), count)

    if best:
        candidates = range(upper, max(upper - _SEARCH_WINDOW, -1), -1)
    else:
        candidates = range(lower, min(lower + _SEARCH_WINDOW, count + 1))

    result = None
    for n in candidates:
        rest, error = distribute(
            weights[1:],
            count - n,
            target - top * n,
            best,
        )
        if result is None or error < result[1]:
            result = [n] + rest, error
            if error == 0:
                break
    return result


class _Tier(namedtuple('_Tier', 'name weight')):
    __slots__ = ()


def _resolve_tiers(tiers, given, count, accuracy_units, fixed_units, best):
    """Fill in the counts of the tiers that were not given.

    Parameters
    ----------
    tiers : list[_Tier]
        The tiers from best to worst. Tiers with the same weight as a
        previous tier are only filled when given.
    given : dict[str, int or None]
        The explicit counts.
    count : int
        The number of objects to split among the missing tiers.
    accuracy_units : float or None
        The requested total value of all judgements.
    fixed_units : int
        The value of the judgements which are already known.
    best : bool
        Prefer the best tiers.

    Returns
    -------
    counts : dict[str, int]
        The count of every tier.
    """
    counts = {}
    free = []
    seen_weights = set()
    for tier in tiers:
        value = given.get(tier.name)
        if value is not None:
            counts[tier.name] = value
        elif tier.weight in seen_weights:
            counts[tier.name] = 0
        else:
            free.append(tier)
            seen_weights.add(tier.weight)

    if not free:
        if count != 0:
            raise InconsistentState(
                'the hit counts do not add up to the number of objects',
            )
        return counts

    if accuracy_units is None:
        # everything not given is a top tier hit
        counts[free[0].name] = count
        for tier in free[1:]:
            counts[tier.name] = 0
        return counts

    weights = [tier.weight for tier in free]
    target = accuracy_units - fixed_units
    lowest = count * weights[-1]
    highest = count * weights[0]
    if not lowest - 0.5 <= target <= highest + 0.5:
        raise InconsistentState(
            'the accuracy cannot be reached with the given hit counts',
        )

    split, error = distribute(weights, count, round(target), best)
    if error:
        log.debug('closest accuracy is %d units from the target', error)
    for tier, n in zip(free, split):
        counts[tier.name] = n
    return counts


def _check_count(name, value, upper):
    if value is not None and value > upper:
        raise InconsistentState(f'{name}={value} exceeds the maximum {upper}')


def resolve(mode,
            attributes,
            *,
            accuracy=None,
            combo=None,
            n_geki=None,
            n_katu=None,
            n300=None,
            n100=None,
            n50=None,
            misses=None,
            large_tick_hits=None,
            small_tick_hits=None,
            slider_end_hits=None,
            lazer=True,
            classic=False,
            priority=HitResultPriority.best_case):
    """Infer a full score state from partial statistics.

    Parameters
    ----------
    mode : GameMode
        The game mode.
    attributes : DifficultyAttributes
        The difficulty attributes of the (possibly partial) map. Their object
        counts determine the total number of judgements.
    accuracy : float, optional
        The accuracy in percent, in [0, 100].
    combo : int, optional
        The max combo. Defaults to the map's max combo minus the misses.
    n_geki, n_katu, n300, n100, n50, misses : int, optional
        Explicit hit counts.
    large_tick_hits, small_tick_hits, slider_end_hits : int, optional
        Explicit osu!lazer tick counts. Missing counts are assumed to be
        all hit.
    lazer : bool, optional
        Is this an osu!lazer score.
    classic : bool, optional
        Is classic slider accuracy active.
    priority : HitResultPriority, optional
        Which results to prefer when the statistics are ambiguous.

    Returns
    -------
    state : ScoreState
        The full score state.

    Raises
    ------
    InconsistentState
        Raised when the statistics cannot describe a score on the map.
    """
    mode = GameMode.parse(mode)
    priority = HitResultPriority.parse(priority)
    best = priority == HitResultPriority.best_case

    if accuracy is not None and not 0 <= accuracy <= 100:
        raise InconsistentState(
            f'accuracy must be in [0, 100], got {accuracy!r}',
        )
    if accuracy is not None:
        accuracy /= 100

    for name, value in (('n_geki', n_geki),
                        ('n_katu', n_katu),
                        ('n300', n300),
                        ('n100', n100),
                        ('n50', n50),
                        ('misses', misses),
                        ('combo', combo),
                        ('large_tick_hits', large_tick_hits),
                        ('small_tick_hits', small_tick_hits),
                        ('slider_end_hits', slider_end_hits)):
        if value is not None and value < 0:
            raise InconsistentState(f'{name} must not be negative')

    if mode == GameMode.catch:
        state = _resolve_catch(
            attributes,
            accuracy,
            n_katu,
            n300,
            n100,
            n50,
            misses or 0,
            best,
        )
    else:
        state = _resolve_tiered(
            mode,
            attributes,
            accuracy,
            n_geki,
            n_katu,
            n300,
            n100,
            n50,
            misses or 0,
            large_tick_hits,
            small_tick_hits,
            slider_end_hits,
            lazer,
            classic,
            best,
        )

    max_combo = attributes.max_combo
    if combo is None:
        combo = max(max_combo - state.misses, 0)
    elif combo > max_combo:
        raise InconsistentState(
            f'combo={combo} exceeds the max combo {max_combo}',
        )

    state = state._replace(max_combo=combo)
    log.debug('resolved %s', state)
    return state


def _resolve_tiered(mode,
                    attributes,
                    accuracy,
                    n_geki,
                    n_katu,
                    n300,
                    n100,
                    n50,
                    misses,
                    large_tick_hits,
                    small_tick_hits,
                    slider_end_hits,
                    lazer,
                    classic,
                    best):
    large_ticks = small_ticks = slider_ends = 0
    fixed_units = 0

    if mode == GameMode.osu:
        total = attributes.n_circles + attributes.n_sliders + \
            attributes.n_spinners
        tiers = [_Tier('n300', 30), _Tier('n100', 10), _Tier('n50', 5)]
        given = {'n300': n300, 'n100': n100, 'n50': n50}
        denominator = 30 * total

        _check_count('slider_end_hits', slider_end_hits, attributes.n_sliders)
        _check_count('large_tick_hits', large_tick_hits,
                     attributes.n_large_ticks)
        slider_ends = (
            attributes.n_sliders if slider_end_hits is None
            else slider_end_hits
        )
        large_ticks = (
            attributes.n_large_ticks if large_tick_hits is None
            else large_tick_hits
        )
        small_ticks = small_tick_hits or 0
        if osu_slider_accuracy(attributes, lazer, classic):
            fixed_units += 15 * slider_ends + 3 * large_ticks
            denominator += (
                15 * attributes.n_sliders + 3 * attributes.n_large_ticks
            )
    elif mode == GameMode.taiko:
        total = attributes.max_combo
        tiers = [_Tier('n300', 2), _Tier('n100', 1)]
        given = {'n300': n300, 'n100': n100}
        denominator = 2 * total
    else:
        total = attributes.n_objects
        perfect = 61 if lazer else 60
        tiers = [
            _Tier('n_geki', perfect),
            _Tier('n300', 60),
            _Tier('n_katu', 40),
            _Tier('n100', 20),
            _Tier('n50', 10),
        ]
        given = {
            'n_geki': n_geki,
            'n300': n300,
            'n_katu': n_katu,
            'n100': n100,
            'n50': n50,
        }
        denominator = perfect * total

    _check_count('misses', misses, total)
    explicit = [value for value in given.values() if value is not None]
    remaining = total - misses - sum(explicit)
    if remaining < 0:
        raise InconsistentState(
            f'the hit counts exceed the {total} objects of the map',
        )

    fixed_units += sum(
        tier.weight * given[tier.name]
        for tier in tiers
        if given[tier.name] is not None
    )

    accuracy_units = None
    if accuracy is not None:
        accuracy_units = accuracy * denominator

    counts = _resolve_tiers(
        tiers,
        given,
        remaining,
        accuracy_units,
        fixed_units,
        best,
    )
    return ScoreState(
        n_geki=counts.get('n_geki', 0),
        n_katu=counts.get('n_katu', 0),
        n300=counts.get('n300', 0),
        n100=counts.get('n100', 0),
        n50=counts.get('n50', 0),
        misses=misses,
        large_tick_hits=large_ticks,
        small_tick_hits=small_ticks,
        slider_end_hits=slider_ends,
    )


def _resolve_catch(attributes,
                   accuracy,
                   n_katu,
                   n300,
                   n100,
                   n50,
                   misses,
                   best):
    n_fruits = attributes.n_fruits
    n_droplets = attributes.n_droplets
    n_tiny = attributes.n_tiny_droplets

    _check_count('misses', misses, n_fruits + n_droplets)
    _check_count('n300', n300, n_fruits)
    _check_count('n100', n100, n_droplets)
    _check_count('n50', n50, n_tiny)
    _check_count('n_katu', n_katu, n_tiny)

    caught = n_fruits + n_droplets - misses
    if n300 is None and n100 is None:
        # best case misses droplets before fruits
        if best:
            dropped = min(misses, n_droplets)
            n100 = n_droplets - dropped
            n300 = n_fruits - (misses - dropped)
        else:
            dropped = min(misses, n_fruits)
            n300 = n_fruits - dropped
            n100 = n_droplets - (misses - dropped)
    elif n300 is None:
        n300 = caught - n100
    elif n100 is None:
        n100 = caught - n300

    if (n300 + n100 != caught or
            not 0 <= n300 <= n_fruits or
            not 0 <= n100 <= n_droplets):
        raise InconsistentState(
            'the fruit and droplet counts do not match the map',
        )

    if n50 is None and n_katu is None:
        if accuracy is None:
            n50 = n_tiny
        else:
            total = n_fruits + n_droplets + n_tiny
            exact = accuracy * total - caught
            if not -0.5 <= exact <= n_tiny + 0.5:
                raise InconsistentState(
                    'the accuracy cannot be reached with the given hit'
                    ' counts',
                )
            if best:
                n50 = math.floor(exact + 0.5)
            else:
                n50 = math.ceil(exact - 0.5)
            n50 = min(max(n50, 0), n_tiny)
        n_katu = n_tiny - n50
    elif n50 is None:
        n50 = n_tiny - n_katu
    elif n_katu is None:
        n_katu = n_tiny - n50
    elif n50 + n_katu != n_tiny:
        raise InconsistentState(
            'the tiny droplet counts do not match the map',
        )

    return ScoreState(
        n_katu=n_katu,
        n300=n300,
        n100=n100,
        n50=n50,
        misses=misses,
    )
