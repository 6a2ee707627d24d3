import math
import re


class lazyval:
    """Decorator to lazily compute and cache a value.
    """
    def __init__(self, fget):
        self._fget = fget
        self._name = None
        self.__doc__ = fget.__doc__

    def __set_name__(self, owner, name):
        self._name = name

    def __get__(self, instance, owner):
        if instance is None:
            return self

        # this is a data descriptor so the cached value must be checked here
        cache = vars(instance)
        try:
            return cache[self._name]
        except KeyError:
            value = cache[self._name] = self._fget(instance)
            return value

    def __set__(self, instance, value):
        vars(instance)[self._name] = value


class no_default:
    """Sentinel type; this should not be instantiated.

    This type is used so functions can tell the difference between no argument
    passed and an explicit value passed even if ``None`` is a valid value.

    Notes
    -----
    This is implemented as a type to make functions which use this as a default
    argument serializable.
    """
    def __new__(cls):
        raise TypeError('cannot create instances of sentinel type')


def clamp(value, lower, upper):
    return max(lower, min(upper, value))


def lerp(start, end, amount):
    return start + (end - start) * amount


def reverse_lerp(x, start, end):
    """The fraction of the way ``x`` is between ``start`` and ``end``,
    clamped to [0, 1].
    """
    return clamp((x - start) / (end - start), 0.0, 1.0)


def smoothstep(x, start, end):
    x = reverse_lerp(x, start, end)
    return x * x * (3.0 - 2.0 * x)


def smootherstep(x, start, end):
    x = reverse_lerp(x, start, end)
    return x * x * x * (x * (6.0 * x - 15.0) + 10.0)


def logistic(x, midpoint, multiplier, max_value=1.0):
    """A logistic curve through ``max_value / 2`` at ``midpoint``.
    """
    exponent = multiplier * (midpoint - x)
    if exponent > 700:
        return 0.0
    return max_value / (1 + math.exp(exponent))


def norm(p, *values):
    """The ``p``-norm of ``values``.
    """
    return sum(value ** p for value in values) ** (1 / p)


def difficulty_range(difficulty, low, mid, high):
    """Map a difficulty value in [0, 10] onto a piecewise linear range.

    Parameters
    ----------
    difficulty : float
        The difficulty attribute (AR, OD, ...).
    low : float
        The value at difficulty 0.
    mid : float
        The value at difficulty 5.
    high : float
        The value at difficulty 10.

    Returns
    -------
    value : float
        The interpolated value. Difficulties outside of [0, 10] extrapolate
        the nearest segment.
    """
    if difficulty > 5:
        return mid + (high - mid) * (difficulty - 5) / 5
    if difficulty < 5:
        return mid + (mid - low) * (difficulty - 5) / 5
    return mid


def inverse_difficulty_range(value, low, mid, high):
    """Invert :func:`difficulty_range`.

    Parameters
    ----------
    value : float
        The output of :func:`difficulty_range`.
    low, mid, high : float
        The same bounds passed to :func:`difficulty_range`.

    Returns
    -------
    difficulty : float
        The difficulty that produces ``value``.
    """
    if (value - mid) * (high - mid) > 0:
        return 5 + 5 * (value - mid) / (high - mid)
    return 5 + 5 * (value - mid) / (mid - low)


def milliseconds_to_bpm(ms, delimiter=4):
    return 60000 / (ms * delimiter)


def bpm_to_milliseconds(bpm, delimiter=4):
    return 60000 / (bpm * delimiter)


_camel = re.compile(r'(?<!^)(?=[A-Z])')


def snake_case(name):
    """Convert a ``camelCase`` name to ``snake_case``.
    """
    return _camel.sub('_', name).lower()


def options_from_dict(options, aliases=None):
    """Normalize a dict of builder options.

    Parameters
    ----------
    options : mapping[str, any]
        The options keyed by their ``snake_case`` or ``camelCase`` names.
        Options set to ``None`` are dropped.
    aliases : dict[str, str], optional
        Extra renames applied after converting to ``snake_case``.

    Returns
    -------
    kwargs : dict[str, any]
        The options as keyword arguments.
    """
    aliases = aliases or {}
    kwargs = {}
    for name, value in options.items():
        if value is None:
            continue
        name = snake_case(name)
        kwargs[aliases.get(name, name)] = value
    return kwargs
