class KiaiError(Exception):
    """Base class for all errors raised by kiai.
    """


class ParseFailure(KiaiError, ValueError):
    """Raised when a beatmap cannot be parsed in the ``.osu`` format.
    """


class InvalidModifier(KiaiError, ValueError):
    """Raised for unknown modifiers or modifiers that cannot be combined.
    """


class InvalidRange(KiaiError, ValueError):
    """Raised when an attribute or clock rate lies outside its allowed range.

    Parameters
    ----------
    name : str
        The name of the offending option.
    value : float
        The value that was passed.
    lower, upper : float
        The inclusive bounds for the option.
    """
    def __init__(self, name, value, lower, upper):
        super().__init__(
            f'{name} must be in the range [{lower}, {upper}], got {value!r}',
        )
        self.name = name
        self.value = value
        self.lower = lower
        self.upper = upper


class UnsupportedConversion(KiaiError, TypeError):
    """Raised when a beatmap cannot be converted to the requested mode.

    Parameters
    ----------
    source : GameMode
        The mode of the beatmap.
    target : GameMode
        The mode that was requested.
    """
    def __init__(self, source, target):
        super().__init__(f'Cannot convert {source.name} to {target.name}')
        self.source = source
        self.target = target


class InconsistentState(KiaiError, ValueError):
    """Raised when hit statistics cannot be resolved into a valid score.
    """
