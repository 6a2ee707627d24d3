from enum import IntEnum, unique

from .errors import KiaiError


@unique
class GameMode(IntEnum):
    """The various game modes in osu!.
    """
    osu = 0
    taiko = 1
    catch = 2
    mania = 3

    @classmethod
    def parse(cls, value):
        """Look up a game mode by value or by name.

        Parameters
        ----------
        value : GameMode, int or str
            The mode number (``0`` to ``3``) or one of the names
            ``osu``, ``standard``, ``std``, ``taiko``, ``catch``, ``ctb``,
            ``fruits`` or ``mania``.

        Returns
        -------
        mode : GameMode
            The matching mode.

        Raises
        ------
        KiaiError
            Raised when ``value`` does not name a game mode.
        """
        if isinstance(value, cls):
            return value

        if isinstance(value, str):
            try:
                return _aliases[value.strip().lower()]
            except KeyError:
                raise KiaiError(f'invalid mode: {value!r}')

        try:
            return cls(value)
        except ValueError:
            raise KiaiError(f'invalid mode: {value!r}')


_aliases = {
    'osu': GameMode.osu,
    'standard': GameMode.osu,
    'std': GameMode.osu,
    'taiko': GameMode.taiko,
    'catch': GameMode.catch,
    'ctb': GameMode.catch,
    'fruits': GameMode.catch,
    'mania': GameMode.mania,
}
