import os

from kiai import Beatmap, GameMode

_here = os.path.dirname(os.path.abspath(__file__))


def example_beatmap(name):
    """Load one of the example beatmaps.

    Parameters
    ----------
    name : str
        The name of the example file to open.
    """
    return Beatmap.from_path(os.path.join(_here, name))


_mode_files = {
    GameMode.osu: 'standard.osu',
    GameMode.taiko: 'taiko.osu',
    GameMode.catch: 'catch.osu',
    GameMode.mania: 'mania.osu',
}


def example_path(mode):
    """The path to the example beatmap of a game mode.
    """
    return os.path.join(_here, _mode_files[GameMode.parse(mode)])


def example_for_mode(mode):
    """Load the example beatmap of a game mode.

    Parameters
    ----------
    mode : GameMode or str
        The game mode.

    Returns
    -------
    beatmap : Beatmap
        The beatmap object, authored in ``mode``.
    """
    return Beatmap.from_path(example_path(mode))


def standard():
    return example_for_mode(GameMode.osu)


def taiko():
    return example_for_mode(GameMode.taiko)


def catch():
    return example_for_mode(GameMode.catch)


def mania():
    return example_for_mode(GameMode.mania)
