from contextlib import contextmanager
import functools
import logging

import click

from .beatmap import Beatmap
from .client import Client
from .game_mode import GameMode


def maybe_show_progress(it, show_progress, **kwargs):
    """Optionally show a progress bar for the given iterator.

    Parameters
    ----------
    it : iterable
        The underlying iterator.
    show_progress : bool
        Should progress be shown.
    **kwargs
        Forwarded to the click progress bar.

    Returns
    -------
    itercontext : context manager
        A context manager whose enter is the actual iterator to use.

    Examples
    --------
    .. code-block:: python

       with maybe_show_progress([1, 2, 3], True) as ns:
            for n in ns:
                ...
    """
    if show_progress:
        return click.progressbar(it, **kwargs)

    @contextmanager
    def ctx():
        yield it

    return ctx()


def configure_logging(verbose):
    """Set up logging for the command line.

    Parameters
    ----------
    verbose : int
        The number of times ``--verbose`` was passed.
    """
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )


def load_beatmap(path, beatmap_id, mode, mods):
    """Read the beatmap named on the command line.

    Parameters
    ----------
    path : str or None
        The path to a ``.osu`` file.
    beatmap_id : int or None
        The id of a beatmap to download instead.
    mode : str or None
        The mode to convert the beatmap to.
    mods : ModifierSet
        The mods, which select the key count of osu!mania converts.

    Returns
    -------
    beatmap : Beatmap
        The beatmap, in the requested mode.
    """
    if (path is None) == (beatmap_id is None):
        raise click.UsageError('pass exactly one of PATH or --beatmap-id')

    if path is not None:
        beatmap = Beatmap.from_path(path)
    else:
        beatmap = Client().download(beatmap_id)

    if mode is not None:
        beatmap = beatmap.convert(GameMode.parse(mode), mods)
    return beatmap


def beatmap_options(f):
    """Decorate a command with the options shared by every command.
    """
    options = [
        click.argument(
            'path',
            type=click.Path(exists=True, dir_okay=False),
            required=False,
        ),
        click.option(
            '--beatmap-id',
            type=int,
            help='Download the beatmap with this id instead of reading PATH.',
        ),
        click.option('--mods', help='The mods, like HDDT or 72.'),
        click.option('--clock-rate', type=float, help='Override the speed.'),
        click.option(
            '--mode',
            type=click.Choice([mode.name for mode in GameMode]),
            help='Convert the beatmap to this mode.',
        ),
        click.option('--ar', type=float, help='Override the approach rate.'),
        click.option('--cs', type=float, help='Override the circle size.'),
        click.option('--hp', type=float, help='Override the drain rate.'),
        click.option(
            '--od',
            type=float,
            help='Override the overall difficulty.',
        ),
        click.option(
            '--passed-objects',
            type=int,
            help='Only consider this many objects.',
        ),
        click.option(
            '--json/--no-json',
            'as_json',
            default=False,
            help='Print JSON instead of a summary?',
        ),
        click.option(
            '-v',
            '--verbose',
            count=True,
            help='Log more; pass twice for debug output.',
        ),
    ]

    @functools.wraps(f)
    def wrapper(*args, verbose, **kwargs):
        configure_logging(verbose)
        return f(*args, **kwargs)

    for option in reversed(options):
        wrapper = option(wrapper)
    return wrapper


def echo_record(record, as_json):
    """Print a result record.
    """
    if as_json:
        click.echo(record.to_json(indent=2))
    else:
        click.echo(str(record))
