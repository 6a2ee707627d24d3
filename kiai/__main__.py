import json

import click

from .attributes import BeatmapAttributesBuilder
from .cli import (
    beatmap_options,
    echo_record,
    load_beatmap,
    maybe_show_progress,
)
from .difficulty import Difficulty
from .errors import KiaiError
from .mod import ModifierSet
from .performance import Performance


def _difficulty_options(mods,
                        clock_rate,
                        ar,
                        cs,
                        hp,
                        od,
                        passed_objects):
    return {
        'mods': mods,
        'clock_rate': clock_rate,
        'ar': ar,
        'cs': cs,
        'hp': hp,
        'od': od,
        'passed_objects': passed_objects,
    }


def _setup(path, beatmap_id, mode, mods):
    if mods is not None and mods.isdigit():
        mods = int(mods)
    try:
        mods = ModifierSet.parse(mods)
        return mods, load_beatmap(path, beatmap_id, mode, mods)
    except KiaiError as e:
        raise click.ClickException(str(e))


@click.group()
def main():
    """osu! difficulty and performance utilities.
    """


@main.command()
@beatmap_options
def attributes(path,
               beatmap_id,
               mods,
               clock_rate,
               mode,
               ar,
               cs,
               hp,
               od,
               passed_objects,
               as_json):
    """Print the attributes of a beatmap after mods and overrides.
    """
    mods, beatmap = _setup(path, beatmap_id, mode, mods)
    try:
        result = BeatmapAttributesBuilder(
            beatmap=beatmap,
            mods=mods,
            clock_rate=clock_rate,
            ar=ar,
            cs=cs,
            hp=hp,
            od=od,
        ).build()
    except KiaiError as e:
        raise click.ClickException(str(e))
    echo_record(result, as_json)


@main.command()
@beatmap_options
def difficulty(path,
               beatmap_id,
               mods,
               clock_rate,
               mode,
               ar,
               cs,
               hp,
               od,
               passed_objects,
               as_json):
    """Print the difficulty attributes of a beatmap.
    """
    mods, beatmap = _setup(path, beatmap_id, mode, mods)
    options = _difficulty_options(
        mods, clock_rate, ar, cs, hp, od, passed_objects,
    )
    try:
        result = Difficulty(**options).calculate(beatmap)
    except (KiaiError, ValueError) as e:
        raise click.ClickException(str(e))
    echo_record(result, as_json)


@main.command()
@beatmap_options
def strains(path,
            beatmap_id,
            mods,
            clock_rate,
            mode,
            ar,
            cs,
            hp,
            od,
            passed_objects,
            as_json):
    """Print the strain peaks of a beatmap.
    """
    mods, beatmap = _setup(path, beatmap_id, mode, mods)
    options = _difficulty_options(
        mods, clock_rate, ar, cs, hp, od, passed_objects,
    )
    try:
        result = Difficulty(**options).strains(beatmap)
    except (KiaiError, ValueError) as e:
        raise click.ClickException(str(e))

    if as_json:
        echo_record(result, as_json)
        return

    click.echo(str(result))
    for name, peaks in result._asdict().items():
        if name in ('mode', 'section_length'):
            continue
        click.echo(
            f'{name}: ' + ' '.join(f'{peak:.2f}' for peak in peaks),
        )


@main.command()
@beatmap_options
@click.option('--accuracy', type=float, help='The accuracy in percent.')
@click.option('--combo', type=int, help='The max combo.')
@click.option('--n-geki', type=int, help='osu!mania perfects.')
@click.option('--n-katu', type=int, help='osu!mania 200s.')
@click.option('--n300', type=int, help='Greats.')
@click.option('--n100', type=int, help='Oks.')
@click.option('--n50', type=int, help='Mehs.')
@click.option('--misses', type=int, help='Misses.')
@click.option(
    '--priority',
    type=click.Choice(['best_case', 'worst_case']),
    default='best_case',
    help='Which hit results to prefer when inferring statistics.',
)
@click.option(
    '--lazer/--stable',
    default=True,
    help='Rate an osu!lazer or an osu!stable score?',
)
def performance(path,
                beatmap_id,
                mods,
                clock_rate,
                mode,
                ar,
                cs,
                hp,
                od,
                passed_objects,
                as_json,
                accuracy,
                combo,
                n_geki,
                n_katu,
                n300,
                n100,
                n50,
                misses,
                priority,
                lazer):
    """Print the performance of a score on a beatmap.
    """
    mods, beatmap = _setup(path, beatmap_id, mode, mods)
    options = _difficulty_options(
        mods, clock_rate, ar, cs, hp, od, passed_objects,
    )
    try:
        result = Performance(
            accuracy=accuracy,
            combo=combo,
            n_geki=n_geki,
            n_katu=n_katu,
            n300=n300,
            n100=n100,
            n50=n50,
            misses=misses,
            hitresult_priority=priority,
            lazer=lazer,
            **options,
        ).calculate(beatmap)
    except (KiaiError, ValueError) as e:
        raise click.ClickException(str(e))
    echo_record(result, as_json)


@main.command()
@beatmap_options
@click.option(
    '--progress/--no-progress',
    help='Show a progress bar?',
    default=False,
)
def gradual(path,
            beatmap_id,
            mods,
            clock_rate,
            mode,
            ar,
            cs,
            hp,
            od,
            passed_objects,
            as_json,
            progress):
    """Print the star rating after every object of a beatmap.
    """
    mods, beatmap = _setup(path, beatmap_id, mode, mods)
    options = _difficulty_options(mods, clock_rate, ar, cs, hp, od, None)
    try:
        calculator = Difficulty(**options).gradual_difficulty(beatmap)
    except (KiaiError, ValueError) as e:
        raise click.ClickException(str(e))

    total = calculator.n_remaining
    if passed_objects is not None:
        total = min(total, passed_objects)

    stars = []
    with maybe_show_progress(range(total), progress) as steps:
        for _ in steps:
            stars.append(calculator.next().stars)

    if as_json:
        click.echo(json.dumps(stars))
        return
    for ix, value in enumerate(stars, 1):
        click.echo(f'{ix}: {value:.4f}')


if __name__ == '__main__':
    main()
