import json

from click.testing import CliRunner
import pytest

import kiai.example_data.beatmaps
from kiai import Difficulty, GameMode, Performance
from kiai.__main__ import main
from kiai.client import Client


@pytest.fixture
def runner():
    return CliRunner()


def run(runner, *args):
    result = runner.invoke(main, list(args))
    assert result.exit_code == 0, result.output
    return result


@pytest.mark.parametrize('mode', list(GameMode), ids=lambda mode: mode.name)
def test_difficulty(runner, mode):
    path = kiai.example_data.beatmaps.example_path(mode)
    result = run(runner, 'difficulty', path, '--json')
    stars = json.loads(result.stdout)['stars']
    expected = Difficulty().calculate(
        kiai.example_data.beatmaps.example_for_mode(mode),
    )
    assert stars == pytest.approx(expected.stars)

    summary = run(runner, 'difficulty', path)
    assert 'stars=' in summary.stdout


def test_mod_bits(runner):
    path = kiai.example_data.beatmaps.example_path('osu')
    by_bits = run(runner, 'difficulty', path, '--mods', '72', '--json')
    by_name = run(runner, 'difficulty', path, '--mods', 'HDDT', '--json')
    assert json.loads(by_bits.stdout) == json.loads(by_name.stdout)


def test_convert(runner):
    path = kiai.example_data.beatmaps.example_path('osu')
    result = run(runner, 'difficulty', path, '--mode', 'taiko', '--json')
    as_dict = json.loads(result.stdout)
    assert as_dict['mode'] == int(GameMode.taiko)
    assert as_dict['is_convert']


def test_attributes(runner):
    path = kiai.example_data.beatmaps.example_path('osu')
    result = run(runner, 'attributes', path, '--mods', 'HR', '--json')
    as_dict = json.loads(result.stdout)
    assert as_dict['ar'] == pytest.approx(10)
    assert as_dict['od'] == pytest.approx(10)


def test_performance(runner):
    path = kiai.example_data.beatmaps.example_path('osu')
    result = run(
        runner,
        'performance',
        path,
        '--accuracy', '95',
        '--misses', '1',
        '--json',
    )
    expected = Performance(accuracy=95, misses=1).calculate(
        kiai.example_data.beatmaps.standard(),
    )
    assert json.loads(result.stdout)['pp'] == pytest.approx(expected.pp)

    stable = run(
        runner,
        'performance',
        path,
        '--accuracy', '95',
        '--stable',
        '--priority', 'worst_case',
    )
    assert 'pp=' in stable.stdout


def test_performance_inconsistent(runner):
    path = kiai.example_data.beatmaps.example_path('osu')
    result = runner.invoke(main, ['performance', path, '--misses', '100000'])
    assert result.exit_code == 1
    assert 'Error' in result.output


def test_strains(runner):
    path = kiai.example_data.beatmaps.example_path('taiko')
    result = run(runner, 'strains', path)
    lines = result.stdout.splitlines()
    assert lines[0].startswith('TaikoStrains(')
    assert any(line.startswith('stamina: ') for line in lines[1:])


def test_gradual(runner):
    path = kiai.example_data.beatmaps.example_path('osu')
    result = run(runner, 'gradual', path, '--passed-objects', '5')
    assert len(result.stdout.splitlines()) == 5

    result = run(runner, 'gradual', path, '--json')
    stars = json.loads(result.stdout)
    beatmap = kiai.example_data.beatmaps.standard()
    assert len(stars) == beatmap.n_objects
    assert stars[-1] == pytest.approx(Difficulty().calculate(beatmap).stars)


def test_beatmap_id(runner, monkeypatch):
    requested = []

    def download(self, beatmap_id):
        requested.append(beatmap_id)
        return kiai.example_data.beatmaps.standard()

    monkeypatch.setattr(Client, 'download', download)
    result = run(runner, 'difficulty', '--beatmap-id', '123', '--json')
    assert requested == [123]
    assert json.loads(result.stdout)['mode'] == int(GameMode.osu)


def test_needs_one_beatmap(runner):
    result = runner.invoke(main, ['difficulty'])
    assert result.exit_code == 2

    path = kiai.example_data.beatmaps.example_path('osu')
    result = runner.invoke(main, ['difficulty', path, '--beatmap-id', '1'])
    assert result.exit_code == 2


@pytest.mark.parametrize('args', [
    ['--mods', 'ZZ'],
    ['--mods', 'HDEZHR'],
    ['--od', '30'],
    ['--clock-rate', '0'],
    ['--passed-objects', '-1'],
])
def test_invalid_options(runner, args):
    path = kiai.example_data.beatmaps.example_path('osu')
    result = runner.invoke(main, ['difficulty', path] + args)
    assert result.exit_code == 1
    assert 'Error' in result.output
