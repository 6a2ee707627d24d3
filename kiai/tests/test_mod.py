import pytest

from kiai import InvalidModifier, Mod, ModifierSet


def test_parse_bits():
    mods = ModifierSet(72)
    assert set(mods) == {'HD', 'DT'}
    assert mods.bits == Mod.hidden | Mod.double_time


def test_parse_acronyms():
    assert ModifierSet('HDDT') == ModifierSet(72)
    assert ModifierSet('+hd,dt') == ModifierSet(72)
    assert ModifierSet(['HD', {'acronym': 'DT'}]) == ModifierSet(72)


def test_parse_is_identity_for_modifier_sets():
    mods = ModifierSet('HR')
    assert ModifierSet.parse(mods) is mods


def test_nightcore_implies_double_time():
    mods = ModifierSet(Mod.nightcore | Mod.double_time)
    assert set(mods) == {'NC'}
    assert mods.bits == Mod.nightcore | Mod.double_time


def test_settings():
    mods = ModifierSet({
        'acronym': 'DT',
        'settings': {'speedChange': 1.3},
    })
    assert mods['DT'] == {'speed_change': 1.3}
    assert mods.clock_rate == 1.3


@pytest.mark.parametrize('value,clock_rate', [
    (None, 1.0),
    ('HD', 1.0),
    ('DT', 1.5),
    ('NC', 1.5),
    ('HT', 0.75),
    ('DC', 0.75),
])
def test_clock_rate(value, clock_rate):
    assert ModifierSet(value).clock_rate == clock_rate


def test_difficulty_adjust():
    mods = ModifierSet({
        'acronym': 'DA',
        'settings': {'approachRate': 10, 'circle_size': 6},
    })
    assert mods.difficulty_adjust == {'ar': 10.0, 'cs': 6.0}


def test_lazer_only_mods_have_no_bits():
    assert ModifierSet('CL').bits == 0
    assert ModifierSet('CL').classic


def test_mania_keys():
    assert ModifierSet('4K').mania_keys == 4
    assert ModifierSet('HD').mania_keys is None


def test_str():
    assert str(ModifierSet()) == 'NM'
    assert str(ModifierSet('HDHR')) == 'HDHR'


def test_to_list():
    mods = ModifierSet([{'acronym': 'DT', 'settings': {'speed_change': 1.2}},
                        'HD'])
    assert mods.to_list() == [
        {'acronym': 'DT', 'settings': {'speed_change': 1.2}},
        {'acronym': 'HD'},
    ]


@pytest.mark.parametrize('value', [
    'XX',
    'HDD',
    'EZHR',
    'DTHT',
    1 << 31,
    -1,
    True,
    {'settings': {}},
    {'acronym': 'DT', 'settings': {'speed_change': 'fast'}},
    {'acronym': 'DT', 'settings': {'speed_change': 0}},
    {'acronym': 'DT', 'settings': 1.5},
    1.5,
])
def test_invalid(value):
    with pytest.raises(InvalidModifier):
        ModifierSet(value)


def test_unpack():
    bits = Mod.hidden | Mod.hard_rock
    assert Mod.unpack(bits) == [Mod.hidden, Mod.hard_rock]
    assert Mod.unpack(Mod.nightcore | Mod.double_time) == [Mod.nightcore]

    with pytest.raises(InvalidModifier):
        Mod.unpack(1 << 31)
