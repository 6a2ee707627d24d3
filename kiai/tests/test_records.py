from collections import namedtuple
import json

import numpy as np

from kiai import GameMode
from kiai.records import Record, plain


class Example(Record, namedtuple('Example', 'mode value peaks child')):
    __slots__ = ()
    _summary = ('mode', 'value')


def test_plain():
    assert plain(GameMode.mania) == 3
    assert plain(np.float64(1.5)) == 1.5
    assert type(plain(np.int64(3))) is int
    assert plain(np.array([1.0, 2.0])) == [1.0, 2.0]
    assert plain({'a': (np.int32(1), GameMode.taiko)}) == {'a': [1, 1]}
    assert plain('text') == 'text'


def test_nested_records():
    child = Example(GameMode.osu, 1.0, [], None)
    record = Example(GameMode.catch, np.float64(2.25), np.zeros(3), child)
    as_dict = record.to_dict()
    assert as_dict == {
        'mode': 2,
        'value': 2.25,
        'peaks': [0.0, 0.0, 0.0],
        'child': {'mode': 0, 'value': 1.0, 'peaks': [], 'child': None},
    }
    assert json.loads(record.to_json()) == as_dict


def test_str():
    record = Example(GameMode.catch, 1 / 3, [1, 2], None)
    assert str(record) == 'Example(mode=catch, value=0.333333)'
