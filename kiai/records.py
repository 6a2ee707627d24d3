"""Helpers shared by the immutable result records.
"""
from enum import Enum
import json
import math

import numpy as np


def plain(value):
    """Convert ``value`` into JSON compatible data.

    Records become dicts, enums become their values, numpy scalars and arrays
    become python numbers and lists.
    """
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, dict):
        return {k: plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain(v) for v in value]
    return value


def _format(value):
    if isinstance(value, float) and math.isfinite(value):
        return f'{value:.6g}'
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, Record):
        return str(value)
    if isinstance(value, (list, np.ndarray)):
        return f'[{len(value)} values]'
    return repr(value)


class Record:
    """Mixin for ``namedtuple`` result types.

    Subclasses must list the record fields in ``_fields`` (which
    ``namedtuple`` provides). Fields named in ``_summary`` are shown by
    ``str``; by default every field is.
    """
    __slots__ = ()
    _summary = None

    def to_dict(self):
        """The record as a dict of JSON compatible values.
        """
        return {name: plain(getattr(self, name)) for name in self._fields}

    def to_json(self, **kwargs):
        """The record serialized as a JSON string.

        Parameters
        ----------
        **kwargs
            Forwarded to :func:`json.dumps`.
        """
        return json.dumps(self.to_dict(), **kwargs)

    def __str__(self):
        names = self._summary or self._fields
        body = ', '.join(
            f'{name}={_format(getattr(self, name))}' for name in names
        )
        return f'{type(self).__name__}({body})'
