"""
Enumerations shared by the statement interface and the native drivers.

FetchMode and ParamType carry the values of the richer statement interface
and must not be renumbered. BindType and ResultShape describe the native
prepared-statement protocol.
"""
from enum import IntEnum

__all__ = [
    'FetchMode',
    'ParamType',
    'BindType',
    'ResultShape',
    'SUPPORTED_FETCH_MODES',
]


class FetchMode(IntEnum):
    """Row shapes understood by fetch(), fetch_all() and set_fetch_mode().
    """
    DEFAULT = 0
    LAZY = 1
    ASSOC = 2
    NUM = 3
    BOTH = 4
    OBJ = 5
    BOUND = 6
    COLUMN = 7
    CLASS = 8
    INTO = 9
    FUNC = 10
    NAMED = 11
    KEY_PAIR = 12


class ParamType(IntEnum):
    """Declared parameter types accepted by bind_value().
    """
    NULL = 0
    INT = 1
    STR = 2
    LOB = 3
    STMT = 4
    BOOL = 5


class BindType:
    """Native wire type codes used in a bind signature."""
    INTEGER = 'i'
    DOUBLE = 'd'
    STRING = 's'
    BLOB = 'b'

    ALL = frozenset('idsb')


class ResultShape(IntEnum):
    """Native row shapes for fetch_array() and fetch_all()."""
    ASSOC = 1
    NUM = 2
    BOTH = 3


SUPPORTED_FETCH_MODES = frozenset({
    FetchMode.BOTH,
    FetchMode.ASSOC,
    FetchMode.NUM,
    FetchMode.CLASS,
    FetchMode.COLUMN,
})
