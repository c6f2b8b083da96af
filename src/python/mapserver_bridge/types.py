# mapserver_bridge/types.py

"""
Core enumerations and type aliases for the mapserver_bridge library.
"""
from enum import IntEnum
from typing import TypeAlias

# A native address. The bridge never dereferences it itself; only the engine does.
NativeHandle: TypeAlias = int

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


class ErrorCode(IntEnum):
    """
    Error codes recorded by the engine in its error list.

    These correspond directly to the `MS_*ERR` constants of `mapserver.h`.
    """
    NOERR = 0
    IOERR = 1
    MEMERR = 2
    TYPEERR = 3
    SYMERR = 4
    REGEXERR = 5
    TTFERR = 6
    DBFERR = 7
    GDERR = 8
    IDENTERR = 9
    EOFERR = 10
    PROJERR = 11
    MISCERR = 12
    CGIERR = 13
    WEBERR = 14
    IMGERR = 15
    HASHERR = 16
    JOINERR = 17
    NOTFOUND = 18
    SHPERR = 19
    PARSEERR = 20
