# mapserver_bridge/_internal/structs.py

"""
ctypes declarations of the MapServer structures the bridge reads directly.

Only the leading members are declared. They must match `mapserver.h`
(MapServer 7.x and 8.x share these prefixes). Every other member is left to
the library; in particular `layerObj` is never laid out here.
"""

import ctypes

ROUTINELENGTH = 64
MESSAGELENGTH = 2048

MS_FALSE = 0
MS_TRUE = 1
MS_NOERR = 0


class ErrorObjStruct(ctypes.Structure):
    """`errorObj`: one node of the engine's error list."""
    _fields_ = [
        ("code", ctypes.c_int),
        ("routine", ctypes.c_char * ROUTINELENGTH),
        ("message", ctypes.c_char * MESSAGELENGTH),
        ("isreported", ctypes.c_int),
        ("next", ctypes.c_void_p),
    ]


class MapObjPrefix(ctypes.Structure):
    """Leading members of `mapObj`."""
    _fields_ = [
        ("name", ctypes.c_void_p),
        ("status", ctypes.c_int),
        ("height", ctypes.c_int),
        ("width", ctypes.c_int),
        ("maxsize", ctypes.c_int),
        ("layers", ctypes.POINTER(ctypes.c_void_p)),
        ("refcount", ctypes.c_int),
        ("numlayers", ctypes.c_int),
        ("maxlayers", ctypes.c_int),
    ]


class ImageObjPrefix(ctypes.Structure):
    """Leading members of `imageObj`, up to the output format it was drawn with."""
    _fields_ = [
        ("width", ctypes.c_int),
        ("height", ctypes.c_int),
        ("resolution", ctypes.c_double),
        ("resolutionfactor", ctypes.c_double),
        ("imagepath", ctypes.c_void_p),
        ("imageurl", ctypes.c_void_p),
        ("format", ctypes.c_void_p),
    ]
