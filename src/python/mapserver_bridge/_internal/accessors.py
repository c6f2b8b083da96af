# mapserver_bridge/_internal/accessors.py

"""
Accessor tables mapping wrapper property names to native field access.

Each wrapper type declares its native fields as `NativeProperty` class
attributes. The set of supported properties is collected once per class, so
it can be enumerated (and tested) without instantiating anything.
"""

from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

Getter = Callable[[Any], Any]
Setter = Callable[[Any, Any], None]


class NativeProperty:
    """A (getter, setter-or-None) pair over a wrapper's native handle."""

    def __init__(self, getter: Getter, setter: Optional[Setter] = None, doc: Optional[str] = None):
        self.name: Optional[str] = None
        self.getter = getter
        self.setter = setter
        self.__doc__ = doc or getter.__doc__

    def __set_name__(self, owner: type, name: str) -> None:
        # Aliases share the descriptor; keep the first (canonical) name.
        if self.name is None:
            self.name = name

    @property
    def writable(self) -> bool:
        return self.setter is not None

    def __get__(self, obj: Any, objtype: Optional[type] = None) -> Any:
        if obj is None:
            return self
        return self.getter(obj)

    def __set__(self, obj: Any, value: Any) -> None:
        if self.setter is None:
            raise AttributeError(f"'{type(obj).__name__}.{self.name}' is read-only")
        self.setter(obj, value)

    def __delete__(self, obj: Any) -> None:
        raise AttributeError(f"'{type(obj).__name__}.{self.name}' cannot be deleted")


class NativeWrapper:
    """
    Mixin that collects a class's `NativeProperty` attributes into an
    accessor table at class creation time.
    """

    __native_properties__: Mapping[str, NativeProperty] = MappingProxyType({})

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        table: dict[str, NativeProperty] = {}
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if isinstance(attr, NativeProperty):
                    table[name] = attr
        cls.__native_properties__ = MappingProxyType(table)

    @classmethod
    def native_properties(cls) -> tuple[str, ...]:
        """Names of all native-backed properties, aliases included."""
        return tuple(cls.__native_properties__)

    @classmethod
    def writable_properties(cls) -> tuple[str, ...]:
        return tuple(name for name, prop in cls.__native_properties__.items() if prop.writable)
