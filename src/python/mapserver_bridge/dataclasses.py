# mapserver_bridge/dataclasses.py
"""
Dataclasses for structured data within the mapserver_bridge library.
"""
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    """An immutable copy of one engine error record, safe to keep across resets."""
    code: int
    code_str: str
    message: str
    routine: str

    def __str__(self) -> str:
        return f"{self.routine}: {self.code_str} {self.message}".strip()


@dataclass(frozen=True, slots=True)
class VersionInfo:
    """Engine version as reported by the native library."""
    text: str
    number: int

    @property
    def major(self) -> int:
        return self.number // 10000

    @property
    def minor(self) -> int:
        return (self.number // 100) % 100

    @property
    def patch(self) -> int:
        return self.number % 100
