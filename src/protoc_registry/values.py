"""Typed scalar values used for field defaults."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Union


class ValueKind(Enum):
    BOOL = auto()
    F32 = auto()
    F64 = auto()
    I32 = auto()
    I64 = auto()
    U32 = auto()
    U64 = auto()
    STRING = auto()
    BYTES = auto()


@dataclass(frozen=True)
class Value:
    """A scalar tagged with the protobuf representation it was decoded as."""

    kind: ValueKind
    value: Union[bool, int, float, str, bytes]

    def __str__(self) -> str:
        if self.kind == ValueKind.BOOL:
            return "true" if self.value else "false"
        if self.kind == ValueKind.STRING:
            return repr(self.value)
        return str(self.value)
