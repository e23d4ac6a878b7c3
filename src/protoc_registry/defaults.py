"""Decoding of the textual ``default_value`` carried by field descriptors."""

from __future__ import annotations

import math
import re
import struct
from typing import Callable, Dict, Tuple

from protoc_registry.field_types import FieldKind, InternalFieldType
from protoc_registry.values import Value, ValueKind


class BadDefaultValue(Exception):
    """Raised when a default value cannot be decoded for its field type."""

    def __init__(self, default_value: str):
        super().__init__(f"Bad default value {default_value!r}")
        self.default_value = default_value


_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_RE = re.compile(r"\+?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?|[+-]?(inf|infinity|nan)",
    re.ASCII | re.IGNORECASE,
)

_SPECIAL_FLOATS: Dict[str, float] = {
    "inf": math.inf,
    "-inf": -math.inf,
    "nan": math.nan,
}

# kind -> (regex, lower bound, upper bound, value kind)
_INTEGER_RANGES: Dict[FieldKind, Tuple[re.Pattern, int, int, ValueKind]] = {
    FieldKind.INT32: (_SIGNED_RE, -(2 ** 31), 2 ** 31 - 1, ValueKind.I32),
    FieldKind.SFIXED32: (_SIGNED_RE, -(2 ** 31), 2 ** 31 - 1, ValueKind.I32),
    FieldKind.SINT32: (_SIGNED_RE, -(2 ** 31), 2 ** 31 - 1, ValueKind.I32),
    FieldKind.INT64: (_SIGNED_RE, -(2 ** 63), 2 ** 63 - 1, ValueKind.I64),
    FieldKind.SFIXED64: (_SIGNED_RE, -(2 ** 63), 2 ** 63 - 1, ValueKind.I64),
    FieldKind.SINT64: (_SIGNED_RE, -(2 ** 63), 2 ** 63 - 1, ValueKind.I64),
    FieldKind.UINT32: (_UNSIGNED_RE, 0, 2 ** 32 - 1, ValueKind.U32),
    FieldKind.FIXED32: (_UNSIGNED_RE, 0, 2 ** 32 - 1, ValueKind.U32),
    FieldKind.UINT64: (_UNSIGNED_RE, 0, 2 ** 64 - 1, ValueKind.U64),
    FieldKind.FIXED64: (_UNSIGNED_RE, 0, 2 ** 64 - 1, ValueKind.U64),
}

_SIMPLE_ESCAPES: Dict[str, int] = {
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "a": 0x07,
    "b": 0x08,
    "f": 0x0C,
    "v": 0x0B,
    "\\": 0x5C,
    "'": 0x27,
    '"': 0x22,
    "?": 0x3F,
}

_OCTAL_DIGITS = "01234567"
_HEX_DIGITS = "0123456789abcdefABCDEF"


def parse_default_value(value: str, field_type: InternalFieldType) -> Value:
    """Decode ``value`` as a default for a field of ``field_type``.

    Raises BadDefaultValue if the text does not fit the type, including any
    default given for a message or enum field. Groups have no default form
    at all and raise NotImplementedError.
    """
    kind = field_type.kind
    if not kind.is_scalar:
        raise BadDefaultValue(value)
    if kind == FieldKind.GROUP:
        raise NotImplementedError("group fields cannot carry a default value")
    parser = _PARSERS.get(kind)
    if parser is not None:
        return parser(value)
    return _parse_integer(value, kind)


def unescape_bytes(value: str) -> bytes:
    """Decode the C-style escaping protoc applies to ``bytes`` defaults.

    Characters outside an escape sequence contribute their code point
    modulo 256.
    """
    out = bytearray()
    i = 0
    n = len(value)

    while i < n:
        ch = value[i]
        if ch != "\\" or i + 1 >= n:
            out.append(ord(ch) % 256)
            i += 1
            continue

        nxt = value[i + 1]
        if nxt in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        elif nxt in _OCTAL_DIGITS:
            j = i + 1
            while j < n and j < i + 4 and value[j] in _OCTAL_DIGITS:
                j += 1
            out.append(int(value[i + 1:j], 8) % 256)
            i = j
        elif nxt in "xX" and i + 2 < n and value[i + 2] in _HEX_DIGITS:
            j = i + 2
            while j < n and j < i + 4 and value[j] in _HEX_DIGITS:
                j += 1
            out.append(int(value[i + 2:j], 16))
            i = j
        else:
            # Unknown escape: keep the backslash and let the next pass
            # handle the following character literally.
            out.append(ord(ch))
            i += 1

    return bytes(out)


def _parse_bool(value: str) -> Value:
    if value == "true":
        return Value(ValueKind.BOOL, True)
    if value == "false":
        return Value(ValueKind.BOOL, False)
    raise BadDefaultValue(value)


def _parse_float(value: str) -> float:
    if value in _SPECIAL_FLOATS:
        return _SPECIAL_FLOATS[value]
    # float() also takes underscores, whitespace and non-ASCII digits
    if not _FLOAT_RE.fullmatch(value):
        raise BadDefaultValue(value)
    try:
        return float(value)
    except ValueError:
        raise BadDefaultValue(value) from None


def _parse_double(value: str) -> Value:
    return Value(ValueKind.F64, _parse_float(value))


def _parse_single(value: str) -> Value:
    parsed = _parse_float(value)
    try:
        rounded = struct.unpack("<f", struct.pack("<f", parsed))[0]
    except OverflowError:
        rounded = math.copysign(math.inf, parsed)
    return Value(ValueKind.F32, rounded)


def _parse_integer(value: str, kind: FieldKind) -> Value:
    pattern, low, high, value_kind = _INTEGER_RANGES[kind]
    if not pattern.fullmatch(value):
        raise BadDefaultValue(value)
    parsed = int(value)
    if not low <= parsed <= high:
        raise BadDefaultValue(value)
    return Value(value_kind, parsed)


def _parse_string(value: str) -> Value:
    return Value(ValueKind.STRING, value)


def _parse_bytes(value: str) -> Value:
    return Value(ValueKind.BYTES, unescape_bytes(value))


_PARSERS: Dict[FieldKind, Callable[[str], Value]] = {
    FieldKind.BOOL: _parse_bool,
    FieldKind.DOUBLE: _parse_double,
    FieldKind.FLOAT: _parse_single,
    FieldKind.STRING: _parse_string,
    FieldKind.BYTES: _parse_bytes,
}
