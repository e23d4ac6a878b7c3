"""Field labels and the internally stored field type."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Optional, Union

from google.protobuf import descriptor_pb2 as d2


class FieldLabel(Enum):
    """The cardinality a field is declared with."""

    OPTIONAL = auto()
    REQUIRED = auto()
    REPEATED = auto()

    @classmethod
    def from_proto(cls, label: int) -> FieldLabel:
        try:
            return _LABELS_FROM_PROTO[label]
        except KeyError:
            raise ValueError(f"Unknown field label {label}") from None

    def is_repeated(self) -> bool:
        return self is FieldLabel.REPEATED


class FieldKind(Enum):
    """Every shape a field type can take.

    The first four members refer to other descriptors, the rest are scalar
    markers named after their ``.proto`` keyword.
    """

    UNRESOLVED_MESSAGE = auto()
    UNRESOLVED_ENUM = auto()
    MESSAGE = auto()
    ENUM = auto()
    DOUBLE = auto()
    FLOAT = auto()
    INT64 = auto()
    UINT64 = auto()
    INT32 = auto()
    FIXED64 = auto()
    FIXED32 = auto()
    BOOL = auto()
    STRING = auto()
    GROUP = auto()
    BYTES = auto()
    UINT32 = auto()
    SFIXED32 = auto()
    SFIXED64 = auto()
    SINT32 = auto()
    SINT64 = auto()

    @property
    def is_scalar(self) -> bool:
        return self not in _REFERENCE_KINDS


_REFERENCE_KINDS = frozenset({
    FieldKind.UNRESOLVED_MESSAGE,
    FieldKind.UNRESOLVED_ENUM,
    FieldKind.MESSAGE,
    FieldKind.ENUM,
})

_LABELS_FROM_PROTO: Dict[int, FieldLabel] = {
    d2.FieldDescriptorProto.LABEL_OPTIONAL: FieldLabel.OPTIONAL,
    d2.FieldDescriptorProto.LABEL_REQUIRED: FieldLabel.REQUIRED,
    d2.FieldDescriptorProto.LABEL_REPEATED: FieldLabel.REPEATED,
}

# TYPE_MESSAGE and TYPE_ENUM are handled separately since they carry a name.
_SCALARS_FROM_PROTO: Dict[int, FieldKind] = {
    d2.FieldDescriptorProto.TYPE_DOUBLE: FieldKind.DOUBLE,
    d2.FieldDescriptorProto.TYPE_FLOAT: FieldKind.FLOAT,
    d2.FieldDescriptorProto.TYPE_INT64: FieldKind.INT64,
    d2.FieldDescriptorProto.TYPE_UINT64: FieldKind.UINT64,
    d2.FieldDescriptorProto.TYPE_INT32: FieldKind.INT32,
    d2.FieldDescriptorProto.TYPE_FIXED64: FieldKind.FIXED64,
    d2.FieldDescriptorProto.TYPE_FIXED32: FieldKind.FIXED32,
    d2.FieldDescriptorProto.TYPE_BOOL: FieldKind.BOOL,
    d2.FieldDescriptorProto.TYPE_STRING: FieldKind.STRING,
    d2.FieldDescriptorProto.TYPE_GROUP: FieldKind.GROUP,
    d2.FieldDescriptorProto.TYPE_BYTES: FieldKind.BYTES,
    d2.FieldDescriptorProto.TYPE_UINT32: FieldKind.UINT32,
    d2.FieldDescriptorProto.TYPE_SFIXED32: FieldKind.SFIXED32,
    d2.FieldDescriptorProto.TYPE_SFIXED64: FieldKind.SFIXED64,
    d2.FieldDescriptorProto.TYPE_SINT32: FieldKind.SINT32,
    d2.FieldDescriptorProto.TYPE_SINT64: FieldKind.SINT64,
}


@dataclass(frozen=True)
class MessageId:
    """Handle of a message descriptor inside its registry.

    Only the registry hands these out; an index means nothing outside the
    registry that produced it.
    """

    index: int


@dataclass(frozen=True)
class EnumId:
    """Handle of an enum descriptor inside its registry."""

    index: int


@dataclass(frozen=True)
class InternalFieldType:
    """The field type as stored on a field descriptor.

    Reference kinds carry either the fully-qualified ``type_name`` of their
    target (unresolved) or a registry ``handle`` (resolved). Scalar kinds
    carry neither.
    """

    kind: FieldKind
    type_name: Optional[str] = None
    handle: Optional[Union[MessageId, EnumId]] = None

    @classmethod
    def scalar(cls, kind: FieldKind) -> InternalFieldType:
        if not kind.is_scalar:
            raise ValueError(f"{kind.name} is not a scalar field kind")
        return cls(kind)

    @classmethod
    def unresolved_message(cls, type_name: str) -> InternalFieldType:
        return cls(FieldKind.UNRESOLVED_MESSAGE, type_name=type_name)

    @classmethod
    def unresolved_enum(cls, type_name: str) -> InternalFieldType:
        return cls(FieldKind.UNRESOLVED_ENUM, type_name=type_name)

    @classmethod
    def message(cls, handle: MessageId) -> InternalFieldType:
        return cls(FieldKind.MESSAGE, handle=handle)

    @classmethod
    def enum(cls, handle: EnumId) -> InternalFieldType:
        return cls(FieldKind.ENUM, handle=handle)

    @classmethod
    def from_proto(cls, field_type: int, type_name: str) -> InternalFieldType:
        """Map a ``FieldDescriptorProto.Type`` number to a stored field type."""
        if field_type == d2.FieldDescriptorProto.TYPE_MESSAGE:
            return cls.unresolved_message(type_name)
        if field_type == d2.FieldDescriptorProto.TYPE_ENUM:
            return cls.unresolved_enum(type_name)
        try:
            return cls(_SCALARS_FROM_PROTO[field_type])
        except KeyError:
            raise ValueError(f"Unknown field type {field_type}") from None
