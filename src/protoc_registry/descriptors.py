"""Descriptors for message types, enum types and their members.

The descriptors are laid out for read performance: every member is stored
once in declaration order and indexed by both name and number, so a parser
walking wire data can go from a field tag to its descriptor with a single
dict lookup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from google.protobuf import descriptor_pb2 as d2

from protoc_registry.defaults import BadDefaultValue, parse_default_value
from protoc_registry.field_types import FieldKind, FieldLabel, InternalFieldType
from protoc_registry.values import Value

if TYPE_CHECKING:
    from protoc_registry.registry import DescriptorRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldType:
    """Read-only view of a field's type, with references followed.

    ``message``/``enum`` are set for resolved references, ``type_name`` for
    references the registry could not find. Scalar kinds carry nothing.
    """

    kind: FieldKind
    message: Optional[MessageDescriptor] = None
    enum: Optional[EnumDescriptor] = None
    type_name: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.kind not in (FieldKind.UNRESOLVED_MESSAGE, FieldKind.UNRESOLVED_ENUM)

    def describe(self) -> str:
        if self.message is not None:
            return self.message.name
        if self.enum is not None:
            return self.enum.name
        if self.type_name is not None:
            return f"unresolved {self.type_name}"
        return self.kind.name.lower()


@dataclass
class EnumValueDescriptor:
    name: str
    number: int

    @classmethod
    def from_proto(cls, proto: d2.EnumValueDescriptorProto) -> EnumValueDescriptor:
        return cls(name=proto.name, number=proto.number)


@dataclass(eq=False)
class EnumDescriptor:
    """A single enum type, keyed by its fully-qualified name."""

    name: str
    _values: List[EnumValueDescriptor] = field(default_factory=list, repr=False)
    _values_by_name: Dict[str, int] = field(default_factory=dict, repr=False)
    _values_by_number: Dict[int, int] = field(default_factory=dict, repr=False)

    @classmethod
    def from_proto(cls, path: str, proto: d2.EnumDescriptorProto) -> EnumDescriptor:
        """Build an enum declared under ``path`` (a package or message name)."""
        enum_descriptor = cls(f"{path}.{proto.name}")
        for value_proto in proto.value:
            enum_descriptor.add_value(EnumValueDescriptor.from_proto(value_proto))
        return enum_descriptor

    def add_value(self, descriptor: EnumValueDescriptor) -> None:
        """Append a value; a repeated name or number re-points the index."""
        index = len(self._values)
        self._values.append(descriptor)
        self._values_by_name[descriptor.name] = index
        self._values_by_number[descriptor.number] = index

    def values(self) -> Tuple[EnumValueDescriptor, ...]:
        return tuple(self._values)

    def value_by_name(self, name: str) -> Optional[EnumValueDescriptor]:
        index = self._values_by_name.get(name)
        return None if index is None else self._values[index]

    def value_by_number(self, number: int) -> Optional[EnumValueDescriptor]:
        index = self._values_by_number.get(number)
        return None if index is None else self._values[index]


@dataclass(eq=False)
class FieldDescriptor:
    """A single message field.

    ``optional`` records explicit presence: it is set for fields labelled
    optional and for proto3 fields declared with the ``optional`` keyword.
    """

    name: str
    number: int
    field_label: FieldLabel
    internal_type: InternalFieldType
    default_value: Optional[Value] = None
    optional: bool = False

    @classmethod
    def from_proto(cls, proto: d2.FieldDescriptorProto) -> FieldDescriptor:
        field_label = FieldLabel.from_proto(proto.label)
        internal_type = InternalFieldType.from_proto(proto.type, proto.type_name)

        default_value = None
        if proto.HasField("default_value"):
            try:
                default_value = parse_default_value(proto.default_value, internal_type)
            except BadDefaultValue as e:
                logger.debug("Discarding default for field %s: %s", proto.name, e)

        optional = proto.proto3_optional or field_label == FieldLabel.OPTIONAL
        return cls(
            name=proto.name,
            number=proto.number,
            field_label=field_label,
            internal_type=internal_type,
            default_value=default_value,
            optional=optional,
        )

    def is_repeated(self) -> bool:
        return self.field_label.is_repeated()

    def is_optional(self) -> bool:
        return self.optional

    def field_type(self, registry: DescriptorRegistry) -> FieldType:
        """Return the field's type with references looked up in ``registry``.

        Unresolved references are retried against the registry on every
        call, so a field reads as resolved once its target is registered
        even if ``resolve_refs`` never ran.
        """
        stored = self.internal_type
        kind = stored.kind
        if kind == FieldKind.UNRESOLVED_MESSAGE:
            message = registry.message_by_name(stored.type_name)
            if message is not None:
                return FieldType(FieldKind.MESSAGE, message=message)
            return FieldType(kind, type_name=stored.type_name)
        if kind == FieldKind.UNRESOLVED_ENUM:
            enum = registry.enum_by_name(stored.type_name)
            if enum is not None:
                return FieldType(FieldKind.ENUM, enum=enum)
            return FieldType(kind, type_name=stored.type_name)
        if kind == FieldKind.MESSAGE:
            return FieldType(kind, message=registry.message_at(stored.handle))
        if kind == FieldKind.ENUM:
            return FieldType(kind, enum=registry.enum_at(stored.handle))
        return FieldType(kind)


@dataclass(eq=False)
class MessageDescriptor:
    """A single message type, keyed by its fully-qualified name."""

    name: str
    _fields: List[FieldDescriptor] = field(default_factory=list, repr=False)
    _fields_by_name: Dict[str, int] = field(default_factory=dict, repr=False)
    _fields_by_number: Dict[int, int] = field(default_factory=dict, repr=False)

    @classmethod
    def from_proto(cls, path: str, proto: d2.DescriptorProto) -> MessageDescriptor:
        """Build a message declared under ``path``, without its nested types."""
        message_descriptor = cls(f"{path}.{proto.name}")
        for field_proto in proto.field:
            message_descriptor.add_field(FieldDescriptor.from_proto(field_proto))
        return message_descriptor

    def add_field(self, descriptor: FieldDescriptor) -> None:
        index = len(self._fields)
        self._fields.append(descriptor)
        self._fields_by_name[descriptor.name] = index
        self._fields_by_number[descriptor.number] = index

    def fields(self) -> Tuple[FieldDescriptor, ...]:
        """The fields in declaration order."""
        return tuple(self._fields)

    def field_by_name(self, name: str) -> Optional[FieldDescriptor]:
        index = self._fields_by_name.get(name)
        return None if index is None else self._fields[index]

    def field_by_number(self, number: int) -> Optional[FieldDescriptor]:
        index = self._fields_by_number.get(number)
        return None if index is None else self._fields[index]
