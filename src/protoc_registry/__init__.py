"""Dynamic registry of protocol buffer message and enum descriptors."""

from protoc_registry.defaults import BadDefaultValue, parse_default_value
from protoc_registry.descriptors import (
    EnumDescriptor,
    EnumValueDescriptor,
    FieldDescriptor,
    FieldType,
    MessageDescriptor,
)
from protoc_registry.field_types import EnumId, FieldKind, FieldLabel, InternalFieldType, MessageId
from protoc_registry.registry import DescriptorRegistry
from protoc_registry.values import Value, ValueKind

__all__ = [
    "BadDefaultValue",
    "DescriptorRegistry",
    "EnumDescriptor",
    "EnumId",
    "EnumValueDescriptor",
    "FieldDescriptor",
    "FieldKind",
    "FieldLabel",
    "FieldType",
    "InternalFieldType",
    "MessageDescriptor",
    "MessageId",
    "Value",
    "ValueKind",
    "parse_default_value",
]
