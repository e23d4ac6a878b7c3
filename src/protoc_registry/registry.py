"""Registry of message and enum descriptors keyed by fully-qualified name.

The registry is built in two phases. Descriptors are first imported (from a
decoded ``FileDescriptorSet`` or added by hand) with every message and enum
reference kept as a name. Once all definitions are present,
``resolve_refs`` rewrites those names into handles so that following a
reference is a list index instead of a dict lookup. After that the
registry is only read, and may be shared between threads.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from google.protobuf import descriptor_pb2 as d2

from protoc_registry.descriptors import EnumDescriptor, MessageDescriptor
from protoc_registry.field_types import EnumId, FieldKind, InternalFieldType, MessageId

logger = logging.getLogger(__name__)


class DescriptorRegistry:
    """Owns every message and enum descriptor of a schema."""

    def __init__(self):
        self._messages: List[MessageDescriptor] = []
        self._enums: List[EnumDescriptor] = []
        self._messages_by_name: Dict[str, MessageId] = {}
        self._enums_by_name: Dict[str, EnumId] = {}

    @classmethod
    def from_proto(cls, file_set: d2.FileDescriptorSet) -> DescriptorRegistry:
        registry = cls()
        registry.add_file_set_proto(file_set)
        return registry

    def __len__(self) -> int:
        return len(self._messages) + len(self._enums)

    # -- lookups --

    def message_by_name(self, name: str) -> Optional[MessageDescriptor]:
        """Look up a message by its fully-qualified name, e.g. ``.pkg.Msg``."""
        message_id = self._messages_by_name.get(name)
        return None if message_id is None else self._messages[message_id.index]

    def enum_by_name(self, name: str) -> Optional[EnumDescriptor]:
        """Look up an enum by its fully-qualified name, e.g. ``.pkg.Enum``."""
        enum_id = self._enums_by_name.get(name)
        return None if enum_id is None else self._enums[enum_id.index]

    def message_at(self, handle: MessageId) -> MessageDescriptor:
        return self._messages[handle.index]

    def enum_at(self, handle: EnumId) -> EnumDescriptor:
        return self._enums[handle.index]

    def messages(self) -> Iterator[MessageDescriptor]:
        """Registered messages in insertion order."""
        return iter(self._messages)

    def enums(self) -> Iterator[EnumDescriptor]:
        """Registered enums in insertion order."""
        return iter(self._enums)

    # -- construction --

    def add_message(self, descriptor: MessageDescriptor) -> MessageId:
        message_id = MessageId(len(self._messages))
        self._messages.append(descriptor)
        self._messages_by_name[descriptor.name] = message_id
        return message_id

    def add_enum(self, descriptor: EnumDescriptor) -> EnumId:
        enum_id = EnumId(len(self._enums))
        self._enums.append(descriptor)
        self._enums_by_name[descriptor.name] = enum_id
        return enum_id

    def add_file_set_proto(self, file_set: d2.FileDescriptorSet) -> None:
        for file_proto in file_set.file:
            self.add_file_proto(file_proto)

    def add_file_proto(self, file_proto: d2.FileDescriptorProto) -> None:
        """Add every type declared in one file, nested types included."""
        path = f".{file_proto.package}" if file_proto.HasField("package") else ""

        for message_proto in file_proto.message_type:
            self.add_message_proto(path, message_proto)
        for enum_proto in file_proto.enum_type:
            self.add_enum(EnumDescriptor.from_proto(path, enum_proto))

        logger.debug(
            "Imported %s: %d message(s), %d enum(s)",
            file_proto.name, len(file_proto.message_type), len(file_proto.enum_type),
        )

    def add_message_proto(self, path: str, message_proto: d2.DescriptorProto) -> None:
        """Add a message and, recursively, the types declared inside it.

        Nested types are registered at the top level under their full dotted
        name, e.g. ``.pkg.Outer.Inner``.
        """
        message_descriptor = MessageDescriptor.from_proto(path, message_proto)

        for nested_proto in message_proto.nested_type:
            self.add_message_proto(message_descriptor.name, nested_proto)
        for nested_enum_proto in message_proto.enum_type:
            self.add_enum(EnumDescriptor.from_proto(message_descriptor.name, nested_enum_proto))

        self.add_message(message_descriptor)

    # -- resolution --

    def resolve_refs(self) -> None:
        """Rewrite message and enum references by name into handles.

        References to types that are not registered stay unresolved and are
        reported as warnings. Safe to call again after adding more types.
        """
        for message in self._messages:
            for field_descriptor in message.fields():
                stored = field_descriptor.internal_type
                if stored.kind == FieldKind.UNRESOLVED_MESSAGE:
                    message_id = self._messages_by_name.get(stored.type_name)
                    if message_id is None:
                        logger.warning("Inconsistent schema; unknown message type %s", stored.type_name)
                        continue
                    field_descriptor.internal_type = InternalFieldType.message(message_id)
                elif stored.kind == FieldKind.UNRESOLVED_ENUM:
                    enum_id = self._enums_by_name.get(stored.type_name)
                    if enum_id is None:
                        logger.warning("Inconsistent schema; unknown enum type %s", stored.type_name)
                        continue
                    field_descriptor.internal_type = InternalFieldType.enum(enum_id)

    def unresolved_references(self) -> List[Tuple[str, str, str]]:
        """List ``(message, field, type_name)`` for every dangling reference."""
        dangling: List[Tuple[str, str, str]] = []
        for message in self._messages:
            for field_descriptor in message.fields():
                view = field_descriptor.field_type(self)
                if not view.is_resolved:
                    dangling.append((message.name, field_descriptor.name, view.type_name))
        return dangling
