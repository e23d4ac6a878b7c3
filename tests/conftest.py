"""Descriptor sets shared by the test modules.

The sets are assembled with descriptor_pb2 directly so the tests do not need
a protoc binary. They mirror the parts of protobuf's ``unittest.proto`` the
tests look at.
"""

from typing import Optional

import pytest
from google.protobuf import descriptor_pb2 as d2

from protoc_registry.registry import DescriptorRegistry

FDP = d2.FieldDescriptorProto

OPTIONAL = FDP.LABEL_OPTIONAL
REQUIRED = FDP.LABEL_REQUIRED
REPEATED = FDP.LABEL_REPEATED

# (suffix, type, number) for the optional_* / repeated_* scalar fields
SCALAR_FIELDS = [
    ("int32", FDP.TYPE_INT32, 1),
    ("int64", FDP.TYPE_INT64, 2),
    ("uint32", FDP.TYPE_UINT32, 3),
    ("uint64", FDP.TYPE_UINT64, 4),
    ("sint32", FDP.TYPE_SINT32, 5),
    ("sint64", FDP.TYPE_SINT64, 6),
    ("fixed32", FDP.TYPE_FIXED32, 7),
    ("fixed64", FDP.TYPE_FIXED64, 8),
    ("sfixed32", FDP.TYPE_SFIXED32, 9),
    ("sfixed64", FDP.TYPE_SFIXED64, 10),
    ("float", FDP.TYPE_FLOAT, 11),
    ("double", FDP.TYPE_DOUBLE, 12),
    ("bool", FDP.TYPE_BOOL, 13),
    ("string", FDP.TYPE_STRING, 14),
    ("bytes", FDP.TYPE_BYTES, 15),
]

# (suffix, type, number, default) for the default_* fields
DEFAULT_FIELDS = [
    ("int32", FDP.TYPE_INT32, 61, "41"),
    ("int64", FDP.TYPE_INT64, 62, "42"),
    ("uint32", FDP.TYPE_UINT32, 63, "43"),
    ("uint64", FDP.TYPE_UINT64, 64, "44"),
    ("sint32", FDP.TYPE_SINT32, 65, "-45"),
    ("sint64", FDP.TYPE_SINT64, 66, "46"),
    ("fixed32", FDP.TYPE_FIXED32, 67, "47"),
    ("fixed64", FDP.TYPE_FIXED64, 68, "48"),
    ("sfixed32", FDP.TYPE_SFIXED32, 69, "49"),
    ("sfixed64", FDP.TYPE_SFIXED64, 70, "-50"),
    ("float", FDP.TYPE_FLOAT, 71, "51.5"),
    ("double", FDP.TYPE_DOUBLE, 72, "52000"),
    ("bool", FDP.TYPE_BOOL, 73, "true"),
    ("string", FDP.TYPE_STRING, 74, "hello"),
    ("bytes", FDP.TYPE_BYTES, 75, "world"),
]


def add_field(
    message: d2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    label: int = OPTIONAL,
    type_name: Optional[str] = None,
    default: Optional[str] = None,
    proto3_optional: bool = False,
) -> d2.FieldDescriptorProto:
    f = message.field.add()
    f.name = name
    f.number = number
    f.type = field_type
    f.label = label
    if type_name is not None:
        f.type_name = type_name
    if default is not None:
        f.default_value = default
    if proto3_optional:
        f.proto3_optional = True
    return f


def add_enum(container, name: str, values) -> d2.EnumDescriptorProto:
    e = container.enum_type.add()
    e.name = name
    for value_name, number in values:
        v = e.value.add()
        v.name = value_name
        v.number = number
    return e


def build_unittest_file() -> d2.FileDescriptorProto:
    fp = d2.FileDescriptorProto()
    fp.name = "google/protobuf/unittest.proto"
    fp.package = "protobuf_unittest"
    fp.syntax = "proto2"

    all_types = fp.message_type.add()
    all_types.name = "TestAllTypes"

    nested = all_types.nested_type.add()
    nested.name = "NestedMessage"
    add_field(nested, "bb", 1, FDP.TYPE_INT32)

    group = all_types.nested_type.add()
    group.name = "OptionalGroup"
    add_field(group, "a", 17, FDP.TYPE_INT32)

    add_enum(all_types, "NestedEnum", [("FOO", 1), ("BAR", 2), ("BAZ", 3), ("NEG", -1)])

    for suffix, field_type, number in SCALAR_FIELDS:
        add_field(all_types, f"optional_{suffix}", number, field_type)
    add_field(
        all_types, "optionalgroup", 16, FDP.TYPE_GROUP,
        type_name=".protobuf_unittest.TestAllTypes.OptionalGroup",
    )
    add_field(
        all_types, "optional_nested_message", 18, FDP.TYPE_MESSAGE,
        type_name=".protobuf_unittest.TestAllTypes.NestedMessage",
    )
    add_field(
        all_types, "optional_foreign_message", 19, FDP.TYPE_MESSAGE,
        type_name=".protobuf_unittest.ForeignMessage",
    )
    add_field(
        all_types, "optional_nested_enum", 21, FDP.TYPE_ENUM,
        type_name=".protobuf_unittest.TestAllTypes.NestedEnum",
    )
    for suffix, field_type, number in SCALAR_FIELDS:
        add_field(all_types, f"repeated_{suffix}", number + 30, field_type, label=REPEATED)
    add_field(
        all_types, "repeated_foreign_message", 49, FDP.TYPE_MESSAGE, label=REPEATED,
        type_name=".protobuf_unittest.ForeignMessage",
    )
    add_field(
        all_types, "repeated_foreign_enum", 52, FDP.TYPE_ENUM, label=REPEATED,
        type_name=".protobuf_unittest.ForeignEnum",
    )
    for suffix, field_type, number, default in DEFAULT_FIELDS:
        add_field(all_types, f"default_{suffix}", number, field_type, default=default)
    add_field(
        all_types, "default_nested_enum", 81, FDP.TYPE_ENUM,
        type_name=".protobuf_unittest.TestAllTypes.NestedEnum", default="BAR",
    )

    foreign = fp.message_type.add()
    foreign.name = "ForeignMessage"
    add_field(foreign, "c", 1, FDP.TYPE_INT32)
    add_field(foreign, "d", 2, FDP.TYPE_INT32)

    required = fp.message_type.add()
    required.name = "TestRequired"
    add_field(required, "a", 1, FDP.TYPE_INT32, label=REQUIRED)
    add_field(required, "dummy2", 2, FDP.TYPE_INT32)
    add_field(required, "b", 3, FDP.TYPE_INT32, label=REQUIRED)

    add_enum(fp, "ForeignEnum", [("FOREIGN_FOO", 4), ("FOREIGN_BAR", 5), ("FOREIGN_BAZ", 6)])
    return fp


def build_forward_files():
    """Two proto3 files where the first refers to a type only the second defines."""
    holder_file = d2.FileDescriptorProto()
    holder_file.name = "fwd/holder.proto"
    holder_file.package = "fwd"
    holder_file.syntax = "proto3"
    holder = holder_file.message_type.add()
    holder.name = "Holder"
    add_field(holder, "target", 1, FDP.TYPE_MESSAGE, type_name=".fwd.Target")
    add_field(holder, "kind", 2, FDP.TYPE_ENUM, type_name=".fwd.Kind")
    add_field(holder, "note", 3, FDP.TYPE_STRING, proto3_optional=True)

    target_file = d2.FileDescriptorProto()
    target_file.name = "fwd/target.proto"
    target_file.package = "fwd"
    target_file.syntax = "proto3"
    target = target_file.message_type.add()
    target.name = "Target"
    add_field(target, "id", 1, FDP.TYPE_INT64)
    add_field(target, "children", 2, FDP.TYPE_MESSAGE, label=REPEATED, type_name=".fwd.Target")
    add_enum(target_file, "Kind", [("KIND_UNSPECIFIED", 0), ("KIND_LEAF", 1)])

    return holder_file, target_file


def build_unittest_set() -> d2.FileDescriptorSet:
    fds = d2.FileDescriptorSet()
    fds.file.append(build_unittest_file())
    return fds


@pytest.fixture
def unittest_set() -> d2.FileDescriptorSet:
    return build_unittest_set()


@pytest.fixture
def registry(unittest_set) -> DescriptorRegistry:
    return DescriptorRegistry.from_proto(unittest_set)


@pytest.fixture
def resolved_registry(registry) -> DescriptorRegistry:
    registry.resolve_refs()
    return registry
