"""Protocol buffer schema of the exported entity records.

The export writes each document as a legacy datastore ``EntityProto``. The
message classes are built at import time from a descriptor declared here,
so no generated code is needed. Two fields differ from the legacy
declaration: ``stringValue`` is declared as bytes,
because it carries nested entities as raw protobuf, and ``meaning`` is
declared as int32, so unknown meanings are kept instead of dropped.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "storage_onestore_v3"

_Field = descriptor_pb2.FieldDescriptorProto


def _add_field(message: descriptor_pb2.DescriptorProto, name: str, number: int,
               field_type: int, label: int = _Field.LABEL_OPTIONAL,
               type_name: str = "") -> None:
    field = message.field.add()
    field.name = name
    field.number = number
    field.type = field_type
    field.label = label
    if type_name:
        field.type_name = f".{PACKAGE}.{type_name}"


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """
    Declare the entity messages.

    Every field is optional; presence rules are enforced by the decoder.

    Returns:
        FileDescriptorProto holding PropertyValue, Property, Path,
        Reference and EntityProto
    """
    proto = descriptor_pb2.FileDescriptorProto()
    proto.name = "export_reader/entity.proto"
    proto.package = PACKAGE
    proto.syntax = "proto2"

    value = proto.message_type.add(name="PropertyValue")
    _add_field(value, "int64Value", 1, _Field.TYPE_INT64)
    _add_field(value, "booleanValue", 2, _Field.TYPE_BOOL)
    _add_field(value, "stringValue", 3, _Field.TYPE_BYTES)
    _add_field(value, "doubleValue", 4, _Field.TYPE_DOUBLE)

    prop = proto.message_type.add(name="Property")
    _add_field(prop, "meaning", 1, _Field.TYPE_INT32)
    _add_field(prop, "meaning_uri", 2, _Field.TYPE_STRING)
    _add_field(prop, "name", 3, _Field.TYPE_STRING)
    _add_field(prop, "multiple", 4, _Field.TYPE_BOOL)
    _add_field(prop, "value", 5, _Field.TYPE_MESSAGE, type_name="PropertyValue")

    # Path elements are encoded as a proto2 group.
    path = proto.message_type.add(name="Path")
    element = path.nested_type.add(name="Element")
    _add_field(element, "type", 2, _Field.TYPE_STRING)
    _add_field(element, "id", 3, _Field.TYPE_INT64)
    _add_field(element, "name", 4, _Field.TYPE_STRING)
    _add_field(path, "element", 1, _Field.TYPE_GROUP, _Field.LABEL_REPEATED,
               type_name="Path.Element")

    reference = proto.message_type.add(name="Reference")
    _add_field(reference, "app", 13, _Field.TYPE_STRING)
    _add_field(reference, "path", 14, _Field.TYPE_MESSAGE, type_name="Path")
    _add_field(reference, "name_space", 20, _Field.TYPE_STRING)
    _add_field(reference, "database_id", 23, _Field.TYPE_STRING)

    entity = proto.message_type.add(name="EntityProto")
    _add_field(entity, "key", 13, _Field.TYPE_MESSAGE, type_name="Reference")
    _add_field(entity, "property", 14, _Field.TYPE_MESSAGE, _Field.LABEL_REPEATED,
               type_name="Property")
    _add_field(entity, "raw_property", 15, _Field.TYPE_MESSAGE, _Field.LABEL_REPEATED,
               type_name="Property")
    _add_field(entity, "entity_group", 16, _Field.TYPE_MESSAGE, type_name="Path")

    return proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(build_file_descriptor().SerializeToString())


EntityProto = message_factory.GetMessageClass(
    _pool.FindMessageTypeByName(f"{PACKAGE}.EntityProto"))
