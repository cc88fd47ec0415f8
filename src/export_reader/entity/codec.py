"""Conversion between entity record bytes and the DecodedEntity model."""

import logging
from typing import Iterable, List, Optional

from google.protobuf.message import DecodeError

from ..models import DecodedEntity, KeyPath, PathElement, Property, PropertyValue
from ..types import EntityDecodeError, Meaning
from .schema import EntityProto


class EntityDecoder:
    """
    Decoder interpreting one logical record as an entity.

    Wire parsing is delegated to protobuf; this class extracts the key path
    and the property list and checks the fields the projection relies on.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the entity decoder.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def decode(self, data: bytes, require_key: bool = True) -> DecodedEntity:
        """
        Decode entity bytes.

        Args:
            data: Serialized EntityProto
            require_key: Fail when the entity has no key path; nested
                entities are decoded with this off

        Returns:
            DecodedEntity with properties in record order

        Raises:
            EntityDecodeError: If the bytes are not a well-formed entity
        """
        message = EntityProto()
        try:
            message.ParseFromString(bytes(data))
        except DecodeError as e:
            raise EntityDecodeError(f"Malformed entity record: {e}",
                                    context={"size": len(data)}) from e

        key = self._decode_key(message, require_key)
        properties = self._decode_properties(message.property)
        properties.extend(self._decode_properties(message.raw_property))

        return DecodedEntity(key=key, properties=properties)

    def _decode_key(self, message, require_key: bool) -> Optional[KeyPath]:
        elements = message.key.path.element
        if not elements:
            if require_key:
                raise EntityDecodeError("Entity record has no key path")
            return None

        path = []
        for index, element in enumerate(elements):
            if not element.HasField("type"):
                raise EntityDecodeError(f"Key path element {index} has no type",
                                        context={"element": index})
            path.append(PathElement(
                type=element.type,
                name=element.name if element.HasField("name") else None,
                id=element.id if element.HasField("id") else None,
            ))
        return KeyPath(path)

    def _decode_properties(self, properties: Iterable) -> List[Property]:
        decoded = []
        for prop in properties:
            if not prop.HasField("name"):
                raise EntityDecodeError("Entity property has no name")

            value = prop.value
            decoded.append(Property(
                name=prop.name,
                value=PropertyValue(
                    int64_value=value.int64Value if value.HasField("int64Value") else None,
                    boolean_value=value.booleanValue if value.HasField("booleanValue") else None,
                    string_value=value.stringValue if value.HasField("stringValue") else None,
                    double_value=value.doubleValue if value.HasField("doubleValue") else None,
                ),
                multiple=prop.multiple,
                meaning=self._meaning(prop.meaning),
            ))
        return decoded

    @staticmethod
    def _meaning(raw: int) -> int:
        try:
            return Meaning(raw)
        except ValueError:
            return raw


class EntityEncoder:
    """Encoder writing DecodedEntity instances as EntityProto bytes."""

    def encode(self, entity: DecodedEntity) -> bytes:
        """
        Serialize an entity.

        Properties are written as raw (unindexed) properties, which is how
        exports store them.

        Args:
            entity: Entity to serialize

        Returns:
            Serialized EntityProto
        """
        message = EntityProto()

        if entity.key is not None:
            for element in entity.key.elements:
                item = message.key.path.element.add(type=element.type)
                if element.name is not None:
                    item.name = element.name
                if element.id is not None:
                    item.id = element.id

        for prop in entity.properties:
            item = message.raw_property.add(name=prop.name, multiple=prop.multiple)
            if prop.meaning:
                item.meaning = int(prop.meaning)

            item.value.SetInParent()
            if prop.value.int64_value is not None:
                item.value.int64Value = prop.value.int64_value
            if prop.value.boolean_value is not None:
                item.value.booleanValue = prop.value.boolean_value
            if prop.value.string_value is not None:
                item.value.stringValue = prop.value.string_value
            if prop.value.double_value is not None:
                item.value.doubleValue = prop.value.double_value

        return message.SerializeToString()

    def encode_nested(self, name: str, entity: DecodedEntity, multiple: bool = False) -> Property:
        """Wrap an entity as an embedded-entity property."""
        return Property(
            name=name,
            value=PropertyValue(string_value=self.encode(entity)),
            multiple=multiple,
            meaning=Meaning.ENTITY_PROTO,
        )
