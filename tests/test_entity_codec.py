"""Tests for entity decoding and encoding."""

import pytest
from export_reader.entity import EntityDecoder, EntityEncoder
from export_reader.entity.schema import EntityProto
from export_reader.models import DecodedEntity, KeyPath, PathElement, Property
from export_reader.types import EntityDecodeError, ErrorType, Meaning


class TestEntityDecoder:
    """Tests for EntityDecoder class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.decoder = EntityDecoder()
        self.encoder = EntityEncoder()

    def test_decode_encoded_entity(self, sample_entity):
        """Test that an encoded entity decodes to an equal model."""
        decoded = self.decoder.decode(self.encoder.encode(sample_entity))

        assert decoded == sample_entity

    def test_decode_key_path(self, sample_entity):
        """Test key path elements and derived names."""
        decoded = self.decoder.decode(self.encoder.encode(sample_entity))

        assert decoded.key.elements == [
            PathElement(type="Users", name="alice"),
            PathElement(type="Posts", name="42"),
        ]
        assert decoded.key.collection == "Users/alice/Posts"
        assert decoded.key.document_id == "42"

    def test_decode_numeric_id(self):
        """Test an element identified by a numeric id."""
        entity = DecodedEntity(key=KeyPath.from_pairs(("Users", 7)), properties=[])
        decoded = self.decoder.decode(self.encoder.encode(entity))

        element = decoded.key.elements[0]
        assert element.id == 7
        assert element.name is None
        assert decoded.key.document_id == "7"

    def test_decode_preserves_property_order(self):
        """Test that properties keep record order and are never sorted."""
        entity = DecodedEntity(
            key=KeyPath.from_pairs(("Users", "alice")),
            properties=[Property.of("z", 1), Property.of("a", 2), Property.of("m", 3)]
        )
        decoded = self.decoder.decode(self.encoder.encode(entity))

        assert decoded.property_names() == ["z", "a", "m"]

    def test_indexed_properties_precede_raw_properties(self):
        """Test that indexed properties come before unindexed ones."""
        message = EntityProto()
        message.key.path.element.add(type="Users", name="alice")
        message.raw_property.add(name="raw", multiple=False).value.int64Value = 2
        message.property.add(name="indexed", multiple=False).value.int64Value = 1

        decoded = self.decoder.decode(message.SerializeToString())

        assert decoded.property_names() == ["indexed", "raw"]
        assert decoded.properties[0].value.int64_value == 1

    def test_decode_value_variants(self):
        """Test that each value variant is decoded and others stay absent."""
        entity = DecodedEntity(
            key=KeyPath.from_pairs(("Users", "alice")),
            properties=[
                Property.of("count", -5),
                Property.of("active", False),
                Property.of("name", "Alice"),
                Property.of("ratio", 0.25),
                Property.of("nothing", None),
            ]
        )
        decoded = self.decoder.decode(self.encoder.encode(entity))
        values = [prop.value for prop in decoded.properties]

        assert values[0].int64_value == -5 and values[0].boolean_value is None
        assert values[1].boolean_value is False
        assert values[2].string_value == b"Alice"
        assert values[3].double_value == 0.25
        assert values[4].is_empty()

    def test_decode_meaning(self):
        """Test that known meanings map to Meaning members."""
        entity = DecodedEntity(
            key=KeyPath.from_pairs(("Users", "alice")),
            properties=[Property.of("created", 10, meaning=Meaning.GD_WHEN)]
        )
        decoded = self.decoder.decode(self.encoder.encode(entity))

        assert decoded.properties[0].meaning is Meaning.GD_WHEN
        assert decoded.properties[0].is_timestamp

    def test_decode_unknown_meaning(self):
        """Test that unknown meanings are kept as plain integers."""
        entity = DecodedEntity(
            key=KeyPath.from_pairs(("Users", "alice")),
            properties=[Property.of("odd", 1, meaning=42)]
        )
        decoded = self.decoder.decode(self.encoder.encode(entity))

        assert decoded.properties[0].meaning == 42
        assert not isinstance(decoded.properties[0].meaning, Meaning)

    def test_decode_multiple_flag(self):
        """Test that the multiple flag survives decoding."""
        entity = DecodedEntity(
            key=KeyPath.from_pairs(("Users", "alice")),
            properties=[Property.of("tags", "a", multiple=True), Property.of("solo", "b")]
        )
        decoded = self.decoder.decode(self.encoder.encode(entity))

        assert [prop.multiple for prop in decoded.properties] == [True, False]

    def test_missing_key_path(self):
        """Test that a top-level record must carry a key path."""
        data = self.encoder.encode(DecodedEntity(key=None, properties=[Property.of("a", 1)]))

        with pytest.raises(EntityDecodeError, match="no key path") as exc_info:
            self.decoder.decode(data)
        assert exc_info.value.error_type == ErrorType.DECODE

    def test_nested_entity_without_key(self):
        """Test that nested entities may omit the key path."""
        data = self.encoder.encode(DecodedEntity(key=None, properties=[Property.of("a", 1)]))
        decoded = self.decoder.decode(data, require_key=False)

        assert decoded.key is None
        assert decoded.property_names() == ["a"]

    def test_malformed_bytes(self):
        """Test that truncated bytes raise EntityDecodeError."""
        # Field 13 (key) announces 5 bytes but only 2 follow.
        with pytest.raises(EntityDecodeError, match="Malformed entity record"):
            self.decoder.decode(b"\x6a\x05ab")

    def test_element_without_type(self):
        """Test that every key path element needs a type."""
        message = EntityProto()
        message.key.path.element.add(name="alice")

        with pytest.raises(EntityDecodeError, match="element 0 has no type"):
            self.decoder.decode(message.SerializeToString())

    def test_property_without_name(self):
        """Test that every property needs a name."""
        message = EntityProto()
        message.key.path.element.add(type="Users", name="alice")
        message.raw_property.add(multiple=False).value.int64Value = 1

        with pytest.raises(EntityDecodeError, match="has no name"):
            self.decoder.decode(message.SerializeToString())


class TestEntityEncoder:
    """Tests for EntityEncoder class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.encoder = EntityEncoder()

    def test_encode_writes_raw_properties(self):
        """Test that properties are stored as unindexed properties."""
        entity = DecodedEntity(
            key=KeyPath.from_pairs(("Users", "alice")),
            properties=[Property.of("name", "Alice")]
        )
        message = EntityProto()
        message.ParseFromString(self.encoder.encode(entity))

        assert len(message.property) == 0
        assert len(message.raw_property) == 1
        assert message.raw_property[0].value.stringValue == b"Alice"

    def test_encode_nested(self):
        """Test wrapping an entity as an embedded-entity property."""
        inner = DecodedEntity(key=None, properties=[Property.of("city", "Berlin")])
        prop = self.encoder.encode_nested("address", inner, multiple=True)

        assert prop.is_entity
        assert prop.multiple
        assert EntityDecoder().decode(prop.value.string_value, require_key=False) == inner
