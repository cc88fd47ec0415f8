"""Shared machinery for rendering decoded entities as JSON lines."""

import io
import json
import logging
from abc import abstractmethod
from typing import Any, List, Optional, TextIO

from ..config import DEFAULT_MAX_NESTING_DEPTH
from ..entity import EntityDecoder
from ..models import DecodedEntity, KeyPath, Property
from ..types import EntityDecodeError, EntityProjectorInterface, OutputPolicy, ProjectionError


class BaseProjector(EntityProjectorInterface):
    """
    Base class for entity projectors.

    A record is rendered into an in-memory buffer and returned as a single
    string ending in a newline, so callers can write each line in one write.
    Subclasses define the top-level envelope and the property object.
    """

    policy: OutputPolicy

    def __init__(self, decoder: Optional[EntityDecoder] = None,
                 max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the projector.

        Args:
            decoder: Optional EntityDecoder used for records and nested entities
            max_nesting_depth: Maximum depth of embedded entities
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.decoder = decoder or EntityDecoder(self.logger)
        self.max_nesting_depth = max_nesting_depth

    def render_record(self, record: bytes) -> str:
        """
        Decode one logical record and render it as a JSON line.

        Args:
            record: Serialized top-level entity

        Returns:
            JSON document followed by a newline

        Raises:
            EntityDecodeError: If the record is not a well-formed entity
            ProjectionError: If the entity cannot be rendered
        """
        return self.render_entity(self.decoder.decode(record))

    def render_entity(self, entity: DecodedEntity) -> str:
        """Render an already decoded top-level entity as a JSON line."""
        if entity.key is None:
            raise EntityDecodeError("Entity record has no key path")

        out = io.StringIO()
        self._write_document(out, entity.key, entity.properties)
        out.write("\n")
        return out.getvalue()

    @abstractmethod
    def _write_document(self, out: TextIO, key: KeyPath, properties: List[Property]) -> None:
        """Write the top-level envelope for one record."""
        pass

    @abstractmethod
    def _write_properties(self, out: TextIO, properties: List[Property], depth: int) -> None:
        """Write a property list as a JSON object."""
        pass

    def _write_nested(self, out: TextIO, prop: Property, depth: int) -> None:
        """Decode an embedded entity and write its property object."""
        if depth >= self.max_nesting_depth:
            raise ProjectionError(
                f"Embedded entity in property '{prop.name}' exceeds maximum nesting depth "
                f"{self.max_nesting_depth}",
                context={"property": prop.name, "depth": depth},
            )

        nested = self.decoder.decode(prop.value.string_value or b"", require_key=False)
        self._write_properties(out, nested.properties, depth + 1)

    def _dump(self, value: Any) -> str:
        """Encode a scalar as compact JSON."""
        try:
            return json.dumps(value, ensure_ascii=False, allow_nan=False)
        except ValueError as e:
            raise ProjectionError(f"Value {value!r} cannot be represented in JSON: {e}",
                                  context={"value": repr(value)}) from e
