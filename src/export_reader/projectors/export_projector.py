"""Projector for the export shape: collection, id and data."""

import logging
import math
from typing import List, Optional, Set, TextIO

from ..config import DEFAULT_MAX_NESTING_DEPTH
from ..entity import EntityDecoder
from ..models import KeyPath, Property
from ..types import OutputPolicy, ProjectionError
from .base import BaseProjector

MICROSECONDS_PER_SECOND = 1_000_000


class ExportProjector(BaseProjector):
    """
    Projector rendering ``{"collection": ..., "id": ..., "data": {...}}``.

    Consecutive properties that share a name and are flagged multiple are
    rendered as one JSON array. The array is closed as soon as a property
    with a different name follows. Values are coerced by meaning: embedded
    entities recurse, timestamps are converted from microseconds to whole
    seconds, NaN doubles become null.
    """

    policy = OutputPolicy.EXPORT

    def __init__(self, decoder: Optional[EntityDecoder] = None,
                 max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH,
                 strict_multiple: bool = False,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the export projector.

        Args:
            decoder: Optional EntityDecoder instance
            max_nesting_depth: Maximum depth of embedded entities
            strict_multiple: Raise ProjectionError when a multi-valued
                property reappears after its array was closed
            logger: Optional logger instance
        """
        super().__init__(decoder, max_nesting_depth, logger)
        self.strict_multiple = strict_multiple

    def _write_document(self, out: TextIO, key: KeyPath, properties: List[Property]) -> None:
        out.write('{"collection":')
        out.write(self._dump(key.collection))
        out.write(',"id":')
        out.write(self._dump(key.document_id))
        out.write(',"data":')
        self._write_properties(out, properties, 0)
        out.write("}")

    def _write_properties(self, out: TextIO, properties: List[Property], depth: int) -> None:
        out.write("{")
        current_multiple: Optional[str] = None
        closed: Set[str] = set()

        for index, prop in enumerate(properties):
            if current_multiple is not None and prop.name != current_multiple:
                out.write("]")
                closed.add(current_multiple)
                current_multiple = None

            if index > 0:
                out.write(",")

            if current_multiple is None:
                out.write(self._dump(prop.name))
                out.write(":")

            if prop.multiple and prop.name != current_multiple:
                if prop.name in closed:
                    self._split_multiple(prop.name)
                out.write("[")
                current_multiple = prop.name

            self._write_value(out, prop, depth)

        if current_multiple is not None:
            out.write("]")
        out.write("}")

    def _write_value(self, out: TextIO, prop: Property, depth: int) -> None:
        value = prop.value

        if prop.is_entity:
            self._write_nested(out, prop, depth)
        elif prop.is_timestamp:
            out.write(self._dump(self._seconds(value.int64_value or 0)))
        elif value.int64_value is not None:
            out.write(self._dump(value.int64_value))
        elif value.boolean_value is not None:
            out.write(self._dump(value.boolean_value))
        elif value.string_value is not None:
            out.write(self._dump(value.text()))
        elif value.double_value is not None:
            if math.isnan(value.double_value):
                out.write("null")
            else:
                out.write(self._dump(value.double_value))
        else:
            out.write("null")

    @staticmethod
    def _seconds(microseconds: int) -> int:
        """Whole seconds, truncated toward zero."""
        seconds = abs(microseconds) // MICROSECONDS_PER_SECOND
        return -seconds if microseconds < 0 else seconds

    def _split_multiple(self, name: str) -> None:
        message = (f"Multi-valued property '{name}' is not contiguous; "
                   f"it is rendered as more than one array under the same key")
        if self.strict_multiple:
            raise ProjectionError(message, context={"property": name})
        self.logger.warning(message)
