"""Projector for the legacy backup shape: key and value."""

from typing import List, TextIO

from ..models import KeyPath, Property
from ..types import OutputPolicy
from .base import BaseProjector


class BackupProjector(BaseProjector):
    """
    Projector rendering ``{"key": ..., "value": {...}}``.

    The legacy backup format stores a string representation of every scalar,
    so each property is written as its string value. Embedded entities still
    recurse. Repeated names are not grouped.
    """

    policy = OutputPolicy.BACKUP

    def _write_document(self, out: TextIO, key: KeyPath, properties: List[Property]) -> None:
        out.write('{"key":')
        out.write(self._dump(key.key))
        out.write(',"value":')
        self._write_properties(out, properties, 0)
        out.write("}")

    def _write_properties(self, out: TextIO, properties: List[Property], depth: int) -> None:
        out.write("{")
        for index, prop in enumerate(properties):
            if index > 0:
                out.write(",")
            out.write(self._dump(prop.name))
            out.write(":")
            if prop.is_entity:
                self._write_nested(out, prop, depth)
            else:
                out.write(self._dump(prop.value.text()))
        out.write("}")
