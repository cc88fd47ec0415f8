"""
Export Reader - Convert document-database export shards to NDJSON.

Reads the block-framed entity records of a bulk export and writes one
JSON document per record.
"""

__version__ = "1.0.0"

from .config import ConverterConfig
from .converter import ExportConverter
from .journal import JournalReader, JournalWriter
from .entity import EntityDecoder, EntityEncoder
from .models import DecodedEntity, KeyPath, PathElement, Property, PropertyValue
from .projectors import BackupProjector, ExportProjector, create_projector
from .types import ConversionReport, OutputPolicy, ProcessingError, ShardResult

__all__ = [
    "ConverterConfig",
    "ExportConverter",
    "JournalReader",
    "JournalWriter",
    "EntityDecoder",
    "EntityEncoder",
    "DecodedEntity",
    "KeyPath",
    "PathElement",
    "Property",
    "PropertyValue",
    "BackupProjector",
    "ExportProjector",
    "create_projector",
    "ConversionReport",
    "OutputPolicy",
    "ProcessingError",
    "ShardResult",
]
