"""Core type definitions for the export reader."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, BinaryIO, ContextManager, Dict, Iterator, List, Optional


class OutputPolicy(Enum):
    """JSON shape produced for each top-level record."""
    EXPORT = "export"
    BACKUP = "backup"


class ChunkType(IntEnum):
    """Physical chunk types of the block-framed journal format."""
    FULL = 1
    FIRST = 2
    MIDDLE = 3
    LAST = 4


class Meaning(IntEnum):
    """Semantic tags a datastore property can carry."""
    NO_MEANING = 0
    ATOM_CATEGORY = 1
    ATOM_LINK = 2
    ATOM_TITLE = 3
    ATOM_CONTENT = 4
    ATOM_SUMMARY = 5
    ATOM_AUTHOR = 6
    GD_WHEN = 7
    GD_EMAIL = 8
    GEORSS_POINT = 9
    GD_IM = 10
    GD_PHONENUMBER = 11
    GD_POSTALADDRESS = 12
    GD_RATING = 13
    BLOB = 14
    TEXT = 15
    BYTESTRING = 16
    BLOBKEY = 17
    INDEX_VALUE = 18
    ENTITY_PROTO = 19
    EMPTY_LIST = 24


class ErrorType(Enum):
    """Enumeration of error types."""
    USAGE = "usage"
    DISCOVERY = "discovery"
    IO = "io"
    FRAMING = "framing"
    DECODE = "decode"
    PROJECTION = "projection"
    INTERNAL = "internal"


@dataclass
class ValidationError:
    """Validation error details."""
    type: ErrorType
    message: str
    location: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of input validation."""
    is_valid: bool
    errors: List[ValidationError]
    warnings: List[str]


@dataclass
class ErrorResponse:
    """Response for error handling."""
    can_recover: bool
    suggested_action: str
    partial_results: Optional[Any] = None


class ProcessingError(Exception):
    """Custom exception for processing errors."""

    def __init__(self, message: str, error_type: ErrorType, context: Optional[Any] = None):
        super().__init__(message)
        self.error_type = error_type
        self.context = context


class FramingError(ProcessingError):
    """Corrupt chunk framing inside a shard."""

    def __init__(self, message: str, context: Optional[Any] = None):
        super().__init__(message, ErrorType.FRAMING, context)


class EntityDecodeError(ProcessingError):
    """Record bytes that do not form a well-formed entity."""

    def __init__(self, message: str, context: Optional[Any] = None):
        super().__init__(message, ErrorType.DECODE, context)


class ProjectionError(ProcessingError):
    """Entity that cannot be rendered as JSON."""

    def __init__(self, message: str, context: Optional[Any] = None):
        super().__init__(message, ErrorType.PROJECTION, context)


@dataclass
class ShardResult:
    """Outcome of converting a single shard object."""
    name: str
    records: int = 0
    bytes_read: int = 0
    bytes_written: int = 0
    error: Optional[ProcessingError] = None
    aborted: bool = False

    @property
    def success(self) -> bool:
        return self.error is None and not self.aborted


@dataclass
class ConversionReport:
    """Aggregated outcome of a conversion run."""
    source: str
    shards: List[ShardResult] = field(default_factory=list)
    discovered: int = 0
    skipped: int = 0

    @property
    def failures(self) -> List[ShardResult]:
        return [shard for shard in self.shards if shard.error is not None]

    @property
    def success(self) -> bool:
        return self.skipped == 0 and all(shard.success for shard in self.shards)

    @property
    def total_records(self) -> int:
        return sum(shard.records for shard in self.shards)

    @property
    def total_bytes_read(self) -> int:
        return sum(shard.bytes_read for shard in self.shards)

    @property
    def total_bytes_written(self) -> int:
        return sum(shard.bytes_written for shard in self.shards)

    def raise_for_failures(self) -> None:
        """Re-raise the first shard error, if any."""
        failures = self.failures
        if failures:
            raise failures[0].error

    def to_dict(self) -> Dict[str, Any]:
        """Summary suitable for logging."""
        return {
            "source": self.source,
            "discovered": self.discovered,
            "converted": sum(1 for s in self.shards if s.success),
            "failed": len(self.failures),
            "skipped": self.skipped,
            "records": self.total_records,
            "bytesRead": self.total_bytes_read,
            "bytesWritten": self.total_bytes_written,
        }


# Abstract base classes for interfaces

class ObjectStoreInterface(ABC):
    """Abstract interface for the object store holding export shards."""

    @abstractmethod
    def list_objects(self, bucket: str, prefix: str) -> Iterator[str]:
        """Yield the names of all objects in bucket starting with prefix."""
        pass

    @abstractmethod
    def open(self, bucket: str, name: str) -> ContextManager[BinaryIO]:
        """Open an object for reading; the stream is closed on exit."""
        pass


class EntityProjectorInterface(ABC):
    """Abstract interface for entity-to-JSON projectors."""

    @abstractmethod
    def render_record(self, record: bytes) -> str:
        """Decode one logical record and render it as a JSON line."""
        pass
