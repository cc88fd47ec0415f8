"""Object store and output I/O for the export reader."""

from .object_store import GCSObjectStore, LocalObjectStore
from .output_sink import OutputSink

__all__ = ["GCSObjectStore", "LocalObjectStore", "OutputSink"]
