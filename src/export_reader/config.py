"""Run configuration for the export reader."""

from dataclasses import dataclass
from typing import Union
from .types import OutputPolicy

DEFAULT_WORKERS = 10
DEFAULT_MAX_NESTING_DEPTH = 100
DEFAULT_SHARD_MARKER = "output-"


@dataclass
class ConverterConfig:
    """
    Settings for one conversion run.

    Attributes:
        workers: Number of shard workers draining the discovery queue
        policy: JSON shape produced for each record
        strict_framing: Abort a shard on the first framing error instead of
            dropping the corrupt block and resynchronising
        verify_checksums: Check the CRC of every chunk
        fail_fast: Halt the whole run on the first failing shard
        strict_multiple: Treat a non-contiguous multi-valued property as an
            error instead of a warning
        max_nesting_depth: Maximum depth of embedded entities
        shard_marker: Object name prefix of shard files below the source path
        enable_profiling: Collect and log performance metrics
    """

    workers: int = DEFAULT_WORKERS
    policy: Union[OutputPolicy, str] = OutputPolicy.EXPORT
    strict_framing: bool = True
    verify_checksums: bool = True
    fail_fast: bool = True
    strict_multiple: bool = False
    max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH
    shard_marker: str = DEFAULT_SHARD_MARKER
    enable_profiling: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.policy, str):
            self.policy = OutputPolicy(self.policy)
        self._validate()

    def _validate(self) -> None:
        if self.workers < 1:
            raise ValueError("workers must be at least 1")

        if self.max_nesting_depth < 1:
            raise ValueError("max_nesting_depth must be at least 1")

        if not self.shard_marker:
            raise ValueError("shard_marker cannot be empty")
