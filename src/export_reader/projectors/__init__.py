"""Entity projectors for the supported JSON shapes."""

import logging
from typing import Optional

from ..config import ConverterConfig
from ..entity import EntityDecoder
from ..types import OutputPolicy
from .backup_projector import BackupProjector
from .base import BaseProjector
from .export_projector import ExportProjector


def create_projector(config: ConverterConfig, decoder: Optional[EntityDecoder] = None,
                     logger: Optional[logging.Logger] = None) -> BaseProjector:
    """
    Create the projector selected by the run configuration.

    Args:
        config: Run configuration
        decoder: Optional EntityDecoder shared with the caller
        logger: Optional logger instance

    Returns:
        ExportProjector or BackupProjector
    """
    if config.policy == OutputPolicy.BACKUP:
        return BackupProjector(decoder, config.max_nesting_depth, logger)
    return ExportProjector(decoder, config.max_nesting_depth, config.strict_multiple, logger)


__all__ = ["BaseProjector", "ExportProjector", "BackupProjector", "create_projector"]
