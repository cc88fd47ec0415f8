"""Error handling implementation for the export reader."""

import logging
from typing import Optional
from .types import (
    ConversionReport,
    ErrorResponse,
    ErrorType,
    ProcessingError,
    ValidationResult,
)
from .utils.validation import ValidationUtils


class ErrorHandler:
    """
    Error handler for conversion runs.

    Validates command-line inputs before any I/O happens and turns
    processing errors into diagnostics. Nothing is recovered here: every
    error still fails its shard and, by default, the run.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the error handler.

        Args:
            logger: Optional logger instance for error reporting
        """
        self.logger = logger or logging.getLogger(__name__)

    def validate_source_path(self, source_path: str) -> ValidationResult:
        """
        Validate the ``<bucket>/<path-prefix>`` source argument.

        Args:
            source_path: Source path to validate

        Returns:
            ValidationResult with validation details
        """
        result = ValidationUtils.validate_source_path(source_path)
        for warning in result.warnings:
            self.logger.warning(warning)
        return result

    def validate_worker_count(self, workers: int) -> ValidationResult:
        """
        Validate the number of shard workers.

        Args:
            workers: Worker count to validate

        Returns:
            ValidationResult with validation details
        """
        result = ValidationUtils.validate_worker_count(workers)
        for warning in result.warnings:
            self.logger.warning(warning)
        return result

    def handle_processing_error(self, error: ProcessingError) -> ErrorResponse:
        """
        Log a processing error and describe what the operator can do.

        Args:
            error: ProcessingError to handle

        Returns:
            ErrorResponse with a suggested action
        """
        self.logger.error(f"Processing error: {error.error_type.value} - {error}")

        if error.error_type == ErrorType.FRAMING:
            return self._handle_framing_error(error)
        elif error.error_type == ErrorType.DECODE:
            return ErrorResponse(
                can_recover=False,
                suggested_action="The shard holds a record that is not a valid entity. "
                                 "Check that the path points at an export output and not another file.",
                partial_results=error.context
            )
        elif error.error_type == ErrorType.PROJECTION:
            return self._handle_projection_error(error)
        elif error.error_type == ErrorType.DISCOVERY:
            return ErrorResponse(
                can_recover=False,
                suggested_action="Check the bucket name, the path prefix and the credentials "
                                 "used to list objects.",
                partial_results=None
            )
        elif error.error_type == ErrorType.IO:
            return ErrorResponse(
                can_recover=False,
                suggested_action="Check read access to the shard objects and retry the run.",
                partial_results=error.context
            )
        elif error.error_type == ErrorType.INTERNAL:
            return ErrorResponse(
                can_recover=False,
                suggested_action="Unexpected failure while converting. Rerun with --verbose "
                                 "and report the logged traceback.",
                partial_results=error.context
            )
        else:
            return ErrorResponse(
                can_recover=False,
                suggested_action="Run with --help to see the expected arguments.",
                partial_results=None
            )

    def summarize_report(self, report: ConversionReport) -> None:
        """
        Log the outcome of a conversion run.

        Args:
            report: Report returned by the converter
        """
        summary = report.to_dict()
        self.logger.info(
            f"Converted {summary['converted']}/{summary['discovered']} shards from {report.source}: "
            f"{summary['records']} records, {summary['bytesWritten']} bytes written"
        )
        if summary["skipped"]:
            self.logger.warning(f"{summary['skipped']} shards were not converted because the run was halted")

    def _handle_framing_error(self, error: ProcessingError) -> ErrorResponse:
        """Handle corrupt chunk framing."""
        return ErrorResponse(
            can_recover=True,
            suggested_action="The shard is corrupt. Rerun with --lenient-framing to drop corrupt "
                             "blocks and keep the remaining records.",
            partial_results=error.context
        )

    def _handle_projection_error(self, error: ProcessingError) -> ErrorResponse:
        """Handle entities that cannot be rendered."""
        context = error.context or {}
        if "depth" in context:
            action = "Rerun with a larger --max-depth to allow deeper embedded entities."
            return ErrorResponse(can_recover=True, suggested_action=action, partial_results=context)
        if "property" in context:
            action = "Rerun without --strict-multiple to keep split multi-valued properties."
            return ErrorResponse(can_recover=True, suggested_action=action, partial_results=context)
        return ErrorResponse(
            can_recover=False,
            suggested_action="The entity holds a value JSON cannot represent.",
            partial_results=context
        )
