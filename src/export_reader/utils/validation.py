"""Validation utilities for command-line inputs."""

from typing import List, Tuple
from ..types import ValidationResult, ValidationError, ErrorType


class ValidationUtils:
    """Utility class for validating conversion inputs."""

    @staticmethod
    def validate_source_path(source_path: str) -> ValidationResult:
        """
        Validate a ``<bucket>/<path-prefix>`` source argument.

        Args:
            source_path: Source path to validate

        Returns:
            ValidationResult with validation details
        """
        errors: List[ValidationError] = []
        warnings: List[str] = []

        if not source_path or not source_path.strip():
            errors.append(ValidationError(
                type=ErrorType.USAGE,
                message="Source path cannot be empty",
                location="source"
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        if source_path.startswith("gs://"):
            warnings.append("Source path has a gs:// scheme; it is ignored")
            source_path = source_path[len("gs://"):]

        bucket, _, prefix = source_path.partition("/")
        if not bucket:
            errors.append(ValidationError(
                type=ErrorType.USAGE,
                message="Source path must start with a bucket name",
                location="source"
            ))

        if not prefix.strip("/"):
            errors.append(ValidationError(
                type=ErrorType.USAGE,
                message="Source path must have the form <bucket>/<path-prefix>",
                location="source"
            ))

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )

    @staticmethod
    def parse_source_path(source_path: str) -> Tuple[str, str]:
        """
        Split a source path into bucket and prefix.

        Args:
            source_path: Validated ``<bucket>/<path-prefix>`` string

        Returns:
            Tuple of (bucket, prefix) with surrounding slashes removed
            from the prefix
        """
        if source_path.startswith("gs://"):
            source_path = source_path[len("gs://"):]
        bucket, _, prefix = source_path.partition("/")
        return bucket, prefix.strip("/")

    @staticmethod
    def validate_worker_count(workers: int) -> ValidationResult:
        """
        Validate the number of shard workers.

        Args:
            workers: Worker count to validate

        Returns:
            ValidationResult with validation details
        """
        errors: List[ValidationError] = []
        warnings: List[str] = []

        if workers < 1:
            errors.append(ValidationError(
                type=ErrorType.USAGE,
                message="Worker count must be at least 1",
                location="workers"
            ))
        elif workers > 100:
            warnings.append(f"Worker count {workers} is very large; object store requests may be throttled")

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )
