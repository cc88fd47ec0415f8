"""Tests for input validation, configuration and error handling."""

import pytest
from export_reader.config import ConverterConfig, DEFAULT_MAX_NESTING_DEPTH, DEFAULT_WORKERS
from export_reader.error_handler import ErrorHandler
from export_reader.types import (
    ConversionReport,
    EntityDecodeError,
    ErrorType,
    FramingError,
    OutputPolicy,
    ProcessingError,
    ProjectionError,
    ShardResult,
)
from export_reader.utils import ValidationUtils


class TestValidationUtils:
    """Tests for ValidationUtils class."""

    def test_valid_source_path(self):
        """Test a bucket with a path prefix."""
        result = ValidationUtils.validate_source_path("my-bucket/exports/2024-01-01")

        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_empty_source_path(self):
        """Test that an empty source path is rejected."""
        result = ValidationUtils.validate_source_path("  ")

        assert not result.is_valid
        assert result.errors[0].type == ErrorType.USAGE
        assert "cannot be empty" in result.errors[0].message

    def test_source_path_without_prefix(self):
        """Test that a bare bucket name is rejected."""
        for source in ["my-bucket", "my-bucket/", "my-bucket//"]:
            result = ValidationUtils.validate_source_path(source)
            assert not result.is_valid
            assert "<bucket>/<path-prefix>" in result.errors[0].message

    def test_source_path_without_bucket(self):
        """Test that a leading slash is rejected."""
        result = ValidationUtils.validate_source_path("/exports/2024")

        assert not result.is_valid
        assert "bucket name" in result.errors[0].message

    def test_gs_scheme_warns(self):
        """Test that a gs:// scheme is accepted with a warning."""
        result = ValidationUtils.validate_source_path("gs://my-bucket/exports")

        assert result.is_valid
        assert len(result.warnings) == 1

    def test_parse_source_path(self):
        """Test splitting into bucket and prefix."""
        assert ValidationUtils.parse_source_path("my-bucket/exports/day/") == ("my-bucket", "exports/day")
        assert ValidationUtils.parse_source_path("gs://my-bucket/exports") == ("my-bucket", "exports")

    def test_worker_count(self):
        """Test worker count bounds."""
        assert ValidationUtils.validate_worker_count(10).is_valid
        assert not ValidationUtils.validate_worker_count(0).is_valid

        large = ValidationUtils.validate_worker_count(500)
        assert large.is_valid
        assert len(large.warnings) == 1


class TestConverterConfig:
    """Tests for ConverterConfig class."""

    def test_defaults(self):
        """Test default settings."""
        config = ConverterConfig()

        assert config.workers == DEFAULT_WORKERS == 10
        assert config.policy == OutputPolicy.EXPORT
        assert config.strict_framing
        assert config.verify_checksums
        assert config.fail_fast
        assert not config.strict_multiple
        assert config.max_nesting_depth == DEFAULT_MAX_NESTING_DEPTH
        assert config.shard_marker == "output-"

    def test_policy_from_string(self):
        """Test that a policy name is converted to OutputPolicy."""
        assert ConverterConfig(policy="backup").policy == OutputPolicy.BACKUP

    def test_unknown_policy(self):
        """Test that an unknown policy name is rejected."""
        with pytest.raises(ValueError):
            ConverterConfig(policy="csv")

    def test_invalid_values(self):
        """Test validation of numeric settings."""
        with pytest.raises(ValueError, match="workers"):
            ConverterConfig(workers=0)
        with pytest.raises(ValueError, match="max_nesting_depth"):
            ConverterConfig(max_nesting_depth=0)
        with pytest.raises(ValueError, match="shard_marker"):
            ConverterConfig(shard_marker="")


class TestErrorHandler:
    """Tests for ErrorHandler class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.error_handler = ErrorHandler()

    def test_validate_source_path_logs_warnings(self, caplog):
        """Test that validation warnings are logged."""
        with caplog.at_level("WARNING"):
            result = self.error_handler.validate_source_path("gs://bucket/exports")

        assert result.is_valid
        assert "gs://" in caplog.text

    def test_handle_framing_error(self):
        """Test that framing errors suggest lenient framing."""
        error = FramingError("output-0: checksum mismatch at offset 0",
                             context={"source": "output-0", "offset": 0, "size": 10})

        response = self.error_handler.handle_processing_error(error)

        assert response.can_recover
        assert "--lenient-framing" in response.suggested_action
        assert response.partial_results["source"] == "output-0"

    def test_handle_decode_error(self):
        """Test that decode errors cannot be recovered."""
        response = self.error_handler.handle_processing_error(EntityDecodeError("bad"))

        assert not response.can_recover

    def test_handle_depth_error(self):
        """Test that depth errors suggest a larger limit."""
        error = ProjectionError("too deep", context={"property": "child", "depth": 100})

        response = self.error_handler.handle_processing_error(error)

        assert response.can_recover
        assert "--max-depth" in response.suggested_action

    def test_handle_split_multiple_error(self):
        """Test that split multi-valued property errors suggest dropping the strict flag."""
        error = ProjectionError("not contiguous", context={"property": "tags"})

        response = self.error_handler.handle_processing_error(error)

        assert response.can_recover
        assert "--strict-multiple" in response.suggested_action

    def test_handle_value_error(self):
        """Test that unrepresentable values cannot be recovered."""
        error = ProjectionError("inf", context={"value": "inf"})

        assert not self.error_handler.handle_processing_error(error).can_recover

    def test_handle_discovery_and_io_errors(self):
        """Test suggestions for store errors."""
        discovery = self.error_handler.handle_processing_error(
            ProcessingError("denied", ErrorType.DISCOVERY))
        io_error = self.error_handler.handle_processing_error(
            ProcessingError("reset", ErrorType.IO, context={"name": "output-0"}))

        assert "bucket" in discovery.suggested_action.lower()
        assert io_error.partial_results == {"name": "output-0"}

    def test_handle_usage_error(self):
        """Test that usage errors point at --help."""
        response = self.error_handler.handle_processing_error(
            ProcessingError("bad path", ErrorType.USAGE))

        assert "--help" in response.suggested_action

    def test_handle_internal_error(self):
        """Test that unexpected failures ask for the traceback."""
        response = self.error_handler.handle_processing_error(
            ProcessingError("Unexpected RecursionError", ErrorType.INTERNAL,
                            context={"exception": "RecursionError"}))

        assert not response.can_recover
        assert "traceback" in response.suggested_action
        assert response.partial_results == {"exception": "RecursionError"}

    def test_summarize_report(self, caplog):
        """Test that the summary reports skipped shards."""
        report = ConversionReport(
            source="bucket/exp",
            shards=[ShardResult(name="exp/output-0", records=3, bytes_written=30)],
            discovered=3,
            skipped=2
        )

        with caplog.at_level("INFO"):
            self.error_handler.summarize_report(report)

        assert "Converted 1/3 shards" in caplog.text
        assert "2 shards were not converted" in caplog.text


class TestConversionReport:
    """Tests for ConversionReport class."""

    def test_totals_and_summary(self):
        """Test aggregated counters."""
        failed = ShardResult(name="b", records=1, error=FramingError("bad"))
        report = ConversionReport(
            source="bucket/exp",
            shards=[ShardResult(name="a", records=4, bytes_read=100, bytes_written=40), failed],
            discovered=2
        )

        assert not report.success
        assert report.failures == [failed]
        assert report.to_dict() == {
            "source": "bucket/exp",
            "discovered": 2,
            "converted": 1,
            "failed": 1,
            "skipped": 0,
            "records": 5,
            "bytesRead": 100,
            "bytesWritten": 40,
        }

    def test_skipped_shards_fail_run(self):
        """Test that a run with skipped shards is not successful."""
        report = ConversionReport(source="bucket/exp", shards=[ShardResult(name="a")],
                                  discovered=2, skipped=1)

        assert not report.success
        report.raise_for_failures()
