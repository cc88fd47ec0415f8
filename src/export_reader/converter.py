"""Fan-out driver converting every shard under a source path."""

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from google.api_core.exceptions import GoogleAPIError

from .config import ConverterConfig
from .entity import EntityDecoder
from .error_handler import ErrorHandler
from .io.output_sink import OutputSink
from .journal import JournalReader
from .profiler import PerformanceProfiler
from .projectors import create_projector
from .types import (
    ConversionReport,
    ErrorType,
    ObjectStoreInterface,
    ProcessingError,
    ShardResult,
)
from .utils.validation import ValidationUtils


class ExportConverter:
    """
    Converter turning export shards into newline-delimited JSON.

    Discovery runs on the calling thread and feeds a shared queue; a fixed
    pool of workers drains it, each converting one whole shard before taking
    the next. Lines of one shard keep the shard's record order; lines of
    different shards interleave in no particular order.
    """

    def __init__(self, store: ObjectStoreInterface,
                 config: Optional[ConverterConfig] = None,
                 sink: Optional[OutputSink] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the converter.

        Args:
            store: Object store holding the shards
            config: Optional run configuration
            sink: Optional output sink (defaults to stdout)
            logger: Optional logger instance
        """
        self.store = store
        self.config = config or ConverterConfig()
        self.sink = sink or OutputSink()
        self.logger = logger or logging.getLogger(__name__)

        self.error_handler = ErrorHandler(self.logger)
        self.decoder = EntityDecoder(self.logger)
        self.projector = create_projector(self.config, self.decoder, self.logger)
        self.profiler = PerformanceProfiler(self.logger) if self.config.enable_profiling else None

    def convert(self, source_path: str) -> ConversionReport:
        """
        Convert every shard below ``<bucket>/<path-prefix>``.

        Args:
            source_path: Source path of the export

        Returns:
            ConversionReport with one ShardResult per processed shard

        Raises:
            ProcessingError: If the source path is invalid or discovery fails
        """
        validation = self.error_handler.validate_source_path(source_path)
        if not validation.is_valid:
            raise ProcessingError(
                "; ".join(error.message for error in validation.errors),
                ErrorType.USAGE,
                context={"source": source_path}
            )

        bucket, prefix = ValidationUtils.parse_source_path(source_path)
        shard_prefix = f"{prefix}/{self.config.shard_marker}"
        report = ConversionReport(source=source_path)

        self.logger.info(f"Converting gs://{bucket}/{shard_prefix}* with {self.config.workers} workers "
                         f"({self.config.policy.value} format)")
        if self.profiler:
            self.profiler.start_profiling(f"convert {source_path}")

        work_queue: "queue.Queue[Optional[str]]" = queue.Queue()
        results: List[ShardResult] = []
        results_lock = threading.Lock()
        discovery_error: Optional[ProcessingError] = None

        with ThreadPoolExecutor(max_workers=self.config.workers,
                                thread_name_prefix="shard-worker") as executor:
            futures = [
                executor.submit(self._drain_queue, bucket, work_queue, results, results_lock)
                for _ in range(self.config.workers)
            ]

            try:
                for name in self.store.list_objects(bucket, shard_prefix):
                    if self.sink.halted:
                        break
                    report.discovered += 1
                    work_queue.put(name)
            except ProcessingError as e:
                discovery_error = e
                self.sink.halt()
            except Exception as e:
                # Transport and auth failures of the store client while paging
                discovery_error = ProcessingError(
                    f"Failed to list gs://{bucket}/{shard_prefix}: {type(e).__name__}: {e}",
                    ErrorType.DISCOVERY,
                    context={"bucket": bucket, "prefix": shard_prefix}
                )
                discovery_error.__cause__ = e
                self.sink.halt()
            finally:
                for _ in futures:
                    work_queue.put(None)

            for future in futures:
                future.result()

        report.shards = sorted(results, key=lambda shard: shard.name)
        report.skipped = report.discovered - len(results)

        if self.profiler:
            self.profiler.stop_profiling(
                input_size=report.total_bytes_read,
                output_size=report.total_bytes_written,
                shards_converted=len(results),
                records_converted=report.total_records
            )

        if discovery_error is not None:
            raise discovery_error

        self.error_handler.summarize_report(report)
        return report

    def process_shard(self, bucket: str, name: str) -> ShardResult:
        """
        Convert one shard, writing a line per record to the sink.

        Args:
            bucket: Bucket holding the shard
            name: Object name of the shard

        Returns:
            ShardResult; errors are captured in it rather than raised
        """
        result = ShardResult(name=name)
        reader: Optional[JournalReader] = None

        try:
            with self.store.open(bucket, name) as stream:
                reader = JournalReader(
                    stream,
                    strict=self.config.strict_framing,
                    verify_checksums=self.config.verify_checksums,
                    source=name,
                    logger=self.logger
                )
                for record in reader:
                    line = self.projector.render_record(record)
                    written = self.sink.write_line(line)
                    if not written:
                        result.aborted = True
                        break
                    result.records += 1
                    result.bytes_written += written
        except ProcessingError as e:
            result.error = e
        except (OSError, GoogleAPIError) as e:
            # Read failures surface from the store client's stream
            result.error = ProcessingError(
                f"Failed to read shard {name}: {e}",
                ErrorType.IO,
                context={"bucket": bucket, "name": name}
            )
        except Exception as e:
            self.logger.exception(f"Unexpected error while converting shard {name}")
            result.error = ProcessingError(
                f"Unexpected {type(e).__name__} while converting shard {name}: {e}",
                ErrorType.INTERNAL,
                context={"bucket": bucket, "name": name, "exception": type(e).__name__}
            )

        if reader is not None:
            result.bytes_read = reader.bytes_read

        if result.error is not None:
            if self.config.fail_fast:
                self.sink.halt()
            self.logger.error(f"Shard {name} failed after {result.records} records: {result.error}")
        elif result.aborted:
            self.logger.warning(f"Shard {name} stopped after {result.records} records: run halted")
        else:
            self.logger.info(f"Converted shard {name}: {result.records} records")
        return result

    def _drain_queue(self, bucket: str, work_queue: "queue.Queue[Optional[str]]",
                     results: List[ShardResult], results_lock: threading.Lock) -> None:
        """Worker loop: convert queued shards until a sentinel arrives."""
        while True:
            name = work_queue.get()
            if name is None:
                return
            if self.sink.halted:
                continue

            result = self.process_shard(bucket, name)
            with results_lock:
                results.append(result)

            if self.profiler:
                self.profiler.sample_performance()
