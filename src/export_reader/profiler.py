"""Performance profiler for conversion runs."""

import threading
import time
import psutil
import logging
from typing import Dict, Any, Optional, List
from dataclasses import dataclass


@dataclass
class PerformanceMetrics:
    """Performance metrics for a conversion run."""
    operation_name: str
    start_time: float
    end_time: float
    duration: float
    input_size: int
    output_size: int
    memory_peak_mb: float
    memory_start_mb: float
    memory_end_mb: float
    cpu_percent: float
    throughput_mbps: float
    shards_converted: int
    records_converted: int
    records_per_second: float


class PerformanceProfiler:
    """
    Performance profiler for monitoring conversion runs.

    Tracks memory usage, CPU utilization and throughput. Samples may be
    taken from any worker thread.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the performance profiler.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.metrics_history: List[PerformanceMetrics] = []
        self.current_operation: Optional[str] = None
        self.start_time: Optional[float] = None
        self.start_memory: Optional[float] = None
        self.peak_memory: float = 0
        self.cpu_samples: List[float] = []
        self._lock = threading.Lock()

    def start_profiling(self, operation_name: str):
        """
        Start profiling an operation.

        Args:
            operation_name: Name of the operation
        """
        self.current_operation = operation_name
        self.start_time = time.time()

        process = psutil.Process()
        self.start_memory = process.memory_info().rss / 1024 / 1024  # MB
        self.peak_memory = self.start_memory
        self.cpu_samples = []
        # The first cpu_percent call only primes the counter.
        process.cpu_percent()

        self.logger.debug(f"Started profiling: {operation_name}")

    def sample_performance(self):
        """Sample current performance metrics."""
        if not self.current_operation:
            return

        try:
            process = psutil.Process()
            current_memory = process.memory_info().rss / 1024 / 1024  # MB
            cpu_percent = process.cpu_percent()
        except psutil.Error as e:
            self.logger.warning(f"Performance sampling failed: {e}")
            return

        with self._lock:
            self.peak_memory = max(self.peak_memory, current_memory)
            self.cpu_samples.append(cpu_percent)

    def stop_profiling(self, input_size: int = 0, output_size: int = 0,
                       shards_converted: int = 0, records_converted: int = 0) -> PerformanceMetrics:
        """
        Stop profiling and return metrics.

        Args:
            input_size: Bytes read from shard objects
            output_size: Bytes of JSON written
            shards_converted: Number of shards converted
            records_converted: Number of records converted

        Returns:
            PerformanceMetrics object with collected data
        """
        if not self.current_operation or not self.start_time:
            raise ValueError("No active profiling session")

        end_time = time.time()
        duration = end_time - self.start_time

        try:
            process = psutil.Process()
            end_memory = process.memory_info().rss / 1024 / 1024  # MB
            self.peak_memory = max(self.peak_memory, end_memory)
        except psutil.Error:
            end_memory = self.start_memory
        avg_cpu = sum(self.cpu_samples) / len(self.cpu_samples) if self.cpu_samples else 0

        throughput = (input_size / 1024 / 1024) / duration if duration > 0 else 0  # MB/s
        records_per_second = records_converted / duration if duration > 0 else 0

        metrics = PerformanceMetrics(
            operation_name=self.current_operation,
            start_time=self.start_time,
            end_time=end_time,
            duration=duration,
            input_size=input_size,
            output_size=output_size,
            memory_peak_mb=self.peak_memory,
            memory_start_mb=self.start_memory,
            memory_end_mb=end_memory,
            cpu_percent=avg_cpu,
            throughput_mbps=throughput,
            shards_converted=shards_converted,
            records_converted=records_converted,
            records_per_second=records_per_second
        )

        self.metrics_history.append(metrics)

        self.logger.info(f"Performance Summary - {self.current_operation}:")
        self.logger.info(f"  Duration: {duration:.2f}s")
        self.logger.info(f"  Throughput: {throughput:.2f} MB/s ({records_per_second:.0f} records/s)")
        self.logger.info(f"  Memory Peak: {self.peak_memory:.1f} MB")
        self.logger.info(f"  CPU Average: {avg_cpu:.1f}%")
        self.logger.info(f"  Shards Converted: {shards_converted}")

        # Reset state
        self.current_operation = None
        self.start_time = None
        self.start_memory = None

        return metrics

    def get_performance_summary(self) -> Dict[str, Any]:
        """
        Get summary of all performance metrics.

        Returns:
            Dictionary with performance summary
        """
        if not self.metrics_history:
            return {"total_operations": 0}

        total_duration = sum(m.duration for m in self.metrics_history)
        total_input = sum(m.input_size for m in self.metrics_history)
        total_output = sum(m.output_size for m in self.metrics_history)

        return {
            "total_operations": len(self.metrics_history),
            "total_duration": total_duration,
            "total_input_mb": total_input / 1024 / 1024,
            "total_output_mb": total_output / 1024 / 1024,
            "total_shards_converted": sum(m.shards_converted for m in self.metrics_history),
            "total_records_converted": sum(m.records_converted for m in self.metrics_history),
            "max_memory_peak_mb": max(m.memory_peak_mb for m in self.metrics_history),
        }
