"""
Core utilities for the label coarsening package.
Contains the timing helper used for verbose diagnostics.
"""
import time
from collections import defaultdict
from contextlib import contextmanager


class PerformanceMonitor:
    """Performance monitoring with minimal overhead."""

    def __init__(self, enabled=True):
        self.enabled = enabled
        self.reset()

    def reset(self):
        """Reset all timing statistics."""
        self.timing_stats = defaultdict(float)
        self.timing_counts = defaultdict(int)
        self.total_start_time = time.time()

    @contextmanager
    def timed_operation(self, operation_name, verbose=False):
        """Context manager for timing operations with proper nesting."""
        if not self.enabled:
            yield
            return

        start_time = time.time()
        try:
            yield
        finally:
            elapsed = time.time() - start_time
            self.timing_stats[operation_name] += elapsed
            self.timing_counts[operation_name] += 1
            if verbose:
                print(f"  [{operation_name}] completed in {elapsed:.2f} seconds")

    def print_timing_summary(self):
        """Print a summary of timing statistics."""
        if not self.enabled:
            return

        total_time = time.time() - self.total_start_time

        print("\n======== TIMING SUMMARY ========")
        print(f"Total execution time: {total_time:.2f} seconds")
        print("\nBreakdown by operation:")

        # Sort operations by time spent (descending)
        sorted_ops = sorted(self.timing_stats.items(), key=lambda x: x[1], reverse=True)

        for operation, elapsed in sorted_ops:
            percentage = (elapsed / total_time) * 100 if total_time > 0 else 0.0
            count = self.timing_counts[operation]
            avg_time = elapsed / count if count > 0 else 0
            print(f"  {operation:<30} {elapsed:10.2f}s ({percentage:6.2f}%)  |  {count} calls, avg {avg_time:.4f}s per call")

        print("================================")
