"""
BuildStats - Statistics for a batch of artwork builds.
"""

import time
from dataclasses import dataclass, field
from typing import List


@dataclass
class BuildStats:
    """
    Statistics for a batch build run.

    Attributes:
        total_to_process: Catalog items selected for building
        built: Items whose artifact paths were resolved
        fallbacks: Built items that ended up on the default image
        job_errors: Derivative jobs that failed (build still counted)
        errors: Items whose build was aborted
        start_time: Start timestamp
        error_details: List of error messages
    """
    total_to_process: int = 0
    built: int = 0
    fallbacks: int = 0
    job_errors: int = 0
    errors: int = 0
    start_time: float = field(default_factory=time.time)
    error_details: List[str] = field(default_factory=list)

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def rate_per_minute(self) -> float:
        """Build rate in items per minute."""
        if self.elapsed_seconds > 0:
            return self.built / self.elapsed_seconds * 60
        return 0.0

    @property
    def completed_count(self) -> int:
        """Total completed (built + errors)."""
        return self.built + self.errors

    @property
    def remaining_count(self) -> int:
        return self.total_to_process - self.completed_count

    def to_dict(self) -> dict:
        return {
            'total_to_process': self.total_to_process,
            'built': self.built,
            'fallbacks': self.fallbacks,
            'job_errors': self.job_errors,
            'errors': self.errors,
            'elapsed_seconds': round(self.elapsed_seconds, 3),
            'error_details': list(self.error_details),
        }
