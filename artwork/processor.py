"""
ArtworkProcessor - Generates the thumbnail and small derivatives of a
resolved source image.
"""

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .decoders import DecoderSelector, ImageDecoder
from .errors import DecodeError
from .locations import to_local_path
from .models import ArtifactPaths, BoundBox, SMALL_BOUND, THUMBNAIL_BOUND
from .scaler import Scaler
from .writer import JpegWriter


@dataclass(frozen=True)
class DerivativeJob:
    """One decode -> scale -> write unit of work."""
    name: str
    bound: BoundBox
    output_path: str


@dataclass
class ProcessingResult:
    """
    Outcome of processing one source image.

    Attributes:
        source_path: Source image the derivatives were made from
        skipped: True if the source was missing and no job ran
        completed: Names of jobs that wrote their output
        bytes_written: Bytes written per completed job
        errors: Number of failed jobs
        error_details: Error message per failed job
        start_time: Start timestamp
        end_time: End timestamp (set when processing finishes)
    """
    source_path: str
    skipped: bool = False
    completed: List[str] = field(default_factory=list)
    bytes_written: Dict[str, int] = field(default_factory=dict)
    errors: int = 0
    error_details: List[str] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None

    @property
    def elapsed_seconds(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    @property
    def succeeded(self) -> bool:
        """True when every job ran and none failed."""
        return not self.skipped and self.errors == 0

    def record_success(self, job: DerivativeJob, written: int) -> None:
        self.completed.append(job.name)
        self.bytes_written[job.name] = written

    def record_error(self, job: DerivativeJob, message: str) -> None:
        self.errors += 1
        self.error_details.append(f"{job.name}: {message}")


class ArtworkProcessor:
    """
    Runs the two derivative jobs for a source image.

    Both jobs decode the source on their own and run concurrently on a
    small thread pool. A failure in one job is logged and counted but does
    not stop the other. A job that times out is told to stop and never
    replaces its output file afterwards.
    """

    def __init__(
        self,
        selector: Optional[DecoderSelector] = None,
        scaler: Optional[Scaler] = None,
        writer: Optional[JpegWriter] = None,
        job_timeout: float = 120.0,
        max_workers: int = 2,
        thumbnail_bound: BoundBox = THUMBNAIL_BOUND,
        small_bound: BoundBox = SMALL_BOUND,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize processor.

        Args:
            selector: Decoder registry (raster + PDF by default)
            scaler: Scaler instance
            writer: JPEG writer instance
            job_timeout: Seconds to wait for the jobs to finish
            max_workers: Worker threads; 1 runs the jobs one after another
            thumbnail_bound: Bound box of the thumbnail derivative
            small_bound: Bound box of the small derivative
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.selector = selector or DecoderSelector(logger=self.logger)
        self.scaler = scaler or Scaler(logger=self.logger)
        self.writer = writer or JpegWriter(logger=self.logger)
        self.job_timeout = job_timeout
        self.max_workers = max_workers
        self.thumbnail_bound = thumbnail_bound
        self.small_bound = small_bound

    def jobs_for(self, paths: ArtifactPaths) -> List[DerivativeJob]:
        return [
            DerivativeJob('thumbnail', self.thumbnail_bound, paths.thumbnail_path),
            DerivativeJob('small', self.small_bound, paths.small_path),
        ]

    def process(self, paths: ArtifactPaths) -> ProcessingResult:
        """
        Generate both derivatives for ``paths``.

        Raises:
            UnsupportedTypeError: if no decoder handles the source; raised
                before any job starts
        """
        result = ProcessingResult(source_path=paths.source_path)
        self.logger.info(f"Initializing image processing for source image [ {paths.source_path} ]")

        source = to_local_path(paths.source_path)
        if not os.path.exists(source):
            self.logger.error(
                f"The source image [ {source} ] does not exist. Unable to proceed with "
                f"the generation of reduced resolution artwork."
            )
            result.skipped = True
            result.end_time = time.time()
            return result

        decoder = self.selector.select(source)
        jobs = self.jobs_for(paths)
        cancelled = {job.name: threading.Event() for job in jobs}

        executor = ThreadPoolExecutor(
            max_workers=max(1, self.max_workers),
            thread_name_prefix='artwork-job',
        )
        try:
            futures = [
                (job, executor.submit(self._run_job, decoder, source, job, cancelled[job.name]))
                for job in jobs
            ]
            deadline = time.time() + self.job_timeout
            for job, future in futures:
                try:
                    written = future.result(timeout=max(0.0, deadline - time.time()))
                except FutureTimeout:
                    cancelled[job.name].set()
                    future.cancel()
                    message = f"timed out after {self.job_timeout:.1f}s"
                    self.logger.error(f"Generating {job.name} image for [ {source} ] {message}")
                    result.record_error(job, message)
                except (DecodeError, OSError, ValueError) as e:
                    self.logger.error(
                        f"Error generating {job.name} image [ {job.output_path} ] "
                        f"from [ {source} ]: {e}"
                    )
                    result.record_error(job, str(e))
                else:
                    result.record_success(job, written)
        finally:
            # Nothing may be published once process() has returned
            for event in cancelled.values():
                event.set()
            executor.shutdown(wait=False, cancel_futures=True)

        result.end_time = time.time()
        self.logger.debug(f"Resized images created in {result.elapsed_seconds * 1000:.0f} ms")
        return result

    def _run_job(
        self,
        decoder: ImageDecoder,
        source: str,
        job: DerivativeJob,
        cancelled: threading.Event
    ) -> int:
        """Decode, scale and write one derivative, stopping early once ``cancelled`` is set."""
        self.logger.info(f"Generating {job.name} image...")
        image = decoder.decode(source)
        if self._abandoned(job, cancelled):
            return 0
        scaled = self.scaler.scale(image, job.bound)
        if self._abandoned(job, cancelled):
            return 0
        return self.writer.write(scaled, job.output_path, cancelled)

    def _abandoned(self, job: DerivativeJob, cancelled: threading.Event) -> bool:
        if cancelled.is_set():
            self.logger.debug(f"Abandoning {job.name} image for [ {job.output_path} ]")
            return True
        return False
