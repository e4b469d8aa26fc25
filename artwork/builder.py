"""
ArtworkBuilder - Entry point that turns a catalog key into published
artwork derivatives.
"""

import logging
from typing import Iterable, Optional, Tuple

from .build_stats import BuildStats
from .catalog import ArtworkCatalog
from .config import ArtworkConfig
from .decoders import DecoderSelector
from .errors import ArtworkError
from .extractor import ArchiveExtractor
from .locks import KeyedLock
from .models import ArtifactPaths, CatalogKey
from .processor import ArtworkProcessor, ProcessingResult
from .resolver import PathResolver
from .s3_client import S3Client
from .scaler import Scaler
from .writer import JpegWriter


class ArtworkBuilder:
    """
    Resolves artwork for a catalog key and generates its derivatives.

    Builds for the same key are serialized; different keys may be built
    from several threads at once.
    """

    def __init__(
        self,
        config: ArtworkConfig,
        resolver: PathResolver,
        processor: ArtworkProcessor,
        locks: Optional[KeyedLock] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize builder.

        Args:
            config: Pipeline configuration (resolved on construction)
            resolver: Path resolver
            processor: Derivative processor
            locks: Per-key lock table (a private one by default)
            logger: Optional logger instance

        Raises:
            ConfigurationError: if the configuration is unusable
        """
        self.logger = logger or logging.getLogger(__name__)
        self.config = config.resolve(self.logger)
        self.resolver = resolver
        self.processor = processor
        self.locks = locks or KeyedLock()

    @classmethod
    def create(
        cls,
        config: ArtworkConfig,
        catalog: ArtworkCatalog,
        s3_client: Optional[S3Client] = None,
        logger: Optional[logging.Logger] = None
    ) -> 'ArtworkBuilder':
        """Wire up a builder with the default collaborators."""
        logger = logger or logging.getLogger(__name__)
        config = config.resolve(logger)
        resolver = PathResolver(
            config,
            catalog,
            extractor=ArchiveExtractor(logger),
            s3_client=s3_client,
            logger=logger,
        )
        processor = ArtworkProcessor(
            selector=DecoderSelector(logger=logger),
            scaler=Scaler(logger=logger),
            writer=JpegWriter(config.jpeg_quality, logger=logger),
            job_timeout=config.job_timeout,
            logger=logger,
        )
        return cls(config, resolver, processor, logger=logger)

    def build(
        self,
        key: CatalogKey,
        product_type: Optional[str] = None
    ) -> Tuple[ArtifactPaths, ProcessingResult]:
        """
        Resolve artwork for ``key`` and generate its derivatives.

        Raises:
            ConfigurationError: unsupported source type or bad output base
            ValidationError: incomplete artifact paths
        """
        with self.locks.hold(key.key):
            paths = self.resolver.resolve(key, product_type)
            result = self.processor.process(paths)

        if result.skipped:
            self.logger.warning(f"No derivatives generated for [ {key} ]")
        elif result.errors:
            self.logger.warning(
                f"Artwork for [ {key} ] partially generated: {'; '.join(result.error_details)}")
        return paths, result

    def build_artifact(self, key: CatalogKey, product_type: Optional[str] = None) -> ArtifactPaths:
        """Build artwork for ``key`` and return the resolved paths."""
        paths, _ = self.build(key, product_type)
        return paths

    def is_fallback(self, paths: ArtifactPaths) -> bool:
        return paths.source_path == self.config.default_image_path

    def build_all(
        self,
        items: Iterable[Tuple[CatalogKey, str]],
        limit: Optional[int] = None
    ) -> BuildStats:
        """
        Build every (key, product_type) pair, continuing past failures.

        Args:
            items: Catalog items to build
            limit: Optional limit on number of items (for testing)

        Returns:
            BuildStats with results
        """
        selected = list(items)
        if limit:
            selected = selected[:limit]
        stats = BuildStats(total_to_process=len(selected))
        self.logger.info(f"Starting build: {len(selected)} catalog items")

        for key, product_type in selected:
            try:
                paths, result = self.build(key, product_type)
            except (ArtworkError, OSError) as e:
                error_msg = f"Error building artwork for {key}: {e}"
                self.logger.error(error_msg)
                stats.errors += 1
                stats.error_details.append(error_msg)
                continue

            stats.built += 1
            stats.job_errors += result.errors
            if self.is_fallback(paths):
                stats.fallbacks += 1

        self.logger.info(
            f"Build complete: {stats.built} built ({stats.fallbacks} default image), "
            f"{stats.job_errors} job errors, {stats.errors} errors "
            f"({stats.elapsed_seconds:.1f}s)"
        )
        return stats
