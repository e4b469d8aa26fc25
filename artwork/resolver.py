"""
PathResolver - Works out where a product's artwork comes from and where
its derivatives go.

Output layout::

    {output_base_path}/{product_type}/{nsn+nrn}/{base_filename}-small.jpg
    {output_base_path}/{product_type}/{nsn+nrn}/{base_filename}-thumbnail.jpg

URLs mirror the layout under ``base_url``.
"""

import logging
import os
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from .catalog import ArtworkCatalog
from .config import ArtworkConfig
from .errors import ConfigurationError, ExtractionError, NotFoundError
from .extractor import ArchiveExtractor
from .locations import is_s3_locator, join_url, to_local_path
from .models import (
    ArtifactPaths, ArtworkRecord, CatalogKey,
    DEFAULT_CD_NAME, DEFAULT_PRODUCT_TYPE,
)
from .s3_client import S3Client


class PathResolver:
    """
    Resolves a catalog key into an ArtifactPaths bundle.

    Archived artwork is extracted next to the derivatives; anything that
    cannot be found or read falls back to the configured default image.
    """

    SOURCE_PATTERN = '*.pdf'
    ARCHIVE_EXTENSION = 'zip'
    SMALL_SUFFIX = '-small'
    THUMBNAIL_SUFFIX = '-thumbnail'
    OUTPUT_EXTENSION = 'jpg'

    def __init__(
        self,
        config: ArtworkConfig,
        catalog: ArtworkCatalog,
        extractor: Optional[ArchiveExtractor] = None,
        s3_client: Optional[S3Client] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize resolver.

        Args:
            config: Resolved pipeline configuration
            catalog: Source of artwork records
            extractor: Archive extractor (a new one by default)
            s3_client: Client for s3:// archives; remote archives fall
                back to the default image when not provided
            logger: Optional logger instance
        """
        self.config = config
        self.catalog = catalog
        self.logger = logger or logging.getLogger(__name__)
        self.extractor = extractor or ArchiveExtractor(self.logger)
        self.s3 = s3_client

    def resolve(self, key: CatalogKey, product_type: Optional[str] = None) -> ArtifactPaths:
        """
        Build the artifact paths for ``key``, creating output directories
        and extracting archived artwork as needed.

        Raises:
            ConfigurationError: if the output base directory is missing
            ValidationError: if the resulting bundle is incomplete
        """
        product_type = (product_type or '').strip() or DEFAULT_PRODUCT_TYPE

        record = self.catalog.get_artwork_record(key)
        use_default = record is None
        if use_default:
            self.logger.warning(
                f"No artwork record exists for NRN [ {key.nrn} ] and NSN [ {key.nsn} ]. "
                f"Using default image."
            )
            record = self._default_record(key)

        output_dir = self.prepare_output_dir(key, product_type)
        output_url = self.output_url(key, product_type)
        base_filename = record.base_filename

        source = None if use_default else self.resolve_source(record, output_dir)
        if source is None:
            if not use_default:
                self.logger.warning(
                    f"Unable to obtain the source image for [ {key} ]. "
                    f"Using the default image for further artwork processing."
                )
            source_path = self.config.default_image_path
            source_url = self.config.default_image_url
        else:
            source_path = source
            source_url = join_url(output_url, os.path.basename(source))

        paths = ArtifactPaths(
            source_path=source_path,
            source_url=source_url,
            small_path=self._derivative_path(output_dir, base_filename, self.SMALL_SUFFIX),
            small_url=self._derivative_url(output_url, base_filename, self.SMALL_SUFFIX),
            thumbnail_path=self._derivative_path(output_dir, base_filename, self.THUMBNAIL_SUFFIX),
            thumbnail_url=self._derivative_url(output_url, base_filename, self.THUMBNAIL_SUFFIX),
            record=record,
        )
        self.logger.debug(f"Resolved artwork for [ {key} ]: {paths}")
        return paths

    def output_url(self, key: CatalogKey, product_type: str) -> str:
        return join_url(self.config.base_url, product_type.lower(), key.key) + '/'

    def prepare_output_dir(self, key: CatalogKey, product_type: str) -> str:
        """
        Create the product type and key directories if missing.

        Each level is created on its own; the base directory must already
        exist.
        """
        type_dir = os.path.join(self.config.output_base_path, product_type.lower())
        key_dir = os.path.join(type_dir, key.key)
        for directory in (type_dir, key_dir):
            try:
                os.mkdir(directory)
            except FileExistsError:
                pass
            except FileNotFoundError as e:
                raise ConfigurationError(
                    f"Cannot create output directory [ {directory} ]: parent does not exist"
                ) from e
        return key_dir

    def resolve_source(self, record: ArtworkRecord, output_dir: str) -> Optional[str]:
        """
        Locate a usable source image for ``record``.

        Returns:
            Local path of the source, or None when the default image
            should be used instead
        """
        locator = record.path
        if not locator:
            return None

        if record.extension == self.ARCHIVE_EXTENSION:
            if is_s3_locator(locator):
                return self._extract_remote(locator, output_dir)
            archive = to_local_path(locator)
            if not os.path.exists(archive):
                self.logger.warning(
                    f"Target artwork zip file [ {archive} ] does not exist. Using the default image.")
                return None
            return self._extract(archive, output_dir)

        source = to_local_path(locator)
        if os.path.exists(source):
            return source
        self.logger.warning(
            f"Source artwork [ {locator} ] is not reachable. Using the default image.")
        return None

    def _extract(self, archive: str, output_dir: str) -> Optional[str]:
        try:
            extracted = self.extractor.extract(archive, self.SOURCE_PATTERN, output_dir)
        except ExtractionError as e:
            self.logger.warning(f"{e}. Using default image.")
            return None
        if extracted is None:
            self.logger.warning(
                f"Unable to retrieve the source image from target zip file [ {archive} ]. "
                f"Using default image."
            )
        return extracted

    def _extract_remote(self, locator: str, output_dir: str) -> Optional[str]:
        if self.s3 is None:
            self.logger.warning(
                f"Artwork archive [ {locator} ] is remote but no S3 client is configured. "
                f"Using default image."
            )
            return None
        try:
            with self.s3.staged_file(locator) as staged:
                return self._extract(staged, output_dir)
        except (NotFoundError, ClientError, BotoCoreError, OSError) as e:
            self.logger.warning(
                f"Unable to fetch artwork archive [ {locator} ]: {e}. Using default image.")
            return None

    def _default_record(self, key: CatalogKey) -> ArtworkRecord:
        return ArtworkRecord(
            nrn=key.nrn,
            nsn=key.nsn,
            path=self.config.default_image_path or '',
            size=self._default_image_size(),
            cd_name=DEFAULT_CD_NAME,
        )

    def _default_image_size(self) -> int:
        path = to_local_path(self.config.default_image_path or '')
        try:
            return os.path.getsize(path)
        except OSError:
            self.logger.error(f"Target default image file does not exist. Path [ {path} ]")
            return 0

    def _derivative_path(self, output_dir: str, base_filename: str, suffix: str) -> str:
        return os.path.join(output_dir, f"{base_filename}{suffix}.{self.OUTPUT_EXTENSION}")

    def _derivative_url(self, output_url: str, base_filename: str, suffix: str) -> str:
        return f"{output_url}{base_filename}{suffix}.{self.OUTPUT_EXTENSION}"
