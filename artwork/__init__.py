"""
Catalog artwork derivative pipeline.

Resolves the cover artwork of a catalog product (extracting it from a ZIP
archive when needed, or falling back to a default image) and generates a
thumbnail and a small preview JPEG for web display.
"""

__version__ = "1.0.0"

from .errors import (
    ArtworkError,
    ConfigurationError,
    UnsupportedTypeError,
    ValidationError,
    NotFoundError,
    ExtractionError,
    DecodeError,
)
from .models import (
    CatalogKey,
    ArtworkRecord,
    ArtifactPaths,
    BoundBox,
    THUMBNAIL_BOUND,
    SMALL_BOUND,
)
from .config import ArtworkConfig
from .s3_config import S3Config
from .s3_client import S3Client
from .scaler import Scaler, scale_dimensions
from .decoders import ImageDecoder, RasterDecoder, PdfDecoder, DecoderSelector
from .writer import JpegWriter
from .extractor import ArchiveExtractor
from .catalog import ArtworkCatalog, MemoryCatalog, JsonCatalog
from .locks import KeyedLock
from .resolver import PathResolver
from .processor import ArtworkProcessor, ProcessingResult
from .build_stats import BuildStats
from .builder import ArtworkBuilder

__all__ = [
    "ArtworkError",
    "ConfigurationError",
    "UnsupportedTypeError",
    "ValidationError",
    "NotFoundError",
    "ExtractionError",
    "DecodeError",
    "CatalogKey",
    "ArtworkRecord",
    "ArtifactPaths",
    "BoundBox",
    "THUMBNAIL_BOUND",
    "SMALL_BOUND",
    "ArtworkConfig",
    "S3Config",
    "S3Client",
    "Scaler",
    "scale_dimensions",
    "ImageDecoder",
    "RasterDecoder",
    "PdfDecoder",
    "DecoderSelector",
    "JpegWriter",
    "ArchiveExtractor",
    "ArtworkCatalog",
    "MemoryCatalog",
    "JsonCatalog",
    "KeyedLock",
    "PathResolver",
    "ArtworkProcessor",
    "ProcessingResult",
    "BuildStats",
    "ArtworkBuilder",
]
