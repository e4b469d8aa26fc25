"""
Value objects shared by the artwork pipeline.
"""

import os
from dataclasses import dataclass, asdict
from typing import Optional

from .errors import ValidationError


DEFAULT_PRODUCT_TYPE = 'unavailable'
DEFAULT_CD_NAME = '00000000'


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


@dataclass(frozen=True)
class CatalogKey:
    """
    Composite identifier for a catalog product.

    Attributes:
        nrn: Product reference number
        nsn: Product stock number
    """
    nrn: str
    nsn: str

    def __post_init__(self):
        if _blank(self.nrn):
            raise ValidationError(
                "Value for NRN is null or empty. Unable to construct the artwork data.")
        if _blank(self.nsn):
            raise ValidationError(
                "Value for NSN is null or empty. Unable to construct the artwork data.")

    @classmethod
    def create(cls, nrn: Optional[str], nsn: Optional[str]) -> 'CatalogKey':
        """Build a key from raw catalog values, trimming whitespace."""
        return cls(
            nrn=nrn.strip() if nrn else '',
            nsn=nsn.strip() if nsn else '',
        )

    @property
    def key(self) -> str:
        """Path and URL segment for this product, e.g. ``7644015861357+CB01UND443B``."""
        nsn = self.nsn.strip().replace(' ', '-')
        nrn = self.nrn.strip().replace(' ', '-')
        return f"{nsn}+{nrn}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class BoundBox:
    """Maximum (width, height) of a derivative image."""
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValidationError(
                f"Bound box dimensions must be positive, got {self.width}x{self.height}")

    @property
    def ratio(self) -> float:
        return self.width / self.height


THUMBNAIL_BOUND = BoundBox(50, 50)
SMALL_BOUND = BoundBox(500, 500)


@dataclass(frozen=True)
class ArtworkRecord:
    """
    Catalog entry describing where the artwork for a product lives.

    Attributes:
        nrn: Product reference number
        nsn: Product stock number
        path: Archive path (local path, file: URI or s3:// URI)
        size: Archive size in bytes
        cd_name: Display name of the media the artwork came from
    """
    nrn: str
    nsn: str
    path: str
    size: int = 0
    cd_name: str = ''

    @property
    def catalog_key(self) -> CatalogKey:
        return CatalogKey.create(self.nrn, self.nsn)

    @property
    def filename(self) -> str:
        """File name portion of the path (works for paths and URIs)."""
        return os.path.basename(self.path.rstrip('/'))

    @property
    def base_filename(self) -> str:
        """File name without its extension."""
        return os.path.splitext(self.filename)[0]

    @property
    def extension(self) -> str:
        """Lowercased extension without the leading dot."""
        return os.path.splitext(self.filename)[1].lstrip('.').lower()

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'ArtworkRecord':
        return cls(
            nrn=(data.get('nrn') or '').strip(),
            nsn=(data.get('nsn') or '').strip(),
            path=(data.get('path') or '').strip(),
            size=int(data.get('size') or 0),
            cd_name=(data.get('cd_name') or '').strip(),
        )


@dataclass(frozen=True)
class ArtifactPaths:
    """
    Resolved locations of the source artwork and its two derivatives.

    Every path and URL must be populated; a partially resolved bundle
    is rejected at construction.

    Attributes:
        source_path: Local path of the image the derivatives are made from
        source_url: Public URL of the source image
        small_path: Local path of the small derivative
        small_url: Public URL of the small derivative
        thumbnail_path: Local path of the thumbnail derivative
        thumbnail_url: Public URL of the thumbnail derivative
        record: Catalog record the bundle was resolved from
    """
    source_path: str
    source_url: str
    small_path: str
    small_url: str
    thumbnail_path: str
    thumbnail_url: str
    record: Optional[ArtworkRecord] = None

    REQUIRED_FIELDS = (
        'source_path', 'source_url',
        'small_path', 'small_url',
        'thumbnail_path', 'thumbnail_url',
    )

    def __post_init__(self):
        missing = [name for name in self.REQUIRED_FIELDS if _blank(getattr(self, name))]
        if missing:
            raise ValidationError(
                f"Artifact paths incomplete, missing: {', '.join(missing)}")

    def to_dict(self) -> dict:
        data = {name: getattr(self, name) for name in self.REQUIRED_FIELDS}
        data['record'] = self.record.to_dict() if self.record else None
        return data
