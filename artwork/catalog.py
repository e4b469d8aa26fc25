"""
Catalog - Lookup of artwork records by catalog key.

The production catalog is an external datastore; these implementations
back the same interface with memory or a JSON file.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import ValidationError
from .models import ArtworkRecord, CatalogKey, DEFAULT_PRODUCT_TYPE


class ArtworkCatalog:
    """Read-only lookup of artwork records."""

    def get_artwork_record(self, key: CatalogKey) -> Optional[ArtworkRecord]:
        raise NotImplementedError


class MemoryCatalog(ArtworkCatalog):
    """
    Dict-backed catalog.

    Also tracks the product type of each key so that batch builds can
    walk every product.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._records: Dict[CatalogKey, ArtworkRecord] = {}
        self._product_types: Dict[CatalogKey, str] = {}

    def add(self, record: ArtworkRecord, product_type: Optional[str] = None) -> CatalogKey:
        """Add or replace the record for its key."""
        key = record.catalog_key
        self._records[key] = record
        self._product_types[key] = product_type or DEFAULT_PRODUCT_TYPE
        return key

    def add_product(self, key: CatalogKey, product_type: Optional[str] = None) -> None:
        """Register a product that has no artwork record."""
        self._product_types[key] = product_type or DEFAULT_PRODUCT_TYPE

    def get_artwork_record(self, key: CatalogKey) -> Optional[ArtworkRecord]:
        record = self._records.get(key)
        if record is None:
            self.logger.debug(f"No artwork record for {key}")
        return record

    def items(self) -> Iterator[Tuple[CatalogKey, str]]:
        """Yield (key, product_type) for every product in insertion order."""
        yield from self._product_types.items()

    def __len__(self) -> int:
        return len(self._product_types)


class JsonCatalog(MemoryCatalog):
    """
    Catalog loaded from a JSON file of the form::

        {"records": [{"nrn": "...", "nsn": "...", "path": "...",
                      "size": 0, "cd_name": "...", "product_type": "..."}]}

    Entries without a ``path`` register the product with no artwork.
    """

    def __init__(self, filepath: Optional[str] = None, logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self.filepath = filepath
        self.invalid: List[str] = []

    @classmethod
    def load(cls, filepath: str, logger: Optional[logging.Logger] = None) -> 'JsonCatalog':
        """Load a catalog from a JSON file."""
        catalog = cls(filepath, logger)
        with open(Path(filepath), 'r') as f:
            data = json.load(f)

        for i, entry in enumerate(data.get('records', [])):
            try:
                record = ArtworkRecord.from_dict(entry)
                key = record.catalog_key
            except (ValidationError, ValueError, TypeError) as e:
                msg = f"Skipping catalog entry {i}: {e}"
                catalog.logger.warning(msg)
                catalog.invalid.append(msg)
                continue
            if record.path:
                catalog.add(record, entry.get('product_type'))
            else:
                catalog.add_product(key, entry.get('product_type'))

        catalog.logger.info(f"Loaded {len(catalog)} catalog entries from {filepath}")
        return catalog

    def save(self, filepath: Optional[str] = None) -> None:
        """Write the catalog back out as JSON."""
        target = Path(filepath or self.filepath)
        target.parent.mkdir(parents=True, exist_ok=True)
        records = []
        for key, product_type in self.items():
            record = self._records.get(key)
            entry = record.to_dict() if record else {'nrn': key.nrn, 'nsn': key.nsn}
            entry['product_type'] = product_type
            records.append(entry)
        with open(target, 'w') as f:
            json.dump({'records': records}, f, indent=2)
