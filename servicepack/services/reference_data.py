"""Bundled country reference dataset.

Loads the packaged ``countries.json`` once into immutable ``CountryRecord``
objects and resolves ISO alpha-2 or alpha-3 codes against it. The dataset is
process-wide read-only state shared by every geolocation lookup.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ..config import config
from ..errors import DatasetLoadError
from ..models import CountryRecord

logger = logging.getLogger(__name__)


class ReferenceDataset:
    """Read-only table of country records."""

    def __init__(self, records: tuple[CountryRecord, ...]):
        """Wrap already validated records.

        Args:
            records: Country records with unique alpha-2 and alpha-3 codes.
        """
        self._records = tuple(records)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "ReferenceDataset":
        """Parse the country dataset from disk.

        Args:
            path: JSON file to read, defaults to the configured dataset path.

        Returns:
            Loaded dataset.

        Raises:
            DatasetLoadError: File missing, unreadable, malformed, or with
                duplicate country codes.
        """
        dataset_path = Path(path) if path is not None else Path(config.dataset.path)

        try:
            with open(dataset_path, encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            raise DatasetLoadError(f"Cannot read country dataset {dataset_path}: {e}") from e
        except ValueError as e:
            raise DatasetLoadError(f"Country dataset {dataset_path} is not valid JSON: {e}") from e

        if not isinstance(raw, list):
            raise DatasetLoadError(f"Country dataset {dataset_path} must be a list of records")

        try:
            records = tuple(CountryRecord.model_validate(item) for item in raw)
        except ValidationError as e:
            raise DatasetLoadError(f"Invalid record in country dataset {dataset_path}: {e}") from e

        _check_unique_codes(records)

        logger.info(f"Loaded {len(records)} country records from {dataset_path}")
        return cls(records)

    @property
    def records(self) -> tuple[CountryRecord, ...]:
        """All country records in file order."""
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def find_by_code(self, code: str) -> CountryRecord | None:
        """Find the record whose alpha-2 or alpha-3 code equals ``code``.

        Matching is exact and case-sensitive. A code unknown to the dataset
        (e.g., a territory missing from the reference set) is a valid outcome.

        Args:
            code: ISO 3166-1 alpha-2 or alpha-3 country code.

        Returns:
            Matching record or None.
        """
        for record in self._records:
            if record.alpha2 == code or record.alpha3 == code:
                return record

        logger.debug(f"Country code {code!r} not found in reference dataset")
        return None


def _check_unique_codes(records: tuple[CountryRecord, ...]) -> None:
    seen: set[str] = set()
    for record in records:
        for code in (record.alpha2, record.alpha3):
            if code in seen:
                raise DatasetLoadError(f"Duplicate country code {code!r} in country dataset")
            seen.add(code)


# Process-wide dataset, loaded on first use
_reference_dataset: ReferenceDataset | None = None


def get_reference_dataset() -> ReferenceDataset:
    """Get the shared reference dataset, loading it on first call."""
    global _reference_dataset
    if _reference_dataset is None:
        _reference_dataset = ReferenceDataset.load()
    return _reference_dataset


def reset_reference_dataset() -> None:
    """Drop the shared dataset so the next call reloads it (for tests)."""
    global _reference_dataset
    _reference_dataset = None
