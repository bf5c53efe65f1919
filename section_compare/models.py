"""
Section Comparison Models v1.0.0
================================
Data classes for section comparison input and results.
"""

import re
import hashlib
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from config_logging import ValidationError

STATUS_MATCH = 'match'
STATUS_DIFFERENT = 'different'
STATUS_ADDED = 'added'
STATUS_MISSING = 'missing'

ALL_STATUSES = (STATUS_MATCH, STATUS_DIFFERENT, STATUS_ADDED, STATUS_MISSING)

_SLUG_RE = re.compile(r'[^a-z0-9]+')


class InvalidInputError(ValidationError):
    """A section violates the extractor contract (empty or missing name)."""

    def __init__(self, message: str, side: Optional[str] = None,
                 index: Optional[int] = None):
        super().__init__(message, field='name', code='INVALID_INPUT',
                         side=side, index=index)
        self.side = side
        self.index = index


@dataclass(frozen=True)
class Section:
    """
    A named unit of extracted document text.

    Attributes:
        name: Identifies the logical field or region (non-empty)
        text: Extracted text content (possibly empty)
    """
    name: str
    text: str = ""

    @classmethod
    def coerce(cls, value: Any, side: str = 'source', index: int = 0) -> 'Section':
        """
        Build a Section from a Section, a mapping, or a (name, text) pair.

        Raises:
            InvalidInputError: if the name is absent, not a string, or empty,
                               or if the text is not a string
        """
        if isinstance(value, Section):
            name, text = value.name, value.text
        elif isinstance(value, dict):
            name, text = value.get('name'), value.get('text')
        elif isinstance(value, (tuple, list)) and len(value) == 2:
            name, text = value
        else:
            raise InvalidInputError(
                f"{side} section {index} is not a section: {type(value).__name__}",
                side=side, index=index
            )

        if not isinstance(name, str) or not name:
            raise InvalidInputError(
                f"{side} section {index} has an empty or missing name",
                side=side, index=index
            )

        if text is None:
            text = ""
        if not isinstance(text, str):
            raise InvalidInputError(
                f"{side} section {index} ('{name}') text must be a string, "
                f"got {type(text).__name__}",
                side=side, index=index
            )

        if isinstance(value, Section):
            return value
        return cls(name=name, text=text)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {'name': self.name, 'text': self.text}


def record_id(section_name: str) -> str:
    """
    Stable record identifier for a section name.

    A readable slug of the name plus a short digest of the exact name, so
    names that slug identically ("Title Page" / "title-page") stay distinct.
    """
    slug = _SLUG_RE.sub('-', section_name.lower()).strip('-') or 'section'
    digest = hashlib.sha1(section_name.encode('utf-8')).hexdigest()[:8]
    return f"{slug[:48]}-{digest}"


@dataclass(frozen=True)
class ComparisonRecord:
    """
    Comparison outcome for one section name.

    Attributes:
        id: Stable identifier derived from the section name
        section: Section name
        source_content: Source text (empty string for additions)
        target_content: Target text (empty string for missing sections)
        status: One of 'match', 'different', 'added', 'missing'
        similarity: Integer similarity score 0-100
    """
    id: str
    section: str
    source_content: str
    target_content: str
    status: str
    similarity: int

    def __post_init__(self):
        if self.status not in ALL_STATUSES:
            raise ValueError(f"Unknown status: {self.status}")
        if not 0 <= self.similarity <= 100:
            raise ValueError(f"Similarity out of range: {self.similarity}")

    @property
    def is_change(self) -> bool:
        """Whether this record differs between source and target."""
        return self.status != STATUS_MATCH

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'section': self.section,
            'source_content': self.source_content,
            'target_content': self.target_content,
            'status': self.status,
            'similarity': self.similarity
        }


@dataclass(frozen=True)
class ComparisonReport:
    """
    Complete, ordered comparison result for one source/target pair.

    Records appear in first-seen order: source names first, then
    target-only names in target order.
    """
    records: Tuple[ComparisonRecord, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any iterable but store an immutable tuple
        object.__setattr__(self, 'records', tuple(self.records))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ComparisonRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> ComparisonRecord:
        return self.records[index]

    @property
    def sections(self) -> List[str]:
        """Section names in report order."""
        return [r.section for r in self.records]

    def get(self, section_name: str) -> Optional[ComparisonRecord]:
        """Look up the record for a section name."""
        for record in self.records:
            if record.section == section_name:
                return record
        return None

    def by_status(self, status: str) -> List[ComparisonRecord]:
        """All records with the given status, in report order."""
        return [r for r in self.records if r.status == status]

    @property
    def stats(self) -> Dict[str, int]:
        """Record counts per status plus the total."""
        counts = {status: 0 for status in ALL_STATUSES}
        for record in self.records:
            counts[record.status] += 1
        counts['total'] = len(self.records)
        return counts

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'records': [r.to_dict() for r in self.records],
            'stats': self.stats
        }
