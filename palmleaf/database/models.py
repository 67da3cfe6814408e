from dataclasses import dataclass

from palmleaf.inference.models import ManuscriptAnalysis


@dataclass(frozen=True)
class NewManuscriptRecord:
    """A completed submission that has not been stored yet."""

    timestamp: int
    original_image: str
    restored_image: str | None = None
    analysis: ManuscriptAnalysis | None = None


@dataclass(frozen=True)
class ManuscriptRecord:
    """Represents a row from the manuscripts table."""

    id: int
    timestamp: int
    original_image: str
    restored_image: str | None = None
    analysis: ManuscriptAnalysis | None = None
