from dataclasses import dataclass


@dataclass(frozen=True)
class SourceInfo:
    """Literary provenance identified for the text."""

    detected_source: str
    section: str
    brief_explanation: str


@dataclass(frozen=True)
class RegionInfo:
    """Geographic origin guess for the manuscript."""

    region: str
    confidence: str
    reasoning: str


@dataclass(frozen=True)
class ManuscriptAnalysis:
    """Output of the analysis service."""

    transcription: str
    translation: str
    raw_ocr: str
    source_info: SourceInfo
    region_info: RegionInfo | None = None
