"""Validates raw analysis JSON and converts it to and from ManuscriptAnalysis."""

from typing import Any

from palmleaf.inference.exceptions import AnalysisValidationError
from palmleaf.inference.models import ManuscriptAnalysis, RegionInfo, SourceInfo

_TEXT_FIELDS = ("transcription", "translation", "rawOCR")


def validate_and_build(data: dict[str, Any]) -> ManuscriptAnalysis:
    """Validate a parsed analysis payload and build a ManuscriptAnalysis.

    The payload uses the service wire names (rawOCR, sourceInfo, regionInfo).

    Raises:
        AnalysisValidationError: on any validation failure.
    """
    if not isinstance(data, dict):
        raise AnalysisValidationError("Analysis payload must be an object")
    for field in (*_TEXT_FIELDS, "sourceInfo"):
        if field not in data:
            raise AnalysisValidationError(f"Missing required top-level field: {field}")
    texts = {field: _require_str(data[field], field) for field in _TEXT_FIELDS}
    return ManuscriptAnalysis(
        transcription=texts["transcription"],
        translation=texts["translation"],
        raw_ocr=texts["rawOCR"],
        source_info=_build_source_info(data["sourceInfo"]),
        region_info=_build_region_info(data.get("regionInfo")),
    )


def serialize_analysis(analysis: ManuscriptAnalysis) -> dict[str, Any]:
    """Convert an analysis back to the wire shape accepted by validate_and_build."""
    payload: dict[str, Any] = {
        "transcription": analysis.transcription,
        "translation": analysis.translation,
        "rawOCR": analysis.raw_ocr,
        "sourceInfo": {
            "detectedSource": analysis.source_info.detected_source,
            "section": analysis.source_info.section,
            "briefExplanation": analysis.source_info.brief_explanation,
        },
        "regionInfo": None,
    }
    if analysis.region_info is not None:
        payload["regionInfo"] = {
            "region": analysis.region_info.region,
            "confidence": analysis.region_info.confidence,
            "reasoning": analysis.region_info.reasoning,
        }
    return payload


def _require_str(raw: Any, name: str) -> str:
    if not isinstance(raw, str):
        raise AnalysisValidationError(f"'{name}' must be a string")
    return raw


def _build_source_info(raw: Any) -> SourceInfo:
    if not isinstance(raw, dict):
        raise AnalysisValidationError("'sourceInfo' must be an object")
    return SourceInfo(
        detected_source=_require_str(raw.get("detectedSource"), "sourceInfo.detectedSource"),
        section=_require_str(raw.get("section"), "sourceInfo.section"),
        brief_explanation=_require_str(
            raw.get("briefExplanation"), "sourceInfo.briefExplanation"
        ),
    )


def _build_region_info(raw: Any) -> RegionInfo | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise AnalysisValidationError("'regionInfo' must be an object or null")
    return RegionInfo(
        region=_require_str(raw.get("region"), "regionInfo.region"),
        confidence=_require_str(raw.get("confidence"), "regionInfo.confidence"),
        reasoning=_require_str(raw.get("reasoning"), "regionInfo.reasoning"),
    )
