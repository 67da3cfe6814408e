import pytest

from palmleaf.inference.models import ManuscriptAnalysis, RegionInfo, SourceInfo


@pytest.fixture()
def jpeg_bytes() -> bytes:
    """JPEG markers around filler; nothing here decodes pixels."""
    return b"\xff\xd8\xff\xe0\x00\x10JFIF\x00palm-leaf\xff\xd9"


@pytest.fixture()
def analysis_payload() -> dict[str, object]:
    """Analysis JSON in the shape the service returns it."""
    return {
        "rawOCR": "அகர முதல",
        "transcription": "அகர முதல எழுத்தெல்லாம்",
        "translation": "A is the first of all letters",
        "sourceInfo": {
            "detectedSource": "Thirukkural",
            "section": "Kural 1",
            "briefExplanation": "Opening couplet of the first chapter.",
        },
        "regionInfo": {
            "region": "Thanjavur",
            "confidence": "medium",
            "reasoning": "Letter forms typical of the Thanjavur scriptoria.",
        },
    }


@pytest.fixture()
def sample_analysis() -> ManuscriptAnalysis:
    return ManuscriptAnalysis(
        transcription="அகர முதல எழுத்தெல்லாம்",
        translation="A is the first of all letters",
        raw_ocr="அகர முதல",
        source_info=SourceInfo(
            detected_source="Thirukkural",
            section="Kural 1",
            brief_explanation="Opening couplet of the first chapter.",
        ),
        region_info=RegionInfo(
            region="Thanjavur",
            confidence="medium",
            reasoning="Letter forms typical of the Thanjavur scriptoria.",
        ),
    )
