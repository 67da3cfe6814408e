import copy

import pytest

from palmleaf.inference.exceptions import AnalysisValidationError
from palmleaf.inference.models import ManuscriptAnalysis
from palmleaf.inference.validator import serialize_analysis, validate_and_build


class TestValidateAndBuild:
    def test_builds_full_analysis(
        self, analysis_payload: dict[str, object], sample_analysis: ManuscriptAnalysis
    ) -> None:
        assert validate_and_build(analysis_payload) == sample_analysis

    def test_region_info_is_optional(self, analysis_payload: dict[str, object]) -> None:
        del analysis_payload["regionInfo"]

        result = validate_and_build(analysis_payload)

        assert result.region_info is None

    def test_null_region_info(self, analysis_payload: dict[str, object]) -> None:
        analysis_payload["regionInfo"] = None

        assert validate_and_build(analysis_payload).region_info is None

    @pytest.mark.parametrize("field", ["transcription", "translation", "rawOCR", "sourceInfo"])
    def test_missing_required_field(self, analysis_payload: dict[str, object], field: str) -> None:
        del analysis_payload[field]

        with pytest.raises(AnalysisValidationError, match=f"Missing required top-level field: {field}"):
            validate_and_build(analysis_payload)

    def test_non_string_text(self, analysis_payload: dict[str, object]) -> None:
        analysis_payload["translation"] = 42

        with pytest.raises(AnalysisValidationError, match="'translation' must be a string"):
            validate_and_build(analysis_payload)

    def test_source_info_must_be_object(self, analysis_payload: dict[str, object]) -> None:
        analysis_payload["sourceInfo"] = "Thirukkural"

        with pytest.raises(AnalysisValidationError, match="'sourceInfo' must be an object"):
            validate_and_build(analysis_payload)

    def test_source_info_fields_required(self, analysis_payload: dict[str, object]) -> None:
        broken = copy.deepcopy(analysis_payload)
        del broken["sourceInfo"]["section"]  # type: ignore[index]

        with pytest.raises(AnalysisValidationError, match="sourceInfo.section"):
            validate_and_build(broken)

    def test_region_info_must_be_object(self, analysis_payload: dict[str, object]) -> None:
        analysis_payload["regionInfo"] = ["Thanjavur"]

        with pytest.raises(AnalysisValidationError, match="'regionInfo' must be an object or null"):
            validate_and_build(analysis_payload)

    def test_payload_must_be_object(self) -> None:
        with pytest.raises(AnalysisValidationError, match="must be an object"):
            validate_and_build([])  # type: ignore[arg-type]


class TestSerializeAnalysis:
    def test_uses_service_field_names(
        self, analysis_payload: dict[str, object], sample_analysis: ManuscriptAnalysis
    ) -> None:
        assert serialize_analysis(sample_analysis) == analysis_payload

    def test_serializes_missing_region_as_null(
        self, analysis_payload: dict[str, object], sample_analysis: ManuscriptAnalysis
    ) -> None:
        analysis = ManuscriptAnalysis(
            transcription=sample_analysis.transcription,
            translation=sample_analysis.translation,
            raw_ocr=sample_analysis.raw_ocr,
            source_info=sample_analysis.source_info,
        )

        payload = serialize_analysis(analysis)

        assert payload["regionInfo"] is None
        assert validate_and_build(payload) == analysis
