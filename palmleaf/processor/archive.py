"""Zip archive of one stored manuscript: images, text layers and a combined report."""

import mimetypes
import zipfile
from pathlib import Path

from palmleaf.database.models import ManuscriptRecord
from palmleaf.images.encoding import parse_encoded_image
from palmleaf.inference.models import ManuscriptAnalysis
from palmleaf.processor.exceptions import ArchiveError

REPORT_DIVIDER = "-----------------------------"
REPORT_RULE = "============================="


def _image_name(stem: str, encoded: str) -> tuple[str, bytes]:
    image = parse_encoded_image(encoded)
    extension = mimetypes.guess_extension(image.mime_type) or ".img"
    return f"{stem}{extension}", image.to_bytes()


def build_report(analysis: ManuscriptAnalysis) -> str:
    """Render the combined plain-text report for an analysis."""
    source = analysis.source_info
    lines = [
        "PALM-LEAF MANUSCRIPT ANALYSIS",
        REPORT_RULE,
        "",
        "[RAW OCR EXTRACTION]",
        analysis.raw_ocr,
        "",
        REPORT_DIVIDER,
        "",
        "[TRANSCRIPTION - MODERN TAMIL]",
        analysis.transcription,
        "",
        REPORT_DIVIDER,
        "",
        "[TRANSLATION - ENGLISH]",
        analysis.translation,
        "",
        REPORT_DIVIDER,
        "[SOURCE IDENTIFICATION]",
        f"Work: {source.detected_source}",
        f"Section: {source.section}",
        f"Context: {source.brief_explanation}",
    ]
    if analysis.region_info is not None:
        region = analysis.region_info
        lines += [
            "",
            REPORT_DIVIDER,
            "[REGION]",
            f"Region: {region.region} ({region.confidence} confidence)",
            f"Reasoning: {region.reasoning}",
        ]
    lines += ["", REPORT_RULE, "Generated by palmleaf", ""]
    return "\n".join(lines)


def archive_members(record: ManuscriptRecord) -> list[tuple[str, bytes]]:
    """Return (name, content) pairs for every artifact the record holds.

    Absent artifacts are skipped: a record without a restored image has no
    restored image entry, one without analysis has no text files.

    Raises:
        InvalidImageEncodingError: if a stored image is not a valid encoded image.
    """
    members = [_image_name("original_manuscript", record.original_image)]
    if record.restored_image is not None:
        members.append(_image_name("restored_manuscript", record.restored_image))
    analysis = record.analysis
    if analysis is not None:
        members += [
            ("raw_ocr.txt", analysis.raw_ocr.encode("utf-8")),
            ("transcription_tamil.txt", analysis.transcription.encode("utf-8")),
            ("translation_english.txt", analysis.translation.encode("utf-8")),
            ("full_report.txt", build_report(analysis).encode("utf-8")),
        ]
    return members


def write_archive(record: ManuscriptRecord, destination: Path) -> list[str]:
    """Write the record's archive to ``destination`` and return the member names.

    Raises:
        ArchiveError: if the file cannot be written.
    """
    members = archive_members(record)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, content in members:
                archive.writestr(name, content)
    except OSError as exc:
        raise ArchiveError(f"Failed to write archive {destination}: {exc}") from exc
    return [name for name, _ in members]
