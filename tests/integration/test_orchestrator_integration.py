import asyncio
import zipfile
from pathlib import Path

import pytest

from palmleaf.config.settings import Settings
from palmleaf.database.repositories.manuscript_repository import ManuscriptRepository
from palmleaf.images.encoding import encode_image
from palmleaf.inference.example_client_adapter import ExampleClientAdapter
from palmleaf.processor.orchestrator import build_orchestrator
from palmleaf.processor.redo import build_redo_controller
from palmleaf.processor.state import ProcessingState


@pytest.mark.integration
class TestOrchestratorWithExampleProvider:
    def test_submit_file_commits_one_record(
        self,
        test_settings: Settings,
        repository: ManuscriptRepository,
        created_ids: list[int],
        tmp_path: Path,
        jpeg_bytes: bytes,
    ) -> None:
        path = tmp_path / "leaf.jpg"
        path.write_bytes(jpeg_bytes)
        orchestrator = build_orchestrator(test_settings)

        record_id = asyncio.run(orchestrator.submit_file(path))
        created_ids.append(record_id)

        stored = repository.find_by_id(record_id)
        assert stored is not None
        assert stored.original_image == encode_image(jpeg_bytes, "image/jpeg")
        assert stored.restored_image is not None
        assert stored.analysis is not None
        source = ExampleClientAdapter.DEFAULT_ANALYSIS["sourceInfo"]
        assert stored.analysis.source_info.detected_source == source["detectedSource"]

        view = orchestrator.session.view
        assert view.committed_id == record_id
        assert record_id in [r.id for r in view.records]
        assert view.processing == ProcessingState()

    def test_redo_leaves_stored_record_unchanged(
        self,
        test_settings: Settings,
        repository: ManuscriptRepository,
        created_ids: list[int],
        jpeg_bytes: bytes,
    ) -> None:
        orchestrator = build_orchestrator(test_settings)
        redo = build_redo_controller(test_settings, orchestrator.session)

        async def scenario() -> int:
            record_id = await orchestrator.submit(jpeg_bytes, "image/jpeg")
            await redo.retry()
            await redo.edit(None, "darken the faded letters")
            return record_id

        record_id = asyncio.run(scenario())
        created_ids.append(record_id)

        before = repository.find_by_id(record_id)
        assert before is not None
        assert asyncio.run(orchestrator.open_record(record_id)) == before
        assert len([r for r in repository.list_all() if r.id == record_id]) == 1

    def test_delete_record_refreshes_view(
        self,
        test_settings: Settings,
        created_ids: list[int],
        jpeg_bytes: bytes,
    ) -> None:
        orchestrator = build_orchestrator(test_settings)

        async def scenario() -> int:
            record_id = await orchestrator.submit(jpeg_bytes, "image/jpeg")
            await orchestrator.delete_record(record_id)
            return record_id

        record_id = asyncio.run(scenario())
        created_ids.append(record_id)

        assert record_id not in [r.id for r in orchestrator.session.view.records]

    def test_export_stored_record(
        self,
        test_settings: Settings,
        created_ids: list[int],
        tmp_path: Path,
        jpeg_bytes: bytes,
    ) -> None:
        orchestrator = build_orchestrator(test_settings)

        async def scenario() -> tuple[int, list[str] | None]:
            record_id = await orchestrator.submit(jpeg_bytes, "image/jpeg")
            return record_id, await orchestrator.export_record(record_id, tmp_path / "leaf.zip")

        record_id, members = asyncio.run(scenario())
        created_ids.append(record_id)

        with zipfile.ZipFile(tmp_path / "leaf.zip") as archive:
            assert archive.namelist() == members
            assert archive.read("original_manuscript.jpg") == jpeg_bytes
        assert "full_report.txt" in members
