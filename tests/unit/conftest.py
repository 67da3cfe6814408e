from unittest.mock import MagicMock

import pytest

from palmleaf.database.repositories.manuscript_repository import ManuscriptRepository
from palmleaf.inference.models import ManuscriptAnalysis
from tests.unit.fakes import FakeAnalyzer, FakeRestorer


@pytest.fixture()
def restorer() -> FakeRestorer:
    return FakeRestorer()


@pytest.fixture()
def analyzer(sample_analysis: ManuscriptAnalysis) -> FakeAnalyzer:
    return FakeAnalyzer(sample_analysis)


@pytest.fixture()
def repository() -> MagicMock:
    repo = MagicMock(spec=ManuscriptRepository)
    repo.create.return_value = 1
    repo.list_all.return_value = []
    return repo
