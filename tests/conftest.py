import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'pkgsync' and tests/ as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from helpers.fakes import FakeSnapshot, InMemoryRegistry, RecordingRebuilder
from helpers.manifests import write_project
from pkgsync.core.logging_setup import reset_logging_for_tests


@pytest.fixture(autouse=True)
def _isolate_pkgsync_env(monkeypatch: pytest.MonkeyPatch):
    """Drop PKGSYNC_* variables so config loading only sees what a test sets."""
    import os

    for key in list(os.environ):
        if key.startswith("PKGSYNC_"):
            monkeypatch.delenv(key, raising=False)
    yield
    reset_logging_for_tests()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project root with composer.json and freshly generated manifests."""
    write_project(tmp_path)
    return tmp_path


@pytest.fixture
def registry(tmp_path: Path) -> InMemoryRegistry:
    return InMemoryRegistry(root_dir=tmp_path)


@pytest.fixture
def snapshot() -> FakeSnapshot:
    return FakeSnapshot([])


@pytest.fixture
def rebuilders() -> tuple[RecordingRebuilder, RecordingRebuilder]:
    return RecordingRebuilder("repository"), RecordingRebuilder("discovery")
