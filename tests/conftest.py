from pathlib import Path

import pytest

from src.adapters.fixture_store import FixtureSnapshotStore
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def rules_path() -> Path:
    return PROJECT_ROOT / "rules.yaml"


@pytest.fixture
def rules(rules_path: Path) -> Rules:
    """REAL rules from the project root (fail fast if missing)."""
    return load_rules(rules_path)


@pytest.fixture
def fixture_path(rules: Rules) -> Path:
    return PROJECT_ROOT / rules.fixtures.path


@pytest.fixture
def store(fixture_path: Path) -> FixtureSnapshotStore:
    """Snapshot store over the demo fixture."""
    return FixtureSnapshotStore.from_file(fixture_path)
