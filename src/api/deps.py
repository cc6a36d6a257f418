import os
from datetime import datetime
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from src.adapters.clock import SystemClock
from src.adapters.fixture_store import FixtureSnapshotStore
from src.components.entitlement import EntitlementConfig
from src.components.entitlement import load_config_from_rules as entitlement_config_from_rules
from src.components.ranking import RankerConfig
from src.components.ranking import load_config_from_rules as ranker_config_from_rules
from src.components.search import SearchConfig
from src.components.search import load_config_from_rules as search_config_from_rules
from src.ports.clock import ClockPort
from src.ports.store import SnapshotStorePort
from src.rules.loader import load_rules, resolve_rules_path
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.rules_path = resolve_rules_path()
        self.fixture_override = os.environ.get("MOYO_FIXTURE_PATH")

    def fixture_path(self, rules: Rules) -> Path:
        """MOYO_FIXTURE_PATH, else the rules entry (relative to the rules file)."""
        if self.fixture_override:
            return Path(self.fixture_override)
        path = Path(rules.fixtures.path)
        if path.is_absolute():
            return path
        return self.rules_path.parent / path


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_entitlement_config(rules: Rules = Depends(get_rules)) -> EntitlementConfig:
    return entitlement_config_from_rules(rules.as_dict())


def get_ranker_config(rules: Rules = Depends(get_rules)) -> RankerConfig:
    return ranker_config_from_rules(rules.as_dict())


def get_search_config(rules: Rules = Depends(get_rules)) -> SearchConfig:
    return search_config_from_rules(rules.as_dict())


# --- Snapshot store ---
_store_instance: FixtureSnapshotStore | None = None


def get_store(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> SnapshotStorePort:
    """Get snapshot store singleton."""
    global _store_instance
    if _store_instance is None:
        _store_instance = FixtureSnapshotStore.from_file(settings.fixture_path(rules))
    return _store_instance


# --- Time ---
_clock_instance: SystemClock | None = None


def get_clock() -> ClockPort:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


def get_now(
    rules: Rules = Depends(get_rules),
    clock: ClockPort = Depends(get_clock),
) -> datetime | None:
    """Reference time for ranking; None lets the core use the snapshot's own."""
    if rules.explore.use_wall_clock:
        return clock.now_utc()
    return None
