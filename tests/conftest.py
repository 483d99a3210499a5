"""Shared pytest fixtures for alltz tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from alltz.config.store import ConfigStore
from alltz.database.cities import CityDatabase
from alltz.models.zones import ZoneRegistry

# Mid-July: northern DST in effect, southern DST not
SUMMER_NOW = datetime(2024, 7, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def database():
    """The bundled city database, loaded once."""
    return CityDatabase.load()


@pytest.fixture
def now():
    return SUMMER_NOW


@pytest.fixture
def config_file(tmp_path, monkeypatch) -> Path:
    """Point ALLTZ_CONFIG at a file under tmp_path (not created yet)."""
    path = tmp_path / "alltz" / "config.json"
    monkeypatch.setenv("ALLTZ_CONFIG", str(path))
    return path


@pytest.fixture
def store(config_file):
    return ConfigStore(config_file)


@pytest.fixture
def registry_factory(database, now):
    """Build a registry from city keys, e.g. registry_factory("London", "Tokyo")."""

    def _make(*names, reference_time=None):
        registry = ZoneRegistry(database, reference_time=reference_time or now)
        for name in names:
            city = database.find(name)
            assert city is not None, f"test city {name!r} missing from database"
            registry.add(city)
        return registry

    return _make
