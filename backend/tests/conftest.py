from fastapi.testclient import TestClient
import pytest

from backend.tests.utils.wcag_trees import image_scenario_tree
from backend.utils.app_helpers import reset_schedule_service_cache


@pytest.fixture(scope="session")
def client():
    # Import lazily so tests that only exercise the builders skip app start-up.
    from backend.app import app

    return TestClient(app)


@pytest.fixture(autouse=True)
def _bundled_dataset(monkeypatch):
    """Point every test at the bundled sample dataset with default settings."""
    for name in ("WCAG_DATA_PATH", "WCAG_TECHNIQUES_BASE_URL", "SCHEDULE_DEFAULT_LEVELS"):
        monkeypatch.delenv(name, raising=False)
    reset_schedule_service_cache()
    yield
    reset_schedule_service_cache()


@pytest.fixture
def image_tree():
    return image_scenario_tree()
