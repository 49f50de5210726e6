import pytest

from app.core import config as config_module


@pytest.fixture(autouse=True)
def reset_config_state(monkeypatch):
    monkeypatch.setattr(config_module, "_config", None)
    monkeypatch.setattr(config_module, "_running_in_docker", False)
