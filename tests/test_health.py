from fastapi.testclient import TestClient

from app.core.config import Env, load_config
from app.main import create_app


client = TestClient(create_app(load_config(Env.TEST, {})))


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready():
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"
    assert "server_readiness 1.0" in client.get("/metrics").text


def test_metrics():
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "server_liveness" in response.text
    assert 'env="test"' in response.text
