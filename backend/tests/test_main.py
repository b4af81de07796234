from fastapi.testclient import TestClient


def test_health_check(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data == {"status": "ok", "webhook_verification": "enforced"}
    # secrets never leave the process
    assert "whsec_test" not in response.text
    assert "sk_test" not in response.text


def test_health_reports_bypass(bypass_client: TestClient):
    response = bypass_client.get("/health")
    assert response.json()["webhook_verification"] == "bypassed"
