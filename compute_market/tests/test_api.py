"""Tests for the ledger API endpoints."""


def register(client, headers, resources=1000, price=10):
    return client.post(
        "/providers/", json={"resources": resources, "price_per_unit": price}, headers=headers
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_register_and_get_provider(client, auth_headers):
    response = register(client, auth_headers("provider1"))
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = client.get("/providers/provider1")
    assert response.status_code == 200
    assert response.json() == {
        "identity": "provider1",
        "resources": 1000,
        "price_per_unit": 10,
        "earnings": 0,
    }


def test_register_twice_conflicts(client, auth_headers):
    register(client, auth_headers("provider1"))
    response = register(client, auth_headers("provider1"))

    assert response.status_code == 409
    assert response.json() == {
        "error": "already_exists",
        "code": 103,
        "detail": "Provider already registered",
    }


def test_update_provider(client, auth_headers):
    headers = auth_headers("provider1")
    register(client, headers)

    response = client.put("/providers/me", json={"resources": 1500, "price_per_unit": 15}, headers=headers)

    assert response.status_code == 200
    provider = client.get("/providers/provider1").json()
    assert provider["resources"] == 1500
    assert provider["price_per_unit"] == 15


def test_update_unregistered_provider(client, auth_headers):
    response = client.put(
        "/providers/me", json={"resources": 1, "price_per_unit": 1}, headers=auth_headers("nobody")
    )
    assert response.status_code == 404
    assert response.json()["code"] == 101


def test_unknown_provider_and_consumer_reads(client):
    assert client.get("/providers/ghost").status_code == 404
    assert client.get("/consumers/ghost").status_code == 404
    assert client.get("/jobs/7").status_code == 404


def test_add_funds(client, auth_headers):
    headers = auth_headers("consumer1")
    client.post("/consumers/me/funds", json={"amount": 600}, headers=headers)
    response = client.post("/consumers/me/funds", json={"amount": 400}, headers=headers)

    assert response.status_code == 200
    assert client.get("/consumers/consumer1").json() == {"identity": "consumer1", "balance": 1000}


def test_negative_values_are_rejected_by_schema(client, auth_headers):
    headers = auth_headers("consumer1")

    assert client.post("/consumers/me/funds", json={"amount": -5}, headers=headers).status_code == 422
    assert register(client, headers, resources=-1).status_code == 422
    assert client.get("/consumers/consumer1").status_code == 404


def test_full_job_lifecycle(client, auth_headers):
    provider = auth_headers("provider1")
    consumer = auth_headers("consumer1")
    register(client, provider)
    client.post("/consumers/me/funds", json={"amount": 1000}, headers=consumer)

    response = client.post("/jobs/", json={"provider": "provider1", "resources": 50}, headers=consumer)
    assert response.status_code == 200
    assert response.json() == {"job_id": 1}

    job = client.get("/jobs/1").json()
    assert job == {
        "id": 1,
        "consumer": "consumer1",
        "provider": "provider1",
        "resources": 50,
        "total_cost": 500,
        "status": "active",
    }
    assert client.get("/providers/provider1").json()["resources"] == 950
    assert client.get("/consumers/consumer1").json()["balance"] == 500

    response = client.post("/jobs/1/complete", headers=provider)
    assert response.status_code == 200
    assert client.get("/jobs/1").json()["status"] == "completed"

    response = client.post("/providers/me/withdraw", headers=provider)
    assert response.status_code == 200
    assert response.json() == {"amount": 500}

    response = client.post("/providers/me/withdraw", headers=provider)
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_amount"


def test_request_compute_errors(client, auth_headers):
    consumer = auth_headers("consumer1")
    register(client, auth_headers("provider1"), resources=100, price=10)
    client.post("/consumers/me/funds", json={"amount": 50}, headers=consumer)

    response = client.post("/jobs/", json={"provider": "ghost", "resources": 1}, headers=consumer)
    assert response.status_code == 404

    response = client.post("/jobs/", json={"provider": "provider1", "resources": 101}, headers=consumer)
    assert response.status_code == 400
    assert response.json()["code"] == 104

    response = client.post("/jobs/", json={"provider": "provider1", "resources": 6}, headers=consumer)
    assert response.status_code == 402
    assert response.json()["error"] == "insufficient_balance"


def test_complete_job_authorization(client, auth_headers):
    provider = auth_headers("provider1")
    consumer = auth_headers("consumer1")
    register(client, provider)
    client.post("/consumers/me/funds", json={"amount": 1000}, headers=consumer)
    client.post("/jobs/", json={"provider": "provider1", "resources": 50}, headers=consumer)

    response = client.post("/jobs/1/complete", headers=consumer)
    assert response.status_code == 403
    assert response.json()["code"] == 102

    assert client.post("/jobs/1/complete", headers=provider).status_code == 200
    assert client.post("/jobs/1/complete", headers=provider).status_code == 403
    assert client.post("/jobs/2/complete", headers=provider).status_code == 404


def test_list_jobs(client, auth_headers):
    provider = auth_headers("provider1")
    consumer = auth_headers("consumer1")
    register(client, provider)
    client.post("/consumers/me/funds", json={"amount": 1000}, headers=consumer)
    for _ in range(3):
        client.post("/jobs/", json={"provider": "provider1", "resources": 10}, headers=consumer)
    client.post("/jobs/2/complete", headers=provider)

    assert [j["id"] for j in client.get("/jobs/").json()] == [1, 2, 3]
    assert [j["id"] for j in client.get("/jobs/", params={"status": "active"}).json()] == [1, 3]
    assert client.get("/jobs/", params={"consumer": "someone-else"}).json() == []
    assert client.get("/jobs/", params={"status": "bogus"}).status_code == 422


def test_metrics_count_ledger_operations(client, auth_headers):
    register(client, auth_headers("provider1"))
    register(client, auth_headers("provider1"))

    response = client.get("/metrics")

    assert response.status_code == 200
    body = response.text
    assert "compute_market_ledger_operations_total" in body
    assert 'outcome="already_exists"' in body


def test_amounts_beyond_64_bits(client, auth_headers):
    headers = auth_headers("consumer1")

    response = client.post("/consumers/me/funds", json={"amount": 2**63}, headers=headers)
    assert response.status_code == 200
    client.post("/consumers/me/funds", json={"amount": 2**63}, headers=headers)

    assert client.get("/consumers/consumer1").json()["balance"] == 2**64


def test_request_metrics_use_route_templates(client):
    for job_id in range(1000, 1005):
        assert client.get(f"/jobs/{job_id}").status_code == 404
    client.get("/no/such/path")

    body = client.get("/metrics").text
    series = [
        line for line in body.splitlines()
        if line.startswith("compute_market_http_requests_total{")
        and 'method="GET"' in line
        and 'status_code="404"' in line
    ]
    assert len([line for line in series if 'endpoint="/jobs/{job_id}"' in line]) == 1
    assert not any('endpoint="/jobs/10' in line for line in series)
    assert any('endpoint="unmatched"' in line for line in series)


def test_allocation_and_withdrawal_metrics(client, auth_headers):
    from prometheus_client import REGISTRY

    def sample(name):
        return REGISTRY.get_sample_value(name) or 0.0

    allocated = sample("compute_market_units_allocated_total")
    withdrawn = sample("compute_market_earnings_withdrawn_total")

    provider = auth_headers("provider1")
    consumer = auth_headers("consumer1")
    register(client, provider)
    client.post("/consumers/me/funds", json={"amount": 1000}, headers=consumer)
    client.post("/jobs/", json={"provider": "provider1", "resources": 50}, headers=consumer)
    client.post("/jobs/1/complete", headers=provider)
    client.post("/providers/me/withdraw", headers=provider)

    assert sample("compute_market_units_allocated_total") == allocated + 50
    assert sample("compute_market_earnings_withdrawn_total") == withdrawn + 500


def test_withdraw_without_earnings_message(client, auth_headers):
    headers = auth_headers("provider1")
    register(client, headers)

    response = client.post("/providers/me/withdraw", headers=headers)

    assert response.status_code == 400
    assert "no earnings to withdraw" in response.json()["detail"]


def test_no_root_endpoint(client):
    assert client.get("/").status_code == 404


def test_suite_uses_in_memory_app_database():
    from compute_market import config
    from compute_market.ledger_api.database import engine

    assert config.DATABASE_URL == "sqlite://"
    assert engine.url.database in (None, "")
