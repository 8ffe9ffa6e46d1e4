"""API tests for credential issuing, SDP negotiation and prefetch."""

from conftest import ANSWER_SDP, EPHEMERAL_KEY

OFFER_SDP = "v=0\r\no=- 1 2 IN IP4 127.0.0.1\r\ns=-\r\nm=audio 9 UDP/TLS/RTP/SAVPF 111\r\n"


def _negotiation_body(**overrides) -> dict:
    body = {
        "sessionId": "sess-1",
        "offerSdp": OFFER_SDP,
        "model": "gpt-4o-realtime-preview",
        "clientSecret": EPHEMERAL_KEY,
    }
    body.update(overrides)
    return body


def test_negotiate_returns_answer_verbatim(client, provider_stub, alice) -> None:
    resp = client.post("/api/v1/realtime/negotiate", headers=alice, json=_negotiation_body())

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "sdp": ANSWER_SDP}

    (request,) = provider_stub.requests
    assert request.url.path == "/v1/realtime"
    assert request.url.params["model"] == "gpt-4o-realtime-preview"
    assert request.headers["Authorization"] == f"Bearer {EPHEMERAL_KEY}"
    assert request.headers["Content-Type"] == "application/sdp"
    assert request.content.decode() == OFFER_SDP


def test_negotiate_never_uses_service_key(client, provider_stub, alice) -> None:
    client.post("/api/v1/realtime/negotiate", headers=alice, json=_negotiation_body())

    (request,) = provider_stub.requests
    assert "sk-service-key" not in request.headers["Authorization"]


def test_negotiate_passes_through_provider_401(client, provider_stub, alice) -> None:
    provider_stub.sdp_status = 401
    provider_stub.sdp_body = '{"error": {"message": "Invalid ephemeral key"}}'

    resp = client.post(
        "/api/v1/realtime/negotiate",
        headers=alice,
        json=_negotiation_body(clientSecret="ek_forged"),
    )

    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["status"] == 401
    assert body["details"] == provider_stub.sdp_body
    assert body["code"] == "UPSTREAM_ERROR"


def test_negotiate_is_not_retried(client, provider_stub, alice) -> None:
    provider_stub.sdp_status = 503

    resp = client.post("/api/v1/realtime/negotiate", headers=alice, json=_negotiation_body())

    assert resp.status_code == 503
    assert len(provider_stub.requests) == 1


def test_negotiate_network_failure_is_structured(client, provider_stub, alice) -> None:
    provider_stub.raise_network_error = True

    resp = client.post("/api/v1/realtime/negotiate", headers=alice, json=_negotiation_body())

    assert resp.status_code == 502
    body = resp.json()
    assert body["code"] == "UPSTREAM_ERROR"
    assert body["status"] is None
    assert body["message"]


def test_negotiate_missing_field_is_client_error(client, provider_stub, alice) -> None:
    resp = client.post(
        "/api/v1/realtime/negotiate",
        headers=alice,
        json=_negotiation_body(offerSdp=""),
    )

    assert resp.status_code == 400
    assert resp.json()["missing"] == ["offerSdp"]
    assert provider_stub.requests == []


def test_negotiate_requires_auth(client) -> None:
    resp = client.post("/api/v1/realtime/negotiate", json=_negotiation_body())

    assert resp.status_code == 401


def test_issue_credential(client, provider_stub, alice) -> None:
    resp = client.post("/api/v1/realtime/credentials", headers=alice, json={"voice": "verse"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["clientSecret"] == EPHEMERAL_KEY
    assert body["model"] == "gpt-4o-realtime-preview"
    assert body["expiresAt"].startswith("2030-01-01")

    (request,) = provider_stub.requests
    assert request.headers["Authorization"] == "Bearer sk-service-key"


def test_each_credential_request_hits_provider(client, provider_stub, alice) -> None:
    client.post("/api/v1/realtime/credentials", headers=alice)
    client.post("/api/v1/realtime/credentials", headers=alice)

    assert len(provider_stub.requests) == 2


def test_credential_failure_has_distinct_code(client, provider_stub, alice) -> None:
    provider_stub.sessions_status = 500

    resp = client.post("/api/v1/realtime/credentials", headers=alice)

    assert resp.status_code == 502
    assert resp.json()["code"] == "CREDENTIAL_ERROR"


def test_prefetch_warms_provider_and_store(client, provider_stub, alice) -> None:
    resp = client.get("/api/v1/realtime/prefetch", headers=alice)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["providerWarmed"] is True
    assert body["storeWarmed"] is True
    assert body["timeMs"] >= 0


def test_prefetch_reports_failed_warmup(client, provider_stub, alice) -> None:
    provider_stub.models_status = 401

    resp = client.get("/api/v1/realtime/prefetch", headers=alice)

    assert resp.status_code == 200
    assert resp.json()["providerWarmed"] is False
