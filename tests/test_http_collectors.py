"""
Contract tests for HTTP-based collectors (no real network)
"""

import httpx

from servicehealth.collectors import network
from servicehealth.collectors.metadata import collect_instance_metadata


def test_probe_http_maps_status_and_errors(monkeypatch) -> None:
    """
    2xx/3xx succeed, 4xx/5xx and transport errors fail, nothing raises
    """
    responses = {
        "http://localhost:8080/health": httpx.Response(200),
        "http://localhost:5000/health": httpx.Response(503),
    }

    def fake_get(url, **kwargs):
        if url not in responses:
            raise httpx.ConnectError("connection refused")
        return responses[url]

    monkeypatch.setattr(network.httpx, "get", fake_get)

    assert network.probe_http("http://localhost:8080/health", 10).ok is True

    unhealthy = network.probe_http("http://localhost:5000/health", 10)
    assert unhealthy.ok is False
    assert unhealthy.status_code == 503

    refused = network.probe_http("http://localhost:9999/health", 10)
    assert refused.ok is False
    assert "ConnectError" in refused.error


def test_instance_metadata_parses_zone_and_sends_header() -> None:
    seen_headers = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_headers.append(request.headers.get("Metadata-Flavor"))
        path = request.url.path
        if path.endswith("/instance/name"):
            return httpx.Response(200, text="test-vm-1")
        if path.endswith("/instance/zone"):
            return httpx.Response(200, text="projects/1234/zones/europe-west1-b")
        return httpx.Response(404)

    meta = collect_instance_metadata(transport=httpx.MockTransport(handler))

    assert meta.instance_name == "test-vm-1"
    assert meta.zone == "europe-west1-b"
    assert meta.project_id == "unknown"
    assert seen_headers == ["Google", "Google", "Google"]


def test_instance_metadata_falls_back_to_unknown() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("metadata.google.internal not resolvable")

    meta = collect_instance_metadata(transport=httpx.MockTransport(handler))

    assert (meta.instance_name, meta.zone, meta.project_id) == ("unknown", "unknown", "unknown")
    assert meta.known is False
