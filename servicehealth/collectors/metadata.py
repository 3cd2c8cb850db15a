"""
servicehealth.collectors.metadata

AUTHOR: carter-vin

Instance identity from the cloud metadata server

- instance name, zone, project id
- best effort: each field independently falls back to "unknown"
- short timeout so an off-cloud run does not stall the aggregation
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

METADATA_BASE_URL = "http://metadata.google.internal/computeMetadata/v1"
METADATA_HEADERS = {"Metadata-Flavor": "Google"}

UNKNOWN = "unknown"


@dataclass(frozen=True)
class InstanceMetadata:
    instance_name: str
    zone: str
    project_id: str

    @property
    def known(self) -> bool:
        return any(v != UNKNOWN for v in (self.instance_name, self.zone, self.project_id))


def _fetch(client: httpx.Client, path: str) -> str:
    try:
        response = client.get(f"{METADATA_BASE_URL}/{path}")
    except httpx.HTTPError:
        return UNKNOWN
    if response.status_code != 200:
        return UNKNOWN
    value = response.text.strip()
    return value or UNKNOWN


def collect_instance_metadata(
    timeout_s: float = 2.0,
    *,
    transport: httpx.BaseTransport | None = None,
) -> InstanceMetadata:
    """
    Query instance metadata; never raises for network failures
    """
    with httpx.Client(timeout=timeout_s, headers=METADATA_HEADERS, transport=transport) as client:
        name = _fetch(client, "instance/name")
        zone = _fetch(client, "instance/zone")
        project = _fetch(client, "project/project-id")

    # zone comes back as projects/<num>/zones/<zone>
    if zone != UNKNOWN:
        zone = zone.rsplit("/", 1)[-1] or UNKNOWN

    return InstanceMetadata(instance_name=name, zone=zone, project_id=project)
