"""Shared test fixtures."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from multipass_rdp.models import ProvisionRequest
from multipass_rdp.multipass import MultipassClient

TEMPLATE = """#cloud-config
packages:
  - xrdp
  - xfce4
runcmd:
  - systemctl enable xrdp
"""


def completed(stdout: str = "", returncode: int = 0) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr="")


def list_json(*names: str) -> str:
    return json.dumps(
        {"list": [{"name": n, "state": "Running", "ipv4": ["10.0.0.2"], "release": "22.04 LTS"} for n in names]}
    )


def info_json(name: str, ipv4) -> str:
    return json.dumps({"errors": [], "info": {name: {"state": "Running", "ipv4": ipv4, "release": "22.04 LTS"}}})


@pytest.fixture
def default_request() -> ProvisionRequest:
    """Return a ProvisionRequest with the CLI defaults and a fixed password."""
    return ProvisionRequest(password="Sup3r#Secret")


@pytest.fixture
def template_path(tmp_path) -> Path:
    path = tmp_path / "cloud-init-rdp.yaml"
    path.write_text(TEMPLATE)
    return path


@pytest.fixture
def fake_client() -> MagicMock:
    """MultipassClient double: no VMs exist and every call succeeds."""
    client = MagicMock(spec=MultipassClient)
    client.binary = "multipass"
    client.exists.return_value = False
    client.ip_address.return_value = "192.168.64.5"
    return client
