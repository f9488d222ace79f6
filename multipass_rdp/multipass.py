"""Thin wrapper around the multipass CLI."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import List, Optional

from multipass_rdp.constants import MULTIPASS_BIN
from multipass_rdp.exceptions import DependencyError, ExternalToolError, ResolutionError
from multipass_rdp.models import ProvisionRequest, VMDescriptor
from multipass_rdp.utils import log, run


def _descriptor(name: str, record: dict) -> VMDescriptor:
    ipv4 = record.get("ipv4") or []
    if isinstance(ipv4, str):
        ipv4 = [ipv4]
    return VMDescriptor(
        name=name,
        state=str(record.get("state", "Unknown")),
        ipv4=[str(addr) for addr in ipv4],
        release=str(record.get("release", "")),
    )


class MultipassClient:
    """Runs multipass subcommands; every call blocks until multipass returns."""

    def __init__(self, binary: str = MULTIPASS_BIN) -> None:
        self.binary = binary

    def _call(self, step: str, args: List[str], capture: bool = False) -> subprocess.CompletedProcess:
        cmd = [self.binary, *args]
        try:
            if capture:
                return run(cmd, capture_output=True)
            return run(cmd)
        except FileNotFoundError as exc:
            raise DependencyError(f"'{self.binary}' is not installed or not in PATH.") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip()
            message = f"multipass {step} failed (exit status {exc.returncode})"
            if detail:
                message += f": {detail}"
            raise ExternalToolError(message) from exc

    def _json(self, step: str, args: List[str]) -> dict:
        result = self._call(step, [*args, "--format", "json"], capture=True)
        try:
            data = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as exc:
            raise ExternalToolError(f"multipass {step} returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ExternalToolError(f"multipass {step} returned unexpected output")
        return data

    def list_instances(self) -> List[VMDescriptor]:
        data = self._json("list", ["list"])
        instances = []
        for record in data.get("list", []):
            name = record.get("name")
            if name:
                instances.append(_descriptor(name, record))
        return instances

    def exists(self, name: str) -> bool:
        return any(instance.name == name for instance in self.list_instances())

    def launch(self, request: ProvisionRequest, cloud_init: Path) -> None:
        self._call(
            "launch",
            [
                "launch",
                "--name",
                request.name,
                "--cpus",
                str(request.cpus),
                "--memory",
                request.memory,
                "--disk",
                request.disk,
                "--cloud-init",
                str(cloud_init),
                request.image,
            ],
        )

    def wait_for_cloud_init(self, name: str) -> None:
        self._call("exec", ["exec", name, "--", "cloud-init", "status", "--wait"])

    def info(self, name: str) -> VMDescriptor:
        data = self._json("info", ["info", name])
        record: Optional[dict] = (data.get("info") or {}).get(name)
        if record is None:
            raise ExternalToolError(f"multipass info returned no record for '{name}'")
        return _descriptor(name, record)

    def ip_address(self, name: str) -> str:
        descriptor = self.info(name)
        address = descriptor.primary_address
        if not address:
            raise ResolutionError(f"Could not determine IP address for '{name}'.")
        log("DEBUG", f"VM '{name}' is {descriptor.state} at {address}")
        return address
