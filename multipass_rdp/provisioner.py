"""Create-and-report workflow for a single RDP VM."""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Optional

from multipass_rdp.cloud_init import build_payload, payload_file
from multipass_rdp.config import load_template
from multipass_rdp.exceptions import ConflictError
from multipass_rdp.models import ConnectionInfo, ProvisionRequest
from multipass_rdp.multipass import MultipassClient
from multipass_rdp.utils import generate_password, log, require_command


class State(enum.Enum):
    START = "start"
    VALIDATED = "validated"
    CREDENTIAL_READY = "credential-ready"
    PAYLOAD_WRITTEN = "payload-written"
    VM_CREATED = "vm-created"
    PROVISIONING_COMPLETE = "provisioning-complete"
    ADDRESS_RESOLVED = "address-resolved"
    REPORTED = "reported"
    FAILED = "failed"


class Provisioner:
    """Validate, launch and resolve one Multipass VM.

    The existence check and the launch are separate multipass calls, so a
    VM of the same name created in between makes the launch itself fail.
    """

    def __init__(
        self,
        request: ProvisionRequest,
        client: Optional[MultipassClient] = None,
        template_path: Optional[Path] = None,
    ) -> None:
        self.request = request
        self.client = client or MultipassClient()
        self.template_path = template_path
        self.state = State.START
        self.password: Optional[str] = None
        self.password_generated = False
        self._template = ""

    def _advance(self, state: State) -> None:
        log("DEBUG", f"Provisioning state: {self.state.value} -> {state.value}")
        self.state = state

    def validate(self) -> None:
        require_command(self.client.binary)
        self._template = load_template(self.template_path)
        if self.client.exists(self.request.name):
            raise ConflictError(
                f"A VM named '{self.request.name}' already exists. Choose a different name with -n."
            )
        self._advance(State.VALIDATED)

    def prepare_credential(self) -> None:
        if self.request.password:
            self.password = self.request.password
        else:
            self.password = generate_password()
            self.password_generated = True
            log("INFO", f"Generated a random password for '{self.request.user}'")
        self._advance(State.CREDENTIAL_READY)

    def run(self) -> ConnectionInfo:
        """Run the whole workflow; the payload file never outlives this call."""
        req = self.request
        try:
            self.validate()
            self.prepare_credential()
            assert self.password is not None
            payload = build_payload(self._template, req.user, self.password)
            with payload_file(payload) as path:
                self._advance(State.PAYLOAD_WRITTEN)

                log(
                    "INFO",
                    f"Launching Multipass VM '{req.name}' (Ubuntu {req.image}, {req.cpus} CPU(s), "
                    f"{req.memory} RAM, {req.disk} disk)…",
                )
                self.client.launch(req, path)
                self._advance(State.VM_CREATED)

                log("INFO", "Waiting for cloud-init to complete (this may take a few minutes)…")
                self.client.wait_for_cloud_init(req.name)
                self._advance(State.PROVISIONING_COMPLETE)

                address = self.client.ip_address(req.name)
                self._advance(State.ADDRESS_RESOLVED)
        except BaseException:
            self.state = State.FAILED
            raise

        log("SUCCESS", f"VM '{req.name}' is reachable at {address}")
        return ConnectionInfo(name=req.name, host=address, user=req.user, password=self.password)

    def mark_reported(self) -> None:
        self._advance(State.REPORTED)
