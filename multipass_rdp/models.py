"""Data models for multipass-rdp."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from multipass_rdp.constants import (
    DEFAULT_CPUS,
    DEFAULT_DISK,
    DEFAULT_IMAGE,
    DEFAULT_MEMORY,
    DEFAULT_USER,
    DEFAULT_VM_NAME,
    RDP_PORT,
)


@dataclass
class ProvisionRequest:
    name: str = DEFAULT_VM_NAME
    cpus: int = DEFAULT_CPUS
    memory: str = DEFAULT_MEMORY
    disk: str = DEFAULT_DISK
    image: str = DEFAULT_IMAGE
    user: str = DEFAULT_USER
    password: Optional[str] = None  # generated when unset


@dataclass
class VMDescriptor:
    """Instance record as reported by ``multipass info``/``multipass list``."""

    name: str
    state: str
    ipv4: List[str] = field(default_factory=list)
    release: str = ""

    @property
    def primary_address(self) -> Optional[str]:
        for address in self.ipv4:
            address = address.strip()
            if address:
                return address
        return None


@dataclass
class ConnectionInfo:
    name: str
    host: str
    user: str
    password: str
    port: int = RDP_PORT
