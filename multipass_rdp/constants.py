"""Global constants and path configuration for multipass-rdp."""

from __future__ import annotations

import os
import re
import string
from pathlib import Path

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
DEFAULT_TEMPLATE_PATH = TEMPLATES_DIR / "cloud-init-rdp.yaml"
MULTIPASS_BIN = os.environ.get("MULTIPASS_BIN", "multipass")
TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_VM_NAME = "rdp-vm"
DEFAULT_CPUS = 2
DEFAULT_MEMORY = "2G"
DEFAULT_DISK = "20G"
DEFAULT_IMAGE = "22.04"
DEFAULT_USER = "rdpuser"

RDP_PORT = 3389
PAYLOAD_PREFIX = "cloud-init-rdp-"
PAYLOAD_SUFFIX = ".yaml"

# Guest-side session bootstrap written for the new user
XSESSION_COMMAND = "startxfce4"
USER_SHELL = "/bin/bash"
USER_GROUPS = "sudo"
USER_SUDO = "ALL=(ALL) ALL"

PASSWORD_LENGTH = 16
PASSWORD_SYMBOLS = "@#%^&*"
PASSWORD_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + PASSWORD_SYMBOLS

_LOG_VERBOSE = os.environ.get("LOG_VERBOSE", "").lower() in TRUTHY

SIZE_RE = re.compile(r"^\d+[KMGTkmgt]?$")
VM_NAME_RE = re.compile(r"^[A-Za-z](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")
USERNAME_RE = re.compile(r"^[a-z_][a-z0-9_-]{0,31}$")

