"""Utility functions for multipass-rdp."""

from __future__ import annotations

import os
import secrets
import shutil
import subprocess
import sys
from typing import List, Optional

try:
    import bcrypt  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("bcrypt is required but not installed") from exc

from multipass_rdp.constants import (
    _LOG_VERBOSE,
    PASSWORD_ALPHABET,
    PASSWORD_LENGTH,
    SIZE_RE,
    USERNAME_RE,
    VM_NAME_RE,
)
from multipass_rdp.exceptions import ConfigurationError, DependencyError


def log(level: str, message: str) -> None:
    """Lightweight structured logging; warnings and errors go to stderr."""
    if level == "DEBUG" and not _LOG_VERBOSE:
        return
    colours = {
        "INFO": "\033[0;34m",
        "WARN": "\033[1;33m",
        "ERROR": "\033[0;31m",
        "SUCCESS": "\033[0;32m",
        "DEBUG": "\033[0;90m",
    }
    colour = colours.get(level, "")
    reset = "\033[0m" if colour else ""
    stream = sys.stderr if level in {"WARN", "ERROR"} else sys.stdout
    print(f"{colour}[{level}]{reset} {message}", file=stream, flush=True)


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def validate_size(option: str, raw: str) -> str:
    if not SIZE_RE.match(raw):
        raise ConfigurationError(
            f"Invalid {option} '{raw}'. Use a number with optional suffix: K, M, G, T (e.g. '20G')"
        )
    return raw


def validate_vm_name(raw: str) -> str:
    if not VM_NAME_RE.match(raw):
        raise ConfigurationError(
            f"Invalid VM name '{raw}'. Names must start with a letter and contain only letters, digits and hyphens"
        )
    return raw


def validate_username(raw: str) -> str:
    if not USERNAME_RE.match(raw):
        raise ConfigurationError(
            f"Invalid username '{raw}'. Use lowercase letters, digits, '_' or '-', starting with a letter or '_'"
        )
    return raw


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """Return a random password drawn from letters, digits and a few symbols."""
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def hash_password(password: str) -> str:
    """Generate a bcrypt hash for cloud-init."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def require_command(name: str) -> str:
    """Return the absolute path of ``name`` or fail if it is not on PATH."""
    path = shutil.which(name)
    if path is None:
        raise DependencyError(f"'{name}' is not installed or not in PATH.")
    return path


def run(cmd: List[str], check: bool = True, **kwargs) -> subprocess.CompletedProcess:
    """Run command with logging."""
    log("DEBUG", f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, check=check, text=True, **kwargs)
    return result
