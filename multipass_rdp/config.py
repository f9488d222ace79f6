"""Command-line and template configuration for multipass-rdp."""

from __future__ import annotations

import argparse
import textwrap
from pathlib import Path
from typing import List, NoReturn, Optional

try:
    import yaml  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required but not installed") from exc

from multipass_rdp.constants import (
    DEFAULT_CPUS,
    DEFAULT_DISK,
    DEFAULT_IMAGE,
    DEFAULT_MEMORY,
    DEFAULT_TEMPLATE_PATH,
    DEFAULT_USER,
    DEFAULT_VM_NAME,
)
from multipass_rdp.exceptions import ConfigurationError, TemplateError
from multipass_rdp.models import ProvisionRequest
from multipass_rdp.utils import get_env, log, validate_size, validate_username, validate_vm_name

# Keys the generated user block appends; a template defining them is overridden.
_APPENDED_KEYS = ("users", "write_files")

_EPILOG = textwrap.dedent(
    """
    Requirements:
      - Multipass  https://multipass.run

    After provisioning finishes the RDP connection details are printed so you
    can connect from any RDP client (Windows "mstsc", Remmina, Microsoft Remote
    Desktop on macOS, etc.).
    """
)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting on bad input."""

    def error(self, message: str) -> NoReturn:
        raise ConfigurationError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="multipass-rdp",
        description="Launch a Multipass VM with a remote-desktop (RDP) environment.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("-n", "--name", default=DEFAULT_VM_NAME, help=f"VM name (default: {DEFAULT_VM_NAME})")
    parser.add_argument(
        "-c", "--cpus", type=int, default=DEFAULT_CPUS, metavar="N", help=f"Number of CPUs (default: {DEFAULT_CPUS})"
    )
    parser.add_argument(
        "-m", "--memory", default=DEFAULT_MEMORY, metavar="SIZE", help=f"Memory, e.g. 2G (default: {DEFAULT_MEMORY})"
    )
    parser.add_argument(
        "-d", "--disk", default=DEFAULT_DISK, metavar="SIZE", help=f"Disk size, e.g. 20G (default: {DEFAULT_DISK})"
    )
    parser.add_argument(
        "-i", "--image", default=DEFAULT_IMAGE, help=f"Ubuntu image to use, e.g. 22.04 (default: {DEFAULT_IMAGE})"
    )
    parser.add_argument(
        "-u", "--user", default=DEFAULT_USER, help=f"Username to create inside the VM (default: {DEFAULT_USER})"
    )
    parser.add_argument(
        "-p",
        "--password",
        default=None,
        metavar="PASS",
        help="Password for the user (auto-generated if not set); use --password=PASS when it starts with '-'",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> ProvisionRequest:
    """Parse and validate command-line options into a ProvisionRequest."""
    args = build_parser().parse_args(argv)
    if args.cpus < 1:
        raise ConfigurationError(f"--cpus must be >= 1 (got {args.cpus})")
    password = args.password or None
    return ProvisionRequest(
        name=validate_vm_name(args.name),
        cpus=args.cpus,
        memory=validate_size("--memory", args.memory),
        disk=validate_size("--disk", args.disk),
        image=args.image,
        user=validate_username(args.user),
        password=password,
    )


def resolve_template_path() -> Path:
    override = (get_env("CLOUD_INIT_TEMPLATE") or "").strip()
    if override:
        return Path(override)
    return DEFAULT_TEMPLATE_PATH


def load_template(path: Optional[Path] = None) -> str:
    """Read the cloud-init template and sanity-check it as YAML."""
    if path is None:
        path = resolve_template_path()
    if not path.exists():
        raise TemplateError(f"cloud-init file not found: {path}")
    if not path.is_file():
        raise TemplateError(f"cloud-init template must be a regular file: {path}")
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TemplateError(f"Cannot read cloud-init template {path}: {exc}")

    first_line = content.split("\n", 1)[0].strip()
    if first_line != "#cloud-config":
        log("WARN", f"cloud-init template does not start with '#cloud-config' (got: '{first_line[:60]}')")

    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise TemplateError(f"cloud-init template contains invalid YAML: {exc}")
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise TemplateError(f"cloud-init template must contain a YAML mapping, got {type(parsed).__name__}")
    for key in _APPENDED_KEYS:
        if key in parsed:
            log("WARN", f"cloud-init template defines '{key}'; it is replaced by the generated user block")
    return content
