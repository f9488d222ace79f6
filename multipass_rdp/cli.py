"""CLI entry points for multipass-rdp."""

from __future__ import annotations

import signal
from typing import List, Optional

from multipass_rdp.config import parse_args
from multipass_rdp.exceptions import ManagerError
from multipass_rdp.models import ConnectionInfo
from multipass_rdp.provisioner import Provisioner
from multipass_rdp.utils import log

_RULE = "━" * 63


def render_summary(info: ConnectionInfo) -> str:
    """Return the connection banner printed once the VM is ready."""
    lines = [
        "",
        _RULE,
        f"  VM '{info.name}' is ready!",
        "",
        "  RDP connection details",
        "  ──────────────────────",
        f"  Host     : {info.host}",
        f"  Port     : {info.port}",
        f"  Username : {info.user}",
        f"  Password : {info.password}",
        "",
        "  Connect with:",
        f"    Windows   → mstsc /v:{info.host}",
        f"    macOS     → Microsoft Remote Desktop → Add PC → {info.host}",
        f"    Linux     → remmina -c rdp://{info.user}@{info.host}",
        "",
        "  Manage the VM:",
        f"    multipass shell {info.name}   (open a shell)",
        f"    multipass stop  {info.name}   (stop the VM)",
        f"    multipass start {info.name}   (start the VM)",
        f"    multipass delete {info.name} --purge  (delete the VM)",
        _RULE,
    ]
    return "\n".join(lines)


def print_summary(info: ConnectionInfo) -> None:
    print(render_summary(info), flush=True)


def _terminate(signum, frame):
    raise SystemExit(128 + signum)


def main(argv: Optional[List[str]] = None) -> int:
    try:
        request = parse_args(argv)
    except ManagerError as exc:
        log("ERROR", str(exc))
        return 1

    # SIGTERM unwinds through the same cleanup path as Ctrl+C
    prev_sigterm = signal.signal(signal.SIGTERM, _terminate)
    try:
        provisioner = Provisioner(request)
        info = provisioner.run()
        print_summary(info)
        provisioner.mark_reported()
        return 0
    except ManagerError as exc:
        log("ERROR", str(exc))
        return 1
    except KeyboardInterrupt:
        log("WARN", "Interrupted; the VM may be partially provisioned")
        return 130
    except Exception as exc:
        log("ERROR", f"Unexpected error: {exc}")
        import traceback

        traceback.print_exc()
        return 1
    finally:
        signal.signal(signal.SIGTERM, prev_sigterm)
