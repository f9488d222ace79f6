"""cloud-init payload synthesis for multipass-rdp."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterator, List

try:
    import yaml  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required but not installed") from exc

from multipass_rdp.constants import (
    PAYLOAD_PREFIX,
    PAYLOAD_SUFFIX,
    USER_GROUPS,
    USER_SHELL,
    USER_SUDO,
    XSESSION_COMMAND,
)
from multipass_rdp.utils import hash_password, log


def user_config(user: str, passwd_hash: str) -> Dict[str, List[object]]:
    """Return the ``users``/``write_files`` sections for the RDP login user."""
    return {
        "users": [
            "default",
            {
                "name": user,
                "groups": USER_GROUPS,
                "shell": USER_SHELL,
                "sudo": USER_SUDO,
                "lock_passwd": False,
                "passwd": passwd_hash,
            },
        ],
        # xrdp starts whatever ~/.xsession names for the logged-in user
        "write_files": [
            {
                "path": f"/home/{user}/.xsession",
                "content": f"{XSESSION_COMMAND}\n",
                "owner": f"{user}:{user}",
                "permissions": "0644",
            }
        ],
    }


def render_user_block(user: str, passwd_hash: str) -> str:
    block = yaml.safe_dump(user_config(user, passwd_hash), sort_keys=False, default_flow_style=False)
    return "\n# Generated RDP login user\n" + block


def build_payload(template: str, user: str, password: str) -> str:
    """Append the generated user block to the template text."""
    if template and not template.endswith("\n"):
        template += "\n"
    return template + render_user_block(user, hash_password(password))


@contextlib.contextmanager
def payload_file(content: str) -> Iterator[Path]:
    """Write ``content`` to an owner-only temp file that is removed on exit."""
    fd, name = tempfile.mkstemp(prefix=PAYLOAD_PREFIX, suffix=PAYLOAD_SUFFIX)
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        log("DEBUG", f"cloud-init payload written to {path}")
        yield path
    finally:
        path.unlink(missing_ok=True)
        log("DEBUG", f"cloud-init payload {path} removed")
