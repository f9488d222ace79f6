"""multipass-rdp package."""

__all__ = [
    "cli",
    "cloud_init",
    "config",
    "constants",
    "exceptions",
    "models",
    "multipass",
    "provisioner",
    "utils",
]
