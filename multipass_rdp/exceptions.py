"""Custom exceptions for multipass-rdp."""


class ManagerError(RuntimeError):
    """Raised on unrecoverable configuration or runtime errors."""


class ConfigurationError(ManagerError):
    """Unknown flag or invalid option value."""


class DependencyError(ManagerError):
    """A required external command is not available on PATH."""


class ConflictError(ManagerError):
    """A VM with the requested name already exists."""


class TemplateError(ManagerError):
    """The cloud-init template is missing or unreadable."""


class ResolutionError(ManagerError):
    """No network address could be determined for the new VM."""


class ExternalToolError(ManagerError):
    """A multipass invocation failed."""
