"""Exception hierarchy for the service pack.

Transport and remote-logical errors are raised by the HTTP layer and caught at
the service boundary, where they become ``ServiceError`` values. Only
``DatasetLoadError`` is allowed to escape a public call because no service can
work without the bundled reference dataset.
"""


class ServicePackError(Exception):
    """Base class for all service pack errors."""


class TransportError(ServicePackError):
    """Network failure, timeout or non-success HTTP status."""


class RemoteLogicalError(ServicePackError):
    """Remote call succeeded but the payload was undecodable or unexpected."""


class DatasetLoadError(ServicePackError):
    """Bundled country dataset is missing or malformed."""
