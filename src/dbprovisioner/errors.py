"""Domain errors for dbprovisioner."""


class ProvisionerError(RuntimeError):
    """Raised when provisioning cannot continue safely."""


class PrivilegeFailure(ProvisionerError):
    """Neither root nor sudo access is available."""


class DetectionFailure(ProvisionerError):
    """No supported package manager was found on the host."""


class InstallFailure(ProvisionerError):
    """The database packages could not be installed."""


class ServiceStartFailure(ProvisionerError):
    """The database service did not reach the running state."""


class AuthFailure(ProvisionerError):
    """No administrative authentication strategy succeeded."""


class SqlFailure(ProvisionerError):
    """A schema or account SQL batch failed."""


class ConnectivityFailure(ProvisionerError):
    """The service account could not run a query."""
