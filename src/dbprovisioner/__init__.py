"""
dbprovisioner - MariaDB installation and multi-tenant schema provisioning
"""

__version__ = "0.1.0"

from .core import DatabaseProvisioner, ProvisionerError

__all__ = ["DatabaseProvisioner", "ProvisionerError"]
