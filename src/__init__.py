"""
Compute Engine node adapter.
"""

from apis import ComputeApi
from clients import ComputeRestClient
from config import AdapterConfig
from credentials import CredentialResolver
from errors import (
    OperationFailed,
    OperationTimeout,
    Result,
    UnsupportedCapability,
    ValidationError,
)
from images import ImageCatalogResolver
from lifecycle import NodeLifecycleManager
from log_utils import setup_logging
from polling import OperationPoller, retry_until
from provisioner import NodeProvisioner

__all__ = [
    "ComputeApi",
    "ComputeRestClient",
    "AdapterConfig",
    "CredentialResolver",
    "OperationFailed",
    "OperationTimeout",
    "Result",
    "UnsupportedCapability",
    "ValidationError",
    "ImageCatalogResolver",
    "NodeLifecycleManager",
    "setup_logging",
    "OperationPoller",
    "retry_until",
    "NodeProvisioner",
]
