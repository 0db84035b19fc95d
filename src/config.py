"""
Configuration management for the Compute Engine node adapter.
"""

from dataclasses import dataclass, field
from typing import List

DEFAULT_PUBLIC_IMAGE_PROJECTS = ["debian-cloud", "centos-cloud"]

# Metadata keys written on every node this adapter creates
IMAGE_METADATA_KEY = "gce-node-image"
DELETE_BOOT_DISK_METADATA_KEY = "gce-node-delete-boot-disk"

BOOT_DISK_SUFFIX = "boot-disk"
DEFAULT_BOOT_DISK_SIZE_GB = 10


@dataclass
class AdapterConfig:
    """Configuration for node adapter operations."""

    project_id: str
    poll_interval_millis: int = 2000
    timeout_millis: int = 600000
    public_image_projects: List[str] = field(
        default_factory=lambda: list(DEFAULT_PUBLIC_IMAGE_PROJECTS)
    )
    request_timeout: int = 60
    max_retries: int = 5
    verbose: bool = False

    @classmethod
    def from_args(cls, args) -> "AdapterConfig":
        """
        Create configuration from command-line arguments.

        Args:
            args: Parsed argparse arguments

        Returns:
            AdapterConfig instance
        """
        return cls(
            project_id=args.project,
            poll_interval_millis=args.poll_interval_millis,
            timeout_millis=args.timeout_millis,
            public_image_projects=(
                args.public_image_projects or list(DEFAULT_PUBLIC_IMAGE_PROJECTS)
            ),
            request_timeout=args.request_timeout,
            max_retries=args.max_retries,
            verbose=args.verbose,
        )
