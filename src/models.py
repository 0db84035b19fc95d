"""
Data models for the Compute Engine node adapter.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from errors import ValidationError


def last_segment(url: Optional[str]) -> Optional[str]:
    """Return the final path segment of a resource URL (or the value itself)."""
    if not url:
        return url
    return url.rstrip("/").split("/")[-1]


def encode_node_id(zone: str, name: str) -> str:
    """Join zone and instance name into a single node id token."""
    return f"{zone}/{name}"


def decode_node_id(node_id: str) -> Tuple[str, str]:
    """
    Split a node id token into its (zone, name) pair.

    Args:
        node_id: Slash-encoded id, e.g. 'europe-west2-a/web-1'

    Returns:
        Tuple of (zone, name)

    Raises:
        ValidationError: If the token is not of the form zone/name
    """
    parts = (node_id or "").split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValidationError(f"node id must be of the form zone/name: {node_id!r}")
    return parts[0], parts[1]


class OperationStatus(Enum):
    """Lifecycle states of a zone operation."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    DONE = "DONE"


class DiskType(Enum):
    PERSISTENT = "PERSISTENT"
    SCRATCH = "SCRATCH"


class DiskMode(Enum):
    READ_WRITE = "READ_WRITE"
    READ_ONLY = "READ_ONLY"


@dataclass
class Operation:
    """Asynchronous Compute Engine action, polled until DONE."""

    name: str
    zone: Optional[str] = None  # short zone name
    status: OperationStatus = OperationStatus.PENDING
    target_link: Optional[str] = None
    operation_type: Optional[str] = None
    http_error_status_code: Optional[int] = None
    http_error_message: Optional[str] = None
    errors: List[Dict] = field(default_factory=list)
    self_link: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.status is OperationStatus.DONE

    @property
    def has_error(self) -> bool:
        return self.http_error_status_code is not None or bool(self.errors)

    @property
    def error_code(self):
        if self.http_error_status_code is not None:
            return self.http_error_status_code
        if self.errors:
            return self.errors[0].get("code")
        return None

    @property
    def error_message(self) -> Optional[str]:
        if self.http_error_message:
            return self.http_error_message
        if self.errors:
            return self.errors[0].get("message")
        return None

    @classmethod
    def from_json(cls, data: Dict) -> "Operation":
        return cls(
            name=data["name"],
            zone=last_segment(data.get("zone")),
            status=OperationStatus(data.get("status", "PENDING")),
            target_link=data.get("targetLink"),
            operation_type=data.get("operationType"),
            http_error_status_code=data.get("httpErrorStatusCode"),
            http_error_message=data.get("httpErrorMessage"),
            errors=list(data.get("error", {}).get("errors", [])),
            self_link=data.get("selfLink"),
        )


@dataclass
class AttachedDisk:
    """Disk slot of an instance. The boot disk must be the first slot."""

    source: Optional[str] = None  # disk self link
    type: DiskType = DiskType.PERSISTENT
    mode: DiskMode = DiskMode.READ_WRITE
    boot: bool = False
    auto_delete: bool = False
    device_name: Optional[str] = None

    def to_json(self) -> Dict:
        body = {
            "type": self.type.value,
            "mode": self.mode.value,
            "boot": self.boot,
            "autoDelete": self.auto_delete,
        }
        if self.source:
            body["source"] = self.source
        if self.device_name:
            body["deviceName"] = self.device_name
        return body

    @classmethod
    def from_json(cls, data: Dict) -> "AttachedDisk":
        return cls(
            source=data.get("source"),
            type=DiskType(data.get("type", "PERSISTENT")),
            mode=DiskMode(data.get("mode", "READ_WRITE")),
            boot=bool(data.get("boot", False)),
            auto_delete=bool(data.get("autoDelete", False)),
            device_name=data.get("deviceName"),
        )


@dataclass
class NetworkInterface:
    network: str
    network_ip: Optional[str] = None
    access_configs: List[Dict] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict) -> "NetworkInterface":
        return cls(
            network=data.get("network", ""),
            network_ip=data.get("networkIP"),
            access_configs=list(data.get("accessConfigs", [])),
        )


@dataclass
class Tags:
    """Instance tag set plus the fingerprint required to change it."""

    items: List[str] = field(default_factory=list)
    fingerprint: Optional[str] = None


@dataclass
class Metadata:
    items: Dict[str, str] = field(default_factory=dict)
    fingerprint: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict) -> "Metadata":
        return cls(
            items={i["key"]: i.get("value", "") for i in data.get("items", [])},
            fingerprint=data.get("fingerprint"),
        )


@dataclass
class Node:
    """A Compute Engine instance, identified by (zone, name)."""

    name: str
    zone: str
    disks: List[AttachedDisk] = field(default_factory=list)
    network_interfaces: List[NetworkInterface] = field(default_factory=list)
    tags: Tags = field(default_factory=Tags)
    metadata: Metadata = field(default_factory=Metadata)
    machine_type: Optional[str] = None
    status: Optional[str] = None
    self_link: Optional[str] = None

    @property
    def id(self) -> str:
        return encode_node_id(self.zone, self.name)

    @classmethod
    def from_json(cls, data: Dict, zone: Optional[str] = None) -> "Node":
        tags = data.get("tags", {})
        return cls(
            name=data["name"],
            zone=zone or last_segment(data.get("zone")),
            disks=[AttachedDisk.from_json(d) for d in data.get("disks", [])],
            network_interfaces=[
                NetworkInterface.from_json(n) for n in data.get("networkInterfaces", [])
            ],
            tags=Tags(
                items=list(tags.get("items", [])), fingerprint=tags.get("fingerprint")
            ),
            metadata=Metadata.from_json(data.get("metadata", {})),
            machine_type=data.get("machineType"),
            status=data.get("status"),
            self_link=data.get("selfLink"),
        )


@dataclass
class Disk:
    name: str
    zone: str
    size_gb: int
    source_image: Optional[str] = None
    self_link: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict) -> "Disk":
        return cls(
            name=data["name"],
            zone=last_segment(data.get("zone")),
            size_gb=int(data.get("sizeGb", 0)),
            source_image=data.get("sourceImage"),
            self_link=data.get("selfLink"),
            status=data.get("status"),
        )


@dataclass
class LoginCredentials:
    """Credentials used to log into a node. Derived per creation, never stored."""

    user: Optional[str] = None
    private_key: Optional[str] = None
    password: Optional[str] = None
    authenticate_sudo: bool = False
    public_key: Optional[str] = None


@dataclass
class Image:
    name: str
    project: str
    self_link: Optional[str] = None
    description: Optional[str] = None
    deprecated: Optional[Dict] = None
    # private_key holds "<public>:<private>" key material
    default_credentials: Optional[LoginCredentials] = None

    @classmethod
    def from_json(cls, data: Dict, project: str) -> "Image":
        return cls(
            name=data["name"],
            project=project,
            self_link=data.get("selfLink"),
            description=data.get("description"),
            deprecated=data.get("deprecated"),
        )


@dataclass
class Zone:
    name: str
    region: Optional[str] = None
    status: Optional[str] = None
    self_link: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict) -> "Zone":
        return cls(
            name=data["name"],
            region=last_segment(data.get("region")),
            status=data.get("status"),
            self_link=data.get("selfLink"),
        )


@dataclass
class MachineType:
    name: str
    zone: str
    guest_cpus: Optional[int] = None
    memory_mb: Optional[int] = None
    self_link: Optional[str] = None
    deprecated: Optional[Dict] = None

    @classmethod
    def from_json(cls, data: Dict) -> "MachineType":
        return cls(
            name=data["name"],
            zone=last_segment(data.get("zone")),
            guest_cpus=data.get("guestCpus"),
            memory_mb=data.get("memoryMb"),
            self_link=data.get("selfLink"),
            deprecated=data.get("deprecated"),
        )


@dataclass
class TemplateOptions:
    """Caller-supplied options for a node to create."""

    network: Optional[str] = None  # network self link or bare name
    disks: List[AttachedDisk] = field(default_factory=list)
    enable_nat: bool = True
    boot_disk_size: Optional[int] = None  # GiB
    keep_boot_disk: bool = False
    tags: List[str] = field(default_factory=list)
    inbound_ports: List[int] = field(default_factory=lambda: [22])
    service_accounts: List[Dict] = field(default_factory=list)
    block_until_running: bool = True
    user_metadata: Dict[str, str] = field(default_factory=dict)

    # Login overrides; None means "use the image default"
    login_user: Optional[str] = None
    login_private_key: Optional[str] = None
    login_password: Optional[str] = None
    authenticate_sudo: Optional[bool] = None
    public_key: Optional[str] = None
    login_credentials: Optional[LoginCredentials] = None


@dataclass
class NodeTemplate:
    hardware: Optional[MachineType]
    image: Optional[Image]
    location: Optional[Zone]
    options: TemplateOptions = field(default_factory=TemplateOptions)


@dataclass
class NodeAndCredentials:
    """A provisioned node, its id token and the credentials to reach it."""

    node: Node
    node_id: str
    credentials: LoginCredentials


# group -> (port -> tag name)
FirewallTagNaming = Callable[[str], Callable[[int], str]]
