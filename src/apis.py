"""
Per-resource Compute Engine API bindings.

Each class exposes only the calls the node adapter needs for one resource
kind. Mutating calls return the Operation as soon as the API accepts it.
"""

from typing import Dict, Iterable, List, Optional

from clients import ComputeRestClient
from models import (
    AttachedDisk,
    Disk,
    Image,
    MachineType,
    Node,
    Operation,
    Zone,
)


class _ProjectApi:
    def __init__(self, client: ComputeRestClient, project: str):
        self.client = client
        self.project = project

    def _zone_path(self, zone: str, suffix: str) -> str:
        return f"projects/{self.project}/zones/{zone}/{suffix}"


class DiskApi(_ProjectApi):
    def create(
        self,
        name: str,
        size_gb: int,
        zone: str,
        source_image: Optional[str] = None,
    ) -> Operation:
        params = {"sourceImage": source_image} if source_image else None
        data = self.client.post(
            self._zone_path(zone, "disks"),
            body={"name": name, "sizeGb": str(size_gb)},
            params=params,
        )
        return Operation.from_json(data)

    def get(self, zone: str, name: str) -> Optional[Disk]:
        data = self.client.get(self._zone_path(zone, f"disks/{name}"))
        return Disk.from_json(data) if data else None

    def delete(self, zone: str, name: str) -> Optional[Operation]:
        data = self.client.delete(self._zone_path(zone, f"disks/{name}"))
        return Operation.from_json(data) if data else None


class InstanceTemplate:
    """Body of an instance insert request."""

    def __init__(self, machine_type: str):
        self.machine_type = machine_type
        self.disks: List[AttachedDisk] = []
        self.network_interfaces: List[Dict] = []
        self.metadata: Dict[str, str] = {}
        self.service_accounts: List[Dict] = []

    def add_network_interface(
        self, network: str, access_config_type: Optional[str] = None
    ) -> "InstanceTemplate":
        interface: Dict = {"network": network}
        if access_config_type:
            interface["accessConfigs"] = [
                {"type": access_config_type, "name": "External NAT"}
            ]
        self.network_interfaces.append(interface)
        return self

    def to_json(self, name: str) -> Dict:
        return {
            "name": name,
            "machineType": self.machine_type,
            "disks": [d.to_json() for d in self.disks],
            "networkInterfaces": self.network_interfaces,
            "metadata": {
                "items": [{"key": k, "value": v} for k, v in self.metadata.items()]
            },
            "serviceAccounts": self.service_accounts,
        }


class InstanceApi(_ProjectApi):
    def create(self, name: str, zone: str, template: InstanceTemplate) -> Operation:
        data = self.client.post(
            self._zone_path(zone, "instances"), body=template.to_json(name)
        )
        return Operation.from_json(data)

    def get(self, zone: str, name: str) -> Optional[Node]:
        data = self.client.get(self._zone_path(zone, f"instances/{name}"))
        return Node.from_json(data, zone=zone) if data else None

    def list(self, zone: str) -> List[Node]:
        return [
            Node.from_json(item, zone=zone)
            for item in self.client.list_pages(self._zone_path(zone, "instances"))
        ]

    def delete(self, zone: str, name: str) -> Optional[Operation]:
        data = self.client.delete(self._zone_path(zone, f"instances/{name}"))
        return Operation.from_json(data) if data else None

    def reset(self, zone: str, name: str) -> Operation:
        data = self.client.post(self._zone_path(zone, f"instances/{name}/reset"))
        return Operation.from_json(data)

    def set_tags(
        self, zone: str, name: str, tags: Iterable[str], fingerprint: Optional[str]
    ) -> Operation:
        body = {"items": sorted(tags), "fingerprint": fingerprint}
        data = self.client.post(
            self._zone_path(zone, f"instances/{name}/setTags"), body=body
        )
        return Operation.from_json(data)


class ImageApi(_ProjectApi):
    def list(self) -> List[Image]:
        return [
            Image.from_json(item, project=self.project)
            for item in self.client.list_pages(f"projects/{self.project}/global/images")
        ]

    def get(self, name: str) -> Optional[Image]:
        data = self.client.get(f"projects/{self.project}/global/images/{name}")
        return Image.from_json(data, project=self.project) if data else None


class ZoneApi(_ProjectApi):
    def list(self) -> List[Zone]:
        return [
            Zone.from_json(item)
            for item in self.client.list_pages(f"projects/{self.project}/zones")
        ]


class MachineTypeApi(_ProjectApi):
    def list(self, zone: str) -> List[MachineType]:
        return [
            MachineType.from_json(item)
            for item in self.client.list_pages(self._zone_path(zone, "machineTypes"))
        ]


class ZoneOperationApi(_ProjectApi):
    def get(self, zone: str, name: str) -> Optional[Operation]:
        data = self.client.get(self._zone_path(zone, f"operations/{name}"))
        return Operation.from_json(data) if data else None


class NetworkApi(_ProjectApi):
    def get(self, name: str) -> Optional[Dict]:
        return self.client.get(f"projects/{self.project}/global/networks/{name}")


class ComputeApi:
    """Entry point to the per-resource APIs of one project."""

    def __init__(self, project_id: str, client: Optional[ComputeRestClient] = None):
        self.project_id = project_id
        self.client = client or ComputeRestClient()
        self.disks = DiskApi(self.client, project_id)
        self.instances = InstanceApi(self.client, project_id)
        self.zones = ZoneApi(self.client, project_id)
        self.machine_types = MachineTypeApi(self.client, project_id)
        self.operations = ZoneOperationApi(self.client, project_id)
        self.networks = NetworkApi(self.client, project_id)

    def images(self, project: Optional[str] = None) -> ImageApi:
        """Image API for the given project (defaults to the caller's own)."""
        return ImageApi(self.client, project or self.project_id)
