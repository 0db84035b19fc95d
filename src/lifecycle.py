"""
Lookup, listing and teardown of Compute Engine nodes.
"""

import logging
import threading
from typing import Iterable, List, Optional

from config import DELETE_BOOT_DISK_METADATA_KEY
from errors import Result, UnsupportedCapability, ValidationError
from models import (
    DiskType,
    MachineType,
    Node,
    Operation,
    Zone,
    decode_node_id,
    last_segment,
)
from polling import OperationPoller

logger = logging.getLogger(__name__)


class NodeLifecycleManager:
    """Manages existing nodes addressed by their zone/name id."""

    def __init__(self, api, poller: OperationPoller):
        """
        Args:
            api: ComputeApi for the caller's project
            poller: Poller used to wait on delete and reset operations
        """
        self.api = api
        self.poller = poller
        self._zones: Optional[List[Zone]] = None
        self._zones_lock = threading.Lock()

    def _wait(self, operation: Optional[Operation]) -> Result[Operation]:
        # A delete of a resource that is already gone returns no operation
        if operation is None:
            return Result.success(None)
        return self.poller.wait(operation)

    def list_locations(self) -> List[Zone]:
        """Zones of the project, fetched once and cached."""
        with self._zones_lock:
            if self._zones is None:
                self._zones = self.api.zones.list()
                logger.debug(f"Cached {len(self._zones)} zone(s)")
            return list(self._zones)

    def list_hardware_profiles(self) -> List[MachineType]:
        """Non-deprecated machine types across every zone."""
        profiles: List[MachineType] = []
        for zone in self.list_locations():
            profiles.extend(
                mt
                for mt in self.api.machine_types.list(zone.name)
                if mt.deprecated is None
            )
        return profiles

    def get_node(self, node_id: str) -> Optional[Node]:
        """
        Get a node by id.

        Args:
            node_id: Slash-encoded zone/name id

        Returns:
            Node if found, None otherwise

        Raises:
            ValidationError: If node_id is malformed
        """
        zone, name = decode_node_id(node_id)
        return self.api.instances.get(zone, name)

    def list_nodes(self) -> List[Node]:
        """Nodes of every cached zone, concatenated in zone order."""
        nodes: List[Node] = []
        for zone in self.list_locations():
            found = self.api.instances.list(zone.name)
            logger.debug(f"Found {len(found)} node(s) in {zone.name}")
            nodes.extend(found)
        return nodes

    def list_nodes_by_ids(self, ids: Iterable[str]) -> List[Node]:
        """Nodes whose id or name is in ids, filtered from list_nodes()."""
        wanted = set(ids)
        return [n for n in self.list_nodes() if n.id in wanted or n.name in wanted]

    def destroy_node(self, node_id: str) -> Result[None]:
        """
        Delete a node, then its boot disk if the node was marked for it.

        The instance is always deleted before the disk; an attached disk
        cannot be deleted.

        Args:
            node_id: Slash-encoded zone/name id

        Returns:
            Result; error is the first failed or timed out operation
        """
        try:
            zone, name = decode_node_id(node_id)
        except ValidationError as e:
            return Result.failure(e)

        disk_name = None
        node = self.api.instances.get(zone, name)
        marked = node is not None and (
            node.metadata.items.get(DELETE_BOOT_DISK_METADATA_KEY) == "true"
        )
        if marked:
            for disk in node.disks:
                if disk.type is DiskType.PERSISTENT and disk.boot:
                    disk_name = last_segment(disk.source)
                    break

        logger.info(f"Deleting node {node_id}")
        deleted = self._wait(self.api.instances.delete(zone, name))
        if not deleted.ok:
            return Result.failure(deleted.error)

        if disk_name:
            logger.info(f"Deleting boot disk {zone}/{disk_name}")
            deleted = self._wait(self.api.disks.delete(zone, disk_name))
            if not deleted.ok:
                return Result.failure(deleted.error)

        logger.info(f"✓ Node {node_id} destroyed")
        return Result.success(None)

    def reboot_node(self, node_id: str) -> Result[None]:
        try:
            zone, name = decode_node_id(node_id)
        except ValidationError as e:
            return Result.failure(e)

        logger.info(f"Resetting node {node_id}")
        reset = self.poller.wait(self.api.instances.reset(zone, name))
        if not reset.ok:
            return Result.failure(reset.error)
        return Result.success(None)

    def resume_node(self, node_id: str) -> Result[None]:
        return Result.failure(UnsupportedCapability("resume is not supported by GCE"))

    def suspend_node(self, node_id: str) -> Result[None]:
        return Result.failure(UnsupportedCapability("suspend is not supported by GCE"))
