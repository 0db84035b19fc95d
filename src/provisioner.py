"""
Node creation for Compute Engine.

Creating a node is a chain of zone operations: boot disk, instance, then
tags. Each tag change must carry the fingerprint of the latest instance read,
so every tag mutation is followed by a fresh read.
"""

import dataclasses
import logging
from typing import List, Optional

from apis import InstanceTemplate
from config import (
    BOOT_DISK_SUFFIX,
    DEFAULT_BOOT_DISK_SIZE_GB,
    DELETE_BOOT_DISK_METADATA_KEY,
    IMAGE_METADATA_KEY,
)
from credentials import CredentialResolver
from errors import Result, ValidationError
from models import (
    AttachedDisk,
    Disk,
    DiskMode,
    DiskType,
    FirewallTagNaming,
    Node,
    NodeAndCredentials,
    NodeTemplate,
)
from polling import OperationPoller, retry_until

logger = logging.getLogger(__name__)


def default_firewall_tag_naming(group: str):
    """Tag naming used for inbound ports when the caller supplies none."""

    def name(port: int) -> str:
        return f"gce-node-{group}-port-{port}"

    return name


class NodeProvisioner:
    """Creates Compute Engine nodes from templates."""

    def __init__(
        self,
        api,
        poller: OperationPoller,
        credential_resolver: Optional[CredentialResolver] = None,
        firewall_tag_naming: FirewallTagNaming = default_firewall_tag_naming,
    ):
        """
        Initialize the provisioner.

        Args:
            api: ComputeApi for the caller's project
            poller: Poller used for every operation and reconciliation read
            credential_resolver: Resolver for login credentials
            firewall_tag_naming: Factory group -> (port -> tag name)
        """
        self.api = api
        self.poller = poller
        self.credential_resolver = credential_resolver or CredentialResolver()
        self.firewall_tag_naming = firewall_tag_naming

    def _validate(self, template: NodeTemplate) -> None:
        if template is None:
            raise ValidationError("template must be set")
        if template.options is None:
            raise ValidationError("template options must be set")
        if not template.options.network:
            raise ValidationError("network was not present in template options")
        if template.hardware is None:
            raise ValidationError("hardware must be set")
        if not template.hardware.self_link:
            raise ValidationError("hardware must have a URI")
        if template.image is None or not template.image.self_link:
            raise ValidationError("image URI is null")
        if template.location is None:
            raise ValidationError("location must be set")

    def _resolve_network(self, network: str) -> str:
        if "/" in network:
            return network
        data = self.api.networks.get(network)
        if data is None:
            raise ValidationError(f"network {network} not found")
        return data["selfLink"]

    def _await_node(self, zone: str, name: str) -> Result[Node]:
        # Newly created instances are not always returned by the first read
        return retry_until(
            lambda: self.api.instances.get(zone, name),
            lambda node: node is not None,
            self.poller.poll_interval_millis,
            self.poller.timeout_millis,
            description=f"instance {zone}/{name} to be readable",
        )

    def _create_boot_disk(self, template: NodeTemplate, name: str) -> Result[Disk]:
        zone = template.location.name
        size = template.options.boot_disk_size or DEFAULT_BOOT_DISK_SIZE_GB
        disk_name = f"{name}-{BOOT_DISK_SUFFIX}"

        logger.info(f"Creating boot disk {disk_name} ({size}GB) in {zone}")
        operation = self.api.disks.create(
            disk_name, size, zone, source_image=template.image.self_link
        )
        waited = self.poller.wait(operation)
        if not waited.ok:
            return Result.failure(waited.error)

        return retry_until(
            lambda: self.api.disks.get(zone, disk_name),
            lambda disk: disk is not None,
            self.poller.poll_interval_millis,
            self.poller.timeout_millis,
            description=f"disk {zone}/{disk_name} to be readable",
        )

    def create_node(
        self, group: str, name: str, template: NodeTemplate
    ) -> Result[NodeAndCredentials]:
        """
        Create a node and wait until it is readable and tagged.

        Args:
            group: Provisioning group, used to name firewall tags
            name: Instance name
            template: Hardware, image, location and options of the node

        Returns:
            Result with the node, its id and login credentials. Errors are
            ValidationError, OperationTimeout or OperationFailed. Resources
            created before a failure are left in place.
        """
        try:
            self._validate(template)
            network = self._resolve_network(template.options.network)
        except ValidationError as e:
            logger.error(f"Cannot create {name}: {e}")
            return Result.failure(e)

        # Credential resolution writes into options, so work on a copy
        options = dataclasses.replace(template.options)
        zone = template.location.name

        # The first disk must be the boot disk
        disks: List[AttachedDisk] = []
        if not any(d.boot for d in options.disks):
            created = self._create_boot_disk(template, name)
            if not created.ok:
                return Result.failure(created.error)
            disks.append(
                AttachedDisk(
                    source=created.value.self_link,
                    type=DiskType.PERSISTENT,
                    mode=DiskMode.READ_WRITE,
                    boot=True,
                    auto_delete=True,
                )
            )
        disks.extend(options.disks)

        instance_template = InstanceTemplate(machine_type=template.hardware.self_link)
        if options.enable_nat:
            instance_template.add_network_interface(network, "ONE_TO_ONE_NAT")
        else:
            instance_template.add_network_interface(network)
        instance_template.disks = disks

        credentials = self.credential_resolver.resolve(template.image, options)

        metadata = dict(options.user_metadata)
        if credentials.user and options.public_key:
            metadata["sshKeys"] = f"{credentials.user}:{options.public_key}"
        metadata[IMAGE_METADATA_KEY] = template.image.self_link
        if not options.keep_boot_disk:
            metadata[DELETE_BOOT_DISK_METADATA_KEY] = "true"
        instance_template.metadata = metadata
        instance_template.service_accounts = list(options.service_accounts)

        logger.info(f"Creating instance {name} in {zone}")
        operation = self.api.instances.create(name, zone, instance_template)
        if options.block_until_running:
            waited = self.poller.wait(operation)
            if not waited.ok:
                return Result.failure(waited.error)

        found = self._await_node(zone, name)
        if not found.ok:
            return Result.failure(found.error)
        node = found.value

        if options.tags:
            waited = self.poller.wait(
                self.api.instances.set_tags(
                    zone, name, options.tags, node.tags.fingerprint
                )
            )
            if not waited.ok:
                return Result.failure(waited.error)
            found = self._await_node(zone, name)
            if not found.ok:
                return Result.failure(found.error)
            node = found.value
            logger.info(f"Applied tags {sorted(options.tags)} to {name}")

        naming = self.firewall_tag_naming(group)
        firewall_tags = {
            naming(port) for port in options.inbound_ports if port is not None
        }
        # Not awaited: the provider settles the firewall tags on its own
        self.api.instances.set_tags(
            zone, node.name, firewall_tags, node.tags.fingerprint
        )

        logger.info(f"✓ Node {node.id} created")
        return Result.success(NodeAndCredentials(node, node.id, credentials))
