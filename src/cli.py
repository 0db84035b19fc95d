"""Console entry point for the Compute Engine node adapter CLI."""

from __future__ import annotations

import argparse
import logging
from typing import List

from apis import ComputeApi
from clients import API_BASE, ComputeRestClient
from config import AdapterConfig
from credentials import bundle_key_material
from errors import ComputeError, Result
from images import ImageCatalogResolver
from lifecycle import NodeLifecycleManager
from log_utils import setup_logging
from models import (
    LoginCredentials,
    MachineType,
    Node,
    NodeTemplate,
    TemplateOptions,
    Zone,
)
from polling import OperationPoller
from provisioner import NodeProvisioner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Create, inspect and destroy Compute Engine nodes"
    )
    parser.add_argument("--project", required=True, help="GCP project ID")
    parser.add_argument("--poll-interval-millis", type=int, default=2000)
    parser.add_argument("--timeout-millis", type=int, default=600000)
    parser.add_argument(
        "--public-image-project",
        dest="public_image_projects",
        action="append",
        help="Public image project searched after --project (repeatable)",
    )
    parser.add_argument("--request-timeout", type=int, default=60)
    parser.add_argument("--max-retries", type=int, default=5)
    parser.add_argument("--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a node")
    create.add_argument("group", help="Provisioning group (names firewall tags)")
    create.add_argument("name", help="Instance name")
    create.add_argument("--zone", required=True)
    create.add_argument("--machine-type", required=True)
    create.add_argument("--image", required=True, help="Image name")
    create.add_argument("--network", default="default")
    create.add_argument("--no-nat", action="store_true")
    create.add_argument("--boot-disk-size", type=int, help="Boot disk size (GB)")
    create.add_argument("--keep-boot-disk", action="store_true")
    create.add_argument("--tag", dest="tags", action="append", default=[])
    create.add_argument(
        "--inbound-port", dest="inbound_ports", type=int, action="append"
    )
    create.add_argument(
        "--no-wait",
        action="store_true",
        help="Do not wait for the instance insert operation to finish",
    )
    create.add_argument("--login-user")
    create.add_argument("--public-key-file")
    create.add_argument("--private-key-file")

    for command in ("get", "destroy", "reboot"):
        p = sub.add_parser(command, help=f"{command.capitalize()} a node")
        p.add_argument("id", help="Node id (zone/name)")

    listing = sub.add_parser("list", help="List nodes")
    listing.add_argument("--ids", nargs="+", help="Only these ids or names")

    sub.add_parser("images", help="List images")
    sub.add_parser("zones", help="List zones")
    sub.add_parser("machine-types", help="List non-deprecated machine types")
    return parser


def _read_file(path: str) -> str:
    with open(path) as f:
        return f.read()


def build_template(
    args, project_id: str, image_resolver: ImageCatalogResolver
) -> NodeTemplate:
    """
    Build a node template from `create` arguments.

    Raises:
        ComputeError: If the image cannot be found
    """
    image = image_resolver.get_image(args.image)
    if image is None:
        raise ComputeError(f"image {args.image} not found")

    if args.public_key_file and args.private_key_file:
        image.default_credentials = LoginCredentials(
            user=args.login_user,
            private_key=bundle_key_material(
                _read_file(args.public_key_file), _read_file(args.private_key_file)
            ),
        )

    options = TemplateOptions(
        network=args.network,
        enable_nat=not args.no_nat,
        boot_disk_size=args.boot_disk_size,
        keep_boot_disk=args.keep_boot_disk,
        tags=list(args.tags),
        block_until_running=not args.no_wait,
        login_user=args.login_user,
    )
    if args.inbound_ports:
        options.inbound_ports = list(args.inbound_ports)

    hardware = MachineType(
        name=args.machine_type,
        zone=args.zone,
        self_link=(
            f"{API_BASE}/projects/{project_id}/zones/{args.zone}"
            f"/machineTypes/{args.machine_type}"
        ),
    )
    return NodeTemplate(
        hardware=hardware, image=image, location=Zone(name=args.zone), options=options
    )


def _log_node(node: Node) -> None:
    logger.info(
        f"{node.id:<40} {node.status or 'N/A':<12} tags={','.join(node.tags.items) or '-'}"
    )


def _check(result: Result, action: str) -> int:
    if result.ok:
        return 0
    logger.error(f"{action} failed: {result.error}")
    return 1


def run_command(args, config: AdapterConfig, api: ComputeApi) -> int:
    """Dispatch one CLI command; returns the process exit code."""
    poller = OperationPoller(
        api.operations, config.poll_interval_millis, config.timeout_millis
    )
    lifecycle = NodeLifecycleManager(api, poller)
    image_resolver = ImageCatalogResolver(api, config.public_image_projects)

    if args.command == "create":
        template = build_template(args, config.project_id, image_resolver)
        provisioner = NodeProvisioner(api, poller)
        result = provisioner.create_node(args.group, args.name, template)
        if result.ok:
            _log_node(result.value.node)
            logger.info(f"Login user: {result.value.credentials.user or 'N/A'}")
        return _check(result, f"Create {args.name}")

    if args.command == "get":
        node = lifecycle.get_node(args.id)
        if node is None:
            logger.error(f"Node {args.id} not found")
            return 1
        _log_node(node)
        return 0

    if args.command == "list":
        nodes = (
            lifecycle.list_nodes_by_ids(args.ids)
            if args.ids
            else lifecycle.list_nodes()
        )
        for node in nodes:
            _log_node(node)
        logger.info(f"{len(nodes)} node(s)")
        return 0

    if args.command == "destroy":
        return _check(lifecycle.destroy_node(args.id), f"Destroy {args.id}")

    if args.command == "reboot":
        return _check(lifecycle.reboot_node(args.id), f"Reboot {args.id}")

    if args.command == "images":
        for image in image_resolver.list_images():
            logger.info(f"{image.project:<20} {image.name}")
        return 0

    if args.command == "zones":
        for zone in lifecycle.list_locations():
            logger.info(f"{zone.name:<25} {zone.region or 'N/A'}")
        return 0

    if args.command == "machine-types":
        for mt in lifecycle.list_hardware_profiles():
            logger.info(f"{mt.zone:<25} {mt.name:<20} cpus={mt.guest_cpus} mem={mt.memory_mb}MB")
        return 0

    logger.error(f"Unknown command: {args.command}")
    return 2


def main(argv: List[str] | None = None) -> int:
    """CLI main for console_scripts entry point."""
    parser = build_parser()
    args = parser.parse_args(args=argv)

    setup_logging(verbose=args.verbose)
    config = AdapterConfig.from_args(args)

    client = ComputeRestClient(
        timeout_s=config.request_timeout, max_retries=config.max_retries
    )
    api = ComputeApi(config.project_id, client=client)
    try:
        return run_command(args, config, api)
    except ComputeError as e:
        logger.error(str(e))
        return 1
