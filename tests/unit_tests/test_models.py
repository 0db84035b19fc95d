"""
Unit tests for data models.
"""

import unittest

from errors import OperationFailed, Result, ValidationError
from models import (
    AttachedDisk,
    DiskMode,
    DiskType,
    Image,
    MachineType,
    Node,
    Operation,
    OperationStatus,
    Zone,
    decode_node_id,
    encode_node_id,
    last_segment,
)


class TestNodeIds(unittest.TestCase):
    """Test slash-encoded node ids."""

    def test_encode_decode(self):
        """Test ids join and split zone and name."""
        node_id = encode_node_id("europe-west2-a", "web-1")
        self.assertEqual(node_id, "europe-west2-a/web-1")
        self.assertEqual(decode_node_id(node_id), ("europe-west2-a", "web-1"))

    def test_decode_malformed(self):
        """Test malformed ids are rejected."""
        for bad in ("web-1", "a/b/c", "/web-1", "europe-west2-a/", "", None):
            with self.assertRaises(ValidationError):
                decode_node_id(bad)

    def test_last_segment(self):
        """Test resource names are taken from self links."""
        self.assertEqual(last_segment(".../zones/europe-west2-a/disks/vm1-bootdisk"), "vm1-bootdisk")
        self.assertEqual(last_segment("vm1"), "vm1")
        self.assertIsNone(last_segment(None))


class TestOperation(unittest.TestCase):
    """Test Operation data model."""

    def test_from_json(self):
        """Test operation JSON parsing."""
        op = Operation.from_json(
            {
                "name": "operation-123",
                "zone": "https://compute.googleapis.com/compute/v1/projects/p/zones/europe-west2-a",
                "status": "DONE",
                "operationType": "insert",
                "targetLink": "https://.../instances/web-1",
                "error": {"errors": [{"code": "RESOURCE_ALREADY_EXISTS", "message": "exists"}]},
            }
        )
        self.assertEqual(op.zone, "europe-west2-a")
        self.assertEqual(op.status, OperationStatus.DONE)
        self.assertTrue(op.done)
        self.assertTrue(op.has_error)
        self.assertEqual(op.error_code, "RESOURCE_ALREADY_EXISTS")
        self.assertEqual(op.error_message, "exists")

    def test_http_error_preferred(self):
        """Test HTTP error fields take precedence."""
        op = Operation(
            name="op",
            status=OperationStatus.DONE,
            http_error_status_code=412,
            http_error_message="PRECONDITION_FAILED",
            errors=[{"code": "CONDITION_NOT_MET", "message": "fingerprint"}],
        )
        self.assertEqual(op.error_code, 412)
        self.assertEqual(op.error_message, "PRECONDITION_FAILED")

    def test_running_without_error(self):
        """Test a running operation has no error."""
        op = Operation(name="op", status=OperationStatus.RUNNING)
        self.assertFalse(op.done)
        self.assertFalse(op.has_error)
        self.assertIsNone(op.error_code)


class TestNode(unittest.TestCase):
    """Test Node data model."""

    def test_from_json(self):
        """Test instance JSON parsing keeps disk order."""
        node = Node.from_json(
            {
                "name": "web-1",
                "zone": "https://compute.googleapis.com/compute/v1/projects/p/zones/europe-west2-a",
                "status": "RUNNING",
                "disks": [
                    {"type": "PERSISTENT", "mode": "READ_WRITE", "boot": True, "source": ".../disks/web-1-boot-disk"},
                    {"type": "SCRATCH", "mode": "READ_WRITE", "boot": False},
                ],
                "networkInterfaces": [{"network": ".../networks/default", "networkIP": "10.0.0.2"}],
                "tags": {"items": ["web"], "fingerprint": "abc="},
                "metadata": {"fingerprint": "m=", "items": [{"key": "k", "value": "v"}]},
            }
        )
        self.assertEqual(node.id, "europe-west2-a/web-1")
        self.assertTrue(node.disks[0].boot)
        self.assertEqual(node.disks[1].type, DiskType.SCRATCH)
        self.assertEqual(node.network_interfaces[0].network_ip, "10.0.0.2")
        self.assertEqual(node.tags.items, ["web"])
        self.assertEqual(node.tags.fingerprint, "abc=")
        self.assertEqual(node.metadata.items, {"k": "v"})

    def test_missing_tags_and_metadata(self):
        """Test instances without tags or metadata parse to empty values."""
        node = Node.from_json({"name": "web-1"}, zone="europe-west2-a")
        self.assertEqual(node.tags.items, [])
        self.assertIsNone(node.tags.fingerprint)
        self.assertEqual(node.metadata.items, {})


class TestAttachedDisk(unittest.TestCase):
    """Test AttachedDisk data model."""

    def test_to_json(self):
        """Test boot disk request JSON."""
        disk = AttachedDisk(source="link", boot=True, auto_delete=True)
        self.assertEqual(
            disk.to_json(),
            {"type": "PERSISTENT", "mode": "READ_WRITE", "boot": True, "autoDelete": True, "source": "link"},
        )

    def test_defaults(self):
        """Test attached disks default to a non-boot read-write persistent disk."""
        disk = AttachedDisk()
        self.assertFalse(disk.boot)
        self.assertEqual(disk.mode, DiskMode.READ_WRITE)
        self.assertEqual(disk.type, DiskType.PERSISTENT)


class TestReferenceData(unittest.TestCase):
    """Test Zone, MachineType and Image parsing."""

    def test_zone_from_json(self):
        zone = Zone.from_json({"name": "europe-west2-a", "region": ".../regions/europe-west2", "status": "UP"})
        self.assertEqual(zone.region, "europe-west2")

    def test_machine_type_from_json(self):
        mt = MachineType.from_json(
            {"name": "e2-small", "zone": "europe-west2-a", "guestCpus": 2, "memoryMb": 2048}
        )
        self.assertEqual(mt.zone, "europe-west2-a")
        self.assertEqual(mt.guest_cpus, 2)
        self.assertIsNone(mt.deprecated)

    def test_image_from_json(self):
        image = Image.from_json({"name": "debian-12", "selfLink": "link"}, project="debian-cloud")
        self.assertEqual(image.project, "debian-cloud")
        self.assertIsNone(image.default_credentials)


class TestResult(unittest.TestCase):
    """Test the Result type."""

    def test_success(self):
        result = Result.success(5)
        self.assertTrue(result.ok)
        self.assertEqual(result.unwrap(), 5)

    def test_failure_unwrap_raises(self):
        """Test unwrap raises the carried error."""
        result = Result.failure(OperationFailed(400, "bad"))
        self.assertFalse(result.ok)
        with self.assertRaises(OperationFailed) as ctx:
            result.unwrap()
        self.assertEqual(ctx.exception.code, 400)
        self.assertIn("Http Error Code: 400", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
