"""
Unit tests for ImageCatalogResolver.
"""

import unittest

from fakes import FakeComputeApi
from images import ImageCatalogResolver
from models import Image


class TestImageCatalogResolver(unittest.TestCase):
    """Test image catalog precedence across namespaces."""

    def setUp(self):
        self.api = FakeComputeApi(project_id="my-project")
        self.api.image_catalogs = {
            "my-project": [Image(name="shared", project="my-project")],
            "debian-cloud": [
                Image(name="debian-12", project="debian-cloud"),
                Image(name="shared", project="debian-cloud"),
            ],
            "centos-cloud": [
                Image(name="centos-7", project="centos-cloud"),
                Image(name="debian-12", project="centos-cloud"),
            ],
        }
        self.resolver = ImageCatalogResolver(self.api, ["debian-cloud", "centos-cloud"])

    def test_list_images_concatenates_in_order(self):
        """Test catalogs are listed caller-first without de-duplication."""
        images = self.resolver.list_images()

        self.assertEqual(
            [(i.project, i.name) for i in images],
            [
                ("my-project", "shared"),
                ("debian-cloud", "debian-12"),
                ("debian-cloud", "shared"),
                ("centos-cloud", "centos-7"),
                ("centos-cloud", "debian-12"),
            ],
        )

    def test_caller_namespace_wins(self):
        """Test a caller image shadows a public image with the same name."""
        image = self.resolver.get_image("shared")

        self.assertEqual(image.project, "my-project")

    def test_public_namespaces_in_priority_order(self):
        """Test the first public project in order wins."""
        self.assertEqual(self.resolver.get_image("debian-12").project, "debian-cloud")
        self.assertEqual(self.resolver.get_image("centos-7").project, "centos-cloud")

    def test_lookup_stops_at_first_hit(self):
        """Test later namespaces are not queried after a hit."""
        self.resolver.get_image("shared")

        self.assertEqual(
            [c for c in self.api.calls if c[0] == "get_image"],
            [("get_image", "my-project", "shared")],
        )

    def test_missing_image(self):
        """Test None when no namespace has the image."""
        self.assertIsNone(self.resolver.get_image("windows-2022"))


if __name__ == "__main__":
    unittest.main()
