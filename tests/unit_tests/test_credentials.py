"""
Unit tests for CredentialResolver.
"""

import unittest

from credentials import CredentialResolver, bundle_key_material
from models import Image, LoginCredentials, TemplateOptions


def _image(private_key="pub123:priv456", user="debian"):
    return Image(
        name="debian-12",
        project="debian-cloud",
        self_link="https://compute.googleapis.com/compute/v1/projects/debian-cloud/global/images/debian-12",
        default_credentials=LoginCredentials(user=user, private_key=private_key),
    )


class TestCredentialResolver(unittest.TestCase):
    """Test merging image defaults with caller overrides."""

    def setUp(self):
        self.resolver = CredentialResolver()

    def test_embedded_public_key_is_used_without_override(self):
        """Test the image public key becomes the authorized key."""
        options = TemplateOptions()

        credentials = self.resolver.resolve(_image(), options)

        self.assertEqual(credentials.public_key, "pub123")
        self.assertEqual(options.public_key, "pub123")
        self.assertEqual(credentials.private_key, "priv456")
        self.assertEqual(credentials.user, "debian")

    def test_caller_public_key_is_kept(self):
        """Test an explicit public key is not replaced."""
        options = TemplateOptions(public_key="ssh-rsa CALLER")

        credentials = self.resolver.resolve(_image(), options)

        self.assertEqual(options.public_key, "ssh-rsa CALLER")
        self.assertEqual(credentials.public_key, "ssh-rsa CALLER")

    def test_private_key_override(self):
        """Test an explicit private key wins over the image default."""
        options = TemplateOptions(login_private_key="my-private-key")

        credentials = self.resolver.resolve(_image(), options)

        self.assertEqual(credentials.private_key, "my-private-key")

    def test_independent_overrides(self):
        """Test user, password and sudo flag are overridden independently."""
        options = TemplateOptions(
            login_user="admin", login_password="s3cret", authenticate_sudo=True
        )

        credentials = self.resolver.resolve(_image(), options)

        self.assertEqual(credentials.user, "admin")
        self.assertEqual(credentials.password, "s3cret")
        self.assertTrue(credentials.authenticate_sudo)
        self.assertEqual(credentials.private_key, "priv456")

    def test_result_written_back_to_options(self):
        """Test the merged credentials are stored on the options."""
        options = TemplateOptions(login_user="admin")

        credentials = self.resolver.resolve(_image(), options)

        self.assertIs(options.login_credentials, credentials)

    def test_image_defaults_not_mutated(self):
        """Test the image default bundle is left unchanged."""
        image = _image()

        self.resolver.resolve(image, TemplateOptions(login_user="admin"))

        self.assertEqual(image.default_credentials.private_key, "pub123:priv456")
        self.assertEqual(image.default_credentials.user, "debian")

    def test_bundle_without_separator(self):
        """Test a bundle without public key is used as the private key."""
        options = TemplateOptions()

        credentials = self.resolver.resolve(_image(private_key="only-private"), options)

        self.assertEqual(credentials.private_key, "only-private")
        self.assertIsNone(options.public_key)

    def test_private_key_keeps_later_separators(self):
        """Test only the first separator splits the bundle."""
        credentials = self.resolver.resolve(
            _image(private_key="pub:Proc-Type: 4,ENCRYPTED"), TemplateOptions()
        )

        self.assertEqual(credentials.private_key, "Proc-Type: 4,ENCRYPTED")

    def test_bundle_key_material(self):
        """Test key files are combined into a single bundle."""
        self.assertEqual(bundle_key_material("ssh-rsa AAA\n", "PRIV"), "ssh-rsa AAA:PRIV")


if __name__ == "__main__":
    unittest.main()
