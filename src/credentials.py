"""
Login credential resolution for new nodes.
"""

from dataclasses import replace

from models import Image, LoginCredentials, TemplateOptions

KEY_SEPARATOR = ":"


def bundle_key_material(public_key: str, private_key: str) -> str:
    """Combine a key pair into the single value stored on image defaults."""
    return f"{public_key.strip()}{KEY_SEPARATOR}{private_key}"


class CredentialResolver:
    """Merges an image's default login bundle with caller overrides."""

    def resolve(self, image: Image, options: TemplateOptions) -> LoginCredentials:
        """
        Resolve the final login credentials for a node.

        The image default bundle carries "<public>:<private>" in its
        private_key. The embedded public key becomes the authorized key
        unless the options already set one. The merged bundle is written
        back to options.login_credentials.

        Args:
            image: Image the node boots from
            options: Template options; updated in place

        Returns:
            Resolved LoginCredentials
        """
        defaults = image.default_credentials or LoginCredentials()

        public_key = None
        private_key = defaults.private_key
        if private_key and KEY_SEPARATOR in private_key:
            public_key, private_key = private_key.split(KEY_SEPARATOR, 1)

        if options.public_key is None:
            options.public_key = public_key

        credentials = replace(defaults, private_key=private_key)
        if options.login_private_key is not None:
            credentials.private_key = options.login_private_key
        if options.login_user is not None:
            credentials.user = options.login_user
        if options.login_password is not None:
            credentials.password = options.login_password
        if options.authenticate_sudo is not None:
            credentials.authenticate_sudo = options.authenticate_sudo
        credentials.public_key = options.public_key

        options.login_credentials = credentials
        return credentials
