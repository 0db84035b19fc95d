"""
Image catalog lookups across the caller's project and public image projects.
"""

import logging
from typing import List, Optional

from models import Image

logger = logging.getLogger(__name__)


class ImageCatalogResolver:
    """Searches image catalogs in fixed precedence order."""

    def __init__(self, api, public_image_projects: List[str]):
        """
        Args:
            api: ComputeApi; api.images(project) returns that project's ImageApi
            public_image_projects: Public projects searched after the caller's own
        """
        self.api = api
        self.public_image_projects = list(public_image_projects)

    @property
    def namespaces(self) -> List[str]:
        return [self.api.project_id] + self.public_image_projects

    def list_images(self) -> List[Image]:
        """List images of every namespace in order. Duplicates are kept."""
        images: List[Image] = []
        for project in self.namespaces:
            found = self.api.images(project).list()
            logger.debug(f"Found {len(found)} image(s) in {project}")
            images.extend(found)
        return images

    def get_image(self, image_id: str) -> Optional[Image]:
        """Return the first image named image_id, the caller's project first."""
        for project in self.namespaces:
            image = self.api.images(project).get(image_id)
            if image is not None:
                return image
        return None
