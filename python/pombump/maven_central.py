"""Client for fetching parent POMs from a Maven repository."""

import logging
from typing import Optional

import requests

from . import __version__

logger = logging.getLogger(__name__)

MAVEN_CENTRAL_URL = "https://repo1.maven.org/maven2"
REQUEST_TIMEOUT = 30


class MavenCentralClient:
    """Downloads POM files by coordinates from a Maven 2 layout repository."""

    def __init__(self, base_url: str = MAVEN_CENTRAL_URL, timeout: int = REQUEST_TIMEOUT):
        """Initialize the client."""
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "application/xml, text/xml",
            "User-Agent": f"pombump/{__version__}"
        })

    def pom_url(self, group_id: str, artifact_id: str, version: str) -> str:
        group_path = group_id.replace('.', '/')
        return f"{self.base_url}/{group_path}/{artifact_id}/{version}/{artifact_id}-{version}.pom"

    def fetch_pom(self, group_id: str, artifact_id: str, version: str) -> Optional[str]:
        """
        Fetch the POM text for a coordinate.

        Returns:
            The POM XML, or None if the request fails
        """
        if not (group_id and artifact_id and version):
            return None

        url = self.pom_url(group_id, artifact_id, version)
        logger.info(f"Downloading POM from Maven repository: {group_id}:{artifact_id}:{version}")
        logger.debug(f"  URL: {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
            if response.status_code == 200:
                return response.text
            logger.info(
                f"Failed to download POM {group_id}:{artifact_id}:{version}: "
                f"HTTP {response.status_code}"
            )
            return None
        except requests.RequestException as e:
            logger.warning(f"Error downloading POM {group_id}:{artifact_id}:{version}: {e}")
            return None

    def close(self):
        """Close the session and clean up resources."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
