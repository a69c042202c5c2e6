"""Property reference detection and lookup."""

import logging
from typing import Dict, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

PROPERTY_PREFIX = "${"
PROPERTY_SUFFIX = "}"


def extract_property_reference(version: str) -> Tuple[bool, str]:
    """
    Check whether a version string is a whole-string property reference.

    Only ``${name}`` with nothing before or after the delimiters counts.
    The body is returned verbatim: whitespace is kept and nested references
    are unwrapped once, so ``${${x}}`` yields ``${x}``.

    Args:
        version: Raw version text from the manifest

    Returns:
        Tuple of (is_reference, property_name); the name is empty for literals
    """
    if not version:
        return False, ""
    if not version.startswith(PROPERTY_PREFIX) or not version.endswith(PROPERTY_SUFFIX):
        return False, ""

    name = version[len(PROPERTY_PREFIX):-len(PROPERTY_SUFFIX)]
    if not name:
        return False, ""
    return True, name


class PropertyLookup(Protocol):
    """Source of property values defined outside the analyzed manifest."""

    def resolve(self, name: str) -> Tuple[Optional[str], bool]:
        ...


class PropertyResolver:
    """Resolves property names against a manifest's own properties, then an optional lookup."""

    def __init__(self, properties: Optional[Dict[str, str]] = None, lookup: Optional[PropertyLookup] = None):
        self.properties = properties or {}
        self.lookup = lookup

    def resolve(self, name: str) -> Tuple[Optional[str], bool]:
        """
        Look up a property value.

        Returns:
            Tuple of (value, found); an undefined property is (None, False)
        """
        if name in self.properties:
            return self.properties[name], True

        if self.lookup is not None:
            value, found = self.lookup.resolve(name)
            if found:
                logger.debug(f"Resolved property {name} from project tree: {value}")
                return value, True

        logger.debug(f"Property {name} is not defined")
        return None, False
