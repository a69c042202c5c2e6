"""Read-merge-write of the YAML patch files consumed by the patching step."""

import logging
import os
from typing import Any, Dict, List

import yaml

from .models import Patch, PropertyPatch

logger = logging.getLogger(__name__)

FILE_MODE = 0o600


def _load_existing(file_path: str, list_key: str) -> List[Dict[str, Any]]:
    """Return the entries of an existing patch file, or [] if it is missing or unusable."""
    if not os.path.exists(file_path):
        return []

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not read existing {file_path}, starting fresh: {e}")
        return []

    if not isinstance(data, dict) or not isinstance(data.get(list_key), list):
        if data:
            logger.warning(f"{file_path} has no '{list_key}' list, starting fresh")
        return []

    return [entry for entry in data[list_key] if isinstance(entry, dict)]


def _write_yaml(file_path: str, data: Dict[str, Any]) -> None:
    fd = os.open(file_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
    with os.fdopen(fd, 'w', encoding='utf-8') as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    os.chmod(file_path, FILE_MODE)


def write_deps_file(file_path: str, patches: List[Patch]) -> int:
    """
    Merge dependency patches into a patch file, keyed by groupId:artifactId.

    New patches replace existing entries with the same key; other existing
    entries are kept.

    Returns:
        Number of patches in the written file
    """
    merged: Dict[str, Patch] = {}
    for entry in _load_existing(file_path, 'patches'):
        existing = Patch.from_dict(entry)
        merged[existing.key] = existing

    for patch in patches:
        merged[patch.key] = patch

    _write_yaml(file_path, {'patches': [patch.to_dict() for patch in merged.values()]})
    logger.info(f"Wrote {len(merged)} patches to {file_path}")
    return len(merged)


def write_properties_file(file_path: str, properties: Dict[str, str]) -> int:
    """
    Merge property patches into a properties file, keyed by property name.

    Returns:
        Number of properties in the written file
    """
    merged: Dict[str, str] = {}
    for entry in _load_existing(file_path, 'properties'):
        name = entry.get('property')
        if name:
            merged[str(name)] = str(entry.get('value') or '')

    merged.update(properties)

    property_list = [PropertyPatch(property=name, value=value).to_dict() for name, value in merged.items()]
    _write_yaml(file_path, {'properties': property_list})
    logger.info(f"Wrote {len(merged)} properties to {file_path}")
    return len(merged)
