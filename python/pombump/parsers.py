"""Input parsers: POM manifests and patch specifications."""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Dict, Optional, Union
from urllib.parse import urlparse

import requests
import yaml

from .models import Dependency, Parent, Patch, Project

logger = logging.getLogger(__name__)

DEFAULT_PARENT_RELATIVE_PATH = '../pom.xml'


class PomParseError(Exception):
    """Raised when a manifest cannot be read or is not valid POM XML."""


def is_url(path: str) -> bool:
    """Check if a path is a URL."""
    result = urlparse(path)
    return result.scheme in ('http', 'https')


def _read_content(path: str) -> bytes:
    """
    Read raw bytes from either a file path or URL.

    Decoding is left to the XML parser so the declared encoding is honoured.

    Raises:
        OSError: If the file can't be read
        requests.RequestException: If URL fetch fails
    """
    if is_url(path):
        logger.info(f"Fetching content from URL: {path}")
        response = requests.get(path, timeout=30)
        response.raise_for_status()
        return response.content
    else:
        logger.info(f"Reading content from file: {path}")
        with open(path, 'rb') as f:
            return f.read()


def _local_name(tag) -> str:
    """Strip the XML namespace from a tag; comments and PIs have no name."""
    if not isinstance(tag, str):
        return ''
    return tag.split('}')[-1] if '}' in tag else tag


def find_child(parent: ET.Element, tag_name: str) -> Optional[ET.Element]:
    """Find a direct child by local name, with or without the POM namespace."""
    for child in parent:
        if _local_name(child.tag) == tag_name:
            return child
    return None


def get_element_text(parent: ET.Element, tag_name: str) -> Optional[str]:
    """Get stripped text content of a direct child element."""
    elem = find_child(parent, tag_name)
    if elem is not None and elem.text:
        return elem.text.strip()
    return None


def parse_properties(root: ET.Element) -> Optional[Dict[str, str]]:
    """Parse all properties from the <properties> section."""
    props_elem = find_child(root, 'properties')
    if props_elem is None:
        return None

    properties = {}
    for prop in props_elem:
        tag = _local_name(prop.tag)
        if tag:
            properties[tag] = prop.text.strip() if prop.text else ''
    return properties


def parse_dependency(dep_elem: ET.Element) -> Dependency:
    """Parse a single <dependency> element, keeping the version text as written."""
    return Dependency(
        group_id=get_element_text(dep_elem, 'groupId') or '',
        artifact_id=get_element_text(dep_elem, 'artifactId') or '',
        version=get_element_text(dep_elem, 'version') or '',
        scope=get_element_text(dep_elem, 'scope') or '',
        type=get_element_text(dep_elem, 'type') or '',
        optional=get_element_text(dep_elem, 'optional') == 'true',
    )


def parse_dependency_list(container: Optional[ET.Element]) -> Optional[List[Dependency]]:
    """Parse the <dependency> children of a <dependencies> element."""
    if container is None:
        return None
    return [
        parse_dependency(dep) for dep in container
        if _local_name(dep.tag) == 'dependency'
    ]


def parse_parent(root: ET.Element) -> Optional[Parent]:
    """Parse the <parent> reference, if any."""
    parent_elem = find_child(root, 'parent')
    if parent_elem is None:
        return None

    relative_elem = find_child(parent_elem, 'relativePath')
    relative_path = None
    if relative_elem is not None:
        # An explicit empty <relativePath/> disables the local lookup
        relative_path = relative_elem.text.strip() if relative_elem.text else ''

    return Parent(
        group_id=get_element_text(parent_elem, 'groupId') or '',
        artifact_id=get_element_text(parent_elem, 'artifactId') or '',
        version=get_element_text(parent_elem, 'version') or '',
        relative_path=relative_path,
    )


def parse_pom_root(root: ET.Element, file_path: Optional[str] = None) -> Project:
    """Build a Project from an already parsed <project> element."""
    if _local_name(root.tag) != 'project':
        raise PomParseError(f"failed to parse POM file {file_path}: root element is <{_local_name(root.tag)}>, expected <project>")

    parent = parse_parent(root)

    group_id = get_element_text(root, 'groupId')
    version = get_element_text(root, 'version')
    # Inherit groupId/version from parent if not specified
    if parent is not None:
        group_id = group_id or parent.group_id
        version = version or parent.version

    dep_mgmt_elem = find_child(root, 'dependencyManagement')
    managed = None
    if dep_mgmt_elem is not None:
        managed = parse_dependency_list(find_child(dep_mgmt_elem, 'dependencies'))

    modules_elem = find_child(root, 'modules')
    modules = None
    if modules_elem is not None:
        modules = [
            module.text.strip() for module in modules_elem
            if _local_name(module.tag) == 'module' and module.text and module.text.strip()
        ]

    project = Project(
        group_id=group_id or '',
        artifact_id=get_element_text(root, 'artifactId') or '',
        version=version or '',
        packaging=get_element_text(root, 'packaging') or 'jar',
        parent=parent,
        properties=parse_properties(root),
        dependencies=parse_dependency_list(find_child(root, 'dependencies')),
        dependency_management=managed,
        modules=modules,
        file_path=file_path,
    )
    logger.debug(
        f"Parsed {project.coordinates}: {len(project.dependencies or [])} dependencies, "
        f"{len(project.dependency_management or [])} managed, {len(project.properties or {})} properties"
    )
    return project


def parse_pom_string(content: Union[str, bytes], file_path: Optional[str] = None) -> Project:
    """Parse POM XML text, or raw bytes in the encoding their XML declaration names."""
    try:
        root = ET.fromstring(content)
    except (ET.ParseError, UnicodeError) as e:
        raise PomParseError(f"failed to parse POM file {file_path}: {e}") from e
    return parse_pom_root(root, file_path)


def parse_pom_file(file_path: str) -> Project:
    """
    Parse a Maven pom.xml file (local path or http(s) URL).

    Raises:
        PomParseError: If the file can't be read or isn't a valid POM
    """
    if not file_path:
        raise PomParseError("failed to parse POM file: no path given")

    try:
        content = _read_content(file_path)
    except (OSError, requests.RequestException) as e:
        raise PomParseError(f"failed to parse POM file {file_path}: {e}") from e

    return parse_pom_string(content, file_path)


def resolve_module_pom(base_dir: Path, module: str) -> Path:
    """Map a <module> or <relativePath> entry to a pom.xml path."""
    candidate = base_dir / module
    if candidate.suffix != '.xml':
        candidate = candidate / 'pom.xml'
    return candidate


def parse_patch_spec(spec: str) -> Patch:
    """
    Parse a patch in groupId@artifactId@version[@scope[@type]] form.

    Raises:
        ValueError: If the spec has the wrong number of fields or empty coordinates
    """
    parts = spec.strip().split('@')
    if len(parts) < 3 or len(parts) > 5 or not all(parts[:3]):
        raise ValueError(
            f"invalid patch specification {spec!r}: expected groupId@artifactId@version[@scope[@type]]"
        )

    return Patch(
        group_id=parts[0],
        artifact_id=parts[1],
        version=parts[2],
        scope=parts[3] if len(parts) > 3 else '',
        type=parts[4] if len(parts) > 4 else '',
    )


def parse_patch_file(file_path: str) -> List[Patch]:
    """
    Load patches from a YAML patch file (a top-level ``patches`` list).

    Raises:
        OSError: If the file can't be read
        ValueError: If the content isn't a valid patch list
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"invalid patch file {file_path}: {e}") from e

    if not data:
        return []
    if not isinstance(data, dict) or not isinstance(data.get('patches') or [], list):
        raise ValueError(f"invalid patch file {file_path}: expected a 'patches' list")

    patches = []
    for entry in data.get('patches') or []:
        if not isinstance(entry, dict):
            raise ValueError(f"invalid patch file {file_path}: patch entries must be mappings")
        patch = Patch.from_dict(entry)
        if not (patch.group_id and patch.artifact_id and patch.version):
            raise ValueError(f"invalid patch file {file_path}: incomplete patch {entry}")
        patches.append(patch)

    logger.info(f"Loaded {len(patches)} patches from {file_path}")
    return patches


def parse_patches(patch_file: Optional[str], patches: Optional[str]) -> List[Patch]:
    """Collect patches from a patch file followed by a space-separated list."""
    result: List[Patch] = []
    if patch_file:
        result.extend(parse_patch_file(patch_file))
    if patches:
        result.extend(parse_patch_spec(spec) for spec in patches.split())
    return result
