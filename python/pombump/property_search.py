"""Property search across a multi-module project tree."""

import logging
from collections import deque
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .maven_central import MavenCentralClient
from .models import Project
from .parsers import (
    DEFAULT_PARENT_RELATIVE_PATH, PomParseError, is_url, parse_pom_file, parse_pom_string, resolve_module_pom,
)

logger = logging.getLogger(__name__)

MAX_SEARCH_DEPTH = 10


def project_builtin_properties(project: Project) -> Dict[str, str]:
    """Return the project.* values a manifest implicitly defines."""
    builtins = {}
    if project.version:
        builtins['project.version'] = project.version
    if project.group_id:
        builtins['project.groupId'] = project.group_id
    if project.artifact_id:
        builtins['project.artifactId'] = project.artifact_id
    return builtins


class PomTreePropertySearcher:
    """
    Looks up property definitions in the manifests around a POM.

    Manifests are visited in this order: the POM itself, its parent chain
    (nearest first, falling back to the remote repository when a parent is
    not available locally and a client is configured), then the declared
    modules of the POM and of every local ancestor, breadth first. The first
    manifest defining a property wins. A POM given as an http(s) URL has no
    local tree, so only its remote parents are searched. Manifests are only
    read when a lookup misses everything loaded so far, and unreadable ones
    are skipped.
    """

    def __init__(self, pom_path: str, remote_client: Optional[MavenCentralClient] = None,
                 max_depth: int = MAX_SEARCH_DEPTH):
        self.pom_path = pom_path
        self.remote_client = remote_client
        self.max_depth = max_depth
        self.properties: Dict[str, str] = {}
        self.sources: Dict[str, str] = {}  # property name -> manifest it came from
        self._projects = self._iter_projects()
        self._exhausted = False

    def resolve(self, name: str) -> Tuple[Optional[str], bool]:
        """Return (value, found) for a property defined anywhere in the tree."""
        while name not in self.properties and not self._exhausted:
            try:
                project = next(self._projects)
            except StopIteration:
                self._exhausted = True
                break
            self._merge(project)

        if name in self.properties:
            logger.info(f"Found property {name} in {self.sources[name]}")
            return self.properties[name], True
        return None, False

    def _merge(self, project: Project) -> None:
        source = project.file_path or project.coordinates
        defined = dict(project_builtin_properties(project))
        defined.update(project.properties or {})
        for name, value in defined.items():
            if name not in self.properties:
                self.properties[name] = value
                self.sources[name] = source

    def _load_manifest(self, path) -> Optional[Project]:
        try:
            return parse_pom_file(str(path))
        except PomParseError as e:
            logger.debug(f"Skipping unreadable POM {path}: {e}")
            return None

    def _load_remote(self, group_id: str, artifact_id: str, version: str) -> Optional[Project]:
        if self.remote_client is None:
            return None
        content = self.remote_client.fetch_pom(group_id, artifact_id, version)
        if content is None:
            return None
        try:
            return parse_pom_string(content, f"maven-central:{group_id}:{artifact_id}:{version}")
        except PomParseError as e:
            logger.warning(f"Skipping invalid remote POM {group_id}:{artifact_id}:{version}: {e}")
            return None

    def _find_parent(self, project: Project, path: Optional[Path]) -> Tuple[Optional[Project], Optional[Path]]:
        """Locate a project's parent, locally first, then remotely."""
        parent = project.parent
        if parent is None:
            return None, None

        relative_path = parent.relative_path
        if relative_path is None:
            relative_path = DEFAULT_PARENT_RELATIVE_PATH

        if path is not None and relative_path:
            parent_path = resolve_module_pom(path.parent, relative_path).resolve()
            if parent_path.exists():
                candidate = self._load_manifest(parent_path)
                if candidate is not None and \
                        candidate.group_id == parent.group_id and candidate.artifact_id == parent.artifact_id:
                    logger.debug(f"Found parent POM at: {parent_path}")
                    return candidate, parent_path
                logger.debug(f"Local POM at {parent_path} is not {parent.group_id}:{parent.artifact_id}")

        return self._load_remote(parent.group_id, parent.artifact_id, parent.version), None

    def _iter_projects(self) -> Iterator[Project]:
        if is_url(self.pom_path):
            start_path = None
            start = self._load_manifest(self.pom_path)
            if start is not None and self.remote_client is None:
                logger.warning(
                    f"{self.pom_path} is not a local file: only remote parents can be searched, "
                    f"and remote parent lookup is disabled"
                )
        else:
            start_path = Path(self.pom_path).resolve()
            start = self._load_manifest(start_path)
        if start is None:
            return

        visited: Set[Path] = set()
        # Local manifests whose <modules> are searched after the parent chain
        module_roots: List[Tuple[Project, Path]] = []
        if start_path is not None:
            visited.add(start_path)
            module_roots.append((start, start_path))
        yield start

        current, current_path = start, start_path
        for _ in range(self.max_depth):
            parent, parent_path = self._find_parent(current, current_path)
            if parent is None:
                break
            if parent_path is not None:
                if parent_path in visited:
                    break
                visited.add(parent_path)
                module_roots.append((parent, parent_path))
            yield parent
            current, current_path = parent, parent_path

        queue = deque((project, path, 0) for project, path in module_roots)
        while queue:
            project, path, depth = queue.popleft()
            if depth >= self.max_depth:
                continue
            for module in project.modules or []:
                module_path = resolve_module_pom(path.parent, module).resolve()
                if module_path in visited:
                    continue
                visited.add(module_path)
                module_project = self._load_manifest(module_path)
                if module_project is None:
                    continue
                yield module_project
                queue.append((module_project, module_path, depth + 1))
