"""Dependency, property and BOM analysis of a parsed manifest."""

import logging
from typing import Optional

from .maven_central import MavenCentralClient
from .models import (
    AnalysisResult, BOMInfo, Dependency, DependencyInfo, Project, BOM_SCOPE, BOM_TYPE,
)
from .parsers import parse_pom_file
from .property_resolver import PropertyLookup, PropertyResolver, extract_property_reference
from .property_search import PomTreePropertySearcher

logger = logging.getLogger(__name__)


def is_bom_import(dep: Dependency) -> bool:
    """A managed dependency is a BOM import iff type=pom and scope=import."""
    return dep.type == BOM_TYPE and dep.scope == BOM_SCOPE


def _record_usage(result: AnalysisResult, info: DependencyInfo, delta: int) -> None:
    if not info.uses_property:
        return
    counts = result.property_usage_counts
    counts[info.property_name] = counts.get(info.property_name, 0) + delta
    if counts[info.property_name] <= 0:
        del counts[info.property_name]


def analyze_dependency(dep: Dependency, result: AnalysisResult, managed: bool = False) -> DependencyInfo:
    """
    Record one dependency declaration in the analysis result.

    Plain <dependencies> records take precedence: a managed entry only
    replaces an existing record for the same key when that record declares no
    version of its own (its version comes from dependencyManagement).

    Returns:
        The DependencyInfo now stored under the dependency's key
    """
    uses_property, property_name = extract_property_reference(dep.version)
    info = DependencyInfo(
        group_id=dep.group_id,
        artifact_id=dep.artifact_id,
        version=dep.version,
        uses_property=uses_property,
        property_name=property_name,
        scope=dep.scope,
        type=dep.type,
        managed=managed,
    )

    existing = result.dependencies.get(info.key)
    if existing is not None:
        if managed and not existing.managed and existing.version:
            logger.debug(f"Keeping declared version {existing.version} for {info.key} over managed {dep.version}")
            return existing
        _record_usage(result, existing, -1)

    result.dependencies[info.key] = info
    _record_usage(result, info, 1)

    if uses_property:
        logger.debug(f"{info.key} uses property {property_name}")
    return info


def analyze_project(project: Optional[Project]) -> AnalysisResult:
    """
    Analyze a parsed manifest.

    Raises:
        ValueError: If project is None
    """
    if project is None:
        raise ValueError("project is nil")

    result = AnalysisResult(
        dependencies={},
        properties=dict(project.properties or {}),
        property_usage_counts={},
        boms=[],
        transitive_dependencies=[],
    )

    for dep in project.dependencies or []:
        analyze_dependency(dep, result)

    for dep in project.dependency_management or []:
        analyze_dependency(dep, result, managed=True)
        if is_bom_import(dep):
            bom = BOMInfo(
                group_id=dep.group_id,
                artifact_id=dep.artifact_id,
                version=dep.version,
                type=dep.type,
                scope=dep.scope,
            )
            result.boms.append(bom)
            logger.info(f"Found BOM import: {bom.group_id}:{bom.artifact_id}:{bom.version}")

    logger.info(
        f"Analyzed {len(result.dependencies)} dependencies, {len(result.properties)} properties, "
        f"{len(result.boms)} BOMs"
    )
    return result


def enrich_properties(result: AnalysisResult, lookup: PropertyLookup) -> int:
    """
    Add values for referenced-but-undefined properties from another source.

    Existing entries are never replaced.

    Returns:
        Number of properties added
    """
    if result.properties is None:
        result.properties = {}

    resolver = PropertyResolver(result.properties, lookup)
    added = 0
    for name in result.undefined_properties():
        value, found = resolver.resolve(name)
        if found:
            result.properties[name] = value
            added += 1
        else:
            logger.warning(f"Property {name} is referenced but not defined in the project tree")

    logger.info(f"Found {added} additional properties in the project tree")
    return added


def analyze_project_path(pom_path: str, search_properties: bool = False,
                         remote_client: Optional[MavenCentralClient] = None) -> AnalysisResult:
    """
    Parse and analyze a manifest file.

    With search_properties, properties the manifest references but does not
    define are looked up in its parent chain and modules.

    Raises:
        PomParseError: If the top-level manifest can't be read or parsed
    """
    project = parse_pom_file(pom_path)
    result = analyze_project(project)

    if search_properties and result.undefined_properties():
        searcher = PomTreePropertySearcher(pom_path, remote_client=remote_client)
        enrich_properties(result, searcher)

    return result
