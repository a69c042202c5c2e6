"""Patch strategy: decide between direct, property and BOM version edits."""

import logging
from typing import Dict, List, Optional, Tuple

from .models import (
    AnalysisResult, BOMInfo, Patch, VersionConflict,
    ACTION_DIRECT, ACTION_UPDATE_BOM, BOM_SCOPE, BOM_TYPE,
)
from .version_parser import VersionParser

logger = logging.getLogger(__name__)


def find_bom_for_group(result: AnalysisResult, group_id: str) -> Optional[BOMInfo]:
    """Return the first BOM declared with exactly this groupId."""
    for bom in result.boms or []:
        if bom.group_id == group_id:
            return bom
    return None


def calculate_optimal_bom_version(requested_versions: Dict[str, str]) -> str:
    """Pick the highest requested version (segment-wise comparison)."""
    return VersionParser.max_version(requested_versions.values())


def _group_patches(patches: List[Patch]) -> Dict[str, List[Patch]]:
    groups: Dict[str, List[Patch]] = {}
    for patch in patches:
        groups.setdefault(patch.group_id, []).append(patch)
    return groups


def detect_version_conflicts(result: AnalysisResult, patches: List[Patch]) -> List[VersionConflict]:
    """
    Find groupIds whose patches ask for more than one version.

    A conflicting group with a BOM of the same groupId is resolved by bumping
    the BOM to the highest requested version. Without a BOM the conflict is
    still reported, with the direct action.

    Returns:
        One VersionConflict per conflicting group, in first-seen group order
    """
    conflicts = []

    for group_id, group_patches in _group_patches(patches).items():
        if len(group_patches) < 2:
            continue

        versions = [patch.version for patch in group_patches]
        if len(set(versions)) == 1:
            continue

        requested_versions = {patch.artifact_id: patch.version for patch in group_patches}
        conflict = VersionConflict(group_id=group_id, requested_versions=requested_versions)

        bom = find_bom_for_group(result, group_id)
        if bom is not None:
            conflict.recommended_action = ACTION_UPDATE_BOM
            conflict.bom_candidate = bom
            conflict.optimal_version = calculate_optimal_bom_version(requested_versions)
            logger.info(
                f"Version conflict in {group_id} resolved through BOM {bom.artifact_id}: "
                f"{conflict.optimal_version}"
            )
        else:
            conflict.recommended_action = ACTION_DIRECT
            logger.warning(
                f"Patches for {group_id} request different versions ({', '.join(sorted(set(versions)))}) "
                f"and no BOM manages the group"
            )

        conflicts.append(conflict)

    return conflicts


def patch_strategy(result: AnalysisResult, patches: List[Patch],
                   conflicts: Optional[List[VersionConflict]] = None) -> Tuple[List[Patch], Dict[str, str]]:
    """
    Turn desired patches into recommended edits.

    Conflicting groups backed by a BOM collapse into one BOM patch. Every other
    patch becomes a direct patch, unless the analysis shows the dependency's
    version is a property reference, in which case the property is updated
    instead. When several patches map to the same property, the first staged
    value is kept and later ones are dropped.

    Args:
        result: Analysis of the POM being patched
        patches: Desired versions, in priority order
        conflicts: detect_version_conflicts() output for the same patches, if already computed

    Returns:
        Tuple of (direct_patches, property_patches)
    """
    direct_patches: List[Patch] = []
    property_patches: Dict[str, str] = {}
    bom_groups = set()

    if conflicts is None:
        conflicts = detect_version_conflicts(result, patches)

    for conflict in conflicts:
        if conflict.recommended_action != ACTION_UPDATE_BOM:
            continue
        bom = conflict.bom_candidate
        direct_patches.append(Patch(
            group_id=bom.group_id,
            artifact_id=bom.artifact_id,
            version=conflict.optimal_version,
            scope=BOM_SCOPE,
            type=BOM_TYPE,
        ))
        bom_groups.add(conflict.group_id)

    for patch in patches:
        if patch.group_id in bom_groups:
            continue

        dep = result.get_dependency(patch.key)
        if dep is None:
            logger.debug(f"{patch.key} is not declared in the POM, patching directly")
            direct_patches.append(patch)
        elif not dep.uses_property:
            direct_patches.append(patch)
        elif dep.property_name not in property_patches:
            logger.info(f"{patch.key} uses property {dep.property_name}, updating it to {patch.version}")
            property_patches[dep.property_name] = patch.version
        elif property_patches[dep.property_name] != patch.version:
            logger.warning(
                f"Property {dep.property_name} already set to {property_patches[dep.property_name]}, "
                f"ignoring {patch.version} requested for {patch.key}"
            )

    return direct_patches, property_patches
