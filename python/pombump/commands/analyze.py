"""Analyze command: report a POM's dependency structure and recommend patches."""

import logging
import sys
from typing import Dict, List, Optional, TextIO

from ..analyzer import analyze_project, analyze_project_path
from ..maven_central import MAVEN_CENTRAL_URL, MavenCentralClient
from ..models import AnalysisResult, Patch, VersionConflict
from ..parsers import parse_patches, parse_pom_file
from ..patch_files import write_deps_file, write_properties_file
from ..strategy import detect_version_conflicts, patch_strategy

logger = logging.getLogger(__name__)

STRUCTURED_FORMATS = ('json', 'yaml', 'yml')


def _analyze(pom_file: str, search_properties: bool, remote_parents: bool, maven_repo: Optional[str]) -> AnalysisResult:
    if not search_properties:
        return analyze_project(parse_pom_file(pom_file))

    if remote_parents:
        with MavenCentralClient(base_url=maven_repo or MAVEN_CENTRAL_URL) as client:
            return analyze_project_path(pom_file, search_properties=True, remote_client=client)
    return analyze_project_path(pom_file, search_properties=True)


def run_analyze(
    pom_file: str,
    patches: Optional[str] = None,
    patch_file: Optional[str] = None,
    output_format: str = 'human',
    output_deps: Optional[str] = None,
    output_properties: Optional[str] = None,
    search_properties: bool = False,
    remote_parents: bool = False,
    maven_repo: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> int:
    """
    Analyze a POM, print the report and optionally write patch files.

    Raises:
        PomParseError: If the POM can't be read or parsed
        ValueError: If the patches or output format are invalid
        OSError: If the patch file can't be read or an output file written
    """
    stream = stream or sys.stdout

    analysis = _analyze(pom_file, search_properties, remote_parents, maven_repo)

    direct_patches: List[Patch] = []
    property_patches: Dict[str, str] = {}
    conflicts: List[VersionConflict] = []

    if patches or patch_file:
        desired = parse_patches(patch_file, patches)
        logger.info(f"Evaluating {len(desired)} patches")
        conflicts = detect_version_conflicts(analysis, desired)
        direct_patches, property_patches = patch_strategy(analysis, desired, conflicts)

    output = analysis.to_analysis_output(pom_file, direct_patches, property_patches, conflicts)
    human = output_format not in STRUCTURED_FORMATS
    output.write('human' if human else output_format, stream)

    if output_deps and direct_patches:
        count = write_deps_file(output_deps, direct_patches)
        if human:
            stream.write(f"\nWrote {len(direct_patches)} patches to {output_deps} ({count} total)\n")

    if output_properties and property_patches:
        count = write_properties_file(output_properties, property_patches)
        if human:
            stream.write(f"Wrote {len(property_patches)} properties to {output_properties} ({count} total)\n")

    return 0
