"""Analysis report model and output formatters (json, yaml, human)."""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TextIO

import yaml
from packageurl import PackageURL

from .models import AnalysisResult, BOMInfo, Patch, VersionConflict, ACTION_UPDATE_BOM

logger = logging.getLogger(__name__)

FORMAT_JSON = 'json'
FORMAT_YAML = 'yaml'
FORMAT_HUMAN = 'human'


def build_purl(group_id: str, artifact_id: str, version: str) -> str:
    """Build a Package URL (purl) string for a Maven coordinate."""
    if not artifact_id:
        return ''
    return PackageURL(
        type='maven',
        namespace=group_id or None,
        name=artifact_id,
        version=version or None,
    ).to_string()


@dataclass
class DependencyAnalysis:
    total: int = 0
    direct: int = 0
    using_properties: int = 0
    transitive: int = 0


@dataclass
class PropertyAnalysis:
    defined: Optional[Dict[str, str]] = field(default_factory=dict)
    used_by: Optional[Dict[str, List[str]]] = field(default_factory=dict)


@dataclass
class Issue:
    """A dependency that needs a new version, possibly reached transitively.

    Supplied by callers (e.g. from a vulnerability scan); analysis never creates issues.
    """

    type: str
    dependency: str
    current_version: str = ""
    required_version: str = ""
    cves: List[str] = field(default_factory=list)
    path: List[str] = field(default_factory=list)


@dataclass
class UnfixableIssue:
    """A dependency that can't be fixed by editing versions; supplied by callers."""

    dependency: str
    reason: str
    action: str = ""


@dataclass
class AnalysisOutput:
    """Report for one analyzed POM, ready to be written in any supported format."""

    pom_file: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    dependencies: DependencyAnalysis = field(default_factory=DependencyAnalysis)
    properties: PropertyAnalysis = field(default_factory=PropertyAnalysis)
    boms: Optional[List[BOMInfo]] = field(default_factory=list)
    issues: Optional[List[Issue]] = field(default_factory=list)
    patches: Optional[List[Patch]] = field(default_factory=list)
    property_updates: Optional[Dict[str, str]] = field(default_factory=dict)
    conflicts: Optional[List[VersionConflict]] = field(default_factory=list)
    cannot_fix: Optional[List[UnfixableIssue]] = field(default_factory=list)
    warnings: Optional[List[str]] = field(default_factory=list)

    @classmethod
    def from_analysis(cls, result: AnalysisResult, pom_file: str,
                      direct_patches: Optional[List[Patch]] = None,
                      property_patches: Optional[Dict[str, str]] = None,
                      conflicts: Optional[List[VersionConflict]] = None) -> 'AnalysisOutput':
        """Summarize an analysis and the recommended patches."""
        dependencies = result.dependencies or {}
        properties = result.properties or {}

        using_properties = sum(1 for dep in dependencies.values() if dep.uses_property)

        used_by = {}
        referenced = {dep.property_name for dep in dependencies.values() if dep.uses_property}
        for name in sorted(referenced):
            used_by[name] = result.get_affected_dependencies(name)

        warnings = [
            f"Property {name} is referenced but not found in project"
            for name in result.undefined_properties()
        ]
        for conflict in conflicts or []:
            if conflict.recommended_action != ACTION_UPDATE_BOM:
                versions = ', '.join(
                    f"{artifact}={version}" for artifact, version in conflict.requested_versions.items()
                )
                warnings.append(
                    f"Patches for {conflict.group_id} request different versions ({versions}) "
                    f"and no BOM is available to align them"
                )

        return cls(
            pom_file=pom_file,
            dependencies=DependencyAnalysis(
                total=len(dependencies),
                direct=len(dependencies) - using_properties,
                using_properties=using_properties,
                transitive=len(result.transitive_dependencies or []),
            ),
            properties=PropertyAnalysis(defined=dict(properties), used_by=used_by),
            boms=list(result.boms or []),
            patches=list(direct_patches or []),
            property_updates=dict(property_patches or {}),
            conflicts=list(conflicts or []),
            warnings=warnings,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Structured form shared by the json and yaml writers."""
        data: Dict[str, Any] = {
            'pom_file': self.pom_file,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'dependencies': {
                'total': self.dependencies.total,
                'direct': self.dependencies.direct,
                'using_properties': self.dependencies.using_properties,
                'transitive': self.dependencies.transitive,
            },
            'properties': {
                'defined': dict(self.properties.defined or {}),
                'used_by': {name: list(keys) for name, keys in (self.properties.used_by or {}).items()},
            },
            'boms': [bom.to_dict() for bom in self.boms or []],
        }

        if self.issues:
            data['issues'] = [
                {
                    'type': issue.type,
                    'dependency': issue.dependency,
                    'current_version': issue.current_version,
                    'required_version': issue.required_version,
                    'cves': list(issue.cves),
                    'path': list(issue.path),
                }
                for issue in self.issues
            ]
        if self.patches:
            data['patches'] = [
                dict(patch.to_dict(), purl=build_purl(patch.group_id, patch.artifact_id, patch.version))
                for patch in self.patches
            ]
        if self.property_updates:
            data['property_updates'] = dict(self.property_updates)
        if self.conflicts:
            data['conflicts'] = [conflict.to_dict() for conflict in self.conflicts]
        if self.cannot_fix:
            data['cannot_fix'] = [
                {'dependency': item.dependency, 'reason': item.reason, 'action': item.action}
                for item in self.cannot_fix
            ]
        if self.warnings:
            data['warnings'] = list(self.warnings)

        return data

    def write(self, output_format: str, stream: TextIO) -> None:
        """
        Write the report.

        Args:
            output_format: json (the default when empty), yaml/yml or human
            stream: Text stream to write to

        Raises:
            ValueError: If the format is not supported
        """
        fmt = (output_format or FORMAT_JSON).lower()
        if fmt == 'yml':
            fmt = FORMAT_YAML

        if fmt == FORMAT_JSON:
            stream.write(OutputFormatter.format_as_json(self))
        elif fmt == FORMAT_YAML:
            stream.write(OutputFormatter.format_as_yaml(self))
        elif fmt == FORMAT_HUMAN:
            stream.write(OutputFormatter.format_as_human(self))
        else:
            raise ValueError(f"unsupported output format: {output_format}")


class OutputFormatter:
    """Formatter for the supported report formats."""

    @staticmethod
    def format_as_json(output: AnalysisOutput) -> str:
        return json.dumps(output.to_dict(), indent=2, ensure_ascii=False) + '\n'

    @staticmethod
    def format_as_yaml(output: AnalysisOutput) -> str:
        return yaml.safe_dump(output.to_dict(), default_flow_style=False, sort_keys=False, allow_unicode=True)

    @staticmethod
    def format_as_human(output: AnalysisOutput) -> str:
        """Format as a readable report."""
        lines = [f"POM Analysis: {output.pom_file}"]
        if output.timestamp:
            lines.append(f"Generated: {output.timestamp.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}")
        lines.extend([
            "",
            "Dependencies Summary:",
            f"  Total Dependencies: {output.dependencies.total}",
            f"  Direct Versions: {output.dependencies.direct}",
            f"  Using Properties: {output.dependencies.using_properties}",
        ])
        if output.dependencies.transitive:
            lines.append(f"  Transitive: {output.dependencies.transitive}")

        defined = output.properties.defined or {}
        used_by = output.properties.used_by or {}
        if defined or used_by:
            lines.extend(["", f"Properties ({len(defined)} defined):"])
            for name in sorted(set(defined) | set(used_by)):
                value = defined.get(name, '<undefined>')
                users = used_by.get(name, [])
                if users:
                    lines.append(f"  {name} = {value} (used by {len(users)}: {', '.join(users)})")
                else:
                    lines.append(f"  {name} = {value}")

        if output.boms:
            lines.extend(["", f"BOMs Detected: {len(output.boms)}"])
            for bom in output.boms:
                lines.append(f"  - {bom.group_id}:{bom.artifact_id}:{bom.version}")

        if output.issues:
            lines.extend(["", f"Issues Found: {len(output.issues)}"])
            for issue in output.issues:
                line = f"  [{issue.type}] {issue.dependency} {issue.current_version}"
                if issue.required_version:
                    line += f" -> {issue.required_version}"
                if issue.cves:
                    line += f" ({', '.join(issue.cves)})"
                lines.append(line)
                if issue.path:
                    lines.append(f"      via {' -> '.join(issue.path)}")

        if output.cannot_fix:
            lines.extend(["", "Cannot Fix (Manual Intervention Required):"])
            for item in output.cannot_fix:
                lines.append(f"  ✗ {item.dependency}: {item.reason}")
                if item.action:
                    lines.append(f"      Action: {item.action}")

        if output.conflicts:
            lines.extend(["", f"Version Conflicts: {len(output.conflicts)}"])
            for conflict in output.conflicts:
                lines.append(f"  {conflict.group_id} ({conflict.recommended_action})")
                for artifact, version in conflict.requested_versions.items():
                    lines.append(f"    {artifact}: {version}")
                if conflict.bom_candidate is not None:
                    lines.append(
                        f"    -> {conflict.bom_candidate.artifact_id} {conflict.optimal_version}"
                    )

        if output.patches:
            lines.extend(["", f"Recommended Dependency Patches: {len(output.patches)}"])
            for patch in output.patches:
                suffix = " (BOM)" if patch.type == 'pom' and patch.scope == 'import' else ""
                lines.append(f"  ✓ {patch.group_id}:{patch.artifact_id} -> {patch.version}{suffix}")

        if output.property_updates:
            lines.extend(["", f"Recommended Property Updates: {len(output.property_updates)}"])
            for name, value in output.property_updates.items():
                lines.append(f"  ✓ {name} -> {value}")

        if output.warnings:
            lines.extend(["", "Warnings:"])
            for warning in output.warnings:
                lines.append(f"  ⚠ {warning}")

        return '\n'.join(lines) + '\n'
