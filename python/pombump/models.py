"""Core data models for pombump."""

from dataclasses import dataclass, field
from typing import List, Optional, Dict

BOM_TYPE = "pom"
BOM_SCOPE = "import"

ACTION_DIRECT = "direct"
ACTION_UPDATE_PROPERTY = "update_property"
ACTION_UPDATE_BOM = "update_bom"


def dependency_key(group_id: str, artifact_id: str) -> str:
    """Return the groupId:artifactId map key for a coordinate."""
    return f"{group_id}:{artifact_id}"


@dataclass
class Dependency:
    """A <dependency> entry as declared in a manifest (version is the raw text)."""

    group_id: str
    artifact_id: str
    version: str = ""
    scope: str = ""
    type: str = ""
    optional: bool = False

    @property
    def key(self) -> str:
        return dependency_key(self.group_id, self.artifact_id)


@dataclass
class Parent:
    """The <parent> reference of a manifest."""

    group_id: str
    artifact_id: str
    version: str = ""
    relative_path: Optional[str] = None


@dataclass
class Project:
    """A parsed manifest.

    Container fields may be None when the manifest does not declare the
    corresponding section; consumers treat None as empty.
    """

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    packaging: str = "jar"
    parent: Optional[Parent] = None
    properties: Optional[Dict[str, str]] = None
    dependencies: Optional[List[Dependency]] = None
    dependency_management: Optional[List[Dependency]] = None
    modules: Optional[List[str]] = None
    file_path: Optional[str] = None

    @property
    def coordinates(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass
class Patch:
    """A desired (or recommended) version for one artifact.

    scope and type are only set when the patch targets a BOM import.
    """

    group_id: str
    artifact_id: str
    version: str
    scope: str = ""
    type: str = ""

    @property
    def key(self) -> str:
        return dependency_key(self.group_id, self.artifact_id)

    def to_dict(self) -> Dict[str, str]:
        """Serialize using the manifest's element names, omitting empty fields."""
        data = {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "version": self.version,
        }
        if self.scope:
            data["scope"] = self.scope
        if self.type:
            data["type"] = self.type
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'Patch':
        return cls(
            group_id=str(data.get("groupId") or ""),
            artifact_id=str(data.get("artifactId") or ""),
            version=str(data.get("version") or ""),
            scope=str(data.get("scope") or ""),
            type=str(data.get("type") or ""),
        )

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass
class PropertyPatch:
    """A recommended new value for a property."""

    property: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"property": self.property, "value": self.value}


@dataclass
class DependencyInfo:
    """Semantic record for one groupId:artifactId seen in a manifest."""

    group_id: str
    artifact_id: str
    version: str = ""
    uses_property: bool = False
    property_name: str = ""
    scope: str = ""
    type: str = ""
    managed: bool = False  # declared under <dependencyManagement>

    @property
    def key(self) -> str:
        return dependency_key(self.group_id, self.artifact_id)


@dataclass
class BOMInfo:
    """A <dependencyManagement> import of another POM's managed versions."""

    group_id: str
    artifact_id: str
    version: str = ""
    type: str = BOM_TYPE
    scope: str = BOM_SCOPE

    def is_bom(self) -> bool:
        return self.type == BOM_TYPE and self.scope == BOM_SCOPE

    def to_dict(self) -> Dict[str, str]:
        return {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "version": self.version,
            "type": self.type,
            "scope": self.scope,
        }


@dataclass
class TransitiveDependency:
    """A dependency pulled in through other artifacts.

    Informational only: callers that resolve the dependency graph fill
    AnalysisResult.transitive_dependencies; analysis of a single POM leaves it empty.
    """

    group_id: str
    artifact_id: str
    version: str = ""
    path: List[str] = field(default_factory=list)  # ancestor artifact names, root first


@dataclass
class VersionConflict:
    """Patches for one groupId that request different versions."""

    group_id: str
    requested_versions: Dict[str, str] = field(default_factory=dict)  # artifactId -> version
    recommended_action: str = ACTION_DIRECT
    bom_candidate: Optional[BOMInfo] = None
    optimal_version: str = ""

    def to_dict(self) -> Dict:
        data = {
            "groupId": self.group_id,
            "requestedVersions": dict(self.requested_versions),
            "recommendedAction": self.recommended_action,
        }
        if self.bom_candidate is not None:
            data["bom"] = self.bom_candidate.to_dict()
            data["optimalVersion"] = self.optimal_version
        return data


@dataclass
class AnalysisResult:
    """Everything learned about one manifest.

    Built by the analyzer; only the cross-manifest property search adds to it
    afterwards. Any container may be None when the result is assembled by
    hand, so readers go through the accessors below.
    """

    dependencies: Optional[Dict[str, DependencyInfo]] = field(default_factory=dict)
    properties: Optional[Dict[str, str]] = field(default_factory=dict)
    property_usage_counts: Optional[Dict[str, int]] = field(default_factory=dict)
    boms: Optional[List[BOMInfo]] = field(default_factory=list)
    transitive_dependencies: Optional[List[TransitiveDependency]] = field(default_factory=list)

    def get_dependency(self, key: str) -> Optional[DependencyInfo]:
        if not self.dependencies:
            return None
        return self.dependencies.get(key)

    def get_affected_dependencies(self, property_name: str) -> List[str]:
        """Return the sorted keys of all dependencies whose version is ${property_name}."""
        if not property_name or not self.dependencies:
            return []
        return sorted(
            key for key, dep in self.dependencies.items()
            if dep.uses_property and dep.property_name == property_name
        )

    def undefined_properties(self) -> List[str]:
        """Return referenced property names that have no known value."""
        properties = self.properties or {}
        names = {
            dep.property_name for dep in (self.dependencies or {}).values()
            if dep.uses_property and dep.property_name not in properties
        }
        return sorted(names)

    def to_analysis_output(self, pom_file: str, direct_patches: Optional[List[Patch]] = None,
                           property_patches: Optional[Dict[str, str]] = None,
                           conflicts: Optional[List[VersionConflict]] = None):
        """Convert to the report structure consumed by the formatters."""
        # Import here to avoid circular import
        from .formatters import AnalysisOutput
        return AnalysisOutput.from_analysis(self, pom_file, direct_patches, property_patches, conflicts)
