"""POM document decoding.

The XML is first parsed into a small typed tree (``XmlNode``), which is then
converted into a nested mapping and projected into a ``ProjectMetadata``.
"""
from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from mvnresolve.common.logging_utils import extra_context, is_debug_enabled
from mvnresolve.constants import Constants
from mvnresolve.errors import DecodeError
from mvnresolve.versioning.models import DependencyDeclaration, Exclusion, ProjectMetadata, Scope

logger = logging.getLogger(__name__)

_PROPERTY_REF = re.compile(r"\$\{([^}]+)\}")
_MAX_INTERPOLATION_DEPTH = 10


def _local_name(tag: str) -> str:
    """Drop an ElementTree ``{namespace}`` prefix."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


@dataclass
class XmlNode:
    """Element name, optional text, and ordered children."""
    tag: str
    text: Optional[str] = None
    children: List["XmlNode"] = field(default_factory=list)

    @classmethod
    def from_element(cls, element: ET.Element) -> "XmlNode":
        text = (element.text or "").strip() or None
        children = [
            cls.from_element(child)
            for child in element
            if isinstance(child.tag, str)
        ]
        return cls(tag=_local_name(element.tag), text=text, children=children)

    def to_value(self) -> Any:
        """Convert to a mapping, a text string, or None when the element is empty.

        Sibling elements sharing a tag are gathered into a list in document order.
        """
        if self.children:
            mapping: Dict[str, Any] = {}
            for child in self.children:
                value = child.to_value()
                if value is None:
                    continue
                if child.tag not in mapping:
                    mapping[child.tag] = value
                elif isinstance(mapping[child.tag], list):
                    mapping[child.tag].append(value)
                else:
                    mapping[child.tag] = [mapping[child.tag], value]
            return mapping
        return self.text


def parse_tree(data: bytes) -> XmlNode:
    """Parse raw bytes into an ``XmlNode`` tree.

    Raises:
        DecodeError: when the bytes are not well-formed XML.
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise DecodeError(f"Malformed POM document: {exc}") from exc
    return XmlNode.from_element(root)


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _text(mapping: Any, key: str) -> Optional[str]:
    if not isinstance(mapping, dict):
        return None
    value = mapping.get(key)
    return value if isinstance(value, str) else None


def _interpolate(value: Optional[str], properties: Dict[str, str]) -> Optional[str]:
    """Expand ``${name}`` references; unknown references are left untouched."""
    if value is None or "${" not in value:
        return value
    for _ in range(_MAX_INTERPOLATION_DEPTH):
        expanded = _PROPERTY_REF.sub(lambda m: properties.get(m.group(1), m.group(0)), value)
        if expanded == value:
            break
        value = expanded
    return value


def _build_properties(fields: Dict[str, Any], group_id: Optional[str], version: Optional[str]) -> Dict[str, str]:
    props: Dict[str, str] = {}
    declared = fields.get("properties")
    if isinstance(declared, dict):
        props.update({k: v for k, v in declared.items() if isinstance(v, str)})
    builtins = {
        "groupId": group_id,
        "artifactId": _text(fields, "artifactId"),
        "version": version,
        "packaging": _text(fields, "packaging"),
    }
    parent = fields.get("parent")
    for name, value in builtins.items():
        if value is None:
            continue
        props[f"project.{name}"] = value
        props[f"pom.{name}"] = value
    if version is not None:
        props.setdefault("version", version)
    for name in ("groupId", "artifactId", "version"):
        parent_value = _text(parent, name)
        if parent_value is not None:
            props[f"project.parent.{name}"] = parent_value
    return props


def _decode_exclusions(dep: Dict[str, Any], props: Dict[str, str]) -> List[Exclusion]:
    exclusions = dep.get("exclusions")
    if not isinstance(exclusions, dict):
        return []
    result = []
    for item in _as_list(exclusions.get("exclusion")):
        result.append(Exclusion(
            group_id=_interpolate(_text(item, "groupId"), props) or "*",
            artifact_id=_interpolate(_text(item, "artifactId"), props) or "*",
        ))
    return result


def _managed_versions(fields: Dict[str, Any], props: Dict[str, str]) -> Dict[tuple, str]:
    """Versions pinned by this POM's own <dependencyManagement> section."""
    section = fields.get("dependencyManagement")
    deps = section.get("dependencies") if isinstance(section, dict) else None
    managed: Dict[tuple, str] = {}
    if not isinstance(deps, dict):
        return managed
    for dep in _as_list(deps.get("dependency")):
        group_id = _interpolate(_text(dep, "groupId"), props)
        artifact_id = _interpolate(_text(dep, "artifactId"), props)
        version = _interpolate(_text(dep, "version"), props)
        if group_id and artifact_id and version:
            managed[(group_id, artifact_id)] = version
    return managed


def _decode_dependencies(fields: Dict[str, Any], props: Dict[str, str]) -> List[DependencyDeclaration]:
    section = fields.get("dependencies")
    if not isinstance(section, dict):
        return []
    managed = _managed_versions(fields, props)
    declarations = []
    for dep in _as_list(section.get("dependency")):
        if not isinstance(dep, dict):
            raise DecodeError("Dependency entry has no child elements")
        group_id = _interpolate(_text(dep, "groupId"), props)
        artifact_id = _interpolate(_text(dep, "artifactId"), props)
        if not group_id or not artifact_id:
            raise DecodeError("Dependency entry is missing groupId or artifactId")
        version = _interpolate(_text(dep, "version"), props) or managed.get((group_id, artifact_id))
        raw_scope = _interpolate(_text(dep, "scope"), props)
        declarations.append(DependencyDeclaration(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            scope=Scope.from_token(raw_scope),
            raw_scope=raw_scope,
            exclusions=_decode_exclusions(dep, props),
            optional=(_text(dep, "optional") or "").lower() == "true",
            type=_text(dep, "type"),
        ))
    return declarations


def decode_pom(data: bytes) -> ProjectMetadata:
    """Decode POM bytes into ``ProjectMetadata``.

    Raises:
        DecodeError: on malformed XML, a root element other than ``project``,
            or missing project identity fields.
    """
    tree = parse_tree(data)
    if tree.tag != "project":
        raise DecodeError(f"Invalid root element <{tree.tag}>, expected <project>")

    fields = tree.to_value()
    if not isinstance(fields, dict):
        fields = {}

    parent = fields.get("parent")
    group_id = _text(fields, "groupId") or _text(parent, "groupId")
    version = _text(fields, "version") or _text(parent, "version")
    props = _build_properties(fields, group_id, version)

    group_id = _interpolate(group_id, props)
    artifact_id = _interpolate(_text(fields, "artifactId"), props)
    version = _interpolate(version, props)
    if not (group_id and artifact_id and version):
        raise DecodeError("POM is missing groupId, artifactId or version")

    packaging = _interpolate(_text(fields, "packaging"), props) or Constants.DEFAULT_PACKAGING
    dependencies = _decode_dependencies(fields, props)

    if is_debug_enabled(logger):
        logger.debug(
            "Decoded POM",
            extra=extra_context(
                event="parse",
                component="pom",
                action="decode",
                outcome="success",
                target=f"{group_id}:{artifact_id}:{version}",
                count=len(dependencies),
            )
        )
    return ProjectMetadata(
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        packaging=packaging,
        dependencies=dependencies,
        fields=fields,
    )
