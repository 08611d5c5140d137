"""Maven repository package.

This package provides Maven repository support:
- pom.py: decoding POM documents into ProjectMetadata
- gateway.py: cache-first fetching with ordered repository fallback
"""

from .gateway import CacheGateway, artifact_path, extension_for, pom_path
from .pom import XmlNode, decode_pom, parse_tree

__all__ = [
    "CacheGateway",
    "XmlNode",
    "artifact_path",
    "decode_pom",
    "extension_for",
    "parse_tree",
    "pom_path",
]
