"""Export and console rendering of resolution results."""
from __future__ import annotations

import csv
import json
import logging
import sys
from typing import Dict, List

from mvnresolve.constants import ExitCodes
from mvnresolve.versioning.models import ArtifactKey, ProjectMetadata

logger = logging.getLogger(__name__)

CSV_HEADERS = ["groupId", "artifactId", "version", "packaging", "dependencyCount"]


def to_records(resources: Dict[ArtifactKey, ProjectMetadata]) -> List[Dict[str, object]]:
    """One flat record per resolved artifact, sorted by groupId then artifactId."""
    return [resources[key].to_dict() for key in sorted(resources)]


def export_csv(resources: Dict[ArtifactKey, ProjectMetadata], path: str) -> None:
    """Exports the resolved artifacts to a CSV file.

    Args:
        resources: Resource map returned by a resolution.
        path: File path to export the CSV.
    """
    rows = [CSV_HEADERS]
    for record in to_records(resources):
        rows.append([record[h] for h in CSV_HEADERS])
    try:
        with open(path, 'w', newline='', encoding='utf-8') as file:
            export = csv.writer(file)
            export.writerows(rows)
        logger.info("CSV file has been successfully exported at: %s", path)
    except (OSError, csv.Error) as e:
        logger.error("CSV file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def export_json(resources: Dict[ArtifactKey, ProjectMetadata], path: str) -> None:
    """Exports the resolved artifacts to a JSON file.

    Args:
        resources: Resource map returned by a resolution.
        path: File path to export the JSON.
    """
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(to_records(resources), file, ensure_ascii=False, indent=4)
        logger.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logger.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def render_table(resources: Dict[ArtifactKey, ProjectMetadata]) -> str:
    """Render a fixed-width text table of the resolved artifacts."""
    records = to_records(resources)
    if not records:
        return "No artifacts resolved."
    columns = CSV_HEADERS[:4]
    widths = {c: max(len(c), *(len(str(r[c])) for r in records)) for c in columns}
    lines = ["  ".join(c.ljust(widths[c]) for c in columns)]
    lines.append("  ".join("-" * widths[c] for c in columns))
    for record in records:
        lines.append("  ".join(str(record[c]).ljust(widths[c]) for c in columns))
    return "\n".join(lines)
