"""
Lookup and listing of generated CSV artifacts.
"""

import logging
from datetime import datetime
from pathlib import Path

from ..exceptions import ArtifactNotFound
from ..models import ArtifactInfo

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".csv"


class ArtifactStore:
    """Read-only view of the output directory."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def resolve(self, filename: str) -> Path:
        """
        Resolve an artifact identifier to its file.

        Raises:
            ArtifactNotFound: If the name is not a plain CSV filename or the
                file does not exist.
        """
        if (
            not filename
            or Path(filename).name != filename
            or filename.startswith(".")
            or not filename.endswith(ARTIFACT_SUFFIX)
        ):
            raise ArtifactNotFound(f"File not found: {filename}")

        path = self.output_dir / filename
        if not path.is_file():
            raise ArtifactNotFound(f"File not found: {filename}")
        return path

    def list_artifacts(self) -> list[ArtifactInfo]:
        """List every artifact with its size and creation time, newest first."""
        if not self.output_dir.is_dir():
            return []

        artifacts = []
        for path in self.output_dir.iterdir():
            if not path.is_file() or path.suffix != ARTIFACT_SUFFIX:
                continue
            stats = path.stat()
            created = getattr(stats, "st_birthtime", None) or stats.st_mtime
            artifacts.append(
                ArtifactInfo(
                    filename=path.name,
                    size=stats.st_size,
                    created=datetime.fromtimestamp(created),
                    download_url=f"/api/download/{path.name}",
                )
            )

        artifacts.sort(key=lambda a: (a.created, a.filename), reverse=True)
        logger.debug("Listed %d artifact(s) in %s", len(artifacts), self.output_dir)
        return artifacts
