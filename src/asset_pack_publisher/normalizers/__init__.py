"""Scene normalizers.

Normalization rewrites a scene file in place so that binary resources it
embeds become standalone files next to it, which the scanner can then
address individually. Normalizers are looked up by scene extension.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from ..scanner import validate_path_safety
from .base import NormalizedScene, Normalizer
from .glb import GlbNormalizer

logger = logging.getLogger(__name__)

NORMALIZERS: dict[str, Normalizer] = {
    ".glb": GlbNormalizer(),
}


def get_normalizer(path: str | PurePath) -> Normalizer:
    """Return the normalizer registered for a scene file's extension.

    Raises:
        ValueError: If no normalizer handles the extension
    """
    extension = PurePath(path).suffix.lower()
    if extension not in NORMALIZERS:
        available = ", ".join(NORMALIZERS) or "none"
        raise ValueError(f"No normalizer for '{extension}' files. Available: {available}")
    return NORMALIZERS[extension]


def normalize(scene_path: Path, output_dir: Path) -> list[Path]:
    """Normalize one scene file.

    The rewritten scene is written to ``output_dir`` under its own name and
    every extracted resource is written alongside it. A scene without
    embedded resources is left untouched on disk.

    Args:
        scene_path: Scene file to read
        output_dir: Directory receiving the scene and its resources

    Returns:
        Paths of the extracted resource files

    Raises:
        ValueError: If the scene is malformed, a resource name escapes
            ``output_dir`` or a different file already holds a resource name
        OSError: If reading or writing fails
    """
    scene_path = Path(scene_path)
    output_dir = Path(output_dir)
    normalizer = get_normalizer(scene_path)

    data = scene_path.read_bytes()
    scene: NormalizedScene = normalizer.normalize(data, scene_path.stem)

    target = output_dir / scene_path.name
    if not scene.auxiliary and target.exists() and target.resolve() == scene_path.resolve():
        return []

    written: list[Path] = []
    for name, resource in scene.auxiliary.items():
        resource_path = output_dir / name
        validate_path_safety(resource_path, output_dir)
        if resource_path.exists() and resource_path.read_bytes() != resource:
            raise ValueError(f"{resource_path} already exists with different content")
        written.append(resource_path)

    # Nothing is written until every target is known to be free
    for resource_path, resource in zip(written, scene.auxiliary.values()):
        resource_path.write_bytes(resource)

    target.write_bytes(scene.primary)
    logger.debug("Normalized %s (%d resources extracted)", scene_path, len(written))
    return written


@dataclass
class NormalizationReport:
    """Outcome of a best-effort normalization run.

    Attributes:
        normalized: Scene files that were processed successfully
        extracted: Resource files written across all scenes
        failed: Scene file -> error message for scenes that were skipped
    """

    normalized: list[Path] = field(default_factory=list)
    extracted: list[Path] = field(default_factory=list)
    failed: dict[Path, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def normalize_scenes(scene_paths: list[Path]) -> NormalizationReport:
    """Normalize scenes, collecting failures instead of raising.

    Each scene is written back into its own directory. A failing scene is
    logged and recorded; the remaining scenes are still processed.
    """
    report = NormalizationReport()

    for scene_path in scene_paths:
        try:
            report.extracted.extend(normalize(scene_path, scene_path.parent))
        except (OSError, ValueError) as e:
            logger.error("Error trying to save textures from %s: %s", scene_path, e)
            report.failed[scene_path] = str(e)
            continue
        report.normalized.append(scene_path)

    return report


__all__ = [
    "GlbNormalizer",
    "NORMALIZERS",
    "NormalizationReport",
    "NormalizedScene",
    "Normalizer",
    "get_normalizer",
    "normalize",
    "normalize_scenes",
]
