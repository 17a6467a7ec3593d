"""Directory scanning and file classification.

This module handles filesystem traversal of asset directories and decides
which files are scenes (entry points) and which are uploadable resources,
with security features like path validation.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path, PurePath
from urllib.parse import urlparse

# Packaged binary scene format used as the asset entry point
SCENE_FORMATS = frozenset({".glb"})

# Everything that is content-addressed and uploaded; includes the scene format
RESOURCE_FORMATS = frozenset({".glb", ".gltf", ".png", ".jpg", ".webp", ".ktx2", ".bin"})

# Dangerous characters to remove from filenames
DANGEROUS_FILENAME_CHARS = r'[<>:"|?*\x00-\x1f]'


def sanitize_filename(filename: str) -> str:
    """Sanitize filename by removing dangerous characters.

    Args:
        filename: Original filename

    Returns:
        Sanitized filename safe for storage
    """
    # Remove dangerous characters
    sanitized = re.sub(DANGEROUS_FILENAME_CHARS, "", filename)
    # Remove path separators
    sanitized = sanitized.replace("/", "").replace("\\", "")
    return sanitized


def validate_path_safety(path: Path, base_dir: Path) -> None:
    """Validate that a path stays within the base directory.

    This prevents path traversal attacks.

    Args:
        path: Path to validate
        base_dir: Base directory that path must be within

    Raises:
        ValueError: If path escapes the base directory
    """
    resolved_path = path.resolve()
    resolved_base = base_dir.resolve()

    if not resolved_path.is_relative_to(resolved_base):
        raise ValueError(f"Path {path} escapes base directory {base_dir}")


def validate_url(url: str) -> None:
    """Validate URL format and scheme.

    Only allows http:// and https:// schemes.

    Args:
        url: URL to validate

    Raises:
        ValueError: If URL has invalid format or dangerous scheme
    """
    if not url:  # Empty string is allowed
        return

    parsed = urlparse(url)

    if parsed.scheme not in ("http", "https", ""):
        raise ValueError(f"Invalid URL scheme: {parsed.scheme}. Only http and https are allowed.")


@dataclass(frozen=True)
class FileClassifier:
    """Classifies paths by extension.

    Extensions are compared for exact equality after lower-casing, so
    ``model.GLB`` is a scene but ``model.glbx`` is not.

    Attributes:
        scene_formats: Extensions of entry-point scene files
        resource_formats: Extensions of files that are content-addressed
    """

    scene_formats: frozenset[str] = SCENE_FORMATS
    resource_formats: frozenset[str] = RESOURCE_FORMATS

    @staticmethod
    def _extension(path: str | PurePath) -> str:
        return PurePath(path).suffix.lower()

    def is_scene_file(self, path: str | PurePath) -> bool:
        return self._extension(path) in self.scene_formats

    def is_resource_file(self, path: str | PurePath) -> bool:
        return self._extension(path) in self.resource_formats


DEFAULT_CLASSIFIER = FileClassifier()


def is_scene_file(path: str | PurePath) -> bool:
    """Return True if the path is an entry-point scene file."""
    return DEFAULT_CLASSIFIER.is_scene_file(path)


def is_resource_file(path: str | PurePath) -> bool:
    """Return True if the path is an uploadable resource file."""
    return DEFAULT_CLASSIFIER.is_resource_file(path)


def list_files(root_path: Path) -> list[str]:
    """Recursively list the files below a directory.

    Args:
        root_path: Directory to scan

    Returns:
        Paths relative to ``root_path`` with POSIX separators, sorted
        lexicographically so callers get the same order on every run

    Raises:
        ValueError: If a file (e.g. a symlink) resolves outside ``root_path``
        FileNotFoundError: If ``root_path`` does not exist
    """
    root_path = Path(root_path)
    if not root_path.is_dir():
        raise FileNotFoundError(f"Directory not found: {root_path}")

    root_path_resolved = root_path.resolve()
    files: list[str] = []

    # Walk the directory tree
    for dirpath, dirnames, filenames in os.walk(root_path):
        # Skip hidden directories
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]

        for filename in filenames:
            # Skip hidden files and system files
            if filename.startswith("."):
                continue

            file_path = Path(dirpath) / filename
            validate_path_safety(file_path, root_path_resolved)
            files.append(file_path.relative_to(root_path).as_posix())

    return sorted(files)
