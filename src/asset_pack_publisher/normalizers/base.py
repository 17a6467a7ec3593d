"""Base normalizer class for externalizing embedded scene resources.

This module defines the base interface for normalizers that rewrite a
scene container so every binary resource it embeds becomes a standalone,
independently addressable file.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class NormalizedScene:
    """Output of a normalizer.

    Attributes:
        primary: Rewritten scene file bytes
        auxiliary: Extracted resources keyed by file name, relative to the
            directory the scene is written to
    """

    primary: bytes
    auxiliary: dict[str, bytes] = field(default_factory=dict)


class Normalizer(ABC):
    """Abstract base class for scene normalizers.

    Implementations must be idempotent: normalizing an already normalized
    scene returns it unchanged with no auxiliary files.
    """

    @abstractmethod
    def normalize(self, data: bytes, stem: str) -> NormalizedScene:
        """Externalize the embedded resources of a scene.

        Args:
            data: Scene file contents
            stem: Scene file name without extension, used to name
                extracted resources

        Returns:
            The rewritten scene and the extracted resources

        Raises:
            ValueError: If the scene container is malformed
        """
        pass
