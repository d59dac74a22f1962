"""
Catalog of saved flight paths, held in process memory in insertion order.
"""

import logging
from typing import Dict, Iterator, Tuple

from ..errors import IntegrityError, NotFoundError
from ..models import Path

logger = logging.getLogger(__name__)


class PathCatalog:
    """Saved paths keyed by id. Paths are immutable once added."""

    def __init__(self):
        # dicts keep insertion order
        self._paths: Dict[str, Path] = {}

    def add(self, path: Path) -> None:
        if path.id in self._paths:
            logger.error("Duplicate path id %s rejected", path.id)
            raise IntegrityError(f"Path id {path.id} already exists", details={'path_id': path.id})
        self._paths[path.id] = path
        logger.info("Path %s added to catalog (%d total)", path.id, len(self._paths))

    def remove(self, path_id: str) -> bool:
        """Remove a path; returns False when the id is unknown."""
        removed = self._paths.pop(path_id, None)
        if removed is None:
            logger.debug("Remove ignored, no path %s", path_id)
            return False
        logger.info("Path %s removed from catalog", path_id)
        return True

    def get(self, path_id: str) -> Path:
        try:
            return self._paths[path_id]
        except KeyError:
            raise NotFoundError(f"Path {path_id} not found", details={'path_id': path_id}) from None

    def list(self) -> Tuple[Path, ...]:
        return tuple(self._paths.values())

    def __contains__(self, path_id: object) -> bool:
        return path_id in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.list())
