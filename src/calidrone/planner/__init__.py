"""Waypoint path planning: the editable draft and the saved-path catalog."""

from .catalog import PathCatalog
from .draft import DEFAULT_PATH_NAME, DraftPath, DraftState

__all__ = ["PathCatalog", "DraftPath", "DraftState", "DEFAULT_PATH_NAME"]
