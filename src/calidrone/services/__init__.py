from .planner_service import PlannerService
from .recorder_service import RecorderService

__all__ = ["PlannerService", "RecorderService"]
