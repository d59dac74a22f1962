"""Response normalisation and the operation table exposed to the view layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .errors import error_response


def normalize_transport_response(
    operation: str,
    response: Any,
    *,
    default_error_code: str,
) -> Dict[str, Any]:
    """Ensure the view layer always receives a structured response."""
    if response is None:
        return error_response(
            "EMPTY_RESPONSE",
            "Service returned no data",
            details={"operation": operation},
        )

    if not isinstance(response, dict):
        return error_response(
            "INVALID_RESPONSE",
            "Service returned unexpected response type",
            details={"operation": operation, "type": type(response).__name__},
        )

    response.setdefault("success", True)
    if response["success"] is False:
        response.setdefault("error_code", default_error_code)
        response.setdefault("error", "An unknown error occurred")

    return response


@dataclass(frozen=True)
class OperationContract:
    operation: str
    area: str
    is_async: bool = False
    takes_payload: bool = True


OPERATION_CONTRACTS: List[OperationContract] = [
    OperationContract("get_draft", "planner", takes_payload=False),
    OperationContract("add_point", "planner"),
    OperationContract("add_point_from_pick", "planner"),
    OperationContract("undo", "planner", takes_payload=False),
    OperationContract("clear_draft", "planner", takes_payload=False),
    OperationContract("rename_draft", "planner"),
    OperationContract("select_point", "planner"),
    OperationContract("update_selected", "planner"),
    OperationContract("delete_selected", "planner", takes_payload=False),
    OperationContract("set_manual_input", "planner"),
    OperationContract("add_manual_point", "planner", takes_payload=False),
    OperationContract("update_selected_from_input", "planner", takes_payload=False),
    OperationContract("get_preview", "planner", takes_payload=False),
    OperationContract("save_path", "planner", takes_payload=False),
    OperationContract("list_paths", "planner", takes_payload=False),
    OperationContract("get_path", "planner"),
    OperationContract("delete_path", "planner"),
    OperationContract("load_path", "planner"),
    OperationContract("get_session", "recorder", takes_payload=False),
    OperationContract("start_recording", "recorder", is_async=True, takes_payload=False),
    OperationContract("stop_recording", "recorder", is_async=True, takes_payload=False),
    OperationContract("take_screenshot", "recorder", is_async=True, takes_payload=False),
    OperationContract("set_feed_source", "recorder"),
    OperationContract("toggle_feed_source", "recorder", takes_payload=False),
    OperationContract("update_camera_settings", "recorder"),
    OperationContract("set_zoom", "recorder"),
    OperationContract("zoom_in", "recorder", takes_payload=False),
    OperationContract("zoom_out", "recorder", takes_payload=False),
    OperationContract("list_recordings", "recorder", takes_payload=False),
    OperationContract("delete_recording", "recorder"),
    OperationContract("play_recording", "recorder"),
    OperationContract("close_player", "recorder"),
    OperationContract("recordings_summary", "recorder", takes_payload=False),
    OperationContract("export_recordings", "recorder"),
]

OPERATIONS: Dict[str, OperationContract] = {contract.operation: contract for contract in OPERATION_CONTRACTS}

__all__ = ["normalize_transport_response", "OperationContract", "OPERATION_CONTRACTS", "OPERATIONS"]
