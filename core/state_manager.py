"""Save and load the local session state (incubations and the selected world point)"""
import json
import logging
import os
from typing import Any, Dict, Optional

from .config import CONFIG
from .models import IncubationRecord, WorldPoint

logger = logging.getLogger(__name__)

SAVE_FILE = CONFIG["SAVE_FILE"]
SAVE_VERSION = 1


def save_session(
    incubations: Dict[str, IncubationRecord],
    selected_point: Optional[WorldPoint] = None,
    path: Optional[str] = None
) -> None:
    """Write incubation records and the selected world point to the save file"""
    data = {
        "version": SAVE_VERSION,
        "incubations": {
            user_id: record.to_dict() for user_id, record in incubations.items()
        },
        "selected_point": selected_point.to_dict() if selected_point else None,
    }
    with open(path or SAVE_FILE, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def load_session(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the local session state.

    Returns:
        {"incubations": {user_id: IncubationRecord}, "selected_point": WorldPoint | None}
        Empty state when no save file exists.
    """
    path = path or SAVE_FILE
    state: Dict[str, Any] = {"incubations": {}, "selected_point": None}
    if not os.path.exists(path):
        return state

    with open(path, "r", encoding="utf-8") as f:
        d = json.load(f)

    saved_version = d.get("version", 0)
    if saved_version > SAVE_VERSION:
        logger.warning(f"Save file version {saved_version} is newer than supported {SAVE_VERSION}")

    for user_id, record_data in d.get("incubations", {}).items():
        state["incubations"][user_id] = IncubationRecord.from_dict(record_data)

    point_data = d.get("selected_point")
    if point_data:
        state["selected_point"] = WorldPoint.from_dict(point_data)

    return state
