"""Data loader for JSON game data files"""
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# Get data directory
DATA_DIR = Path(__file__).parent


def load_json_file(filename: str, data_dir: Optional[Path] = None) -> Optional[Dict[str, Any]]:
    """Load a JSON file from the data directory"""
    filepath = (data_dir or DATA_DIR) / filename
    if not filepath.exists():
        logger.warning(f"Data file {filename} not found in {filepath.parent}")
        return None

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading {filename}: {e}")
        return None


def load_data(data_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load all game data from JSON files.

    Returns a dictionary with keys:
    - eggs: Egg catalog offered on the selection screen
    - pets: Pet defaults, stat ranges and hatch names
    - world_points: Interactive points of the world map

    Falls back to empty dicts if files are missing.
    """
    return {
        "eggs": load_json_file("eggs.json", data_dir) or {},
        "pets": load_json_file("pets.json", data_dir) or {},
        "world_points": load_json_file("world_points.json", data_dir) or {},
    }
