"""Live RPG Maker MV data graph and the project folder it is loaded from."""

import json
import logging
import os
import shutil
from dataclasses import dataclass, field
from typing import Optional

from . import MAP_FILE_RE

log = logging.getLogger(__name__)

# GameData attribute -> database file
DATABASE_FILES = {
    "actors": "Actors.json",
    "armors": "Armors.json",
    "classes": "Classes.json",
    "common_events": "CommonEvents.json",
    "enemies": "Enemies.json",
    "items": "Items.json",
    "skills": "Skills.json",
    "states": "States.json",
    "troops": "Troops.json",
    "weapons": "Weapons.json",
}
SYSTEM_FILE = "System.json"


@dataclass
class GameData:
    """The in-memory game data the codec reads from and writes into.

    Database collections keep RPG Maker's layout: index 0 is null and
    entity *n* lives at index *n*.  ``maps`` holds whichever maps the host
    has loaded, keyed by map id.
    """
    actors: list = field(default_factory=list)
    armors: list = field(default_factory=list)
    classes: list = field(default_factory=list)
    common_events: list = field(default_factory=list)
    enemies: list = field(default_factory=list)
    items: list = field(default_factory=list)
    skills: list = field(default_factory=list)
    states: list = field(default_factory=list)
    troops: list = field(default_factory=list)
    weapons: list = field(default_factory=list)
    system: dict = field(default_factory=dict)
    maps: dict = field(default_factory=dict)


def dense_entities(collection) -> list:
    """Non-null entities in encounter order.

    Extraction and injection both go through this so record *n* of a
    document always lands on the *n*-th non-null live entity.
    """
    if not isinstance(collection, list):
        return []
    return [e for e in collection if isinstance(e, dict)]


# ── Project folder layout ───────────────────────────────────────────

def find_content_root(project_dir: str) -> Optional[str]:
    """Return the folder containing data/ (handles the www/ layout)."""
    for base in (project_dir, os.path.join(project_dir, "www")):
        for name in ("data", "Data"):
            if os.path.isdir(os.path.join(base, name)):
                return base
    return None


def find_data_dir(project_dir: str) -> Optional[str]:
    """Locate the data/ directory inside the project."""
    content_root = find_content_root(project_dir)
    if content_root:
        for name in ("data", "Data"):
            d = os.path.join(content_root, name)
            if os.path.isdir(d):
                return d
    return None


def _require_data_dir(project_dir: str) -> str:
    data_dir = find_data_dir(project_dir)
    if not data_dir:
        raise FileNotFoundError(
            f"No 'data' folder found in {project_dir}. "
            "Please select an RPG Maker MV project folder."
        )
    return data_dir


def _load_json(path: str):
    with open(path, "r", encoding="utf-8-sig") as f:
        return json.load(f)


def pristine_data_dir(data_dir: str) -> str:
    """The data_original/ backup when one exists, else *data_dir* itself.

    Once a language has been applied in place, data/ holds translated text;
    the backup is the only copy of the untranslated game.
    """
    backup_dir = data_dir + "_original"
    return backup_dir if os.path.isdir(backup_dir) else data_dir


def load_game_data(project_dir: str, pristine: bool = False) -> GameData:
    """Load the database files, System.json and every Map###.json.

    With *pristine* the untranslated backup is read when there is one.
    """
    data_dir = _require_data_dir(project_dir)
    if pristine:
        data_dir = pristine_data_dir(data_dir)
    game = GameData()

    for attr, filename in DATABASE_FILES.items():
        path = os.path.join(data_dir, filename)
        if not os.path.exists(path):
            continue
        data = _load_json(path)
        if isinstance(data, list):
            setattr(game, attr, data)
        else:
            log.warning("%s is not a list, ignored", filename)

    system_path = os.path.join(data_dir, SYSTEM_FILE)
    if os.path.exists(system_path):
        system = _load_json(system_path)
        if isinstance(system, dict):
            game.system = system

    for filename in sorted(os.listdir(data_dir)):
        m = MAP_FILE_RE.match(filename)
        if not m:
            continue
        data = _load_json(os.path.join(data_dir, filename))
        if isinstance(data, dict):
            game.maps[int(m.group(1))] = data

    log.info("Loaded %s: %d maps", data_dir, len(game.maps))
    return game


def backup_data_dir(data_dir: str):
    """Copy the data/ folder to data_original/ if no backup exists yet."""
    backup_dir = data_dir + "_original"
    if os.path.isdir(backup_dir):
        return
    log.info("Backing up %s to %s", data_dir, backup_dir)
    shutil.copytree(data_dir, backup_dir)


def save_game_data(project_dir: str, game: GameData,
                   output_dir: Optional[str] = None):
    """Write the data graph back as RPG Maker JSON files.

    Without *output_dir* the project's own data/ folder is overwritten,
    after a one-time backup to data_original/.
    """
    if output_dir is None:
        output_dir = _require_data_dir(project_dir)
        backup_data_dir(output_dir)
    os.makedirs(output_dir, exist_ok=True)

    def dump(filename, data):
        with open(os.path.join(output_dir, filename), "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)

    for attr, filename in DATABASE_FILES.items():
        dump(filename, getattr(game, attr))
    if game.system:
        dump(SYSTEM_FILE, game.system)
    for map_id, data in game.maps.items():
        dump(f"Map{int(map_id):03d}.json", data)
