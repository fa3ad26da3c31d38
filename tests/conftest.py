import json
import os

import pytest

from mvlanguages.game_data import GameData


def text(code, value, indent=0):
    return {"code": code, "indent": indent, "parameters": [value]}


def show_text(value):
    return text(401, value)


def header():
    return {"code": 101, "indent": 0, "parameters": ["Actor1", 0, 0, 2]}


def choices(options):
    return {"code": 102, "indent": 0, "parameters": [list(options), 1, 0, 2, 0]}


def end():
    return {"code": 0, "indent": 0, "parameters": []}


def make_game() -> GameData:
    return GameData(
        actors=[
            None,
            {"id": 1, "name": "Harold", "nickname": "Hero",
             "profile": "A young knight.", "initialLevel": 1},
            None,
            {"id": 3, "name": "Therese", "nickname": "", "profile": "",
             "initialLevel": 5},
        ],
        classes=[None, {"id": 1, "name": "Warrior", "params": [[1, 2]]}],
        items=[None, {"id": 1, "name": "Potion",
                      "description": "Restores 500 HP.", "price": 50}],
        weapons=[None, {"id": 1, "name": "Sword", "description": "Sharp.",
                        "params": [0, 0, 10]}],
        armors=[None, {"id": 1, "name": "Shield", "description": "Sturdy."}],
        skills=[None, {"id": 1, "name": "Attack", "description": "",
                       "message1": " attacks!", "message2": "", "mpCost": 0}],
        states=[None, {"id": 1, "name": "Knockout", "message1": " has fallen!",
                       "message2": " is slain!", "message3": "",
                       "message4": " revives!"}],
        enemies=[None, {"id": 1, "name": "Bat", "battlerName": "Bat", "exp": 3}],
        common_events=[
            None,
            {"id": 1, "name": "Intro", "list": [
                header(),
                show_text("Welcome."),
                show_text("Enjoy the game."),
                end(),
            ]},
        ],
        troops=[
            None,
            {"id": 1, "name": "Bat*2", "pages": [
                {"list": [header(), show_text("Squeak!"), end()]},
                {"list": [choices(["Fight", "Run"]), end()]},
            ]},
        ],
        system={
            "gameTitle": "Quest",
            "equipTypes": ["", "Weapon", "Shield"],
            "skillTypes": ["", "Magic"],
            "weaponTypes": ["", "Dagger"],
            "armorTypes": ["", "General Armor"],
            "elements": ["", "Physical"],
            "terms": {
                "basic": ["Level", "Lv"],
                "commands": ["Fight", "Escape", None],
                "params": ["Max HP"],
                "messages": {"victory": "%1 was victorious!"},
            },
            "encryptionKey": "",
        },
        maps={
            1: {
                "displayName": "Town",
                "width": 17,
                "events": [
                    None,
                    {"id": 1, "name": "EV001", "pages": [
                        {"list": [
                            header(),
                            show_text("Line one."),
                            show_text("Line two."),
                            show_text("Line three."),
                            choices(["Yes", "No"]),
                            text(405, "Scrolling."),
                            end(),
                        ]},
                    ]},
                ],
            },
        },
    )


@pytest.fixture
def game():
    return make_game()


@pytest.fixture
def project_dir(tmp_path):
    """A minimal MV project folder on disk built from make_game()."""
    game = make_game()
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    files = {
        "Actors.json": game.actors, "Armors.json": game.armors,
        "Classes.json": game.classes, "CommonEvents.json": game.common_events,
        "Enemies.json": game.enemies, "Items.json": game.items,
        "Skills.json": game.skills, "States.json": game.states,
        "Troops.json": game.troops, "Weapons.json": game.weapons,
        "System.json": game.system, "Map001.json": game.maps[1],
        "MapInfos.json": [None, {"id": 1, "name": "MAP001"}],
    }
    for name, data in files.items():
        (data_dir / name).write_text(json.dumps(data), encoding="utf-8")

    languages = json.dumps([
        json.dumps({"language": "default", "label": "English",
                    "languageLabel": "Language"}),
        json.dumps({"language": "es", "label": "Español",
                    "languageLabel": "Idioma"}),
    ])
    plugins = [{"name": "MvLanguages", "status": True, "description": "",
                "parameters": {"Languages": languages,
                               "GenerateLanguagesFiles": "true",
                               "ImagesSwitchLanguage": "false"}}]
    js_dir = tmp_path / "js"
    js_dir.mkdir()
    (js_dir / "plugins.js").write_text(
        "var $plugins =\n" + json.dumps(plugins) + ";\n", encoding="utf-8")
    return str(tmp_path)


@pytest.fixture
def languages_dir(project_dir):
    return os.path.join(project_dir, "data", "languages")
