import copy

from conftest import make_game, show_text
from mvlanguages.document import (
    ActorRecord,
    Anchor,
    LanguageDocument,
    NamedText,
    TextRun,
)
from mvlanguages.extractor import Extractor
from mvlanguages.game_data import GameData
from mvlanguages.injector import Injector


def translate(doc: LanguageDocument) -> LanguageDocument:
    """A hand-edited Spanish copy of the extracted document."""
    es = LanguageDocument.from_dict(doc.to_dict())
    es.system.title = "Aventura"
    es.system.terms["commands"][0] = "Luchar"
    es.system.terms["messages"]["victory"] = "¡%1 ganó!"
    es.system.equip_types = ["", "Arma", "Escudo"]
    es.actors[0].named.name = "Haroldo"
    es.actors[1].profile = "Una maga."
    es.items[0].described.description = "Restaura 500 PV."
    es.skills[0].message1 = " ataca!"
    es.states[0].message4 = " revive!"
    es.classes[0].name = "Guerrero"
    es.enemies[0].name = "Murciélago"
    es.common_events[0].runs[0].parameters = ["Bienvenido.\nDisfruta."]
    es.troops[0].pages[0][0].parameters = ["¡Chillido!"]
    es.troops[0].pages[1][0].parameters = [["Luchar", "Huir"]]
    es.map_data["MAP001"].display_name = "Pueblo"
    runs = es.map_data["MAP001"].runs
    runs[0].parameters = ["Línea uno.\n\nLínea tres."]
    runs[1].parameters = [["Sí", "No"]]
    runs[2].parameters = ["Desplazando."]
    return es


def test_round_trip_restores_original_text(game):
    doc = Extractor().extract(game)
    original = copy.deepcopy(game)
    Injector().inject(translate(doc), game)
    assert game != original
    Injector().inject(doc, game)
    assert game == original


def test_injection_is_idempotent(game):
    es = translate(Extractor().extract(game))
    Injector().inject(es, game)
    once = copy.deepcopy(game)
    Injector().inject(es, game)
    assert game == once


def test_injection_does_not_mutate_document(game):
    es = translate(Extractor().extract(game))
    before = es.to_dict()
    stats = Injector().inject(es, game)
    assert es.to_dict() == before
    assert stats["skipped"] == 0


def test_translated_fields_land_on_live_entities(game):
    Injector().inject(translate(Extractor().extract(game)), game)

    assert game.system["gameTitle"] == "Aventura"
    assert game.system["terms"]["commands"] == ["Luchar", "Escape", None]
    assert game.system["terms"]["messages"]["victory"] == "¡%1 ganó!"
    assert game.system["equipTypes"] == ["", "Arma", "Escudo"]
    assert game.actors[1]["name"] == "Haroldo"
    assert game.actors[3]["profile"] == "Una maga."
    assert game.items[1]["description"] == "Restaura 500 PV."
    assert game.skills[1]["message1"] == " ataca!"
    assert game.states[1]["message4"] == " revive!"
    assert game.classes[1]["name"] == "Guerrero"
    assert game.enemies[1]["name"] == "Murciélago"

    ce = game.common_events[1]["list"]
    assert [c["parameters"][0] for c in ce[1:3]] == ["Bienvenido.", "Disfruta."]

    troop = game.troops[1]["pages"]
    assert troop[0]["list"][1]["parameters"] == ["¡Chillido!"]
    assert troop[1]["list"][0]["parameters"][0] == ["Luchar", "Huir"]

    town = game.maps[1]
    page = town["events"][1]["pages"][0]["list"]
    assert town["displayName"] == "Pueblo"
    assert [c["parameters"][0] for c in page[1:4]] == [
        "Línea uno.", "Line two.", "Línea tres."]
    assert page[4]["parameters"] == [["Sí", "No"], 1, 0, 2, 0]
    assert page[5]["parameters"] == ["Desplazando."]


def test_non_translatable_fields_untouched(game):
    Injector().inject(translate(Extractor().extract(game)), game)
    assert game.actors[1]["initialLevel"] == 1
    assert game.items[1]["price"] == 50
    assert game.classes[1]["params"] == [[1, 2]]
    assert game.enemies[1]["battlerName"] == "Bat"
    assert game.maps[1]["width"] == 17


def test_dense_index_alignment():
    game = GameData(actors=[None, {"id": 1, "name": "A"}, None,
                            {"id": 3, "name": "B"}])
    doc = Extractor().extract(game)
    assert [a.named.name for a in doc.actors] == ["A", "B"]

    doc.actors = [ActorRecord(NamedText("A'")), ActorRecord(NamedText("B'"))]
    Injector().inject(doc, game)
    assert game.actors == [None, {"id": 1, "name": "A'"}, None,
                           {"id": 3, "name": "B'"}]


def test_extra_records_are_ignored():
    game = GameData(classes=[None, {"id": 1, "name": "Warrior"}])
    doc = LanguageDocument(classes=[NamedText("Guerrero"), NamedText("Mago")])
    stats = Injector().inject(doc, game)
    assert game.classes == [None, {"id": 1, "name": "Guerrero"}]
    assert stats["records"] == 1


def test_bad_run_does_not_block_others(game):
    doc = Extractor().extract(game)
    runs = doc.map_data["MAP001"].runs
    runs.insert(0, TextRun(Anchor(1, 0, 99), ["lost"], 1))
    runs.insert(0, TextRun(Anchor(42, 0, 1), ["no event"], 1))
    runs.insert(0, TextRun(Anchor(1, 7, 1), ["no page"], 1))
    runs[-1].parameters = ["Scrolled."]

    stats = Injector().inject(doc, game)

    assert stats["skipped"] == 3
    assert game.maps[1]["events"][1]["pages"][0]["list"][5]["parameters"] == ["Scrolled."]


def test_inject_map_only_touches_that_map(game):
    doc = translate(Extractor().extract(game))
    fresh = make_game().maps[1]
    stats = Injector().inject_map(doc, 1, fresh)
    assert fresh["displayName"] == "Pueblo"
    assert stats["runs"] == 3
    assert game.maps[1]["displayName"] == "Town"


def test_inject_map_without_document_entry(game):
    stats = Injector().inject_map(LanguageDocument(), 5, game.maps[1])
    assert stats == {"records": 0, "runs": 0, "lines": 0, "skipped": 0}


def test_join_disabled_round_trip(game):
    doc = Extractor(join_lines=False).extract(game)
    runs = doc.map_data["MAP001"].runs
    assert [r.run_length for r in runs] == [1, 1, 1, None, None]
    runs[1].parameters = ["Second."]
    Injector().inject(doc, game)
    page = game.maps[1]["events"][1]["pages"][0]["list"]
    assert page[2]["parameters"] == ["Second."]


def test_troop_null_page_keeps_page_numbers(game):
    game.troops[1]["pages"].insert(0, None)
    doc = Extractor().extract(game)
    pages = doc.troops[0].pages
    assert pages[0] == []
    assert pages[1][0].anchor.page == 1
    pages[1][0].parameters = ["Chirp!"]
    Injector().inject(doc, game)
    assert game.troops[1]["pages"][1]["list"][1]["parameters"] == ["Chirp!"]


def test_shrunken_common_event_is_skipped(game):
    doc = Extractor().extract(game)
    game.common_events[1]["list"] = [show_text("Only")]
    stats = Injector().inject(doc, game)
    assert stats["skipped"] == 1
    assert game.common_events[1]["list"] == [show_text("Only")]
