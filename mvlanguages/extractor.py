"""Extractor: live game data -> default-language document."""

import logging

from . import map_key
from .document import (
    ActorRecord,
    CommonEventRecord,
    ItemRecord,
    LanguageDocument,
    MapRecord,
    NamedText,
    SkillRecord,
    StateRecord,
    SystemRecord,
    TroopRecord,
)
from .game_data import GameData, dense_entities
from .text_runs import join_text_runs

log = logging.getLogger(__name__)


class Extractor:
    """Walks a GameData graph and builds a LanguageDocument snapshot."""

    def __init__(self, join_lines: bool = True):
        self.join_lines = join_lines  # False = one run per 401 line

    def extract(self, game: GameData) -> LanguageDocument:
        doc = LanguageDocument(system=SystemRecord.from_entity(game.system or {}))

        doc.actors = [ActorRecord.from_entity(e)
                      for e in dense_entities(game.actors)]
        doc.armors = [ItemRecord.from_entity(e)
                      for e in dense_entities(game.armors)]
        doc.items = [ItemRecord.from_entity(e)
                     for e in dense_entities(game.items)]
        doc.weapons = [ItemRecord.from_entity(e)
                       for e in dense_entities(game.weapons)]
        doc.skills = [SkillRecord.from_entity(e)
                      for e in dense_entities(game.skills)]
        doc.states = [StateRecord.from_entity(e)
                      for e in dense_entities(game.states)]
        doc.classes = [NamedText.from_entity(e)
                       for e in dense_entities(game.classes)]
        doc.enemies = [NamedText.from_entity(e)
                       for e in dense_entities(game.enemies)]

        doc.common_events = [self.extract_common_event(e)
                             for e in dense_entities(game.common_events)]
        doc.troops = [self.extract_troop(t)
                      for t in dense_entities(game.troops)]

        for map_id in sorted(game.maps):
            doc.map_data[map_key(map_id)] = self.extract_map(game.maps[map_id])

        log.info("Extracted %d actors, %d items, %d troops, %d maps, %d text runs",
                 len(doc.actors), len(doc.items), len(doc.troops),
                 len(doc.map_data), doc.run_count)
        return doc

    def extract_common_event(self, event: dict) -> CommonEventRecord:
        return CommonEventRecord(join_text_runs(
            event.get("list"), event.get("id", 0), 0, self.join_lines))

    def extract_troop(self, troop: dict) -> TroopRecord:
        record = TroopRecord(NamedText.from_entity(troop))
        troop_id = troop.get("id", 0)
        pages = troop.get("pages")
        for page_idx, page in enumerate(pages if isinstance(pages, list) else []):
            # Null pages still take a slot so page numbers stay aligned
            if not isinstance(page, dict):
                record.pages.append([])
                continue
            record.pages.append(join_text_runs(
                page.get("list"), troop_id, page_idx, self.join_lines))
        return record

    def extract_map(self, map_data: dict) -> MapRecord:
        """Display name plus the runs of every event page on one map."""
        record = MapRecord(map_data.get("displayName"))
        for event in dense_entities(map_data.get("events")):
            event_id = event.get("id", 0)
            pages = event.get("pages")
            for page_idx, page in enumerate(pages if isinstance(pages, list) else []):
                if not isinstance(page, dict):
                    continue
                record.runs.extend(join_text_runs(
                    page.get("list"), event_id, page_idx, self.join_lines))
        return record
