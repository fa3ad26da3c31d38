"""Injector: overlay a language document onto the live game data."""

import logging

from . import map_key
from .document import LanguageDocument, MapRecord
from .errors import AnchorOutOfBoundsError
from .game_data import GameData, dense_entities
from .text_runs import split_text_run

log = logging.getLogger(__name__)


def _new_stats() -> dict:
    return {"records": 0, "runs": 0, "lines": 0, "skipped": 0}


def _page_list(pages, page_index: int):
    """Command list of ``pages[page_index]``, or None if it is gone."""
    if not isinstance(pages, list) or not 0 <= page_index < len(pages):
        return None
    page = pages[page_index]
    if not isinstance(page, dict):
        return None
    return page.get("list")


class Injector:
    """Writes document text into live entities and commands in place.

    Only translatable fields are touched and every write is total, so
    applying the same document twice gives the same live state.  Problems
    are logged and absorbed per record / per run.
    """

    def inject(self, document: LanguageDocument, game: GameData) -> dict:
        """Apply *document* to every category and every loaded map.

        Returns:
            Dict with stats: {"records": int, "runs": int, "lines": int,
                              "skipped": int}
        """
        stats = _new_stats()

        if isinstance(game.system, dict):
            document.system.merge_into(game.system)
        for category in ("actors", "armors", "classes", "enemies", "items",
                         "skills", "states", "weapons"):
            self._overlay(getattr(document, category),
                          getattr(game, category), category, stats)

        for record, event in self._pair(document.common_events,
                                        game.common_events, "common_events"):
            for run in record.runs:
                self._apply_run(run, event.get("list"), stats)
            stats["records"] += 1

        for record, troop in self._pair(document.troops, game.troops, "troops"):
            record.named.merge_into(troop)
            for runs in record.pages:
                for run in runs:
                    self._apply_run(
                        run, _page_list(troop.get("pages"), run.anchor.page),
                        stats)
            stats["records"] += 1

        for map_id, map_data in game.maps.items():
            self._inject_map_record(document.map_data.get(map_key(map_id)),
                                    map_data, stats)

        log.info("Injected %d records, %d runs (%d lines), %d skipped",
                 stats["records"], stats["runs"], stats["lines"],
                 stats["skipped"])
        return stats

    def inject_map(self, document: LanguageDocument, map_id: int,
                   map_data: dict) -> dict:
        """Apply one map's runs, e.g. right after the host loaded that map."""
        stats = _new_stats()
        self._inject_map_record(document.map_data.get(map_key(map_id)),
                                map_data, stats)
        return stats

    # ── Internals ──────────────────────────────────────────────────

    @staticmethod
    def _pair(records: list, collection, what: str):
        """Zip document records with the non-null live entities."""
        live = dense_entities(collection)
        if len(records) > len(live):
            log.warning("%s: document has %d records but only %d live "
                        "entities, extra records ignored",
                        what, len(records), len(live))
        return zip(records, live)

    def _overlay(self, records: list, collection, what: str, stats: dict):
        for record, entity in self._pair(records, collection, what):
            try:
                record.merge_into(entity)
            except (ValueError, TypeError, KeyError) as exc:
                log.warning("%s: record %r not applied: %s", what, record, exc)
                stats["skipped"] += 1
                continue
            stats["records"] += 1

    def _inject_map_record(self, record, map_data: dict, stats: dict):
        if not isinstance(record, MapRecord) or not isinstance(map_data, dict):
            return
        record.merge_into(map_data)
        events = {e.get("id"): e for e in dense_entities(map_data.get("events"))}
        for run in record.runs:
            event = events.get(run.anchor.container)
            if event is None:
                log.warning("Map event %s no longer exists, run skipped",
                            run.anchor.container)
                stats["skipped"] += 1
                continue
            self._apply_run(run, _page_list(event.get("pages"), run.anchor.page),
                            stats)
        stats["records"] += 1

    @staticmethod
    def _apply_run(run, cmd_list, stats: dict):
        try:
            stats["lines"] += split_text_run(run, cmd_list)
        except AnchorOutOfBoundsError as exc:
            log.warning("Text run skipped: %s", exc)
            stats["skipped"] += 1
            return
        stats["runs"] += 1
