"""Language session: active language, loaded documents, activation hooks.

One session lives as long as the game process.  The host calls
``generate_files`` and ``load_languages`` at boot, ``update`` on scene
entry and after a language switch, and ``on_map_loaded`` whenever a map
finishes loading.
"""

import json
import logging
from typing import Optional

from . import DEFAULT_LANGUAGE
from .config import GenerationPolicy, PluginConfig
from .document import LanguageDocument
from .errors import MalformedDocumentError, MissingDocumentError
from .extractor import Extractor
from .game_data import GameData
from .injector import Injector
from .pictures import resolve_picture

log = logging.getLogger(__name__)

# Key under which the player's choice is stored in the game config
PREFERENCE_KEY = "MvLanguage"


class LanguageSession:
    """Owns the current language and the document cache."""

    def __init__(self, config: PluginConfig, storage):
        self.config = config
        self.storage = storage
        self.index = 0
        self.documents = {}            # language id -> LanguageDocument
        self.active_language = None   # language whose text is live
        self.extractor = Extractor(join_lines=config.join_text_lines)
        self.injector = Injector()

    @property
    def languages(self) -> list:
        return self.config.languages

    @property
    def language(self):
        """The selected LanguageMap (first language if the index is stale)."""
        if 0 <= self.index < len(self.languages):
            return self.languages[self.index]
        return self.languages[0] if self.languages else None

    # ── Generation ───────────────────────────────────────────────

    def generate_files(self, game: GameData) -> Optional[LanguageDocument]:
        """Write the default-language snapshot according to the policy.

        Languages with no document yet are seeded with a copy of the
        snapshot so translators have a file to start from; existing
        translations are never overwritten.
        """
        policy = self.config.generate_policy
        if policy is GenerationPolicy.NEVER:
            return None
        if (policy is GenerationPolicy.IF_MISSING
                and self.storage.has_language(DEFAULT_LANGUAGE)):
            log.info("Default language document exists, not regenerated")
            return None

        document = self.extractor.extract(game)
        payload = document.to_json()
        if not self.storage.write(DEFAULT_LANGUAGE, payload):
            log.warning("Default language document could not be written")
        self.documents[DEFAULT_LANGUAGE] = document

        for language in self.config.language_ids:
            if language == DEFAULT_LANGUAGE or self.storage.has_language(language):
                continue
            if self.storage.write(language, payload):
                log.info("Seeded language document %r", language)
        return document

    # ── Loading ──────────────────────────────────────────────────

    def load_language(self, language: str) -> LanguageDocument:
        """Read and parse one language document into the cache.

        Raises:
            MissingDocumentError: Storage has nothing for *language*.
            MalformedDocumentError: The stored bytes are not a document.
        """
        payload = self.storage.read(language)
        if payload is None:
            raise MissingDocumentError(language)
        document = LanguageDocument.from_json(payload)
        self.documents[language] = document
        return document

    def load_languages(self):
        """Load every configured language; failures are logged and skipped."""
        for language in self.config.language_ids:
            try:
                self.load_language(language)
            except (MissingDocumentError, MalformedDocumentError) as exc:
                log.warning("Language %r not loaded: %s", language, exc)

    def get_document(self, language: str) -> Optional[LanguageDocument]:
        document = self.documents.get(language)
        if document is not None:
            return document
        try:
            return self.load_language(language)
        except (MissingDocumentError, MalformedDocumentError) as exc:
            log.warning("Language %r unavailable: %s", language, exc)
            return None

    # ── Switching ────────────────────────────────────────────────

    def select_language(self, index: int):
        if not self.languages:
            return
        self.index = index % len(self.languages)

    def next_language(self):
        self.select_language(self.index + 1)

    def previous_language(self):
        self.select_language(self.index - 1)

    def update(self, game: GameData) -> bool:
        """Inject the selected language's document into *game*.

        If the document is missing or malformed nothing is written and the
        selection falls back to the language that is already live.
        """
        language = self.language
        if language is None:
            return False
        if not 0 <= self.index < len(self.languages):
            self.index = 0

        document = self.get_document(language.language)
        if document is None:
            self._fall_back()
            return False

        self.injector.inject(document, game)
        self.active_language = language.language
        return True

    def _fall_back(self):
        if self.active_language in self.config.language_ids:
            self.index = self.config.language_ids.index(self.active_language)

    def on_map_loaded(self, map_id: int, map_data: dict) -> Optional[dict]:
        """Apply the live language's runs to a freshly loaded map."""
        document = self.documents.get(self.active_language)
        if document is None:
            return None
        return self.injector.inject_map(document, map_id, map_data)

    # ── Option window / pictures ─────────────────────────────────

    def option_label(self) -> str:
        """Caption of the language row in the options window."""
        language = self.language
        return language.language_label if language else ""

    def status_text(self) -> str:
        """Value shown next to the caption (the selected language's label)."""
        language = self.language
        return language.label if language else ""

    def picture_name(self, content_root: str, name: str) -> str:
        if not self.config.images_switch_language or self.language is None:
            return name
        return resolve_picture(content_root, name, self.language.language)

    # ── Player preference ────────────────────────────────────────

    def load_preference(self, path: str):
        """Restore the selected index from a JSON game config file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                cfg = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError, OSError):
            return
        if not isinstance(cfg, dict):
            return
        try:
            self.index = int(cfg.get(PREFERENCE_KEY, self.index))
        except (TypeError, ValueError):
            log.warning("Ignoring malformed %s preference %r",
                        PREFERENCE_KEY, cfg.get(PREFERENCE_KEY))

    def save_preference(self, path: str):
        """Store the selected index, keeping the file's other settings."""
        cfg = {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                cfg = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError, OSError):
            pass
        if not isinstance(cfg, dict):
            cfg = {}
        cfg[PREFERENCE_KEY] = self.index
        with open(path, "w", encoding="utf-8") as f:
            json.dump(cfg, f, ensure_ascii=False, indent=2)
