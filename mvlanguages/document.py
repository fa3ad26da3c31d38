"""Data model for language documents: compact records and text runs."""

import copy
import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from .errors import MalformedDocumentError

log = logging.getLogger(__name__)


def _read(entity: dict, key: str):
    """Copy a field off a live entity as-is (None when absent)."""
    return copy.deepcopy(entity.get(key))


def _write(entity: dict, key: str, value) -> bool:
    """Overlay one field; absent values leave the live field untouched."""
    if value is None:
        return False
    entity[key] = copy.deepcopy(value)
    return True


def _as_dict(raw, what: str) -> dict:
    if isinstance(raw, dict):
        return raw
    log.warning("Malformed %s record %r, fields left untouched", what, raw)
    return {}


def _compact(d: dict) -> dict:
    """Drop absent fields so missing strings stay missing on disk."""
    return {k: v for k, v in d.items() if v is not None}


# ── Text runs ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class Anchor:
    """Address of a text run's first command."""
    container: int   # event id (maps) or entity id (troops / common events)
    page: int        # page index (always 0 for common events)
    index: int       # command index inside the page list

    def to_dict(self) -> dict:
        return {"container": self.container, "page": self.page,
                "index": self.index}

    @classmethod
    def from_dict(cls, raw) -> "Anchor":
        if not isinstance(raw, dict):
            raise MalformedDocumentError(f"Bad anchor: {raw!r}")
        try:
            return cls(int(raw.get("container", 0)), int(raw.get("page", 0)),
                       int(raw["index"]))
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise MalformedDocumentError(f"Bad anchor {raw!r}: {exc}") from exc


@dataclass
class TextRun:
    """One or more text commands as a single translatable value.

    ``run_length`` is set only when the run is the product of joining 401
    lines; it is the number of live commands the string splits back into.
    """
    anchor: Anchor
    parameters: list = field(default_factory=list)
    run_length: Optional[int] = None

    @property
    def is_joined(self) -> bool:
        return self.run_length is not None

    @property
    def text(self):
        return self.parameters[0] if self.parameters else None

    def to_dict(self) -> dict:
        d = {"anchor": self.anchor.to_dict(),
             "parameters": copy.deepcopy(self.parameters)}
        if self.run_length is not None:
            d["runLength"] = self.run_length
        return d

    @classmethod
    def from_dict(cls, raw) -> "TextRun":
        if not isinstance(raw, dict):
            raise MalformedDocumentError(f"Bad text run: {raw!r}")
        params = raw.get("parameters", [])
        if not isinstance(params, list):
            raise MalformedDocumentError(f"Bad run parameters: {params!r}")
        run_length = raw.get("runLength")
        if run_length is not None:
            try:
                run_length = int(run_length)
            except (TypeError, ValueError, OverflowError) as exc:
                raise MalformedDocumentError(
                    f"Bad runLength {run_length!r}") from exc
        return cls(Anchor.from_dict(raw.get("anchor")), params, run_length)


def runs_from_list(raw, what: str) -> list:
    """Parse a list of runs, dropping (and logging) the malformed ones."""
    runs = []
    if not isinstance(raw, list):
        if raw is not None:
            log.warning("Malformed %s run list %r, ignored", what, raw)
        return runs
    for item in raw:
        try:
            runs.append(TextRun.from_dict(item))
        except MalformedDocumentError as exc:
            log.warning("Skipping %s run: %s", what, exc)
    return runs


# ── Field sets (composed, not inherited) ────────────────────────────

@dataclass
class NamedText:
    name: Optional[str] = None

    @classmethod
    def from_entity(cls, entity: dict) -> "NamedText":
        return cls(_read(entity, "name"))

    def merge_into(self, entity: dict):
        _write(entity, "name", self.name)

    def to_dict(self) -> dict:
        return {"name": self.name}

    @classmethod
    def from_dict(cls, raw: dict) -> "NamedText":
        return cls(raw.get("name"))


@dataclass
class DescribedText:
    named: NamedText = field(default_factory=NamedText)
    description: Optional[str] = None

    @classmethod
    def from_entity(cls, entity: dict) -> "DescribedText":
        return cls(NamedText.from_entity(entity),
                   _read(entity, "description"))

    def merge_into(self, entity: dict):
        self.named.merge_into(entity)
        _write(entity, "description", self.description)

    def to_dict(self) -> dict:
        return {**self.named.to_dict(), "description": self.description}

    @classmethod
    def from_dict(cls, raw: dict) -> "DescribedText":
        return cls(NamedText.from_dict(raw), raw.get("description"))


# ── Compact records per category ────────────────────────────────────

@dataclass
class ActorRecord:
    named: NamedText = field(default_factory=NamedText)
    nickname: Optional[str] = None
    profile: Optional[str] = None

    @classmethod
    def from_entity(cls, entity: dict) -> "ActorRecord":
        return cls(NamedText.from_entity(entity),
                   _read(entity, "nickname"), _read(entity, "profile"))

    def merge_into(self, entity: dict):
        self.named.merge_into(entity)
        _write(entity, "nickname", self.nickname)
        _write(entity, "profile", self.profile)

    def to_dict(self) -> dict:
        return _compact({**self.named.to_dict(), "nickname": self.nickname,
                         "profile": self.profile})

    @classmethod
    def from_dict(cls, raw) -> "ActorRecord":
        raw = _as_dict(raw, "actor")
        return cls(NamedText.from_dict(raw), raw.get("nickname"),
                   raw.get("profile"))


@dataclass
class ItemRecord:
    """Items, weapons and armors share the same translatable fields."""
    described: DescribedText = field(default_factory=DescribedText)

    @classmethod
    def from_entity(cls, entity: dict) -> "ItemRecord":
        return cls(DescribedText.from_entity(entity))

    def merge_into(self, entity: dict):
        self.described.merge_into(entity)

    def to_dict(self) -> dict:
        return _compact(self.described.to_dict())

    @classmethod
    def from_dict(cls, raw) -> "ItemRecord":
        return cls(DescribedText.from_dict(_as_dict(raw, "item")))


@dataclass
class SkillRecord:
    described: DescribedText = field(default_factory=DescribedText)
    message1: Optional[str] = None
    message2: Optional[str] = None

    @classmethod
    def from_entity(cls, entity: dict) -> "SkillRecord":
        return cls(DescribedText.from_entity(entity),
                   _read(entity, "message1"), _read(entity, "message2"))

    def merge_into(self, entity: dict):
        self.described.merge_into(entity)
        _write(entity, "message1", self.message1)
        _write(entity, "message2", self.message2)

    def to_dict(self) -> dict:
        return _compact({**self.described.to_dict(),
                         "message1": self.message1,
                         "message2": self.message2})

    @classmethod
    def from_dict(cls, raw) -> "SkillRecord":
        raw = _as_dict(raw, "skill")
        return cls(DescribedText.from_dict(raw), raw.get("message1"),
                   raw.get("message2"))


@dataclass
class StateRecord:
    described: DescribedText = field(default_factory=DescribedText)
    message1: Optional[str] = None
    message2: Optional[str] = None
    message3: Optional[str] = None
    message4: Optional[str] = None

    @classmethod
    def from_entity(cls, entity: dict) -> "StateRecord":
        return cls(DescribedText.from_entity(entity),
                   _read(entity, "message1"), _read(entity, "message2"),
                   _read(entity, "message3"), _read(entity, "message4"))

    def merge_into(self, entity: dict):
        self.described.merge_into(entity)
        _write(entity, "message1", self.message1)
        _write(entity, "message2", self.message2)
        _write(entity, "message3", self.message3)
        _write(entity, "message4", self.message4)

    def to_dict(self) -> dict:
        return _compact({**self.described.to_dict(),
                         "message1": self.message1, "message2": self.message2,
                         "message3": self.message3, "message4": self.message4})

    @classmethod
    def from_dict(cls, raw) -> "StateRecord":
        raw = _as_dict(raw, "state")
        return cls(DescribedText.from_dict(raw), raw.get("message1"),
                   raw.get("message2"), raw.get("message3"),
                   raw.get("message4"))


@dataclass
class TroopRecord:
    named: NamedText = field(default_factory=NamedText)
    pages: list = field(default_factory=list)  # list[list[TextRun]]

    def to_dict(self) -> dict:
        d = _compact(self.named.to_dict())
        d["pages"] = [[r.to_dict() for r in page] for page in self.pages]
        return d

    @classmethod
    def from_dict(cls, raw) -> "TroopRecord":
        raw = _as_dict(raw, "troop")
        pages = raw.get("pages", [])
        if not isinstance(pages, list):
            log.warning("Malformed troop pages %r, ignored", pages)
            pages = []
        return cls(NamedText.from_dict(raw),
                   [runs_from_list(p, "troop page") for p in pages])


@dataclass
class CommonEventRecord:
    runs: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"runs": [r.to_dict() for r in self.runs]}

    @classmethod
    def from_dict(cls, raw) -> "CommonEventRecord":
        return cls(runs_from_list(_as_dict(raw, "common event").get("runs"),
                                  "common event"))


@dataclass
class MapRecord:
    display_name: Optional[str] = None
    runs: list = field(default_factory=list)

    def merge_into(self, map_data: dict):
        _write(map_data, "displayName", self.display_name)

    def to_dict(self) -> dict:
        d = _compact({"displayName": self.display_name})
        d["runs"] = [r.to_dict() for r in self.runs]
        return d

    @classmethod
    def from_dict(cls, raw) -> "MapRecord":
        raw = _as_dict(raw, "map")
        return cls(raw.get("displayName"), runs_from_list(raw.get("runs"), "map"))


@dataclass
class SystemRecord:
    """Game title, terms and the System.json type-name arrays."""
    title: Optional[str] = None
    terms: Optional[dict] = None
    equip_types: Optional[list] = None
    skill_types: Optional[list] = None
    weapon_types: Optional[list] = None
    armor_types: Optional[list] = None
    elements: Optional[list] = None

    # document key -> System.json key
    TYPE_ARRAYS = {
        "equip_types": "equipTypes",
        "skill_types": "skillTypes",
        "weapon_types": "weaponTypes",
        "armor_types": "armorTypes",
        "elements": "elements",
    }

    @classmethod
    def from_entity(cls, system: dict) -> "SystemRecord":
        record = cls(_read(system, "gameTitle"), _read(system, "terms"))
        for doc_key, sys_key in cls.TYPE_ARRAYS.items():
            setattr(record, doc_key, _read(system, sys_key))
        return record

    def merge_into(self, system: dict):
        _write(system, "gameTitle", self.title)
        if isinstance(self.terms, dict):
            live_terms = system.get("terms")
            if isinstance(live_terms, dict):
                _merge_terms(live_terms, self.terms)
        for doc_key, sys_key in self.TYPE_ARRAYS.items():
            values = getattr(self, doc_key)
            live = system.get(sys_key)
            if isinstance(values, list) and isinstance(live, list):
                _merge_positional(live, values)

    def to_dict(self) -> dict:
        d = {"title": self.title, "terms": self.terms}
        for doc_key in self.TYPE_ARRAYS:
            d[doc_key] = getattr(self, doc_key)
        return copy.deepcopy(_compact(d))

    @classmethod
    def from_dict(cls, raw: dict) -> "SystemRecord":
        terms = raw.get("terms")
        record = cls(raw.get("title"), terms if isinstance(terms, dict) else None)
        for doc_key in cls.TYPE_ARRAYS:
            values = raw.get(doc_key)
            setattr(record, doc_key, values if isinstance(values, list) else None)
        return record


def _merge_positional(live: list, values: list):
    """Overlay strings index by index; never grows or shrinks the live list."""
    for i, value in enumerate(values[:len(live)]):
        if isinstance(value, str):
            live[i] = value


def _merge_terms(live: dict, terms: dict):
    """Overlay terms.basic/commands/params (lists) and terms.messages (dict)."""
    for key, value in terms.items():
        current = live.get(key)
        if isinstance(value, list) and isinstance(current, list):
            _merge_positional(current, value)
        elif isinstance(value, dict) and isinstance(current, dict):
            for msg_key, msg in value.items():
                if isinstance(msg, str) and msg_key in current:
                    current[msg_key] = msg
        elif isinstance(value, str) and isinstance(current, str):
            live[key] = value


# ── Language document ───────────────────────────────────────────────

# Simple compact-record categories: document key -> record class
RECORD_CATEGORIES = {
    "actors": ActorRecord,
    "armors": ItemRecord,
    "items": ItemRecord,
    "skills": SkillRecord,
    "states": StateRecord,
    "weapons": ItemRecord,
}

# Categories whose only translatable field is the name (stored as a string)
NAME_CATEGORIES = ("classes", "enemies")


@dataclass
class LanguageDocument:
    """Every compact record and text run for one language."""
    system: SystemRecord = field(default_factory=SystemRecord)
    actors: list = field(default_factory=list)
    armors: list = field(default_factory=list)
    classes: list = field(default_factory=list)   # list[NamedText]
    common_events: list = field(default_factory=list)
    enemies: list = field(default_factory=list)   # list[NamedText]
    items: list = field(default_factory=list)
    skills: list = field(default_factory=list)
    states: list = field(default_factory=list)
    troops: list = field(default_factory=list)
    weapons: list = field(default_factory=list)
    map_data: dict = field(default_factory=dict)  # "MAP001" -> MapRecord

    @property
    def run_count(self) -> int:
        total = sum(len(ce.runs) for ce in self.common_events)
        total += sum(len(p) for t in self.troops for p in t.pages)
        total += sum(len(m.runs) for m in self.map_data.values())
        return total

    def to_dict(self) -> dict:
        d = self.system.to_dict()
        for key in RECORD_CATEGORIES:
            d[key] = [r.to_dict() for r in getattr(self, key)]
        for key in NAME_CATEGORIES:
            d[key] = [r.name for r in getattr(self, key)]
        d["common_events"] = [ce.to_dict() for ce in self.common_events]
        d["troops"] = [t.to_dict() for t in self.troops]
        d["map_data"] = {k: m.to_dict() for k, m in self.map_data.items()}
        return d

    @classmethod
    def from_dict(cls, data) -> "LanguageDocument":
        if not isinstance(data, dict):
            raise MalformedDocumentError(
                f"Language document root must be an object, got {type(data).__name__}")
        doc = cls(system=SystemRecord.from_dict(data))
        for key, record_cls in RECORD_CATEGORIES.items():
            setattr(doc, key, [record_cls.from_dict(r)
                               for r in _list_field(data, key)])
        for key in NAME_CATEGORIES:
            setattr(doc, key, [NamedText(r if isinstance(r, str) else None)
                               for r in _list_field(data, key)])
        doc.common_events = [CommonEventRecord.from_dict(r)
                             for r in _list_field(data, "common_events")]
        doc.troops = [TroopRecord.from_dict(r)
                      for r in _list_field(data, "troops")]
        map_data = data.get("map_data", {})
        if isinstance(map_data, dict):
            doc.map_data = {str(k): MapRecord.from_dict(v)
                            for k, v in map_data.items()}
        else:
            log.warning("Malformed map_data %r, ignored", type(map_data).__name__)
        return doc

    def to_json(self, indent: Optional[int] = None) -> bytes:
        """Serialize for the storage collaborator."""
        return json.dumps(self.to_dict(), ensure_ascii=False,
                          indent=indent).encode("utf-8")

    @classmethod
    def from_json(cls, raw) -> "LanguageDocument":
        """Parse stored bytes; raises MalformedDocumentError on bad input."""
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8-sig")
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError, TypeError) as exc:
            raise MalformedDocumentError(f"Unreadable language document: {exc}") from exc
        return cls.from_dict(data)


def _list_field(data: dict, key: str) -> list:
    value = data.get(key, [])
    if isinstance(value, list):
        return value
    log.warning("Malformed %s in language document, expected a list", key)
    return []
