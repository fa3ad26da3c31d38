"""Plugin configuration: language list, generation policy and switches.

RPG Maker stores plugin parameters as strings inside js/plugins.js.  The
``Languages`` parameter is a JSON array whose items are themselves
JSON-encoded structs, e.g.::

    ["{\\"language\\": \\"default\\", \\"label\\": \\"English\\", \\"languageLabel\\": \\"Language\\"}"]
"""

import json
import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from . import DEFAULT_LANGUAGE

log = logging.getLogger(__name__)

PLUGIN_NAME = "MvLanguages"


class GenerationPolicy(Enum):
    """When the default-language document is (re)generated at boot."""
    ALWAYS = "always"
    IF_MISSING = "if_missing"
    NEVER = "never"

    @classmethod
    def parse(cls, value) -> "GenerationPolicy":
        """Accept a policy name or the legacy ``"true"``/``"false"`` switch."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        if text == "true":
            return cls.ALWAYS
        if text == "false":
            return cls.NEVER
        try:
            return cls(text)
        except ValueError:
            log.warning("Unknown generation policy %r, using 'always'", value)
            return cls.ALWAYS


@dataclass
class LanguageMap:
    """One selectable language and its option-window labels."""
    language: str
    label: str = "English"
    language_label: str = "Language"

    def __str__(self) -> str:
        return self.language

    @classmethod
    def from_dict(cls, raw: dict) -> "LanguageMap":
        return cls(
            language=str(raw["language"]),
            label=str(raw.get("label", raw["language"])),
            language_label=str(raw.get("languageLabel", "Language")),
        )

    def to_dict(self) -> dict:
        return {"language": self.language, "label": self.label,
                "languageLabel": self.language_label}


def default_languages() -> list:
    return [LanguageMap(DEFAULT_LANGUAGE, "English", "Language")]


def _bool_param(value, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def parse_languages(raw) -> list:
    """Parse the ``Languages`` struct list; falls back to the default language."""
    if not raw:
        return default_languages()
    try:
        items = json.loads(raw) if isinstance(raw, str) else raw
        languages = []
        for item in items:
            if isinstance(item, str):
                item = json.loads(item)
            languages.append(LanguageMap.from_dict(item))
    except (json.JSONDecodeError, TypeError, KeyError, AttributeError) as exc:
        log.warning("Malformed Languages parameter (%s), using default", exc)
        return default_languages()
    return languages or default_languages()


@dataclass
class PluginConfig:
    languages: list = field(default_factory=default_languages)
    generate_policy: GenerationPolicy = GenerationPolicy.ALWAYS
    images_switch_language: bool = False
    join_text_lines: bool = True

    @classmethod
    def from_plugin_params(cls, params: dict) -> "PluginConfig":
        params = params or {}
        return cls(
            languages=parse_languages(params.get("Languages")),
            generate_policy=GenerationPolicy.parse(
                params.get("GenerateLanguagesFiles", "true")),
            images_switch_language=_bool_param(
                params.get("ImagesSwitchLanguage"), False),
            join_text_lines=_bool_param(params.get("JoinTextLines"), True),
        )

    @classmethod
    def from_project(cls, project_dir: str) -> "PluginConfig":
        """Read the MvLanguages entry of js/plugins.js (defaults if absent)."""
        path = find_plugins_file(project_dir)
        if not path:
            return cls()
        try:
            plugins = load_plugins_js(path)
        except (json.JSONDecodeError, OSError) as exc:
            log.warning("Failed to load plugins.js: %s", exc)
            return cls()
        for plugin in plugins:
            if isinstance(plugin, dict) and plugin.get("name") == PLUGIN_NAME:
                params = plugin.get("parameters", {})
                return cls.from_plugin_params(params if isinstance(params, dict) else {})
        return cls()

    @property
    def language_ids(self) -> list:
        return [lang.language for lang in self.languages]


# ── plugins.js ─────────────────────────────────────────────────────

def find_plugins_file(project_dir: str) -> Optional[str]:
    """Locate js/plugins.js in the project."""
    candidates = [
        os.path.join(project_dir, "js", "plugins.js"),
        os.path.join(project_dir, "www", "js", "plugins.js"),
    ]
    for path in candidates:
        if os.path.isfile(path):
            return path
    return None


def load_plugins_js(path: str) -> list:
    """Parse plugins.js into a Python list of plugin dicts."""
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    m = re.search(r'var\s+\$plugins\s*=\s*(\[.*\])\s*;', content, re.DOTALL)
    if not m:
        return []
    return json.loads(m.group(1))
