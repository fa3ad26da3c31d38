"""MV Languages: shared constants."""

import re

# RPG Maker event command codes that carry translatable text
CODE_SHOW_TEXT = 401      # Show Text line: parameters[0] is text
CODE_SHOW_CHOICES = 102   # Show Choices: parameters[0] is list of strings
CODE_SCROLL_TEXT = 405    # Scroll Text line: parameters[0] is text

TEXT_CODES = frozenset((CODE_SHOW_TEXT, CODE_SHOW_CHOICES, CODE_SCROLL_TEXT))

# Separator used when consecutive 401 lines are joined into one string
LINE_SEPARATOR = "\n"

# Where language documents live, relative to the content root
LANGUAGES_FOLDER = "data/languages"

DEFAULT_LANGUAGE = "default"

# Map001.json .. Map999.json (MapInfos.json excluded)
MAP_FILE_RE = re.compile(r'^Map(\d+)\.json$', re.IGNORECASE)


def map_key(map_id: int) -> str:
    """Document key for a map id, e.g. 7 -> "MAP007"."""
    return f"MAP{int(map_id):03d}"


def is_text_code(code) -> bool:
    return code in TEXT_CODES
