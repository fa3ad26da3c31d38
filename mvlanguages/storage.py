"""Storage collaborators that move language documents to and from bytes.

The codec never touches the disk or the network itself; a session is
handed one of these.
"""

import logging
import os
from typing import Optional

import requests

from . import LANGUAGES_FOLDER
from .game_data import find_content_root

log = logging.getLogger(__name__)


def document_filename(language: str) -> str:
    return f"{language}.json"


class FileLanguageStorage:
    """Language documents as ``<folder>/<language>.json`` on local disk."""

    def __init__(self, folder: str):
        self.folder = folder

    @classmethod
    def for_project(cls, project_dir: str) -> "FileLanguageStorage":
        """Storage rooted at the project's data/languages folder."""
        content_root = find_content_root(project_dir) or project_dir
        return cls(os.path.join(content_root, *LANGUAGES_FOLDER.split("/")))

    def path_for(self, language: str) -> str:
        return os.path.join(self.folder, document_filename(language))

    def read(self, language: str) -> Optional[bytes]:
        try:
            with open(self.path_for(language), "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as exc:
            log.warning("Could not read language %r: %s", language, exc)
            return None

    def write(self, language: str, payload: bytes) -> bool:
        try:
            os.makedirs(self.folder, exist_ok=True)
            with open(self.path_for(language), "wb") as f:
                f.write(payload)
        except OSError as exc:
            log.warning("Could not write language %r: %s", language, exc)
            return False
        return True

    def exists(self, path: str) -> bool:
        """Check a path relative to the storage folder (absolute paths pass through)."""
        return os.path.exists(os.path.join(self.folder, path))

    def has_language(self, language: str) -> bool:
        return self.exists(document_filename(language))


class HttpLanguageStorage:
    """Read-only storage for builds whose language files are served over HTTP.

    Browser and mobile deployments cannot write next to the game, so
    ``write`` always reports failure.
    """

    def __init__(self, base_url: str, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def read(self, language: str) -> Optional[bytes]:
        url = self.url_for(document_filename(language))
        try:
            r = requests.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            log.warning("Could not fetch %s: %s", url, exc)
            return None
        if r.status_code >= 400:
            log.debug("GET %s -> %d", url, r.status_code)
            return None
        return r.content

    def write(self, language: str, payload: bytes) -> bool:
        log.debug("HTTP storage is read-only, %r not written", language)
        return False

    def exists(self, path: str) -> bool:
        try:
            r = requests.head(self.url_for(path), timeout=self.timeout)
        except requests.RequestException:
            return False
        return r.status_code < 400

    def has_language(self, language: str) -> bool:
        return self.exists(document_filename(language))
