"""Per-language picture variants: ``img/pictures/<name>_<language>.png``.

A variant only counts when it exists *and* decodes, the same test the game
runs by loading the image and waiting for onload/onerror.
"""

import json
import logging
import os
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

log = logging.getLogger(__name__)

ENCRYPTED_EXTS = (".rpgmvp", ".png_")  # MV encrypted picture formats

# RPG Maker MV encrypted file header length
_RPGMV_HEADER_LEN = 16


def read_encryption_key(content_root: str) -> str:
    """``encryptionKey`` from System.json, or "" for unencrypted builds."""
    for name in ("data", "Data"):
        path = os.path.join(content_root, name, "System.json")
        if not os.path.isfile(path):
            continue
        try:
            with open(path, "r", encoding="utf-8-sig") as f:
                return json.load(f).get("encryptionKey", "") or ""
        except (json.JSONDecodeError, OSError, AttributeError):
            continue
    return ""


def decrypt_picture(data: bytes, encryption_key: str) -> bytes:
    """Undo MV picture encryption: drop the header, XOR the first 16 bytes."""
    key = bytes.fromhex(encryption_key)
    body = data[_RPGMV_HEADER_LEN:]
    head = bytes(b ^ k for b, k in zip(body[:16], key))
    return head + body[16:]


def _decodes(path: str, encryption_key: str) -> bool:
    try:
        with open(path, "rb") as f:
            data = f.read()
        if path.lower().endswith(ENCRYPTED_EXTS):
            if not encryption_key:
                return False
            data = decrypt_picture(data, encryption_key)
        with Image.open(BytesIO(data)) as img:
            img.verify()
    except (OSError, ValueError, UnidentifiedImageError) as exc:
        log.debug("Picture variant %s unusable: %s", path, exc)
        return False
    return True


def resolve_picture(content_root: str, name: str, language: str,
                    encryption_key: Optional[str] = None) -> str:
    """Return ``<name>_<language>`` when that picture exists, else *name*."""
    if not name or not language:
        return name
    variant = f"{name}_{language}"
    folder = os.path.join(content_root, "img", "pictures")
    if encryption_key is None:
        encryption_key = read_encryption_key(content_root)
    for ext in (".png",) + ENCRYPTED_EXTS:
        path = os.path.join(folder, variant + ext)
        if os.path.isfile(path) and _decodes(path, encryption_key):
            return variant
    return name
