from __future__ import annotations

import base64
import logging
import random
import re
import string
import time
from pathlib import Path

from ..errors import MalformedAttachment, StorageFailure

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"data:(.+);base64,(.+)")
_B64_ALPHABET = frozenset(string.ascii_letters + string.digits + "+/")
_URLSAFE_TO_STD = str.maketrans("-_", "+/")


def lenient_b64decode(payload: str) -> bytes:
    """Decode base64 the forgiving way browsers and Node do.

    Characters outside the alphabet are dropped and padding is repaired, so
    garbage in yields garbage bytes instead of an error.
    """
    chars = "".join(ch for ch in payload.translate(_URLSAFE_TO_STD) if ch in _B64_ALPHABET)
    remainder = len(chars) % 4
    if remainder == 1:
        # A lone trailing sextet cannot form a byte.
        chars = chars[:-1]
    elif remainder:
        chars += "=" * (4 - remainder)
    return base64.b64decode(chars)


def parse_data_uri(data_uri: object) -> tuple[str, str]:
    """Return ``(mime_type, payload)`` or raise ``MalformedAttachment``."""
    if not isinstance(data_uri, str):
        raise MalformedAttachment("Invalid base64 string format")
    match = _DATA_URI_RE.fullmatch(data_uri)
    if match is None:
        raise MalformedAttachment("Invalid base64 string format")
    return match.group(1), match.group(2)


def extension_for(mime_type: str) -> str:
    parts = mime_type.split("/")
    if len(parts) < 2 or not parts[1]:
        return "bin"
    return parts[1]


class AttachmentStore:
    """Writes data-URI attachments under ``uploads_dir``."""

    def __init__(self, uploads_dir: Path, url_prefix: str = "/uploads"):
        self.uploads_dir = Path(uploads_dir).expanduser().resolve()
        self.url_prefix = "/" + url_prefix.strip("/")

    def ensure_dir(self) -> None:
        try:
            self.uploads_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.exception("failed to create %s", self.uploads_dir)
            raise StorageFailure("Error preparing attachment storage") from exc

    def _build_filename(self, prefix: str, extension: str) -> str:
        millis = int(time.time() * 1000)
        return f"{prefix}-{millis}-{random.randrange(10000)}.{extension}"

    def decode(self, data_uri: object, prefix: str = "img") -> str:
        mime_type, payload = parse_data_uri(data_uri)
        content = lenient_b64decode(payload)
        filename = self._build_filename(prefix, extension_for(mime_type))

        self.ensure_dir()
        file_path = self.uploads_dir / filename
        try:
            file_path.write_bytes(content)
        except OSError as exc:
            logger.exception("failed to write attachment %s", filename)
            raise StorageFailure("Error saving attachment") from exc

        logger.debug("stored %s (%d bytes, %s)", filename, len(content), mime_type)
        return f"{self.url_prefix}/{filename}"

    def resolve(self, reference: str) -> Path | None:
        """Map a stored reference (or a bare filename) to its file, if any."""
        relative = reference
        if relative.startswith(self.url_prefix + "/"):
            relative = relative[len(self.url_prefix) + 1 :]
        try:
            full_path = (self.uploads_dir / relative).resolve()
        except (OSError, RuntimeError, ValueError):
            return None
        if full_path == self.uploads_dir or self.uploads_dir not in full_path.parents:
            return None
        if not full_path.is_file():
            return None
        return full_path
