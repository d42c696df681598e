"""Helpers for turning uploaded images into inline media for the model."""

import base64
import binascii
import mimetypes
from dataclasses import dataclass
from io import BytesIO
from typing import BinaryIO, Optional

from PIL import Image, UnidentifiedImageError

DEFAULT_MIME_TYPE = "application/octet-stream"


def strip_data_url_prefix(data_url: str) -> str:
    """Removes everything up to and including the first comma of a data URL.

    A string without a comma is assumed to already be bare base64.
    """
    _, sep, payload = data_url.partition(",")
    return payload if sep else data_url


def sniff_mime_type(data: bytes) -> Optional[str]:
    """Uses Pillow to identify the image format of raw bytes."""
    try:
        with Image.open(BytesIO(data)) as image:
            return Image.MIME.get(image.format) if image.format else None
    except (UnidentifiedImageError, OSError):
        return None


@dataclass(frozen=True)
class MediaBlob:
    """A binary payload plus its MIME type."""

    data: bytes
    mime_type: str

    @classmethod
    def from_file(cls, fileobj: BinaryIO, mime_type: Optional[str] = None) -> "MediaBlob":
        """Reads a file-like object into memory and works out its MIME type.

        Args:
            fileobj: Anything with a read() returning bytes. Werkzeug uploads
                also carry ``mimetype`` and ``filename``.
            mime_type: Explicit MIME type, which wins over everything else.
        """
        data = fileobj.read()
        if not mime_type:
            mime_type = getattr(fileobj, "mimetype", None) or getattr(fileobj, "content_type", None)
            # Browsers send octet-stream when they cannot tell; let Pillow decide.
            if mime_type == DEFAULT_MIME_TYPE:
                mime_type = None
        if not mime_type:
            mime_type = sniff_mime_type(data)
        if not mime_type:
            name = getattr(fileobj, "filename", None) or getattr(fileobj, "name", None)
            if isinstance(name, str):
                mime_type, _ = mimetypes.guess_type(name)
        return cls(data=data, mime_type=mime_type or DEFAULT_MIME_TYPE)

    @classmethod
    def from_data_url(cls, data_url: str) -> "MediaBlob":
        """Parses ``data:<mime>;base64,<payload>``."""
        header, sep, _ = data_url.partition(",")
        if not sep or not header.startswith("data:"):
            raise ValueError("Not a data URL.")
        mime_type = header[len("data:"):].split(";")[0] or DEFAULT_MIME_TYPE
        try:
            data = base64.b64decode(strip_data_url_prefix(data_url), validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload in data URL: {e}") from e
        return cls(data=data, mime_type=mime_type)
