import os
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from uploader.services.keys import base_filename

DEFAULT_ALLOWED_EXTENSIONS: tuple[str, ...] = (".txt", ".pdf", ".png", ".jpg", ".jpeg")


class ExtensionAccepted(BaseModel):
    model_config = ConfigDict(frozen=True)

    extension: str


class ExtensionRejected(BaseModel):
    model_config = ConfigDict(frozen=True)

    extension: str
    reason: str


ExtensionDecision = ExtensionAccepted | ExtensionRejected


def file_extension(filename: str) -> str:
    """Lower-cased extension of the basename including the dot, or ``""``."""
    _, ext = os.path.splitext(base_filename(filename))
    return ext.lower()


def validate_extension(
    filename: str,
    allowed: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
) -> ExtensionDecision:
    """Accept ``filename`` only if its extension is on the allow-list.

    The check looks at the name alone; file contents are never inspected, so a
    renamed executable with an allowed extension passes.
    """
    ext = file_extension(filename)
    allowed_set = {item.lower() for item in allowed}
    if ext and ext in allowed_set:
        return ExtensionAccepted(extension=ext)
    shown = ext or "(no extension)"
    return ExtensionRejected(extension=ext, reason=f"File type not allowed: {shown}")
