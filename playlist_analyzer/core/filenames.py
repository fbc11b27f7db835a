"""Filename derivation for exported reports.

Playlist titles are user content: they may contain path separators,
control characters or reserved device names, so they are reduced to a
safe lower-case slug before being used in a download filename.
"""

import re
import unicodedata
from typing import FrozenSet

import structlog

logger = structlog.get_logger(__name__)

# Anything outside ASCII letters and digits becomes an underscore
UNSAFE_CHAR_PATTERN = re.compile(r"[^a-z0-9]", re.IGNORECASE)

# Maximum filename length (filesystem limit is typically 255)
MAX_FILENAME_LENGTH = 200

FALLBACK_STEM = "playlist"

EXPORT_SUFFIX = "_analysis"

# Reserved filenames on Windows
WINDOWS_RESERVED: FrozenSet[str] = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{i}" for i in range(1, 10)}
    | {f"LPT{i}" for i in range(1, 10)}
)


def sanitize_stem(title: str) -> str:
    """
    Reduce a title to a lower-case, filesystem-safe filename stem.

    Args:
        title: Raw playlist title

    Returns:
        Stem made of ASCII letters, digits and underscores
    """
    if not title:
        return FALLBACK_STEM

    # Fold compatibility forms (full-width letters, ligatures) first
    stem = unicodedata.normalize("NFKC", title)
    stem = UNSAFE_CHAR_PATTERN.sub("_", stem).lower()

    if not stem.strip("_"):
        return FALLBACK_STEM

    if stem.upper() in WINDOWS_RESERVED:
        stem = f"_{stem}"

    return stem


def export_filename(title: str, extension: str) -> str:
    """
    Build the download filename for an exported report.

    Args:
        title: Playlist title
        extension: File extension without the dot (e.g. "json", "xlsx")

    Returns:
        Filename such as "my_playlist_analysis.json"
    """
    extension = extension.lstrip(".").lower()
    stem = sanitize_stem(title)

    max_stem = MAX_FILENAME_LENGTH - len(EXPORT_SUFFIX) - len(extension) - 1
    if len(stem) > max_stem:
        stem = stem[:max_stem]

    filename = f"{stem}{EXPORT_SUFFIX}.{extension}"
    logger.debug("Export filename derived", title=title, filename=filename)
    return filename
