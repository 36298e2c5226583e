import re
from markupsafe import Markup

_UNSAFE_BLOCKS = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)


def strip_tags(value):
    """Drop all markup and keep the text content. Script and style bodies go too."""
    if value is None:
        return None
    return Markup(_UNSAFE_BLOCKS.sub("", str(value))).striptags()


def is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def normalize_path(value):
    """"about/team" -> "/about/team/", blank -> None"""
    if is_blank(value):
        return None
    segments = [s for s in str(value).strip().split("/") if s]
    return "/" + "".join(f"{s}/" for s in segments)
