import re

_COPY_TOKEN = re.compile(r"\s*\(copy\)", re.IGNORECASE)
_VERSION_SUFFIX = re.compile(r"\s+(94%|v94)$", re.IGNORECASE)
_SYMBOLS = re.compile(r"[™®©]")
_WHITESPACE = re.compile(r"\s+")


def _clean_once(name: str, lower: bool) -> str:
    cleaned = name.strip()
    cleaned = _COPY_TOKEN.sub("", cleaned)
    cleaned = _VERSION_SUFFIX.sub("", cleaned)
    if lower:
        cleaned = cleaned.lower()
    cleaned = _SYMBOLS.sub("", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned)
    return cleaned.strip()


def _clean(name: str, lower: bool) -> str:
    # Stripping can expose a new "(copy)" or version suffix, so repeat until stable.
    previous = None
    cleaned = name
    while cleaned != previous:
        previous = cleaned
        cleaned = _clean_once(cleaned, lower)
    return cleaned


def normalize_game_name(name):
    """
    Canonical lookup key for a game name.
    e.g., "Mega Fortune™ (copy) 94%" -> "mega fortune"
    Used as the join key between extraction results and provider data.
    """
    if not name:
        return ""
    return _clean(name, lower=True)


def clean_game_name_for_display(name):
    """Same cleaning as the lookup key but keeps the original casing."""
    if not name:
        return "N/A"
    return _clean(name, lower=False) or "N/A"
