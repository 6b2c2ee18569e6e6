import logging
from typing import Dict, Tuple

from certtool.normalize import normalize_game_name
from certtool.schemas import ProviderInfo

logger = logging.getLogger(__name__)

# Name, Game Provider, _, Portal Live Date, _, IMS Game Code
NAME_COL = 0
PROVIDER_COL = 1
PORTAL_LIVE_DATE_COL = 3
IMS_GAME_CODE_COL = 5
MIN_COLUMNS = 6


def parse_provider_table(pasted_text: str) -> Tuple[Dict[str, ProviderInfo], int]:
    """
    Parses a tab-separated board export pasted by the operator.

    Returns a fresh table keyed by normalized game name and the number of
    accepted lines. Lines that do not fit are skipped; a later line for the
    same game replaces an earlier one.
    """
    lines = (pasted_text or "").splitlines()
    # Skip header row if present
    if lines and "game provider" in lines[0].lower():
        lines = lines[1:]

    table = {}
    accepted = 0
    for line in lines:
        parts = line.split("\t")
        if len(parts) < MIN_COLUMNS:
            continue

        game_name = parts[NAME_COL].strip()
        provider_name = parts[PROVIDER_COL].strip()
        if not game_name or not provider_name:
            continue

        key = normalize_game_name(game_name)
        if not key:
            continue

        table[key] = ProviderInfo(
            provider=provider_name,
            portal_live_date=parts[PORTAL_LIVE_DATE_COL].strip() or None,
            ims_game_code=parts[IMS_GAME_CODE_COL].strip() or None,
        )
        accepted += 1

    logger.info(f"Parsed provider table: {accepted} accepted line(s), {len(table)} distinct game(s)")
    return table, accepted
