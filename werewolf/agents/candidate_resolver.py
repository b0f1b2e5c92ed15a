"""
Map a free-text Decision Oracle answer onto one of the offered candidates.

Contract, first match wins:
1. an exact candidate id token (case-insensitive), scanning the answer left to right;
2. a candidate label (player name) found verbatim in the answer, in candidate order;
3. an abstain keyword, when abstaining is allowed.
Anything else is a failure.
"""

import re
from typing import List, Optional, Sequence

from ..core.game_engine import ActionOption, ABSTAIN_ID
from .exceptions import UnresolvedChoiceError


TOKEN_PATTERN = re.compile(r"[A-Za-z0-9_:]+")
ABSTAIN_WORDS = {ABSTAIN_ID, "abstain", "none", "nobody", "decline"}


def _id_tokens(text: str) -> List[str]:
    return [token.lower() for token in TOKEN_PATTERN.findall(text)]


def find_candidate(text: Optional[str], candidates: Sequence[ActionOption],
                   allow_abstain: bool = False) -> Optional[str]:
    """Return the matched candidate id, ABSTAIN_ID, or None."""
    if not text:
        return None

    by_id = {c.id.lower(): c.id for c in candidates}
    tokens = _id_tokens(text)

    for token in tokens:
        if token in by_id:
            return by_id[token]
        if allow_abstain and token == ABSTAIN_ID:
            return ABSTAIN_ID

    for candidate in candidates:
        if candidate.label and candidate.label in text:
            return candidate.id

    if allow_abstain and any(token in ABSTAIN_WORDS for token in tokens):
        return ABSTAIN_ID

    return None


def resolve_candidate(text: Optional[str], candidates: Sequence[ActionOption],
                      allow_abstain: bool = False, player_id: Optional[str] = None,
                      action_type: str = "choose") -> str:
    """
    Like find_candidate, but an unrecognisable answer is a hard failure.

    Raises:
        UnresolvedChoiceError: If no candidate (or abstain) can be recognised
    """
    choice = find_candidate(text, candidates, allow_abstain)
    if choice is None:
        raise UnresolvedChoiceError(player_id, action_type, text or "")
    return choice
