"""Boilerplate preamble detection for generated plan text."""
import re
from typing import List


# Optional words a model likes to sprinkle into its opening line
_PLAN_WORDS = r"(?:your)?\s*(?:personali[sz]ed)?\s*(?:treatment|massage)?\s*(?:therapy)?\s*plan"

INTRO_PHRASE_PATTERNS: List[re.Pattern] = [
    re.compile(rf"^here\s*(?:is|'s|’s)\s*{_PLAN_WORDS}:?\.?$", re.IGNORECASE),
    re.compile(rf"^this\s+is\s+{_PLAN_WORDS}:?\.?$", re.IGNORECASE),
    re.compile(rf"^{_PLAN_WORDS}:?\.?$", re.IGNORECASE),
    re.compile(r"^below\s+(?:is|are)\s+(?:your)?\s*(?:personali[sz]ed)?\s*(?:treatment|massage)?\s*plan:?\.?$", re.IGNORECASE),
    re.compile(r"^i(?:'ve|’ve|\s+have)\s+(?:created|prepared|developed)\s+(?:a|your)\s*(?:personali[sz]ed)?\s*(?:treatment|massage)?\s*plan", re.IGNORECASE),
    re.compile(r"^based\s+on\s+(?:your|the)\s+(?:case\s+note|assessment|session)", re.IGNORECASE),
    re.compile(r"^here(?:'s|’s|\s+is)\s+your\s+plan:?\.?$", re.IGNORECASE),
]


def is_intro_phrase(line: str) -> bool:
    """Return True if the trimmed line is a canned preamble sentence."""
    trimmed = line.strip()
    return any(pattern.search(trimmed) for pattern in INTRO_PHRASE_PATTERNS)
