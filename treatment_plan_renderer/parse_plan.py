"""Split generated plan text into numbered sections."""
import re
from typing import List, Optional

from .intro_phrases import is_intro_phrase
from .plan_types import Section, SectionKind


# Exactly one digit: the plan template never goes past section 8
HEADER_RE = re.compile(r"^\s*(\d)\.\s+(.+)$")

ORPHANED_NUMBER = "0"
ORPHANED_TITLE = "Additional Notes"


def classify_section(number: str, title: str, is_orphaned: bool = False) -> SectionKind:
    """Pick the layout for a section from its number and title."""
    if is_orphaned:
        return SectionKind.ORPHANED
    if number == "5" and "Treatment Plan" in title:
        return SectionKind.TREATMENT_PLAN
    if number == "3" and "Goals" in title:
        return SectionKind.GOALS
    if number == "4" and "Key Actions" in title:
        return SectionKind.KEY_ACTIONS
    return SectionKind.GENERIC


def build_section(number: str, header_text: str) -> Section:
    """
    Build a section from a matched header line.

    The header is split on its first colon into title and description.
    A non-empty description becomes the first content line.
    """
    content = header_text.strip()
    colon = content.find(":")
    if colon > 0:
        title = content[:colon].strip()
        description = content[colon + 1:].strip()
    else:
        title = content
        description = ""

    section = Section(
        number=number,
        title=title,
        description=description,
        kind=classify_section(number, title),
    )
    if description:
        section.lines.append(description)
    return section


def _orphaned_section(candidates: List[str]) -> Optional[Section]:
    meaningful = [line for line in candidates if line.strip() and not is_intro_phrase(line)]
    if not meaningful:
        return None
    print(f"[DEBUG] Created orphaned section with {len(meaningful)} lines")
    return Section(
        number=ORPHANED_NUMBER,
        title=ORPHANED_TITLE,
        lines=meaningful,
        is_orphaned=True,
        kind=SectionKind.ORPHANED,
    )


def split_sections(plan_text: str) -> List[Section]:
    """
    Parse plan text into sections in source order.

    Content before the first numbered header is collected into a single
    "Additional Notes" section (intro phrases and blank lines removed),
    placed ahead of the numbered sections.

    Args:
        plan_text: Raw text returned by the model

    Returns:
        List of Section objects (empty for empty input)
    """
    sections: List[Section] = []
    current: Optional[Section] = None
    orphaned: List[str] = []

    for raw_line in (plan_text or "").split("\n"):
        line = raw_line.rstrip()
        match = HEADER_RE.match(line)
        if match:
            if current is None and orphaned:
                notes = _orphaned_section(orphaned)
                if notes:
                    sections.append(notes)
                orphaned = []
            if current is not None:
                sections.append(current)
            current = build_section(match.group(1), match.group(2))
            print(f"[DEBUG] Section {current.number}: title={current.title!r}")
            continue

        if current is not None:
            current.lines.append(line)
        elif line.strip():
            orphaned.append(line)

    # No header was ever found
    if orphaned:
        notes = _orphaned_section(orphaned)
        if notes:
            sections.append(notes)

    if current is not None:
        sections.append(current)
    return sections
