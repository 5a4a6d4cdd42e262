"""Render parsed plan sections as HTML fragments."""
import re
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional

from .plan_types import Phase, Section, SectionKind


BULLET_RE = re.compile(r"^\s*[-*•]\s+")
RECOMMENDED_RE = re.compile(r"^Recommended:\s*(.+)", re.IGNORECASE)
PHASE_HEADER_RE = re.compile(r"\*?\*?([^*]+)\*?\*?\s*\(([^)]+)\)")

PHASE_MARKERS = ("Getting You Comfortable", "Keeping You at Your Best")
ASIDE_PREFIXES = ('"', "“", "-", "*", "•")
LIST_ITEM_LIMIT = 3


def escape_html(text: str) -> str:
    """Strip markdown bold markers and escape HTML entities."""
    return (
        str(text)
        .replace("**", "")
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def _heading(section: Section) -> str:
    return f'<h2><span class="num">{section.number}.</span> {escape_html(section.title)}</h2>'


def render_blocks(lines: List[str]) -> List[str]:
    """Turn lines into paragraphs and bullet lists, in source order."""
    items: List[str] = []
    bullets: List[str] = []
    for line in lines:
        if BULLET_RE.match(line):
            bullets.append(f"<li>{escape_html(BULLET_RE.sub('', line, count=1))}</li>")
        elif line.strip():
            if bullets:
                items.append(f"<ul>{''.join(bullets)}</ul>")
                bullets = []
            items.append(f"<p>{escape_html(line.strip())}</p>")
    if bullets:
        items.append(f"<ul>{''.join(bullets)}</ul>")
    return items


def render_generic_section(section: Section) -> str:
    body = "\n".join(render_blocks(section.lines))
    return f"""
      <section class="section">
        {_heading(section)}
        {body}
      </section>
    """


def render_orphaned_section(section: Section) -> str:
    """Orphaned content has no real ordinal, so the heading has no number."""
    body = "\n".join(render_blocks(section.lines))
    return f"""
      <section class="section orphaned-section">
        <h2>{escape_html(section.title)}</h2>
        {body}
      </section>
    """


def split_sentences(text: str) -> List[str]:
    """
    Recover list items from a run-on paragraph by splitting on periods.

    This is a heuristic for malformed model output, not a sentence
    segmenter: abbreviations and decimals ("2.5 kg") are split too.
    Fragments still carrying markdown asterisks are discarded.
    """
    fragments = []
    for sentence in text.split("."):
        clean = sentence.strip()
        if not clean or "*" in clean:
            continue
        clean = clean.strip(", \t\r\n")
        if clean:
            fragments.append(clean)
    return fragments


def pick_list_items(lines: List[str]) -> List[str]:
    """
    Choose the items for a fixed three-item list.

    Lines starting with a quote or bullet marker are asides and skipped.
    With three or more candidate lines the first three are used and the
    rest dropped; otherwise the candidates are split into sentences.
    """
    candidates = []
    for line in lines:
        trimmed = line.strip()
        if trimmed and not trimmed.startswith(ASIDE_PREFIXES):
            candidates.append(trimmed)

    if len(candidates) >= LIST_ITEM_LIMIT:
        return candidates[:LIST_ITEM_LIMIT]
    if not candidates:
        return []

    joined = " ".join(candidates)
    items = split_sentences(joined)
    print(f"[DEBUG] Sentence fallback: {len(candidates)} lines -> {len(items)} items")
    return items


def render_goals_section(section: Section) -> str:
    goals = "".join(f"<li>{escape_html(goal)}</li>" for goal in pick_list_items(section.lines))
    return f"""
      <section class="section">
        {_heading(section)}
        <ul>{goals}</ul>
      </section>
    """


def render_key_actions_section(section: Section) -> str:
    actions = "".join(f"<li>{escape_html(action)}</li>" for action in pick_list_items(section.lines))
    return f"""
      <section class="section">
        {_heading(section)}
        <ol>{actions}</ol>
      </section>
    """


def parse_phase_header(line: str) -> Phase:
    """Parse '**Title** (Subtitle):' into a Phase, falling back to the bare text."""
    match = PHASE_HEADER_RE.search(line)
    if match:
        return Phase(title=match.group(1).strip(), subtitle=match.group(2).strip())
    return Phase(title=re.sub(r"\*+", "", line).strip())


def parse_phases(lines: List[str]) -> List[Phase]:
    """Collect treatment phases; lines before the first phase header are ignored."""
    phases: List[Phase] = []
    current: Optional[Phase] = None
    for line in lines:
        trimmed = line.strip()
        if any(marker in trimmed for marker in PHASE_MARKERS):
            if current is not None:
                phases.append(current)
            current = parse_phase_header(trimmed)
        elif current is not None:
            recommended = RECOMMENDED_RE.match(trimmed)
            if recommended:
                current.recommended = recommended.group(1).strip()
            elif trimmed and not trimmed.startswith("**"):
                current.content.append(trimmed)
    if current is not None:
        phases.append(current)
    return phases


def _render_phase_card(phase: Phase) -> str:
    subtitle = ""
    if phase.subtitle:
        subtitle = f'<span class="treatment-phase-subtitle">({escape_html(phase.subtitle)})</span>'
    recommended = ""
    if phase.recommended:
        recommended = f"""
        <div class="treatment-phase-recommended">
          <strong>Recommended:</strong> {escape_html(phase.recommended)}
        </div>"""
    content = " ".join(phase.content).strip()
    return f"""
      <div class="treatment-phase-card">
        <div class="treatment-phase-header">
          <span class="treatment-phase-title">{escape_html(phase.title)}</span>
          {subtitle}
        </div>
        <div class="treatment-phase-content">
          <p>{escape_html(content)}</p>
        </div>{recommended}
      </div>
    """


def render_treatment_plan_section(section: Section) -> str:
    cards = "".join(_render_phase_card(phase) for phase in parse_phases(section.lines))
    return f"""
    <section class="section treatment-plan-section">
      {_heading(section)}
      {cards}
    </section>
    """


SectionRenderer = Callable[[Section], str]

SECTION_RENDERERS: Mapping[SectionKind, SectionRenderer] = MappingProxyType({
    SectionKind.GENERIC: render_generic_section,
    SectionKind.GOALS: render_goals_section,
    SectionKind.KEY_ACTIONS: render_key_actions_section,
    SectionKind.TREATMENT_PLAN: render_treatment_plan_section,
    SectionKind.ORPHANED: render_orphaned_section,
})


def render_section(section: Section, renderers: Optional[Mapping[SectionKind, SectionRenderer]] = None) -> str:
    """Render a section with the renderer for its kind."""
    table = renderers or SECTION_RENDERERS
    return table[section.kind](section)
