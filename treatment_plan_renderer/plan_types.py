"""Type definitions for treatment plan rendering."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List


class SectionKind(Enum):
    """How a section is laid out in the rendered document."""
    GENERIC = "generic"
    GOALS = "goals"
    KEY_ACTIONS = "key_actions"
    TREATMENT_PLAN = "treatment_plan"
    ORPHANED = "orphaned"


@dataclass
class Section:
    """One numbered block of plan text (or the synthetic pre-header block)."""
    number: str
    title: str
    description: str = ""
    lines: List[str] = field(default_factory=list)
    is_orphaned: bool = False
    kind: SectionKind = SectionKind.GENERIC


@dataclass
class Phase:
    """One phase card inside the Treatment Plan section."""
    title: str
    subtitle: str = ""
    content: List[str] = field(default_factory=list)
    recommended: str = ""


@dataclass
class PlanExport:
    """Result of exporting a plan for download."""
    content: bytes
    media_type: str = "application/pdf"
    filename: str = "massage-treatment-plan.pdf"
    is_pdf: bool = True
