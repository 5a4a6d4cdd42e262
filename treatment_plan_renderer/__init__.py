"""Treatment plan rendering package."""
from pathlib import Path
from typing import Mapping, Optional

from .booking import load_booking_urls, qr_code_data_uri
from .generate_plan import GenerationError, generate_plan_text
from .parse_plan import split_sections
from .plan_types import Phase, PlanExport, Section, SectionKind
from .render_html import render_plan_html
from .render_pdf import export_plan


def prepare_plan_for_sending(
    plan_text: str,
    output_dir: Path,
    patient_name: str = "",
    therapist_name: str = "",
    booking_urls: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    """
    Write a plan to disk as PDF (or print-ready HTML if PDF export is unavailable).

    Args:
        plan_text: Raw plan text returned by the model
        output_dir: Directory for the output file
        patient_name: Patient shown in the header and used in the filename
        therapist_name: Therapist shown in the header (booking QR if known)
        booking_urls: Therapist -> booking URL table

    Returns:
        Path to the written file, or None if nothing could be written
    """
    if not (plan_text or "").strip():
        print("[ERROR] Plan text is empty")
        return None

    result = export_plan(plan_text, patient_name, therapist_name, booking_urls=booking_urls)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / result.filename
    try:
        output_path.write_bytes(result.content)
    except OSError as e:
        print(f"[ERROR] Could not write {output_path}: {e}")
        return None

    kind = "PDF" if result.is_pdf else "print HTML"
    print(f"[SUCCESS] Plan {kind} created: {output_path} ({len(result.content)} bytes)")
    return output_path


__all__ = [
    "GenerationError",
    "Phase",
    "PlanExport",
    "Section",
    "SectionKind",
    "export_plan",
    "generate_plan_text",
    "load_booking_urls",
    "prepare_plan_for_sending",
    "qr_code_data_uri",
    "render_plan_html",
    "split_sections",
]
