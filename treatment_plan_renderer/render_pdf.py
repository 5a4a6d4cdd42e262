"""Export a rendered treatment plan as PDF, or print-ready HTML when PDF is unavailable."""
import re
from datetime import date
from typing import Callable, Mapping, Optional

from .plan_types import PlanExport
from .render_html import render_plan_html


PRINT_INSTRUCTIONS = """
    <style>
      @media print {
        body { margin: 0; }
        .no-print { display: none !important; }
      }
      .print-instructions {
        background: #e3f2fd;
        padding: 15px;
        margin: 20px 0;
        border-radius: 8px;
        border-left: 4px solid #2196f3;
        font-family: Arial, sans-serif;
      }
      .print-instructions h3 { margin: 0 0 10px 0; color: #1976d2; }
      .print-instructions p { margin: 5px 0; color: #424242; }
    </style>
    <script>
      (function() {
        var hasPrinted = false;
        window.onload = function() {
          if (hasPrinted) return;
          hasPrinted = true;
          setTimeout(function() { window.print(); }, 1000);
        };
      })();
    </script>
  </head>"""

PRINT_BANNER = """
    <div class="print-instructions no-print">
      <h3>Save as PDF</h3>
      <p>PDF generation is unavailable right now. Use your browser's print dialog and choose "Save as PDF".</p>
    </div>"""


def html_to_pdf(html: str, timeout_ms: int = 30000) -> bytes:
    """
    Print HTML to an A4 PDF with headless Chromium.

    Requires playwright and an installed browser (playwright install chromium).
    """
    from playwright.sync_api import sync_playwright

    with sync_playwright() as p:
        browser = p.chromium.launch(args=["--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"])
        try:
            page = browser.new_page()
            page.set_content(html, wait_until="networkidle", timeout=timeout_ms)
            page.emulate_media(media="print")
            pdf_bytes = page.pdf(
                format="A4",
                print_background=True,
                prefer_css_page_size=False,
                margin={"top": "10mm", "right": "10mm", "bottom": "10mm", "left": "10mm"},
            )
        finally:
            browser.close()
    return pdf_bytes


def add_print_instructions(html: str) -> str:
    """Inject print styles, a "Save as PDF" banner and an auto-print script."""
    html = html.replace("</head>", PRINT_INSTRUCTIONS, 1)
    return html.replace('<div class="page">', PRINT_BANNER + '\n    <div class="page">', 1)


def pdf_filename(patient_name: str = "") -> str:
    """Build the download filename for a patient's plan."""
    slug = re.sub(r"[^a-zA-Z0-9\s-]", "", patient_name or "")
    slug = re.sub(r"\s+", "-", slug.strip())
    if not slug:
        return "massage-treatment-plan.pdf"
    return f"massage-treatment-plan-{slug}.pdf"


def export_plan(
    plan_text: str,
    patient_name: str = "",
    therapist_name: str = "",
    booking_urls: Optional[Mapping[str, str]] = None,
    converter: Optional[Callable[[str], bytes]] = None,
    today: Optional[date] = None,
) -> PlanExport:
    """
    Render a plan and convert it to PDF.

    If conversion fails the print-ready HTML is returned instead, so the
    caller always has something to hand back to the user.
    """
    if converter is None:
        converter = html_to_pdf
    html = render_plan_html(plan_text, patient_name, therapist_name, booking_urls=booking_urls, today=today)
    try:
        pdf_bytes = converter(html)
    except Exception as e:
        print(f"[PDF] PDF generation failed, falling back to print HTML: {e}")
        return PlanExport(
            content=add_print_instructions(html).encode("utf-8"),
            media_type="text/html",
            filename=pdf_filename(patient_name).replace(".pdf", ".html"),
            is_pdf=False,
        )

    print(f"[PDF] Created PDF ({len(pdf_bytes)} bytes)")
    return PlanExport(content=pdf_bytes, filename=pdf_filename(patient_name))
