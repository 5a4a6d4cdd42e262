"""Assemble a complete treatment plan HTML document."""
from datetime import date
from typing import Callable, Mapping, Optional

from .booking import DEFAULT_BOOKING_URLS, is_valid_booking_url, qr_code_data_uri
from .parse_plan import split_sections
from .plan_types import SectionKind
from .render_sections import SectionRenderer, escape_html, render_section


CLINIC_NAME = "Gold Coast Physio & Sports Health"
DOCUMENT_TITLE = "Massage Treatment Plan"
LOGO_URL = "https://www.mygcphysio.com.au/wp-content/uploads/2024/09/GCPSH-Colour-500px.png"
CONTACT_LINE = "mygcphysio.com.au | (07) 5500 6470"
DATE_FORMAT = "%d/%m/%Y"

STYLESHEET = """
      :root { --blue: #3A71DA; --orange: #FF7300; --text: #1F2937; --muted: #6B7280; }
      body { font-family: 'Inter', system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif; color: var(--text); margin: 0; background: #F7FAFF; }
      .page { max-width: 860px; margin: 32px auto; background: #fff; box-shadow: 0 10px 30px rgba(0,0,0,0.07); border-radius: 16px; overflow: hidden; }
      header { display: flex; align-items: center; gap: 16px; padding: 20px 24px; background: linear-gradient(180deg, #EEF4FF 0%, #ffffff 100%); border-bottom: 1px solid #E5E7EB; }
      header img { height: 56px; }
      header .title { flex: 1; }
      h1 { margin: 0; font-size: 22px; color: var(--blue); letter-spacing: 0.2px; }
      .patient-info { color: var(--muted); font-size: 13px; margin-top: 4px; }
      main { padding: 28px 24px 36px; }
      .section { margin-bottom: 18px; }
      .section h2 { display: flex; align-items: center; gap: 8px; color: var(--blue); font-size: 16px; margin: 18px 0 8px; border-left: 4px solid var(--orange); padding-left: 10px; }
      .section p, .section li { line-height: 1.55; font-size: 14px; }
      .section ul, .section ol { margin: 8px 0 8px 20px; }
      .section ol { counter-reset: item; }
      .section ol li { display: block; }
      .section ol li:before { content: counter(item) ". "; counter-increment: item; font-weight: 600; color: var(--blue); }
      .orphaned-section h2 { border-left-color: var(--muted); }
      .treatment-plan-section { margin-bottom: 24px; }
      .treatment-phase-card { background: #F8FAFC; border-radius: 12px; padding: 20px; margin: 16px 0; border-left: 4px solid var(--orange); }
      .treatment-phase-card:first-of-type { border-left-color: var(--blue); }
      .treatment-phase-header { margin-bottom: 12px; }
      .treatment-phase-title { font-size: 16px; font-weight: 600; color: var(--blue); }
      .treatment-phase-subtitle { font-size: 13px; color: var(--muted); margin-left: 8px; }
      .treatment-phase-content { margin-bottom: 12px; }
      .treatment-phase-content p { margin: 0; line-height: 1.6; font-size: 14px; color: var(--text); }
      .treatment-phase-recommended { background: rgba(58,113,218,0.08); padding: 10px 14px; border-radius: 8px; font-size: 13px; color: var(--blue); }
      .treatment-phase-recommended strong { color: var(--orange); }
      footer { padding: 18px 24px; font-size: 12px; color: var(--muted); border-top: 1px solid #E5E7EB; display: flex; justify-content: space-between; align-items: center; }
      .accent { color: var(--orange); }
      .qr-code-container { display: flex; flex-direction: column; align-items: center; justify-content: center; min-width: 120px; }
      .qr-code-label { font-size: 12px; color: var(--blue); font-weight: 600; margin-bottom: 8px; text-align: center; }
      .qr-code-wrapper { margin-bottom: 6px; }
      .qr-code { width: 80px; height: 80px; border-radius: 8px; }
      .booking-link { color: var(--blue); text-decoration: none; }
      .booking-link:hover { text-decoration: underline; }
      @media print {
        * { -webkit-print-color-adjust: exact !important; print-color-adjust: exact !important; }
        body { background: white !important; margin: 0 !important; }
        .page { box-shadow: none !important; margin: 0 !important; max-width: none !important; }
      }
"""

QrGenerator = Callable[[str], Optional[str]]


def render_booking_block(
    therapist_name: str,
    booking_urls: Mapping[str, str],
    qr_generator: QrGenerator = qr_code_data_uri,
) -> str:
    """
    Build the "Book with ..." QR block for the header.

    Returns an empty string when the therapist has no booking URL or the
    QR code could not be generated.
    """
    booking_url = booking_urls.get(therapist_name) if therapist_name else None
    if not booking_url:
        return ""
    if not is_valid_booking_url(booking_url):
        print(f"[WARN] Ignoring unsafe booking URL for {therapist_name}")
        return ""

    try:
        qr_data_uri = qr_generator(booking_url)
    except Exception as e:
        print(f"[WARN] QR code generation failed for {therapist_name}: {e}")
        qr_data_uri = None
    if not qr_data_uri:
        return ""

    name = escape_html(therapist_name)
    url = escape_html(booking_url)
    return f"""
        <div class="qr-code-container">
          <div class="qr-code-label">
            <a href="{url}" target="_blank" class="booking-link">Book with {name}</a>
          </div>
          <div class="qr-code-wrapper">
            <img src="{qr_data_uri}" alt="QR Code for {name}" class="qr-code" />
          </div>
        </div>
      """


def render_fallback_body(plan_text: str) -> str:
    """Render unstructured text as a single paragraph."""
    paragraph = escape_html(plan_text).replace("\n", "<br/>")
    return f'<div class="section"><p>{paragraph}</p></div>'


def render_plan_html(
    plan_text: str,
    patient_name: str = "",
    therapist_name: str = "",
    booking_urls: Optional[Mapping[str, str]] = None,
    qr_generator: QrGenerator = qr_code_data_uri,
    today: Optional[date] = None,
    renderers: Optional[Mapping[SectionKind, SectionRenderer]] = None,
) -> str:
    """
    Render generated plan text into a complete HTML document.

    Args:
        plan_text: Raw text returned by the model
        patient_name: Shown in the header (optional)
        therapist_name: Shown in the header and used to look up a booking URL
        booking_urls: Therapist -> booking URL table (default table if None)
        qr_generator: Turns a URL into an image data URI, or None on failure
        today: Display date (defaults to the current date)
        renderers: Section kind -> renderer table (SECTION_RENDERERS if None)

    Returns:
        HTML document string
    """
    plan_text = plan_text or ""
    if booking_urls is None:
        booking_urls = DEFAULT_BOOKING_URLS
    display_date = (today or date.today()).strftime(DATE_FORMAT)

    sections = split_sections(plan_text)
    print(f"[INFO] Parsed {len(sections)} sections: "
          + ", ".join(f"{s.number}:{s.kind.value}({len(s.lines)})" for s in sections))

    body = "\n".join(render_section(section, renderers) for section in sections)
    if not body:
        body = render_fallback_body(plan_text)

    booking_block = render_booking_block(therapist_name, booking_urls, qr_generator)

    patient_info = ""
    if patient_name:
        patient_info = (
            f'<div class="patient-info">Patient: {escape_html(patient_name)} | '
            f"Date: {display_date} | Therapist: {escape_html(therapist_name)}</div>"
        )

    return f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{escape_html(CLINIC_NAME)} - {DOCUMENT_TITLE} for {escape_html(patient_name or 'Patient')}</title>
    <link rel="preconnect" href="https://fonts.googleapis.com">
    <link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>
    <link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap" rel="stylesheet">
    <style>{STYLESHEET}    </style>
  </head>
  <body>
    <div class="page">
      <header>
        <img src="{LOGO_URL}" alt="{escape_html(CLINIC_NAME)}" />
        <div class="title">
          <h1>{DOCUMENT_TITLE}</h1>
          {patient_info}
        </div>
        {booking_block}
      </header>
      <main>
        {body}
      </main>
      <footer>
        <div>Generated on {display_date}</div>
        <div class="accent">{CONTACT_LINE}</div>
      </footer>
    </div>
  </body>
</html>"""
