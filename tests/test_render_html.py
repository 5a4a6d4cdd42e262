import re

from treatment_plan_renderer.plan_types import SectionKind
from treatment_plan_renderer.render_html import render_booking_block, render_plan_html


def _fake_qr(url):
    return "data:image/svg+xml;base64,QUJD"


def _failing_qr(url):
    raise RuntimeError("encoder exploded")


def test_document_shell(sample_plan, fixed_day):
    html = render_plan_html(sample_plan, "Jane Doe", "Unknown Person", booking_urls={}, today=fixed_day)

    assert html.startswith("<!doctype html>")
    assert '<div class="page">' in html
    assert "<header>" in html and "<main>" in html and "<footer>" in html
    assert "<h1>Massage Treatment Plan</h1>" in html
    assert "Patient: Jane Doe | Date: 07/03/2025 | Therapist: Unknown Person" in html
    assert "Generated on 07/03/2025" in html
    assert "mygcphysio.com.au | (07) 5500 6470" in html


def test_sections_rendered_in_source_order(sample_plan, fixed_day):
    html = render_plan_html(sample_plan, booking_urls={}, today=fixed_day)
    main = html[html.index("<main>"):html.index("</main>")]
    numbers = re.findall(r'<span class="num">(\d)\.</span>', main)
    assert numbers == [str(n) for n in range(1, 9)]
    assert "Here is your personalized treatment plan" not in main
    assert main.count('class="treatment-phase-card"') == 2


def test_patient_line_omitted_without_patient(sample_plan, fixed_day):
    html = render_plan_html(sample_plan, booking_urls={}, today=fixed_day)
    assert 'class="patient-info"' not in html
    assert "<title>Gold Coast Physio &amp; Sports Health - Massage Treatment Plan for Patient</title>" in html


def test_fallback_paragraph_for_unstructured_text(fixed_day):
    html = render_plan_html("Here is your treatment plan:\n\nBelow is your plan", booking_urls={}, today=fixed_day)
    assert '<div class="section"><p>Here is your treatment plan:<br/><br/>Below is your plan</p></div>' in html


def test_fallback_for_empty_text(fixed_day):
    html = render_plan_html("", booking_urls={}, today=fixed_day)
    assert '<div class="section"><p></p></div>' in html


def test_headerless_text_with_content_renders_as_additional_notes(fixed_day):
    html = render_plan_html("Some clinician note.", booking_urls={}, today=fixed_day)
    assert "<h2>Additional Notes</h2>" in html
    assert "<p>Some clinician note.</p>" in html


def test_user_text_escaped_once(fixed_day):
    html = render_plan_html("1. Rest & Recovery: **Ice** <10 min>", "Tom & Jerry", booking_urls={}, today=fixed_day)
    assert "Rest &amp; Recovery" in html
    assert "<p>Ice &lt;10 min&gt;</p>" in html
    assert "Patient: Tom &amp; Jerry" in html
    assert "&amp;amp;" not in html
    assert "**" not in html


def test_qr_block_for_mapped_therapist(sample_plan, fixed_day, booking_urls):
    html = render_plan_html(sample_plan, "Jane", "Elle Badrak", booking_urls=booking_urls,
                            qr_generator=_fake_qr, today=fixed_day)
    header = html[html.index("<header>"):html.index("</header>")]
    assert 'class="qr-code-container"' in header
    assert 'href="https://bookings.example.com/?p=530&amp;src=qr"' in header
    assert "Book with Elle Badrak" in header
    assert 'src="data:image/svg+xml;base64,QUJD"' in header


def test_no_qr_block_for_unmapped_therapist(sample_plan, fixed_day, booking_urls):
    with_block = render_plan_html(sample_plan, "Jane", "Elle Badrak", booking_urls=booking_urls,
                                  qr_generator=_fake_qr, today=fixed_day)
    without = render_plan_html(sample_plan, "Jane", "Someone Else", booking_urls=booking_urls,
                               qr_generator=_fake_qr, today=fixed_day)
    assert 'class="qr-code-container"' not in without
    main_with = with_block[with_block.index("<main>"):]
    main_without = without[without.index("<main>"):]
    assert main_with == main_without


def test_qr_failure_is_not_a_render_failure(sample_plan, fixed_day, booking_urls):
    html = render_plan_html(sample_plan, "Jane", "Elle Badrak", booking_urls=booking_urls,
                            qr_generator=_failing_qr, today=fixed_day)
    assert 'class="qr-code-container"' not in html
    assert html.count('class="treatment-phase-card"') == 2


def test_booking_block_empty_when_generator_returns_none(booking_urls):
    assert render_booking_block("Elle Badrak", booking_urls, lambda url: None) == ""
    assert render_booking_block("", booking_urls, _fake_qr) == ""


def test_booking_block_skips_unsafe_url():
    urls = {"Elle Badrak": 'https://x.test/" onclick="alert(1)'}
    assert render_booking_block("Elle Badrak", urls, _fake_qr) == ""


def test_therapist_field_left_blank_when_not_given(sample_plan, fixed_day):
    html = render_plan_html(sample_plan, "Jane", booking_urls={}, today=fixed_day)
    assert "Patient: Jane | Date: 07/03/2025 | Therapist: </div>" in html
    assert "N/A" not in html


def test_custom_renderer_table(sample_plan, fixed_day):
    renderers = {kind: (lambda section: f'<p class="custom">{section.number}</p>') for kind in SectionKind}
    html = render_plan_html(sample_plan, booking_urls={}, today=fixed_day, renderers=renderers)
    main = html[html.index("<main>"):html.index("</main>")]
    assert re.findall(r'<p class="custom">(\d)</p>', main) == [str(n) for n in range(1, 9)]
    assert 'class="treatment-phase-card"' not in main
