"""Therapist booking links and QR codes."""
import base64
import json
import os
import re
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional
from urllib.parse import urlparse

from reportlab.graphics import renderSVG
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing, Rect
from reportlab.lib import colors


# Massage therapist booking URLs (alphabetical order)
DEFAULT_BOOKING_URLS: Mapping[str, str] = MappingProxyType({
    "Amanda O'Dempsey": "https://mygcphysio.bookings.pracsuite.com/?p=4819",
    "Elle Badrak": "https://mygcphysio.bookings.pracsuite.com/?p=530",
    "Frederic Impens": "https://mygcphysio.bookings.pracsuite.com/?p=534",
    "Katie Harders": "https://mygcphysio.bookings.pracsuite.com/?p=533",
    "Nicole Grimshaw": "https://mygcphysio.bookings.pracsuite.com/?p=2179",
    "Payton Windsor": "https://mygcphysio.bookings.pracsuite.com/?p=4522",
    "Sarah Allcock": "https://mygcphysio.bookings.pracsuite.com/?p=5446",
    "Trent Ousby": "https://mygcphysio.bookings.pracsuite.com/?p=2410",
})

QR_DARK = "#3A71DA"
QR_LIGHT = "#FFFFFF"

UNSAFE_URL_CHARS = re.compile(r"""[\s"'<>]""")


def is_valid_booking_url(url) -> bool:
    """Only plain http(s) links with no quotes or whitespace are allowed."""
    if not isinstance(url, str) or UNSAFE_URL_CHARS.search(url):
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def load_booking_urls(path: Optional[Path] = None) -> Mapping[str, str]:
    """
    Load the therapist -> booking URL table.

    Entries from a JSON object file (``path`` or $THERAPIST_BOOKING_JSON)
    are merged over the defaults. The result is read-only.
    """
    if path is None and os.environ.get("THERAPIST_BOOKING_JSON"):
        path = Path(os.environ["THERAPIST_BOOKING_JSON"])

    urls = dict(DEFAULT_BOOKING_URLS)
    if path is not None and path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            print(f"[WARN] Could not read booking table {path}: {e}")
        else:
            if isinstance(data, dict):
                for name, url in data.items():
                    if is_valid_booking_url(url):
                        urls[str(name)] = url
                    else:
                        print(f"[WARN] Skipping booking URL for {name!r}: {url!r}")
            else:
                print(f"[WARN] Booking table {path} is not a JSON object, using defaults")
    return MappingProxyType(urls)


def qr_code_data_uri(text: str, size: int = 80) -> Optional[str]:
    """
    Render a QR code for ``text`` as an SVG data URI.

    Returns None if the code could not be generated.
    """
    try:
        widget = QrCodeWidget(text, barLevel="M", barBorder=2)
        widget.barFillColor = colors.HexColor(QR_DARK)
        widget.barStrokeColor = colors.HexColor(QR_DARK)
        x1, y1, x2, y2 = widget.getBounds()
        width, height = x2 - x1, y2 - y1

        drawing = Drawing(size, size, transform=[size / width, 0, 0, size / height, 0, 0])
        drawing.add(Rect(x1, y1, width, height, fillColor=colors.HexColor(QR_LIGHT), strokeColor=None))
        drawing.add(widget)
        svg = renderSVG.drawToString(drawing)
        if isinstance(svg, str):
            svg = svg.encode("utf-8")
    except Exception as e:
        print(f"[ERROR] Failed to generate QR code: {e}")
        return None

    encoded = base64.b64encode(svg).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"
