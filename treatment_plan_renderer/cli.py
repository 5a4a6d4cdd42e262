"""Command-line interface for treatment plan rendering."""
import argparse
import sys
from typing import Optional
from pathlib import Path

from .booking import load_booking_urls
from .generate_plan import GenerationError, generate_plan_text
from .render_html import render_plan_html
from .render_pdf import export_plan


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate and render massage therapy treatment plans"
    )
    parser.add_argument(
        "command",
        choices=["render", "pdf", "generate"],
        help="render: plan text -> HTML; pdf: plan text -> PDF; generate: case note -> plan text"
    )
    parser.add_argument(
        "--in", "--input",
        dest="input_path",
        required=True,
        type=Path,
        help="Path to input text file (plan text, or case note for 'generate')"
    )
    parser.add_argument(
        "--out", "--output",
        dest="output_path",
        type=Path,
        help="Output path (default: print to stdout for render/generate)"
    )
    parser.add_argument("--patient", default="", help="Patient name for the header")
    parser.add_argument("--therapist", default="", help="Therapist name (adds booking QR code if known)")
    parser.add_argument(
        "--booking-table",
        type=Path,
        help="JSON file mapping therapist names to booking URLs"
    )
    return parser


def _emit(text: str, output_path: Optional[Path] = None) -> None:
    if output_path is None:
        sys.stdout.write(text)
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")
    print(f"✅ Written: {output_path}")


def main(argv=None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    if not args.input_path.exists():
        print(f"❌ Error: input not found: {args.input_path}")
        return 1
    text = args.input_path.read_text(encoding="utf-8")
    if not text.strip():
        print(f"❌ Error: input is empty: {args.input_path}")
        return 1

    if args.command == "generate":
        try:
            plan_text = generate_plan_text(text)
        except GenerationError as e:
            print(f"❌ Error: {e.error}")
            if e.details:
                print(f"   Details: {e.details}")
            if e.suggestion:
                print(f"   {e.suggestion}")
            return 1
        _emit(plan_text, args.output_path)
        return 0

    booking_urls = load_booking_urls(args.booking_table)

    if args.command == "render":
        html = render_plan_html(text, args.patient, args.therapist, booking_urls=booking_urls)
        _emit(html, args.output_path)
        return 0

    result = export_plan(text, args.patient, args.therapist, booking_urls=booking_urls)
    output_path = args.output_path or Path(result.filename)
    if not result.is_pdf and output_path.suffix == ".pdf":
        output_path = output_path.with_suffix(".html")
        print("⚠️  PDF export unavailable, writing print-ready HTML instead")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.content)
    print(f"✅ Written: {output_path} ({len(result.content)} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
