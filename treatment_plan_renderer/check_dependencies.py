"""Check if all dependencies for treatment plan rendering are available."""
import os
import sys
from typing import List, Tuple


def check_dependencies() -> Tuple[bool, List[str]]:
    """
    Check if all required and optional dependencies are available.

    Returns:
        Tuple of (all_required_available, list of missing/warnings)
    """
    missing = []
    warnings = []

    # Required dependencies
    try:
        import reportlab  # noqa: F401
    except ImportError:
        missing.append("reportlab (required for booking QR codes)")

    try:
        import requests  # noqa: F401
    except ImportError:
        missing.append("requests (required for Gemini API)")

    try:
        from dotenv import load_dotenv  # noqa: F401
    except ImportError:
        missing.append("python-dotenv (required for config)")

    try:
        import flask  # noqa: F401
    except ImportError:
        missing.append("flask (required for the web API)")

    # Optional PDF export
    try:
        from playwright.sync_api import sync_playwright  # noqa: F401
    except ImportError:
        warnings.append("playwright (optional, needed for PDF export; print HTML is used otherwise)")

    # Check Gemini configuration
    if not missing:
        from dotenv import load_dotenv
        load_dotenv()
    api_key = os.getenv("GEMINI_API_KEY", "")
    if not api_key:
        warnings.append("GEMINI_API_KEY is not set (required for plan generation)")
    elif not api_key.startswith("AIza"):
        warnings.append('GEMINI_API_KEY does not look like a Google API key (expected to start with "AIza")')

    all_required = len(missing) == 0
    return all_required, missing + warnings


if __name__ == "__main__":
    print("Checking treatment plan renderer dependencies...\n")
    all_ok, issues = check_dependencies()

    if all_ok and not issues:
        print("✅ All dependencies are available!")
    elif all_ok:
        print("✅ All required dependencies are available.")
        print("\n⚠️  Optional dependencies/warnings:")
        for issue in issues:
            print(f"   - {issue}")
    else:
        print("❌ Missing required dependencies:")
        for issue in issues:
            if "required" in issue.lower():
                print(f"   - {issue}")

        print("\n💡 Install missing dependencies with:")
        print("   pip install reportlab requests python-dotenv flask")
        print("   pip install playwright && playwright install chromium  # Optional for PDF export")
        sys.exit(1)
