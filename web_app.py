import os
from pathlib import Path

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import NotFound

# Load .env file; override=True ensures .env file values take precedence over existing env vars
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent / ".env", override=True)

from treatment_plan_renderer.booking import load_booking_urls, qr_code_data_uri
from treatment_plan_renderer.generate_plan import MODELS, GenerationError, generate_plan_text, get_model_id
from treatment_plan_renderer.render_html import render_plan_html
from treatment_plan_renderer.render_pdf import export_plan

# ----------------------------
# Paths / Config
# ----------------------------
ROOT = Path(__file__).resolve().parent
PORT = int(os.environ.get("PORT", "3080"))
MAX_CONTENT_LENGTH = 2 * 1024 * 1024

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = MAX_CONTENT_LENGTH

# Built once at start-up; read-only afterwards
BOOKING_URLS = load_booking_urls()


def _plan_request() -> tuple[str, str, str]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    return (
        data.get("planText") or "",
        data.get("patientName") or "",
        data.get("therapistName") or "",
    )


@app.post("/api/generate")
def api_generate():
    """Generate treatment plan text from a case note with Gemini."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    case_note = data.get("caseNote")
    patient_name = data.get("patientName")
    therapist_name = data.get("therapistName")

    if not case_note or not isinstance(case_note, str):
        return jsonify({"error": "Missing caseNote"}), 400
    if not patient_name or not isinstance(patient_name, str):
        return jsonify({"error": "Missing patientName"}), 400
    if not therapist_name or not isinstance(therapist_name, str):
        return jsonify({"error": "Missing therapistName"}), 400

    try:
        text = generate_plan_text(case_note)
    except GenerationError as e:
        return jsonify(e.to_dict()), e.status
    except Exception as e:
        print(f"[ERROR] Unexpected error generating plan: {e}")
        return jsonify({"error": "Internal server error", "details": str(e)}), 500

    model_id = get_model_id()
    return jsonify({
        "text": text,
        "patientName": patient_name,
        "therapistName": therapist_name,
        "modelId": model_id,
        "modelName": MODELS[model_id]["name"],
    }), 200


@app.post("/api/render-html")
def api_render_html():
    plan_text, patient_name, therapist_name = _plan_request()
    if not plan_text:
        return jsonify({"error": "Missing planText"}), 400
    try:
        html = render_plan_html(plan_text, patient_name, therapist_name, booking_urls=BOOKING_URLS)
    except Exception as e:
        print(f"[ERROR] Failed to render HTML: {e}")
        return jsonify({"error": "Failed to render HTML"}), 500
    return jsonify({"html": html}), 200


@app.post("/api/print")
def api_print():
    """Return the plan as print-optimized HTML."""
    plan_text, patient_name, therapist_name = _plan_request()
    if not plan_text:
        return jsonify({"error": "Missing planText"}), 400
    try:
        html = render_plan_html(plan_text, patient_name, therapist_name, booking_urls=BOOKING_URLS)
    except Exception as e:
        print(f"[ERROR] Print HTML generation error: {e}")
        return jsonify({"error": "Failed to generate print view", "details": str(e)}), 500
    return Response(html, mimetype="text/html")


@app.post("/api/pdf")
def api_pdf():
    """Return the plan as a PDF download, or print-ready HTML if PDF export fails."""
    plan_text, patient_name, therapist_name = _plan_request()
    if not plan_text:
        return jsonify({"error": "Missing planText"}), 400
    try:
        result = export_plan(plan_text, patient_name, therapist_name, booking_urls=BOOKING_URLS)
    except Exception as e:
        print(f"[ERROR] PDF generation error: {e}")
        return jsonify({
            "error": "Failed to create PDF",
            "details": str(e),
            "suggestion": "Try using the browser's print function instead",
        }), 500

    if not result.is_pdf:
        return Response(result.content, mimetype="text/html")
    return Response(
        result.content,
        mimetype="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@app.get("/api/models")
def api_models():
    return jsonify([
        {
            "id": model_id,
            "name": model["name"],
            "provider": model["provider"],
            "maxTokens": model["maxTokens"],
            "maxInputTokens": model["maxInputTokens"],
        }
        for model_id, model in MODELS.items()
    ]), 200


@app.get("/api/qr-code/<path:therapist_name>")
def api_qr_code(therapist_name: str):
    booking_url = BOOKING_URLS.get(therapist_name)
    if not booking_url:
        return jsonify({"error": "Therapist not found"}), 404

    qr_code = qr_code_data_uri(booking_url, size=120)
    if not qr_code:
        return jsonify({"error": "Failed to generate QR code"}), 500
    return jsonify({
        "qrCode": qr_code,
        "bookingUrl": booking_url,
        "therapistName": therapist_name,
    }), 200


@app.errorhandler(NotFound)
def handle_not_found(e):
    if request.path.startswith("/api/"):
        return jsonify({"error": "API endpoint not found"}), 404
    return e


if __name__ == "__main__":
    app.run(debug=True, host="127.0.0.1", port=PORT, use_reloader=False)
