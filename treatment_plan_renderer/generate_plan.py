"""Treatment plan text generation with Gemini."""
import base64
import json
import os
import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv

# override=True ensures .env file values take precedence over existing env vars
load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=True)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_MODEL = "gemini-2.5-flash"
PLACEHOLDER_KEY = "YOUR_GEMINI_API_KEY_HERE"

MODELS = MappingProxyType({
    "gemini-2.5-flash": MappingProxyType({
        "name": "Gemini 2.5 Flash (Google)",
        "provider": "Google",
        "maxTokens": 8000,
        "maxInputTokens": 1000000,
    }),
})

BASE_PROMPT = """From this case note: [CASE_NOTE]. Generate a massage therapy treatment plan in the EXACT structure below, using patient-centered language. Follow the format precisely:

1. Your Starting Point (Today): [2–3 sentences on pain levels, key aggravators, and what you can still do]

2. What's Going On (Assessment Findings): Use EXACTLY this format:
   * Clinical findings: [specific assessment findings]
   * In plain English: [one sentence on what's happening and why symptoms behave as they do]

3. Where You Want to Get To (Goals): Write 3 separate goals, each as a complete sentence with success markers. Use this format:
   [First goal with success marker]
   [Second goal with success marker]
   [Third goal with success marker]

4. Do This Now (Your 1–3 Key Actions for the Week): Write 3 separate actions covering self-care, activity modifications, and home techniques. Use this format:
   [First action - self-care or education with micro-dose and frequency]
   [Second action - activity modification or stretching with micro-dose and frequency]
   [Third action - home techniques with micro-dose and frequency]

5. Treatment Plan: Use EXACTLY this format with two phases:

**Getting You Comfortable** (Acute Phase, [Duration]):
[Write 3-4 sentences: Start by identifying which specific objective findings from the assessment are contributing to the patient's main symptoms. Explain which massage techniques you'll use and how they address these findings. Connect this to one of their goals. End with what improvements they should notice and when.]
Recommended: [X sessions per week]

**Keeping You at Your Best** (Maintenance Phase, Ongoing):
[Write 3-4 sentences: Explain how regular massage therapy maintains their progress and prevents the problem from returning. Reference their lifestyle/work demands that create ongoing tissue stress. Emphasize the value of proactive care - catching tension before it becomes painful. End with a relatable benefit statement.]
Recommended: [X sessions per month/weeks]

6. How We'll Measure Progress: [Specific measures with improvement criteria]

7. What to Expect in the Next 72 Hours: Write 2 separate points:
   [Normal expected response]
   [What's not expected - warning signs]

8. Recommended Appointments: [Summary of appointment schedule]

IMPORTANT: For sections 3, 4, and 7, write each point as a separate line without bullet points (*). Do NOT use bullet points for section 5 - write it as flowing paragraphs with the "Recommended:" line on its own."""

KEY_SUGGESTION = "Set GEMINI_API_KEY in the environment or in the project .env file"


class GenerationError(Exception):
    """Plan generation failed; carries the HTTP status to report."""

    def __init__(self, status: int, error: str, details: Any = None, suggestion: Optional[str] = None):
        super().__init__(error)
        self.status = status
        self.error = error
        self.details = details
        self.suggestion = suggestion

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        if self.suggestion:
            body["suggestion"] = self.suggestion
        return body


def get_api_key() -> str:
    return os.getenv("GEMINI_API_KEY", "").strip()


def get_model_id() -> str:
    model_id = os.getenv("GEMINI_MODEL", DEFAULT_MODEL).strip()
    return model_id if model_id in MODELS else DEFAULT_MODEL


def build_plan_prompt(case_note: str) -> str:
    """Fill the case note into the fixed 8-section plan prompt."""
    return BASE_PROMPT.replace("[CASE_NOTE]", case_note.strip())


def extract_text_from_candidate(candidate: Optional[Dict[str, Any]]) -> str:
    """Collect the text carried by a Gemini response candidate."""
    if not candidate:
        return ""
    content = candidate.get("content") or {}
    parts = content.get("parts")
    fragments = []
    if isinstance(parts, list):
        for part in parts:
            if not isinstance(part, dict):
                continue
            if isinstance(part.get("text"), str):
                fragments.append(part["text"])
                continue
            function_call = part.get("functionCall")
            if function_call:
                args = function_call.get("args", function_call.get("arguments"))
                if args:
                    fragments.append(args if isinstance(args, str) else json.dumps(args))
                continue
            inline = part.get("inlineData") or {}
            if inline.get("mimeType") == "text/plain" and inline.get("data"):
                try:
                    decoded = base64.b64decode(inline["data"]).decode("utf-8")
                except (ValueError, UnicodeDecodeError) as e:
                    print(f"[WARN] Failed to decode inline data from candidate part: {e}")
                    continue
                if decoded:
                    fragments.append(decoded)
                continue
            if isinstance(part.get("json"), (dict, list)):
                fragments.append(json.dumps(part["json"]))

    if not fragments and isinstance(content.get("text"), str):
        fragments.append(content["text"])
    if not fragments and isinstance(candidate.get("text"), str):
        fragments.append(candidate["text"])
    return "\n".join(fragments).strip()


def _raise_for_http_error(e: requests.exceptions.RequestException) -> None:
    response = getattr(e, "response", None)
    status = response.status_code if response is not None else None
    body = response.text if response is not None else ""
    print(f"[GEMINI] API call failed: {e} (status={status}, preview={body[:200]!r})")

    if "<html" in body:
        raise GenerationError(
            401,
            "Invalid API key or service unavailable",
            "The API returned an HTML error page. Please check your GEMINI_API_KEY.",
            KEY_SUGGESTION,
        ) from e

    if response is not None:
        try:
            details: Any = response.json()
        except ValueError:
            details = body or str(e)
    else:
        details = str(e)

    if status == 400:
        raise GenerationError(400, "Invalid request to Gemini API", details) from e
    if status == 401:
        raise GenerationError(401, "Invalid API key", "Please check your GEMINI_API_KEY") from e
    if status == 403:
        raise GenerationError(
            403, "API access forbidden",
            "Your API key may not have access to this model or the service is restricted",
        ) from e
    if status == 429:
        raise GenerationError(429, "Rate limit exceeded", "Too many requests to Gemini API. Please try again later.") from e
    raise GenerationError(502, "Gemini API error", str(e), "Check the server logs for more details") from e


def call_gemini(prompt: str, api_key: str, model_id: str = DEFAULT_MODEL,
                temperature: float = 0.3, timeout: Optional[float] = None) -> Dict[str, Any]:
    """Call the Gemini generateContent API and return the decoded response."""
    model = MODELS[model_id]
    if timeout is None:
        timeout = float(os.getenv("GEMINI_TIMEOUT", "60"))

    url = GEMINI_ENDPOINT.format(model=model_id)
    payload = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "maxOutputTokens": model["maxTokens"],
            "temperature": temperature,
        },
    }

    print(f"[GEMINI] Calling {model_id} with prompt length {len(prompt)}")
    try:
        r = requests.post(url, params={"key": api_key}, json=payload,
                          headers={"Content-Type": "application/json"}, timeout=timeout)
        r.raise_for_status()
        return r.json()
    except requests.exceptions.RequestException as e:
        _raise_for_http_error(e)
    except ValueError as e:
        raise GenerationError(502, "Gemini API error", f"Response was not valid JSON: {e}") from e


def text_from_response(data: Dict[str, Any]) -> str:
    """
    Pull the plan text out of a Gemini response.

    Raises GenerationError when the response was blocked or carried no text.
    """
    candidates = data.get("candidates") or []
    candidate = candidates[0] if candidates else None
    prompt_feedback = data.get("promptFeedback") or {}
    text = extract_text_from_candidate(candidate)

    if not text and candidate and candidate.get("finishReason") == "MAX_TOKENS":
        print("[GEMINI] Hit token limit, checking for partial response...")
        match = re.search(r'"text":\s*"([^"]+)"', json.dumps(data))
        if match:
            text = match.group(1)
            print(f"[GEMINI] Found partial text in response: {len(text)} characters")

    if text:
        return text

    block_reason = prompt_feedback.get("blockReason")
    print(f"[ERROR] Could not extract text from Gemini response "
          f"(finishReason={candidate.get('finishReason') if candidate else None}, blockReason={block_reason})")
    if block_reason:
        raise GenerationError(
            403, "Response blocked by Gemini safety filters", block_reason,
            "Try removing or rephrasing content that might trigger safety filters.",
        )
    content = (candidate or {}).get("content")
    raise GenerationError(
        502,
        "Empty response from Gemini. Response hit token limit or has unexpected structure.",
        {
            "finishReason": (candidate or {}).get("finishReason"),
            "hasContent": bool(content),
            "contentKeys": sorted(content.keys()) if isinstance(content, dict) else "none",
        },
    )


def generate_plan_text(case_note: str) -> str:
    """
    Generate treatment plan text for a case note.

    Args:
        case_note: Clinician's free-text case note

    Returns:
        Raw plan text in the numbered 8-section format

    Raises:
        GenerationError: configuration or provider failure
    """
    api_key = get_api_key()
    if not api_key or api_key == PLACEHOLDER_KEY:
        print("[ERROR] Gemini API key not configured")
        raise GenerationError(
            500, "API key not configured. Please check environment variables.",
            "GEMINI_API_KEY is missing or not set properly", KEY_SUGGESTION,
        )
    if not api_key.startswith("AIza"):
        print("[ERROR] Invalid API key format")
        raise GenerationError(
            500, "Invalid API key format",
            'Google API keys typically start with "AIza". Please check your GEMINI_API_KEY.',
            "Get a valid API key from Google AI Studio: https://aistudio.google.com/app/apikey",
        )

    model_id = get_model_id()
    data = call_gemini(build_plan_prompt(case_note), api_key, model_id)
    text = text_from_response(data)
    print(f"[INFO] Generated plan text ({len(text)} characters)")
    return text
