# interaction_checker/services/llm.py
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from openai import OpenAI, OpenAIError

from interaction_checker.config import Settings
from interaction_checker.models import InteractionFinding

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "LLM not configured (missing OPENAI_API_KEY)."
DISCLAIMER = "Not medical advice; confirm with a clinician/pharmacist."

# Label narratives can run to many pages; the model only needs the gist.
MAX_LABEL_CHARS = 4000


# ----------------------------
# Client factory
# ----------------------------
def make_client(settings: Settings) -> Optional[OpenAI]:
    """
    Create an OpenAI-compatible client if an API key is configured.
    LLM_BASE_URL points it at another vendor (e.g. https://api.deepseek.com).
    Returns None if not configured.
    """
    if not settings.openai_api_key:
        return None
    return OpenAI(api_key=settings.openai_api_key, base_url=settings.llm_base_url)


# ----------------------------
# Safety filters (conservative)
# ----------------------------
_BANNED_PATTERNS = [
    r"\b(dose|dosage|mg|mcg|g|ml)\b",
    r"\b(take|start|stop|increase|decrease|titrate|adjust)\b",
    r"\b(recommend|should|must|avoid|contraindicated)\b",
    r"\b(pregnan|breastfeed|lactat)\b",
    r"\b(call (a )?(doctor|physician)|seek medical|emergency)\b",
    r"\b(safe|unsafe|dangerous|fatal|death)\b",
    r"\b(risk of|causes|leads to|results in)\b",  # outcome-y
]

_BANNED_RE = re.compile("|".join(_BANNED_PATTERNS), re.IGNORECASE)


def _looks_like_medical_advice(text: str) -> bool:
    if not text:
        return False
    return bool(_BANNED_RE.search(text))


def _safe_str(x: Any) -> str:
    if x is None:
        return ""
    return str(x).strip()


def _must_end_disclaimer(text: str) -> str:
    if not text.endswith(DISCLAIMER):
        text = text.rstrip(". ").strip() + ". " + DISCLAIMER
    return text


# ----------------------------
# Explain (summarize only)
# ----------------------------
def explain(
    client: Optional[OpenAI],
    finding: InteractionFinding,
    model: str = "gpt-4.1-mini",
    style: str = "plain",  # "plain" | "clinical"
) -> str:
    """
    GenAI is used ONLY as a summarizer of a label-text finding.
    It must not add new claims, outcomes, dosing, or recommendations.

    - Uses JSON-only responses
    - Post-filters potentially advisory content
    - Upstream failures become a fixed message, never an exception
    """
    if client is None:
        return NOT_CONFIGURED

    payload: Dict[str, Any] = {
        "drug_pair": finding.pair,
        "severity": finding.severity,
        "label_excerpt": finding.description[:MAX_LABEL_CHARS],
        "style": style,
    }

    system = (
        "You are a strict summarizer for an FDA drug label interaction checker.\n"
        "ABSOLUTE RULES:\n"
        "- Use ONLY the JSON the user provides. Do NOT add external facts.\n"
        "- Summarize what label_excerpt says about the two drugs in drug_pair.\n"
        "- Do NOT infer outcomes, safety, or risk. Do NOT provide recommendations.\n"
        "- Do NOT provide dosing or management guidance.\n"
        "- If the excerpt only mentions the drug in passing, say 'insufficient data in label text'.\n\n"
        "OUTPUT FORMAT:\n"
        "Return JSON only: {\"explanation\": \"...\"}\n"
        f"End the explanation with: '{DISCLAIMER}'\n\n"
        "STYLE:\n"
        "If style == 'clinical', write in concise clinical documentation tone.\n"
        "If style == 'plain', write in clear plain-English tone."
    )

    try:
        resp = client.chat.completions.create(
            model=model,
            temperature=0,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": json.dumps(payload)},
            ],
        )
    except OpenAIError as exc:
        logger.error("LLM request failed for %s: %s", finding.pair, exc)
        return "LLM request failed."

    # Parse and post-check
    try:
        data = json.loads(resp.choices[0].message.content)
        explanation = _safe_str(data.get("explanation"))
    except (TypeError, ValueError, AttributeError, IndexError):
        return "Failed to parse LLM response safely."

    if not explanation:
        return "No explanation returned."

    # Safety post-filter: if the model tried to "advise", block it.
    if _looks_like_medical_advice(explanation):
        logger.warning("Blocked advice-like explanation for %s", finding.pair)
        return _must_end_disclaimer(
            "Explanation blocked: output resembled medical advice or unsupported clinical claims."
        )

    return _must_end_disclaimer(explanation)
