from __future__ import annotations
import re
from typing import Any, Dict

from interaction_checker.constants.glossary import OPENFDA_FIELD_LABELS, SECTION_LABELS

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def clean_text(v: Any) -> str:
    """OpenFDA sections are lists of strings, sometimes with stray HTML."""
    if not v: return "—"
    joined = " ".join(str(x) for x in v) if isinstance(v, list) else str(v)
    cleaned = _WS_RE.sub(" ", _TAG_RE.sub(" ", joined)).strip()
    return cleaned or "—"

def fmt_names(v: Any) -> str:
    if not v: return "—"
    if isinstance(v, list):
        return ", ".join(str(x).strip() for x in v if str(x).strip()) or "—"
    return str(v).strip()

def translate_sections(label: Dict[str, Any]) -> Dict[str, Dict[str, str]]:
    out: Dict[str, Dict[str, str]] = {}
    if not label:
        return out

    openfda = label.get("openfda") or {}
    for key, title in OPENFDA_FIELD_LABELS.items():
        if key in openfda:
            out[title] = {"value": fmt_names(openfda[key]), "gloss": ""}

    for key, (title, gloss) in SECTION_LABELS.items():
        if key in label:
            out[title] = {"value": clean_text(label[key]), "gloss": gloss}

    return out
