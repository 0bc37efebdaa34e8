"""
OpenFDA drug label adapter.

Source: https://open.fda.gov/apis/drug/label/
The search grammar is Lucene-like: terms inside quotes still need the
reserved characters (and whitespace) backslash-escaped.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import requests

from interaction_checker.config import DEFAULT_OPENFDA_LABEL_URL
from interaction_checker.models import LabelDocument

logger = logging.getLogger(__name__)

LABEL_LIMIT = 200
FETCH_FAILED = "FETCH_FAILED"

_SPECIAL_RE = re.compile(r'([+\-&|!(){}\[\]^"~*?:\\/\s])')


class LabelFetchError(Exception):
    """OpenFDA answered with an error status (other than 404) or could not be reached."""

    def __init__(self, code: str, message: str):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


def escape_query_term(term: str) -> str:
    return _SPECIAL_RE.sub(r"\\\1", term)


def build_label_query(rxcuis: List[str], names: List[str]) -> str:
    """
    OR together exact RxCUI filters and brand/generic name filters.
    Returns "" when there is nothing to search for.
    """
    parts = [f'openfda.rxcui:"{rxcui}"' for rxcui in rxcuis]
    for name in names:
        escaped = escape_query_term(name)
        parts.append(f'(openfda.generic_name:"{escaped}" OR openfda.brand_name:"{escaped}")')
    if not parts:
        return ""
    return "(" + " OR ".join(parts) + ")"


def _error_message(resp: requests.Response) -> str:
    message = resp.reason or f"HTTP error {resp.status_code}"
    try:
        body = resp.json()
    except ValueError:
        logger.error("Could not parse OpenFDA error body")
        return message
    logger.error("OpenFDA error body: %s", body)
    if isinstance(body, dict):
        message = (body.get("error") or {}).get("message") or message
    return message


class OpenFDAClient:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        label_url: str = DEFAULT_OPENFDA_LABEL_URL,
        api_key: Optional[str] = None,
        limit: int = LABEL_LIMIT,
        timeout: float = 15.0,
    ):
        self.session = session or requests.Session()
        self.label_url = label_url
        self.api_key = api_key
        self.limit = limit
        self.timeout = timeout

    def _get(self, search: str, limit: int) -> Optional[Dict[str, Any]]:
        """
        One label query. Returns the decoded body, or None on 404.
        Raises LabelFetchError for any other failure.
        """
        params: Dict[str, Any] = {"search": search, "limit": limit}
        if self.api_key:
            params["api_key"] = self.api_key

        logger.info("OpenFDA query: %s (limit=%s)", search, limit)
        try:
            resp = self.session.get(self.label_url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Error fetching from OpenFDA: %s", exc)
            raise LabelFetchError(FETCH_FAILED, str(exc) or "Failed to fetch data from OpenFDA.")

        if not resp.ok:
            logger.error("OpenFDA API error: %s %s", resp.status_code, resp.reason)
            message = _error_message(resp)
            if resp.status_code == 404:
                return None
            raise LabelFetchError(str(resp.status_code), message)

        try:
            data = resp.json()
        except ValueError:
            raise LabelFetchError(FETCH_FAILED, "OpenFDA returned a response that is not JSON.")
        if not isinstance(data, dict):
            logger.error("OpenFDA returned a non-object body: %.200r", data)
            raise LabelFetchError(FETCH_FAILED, "OpenFDA returned an unexpected response body.")
        return data

    def fetch_labels(self, rxcuis: List[str], names: List[str]) -> List[LabelDocument]:
        query = build_label_query(rxcuis, names)
        if not query:
            logger.warning("No identifiers to search OpenFDA with")
            return []

        data = self._get(query, self.limit)
        if data is None:
            logger.info("No labels found matching the query")
            return []

        labels = [LabelDocument.model_validate(r) for r in data.get("results") or []]
        logger.info("OpenFDA returned %d labels", len(labels))
        return labels

    def search_label(self, term: str) -> Optional[Dict[str, Any]]:
        """First label whose brand or generic name matches term, as raw JSON."""
        escaped = escape_query_term(term.strip())
        query = f'openfda.brand_name:"{escaped}" openfda.generic_name:"{escaped}"'

        data = self._get(query, 1)
        results = (data or {}).get("results") or []
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            logger.info('No label found for term "%s"', term)
            return None
        return results[0]

    def close(self) -> None:
        self.session.close()
