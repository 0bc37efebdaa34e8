from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from interaction_checker.config import DEFAULT_RXNORM_BASE_URL

logger = logging.getLogger(__name__)


def _top_rxcui(data: Any) -> Optional[str]:
    # approximateGroup.candidate[0].rxcui; any other shape counts as no match
    group = data.get("approximateGroup") if isinstance(data, dict) else None
    candidates = group.get("candidate") if isinstance(group, dict) else None
    if not isinstance(candidates, list) or not candidates:
        return None
    top = candidates[0]
    rxcui = top.get("rxcui") if isinstance(top, dict) else None
    if rxcui is None or isinstance(rxcui, (dict, list)):
        return None
    return str(rxcui)


class RxNormClient:
    """
    Thin client for the NIH RxNav REST API.

    Only approximateTerm is used: it tolerates misspellings and brand names,
    and the top-ranked candidate is taken as the drug's RxCUI.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: str = DEFAULT_RXNORM_BASE_URL,
        timeout: float = 15.0,
    ):
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def approximate_term(self, name: str) -> Optional[str]:
        """Best-match RxCUI for a free-text name, or None. Never raises for upstream failures."""
        url = f"{self.base_url}/approximateTerm.json"
        try:
            resp = self.session.get(
                url, params={"term": name, "maxEntries": 1}, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.error('Error fetching RxCUI for "%s": %s', name, exc)
            return None

        if not resp.ok:
            logger.error('RxNorm approximateTerm error for "%s": %s', name, resp.status_code)
            return None

        try:
            data = resp.json()
        except ValueError:
            logger.error('RxNorm returned a non-JSON body for "%s"', name)
            return None

        rxcui = _top_rxcui(data)
        if not rxcui:
            logger.warning('No RxCUI found for "%s" via approximateTerm', name)
            return None

        logger.info('Found RxCUI %s for "%s"', rxcui, name)
        return rxcui

    def resolve_rxcuis(self, names: List[str]) -> Dict[str, Optional[str]]:
        # one lookup at a time to stay clear of RxNav rate limits
        rxcui_map: Dict[str, Optional[str]] = {}
        for name in names:
            rxcui_map[name] = self.approximate_term(name)
        logger.debug("RxCUI map: %s", rxcui_map)
        return rxcui_map

    def close(self) -> None:
        self.session.close()
