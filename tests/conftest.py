"""
Shared fixtures: a fake requests session standing in for RxNav and OpenFDA,
and a TestClient around an app built with those fakes.
"""

from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from interaction_checker.api import create_app
from interaction_checker.config import Settings
from interaction_checker.services.openfda import OpenFDAClient
from interaction_checker.services.rxnorm import RxNormClient


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, reason: str = "OK"):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Records every GET and answers it through handler(url, params)."""

    def __init__(self, handler: Callable[[str, Dict[str, Any]], Any]):
        self.handler = handler
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None):
        params = dict(params or {})
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        result = self.handler(url, params)
        if isinstance(result, Exception):
            raise result
        return result

    def close(self) -> None:
        self.closed = True


def make_label(
    label_id: str = "label-1",
    rxcui: Optional[List[str]] = None,
    brand: Optional[List[str]] = None,
    generic: Optional[List[str]] = None,
    interactions: Optional[List[str]] = None,
) -> Dict[str, Any]:
    label: Dict[str, Any] = {
        "id": label_id,
        "openfda": {
            "rxcui": rxcui or [],
            "brand_name": brand or [],
            "generic_name": generic or [],
        },
    }
    if interactions is not None:
        label["drug_interactions"] = interactions
    return label


class FakeUpstream:
    """
    RxNav answers from `rxnorm_bodies` (term -> raw JSON body) or `rxcuis`
    (term -> rxcui); OpenFDA answers with `labels`, unless `label_response` is set (a FakeResponse or an exception).
    """

    def __init__(self):
        self.rxcuis: Dict[str, str] = {}
        self.rxnorm_bodies: Dict[str, Any] = {}
        self.labels: List[Dict[str, Any]] = []
        self.label_response: Any = None

    def __call__(self, url: str, params: Dict[str, Any]):
        if url.endswith("/approximateTerm.json"):
            if params["term"] in self.rxnorm_bodies:
                return FakeResponse(200, self.rxnorm_bodies[params["term"]])
            rxcui = self.rxcuis.get(params["term"])
            candidates = [{"rxcui": rxcui, "score": "12.5", "rank": "1"}] if rxcui else []
            return FakeResponse(200, {"approximateGroup": {"inputTerm": params["term"], "candidate": candidates}})
        if self.label_response is not None:
            return self.label_response
        return FakeResponse(200, {"meta": {"results": {"total": len(self.labels)}}, "results": self.labels})


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def session(upstream: FakeUpstream) -> FakeSession:
    return FakeSession(upstream)


@pytest.fixture
def settings() -> Settings:
    return Settings(cors_origins=["*"])


@pytest.fixture
def app_factory(session: FakeSession, settings: Settings):
    def _make(settings: Settings = settings, llm_client: Any = None):
        return create_app(
            settings,
            rxnorm=RxNormClient(session=session, base_url=settings.rxnorm_base_url),
            openfda=OpenFDAClient(session=session, label_url=settings.openfda_label_url),
            llm_client=llm_client,
        )

    return _make


@pytest.fixture
def test_client(app_factory) -> TestClient:
    return TestClient(app_factory())
