from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from openai import OpenAI
from starlette.exceptions import HTTPException as StarletteHTTPException

from interaction_checker.config import Settings, load_settings
from interaction_checker.models import DrugSearchResponse, InteractionFinding, InteractionsResponse
from interaction_checker.services import llm
from interaction_checker.services.interactions import InteractionChecker, clean_drug_names
from interaction_checker.services.openfda import LabelFetchError, OpenFDAClient
from interaction_checker.services.present import translate_sections
from interaction_checker.services.rxnorm import RxNormClient

logger = logging.getLogger(__name__)

AT_LEAST_TWO_DRUGS = 'Please provide an array of at least two drug names in the "drugs" field.'
AT_LEAST_TWO_NON_EMPTY = "Please provide at least two non-empty drug names."
INVALID_JSON = "Invalid JSON payload received."
UNEXPECTED_ERROR = "An unexpected error occurred."

ALLOW_METHODS = "POST, OPTIONS"
ALLOW_HEADERS = "Content-Type"


# ----------------------------
# CORS
# ----------------------------
def resolve_allow_origin(origin: Optional[str], allowed: List[str]) -> str:
    """Wildcard, the caller's origin if allow-listed, else the first allow-listed origin."""
    if not allowed or "*" in allowed:
        return "*"
    if origin and origin in allowed:
        return origin
    return allowed[0]


def cors_headers(origin: Optional[str], allowed: List[str]) -> Dict[str, str]:
    allow_origin = resolve_allow_origin(origin, allowed)
    headers = {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }
    if allow_origin != "*":
        headers["Access-Control-Allow-Credentials"] = "true"
        headers["Vary"] = "Origin"
    return headers


# ----------------------------
# Request validation
# ----------------------------
def validate_drugs(payload: Any) -> List[str]:
    drugs = payload.get("drugs") if isinstance(payload, dict) else None
    if not isinstance(drugs, list) or len(drugs) < 2:
        raise HTTPException(status_code=400, detail=AT_LEAST_TWO_DRUGS)

    names = clean_drug_names(drugs)
    if len(names) < 2:
        raise HTTPException(status_code=400, detail=AT_LEAST_TWO_NON_EMPTY)
    return names


# ----------------------------
# Dependencies
# ----------------------------
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_checker(request: Request) -> InteractionChecker:
    return request.app.state.checker


def get_openfda(request: Request) -> OpenFDAClient:
    return request.app.state.openfda


def get_llm_client(request: Request) -> Optional[OpenAI]:
    return request.app.state.llm_client


async def run_check(request: Request, checker: InteractionChecker) -> List[InteractionFinding]:
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Invalid JSON payload received")
        raise HTTPException(status_code=500, detail=INVALID_JSON)

    drugs = validate_drugs(payload)
    logger.info("Received drugs for interaction check: %s", drugs)

    try:
        return await run_in_threadpool(checker.check, drugs)
    except LabelFetchError as exc:
        logger.error("OpenFDA failed for %s: %s", drugs, exc)
        raise HTTPException(
            status_code=502, detail=f"OpenFDA API Error ({exc.code}): {exc.message}"
        )
    except Exception as exc:
        logger.exception("Error processing interaction check")
        raise HTTPException(status_code=500, detail=str(exc) or UNEXPECTED_ERROR)


# ----------------------------
# FastAPI app
# ----------------------------
def create_app(
    settings: Optional[Settings] = None,
    rxnorm: Optional[RxNormClient] = None,
    openfda: Optional[OpenFDAClient] = None,
    llm_client: Optional[OpenAI] = None,
) -> FastAPI:
    """
    Build the app with its upstream clients. Anything not passed in is
    constructed from settings (environment by default) once per process.
    """
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)

    rxnorm = rxnorm or RxNormClient(base_url=settings.rxnorm_base_url, timeout=settings.http_timeout)
    openfda = openfda or OpenFDAClient(
        label_url=settings.openfda_label_url,
        api_key=settings.openfda_api_key,
        limit=settings.openfda_label_limit,
        timeout=settings.http_timeout,
    )
    if llm_client is None:
        llm_client = llm.make_client(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        rxnorm.close()
        openfda.close()

    app = FastAPI(title="Label Interaction Checker API", version="0.3.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.openfda = openfda
    app.state.llm_client = llm_client
    app.state.checker = InteractionChecker(rxnorm, openfda)

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        headers = cors_headers(request.headers.get("origin"), settings.cors_origins)
        if request.method == "OPTIONS":
            return Response(status_code=200, headers={**headers, "Access-Control-Max-Age": "86400"})
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse({"error": str(exc) or UNEXPECTED_ERROR}, status_code=500, headers=headers)
        response.headers.update(headers)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    # ----------------------------
    # Routes
    # ----------------------------
    @app.get("/")
    def root():
        return {"message": "Label Interaction Checker API is running"}

    @app.get("/health")
    def health(settings: Settings = Depends(get_settings)):
        return {"ok": True, "llm_configured": bool(settings.openai_api_key)}

    @app.post("/check", response_model=InteractionsResponse, response_model_exclude_none=True)
    async def check_interactions(request: Request, checker: InteractionChecker = Depends(get_checker)):
        findings = await run_check(request, checker)
        return {"interactions": findings}

    @app.post("/check/explain", response_model=InteractionsResponse)
    async def check_interactions_explain(
        request: Request,
        style: Literal["plain", "clinical"] = "plain",
        checker: InteractionChecker = Depends(get_checker),
        client: Optional[OpenAI] = Depends(get_llm_client),
        settings: Settings = Depends(get_settings),
    ):
        findings = await run_check(request, checker)
        for finding in findings:
            finding.llm_explanation = await run_in_threadpool(
                llm.explain, client, finding, settings.llm_model, style
            )
        return {"interactions": findings}

    @app.get("/drugs/search", response_model=DrugSearchResponse)
    def search_drug(term: str = "", openfda: OpenFDAClient = Depends(get_openfda)):
        term = term.strip()
        if not term:
            raise HTTPException(status_code=400, detail="Missing search term")

        try:
            label = openfda.search_label(term)
        except LabelFetchError as exc:
            status = int(exc.code) if exc.code.isdigit() else 502
            raise HTTPException(status_code=status, detail=f"OpenFDA API Error: {exc.message}")

        if label is None:
            raise HTTPException(status_code=404, detail="No results found")
        return {"label": label, "sections": translate_sections(label)}

    return app


# Local run
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "interaction_checker.api:create_app",
        factory=True,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
    )
