"""
HTTP routes for site analysis and stored results.

Successful responses carry ``success: true``; failures carry
``{success: false, error, details?}`` with a non-2xx status.
"""

from __future__ import annotations

from typing import Any

import fastapi
from starlette import responses

from dataguardian.analysis import classifier, network_graph, scoring
from dataguardian.models import site, tracking
from dataguardian.pipeline import analyzer as analyzer_mod
from dataguardian.pipeline import crawler
from dataguardian.storage import site_store
from dataguardian.utils import errors, logger, serialization, settings as settings_mod

log = logger.create_logger("Routes")

router = fastapi.APIRouter()


# ============================================================================
# Dependencies and response helpers
# ============================================================================


def get_analyzer(request: fastapi.Request) -> analyzer_mod.SiteAnalyzer:
    return request.app.state.analyzer


def get_store(request: fastapi.Request) -> site_store.SiteStore:
    store: site_store.SiteStore = request.app.state.analyzer.store
    if not store.is_available():
        raise errors.StorageError("Database not available")
    return store


def error_response(status_code: int, error: str, details: str | None = None) -> responses.JSONResponse:
    body: dict[str, Any] = {"success": False, "error": error}
    if details:
        body["details"] = details
    return responses.JSONResponse(status_code=status_code, content=body)


def site_payload(record: site.AnalysisResult) -> dict[str, Any]:
    """Wire form of a stored site plus derived, non-persisted fields."""
    payload = serialization.to_wire(record)
    payload["trackerCount"] = len(record.trackers)
    payload["summary"] = scoring.generate_site_summary(record.score, len(record.trackers), record.ai_summary)
    if record.ai_summary:
        payload["categoryCounts"] = classifier.category_counts(record.ai_summary.tracker_details)
    return payload


def _find(store: site_store.SiteStore, url: str) -> site.AnalysisResult | None:
    return store.find_by_url(url.strip())


# ============================================================================
# Analysis
# ============================================================================


@router.post("/analyze")
async def analyze_site(
    body: site.AnalysisRequest,
    analyzer: analyzer_mod.SiteAnalyzer = fastapi.Depends(get_analyzer),
) -> responses.JSONResponse:
    """Analyse a site, or return its cached analysis while fresh."""
    log.info("Incoming analysis request", {"url": body.url, "forceRefresh": body.force_refresh})
    outcome = await analyzer.analyze(body)
    if not outcome.success or outcome.site is None:
        return error_response(500, outcome.error or "Analysis failed", outcome.details)

    content: dict[str, Any] = {
        "success": True,
        "message": outcome.message,
        "fromCache": outcome.from_cache,
        "site": site_payload(outcome.site),
    }
    if outcome.warning:
        content["warning"] = outcome.warning
    return responses.JSONResponse(status_code=200 if outcome.from_cache else 201, content=content)


@router.post("/detect")
async def detect_batch(
    body: tracking.BatchDetectRequest,
    request: fastapi.Request,
) -> dict[str, Any]:
    """Run tracker detection over several URLs, one at a time."""
    settings: settings_mod.AppSettings = request.app.state.settings
    results = await crawler.detect_trackers_for_urls(body.urls, body.options, delay_ms=settings.batch_delay_ms)
    return {"success": True, "results": [serialization.to_wire(r) for r in results]}


@router.post("/sites/what-if")
async def what_if(
    body: site.WhatIfRequest,
    store: site_store.SiteStore = fastapi.Depends(get_store),
) -> Any:
    """Rescore a stored site as if the given categories were blocked."""
    record = _find(store, body.url)
    if record is None:
        return error_response(404, "Site not found")
    blocked = set(body.blocked_categories) | scoring.blocked_categories_from_settings(body.settings)
    result = scoring.recalculate_score_and_grade(record, blocked)
    return {"success": True, "score": result.score, "grade": result.grade, "blockedCategories": sorted(blocked)}


# ============================================================================
# Stored results
# ============================================================================


@router.get("/sites")
async def list_sites(store: site_store.SiteStore = fastapi.Depends(get_store)) -> dict[str, Any]:
    sites = store.list_all()
    return {"success": True, "count": len(sites), "sites": [site_payload(s) for s in sites]}


@router.get("/sites/lookup")
async def get_site(
    url: str = fastapi.Query(..., description="The analysed URL"),
    store: site_store.SiteStore = fastapi.Depends(get_store),
) -> Any:
    record = _find(store, url)
    if record is None:
        return error_response(404, "Site not found")
    return {"success": True, "site": site_payload(record)}


@router.get("/sites/ai-summary")
async def get_ai_summary(
    url: str = fastapi.Query(..., description="The analysed URL"),
    store: site_store.SiteStore = fastapi.Depends(get_store),
) -> Any:
    record = _find(store, url)
    if record is None:
        return error_response(404, "Site not found")
    if record.ai_summary is None:
        return error_response(404, "AI summary not available for this site")
    return {
        "success": True,
        "url": record.url,
        "aiSummary": serialization.to_wire(record.ai_summary),
        "lastAnalyzed": record.last_analyzed.isoformat(),
    }


@router.get("/network")
async def get_network_graph(
    url: str = fastapi.Query(..., description="The analysed URL"),
    store: site_store.SiteStore = fastapi.Depends(get_store),
) -> Any:
    record = _find(store, url)
    if record is None:
        return error_response(404, "Site not found")
    graph = network_graph.build_network_graph(record)
    content = serialization.to_wire(graph)
    content["success"] = True
    content["userSummary"] = scoring.generate_site_summary(record.score, len(record.trackers), record.ai_summary)
    if record.ai_summary:
        content["aiSummary"] = serialization.to_wire(record.ai_summary)
    return content


@router.get("/rules")
async def get_rules() -> dict[str, Any]:
    """Classifier rule table in precedence order."""
    return {"success": True, "rules": classifier.export_rules()}


@router.get("/health")
async def health(request: fastapi.Request) -> dict[str, Any]:
    analyzer: analyzer_mod.SiteAnalyzer = request.app.state.analyzer
    return {"success": True, "status": "ok", "storage": analyzer.store.is_available()}


# ============================================================================
# Error handlers
# ============================================================================


def register_error_handlers(app: fastapi.FastAPI) -> None:
    """Map storage outages to 503 and unexpected errors to 500."""

    @app.exception_handler(errors.StorageError)
    async def _storage_unavailable(_request: fastapi.Request, exc: errors.StorageError) -> responses.JSONResponse:
        log.warn("Storage unavailable", {"error": str(exc)})
        return error_response(503, "Database not available", str(exc))

    @app.exception_handler(Exception)
    async def _unhandled(_request: fastapi.Request, exc: Exception) -> responses.JSONResponse:
        log.error("Unhandled error", {"error": errors.get_error_message(exc)})
        settings: settings_mod.AppSettings = app.state.settings
        details = None if settings.is_production else repr(exc)
        return error_response(500, errors.get_error_message(exc), details)
