"""
API routes — thin HTTP layer over the classifier, relation graph and question service.

Routes:
  GET  /health                                  → API health check
  POST /api/dep/analyze                         → Section summary + anchors to ask
  POST /api/dep/predict                         → Complete a questionnaire from anchor answers
  GET  /api/sections/classify?question_id=      → Section of a question identifier
  GET  /api/sections/{section}/related          → Direct (or transitive) related sections
  GET  /api/sections/relations/verify           → Relation table invariant check
  GET  /api/sections/cache/metrics              → Classifier cache counters
  GET  /api/sections/cache/health               → Classifier cache health
  POST /api/sections/cache/debug                → Toggle classifier instrumentation
  POST /api/sections/cache/monitoring           → Update eviction thresholds
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from dep_autofill.config import get_settings
from dep_autofill.data.sections import SECTION_TITLES
from dep_autofill.models import (
    AnswerValue,
    CacheHealth,
    CacheMetrics,
    PredictionOutcome,
    QuestionData,
    QuestionnaireSummary,
    Section,
)
from dep_autofill.services import (
    QuestionService,
    RelationGraph,
    UnansweredQuestionsError,
    get_section_classifier,
)

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
dep_router = APIRouter()
sections_router = APIRouter()


# ── Request / response schemas ───────────────────────────
class AnalyzeRequest(BaseModel):
    questions: list[QuestionData]
    existing_answers: dict[str, AnswerValue] = {}
    max_questions: Optional[int] = None


class AnalyzeResponse(BaseModel):
    summary: QuestionnaireSummary
    anchor_questions: list[QuestionData] = []
    next_prompt: str = ""


class PredictRequest(BaseModel):
    questions: list[QuestionData]
    anchor_answers: dict[str, AnswerValue] = {}
    allowed_options: dict[str, list[str]] = {}


class ClassifyResponse(BaseModel):
    question_id: str
    section: Optional[Section] = None
    title: Optional[str] = None


class RelatedSectionsResponse(BaseModel):
    section: Section
    transitive: bool
    related: list[Section] = []


class RelationCheckResponse(BaseModel):
    consistent: bool
    all_sections_defined: bool
    violations: list[str] = []


class DebugModeRequest(BaseModel):
    enabled: bool


class MonitoringRequest(BaseModel):
    eviction_threshold: Optional[int] = None
    window_size_ms: Optional[int] = None


class MonitoringResponse(BaseModel):
    eviction_threshold: int
    window_size_ms: int


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Questionnaire ────────────────────────────────────────

@dep_router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_questionnaire(request: AnalyzeRequest):
    """Summarize a questionnaire and list the anchors still to ask."""
    service = QuestionService()
    service.set_total_questions(len(request.questions))

    anchors = service.select_anchor_questions(
        request.questions, request.existing_answers, request.max_questions
    )
    next_prompt = service.build_prompt(anchors[0].id, request.existing_answers) if anchors else ""

    return AnalyzeResponse(
        summary=service.summarize(request.questions),
        anchor_questions=anchors,
        next_prompt=next_prompt,
    )


@dep_router.post("/predict", response_model=PredictionOutcome)
async def predict_questionnaire(request: PredictRequest):
    """Complete a questionnaire. Anchors missing from the request are recorded as skipped."""
    service = QuestionService()
    if request.allowed_options:
        service.set_allowed_options(request.allowed_options)

    try:
        return await service.predict_from_anchors(request.questions, request.anchor_answers)
    except UnansweredQuestionsError as e:
        logger.error(f"Prediction failed: {e}")
        raise HTTPException(
            status_code=500,
            detail={"message": str(e), "question_ids": e.question_ids},
        )


# ── Sections ─────────────────────────────────────────────

def _parse_section(value: str) -> Section:
    try:
        return Section(value)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown section: {value}")


@sections_router.get("/classify", response_model=ClassifyResponse)
def classify_question(question_id: str):
    section = get_section_classifier().classify(question_id)
    return ClassifyResponse(
        question_id=question_id,
        section=section,
        title=SECTION_TITLES.get(section) if section is not None else None,
    )


@sections_router.get("/relations/verify", response_model=RelationCheckResponse)
def verify_relations():
    graph = RelationGraph()
    violations = graph.find_violations()
    return RelationCheckResponse(
        consistent=not violations,
        all_sections_defined=graph.verify_all_sections_have_relation(),
        violations=violations,
    )


@sections_router.get("/{section}/related", response_model=RelatedSectionsResponse)
def related_sections(section: str, transitive: bool = False):
    parsed = _parse_section(section)
    graph = RelationGraph()
    related = graph.all_related_sections(parsed) if transitive else graph.related_sections(parsed)
    return RelatedSectionsResponse(section=parsed, transitive=transitive, related=related)


# ── Classifier cache ─────────────────────────────────────

@sections_router.get("/cache/metrics", response_model=CacheMetrics)
def cache_metrics():
    return get_section_classifier().cache_metrics()


@sections_router.get("/cache/health", response_model=CacheHealth)
def cache_health():
    return get_section_classifier().check_health()


@sections_router.post("/cache/debug")
def set_cache_debug(request: DebugModeRequest):
    classifier = get_section_classifier()
    classifier.set_debug_mode(request.enabled)
    return {"debug": classifier.debug}


@sections_router.post("/cache/monitoring", response_model=MonitoringResponse)
def configure_cache_monitoring(request: MonitoringRequest):
    classifier = get_section_classifier()
    classifier.configure_monitoring(
        eviction_threshold=request.eviction_threshold,
        window_size_ms=request.window_size_ms,
    )
    return MonitoringResponse(
        eviction_threshold=classifier.eviction_threshold,
        window_size_ms=classifier.window_size_ms,
    )
