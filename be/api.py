"""FastAPI app: pitch submission, published feed, tags, and AI helpers.

Every response is a ``success``-flagged JSON object. Internal error details are
logged server-side and never returned to the client.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from ai.enrichment import PitchEnricher
from ai.llm import LLMClient, get_llm_client

from .config import settings
from .db import get_session
from .logging_config import setup_logging
from .pipelines.analysis import AnalysisRequestError, analyze_legacy, analyze_pitch
from .pipelines.backfill import QuoteBackfillError, backfill_quotes
from .pipelines.feed import collect_tags, list_published
from .pipelines.submission import (
    PitchSubmission,
    PitchSubmissionError,
    PitchValidationError,
    submit_pitch as submit_pitch_pipeline,
)

logger = logging.getLogger(__name__)


# Pydantic request/response models
class ApiModel(BaseModel):
    """Base for wire models: camelCase aliases, unknown fields ignored."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class ErrorResponse(BaseModel):
    """Error response."""
    success: bool = False
    error: str


class SubmitPitchRequest(ApiModel):
    """Submit pitch request."""
    title: str | None = None
    description: str | None = None
    transcript: str | None = None
    audio_url: str | None = Field(default=None, alias="audioUrl")
    tags: list[Any] | None = None


class PitchIdentityDTO(ApiModel):
    """Identity of a stored pitch."""
    id: int
    uuid: str
    title: str
    status: str


class SubmitPitchResponse(ApiModel):
    """Submit pitch response."""
    success: bool = True
    pitch: PitchIdentityDTO


class FeedItemDTO(ApiModel):
    """Single pitch in the published feed."""
    id: int
    creator: str
    title: str
    avatar: str
    quote: str
    summary: str
    tags: list[str]
    timestamp: str
    audio_url: str | None = Field(default=None, alias="audioUrl")
    transcript: str


class PitchesResponse(ApiModel):
    """Published feed response."""
    success: bool = True
    pitches: list[FeedItemDTO]


class TagCatalogDTO(ApiModel):
    """Available tags."""
    standard: list[str]
    all: list[str]
    existing: list[str]


class TagsResponse(ApiModel):
    """Tags response."""
    success: bool = True
    tags: TagCatalogDTO


class ExtractQuoteRequest(ApiModel):
    """Extract quote request."""
    transcript: str | None = None


class ExtractQuoteResponse(ApiModel):
    """Extract quote response."""
    success: bool = True
    quote: str


class AnalyzeContentRequest(ApiModel):
    """Analyze content request (pitch or legacy shape)."""
    content: str | None = None
    type: str | None = None
    image_analysis: str | None = Field(default=None, alias="imageAnalysis")
    transcript: str | None = None


class SuggestionsDTO(ApiModel):
    """AI suggestions for a pitch."""
    title: str
    summary: str
    tags: list[str]


class LegacyAnalysisDTO(ApiModel):
    """Keyword analysis of free text."""
    source: str
    text: str
    suggested_tags: list[str] = Field(alias="suggestedTags")


class UpdateQuotesResponse(ApiModel):
    """Quote backfill response."""
    success: bool = True
    message: str
    updated: int


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    # Startup
    setup_logging()
    logger.info("Application starting up")

    yield

    # Shutdown
    logger.info("Application shutting down")


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Record, enrich and publish short voice pitches",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_enricher(llm: LLMClient = Depends(get_llm_client)) -> PitchEnricher:
    """Enrichment pipeline bound to the configured text-generation client."""
    return PitchEnricher(llm)


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request, exc: StarletteHTTPException):
    """Render HTTP errors (including 404/405) in the common error shape."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return error_response(exc.status_code, "Method not allowed")
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc: RequestValidationError):
    """Malformed bodies are client errors, reported as 400."""
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")


@app.exception_handler(PitchValidationError)
async def pitch_validation_handler(request, exc: PitchValidationError):
    """Handle missing required pitch fields."""
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(PitchSubmissionError)
async def pitch_submission_handler(request, exc: PitchSubmissionError):
    """Handle storage failures during submission."""
    logger.error(f"Submission error: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to submit pitch")


@app.exception_handler(AnalysisRequestError)
async def analysis_request_handler(request, exc: AnalysisRequestError):
    """Handle analyze-content requests with nothing to analyze."""
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(QuoteBackfillError)
async def backfill_error_handler(request, exc: QuoteBackfillError):
    """Handle backfill read failures."""
    logger.error(f"Backfill error: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update existing quotes")


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        version=settings.version,
    )


@app.get("/")
async def root() -> dict:
    """API index."""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "endpoints": {
            "health": "/health",
            "submit_pitch": "/api/submit-pitch",
            "pitches": "/api/pitches",
            "tags": "/api/tags",
            "extract_quote": "/api/extract-quote",
            "analyze_content": "/api/analyze-content",
            "update_existing_quotes": "/api/update-existing-quotes",
            "docs": "/docs",
        },
    }


@app.post("/api/submit-pitch", response_model=SubmitPitchResponse)
async def submit_pitch(
    request: SubmitPitchRequest,
    session: AsyncSession = Depends(get_session),
    enricher: PitchEnricher = Depends(get_enricher),
) -> SubmitPitchResponse:
    """Validate, enrich with a quote, and publish a pitch."""
    logger.info(f"Submitting pitch: {request.title!r}")

    try:
        submitted = await submit_pitch_pipeline(
            session,
            enricher,
            PitchSubmission(
                title=request.title,
                transcript=request.transcript,
                description=request.description,
                audio_url=request.audio_url,
                tags=request.tags or [],
            ),
        )
    except (PitchValidationError, PitchSubmissionError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error submitting pitch: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit pitch",
        )

    return SubmitPitchResponse(
        pitch=PitchIdentityDTO(
            id=submitted.id,
            uuid=submitted.uuid,
            title=submitted.title,
            status=submitted.status,
        ),
    )


@app.get("/api/pitches", response_model=PitchesResponse)
async def get_pitches(session: AsyncSession = Depends(get_session)) -> PitchesResponse:
    """Published feed with display fields derived at request time."""
    try:
        items = await list_published(session)
    except Exception as e:
        logger.error(f"Error fetching pitches: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch pitches",
        )

    return PitchesResponse(
        pitches=[
            FeedItemDTO(
                id=item.id,
                creator=item.creator,
                title=item.title,
                avatar=item.avatar,
                quote=item.quote,
                summary=item.summary,
                tags=item.tags,
                timestamp=item.timestamp,
                audio_url=item.audio_url,
                transcript=item.transcript,
            )
            for item in items
        ],
    )


@app.get("/api/tags", response_model=TagsResponse)
async def get_tags(session: AsyncSession = Depends(get_session)) -> TagsResponse:
    """Standard vocabulary, all available tags, and tags already in use."""
    try:
        catalog = await collect_tags(session)
    except Exception as e:
        logger.error(f"Error fetching tags: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch tags",
        )

    return TagsResponse(
        tags=TagCatalogDTO(
            standard=catalog.standard,
            all=catalog.all,
            existing=catalog.existing,
        ),
    )


@app.post("/api/extract-quote", response_model=ExtractQuoteResponse)
async def extract_quote(
    request: ExtractQuoteRequest,
    enricher: PitchEnricher = Depends(get_enricher),
) -> ExtractQuoteResponse:
    """Pick a quotable excerpt from a transcript."""
    if not request.transcript:
        return error_response(status.HTTP_400_BAD_REQUEST, "Transcript is required")

    try:
        quote = await enricher.extract_quote(request.transcript)
    except Exception as e:
        logger.error(f"Error extracting quote: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to extract quote",
        )

    return ExtractQuoteResponse(quote=quote)


@app.post("/api/analyze-content")
async def analyze_content(
    request: AnalyzeContentRequest,
    enricher: PitchEnricher = Depends(get_enricher),
) -> dict:
    """AI suggestions for a pitch, or legacy keyword/template analysis."""
    try:
        if request.type == "pitch" and request.content:
            suggestions = await analyze_pitch(enricher, request.content)
            return {
                "success": True,
                "suggestions": SuggestionsDTO(**suggestions.to_dict()).model_dump(by_alias=True),
            }

        analysis = analyze_legacy(request.image_analysis, request.transcript)
        return {
            "success": True,
            "analysis": LegacyAnalysisDTO(
                source=analysis.source,
                text=analysis.text,
                suggested_tags=analysis.suggested_tags,
            ).model_dump(by_alias=True),
            "templates": analysis.templates,
        }

    except AnalysisRequestError:
        raise
    except Exception as e:
        logger.error(f"Error analyzing content: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error analyzing content",
        )


@app.post("/api/update-existing-quotes", response_model=UpdateQuotesResponse)
async def update_existing_quotes(
    session: AsyncSession = Depends(get_session),
    enricher: PitchEnricher = Depends(get_enricher),
) -> UpdateQuotesResponse:
    """Backfill quotes for every pitch stored without one."""
    try:
        result = await backfill_quotes(session, enricher)
    except QuoteBackfillError:
        raise
    except Exception as e:
        logger.error(f"Error updating existing quotes: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update existing quotes",
        )

    return UpdateQuotesResponse(message=result.message, updated=result.updated)
