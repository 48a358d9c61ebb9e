"""Content scanning and keyword filter endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from moderation_engine.api.v1.dependencies import RuleEngineDep
from moderation_engine.schemas.moderation import (
    KeywordFilterCreate,
    KeywordFilterResponse,
    ModerationResultResponse,
    ModerationScanRequest,
)

router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.post("/scan", response_model=ModerationResultResponse)
def auto_moderate_content(
    payload: ModerationScanRequest,
    engine: RuleEngineDep,
) -> ModerationResultResponse:
    """Scan text; a block files a system report for review."""
    result = engine.auto_moderate_content(payload.content_type, payload.content_id, payload.text)
    return ModerationResultResponse.model_validate(result)


@router.get("/keywords", response_model=list[KeywordFilterResponse])
def list_keywords(engine: RuleEngineDep) -> list[KeywordFilterResponse]:
    return [KeywordFilterResponse.model_validate(f) for f in engine.list_keywords()]


@router.post(
    "/keywords",
    response_model=KeywordFilterResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_keyword(payload: KeywordFilterCreate, engine: RuleEngineDep) -> KeywordFilterResponse:
    record = engine.add_keyword(payload.keyword, payload.severity)
    return KeywordFilterResponse.model_validate(record)


@router.delete("/keywords/{filter_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_keyword(filter_id: int, engine: RuleEngineDep) -> None:
    engine.remove_keyword(filter_id)
