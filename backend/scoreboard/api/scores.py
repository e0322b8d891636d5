from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from scoreboard.api.deps import (
    current_caller,
    get_leaderboard_service,
    get_score_service,
    limit_by_client,
    submitting_caller,
)
from scoreboard.auth import TokenClaims
from scoreboard.config import settings
from scoreboard.models.score import Score
from scoreboard.services.leaderboard import LeaderboardService
from scoreboard.services.ownership import enforce_score_ownership
from scoreboard.services.scores import MAX_SCORE, ScoreService

router = APIRouter(tags=["scores"])


class SubmitScoreRequest(BaseModel):
    score: int = Field(gt=0, le=MAX_SCORE, strict=True)
    user_id: UUID | None = None
    player_name: str | None = Field(default=None, max_length=50)


class ScoreResponse(BaseModel):
    id: str
    score: int
    user_id: str
    created_at: datetime


class SubmitScoreResponse(BaseModel):
    message: str
    score: ScoreResponse


class ScoreListResponse(BaseModel):
    message: str
    scores: list[ScoreResponse]


class BestScoreResponse(BaseModel):
    message: str
    score: ScoreResponse | None


class LeaderboardEntryResponse(BaseModel):
    rank: int
    player_name: str
    score: int
    achieved_at: datetime


class LeaderboardResponse(BaseModel):
    message: str
    leaderboard: list[LeaderboardEntryResponse]


def _score_response(score: Score) -> ScoreResponse:
    return ScoreResponse(
        id=score.id,
        score=score.score,
        user_id=score.user_id,
        created_at=score.created_at,
    )


@router.post("/scores", response_model=SubmitScoreResponse, status_code=201)
async def submit_score(
    body: SubmitScoreRequest,
    caller: TokenClaims = Depends(submitting_caller),
    service: ScoreService = Depends(get_score_service),
):
    user_id = str(body.user_id) if body.user_id else None
    enforce_score_ownership(caller, user_id=user_id, player_name=body.player_name)
    score = service.submit_score(
        body.score, caller, user_id=user_id, player_name=body.player_name
    )
    return SubmitScoreResponse(
        message="Score submitted successfully", score=_score_response(score)
    )


@router.get(
    "/leaderboard",
    response_model=LeaderboardResponse,
    dependencies=[Depends(limit_by_client)],
)
async def get_leaderboard(
    limit: int | None = Query(default=None),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    entries = service.top_scores(
        limit if limit is not None else settings.leaderboard_default_limit
    )
    return LeaderboardResponse(
        message="Leaderboard retrieved successfully",
        leaderboard=[
            LeaderboardEntryResponse(
                rank=e.rank,
                player_name=e.player_name,
                score=e.score,
                achieved_at=e.achieved_at,
            )
            for e in entries
        ],
    )


@router.get("/scores/me", response_model=ScoreListResponse)
async def get_my_scores(
    caller: TokenClaims = Depends(current_caller),
    service: ScoreService = Depends(get_score_service),
):
    scores = service.recent_scores(caller.subject)
    return ScoreListResponse(
        message="Your scores retrieved successfully",
        scores=[_score_response(s) for s in scores],
    )


@router.get("/scores/me/best", response_model=BestScoreResponse)
async def get_my_best_score(
    caller: TokenClaims = Depends(current_caller),
    service: ScoreService = Depends(get_score_service),
):
    score = service.high_score(caller.subject)
    return BestScoreResponse(
        message="Your best score retrieved successfully",
        score=_score_response(score) if score else None,
    )
