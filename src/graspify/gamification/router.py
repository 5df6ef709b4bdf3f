"""Progress API endpoints: catalog reads and per-user ledger operations."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, Path

from graspify.gamification import catalog
from graspify.gamification.activities import ActivityRecorder, AnyActivity
from graspify.gamification.ledger import LedgerEvent, ProgressLedger
from graspify.gamification.levels import level_progress, level_title, xp_at_level_start
from graspify.gamification.schemas import (
    ActivityResponse,
    AdvanceMissionRequest,
    AllBadgesResponse,
    AllMissionsResponse,
    AwardXPRequest,
    BadgeResponse,
    BadgeUnlockResponse,
    CounterResponse,
    LevelInfo,
    LevelResponse,
    MissionResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    ProgressResponse,
    StreakResponse,
    XPAwardResponse,
)
from graspify.gamification.service import EmailInUseError, ProgressService, get_progress_service

router = APIRouter(prefix="/api/v1", tags=["Progress"])

UserId = Annotated[str, Path(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_.:@-]+$")]


def _progress_response(ledger: ProgressLedger) -> ProgressResponse:
    state = ledger.state
    progress = ledger.level_progress()
    return ProgressResponse(
        profile=ProfileResponse(**state.profile.model_dump()),
        level=LevelInfo(
            level=state.profile.level,
            title=ledger.level_title(),
            xp_into_level=progress.xp_into_level,
            xp_for_level=progress.xp_for_level,
            percent=progress.percent,
        ),
        streak_multiplier=ledger.streak_multiplier(),
        badges=[BadgeResponse(**b.model_dump()) for b in state.badges],
        missions_date=state.missions_date,
        missions=[MissionResponse(**m.model_dump()) for m in state.missions],
        counters=state.counters,
    )


# ── Catalog ──


@router.get("/badges", response_model=AllBadgesResponse)
async def list_badges():
    """All badge definitions."""
    return AllBadgesResponse(badges=[BadgeResponse(**b.model_dump()) for b in catalog.fresh_badges()])


@router.get("/missions", response_model=AllMissionsResponse)
async def list_missions():
    """The daily mission set as it looks at the start of a day."""
    return AllMissionsResponse(
        missions=[MissionResponse(**m.model_dump()) for m in catalog.fresh_missions()]
    )


@router.get("/levels/{level}", response_model=LevelResponse)
async def get_level(level: int = Path(ge=1, le=10_000)):
    """XP threshold and title for a level."""
    return LevelResponse(
        level=level,
        title=level_title(level),
        xp_required=xp_at_level_start(level),
        xp_for_level=level_progress(xp_at_level_start(level), level).xp_for_level,
    )


# ── Per-user progress ──


@router.get("/users/{user_id}/progress", response_model=ProgressResponse)
async def get_progress(
    user_id: UserId,
    service: ProgressService = Depends(get_progress_service),
):
    """Full progress snapshot with derived level, title and multiplier."""
    async with service.session(user_id) as ledger:
        return _progress_response(ledger)


@router.patch("/users/{user_id}/profile", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdateRequest,
    user_id: UserId,
    service: ProgressService = Depends(get_progress_service),
):
    try:
        profile = await service.update_profile(
            user_id, name=body.name, email=body.email, avatar=body.avatar
        )
    except EmailInUseError as e:
        raise HTTPException(status_code=409, detail="Email already in use") from e
    return ProfileResponse(**profile.model_dump())


@router.post("/users/{user_id}/streak", response_model=StreakResponse)
async def roll_streak(
    user_id: UserId,
    service: ProgressService = Depends(get_progress_service),
):
    """Record today's visit. Safe to call on every page load."""
    async with service.session(user_id) as ledger:
        ledger.roll_daily_streak()
        profile = ledger.state.profile
        return StreakResponse(
            streak=profile.streak,
            last_active_date=profile.last_active_date,
            multiplier=ledger.streak_multiplier(),
        )


@router.post("/users/{user_id}/xp", response_model=XPAwardResponse)
async def award_xp(
    body: AwardXPRequest,
    user_id: UserId,
    service: ProgressService = Depends(get_progress_service),
):
    if body.amount is None and catalog.XP_REWARDS[body.activity] is None:
        raise HTTPException(status_code=422, detail=f"Activity {body.activity} requires an amount")

    async with service.session(user_id) as ledger:
        award = ledger.award_xp(body.activity, body.amount)
        profile = ledger.state.profile
        return XPAwardResponse(
            xp_gained=award.xp_gained,
            leveled_up=award.leveled_up,
            new_level=award.new_level,
            total_xp=profile.xp,
            level=profile.level,
        )


@router.post("/users/{user_id}/badges/{badge_id}/unlock", response_model=BadgeUnlockResponse)
async def unlock_badge(
    badge_id: str,
    user_id: UserId,
    service: ProgressService = Depends(get_progress_service),
):
    """Unlock a badge. ``badge`` is null when it was already unlocked."""
    if badge_id not in catalog.BADGE_IDS:
        raise HTTPException(status_code=404, detail="Badge not found")

    async with service.session(user_id) as ledger:
        badge = ledger.unlock_badge(badge_id)
        return BadgeUnlockResponse(
            badge=BadgeResponse(**badge.model_dump()) if badge else None,
            total_xp=ledger.state.profile.xp,
        )


@router.post("/users/{user_id}/missions/reset", response_model=AllMissionsResponse)
async def reset_missions(
    user_id: UserId,
    service: ProgressService = Depends(get_progress_service),
):
    """Discard today's mission progress."""
    async with service.session(user_id) as ledger:
        ledger.reset_daily_missions()
        return AllMissionsResponse(
            missions=[MissionResponse(**m.model_dump()) for m in ledger.state.missions]
        )


@router.post("/users/{user_id}/missions/{category}/advance", response_model=AllMissionsResponse)
async def advance_mission(
    category: str,
    user_id: UserId,
    body: AdvanceMissionRequest | None = None,
    service: ProgressService = Depends(get_progress_service),
):
    if category not in catalog.MISSION_CATEGORIES:
        raise HTTPException(status_code=404, detail="Mission category not found")

    amount = body.amount if body is not None else 1
    async with service.session(user_id) as ledger:
        ledger.advance_mission(category, amount)
        return AllMissionsResponse(
            missions=[MissionResponse(**m.model_dump()) for m in ledger.state.missions]
        )


@router.post("/users/{user_id}/counters/{counter}", response_model=CounterResponse)
async def increment_counter(
    counter: str,
    user_id: UserId,
    service: ProgressService = Depends(get_progress_service),
):
    if counter not in catalog.COUNTER_NAMES:
        raise HTTPException(status_code=404, detail="Counter not found")

    async with service.session(user_id) as ledger:
        unlocked: list[str] = []

        def on_event(event: LedgerEvent) -> None:
            if event.kind == "badge_unlocked":
                unlocked.append(event.payload["badge_id"])

        unsubscribe = ledger.subscribe(on_event)
        try:
            ledger.increment_counter(counter)
        finally:
            unsubscribe()
        return CounterResponse(
            counter=counter,
            value=getattr(ledger.state.counters, counter),
            badges_unlocked=unlocked,
        )


@router.post("/users/{user_id}/activities", response_model=ActivityResponse)
async def record_activity(
    activity: Annotated[AnyActivity, Body(discriminator="type")],
    user_id: UserId,
    service: ProgressService = Depends(get_progress_service),
):
    """Record a learning activity and apply all of its rewards."""
    async with service.session(user_id) as ledger:
        outcome = ActivityRecorder(ledger).record(activity)
        profile = ledger.state.profile
        return ActivityResponse(
            xp_gained=outcome.xp_gained,
            leveled_up=outcome.leveled_up,
            new_level=outcome.new_level,
            badges_unlocked=outcome.badges_unlocked,
            missions_completed=outcome.missions_completed,
            total_xp=profile.xp,
            level=profile.level,
        )
