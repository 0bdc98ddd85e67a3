"""Confirmation routes for binding episode stages to checkboxes.

HTML checkboxes are usually paired with a hidden input carrying "0", so
an unticked box still submits a value. These routes feed that value
straight into the episode's confirmable property, which clears the stage
on "0" and confirms it (without overwriting an earlier confirmation)
on anything else.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlmodel import Session

from confirmable.core.config import settings
from confirmable.core.current_user import acting_as, is_user_id, parse_user_id
from confirmable.core.database import get_session
from confirmable.models import Episode, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/episodes/{episode_id}/confirmations", tags=["confirmations"])


def wants_json(request: Request) -> bool:
    """Check if the client prefers JSON response (AJAX request)."""
    accept = request.headers.get("accept", "")
    return "application/json" in accept


def current_user(request: Request, session: Session) -> User | None:
    """Resolve the acting user from the configured request header."""
    user_id = parse_user_id(request.headers.get(settings.current_user_header))
    if user_id is None:
        return None
    return session.get(User, user_id)


def get_episode_or_404(session: Session, episode_id: UUID) -> Episode:
    episode = session.get(Episode, episode_id)
    if not episode:
        raise HTTPException(status_code=404, detail="Episode not found")
    return episode


def check_confirmable(name: str):
    if name not in Episode.confirmable_names():
        raise HTTPException(status_code=404, detail=f"Unknown confirmation: {name}")


def confirmation_state(episode: Episode, name: str) -> dict:
    """Serializable view of one confirmable attribute."""
    field = Episode.confirmable_field(name)
    confirmed_at = episode.confirmed_at(name)
    return {
        "confirmed": episode.is_confirmed(name),
        "confirmed_at": confirmed_at.isoformat() if confirmed_at else None,
        "confirmed_by": getattr(episode, field.by_field),
    }


@router.get("")
async def list_confirmations(episode_id: UUID, session: Session = Depends(get_session)):
    """
    Get confirmation state of every stage of an episode.

    Returns a JSON object keyed by stage name, each entry holding whether
    the stage is confirmed, when, and by which user id.
    """
    episode = get_episode_or_404(session, episode_id)
    return {name: confirmation_state(episode, name) for name in Episode.confirmable_names()}


@router.post("/{name}")
async def set_confirmation(
    episode_id: UUID,
    name: str,
    request: Request,
    value: str = Form("0"),
    session: Session = Depends(get_session),
):
    """
    Apply a checkbox value to one stage.

    "0" (the default when only the hidden input is submitted) clears the
    confirmation. Any other value confirms the stage on behalf of the user
    named by the current-user header, falling back to the default
    confirmer when the header is missing or unknown. A date or datetime
    string is used as the confirmation time. Re-confirming an already
    confirmed stage keeps the original time and confirmer.
    """
    episode = get_episode_or_404(session, episode_id)
    check_confirmable(name)

    with acting_as(current_user(request, session)):
        setattr(episode, name, value)
    session.add(episode)
    session.commit()
    session.refresh(episode)

    if wants_json(request):
        return JSONResponse({"success": True, "name": name, **confirmation_state(episode, name)})

    return RedirectResponse(f"/episodes/{episode_id}/confirmations", status_code=303)


@router.post("/{name}/confirmer")
async def assign_confirmer(
    episode_id: UUID,
    name: str,
    request: Request,
    confirmer_id: int | None = Form(None),
    session: Session = Depends(get_session),
):
    """
    Set or clear the user recorded as confirmer of a stage.

    Omitting confirmer_id clears it. The confirmation time is not changed,
    so a stage only counts as confirmed if it already has one. Returns 404
    if the user does not exist.
    """
    episode = get_episode_or_404(session, episode_id)
    check_confirmable(name)

    who = None
    if confirmer_id is not None:
        if not is_user_id(confirmer_id):
            raise HTTPException(status_code=404, detail="User not found")
        who = session.get(User, confirmer_id)
        if not who:
            raise HTTPException(status_code=404, detail="User not found")

    episode.set_confirmer(name, who, session=session)
    session.commit()
    session.refresh(episode)
    logger.info(f"Episode {episode_id}: {name} confirmer set to {confirmer_id}")

    if wants_json(request):
        return JSONResponse({"success": True, "name": name, **confirmation_state(episode, name)})

    return RedirectResponse(f"/episodes/{episode_id}/confirmations", status_code=303)
