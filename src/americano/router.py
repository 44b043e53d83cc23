import logging
from pathlib import Path

from fastapi import APIRouter, Form, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_session
from americano.exceptions import AmericanoError
from americano.functions import generate_next_round, submit_match_score
from americano.models import Tournament
from americano.roster import (
    add_player, remove_player, shuffle_order, update_settings, reset_tournament,
)
from americano.storage import load_tournament, save_tournament, tournament_to_dict
from americano.views import page_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/americano', tags=['Americano'])
PACKAGE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=PACKAGE_DIR / "templates")

CONFIRM_VALUES = {"1", "true", "on", "yes"}

# -- Helpers -------------------------------------------------------------------

def _redirect() -> RedirectResponse:
    return RedirectResponse("/americano/", status_code=303)


def _rejected(action: str, exc: AmericanoError) -> HTTPException:
    logger.info("%s rejected: %s", action, exc)
    return HTTPException(status_code=400, detail=str(exc))


async def _save(session: AsyncSession, t: Tournament) -> RedirectResponse:
    await save_tournament(session, t)
    await session.commit()
    return _redirect()


def _parse_score(raw: str):
    # plain digits only, int() would also take "2_1" or "+21"
    raw = raw.strip()
    if not raw.isdecimal():
        return None
    return int(raw)

# Routes

@router.get("/", response_class=HTMLResponse)
async def index(request: Request, session: AsyncSession = Depends(get_session)):
    t = await load_tournament(session)
    return templates.TemplateResponse(request, "americano/index.html", page_context(t))

@router.get("/state")
async def state(session: AsyncSession = Depends(get_session)):
    t = await load_tournament(session)
    return tournament_to_dict(t)

@router.post("/settings")
async def save_settings(
    courts: str = Form(""),
    max_points: str = Form(""),
    session: AsyncSession = Depends(get_session),
):
    t = await load_tournament(session)
    update_settings(t, courts, max_points)
    return await _save(session, t)

@router.post("/players")
async def create_player(
    name: str = Form(""),
    session: AsyncSession = Depends(get_session),
):
    t = await load_tournament(session)
    try:
        add_player(t, name)
    except AmericanoError as exc:
        raise _rejected("Add player", exc)
    return await _save(session, t)

@router.post("/players/{player_id}/delete")
async def delete_player(player_id: str, session: AsyncSession = Depends(get_session)):
    t = await load_tournament(session)
    try:
        removed = remove_player(t, player_id)
    except AmericanoError as exc:
        raise _rejected("Remove player", exc)
    if removed is None:
        return _redirect()
    return await _save(session, t)

@router.post("/shuffle")
async def shuffle(session: AsyncSession = Depends(get_session)):
    t = await load_tournament(session)
    if len(t.players) < 2:
        return _redirect()
    shuffle_order(t)
    return await _save(session, t)

@router.post("/rounds/next")
async def next_round(session: AsyncSession = Depends(get_session)):
    t = await load_tournament(session)
    try:
        generate_next_round(t)
    except AmericanoError as exc:
        raise _rejected("Next round", exc)
    return await _save(session, t)

@router.post("/matches/{match_id}/score")
async def submit_score(
    match_id: str,
    score_a: str = Form(""),
    score_b: str = Form(""),
    session: AsyncSession = Depends(get_session),
):
    t = await load_tournament(session)
    try:
        submit_match_score(t, match_id, _parse_score(score_a), _parse_score(score_b))
    except AmericanoError as exc:
        raise _rejected("Score", exc)
    return await _save(session, t)

@router.post("/reset")
async def reset(
    confirm: str = Form(""),
    session: AsyncSession = Depends(get_session),
):
    if confirm.strip().lower() not in CONFIRM_VALUES:
        raise HTTPException(status_code=400, detail="Reset must be confirmed")
    return await _save(session, reset_tournament())
