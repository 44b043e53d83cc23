"""
Session snapshot persistence.

The whole Tournament is stored as one JSON document under a versioned key.
Reading is strict per field: absent fields take their defaults, fields of
the wrong shape make the snapshot malformed, and a malformed snapshot is
replaced by a fresh session on load.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from americano.exceptions import MalformedPersistedState
from americano.functions import clamp_int, COURTS_RANGE, MAX_POINTS_RANGE
from americano.models import (
    Player, Settings, Match, Round, ScoreRow, HistoryEntry, Tournament,
)
from database import SessionStateORM

logger = logging.getLogger(__name__)

STATE_KEY = "padelAmericanoState_v1"
SCHEMA_VERSION = 1


# -- Serialization -------------------------------------------------------------

def _match_to_dict(m: Match) -> dict:
    return {"id": m.id, "court": m.court, "team_a": list(m.team_a), "team_b": list(m.team_b)}


def tournament_to_dict(t: Tournament) -> Dict[str, Any]:
    current = None
    if t.current_round is not None:
        current = {
            "round_no": t.current_round.round_no,
            "matches": [_match_to_dict(m) for m in t.current_round.matches],
            "sitting_out": list(t.current_round.sitting_out),
        }
    return {
        "version": SCHEMA_VERSION,
        "settings": {"courts": t.settings.courts, "max_points": t.settings.max_points},
        "players": [{"id": p.id, "name": p.name} for p in t.players],
        "order": list(t.order),
        "round_no": t.round_no,
        "current_round": current,
        "history": [
            {
                "round_no": h.round_no,
                "court": h.court,
                "team_a": list(h.team_a),
                "team_b": list(h.team_b),
                "score_a": h.score_a,
                "score_b": h.score_b,
                "timestamp": h.timestamp,
            }
            for h in t.history
        ],
        "scores": {
            pid: {"points": row.points, "matches_played": row.matches_played}
            for pid, row in t.scores.items()
        },
    }


# -- Deserialization -----------------------------------------------------------

def _expect(cond: bool, reason: str):
    if not cond:
        raise MalformedPersistedState(reason)


def _int(value, name: str, minimum: int = 0) -> int:
    _expect(
        isinstance(value, int) and not isinstance(value, bool) and value >= minimum,
        f"{name} must be an integer >= {minimum}",
    )
    return value


def _str(value, name: str) -> str:
    _expect(isinstance(value, str) and value != "", f"{name} must be a non-empty string")
    return value


def _dict(value, name: str) -> dict:
    _expect(isinstance(value, dict), f"{name} must be an object")
    return value


def _list(value, name: str) -> list:
    _expect(isinstance(value, list), f"{name} must be a list")
    return value


def _ids(value, name: str) -> List[str]:
    return [_str(v, name) for v in _list(value, name)]


def _team(value, name: str) -> List[str]:
    team = _ids(value, name)
    _expect(len(team) == 2, f"{name} must hold two players")
    return team


def _player_from(data) -> Player:
    data = _dict(data, "player")
    return Player(id=_str(data.get("id"), "player.id"), name=_str(data.get("name"), "player.name"))


def _settings_from(data) -> Settings:
    data = _dict(data, "settings")
    defaults = Settings()
    courts = _int(data.get("courts", defaults.courts), "settings.courts")
    max_points = _int(data.get("max_points", defaults.max_points), "settings.max_points")
    # stored values are held to the same ranges as update_settings
    return Settings(
        courts=clamp_int(courts, *COURTS_RANGE),
        max_points=clamp_int(max_points, *MAX_POINTS_RANGE),
    )


def _round_from(data) -> Round:
    data = _dict(data, "current_round")
    matches = []
    for m in _list(data.get("matches", []), "current_round.matches"):
        m = _dict(m, "match")
        matches.append(Match(
            id=_str(m.get("id"), "match.id"),
            court=_int(m.get("court"), "match.court", 1),
            team_a=_team(m.get("team_a"), "match.team_a"),
            team_b=_team(m.get("team_b"), "match.team_b"),
        ))
    return Round(
        round_no=_int(data.get("round_no"), "current_round.round_no", 1),
        matches=matches,
        sitting_out=_ids(data.get("sitting_out", []), "current_round.sitting_out"),
    )


def _history_from(data) -> List[HistoryEntry]:
    entries = []
    for h in _list(data, "history"):
        h = _dict(h, "history entry")
        entries.append(HistoryEntry(
            round_no=_int(h.get("round_no"), "history.round_no", 1),
            court=_int(h.get("court"), "history.court", 1),
            team_a=_team(h.get("team_a"), "history.team_a"),
            team_b=_team(h.get("team_b"), "history.team_b"),
            score_a=_int(h.get("score_a"), "history.score_a"),
            score_b=_int(h.get("score_b"), "history.score_b"),
            timestamp=_str(h.get("timestamp"), "history.timestamp"),
        ))
    return entries


def _scores_from(data) -> Dict[str, ScoreRow]:
    scores = {}
    for pid, row in _dict(data, "scores").items():
        row = _dict(row, "score row")
        scores[_str(pid, "scores key")] = ScoreRow(
            points=_int(row.get("points", 0), "scores.points"),
            matches_played=_int(row.get("matches_played", 0), "scores.matches_played"),
        )
    return scores


def tournament_from_dict(data) -> Tournament:
    """
    Build a Tournament from a stored snapshot.

    Raises MalformedPersistedState on an unknown version or a field of the
    wrong shape. Absent fields fall back to their defaults.
    """
    data = _dict(data, "snapshot")
    version = data.get("version", SCHEMA_VERSION)
    _expect(version == SCHEMA_VERSION, f"unsupported schema version {version!r}")

    t = Tournament()
    if "settings" in data:
        t.settings = _settings_from(data["settings"])
    if "players" in data:
        t.players = [_player_from(p) for p in _list(data["players"], "players")]
    if "order" in data:
        t.order = _ids(data["order"], "order")
    if "round_no" in data:
        t.round_no = _int(data["round_no"], "round_no")
    if data.get("current_round") is not None:
        t.current_round = _round_from(data["current_round"])
    if "history" in data:
        t.history = _history_from(data["history"])
    if "scores" in data:
        t.scores = _scores_from(data["scores"])

    # every active player has a score row and a place in the queue
    for p in t.players:
        t.ensure_score_row(p.id)
    if not t.order:
        t.order = t.player_ids()
    return t


# -- Load / save ---------------------------------------------------------------

async def load_tournament(session: AsyncSession, key: str = STATE_KEY) -> Tournament:
    row = await session.get(SessionStateORM, key)
    if row is None:
        return Tournament()
    try:
        return tournament_from_dict(row.payload)
    except MalformedPersistedState as exc:
        logger.warning("Ignoring stored session %s: %s", key, exc.reason)
        return Tournament()


async def save_tournament(session: AsyncSession, t: Tournament, key: str = STATE_KEY) -> None:
    payload = tournament_to_dict(t)
    row = await session.get(SessionStateORM, key)
    if row is None:
        session.add(SessionStateORM(key=key, schema_version=SCHEMA_VERSION, payload=payload))
    else:
        row.schema_version = SCHEMA_VERSION
        row.payload = payload
    await session.flush()
