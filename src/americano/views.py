"""Read-only projections of a Tournament, one per section of the page."""
from typing import List, Optional

from americano.functions import (
    calculate_standings, clamp_int, player_name,
    COURTS_RANGE, MIN_PLAYERS, PLAYERS_PER_COURT,
)
from americano.models import Tournament

HISTORY_LIMIT = 20


def settings_view(t: Tournament) -> dict:
    return {"courts": t.settings.courts, "max_points": t.settings.max_points}


def _players_hint(count: int, courts: int) -> str:
    needed = courts * PLAYERS_PER_COURT
    if count < MIN_PLAYERS:
        return f"Add at least {MIN_PLAYERS} players to start."
    if count < needed:
        used = count // PLAYERS_PER_COURT
        return (
            f"{count} players. {courts} court(s) need {needed} to fill them all, "
            f"this round will only use {used} court(s)."
        )
    if count > needed:
        return f"{count} players. With {courts} court(s) {needed} play each round, the rest sit out."
    return f"Perfect. {needed} players fill {courts} court(s)."


def players_view(t: Tournament) -> dict:
    courts = clamp_int(t.settings.courts, *COURTS_RANGE)
    return {
        "players": [{"id": p.id, "name": p.name} for p in t.players],
        "hint": _players_hint(len(t.players), courts),
        "can_shuffle": len(t.players) >= 2,
        "can_start": len(t.players) >= MIN_PLAYERS,
    }


def _team_names(t: Tournament, team: List[str]) -> List[str]:
    return [player_name(t, pid) for pid in team]


def round_view(t: Tournament) -> Optional[dict]:
    r = t.current_round
    if r is None:
        return None
    return {
        "round_no": r.round_no,
        "max_points": t.settings.max_points,
        "sitting_out": [player_name(t, pid) for pid in r.sitting_out],
        "matches": [
            {
                "id": m.id,
                "court": m.court,
                "team_a": _team_names(t, m.team_a),
                "team_b": _team_names(t, m.team_b),
            }
            for m in r.matches
        ],
    }


def standings_view(t: Tournament) -> List[dict]:
    return calculate_standings(t)


def history_view(t: Tournament, limit: int = HISTORY_LIMIT) -> List[dict]:
    return [
        {
            "round_no": h.round_no,
            "court": h.court,
            "team_a": _team_names(t, h.team_a),
            "team_b": _team_names(t, h.team_b),
            "score_a": h.score_a,
            "score_b": h.score_b,
            "timestamp": h.timestamp,
        }
        for h in t.history[:limit]
    ]


def page_context(t: Tournament) -> dict:
    return {
        "settings": settings_view(t),
        "roster": players_view(t),
        "round": round_view(t),
        "standings": standings_view(t),
        "history": history_view(t),
    }
