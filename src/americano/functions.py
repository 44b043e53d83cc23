import logging
import re
from datetime import datetime, timezone
from typing import List

from americano.exceptions import (
    InsufficientPlayers, NoActiveRound, MatchNotFound, InvalidScore,
    ScoreExceedsMax, TieNotSupported, NoWinnerAtMax,
)
from americano.models import Match, Round, HistoryEntry, Tournament, generate_id

logger = logging.getLogger(__name__)

MIN_PLAYERS = 4
PLAYERS_PER_COURT = 4
COURTS_RANGE = (1, 8)
MAX_POINTS_RANGE = (5, 99)
UNKNOWN_PLAYER = "Unknown"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def clamp_int(value, lo: int, hi: int) -> int:
    """
    Forgiving integer input: parse the leading integer of ``value`` and
    clamp it into [lo, hi]. Anything without a leading integer
    (None, "", "abc", nan) becomes ``lo``.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        n = value
    else:
        m = _LEADING_INT.match(str(value))
        if not m:
            return lo
        n = int(m.group(1))
    return max(lo, min(hi, n))


def rotate_order(order: List[str]) -> List[str]:
    """Move the first id to the end."""
    if len(order) <= 1:
        return list(order)
    return [*order[1:], order[0]]


def reconcile_order(order: List[str], player_ids: List[str]) -> List[str]:
    """Drop ids of removed players, append missing ones in roster order."""
    active = set(player_ids)
    seen = set()
    result = []
    for pid in order:
        if pid in active and pid not in seen:
            result.append(pid)
            seen.add(pid)
    result.extend(pid for pid in player_ids if pid not in seen)
    return result


def generate_next_round(t: Tournament) -> Round:
    """
    Rotate the queue by one and draw the next round from its front.

    Groups of four consecutive ids fill courts 1..n, first pair vs second
    pair. Whoever does not fit on a full court sits out.
    """
    if len(t.players) < MIN_PLAYERS:
        raise InsufficientPlayers(len(t.players), MIN_PLAYERS)

    courts = clamp_int(t.settings.courts, *COURTS_RANGE)
    needed = courts * PLAYERS_PER_COURT

    order = reconcile_order(t.order, t.player_ids())
    order = rotate_order(order)

    playing = order[:needed]
    active_courts = len(playing) // PLAYERS_PER_COURT

    matches = []
    for c in range(active_courts):
        p1, p2, p3, p4 = playing[c * 4:c * 4 + 4]
        matches.append(Match(
            id=generate_id(),
            court=c + 1,
            team_a=[p1, p2],
            team_b=[p3, p4],
        ))
    sitting_out = order[active_courts * PLAYERS_PER_COURT:]

    if t.current_round and t.current_round.matches:
        logger.warning(
            "Discarding round %s with %d unscored match(es)",
            t.current_round.round_no, len(t.current_round.matches),
        )

    t.order = order
    t.round_no += 1
    t.current_round = Round(round_no=t.round_no, matches=matches, sitting_out=sitting_out)
    logger.info(
        "Round %s generated: %d match(es), %d sitting out",
        t.round_no, len(matches), len(sitting_out),
    )
    return t.current_round


def _is_valid_score(score) -> bool:
    return isinstance(score, int) and not isinstance(score, bool) and score >= 0


def submit_match_score(t: Tournament, match_id: str, score_a, score_b) -> HistoryEntry:
    """
    Record a finished match (race to max points, no ties).

    Both players of a side get the side's score as individual points.
    The match leaves the current round; an empty round is cleared.
    """
    round_ = t.current_round
    if round_ is None:
        raise NoActiveRound()

    match = next((m for m in round_.matches if m.id == match_id), None)
    if match is None:
        raise MatchNotFound(match_id)

    max_points = clamp_int(t.settings.max_points, *MAX_POINTS_RANGE)

    if not (_is_valid_score(score_a) and _is_valid_score(score_b)):
        raise InvalidScore(score_a, score_b)
    if score_a > max_points or score_b > max_points:
        raise ScoreExceedsMax(max_points)
    if score_a == score_b:
        raise TieNotSupported()
    if score_a != max_points and score_b != max_points:
        raise NoWinnerAtMax(max_points)

    for pid in match.team_a:
        row = t.ensure_score_row(pid)
        row.points += score_a
        row.matches_played += 1
    for pid in match.team_b:
        row = t.ensure_score_row(pid)
        row.points += score_b
        row.matches_played += 1

    entry = HistoryEntry(
        round_no=round_.round_no,
        court=match.court,
        team_a=list(match.team_a),
        team_b=list(match.team_b),
        score_a=score_a,
        score_b=score_b,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    t.history.insert(0, entry)

    round_.matches = [m for m in round_.matches if m.id != match_id]
    if not round_.matches:
        t.current_round = None

    logger.info(
        "Round %s court %s finished %d-%d", entry.round_no, entry.court, score_a, score_b,
    )
    return entry


def player_name(t: Tournament, player_id: str) -> str:
    p = t.find_player(player_id)
    return p.name if p else UNKNOWN_PLAYER


def calculate_standings(t: Tournament) -> List[dict]:
    standings = []
    for p in t.players:
        row = t.scores.get(p.id)
        standings.append({
            "id": p.id,
            "name": p.name,
            "points": row.points if row else 0,
            "matches_played": row.matches_played if row else 0,
        })
    # sort is stable: equal points keep roster order
    standings.sort(key=lambda x: -x["points"])
    for i, s in enumerate(standings):
        s["rank"] = i + 1
    return standings
