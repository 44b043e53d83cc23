import logging
import random
from typing import Optional

from americano.exceptions import EmptyName, DuplicateName, PlayerInActiveMatch
from americano.functions import clamp_int, COURTS_RANGE, MAX_POINTS_RANGE
from americano.models import Player, Settings, Tournament, generate_id

logger = logging.getLogger(__name__)


def add_player(t: Tournament, name: Optional[str]) -> Player:
    """New players join at the back of the rotation order."""
    clean = (name or "").strip()
    if not clean:
        raise EmptyName()
    if any(p.name.lower() == clean.lower() for p in t.players):
        raise DuplicateName(clean)

    player = Player(id=generate_id(), name=clean)
    t.players.append(player)
    t.ensure_score_row(player.id)
    t.order.append(player.id)
    logger.info("Player %s added as %s", clean, player.id)
    return player


def remove_player(t: Tournament, player_id: str) -> Optional[Player]:
    """
    Remove a player from roster, rotation order and score table.

    Unknown ids are ignored. History keeps the id, so old matches show the
    placeholder name afterwards.
    """
    player = t.find_player(player_id)
    if player is None:
        return None

    if t.current_round and any(player_id in m.player_ids for m in t.current_round.matches):
        raise PlayerInActiveMatch(player_id)

    t.players = [p for p in t.players if p.id != player_id]
    t.order = [pid for pid in t.order if pid != player_id]
    t.scores.pop(player_id, None)
    logger.info("Player %s (%s) removed", player.name, player_id)
    return player


def shuffle_order(t: Tournament, rng=random) -> None:
    order = t.player_ids()
    rng.shuffle(order)
    t.order = order
    logger.info("Rotation order shuffled")


def update_settings(t: Tournament, courts, max_points) -> Settings:
    """Clamp instead of rejecting; applies from the next generated round."""
    t.settings.courts = clamp_int(courts, *COURTS_RANGE)
    t.settings.max_points = clamp_int(max_points, *MAX_POINTS_RANGE)
    logger.info("Settings: %d court(s), %d max points", t.settings.courts, t.settings.max_points)
    return t.settings


def reset_tournament() -> Tournament:
    logger.info("Session reset")
    return Tournament()
