from dataclasses import dataclass, field
from typing import Dict, List, Optional

DEFAULT_COURTS = 1
DEFAULT_MAX_POINTS = 21

def generate_id():
    import uuid
    return str(uuid.uuid4())[:8]

@dataclass
class Player:
    id: str
    name: str

@dataclass
class Settings:
    courts: int = DEFAULT_COURTS
    max_points: int = DEFAULT_MAX_POINTS

@dataclass
class Match:
    id: str
    court: int
    team_a: List[str]  # player ids
    team_b: List[str]  # player ids

    @property
    def player_ids(self) -> List[str]:
        return [*self.team_a, *self.team_b]

@dataclass
class Round:
    round_no: int
    matches: List[Match] = field(default_factory=list)
    sitting_out: List[str] = field(default_factory=list)

@dataclass
class ScoreRow:
    points: int = 0
    matches_played: int = 0

@dataclass
class HistoryEntry:
    round_no: int
    court: int
    team_a: List[str]
    team_b: List[str]
    score_a: int
    score_b: int
    timestamp: str  # ISO-8601, UTC

@dataclass
class Tournament:
    settings: Settings = field(default_factory=Settings)
    players: List[Player] = field(default_factory=list)
    order: List[str] = field(default_factory=list)  # rotation order, player ids
    round_no: int = 0
    current_round: Optional[Round] = None
    history: List[HistoryEntry] = field(default_factory=list)  # most recent first
    scores: Dict[str, ScoreRow] = field(default_factory=dict)  # player id -> ScoreRow

    def player_ids(self) -> List[str]:
        return [p.id for p in self.players]

    def find_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def ensure_score_row(self, player_id: str) -> ScoreRow:
        if player_id not in self.scores:
            self.scores[player_id] = ScoreRow()
        return self.scores[player_id]
