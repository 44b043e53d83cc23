"""
Americano errors.

Every rejected operation raises one of these; the router turns them into
a 400 answer, storage swallows MalformedPersistedState and starts fresh.
"""


class AmericanoError(Exception):
    """Base class for all user-facing Americano errors"""
    pass


# -- Rounds --------------------------------------------------------------------

class InsufficientPlayers(AmericanoError):
    def __init__(self, count: int, minimum: int = 4):
        self.count = count
        self.minimum = minimum
        super().__init__(f"At least {minimum} players are required (have {count})")


class NoActiveRound(AmericanoError):
    def __init__(self):
        super().__init__("There is no active round, generate the next round first")


class MatchNotFound(AmericanoError):
    def __init__(self, match_id):
        self.match_id = match_id
        super().__init__(f"Match {match_id} is not part of the current round")


# -- Scores --------------------------------------------------------------------

class InvalidScore(AmericanoError):
    def __init__(self, score_a, score_b):
        self.score_a = score_a
        self.score_b = score_b
        super().__init__("Scores must be whole numbers (0 or more)")


class ScoreExceedsMax(AmericanoError):
    def __init__(self, max_points: int):
        self.max_points = max_points
        super().__init__(f"Scores may not exceed max points ({max_points})")


class TieNotSupported(AmericanoError):
    def __init__(self):
        super().__init__("Ties are not supported, adjust the result")


class NoWinnerAtMax(AmericanoError):
    def __init__(self, max_points: int):
        self.max_points = max_points
        super().__init__(f"One side must reach max points ({max_points})")


# -- Players -------------------------------------------------------------------

class EmptyName(AmericanoError):
    def __init__(self):
        super().__init__("Player name must not be empty")


class DuplicateName(AmericanoError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"A player named {name!r} already exists")


class PlayerInActiveMatch(AmericanoError):
    """Player still has an unscored match in the current round"""
    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(
            "Cannot remove a player who is in the current round, finish the round first"
        )


# -- Storage -------------------------------------------------------------------

class MalformedPersistedState(AmericanoError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Stored session is malformed: {reason}")
