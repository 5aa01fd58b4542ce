class HexaBetsError(Exception):
    """Base class for errors that are recoverable at the request boundary."""


class InvalidBet(HexaBetsError):
    """Non-positive stake or insufficient funds. Nothing is mutated."""


class InvalidParameters(HexaBetsError):
    """Game parameters out of range. Raised before any sequence number is consumed."""


class StaleBoard(HexaBetsError):
    """Reveal or cashout against a board that does not exist or was forfeited."""


class RaceViolation(HexaBetsError):
    """Crash cashout claiming a multiplier that was never broadcast."""


class RandomnessFailure(RuntimeError):
    """The secure random source failed. The process cannot safely continue."""
