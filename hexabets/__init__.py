"""HexaBets: provably-fair game server."""

__version__ = "0.1.0"
