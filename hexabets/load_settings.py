import os
from dotenv import load_dotenv

load_dotenv()

port = int(os.getenv("PORT", "3000"))
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
cors_origins = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

default_player_seed = os.getenv("DEFAULT_PLAYER_SEED", "client")
starting_balance = float(os.getenv("STARTING_BALANCE", "10000"))
# Only set for conformance runs; a fresh seed is generated otherwise.
secret_seed = os.getenv("SECRET_SEED") or None

crash_tick_interval = float(os.getenv("CRASH_TICK_INTERVAL", "0.2"))
crash_round_delay = float(os.getenv("CRASH_ROUND_DELAY", "3.0"))
crash_growth_rate = float(os.getenv("CRASH_GROWTH_RATE", "1.2"))
crash_scale = float(os.getenv("CRASH_SCALE", "0.5"))
crash_max_multiplier = float(os.getenv("CRASH_MAX_MULTIPLIER", "1000.0"))

board_ttl_minutes = int(os.getenv("BOARD_TTL_MINUTES", "30"))
board_eviction_interval_minutes = int(os.getenv("BOARD_EVICTION_INTERVAL_MINUTES", "5"))

if crash_tick_interval <= 0 or crash_round_delay < 0:
    raise ValueError("CRASH_TICK_INTERVAL must be positive and CRASH_ROUND_DELAY non-negative")
if crash_max_multiplier < 1.0:
    raise ValueError("CRASH_MAX_MULTIPLIER must be at least 1.0")


if __name__ == "__main__":
    print(port, log_level, default_player_seed, starting_balance, crash_tick_interval)
