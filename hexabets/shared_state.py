from hexabets import load_settings
from hexabets.manager import ConnectionManager
from hexabets.services.betting import BetService
from hexabets.services.commitment import CommitmentManager
from hexabets.services.crash import CrashRoundScheduler
from hexabets.services.wallet import InMemoryWallet

# Process-wide singletons. Exactly one live commitment and one crash round exist per process.
commitments = CommitmentManager(secret_seed=load_settings.secret_seed)
wallet = InMemoryWallet(load_settings.starting_balance)
bet_service = BetService(commitments, wallet, default_player_seed=load_settings.default_player_seed)
manager = ConnectionManager()
crash_scheduler = CrashRoundScheduler(
    commitments,
    manager,
    tick_interval=load_settings.crash_tick_interval,
    round_delay=load_settings.crash_round_delay,
    growth_rate=load_settings.crash_growth_rate,
    scale=load_settings.crash_scale,
    max_multiplier=load_settings.crash_max_multiplier,
)
