"""Domain layer (pure logic).

- Keep game rules, fairness math and payout calculations here.
- Avoid I/O: no locks, no HTTP/FastAPI, no wallet access.
- Prefer deterministic functions (time/random passed in as arguments).
"""
