"""Domain layer (pure logic).

- Keep duel rules here: country matching, geographic hints, candidate
  validation and selection.
- Avoid I/O: no HTTP clients, no FastAPI, no match store.
- Randomness is passed in as a numpy Generator so callers can seed it.
"""
