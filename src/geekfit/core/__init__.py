"""Core progress engine: XP curve, catalog, streaks, achievements."""
