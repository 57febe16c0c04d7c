"""Turn/action processing helpers.

This package centralizes action legality checks so the engine, the snapshot
builder, and the HTTP layer all agree on which actions are allowed.
"""
