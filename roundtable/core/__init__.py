"""Core round-table primitives (participants, seating, the dispossessed stack, events).

Kept free of FastAPI concerns so it can be reused by the engine, API routes, and tests.
"""
