"""State layer.

Process-lifetime, in-memory state owned by one sync engine: the
per-vessel record of what ShipsIO has already acknowledged, and the
validity of the configured key. Nothing here is persisted.
"""
