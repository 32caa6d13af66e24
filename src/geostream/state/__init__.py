"""Arbitration state layer.

Holds the per-source state and the pure selection policy. Only the stream's
event loop is allowed to mutate :class:`SourceState` instances.
"""
