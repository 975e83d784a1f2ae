"""core/ableton — Pure model of the mirrored Live set.

This package contains zero I/O, zero network calls, zero filesystem access.
Types, envelope generators, the JSON codec and the state mirror are
deterministic functions of their inputs (the mirror adds a lock, nothing more).

Socket I/O (WebSocket to the Live bridge) lives in ableton_bridge/connection.py.
"""
