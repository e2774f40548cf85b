"""State layer.

This package is the single source of truth for how optimistic local actions
and pushed server events are merged into the local view of a session.
"""
