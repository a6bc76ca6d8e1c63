"""Matching — mount path patterns, path binding, and condition checks.

Everything here is computed from an entry and an input record; nothing
holds per-run state.
"""
