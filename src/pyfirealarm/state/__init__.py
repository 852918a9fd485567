"""State/store layer.

This package is the single source of truth for how incoming sensor unit
and hub readings are merged into a deterministic per-device snapshot,
and for the alert classifications derived from it.
"""
