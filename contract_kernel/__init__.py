"""
Contract Kernel

An in-process core for authoring contract blueprints and driving the
contracts created from them through a fixed approval/signature lifecycle:
- Blueprint catalog with contiguous field ordering
- Snapshot semantics (contracts never re-sync with their blueprint)
- Status-gated field edits and transitions
- Derived dashboard categories and per-field edit permissions
"""

__version__ = "0.1.0"
