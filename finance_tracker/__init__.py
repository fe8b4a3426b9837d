"""
Finance Tracker - Source Package

The expense core of a personal finance tracker: per-user expense
collections kept in a key-value store, validated on every change,
with filtered views, totals, groupings and yearly summaries computed
fresh from the stored collection.

DESIGN PRINCIPLES:
1. The stored collection is the only source of truth
2. Reject invalid input, never auto-correct it
3. Every mutation returns a result, never an unhandled fault
4. Every mutation is auditable
5. Storage substrate is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
