"""
Budget Tracker Core - Source Package

Client-side financial state and aggregation engine for a personal
income/expense tracker with category budgets.

DESIGN PRINCIPLES:
1. One owned snapshot per session, swapped atomically
2. Mutations are pure functions of (snapshot, intent)
3. Aggregates are derived on demand, never cached in the store
4. Validate at the boundary, degrade numerically on the read side
5. Remote backend is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Tracker Team"
