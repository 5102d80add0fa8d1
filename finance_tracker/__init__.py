"""
Finance Tracker - Source Package

The non-UI core of a personal finance tracker: expense logging,
savings goals, balance management and basic analytics.

DESIGN PRINCIPLES:
1. The balance never goes negative
2. Fail early, fail visibly (refused operations say why)
3. No silent corrections
4. Every balance-affecting step is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
