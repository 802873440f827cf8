"""
Personal Income Tax Calculator - Source Package

Computes personal income tax from income and deduction figures using a
configurable progressive rate table, behind a simple login.

DESIGN PRINCIPLES:
1. One evaluation path: the breakdown shown is the tax computed
2. Storage problems degrade to defaults, never crash the session
3. Every step must be auditable
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Tax Calculator Team"
