"""
Devil's Dice.

Turn-based bluffing dice game engine: declare a symbol-backed action, let the
table challenge or block, and race to see all six faces across hand and pool.
"""

__version__ = "0.1.0"
