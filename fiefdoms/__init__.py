"""
Rolling Fiefdoms.

Rules engine for the Rolling Fiefdoms roll-and-write board game.
"""

__version__ = "0.1.0"
