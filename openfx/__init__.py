"""
OpenFX — simulated foreign-exchange transfer flow.

Quote a currency pair, pay against the quote before it expires, and follow
the resulting transaction until it settles or fails.
"""

__version__ = "0.1.0"
