"""
                Restaurant Order Board

Multi-tenant restaurant ordering backend with a per-restaurant,
configurable order workflow board.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
