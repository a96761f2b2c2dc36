"""
                OrderDesk

Real-time order-taking backend for a single restaurant: menu, live
kitchen queue over WebSocket and a daily archive to Excel and history.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
