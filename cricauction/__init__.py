"""
cricauction - IPL-style cricket player auction simulator.

Components:
- Roster catalog of draftable players
- Pre-auction player retention for the human team
- Sequential auction engine with bid/pass/resolve commands
- Automated bidding policy for the computer-controlled teams
- Debounced auto-resolution timer
"""

__version__ = "0.1.0"
