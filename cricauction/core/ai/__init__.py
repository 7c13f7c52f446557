"""
Automated bidding for the computer-controlled teams.
"""

from cricauction.core.ai.policy import AIAction, AIDecision, AIBiddingPolicy

__all__ = ["AIAction", "AIDecision", "AIBiddingPolicy"]
