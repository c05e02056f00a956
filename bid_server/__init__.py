"""
This package contains the auction bid server: per-item top bid rankings,
login sessions, and the Flask app that exposes them.
"""

from .api import app
from .ranking import BidRanking, RankingStore
from .sessions import SessionManager

__all__ = [
    "app",
    "BidRanking",
    "RankingStore",
    "SessionManager",
]
