"""
Service Layer Package

Services sit between callers (API handlers, webhooks, CLI) and storage,
wrapping the pure gamification engine with load/save of user snapshots.

Core Services:
- GamificationService: session completion, daily check-ins, progress summaries
"""

from src.services.gamification_service import GamificationService, UserStateStore

__all__ = [
    "GamificationService",
    "UserStateStore",
]
