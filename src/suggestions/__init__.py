"""Teammate suggestions for projects."""

from src.suggestions.service import (
    MAX_SUGGESTIONS,
    ProjectNotFoundError,
    SuggestedTeammate,
    TeammateSuggestionService,
)

__all__ = [
    "MAX_SUGGESTIONS",
    "ProjectNotFoundError",
    "SuggestedTeammate",
    "TeammateSuggestionService",
]
