"""Technician matching and broadcast."""

from .client import MatchingClient, MatchResult, get_matching_client

__all__ = ["MatchingClient", "MatchResult", "get_matching_client"]
