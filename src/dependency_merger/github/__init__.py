"""
GitHub Integration Layer

This module provides GitHub API integration for notifications,
pull request inspection, reviews and merging.
"""

from .client import GitHubClient
from .parser import GitHubPayloadParser

__all__ = ['GitHubClient', 'GitHubPayloadParser']
