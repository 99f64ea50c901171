"""
Dependency Update Triage

This module provides title classification, merge eligibility rules
and commit title rewriting for dependency update pull requests.
"""

from .classifier import TitleClassifier
from .decision import MergeDecisionEngine
from .commit_title import CommitTitleRewriter

__all__ = ['TitleClassifier', 'MergeDecisionEngine', 'CommitTitleRewriter']
