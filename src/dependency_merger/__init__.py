"""
Dependency Merger

GitHub 알림에서 의존성 업데이트 PR을 찾아 자동으로 승인 및 머지하는 도구
"""

__version__ = "1.0.0"
__author__ = "Hwahae Team"
__email__ = "dev@hwahae.co.kr"

from .merger import DependencyMerger, RunSummary

__all__ = ["DependencyMerger", "RunSummary"]
