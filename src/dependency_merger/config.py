"""
Configuration Management

시스템 설정 관리
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from pathlib import Path
import logging


def _split_list(value: Optional[str], default: List[str]) -> List[str]:
    """콤마로 구분된 환경 변수를 리스트로 변환"""
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(',') if item.strip()]


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    web_base_url: str = "https://github.com"
    timeout_seconds: int = 30
    required_scopes: List[str] = field(default_factory=lambda: ["repo", "notifications"])


@dataclass
class MergeConfig:
    """자동 머지 규칙 설정"""
    trusted_authors: List[str] = field(default_factory=lambda: ["dependabot", "renovate"])
    ignored_checks: List[str] = field(default_factory=lambda: ["Pika CI", "project-board"])
    manifest_files: List[str] = field(default_factory=lambda: ["package.json"])
    merge_method: str = "squash"
    changed_files_limit: int = 100
    include_greenkeeper: bool = False
    dry_run: bool = False

    @property
    def effective_trusted_authors(self) -> List[str]:
        """Greenkeeper 옵션을 반영한 신뢰 작성자 목록"""
        authors = list(self.trusted_authors)
        if self.include_greenkeeper and "greenkeeper" not in authors:
            authors.append("greenkeeper")
        return authors


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    github: GitHubConfig
    merge: MergeConfig
    logging: LoggingConfig
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        github_defaults = GitHubConfig()
        merge_defaults = MergeConfig()
        return cls(
            github=GitHubConfig(
                token=os.getenv("GITHUB_TOKEN"),
                api_base_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
                web_base_url=os.getenv("GITHUB_WEB_URL", "https://github.com"),
                timeout_seconds=int(os.getenv("GITHUB_TIMEOUT", "30")),
                required_scopes=_split_list(os.getenv("GITHUB_REQUIRED_SCOPES"), github_defaults.required_scopes),
            ),
            merge=MergeConfig(
                trusted_authors=_split_list(os.getenv("MERGER_TRUSTED_AUTHORS"), merge_defaults.trusted_authors),
                ignored_checks=_split_list(os.getenv("MERGER_IGNORED_CHECKS"), merge_defaults.ignored_checks),
                manifest_files=_split_list(os.getenv("MERGER_MANIFEST_FILES"), merge_defaults.manifest_files),
                merge_method=os.getenv("MERGER_MERGE_METHOD", "squash"),
                changed_files_limit=int(os.getenv("MERGER_CHANGED_FILES_LIMIT", "100")),
                include_greenkeeper=_env_flag("MERGER_INCLUDE_GREENKEEPER"),
                dry_run=_env_flag("MERGER_DRY_RUN"),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=os.getenv("LOG_FILE"),
                max_file_size=int(os.getenv("LOG_MAX_SIZE", str(10 * 1024 * 1024))),
                backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5")),
            ),
            debug=_env_flag("DEBUG"),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        github_data = dict(config_data.get('github', {}))
        # 토큰은 파일 대신 환경 변수로 전달하는 것을 허용
        if not github_data.get('token'):
            github_data['token'] = os.getenv("GITHUB_TOKEN")

        return cls(
            github=GitHubConfig(**github_data),
            merge=MergeConfig(**config_data.get('merge', {})),
            logging=LoggingConfig(**config_data.get('logging', {})),
            debug=config_data.get('debug', False),
        )

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        # GitHub 토큰 필수 확인
        if not self.github.token:
            errors.append("GITHUB_TOKEN environment variable not set")

        if self.github.timeout_seconds <= 0:
            errors.append("Timeout must be positive")

        # 머지 방식 검증
        valid_merge_methods = {'merge', 'squash', 'rebase'}
        if self.merge.merge_method not in valid_merge_methods:
            errors.append(f"Invalid merge method: {self.merge.merge_method}")

        # GraphQL connection 최대 크기는 100
        if not 1 <= self.merge.changed_files_limit <= 100:
            errors.append("Changed files limit must be between 1 and 100")

        if not self.merge.effective_trusted_authors:
            errors.append("At least one trusted author is required")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        return {
            'github': {
                'api_base_url': self.github.api_base_url,
                'web_base_url': self.github.web_base_url,
                'timeout_seconds': self.github.timeout_seconds,
                'required_scopes': list(self.github.required_scopes),
                # 보안상 토큰은 제외
            },
            'merge': {
                'trusted_authors': list(self.merge.trusted_authors),
                'ignored_checks': list(self.merge.ignored_checks),
                'manifest_files': list(self.merge.manifest_files),
                'merge_method': self.merge.merge_method,
                'changed_files_limit': self.merge.changed_files_limit,
                'include_greenkeeper': self.merge.include_greenkeeper,
                'dry_run': self.merge.dry_run,
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_file_size': self.logging.max_file_size,
                'backup_count': self.logging.backup_count,
            },
            'debug': self.debug,
        }


class ConfigManager:
    """설정 관리자"""

    def __init__(self, config: Optional[AppConfig] = None):
        self._config = config or AppConfig.from_env()
        self._config.validate()
        self._setup_logging()

    @property
    def config(self) -> AppConfig:
        """현재 설정 반환"""
        return self._config

    def _setup_logging(self) -> None:
        """로깅 설정"""
        level = "DEBUG" if self._config.debug else self._config.logging.level.upper()
        logging.basicConfig(
            level=getattr(logging, level),
            format=self._config.logging.format,
        )

        # 파일 로깅이 설정된 경우 로테이션 설정
        if self._config.logging.file_path:
            from logging.handlers import RotatingFileHandler

            handler = RotatingFileHandler(
                self._config.logging.file_path,
                maxBytes=self._config.logging.max_file_size,
                backupCount=self._config.logging.backup_count,
            )
            handler.setFormatter(logging.Formatter(self._config.logging.format))

            # 루트 로거에 핸들러 추가
            root_logger = logging.getLogger()
            root_logger.addHandler(handler)
