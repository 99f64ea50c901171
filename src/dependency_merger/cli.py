"""
Dependency Merger CLI

Usage:
    dependency-merger                         - Triage the notification inbox once
    dependency-merger --dry-run               - Show what would be merged
    dependency-merger --config merger.yaml    - Load settings from YAML
"""

import logging
from typing import Optional

import click

from . import __version__
from .config import AppConfig, ConfigManager
from .github.client import GitHubAPIError
from .merger import DependencyMerger


logger = logging.getLogger(__name__)


def load_config(
    config_path: Optional[str],
    dry_run: bool,
    log_level: Optional[str],
    include_greenkeeper: bool,
) -> AppConfig:
    """Load configuration from YAML or environment and apply command line overrides."""
    config = AppConfig.from_yaml(config_path) if config_path else AppConfig.from_env()

    if dry_run:
        config.merge.dry_run = True
    if include_greenkeeper:
        config.merge.include_greenkeeper = True
    if log_level:
        config.logging.level = log_level

    return config


@click.command()
@click.version_option(version=__version__, prog_name='dependency-merger')
@click.option(
    '--config',
    'config_path',
    type=click.Path(dir_okay=False),
    default=None,
    help='YAML configuration file (defaults to environment variables)',
)
@click.option('--dry-run', is_flag=True, help='Log approvals, merges and mark-read actions without performing them')
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default=None,
    help='Override the configured log level',
)
@click.option('--include-greenkeeper', is_flag=True, help='Also merge legacy Greenkeeper pull requests')
def main(config_path: Optional[str], dry_run: bool, log_level: Optional[str], include_greenkeeper: bool):
    """Approve and merge green dependency update pull requests from your GitHub notifications.

    \b
    Requires a GITHUB_TOKEN with the "repo" and "notifications" scopes.
    Security vulnerability notifications are marked as read.
    """
    try:
        config = load_config(config_path, dry_run, log_level, include_greenkeeper)
        ConfigManager(config)
    except (ValueError, FileNotFoundError) as e:
        raise click.ClickException(str(e))

    merger = DependencyMerger(config)

    try:
        summary = merger.run()
    except GitHubAPIError as e:
        logger.error(f"Run aborted: {e}")
        raise click.ClickException(str(e))

    click.echo(summary.describe())


if __name__ == '__main__':
    main()
