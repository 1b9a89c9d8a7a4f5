"""
Pytest configuration and shared fixtures for test suite.

Provides a recording logger, sample revision data, a fixed build time and
helpers for faking VCS command output.
"""

import tempfile
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from hypothesis import settings

from revstamp.process import CommandResult
from revstamp.revision_data import RevisionData

# Prevent Hypothesis from writing a local example database (e.g. `.hypothesis/`) during tests.
settings.register_profile("revstamp-tests", database=None)
settings.load_profile("revstamp-tests")

SAMPLE_HASH = 'abcdef1234567890abcdef1234567890abcdef12'


class RecordingLogger:
    """Logger that keeps every event as (level, message)."""

    def __init__(self):
        self.records = []

    def raw_output(self, message):
        self.records.append(('raw', message))

    def trace(self, message):
        self.records.append(('trace', message))

    def success(self, message):
        self.records.append(('success', message))

    def info(self, message):
        self.records.append(('info', message))

    def warning(self, message):
        self.records.append(('warning', message))

    def error(self, message):
        self.records.append(('error', message))

    def messages(self, level):
        return [message for record_level, message in self.records if record_level == level]


def command_result(*lines, returncode=0):
    """Build a CommandResult as returned by run_command."""
    return CommandResult(returncode=returncode, lines=list(lines))


@pytest.fixture
def log():
    """Create a logger that records all events."""
    return RecordingLogger()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests that is cleaned up afterwards."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def build_time():
    """A fixed build time with a +02:00 offset."""
    return datetime(2024, 3, 31, 14, 5, 9, tzinfo=timezone(timedelta(hours=2)))


@pytest.fixture
def git_revision():
    """Revision data as the Git provider would report it for a feature branch."""
    return RevisionData(
        commit_hash=SAMPLE_HASH,
        revision_number=358,
        commit_time=datetime(2023, 11, 5, 9, 30, 0, tzinfo=timezone(timedelta(hours=1))),
        author_time=datetime(2023, 11, 4, 18, 0, 0, tzinfo=timezone.utc),
        committer_name='Jane Committer',
        committer_email='jane@example.com',
        author_name='Arthur Author',
        author_email='arthur@example.com',
        repository_url='https://example.com/repo.git',
        branch='feature-x',
        tag='v1.0.0',
        commits_after_tag=4,
        vcs_provider='git',
    )


@pytest.fixture
def mock_provider():
    """Create a mock VCS provider that can process any directory."""
    provider = MagicMock()
    provider.name = 'git'
    provider.check_environment.return_value = True
    provider.check_directory.return_value = (True, '/work/project')
    provider.process_directory.return_value = RevisionData(commit_hash=SAMPLE_HASH, vcs_provider='git')
    return provider
