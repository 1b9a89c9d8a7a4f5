"""
Tests for api.py module.

The working directory analysis is mocked, only the version logic runs.
"""

from dataclasses import replace
from unittest.mock import patch

import pytest

from revstamp.api import VersionInfo, get_informational_version, get_short_version, get_version
from revstamp.exceptions import ModifiedRepositoryError, RevisionFormatError
from revstamp.revision_data import RevisionData


@pytest.fixture
def mock_process_directory(git_revision):
    with patch('revstamp.api.process_directory') as mock:
        mock.return_value = git_revision
        yield mock


class TestGetVersion:
    """Test version resolving for a project directory."""

    def test_version_info(self, mock_process_directory, log, build_time):
        info = get_version('/work/project', revision_format='{semvertag+chash:7}',
                           copyright='© {copyright:2020-} Example', build_time=build_time, log=log)

        assert info == VersionInfo(
            version='1.0.1',
            informational_version='1.0.1-feature-x.4+abcdef1',
            copyright='© 2020–2023 Example',
        )

    def test_arguments_are_passed(self, mock_process_directory, log, build_time):
        get_version('/work/project', required_vcs='git', tag_match='release-*',
                    build_time=build_time, log=log, timeout=3.0)

        args, kwargs = mock_process_directory.call_args
        assert args == ('/work/project',)
        assert kwargs['required_vcs'] == 'git'
        assert kwargs['tag_match'] == 'release-*'
        assert [provider.timeout for provider in kwargs['providers']] == [3.0, 3.0]

    def test_default_format(self, mock_process_directory, log, build_time):
        """Test that the default format is used without a format."""
        info = get_version('/work/project', build_time=build_time, log=log)
        assert info.informational_version == '1.0.1-feature-x.4+abcdef1'
        assert info.copyright == ''

    def test_default_format_for_revision_number(self, mock_process_directory, log, build_time):
        mock_process_directory.return_value = RevisionData(revision_number=358)
        info = get_version('/work/project', build_time=build_time, log=log)
        assert info.version == '0.0.358'

    def test_remove_tag_v(self, mock_process_directory, log, build_time, git_revision):
        mock_process_directory.return_value = replace(git_revision, commits_after_tag=0)
        info = get_version('/work/project', revision_format='{tagname}', remove_tag_v=False,
                           build_time=build_time, log=log)
        assert info.informational_version == 'v1.0.0'

    def test_default_project_dir(self, mock_process_directory, log, build_time):
        with patch('os.getcwd', return_value='/cwd'):
            get_version(build_time=build_time, log=log)
        assert mock_process_directory.call_args.args[0] == '/cwd'

    def test_modified_repository_error(self, mock_process_directory, log, build_time, git_revision):
        """Test that a modified working copy fails for matching configurations."""
        mock_process_directory.return_value = replace(git_revision, is_modified=True)

        with pytest.raises(ModifiedRepositoryError, match='Release'):
            get_version('/work/project', configuration_name='Release',
                        error_on_modified_pattern='^Rel', build_time=build_time, log=log)

    def test_modified_repository_other_configuration(self, mock_process_directory, log, build_time, git_revision):
        mock_process_directory.return_value = replace(git_revision, is_modified=True)

        info = get_version('/work/project', revision_format='1.0{!}', configuration_name='Debug',
                           error_on_modified_pattern='^Rel', build_time=build_time, log=log)

        assert info.informational_version == '1.0!'

    def test_clean_repository_never_fails(self, mock_process_directory, log, build_time):
        info = get_version('/work/project', revision_format='1.0', configuration_name='Release',
                           error_on_modified_pattern='.*', build_time=build_time, log=log)
        assert info.version == '1.0'

    def test_format_error(self, mock_process_directory, log, build_time):
        """Test that a format without numeric prefix only fails for the short version."""
        info = get_version('/work/project', revision_format='{chash}', build_time=build_time, log=log)

        assert info.informational_version == 'abcdef1234567890abcdef1234567890abcdef12'
        with pytest.raises(RevisionFormatError, match='abcdef'):
            info.version

    def test_short_version_is_resolved_once(self, mock_process_directory, log, build_time):
        info = get_version('/work/project', build_time=build_time, log=log)
        with patch('revstamp.api.RevisionFormatter.resolve_short') as mock_resolve_short:
            mock_resolve_short.return_value = '9.9.9'
            assert info.version == '9.9.9'
            assert info.version == '9.9.9'
        mock_resolve_short.assert_called_once()


class TestShortcuts:
    """Test the single-value shortcuts."""

    def test_get_informational_version(self, mock_process_directory, log, build_time):
        assert get_informational_version('/work/project', build_time=build_time, log=log) == \
            '1.0.1-feature-x.4+abcdef1'

    def test_get_short_version(self, mock_process_directory, log, build_time):
        assert get_short_version('/work/project', build_time=build_time, log=log) == '1.0.1'
