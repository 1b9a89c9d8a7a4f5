"""
Basic functionality tests for revstamp.
"""

import re

import pytest

import revstamp
from revstamp import (
    ModifiedRepositoryError,
    RequiredVcsError,
    RevisionError,
    RevisionFormatError,
    SchemeBoundsError,
)


class TestBasicFunctionality:
    """Test basic functionality without complex mocking."""

    def test_package_imports(self):
        """Test that the package can be imported."""
        assert hasattr(revstamp, '__version__')
        # Version should be in PEP 440 format (e.g., "0.1.0", "0.1.1.dev5+g1234abc")
        version_pattern = r'^\d+\.\d+\.\d+(?:\.(?:post|dev)\d+)?(?:\+[a-zA-Z0-9.-]+)?$'
        assert re.match(version_pattern, revstamp.__version__), \
            f"Version '{revstamp.__version__}' doesn't match PEP 440 format"

    def test_public_api(self):
        for name in ('get_version', 'get_informational_version', 'get_short_version',
                     'process_directory', 'resolve', 'resolve_short', 'RevisionData'):
            assert hasattr(revstamp, name), name


class TestExceptions:
    """Test the exception hierarchy and messages."""

    def test_format_errors_are_value_errors(self):
        assert issubclass(RevisionFormatError, ValueError)
        assert issubclass(SchemeBoundsError, RevisionFormatError)
        assert issubclass(RevisionFormatError, RevisionError)

    def test_required_vcs_error(self):
        error = RequiredVcsError('svn', '/work/project')
        assert error.required_vcs == 'svn'
        assert str(error) == (
            'The required version control system "svn" is not available or not used in /work/project'
        )

    def test_required_vcs_error_without_path(self):
        assert str(RequiredVcsError('git')).endswith('not available or not used')

    def test_modified_repository_error(self):
        error = ModifiedRepositoryError('Release', '^Release$')
        assert error.configuration_name == 'Release'
        assert '"Release"' in str(error)
        assert '"^Release$"' in str(error)

    def test_errors_can_be_caught_together(self):
        with pytest.raises(RevisionError):
            raise SchemeBoundsError('Version component 70000 exceeds 65535')
