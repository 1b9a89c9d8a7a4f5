"""
Tests for utils.py module.

Tests machine name lookup, executable lookup and exact path casing.
"""

import os
from unittest.mock import patch

from revstamp.utils import find_executable, get_exact_path, get_machine_name


class TestGetMachineName:
    """Test machine name lookup."""

    @patch('platform.node')
    def test_get_machine_name(self, mock_node):
        mock_node.return_value = 'buildbox'
        assert get_machine_name() == 'buildbox'


class TestFindExecutable:
    """Test executable lookup on the PATH."""

    @patch('shutil.which')
    def test_found(self, mock_which):
        mock_which.return_value = '/usr/bin/git'
        assert find_executable('git') == '/usr/bin/git'
        mock_which.assert_called_once_with('git')

    @patch('shutil.which')
    def test_not_found(self, mock_which):
        mock_which.return_value = None
        assert find_executable('svn') is None


class TestGetExactPath:
    """Test on-disk path casing."""

    def test_missing_path_is_unchanged(self, temp_dir):
        missing = os.path.join(temp_dir, 'does-not-exist')
        assert get_exact_path(missing) == missing

    def test_existing_path(self, temp_dir):
        project = os.path.join(temp_dir, 'Project')
        os.mkdir(project)
        assert os.path.normcase(get_exact_path(project)) == os.path.normcase(os.path.abspath(project))

    @patch('os.listdir')
    @patch('os.path.exists')
    def test_casing_is_corrected(self, mock_exists, mock_listdir):
        """Test that each component takes the spelling found in its parent directory."""
        mock_exists.return_value = True
        listings = {
            os.sep: ['Work'],
            os.path.join(os.sep, 'Work'): ['MyProject'],
            os.path.join(os.sep, 'Work', 'MyProject'): [],
        }
        mock_listdir.side_effect = lambda path: listings[path]

        with patch('os.path.abspath', side_effect=lambda path: path), \
                patch('os.path.splitdrive', side_effect=lambda path: ('', path)):
            result = get_exact_path(os.path.join(os.sep, 'work', 'myproject'))

        assert result == os.path.join(os.sep, 'Work', 'MyProject')
