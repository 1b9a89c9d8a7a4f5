"""
Common interface of the version control system providers.
"""

import os
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from ..logging_config import RevisionLogger, get_default_logger
from ..process import DEFAULT_COMMAND_TIMEOUT, CommandResult, run_command
from ..revision_data import RevisionData


class VcsProvider(ABC):
    """
    Reads revision data from the working directory of one VCS.

    ``check_environment`` must be called once before the other methods, it
    locates the command-line tools the provider needs.
    """

    #: Name compared with the required VCS setting
    name: str = ''

    #: Entry that marks the root of a working directory
    directory_marker: str = ''

    def __init__(self, log: Optional[RevisionLogger] = None, timeout: float = DEFAULT_COMMAND_TIMEOUT):
        self.log = log or get_default_logger()
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"

    @abstractmethod
    def check_environment(self) -> bool:
        """Check whether the tools of this VCS are installed."""

    def check_directory(self, path: str) -> Tuple[bool, Optional[str]]:
        """
        Check whether a directory belongs to a working directory of this VCS.

        The directory and all of its parents are searched for the marker entry.

        Args:
            path: The directory to check

        Returns:
            tuple: (found, working directory root or None)
        """
        self.log.trace(f"Checking directory tree for {self.name} working directory...")
        current = os.path.abspath(path)
        while True:
            self.log.trace(f"  Testing: {current}")
            if os.path.exists(os.path.join(current, self.directory_marker)):
                self.log.success(f"  Found {current}")
                return True, current
            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent

        self.log.trace(f"Not a {self.name} working directory.")
        return False, None

    @abstractmethod
    def process_directory(self, path: str, tag_match: str = '') -> RevisionData:
        """
        Collect the revision data of a working directory.

        Command failures leave the affected fields at their defaults, this
        method does not raise for bad or missing VCS output.

        Args:
            path: The directory to process
            tag_match: Glob pattern for tag names to consider (empty or "*" for all)

        Returns:
            RevisionData: The collected data
        """

    def _run(self, args, cwd: str) -> CommandResult:
        return run_command(args, cwd, self.log, self.timeout)
