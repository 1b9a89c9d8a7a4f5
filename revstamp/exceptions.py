"""
Exceptions raised by the revision engine.

VCS collection problems are never raised; they are absorbed into default
field values. Everything here aborts the calling build step.
"""


class RevisionError(Exception):
    """Base class for all errors raised while computing a version."""


class RevisionFormatError(RevisionError, ValueError):
    """A placeholder, time scheme or resolved value has an unusable format."""


class SchemeBoundsError(RevisionFormatError):
    """A value exceeds the representable range of its target format."""


class RequiredVcsError(RevisionError):
    """The required version control system is not available for the directory."""

    def __init__(self, required_vcs: str, path: str = ''):
        self.required_vcs = required_vcs
        self.path = path
        message = f'The required version control system "{required_vcs}" is not available or not used'
        if path:
            message += f' in {path}'
        super().__init__(message)


class ModifiedRepositoryError(RevisionError):
    """The working copy is modified but the build configuration forbids it."""

    def __init__(self, configuration_name: str, pattern: str):
        self.configuration_name = configuration_name
        self.pattern = pattern
        super().__init__(
            f'The working copy is modified, which is not allowed for the build configuration '
            f'"{configuration_name}" (matches "{pattern}")'
        )
