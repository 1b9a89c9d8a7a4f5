"""
Revision format resolving.

Turns a revision format such as ``"{semvertag}+{chash:7}{!:-modified}"`` into
a version string. Placeholders are replaced family by family with regular
expression passes; the more specific forms of a family are always replaced
before the shorter aliases that could shadow them.
"""

import re
from datetime import datetime
from typing import Optional

from .exceptions import RevisionFormatError, SchemeBoundsError
from .revision_data import RevisionData
from .time_scheme import LEGACY_TIME_SCHEME_PATTERN, TIME_SCHEME_PATTERN, format_time_scheme
from .utils import get_machine_name

# Largest value of one component of a dotted-numeric version
MAX_VERSION_COMPONENT = 65535

SEMVER_TAG_PATTERN = re.compile(r'^([0-9]+(?:\.[0-9]+(?:\.[0-9]+)?)?)(?:-(.+))?$')


def safe_substring(source: str, length: int) -> str:
    """Return the first ``length`` characters of ``source``, or all of it if shorter."""
    return source[:length]


def _int(match: re.Match, group: int = 1) -> int:
    return int(match.group(group))


def format_utc_offset(time: datetime) -> str:
    """Format the UTC offset of a time as +HH:MM."""
    offset = time.utcoffset()
    if offset is None:
        offset = time.astimezone().utcoffset()
    total_minutes = int(offset.total_seconds()) // 60
    sign = '-' if total_minutes < 0 else '+'
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


class RevisionFormatter:
    """
    Resolves revision formats against the data of one revision.

    Args:
        revision_data: Normalized data of the current revision
        build_time: Time of the current build, used by {b:...} schemes and {copyright}
        remove_tag_v: Strip a leading "v" followed by a digit from tag names
        machine_name: Value for {mname} (defaults to this machine's name)
    """

    def __init__(self, revision_data: RevisionData, build_time: datetime,
                 remove_tag_v: bool = True, machine_name: Optional[str] = None):
        self.revision_data = revision_data
        self.build_time = build_time
        self.remove_tag_v = remove_tag_v
        self.machine_name = machine_name if machine_name is not None else get_machine_name()

    def resolve(self, template: str) -> str:
        """
        Resolve all placeholders in a revision format.

        Args:
            template: The revision format

        Returns:
            str: The resolved revision ID

        Raises:
            RevisionFormatError: If a time scheme placeholder cannot be parsed
        """
        data = self.revision_data
        chash = data.commit_hash
        upper_chash = chash.upper()
        text = template

        # Simple data fields
        text = text.replace('{chash}', chash)
        text = text.replace('{CHASH}', upper_chash)
        text = re.sub(r'\{chash:([0-9]+)\}', lambda m: safe_substring(chash, _int(m)), text)
        text = re.sub(r'\{CHASH:([0-9]+)\}', lambda m: safe_substring(upper_chash, _int(m)), text)
        text = text.replace('{revnum}', str(data.revision_number))
        text = re.sub(r'\{revnum\s*-\s*([0-9]+)\}', lambda m: str(data.revision_number - _int(m)), text)
        text = re.sub(r'\{revnum\s*\+\s*([0-9]+)\}', lambda m: str(data.revision_number + _int(m)), text)
        text = text.replace('{!}', '!' if data.is_modified else '')
        text = re.sub(r'\{!:(.*?)\}', lambda m: m.group(1) if data.is_modified else '', text)
        text = text.replace('{tz}', format_utc_offset(data.commit_time))
        text = text.replace('{url}', data.repository_url)
        text = text.replace('{cname}', data.committer_name)
        text = text.replace('{cmail}', data.committer_email)
        text = text.replace('{aname}', data.author_name)
        text = text.replace('{amail}', data.author_email)
        text = text.replace('{mname}', self.machine_name)

        if data.branch:
            text = text.replace('{branch}', data.branch)
            text = re.sub(
                r'\{branch:(.*?):(.+?)\}',
                lambda m: m.group(1) + data.branch if data.branch != m.group(2) else '',
                text,
            )
        else:
            # No branch known, leave it out completely
            text = text.replace('{branch}', '')
            text = re.sub(r'\{branch:(.*?):(.+?)\}', lambda m: '', text)

        tag_name = self.get_tag_name()
        text = text.replace('{semvertag}', self.get_semver_tag_spec(tag_name))
        text = text.replace('{semvertag+chash}', self.get_semver_tag_spec(tag_name, safe_substring(chash, 7)))
        text = re.sub(
            r'\{semvertag\+chash:([0-9]+)\}',
            lambda m: self.get_semver_tag_spec(tag_name, safe_substring(chash, _int(m))),
            text,
        )
        text = re.sub(
            r'\{semvertag\+CHASH:([0-9]+)\}',
            lambda m: self.get_semver_tag_spec(tag_name, safe_substring(upper_chash, _int(m))),
            text,
        )
        text = re.sub(
            r'\{semvertag:(.+?):\+chash:([0-9]+)\}',
            lambda m: self.get_semver_tag_spec(tag_name, safe_substring(chash, _int(m, 2)), m.group(1)),
            text,
        )
        text = re.sub(
            r'\{semvertag:(.+?):\+CHASH:([0-9]+)\}',
            lambda m: self.get_semver_tag_spec(tag_name, safe_substring(upper_chash, _int(m, 2)), m.group(1)),
            text,
        )
        text = re.sub(
            r'\{semvertag:(.+?):\+chash\}',
            lambda m: self.get_semver_tag_spec(tag_name, safe_substring(chash, 7), m.group(1)),
            text,
        )
        text = re.sub(
            r'\{semvertag:(.+?)\}',
            lambda m: self.get_semver_tag_spec(tag_name, '', m.group(1)),
            text,
        )

        text = text.replace('{tag}', self.get_tag_spec(tag_name))
        text = text.replace('{tagname}', tag_name)
        text = text.replace('{tagadd}', str(data.commits_after_tag))
        text = re.sub(
            r'\{tagadd:(.*?)\}',
            lambda m: m.group(1) + str(data.commits_after_tag) if data.commits_after_tag > 0 else '',
            text,
        )

        text = TIME_SCHEME_PATTERN.sub(self._format_time_scheme, text)

        # Older placeholder names
        commit = chash or str(data.revision_number)
        text = text.replace('{commit}', commit)
        text = re.sub(r'\{commit:([0-9]+)\}', lambda m: safe_substring(chash, _int(m)), text)
        text = LEGACY_TIME_SCHEME_PATTERN.sub(self._format_time_scheme, text)

        copyright_year = str(self.get_copyright_year())
        text = text.replace('{copyright}', copyright_year)
        text = re.sub(
            r'\{copyright:([0-9]+?)-?\}',
            lambda m: (m.group(1) + '–' if m.group(1) != copyright_year else '') + copyright_year,
            text,
        )
        return text

    def resolve_short(self, template: str) -> str:
        """
        Resolve a revision format and reduce it to a dotted-numeric version.

        Everything from the first character that is neither a digit nor a
        dot is cut off, as are trailing dots. The remainder must have two to
        four numeric components, each at most 65535.

        Raises:
            RevisionFormatError: If the result is not a dotted-numeric version
            SchemeBoundsError: If a component is too large
        """
        revision_id = self.resolve(template)
        short = re.sub(r'[^0-9.].*$', '', revision_id, flags=re.DOTALL).rstrip('.')
        if '.' not in short:
            raise RevisionFormatError(f"Revision ID cannot be truncated to dotted-numeric: {revision_id}")

        parts = short.split('.')
        if not 2 <= len(parts) <= 4 or not all(parts):
            raise RevisionFormatError(f"Revision ID cannot be truncated to dotted-numeric: {revision_id}")
        for part in parts:
            if int(part) > MAX_VERSION_COMPONENT:
                raise SchemeBoundsError(
                    f"Version component {part} exceeds {MAX_VERSION_COMPONENT} in revision ID: {revision_id}"
                )
        return short

    def get_tag_name(self) -> str:
        """Return the tag name, without a leading "v" before a digit if configured."""
        tag_name = self.revision_data.tag
        if self.remove_tag_v and re.match(r'^v[0-9]', tag_name):
            tag_name = tag_name[1:]
        return tag_name

    def get_semver_tag_spec(self, tag_name: str, commit_hash: str = '', default_branch: str = '') -> str:
        """
        Build a SemVer version from the most recent tag.

        A directly tagged revision returns the tag as is. Otherwise the patch
        number of the tag is incremented and a pre-release label is added from
        the tag suffix, the branch name (unless it is ``default_branch``) and the
        number of commits after the tag, e.g. ``1.0.1-beta.feature-x.4+abcdef1``.

        Args:
            tag_name: The tag name (already stripped of "v" if configured)
            commit_hash: Build metadata to append after "+" (optional)
            default_branch: Branch name that is not included in the label

        Returns:
            str: The version
        """
        data = self.revision_data
        if data.commits_after_tag == 0 and tag_name:
            return tag_name

        count = data.commits_after_tag
        tag_suffix = ''
        match = SEMVER_TAG_PATTERN.match(tag_name or '')
        if match:
            tag_name = match.group(1)
            tag_suffix = match.group(2) or ''
        else:
            # Not a version tag, handled like no tag at all
            tag_name = ''
            count = data.revision_number

        values = (tag_name or '0').split('.')
        while len(values) < 3:
            values.append('0')
        major, minor, patch = int(values[0]), int(values[1]), int(values[2])

        pre_release = str(count)
        if data.branch and data.branch != default_branch:
            pre_release = re.sub(r'[^0-9A-Za-z-]', '-', data.branch) + '.' + pre_release
            if tag_suffix:
                pre_release = tag_suffix + '.' + pre_release
        elif tag_suffix:
            pre_release = tag_suffix + '-' + pre_release
        if commit_hash:
            # Build metadata always comes last
            pre_release += '+' + commit_hash

        return f"{major}.{minor}.{patch + 1}-{pre_release}"

    def get_tag_spec(self, tag_name: str) -> str:
        """
        Return the tag, extended by the number of commits after it.

        The count becomes the fourth version component if the tag has at most
        three, otherwise it is appended with "+".
        """
        count = self.revision_data.commits_after_tag
        if count == 0:
            return tag_name

        parts = tag_name.split('.')
        while len(parts) < 3:
            tag_name += '.0'
            parts.append('0')
        if len(parts) == 3:
            return f"{tag_name}.{count}"
        return f"{tag_name}+{count}"

    def get_copyright_year(self) -> int:
        """Return the commit year, or the build year if the commit time is unknown."""
        if self.revision_data.commit_time.year > 1:
            return self.revision_data.commit_time.year
        return self.build_time.year

    def _format_time_scheme(self, match: re.Match) -> str:
        return format_time_scheme(match.group(0), self.revision_data, self.build_time)


def resolve(template: str, revision_data: RevisionData, build_time: datetime,
            remove_tag_v: bool = True) -> str:
    """Resolve a revision format. See RevisionFormatter.resolve."""
    return RevisionFormatter(revision_data, build_time, remove_tag_v).resolve(template)


def resolve_short(template: str, revision_data: RevisionData, build_time: datetime,
                  remove_tag_v: bool = True) -> str:
    """Resolve a revision format to a dotted-numeric version. See RevisionFormatter.resolve_short."""
    return RevisionFormatter(revision_data, build_time, remove_tag_v).resolve_short(template)
