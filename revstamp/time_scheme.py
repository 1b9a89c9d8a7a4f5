"""
Time-based version schemes.

Encodes a point in time into one of four compact representations and
decodes such values back for diagnostics:

- Readable:       {c:ymd-} -> 2024-03-31, {b:uhms:} -> 14:05:09
- Dotted decimal: {c:15m:2020} -> <days since base year>.<15-minute interval of the day>
- Base encoded:   {c:28:20m:2020:4} -> base-28 count of 20-minute intervals, at least 4 digits
- Hours:          {c:h:2020-01} -> hours since January 2020

The first letter selects the time source: a = author, b = build, c = commit.
An upper-case letter makes base-encoded output upper-case.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from .exceptions import RevisionFormatError
from .revision_data import RevisionData

# Digits and consonants that are hard to confuse when hand-written. Without
# vowels the encoded values cannot spell words.
BASE28_ALPHABET = '0123456789bcdfghjkmnpqrtvwxy'

BASE36_ALPHABET = '0123456789abcdefghijklmnopqrstuvwxyz'

SECONDS_PER_DAY = 24 * 60 * 60

# Upper bound (exclusive) for day and hour counts, so they fit a 16-bit version component
MAX_COMPONENT_VALUE = 65535

INTERVAL_UNITS = {
    's': 1,
    'm': 60,
    'h': 60 * 60,
    'd': SECONDS_PER_DAY,
}

READABLE_FORMATS = {
    'ymd': '%Y%m%d',
    'ymd-': '%Y-%m-%d',
    'ymd.': '%Y.%m.%d',
    'hms': '%H%M%S',
    'hms-': '%H-%M-%S',
    'hms.': '%H.%M.%S',
    'hms:': '%H:%M:%S',
    'hm': '%H%M',
    'hm-': '%H-%M',
    'hm.': '%H.%M',
    'hm:': '%H:%M',
    'h': '%H',
}

# Placeholders handled by this module, as found inside a revision format
TIME_SCHEME_PATTERN = re.compile(r'\{[AaBbCc]:.+?\}')
LEGACY_TIME_SCHEME_PATTERN = re.compile(r'\{(?:(?:[Xx]|[Bb](?:36)?|d2?)min):.+?\}')

_READABLE_RE = re.compile(r'^\{?([abc]):(u?)(ymd|hms|hm|h)([-.:]?)\}?$')
_DOTTED_DECIMAL_RE = re.compile(r'^\{?([abc]):([0-9]+)([smhd]):([0-9]+)\}?$')
_BASE_ENCODED_RE = re.compile(r'^\{?([AaBbCc]):([0-9]+):([0-9]+)([smhd]):([0-9]+)(?::([0-9]+))?\}?$')
_HOURS_RE = re.compile(r'^\{?([abc]):h:([0-9]{4})-([0-9]{2})\}?$')
_LEGACY_HEX_RE = re.compile(r'^\{?([Xx])min:([0-9]+)(?::([0-9]+))?\}?$')
_LEGACY_BASE_RE = re.compile(r'^\{?([Bb])(36)?min:([0-9]+)(?::([0-9]+))?\}?$')
_LEGACY_DECIMAL_RE = re.compile(r'^\{?d(2)?min:([0-9]+)\}?$')


class SchemeType(Enum):
    """Kind of time encoding."""
    READABLE = 'readable'
    DOTTED_DECIMAL = 'dotted-decimal'
    BASE_ENCODED = 'base-encoded'
    HOURS = 'hours'


class TimeSource(Enum):
    """Which point in time a scheme encodes."""
    BUILD = 'b'
    COMMIT = 'c'
    AUTHOR = 'a'


@dataclass(frozen=True)
class SchemeSpec:
    """Parsed time scheme placeholder."""

    scheme_type: SchemeType
    time_source: TimeSource
    utc: bool = False
    time_format: str = ''
    alphabet: str = ''
    upper_case: bool = False
    interval_seconds: int = 0
    base_year: int = 0
    base_month: int = 1
    min_length: int = 1


def _interval_seconds(value: str, unit: str, scheme: str) -> int:
    seconds = int(value) * INTERVAL_UNITS[unit]
    if seconds <= 0:
        raise RevisionFormatError(f"Invalid time scheme interval: {scheme}")
    return seconds


def _alphabet_for_base(number_base: int) -> str:
    if number_base < 2 or number_base > 36:
        raise RevisionFormatError(f"Invalid number base: {number_base}")
    if number_base == 28:
        return BASE28_ALPHABET
    return BASE36_ALPHABET[:number_base]


def parse_time_scheme(scheme: str) -> SchemeSpec:
    """
    Parse a time scheme placeholder, with or without its braces.

    Args:
        scheme: Placeholder text like "{c:ymd-}" or "b:36:10m:2020:6"

    Returns:
        SchemeSpec: The parsed scheme

    Raises:
        RevisionFormatError: If the placeholder is not a valid time scheme
    """
    match = _READABLE_RE.match(scheme)
    if match:
        components = match.group(3) + match.group(4)
        if components not in READABLE_FORMATS:
            raise RevisionFormatError(f"Invalid time components and separator: {components}")
        spec = SchemeSpec(
            scheme_type=SchemeType.READABLE,
            time_source=TimeSource(match.group(1)),
            utc=match.group(2) == 'u',
            time_format=READABLE_FORMATS[components],
        )
        return spec

    match = _DOTTED_DECIMAL_RE.match(scheme)
    if match:
        spec = SchemeSpec(
            scheme_type=SchemeType.DOTTED_DECIMAL,
            time_source=TimeSource(match.group(1)),
            interval_seconds=_interval_seconds(match.group(2), match.group(3), scheme),
            base_year=int(match.group(4)),
        )
        return _check_base(spec, scheme)

    match = _BASE_ENCODED_RE.match(scheme)
    if match:
        source = match.group(1)
        spec = SchemeSpec(
            scheme_type=SchemeType.BASE_ENCODED,
            time_source=TimeSource(source.lower()),
            upper_case=source.isupper(),
            alphabet=_alphabet_for_base(int(match.group(2))),
            interval_seconds=_interval_seconds(match.group(3), match.group(4), scheme),
            base_year=int(match.group(5)),
            min_length=int(match.group(6)) if match.group(6) else 1,
        )
        return _check_base(spec, scheme)

    match = _HOURS_RE.match(scheme)
    if match:
        spec = SchemeSpec(
            scheme_type=SchemeType.HOURS,
            time_source=TimeSource(match.group(1)),
            interval_seconds=3600,
            base_year=int(match.group(2)),
            base_month=int(match.group(3)),
        )
        return _check_base(spec, scheme)

    # Legacy formats, always based on the commit time
    match = _LEGACY_HEX_RE.match(scheme)
    if match:
        spec = SchemeSpec(
            scheme_type=SchemeType.BASE_ENCODED,
            time_source=TimeSource.COMMIT,
            upper_case=match.group(1) == 'X',
            alphabet=_alphabet_for_base(16),
            interval_seconds=60,
            base_year=int(match.group(2)),
            min_length=int(match.group(3)) if match.group(3) else 1,
        )
        return _check_base(spec, scheme)

    match = _LEGACY_BASE_RE.match(scheme)
    if match:
        is_base36 = match.group(2) is not None
        spec = SchemeSpec(
            scheme_type=SchemeType.BASE_ENCODED,
            time_source=TimeSource.COMMIT,
            upper_case=match.group(1) == 'B',
            alphabet=_alphabet_for_base(36 if is_base36 else 28),
            interval_seconds=(10 if is_base36 else 20) * 60,
            base_year=int(match.group(3)),
            min_length=int(match.group(4)) if match.group(4) else 1,
        )
        return _check_base(spec, scheme)

    match = _LEGACY_DECIMAL_RE.match(scheme)
    if match:
        spec = SchemeSpec(
            scheme_type=SchemeType.DOTTED_DECIMAL,
            time_source=TimeSource.COMMIT,
            interval_seconds=(2 if match.group(1) else 15) * 60,
            base_year=int(match.group(2)),
        )
        return _check_base(spec, scheme)

    raise RevisionFormatError(f"Invalid time scheme: {scheme}")


def _check_base(spec: SchemeSpec, scheme: str) -> SchemeSpec:
    if not 1 <= spec.base_year <= 9999 or not 1 <= spec.base_month <= 12:
        raise RevisionFormatError(f"Invalid base date in time scheme: {scheme}")
    return spec


def _epoch(base_year: int, base_month: int = 1) -> datetime:
    return datetime(base_year, base_month, 1, tzinfo=timezone.utc)


def _to_utc(time: datetime) -> datetime:
    # Naive values are taken as local time
    return time.astimezone(timezone.utc)


def _format_readable(time: datetime, time_format: str) -> str:
    # strftime does not zero-pad years below 1000 on every platform
    return time.strftime(time_format.replace('%Y', f'{time.year:04d}'))


# Dotted decimal

def encode_decimal(time: datetime, interval_seconds: int, base_year: int) -> str:
    """Encode a time as '<days since base year>.<interval of that day>'."""
    delta = _to_utc(time) - _epoch(base_year)
    sign = ''
    if delta < timedelta(0):
        sign = '-'
        delta = -delta
    interval_count = delta.seconds // interval_seconds
    return f"{sign}{delta.days}.{interval_count}"


def decode_decimal(value: str, interval_seconds: int, base_year: int) -> Optional[datetime]:
    """Decode a dotted-decimal time value; None if it is out of range."""
    parts = value.strip().split('.')
    if len(parts) != 2 or not all(re.fullmatch(r'[0-9]+', part) for part in parts):
        return None

    days, interval_count = int(parts[0]), int(parts[1])
    if days >= MAX_COMPONENT_VALUE:
        return None
    max_interval_count = -(-SECONDS_PER_DAY // interval_seconds)
    if interval_count >= max_interval_count:
        return None

    try:
        return _epoch(base_year) + timedelta(days=days, seconds=interval_count * interval_seconds)
    except OverflowError:
        return None


# Base-x

def encode_base(time: datetime, alphabet: str, interval_seconds: int, base_year: int,
                min_length: int = 1, upper_case: bool = False) -> str:
    """
    Encode the number of intervals since the base year in base len(alphabet).

    The result is left-padded with the first alphabet character to ``min_length``.
    """
    delta = _to_utc(time) - _epoch(base_year)
    sign = ''
    if delta < timedelta(0):
        sign = '-'
        delta = -delta
    interval_count = delta // timedelta(seconds=interval_seconds)

    number_base = len(alphabet)
    digits = ''
    while interval_count > 0:
        interval_count, digit = divmod(interval_count, number_base)
        digits = alphabet[digit] + digits
    if upper_case:
        digits = digits.upper()
    return sign + digits.rjust(min_length, alphabet[0])


def decode_base(value: str, alphabet: str, interval_seconds: int, base_year: int) -> Optional[datetime]:
    """Decode a base-x time value; None if it contains characters outside the alphabet."""
    value = value.strip().lower()
    negative = value.startswith('-')
    if negative:
        value = value[1:]
    if not value:
        return None

    interval_count = 0
    for char in value:
        digit = alphabet.find(char)
        if digit == -1:
            return None
        interval_count = interval_count * len(alphabet) + digit

    if negative:
        interval_count = -interval_count
    try:
        return _epoch(base_year) + timedelta(seconds=interval_count * interval_seconds)
    except OverflowError:
        return None


# Hours

def encode_hours(time: datetime, base_year: int, base_month: int) -> str:
    """Encode the number of whole hours since the base year and month."""
    delta = _to_utc(time) - _epoch(base_year, base_month)
    hours = abs(delta) // timedelta(hours=1)
    return str(-hours if delta < timedelta(0) else hours)


def decode_hours(value: str, base_year: int, base_month: int) -> Optional[datetime]:
    """Decode an hours value; None if it is not a count in [0, 65535)."""
    value = value.strip()
    if not re.fullmatch(r'[0-9]+', value):
        return None
    hours = int(value)
    if hours >= MAX_COMPONENT_VALUE:
        return None
    try:
        return _epoch(base_year, base_month) + timedelta(hours=hours)
    except OverflowError:
        return None


# Readable

def decode_readable(value: str, time_format: str, utc: bool) -> Optional[datetime]:
    """Parse a readable time value; local values are taken as local time of this machine."""
    try:
        parsed = datetime.strptime(value.strip(), time_format)
    except ValueError:
        return None
    if utc:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, OSError):
        return None


def encode(spec: SchemeSpec, time: datetime) -> str:
    """
    Encode a time according to a parsed scheme.

    Args:
        spec: The parsed scheme
        time: The time to encode (naive values are taken as local time)

    Returns:
        str: The encoded value
    """
    if spec.scheme_type == SchemeType.READABLE:
        if spec.utc:
            time = _to_utc(time)
        return _format_readable(time, spec.time_format)
    if spec.scheme_type == SchemeType.DOTTED_DECIMAL:
        return encode_decimal(time, spec.interval_seconds, spec.base_year)
    if spec.scheme_type == SchemeType.BASE_ENCODED:
        return encode_base(time, spec.alphabet, spec.interval_seconds, spec.base_year,
                           spec.min_length, spec.upper_case)
    return encode_hours(time, spec.base_year, spec.base_month)


def decode(spec: SchemeSpec, value: str) -> Optional[datetime]:
    """
    Decode a value produced by ``encode`` back to a UTC time.

    The result is the encoded time truncated to the scheme's resolution.

    Returns:
        datetime: The decoded UTC time, or None if the value is invalid or out of range
    """
    if spec.scheme_type == SchemeType.READABLE:
        return decode_readable(value, spec.time_format, spec.utc)
    if spec.scheme_type == SchemeType.DOTTED_DECIMAL:
        return decode_decimal(value, spec.interval_seconds, spec.base_year)
    if spec.scheme_type == SchemeType.BASE_ENCODED:
        return decode_base(value, spec.alphabet, spec.interval_seconds, spec.base_year)
    return decode_hours(value, spec.base_year, spec.base_month)


def decode_value(scheme: str, value: str) -> datetime:
    """
    Decode a version value for the given scheme placeholder.

    Raises:
        RevisionFormatError: If the scheme or the value is invalid
    """
    time = decode(parse_time_scheme(scheme), value)
    if time is None:
        raise RevisionFormatError(f"Invalid revision ID value: {value}")
    return time


def format_time_scheme(scheme: str, revision_data: RevisionData, build_time: datetime) -> str:
    """
    Resolve one time scheme placeholder against revision data and build time.

    Args:
        scheme: The placeholder, e.g. "{c:ymd}"
        revision_data: Source of commit and author time
        build_time: Time of the current build

    Returns:
        str: The encoded time

    Raises:
        RevisionFormatError: If the placeholder is not a valid time scheme
    """
    spec = parse_time_scheme(scheme)
    if spec.time_source == TimeSource.BUILD:
        time = build_time
    elif spec.time_source == TimeSource.AUTHOR:
        time = revision_data.author_time
    else:
        time = revision_data.commit_time
    return encode(spec, time)
