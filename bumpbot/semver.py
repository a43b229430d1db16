"""
Patch-version increment rule.

This is the only place bumpbot interprets a version string.
"""

import re

from .errors import InvalidSemverError

# Prefix match only: anything after the patch number (pre-release, build
# metadata) is dropped from the result.
_SEMVER_PREFIX = re.compile(r'^(v?\d+\.\d+\.)(\d+)')


def next_patch(tag: str) -> str:
    """Return ``tag`` with its patch number incremented by one.

    The optional ``v`` and the major/minor text are kept verbatim::

        >>> next_patch("v3.11.110")
        'v3.11.111'
        >>> next_patch("1.2.3-rc.1")
        '1.2.4'

    Raises:
        InvalidSemverError: if ``tag`` does not start with ``[v]N.N.N``
    """
    m = _SEMVER_PREFIX.match(tag)
    if not m:
        raise InvalidSemverError(tag)
    prefix, patch = m.groups()
    return f"{prefix}{int(patch) + 1}"
