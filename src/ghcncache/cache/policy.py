"""Refresh directives controlling when cached content is re-fetched.

A directive is one of 'always', 'never', 'yearly' or a number of days. It is
parsed once into a policy object; the fetcher then matches on the policy type.

- Always: probe the origin whenever the content is cached, re-fetch if newer
- Never: serve only from the cache, never contact the origin
- Yearly: accept content cached since January 1 of the current year
- WithinDays(n): accept content cached since midnight n days ago
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from ghcncache.cache.errors import InvalidPolicy


@dataclass(frozen=True)
class Always:
    def __str__(self) -> str:
        return "always"


@dataclass(frozen=True)
class Never:
    def __str__(self) -> str:
        return "never"


@dataclass(frozen=True)
class Yearly:
    def __str__(self) -> str:
        return "yearly"


@dataclass(frozen=True)
class WithinDays:
    days: int

    def __post_init__(self):
        if self.days < 0:
            raise InvalidPolicy(f"Refresh days must be non-negative, got {self.days}")

    def __str__(self) -> str:
        return str(self.days)


FreshnessPolicy = Union[Always, Never, Yearly, WithinDays]

_NAMED_POLICIES = {
    "always": Always(),
    "never": Never(),
    "yearly": Yearly(),
}


def parse_policy(value: Union[str, int, FreshnessPolicy]) -> FreshnessPolicy:
    """Parse a refresh directive.

    Args:
        value: 'always', 'never', 'yearly' (any case), a string of decimal
            digits, a non-negative int, or an already parsed policy

    Returns:
        The corresponding policy

    Raises:
        InvalidPolicy: If the directive is not recognized

    Examples:
        >>> parse_policy("Always")
        Always()
        >>> parse_policy("7")
        WithinDays(days=7)
    """
    if isinstance(value, (Always, Never, Yearly, WithinDays)):
        return value

    if isinstance(value, bool):
        raise InvalidPolicy(f"Invalid refresh option: {value!r}")

    if isinstance(value, int):
        return WithinDays(value)

    if not isinstance(value, str):
        raise InvalidPolicy(f"Invalid refresh option: {value!r}")

    directive = value.strip().lower()
    if directive in _NAMED_POLICIES:
        return _NAMED_POLICIES[directive]

    # str.isdigit() also accepts non-ASCII digits such as superscripts
    if directive and directive.isascii() and directive.isdigit():
        return WithinDays(int(directive))

    raise InvalidPolicy(
        f"Invalid refresh option: {value!r} "
        "(expected 'always', 'never', 'yearly' or a number of days)"
    )


def cutoff_for(policy: FreshnessPolicy, now: datetime) -> Optional[datetime]:
    """Earliest modification time at which cached content is still accepted.

    Returns:
        The cutoff for Yearly and WithinDays policies, None for the others
    """
    match policy:
        case Yearly():
            return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        case WithinDays(days=days):
            midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
            return midnight - timedelta(days=days)
        case Always() | Never():
            return None
