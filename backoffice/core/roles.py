"""
Role normalisation and write-access policy.

The ``users.roles`` column is shared with the POS till software and has
been written in several shapes over time: a JSON array, a JSON object of
flags, a comma list, a single word.  ``parse_roles`` is the only place
that looks at the raw value; everything downstream works on the
normalised ``frozenset``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from typing import Any

_SEPARATORS = re.compile(r"[,\s]+")

RoleSet = frozenset[str]


def _normalise(items: Iterable[Any]) -> RoleSet:
    return frozenset(str(item).strip().lower() for item in items if str(item).strip())


def parse_roles(raw: Any) -> RoleSet:
    """Return the lowercase role names encoded in *raw*.

    Accepts a list/tuple/set, a mapping (its keys are the roles), bytes,
    a JSON-encoded list or object, or a comma/whitespace separated string.
    Never raises: anything unusable yields an empty set.
    """
    if raw is None:
        return frozenset()
    if isinstance(raw, Mapping):
        return _normalise(raw.keys())
    if isinstance(raw, (list, tuple, set, frozenset)):
        return _normalise(raw)
    if isinstance(raw, (bytes, bytearray, memoryview)):
        raw = bytes(raw).decode("utf-8", errors="ignore")
    if not isinstance(raw, str):
        return frozenset()

    text = raw.strip()
    if not text:
        return frozenset()
    if text[0] in "[{\"":
        try:
            decoded = json.loads(text)
        except ValueError:
            decoded = None
        if isinstance(decoded, Mapping):
            return _normalise(decoded.keys())
        if isinstance(decoded, list):
            return _normalise(decoded)
        if isinstance(decoded, str):
            text = decoded
    return _normalise(_SEPARATORS.split(text))


class RoleGate:
    """Decides whether a role set may perform create/update/delete."""

    def __init__(self, enforce: bool, write_roles: Iterable[str]) -> None:
        self.enforce = enforce
        self.write_roles = _normalise(write_roles)

    @classmethod
    def from_settings(cls, settings) -> RoleGate:
        return cls(settings.ENFORCE_ROLES, settings.WRITE_ROLES)

    def can_write(self, roles: Any) -> bool:
        if not self.enforce:
            return True
        if not isinstance(roles, frozenset):
            roles = parse_roles(roles)
        return not self.write_roles.isdisjoint(roles)
