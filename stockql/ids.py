"""Opaque id generation and validation.

Id format: ``<prefix>_<base36 timestamp><random>``, e.g. ``usr_lq2k3j9a8f0x1c``.
"""
from __future__ import annotations

import random
import re
import string
import time
from typing import Optional

__all__ = ['ID_PREFIXES', 'generate_id', 'validate_id', 'extract_prefix', 'id_factory']

ID_PREFIXES = {
    'user': 'usr',
    'session': 'ses',
    'organization': 'org',
    'member': 'mbr',
    'invitation': 'inv',
    'inventoryItem': 'itm',
    'consumptionLog': 'csl',
    'activityLog': 'act',
    'passwordResetToken': 'prt',
    'emailVerificationToken': 'evt',
    'file': 'fil',
    'product': 'prd',
}

_ALPHABET = string.digits + string.ascii_lowercase
_ANY_ID = re.compile(r'^[a-z]{3}_[a-z0-9]{12,}$')
_PREFIX = re.compile(r'^([a-z]{3})_')
_rng = random.SystemRandom()


def _base36(value: int) -> str:
    if value == 0:
        return '0'
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_ALPHABET[rem])
    return ''.join(reversed(out))


def generate_id(prefix: str) -> str:
    if prefix not in ID_PREFIXES.values():
        raise ValueError(f"Unknown id prefix: {prefix}")
    timestamp = _base36(int(time.time() * 1000))
    random_part = ''.join(_rng.choice(_ALPHABET) for _ in range(6))
    return f"{prefix}_{timestamp}{random_part}"


def validate_id(value: str, expected_prefix: Optional[str] = None) -> bool:
    if not isinstance(value, str):
        return False
    if expected_prefix:
        return re.match(rf'^{re.escape(expected_prefix)}_[a-z0-9]{{12,}}$', value) is not None
    return _ANY_ID.match(value) is not None


def extract_prefix(value: str) -> Optional[str]:
    match = _PREFIX.match(value or '')
    if not match:
        return None
    prefix = match.group(1)
    return prefix if prefix in ID_PREFIXES.values() else None


def id_factory(kind: str):
    """Column default callable generating ids for the given entity kind."""
    prefix = ID_PREFIXES[kind]

    def _default() -> str:
        return generate_id(prefix)

    _default.__name__ = f"generate_{kind}_id"
    return _default
