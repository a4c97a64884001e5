"""
Text codec for persisted feature records and the feature index.

A feature record holds four fields in a fixed order::

    percentage|users|groups|locales

`users` and `groups` are comma-joined lists and `locales` is a
comma-joined list of `name:percentage` pairs, e.g.
`50|alice,bob|beta_testers|fr:20,all:0`. The index record is a
comma-joined list of feature names.

Separators are not escaped. User identities, group names, locale names
and feature names must not contain `|`, `,` or `:`; a record holding
them will not read back the same.

Decoding is forgiving: missing fields read as empty, unparseable
numbers read as 0, and empty list entries are dropped.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

FIELD_SEPARATOR = "|"
LIST_SEPARATOR = ","
LOCALE_SEPARATOR = ":"

RESERVED_CHARACTERS = frozenset(FIELD_SEPARATOR + LIST_SEPARATOR + LOCALE_SEPARATOR)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass
class FeatureRecord:
    """Decoded fields of a feature record."""
    percentage: int = 0
    users: List[str] = field(default_factory=list)
    groups: List[str] = field(default_factory=list)
    locales: Dict[str, int] = field(default_factory=dict)


def parse_int(raw: Optional[str]) -> int:
    """Parse the leading integer of `raw`, or 0 when there is none."""
    if not raw:
        return 0
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else 0


def split_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [item for item in raw.split(LIST_SEPARATOR) if item]


def decode_locales(raw: Optional[str]) -> Dict[str, int]:
    locales: Dict[str, int] = {}
    for entry in split_list(raw):
        name, _, percentage = entry.partition(LOCALE_SEPARATOR)
        locales[name] = parse_int(percentage)
    return locales


def encode_locales(locales: Mapping[str, int]) -> str:
    return LIST_SEPARATOR.join(
        f"{name}{LOCALE_SEPARATOR}{percentage}" for name, percentage in locales.items()
    )


def decode_record(raw: Optional[str]) -> FeatureRecord:
    """Decode a stored feature record; never raises on malformed text."""
    if raw is None:
        return FeatureRecord()

    fields = raw.split(FIELD_SEPARATOR)
    # Short records pad with empty fields, extra fields are ignored
    fields += [""] * (4 - len(fields))
    raw_percentage, raw_users, raw_groups, raw_locales = fields[:4]

    return FeatureRecord(
        percentage=parse_int(raw_percentage),
        users=split_list(raw_users),
        groups=split_list(raw_groups),
        locales=decode_locales(raw_locales),
    )


def encode_record(
    percentage: Optional[int],
    users: Iterable[str],
    groups: Iterable[str],
    locales: Mapping[str, int],
) -> str:
    """Encode feature fields into a record."""
    return FIELD_SEPARATOR.join([
        str(percentage or 0),
        LIST_SEPARATOR.join(users),
        LIST_SEPARATOR.join(groups),
        encode_locales(locales),
    ])


def decode_index(raw: Optional[str]) -> List[str]:
    """Decode the feature index into names, keeping first occurrence order."""
    names: List[str] = []
    for name in split_list(raw):
        if name not in names:
            names.append(name)
    return names


def encode_index(names: Iterable[str]) -> str:
    return LIST_SEPARATOR.join(names)


def has_reserved_characters(value: str) -> bool:
    """Check whether a name or identity would corrupt a record."""
    return any(char in RESERVED_CHARACTERS for char in value)
