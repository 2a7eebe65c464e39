"""Role labels carried by user accounts and bearer tokens."""

import enum
from typing import FrozenSet, Iterable


class Role(str, enum.Enum):
    READER = "Reader"
    WRITER = "Writer"
    ADMIN = "Admin"


DEFAULT_ROLES = [Role.READER.value]


def parse_roles(values: Iterable[str]) -> FrozenSet[Role]:
    """Maps stored/claimed labels onto Role members, dropping unknown labels."""
    known = {role.value: role for role in Role}
    return frozenset(known[value] for value in values if value in known)
