"""
External identifiers for users, teams, events and sessions.

Rows keep an integer primary key for joins plus a UUIDv7 column. Only the
UUID leaves the server, rendered as ``{prefix}_{26 Crockford base32 chars}``:

    usr_01hgw2bbg00000000000000000   User
    ten_01hgw2bbg00000000000000001   Team
    evt_01hgw2bbg00000000000000002   Event
    ses_01hgw2bbg00000000000000003   Session
"""

import re
import uuid as uuid_module
from typing import ClassVar, Optional

import base32_crockford
from sqlalchemy import Column, LargeBinary, TypeDecorator
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from uuid_extensions import uuid7


ENCODED_LENGTH = 26

# Crockford alphabet without the check symbols (*~$=U)
_ENCODED_RE = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$", re.IGNORECASE)


def encode_guid(prefix: str, value: uuid_module.UUID) -> str:
    encoded = base32_crockford.encode(value.int).zfill(ENCODED_LENGTH)
    return f"{prefix}_{encoded.lower()}"


def decode_guid(prefix: str, guid: str) -> uuid_module.UUID:
    """
    Decode a prefixed GUID back to its UUID.

    Prefix match and decoding are case-insensitive.

    Raises:
        ValueError: Empty input, wrong prefix, wrong length, characters
            outside the Crockford alphabet, or a value wider than 128 bits
    """
    if not guid:
        raise ValueError("GUID cannot be empty")

    head, sep, encoded = guid.partition("_")
    if not sep or head.lower() != prefix:
        raise ValueError(f"Expected a '{prefix}_' GUID, got '{guid}'")
    if len(encoded) != ENCODED_LENGTH:
        raise ValueError(
            f"Invalid GUID length: expected {ENCODED_LENGTH} characters "
            f"after the prefix, got {len(encoded)}"
        )
    if not _ENCODED_RE.match(encoded):
        raise ValueError(f"Invalid characters in GUID '{guid}'")

    value = base32_crockford.decode(encoded.upper())
    if value >> 128:
        raise ValueError(f"GUID '{guid}' does not fit in a UUID")
    return uuid_module.UUID(int=value)


class UUIDType(TypeDecorator):
    """UUID column: native on PostgreSQL, 16 raw bytes elsewhere (SQLite)."""

    impl = LargeBinary
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(LargeBinary(16))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, uuid_module.UUID):
            value = uuid_module.UUID(bytes=value) if isinstance(value, bytes) else uuid_module.UUID(str(value))
        return value if dialect.name == "postgresql" else value.bytes

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid_module.UUID):
            return value
        if isinstance(value, bytes):
            return uuid_module.UUID(bytes=value)
        return uuid_module.UUID(str(value))


class GuidMixin:
    """
    Adds the ``uuid`` column, the ``guid`` property and ``parse_guid``.

    Subclasses set GUID_PREFIX:

        class Event(Base, GuidMixin):
            GUID_PREFIX = "evt"
    """

    GUID_PREFIX: ClassVar[str]

    uuid = Column(
        UUIDType(),
        nullable=False,
        unique=True,
        index=True,
        default=uuid7,
    )

    @property
    def guid(self) -> Optional[str]:
        """Prefixed external id, or None until the row is flushed."""
        if self.uuid is None:
            return None
        return encode_guid(self.GUID_PREFIX, self.uuid)

    @classmethod
    def parse_guid(cls, guid: str) -> uuid_module.UUID:
        return decode_guid(cls.GUID_PREFIX, guid)
