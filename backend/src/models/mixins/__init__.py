"""Column mixins shared by the ORM models."""

from backend.src.models.mixins.audit import AuditMixin
from backend.src.models.mixins.guid import GuidMixin, decode_guid, encode_guid

__all__ = ["AuditMixin", "GuidMixin", "decode_guid", "encode_guid"]
