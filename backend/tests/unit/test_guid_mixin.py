"""
Unit tests for GUID encoding on models.
"""

import uuid

import pytest

from backend.src.models import Event, Team, User, UserSession
from backend.src.models.mixins import decode_guid, encode_guid


class TestGuidMixin:
    """Tests for the guid property and parse_guid."""

    @pytest.mark.parametrize("model,prefix", [
        (User, "usr"), (Team, "ten"), (Event, "evt"), (UserSession, "ses"),
    ])
    def test_prefixes(self, model, prefix):
        assert model.GUID_PREFIX == prefix

    def test_round_trip(self, team_a):
        assert Team.parse_guid(team_a.guid) == team_a.uuid

    def test_guid_shape(self, alice):
        prefix, encoded = alice.guid.split("_")
        assert prefix == "usr"
        assert len(encoded) == 26
        assert encoded == encoded.lower()

    def test_parse_is_case_insensitive(self, team_a):
        assert Team.parse_guid(team_a.guid.upper().replace("TEN_", "ten_")) == team_a.uuid

    @pytest.mark.parametrize("guid", ["", "ten_short", "evt_01hgw2bbg00000000000000000", "ten_01hgw2bbg0000000000000000u", "ten_01hgw2bbg000000000000000!0", "ten_zzzzzzzzzzzzzzzzzzzzzzzzzz", "ten01hgw2bbg000000000000000000"])
    def test_parse_rejects(self, guid):
        with pytest.raises(ValueError):
            Team.parse_guid(guid)

    def test_guid_unset_before_flush(self):
        assert Team(name="Unsaved").guid is None


class TestGuidCodec:
    """Tests for the module-level encode/decode helpers."""

    def test_zero_pads_small_values(self):
        assert encode_guid("evt", uuid.UUID(int=1)) == "evt_" + "0" * 25 + "1"

    def test_max_uuid_fits(self):
        value = uuid.UUID(int=(1 << 128) - 1)
        assert decode_guid("evt", encode_guid("evt", value)) == value

    def test_prefix_must_match(self):
        with pytest.raises(ValueError):
            decode_guid("evt", encode_guid("ten", uuid.UUID(int=7)))
