"""Tests for the validation layer between the client and the aggregator."""

import json
import logging

import pytest

from clubledger.exceptions import MalformedRecordError
from clubledger.models import MatchCostRecord
from clubledger.validation import validate_record, validate_records

CTX = {"endpoint": "unpaid-report"}


@pytest.fixture
def valid_row() -> dict:
    return {
        "playerId": 1,
        "playerName": "John Doe",
        "matchId": 7,
        "matchDate": "2024-03-01T19:00:00Z",
        "matchCost": 100,
        "matchPlayerCount": 4,
    }


@pytest.fixture
def invalid_row(valid_row) -> dict:
    """Row without a match date."""
    del valid_row["matchDate"]
    return valid_row


# ===================================================================
# validate_record
# ===================================================================


class TestValidateRecord:
    def test_valid_returns_model(self, valid_row):
        result = validate_record(valid_row, MatchCostRecord, CTX)
        assert isinstance(result, MatchCostRecord)
        assert result.match_id == 7

    def test_invalid_returns_none_and_quarantines(self, invalid_row):
        quarantine = []
        result = validate_record(invalid_row, MatchCostRecord, CTX, quarantine)
        assert result is None
        assert len(quarantine) == 1
        q = quarantine[0]
        assert q.entity_type == "MatchCostRecord"
        assert q.endpoint == "unpaid-report"
        assert json.loads(q.raw_data)["playerId"] == 1
        assert "matchDate" in q.error_details or "match_date" in q.error_details

    def test_no_quarantine_list_does_not_crash(self, invalid_row):
        assert validate_record(invalid_row, MatchCostRecord, CTX) is None

    def test_strict_raises(self, invalid_row):
        with pytest.raises(MalformedRecordError) as exc_info:
            validate_record(invalid_row, MatchCostRecord, CTX, strict=True)
        assert exc_info.value.raw_data is invalid_row

    def test_soft_warning_logged(self, valid_row, caplog):
        valid_row["matchPlayerCount"] = 0
        with caplog.at_level(logging.WARNING, logger="clubledger.validation"):
            result = validate_record(valid_row, MatchCostRecord, CTX)
        assert result is not None
        assert "no registrants" in caplog.text


# ===================================================================
# validate_records
# ===================================================================


class TestValidateRecords:
    def test_all_valid(self, valid_row):
        records, quarantined = validate_records([valid_row, dict(valid_row)], MatchCostRecord, CTX)
        assert len(records) == 2
        assert quarantined == []

    def test_skip_and_continue(self, valid_row, invalid_row):
        good = dict(valid_row, matchDate="2024-03-01T19:00:00Z")
        records, quarantined = validate_records([good, invalid_row], MatchCostRecord, CTX)
        assert len(records) == 1
        assert len(quarantined) == 1

    def test_non_object_row_quarantined(self, valid_row):
        records, quarantined = validate_records([valid_row, 42], MatchCostRecord, CTX)
        assert len(records) == 1
        assert quarantined[0].error_details == "row is not an object"

    def test_strict_fails_whole_batch(self, valid_row, invalid_row):
        good = dict(valid_row, matchDate="2024-03-01T19:00:00Z")
        with pytest.raises(MalformedRecordError):
            validate_records([good, invalid_row], MatchCostRecord, CTX, strict=True)

    def test_non_array_payload_rejected(self):
        with pytest.raises(MalformedRecordError, match="JSON array"):
            validate_records({"error": "nope"}, MatchCostRecord, CTX)

    def test_empty_list(self):
        assert validate_records([], MatchCostRecord, CTX) == ([], [])
