"""Tests for the JSON Record Store."""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from ingestion.errors import RecordStoreError
from ingestion.events import TokenLaunchEvent, TokenLegInfo
from storage import JsonRecordStore


def make_event(signature: str = "SIG1", report=None) -> TokenLaunchEvent:
    return TokenLaunchEvent(
        signature=signature,
        logs=["Program log: initialize2"],
        creator="Creator111",
        timestamp=datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
        base_info=TokenLegInfo(address="MintX", decimals=6, amount=1000.0),
        quote_info=TokenLegInfo(address="So11111111111111111111111111111111111111112", decimals=9, amount=80.0),
        risk_assessment=report,
    )


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def path(tmp_path):
    return tmp_path / "data" / "new_solana_tokens.json"


@pytest.fixture
def store(path):
    return JsonRecordStore(path)


def read_records(path):
    with open(path) as f:
        return json.load(f)


# ============================================================================
# Unit Tests - JsonRecordStore
# ============================================================================

class TestJsonRecordStore:
    """Tests for JsonRecordStore.upsert and readers."""

    @pytest.mark.asyncio
    async def test_first_upsert_creates_file(self, store, path):
        await store.upsert(make_event())

        records = read_records(path)
        assert len(records) == 1
        assert records[0]["signature"] == "SIG1"
        assert records[0]["baseInfo"] == {"address": "MintX", "decimals": 6, "amount": 1000.0}
        assert records[0]["riskAssessment"] is None

    @pytest.mark.asyncio
    async def test_idempotent_upsert(self, store, path):
        """Same signature and payload twice leaves one record."""
        event = make_event()

        await store.upsert(event)
        await store.upsert(event)

        records = read_records(path)
        assert len(records) == 1

    @pytest.mark.asyncio
    async def test_second_upsert_only_sets_assessment(self, store, path):
        await store.upsert(make_event())

        changed = make_event(report={"score": 42})
        changed.creator = "SomebodyElse"
        changed.logs = ["different"]
        await store.upsert(changed)

        records = read_records(path)
        assert len(records) == 1
        assert records[0]["riskAssessment"] == {"score": 42}
        assert records[0]["creator"] == "Creator111"
        assert records[0]["logs"] == ["Program log: initialize2"]

    @pytest.mark.asyncio
    async def test_assessment_never_cleared(self, store, path):
        await store.upsert(make_event(report={"score": 42}))
        await store.upsert(make_event(report=None))

        assert read_records(path)[0]["riskAssessment"] == {"score": 42}

    @pytest.mark.asyncio
    async def test_preserves_insertion_order(self, store):
        for sig in ("SIG1", "SIG2", "SIG3"):
            await store.upsert(make_event(sig))

        records = await store.load()
        assert [r["signature"] for r in records] == ["SIG1", "SIG2", "SIG3"]

    @pytest.mark.asyncio
    async def test_concurrent_upserts_keep_every_record(self, store):
        """No record is dropped by an overlapping upsert of another key."""
        await asyncio.gather(*(store.upsert(make_event(f"SIG{i}")) for i in range(25)))

        records = await store.load()
        assert sorted(r["signature"] for r in records) == sorted(f"SIG{i}" for i in range(25))

    @pytest.mark.asyncio
    async def test_get_roundtrip(self, store):
        await store.upsert(make_event(report={"score": 7}))

        event = await store.get("SIG1")

        assert event is not None
        assert event.base_info.address == "MintX"
        assert event.risk_assessment == {"score": 7}
        assert event.timestamp == datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get("NOPE") is None

    @pytest.mark.asyncio
    async def test_empty_file_treated_as_empty(self, store, path):
        path.parent.mkdir(parents=True)
        path.write_text("")

        await store.upsert(make_event())

        assert len(read_records(path)) == 1

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, store, path):
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        with pytest.raises(RecordStoreError):
            await store.upsert(make_event())

    @pytest.mark.asyncio
    async def test_non_array_document_raises(self, store, path):
        path.parent.mkdir(parents=True)
        path.write_text('{"signature": "SIG1"}')

        with pytest.raises(RecordStoreError):
            await store.load()
