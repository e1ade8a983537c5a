import asyncio
import unittest

from uvguard.config import Settings
from uvguard.errors import InvalidArgument, ProviderError
from uvguard.service import UVService, write_key
from uvguard.store.memory import InMemoryDocumentStore
from tests._fixtures import DummyResp, FakeSession, make_openuv_payload, make_uv_response


class TestWriteKey(unittest.TestCase):
    def test_format(self):
        data = make_uv_response(lat=1.5, lng=-2.25)
        self.assertEqual(write_key(data, now_ms=1717265520000), "uv-1.5--2.25-1717265520000")


class TestUVService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.settings = Settings(openuv_api_key="k", backoff_base_ms=1, history_flush_seconds=0.05)
        self.store = InMemoryDocumentStore()
        self.session = FakeSession(DummyResp(make_openuv_payload(uv=7.3, risk="high")))
        self.service = UVService(self.settings, store=self.store, session=self.session)

    async def test_fetch_then_save_round_trip(self):
        data = await self.service.get_uv_data(37.7749, -122.4194)
        record_id = await self.service.save_uv_record(data)
        records = await self.service.list_history()
        self.assertEqual([r.id for r in records], [record_id])
        record = records[0]
        self.assertEqual(record.uv_index, 7.3)
        self.assertEqual(record.risk_level, "high")
        self.assertEqual((record.location.latitude, record.location.longitude), (37.7749, -122.4194))
        self.assertEqual(record.metadata.status, "synced")
        self.assertEqual(record.metadata.retry_count, 0)

    async def test_invalid_coordinates(self):
        with self.assertRaises(InvalidArgument):
            await self.service.get_uv_data(91, 0)
        self.assertEqual(self.session.calls, [])

    async def test_duplicate_save_writes_once(self):
        data = make_uv_response()
        first, second = await asyncio.gather(
            self.service.save_uv_record(data, key="same"),
            self.service.save_uv_record(data, key="same"),
        )
        self.assertEqual(first, second)
        self.assertEqual(len(self.store), 1)

    async def test_save_while_store_offline_degrades(self):
        await self.service.set_connectivity(False)
        seen = []
        self.service.subscribe_connection(seen.append)
        self.assertIsNone(await self.service.save_uv_record(make_uv_response()))
        self.assertEqual(len(self.store), 0)
        self.assertFalse(self.service.is_online)
        self.assertEqual(seen, [False])

    async def test_connectivity_signal_reenables_store(self):
        await self.service.set_connectivity(False)
        await self.service.set_connectivity(True)
        self.assertTrue(self.store.network_enabled)
        self.assertIsNotNone(await self.service.save_uv_record(make_uv_response()))

    async def test_provider_failures_take_store_offline(self):
        self.session.responses = [DummyResp({"message": "down"}, status_code=500)]
        with self.assertRaises(ProviderError):
            await self.service.get_uv_data(1.0, 1.0)
        self.assertFalse(self.service.is_online)
        self.assertFalse(self.store.network_enabled)

    async def test_watch_history_sees_saved_records(self):
        async with self.service.watch_history() as feed:
            await self.service.save_uv_record(make_uv_response(uv=2.0), key="a")
            await self.service.save_uv_record(make_uv_response(uv=9.0), key="b")
            await asyncio.sleep(0.2)
            self.assertEqual(len(feed.records), 2)
            stamps = [r.timestamp for r in feed.records]
            self.assertEqual(stamps, sorted(stamps, reverse=True))


if __name__ == "__main__":
    unittest.main()
