import unittest

from pydantic import ValidationError

from uvguard.models import UVRecord, UVResponse
from tests._fixtures import make_new_record, make_openuv_payload


class TestModels(unittest.TestCase):
    def test_uv_response_keeps_unknown_fields(self):
        resp = UVResponse.model_validate({**make_openuv_payload(), "lat": 1.0, "lng": 2.0})
        self.assertEqual(resp.result.model_extra["uv_time"], "2024-06-01T19:12:00.000Z")

    def test_uv_response_is_read_only(self):
        resp = UVResponse.model_validate({**make_openuv_payload(), "lat": 1.0, "lng": 2.0})
        with self.assertRaises(ValidationError):
            resp.lat = 5.0

    def test_metadata_status_is_restricted(self):
        data = make_new_record().model_dump()
        data["metadata"]["status"] = "lost"
        with self.assertRaises(ValidationError):
            UVRecord(**data, id="x")

    def test_record_timestamp_optional(self):
        record = UVRecord(**make_new_record().model_dump(), id="x")
        self.assertIsNone(record.timestamp)


if __name__ == "__main__":
    unittest.main()
