"""Shared payload builders and fakes for the test suite."""

from datetime import datetime, timedelta, timezone

from uvguard.models import GeoPoint, NewUVRecord, RecordMetadata, UVRecord, UVResponse


def make_openuv_payload(uv=5.2, uv_max=8.1, risk="very high", ozone=310.5):
    return {
        "result": {
            "uv": uv,
            "uv_time": "2024-06-01T19:12:00.000Z",
            "uv_max": uv_max,
            "uv_max_time": "2024-06-01T20:05:00.000Z",
            "uv_max_risk": risk,
            "ozone": ozone,
            "ozone_time": "2024-06-01T18:00:00.000Z",
            "safe_exposure_time": {"st1": 19, "st2": 23, "st3": 31, "st4": 38, "st5": 61, "st6": 114},
        }
    }


def make_uv_response(lat=37.7749, lng=-122.4194, **kwargs) -> UVResponse:
    return UVResponse.model_validate({**make_openuv_payload(**kwargs), "lat": lat, "lng": lng})


def make_new_record(uv_index=4.0, status="synced") -> NewUVRecord:
    return NewUVRecord(
        uv_index=uv_index,
        risk_level="moderate",
        location=GeoPoint(latitude=37.7749, longitude=-122.4194),
        metadata=RecordMetadata(status=status, retry_count=0, created_at="2024-06-01T19:12:00+00:00"),
    )


def make_record(record_id: str, minutes: int = 0, uv_index: float = 4.0) -> UVRecord:
    base = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    return UVRecord(
        **make_new_record(uv_index=uv_index).model_dump(),
        id=record_id,
        timestamp=base + timedelta(minutes=minutes),
    )


class DummyResp:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """requests.Session stand-in that replays queued responses or exceptions."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


class RecordingSleep:
    """Async sleep replacement that records requested delays without waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class RecordingToggle:
    def __init__(self):
        self.events = []

    async def enable_network(self):
        self.events.append("enable")

    async def disable_network(self):
        self.events.append("disable")
