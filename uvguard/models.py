"""Pydantic models for provider payloads and persisted UV records."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """Validated WGS84 position."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(ge=-180, le=180, allow_inf_nan=False)


class UVResult(BaseModel):
    """The `result` block of an OpenUV response; unknown fields are kept."""
    model_config = ConfigDict(frozen=True, extra="allow")

    uv: float
    uv_max: float
    uv_max_risk: str
    ozone: float
    safe_exposure_time: Dict[str, Optional[float]] = Field(default_factory=dict)


class UVResponse(BaseModel):
    """Provider payload with the requesting coordinate attached as lat/lng."""
    model_config = ConfigDict(frozen=True, extra="allow")

    result: UVResult
    lat: float
    lng: float


class GeoPoint(BaseModel):
    """Stored location of a reading."""
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class RecordMetadata(BaseModel):
    """Sync bookkeeping written alongside each record."""
    model_config = ConfigDict(frozen=True)

    status: Literal["synced", "pending"]
    retry_count: int = 0
    created_at: str


class NewUVRecord(BaseModel):
    """A record as written by the client; id and timestamp are store-assigned."""
    model_config = ConfigDict(frozen=True)

    uv_index: float
    risk_level: str
    location: GeoPoint
    metadata: RecordMetadata


class UVRecord(NewUVRecord):
    """A record as read back from the document store."""

    id: str
    timestamp: Optional[datetime] = None
