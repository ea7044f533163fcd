"""Schemas for push device registration."""

from pydantic import BaseModel, Field


class DeviceTokenRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=4096)


class DeviceTokensRead(BaseModel):
    tokens: list[str]


__all__ = ["DeviceTokenRequest", "DeviceTokensRead"]
