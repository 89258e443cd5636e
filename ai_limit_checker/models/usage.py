"""Pydantic models for provider usage records and the normalized status."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import UNKNOWN

ProviderName = Literal["claude", "gemini", "zai"]
LimitState = Literal["rate_limit_exceed", "available"]


# ── Claude ───────────────────────────────────────────────────────────────────


class ClaudeStatusInfo(BaseModel):
    """Fields scraped from the Claude CLI `/usage` view."""

    session_used: int = 0
    session_reset_time: str = UNKNOWN
    session_reset_timezone: Optional[str] = None
    weekly_used: int = 0
    weekly_reset_time: str = UNKNOWN
    weekly_reset_timezone: Optional[str] = None
    has_subscription: bool = True


# ── Gemini ───────────────────────────────────────────────────────────────────


class GeminiModelUsage(BaseModel):
    """One row of the Gemini CLI `/stats` model usage table."""

    model: str
    requests: str = "-"  # request count, or "-" when the CLI shows none
    usage: str = "0"
    resets: str = UNKNOWN


# ── Z.ai ─────────────────────────────────────────────────────────────────────


class ZaiUsageDetail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    model_code: str = Field(default="", alias="modelCode")
    usage: float = 0


class ZaiLimit(BaseModel):
    """A single quota limit reported by the Z.ai monitor API."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    unit: int = 0
    number: int = 0
    usage: float = 0
    current_value: float = Field(default=0, alias="currentValue")
    remaining: float = 0
    percentage: float = 0
    next_reset_time: Optional[int] = Field(default=None, alias="nextResetTime")
    usage_details: list[ZaiUsageDetail] = Field(default_factory=list, alias="usageDetails")


class ZaiUsageData(BaseModel):
    limits: list[ZaiLimit] = Field(default_factory=list)


class ZaiUsageResponse(BaseModel):
    """Envelope wrapped around every Z.ai monitor API payload."""

    code: int = 0
    msg: str = ""
    success: bool = False
    data: Optional[ZaiUsageData] = None


# ── Normalized Output ────────────────────────────────────────────────────────


class LlmLimitStatus(BaseModel):
    """Uniform per-provider result. Rebuilt on every check, never stored."""

    model_config = ConfigDict(populate_by_name=True)

    provider: str
    status: LimitState = "available"
    reset_at: Optional[int] = Field(default=None, alias="resetAt")  # epoch ms
    reset_at_human: Optional[str] = Field(default=None, alias="resetAtHuman")

    @property
    def is_rate_limited(self) -> bool:
        return self.status == "rate_limit_exceed"

    def to_output(self) -> dict:
        """JSON-ready dict using the camelCase keys of the CLI output."""
        return self.model_dump(by_alias=True, exclude_none=True)
