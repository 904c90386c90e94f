from __future__ import annotations
import logging
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, conint, field_validator

logger = logging.getLogger(__name__)

SliderIndex = conint(ge=0)

# Thresholds for the named noise reduction levels
NOISE_REDUCTION_LEVELS = {
    "low": 0.015,
    "default": 0.025,
    "high": 0.035,
}


class SliderMoveEvent(BaseModel):
    """A slider's normalized position changed meaningfully."""
    model_config = ConfigDict(frozen=True)

    slider_id: SliderIndex = Field(description="Zero-based slider index, aligned to the configured slider names")
    percent_value: float = Field(description="Normalized position, 0.0-1.0 (may exceed 1.0 for out of range raw readings)")


class SensorReading(BaseModel):
    """Body of an ESPHome `GET /sensor/<id>` response."""
    id: str
    state: str = ""
    value: int


class SliderConfig(BaseModel):
    """
    Slider configuration read from the JSON config file.

    Field names follow the keys used in the file:

    {
      "esphome_ip_addr": "192.168.1.50",
      "esphome_slider_names": ["slider_1", "slider_2"],
      "invert_sliders": false,
      "noise_reduction": "default"
    }
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    esphome_ip_addr: str = Field(default="", description="Network address of the ESPHome device")
    esphome_slider_names: List[str] = Field(default_factory=list, description="Sensor ids, one per slider, in slider order")
    invert_sliders: bool = Field(default=False, description="Report 1 - x instead of x")
    noise_reduction_level: float = Field(
        default=NOISE_REDUCTION_LEVELS["default"],
        alias="noise_reduction",
        description="Minimum change in normalized value that counts as a move",
    )

    @field_validator("noise_reduction_level", mode="before")
    @classmethod
    def _resolve_noise_reduction(cls, value: Union[str, float, int, None]) -> float:
        if value is None:
            return NOISE_REDUCTION_LEVELS["default"]
        if isinstance(value, str):
            key = value.strip().lower()
            if key in NOISE_REDUCTION_LEVELS:
                return NOISE_REDUCTION_LEVELS[key]
            try:
                value = float(key)
            except ValueError:
                logger.warning(f"Unknown noise_reduction level {value!r}, using 'default'")
                return NOISE_REDUCTION_LEVELS["default"]
        value = float(value)
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"noise_reduction must be within [0, 1], got {value}")
        return value

    @property
    def slider_count(self) -> int:
        return len(self.esphome_slider_names)


class SliderValue(BaseModel):
    """Last known position of one slider."""
    slider_id: int = Field(description="Zero-based slider index")
    name: Optional[str] = Field(default=None, description="Configured sensor id, if the index is still configured")
    percent_value: Optional[float] = Field(default=None, description="Last reported value, null if never observed")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(description="Service status (always 'ok' if service is running)")
    mode: str = Field(description="Current operation mode: 'sim' (simulator) or 'real' (ESPHome device)")
    connected: bool = Field(description="Whether the slider connection is active")


class ConnectionResult(BaseModel):
    """Result of a connection start/stop command."""
    ok: bool = Field(description="Whether the command was applied")
    message: str = Field(default="", description="Status message describing the result")


class ReloadResult(BaseModel):
    ok: bool
    slider_count: int


class ErrorResponse(BaseModel):
    """Standard error response format."""
    detail: str = Field(description="Error message describing what went wrong")
