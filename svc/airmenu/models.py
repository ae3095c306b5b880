from __future__ import annotations
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class MetricKey(str, Enum):
    """Metrics that can be focused for the compact title. Order is menu order."""
    CO2 = "co2"
    PM25 = "pm25"
    TEMP = "temp"
    HUMIDITY = "humidity"
    RADON = "radon"
    PM1 = "pm1"
    VOC = "voc"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["MetricKey"]:
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class Device(BaseModel):
    """Device represents one sensor unit registered on the account."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(description="Device serial number")
    device_type: str = Field(default="", alias="deviceType", description="Device type tag (e.g., VIEW_PLUS)")
    sensors: List[str] = Field(default_factory=list, description="Sensor kinds supported by the device")
    product_name: str = Field(default="", alias="productName", description="Human-readable product name")


class Reading(BaseModel):
    """Reading is one timestamped sample of every sensor value of a device."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    time: int = Field(default=0, description="Unix timestamp of the sample")
    battery: int = Field(default=0, description="Battery level (%)")
    co2: float = Field(default=0.0, description="CO2 (ppm)")
    humidity: float = Field(default=0.0, description="Relative humidity (%)")
    pm1: float = Field(default=0.0, description="PM1 (µg/m3)")
    pm25: float = Field(default=0.0, description="PM2.5 (µg/m3)")
    pressure: float = Field(default=0.0, description="Pressure (hPa)")
    radon_short_term_avg: float = Field(default=0.0, alias="radonShortTermAvg", description="Radon short term average (Bq/m3)")
    relay_device_type: str = Field(default="", alias="relayDeviceType", description="Type of the relaying hub")
    rssi: int = Field(default=0, description="Signal strength (dBm)")
    temp: float = Field(default=0.0, description="Temperature (°C)")
    voc: float = Field(default=0.0, description="VOC (ppb)")


class DevicesResponse(BaseModel):
    devices: List[Device] = Field(default_factory=list)


class LatestSamplesResponse(BaseModel):
    data: Reading
