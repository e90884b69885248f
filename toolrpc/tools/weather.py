"""Weather tools backed by the OpenWeatherMap REST API."""

from __future__ import annotations

import os
from typing import Any

import httpx

from toolrpc.api.rpc.registry import MethodDescriptor
from toolrpc.tools.upstream import request_json
from toolrpc.utils.exceptions import InternalError, InvalidParamsError

SERVICE = "OpenWeatherMap"
UNITS = ("metric", "imperial", "standard")
_ENTRIES_PER_DAY = 8  # forecast is reported in 3-hour steps
_MAX_FORECAST_DAYS = 5


class WeatherTools:
    """Current conditions and short-range forecast lookups."""

    current_weather_parameters = {
        "type": "object",
        "properties": {
            "location": {"type": "string", "description": "City name, optionally with country code (e.g. London,UK)"},
            "units": {"type": "string", "enum": list(UNITS), "description": "Unit system (default from config)"},
        },
        "required": ["location"],
    }
    forecast_parameters = {
        "type": "object",
        "properties": {
            "location": {"type": "string", "description": "City name, optionally with country code"},
            "days": {"type": "integer", "minimum": 1, "maximum": _MAX_FORECAST_DAYS, "description": "Days ahead (1-5)"},
            "units": {"type": "string", "enum": list(UNITS), "description": "Unit system (default from config)"},
        },
        "required": ["location"],
    }

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = "https://api.openweathermap.org/data/2.5",
        units: str = "metric",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key or os.environ.get("OPENWEATHER_API_KEY", "")
        self.base_url = base_url.rstrip("/")
        self.units = units if units in UNITS else "metric"
        self.timeout = timeout
        self._transport = transport

    def descriptors(self) -> list[MethodDescriptor]:
        return [
            MethodDescriptor(
                name="getCurrentWeather",
                description="Get current weather conditions for a location.",
                parameters=self.current_weather_parameters,
                action=self.get_current_weather,
            ),
            MethodDescriptor(
                name="getForecast",
                description="Get a 3-hourly weather forecast for up to 5 days.",
                parameters=self.forecast_parameters,
                action=self.get_forecast,
            ),
        ]

    async def get_current_weather(self, params: dict[str, Any]) -> dict[str, Any]:
        location = _require_location(params)
        units = self._resolve_units(params)
        data = await self._get("/weather", {"q": location, "units": units})
        main = data.get("main") or {}
        return {
            "location": _label(data.get("name"), (data.get("sys") or {}).get("country"), location),
            "temperature": main.get("temp"),
            "feelsLike": main.get("feels_like"),
            "humidity": main.get("humidity"),
            "description": _first_description(data.get("weather")),
            "windSpeed": (data.get("wind") or {}).get("speed"),
            "units": units,
        }

    async def get_forecast(self, params: dict[str, Any]) -> dict[str, Any]:
        location = _require_location(params)
        units = self._resolve_units(params)
        days = params.get("days", 1)
        if isinstance(days, bool) or not isinstance(days, int) or not 1 <= days <= _MAX_FORECAST_DAYS:
            raise InvalidParamsError(f"days must be an integer between 1 and {_MAX_FORECAST_DAYS}")
        data = await self._get(
            "/forecast",
            {"q": location, "units": units, "cnt": days * _ENTRIES_PER_DAY},
        )
        city = data.get("city") or {}
        entries = [
            {
                "time": item.get("dt_txt"),
                "temperature": (item.get("main") or {}).get("temp"),
                "description": _first_description(item.get("weather")),
            }
            for item in data.get("list") or []
        ]
        return {
            "location": _label(city.get("name"), city.get("country"), location),
            "units": units,
            "entries": entries,
        }

    def _resolve_units(self, params: dict[str, Any]) -> str:
        units = params.get("units") or self.units
        if units not in UNITS:
            raise InvalidParamsError(f"units must be one of: {', '.join(UNITS)}")
        return units

    async def _get(self, path: str, query: dict[str, Any]) -> dict[str, Any]:
        if not self.api_key:
            raise InternalError("weather API key is not configured")
        data = await request_json(
            "GET",
            f"{self.base_url}{path}",
            service=SERVICE,
            timeout=self.timeout,
            transport=self._transport,
            params={**query, "appid": self.api_key},
        )
        return data if isinstance(data, dict) else {}


def _require_location(params: dict[str, Any]) -> str:
    location = params.get("location")
    if not isinstance(location, str) or not location.strip():
        raise InvalidParamsError("location must be a non-empty string")
    return location.strip()


def _first_description(weather: Any) -> str | None:
    if isinstance(weather, list) and weather and isinstance(weather[0], dict):
        return weather[0].get("description")
    return None


def _label(name: Any, country: Any, fallback: str) -> str:
    if not name:
        return fallback
    return f"{name},{country}" if country else str(name)
