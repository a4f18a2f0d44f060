"""
Client for the external analytical backend that produces scenario forecasts
"""

import json
import re
import time
from abc import ABC, abstractmethod
from typing import Optional

import requests
from loguru import logger
from pydantic import ValidationError

from dbis_warehouse.config.settings import settings
from dbis_warehouse.exceptions import AnalyticsBackendUnavailable
from dbis_warehouse.models.forecast_models import ScenarioForecast, ScenarioInputs


class AnalyticsBackend(ABC):
    """Produces primary (non-fallback) scenario forecasts"""

    @abstractmethod
    def forecast(self, inputs: ScenarioInputs) -> ScenarioForecast:
        """Return a validated forecast or raise AnalyticsBackendUnavailable"""
        pass


class HttpAnalyticsBackend(AnalyticsBackend):
    """JSON-over-HTTP analytical backend with a retry loop"""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = url or settings.ANALYTICS_BACKEND_URL
        self.api_key = api_key if api_key is not None else settings.ANALYTICS_API_KEY
        self.timeout = timeout if timeout is not None else settings.ANALYTICS_TIMEOUT
        self.max_retries = max_retries if max_retries is not None else settings.ANALYTICS_MAX_RETRIES
        self.session = session or requests.Session()

        if not self.url:
            raise ValueError("Analytics backend URL is not configured")

    def _post(self, payload: dict) -> Optional[str]:
        """POST with retries; returns the response body or None when every attempt failed"""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        for attempt in range(self.max_retries):
            try:
                response = self.session.post(self.url, json=payload, headers=headers, timeout=self.timeout)
                response.raise_for_status()
                return response.text
            except requests.RequestException as e:
                logger.warning(f"Analytics backend attempt {attempt + 1} failed: {e}")
                if attempt < self.max_retries - 1:
                    time.sleep(2 ** attempt)
        return None

    def forecast(self, inputs: ScenarioInputs) -> ScenarioForecast:
        body = self._post(inputs.model_dump(mode="json"))
        if body is None:
            raise AnalyticsBackendUnavailable(f"No response from analytics backend at {self.url}")

        try:
            data = json.loads(body)
        except json.JSONDecodeError:
            # Answers may wrap the JSON object in prose or markdown fences
            match = re.search(r"\{.*\}", body, re.DOTALL)
            if not match:
                raise AnalyticsBackendUnavailable("Analytics backend returned no JSON object")
            try:
                data = json.loads(match.group(0))
            except json.JSONDecodeError as e:
                raise AnalyticsBackendUnavailable(f"Analytics backend returned invalid JSON: {e}")

        try:
            forecast = ScenarioForecast.model_validate(data)
        except ValidationError as e:
            raise AnalyticsBackendUnavailable(f"Analytics backend response failed validation: {e.error_count()} errors")

        logger.info(f"Analytics backend forecast received ({forecast.data_points_used} data points)")
        return forecast.model_copy(update={"is_fallback": False})
