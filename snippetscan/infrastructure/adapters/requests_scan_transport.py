"""Scan service transport using requests."""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any

import requests

from ...domain.errors import InvalidInputError, ScanApiError
from ...domain.models.rules import RuleSet
from ..config.settings import ApiSettings

logger = logging.getLogger(__name__)

SERVICE_UNAVAILABLE = 503


def include_assets(rules: RuleSet | None) -> str | None:
    """Legacy ``assets`` payload for include rules, or None when there are none."""
    if rules is None:
        return None
    components = [{"purl": rule.purl} for rule in rules.include if rule.purl]
    if not components:
        return None
    return json.dumps({"components": components})


class RequestsScanTransport:
    """
    Posts WFP batches to the scan service as multipart form data.

    Timed out requests are retried up to ``retry_limit`` times with a fixed
    sleep between attempts; every other failure is raised straight away.
    """

    def __init__(
        self,
        settings: ApiSettings,
        rules: RuleSet | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.settings = settings
        self.url = settings.effective_url
        self.assets = include_assets(rules)
        self.session = session or requests.Session()
        self.headers = {"user-agent": settings.user_agent}
        if settings.api_key:
            self.headers["x-api-key"] = settings.api_key
        if self.assets:
            logger.info(f"Include rules detected. Sending legacy assets {self.assets}")

    def _form_data(self, context: str | None) -> dict[str, str]:
        data: dict[str, str] = {}
        if context:
            data["context"] = context
        if self.settings.flags:
            data["flags"] = self.settings.flags
        if self.assets:
            data["assets"] = self.assets
            data["type"] = "identify"
        return data

    def scan(self, wfp: str, context: str | None = None, scan_id: int = 1) -> dict[str, Any]:
        """
        Submit WFP text and return the decoded JSON result mapping.

        Raises:
            InvalidInputError: If ``wfp`` is empty
            ScanApiError: On a rejected request, an exhausted retry budget, or an undecodable body
        """
        if not wfp:
            raise InvalidInputError("No WFP specified. Cannot scan", field="wfp")

        request_id = str(uuid.uuid4())
        headers = {**self.headers, "x-request-id": request_id, "Accept": "application/json"}
        data = self._form_data(context)
        limit = self.settings.retry_limit

        for attempt in range(limit + 1):
            if attempt > 0:
                logger.debug(
                    f"Request timed out after {self.settings.timeout_seconds}s (retry {attempt}) for {request_id}. "
                    f"Sleeping, then trying again..."
                )
                time.sleep(self.settings.retry_sleep_seconds)
            try:
                response = self.session.post(
                    self.url,
                    headers=headers,
                    data=data,
                    files={"file": (f"{request_id}.wfp", wfp, "text/plain")},
                    timeout=self.settings.timeout_seconds,
                )
            except requests.exceptions.Timeout as e:
                if attempt >= limit:
                    logger.error(f"Scan request {scan_id} ({request_id}) timed out against {self.url}")
                    raise ScanApiError(self.url, hint="Request timed out. Increase the timeout or retry limit") from e
                continue
            except requests.exceptions.RequestException as e:
                raise ScanApiError(self.url, hint=f"Problem encountered scanning {scan_id} - {request_id}: {e}") from e

            return self._decode(response, scan_id, request_id)

        raise ScanApiError(self.url, hint=f"Something went wrong scanning request {request_id}")

    def _decode(self, response: requests.Response, scan_id: int, request_id: str) -> dict[str, Any]:
        if response.status_code == SERVICE_UNAVAILABLE:
            logger.error(f"Scan service rejected request {request_id} for {self.url}: service limits exceeded")
            raise ScanApiError(self.url, status_code=response.status_code, hint="Service limits exceeded")
        if not response.ok:
            logger.error(
                f"Something went wrong scanning {scan_id} - {request_id} against {self.url}. "
                f"Response {response.status_code} ({response.reason})"
            )
            raise ScanApiError(self.url, status_code=response.status_code, hint=response.reason or None)
        try:
            payload = response.json()
        except ValueError as e:
            raise ScanApiError(self.url, status_code=response.status_code, hint="Response is not valid JSON") from e
        if not isinstance(payload, dict):
            raise ScanApiError(self.url, status_code=response.status_code, hint="Response is not a JSON object")
        logger.debug(f"Scan request {scan_id} ({request_id}) returned results for {len(payload)} files")
        return payload
