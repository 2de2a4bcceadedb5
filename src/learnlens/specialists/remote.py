"""Specialists served over HTTP.

``RemoteSpecialist`` posts the learner records to a specialist endpoint
and returns its JSON body as the payload. Status codes are mapped to
``SpecialistHTTPError`` so the retry classifier can tell a rate limit or a
restarting upstream from a bad request; transport failures surface as
``httpx.TransportError`` and are retried.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from learnlens.core.errors import PayloadValidationError, SpecialistHTTPError
from learnlens.core.logging import get_logger
from learnlens.specialists.base import ensure_records

logger = get_logger(__name__)


class RemoteSpecialist:
    """Async callable invoking one specialist endpoint.

    Example:
        >>> async with httpx.AsyncClient() as client:
        ...     rating = RemoteSpecialist("rating", "http://scoring:8080/rating", client)
        ...     payload = await rating(records)
    """

    def __init__(self, name: str, url: str, client: httpx.AsyncClient):
        self.name = name
        self.url = url
        self._client = client

    def __repr__(self) -> str:
        return f"RemoteSpecialist({self.name!r}, {self.url!r})"

    async def __call__(self, request_data: Any) -> Mapping[str, Any]:
        records = ensure_records(request_data)
        body = {"responses": [r.model_dump(mode="json", exclude_none=True) for r in records]}

        response = await self._client.post(self.url, json=body)
        if not response.is_success:
            logger.warning(
                "specialist.http_error",
                specialist=self.name,
                url=self.url,
                status=response.status_code,
            )
            raise SpecialistHTTPError(response.status_code, response.text[:200]).with_context(
                specialist=self.name, url=self.url
            )

        try:
            return response.json()
        except ValueError as exc:
            raise PayloadValidationError(
                f"{self.name} returned a non-JSON body",
                cause=exc,
            ).with_context(specialist=self.name, url=self.url) from exc
