from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import requests

from ..models.fields import RecordKind, get_schema

"""HTTP client for the remote records API.

The API is treated as an opaque sink exposing, per collection
(``employees`` / ``travels``):

- ``GET /{collection}``            list
- ``POST /{collection}``           create (responds with the new ``id``)
- ``PUT /{collection}/{id}``       update
- ``DELETE /{collection}/{id}``    delete
- ``POST /{collection}/bulk``      bulk insert (one transaction)

Bulk payload shapes differ by collection: employees are wrapped as
``{"employees": [...]}``, travels are sent as a bare JSON array.

No timeout is applied unless configured and nothing is retried; one attempt
per user-initiated call.
"""

__all__ = [
    "ApiError",
    "TransportError",
    "ServerRejectedError",
    "BulkResponse",
    "parse_bulk_response",
    "RecordsApiClient",
    "COUNT_KEYS",
]

logger = logging.getLogger(__name__)

# Keys accepted as the inserted-row count in a bulk response, in priority order
COUNT_KEYS = ("inserted", "insertedCount", "created", "count", "affectedRows")


class ApiError(Exception):
    """Base class for records API failures."""


class TransportError(ApiError):
    """The endpoint could not be reached (connection refused, DNS, timeout...)."""


class ServerRejectedError(ApiError):
    """The endpoint answered with a failure status or an unusable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class BulkResponse:
    inserted: int
    message: str


def _bulk_body(kind: RecordKind, records: Sequence[dict[str, Any]]) -> Any:
    if kind is RecordKind.EMPLOYEE:
        return {"employees": list(records)}
    return list(records)


def parse_bulk_response(body: Any, sent: int) -> BulkResponse:
    """Interpret a decoded bulk response body.

    Raises:
        ServerRejectedError: body is not an object, reports an error, or carries
            neither a count nor a message
    """
    if not isinstance(body, dict):
        raise ServerRejectedError(f"unexpected bulk response: {body!r}")
    if body.get("error"):
        raise ServerRejectedError(str(body["error"]))

    count: int | None = None
    for key in COUNT_KEYS:
        value = body.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            count = value
            break
    message = body.get("message")
    if count is None and not message:
        raise ServerRejectedError(f"bulk response has no count or message: {body!r}")
    inserted = count if count is not None else sent
    return BulkResponse(
        inserted=inserted,
        message=str(message) if message else f"{inserted} record(s) inserted",
    )


class RecordsApiClient:
    """Thin requests.Session wrapper over the records API."""

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, kind: RecordKind | str, *parts: Any) -> str:
        collection = get_schema(kind).collection
        suffix = "".join(f"/{p}" for p in parts)
        return f"{self.base_url}/{collection}{suffix}"

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        if not response.ok:
            raise ServerRejectedError(
                f"{method} {url} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ServerRejectedError(
                f"invalid JSON response: {response.text[:200]}", status_code=response.status_code
            ) from e

    def list_records(self, kind: RecordKind | str) -> list[dict[str, Any]]:
        body = self._json(self._request("GET", self._url(kind)))
        if body is None:
            return []
        if not isinstance(body, list):
            raise ServerRejectedError(f"expected a list of records, got {type(body).__name__}")
        return body

    def create_record(self, kind: RecordKind | str, values: dict[str, Any]) -> Any:
        """Create one record and return the id assigned by the server."""
        body = self._json(self._request("POST", self._url(kind), json=values))
        return body.get("id") if isinstance(body, dict) else None

    def update_record(self, kind: RecordKind | str, record_id: Any, values: dict[str, Any]) -> None:
        self._request("PUT", self._url(kind, record_id), json=values)

    def delete_record(self, kind: RecordKind | str, record_id: Any) -> None:
        self._request("DELETE", self._url(kind, record_id))

    def bulk_insert(self, kind: RecordKind | str, records: Sequence[dict[str, Any]]) -> BulkResponse:
        """POST the whole batch to the bulk endpoint as one transaction.

        Raises:
            TransportError: network-level failure
            ServerRejectedError: non-2xx status or a body that is not a usable result
        """
        schema = get_schema(kind)
        url = self._url(schema.kind, "bulk")
        logger.debug("POST %s records=%d", url, len(records))
        response = self._request("POST", url, json=_bulk_body(schema.kind, records))
        return parse_bulk_response(self._json(response), sent=len(records))
