"""Existing-class-name lookup against the destination project."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Protocol

import httpx

from flowbridge.errors import ClassLookupError

logger = logging.getLogger(__name__)

__all__ = [
    "ClassLookup",
    "HttpClassLookup",
    "StaticClassLookup",
    "fetch_existing_names",
]


class ClassLookup(Protocol):
    """Anything that can list the class names a project already has."""

    def existing_class_names(self) -> set[str]: ...


class StaticClassLookup:
    """Lookup backed by a fixed set (tests, ``--existing-classes`` files)."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names = {n.strip() for n in names if n and n.strip()}

    def existing_class_names(self) -> set[str]:
        return set(self._names)


def _names_from_body(body: Any) -> set[str]:
    # Accepts ["a", "b"], {"classes": [...]} and lists of {"name": ...} objects.
    if isinstance(body, dict):
        body = body.get("classes", body.get("styles", []))
    if not isinstance(body, list):
        raise ClassLookupError(f"Unexpected class list payload: {type(body).__name__}")
    names: set[str] = set()
    for item in body:
        if isinstance(item, str):
            names.add(item)
        elif isinstance(item, dict) and isinstance(item.get("name"), str):
            names.add(item["name"])
    return names


class HttpClassLookup:
    """Fetches class names from a project API over HTTP.

    ``GET {base_url}/projects/{project_id}/classes`` with an optional bearer
    token. Transport and status errors are raised as :class:`ClassLookupError`.
    """

    def __init__(
        self,
        base_url: str,
        project_id: str,
        *,
        token: str = "",
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.project_id = project_id
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def existing_class_names(self) -> set[str]:
        path = f"/projects/{self.project_id}/classes"
        try:
            resp = self._client.get(path)
        except httpx.TimeoutException as exc:
            raise ClassLookupError(f"Class lookup timed out: {exc}", cause=exc) from exc
        except httpx.HTTPError as exc:
            raise ClassLookupError(f"Class lookup failed: {exc}", cause=exc) from exc
        if resp.status_code >= 300:
            raise ClassLookupError(
                f"Class lookup returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            body = resp.json()
        except ValueError as exc:
            raise ClassLookupError("Class lookup returned invalid JSON", cause=exc) from exc
        return _names_from_body(body)

    def close(self) -> None:
        self._client.close()


def fetch_existing_names(lookup: ClassLookup | None) -> set[str]:
    """Return existing class names, or an empty set if the lookup fails.

    Duplicate filtering then becomes a no-op instead of failing the run.
    """
    if lookup is None:
        return set()
    try:
        names = lookup.existing_class_names()
    except Exception as exc:
        logger.warning("Existing-class lookup failed, skipping duplicate filter: %s", exc)
        return set()
    logger.info("Destination project has %d existing class(es)", len(names))
    return names
