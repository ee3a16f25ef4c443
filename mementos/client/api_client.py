#!/usr/bin/env python3
"""
api_client.py
--------------------
Thin HTTP client for the Mementos API, built on httpx.

Every non-2xx response is raised as ApiError carrying the status code
and the server's ``error`` message.

Usage:
    api = ApiClient("http://localhost:8000", headers={"X-Auth-User-Id": "user_2abc"})
    api.sync()
    cafe = api.create("places", {"name": "Blue Bottle Cafe", "city": "SF", "country": "USA"})
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Any, Dict, List, Mapping, Optional

# --- Third party imports ---
import httpx

# --- Local imports ---
from mementos.core.exceptions import MementosError

RESOURCES = ("people", "places", "events", "memories", "attributes", "collections")


class ApiError(MementosError):
    """A request to the API failed."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


class ApiClient:
    """
    Client for the JSON API.

    Attributes:
        http: Underlying httpx.Client (any subclass works, including
            FastAPI's TestClient)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 10.0,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.http = http or httpx.Client(base_url=base_url, headers=headers, timeout=timeout)
        self._owns_http = http is None

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ---- Transport ----
    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(0, f"Request failed: {e}") from e

        if response.status_code >= 400:
            raise ApiError(response.status_code, self._error_message(response))
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.reason_phrase

    @staticmethod
    def _check_resource(resource: str) -> None:
        if resource not in RESOURCES:
            raise ValueError(f"Unknown resource: {resource}")

    # ---- Generic CRUD ----
    def list(self, resource: str, q: Optional[str] = None) -> List[Dict[str, Any]]:
        self._check_resource(resource)
        params = {"q": q} if q else None
        return self.request("GET", f"/api/{resource}", params=params)

    def get(self, resource: str, item_id: int) -> Dict[str, Any]:
        self._check_resource(resource)
        return self.request("GET", f"/api/{resource}/{item_id}")

    def create(self, resource: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        self._check_resource(resource)
        return self.request("POST", f"/api/{resource}", json=dict(data))

    def update(self, resource: str, item_id: int, changes: Mapping[str, Any]) -> Dict[str, Any]:
        self._check_resource(resource)
        return self.request("PATCH", f"/api/{resource}/{item_id}", json=dict(changes))

    def delete(self, resource: str, item_id: int) -> None:
        self._check_resource(resource)
        self.request("DELETE", f"/api/{resource}/{item_id}")

    # ---- Memory associations ----
    def set_memory_people(self, memory_id: int, person_ids: List[int]) -> Dict[str, Any]:
        return self.request(
            "PUT", f"/api/memories/{memory_id}/people", json={"person_ids": person_ids}
        )

    def set_memory_event(self, memory_id: int, event_id: Optional[int]) -> Dict[str, Any]:
        return self.request(
            "PUT", f"/api/memories/{memory_id}/event", json={"event_id": event_id}
        )

    def set_memory_place(self, memory_id: int, place_id: Optional[int]) -> Dict[str, Any]:
        return self.request(
            "PUT", f"/api/memories/{memory_id}/place", json={"place_id": place_id}
        )

    # ---- Reflections ----
    def add_reflection(self, memory_id: int, title: str, content: str) -> Dict[str, Any]:
        return self.request(
            "POST",
            f"/api/memories/{memory_id}/reflections",
            json={"title": title, "content": content},
        )

    def update_reflection(self, reflection_id: int, changes: Mapping[str, Any]) -> Dict[str, Any]:
        return self.request("PUT", f"/api/reflections/{reflection_id}", json=dict(changes))

    def delete_reflection(self, reflection_id: int) -> None:
        self.request("DELETE", f"/api/reflections/{reflection_id}")

    # ---- Account ----
    def sync(self) -> bool:
        return bool(self.request("GET", "/api/auth").get("isSynced"))

    def plan(self) -> Dict[str, Any]:
        return self.request("GET", "/api/user/plan")
