"""Meetup Planner API client.

A thin wrapper around the REST API served by ``meetup_planner_api``.
It uses the ``requests`` library and exposes one method per route:

* :meth:`list_meetups` – the caller's meetups, optionally for one day.
* :meth:`create_meetup`, :meth:`update_meetup`, :meth:`delete_meetup`.
* :meth:`subscribe` – subscribe the caller to a meetup.
* :meth:`list_subscriptions` – the caller's upcoming meetups.
* :meth:`get_pending_tasks`, :meth:`complete_task` – for queue workers.

Every method returns a ``(data, error)`` tuple instead of raising.  On
success ``error`` is ``None``; on failure ``data`` is ``None`` (or an
empty list) and ``error`` is a dict with ``status_code`` and
``message``.  The message is the ``detail`` string produced by the API,
e.g. ``"Can't subscribe to two meetups at the same hour"``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class MeetupPlannerAPI:
    """Client for the meetup planner API.

    Args:
        base_url: Root URL of the server, e.g. ``https://meetups.example.com``.
        api_key: Bearer token sent in the ``Authorization`` header.  Users
            pass their access token; workers pass a worker token.
        session: Optional requests session, e.g. one with retries mounted.
        timeout: Seconds to wait for each response.
    """

    prefix = "/api/v1"

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request against ``base_url + prefix + path``."""
        url = f"{self.base_url}{self.prefix}{path}"
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            # Response.__bool__ is False for error statuses, so compare to None.
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("detail") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    @staticmethod
    def _serialise(payload: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: value.isoformat() if isinstance(value, (date, datetime)) else value
            for key, value in payload.items()
        }

    # ------------------------------------------------------------------
    # Meetups
    # ------------------------------------------------------------------
    def list_meetups(self, day: Optional[date] = None, page: int = 1) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        params: Dict[str, Any] = {"page": page}
        if day is not None:
            params["date"] = day.isoformat()
        data, error = self._request("GET", "/meetups/", params=params)
        if error:
            return [], error
        return data or [], None

    def create_meetup(
        self,
        *,
        title: str,
        description: str,
        location: str,
        scheduled_at: datetime,
        banner_id: int,
    ) -> Result:
        payload = self._serialise(
            {
                "title": title,
                "description": description,
                "location": location,
                "scheduled_at": scheduled_at,
                "banner_id": banner_id,
            }
        )
        return self._request("POST", "/meetups/", json_body=payload)

    def update_meetup(self, meetup_id: int, **changes: Any) -> Result:
        """Send only the given fields, e.g. ``update_meetup(3, location="Room B")``."""
        return self._request("PUT", f"/meetups/{meetup_id}", json_body=self._serialise(changes))

    def delete_meetup(self, meetup_id: int) -> Tuple[bool, Optional[Dict[str, Any]]]:
        _, error = self._request("DELETE", f"/meetups/{meetup_id}")
        return error is None, error

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, meetup_id: int) -> Result:
        return self._request("POST", f"/meetups/{meetup_id}/subscriptions")

    def list_subscriptions(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/subscriptions")
        if error:
            return [], error
        return data or [], None

    # ------------------------------------------------------------------
    # Worker queue
    # ------------------------------------------------------------------
    def get_pending_tasks(self, topic: Optional[str] = None, limit: int = 100) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        params: Dict[str, Any] = {"limit": limit}
        if topic:
            params["topic"] = topic
        data, error = self._request("GET", "/tasks/", params=params)
        if error:
            return [], error
        return data or [], None

    def complete_task(self, task_id: int) -> Tuple[bool, Optional[Dict[str, Any]]]:
        _, error = self._request("POST", f"/tasks/{task_id}/complete")
        return error is None, error
