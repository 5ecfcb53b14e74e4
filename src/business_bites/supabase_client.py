"""Client for reading rows from a Supabase (PostgREST) table."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import requests

from .errors import InfrastructureError


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SupabaseClient:
    base_url: str
    api_key: str
    timeout: float = 10.0

    def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, str] | None = None,
        order: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Run a PostgREST select; ``filters`` values use operator syntax like ``eq.US``."""
        params: dict[str, Any] = {"select": columns}
        if filters:
            params.update(filters)
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit
        return self._call(f"/rest/v1/{table}", params)

    def _call(self, endpoint: str, params: Mapping[str, Any]) -> list[dict[str, Any]]:
        url = f"{self.base_url.rstrip('/')}{endpoint}"
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        try:
            response = requests.get(url, headers=headers, params=dict(params), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            logger.warning("Supabase request failed: %s", exc)
            raise InfrastructureError(f"Supabase request failed: {exc}", backend="supabase") from exc
        except ValueError as exc:
            raise InfrastructureError(
                "Supabase returned a non-JSON response", backend="supabase"
            ) from exc
        if not isinstance(payload, list):
            raise InfrastructureError(
                "Unexpected response structure from Supabase", backend="supabase"
            )
        return [item for item in payload if isinstance(item, dict)]


__all__ = ["SupabaseClient"]
