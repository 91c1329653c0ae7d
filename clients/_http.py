"""Shared request helper for the downstream pricing and maps services."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional

import httpx

from domain.errors import DownstreamUnavailableError


def fetch_first(
    http: httpx.Client,
    service: str,
    path: str,
    params: Mapping[str, Any],
) -> Optional[Mapping[str, Any]]:
    """GET ``path`` and return the first JSON object in the reply.

    Downstream services answer with either a single object or an array of
    objects. An empty array (or a JSON null) means "no answer" and yields
    None. Anything after the first element is ignored.

    Raises:
        DownstreamUnavailableError: transport failure, timeout, non-2xx
            status, a closed client, or a body that is not a JSON
            object/array of objects.
    """
    try:
        resp = http.get(path, params=dict(params))
        resp.raise_for_status()
        data = resp.json(parse_float=Decimal)
    except httpx.TimeoutException as exc:
        raise DownstreamUnavailableError(service, "timeout") from exc
    except httpx.HTTPStatusError as exc:
        raise DownstreamUnavailableError(
            service, f"status {exc.response.status_code}"
        ) from exc
    except httpx.HTTPError as exc:
        raise DownstreamUnavailableError(service, type(exc).__name__) from exc
    except RuntimeError as exc:
        # httpx refuses to send once the client has been closed
        raise DownstreamUnavailableError(service, "client closed") from exc
    except ValueError as exc:
        raise DownstreamUnavailableError(service, "invalid json") from exc

    if data is None:
        return None
    if isinstance(data, list):
        if not data:
            return None
        data = data[0]
    if not isinstance(data, dict):
        raise DownstreamUnavailableError(service, "unexpected payload")
    return data
