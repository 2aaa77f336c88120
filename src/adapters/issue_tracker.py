"""Comprobación de existencia de issues contra la API REST de Jira.

Implementación:
- Un GET autenticado a `{base}/rest/api/2/issue/{key}` por ticket.
- El veredicto depende solo del status HTTP; el body se ignora.
- Sin reintentos: un intento fallido se reporta en el commit, nunca se lanza.

Notas:
- 200 => existe
- 404 => no encontrado
- 401/403/5xx/otro/transporte => consulta fallida, con diagnóstico
"""

from __future__ import annotations

import logging

import httpx

from adapters.http_client import build_async_client, describe_transport_error
from core.config import AppSettings
from core.domain.models import IssueLookup, TicketKey, TrackerConfig
from core.interfaces.tracker import IssueExistenceChecker

logger = logging.getLogger(__name__)

ISSUE_LOOKUP_PATH = "/rest/api/2/issue"


def build_issue_url(base_url: str, ticket_key: TicketKey) -> str:
    return f"{base_url.rstrip('/')}{ISSUE_LOOKUP_PATH}/{ticket_key}"


def classify_status(*, ticket_key: TicketKey, url: str, status_code: int) -> IssueLookup:
    """Traduce un status HTTP del tracker a un `IssueLookup`.

    Determinista: el mismo status siempre da la misma clase de veredicto.
    """

    if status_code == 200:
        return IssueLookup.exists(ticket_key, status_code=status_code, url=url)
    if status_code == 404:
        return IssueLookup.not_found(ticket_key, status_code=status_code, url=url)

    if status_code == 401:
        detail = f"Unauthorized (401): Failed to authenticate with Jira at {url}. Check credentials."
    elif status_code == 403:
        detail = f"Forbidden (403): Insufficient permissions for Jira issue {ticket_key} at {url}."
    elif 500 <= status_code <= 599:
        detail = f"Jira server error ({_status_text(status_code)}) for issue {ticket_key} at {url}."
    else:
        detail = f"Unexpected response status ({_status_text(status_code)}) for issue {ticket_key} at {url}."
    return IssueLookup.failed(ticket_key, detail, status_code=status_code, url=url)


def _status_text(status_code: int) -> str:
    phrase = httpx.codes.get_reason_phrase(status_code)
    return f"{status_code} {phrase}".strip()


class JiraIssueChecker(IssueExistenceChecker):
    """Comprueba la existencia de tickets en una instancia de Jira."""

    def __init__(
        self,
        tracker: TrackerConfig,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._tracker = tracker
        self._settings = settings or AppSettings()
        self._client = client

    def issue_url(self, ticket_key: TicketKey) -> str:
        return build_issue_url(self._tracker.base_url, ticket_key)

    async def exists(self, ticket_key: TicketKey) -> IssueLookup:
        url = self.issue_url(ticket_key)
        auth = httpx.BasicAuth(*self._tracker.credentials.basic_auth())

        logger.debug("GET %s", url)
        try:
            if self._client is not None:
                response = await self._client.get(url, auth=auth)
            else:
                async with build_async_client(self._settings) as client:
                    response = await client.get(url, auth=auth)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            detail = f"Request to {url} failed: {describe_transport_error(exc)}"
            logger.debug("Lookup for %s failed: %s", ticket_key, detail)
            return IssueLookup.failed(ticket_key, detail, url=url)

        lookup = classify_status(ticket_key=ticket_key, url=url, status_code=response.status_code)
        logger.debug("Lookup for %s -> %s (HTTP %s)", ticket_key, lookup.verdict.value, response.status_code)
        return lookup
