"""
VAT resources exposed under the ``vat://`` scheme.

``vat://status`` is always listed. One ``vat://drafts/{redovisare}/{period}``
entry is listed per existing draft. Submissions and decisions can be read
by URI but are not listed.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote, unquote

import structlog

from ..client.skatteverket_client import SkatteverketClient
from ..protocol.schemas import MCPValidationError, Resource, ResourceContent, ResourceNotFoundError
from ..tools.base import render_json

logger = structlog.get_logger(__name__)

SCHEME = "vat://"
STATUS_URI = "vat://status"
JSON_MIME_TYPE = "application/json"


class InvalidResourceURIError(MCPValidationError):
    """URI names a known category but its path is malformed."""

    def __init__(self, uri: str, category: str):
        super().__init__(
            f"Invalid {category} URI format: {uri}",
            data={"uri": uri, "expected": f"{SCHEME}{category}s/{{redovisare}}/{{period}}"},
        )


def draft_uri(redovisare: str, period: str) -> str:
    return f"{SCHEME}drafts/{quote(redovisare, safe='')}/{quote(period, safe='')}"


class VatResources:
    """Resource collaborator backed by the Skatteverket API client."""

    def __init__(self, client: SkatteverketClient):
        self.client = client
        self._readers: Dict[str, Tuple[str, Callable[[str, str], Awaitable[Optional[Any]]]]] = {
            "drafts": ("draft", client.get_draft),
            "submissions": ("submission", client.get_submission),
            "decisions": ("decision", client.get_decision),
        }

    async def list_resources(self) -> List[Resource]:
        """
        List the status resource plus one entry per existing draft.

        A failure loading drafts is logged and the static entries are still
        returned.
        """
        resources = [
            Resource(
                uri=STATUS_URI,
                name="API Health Status",
                description="Current health and status of the Skatteverket API connection",
                mimeType=JSON_MIME_TYPE,
            )
        ]

        try:
            drafts = await self.client.get_drafts()
        except Exception as e:
            logger.warning("Failed to load draft resources", error=str(e))
            return resources

        for draft in drafts.drafts:
            resources.append(
                Resource(
                    uri=draft_uri(draft.redovisare, draft.period),
                    name=f"VAT Draft - {draft.redovisare}/{draft.period}",
                    description=f"VAT declaration draft for period {draft.period}",
                    mimeType=JSON_MIME_TYPE,
                )
            )
        return resources

    async def read_resource(self, uri: str) -> ResourceContent:
        """
        Read one resource.

        Raises:
            InvalidResourceURIError: Known category, malformed path
            ResourceNotFoundError: Unknown URI or no such record
        """
        logger.info("Reading resource", uri=uri)

        if uri == STATUS_URI:
            health = await self.client.ping()
            return self._content(uri, health.to_wire())

        if not uri.startswith(SCHEME):
            raise ResourceNotFoundError(f"Unknown resource URI: {uri}")

        category, _, path = uri[len(SCHEME):].partition("/")
        reader = self._readers.get(category)
        if reader is None:
            raise ResourceNotFoundError(f"Unknown resource URI: {uri}")

        kind, fetch = reader
        redovisare, period = self._parse_key(uri, kind, path)

        record = await fetch(redovisare, period)
        if record is None:
            raise ResourceNotFoundError(
                f"{kind.capitalize()} not found: {redovisare}/{period}"
            )
        return self._content(uri, record.to_wire())

    @staticmethod
    def _parse_key(uri: str, kind: str, path: str) -> Tuple[str, str]:
        parts = path.split("/")
        if len(parts) != 2 or not all(parts):
            raise InvalidResourceURIError(uri, kind)
        return unquote(parts[0]), unquote(parts[1])

    @staticmethod
    def _content(uri: str, payload: Dict[str, Any]) -> ResourceContent:
        return ResourceContent(uri=uri, mimeType=JSON_MIME_TYPE, text=render_json(payload))
