"""
Async HTTP client for the catalog API.

Reactions are applied optimistically: the displayed counter moves before the
server answers, is restored if the request fails, and is replaced by the
server's counters when it succeeds.

Example:
    async with CatalogClient("http://localhost:8000", token=token) as client:
        comments = await client.list_comments(1)
        counts = await client.react(comments[0]["id"], "helpful")
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

import httpx

from catalog.core.exceptions import (
    AuthenticationError,
    CatalogError,
    DuplicateReactionError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from catalog.core.logging import get_logger
from catalog.models.database.comments import ReactionType

logger = get_logger(__name__)

# error_type in an error body -> exception raised by the client
ERROR_TYPES = {
    ValidationError.error_type: ValidationError,
    NotFoundError.error_type: NotFoundError,
    DuplicateReactionError.error_type: DuplicateReactionError,
    AuthenticationError.error_type: AuthenticationError,
    InternalError.error_type: InternalError,
}

REACTION_KEYS = tuple(reaction.value for reaction in ReactionType)


def _empty_counts() -> Dict[str, int]:
    return {key: 0 for key in REACTION_KEYS}


@dataclass
class PendingReaction:
    """An optimistic reaction awaiting the server's answer."""
    comment_id: int
    reaction_type: str
    previous: Dict[str, int] = field(default_factory=dict)


class OptimisticReactions:
    """Displayed reaction counters plus the reaction types this user already used per comment."""

    def __init__(self):
        self._counts: Dict[int, Dict[str, int]] = {}
        self._used: Dict[int, Set[str]] = {}

    def load(self, comment_id: int, counts: Dict[str, int]) -> None:
        merged = _empty_counts()
        merged.update({key: int(value) for key, value in counts.items() if key in merged})
        self._counts[comment_id] = merged

    def counts(self, comment_id: int) -> Dict[str, int]:
        return dict(self._counts.get(comment_id) or _empty_counts())

    def has_used(self, comment_id: int, reaction_type: str) -> bool:
        return reaction_type in self._used.get(comment_id, set())

    def mark_used(self, comment_id: int, reaction_type: str) -> None:
        self._used.setdefault(comment_id, set()).add(reaction_type)

    def apply(self, comment_id: int, reaction_type: str) -> PendingReaction:
        """
        Increment the displayed counter before the request is sent.

        Raises:
            ValidationError: unknown reaction type
            DuplicateReactionError: this user already used the type on this comment
        """
        if reaction_type not in REACTION_KEYS:
            raise ValidationError(f"Invalid reaction type '{reaction_type}'")
        if self.has_used(comment_id, reaction_type):
            raise DuplicateReactionError(f"You have already reacted with '{reaction_type}' to comment {comment_id}")

        previous = self.counts(comment_id)
        updated = dict(previous)
        updated[reaction_type] += 1
        self._counts[comment_id] = updated
        return PendingReaction(comment_id=comment_id, reaction_type=reaction_type, previous=previous)

    def rollback(self, pending: PendingReaction) -> None:
        self._counts[pending.comment_id] = dict(pending.previous)

    def reconcile(self, pending: PendingReaction, server_counts: Dict[str, int]) -> None:
        """Adopt the server's counters and remember the reaction type as used."""
        self.load(pending.comment_id, server_counts)
        self.mark_used(pending.comment_id, pending.reaction_type)


class CatalogClient:
    """Async client for the catalog REST API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Service root, e.g. "http://localhost:8000"
            token: Bearer token issued by the identity provider
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests, in-process ASGI apps)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport
        self.reactions = OptimisticReactions()
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        if self._client is not None:
            return
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CatalogClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        await self.connect()
        response = await self._client.request(method, path, **kwargs)
        if response.status_code >= 400:
            raise self._error_from(response)
        return response.json()

    @staticmethod
    def _error_from(response: httpx.Response) -> CatalogError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        error_cls = ERROR_TYPES.get(body.get("error"), CatalogError)
        error = error_cls(body.get("detail") or f"HTTP {response.status_code}")
        if error_cls is CatalogError:
            error.status_code = response.status_code
        return error

    async def list_data_products(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/data-products")

    async def get_data_product(self, product_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/api/metadata/{product_id}")

    async def search(self, query: str) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/search", params={"q": query})

    async def get_lineage(self, product_id: int, version: Optional[int] = None) -> Dict[str, Any]:
        params = {"version": version} if version is not None else None
        return await self._request("GET", f"/api/lineage/{product_id}", params=params)

    async def get_quality_metrics(self, product_id: int, days: int = 30) -> Dict[str, Any]:
        return await self._request("GET", f"/api/quality-metrics/{product_id}", params={"days": days})

    async def create_metric_definition(self, **fields) -> Dict[str, Any]:
        return await self._request("POST", "/api/metric-definitions", json=fields)

    async def get_usage_stats(self, timeframe: str = "day") -> Dict[str, Any]:
        return await self._request("GET", "/api/usage-stats", params={"timeframe": timeframe})

    async def get_stewardship_metrics(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/stewardship/metrics")

    async def list_comments(self, product_id: int) -> List[Dict[str, Any]]:
        """Fetch comments and load their counters into the reaction state."""
        comments = await self._request("GET", f"/api/data-products/{product_id}/comments")
        for comment in comments:
            self.reactions.load(comment["id"], comment.get("reactions") or {})
        return comments

    async def post_comment(self, product_id: int, content: str) -> Dict[str, Any]:
        result = await self._request("POST", f"/api/data-products/{product_id}/comments", json={"content": content})
        comment = result["comment"]
        self.reactions.load(comment["id"], comment.get("reactions") or {})
        return result

    async def react(self, comment_id: int, reaction_type: str) -> Dict[str, int]:
        """
        React to a comment with optimistic counter updates.

        A reaction type already used on this comment fails without a request.

        Returns:
            The server's counters for the comment

        Raises:
            DuplicateReactionError: the type was already used (locally known or reported by the server)
        """
        pending = self.reactions.apply(comment_id, reaction_type)
        try:
            result = await self._request(
                "POST", f"/api/comments/{comment_id}/reactions", json={"type": reaction_type}
            )
        except DuplicateReactionError:
            self.reactions.rollback(pending)
            self.reactions.mark_used(comment_id, reaction_type)
            raise
        except Exception as e:
            self.reactions.rollback(pending)
            logger.warning(f"Reaction on comment {comment_id} failed, counters restored: {e}")
            raise

        self.reactions.reconcile(pending, result["reactions"])
        return self.reactions.counts(comment_id)
