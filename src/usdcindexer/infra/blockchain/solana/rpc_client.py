"""Solana JSON-RPC client: getSignaturesForAddress + getTransaction."""

import logging

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from usdcindexer.exceptions import TransientFetchError
from usdcindexer.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

# Largest page getSignaturesForAddress accepts
MAX_SIGNATURES_LIMIT = 1000
COMMITMENT = "confirmed"


class SolanaRPCClient:
    """Minimal Solana JSON-RPC client for signature paging and transaction lookup."""

    def __init__(self, rpc_url: str, http_client: RateLimitedClient) -> None:
        self._rpc_url = rpc_url
        self._http = http_client

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    @retry(
        retry=retry_if_exception_type(TransientFetchError),
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=2, min=3, max=30),
        reraise=True,
    )
    async def _call(self, method: str, params: list) -> dict | list | int | str | None:
        """Execute a JSON-RPC call and return the result field."""
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }
        try:
            resp = await self._http.post(self._rpc_url, json=payload)
        except httpx.HTTPError as e:
            logger.warning("Solana RPC transport error (%s): %s", method, e)
            raise TransientFetchError(f"Solana RPC transport error ({method}): {e}") from e

        if resp.status_code == 429 or resp.status_code >= 500:
            logger.warning("Solana RPC HTTP %d (%s)", resp.status_code, method)
            raise TransientFetchError(f"Solana RPC HTTP {resp.status_code} ({method})")

        try:
            data = resp.json()
        except ValueError as e:
            raise TransientFetchError(f"Solana RPC returned non-JSON body ({method})") from e

        if not isinstance(data, dict):
            raise TransientFetchError(f"Solana RPC returned unexpected {type(data).__name__} body ({method})")

        if "error" in data:
            error = data["error"]
            msg = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise TransientFetchError(f"Solana RPC error ({method}): {msg}")

        return data.get("result")

    async def get_signatures(
        self,
        address: str,
        before: str | None = None,
        limit: int = MAX_SIGNATURES_LIMIT,
    ) -> list[dict]:
        """Fetch transaction signatures for an address.

        Returns list of {signature, slot, blockTime, err, ...} ordered newest-first.
        Uses `before` cursor for pagination.
        """
        opts: dict = {"limit": min(limit, MAX_SIGNATURES_LIMIT), "commitment": COMMITMENT}
        if before is not None:
            opts["before"] = before

        result = await self._call("getSignaturesForAddress", [address, opts])
        if result is None:
            return []
        if not isinstance(result, list) or not all(isinstance(s, dict) and "signature" in s for s in result):
            raise TransientFetchError("Malformed getSignaturesForAddress result")
        return result

    async def get_transaction(self, signature: str) -> dict | None:
        """Fetch a transaction by signature. None if the node no longer has it."""
        opts = {
            "encoding": "json",
            "commitment": COMMITMENT,
            "maxSupportedTransactionVersion": 0,
        }
        result = await self._call("getTransaction", [signature, opts])
        return result  # type: ignore[return-value]
