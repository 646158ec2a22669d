# ABOUTME: Minimal async JSON-RPC client for the Arbitrum One endpoint.
# ABOUTME: Errors are raised as RpcError with messages that never contain the endpoint URL.
import itertools
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY_FEE_WEI = 1_000_000_000


class RpcError(Exception):
    """Raised when a JSON-RPC call fails.

    ABOUTME: code is the JSON-RPC error code, status_code the HTTP status, when known
    """

    def __init__(
        self,
        message: str,
        code: int | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


def hex_to_int(value: str | None) -> int:
    """Decode a JSON-RPC quantity; None reads as 0."""
    if value is None:
        return 0
    try:
        return int(value, 16)
    except (TypeError, ValueError) as e:
        raise RpcError(f"Invalid quantity in RPC response: {value!r}") from e


class ArbitrumRpc:
    """JSON-RPC 2.0 client over httpx.

    ABOUTME: One AsyncClient per call, so instances are safe to share across tool calls
    ABOUTME: transport is injectable (httpx.MockTransport in tests)
    """

    def __init__(
        self,
        url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport
        self._ids = itertools.count(1)

    async def call(self, method: str, params: list[Any] | None = None) -> Any:
        """Send one request and return its result.

        Raises:
            RpcError: On transport failure, non-2xx status, malformed body or JSON-RPC error
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        logger.debug(f"RPC {method} id={payload['id']}")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RpcError(
                f"HTTP {e.response.status_code} from RPC endpoint",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise RpcError(f"{type(e).__name__} while contacting RPC endpoint") from e

        try:
            body = response.json()
        except ValueError as e:
            raise RpcError("RPC endpoint returned invalid JSON") from e

        if not isinstance(body, dict):
            raise RpcError("RPC endpoint returned an unexpected response")

        error = body.get("error")
        if error:
            if isinstance(error, dict):
                raise RpcError(str(error.get("message", "Unknown RPC error")), code=error.get("code"))
            raise RpcError(str(error))

        return body.get("result")

    async def block_number(self) -> int:
        return hex_to_int(await self.call("eth_blockNumber"))

    async def gas_price(self) -> int:
        return hex_to_int(await self.call("eth_gasPrice"))

    async def get_balance(self, address: str, block: str = "latest") -> int:
        return hex_to_int(await self.call("eth_getBalance", [address, block]))

    async def get_block(self, block: str | int) -> dict[str, Any] | None:
        """Fetch a block by number, hash or tag, with transaction hashes only."""
        if isinstance(block, int):
            return await self.call("eth_getBlockByNumber", [hex(block), False])
        if len(block) == 66:
            return await self.call("eth_getBlockByHash", [block, False])
        return await self.call("eth_getBlockByNumber", [block, False])

    async def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        return await self.call("eth_getTransactionByHash", [tx_hash])

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        return await self.call("eth_getTransactionReceipt", [tx_hash])

    async def fee_data(self) -> dict[str, int]:
        """EIP-1559 fee estimates.

        ABOUTME: max fee = 2 * latest base fee + priority fee
        ABOUTME: Priority fee falls back to 1 gwei if the node lacks eth_maxPriorityFeePerGas
        """
        block = await self.get_block("latest") or {}
        base_fee = hex_to_int(block.get("baseFeePerGas"))

        try:
            priority_fee = hex_to_int(await self.call("eth_maxPriorityFeePerGas"))
        except RpcError as e:
            logger.debug(f"eth_maxPriorityFeePerGas unavailable: {e}")
            priority_fee = DEFAULT_PRIORITY_FEE_WEI

        return {
            "base_fee_per_gas": base_fee,
            "max_priority_fee_per_gas": priority_fee,
            "max_fee_per_gas": 2 * base_fee + priority_fee,
        }
