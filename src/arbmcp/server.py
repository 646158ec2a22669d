# MCP server exposing Arbitrum chain queries
import json
import logging
import re
from decimal import Decimal
from typing import Any

from mcp.server.fastmcp import FastMCP

from arbmcp import __version__
from arbmcp.config import ServerSettings
from arbmcp.entry import SERVER_NAME
from arbmcp.rpc import ArbitrumRpc, RpcError

logger = logging.getLogger(__name__)

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")
HEX_NUMBER_PATTERN = re.compile(r"^0x[0-9a-fA-F]+$")
BLOCK_TAGS = ("latest", "pending", "earliest", "safe", "finalized")

# ABOUTME: Quantity fields decoded from hex before display
BLOCK_QUANTITIES = (
    "number",
    "timestamp",
    "gasLimit",
    "gasUsed",
    "baseFeePerGas",
    "size",
    "l1BlockNumber",
)
TRANSACTION_QUANTITIES = (
    "blockNumber",
    "nonce",
    "gas",
    "gasPrice",
    "maxFeePerGas",
    "maxPriorityFeePerGas",
    "value",
    "transactionIndex",
    "chainId",
    "type",
)
RECEIPT_QUANTITIES = (
    "blockNumber",
    "transactionIndex",
    "gasUsed",
    "cumulativeGasUsed",
    "effectiveGasPrice",
    "gasUsedForL1",
    "l1BlockNumber",
    "status",
    "type",
)


def format_ether(wei: int) -> str:
    """Format a wei amount as ETH with at least one decimal place.

    Examples:
        >>> format_ether(10**18)
        '1.0'
        >>> format_ether(1)
        '0.000000000000000001'
    """
    text = format(Decimal(wei).scaleb(-18), "f")
    if "." not in text:
        return f"{text}.0"
    text = text.rstrip("0")
    return f"{text}0" if text.endswith(".") else text


def validate_address(address: str) -> str:
    address = address.strip()
    if not ADDRESS_PATTERN.match(address):
        raise ValueError(
            f"Invalid address: {address!r} (expected 0x followed by 40 hex characters)"
        )
    return address


def validate_hash(tx_hash: str) -> str:
    tx_hash = tx_hash.strip()
    if not HASH_PATTERN.match(tx_hash):
        raise ValueError(
            f"Invalid transaction hash: {tx_hash!r} (expected 0x followed by 64 hex characters)"
        )
    return tx_hash


def parse_block_identifier(block: str) -> str | int:
    """Accept a decimal or 0x block number, a block hash, or a block tag.

    Raises:
        ValueError: If block is none of those
    """
    block = block.strip()
    if block.lower() in BLOCK_TAGS:
        return block.lower()
    if HASH_PATTERN.match(block):
        return block
    if block.isdigit():
        return int(block)
    if HEX_NUMBER_PATTERN.match(block):
        return int(block, 16)
    raise ValueError(
        f"Invalid block: {block!r} (use a number, a block hash, or one of {', '.join(BLOCK_TAGS)})"
    )


def _decode_quantities(data: dict[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    decoded = dict(data)
    for key in keys:
        value = decoded.get(key)
        if isinstance(value, str) and value.startswith("0x"):
            decoded[key] = int(value, 16)
    return decoded


class ChainTools:
    """Text-producing implementations of the MCP tools.

    ABOUTME: Input is validated before any network call
    ABOUTME: RpcError and ValueError become "Error: <message>" text
    """

    def __init__(self, rpc: ArbitrumRpc) -> None:
        self.rpc = rpc

    async def get_block_number(self) -> str:
        try:
            block_number = await self.rpc.block_number()
        except (RpcError, ValueError) as e:
            return f"Error: {e}"
        return f"Latest block number: {block_number}"

    async def get_block(self, block: str) -> str:
        try:
            block_data = await self.rpc.get_block(parse_block_identifier(block))
        except (RpcError, ValueError) as e:
            return f"Error: {e}"
        if not block_data:
            return "Block not found."
        block_data = _decode_quantities(block_data, BLOCK_QUANTITIES)
        return f"Block details:\n{json.dumps(block_data, indent=2)}"

    async def get_transaction(self, tx_hash: str) -> str:
        try:
            tx_data = await self.rpc.get_transaction(validate_hash(tx_hash))
        except (RpcError, ValueError) as e:
            return f"Error: {e}"
        if not tx_data:
            return "Transaction not found or not yet indexed."
        tx_data = _decode_quantities(tx_data, TRANSACTION_QUANTITIES)
        return f"Transaction details:\n{json.dumps(tx_data, indent=2)}"

    async def get_transaction_receipt(self, tx_hash: str) -> str:
        try:
            receipt = await self.rpc.get_transaction_receipt(validate_hash(tx_hash))
        except (RpcError, ValueError) as e:
            return f"Error: {e}"
        if not receipt:
            return "Transaction receipt not found or not yet indexed."
        receipt = _decode_quantities(receipt, RECEIPT_QUANTITIES)
        return f"Transaction Receipt:\n{json.dumps(receipt, indent=2)}"

    async def get_gas_price(self) -> str:
        try:
            gas_price = await self.rpc.gas_price()
        except (RpcError, ValueError) as e:
            return f"Error: {e}"
        return f"Current gas price: {gas_price} wei"

    async def get_gas_parameters(self) -> str:
        try:
            gas_price = await self.rpc.gas_price()
            fees = await self.rpc.fee_data()
        except (RpcError, ValueError) as e:
            return f"Error: {e}"
        return "\n".join([
            "Current gas metrics:",
            f"- Base Fee: {format_ether(fees['base_fee_per_gas'])} ETH",
            f"- Max Priority Fee: {format_ether(fees['max_priority_fee_per_gas'])} ETH",
            f"- Max Fee: {format_ether(fees['max_fee_per_gas'])} ETH",
            f"- Gas Price: {format_ether(gas_price)} ETH",
        ])

    async def get_account_balance(self, address: str) -> str:
        try:
            balance = await self.rpc.get_balance(validate_address(address))
        except (RpcError, ValueError) as e:
            return f"Error: {e}"
        return f"Balance: {format_ether(balance)} ETH"


def create_server(settings: ServerSettings, rpc: ArbitrumRpc | None = None) -> FastMCP:
    """Build the FastMCP server with every chain tool registered.

    Args:
        settings: Loaded server settings
        rpc: Client override (defaults to one built from settings)

    Returns:
        FastMCP instance; call run() to serve over stdio
    """
    rpc = rpc or ArbitrumRpc(settings.rpc_url, timeout=settings.http_timeout)
    tools = ChainTools(rpc)
    mcp = FastMCP(SERVER_NAME)

    @mcp.tool(name="getBlockNumber", description="Get the latest block number on Arbitrum")
    async def get_block_number() -> str:
        return await tools.get_block_number()

    @mcp.tool(
        name="getBlock",
        description=(
            "Get details of a block by number or hash. block: block number (as a string), "
            "block hash, or one of the tags 'latest', 'pending', 'earliest'"
        ),
    )
    async def get_block(block: str) -> str:
        return await tools.get_block(block)

    @mcp.tool(name="getTransaction", description="Get details of a transaction by hash")
    async def get_transaction(txHash: str) -> str:
        return await tools.get_transaction(txHash)

    @mcp.tool(
        name="getTransactionReceipt",
        description="Get the transaction receipt for a given transaction hash",
    )
    async def get_transaction_receipt(txHash: str) -> str:
        return await tools.get_transaction_receipt(txHash)

    @mcp.tool(name="getGasPrice", description="Get the current gas price on Arbitrum")
    async def get_gas_price() -> str:
        return await tools.get_gas_price()

    @mcp.tool(name="getGasParameters", description="Get detailed Arbitrum gas price metrics")
    async def get_gas_parameters() -> str:
        return await tools.get_gas_parameters()

    @mcp.tool(name="getAccountBalance", description="Get native token balance for an Arbitrum address")
    async def get_account_balance(address: str) -> str:
        return await tools.get_account_balance(address)

    logger.info(f"Registered chain tools for {SERVER_NAME} v{__version__}")
    return mcp
