import re

import httpx

from hookified.constants import ADMIN_WALLET_PRIVATE_KEY, CONTRACT_RPC_URL
from hookified.enums import ActionType
from hookified.schemas.configs import ContractCallActionConfig
from hookified.services.execution.executors.base import (
    ActionFailed,
    BaseActionExecutor,
    raise_for_response,
)
from hookified.services.execution.types import ExecutionContext
from hookified.services.plugins.base import is_address

_CREDENTIALS_IN_URL = re.compile(r"//[^/@]*@")


def mask_rpc_url(url: str) -> str:
    return _CREDENTIALS_IN_URL.sub("//***@", url)


class ContractCallExecutor(BaseActionExecutor):
    """Dry-runs a contract call against the configured RPC endpoint.

    Signing and broadcasting are handled by the wallet service; this
    executor checks the prerequisites and that the endpoint serves the
    requested chain, then reports the call it would make.
    """

    action_type = ActionType.CONTRACT_CALL

    def __init__(self, private_key: str | None = None, rpc_url: str | None = None):
        self.private_key = private_key if private_key is not None else ADMIN_WALLET_PRIVATE_KEY
        self.rpc_url = rpc_url if rpc_url is not None else CONTRACT_RPC_URL

    async def run(self, config: ContractCallActionConfig, context: ExecutionContext) -> dict:
        if not is_address(config.contract_address):
            raise ActionFailed("Invalid contract address format")
        if not config.is_native_transfer and not config.function_name:
            raise ActionFailed("Function name is required")
        if not self.private_key or not self.rpc_url:
            raise ActionFailed("Contract private key or RPC URL not configured")

        rpc_chain_id = await self._fetch_chain_id()
        if rpc_chain_id != int(config.chain_id):
            raise ActionFailed(
                f"RPC endpoint serves chain {rpc_chain_id}, expected {config.chain_id}"
            )

        return {
            "status": "simulated",
            "contractAddress": config.contract_address,
            "functionName": "nativeTransfer" if config.is_native_transfer else config.function_name,
            "parameters": config.parameters,
            "chainId": int(config.chain_id),
            "rpcUrl": mask_rpc_url(self.rpc_url),
        }

    async def _fetch_chain_id(self) -> int:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.rpc_url,
                json={"jsonrpc": "2.0", "id": 1, "method": "eth_chainId", "params": []},
            )
        raise_for_response(response, "RPC request")

        payload = response.json()
        if "error" in payload:
            raise ActionFailed(f"RPC error: {payload['error']}")
        return int(payload["result"], 16)
