from dataclasses import dataclass


@dataclass(frozen=True)
class ChainInfo:
    label: str
    # Network identifier used by the Alchemy Notify API
    alchemy_network: str


SUPPORTED_CHAINS: dict[int, ChainInfo] = {
    1: ChainInfo("Ethereum Mainnet", "ETH_MAINNET"),
    11155111: ChainInfo("Sepolia Testnet", "ETH_SEPOLIA"),
    137: ChainInfo("Polygon", "MATIC_MAINNET"),
    80002: ChainInfo("Polygon Amoy", "MATIC_AMOY"),
    56: ChainInfo("BSC", "BNB_MAINNET"),
    97: ChainInfo("BSC Testnet", "BNB_TESTNET"),
    42161: ChainInfo("Arbitrum", "ARB_MAINNET"),
    10: ChainInfo("Optimism", "OPT_MAINNET"),
    8453: ChainInfo("Base", "BASE_MAINNET"),
    84532: ChainInfo("Base Sepolia", "BASE_SEPOLIA"),
}


def alchemy_network_for(chain_id: int) -> str:
    """Map a chain id to the provider's network name.

    Raises:
        ValueError: for chains the provider cannot watch
    """
    chain = SUPPORTED_CHAINS.get(int(chain_id))
    if chain is None:
        raise ValueError(f"Unsupported chain: {chain_id}")
    return chain.alchemy_network
