from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class NetworkSelector:
    network: str
    use_ovm: bool = False
    fork: bool = False


# Hardhat forks of mainnet report 31337.
CHAIN_ID_MAPPING: dict[int, NetworkSelector] = {
    56: NetworkSelector(network='mainnet'),
    97: NetworkSelector(network='testnet'),
    5: NetworkSelector(network='goerli'),
    80001: NetworkSelector(network='mumbai'),
    421614: NetworkSelector(network='sepolia'),
    31337: NetworkSelector(network='mainnet', fork=True)
}


def resolve_folder_key(network: str, use_ovm: bool = False) -> str:
    if 'ovm' in network:
        return network
    return f'{network}-ovm' if use_ovm else network


def network_key(selector: NetworkSelector) -> str:
    return selector.network + ('-ovm' if selector.use_ovm else '') + ('-fork' if selector.fork else '')


NETWORK_TO_CHAIN_ID: dict[str, int] = {
    network_key(selector): chain_id for chain_id, selector in CHAIN_ID_MAPPING.items()
}


def resolve_selector(chain_id: int | Mapping[str, Any]) -> NetworkSelector | None:
    if isinstance(chain_id, Mapping):
        chain_id = chain_id.get('id')
    try:
        return CHAIN_ID_MAPPING.get(int(chain_id))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def resolve_chain_id(selector: NetworkSelector | str) -> int | None:
    key = selector if isinstance(selector, str) else network_key(selector)
    return NETWORK_TO_CHAIN_ID.get(key)
