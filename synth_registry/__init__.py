from __future__ import annotations

from . import constants
from .aggregators import (
    get_ast,
    get_feeds,
    get_futures_markets,
    get_next_release,
    get_offchain_feeds,
    get_perps_markets,
    get_shorting_rewards,
    get_staking_rewards,
    get_suspension_reasons,
    get_synths,
    get_tokens,
    get_users,
    get_versions,
)
from .binding import Binding, wrap
from .decoder import decode, format_decimals
from .encoding import from_bytes32, to_bytes32
from .errors import DecodeError, NotFoundError, RegistryError, ValidationError
from .loader import get_path_to_network, get_source, get_target, load_bundle, load_deployment
from .networks import (
    CHAIN_ID_MAPPING,
    NETWORK_TO_CHAIN_ID,
    NetworkSelector,
    resolve_chain_id,
    resolve_folder_key,
    resolve_selector,
)
from .perps import get_perpsv2_proxied_markets

__all__ = [
    'Binding',
    'CHAIN_ID_MAPPING',
    'DecodeError',
    'NETWORK_TO_CHAIN_ID',
    'NetworkSelector',
    'NotFoundError',
    'RegistryError',
    'ValidationError',
    'constants',
    'decode',
    'format_decimals',
    'from_bytes32',
    'get_ast',
    'get_feeds',
    'get_futures_markets',
    'get_next_release',
    'get_offchain_feeds',
    'get_path_to_network',
    'get_perps_markets',
    'get_perpsv2_proxied_markets',
    'get_shorting_rewards',
    'get_source',
    'get_staking_rewards',
    'get_suspension_reasons',
    'get_synths',
    'get_target',
    'get_tokens',
    'get_users',
    'get_versions',
    'load_bundle',
    'load_deployment',
    'resolve_chain_id',
    'resolve_folder_key',
    'resolve_selector',
    'to_bytes32',
    'wrap'
]
