from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .constants import (
    DEPLOYMENT_FILENAME,
    FEEDS_FILENAME,
    FUTURES_MARKETS_FILENAME,
    OFFCHAIN_FEEDS_FILENAME,
    PERPS_V2_MARKETS_FILENAME,
    SHORTING_REWARDS_FILENAME,
    STAKING_REWARDS_FILENAME,
    SYNTHS_FILENAME,
    VERSIONS_FILENAME,
)
from .errors import NotFoundError
from .networks import resolve_folder_key
from .store import deployed_root, read_bundled, read_json_file

LOGGER = logging.getLogger('synth_registry.loader')

PathLike = str | Path


@dataclass(frozen=True)
class Facet:
    key: str
    filename: str
    label: str
    # Optional facets degrade to an empty list when their file is missing.
    required: bool = True


DEPLOYMENT = Facet('deployment', DEPLOYMENT_FILENAME, 'deployment')
FEEDS = Facet('feeds', FEEDS_FILENAME, 'feeds file')
OFFCHAIN_FEEDS = Facet('offchainFeeds', OFFCHAIN_FEEDS_FILENAME, 'off-chain feeds file')
SYNTHS = Facet('synths', SYNTHS_FILENAME, 'synth list')
VERSIONS = Facet('versions', VERSIONS_FILENAME, 'versions')
FUTURES_MARKETS = Facet('futuresMarkets', FUTURES_MARKETS_FILENAME, 'futures markets list', required=False)
PERPS_V2_MARKETS = Facet('perpsv2Markets', PERPS_V2_MARKETS_FILENAME, 'perps v2 markets list', required=False)
STAKING_REWARDS = Facet('rewards', STAKING_REWARDS_FILENAME, 'staking rewards list', required=False)
SHORTING_REWARDS = Facet('shorting-rewards', SHORTING_REWARDS_FILENAME, 'shorting rewards list', required=False)

BUNDLE_FACETS = [
    DEPLOYMENT,
    FEEDS,
    OFFCHAIN_FEEDS,
    SYNTHS,
    FUTURES_MARKETS,
    PERPS_V2_MARKETS,
    STAKING_REWARDS,
    SHORTING_REWARDS,
    VERSIONS
]


def get_path_to_network(network: str = 'mainnet', use_ovm: bool = False, file: str = '') -> Path:
    return deployed_root() / resolve_folder_key(network, use_ovm) / file


def load_facet(
    facet: Facet,
    *,
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None
) -> Any:
    if explicit_path is None:
        payload = read_bundled(resolve_folder_key(network, use_ovm), facet.filename)
    else:
        path = Path(explicit_path) / facet.filename
        payload = read_json_file(path) if path.exists() else None

    if payload is None:
        if facet.required:
            raise NotFoundError(f'Cannot find {facet.label} for network: {network}.')
        LOGGER.debug('no %s for network=%s path=%s; using empty list', facet.label, network, explicit_path)
        return []
    return payload


def load_bundle(network: str = 'mainnet', use_ovm: bool = False) -> dict[str, Any]:
    return {
        facet.key: load_facet(facet, network=network, use_ovm=use_ovm)
        for facet in BUNDLE_FACETS
    }


def load_deployment(
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None
) -> dict[str, Any]:
    deployment = load_facet(DEPLOYMENT, network=network, use_ovm=use_ovm, explicit_path=explicit_path)
    deployment.setdefault('targets', {})
    deployment.setdefault('sources', {})
    return deployment


def get_target(
    network: str = 'mainnet',
    use_ovm: bool = False,
    contract: str | None = None,
    explicit_path: PathLike | None = None
) -> dict[str, Any]:
    targets = load_deployment(network, use_ovm, explicit_path)['targets']
    if contract is None:
        return targets
    if contract not in targets:
        raise NotFoundError(f'Cannot find target {contract} for network: {network}.')
    return targets[contract]


def get_source(
    network: str = 'mainnet',
    use_ovm: bool = False,
    contract: str | None = None,
    explicit_path: PathLike | None = None
) -> dict[str, Any]:
    sources = load_deployment(network, use_ovm, explicit_path)['sources']
    if contract is None:
        return sources
    if contract not in sources:
        raise NotFoundError(f'Cannot find source {contract} for network: {network}.')
    return sources[contract]
