from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Mapping

from .config import get_settings
from .constants import (
    GOVERNANCE_PROXY_TARGET,
    GOVERNANCE_TOKEN_NAME,
    GOVERNANCE_TOKEN_SYMBOL,
    INTERNAL_SYNTH_CATEGORY,
    SUSPENSION_REASONS,
    TOKEN_DECIMALS,
    ZERO_ADDRESS,
)
from .errors import NotFoundError, ValidationError
from .loader import (
    FEEDS,
    FUTURES_MARKETS,
    OFFCHAIN_FEEDS,
    PERPS_V2_MARKETS,
    SHORTING_REWARDS,
    STAKING_REWARDS,
    SYNTHS,
    VERSIONS,
    PathLike,
    get_target,
    load_facet,
)
from .networks import resolve_folder_key
from .store import load_assets, load_releases, read_json_file

LOGGER = logging.getLogger('synth_registry.aggregators')

# Historical market entries carry a synth-style prefix on their asset key.
FUTURES_LEGACY_ASSET_KEYS = frozenset({'zBTC', 'zETH', 'zLINK'})
PERPS_LEGACY_ASSET_KEYS = frozenset({'zBTC', 'zETH'})

VERSION_STAMP_FIELDS = ('tag', 'release', 'date', 'commit', 'block')


def merge_asset(asset: Mapping[str, Any] | None, record: Mapping[str, Any]) -> dict[str, Any]:
    """Layer a raw record over its asset registry entry. Fields on the record win."""
    merged = dict(asset or {})
    merged.update(record)
    return merged


def merge_feed(synth: Mapping[str, Any], feed_entry: Mapping[str, Any] | None) -> dict[str, Any]:
    """Mix the oracle address of a feed into a synth. The feed wins for `feed` only."""
    merged = dict(synth)
    if feed_entry and feed_entry.get('feed'):
        merged['feed'] = feed_entry['feed']
    return merged


def get_feeds(
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None
) -> dict[str, dict[str, Any]]:
    assets = load_assets()
    feeds = load_facet(FEEDS, network=network, use_ovm=use_ovm, explicit_path=explicit_path)
    return {asset: merge_asset(assets.get(asset), entry) for asset, entry in feeds.items()}


def get_offchain_feeds(
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None
) -> dict[str, Any]:
    return load_facet(OFFCHAIN_FEEDS, network=network, use_ovm=use_ovm, explicit_path=explicit_path)


def _resolve_index_reference(synth: Mapping[str, Any], synths: list[dict[str, Any]]) -> list[dict[str, Any]]:
    reference = synth['index']
    matches = [candidate for candidate in synths if candidate.get('name') == reference]
    if len(matches) != 1 or not isinstance(matches[0].get('index'), list):
        raise ValidationError(
            f'While processing {synth.get("name")}, its index mapping "{reference}" cannot be found - '
            'this is an error in the deployment config and should be fixed'
        )
    return matches[0]['index']


def get_synths(
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None,
    skip_populate: bool = False
) -> list[dict[str, Any]]:
    synths = load_facet(SYNTHS, network=network, use_ovm=use_ovm, explicit_path=explicit_path)
    if skip_populate:
        return synths

    assets = load_assets()
    feeds = get_feeds(network, use_ovm, explicit_path)

    populated: list[dict[str, Any]] = []
    for raw in synths:
        synth = merge_asset(assets.get(raw.get('asset')), raw)
        synth = merge_feed(synth, feeds.get(synth.get('asset')))

        if isinstance(synth.get('index'), str):
            synth['index'] = _resolve_index_reference(synth, synths)

        if synth.get('index'):
            synth['index'] = [merge_asset(assets.get(entry.get('asset')), entry) for entry in synth['index']]

        populated.append(synth)
    return populated


def _market_asset_key(asset: str, legacy_keys: frozenset[str]) -> str:
    return asset[1:] if asset in legacy_keys else asset


def _join_markets(markets: list[dict[str, Any]], legacy_keys: frozenset[str]) -> list[dict[str, Any]]:
    assets = load_assets()
    return [
        merge_asset(assets.get(_market_asset_key(str(market.get('asset', '')), legacy_keys)), market)
        for market in markets
    ]


def get_futures_markets(
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None
) -> list[dict[str, Any]]:
    markets = load_facet(FUTURES_MARKETS, network=network, use_ovm=use_ovm, explicit_path=explicit_path)
    return _join_markets(markets, FUTURES_LEGACY_ASSET_KEYS)


def get_perps_markets(
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None
) -> list[dict[str, Any]]:
    markets = load_facet(PERPS_V2_MARKETS, network=network, use_ovm=use_ovm, explicit_path=explicit_path)
    return _join_markets(markets, PERPS_LEGACY_ASSET_KEYS)


def get_staking_rewards(
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None
) -> list[dict[str, Any]]:
    return load_facet(STAKING_REWARDS, network=network, use_ovm=use_ovm, explicit_path=explicit_path)


def get_shorting_rewards(
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None
) -> list[dict[str, Any]]:
    return load_facet(SHORTING_REWARDS, network=network, use_ovm=use_ovm, explicit_path=explicit_path)


def _token_from_synth(synth: Mapping[str, Any], targets: Mapping[str, Any]) -> dict[str, Any]:
    token: dict[str, Any] = {
        'symbol': synth['name'],
        'asset': synth.get('asset'),
        'name': synth.get('description'),
        'decimals': TOKEN_DECIMALS
    }
    optional = {
        'address': (targets.get(f'Proxy{synth["name"]}') or {}).get('address'),
        'index': synth.get('index'),
        'feed': synth.get('feed')
    }
    # Optional fields are left out rather than set to null.
    token.update({key: value for key, value in optional.items() if value is not None})
    return token


def get_tokens(
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None
) -> list[dict[str, Any]]:
    synths = get_synths(network, use_ovm, explicit_path)
    targets = get_target(network, use_ovm, explicit_path=explicit_path)
    feeds = get_feeds(network, use_ovm, explicit_path)

    if GOVERNANCE_PROXY_TARGET not in targets:
        raise NotFoundError(f'Cannot find target {GOVERNANCE_PROXY_TARGET} for network: {network}.')

    governance: dict[str, Any] = {
        'symbol': GOVERNANCE_TOKEN_SYMBOL,
        'asset': GOVERNANCE_TOKEN_SYMBOL,
        'name': GOVERNANCE_TOKEN_NAME,
        'address': targets[GOVERNANCE_PROXY_TARGET]['address'],
        'decimals': TOKEN_DECIMALS
    }
    governance_feed = (feeds.get(GOVERNANCE_TOKEN_SYMBOL) or {}).get('feed')
    if governance_feed:
        governance['feed'] = governance_feed

    synth_tokens = [
        _token_from_synth(synth, targets)
        for synth in synths
        if synth.get('category') != INTERNAL_SYNTH_CATEGORY
    ]
    synth_tokens.sort(key=lambda token: token['symbol'])
    return [governance] + synth_tokens


_TESTNET_OWNER = '0xD9e11e52D2fAF7E735613CcB54478461611Fd4b7'

BASE_USERS: dict[str, str] = {
    'owner': _TESTNET_OWNER,
    'deployer': _TESTNET_OWNER,
    'marketClosure': _TESTNET_OWNER,
    'oracle': '0xac1e8B385230970319906C03A1d8567e3996d1d5',
    'fee': '0xfeEFEEfeefEeFeefEEFEEfEeFeefEEFeeFEEFEeF',
    'zero': ZERO_ADDRESS
}

USER_OVERRIDES: dict[str, dict[str, str]] = {
    'mainnet': {
        'owner': '0x81752bC7D54a45bdB9005223d61D2CBd33d04857',
        'deployer': '0x3a10A18Ca6d9378010D446068d2Fd4dE5D272915',
        'marketClosure': '0xC105Ea57Eb434Fbe44690d7Dec2702e4a2FBFCf7',
        'oracle': '0xaC1ED4Fabbd5204E02950D68b6FC8c446AC95362'
    },
    'testnet': {},
    'goerli': {'owner': '0xA3F3E41cc12Abf3608480d9272fca44594a0cC4B'},
    'mumbai': {'owner': _TESTNET_OWNER},
    'sepolia': {'owner': _TESTNET_OWNER}
}


def get_users(
    network: str = 'mainnet',
    use_ovm: bool = False,
    user: str | None = None
) -> list[dict[str, str]] | dict[str, str] | None:
    folder_key = resolve_folder_key(network, use_ovm)
    if folder_key not in USER_OVERRIDES:
        raise NotFoundError(f'No system users configured for network: {folder_key}.')

    table = {**BASE_USERS, **USER_OVERRIDES[folder_key]}
    users = [{'name': name, 'address': address} for name, address in table.items()]
    if user is None:
        return users
    return next((entry for entry in users if entry['name'] == user), None)


def get_versions(
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None,
    by_contract: bool = False
) -> dict[str, Any]:
    versions = load_facet(VERSIONS, network=network, use_ovm=use_ovm, explicit_path=explicit_path)
    if not by_contract:
        return versions

    by_name: dict[str, list[dict[str, Any]]] = {}
    for entry in versions.values():
        stamp = {field: entry.get(field) for field in VERSION_STAMP_FIELDS}
        for contract, contract_entry in (entry.get('contracts') or {}).items():
            by_name.setdefault(contract, []).append({**stamp, **contract_entry})
    return by_name


def get_suspension_reasons(code: int | None = None) -> dict[int, str] | str | None:
    if code is None:
        return dict(SUSPENSION_REASONS)
    return SUSPENSION_REASONS.get(code)


def get_next_release(use_ovm: bool = False) -> dict[str, Any]:
    releases = load_releases().get('releases', [])
    for release in releases:
        if release.get('released'):
            continue
        if bool(release.get('ovm')) != use_ovm:
            continue
        return {**release, 'releaseName': re.sub(r'[^\w]', '', str(release.get('name', '')))}
    raise NotFoundError(f'No unreleased {"ovm" if use_ovm else "base"} release is scheduled.')


def get_ast(
    source: str | None = None,
    match: str = r'^contracts/',
    ast_path: PathLike | None = None
) -> dict[str, Any]:
    path = Path(ast_path) if ast_path is not None else get_settings().ast_path
    if not path.exists():
        raise NotFoundError(f'Cannot find AST at {path}.')

    pattern = re.compile(match)
    ast = {key: entry for key, entry in read_json_file(path).items() if pattern.search(key)}

    if source is None:
        return ast
    if source in ast:
        return ast[source]

    for key, entry in ast.items():
        if f'/{source}' in key:
            return {key: entry}
    raise NotFoundError(f'Cannot find AST entry for source: {source}')
