from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import NotFoundError
from .loader import PathLike, load_deployment

LOGGER = logging.getLogger('synth_registry.perps')

FAMILY_PREFIX = 'PerpsV2'

ROLE_PROXY = 'proxy'
ROLE_COMPONENT = 'component'

EXCLUDED_CONTRACTS = frozenset({'PerpsV2MarketSettings', 'PerpsV2MarketData', 'PerpsV2ExchangeRate'})
EXCLUDED_PREFIXES = ('PerpsV2MarketState', 'PerpsV2DelayedOrder', 'PerpsV2OffchainDelayedOrder')


@dataclass(frozen=True)
class PrefixRule:
    prefix: str
    role: str


# Evaluated in order, first match wins. PerpsV2Market is a prefix of several
# component names so it has to stay last.
PREFIX_RULES: tuple[PrefixRule, ...] = (
    PrefixRule('PerpsV2Proxy', ROLE_PROXY),
    PrefixRule('PerpsV2MarketViews', ROLE_COMPONENT),
    PrefixRule('PerpsV2DelayedIntent', ROLE_COMPONENT),
    PrefixRule('PerpsV2DelayedExecution', ROLE_COMPONENT),
    PrefixRule('PerpsV2MarketLiquidate', ROLE_COMPONENT),
    PrefixRule('PerpsV2Market', ROLE_COMPONENT)
)


def is_excluded(target: str) -> bool:
    return target in EXCLUDED_CONTRACTS or target.startswith(EXCLUDED_PREFIXES)


def classify(target: str) -> tuple[str, str] | None:
    """Return (role, market name) for a PerpsV2 target, or None when it is not part of a market."""
    if is_excluded(target):
        return None
    for rule in PREFIX_RULES:
        if target.startswith(rule.prefix):
            return rule.role, target[len(rule.prefix):]
    return None


def consolidate_abi(fragments: list[dict[str, Any]], consolidated: list[dict[str, Any]]) -> None:
    for fragment in fragments:
        if fragment.get('type') == 'constructor':
            continue
        name = fragment.get('name')
        duplicate = name and any(
            existing.get('type') == fragment.get('type') and existing.get('name') == name
            for existing in consolidated
        )
        if not duplicate:
            consolidated.append(fragment)


def group_proxied_markets(
    targets: Mapping[str, Mapping[str, Any]],
    sources: Mapping[str, Mapping[str, Any]]
) -> dict[str, dict[str, Any]]:
    markets: dict[str, dict[str, Any]] = {}

    for target, target_data in targets.items():
        if not target.startswith(FAMILY_PREFIX):
            continue
        classified = classify(target)
        if classified is None:
            LOGGER.debug('skipping perps v2 target=%s', target)
            continue

        role, market_name = classified
        market = markets.setdefault(market_name, {'abi': []})

        if role == ROLE_PROXY:
            market['address'] = target_data.get('address')
            continue

        source_name = target_data.get('source')
        if source_name not in sources:
            raise NotFoundError(f'Cannot find source {source_name} for target {target}.')
        consolidate_abi(sources[source_name].get('abi') or [], market['abi'])

    return markets


def get_perpsv2_proxied_markets(
    network: str = 'mainnet',
    use_ovm: bool = False,
    explicit_path: PathLike | None = None
) -> dict[str, dict[str, Any]]:
    deployment = load_deployment(network, use_ovm, explicit_path)
    return group_proxied_markets(deployment['targets'], deployment['sources'])
