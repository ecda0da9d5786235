from __future__ import annotations

NETWORKS = ['local', 'testnet', 'mainnet', 'goerli', 'mumbai', 'sepolia']

BUILD_FOLDER = 'build'
AST_FOLDER = 'ast'

CONFIG_FILENAME = 'config.json'
RELEASES_FILENAME = 'releases.json'
PARAMS_FILENAME = 'params.json'
SYNTHS_FILENAME = 'synths.json'
STAKING_REWARDS_FILENAME = 'rewards.json'
SHORTING_REWARDS_FILENAME = 'shorting-rewards.json'
OWNER_ACTIONS_FILENAME = 'owner-actions.json'
DEPLOYMENT_FILENAME = 'deployment.json'
VERSIONS_FILENAME = 'versions.json'
FEEDS_FILENAME = 'feeds.json'
OFFCHAIN_FEEDS_FILENAME = 'offchain-feeds.json'
FUTURES_MARKETS_FILENAME = 'futures-markets.json'
PERPS_V2_MARKETS_FILENAME = 'perpsv2-markets.json'
AST_FILENAME = 'asts.json'
ASSETS_FILENAME = 'assets.json'

ZERO_ADDRESS = '0x' + '0' * 40
ZERO_BYTES32 = '0x' + '0' * 64

GOVERNANCE_TOKEN_SYMBOL = 'HZN'
GOVERNANCE_TOKEN_NAME = 'Synthetix'
GOVERNANCE_PROXY_TARGET = 'ProxySynthetix'
INTERNAL_SYNTH_CATEGORY = 'internal'
TOKEN_DECIMALS = 18

SUSPENSION_REASONS: dict[int, str] = {
    1: 'System Upgrade',
    2: 'Market Closure',
    4: 'iZasset Reprice',
    6: 'Index Rebalance',
    55: 'Circuit Breaker (Phase one)',
    65: 'Decentralized Circuit Breaker (Phase two)',
    80: 'Futures configuration',
    231: 'Latency Breaker',
    99999: 'Emergency'
}
