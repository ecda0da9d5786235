from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from .binding import Binding, wrap
from .config import get_settings
from .constants import NETWORKS
from .errors import RegistryError

LOGGER = logging.getLogger('synth_registry.cli')

MARKET_ACCESSORS = {
    'futures': 'get_futures_markets',
    'perps': 'get_perps_markets',
    'perpsv2-proxied': 'get_perpsv2_proxied_markets'
}


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description='Query bundled synth deployment metadata')
    parser.add_argument('--network', default=settings.default_network, choices=NETWORKS, help='Network name')
    parser.add_argument('--use-ovm', action='store_true', help='Use the OVM variant of the network')
    parser.add_argument('--deployment-path', default=None, help='Read files from this folder instead of the bundle')

    commands = parser.add_subparsers(dest='command', required=True)

    target = commands.add_parser('target', help='Deployed contract targets')
    target.add_argument('--contract', default=None)

    synths = commands.add_parser('synths', help='Synths joined with asset and feed data')
    synths.add_argument('--skip-populate', action='store_true')

    commands.add_parser('tokens', help='Token list')

    markets = commands.add_parser('markets', help='Futures and perps markets')
    markets.add_argument('--kind', choices=sorted(MARKET_ACCESSORS), default='perps')

    users = commands.add_parser('users', help='System user addresses')
    users.add_argument('--user', default=None)

    versions = commands.add_parser('versions', help='Release versions')
    versions.add_argument('--by-contract', action='store_true')

    decode = commands.add_parser('decode', help='Decode contract call data')
    decode.add_argument('data', help='0x-prefixed call data')
    decode.add_argument('--target', default=None, help='Contract address the call was sent to')
    decode.add_argument('--decode-migration', action='store_true')
    decode.add_argument('--enhance', action='store_true', help='Annotate bytes32 and integer arguments')

    return parser


def run_command(binding: Binding, args: argparse.Namespace) -> Any:
    if args.command == 'target':
        return binding.get_target(contract=args.contract)
    if args.command == 'synths':
        return binding.get_synths(skip_populate=args.skip_populate)
    if args.command == 'tokens':
        return binding.get_tokens()
    if args.command == 'markets':
        return getattr(binding, MARKET_ACCESSORS[args.kind])()
    if args.command == 'users':
        return binding.get_users(user=args.user)
    if args.command == 'versions':
        return binding.get_versions(by_contract=args.by_contract)
    if args.command == 'decode':
        return binding.decode(
            data=args.data,
            target=args.target,
            decode_migration=args.decode_migration,
            enhance_decode=args.enhance
        )
    raise ValueError(f'unknown command: {args.command}')


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=get_settings().log_level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    args = build_parser().parse_args(argv)
    binding = wrap(args.network, use_ovm=args.use_ovm, explicit_path=args.deployment_path)

    try:
        result = run_command(binding, args)
    except RegistryError as exc:
        print(f'error: {exc.detail}', file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
