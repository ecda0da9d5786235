from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from .encoding import from_bytes32
from .errors import DecodeError, NotFoundError
from .loader import PathLike, load_deployment

LOGGER = logging.getLogger('synth_registry.decoder')

MIGRATE_FRAGMENT: dict[str, Any] = {
    'constant': False,
    'inputs': [],
    'name': 'migrate',
    'outputs': [],
    'payable': False,
    'stateMutability': 'nonpayable',
    'type': 'function'
}

ERROR_SENTINEL = '\\error decoding\\'

INTEGER_TYPE = re.compile(r'^u?int\d{0,3}$')
DIGIT_GROUPS = re.compile(r'(\d)(?=(\d{3})+(?!\d))')
ARRAY_SUFFIX = re.compile(r'\[\d*\]$')

BASIS_POINT_UNIT = 10**14
DECIMAL_UNIT = 10**18


def canonical_type(param: Mapping[str, Any]) -> str:
    abi_type = str(param.get('type', ''))
    if abi_type.startswith('tuple'):
        inner = ','.join(canonical_type(component) for component in param.get('components', []))
        return f'({inner}){abi_type[len("tuple"):]}'
    return abi_type


def function_selector(fragment: Mapping[str, Any]) -> str:
    types = ','.join(canonical_type(param) for param in fragment.get('inputs', []))
    signature = f'{fragment["name"]}({types})'
    return bytes(Web3.keccak(text=signature)[:4]).hex()


def _normalize_value(param: Mapping[str, Any], value: Any) -> Any:
    abi_type = str(param.get('type', ''))

    if ARRAY_SUFFIX.search(abi_type):
        element = {**param, 'type': ARRAY_SUFFIX.sub('', abi_type)}
        return [_normalize_value(element, item) for item in value]

    if abi_type == 'tuple':
        normalized: dict[str, Any] = {}
        for position, (component, item) in enumerate(zip(param.get('components', []), value)):
            item_value = _normalize_value(component, item)
            normalized[str(position)] = item_value
            if component.get('name'):
                normalized[component['name']] = item_value
        return normalized

    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return '0x' + bytes(value).hex()
    if abi_type == 'address':
        return str(value).lower()
    return value


class AbiDecoder:
    """Selector table for one decode call, built from the ABIs registered on it."""

    def __init__(self) -> None:
        self._methods: dict[str, dict[str, Any]] = {}

    def add_abi(self, abi: list[dict[str, Any]]) -> None:
        for fragment in abi:
            # Legacy ABIs leave the type off function fragments.
            if fragment.get('type', 'function') != 'function' or not fragment.get('name'):
                continue
            self._methods[function_selector(fragment)] = fragment

    def __len__(self) -> int:
        return len(self._methods)

    def decode_method(self, data: str) -> dict[str, Any] | None:
        raw = data[2:] if data.startswith('0x') else data
        try:
            payload = bytes.fromhex(raw)
        except ValueError as exc:
            raise DecodeError(f'Call data is not valid hex: {exc}') from exc

        fragment = self._methods.get(payload[:4].hex())
        if fragment is None:
            return None

        inputs = fragment.get('inputs', [])
        try:
            values = abi_decode([canonical_type(param) for param in inputs], payload[4:])
        except (DecodingError, UnicodeDecodeError) as exc:
            raise DecodeError(f'Cannot decode arguments for {fragment["name"]}: {exc}') from exc

        return {
            'name': fragment['name'],
            'params': [
                {
                    'name': param.get('name', ''),
                    'value': _normalize_value(param, value),
                    'type': param.get('type')
                }
                for param, value in zip(inputs, values)
            ]
        }


def format_decimals(number: int | str) -> str:
    return DIGIT_GROUPS.sub(r'\1,', str(number))


def _truncating_div(value: int, unit: int) -> int:
    quotient = abs(value) // unit
    return -quotient if value < 0 else quotient


def _bytes32_ascii(value: Any) -> str:
    try:
        return from_bytes32(value).replace('\x00', '')
    except (ValueError, TypeError) as exc:
        raise DecodeError(f'Cannot decode bytes32 value {value!r}') from exc


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise DecodeError(f'Cannot decode integer value {value!r}')
    try:
        if isinstance(value, str) and value.startswith('0x'):
            return int(value, 16)
        return int(value)
    except (ValueError, TypeError) as exc:
        raise DecodeError(f'Cannot decode integer value {value!r}') from exc


def enhance_bytes32(value: Any) -> dict[str, str]:
    try:
        return {'ascii': _bytes32_ascii(value)}
    except DecodeError:
        return {'ascii': ERROR_SENTINEL}


def enhance_integer(value: Any) -> dict[str, str]:
    try:
        number = _to_integer(value)
    except DecodeError:
        return {'ascii': ERROR_SENTINEL}
    return {
        'bp': format_decimals(_truncating_div(number, BASIS_POINT_UNIT)),
        'decimal': format_decimals(_truncating_div(number, DECIMAL_UNIT)),
        'number': format_decimals(number)
    }


def _enhance_tuple(value: Mapping[str, Any]) -> dict[str, Any]:
    enhanced: dict[str, Any] = {}
    for key, field in value.items():
        if key.isdigit():
            continue
        if isinstance(field, str) and field.startswith('0x'):
            # 0x plus 64 hex characters
            if len(field) == 66:
                enhanced[key] = {'original': field, 'enhanced': enhance_bytes32(field)}
            else:
                enhanced[key] = field
            continue
        enhanced[key] = {'original': field, 'enhanced': enhance_integer(field)}
    return enhanced


def enhance_param(param: Mapping[str, Any]) -> dict[str, Any]:
    abi_type = param.get('type')
    value = param.get('value')

    if abi_type == 'bytes32':
        return {**param, 'enhanced': enhance_bytes32(value)}
    if abi_type == 'bytes32[]':
        return {**param, 'value': [{'original': item, 'enhanced': enhance_bytes32(item)} for item in value]}
    if INTEGER_TYPE.match(str(abi_type)):
        return {**param, 'enhanced': enhance_integer(value)}
    if abi_type == 'tuple' and isinstance(value, Mapping):
        return {**param, 'value': _enhance_tuple(value)}
    return dict(param)


def enhance_decoded(decoded: Mapping[str, Any]) -> dict[str, Any]:
    method = decoded.get('method')
    if method is None:
        return dict(decoded)
    params = [enhance_param(param) for param in method['params']]
    return {**decoded, 'method': {**method, 'params': params}}


def resolve_contract_name(targets: Mapping[str, Mapping[str, Any]], address: str) -> str:
    wanted = address.lower()
    for name, target in targets.items():
        if str(target.get('address', '')).lower() == wanted:
            return target.get('name', name)
    raise NotFoundError(f'No deployed contract at address {address}.')


def decode(
    network: str = 'mainnet',
    use_ovm: bool = False,
    data: str = '',
    target: str | None = None,
    decode_migration: bool = False,
    enhance_decode: bool = False,
    explicit_path: PathLike | None = None
) -> dict[str, Any]:
    deployment = load_deployment(network, use_ovm, explicit_path)

    decoder = AbiDecoder()
    for source in deployment['sources'].values():
        decoder.add_abi(source.get('abi') or [])
    if decode_migration:
        decoder.add_abi([MIGRATE_FRAGMENT])
    LOGGER.debug('registered %s method selectors for network=%s', len(decoder), network)

    contract = resolve_contract_name(deployment['targets'], target) if target else None
    result = {'method': decoder.decode_method(data), 'contract': contract}
    return enhance_decoded(result) if enhance_decode else result
