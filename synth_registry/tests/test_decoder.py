import json
import tempfile
import unittest
from pathlib import Path

from eth_abi import encode
from web3 import Web3

from synth_registry import store
from synth_registry.config import get_settings
from synth_registry.decoder import (
    ERROR_SENTINEL,
    AbiDecoder,
    decode,
    enhance_bytes32,
    enhance_decoded,
    enhance_integer,
    format_decimals,
    function_selector,
)
from synth_registry.errors import DecodeError, NotFoundError
from synth_registry.loader import get_source, get_target


def key(text: str) -> bytes:
    return text.encode('ascii').ljust(32, b'\x00')


def fragment(contract: str, name: str) -> dict:
    return next(entry for entry in get_source('mainnet', contract=contract)['abi'] if entry.get('name') == name)


def call_data(contract: str, name: str, types: list, values: list) -> str:
    return '0x' + function_selector(fragment(contract, name)) + encode(types, values).hex()


class FormattingTests(unittest.TestCase):
    def test_format_decimals(self) -> None:
        self.assertEqual(format_decimals(0), '0')
        self.assertEqual(format_decimals(100), '100')
        self.assertEqual(format_decimals(1000), '1,000')
        self.assertEqual(format_decimals('1234567'), '1,234,567')
        self.assertEqual(format_decimals(-1234567), '-1,234,567')

    def test_enhance_integer(self) -> None:
        enhanced = enhance_integer('1234567890000000000000')

        self.assertEqual(enhanced['number'], '1,234,567,890,000,000,000,000')
        self.assertEqual(enhanced['decimal'], '1,234')
        self.assertEqual(enhanced['bp'], '12,345,678')

    def test_enhance_integer_truncates_toward_zero(self) -> None:
        enhanced = enhance_integer(-15 * 10**13)

        self.assertEqual(enhanced['bp'], '-1')
        self.assertEqual(enhanced['decimal'], '0')

    def test_enhance_failures_use_sentinel(self) -> None:
        self.assertEqual(enhance_integer('not a number'), {'ascii': ERROR_SENTINEL})
        self.assertEqual(enhance_bytes32('0xzz'), {'ascii': ERROR_SENTINEL})

    def test_enhance_bytes32_strips_padding(self) -> None:
        self.assertEqual(enhance_bytes32('0x' + key('zUSD').hex()), {'ascii': 'zUSD'})

    def test_enhance_skips_unknown_method(self) -> None:
        decoded = {'method': None, 'contract': None}
        self.assertEqual(enhance_decoded(decoded), decoded)


class AbiDecoderTests(unittest.TestCase):
    def tearDown(self) -> None:
        get_settings.cache_clear()
        store.cache_clear()

    def test_selector_matches_keccak_signature(self) -> None:
        expected = Web3.keccak(text='suspendSynth(bytes32,uint256)')[:4].hex()
        self.assertEqual(function_selector(fragment('SystemStatus', 'suspendSynth')), expected.removeprefix('0x'))

    def test_tuple_selector_uses_component_types(self) -> None:
        expected = Web3.keccak(text='setParameters(bytes32,(uint256,uint256,uint256,uint256,bytes32))')[:4].hex()
        self.assertEqual(
            function_selector(fragment('PerpsV2MarketSettings', 'setParameters')),
            expected.removeprefix('0x')
        )

    def test_decode_plain_call(self) -> None:
        data = call_data('SystemStatus', 'suspendSynth', ['bytes32', 'uint256'], [key('zBTC'), 55])
        result = decode('mainnet', data=data)

        self.assertIsNone(result['contract'])
        self.assertEqual(result['method']['name'], 'suspendSynth')
        self.assertEqual(
            result['method']['params'],
            [
                {'name': 'currencyKey', 'value': '0x' + key('zBTC').hex(), 'type': 'bytes32'},
                {'name': 'reason', 'value': '55', 'type': 'uint256'}
            ]
        )

    def test_decode_address_is_lower_cased(self) -> None:
        recipient = '0x' + 'ab' * 20
        data = call_data('Synthetix', 'transfer', ['address', 'uint256'], [recipient, 10**18])
        params = decode('mainnet', data=data)['method']['params']

        self.assertEqual(params[0]['value'], recipient)
        self.assertEqual(params[1]['value'], str(10**18))

    def test_decode_resolves_target_contract(self) -> None:
        address = get_target('mainnet', contract='SystemStatus')['address']
        data = call_data('SystemStatus', 'suspendSynth', ['bytes32', 'uint256'], [key('zETH'), 1])

        result = decode('mainnet', data=data, target=address.upper().replace('0X', '0x'))

        self.assertEqual(result['contract'], 'SystemStatus')

    def test_unknown_target_is_not_found(self) -> None:
        data = call_data('SystemStatus', 'suspendSynth', ['bytes32', 'uint256'], [key('zETH'), 1])
        with self.assertRaises(NotFoundError):
            decode('mainnet', data=data, target='0x' + '12' * 20)

    def test_unknown_selector_decodes_to_none(self) -> None:
        self.assertIsNone(decode('mainnet', data='0xdeadbeef')['method'])

    def test_migrate_only_with_flag(self) -> None:
        data = '0x' + Web3.keccak(text='migrate()')[:4].hex().removeprefix('0x')

        self.assertIsNone(decode('mainnet', data=data)['method'])
        self.assertEqual(
            decode('mainnet', data=data, decode_migration=True)['method'],
            {'name': 'migrate', 'params': []}
        )

    def test_malformed_call_data(self) -> None:
        with self.assertRaises(DecodeError) as ctx:
            decode('mainnet', data='0xnothex')
        self.assertEqual(ctx.exception.status_code, 422)

        truncated = '0x' + function_selector(fragment('SystemStatus', 'suspendSynth')) + '00'
        with self.assertRaises(DecodeError):
            decode('mainnet', data=truncated)

    def test_invalid_utf8_string_argument(self) -> None:
        set_name = {
            'inputs': [{'name': 'name', 'type': 'string'}],
            'name': 'setName',
            'outputs': [],
            'type': 'function'
        }
        deployment = {'targets': {}, 'sources': {'Registry': {'abi': [set_name]}}}
        data = '0x' + function_selector(set_name) + encode(['bytes'], [b'\xff\xfe']).hex()

        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / 'deployment.json').write_text(json.dumps(deployment), encoding='utf-8')
            with self.assertRaises(DecodeError) as ctx:
                decode(data=data, explicit_path=tmp)

        self.assertIn('setName', ctx.exception.detail)

    def test_untyped_fragments_register_as_functions(self) -> None:
        decoder = AbiDecoder()
        decoder.add_abi([{'name': 'nominateNewOwner', 'inputs': [{'name': 'owner', 'type': 'address'}]}])
        data = '0x' + Web3.keccak(text='nominateNewOwner(address)')[:4].hex().removeprefix('0x') + '00' * 32

        self.assertEqual(len(decoder), 1)
        self.assertEqual(decoder.decode_method(data)['name'], 'nominateNewOwner')

    def test_decoder_ignores_non_functions(self) -> None:
        decoder = AbiDecoder()
        decoder.add_abi(get_source('mainnet', contract='SystemStatus')['abi'])

        self.assertEqual(len(decoder), 4)


class EnhancedDecodeTests(unittest.TestCase):
    def tearDown(self) -> None:
        get_settings.cache_clear()
        store.cache_clear()

    def test_enhanced_scalar_params(self) -> None:
        data = call_data(
            'Synthetix',
            'exchange',
            ['bytes32', 'uint256', 'bytes32'],
            [key('zUSD'), 1234567890000000000000, key('zBTC')]
        )
        params = decode('mainnet', data=data, enhance_decode=True)['method']['params']

        self.assertEqual(params[0]['enhanced'], {'ascii': 'zUSD'})
        self.assertEqual(params[1]['value'], '1234567890000000000000')
        self.assertEqual(params[1]['enhanced']['decimal'], '1,234')
        self.assertEqual(params[2]['enhanced'], {'ascii': 'zBTC'})

    def test_enhanced_bytes32_array(self) -> None:
        data = call_data('Issuer', 'removeSynths', ['bytes32[]'], [[key('zBTC'), key('zETH')]])
        param = decode('mainnet', data=data, enhance_decode=True)['method']['params'][0]

        self.assertEqual(
            param['value'],
            [
                {'original': '0x' + key('zBTC').hex(), 'enhanced': {'ascii': 'zBTC'}},
                {'original': '0x' + key('zETH').hex(), 'enhanced': {'ascii': 'zETH'}}
            ]
        )
        self.assertNotIn('enhanced', param)

    def test_enhanced_tuple(self) -> None:
        parameters = (5 * 10**14, 2 * 10**14, 25 * 10**18, 500 * 10**18, key('ocBTCPERP'))
        data = call_data(
            'PerpsV2MarketSettings',
            'setParameters',
            ['bytes32', '(uint256,uint256,uint256,uint256,bytes32)'],
            [key('zBTCPERP'), parameters]
        )

        plain = decode('mainnet', data=data)['method']['params'][1]['value']
        enhanced = decode('mainnet', data=data, enhance_decode=True)['method']['params'][1]['value']

        self.assertEqual(plain['0'], '500000000000000')
        self.assertEqual(plain['takerFee'], '500000000000000')
        self.assertNotIn('0', enhanced)
        self.assertEqual(enhanced['takerFee']['original'], '500000000000000')
        self.assertEqual(enhanced['takerFee']['enhanced']['bp'], '5')
        self.assertEqual(enhanced['maxLeverage']['enhanced']['decimal'], '25')
        self.assertEqual(enhanced['offchainMarketKey']['enhanced'], {'ascii': 'ocBTCPERP'})

    def test_plain_and_enhanced_share_method_name(self) -> None:
        data = call_data('SystemStatus', 'suspendSynth', ['bytes32', 'uint256'], [key('zBTC'), 55])

        plain = decode('mainnet', data=data)
        enhanced = decode('mainnet', data=data, enhance_decode=True)

        self.assertEqual(plain['method']['name'], enhanced['method']['name'])
        self.assertEqual(enhanced['method']['params'][1]['enhanced']['number'], '55')
