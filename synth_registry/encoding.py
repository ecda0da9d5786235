from __future__ import annotations

from web3 import Web3


def to_bytes32(key: str) -> str:
    """Hex-encode an ASCII key, right-padded with zero bytes to 32 bytes."""
    raw = Web3.to_hex(text=key)[2:]
    return '0x' + raw.ljust(64, '0')


def from_bytes32(key: str) -> str:
    # Padding is kept; callers strip the trailing null bytes when they need to.
    return Web3.to_bytes(hexstr=key).decode('latin-1')
