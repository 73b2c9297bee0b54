"""Bech32 account addresses (BIP-173), as used by the ledger's accounts.

An account address is bech32(prefix, sha256(public_key)[:20]).
"""

from __future__ import annotations

import hashlib

ACCOUNT_PREFIX = "akash"

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


def _polymod(values: list[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i in range(5):
            if (top >> i) & 1:
                chk ^= _GENERATOR[i]
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _convert_bits(data: bytes | list[int], from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    out: list[int] = []
    maxv = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise ValueError("invalid data value")
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
        raise ValueError("invalid padding")
    return out


def bech32_encode(hrp: str, data: bytes) -> str:
    """Encode raw bytes under the given human-readable prefix."""
    words = _convert_bits(data, 8, 5, pad=True)
    polymod = _polymod(_hrp_expand(hrp) + words + [0] * 6) ^ 1
    checksum = [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(_CHARSET[d] for d in words + checksum)


def bech32_decode(address: str) -> tuple[str, bytes]:
    """Decode and verify a bech32 string.

    Returns:
        (hrp, raw_bytes)

    Raises:
        ValueError: On bad characters, mixed case, or a bad checksum.
    """
    if address.lower() != address and address.upper() != address:
        raise ValueError("mixed-case address")
    address = address.lower()
    pos = address.rfind("1")
    if pos < 1 or pos + 7 > len(address) or len(address) > 90:
        raise ValueError("invalid separator position or length")
    hrp, rest = address[:pos], address[pos + 1 :]
    if any(c not in _CHARSET for c in rest):
        raise ValueError("invalid character in address")
    words = [_CHARSET.find(c) for c in rest]
    if _polymod(_hrp_expand(hrp) + words) != 1:
        raise ValueError("invalid checksum")
    return hrp, bytes(_convert_bits(words[:-6], 5, 8, pad=False))


def address_from_public_key(public_key: bytes, prefix: str = ACCOUNT_PREFIX) -> str:
    return bech32_encode(prefix, hashlib.sha256(public_key).digest()[:20])


def is_valid_address(address: str, prefix: str = ACCOUNT_PREFIX) -> bool:
    """True if address is a well-formed 20-byte account address with the prefix."""
    if not address:
        return False
    try:
        hrp, raw = bech32_decode(address)
    except ValueError:
        return False
    return hrp == prefix and len(raw) == 20
