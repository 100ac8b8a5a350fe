"""ABI helpers for the handful of view calls a TWAP run needs.

Only zero-argument calls are issued, so call data is just the 4-byte
selector.  Return data is decoded with eth_abi.
"""

from __future__ import annotations

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import (
    decode_hex,
    encode_hex,
    function_signature_to_4byte_selector,
    is_hex_address,
    to_checksum_address,
)

from pool_twap.errors import ContractReadError


def selector(signature: str) -> str:
    return encode_hex(function_signature_to_4byte_selector(signature))


TOKEN0_SELECTOR = selector("token0()")
TOKEN1_SELECTOR = selector("token1()")
DECIMALS_SELECTOR = selector("decimals()")
SYMBOL_SELECTOR = selector("symbol()")
GET_RESERVES_SELECTOR = selector("getReserves()")

RESERVES_TYPES = ["uint112", "uint112", "uint32"]


def is_address(value: str) -> bool:
    return isinstance(value, str) and value.startswith("0x") and is_hex_address(value)


def normalize_address(value: str) -> str:
    """EIP-55 checksum a 0x-prefixed 20-byte address, rejecting anything else."""
    if not is_address(value):
        raise ValueError(f"not a 20-byte hex address: {value!r}")
    return to_checksum_address(value)


def _raw(data: str, *, address: str | None = None) -> bytes:
    try:
        return decode_hex(data)
    except ValueError as exc:
        raise ContractReadError("return data is not hex", address=address) from exc


def _decode(types: list[str], data: str, *, address: str | None = None) -> tuple:
    try:
        return decode(types, _raw(data, address=address))
    except (DecodingError, ValueError) as exc:
        raise ContractReadError(
            f"cannot decode return data as ({','.join(types)}): {exc}",
            address=address,
        ) from exc


def decode_uint(data: str, *, address: str | None = None) -> int:
    return _decode(["uint256"], data, address=address)[0]


def decode_address(data: str, *, address: str | None = None) -> str:
    return to_checksum_address(_decode(["address"], data, address=address)[0])


def decode_reserves(data: str, *, address: str | None = None) -> tuple[int, int]:
    """``getReserves()`` as ``(reserve0, reserve1)``; the timestamp is dropped."""
    reserve0, reserve1, _ = _decode(RESERVES_TYPES, data, address=address)
    return reserve0, reserve1


def decode_string(data: str, *, address: str | None = None) -> str:
    """Decode an ABI ``string`` return, falling back to legacy ``bytes32`` symbols."""
    if len(_raw(data, address=address)) == 32:
        # bytes32 (e.g. MKR): right-padded with NULs
        (value,) = _decode(["bytes32"], data, address=address)
        return value.rstrip(b"\x00").decode("utf-8", errors="replace")
    return _decode(["string"], data, address=address)[0]
