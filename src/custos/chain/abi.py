"""
Call-data for the handful of contract calls the wallet makes.

Every argument here is a static type, so the encoding is a 4-byte
selector followed by 32-byte words: addresses left-padded with 12 zero
bytes, integers right-aligned big-endian. Return data is decoded with
eth-abi.
"""

from __future__ import annotations

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from ..codec.numeric import decimal_to_fixed32, int_to_fixed32
from ..errors import IntegerOutOfRange, MalformedResponse
from ..keys.secp256k1 import parse_address
from ..utils import keccak256

# Selectors used verbatim; each equals function_selector() of the comment.
TRANSFER_SELECTOR = bytes.fromhex("a9059cbb")  # transfer(address,uint256)
BALANCE_OF_SELECTOR = bytes.fromhex("70a08231")  # balanceOf(address)
# quoteExactInputSingle((address,address,uint256,uint24,uint160))
QUOTE_EXACT_INPUT_SINGLE_SELECTOR = bytes.fromhex("c6a5026a")
# exactInputSingle((address,address,uint24,address,uint256,uint256,uint160))
EXACT_INPUT_SINGLE_SELECTOR = bytes.fromhex("04e45aaf")

FEE_TIERS = (100, 500, 3000, 10000)
MAX_FEE = 2**24 - 1


def function_selector(signature: str) -> bytes:
    """First 4 bytes of Keccak-256 over a canonical function signature."""
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak256(signature.encode("utf-8"))[:4]


def address_word(address: str) -> bytes:
    return b"\x00" * 12 + parse_address(address)


def uint_word(amount: str | int) -> bytes:
    if isinstance(amount, int):
        return int_to_fixed32(amount)
    return decimal_to_fixed32(amount)


def fee_word(fee: int) -> bytes:
    """Pool fee as a uint24 word."""
    if not 0 <= fee <= MAX_FEE:
        raise IntegerOutOfRange(f"Pool fee {fee} does not fit in uint24.", value=fee)
    return int_to_fixed32(fee)


def encode_transfer(to: str, amount: str | int) -> bytes:
    """ERC-20 ``transfer(to, amount)``."""
    return TRANSFER_SELECTOR + address_word(to) + uint_word(amount)


def encode_balance_of(owner: str) -> bytes:
    """ERC-20 ``balanceOf(owner)``."""
    return BALANCE_OF_SELECTOR + address_word(owner)


def encode_quote_exact_input_single(
    token_in: str,
    token_out: str,
    amount_in: str | int,
    fee: int,
) -> bytes:
    """Quoter ``quoteExactInputSingle`` with no price limit."""
    return QUOTE_EXACT_INPUT_SINGLE_SELECTOR + b"".join(
        [
            address_word(token_in),
            address_word(token_out),
            uint_word(amount_in),
            fee_word(fee),
            uint_word(0),  # sqrtPriceLimitX96
        ]
    )


def encode_exact_input_single(
    token_in: str,
    token_out: str,
    fee: int,
    recipient: str,
    amount_in: str | int,
    amount_out_minimum: str | int,
) -> bytes:
    """Swap router ``exactInputSingle`` with no price limit."""
    return EXACT_INPUT_SINGLE_SELECTOR + b"".join(
        [
            address_word(token_in),
            address_word(token_out),
            fee_word(fee),
            address_word(recipient),
            uint_word(amount_in),
            uint_word(amount_out_minimum),
            uint_word(0),  # sqrtPriceLimitX96
        ]
    )


def decode_uint256(data: bytes) -> int:
    try:
        (value,) = decode(["uint256"], data)
    except DecodingError as exc:
        raise MalformedResponse(f"Cannot decode uint256 from 0x{data.hex()}", method="eth_call") from exc
    return value


def decode_quote(data: bytes) -> dict[str, int]:
    """Decode the quoter's ``(amountOut, sqrtPriceX96After, ticksCrossed, gasEstimate)``."""
    try:
        amount_out, sqrt_price_after, ticks_crossed, gas_estimate = decode(
            ["uint256", "uint160", "uint32", "uint256"], data
        )
    except DecodingError as exc:
        raise MalformedResponse(f"Cannot decode quote from 0x{data.hex()}", method="eth_call") from exc
    return {
        "amount_out": amount_out,
        "sqrt_price_x96_after": sqrt_price_after,
        "initialized_ticks_crossed": ticks_crossed,
        "gas_estimate": gas_estimate,
    }
