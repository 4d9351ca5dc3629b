"""ERC20 call data encoding and return-value decoding."""

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import encode_hex, function_signature_to_4byte_selector

from tokenscan.parsers.exceptions import UpstreamError

NAME = function_signature_to_4byte_selector("name()")
SYMBOL = function_signature_to_4byte_selector("symbol()")
DECIMALS = function_signature_to_4byte_selector("decimals()")
TOTAL_SUPPLY = function_signature_to_4byte_selector("totalSupply()")
BALANCE_OF = function_signature_to_4byte_selector("balanceOf(address)")


def call_data(selector: bytes, arg_types: list[str] | None = None, args: list | None = None) -> str:
    body = encode(arg_types, args) if arg_types else b""
    return encode_hex(selector + body)


def balance_of_data(owner: str) -> str:
    return call_data(BALANCE_OF, ["address"], [owner])


def decode_uint(raw: bytes, field: str) -> int:
    try:
        (value,) = decode(["uint256"], raw)
    except DecodingError as e:
        raise UpstreamError(f"Undecodable {field}() return value") from e
    return int(value)


def decode_text(raw: bytes, field: str) -> str:
    """Decode a ``string`` return, falling back to legacy ``bytes32`` tokens."""
    try:
        (value,) = decode(["string"], raw)
        return value
    except (DecodingError, OverflowError, UnicodeDecodeError):
        pass
    if len(raw) == 32:
        text = raw.rstrip(b"\x00").decode("utf-8", errors="replace")
        if text:
            return text
    raise UpstreamError(f"Undecodable {field}() return value")
