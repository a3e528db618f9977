"""ABI lookup and call data encoding for dex-deployments library."""

from typing import Any, Dict, List, Optional

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import function_abi_to_4byte_selector, is_hex, to_bytes
from eth_utils.abi import collapse_if_tuple

from .exceptions import AbiError


def input_types(abi_entry: Dict[str, Any]) -> List[str]:
    """
    Get the canonical input types of an ABI entry.

    Tuple components are collapsed, e.g. "(address,uint256)[]".
    """
    return [collapse_if_tuple(item) for item in abi_entry.get("inputs", [])]


def find_constructor(abi: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return the constructor entry, or None for the implicit constructor."""
    for item in abi:
        if item.get("type") == "constructor":
            return item
    return None


def find_function(abi: List[Dict[str, Any]], method: str, arg_count: int) -> Dict[str, Any]:
    """
    Find a function entry by name and argument count.

    Args:
        abi: Contract ABI
        method: Function name
        arg_count: Number of arguments the caller passes

    Returns:
        Function ABI entry

    Raises:
        AbiError: If no overload or more than one overload matches
    """
    candidates = [
        item
        for item in abi
        if item.get("type", "function") == "function" and item.get("name") == method
    ]
    if not candidates:
        raise AbiError(f"Function '{method}' not found in ABI")

    matching = [item for item in candidates if len(item.get("inputs", [])) == arg_count]
    if not matching:
        raise AbiError(
            f"Function '{method}' takes no overload with {arg_count} argument(s)"
        )
    if len(matching) > 1:
        raise AbiError(f"Function '{method}' is ambiguous with {arg_count} argument(s)")

    return matching[0]


def _normalize_arg(abi_type: str, value: Any) -> Any:
    # Byte types given as hex strings must reach eth-abi as bytes
    if abi_type.startswith("bytes") and isinstance(value, str) and is_hex(value):
        return to_bytes(hexstr=value)
    return value


def encode_arguments(types: List[str], args: List[Any]) -> bytes:
    """
    ABI-encode arguments.

    Raises:
        AbiError: If the argument count or values do not fit the types
    """
    if len(types) != len(args):
        raise AbiError(f"Expected {len(types)} argument(s), got {len(args)}")

    normalized = [_normalize_arg(t, v) for t, v in zip(types, args)]
    try:
        return encode(types, normalized)
    except (EncodingError, TypeError, ValueError) as e:
        raise AbiError(f"Cannot encode {args!r} as {types}: {e}") from e


def encode_deploy_data(bytecode: str, abi: List[Dict[str, Any]], args: List[Any]) -> str:
    """
    Build contract creation data: bytecode followed by constructor arguments.

    Returns:
        0x-prefixed hex string
    """
    constructor = find_constructor(abi)
    types = input_types(constructor) if constructor else []
    encoded = encode_arguments(types, list(args))
    return bytecode + encoded.hex()


def encode_function_call(abi: List[Dict[str, Any]], method: str, args: List[Any]) -> str:
    """
    Build call data: 4-byte selector followed by encoded arguments.

    Returns:
        0x-prefixed hex string
    """
    function = find_function(abi, method, len(args))
    selector = function_abi_to_4byte_selector(function)
    encoded = encode_arguments(input_types(function), list(args))
    return "0x" + (selector + encoded).hex()
