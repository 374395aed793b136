"""Constructor argument encoding for deployment transactions."""

from typing import Any, Dict, List, Optional, Sequence

from eth_abi import encode
from eth_abi.exceptions import EncodingError, ParseError

from .types import CompiledContract


def _abi_type(param: Dict[str, Any]) -> str:
    """
    Return the canonical type string of an ABI parameter.

    Tuple parameters are expanded from their components, e.g.
    ``tuple[]`` with components (address, uint256) becomes ``(address,uint256)[]``.
    """
    param_type = param["type"]
    if not param_type.startswith("tuple"):
        return param_type

    suffix = param_type[len("tuple"):]
    inner = ",".join(_abi_type(c) for c in param.get("components", []))
    return f"({inner}){suffix}"


def constructor_abi(abi: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Find the constructor entry in a contract ABI, if it has one."""
    for item in abi:
        if item.get("type") == "constructor":
            return item
    return None


def encode_constructor_args(abi: List[Dict[str, Any]], args: Sequence[Any]) -> bytes:
    """
    ABI-encode constructor arguments.

    Args:
        abi: Contract ABI
        args: Positional constructor arguments

    Returns:
        Encoded arguments (empty when the constructor takes none)

    Raises:
        ValueError: If the argument count or values don't match the constructor
    """
    constructor = constructor_abi(abi)
    inputs = constructor.get("inputs", []) if constructor else []

    if len(inputs) != len(args):
        raise ValueError(
            f"Constructor expects {len(inputs)} argument(s), got {len(args)}"
        )
    if not inputs:
        return b""

    types = [_abi_type(p) for p in inputs]
    try:
        return encode(types, list(args))
    except (EncodingError, ParseError, ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Cannot encode constructor arguments {types}: {e}") from e


def deployment_data(contract: CompiledContract, args: Sequence[Any]) -> bytes:
    """Build the transaction input of a deployment: bytecode then encoded args."""
    return contract.bytecode + encode_constructor_args(contract.abi, args)
