"""Read-only post-deployment checks for erc721n-deployments library."""

from typing import Any, Dict, List, Sequence

from eth_utils import to_checksum_address
from web3.exceptions import BadFunctionCallOutput

from .context import ExecutionContext, web3_errors
from .exceptions import VerificationError
from .types import DeploymentRecord


def _address_getter_abi(name: str) -> List[Dict[str, Any]]:
    return [
        {
            "type": "function",
            "name": name,
            "inputs": [],
            "outputs": [{"name": "", "type": "address"}],
            "stateMutability": "view",
        }
    ]


def call_address_getter(ctx: ExecutionContext, address: str, getter: str) -> str:
    """
    Call a zero-argument view function that returns an address.

    Args:
        ctx: Execution context
        address: Contract to query
        getter: Function name, e.g. "getReserveTokenAddress"

    Returns:
        Checksummed address returned by the contract

    Raises:
        VerificationError: If the call returns nothing decodable (no such function or no code)
    """
    contract = ctx.w3.eth.contract(address=address, abi=_address_getter_abi(getter))
    try:
        with web3_errors(f"{getter}() on {address}"):
            value = contract.functions[getter]().call()
    except BadFunctionCallOutput as e:
        raise VerificationError(f"{getter}() on {address} returned no data") from e
    return to_checksum_address(value)


def verify_reference(
    ctx: ExecutionContext,
    records: Sequence[DeploymentRecord],
    consumer_index: int,
    getter: str,
    reference_index: int,
) -> str:
    """
    Check that a deployed contract stores the address of another one.

    Args:
        ctx: Execution context
        records: Records of the run
        consumer_index: Record whose getter is queried
        getter: Getter name on the consumer
        reference_index: Record whose address the getter must return

    Returns:
        The verified address

    Raises:
        VerificationError: If the getter returns a different address
    """
    consumer = records[consumer_index]
    expected = to_checksum_address(records[reference_index].address)
    actual = call_address_getter(ctx, consumer.address, getter)
    if actual != expected:
        raise VerificationError(
            f"{consumer.artifact_name}.{getter}() returned {actual}, expected "
            f"{records[reference_index].artifact_name} at {expected}"
        )
    return actual
