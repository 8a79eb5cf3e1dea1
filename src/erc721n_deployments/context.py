"""Execution context and network context reader for erc721n-deployments library."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

import requests
from eth_account import Account as EthAccount
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address
from web3 import HTTPProvider, Web3
from web3.exceptions import Web3RPCError

from .config import NetworkSettings
from .exceptions import NetworkUnreachableError, NoSignerConfiguredError, RpcError
from .rpc import JsonRpcClient
from .types import Account, NetworkIdentity

logger = logging.getLogger(__name__)


class ExecutionContext:
    """
    Everything a pipeline run talks to: one network endpoint and one signer.

    Passed explicitly to every component so that independent runs do not
    share state. Raw reads and snapshots go through rpc; transactions and
    contract calls go through w3, which shares rpc's requests session.
    """

    def __init__(
        self,
        settings: NetworkSettings,
        rpc: Optional[JsonRpcClient] = None,
    ):
        self.settings = settings
        self.rpc = rpc or JsonRpcClient(settings.rpc_url)
        self.w3 = Web3(
            HTTPProvider(
                self.rpc.rpc_url,
                request_kwargs={"timeout": self.rpc.timeout},
                session=self.rpc.session,
                exception_retry_configuration=None,
            )
        )
        self._signer: Optional[LocalAccount] = None

    @property
    def network_name(self) -> str:
        return self.settings.name

    @property
    def signer(self) -> LocalAccount:
        """
        The local signing account.

        Raises:
            NoSignerConfiguredError: If no private key is configured or it is invalid
        """
        if self._signer is None:
            if not self.settings.private_key:
                raise NoSignerConfiguredError(
                    f"No private key configured for network '{self.settings.name}': "
                    "set $PK or pass private_key"
                )
            try:
                self._signer = EthAccount.from_key(self.settings.private_key)
            except (ValueError, TypeError) as e:
                raise NoSignerConfiguredError(
                    f"Invalid private key configured for network '{self.settings.name}'"
                ) from e
        return self._signer

    @property
    def address(self) -> str:
        return to_checksum_address(self.signer.address)

    def close(self) -> None:
        self.rpc.close()

    def __enter__(self) -> "ExecutionContext":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def read_chain_id(ctx: ExecutionContext) -> int:
    """Current chain id reported by the node."""
    return int(ctx.rpc.call("eth_chainId"), 16)


def _get_balance(ctx: ExecutionContext, address: str) -> int:
    return int(ctx.rpc.call("eth_getBalance", [address, "latest"]), 16)


def read_account(ctx: ExecutionContext) -> Account:
    """
    Read the signing account's address and current balance.

    Raises:
        NoSignerConfiguredError: If no signer is configured
        NetworkUnreachableError: If the endpoint cannot be queried
    """
    address = ctx.address
    return Account(address=address, balance=_get_balance(ctx, address))


def read_context(ctx: ExecutionContext) -> Tuple[NetworkIdentity, Account]:
    """
    Read the network identity and the signing account.

    The signer is checked before any network traffic so a missing key is
    reported even when the endpoint is down.

    Returns:
        Tuple of (network identity, account)

    Raises:
        NoSignerConfiguredError: If no signer is configured
        NetworkUnreachableError: If the endpoint cannot be queried
    """
    address = ctx.address

    chain_id = read_chain_id(ctx)
    expected = ctx.settings.chain_id
    if expected is not None and expected != chain_id:
        logger.warning(
            "Network '%s' is configured with chain id %d but the node reports %d",
            ctx.network_name,
            expected,
            chain_id,
        )

    identity = NetworkIdentity(name=ctx.network_name, chain_id=chain_id)
    account = Account(address=address, balance=_get_balance(ctx, address))
    logger.info(
        "Connected to %s (chain id %d) as %s, balance %d wei",
        identity.name,
        identity.chain_id,
        account.address,
        account.balance,
    )
    return identity, account


@contextmanager
def web3_errors(action: str) -> Iterator[None]:
    """Re-raise web3 transport and node errors as library errors."""
    try:
        yield
    except requests.RequestException as e:
        raise NetworkUnreachableError(f"Network error during {action}: {e}") from e
    except Web3RPCError as e:
        response = getattr(e, "rpc_response", None) or {}
        error = response.get("error")
        code = error.get("code") if isinstance(error, dict) else None
        raise RpcError(f"RPC error during {action}: {e}", code=code) from e
