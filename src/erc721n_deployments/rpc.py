"""JSON-RPC client for erc721n-deployments library."""

import itertools
import logging
from typing import Any, List, Optional

import requests

from .constants import RPC_TIMEOUT
from .exceptions import NetworkUnreachableError, RpcError

logger = logging.getLogger(__name__)


class JsonRpcClient:
    """Minimal Ethereum JSON-RPC client over HTTP."""

    def __init__(
        self,
        rpc_url: str,
        timeout: float = RPC_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            rpc_url: RPC endpoint URL
            timeout: Per-request timeout in seconds
            session: requests session to reuse (a new one by default)
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self._ids = itertools.count(1)

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Perform a single JSON-RPC call.

        Args:
            method: RPC method name, e.g. "eth_chainId"
            params: Positional parameters

        Returns:
            The "result" member of the response

        Raises:
            NetworkUnreachableError: If the HTTP request fails or returns non-200
            RpcError: If the node returns an error member
        """
        request_id = next(self._ids)
        logger.debug("rpc -> %s %s", method, params)

        try:
            response = self.session.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params if params is not None else [],
                    "id": request_id,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkUnreachableError(
                f"Network error during RPC call {method} to {self.rpc_url}: {e}"
            ) from e

        if response.status_code != 200:
            raise NetworkUnreachableError(
                f"RPC request {method} failed with status {response.status_code}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise NetworkUnreachableError(f"RPC response to {method} is not JSON") from e

        if "error" in body:
            error = body["error"]
            if isinstance(error, dict):
                raise RpcError(
                    f"RPC error in {method}: {error.get('message', error)}",
                    code=error.get("code"),
                )
            raise RpcError(f"RPC error in {method}: {error}")

        return body.get("result")

    def close(self) -> None:
        self.session.close()
