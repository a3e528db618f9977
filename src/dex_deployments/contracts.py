"""Callable proxies for deployed contracts."""

from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

if TYPE_CHECKING:
    from .types import ChainClient, TransactionReceipt


class ContractHandle:
    """
    Proxy exposing a deployed contract's functions as methods.

    >>> balloons = client.get_contract_handle("Balloons", deployer)
    >>> balloons.approve(dex_address, 100 * 10**18)

    Every call is sent as a transaction from the handle's signer.
    """

    def __init__(
        self,
        client: "ChainClient",
        name: str,
        address: str,
        abi: List[Dict[str, Any]],
        signer: str,
    ):
        self.client = client
        self.name = name
        self.address = address
        self.abi = abi
        self.signer = signer

    def function_names(self) -> List[str]:
        return sorted(
            {
                item["name"]
                for item in self.abi
                if item.get("type", "function") == "function" and "name" in item
            }
        )

    def __getattr__(self, method: str) -> Callable[..., "TransactionReceipt"]:
        if method.startswith("_") or "abi" not in self.__dict__:
            raise AttributeError(method)
        if method not in self.function_names():
            raise AttributeError(f"{self.name} has no function '{method}'")

        def send(
            *args: Any, value: Optional[int] = None, gas_limit: Optional[int] = None
        ) -> "TransactionReceipt":
            return self.client.call_contract(
                self.address, method, list(args), self.signer, value=value, gas_limit=gas_limit
            )

        send.__name__ = method
        return send

    def __repr__(self) -> str:
        return f"ContractHandle({self.name!r}, {self.address!r})"
