"""
Common utilities for the Red Bank account monitor.

Modules:
- keys: contract-state map key decoding
- tendermint: Tendermint RPC client (abci_query)
- wasm: CosmWasm smart-query REST client
- scanner: contract-state scan and account discovery
- positions: concurrent debt/collateral/health fetches
- ratio: collateralization ratio with an injected price source
"""

__all__ = [
    "keys",
    "tendermint",
    "wasm",
    "scanner",
    "positions",
    "ratio",
]
