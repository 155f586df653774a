"""Settlement-layer collaborators.

Usage:
    from offerfill.settlement import Web3SettlementClient, Web3TokenClient

    settlement = Web3SettlementClient(rpc_url, settlement_address)
    state = settlement.get_offer_state(offer, signature)
"""

from offerfill.settlement.base import FillReceipt, SettlementClient
from offerfill.settlement.web3_client import Web3SettlementClient, Web3TokenClient

__all__ = [
    "FillReceipt",
    "SettlementClient",
    "Web3SettlementClient",
    "Web3TokenClient",
]
