"""Unsigned transaction construction. Nothing here ever signs or submits."""

import base64
import logging

from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from app.errors import TransactionBuildFailed
from app.providers.base import Quote, UnsignedTransaction
from app.providers.jupiter import JupiterProvider
from app.providers.solana_rpc import SolanaRpcProvider

logger = logging.getLogger(__name__)


class TransactionBuilder:
    def __init__(self, rpc: SolanaRpcProvider, jupiter: JupiterProvider):
        self.rpc = rpc
        self.jupiter = jupiter

    async def build_transfer(self, sender: str, recipient: str, lamports: int) -> UnsignedTransaction:
        from_pubkey = Pubkey.from_string(sender)
        to_pubkey = Pubkey.from_string(recipient)

        try:
            blockhash, last_valid_block_height = await self.rpc.get_latest_blockhash()
        except Exception as e:
            raise TransactionBuildFailed(f"Failed to fetch recent blockhash: {e}", stage="build") from e

        ix = transfer(TransferParams(from_pubkey=from_pubkey, to_pubkey=to_pubkey, lamports=lamports))
        message = Message.new_with_blockhash([ix], from_pubkey, blockhash)
        tx = Transaction.new_unsigned(message)
        payload = base64.b64encode(bytes(tx)).decode()

        logger.info(f"Prepared unsigned transfer of {lamports} lamports {sender} -> {recipient}")
        return UnsignedTransaction(
            payload_base64=payload,
            fee_payer=str(from_pubkey),
            expiry_block_reference=last_valid_block_height,
            recent_blockhash=str(blockhash),
        )

    async def build_from_quote(self, quote: Quote, user: str) -> UnsignedTransaction:
        data = await self.jupiter.build_swap_transaction(quote, user)
        last_valid = data.get("lastValidBlockHeight")

        logger.info(f"Prepared unsigned swap {quote.input_mint} -> {quote.output_mint} for {user}")
        return UnsignedTransaction(
            payload_base64=data["swapTransaction"],
            fee_payer=user,
            expiry_block_reference=int(last_valid) if last_valid is not None else None,
        )
