"""
Service for creating, minting, transferring and burning SPL tokens.

Each operation builds one bundle, submits it and only returns after the
ledger confirmed it, so the next operation always sees its effects.
"""
import logging
from typing import Sequence, Tuple

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.constants import MINT_LEN

from .exceptions import LedgerError
from .solana_client import ConfirmationReceipt
from .transaction_builder import (
    OperationBundle,
    build_burn_bundle,
    build_create_mint_bundle,
    build_mint_to_bundle,
    build_transfer_bundle,
    validate_decimals,
)

logger = logging.getLogger(__name__)


class TokenService:
    """
    Token operations against a ledger connection.

    ``ledger`` is anything exposing ``submit(bundle, signers)`` and
    ``minimum_balance_for_rent_exemption(size)`` coroutines, normally a
    SolanaLedgerClient.
    """

    def __init__(self, ledger):
        self.ledger = ledger

    async def _submit(self, bundle: OperationBundle, signers: Sequence[Keypair]) -> ConfirmationReceipt:
        try:
            return await self.ledger.submit(bundle, signers)
        except LedgerError as e:
            logger.error(f"Failed to {bundle.label.replace('_', ' ')}: {e}")
            raise

    async def create_token(self, authority: Keypair, decimals: int) -> Tuple[Pubkey, ConfirmationReceipt]:
        """
        Create a new mint with ``authority`` as mint and freeze authority.

        Args:
            authority: Keypair funding the mint account and holding authority
            decimals: Decimal precision of the new token

        Returns:
            Tuple of (mint address, confirmation receipt)
        """
        validate_decimals(decimals)
        rent_lamports = await self.ledger.minimum_balance_for_rent_exemption(MINT_LEN)

        # The mint keypair only signs its own allocation; afterwards the
        # mint is addressed by its public key alone.
        mint_keypair = Keypair()
        mint = mint_keypair.pubkey()
        bundle = build_create_mint_bundle(authority.pubkey(), mint, decimals, rent_lamports)

        logger.info(f"Creating token {mint} (decimals={decimals}, rent={rent_lamports} lamports)")
        receipt = await self._submit(bundle, [authority, mint_keypair])
        del mint_keypair
        return mint, receipt

    async def mint(self, mint: Pubkey, authority: Keypair, amount: int) -> ConfirmationReceipt:
        """Mint ``amount`` base units into the authority's own holding account."""
        bundle = build_mint_to_bundle(mint, authority.pubkey(), amount)
        logger.info(f"Minting {amount} units of {mint} to {authority.pubkey()}")
        return await self._submit(bundle, [authority])

    async def transfer(
        self,
        mint: Pubkey,
        authority: Keypair,
        destination_owner: Pubkey,
        amount: int,
    ) -> ConfirmationReceipt:
        """Transfer ``amount`` base units from the authority to ``destination_owner``."""
        bundle = build_transfer_bundle(mint, authority.pubkey(), destination_owner, amount)
        logger.info(f"Transferring {amount} units of {mint} to {destination_owner}")
        return await self._submit(bundle, [authority])

    async def burn(self, mint: Pubkey, authority: Keypair, amount: int, decimals: int) -> ConfirmationReceipt:
        """Burn ``amount`` base units from the authority's holding account."""
        bundle = build_burn_bundle(mint, authority.pubkey(), amount, decimals)
        logger.info(f"Burning {amount} units of {mint} (decimals={decimals})")
        return await self._submit(bundle, [authority])
