"""
Solana ledger client using solana-py / solders.

Submits operation bundles as single transactions and waits until the
configured commitment level is reached before returning.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional, Sequence

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import (
    RPCException,
    TransactionExpiredBlockheightExceededError,
    UnconfirmedTxError,
)
from solana.rpc.types import TxOpts
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction
from spl.token.constants import MINT_LEN, TOKEN_PROGRAM_ID

from .exceptions import ConfirmationTimeout, NetworkUnavailable, RejectedOperation
from .transaction_builder import OperationBundle

logger = logging.getLogger(__name__)

EXPLORER_TX_URL = 'https://explorer.solana.com/tx/{signature}'
MAINNET_CLUSTER = 'mainnet-beta'

# Mint layout: COption<Pubkey> mint_authority (36) + u64 supply (8), then u8 decimals
MINT_DECIMALS_OFFSET = 44


@dataclass(frozen=True)
class ConfirmationReceipt:
    """Signature of a confirmed bundle. Used for reporting only."""

    signature: str
    label: str
    slot: Optional[int] = None

    def explorer_url(self, cluster: str = 'devnet') -> str:
        url = EXPLORER_TX_URL.format(signature=self.signature)
        if cluster and cluster != MAINNET_CLUSTER:
            url += f'?cluster={cluster}'
        return url


@contextmanager
def ledger_errors(label: str):
    """Translate solana-py / transport exceptions into ledger errors."""
    try:
        yield
    except RPCException as e:
        raise RejectedOperation(f"Ledger rejected '{label}': {e}", label=label) from e
    except (SolanaRpcException, httpx.HTTPError, OSError) as e:
        raise NetworkUnavailable(f"Ledger unreachable during '{label}': {e}", label=label) from e


class SolanaLedgerClient:
    """
    Ledger connection for the token lifecycle.

    Usage:
        async with SolanaLedgerClient(rpc_url) as ledger:
            receipt = await ledger.submit(bundle, [authority])
    """

    def __init__(
        self,
        rpc_url: str,
        commitment: Commitment = Confirmed,
        skip_preflight: bool = False,
        timeout: float = 30,
        client: Optional[AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.skip_preflight = skip_preflight
        self.timeout = timeout
        self._client = client

    def _build_client(self) -> AsyncClient:
        return AsyncClient(self.rpc_url, commitment=self.commitment, timeout=self.timeout)

    async def __aenter__(self):
        if self._client is None:
            self._client = self._build_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None

    @property
    def client(self) -> AsyncClient:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    # ===== Submission =====

    async def submit(self, bundle: OperationBundle, signers: Sequence[Keypair]) -> ConfirmationReceipt:
        """
        Sign, send and confirm a bundle.

        Args:
            bundle: Instructions to apply atomically
            signers: Keypairs authorizing the instructions; the first one pays fees

        Returns:
            ConfirmationReceipt once the commitment level is reached

        Raises:
            RejectedOperation: the ledger declined the transaction
            NetworkUnavailable: the endpoint could not be reached
            ConfirmationTimeout: no confirmation before the blockhash expired
        """
        if not signers:
            raise ValueError(f"Bundle '{bundle.label}' needs at least one signer")

        with ledger_errors(bundle.label):
            latest = (await self.client.get_latest_blockhash(commitment=self.commitment)).value
            txn = Transaction.new_signed_with_payer(
                list(bundle.instructions),
                signers[0].pubkey(),
                list(signers),
                latest.blockhash,
            )
            opts = TxOpts(
                skip_preflight=self.skip_preflight,
                preflight_commitment=self.commitment,
                last_valid_block_height=latest.last_valid_block_height,
            )
            signature = (await self.client.send_raw_transaction(bytes(txn), opts=opts)).value
            logger.info(f"Submitted '{bundle.label}' ({len(bundle.instructions)} instructions): {signature}")

            try:
                resp = await self.client.confirm_transaction(
                    signature,
                    commitment=self.commitment,
                    last_valid_block_height=latest.last_valid_block_height,
                )
            except (UnconfirmedTxError, TransactionExpiredBlockheightExceededError) as e:
                raise ConfirmationTimeout(
                    f"'{bundle.label}' was not confirmed before its blockhash expired: {e}",
                    label=bundle.label,
                    signature=str(signature),
                ) from e

        status = resp.value[0] if resp.value else None
        if status is not None and status.err is not None:
            logger.error(f"'{bundle.label}' failed on-chain ({signature}): {status.err}")
            raise RejectedOperation(f"Ledger rejected '{bundle.label}': {status.err}", label=bundle.label)

        logger.info(f"Confirmed '{bundle.label}': {signature}")
        return ConfirmationReceipt(
            signature=str(signature),
            label=bundle.label,
            slot=getattr(status, 'slot', None),
        )

    # ===== Queries =====

    async def minimum_balance_for_rent_exemption(self, size: int = MINT_LEN) -> int:
        """Lamports needed to keep an account of ``size`` bytes rent exempt."""
        with ledger_errors('rent_exemption'):
            resp = await self.client.get_minimum_balance_for_rent_exemption(size, commitment=self.commitment)
        return int(resp.value)

    async def token_balance(self, address: Pubkey) -> int:
        """Raw (unscaled) balance of a holding account."""
        with ledger_errors('token_balance'):
            resp = await self.client.get_token_account_balance(address, commitment=self.commitment)
        return int(resp.value.amount)

    async def mint_decimals(self, mint: Pubkey) -> int:
        """Decimal precision recorded on a mint account."""
        with ledger_errors('mint_decimals'):
            resp = await self.client.get_account_info(mint, commitment=self.commitment)
        account = resp.value
        if account is None:
            raise RejectedOperation(f"Mint {mint} does not exist", label='mint_decimals')
        data = bytes(account.data)
        if account.owner != TOKEN_PROGRAM_ID or len(data) < MINT_LEN:
            raise RejectedOperation(f"Account {mint} is not a token mint", label='mint_decimals')
        return data[MINT_DECIMALS_OFFSET]

