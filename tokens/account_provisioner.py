"""
Associated token account helpers.

A holding account is the associated token account (ATA) of a (mint, owner)
pair. Its address is a program-derived address, so it can be recomputed at
any time without touching the network. Provisioning uses the ATA program's
CreateIdempotent instruction: it creates the account when missing and is a
no-op when it already exists, so callers never have to ask the ledger first.
"""
from dataclasses import dataclass
from typing import Optional

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYS_PROGRAM_ID
from spl.token.constants import ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID
from spl.token.instructions import get_associated_token_address

# AssociatedTokenAccountInstruction::CreateIdempotent
CREATE_IDEMPOTENT = 1


@dataclass(frozen=True)
class HoldingAccount:
    """Derived holding account for one owner's balance of one mint."""

    address: Pubkey
    mint: Pubkey
    owner: Pubkey


def derive_address(mint: Pubkey, owner: Pubkey) -> HoldingAccount:
    """Return the holding account of ``owner`` for ``mint`` (pure, offline)."""
    address = get_associated_token_address(owner, mint)
    return HoldingAccount(address=address, mint=mint, owner=owner)


def ensure_provisioned(mint: Pubkey, owner: Pubkey, payer: Optional[Pubkey] = None) -> Instruction:
    """
    Build the idempotent-create instruction for ``owner``'s holding account.

    Args:
        mint: Token mint the holding account is for
        owner: Wallet that will own the holding account
        payer: Account funding the rent if the holding account is created
            (defaults to ``owner``). Must sign the bundle.

    Returns:
        Instruction to place in the same bundle, ahead of any instruction
        touching the holding account.
    """
    payer = payer or owner
    holding = derive_address(mint, owner)
    return Instruction(
        program_id=ASSOCIATED_TOKEN_PROGRAM_ID,
        data=bytes([CREATE_IDEMPOTENT]),
        accounts=[
            AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
            AccountMeta(pubkey=holding.address, is_signer=False, is_writable=True),
            AccountMeta(pubkey=owner, is_signer=False, is_writable=False),
            AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
            AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        ],
    )
