"""
Builders for the operation bundles of the token lifecycle.

Every function here is pure: it only assembles instructions. Submitting and
confirming is the job of the ledger client (see solana_client.py).
"""
from dataclasses import dataclass
from typing import Sequence, Tuple

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account
from spl.token.constants import MINT_LEN, TOKEN_PROGRAM_ID
from spl.token.instructions import (
    BurnCheckedParams,
    InitializeMintParams,
    MintToParams,
    TransferParams,
    burn_checked,
    initialize_mint,
    mint_to,
    transfer,
)

from .account_provisioner import derive_address, ensure_provisioned

MAX_DECIMALS = 255
MAX_AMOUNT = 2 ** 64 - 1


@dataclass(frozen=True)
class OperationBundle:
    """Ordered instructions applied by the ledger atomically or not at all."""

    label: str
    instructions: Tuple[Instruction, ...]

    def __post_init__(self):
        if not self.instructions:
            raise ValueError(f"Bundle '{self.label}' has no instructions")

    @classmethod
    def of(cls, label: str, instructions: Sequence[Instruction]) -> 'OperationBundle':
        return cls(label=label, instructions=tuple(instructions))


def validate_decimals(decimals: int) -> int:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise ValueError(f"Decimal precision must be an integer, got {decimals!r}")
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValueError(f"Decimal precision must be between 0 and {MAX_DECIMALS}, got {decimals}")
    return decimals


def validate_amount(amount: int) -> int:
    """Amounts are raw base units (already scaled by the mint's decimals)."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"Amount must be an integer number of base units, got {amount!r}")
    if not 0 < amount <= MAX_AMOUNT:
        raise ValueError(f"Amount must be between 1 and {MAX_AMOUNT}, got {amount}")
    return amount


def build_create_mint_bundle(
    authority: Pubkey,
    mint: Pubkey,
    decimals: int,
    rent_lamports: int,
) -> OperationBundle:
    """
    Reserve rent-exempt storage for a mint and initialize it.

    Args:
        authority: Funds the storage; becomes mint and freeze authority
        mint: Public key of the freshly generated mint keypair
        decimals: Decimal precision recorded on the mint
        rent_lamports: Rent-exemption minimum for MINT_LEN bytes

    Returns:
        Bundle that must be signed by both ``authority`` and the mint keypair
    """
    validate_decimals(decimals)
    allocate = create_account(
        CreateAccountParams(
            from_pubkey=authority,
            to_pubkey=mint,
            lamports=rent_lamports,
            space=MINT_LEN,
            owner=TOKEN_PROGRAM_ID,
        )
    )
    initialize = initialize_mint(
        InitializeMintParams(
            decimals=decimals,
            program_id=TOKEN_PROGRAM_ID,
            mint=mint,
            mint_authority=authority,
            freeze_authority=authority,
        )
    )
    return OperationBundle.of('create_token', [allocate, initialize])


def build_mint_to_bundle(mint: Pubkey, authority: Pubkey, amount: int) -> OperationBundle:
    """Provision the authority's holding account and credit ``amount`` to it."""
    validate_amount(amount)
    holding = derive_address(mint, authority)
    credit = mint_to(
        MintToParams(
            program_id=TOKEN_PROGRAM_ID,
            mint=mint,
            dest=holding.address,
            mint_authority=authority,
            amount=amount,
        )
    )
    return OperationBundle.of('mint', [ensure_provisioned(mint, authority), credit])


def build_transfer_bundle(
    mint: Pubkey,
    authority: Pubkey,
    destination_owner: Pubkey,
    amount: int,
) -> OperationBundle:
    """Provision both holding accounts, then move ``amount`` from source to destination."""
    validate_amount(amount)
    source = derive_address(mint, authority)
    destination = derive_address(mint, destination_owner)
    move = transfer(
        TransferParams(
            program_id=TOKEN_PROGRAM_ID,
            source=source.address,
            dest=destination.address,
            owner=authority,
            amount=amount,
        )
    )
    return OperationBundle.of('transfer', [
        ensure_provisioned(mint, authority),
        ensure_provisioned(mint, destination_owner, payer=authority),
        move,
    ])


def build_burn_bundle(mint: Pubkey, authority: Pubkey, amount: int, decimals: int) -> OperationBundle:
    """
    Provision the authority's holding account and burn ``amount`` from it.

    burn_checked carries ``decimals`` so the ledger rejects the burn when the
    caller's idea of the precision differs from the one recorded on the mint.
    """
    validate_amount(amount)
    validate_decimals(decimals)
    holding = derive_address(mint, authority)
    destroy = burn_checked(
        BurnCheckedParams(
            program_id=TOKEN_PROGRAM_ID,
            mint=mint,
            account=holding.address,
            owner=authority,
            amount=amount,
            decimals=decimals,
        )
    )
    return OperationBundle.of('burn', [ensure_provisioned(mint, authority), destroy])
