"""
Token lifecycle orchestration: create (or reuse) -> mint -> transfer -> burn.

Steps run strictly one after another. A failing step aborts the rest of the
sequence; steps that were already confirmed stay on the ledger and are
reported back through LifecycleStepFailed.completed.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .exceptions import LedgerError, LifecycleStepFailed
from .solana_client import ConfirmationReceipt
from .token_service import TokenService
from .transaction_builder import validate_amount, validate_decimals

logger = logging.getLogger(__name__)

STEP_CREATE = 'create_token'
STEP_MINT = 'mint'
STEP_TRANSFER = 'transfer'
STEP_BURN = 'burn'

StepCallback = Callable[[str, ConfirmationReceipt], None]


@dataclass(frozen=True)
class LifecycleConfig:
    """Built once at startup and never mutated."""

    authority: Keypair
    decimals: int = 0
    mint_amount: int = 100
    transfer_amount: int = 1
    burn_amount: int = 10
    existing_mint: Optional[Pubkey] = None
    recipient: Optional[Pubkey] = None

    def __post_init__(self):
        validate_decimals(self.decimals)
        for amount in (self.mint_amount, self.transfer_amount, self.burn_amount):
            validate_amount(amount)


@dataclass
class LifecycleResult:
    mint: Pubkey
    recipient: Pubkey
    created: bool
    steps: List[Tuple[str, ConfirmationReceipt]] = field(default_factory=list)

    def receipt(self, step: str) -> Optional[ConfirmationReceipt]:
        for name, receipt in self.steps:
            if name == step:
                return receipt
        return None


class TokenLifecycleOrchestrator:
    def __init__(
        self,
        config: LifecycleConfig,
        service: TokenService,
        on_step: Optional[StepCallback] = None,
    ):
        self.config = config
        self.service = service
        self.on_step = on_step

    def _record(self, steps: List[Tuple[str, ConfirmationReceipt]], step: str, receipt: ConfirmationReceipt):
        steps.append((step, receipt))
        logger.info(f"Step '{step}' confirmed: {receipt.signature}")
        if self.on_step:
            try:
                self.on_step(step, receipt)
            except Exception as e:
                # the step itself is confirmed and stays in completed
                raise LifecycleStepFailed(step, e, completed=steps) from e

    async def run(self) -> LifecycleResult:
        """
        Run the full lifecycle.

        Returns:
            LifecycleResult with the mint, the recipient and every step receipt

        Raises:
            LifecycleStepFailed: a step was rejected, the ledger was unreachable
                or on_step raised after a step was confirmed
        """
        config = self.config
        authority = config.authority
        steps: List[Tuple[str, ConfirmationReceipt]] = []
        step = STEP_CREATE

        try:
            if config.existing_mint is not None:
                mint = config.existing_mint
                created = False
                logger.info(f"Using existing token: {mint}")
            else:
                mint, receipt = await self.service.create_token(authority, config.decimals)
                created = True
                self._record(steps, step, receipt)

            step = STEP_MINT
            receipt = await self.service.mint(mint, authority, config.mint_amount)
            self._record(steps, step, receipt)

            step = STEP_TRANSFER
            recipient = config.recipient or Keypair().pubkey()
            receipt = await self.service.transfer(mint, authority, recipient, config.transfer_amount)
            self._record(steps, step, receipt)

            step = STEP_BURN
            receipt = await self.service.burn(mint, authority, config.burn_amount, config.decimals)
            self._record(steps, step, receipt)
        except LedgerError as e:
            logger.error(f"Lifecycle aborted at '{step}' after {len(steps)} confirmed step(s): {e}")
            raise LifecycleStepFailed(step, e, completed=steps) from e

        return LifecycleResult(mint=mint, recipient=recipient, created=created, steps=steps)
