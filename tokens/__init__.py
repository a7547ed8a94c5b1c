from .account_provisioner import HoldingAccount, derive_address, ensure_provisioned
from .orchestrator import LifecycleConfig, LifecycleResult, TokenLifecycleOrchestrator
from .solana_client import ConfirmationReceipt, SolanaLedgerClient
from .token_service import TokenService
from .transaction_builder import OperationBundle

__all__ = [
    'ConfirmationReceipt',
    'HoldingAccount',
    'LifecycleConfig',
    'LifecycleResult',
    'OperationBundle',
    'SolanaLedgerClient',
    'TokenLifecycleOrchestrator',
    'TokenService',
    'derive_address',
    'ensure_provisioned',
]
