"""
Centralized Solana configuration.
Retrieves all settings from Django settings.py which reads from environment variables.
"""
import json
from typing import Dict, Optional

from django.conf import settings
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .exceptions import ConfigurationError
from .solana_client import SolanaLedgerClient

SECRET_KEY_LENGTH = 64
COMMITMENT_LEVELS = ('processed', 'confirmed', 'finalized')


def get_rpc_url() -> str:
    url = (getattr(settings, 'SOLANA_RPC_URL', '') or '').strip()
    if not url:
        raise ConfigurationError('SOLANA_RPC_URL (or QUICKNODE_ENDPOINT) is not configured')
    if not url.startswith(('http://', 'https://')):
        raise ConfigurationError(f'SOLANA_RPC_URL must be an http(s) URL, got {url!r}')
    return url


def get_network() -> str:
    """Cluster name used for explorer links (devnet/testnet/mainnet-beta)"""
    return getattr(settings, 'SOLANA_NETWORK', 'devnet')


def get_commitment() -> str:
    """Confirmation level the client waits for (processed/confirmed/finalized)"""
    commitment = getattr(settings, 'SOLANA_COMMITMENT', 'confirmed')
    if commitment not in COMMITMENT_LEVELS:
        raise ConfigurationError(
            f"SOLANA_COMMITMENT must be one of {', '.join(COMMITMENT_LEVELS)}, got {commitment!r}"
        )
    return commitment


def get_ledger_client() -> SolanaLedgerClient:
    """Get a ledger client using Django settings"""
    return SolanaLedgerClient(
        get_rpc_url(),
        commitment=get_commitment(),
        skip_preflight=getattr(settings, 'SOLANA_SKIP_PREFLIGHT', False),
        timeout=getattr(settings, 'SOLANA_RPC_TIMEOUT', 30),
    )


def load_authority(secret: Optional[str] = None) -> Keypair:
    """
    Load the token authority keypair.

    Args:
        secret: JSON array of 64 byte values; defaults to
            settings.TOKEN_AUTHORITY_SECRET_KEY

    Raises:
        ConfigurationError: the secret is missing or malformed
    """
    if secret is None:
        secret = getattr(settings, 'TOKEN_AUTHORITY_SECRET_KEY', '')
    if not secret:
        raise ConfigurationError('TOKEN_AUTHORITY_SECRET_KEY is not configured')

    try:
        values = json.loads(secret)
    except (TypeError, ValueError):
        raise ConfigurationError('Failed to parse TOKEN_AUTHORITY_SECRET_KEY. Ensure it is a valid JSON array.')

    if (
        not isinstance(values, list)
        or len(values) != SECRET_KEY_LENGTH
        or not all(isinstance(v, int) and not isinstance(v, bool) and 0 <= v <= 255 for v in values)
    ):
        raise ConfigurationError(
            f'TOKEN_AUTHORITY_SECRET_KEY must be a JSON array of {SECRET_KEY_LENGTH} byte values'
        )

    try:
        return Keypair.from_bytes(bytes(values))
    except ValueError as e:
        raise ConfigurationError(f'TOKEN_AUTHORITY_SECRET_KEY is not a valid keypair: {e}')


def parse_address(value: Optional[str], name: str = 'address') -> Optional[Pubkey]:
    """Parse a base58 address; empty values mean "not set"."""
    value = (value or '').strip()
    if not value:
        return None
    try:
        return Pubkey.from_string(value)
    except ValueError:
        raise ConfigurationError(f'{name} is not a valid base58 address: {value!r}')


def get_existing_mint() -> Optional[Pubkey]:
    """Mint to reuse instead of creating a new token, if configured"""
    return parse_address(getattr(settings, 'TOKEN_MINT_ADDRESS', ''), 'TOKEN_MINT_ADDRESS')


def get_lifecycle_defaults() -> Dict[str, int]:
    """Get default decimals and raw amounts for the lifecycle run"""
    amounts = getattr(settings, 'TOKEN_LIFECYCLE_AMOUNTS', {})
    return {
        'decimals': getattr(settings, 'TOKEN_DECIMALS', 0),
        'mint_amount': amounts.get('MINT', 100),
        'transfer_amount': amounts.get('TRANSFER', 1),
        'burn_amount': amounts.get('BURN', 10),
    }
