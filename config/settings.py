"""
Django settings for the token lifecycle project.

Everything is read once at startup from environment variables (or a .env
file) through python-decouple. No database is used.
"""
from pathlib import Path

from decouple import config

from .logging import LOGGING  # noqa: F401

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = config('DJANGO_SECRET_KEY', default='token-lifecycle-insecure-key')
DEBUG = config('DEBUG', default=False, cast=bool)
ALLOWED_HOSTS = []

INSTALLED_APPS = [
    'tokens',
]

DATABASES = {}

USE_TZ = True
TIME_ZONE = 'UTC'

# ===== Solana =====

# Cluster label for explorer links: devnet, testnet or mainnet-beta
SOLANA_NETWORK = config('SOLANA_NETWORK', default='devnet')
SOLANA_RPC_URL = config('SOLANA_RPC_URL', default=config('QUICKNODE_ENDPOINT', default=''))
SOLANA_COMMITMENT = config('SOLANA_COMMITMENT', default='confirmed')
SOLANA_SKIP_PREFLIGHT = config('SOLANA_SKIP_PREFLIGHT', default=False, cast=bool)
SOLANA_RPC_TIMEOUT = config('SOLANA_RPC_TIMEOUT', default=30, cast=float)

# ===== Token lifecycle =====

# JSON array of the 64 secret key bytes of the mint/transfer/burn authority
TOKEN_AUTHORITY_SECRET_KEY = config('TOKEN_AUTHORITY_SECRET_KEY', default=config('SECRET_KEY', default=''))
# Reuse this mint instead of creating a new one
TOKEN_MINT_ADDRESS = config('TOKEN_MINT_ADDRESS', default=config('MINT_ADDRESS', default=''))
TOKEN_DECIMALS = config('TOKEN_DECIMALS', default=0, cast=int)
# Raw base units, already scaled by TOKEN_DECIMALS
TOKEN_LIFECYCLE_AMOUNTS = {
    'MINT': config('TOKEN_MINT_AMOUNT', default=100, cast=int),
    'TRANSFER': config('TOKEN_TRANSFER_AMOUNT', default=1, cast=int),
    'BURN': config('TOKEN_BURN_AMOUNT', default=10, cast=int),
}
