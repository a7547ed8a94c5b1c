"""
Run the SPL token lifecycle: create (or reuse) a mint, mint supply,
transfer to a fresh recipient and burn from the authority.

Usage examples:
  python manage.py run_token_lifecycle
  python manage.py run_token_lifecycle --mint-address 7xKX...9fGh --mint-amount 500

Notes:
- Uses SOLANA_RPC_URL and TOKEN_AUTHORITY_SECRET_KEY from settings.
- When reusing a mint without --decimals, its precision is read from the ledger.
- Exit codes: 2 configuration error, 3 ledger rejection, 4 network/timeout.
"""
import asyncio
from dataclasses import replace

from django.core.management.base import BaseCommand, CommandError

from tokens.exceptions import ConfigurationError, LedgerError, LifecycleStepFailed
from tokens.orchestrator import LifecycleConfig, TokenLifecycleOrchestrator
from tokens.solana_client import ConfirmationReceipt
from tokens.solana_config import (
    get_existing_mint,
    get_ledger_client,
    get_lifecycle_defaults,
    get_network,
    load_authority,
    parse_address,
)
from tokens.token_service import TokenService

EXIT_CONFIGURATION = 2
EXIT_REJECTED = 3
EXIT_NETWORK = 4


class Command(BaseCommand):
    help = 'Create (or reuse) an SPL token, then mint, transfer and burn units.'

    def add_arguments(self, parser):
        parser.add_argument('--mint-address', type=str, default=None, help='Existing mint to reuse (skips token creation)')
        parser.add_argument('--recipient', type=str, default=None, help='Transfer recipient (defaults to a fresh keypair)')
        parser.add_argument('--decimals', type=int, default=None, help='Decimal precision of the token')
        parser.add_argument('--mint-amount', type=int, default=None, help='Raw units to mint')
        parser.add_argument('--transfer-amount', type=int, default=None, help='Raw units to transfer')
        parser.add_argument('--burn-amount', type=int, default=None, help='Raw units to burn')

    def handle(self, *args, **options):
        try:
            config = self._build_config(options)
            ledger = get_ledger_client()
        except (ConfigurationError, ValueError) as e:
            raise CommandError(f'Configuration error: {e}', returncode=EXIT_CONFIGURATION)

        self.network = get_network()
        if config.existing_mint is not None:
            self.stdout.write(f'Using existing token: {config.existing_mint}')

        try:
            result = asyncio.run(self._run(ledger, config, read_decimals=options.get('decimals') is None))
        except LifecycleStepFailed as e:
            for step, receipt in e.completed:
                self.stdout.write(self.style.WARNING(f'Already confirmed {step}: {receipt.explorer_url(self.network)}'))
            signature = getattr(e.cause, 'signature', None)
            if signature:
                pending = ConfirmationReceipt(signature=signature, label=e.step)
                self.stdout.write(self.style.WARNING(f'Unconfirmed {e.step} (may still land): {pending.explorer_url(self.network)}'))
            returncode = EXIT_NETWORK if e.transient else EXIT_REJECTED
            raise CommandError(f"Token lifecycle failed at step '{e.step}': {e.cause}", returncode=returncode)
        except LedgerError as e:
            returncode = EXIT_NETWORK if e.transient else EXIT_REJECTED
            raise CommandError(f'Could not read existing token: {e}', returncode=returncode)

        self.stdout.write(self.style.SUCCESS(f'Mint ID: {result.mint}'))
        self.stdout.write(f'Recipient: {result.recipient}')

    def _build_config(self, options) -> LifecycleConfig:
        defaults = get_lifecycle_defaults()
        for key in defaults:
            if options.get(key) is not None:
                defaults[key] = options[key]

        if options.get('mint_address'):
            existing_mint = parse_address(options['mint_address'], '--mint-address')
        else:
            existing_mint = get_existing_mint()

        return LifecycleConfig(
            authority=load_authority(),
            existing_mint=existing_mint,
            recipient=parse_address(options.get('recipient'), '--recipient'),
            **defaults,
        )

    def _report(self, step, receipt):
        self.stdout.write(self.style.SUCCESS(f'{step} confirmed: {receipt.explorer_url(self.network)}'))

    async def _run(self, ledger, config: LifecycleConfig, read_decimals: bool = False):
        async with ledger:
            if config.existing_mint is not None and read_decimals:
                decimals = await ledger.mint_decimals(config.existing_mint)
                if decimals != config.decimals:
                    self.stdout.write(f'Token decimals: {decimals}')
                    config = replace(config, decimals=decimals)
            orchestrator = TokenLifecycleOrchestrator(config, TokenService(ledger), on_step=self._report)
            return await orchestrator.run()
