import asyncio

from django.core.management.base import BaseCommand, CommandError

from tokens.account_provisioner import derive_address
from tokens.exceptions import ConfigurationError, LedgerError
from tokens.solana_config import get_ledger_client, parse_address


class Command(BaseCommand):
    help = "Show the holding account of an owner for a mint and its raw balance."

    def add_arguments(self, parser):
        parser.add_argument('mint', type=str, help='Token mint address')
        parser.add_argument('owner', type=str, help='Wallet address owning the holding account')

    def handle(self, *args, **options):
        try:
            mint = parse_address(options['mint'], 'mint')
            owner = parse_address(options['owner'], 'owner')
            if mint is None or owner is None:
                raise ConfigurationError('Both mint and owner are required')
            ledger = get_ledger_client()
        except ConfigurationError as e:
            raise CommandError(str(e), returncode=2)

        holding = derive_address(mint, owner)
        self.stdout.write(self.style.NOTICE(f'Holding account: {holding.address}'))

        try:
            balance = asyncio.run(self._balance(ledger, holding.address))
        except LedgerError as e:
            self.stdout.write(self.style.WARNING(f'❌ No balance for {owner} ({e})'))
            raise CommandError(str(e), returncode=4 if e.transient else 3)

        self.stdout.write(self.style.SUCCESS(f'✅ {mint}: balance={balance}'))

    async def _balance(self, ledger, address):
        async with ledger:
            return await ledger.token_balance(address)
