import struct

from django.test import SimpleTestCase
from solders.keypair import Keypair
from solders.system_program import ID as SYS_PROGRAM_ID
from spl.token.constants import ASSOCIATED_TOKEN_PROGRAM_ID, MINT_LEN, TOKEN_PROGRAM_ID

from tokens.account_provisioner import derive_address
from tokens.transaction_builder import (
    MAX_AMOUNT,
    OperationBundle,
    build_burn_bundle,
    build_create_mint_bundle,
    build_mint_to_bundle,
    build_transfer_bundle,
    validate_amount,
    validate_decimals,
)


class CreateMintBundleTest(SimpleTestCase):
    def setUp(self):
        self.authority = Keypair().pubkey()
        self.mint = Keypair().pubkey()

    def test_allocates_then_initializes(self):
        bundle = build_create_mint_bundle(self.authority, self.mint, 0, 1_461_600)

        self.assertEqual(bundle.label, 'create_token')
        allocate, initialize = bundle.instructions
        self.assertEqual(allocate.program_id, SYS_PROGRAM_ID)
        self.assertEqual(initialize.program_id, TOKEN_PROGRAM_ID)

        lamports, space = struct.unpack_from('<QQ', bytes(allocate.data), 4)
        self.assertEqual(lamports, 1_461_600)
        self.assertEqual(space, MINT_LEN)
        self.assertEqual(bytes(allocate.data)[20:52], bytes(TOKEN_PROGRAM_ID))

    def test_mint_and_authority_must_sign(self):
        bundle = build_create_mint_bundle(self.authority, self.mint, 6, 1)
        signers = {meta.pubkey for ix in bundle.instructions for meta in ix.accounts if meta.is_signer}
        self.assertEqual(signers, {self.authority, self.mint})

    def test_records_decimals_and_mint_authority(self):
        initialize = build_create_mint_bundle(self.authority, self.mint, 9, 1).instructions[1]
        data = bytes(initialize.data)
        self.assertEqual(data[0], 0)
        self.assertEqual(data[1], 9)
        self.assertEqual(data[2:34], bytes(self.authority))

    def test_rejects_out_of_range_decimals(self):
        for decimals in (-1, 256, 1.5, True):
            with self.assertRaises(ValueError):
                build_create_mint_bundle(self.authority, self.mint, decimals, 1)


class HoldingAccountBundlesTest(SimpleTestCase):
    def setUp(self):
        self.mint = Keypair().pubkey()
        self.authority = Keypair().pubkey()
        self.recipient = Keypair().pubkey()

    def test_mint_to_provisions_before_crediting(self):
        bundle = build_mint_to_bundle(self.mint, self.authority, 100)

        provision, credit = bundle.instructions
        self.assertEqual(provision.program_id, ASSOCIATED_TOKEN_PROGRAM_ID)
        self.assertEqual(credit.program_id, TOKEN_PROGRAM_ID)
        self.assertEqual(credit.accounts[1].pubkey, derive_address(self.mint, self.authority).address)
        self.assertEqual(struct.unpack_from('<Q', bytes(credit.data), 1)[0], 100)

    def test_transfer_provisions_both_sides(self):
        bundle = build_transfer_bundle(self.mint, self.authority, self.recipient, 1)

        source_ix, dest_ix, move = bundle.instructions
        self.assertEqual(source_ix.accounts[2].pubkey, self.authority)
        self.assertEqual(dest_ix.accounts[2].pubkey, self.recipient)
        # the authority pays for the recipient's holding account
        self.assertEqual(dest_ix.accounts[0].pubkey, self.authority)
        self.assertEqual(move.accounts[0].pubkey, derive_address(self.mint, self.authority).address)
        self.assertEqual(move.accounts[1].pubkey, derive_address(self.mint, self.recipient).address)

    def test_burn_is_checked_against_decimals(self):
        bundle = build_burn_bundle(self.mint, self.authority, 10, 0)

        provision, destroy = bundle.instructions
        self.assertEqual(provision.program_id, ASSOCIATED_TOKEN_PROGRAM_ID)
        data = bytes(destroy.data)
        self.assertEqual(data[0], 15)
        self.assertEqual(struct.unpack_from('<Q', data, 1)[0], 10)
        self.assertEqual(data[9], 0)

    def test_invalid_amounts_are_refused(self):
        for amount in (0, -5, MAX_AMOUNT + 1, 2.5, '10', False):
            with self.assertRaises(ValueError):
                build_mint_to_bundle(self.mint, self.authority, amount)
            with self.assertRaises(ValueError):
                build_transfer_bundle(self.mint, self.authority, self.recipient, amount)
            with self.assertRaises(ValueError):
                build_burn_bundle(self.mint, self.authority, amount, 0)


class ValidationTest(SimpleTestCase):
    def test_bounds(self):
        self.assertEqual(validate_amount(1), 1)
        self.assertEqual(validate_amount(MAX_AMOUNT), MAX_AMOUNT)
        self.assertEqual(validate_decimals(0), 0)
        self.assertEqual(validate_decimals(255), 255)

    def test_empty_bundle_is_refused(self):
        with self.assertRaises(ValueError):
            OperationBundle.of('empty', [])
