import json
import os
import tempfile
import unittest

from typer.testing import CliRunner

from cose_hpke.cli import app
from cose_hpke.config import DEFAULT_SUITE_ID
from cose_hpke.hpke.suite import resolve, suite_for_key
from cose_hpke.cose.key import generate_key_pair, to_jwk, decode_key
from cose_hpke.cose.messages import parse_message, EncryptMessage


class TestCli(unittest.TestCase):

    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def path(self, name: str) -> str:
        return os.path.join(self.tmp.name, name)

    def keygen(self, name: str, suite: str = 'HPKE-7'):
        result = self.runner.invoke(app, ['keygen', '--suite', suite,
                                          '--output-public', self.path(f'{name}.pub'),
                                          '--output-private', self.path(f'{name}.key')])
        assert result.exit_code == 0, result.output

        return self.path(f'{name}.pub'), self.path(f'{name}.key')

    def test_keygen_print(self):
        result = self.runner.invoke(app, ['keygen'])

        assert result.exit_code == 0, result.output
        assert 'Public Key:' in result.stdout
        assert 'Private Key:' in result.stdout
        assert 'CBOR (hex): ' in result.stdout
        assert '{1: 2, 3: 45, -1: 1' in result.stdout

    def test_keygen_default_suite(self):
        result = self.runner.invoke(app, ['keygen', '--output-public', self.path('default.pub')])
        assert result.exit_code == 0, result.output

        with open(self.path('default.pub'), 'rb') as f:
            key = decode_key(f.read())

        assert(suite_for_key(key) is resolve(DEFAULT_SUITE_ID))

    def test_keygen_files(self):
        public, private = self.keygen('alice', suite='HPKE-4')

        with open(public, 'rb') as f:
            key = decode_key(f.read())

        assert(not key.is_private)
        assert(key.y is None)

        with open(private, 'rb') as f:
            assert(decode_key(f.read()).is_private)

    def test_keygen_unknown_suite(self):
        result = self.runner.invoke(app, ['keygen', '--suite', 'HPKE-1'])

        assert result.exit_code == 1
        assert 'Unsupported HPKE suite: HPKE-1' in result.output

    def test_url_round_trip(self):
        public, private = self.keygen('alice')

        result = self.runner.invoke(app, ['encrypt', 'hello', '-r', public])
        assert result.exit_code == 0, result.output

        url = result.stdout.strip()
        assert url.startswith('https://cose-hpke.github.io/decrypt#')

        result = self.runner.invoke(app, ['decrypt', url, '-k', private])
        assert result.exit_code == 0, result.output
        assert result.stdout == 'hello\n'

    def test_file_round_trip_multi(self):
        alice_public, alice_private = self.keygen('alice', suite='HPKE-4')
        bob_public, bob_private = self.keygen('bob', suite='HPKE-4')
        output = self.path('message.cbor')

        result = self.runner.invoke(app, ['encrypt', 'hello both', '-r', alice_public, '-r', bob_public,
                                          '-s', 'HPKE-4', '-o', output])
        assert result.exit_code == 0, result.output
        assert f'Encrypted message saved to: {output}' in result.stdout

        with open(output, 'rb') as f:
            assert(isinstance(parse_message(f.read()), EncryptMessage))

        for private in (alice_private, bob_private):
            result = self.runner.invoke(app, ['decrypt', output, '-k', private])
            assert result.exit_code == 0, result.output
            assert result.stdout == 'hello both\n'

    def test_stdin(self):
        public, private = self.keygen('alice')
        output = self.path('message.cbor')

        result = self.runner.invoke(app, ['encrypt', '-', '-r', public, '-o', output], input=b'from stdin')
        assert result.exit_code == 0, result.output

        with open(output, 'rb') as f:
            message = f.read()

        result = self.runner.invoke(app, ['decrypt', '-', '-k', private], input=message)
        assert result.exit_code == 0, result.output
        assert result.stdout == 'from stdin\n'

    def test_aad_and_info(self):
        public, private = self.keygen('alice')
        aad = self.path('aad.bin')
        info = self.path('info.bin')

        with open(aad, 'wb') as f:
            f.write(b'header')
        with open(info, 'wb') as f:
            f.write(b'session')

        result = self.runner.invoke(app, ['encrypt', 'bound', '-r', public, '--aad', aad, '--info', info])
        assert result.exit_code == 0, result.output
        url = result.stdout.strip()

        result = self.runner.invoke(app, ['decrypt', url, '-k', private, '--aad', aad, '--info', info])
        assert result.exit_code == 0, result.output
        assert result.stdout == 'bound\n'

        result = self.runner.invoke(app, ['decrypt', url, '-k', private, '--aad', aad])
        assert result.exit_code == 1
        assert 'Error: Decryption failed' in result.output

    def test_recipient_info(self):
        alice_public, alice_private = self.keygen('alice')
        bob_public, _ = self.keygen('bob')
        info = self.path('info.bin')

        with open(info, 'wb') as f:
            f.write(b'for alice')

        result = self.runner.invoke(app, ['encrypt', 'hi', '-r', alice_public, '-r', bob_public,
                                          '--recipient-info', info])
        assert result.exit_code == 0, result.output
        url = result.stdout.strip()

        result = self.runner.invoke(app, ['decrypt', url, '-k', alice_private, '--recipient-info', info])
        assert result.exit_code == 0, result.output
        assert result.stdout == 'hi\n'

    def test_option_mode_mismatch(self):
        alice_public, _ = self.keygen('alice')
        bob_public, _ = self.keygen('bob')
        info = self.path('info.bin')

        with open(info, 'wb') as f:
            f.write(b'info')

        result = self.runner.invoke(app, ['encrypt', 'hi', '-r', alice_public, '-r', bob_public, '--info', info])
        assert result.exit_code == 1
        assert '--info is only valid for integrated encryption' in result.output

        result = self.runner.invoke(app, ['encrypt', 'hi', '-r', alice_public, '--recipient-info', info])
        assert result.exit_code == 1
        assert '--recipient-info is only valid for key encryption' in result.output

    def test_wrong_key(self):
        public, _ = self.keygen('alice')
        _, mallory_private = self.keygen('mallory')

        result = self.runner.invoke(app, ['encrypt', 'secret', '-r', public, '-r', public])
        url = result.stdout.strip()

        result = self.runner.invoke(app, ['decrypt', url, '-k', mallory_private])
        assert result.exit_code == 1
        assert 'Error: No matching recipient found for the provided key' in result.output

    def test_jwk_recipient(self):
        public, private = generate_key_pair('HPKE-4')
        jwk_path = self.path('alice.jwk')
        key_path = self.path('alice.key')

        with open(jwk_path, 'w') as f:
            json.dump(to_jwk(public), f)
        with open(key_path, 'wb') as f:
            f.write(private)

        result = self.runner.invoke(app, ['encrypt', 'jwk', '-r', jwk_path, '-s', 'HPKE-4'])
        assert result.exit_code == 0, result.output

        result = self.runner.invoke(app, ['decrypt', result.stdout.strip(), '-k', key_path])
        assert result.exit_code == 0, result.output
        assert result.stdout == 'jwk\n'

    def test_url_too_large(self):
        public, _ = self.keygen('alice')

        result = self.runner.invoke(app, ['encrypt', '-', '-r', public], input=os.urandom(int(1.8 * 1024 * 1024)))

        assert result.exit_code == 1
        assert 'URL exceeds maximum length' in result.output
        assert 'Use --output flag to save to file instead.' in result.output

    def test_bad_url(self):
        _, private = self.keygen('alice')

        result = self.runner.invoke(app, ['decrypt', 'https://cose-hpke.github.io/decrypt', '-k', private])

        assert result.exit_code == 1
        assert 'Error: URL has no fragment' in result.output

    def test_single_stdin_source(self):
        public, private = self.keygen('alice')

        result = self.runner.invoke(app, ['encrypt', '-', '-r', public, '--aad', '-'], input=b'message')
        assert result.exit_code == 1
        assert 'Only one input can be read from stdin' in result.output

        result = self.runner.invoke(app, ['encrypt', 'hi', '-r', public, '--aad', '-', '--info', '-'],
                                    input=b'aad')
        assert result.exit_code == 1
        assert 'Only one input can be read from stdin' in result.output

        result = self.runner.invoke(app, ['decrypt', '-', '-k', private, '--aad', '-'], input=b'message')
        assert result.exit_code == 1
        assert 'Only one input can be read from stdin' in result.output

    def test_aad_from_stdin(self):
        public, private = self.keygen('alice')

        result = self.runner.invoke(app, ['encrypt', 'hi', '-r', public, '--aad', '-'], input=b'context')
        assert result.exit_code == 0, result.output
        url = result.stdout.strip()

        result = self.runner.invoke(app, ['decrypt', url, '-k', private, '--aad', '-'], input=b'context')
        assert result.exit_code == 0, result.output
        assert result.stdout == 'hi\n'

    def test_missing_file(self):
        _, private = self.keygen('alice')

        result = self.runner.invoke(app, ['decrypt', self.path('missing.cbor'), '-k', private])

        assert result.exit_code == 1
        assert 'Error:' in result.output


if __name__ == '__main__':
    unittest.main()
