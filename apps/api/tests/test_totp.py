import base64
import re
import time

import pyotp
import pytest

from hrportal.core.encryption import EncryptionError, FieldEncryptor
from hrportal.services import totp


class TestTotp:

    def test_current_code_verifies(self):
        secret = totp.generate_secret()
        assert totp.verify_code(secret, pyotp.TOTP(secret).now())

    def test_adjacent_step_is_accepted(self):
        secret = totp.generate_secret()
        now = time.time()
        previous = pyotp.TOTP(secret).at(now - 30)
        assert totp.verify_code(secret, previous, for_time=now)

    def test_two_steps_away_is_rejected(self):
        secret = totp.generate_secret()
        now = time.time()
        stale = pyotp.TOTP(secret).at(now - 90)
        assert not totp.verify_code(secret, stale, for_time=now)

    def test_code_for_another_secret_is_rejected(self):
        secret = totp.generate_secret()
        other = totp.generate_secret()
        now = time.time()
        code = pyotp.TOTP(other).at(now)
        if code in {pyotp.TOTP(secret).at(now + step * 30) for step in (-1, 0, 1)}:
            pytest.skip("random secret produced a colliding code")
        assert not totp.verify_code(secret, code, for_time=now)

    @pytest.mark.parametrize("code", [None, "", "12345", "1234567", "abcdef"])
    def test_malformed_codes_are_rejected(self, code):
        assert not totp.verify_code(totp.generate_secret(), code)

    def test_provisioning_uri_names_issuer_and_account(self):
        uri = totp.provisioning_uri("alice@example.com", "JBSWY3DPEHPK3PXP")
        assert uri.startswith("otpauth://totp/")
        assert "issuer=HR" in uri
        assert "alice" in uri

    def test_qr_code_is_svg_data_url(self):
        url = totp.qr_code_data_url("otpauth://totp/HR%20Portal:alice?secret=JBSWY3DPEHPK3PXP")
        prefix = "data:image/svg+xml;base64,"
        assert url.startswith(prefix)
        assert b"<svg" in base64.b64decode(url[len(prefix):])


class TestBackupCodes:

    def test_generates_eight_hex_codes(self):
        codes = totp.generate_backup_codes()
        assert len(codes) == 8
        assert len(set(codes)) == 8
        assert all(re.fullmatch(r"[0-9A-F]{8}", c) for c in codes)

    def test_match_is_case_and_separator_insensitive(self):
        hashed = [totp.hash_backup_code(c) for c in ["AAAA1111", "BBBB2222"]]
        assert totp.match_backup_code("bbbb-2222", hashed) == 1
        assert totp.match_backup_code("CCCC3333", hashed) == -1


class TestFieldEncryptor:

    def test_ciphertext_differs_per_call(self, encryptor):
        a = encryptor.encrypt("JBSWY3DPEHPK3PXP")
        b = encryptor.encrypt("JBSWY3DPEHPK3PXP")
        assert a != b
        assert encryptor.decrypt(a) == encryptor.decrypt(b) == "JBSWY3DPEHPK3PXP"

    def test_tampered_ciphertext_is_rejected(self, encryptor):
        nonce, ciphertext = encryptor.encrypt("secret").split(":")
        raw = bytearray(base64.urlsafe_b64decode(ciphertext))
        raw[0] ^= 0x01
        tampered = nonce + ":" + base64.urlsafe_b64encode(bytes(raw)).decode("ascii")
        with pytest.raises(EncryptionError):
            encryptor.decrypt(tampered)

    def test_wrong_key_is_rejected(self, encryptor):
        token = encryptor.encrypt("secret")
        other = FieldEncryptor(lambda: b"x" * 32)
        with pytest.raises(EncryptionError):
            other.decrypt(token)

    def test_missing_key_fails_loudly(self, monkeypatch):
        from hrportal.core import encryption

        monkeypatch.setattr(encryption.settings, "encryption_key", None)
        with pytest.raises(EncryptionError):
            FieldEncryptor().encrypt("secret")
