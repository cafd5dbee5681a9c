"""
TOTP (RFC 6238) helpers for two-factor authentication.

Secrets are base32 strings as expected by authenticator apps. Codes are
accepted from the current time step and one step either side to absorb clock
drift. Backup codes are random 8-character hex strings, stored only as
SHA-256 digests and spent on use.
"""

import base64
import hashlib
import hmac
import io
import secrets
from typing import List, Optional

import pyotp
import qrcode
from qrcode.image.svg import SvgPathImage

TOTP_ISSUER = "HR Portal"
TOTP_DIGITS = 6
TOTP_DRIFT_TOLERANCE = 1  # accept codes from +/- this many time steps
BACKUP_CODE_COUNT = 8
BACKUP_CODE_BYTES = 4


def generate_secret() -> str:
    return pyotp.random_base32()


def provisioning_uri(email: str, secret: str, issuer: str = TOTP_ISSUER) -> str:
    """otpauth:// URI for authenticator apps."""
    return pyotp.TOTP(secret).provisioning_uri(name=email, issuer_name=issuer)


def qr_code_data_url(uri: str) -> str:
    """Render ``uri`` as an SVG QR code wrapped in a data: URL."""
    img = qrcode.make(uri, image_factory=SvgPathImage, box_size=10, border=2)
    buf = io.BytesIO()
    img.save(buf)
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def verify_code(secret: str, code: Optional[str], for_time=None) -> bool:
    """Check a submitted code against ``secret`` with drift tolerance."""
    if not code:
        return False
    code = str(code).replace(" ", "").strip()
    if len(code) != TOTP_DIGITS or not code.isdigit():
        return False
    return pyotp.TOTP(secret).verify(code, for_time=for_time, valid_window=TOTP_DRIFT_TOLERANCE)


def generate_backup_codes(count: int = BACKUP_CODE_COUNT) -> List[str]:
    return [secrets.token_hex(BACKUP_CODE_BYTES).upper() for _ in range(count)]


def hash_backup_code(code: str) -> str:
    normalized = code.replace(" ", "").replace("-", "").strip().upper()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def match_backup_code(code: str, hashed_codes: List[str]) -> int:
    """Index of the stored digest matching ``code``, or -1."""
    candidate = hash_backup_code(code)
    index = -1
    # walk the whole list so timing does not reveal the position
    for i, stored in enumerate(hashed_codes):
        if hmac.compare_digest(candidate, stored) and index == -1:
            index = i
    return index
