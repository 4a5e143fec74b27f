"""
Content-derived product identifiers.

A product's token (the string printed into its QR code) is a pure function of
its id, name and batch number. Tokens are never stored: a scanned value is
authenticated by recomputing the token from the product and comparing.
"""
import hashlib
import hmac

TOKEN_PREFIX = "SS-"
TOKEN_DIGEST_BYTES = 12
FIELD_SEPARATOR = "|"


def derive_token(product_id: str, name: str, batch_number: str) -> str:
    """Return the SHA-256 based token for the given product attributes."""
    base = FIELD_SEPARATOR.join((product_id, name, batch_number))
    digest = hashlib.sha256(base.encode("utf-8")).digest()
    return TOKEN_PREFIX + digest[:TOKEN_DIGEST_BYTES].hex().upper()


def verify_token(token: str, product_id: str, name: str, batch_number: str) -> bool:
    """Check a scanned token against the freshly derived one."""
    if not isinstance(token, str):
        return False
    expected = derive_token(product_id, name, batch_number)
    return hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))
