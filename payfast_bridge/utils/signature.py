import hashlib
import hmac
from collections.abc import Mapping
from urllib.parse import quote

SIGNATURE_FIELD = "signature"

# Characters encodeURIComponent leaves alone on top of quote()'s unreserved set.
_GATEWAY_SAFE_CHARS = "!'()*"


def _stringify(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_value(value: object) -> str:
    encoded = quote(_stringify(value).strip(), safe=_GATEWAY_SAFE_CHARS, encoding="utf-8")
    return encoded.replace("%20", "+")


def canonical_string(fields: Mapping[str, object], passphrase: str | None = None) -> str:
    parts = [
        f"{key}={encode_value(fields[key])}"
        for key in sorted(fields)
        if key != SIGNATURE_FIELD and fields[key] is not None and fields[key] != ""
    ]
    canonical = "&".join(parts)
    if passphrase is not None:
        canonical += f"&passphrase={encode_value(passphrase)}"
    return canonical


def generate_signature(fields: Mapping[str, object], passphrase: str | None = None) -> str:
    return hashlib.md5(canonical_string(fields, passphrase).encode("utf-8")).hexdigest()


def verify_signature(fields: Mapping[str, object], signature: str | None, passphrase: str | None = None) -> bool:
    if not signature:
        return False
    expected = generate_signature(fields, passphrase)
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("utf-8"))
