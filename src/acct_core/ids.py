"""Account record identity functions: canonical names and discriminators."""
from __future__ import annotations

import hashlib
import re

from .protocol import DEFAULT_NAMESPACE, DEPRECATED_ACCOUNT_DISCRIMINATOR_SIZE

_LEADING_SEPARATORS = re.compile(r"^[_.\- ]+")
_SEPARATOR_THEN_CHAR = re.compile(r"[_.\- ]+([^\W_]|_|$)")
_DIGITS_THEN_CHAR = re.compile(r"\d+([^\W_]|_|$)")


def _is_lower(ch: str) -> bool:
    return ch.lower() == ch and ch.upper() != ch


def _is_upper(ch: str) -> bool:
    return ch.upper() == ch and ch.lower() != ch


def _split_case_boundaries(text: str) -> str:
    """Insert '-' at lower->Upper and UPPer->lower boundaries ("fooBar", "XMLHttp")."""
    last_lower = last_upper = last_last_upper = False
    i = 0
    while i < len(text):
        ch = text[i]
        if last_lower and _is_upper(ch):
            text = text[:i] + "-" + text[i:]
            last_lower = False
            last_last_upper = last_upper
            last_upper = True
            i += 1
        elif last_upper and last_last_upper and _is_lower(ch):
            text = text[: i - 1] + "-" + text[i - 1:]
            last_last_upper = last_upper
            last_upper = False
            last_lower = True
        else:
            last_lower = _is_lower(ch)
            last_last_upper = last_upper
            last_upper = _is_upper(ch)
        i += 1
    return text


def canonical_name(name: str) -> str:
    """Canonical PascalCase form of a type name: "my_account" -> "MyAccount"."""
    text = name.strip()
    if not text:
        return ""
    if len(text) == 1:
        return text.upper()

    if text != text.lower():
        text = _split_case_boundaries(text)
    text = _LEADING_SEPARATORS.sub("", text).lower()
    if not text:
        return ""
    text = text[0].upper() + text[1:]
    text = _SEPARATOR_THEN_CHAR.sub(lambda m: m.group(1).upper(), text)
    return _DIGITS_THEN_CHAR.sub(lambda m: m.group(0).upper(), text)


def sighash(namespace: str, name: str) -> bytes:
    """Full SHA-256 digest of "<namespace>:<CanonicalName>"."""
    preimage = f"{namespace}:{canonical_name(name)}"
    return hashlib.sha256(preimage.encode("utf-8")).digest()


def account_discriminator(
    name: str,
    size: int = DEPRECATED_ACCOUNT_DISCRIMINATOR_SIZE,
    namespace: str = DEFAULT_NAMESPACE,
) -> bytes:
    """Generate the deterministic type tag for an account name."""
    return sighash(namespace, name)[:size]
