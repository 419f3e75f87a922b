"""Authorization headers for CloudSight requests.

Two schemes are supported. With only an API key the header is the static
``CloudSight <key>`` value. With a key and a secret every request is signed
using single-leg OAuth1 (HMAC-SHA1, no token secret).
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping
from urllib.parse import quote_plus

from .errors import MissingKeyError
from .params import encode_params

OAUTH_SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"
NONCE_BYTES = 20


@dataclass(frozen=True)
class SignedRequest:
    header: str
    params: Dict[str, str]
    base_string: str = ""


@dataclass
class RequestSigner:
    key: str
    secret: str | None = None
    clock: Callable[[], float] = field(default=time.time, repr=False)
    random_bytes: Callable[[int], bytes] = field(default=secrets.token_bytes, repr=False)

    def __post_init__(self) -> None:
        if not self.key:
            raise MissingKeyError()

    @property
    def signed(self) -> bool:
        return bool(self.secret)

    def authorization(self, method: str, url: str, params: Mapping[str, str] | None = None) -> str:
        return self.sign(method, url, params).header

    def sign(self, method: str, url: str, params: Mapping[str, str] | None = None) -> SignedRequest:
        """Build the Authorization header for a request.

        The caller's ``params`` are left untouched; in signed mode the
        returned ``params`` hold them plus the injected ``oauth_*`` fields
        that the signature covers.
        """
        effective = dict(params or {})
        if not self.signed:
            return SignedRequest(header=f"CloudSight {self.key}", params=effective)

        nonce = hashlib.sha256(self.random_bytes(NONCE_BYTES)).hexdigest()
        effective.update(
            {
                "oauth_consumer_key": self.key,
                "oauth_nonce": nonce,
                "oauth_signature_method": OAUTH_SIGNATURE_METHOD,
                "oauth_timestamp": str(int(self.clock())),
                "oauth_version": OAUTH_VERSION,
            }
        )
        base_string = build_base_string(method, url, effective)
        signature = compute_signature(base_string, self.secret or "")

        pairs = [
            ("oauth_consumer_key", effective["oauth_consumer_key"]),
            ("oauth_nonce", effective["oauth_nonce"]),
            ("oauth_signature", signature),
            ("oauth_signature_method", OAUTH_SIGNATURE_METHOD),
            ("oauth_timestamp", effective["oauth_timestamp"]),
            ("oauth_version", OAUTH_VERSION),
        ]
        header = "OAuth " + ", ".join(f'{name}="{value}"' for name, value in pairs)
        return SignedRequest(header=header, params=effective, base_string=base_string)


def build_base_string(method: str, url: str, params: Mapping[str, str]) -> str:
    return "&".join(
        [
            method.upper(),
            quote_plus(url),
            quote_plus(encode_params(params)),
        ]
    )


def compute_signature(base_string: str, secret: str) -> str:
    # Single-leg flow: the token secret after "&" is always empty.
    signing_key = f"{quote_plus(secret)}&"
    digest = hmac.new(
        signing_key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1
    ).digest()
    return base64.b64encode(digest).decode("ascii")


__all__ = [
    "RequestSigner",
    "SignedRequest",
    "build_base_string",
    "compute_signature",
    "OAUTH_SIGNATURE_METHOD",
    "OAUTH_VERSION",
]
