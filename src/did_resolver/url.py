"""DIDUrl — parsed, normalized representation of a DID URL.

DID URL format
--------------
::

    did:<method>:<identifier>[/<path>][?<key>=<value>[&...]][#<fragment>]

Examples::

    did:key:z6MkiTBz1ymuepAQ4HEHYSF1H8quG5GLVVQR3djdX3mDooWp
    did:keri:Dw6a91H7DSGKViP5rXvq3ToosLbsD9EQvwEAP2h4fp5w?kerl=eyJ2Ijoi...
    did:web:example.com:alice#key-1

The method is lowercase alphanumeric starting with a letter. The identifier
is opaque: a run of URL-safe characters (letters, digits, ``.``, ``_``, ``-``,
``~``, ``:`` and ``%``-escapes) up to the first ``/``, ``?`` or ``#``.
Everything after it is preserved in the ``path``, ``query`` and
``fragment`` fields so that the canonical ``did:<method>:<identifier>``
form round-trips losslessly.

Specification reference
-----------------------
https://www.w3.org/TR/did-core/#did-url-syntax
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

from did_resolver.encoding import b64url_decode
from did_resolver.errors import NotADIDError

DID_PREFIX: str = "did:"

# The only query key the dispatch layer interprets: a base64url-encoded
# KERI key-event log inlined into the URL.
KERL_QUERY_KEY: str = "kerl"

_DID_URL_PATTERN = re.compile(
    r"did:(?P<method>[a-z][a-z0-9]*)"
    r":(?P<identifier>[A-Za-z0-9._:%~\-]+)"
    r"(?P<path>/[^?#]*)?"
    r"(?:\?(?P<query>[^#]*))?"
    r"(?:#(?P<fragment>.*))?",
    re.DOTALL,
)


@dataclass(frozen=True)
class DIDUrl:
    """An immutable, parsed DID URL.

    Parameters
    ----------
    method:
        The DID method name (e.g. ``"key"``, ``"keri"``).
    identifier:
        The method-specific identifier. Opaque to the resolver core.
    query:
        Query parameters, values used verbatim.
    fragment:
        The fragment (usually a key id), without the leading ``#``.
    path:
        The path component including its leading ``/``, if present.
    """

    method: str
    identifier: str
    query: dict[str, str] = field(default_factory=dict, hash=False)
    fragment: str | None = None
    path: str | None = None

    @property
    def did(self) -> str:
        """The bare ``did:<method>:<identifier>`` with path, query and fragment stripped."""
        return f"{DID_PREFIX}{self.method}:{self.identifier}"

    def __str__(self) -> str:
        rendered = self.did
        if self.path:
            rendered += self.path
        if self.query:
            rendered += "?" + "&".join(
                f"{key}={value}" if value else key for key, value in self.query.items()
            )
        if self.fragment is not None:
            rendered += f"#{self.fragment}"
        return rendered


class DIDUrlParser:
    """Parser for the DID URL grammar.

    The grammar is fixed, so one instance can be created at startup and
    shared freely between threads.
    """

    def __init__(self) -> None:
        self._pattern = _DID_URL_PATTERN

    def parse(self, raw: str) -> DIDUrl:
        """Parse *raw* into a :class:`DIDUrl`.

        Parameters
        ----------
        raw:
            A DID URL string.

        Returns
        -------
        DIDUrl
            The parsed URL.

        Raises
        ------
        NotADIDError
            If *raw* lacks the ``did:`` prefix, or its method or identifier
            is empty or malformed.
        """
        if not isinstance(raw, str) or not raw.startswith(DID_PREFIX):
            raise NotADIDError(str(raw), "Expected the 'did:' prefix.")

        match = self._pattern.fullmatch(raw)
        if match is None:
            raise NotADIDError(
                raw,
                "Expected format: did:<method>:<identifier>[?query][#fragment] "
                "(method is lowercase alphanumeric, identifier is non-empty).",
            )

        return DIDUrl(
            method=match.group("method"),
            identifier=match.group("identifier"),
            query=_parse_query(match.group("query")),
            fragment=match.group("fragment"),
            path=match.group("path") or None,
        )


def _parse_query(query: str | None) -> dict[str, str]:
    """Split ``key=value&key2=value2`` into a dict. Keys without ``=`` map to ``""``."""
    if not query:
        return {}
    params: dict[str, str] = {}
    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        params[key] = value
    return params


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

_DEFAULT_PARSER = DIDUrlParser()


def parse(raw: str) -> DIDUrl:
    """Parse *raw* with the default :class:`DIDUrlParser`."""
    return _DEFAULT_PARSER.parse(raw)


def canonical_id(url: DIDUrl) -> str:
    """Return ``did:<method>:<identifier>`` for *url*."""
    return url.did


def decode_kerl(url: DIDUrl) -> bytes | None:
    """Return the decoded ``kerl`` query value of *url*, or ``None`` when absent.

    Raises
    ------
    KeyDecodingError
        If the value is not valid base64url.
    """
    encoded = url.query.get(KERL_QUERY_KEY)
    if not encoded:
        return None
    return b64url_decode(encoded)


__all__ = [
    "DID_PREFIX",
    "DIDUrl",
    "DIDUrlParser",
    "KERL_QUERY_KEY",
    "canonical_id",
    "decode_kerl",
    "parse",
]
