"""Shared fixtures: published did:key and did:keri test vectors."""
from __future__ import annotations

from typing import Callable

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)
import pytest

from did_resolver.keri import KeyEvent, KeyPrefix, sign_event

# Five events (icp, rot, rot, ixn, rot) for prefix Dw6a91H7...; every key is Ed25519
# and the current key after replay is DLngmY2l...
ED25519_KERL = (
    b'{"v":"KERI10JSON0000e6_","i":"Dw6a91H7DSGKViP5rXvq3ToosLbsD9EQvwEAP2h4fp5w","s":"0","t":"icp","kt":"1","k":["Dw6a91H7DSGKViP5rXvq3ToosLbsD9EQvwEAP2h4fp5w"],"n":"EASFIEHtrEl7m-4L4_6fLUwE8VSsWVyw_2si5vb4jnrk","wt":"0","w":[],"c":[]}'
    b'-AABAAttCGUqzUu8rQPl9TkPzs-MuczytlwI6XUekUeoa6waaY9hHWPpetFJ5M0zjEdFUR1s0kN0U5n-jyk-r-K0vUDg'
    b'{"v":"KERI10JSON000122_","i":"Dw6a91H7DSGKViP5rXvq3ToosLbsD9EQvwEAP2h4fp5w","s":"1","t":"rot","p":"EuCdQ84sUCImYeXgfDcoIPYW1pQ6WBBIQHAfyGRKGN4Q","kt":"1","k":["DoCl1sPSeuzGoLQ_83qHtuZeAVThLu13kb4k23FkVDOg"],"n":"EiFDXLjMHWktBaDptBlmWvarRGO2G--7eUUllWwYJDyE","wt":"0","wr":[],"wa":[],"a":[]}'
    b'-AABAAMg3D1oTUIuaDymERF-zD6tF1r9EatcOTcRQ1EQEV1h9CQoBSqfasfQBymyJDo2IOPA5hqirLqMfajZSoTgKZAg'
    b'{"v":"KERI10JSON000122_","i":"Dw6a91H7DSGKViP5rXvq3ToosLbsD9EQvwEAP2h4fp5w","s":"2","t":"rot","p":"EA31ALscbTvnpsA0Uhl9euQYm9bVmHtNvP8I3Ctz8RGM","kt":"1","k":["DGTEck3tn-RmmvVpQb9YJyXSkTVrW8umwUzXQbsDDo3s"],"n":"E3bqoGXtOr6blxbatLZkv9g-Eap0247DOJh4jD81H4g4","wt":"0","wr":[],"wa":[],"a":[]}'
    b'-AABAAoQCoJb3adFGNXHE9TF-e_efDGu1BJPQyCHZr6kHc1tYp0olKfdKAcYIN_JSGgtLMYKwswLq__KYIRtMfg-U4Bg'
    b'{"v":"KERI10JSON0000cc_","i":"Dw6a91H7DSGKViP5rXvq3ToosLbsD9EQvwEAP2h4fp5w","s":"3","t":"ixn","p":"EIdLcIxlYfZuk20iUXuWLDVi8wXuGU38yvBIu-Ac_2w8","a":[{"d":"Ey9J7Ef2rjpSot3EahpwllhDzUWRynt7Z_J5TG_5OZS8"}]}'
    b'-AABAA3yC6xkpug37v9Wkh5ctejpjYzPArAbnk70_HQ4CaeCzFbuu8KJhqkkH2voSLBqntU9AGrKMALjrsyXN9JVBCDQ'
    b'{"v":"KERI10JSON000122_","i":"Dw6a91H7DSGKViP5rXvq3ToosLbsD9EQvwEAP2h4fp5w","s":"4","t":"rot","p":"EF5TFIpq4u_8DCu8CRqcJ_naeQ0Gj5URqjLkRYozTvbE","kt":"1","k":["DLngmY2lz5xtBJ3K8vzwDVnp2_57GOXS7Eph9ainHBm4"],"n":"Egq_ChqsiVDfFBMJSdqsJEGBu35pjYrsr59IHLLfw5Es","wt":"0","wr":[],"wa":[],"a":[]}'
    b'-AABAAL6jWv7NkOEiqV59Z7DWva0RwL64xwgV8TeNRl-ucYj6bQyVWamL42742C3_s8ZYBte5zQq15pvFU8E3JfDO0CQ'
)

# A single inception for prefix E6hwQjTM... declaring one Ed25519 and one X25519 key.
X25519_KERL = (
    b'{"v":"KERI10JSON000115_","i":"E6hwQjTM81XBKO05JxpjO11e3SY-jJfs2vatUr3nVdy4","s":"0","t":"icp","kt":"1","k":["DG9Q4wQ87Q5VKv6HJ6b22hY2famnwBibEMQr7-d7sn5c","CIOa96x9rTFbbMkcgbd3yMErXTJMqPMWhH11gZq1vNHc"],"n":"EHZM6aLLfh_dW0YgInXCBHESUNNlZkzgfurKPzyKHnIE","wt":"0","w":[],"c":[]}'
    b'-AABAARkUt2sJQ743MUhWLH4ggqbklE-2gbE4gd07vjfgWmR6FT-5hcVODhmydbyBfzzLyuMM6CicAN9ZIFNFEyfAbBQ'
)


@pytest.fixture()
def ed25519_kerl() -> bytes:
    return ED25519_KERL


@pytest.fixture()
def x25519_kerl() -> bytes:
    return X25519_KERL


def generate_keypair() -> tuple[bytes, bytes]:
    """Return a fresh raw ``(private, public)`` Ed25519 keypair."""
    private_key = Ed25519PrivateKey.generate()
    return (
        private_key.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption()),
        private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw),
    )


@pytest.fixture()
def keypairs() -> list[tuple[bytes, bytes]]:
    """Three fresh (private, public) Ed25519 keypairs."""
    return [generate_keypair() for _ in range(3)]


@pytest.fixture()
def prefixes(keypairs: list[tuple[bytes, bytes]]) -> list[KeyPrefix]:
    """Transferable Ed25519 prefixes for the ``keypairs`` fixture."""
    return [KeyPrefix(code="D", raw=public) for _, public in keypairs]


@pytest.fixture()
def sign() -> Callable[..., KeyEvent]:
    """The event signer, taking ``(index, private_key)`` pairs."""
    return sign_event
