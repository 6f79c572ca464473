#!/usr/bin/env python3

# Copyright (C) The btcblind developers
#
# This file is part of btcblind. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btcblind including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Client and custodian sides of the blind signature protocol.

Each party keeps track of a single BIP32 extended private key,
every per-message parameter being re-derived from it and the index.

1. Alice (client) creates an extended private key u.
2. Bob (custodian) creates an extended private key w
   and gives Alice the corresponding extended public key W.
3. Alice assigns an index i to each public key T she will use,
   computing it with BlindSignatureClient.public_key_at_index.
4. To sign, Alice sends Bob the blinded hash and the index
   (BlindSignatureClient.blinded_hash_for_hash).
5. Bob, after having verified Alice's identity
   (not addressed here), returns the blind signature
   (BlindSignatureCustodian.blind_signature_for_blinded_hash).
6. Alice unblinds it into the final DER signature
   (BlindSignatureClient.unblinded_signature_for_blind_signature);
   the sighash byte must still be appended when used in a transaction.

Each index must be used for one message only:
index uniqueness is not (and cannot be) enforced here,
callers serving concurrent requests must guarantee it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from hashlib import sha256

from btclib.alias import HashF, Octets, Point
from btclib.bip32 import BIP32Key, xpub_from_xprv
from btclib.ec import bytes_from_point, secp256k1
from btclib.utils import bytes_from_octets

from btcblind.blinding import (
    assemble_signature,
    assert_scalar,
    blind_hash,
    client_commitment,
    hash_scalar,
    sign_blinded,
    unblind_signature,
)
from btcblind.derivation import (
    ClientFactors,
    assert_valid_index,
    blind_points,
    client_factors,
    custodian_secrets,
    xkey_data,
)
from btcblind.exceptions import (
    DerivationError,
    DomainError,
    RangeError,
    RoleMismatchError,
)
from btcblind.wire import BlindedHashRequest, BlindSignatureResponse

logger = logging.getLogger(__name__)

ec = secp256k1


def _int_from_scalar_bytes(scalar: Octets) -> int:
    scalar_bytes = bytes_from_octets(scalar, ec.n_size)
    return int.from_bytes(scalar_bytes, byteorder="big", signed=False)


@dataclass(frozen=True)
class _IndexState:
    factors: ClientFactors
    K: Point
    T: Point


class BlindSignatureClient:
    """Alice: blinds hashes and unblinds signatures.

    It requires the client extended private key
    and the custodian extended public key.
    Per-index derivations are cached if cache is True:
    no eviction is needed as each index is used once.
    """

    def __init__(
        self, client_xprv: BIP32Key, custodian_xpub: BIP32Key, cache: bool = True
    ) -> None:
        self._client_xkey = xkey_data(client_xprv)
        if not self._client_xkey.is_private:
            raise RoleMismatchError("client key is not a private key")
        self._custodian_xkey = xkey_data(custodian_xpub)
        if self._custodian_xkey.is_private:
            raise RoleMismatchError("custodian key given to client is not public")
        self._cache: dict[int, _IndexState] | None = {} if cache else None

    def _state(self, index: int) -> _IndexState:
        assert_valid_index(index)
        if self._cache is not None and index in self._cache:
            logger.debug("index %d: cached blinding parameters", index)
            return self._cache[index]

        try:
            factors = client_factors(self._client_xkey, index)
            P, Q = blind_points(self._custodian_xkey, index)
            a, b, c, d = factors.a, factors.b, factors.c, factors.d
            K, T = client_commitment(a, b, c, d, P, Q, ec)
        except (DerivationError, DomainError) as e:
            logger.warning("index %d is unusable: %s", index, e)
            raise
        logger.debug("index %d: derived blinding parameters", index)

        state = _IndexState(factors, K, T)
        if self._cache is not None:
            self._cache[index] = state
        return state

    def public_key_at_index(self, index: int) -> Point:
        "Return the public key T to be used for the given index."
        return self._state(index).T

    def public_key_bytes_at_index(self, index: int, compressed: bool = True) -> bytes:
        "Return the SEC serialization of the public key T."
        return bytes_from_point(self.public_key_at_index(index), ec, compressed)

    def _blinded_hash(self, msg_hash: Octets, index: int, hf: HashF) -> int:
        factors = self._state(index).factors
        h = hash_scalar(msg_hash, ec, hf)
        return blind_hash(h, factors.a, factors.b, ec)

    def blinded_hash_for_hash(
        self, msg_hash: Octets, index: int, hf: HashF = sha256
    ) -> bytes:
        """Return the blinded hash h2 to be sent to the custodian.

        h2 = a·h + b (mod n) is serialized as n_size big endian bytes;
        the index must be sent along with it.
        """
        h2 = self._blinded_hash(msg_hash, index, hf)
        return h2.to_bytes(ec.n_size, byteorder="big", signed=False)

    def blind_request_for_hash(
        self, msg_hash: Octets, index: int, hf: HashF = sha256
    ) -> BlindedHashRequest:
        "Return the request (blinded hash and index) for the custodian."
        return BlindedHashRequest(self._blinded_hash(msg_hash, index, hf), index, ec)

    def unblinded_signature_for_blind_signature(
        self, blind_signature: Octets | BlindSignatureResponse, index: int
    ) -> bytes:
        """Return the final DER signature from the custodian blind signature.

        The signature is valid for the public key at the given index.
        Do not forget to add the sighash byte
        when placing it in a bitcoin transaction.
        """
        if isinstance(blind_signature, BlindSignatureResponse):
            s1 = blind_signature.blind_signature
        else:
            s1 = _int_from_scalar_bytes(blind_signature)

        state = self._state(index)
        s2 = unblind_signature(s1, state.factors.c, state.factors.d, ec)
        # mod n makes it a scalar
        Kx = state.K[0] % ec.n
        return assemble_signature(Kx, s2, ec)


class BlindSignatureCustodian:
    """Bob: signs blinded hashes.

    It only requires the custodian extended private key:
    no client secret is ever needed, or received.
    """

    def __init__(self, custodian_xprv: BIP32Key) -> None:
        self._xkey = xkey_data(custodian_xprv)
        if not self._xkey.is_private:
            raise RoleMismatchError("custodian key is not a private key")

    @property
    def xpub(self) -> str:
        "The custodian extended public key W, to be given to clients."
        return xpub_from_xprv(self._xkey)

    def _blind_signature(self, h2: int, index: int) -> int:
        try:
            assert_scalar("blinded hash", h2, ec)
            assert_valid_index(index)
        except RangeError as e:
            logger.warning("rejected blinded hash request: %s", e)
            raise

        try:
            p, q = custodian_secrets(self._xkey, index)
        except DerivationError as e:
            logger.warning("index %d is unusable: %s", index, e)
            raise
        logger.debug("index %d: signing blinded hash", index)
        return sign_blinded(h2, p, q, ec)

    def blind_signature_for_blinded_hash(
        self, blinded_hash: Octets, index: int
    ) -> bytes:
        """Return the blind signature s1 = p·h2 + q (mod n).

        The blinded hash h2 must be n_size big endian bytes
        of a scalar lower than n; s1 is serialized the same way.
        """
        h2 = _int_from_scalar_bytes(blinded_hash)
        s1 = self._blind_signature(h2, index)
        return s1.to_bytes(ec.n_size, byteorder="big", signed=False)

    def blind_response_for_request(
        self, request: BlindedHashRequest | Octets
    ) -> BlindSignatureResponse:
        "Return the response to a (possibly serialized) blinded hash request."
        if not isinstance(request, BlindedHashRequest):
            request = BlindedHashRequest.parse(request)
        s1 = self._blind_signature(request.blinded_hash, request.index)
        return BlindSignatureResponse(s1, ec)
