#!/usr/bin/env python3

# Copyright (C) The btcblind developers
#
# This file is part of btcblind. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btcblind including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Blind ECDSA signature algebra.

A custodian (Bob) signs on behalf of a client (Alice) a message hash
he never sees, producing a signature he cannot recognize later,
valid for a public key he cannot link to his own parameters.

Alice picks a, b, c, d in [1, n-1], Bob picks p, q in [1, n-1].

* Bob publishes the blind points

    P = p^-1·G,  Q = q·p^-1·G

* Alice computes the nonce point and the public key

    K = (c·a)^-1·P,  T = (a·Kx)^-1·(b·G + Q + d·c^-1·P)

  and can safely publish T: without a, b, c, d Bob cannot tell
  whether P and Q were involved in it.
* To sign the hash h, Alice sends the blinded hash

    h2 = a·h + b

* Bob returns the blind signature

    s1 = p·h2 + q

* Alice unblinds it

    s2 = c·s1 + d

  and (Kx, s2) is a valid ECDSA signature of h for the public key T,
  as s2·K = h·G + Kx·T.

Here (Kx, s2) is serialized with the bitcoin canonical 'low-s' form,
so that the final signature is standard for relay.

http://oleganza.com/blind-ecdsa-draft-v2.pdf
"""

from hashlib import sha256
from typing import Tuple

from btclib.alias import HashF, Octets, Point
from btclib.ec import Curve, mult, secp256k1
from btclib.ecc.dsa import Sig
from btclib.number_theory import mod_inv
from btclib.utils import bytes_from_octets, hex_string, int_from_bits

from btcblind.exceptions import DomainError, RangeError


def _str_scalar(i: int) -> str:
    return f"'{hex_string(i)}'" if i > 0xFFFFFFFF else f"{i}"


def assert_scalar(name: str, i: int, ec: Curve = secp256k1) -> None:
    """Raise RangeError if i is not a reduced scalar in [0, n-1].

    Out of range values are rejected, never reduced modulo n.
    """
    if not isinstance(i, int):
        raise RangeError(f"{name} is not an int: {type(i).__name__}")
    if not 0 <= i < ec.n:
        raise RangeError(f"{name} not in 0..n-1: {_str_scalar(i)}")


def _inverse(name: str, i: int, ec: Curve) -> int:
    if i % ec.n == 0:
        raise DomainError(f"{name} is not invertible: zero modulo n")
    return mod_inv(i, ec.n)


def _assert_point(name: str, Q: Point, ec: Curve) -> None:
    ec.require_on_curve(Q)
    if Q[1] == 0:
        raise DomainError(f"{name} is the infinity point")


def hash_scalar(msg_hash: Octets, ec: Curve = secp256k1, hf: HashF = sha256) -> int:
    """Return the message hash as reduced scalar.

    It is the leftmost ec.nlen bits of the digest, reduced modulo n,
    as in SEC 1 v.2 section 4.1.3 (5): the very same value
    ECDSA verification will use for msg_hash.
    """
    hf_len = hf().digest_size
    msg_hash = bytes_from_octets(msg_hash, hf_len)
    return int_from_bits(msg_hash, ec.nlen) % ec.n


def custodian_points(p: int, q: int, ec: Curve = secp256k1) -> Tuple[Point, Point]:
    """Return Bob's blind points (P, Q) = (p^-1·G, q·p^-1·G)."""
    assert_scalar("p", p, ec)
    assert_scalar("q", q, ec)
    p_1 = _inverse("p", p, ec)
    if q == 0:
        raise DomainError("q is not invertible: zero modulo n")

    P = mult(p_1, ec.G, ec)
    Q = mult(q * p_1 % ec.n, ec.G, ec)
    return P, Q


def client_commitment(
    a: int, b: int, c: int, d: int, P: Point, Q: Point, ec: Curve = secp256k1
) -> Tuple[Point, Point]:
    """Return Alice's nonce point K and public key T.

    K = (c·a)^-1·P
    T = (a·Kx)^-1·(b·G + Q + d·c^-1·P)

    Non invertible a, c, or Kx raise DomainError:
    the whole parameter set must then be discarded.
    """
    for name, scalar in (("a", a), ("b", b), ("c", c), ("d", d)):
        assert_scalar(name, scalar, ec)
    # a and c are checked before any point multiplication
    a_1 = _inverse("a", a, ec)
    c_1 = _inverse("c", c, ec)
    _assert_point("P", P, ec)
    _assert_point("Q", Q, ec)

    K = mult(c_1 * a_1 % ec.n, P, ec)
    # mod n makes it a scalar
    Kx = K[0] % ec.n
    aKx_1 = _inverse("a·Kx", a * Kx, ec)

    R = ec.add(mult(b, ec.G, ec), Q)
    R = ec.add(R, mult(d * c_1 % ec.n, P, ec))
    T = mult(aKx_1, R, ec)
    # edge case that cannot be reproduced in the test suite
    if T[1] == 0:
        raise DomainError("invalid (INF) public key")  # pragma: no cover
    return K, T


def blind_hash(h: int, a: int, b: int, ec: Curve = secp256k1) -> int:
    "Return Alice's blinded hash h2 = a·h + b (mod n)."
    assert_scalar("h", h, ec)
    assert_scalar("a", a, ec)
    assert_scalar("b", b, ec)
    return (a * h + b) % ec.n


def sign_blinded(h2: int, p: int, q: int, ec: Curve = secp256k1) -> int:
    """Return Bob's blind signature s1 = p·h2 + q (mod n).

    h2 comes from the network: it must already be a reduced scalar.
    """
    assert_scalar("h2", h2, ec)
    assert_scalar("p", p, ec)
    assert_scalar("q", q, ec)
    if p == 0:
        raise DomainError("p is not invertible: zero modulo n")
    return (p * h2 + q) % ec.n


def unblind_signature(s1: int, c: int, d: int, ec: Curve = secp256k1) -> int:
    "Return Alice's unblinded signature s2 = c·s1 + d (mod n)."
    assert_scalar("s1", s1, ec)
    assert_scalar("c", c, ec)
    assert_scalar("d", d, ec)
    return (c * s1 + d) % ec.n


def assemble_signature(Kx: int, s2: int, ec: Curve = secp256k1) -> bytes:
    """Return the strict DER serialization of the (Kx, s2) signature.

    s2 is normalized to the bitcoin canonical 'low-s' form.
    No sighash byte is appended.
    """
    assert_scalar("Kx", Kx, ec)
    assert_scalar("s2", s2, ec)
    if Kx == 0:
        raise DomainError("Kx is zero modulo n")
    if s2 == 0:
        raise DomainError("s2 is zero modulo n")

    # see https://github.com/bitcoin/bitcoin/pull/6769
    if s2 > ec.n // 2:
        s2 = ec.n - s2

    return Sig(Kx, s2, ec).serialize()
