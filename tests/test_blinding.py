#!/usr/bin/env python3

# Copyright (C) The btcblind developers
#
# This file is part of btcblind. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btcblind including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `btcblind.blinding` module."

import random
from hashlib import sha1, sha256

import pytest
from btclib.alias import INF
from btclib.ec import mult, secp256k1
from btclib.ecc import dsa
from btclib.exceptions import BTClibValueError
from btclib.number_theory import mod_inv

from btcblind.blinding import (
    assemble_signature,
    assert_scalar,
    blind_hash,
    client_commitment,
    custodian_points,
    hash_scalar,
    sign_blinded,
    unblind_signature,
)
from btcblind.exceptions import DomainError, RangeError

random.seed(42)

ec = secp256k1


def _random_scalar() -> int:
    return 1 + random.randrange(ec.n - 1)


def test_blind_signature() -> None:
    msg_hash = sha256(b"test").digest()

    for _ in range(8):
        a, b, c, d = (_random_scalar() for _ in range(4))
        p, q = _random_scalar(), _random_scalar()

        P, Q = custodian_points(p, q)
        assert P == mult(mod_inv(p, ec.n), ec.G)
        assert Q == mult(q * mod_inv(p, ec.n), ec.G)

        K, T = client_commitment(a, b, c, d, P, Q)
        assert K == mult(mod_inv(c * a, ec.n), P)

        h = hash_scalar(msg_hash)
        h2 = blind_hash(h, a, b)
        s1 = sign_blinded(h2, p, q)
        s2 = unblind_signature(s1, c, d)
        assert s2 == (c * (p * (a * h + b) + q) + d) % ec.n

        der_sig = assemble_signature(K[0] % ec.n, s2)
        assert dsa.verify_(msg_hash, T, der_sig)

        sig = dsa.Sig.parse(der_sig)
        assert sig.r == K[0] % ec.n
        assert sig.s in (s2, ec.n - s2)
        assert sig.s <= ec.n // 2

        assert not dsa.verify_(sha256(b"fake").digest(), T, der_sig)
        _, Q_fake = dsa.gen_keys()
        assert not dsa.verify_(msg_hash, Q_fake, der_sig)


def test_other_hash_function() -> None:
    msg_hash = sha1(b"test").digest()

    a, b, c, d = (_random_scalar() for _ in range(4))
    p, q = _random_scalar(), _random_scalar()
    P, Q = custodian_points(p, q)
    K, T = client_commitment(a, b, c, d, P, Q)

    h = hash_scalar(msg_hash, ec, sha1)
    s1 = sign_blinded(blind_hash(h, a, b), p, q)
    der_sig = assemble_signature(K[0] % ec.n, unblind_signature(s1, c, d))
    assert dsa.verify_(msg_hash, T, der_sig, hf=sha1)


def test_hash_scalar() -> None:
    msg_hash = sha256(b"test").digest()
    h = hash_scalar(msg_hash)
    assert 0 <= h < ec.n
    assert h == int.from_bytes(msg_hash, "big") % ec.n
    assert h == hash_scalar(msg_hash.hex())

    with pytest.raises(BTClibValueError, match="invalid size: "):
        hash_scalar(msg_hash[:-1])


def test_custodian_points_exceptions() -> None:
    with pytest.raises(DomainError, match="p is not invertible"):
        custodian_points(0, 1)
    with pytest.raises(DomainError, match="q is not invertible"):
        custodian_points(1, 0)
    with pytest.raises(RangeError, match="p not in 0..n-1: "):
        custodian_points(ec.n, 1)
    with pytest.raises(RangeError, match="q not in 0..n-1: "):
        custodian_points(1, -1)


def test_client_commitment_exceptions() -> None:
    P, Q = custodian_points(_random_scalar(), _random_scalar())
    b, d = _random_scalar(), _random_scalar()

    with pytest.raises(DomainError, match="a is not invertible"):
        client_commitment(0, b, 1, d, P, Q)
    with pytest.raises(DomainError, match="c is not invertible"):
        client_commitment(1, b, 0, d, P, Q)
    # a and c are checked before anything involving the points
    with pytest.raises(DomainError, match="a is not invertible"):
        client_commitment(0, b, 1, d, INF, INF)

    with pytest.raises(DomainError, match="P is the infinity point"):
        client_commitment(1, b, 1, d, INF, Q)
    with pytest.raises(DomainError, match="Q is the infinity point"):
        client_commitment(1, b, 1, d, P, INF)
    with pytest.raises(BTClibValueError, match="point not on curve"):
        client_commitment(1, b, 1, d, P, (Q[0], Q[1] - 1))

    with pytest.raises(RangeError, match="a not in 0..n-1: "):
        client_commitment(ec.n + 1, b, 1, d, P, Q)
    with pytest.raises(RangeError, match="d not in 0..n-1: "):
        client_commitment(1, b, 1, ec.n, P, Q)


def test_zero_b_and_d() -> None:
    # b and d need not be invertible
    msg_hash = sha256(b"test").digest()
    a, c = _random_scalar(), _random_scalar()
    p, q = _random_scalar(), _random_scalar()
    P, Q = custodian_points(p, q)
    K, T = client_commitment(a, 0, c, 0, P, Q)

    s1 = sign_blinded(blind_hash(hash_scalar(msg_hash), a, 0), p, q)
    der_sig = assemble_signature(K[0] % ec.n, unblind_signature(s1, c, 0))
    assert dsa.verify_(msg_hash, T, der_sig)


def test_sign_blinded_range() -> None:
    p, q = _random_scalar(), _random_scalar()

    assert sign_blinded(0, p, q) == q
    assert sign_blinded(ec.n - 1, p, q) == (q - p) % ec.n

    # h2 equal to the group order must not be reduced modulo n
    with pytest.raises(RangeError, match="h2 not in 0..n-1: "):
        sign_blinded(ec.n, p, q)
    with pytest.raises(RangeError, match="h2 not in 0..n-1: -1"):
        sign_blinded(-1, p, q)
    with pytest.raises(RangeError, match="h2 is not an int: "):
        sign_blinded(b"\x01", p, q)  # type: ignore
    with pytest.raises(DomainError, match="p is not invertible"):
        sign_blinded(1, 0, q)


def test_blind_and_unblind_range() -> None:
    a, b = _random_scalar(), _random_scalar()
    with pytest.raises(RangeError, match="h not in 0..n-1: "):
        blind_hash(ec.n, a, b)
    with pytest.raises(RangeError, match="s1 not in 0..n-1: "):
        unblind_signature(ec.n, a, b)
    with pytest.raises(RangeError, match="c not in 0..n-1: "):
        unblind_signature(0, ec.n + 1, b)


def test_assert_scalar() -> None:
    assert_scalar("x", 0)
    assert_scalar("x", ec.n - 1)
    with pytest.raises(RangeError, match="x not in 0..n-1: -1"):
        assert_scalar("x", -1)
    with pytest.raises(RangeError, match="x is not an int: str"):
        assert_scalar("x", "01")  # type: ignore


def test_assemble_signature() -> None:
    Kx = ec.G[0] % ec.n

    # high s is normalized to low s
    der_sig = assemble_signature(Kx, ec.n - 1)
    sig = dsa.Sig.parse(der_sig)
    assert sig.r == Kx
    assert sig.s == 1
    assert der_sig[0] == 0x30
    assert der_sig == dsa.Sig(Kx, 1).serialize()

    assert assemble_signature(Kx, ec.n // 2) == dsa.Sig(Kx, ec.n // 2).serialize()
    assert assemble_signature(Kx, ec.n // 2 + 1) == dsa.Sig(Kx, ec.n // 2).serialize()

    with pytest.raises(DomainError, match="Kx is zero modulo n"):
        assemble_signature(0, 1)
    with pytest.raises(DomainError, match="s2 is zero modulo n"):
        assemble_signature(Kx, 0)
    with pytest.raises(RangeError, match="s2 not in 0..n-1: "):
        assemble_signature(Kx, ec.n)
