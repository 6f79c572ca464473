#!/usr/bin/env python3

# Copyright (C) The btcblind developers
#
# This file is part of btcblind. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btcblind including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""BIP32 derivation of the per-index blinding parameters.

Both parties keep a single BIP32 extended private key:
Alice the client key u, Bob the custodian key w,
whose extended public key W is given to Alice.
For each index i (to be used for one message only):

* Alice derives a, b, c, d with hardened derivation from u:

    a = HD(u, 4·i + 0)
    b = HD(u, 4·i + 1)
    c = HD(u, 4·i + 2)
    d = HD(u, 4·i + 3)

* Alice derives P and Q with normal derivation from W:

    P = ND(W, 2·i + 0) = W + x·G
    Q = ND(W, 2·i + 1) = W + y·G

  where x and y are the BIP32 offsets, i.e. the first 32 bytes
  of the child HMAC-SHA512.
* Bob recovers the matching p and q from w and the same offsets:

    P = p^-1·G = (w + x)·G   =>   p = (w + x)^-1
    Q = q·p^-1·G = (w + y)·G   =>   q = (w + y)·p

BIP32 child numbers are 31 bits, while 4·i + 3 needs 34 bits:
a child number k is split as (k // 2^31, k % 2^31), resulting in
the single level path [k] for k < 2^31 and in the two levels path
[k // 2^31, k % 2^31] otherwise.
For the normal derivation the offset is then the sum of the two
levels offsets.

Differently from btclib.bip32.derive, invalid children
(offset not lower than n, zero private key, infinity public key)
are not accepted: DerivationError is raised and the index must be
abandoned for a new one.
"""

import hmac
from dataclasses import dataclass
from typing import List, Tuple

from btclib.alias import Point
from btclib.bip32 import BIP32Key, BIP32KeyData
from btclib.ec import bytes_from_point, mult, point_from_octets, secp256k1
from btclib.number_theory import mod_inv

from btcblind.exceptions import DerivationError, RangeError, RoleMismatchError

ec = secp256k1

HARDENED = 0x80000000
MAX_INDEX = 0xFFFFFFFF

# child numbers per index
CLIENT_FACTORS = 4
BLIND_POINTS = 2


@dataclass(frozen=True)
class ClientFactors:
    "Alice's secret blinding factors for one index."
    a: int
    b: int
    c: int
    d: int


def assert_valid_index(index: int) -> None:
    if not isinstance(index, int):
        raise RangeError(f"index is not an int: {type(index).__name__}")
    if not 0 <= index <= MAX_INDEX:
        raise RangeError(f"invalid index: {index}")


def xkey_data(xkey: BIP32Key) -> BIP32KeyData:
    "Return the BIP32KeyData of a base58 or already parsed extended key."
    if isinstance(xkey, BIP32KeyData):
        return xkey
    return BIP32KeyData.b58decode(xkey)


def _prv_key_int(xkey: BIP32KeyData) -> int:
    if not xkey.is_private:
        raise RoleMismatchError("not a private key: a public extended key was given")
    return int.from_bytes(xkey.key[1:], byteorder="big", signed=False)


def _pub_key_point(xkey: BIP32KeyData) -> Point:
    if xkey.is_private:
        return mult(_prv_key_int(xkey), ec.G, ec)
    return point_from_octets(xkey.key, ec)


def _indexes(child_number: int, hardened: bool) -> List[int]:
    quotient, remainder = divmod(child_number, HARDENED)
    indexes = [remainder] if quotient == 0 else [quotient, remainder]
    if hardened:
        return [HARDENED + i for i in indexes]
    return indexes


def _offset(chain_code: bytes, data: bytes, index: int) -> Tuple[int, bytes]:
    hmac_ = hmac.new(
        chain_code,
        data + index.to_bytes(4, byteorder="big", signed=False),
        "sha512",
    ).digest()
    offset = int.from_bytes(hmac_[:32], byteorder="big", signed=False)
    if offset >= ec.n:
        raise DerivationError(f"invalid child {index}: offset not in 0..n-1")
    return offset, hmac_[32:]


def _hardened_derivation(xkey: BIP32KeyData, child_number: int) -> int:
    prv = _prv_key_int(xkey)
    chain_code = xkey.chain_code
    for index in _indexes(child_number, hardened=True):
        data = b"\x00" + prv.to_bytes(32, byteorder="big", signed=False)
        offset, chain_code = _offset(chain_code, data, index)
        prv = (prv + offset) % ec.n
        if prv == 0:
            raise DerivationError(f"invalid child {index}: zero private key")
    return prv


def _normal_derivation(xkey: BIP32KeyData, child_number: int) -> Tuple[int, Point]:
    "Return the cumulated offset and the child public key."
    pub_key = _pub_key_point(xkey)
    chain_code = xkey.chain_code
    cumulated_offset = 0
    for index in _indexes(child_number, hardened=False):
        offset, chain_code = _offset(chain_code, bytes_from_point(pub_key, ec), index)
        pub_key = ec.add(pub_key, mult(offset, ec.G, ec))
        if pub_key[1] == 0:
            raise DerivationError(f"invalid child {index}: infinity public key")
        cumulated_offset = (cumulated_offset + offset) % ec.n
    return cumulated_offset, pub_key


def client_factors(xprv: BIP32Key, index: int) -> ClientFactors:
    """Return the (a, b, c, d) blinding factors for the given index.

    They are the private keys of the hardened children
    4·i + 0, 4·i + 1, 4·i + 2, and 4·i + 3 of the client key.
    """
    assert_valid_index(index)
    xkey = xkey_data(xprv)
    base = CLIENT_FACTORS * index
    a, b, c, d = (_hardened_derivation(xkey, base + j) for j in range(CLIENT_FACTORS))
    return ClientFactors(a, b, c, d)


def custodian_offsets(xpub: BIP32Key, index: int) -> Tuple[int, int]:
    """Return the (x, y) offsets of the normal children 2·i + 0, 2·i + 1.

    They are known to both parties, as they only depend
    on the custodian extended public key.
    """
    assert_valid_index(index)
    xkey = xkey_data(xpub)
    base = BLIND_POINTS * index
    x, _ = _normal_derivation(xkey, base)
    y, _ = _normal_derivation(xkey, base + 1)
    return x, y


def blind_points(xpub: BIP32Key, index: int) -> Tuple[Point, Point]:
    """Return the (P, Q) blind points for the given index.

    They are the public keys of the normal children
    2·i + 0 and 2·i + 1 of the custodian key.
    """
    assert_valid_index(index)
    xkey = xkey_data(xpub)
    base = BLIND_POINTS * index
    _, P = _normal_derivation(xkey, base)
    _, Q = _normal_derivation(xkey, base + 1)
    return P, Q


def custodian_secrets(xprv: BIP32Key, index: int) -> Tuple[int, int]:
    """Return the (p, q) custodian secrets for the given index.

    p = (w + x)^-1 and q = (w + y)·p, w being the custodian private key.
    It requires the custodian extended private key.
    """
    xkey = xkey_data(xprv)
    w = _prv_key_int(xkey)
    x, y = custodian_offsets(xkey, index)

    wx = (w + x) % ec.n
    # (w + x)·G is the P public key, already checked not to be infinity
    if wx == 0:
        raise DerivationError("invalid child: zero private key")  # pragma: no cover
    p = mod_inv(wx, ec.n)
    q = (w + y) * p % ec.n
    return p, q
