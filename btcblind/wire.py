#!/usr/bin/env python3

# Copyright (C) The btcblind developers
#
# This file is part of btcblind. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btcblind including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Payloads exchanged between client and custodian.

Client to custodian, the blinded hash request:

    [h2: n_size bytes, big endian][index: 4 bytes, big endian]

Custodian to client, the blind signature response:

    [s1: n_size bytes, big endian]

For secp256k1 n_size is 32 bytes.
Scalars must already be reduced: values not lower than n are rejected,
never reduced modulo n, as they can only come from a malformed
(or adversarial) counterpart.
The channel is assumed to be authenticated and confidential.
"""

from dataclasses import InitVar, dataclass
from typing import Type

from btclib.alias import BinaryData
from btclib.ec import Curve, secp256k1
from btclib.exceptions import BTClibValueError
from btclib.utils import bytesio_from_binarydata

from btcblind.blinding import assert_scalar
from btcblind.derivation import assert_valid_index

_INDEX_SIZE = 4


def _read_exactly(data: BinaryData, size: int, what: str) -> bytes:
    stream = bytesio_from_binarydata(data)
    data_bin = stream.read(size)
    if len(data_bin) != size:
        err_msg = f"invalid {what} size: {len(data_bin)} bytes"
        err_msg += f" instead of {size}"
        raise BTClibValueError(err_msg)
    return data_bin


@dataclass(frozen=True)
class BlindedHashRequest:
    # blinded hash h2, a scalar in [0, n-1]
    blinded_hash: int
    # derivation index, in [0, 0xFFFFFFFF]
    index: int
    ec: Curve = secp256k1
    check_validity: InitVar[bool] = True

    def __post_init__(self, check_validity: bool) -> None:
        if check_validity:
            self.assert_valid()

    def assert_valid(self) -> None:
        assert_scalar("blinded hash", self.blinded_hash, self.ec)
        assert_valid_index(self.index)

    def serialize(self, check_validity: bool = True) -> bytes:
        if check_validity:
            self.assert_valid()

        out = self.blinded_hash.to_bytes(self.ec.n_size, byteorder="big", signed=False)
        return out + self.index.to_bytes(_INDEX_SIZE, byteorder="big", signed=False)

    @classmethod
    def parse(
        cls: Type["BlindedHashRequest"],
        data: BinaryData,
        ec: Curve = secp256k1,
        check_validity: bool = True,
    ) -> "BlindedHashRequest":
        "Return a BlindedHashRequest by parsing n_size + 4 bytes."

        data_bin = _read_exactly(data, ec.n_size + _INDEX_SIZE, "blinded hash request")
        blinded_hash = int.from_bytes(data_bin[: ec.n_size], "big", signed=False)
        index = int.from_bytes(data_bin[ec.n_size :], "big", signed=False)
        return cls(blinded_hash, index, ec, check_validity)


@dataclass(frozen=True)
class BlindSignatureResponse:
    # blind signature s1, a scalar in [0, n-1]
    blind_signature: int
    ec: Curve = secp256k1
    check_validity: InitVar[bool] = True

    def __post_init__(self, check_validity: bool) -> None:
        if check_validity:
            self.assert_valid()

    def assert_valid(self) -> None:
        assert_scalar("blind signature", self.blind_signature, self.ec)

    def serialize(self, check_validity: bool = True) -> bytes:
        if check_validity:
            self.assert_valid()

        return self.blind_signature.to_bytes(
            self.ec.n_size, byteorder="big", signed=False
        )

    @classmethod
    def parse(
        cls: Type["BlindSignatureResponse"],
        data: BinaryData,
        ec: Curve = secp256k1,
        check_validity: bool = True,
    ) -> "BlindSignatureResponse":
        "Return a BlindSignatureResponse by parsing n_size bytes."

        data_bin = _read_exactly(data, ec.n_size, "blind signature response")
        blind_signature = int.from_bytes(data_bin, "big", signed=False)
        return cls(blind_signature, ec, check_validity)
