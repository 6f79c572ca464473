#!/usr/bin/env python3

# Copyright (C) The btcblind developers
#
# This file is part of btcblind. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btcblind including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

from hashlib import sha256

from btclib.bip32 import rootxprv_from_seed
from btclib.ec import secp256k1 as ec
from btclib.ecc import dsa

from btcblind.protocol import BlindSignatureClient, BlindSignatureCustodian

print("\n*** EC:")
print(ec)

print("\n0. Message to be signed")
msg = "Paolo is afraid of ephemeral random numbers"
msg_hash = sha256(msg.encode()).digest()
print(msg)

print("1. Custodian key generation")
bob = BlindSignatureCustodian(rootxprv_from_seed("fffcf9f6f3f0edeae7e4e1dedbd8d5d2"))
print(f"  W: {bob.xpub}")

print("2. Client public key at index i")
alice = BlindSignatureClient(rootxprv_from_seed("000102030405060708090a0b0c0d0e0f"), bob.xpub)
i = 0
T = alice.public_key_at_index(i)
print(f"  i: {i}")
print(f"  T: {alice.public_key_bytes_at_index(i).hex().upper()}")

print("3. Client blinds the hash")
h2 = alice.blinded_hash_for_hash(msg_hash, i)
print(f" h2: {h2.hex().upper()}")

print("4. Custodian signs the blinded hash")
s1 = bob.blind_signature_for_blinded_hash(h2, i)
print(f" s1: {s1.hex().upper()}")

print("5. Client unblinds the signature")
der_sig = alice.unblinded_signature_for_blind_signature(s1, i)
sig = dsa.Sig.parse(der_sig)
print(f"  r: {hex(sig.r).upper()}")
print(f"  s: {hex(sig.s).upper()}")

print("6. Verify signature")
print(dsa.verify_(msg_hash, T, der_sig))

print("\n0. Another message to sign, with a new index")
msg = "and Paolo is right to be afraid"
msg_hash = sha256(msg.encode()).digest()
print(msg)

i = 1
T = alice.public_key_at_index(i)
request = alice.blind_request_for_hash(msg_hash, i)
print(f"  request: {request.serialize().hex().upper()}")
response = bob.blind_response_for_request(request.serialize())
print(f" response: {response.serialize().hex().upper()}")
der_sig = alice.unblinded_signature_for_blind_signature(response, i)
print(dsa.verify_(msg_hash, T, der_sig))
