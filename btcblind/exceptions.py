#!/usr/bin/env python3

# Copyright (C) The btcblind developers
#
# This file is part of btcblind. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btcblind including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Exception classes.

They derive from the btclib ones, so that callers already
catching BTClibValueError (or the plain ValueError) keep working;
the subclasses only discriminate the blind signature failure modes.
"""

from btclib.exceptions import BTClibTypeError, BTClibValueError


class BlindSignatureError(BTClibValueError):
    pass


class DerivationError(BlindSignatureError):
    """Invalid BIP32 child: the index is unusable, pick another one."""


class DomainError(BlindSignatureError):
    """A quantity that must be invertible is congruent to zero."""


class RangeError(BlindSignatureError):
    """A scalar or an index is out of its valid range."""


class RoleMismatchError(BTClibTypeError):
    """Key material of the wrong kind for the requested role."""
