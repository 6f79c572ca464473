#!/usr/bin/env python3

# Copyright (C) The btcblind developers
#
# This file is part of btcblind. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btcblind including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"__init__ module for the btcblind package."

name = "btcblind"
__version__ = "2026.10.18"
__author__ = "The btcblind developers"
__author_email__ = "devs@btcblind.org"
__copyright__ = "Copyright (C) 2026 The btcblind developers"
__license__ = "MIT License"
