#!/usr/bin/env python3

# Copyright (C) The btcblind developers
#
# This file is part of btcblind. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btcblind including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Sphinx configuration: API reference plus the markdown usage page."

import btcblind

project = btcblind.name
project_copyright = f"2026 {btcblind.__author__}"
author = btcblind.__author__
release = btcblind.__version__

extensions = [
    "myst_parser",
    "sphinx.ext.autodoc",
    "sphinx.ext.viewcode",
]

source_suffix = [".rst", ".md"]

exclude_patterns = ["_build"]

html_theme = "sphinx_rtd_theme"
