# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Wellnest mobile backend: token sessions and request admission."""

__version__ = "0.1.0"
