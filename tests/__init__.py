# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Creval test suite.

Unit tests per component and integration tests over full appraisal runs.
"""
