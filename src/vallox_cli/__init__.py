#!/usr/bin/env python3
"""A CLI for the vallox library."""

from __future__ import annotations
