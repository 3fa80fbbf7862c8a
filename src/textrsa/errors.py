"""Exceptions raised across textrsa.

Each error also derives from the builtin exception the surrounding code would otherwise raise, so callers catching
`ValueError` or `RuntimeError` keep working.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class TextRSAError(Exception):
    """Base class for all textrsa errors."""


class InvalidInputError(TextRSAError, ValueError):
    """An argument is outside the range the operation is defined for."""


class NoInverseError(TextRSAError, ArithmeticError):
    """The requested modular inverse does not exist, as the operands are not coprime."""


class GenerationExhaustedError(TextRSAError, RuntimeError):
    """A bounded sampling loop ran out of attempts without producing a result."""
