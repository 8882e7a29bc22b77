"""Type definitions for the OCR module.

This module defines the field kinds a crop region can hold and the
variants of recognition pipeline that drive the worker pool.
"""

from enum import Enum


class FieldKind(Enum):
    """Kind of text a crop region is known to contain."""

    TEXT = "text"  # Character or series name, full alphabet
    NUMERIC_ID = "numeric_id"  # Print generation, digits only


class PipelineKind(Enum):
    """Recognition pipeline variant."""

    CAPTCHA = "captcha"  # Single card claim screen
    DROP = "drop"  # Three-card drop screen
