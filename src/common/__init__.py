"""
Common types and utilities shared across all modules.

This module provides the card record exchanged between the recognition
pipelines and the catalog resolver, and the host bridge contract.
"""

from src.common.bridge import HostBridge, QueueBridge
from src.common.types import CardRecord

__all__ = ["CardRecord", "HostBridge", "QueueBridge"]
