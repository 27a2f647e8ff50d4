"""Capability layer interfaces."""

from .base import CapabilityDelegate, NearbyObject, RangingCapability

__all__ = ["CapabilityDelegate", "NearbyObject", "RangingCapability"]
