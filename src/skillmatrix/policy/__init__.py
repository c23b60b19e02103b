"""Policy configuration for the projection engine."""

from skillmatrix.policy.resolver import PolicyResolver

__all__ = ["PolicyResolver"]
