"""
Access control for blockrand: a single owner and an owner-managed attester set.

    from blockrand.access import RoleRegistry, Authorizer
"""

from .roles import Authorizer, RoleRegistry

__all__ = ["Authorizer", "RoleRegistry"]
