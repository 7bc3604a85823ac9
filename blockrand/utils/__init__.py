"""
blockrand.utils
---------------

Light helpers shared across the package: domain-separated hashing
(`blockrand.utils.hash`) and strict hex/bytes conversion
(`blockrand.utils.bytes`).

Nothing is imported eagerly here.
"""

__all__: list[str] = []
