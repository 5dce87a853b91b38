"""
Reactable utilities
===================

- introspection: composite/atom test, runtime-kind discriminator, weakref check
- identity: identity-keyed containers that never extend their keys' lifetime
"""

from .identity import WeakIdentityDict, WeakIdentitySet
from .introspection import is_object, is_weakrefable, to_type_string

__all__ = [
    "WeakIdentityDict",
    "WeakIdentitySet",
    "is_object",
    "is_weakrefable",
    "to_type_string",
]
