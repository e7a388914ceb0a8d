"""Shared type definitions for type checking.

Uses NewType for IDs to provide compile-time type safety - prevents mixing
user identifiers with resource URIs.

Uses TypeAlias for complex types that are purely structural.
"""

from typing import NewType, TypeAlias

# ID types using NewType for type safety
UserID = NewType("UserID", str)
ResourceURI = NewType("ResourceURI", str)

# Structural aliases using TypeAlias
LanguageCode: TypeAlias = str  # "fi", "en", "sv", "und", ...
LabelMap: TypeAlias = dict[str, str]
ReasonCode: TypeAlias = str  # "1".."6"
