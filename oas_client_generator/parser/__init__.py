"""
OpenAPI Specification Parser Module

Parses OpenAPI 3.0.x documents into typed models and resolves their references.
"""

from .models import HTTP_METHODS, Components, Operation, ParsedSpec, PathItem, Reference, Schema
from .oas_parser import OASParser
from .references import ReferenceResolver, follow

__all__ = [
    "HTTP_METHODS",
    "Components",
    "OASParser",
    "Operation",
    "ParsedSpec",
    "PathItem",
    "Reference",
    "ReferenceResolver",
    "Schema",
    "follow",
]
