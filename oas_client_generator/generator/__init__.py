"""
Client Code Generator Module

This module turns parsed OpenAPI documents into typed client source code for
the supported target dialects.
"""

from .dialects import DIALECTS, Dialect, KotlinDialect, PythonDialect, get_dialect
from .emitter import ClientCodeGenerator
from .project_files import ProjectTemplateEngine
from .route_tree import PathNode, build_route_tree, format_tree
from .type_resolver import NamedType, ResolvedType, TypeRegistry, TypeResolver

__all__ = [
    "DIALECTS",
    "ClientCodeGenerator",
    "Dialect",
    "KotlinDialect",
    "NamedType",
    "PathNode",
    "ProjectTemplateEngine",
    "PythonDialect",
    "ResolvedType",
    "TypeRegistry",
    "TypeResolver",
    "build_route_tree",
    "format_tree",
    "get_dialect",
]
