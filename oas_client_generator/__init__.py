"""
OpenAPI Client Generator

Generates strongly-typed API clients from OpenAPI 3.0.x specifications: one
type per named schema and a scope hierarchy mirroring the URL tree, with one
callable per HTTP operation.
"""

from .config import GenerationConfig
from .errors import GeneratorError
from .generator import ClientCodeGenerator, get_dialect
from .parser import OASParser, ParsedSpec
from .templating import Template, Variable

__version__ = "1.0.0"

__all__ = [
    "ClientCodeGenerator",
    "GenerationConfig",
    "GeneratorError",
    "OASParser",
    "ParsedSpec",
    "Template",
    "Variable",
    "get_dialect",
]
