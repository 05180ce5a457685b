"""
Placeholder Templating Module

A small template language with plain, optional, nullable and conditional
placeholders, used to render every code snippet and source file the
generator emits.
"""

from .template import Template, Variable, VariableKind
from .tokenizer import ConditionalNode, PlaceholderNode, TextNode, tokenize

__all__ = [
    "ConditionalNode",
    "PlaceholderNode",
    "Template",
    "TextNode",
    "Variable",
    "VariableKind",
    "tokenize",
]
