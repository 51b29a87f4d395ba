"""Autolink templates, detection and rendering."""

from .dynamic import CrossRepoAutolink
from .engine import AutolinksEngine, compile_template
from .models import (
    NUM_PLACEHOLDER,
    AnyAutolinkTemplate,
    Autolink,
    AutolinkTemplate,
    DynamicAutolinkTemplate,
    RenderContext,
)

__all__ = [
    "AutolinksEngine",
    "compile_template",
    "CrossRepoAutolink",
    "NUM_PLACEHOLDER",
    "AnyAutolinkTemplate",
    "Autolink",
    "AutolinkTemplate",
    "DynamicAutolinkTemplate",
    "RenderContext",
]
