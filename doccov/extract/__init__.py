"""TypeScript API-surface extraction."""

from .extractor import ExtractResult, extract, find_package_root, read_package_meta
from .program import Program, TypeRef

__all__ = ["ExtractResult", "Program", "TypeRef", "extract", "find_package_root", "read_package_meta"]
