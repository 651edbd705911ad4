"""Schema adapter registry and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Optional, Sequence, Set

from ..extract.program import TypeRef
from ..logging import get_logger
from .base import MarkerSchemaAdapter, SchemaAdapter, SchemaExtraction
from .builtin import ArkTypeAdapter, TypeBoxAdapter, ValibotAdapter, ZodAdapter

_ENTRY_POINT_GROUP = "doccov.schema_adapters"

# Registration order is the tie-break when more than one adapter matches.
_BUILTIN_FACTORIES: dict[str, Callable[[], SchemaAdapter]] = {
    "zod": ZodAdapter,
    "arktype": ArkTypeAdapter,
    "typebox": TypeBoxAdapter,
    "valibot": ValibotAdapter,
}


class SchemaAdapterRegistry:
    """Ordered list of schema adapters; the first matching adapter wins."""

    def __init__(self, adapters: Iterable[SchemaAdapter] = ()) -> None:
        self._adapters: List[SchemaAdapter] = []
        self.logger = get_logger("adapters")
        for adapter in adapters:
            self.register(adapter)

    @classmethod
    def default(cls) -> "SchemaAdapterRegistry":
        return cls(factory() for factory in _BUILTIN_FACTORIES.values())

    @property
    def adapters(self) -> List[SchemaAdapter]:
        return list(self._adapters)

    def register(self, adapter: SchemaAdapter, index: Optional[int] = None) -> None:
        """Add ``adapter``; ``index`` places it ahead of existing adapters."""
        if not isinstance(adapter, SchemaAdapter):
            raise TypeError("Registry entries must be SchemaAdapter instances")
        if any(existing.id == adapter.id for existing in self._adapters):
            raise ValueError(f"Schema adapter '{adapter.id}' is already registered")
        if index is None:
            self._adapters.append(adapter)
        else:
            self._adapters.insert(index, adapter)

    def find(self, type_ref: TypeRef) -> Optional[SchemaAdapter]:
        for adapter in self._adapters:
            if adapter.matches(type_ref):
                return adapter
        return None

    def extract(self, type_ref: TypeRef) -> Optional[SchemaExtraction]:
        adapter = self.find(type_ref)
        if adapter is None:
            return None
        output = adapter.extract_output_type(type_ref)
        if output is None:
            self.logger.debug("Adapter %s matched %s but exposed no output type", adapter.id, type_ref.text)
            return None
        return SchemaExtraction(
            adapter_id=adapter.id,
            output=output,
            input=adapter.extract_input_type(type_ref),
        )

    def __len__(self) -> int:
        return len(self._adapters)


def discover_adapters(enabled: Sequence[str] | None = None) -> SchemaAdapterRegistry:
    """Return a registry of built-in and plugin adapters, honoring enabled ids."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    registry = SchemaAdapterRegistry()
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], SchemaAdapter]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, SchemaAdapter):
            raise TypeError(f"Adapter factory for '{name}' did not return a SchemaAdapter instance")
        registry.register(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - broken plugin
            raise RuntimeError(f"Failed to load schema adapter entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> SchemaAdapter:
            return _coerce_adapter(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown schema adapters requested: {missing}")

    return registry


def _coerce_adapter(obj: object) -> SchemaAdapter:
    if isinstance(obj, SchemaAdapter):
        return obj
    if isinstance(obj, type) and issubclass(obj, SchemaAdapter):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, SchemaAdapter):
            return instance
    raise TypeError("Schema adapter entry point must be a SchemaAdapter subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "ArkTypeAdapter",
    "MarkerSchemaAdapter",
    "SchemaAdapter",
    "SchemaAdapterRegistry",
    "SchemaExtraction",
    "TypeBoxAdapter",
    "ValibotAdapter",
    "ZodAdapter",
    "discover_adapters",
]
