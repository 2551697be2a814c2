"""Pass declaration, registry and selection.

Presentational features are implemented as *passes*: small, idempotent
functions mutating the ``<pre>`` tree returned by the highlighting engine.
Each pass declares its intent with the ``@transformer`` decorator, which
records a name, a priority and a predicate deciding whether the pass applies
to a given block configuration and settings.

`Declaration layer`
: ``@transformer`` stores a :class:`TransformerDefinition` on the handler.

`Registry layer`
: :class:`TransformerRegistry` binds definitions into :class:`Pass` objects
  kept sorted by priority.

`Selection layer`
: :class:`TransformerSelector` filters the registry for one block. Selection
  is a pure function of the configuration and the settings.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from types import ModuleType
from typing import TYPE_CHECKING, Any, cast


if TYPE_CHECKING:  # pragma: no cover - typing only
    from bs4 import BeautifulSoup
    from bs4.element import Tag

    from codesmith.core.config import BlockConfig
    from codesmith.core.settings import HighlightSettings


@dataclass(frozen=True, slots=True)
class PassContext:
    """Information available to a pass while it mutates a block."""

    soup: BeautifulSoup
    config: BlockConfig
    settings: HighlightSettings
    code: str
    language: str
    theme: str


PassHandler = Callable[["Tag", PassContext], None]
PassPredicate = Callable[["BlockConfig", "HighlightSettings"], bool]


def _always(_config: BlockConfig, _settings: HighlightSettings) -> bool:
    return True


@dataclass(frozen=True, slots=True)
class Pass:
    """Named transformation applied to a highlighted block."""

    name: str
    priority: int
    handler: PassHandler
    predicate: PassPredicate = _always
    always: bool = False

    def applies(self, config: BlockConfig, settings: HighlightSettings) -> bool:
        """Return True when the pass should run for ``config``."""
        return bool(self.predicate(config, settings))

    def __call__(self, root: Tag, context: PassContext) -> None:
        self.handler(root, context)


@dataclass(frozen=True, slots=True)
class TransformerDefinition:
    """Descriptor installed on handler callables by the decorator."""

    name: str
    priority: int = 0
    predicate: PassPredicate = _always
    always: bool = False

    def bind(self, handler: PassHandler) -> Pass:
        """Create a concrete pass bound to ``handler``."""
        return Pass(
            name=self.name,
            priority=self.priority,
            handler=handler,
            predicate=self.predicate,
            always=self.always,
        )


def transformer(
    name: str,
    *,
    priority: int,
    when: PassPredicate = _always,
    always: bool = False,
) -> Callable[[PassHandler], PassHandler]:
    """Decorator declaring a pass.

    ``always`` marks passes that stay selectable when presentational
    transformers are disabled in the settings.
    """
    definition = TransformerDefinition(name=name, priority=priority, predicate=when, always=always)

    def decorator(handler: PassHandler) -> PassHandler:
        cast(Any, handler).__transformer__ = definition
        return handler

    return decorator


class TransformerRegistry:
    """Container holding the passes known to a pipeline."""

    def __init__(self, passes: Iterable[Pass] = ()) -> None:
        self._passes: dict[str, Pass] = {}
        for item in passes:
            self.register(item)

    def register(self, item: Pass) -> None:
        """Register a pass; names must be unique."""
        if item.name in self._passes:
            raise ValueError(f"A pass named '{item.name}' is already registered")
        self._passes[item.name] = item

    def register_handler(self, handler: PassHandler) -> Pass:
        """Register a callable decorated with ``@transformer``."""
        definition = getattr(handler, "__transformer__", None)
        if not isinstance(definition, TransformerDefinition):
            msg = "Handler must be decorated with @transformer"
            raise TypeError(msg)
        item = definition.bind(handler)
        self.register(item)
        return item

    def collect_from(self, owner: ModuleType | object) -> None:
        """Collect decorated callables from a module or object."""
        for attribute in dir(owner):
            handler = getattr(owner, attribute)
            if isinstance(getattr(handler, "__transformer__", None), TransformerDefinition):
                self.register_handler(handler)

    def passes(self) -> list[Pass]:
        """Return every pass ordered by priority, then name."""
        return sorted(self._passes.values(), key=lambda item: (item.priority, item.name))

    def get(self, name: str) -> Pass:
        """Return the pass registered under ``name``."""
        return self._passes[name]

    def __contains__(self, name: object) -> bool:
        return name in self._passes

    def __len__(self) -> int:
        return len(self._passes)

    def describe(self) -> list[dict[str, object]]:
        """Return a serialisable snapshot of the registered passes."""
        return [
            {"name": item.name, "priority": item.priority, "always": item.always}
            for item in self.passes()
        ]


class TransformerSelector:
    """Choose the passes to run for one block."""

    def __init__(self, registry: TransformerRegistry) -> None:
        self.registry = registry

    def select(self, config: BlockConfig, settings: HighlightSettings) -> list[Pass]:
        """Return the applicable passes in execution order."""
        selected: list[Pass] = []
        for item in self.registry.passes():
            if not settings.enable_transformers and not item.always:
                continue
            if item.applies(config, settings):
                selected.append(item)
        return selected


__all__ = [
    "Pass",
    "PassContext",
    "PassHandler",
    "PassPredicate",
    "TransformerDefinition",
    "TransformerRegistry",
    "TransformerSelector",
    "transformer",
]
