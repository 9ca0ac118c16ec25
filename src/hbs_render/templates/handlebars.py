"""
Thin wrapper around the pybars Handlebars compiler.
"""
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from pybars import Compiler

logger = logging.getLogger(__name__)

Helper = Callable[..., Any]


class CompiledTemplate:
    """
    A compiled Handlebars template.

    Helpers are captured when the template is compiled; helpers registered
    later only become visible once the template is recompiled. Partials are
    looked up in the engine's registry at render time.
    """

    def __init__(self, name: str, render_fn: Callable[..., Any], helpers: Mapping[str, Helper], partials: Mapping[str, Any]):
        self.name = name
        self._render_fn = render_fn
        self._helpers = dict(helpers)
        self._partials = partials

    @property
    def helpers(self) -> Dict[str, Helper]:
        return dict(self._helpers)

    def __call__(self, context: Optional[Mapping[str, Any]] = None) -> str:
        return str(self._render_fn(
            dict(context or {}),
            helpers=self._helpers,
            partials=self._partials,
        ))

    def __repr__(self) -> str:
        return f"CompiledTemplate({self.name!r})"


class HandlebarsEngine:
    """Owns a compiler plus the helper and partial registries it renders with."""

    def __init__(self):
        self.compiler = Compiler()
        self.helpers: Dict[str, Helper] = {}
        self.partials: Dict[str, Any] = {}

    def compile(self, source: str, name: str = "<string>") -> CompiledTemplate:
        """
        Compile template source.

        Syntax errors raised by pybars propagate unchanged.
        """
        render_fn = self.compiler.compile(source)
        return CompiledTemplate(name, render_fn, self.helpers, self.partials)

    def register_helper(self, name: str, helper: Helper) -> None:
        """Register a helper called as ``helper(this, *args)``."""
        if name in self.helpers:
            logger.debug(f"Replacing helper {name}")
        self.helpers[name] = helper

    def register_partial(self, name: str, source: str) -> None:
        """Compile and register a partial included as ``{{> name}}``."""
        self.partials[name] = self.compiler.compile(source)
