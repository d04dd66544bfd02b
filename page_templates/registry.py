"""Template registry: compile templates from a filesystem and execute them by name.

Each registered unit is compiled from its own page file, optionally together
with a layout and a set of include files. All files of a unit share one
namespace: blocks defined later in parse order (layout, includes, page)
fill the placeholders of earlier ones, and any file of the unit can be pulled
in by base filename with ``{% include %}`` or ``{% import %}``.

Example:
    registry = TemplateRegistry()
    registry.add_with_layout_and_includes(fs, "layout.html", "includes/*.html", "pages/*.html")
    registry.execute(output, "index.html", {"title": "Home"})
"""

import posixpath
import time
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any, TextIO

from jinja2 import DictLoader, Environment, StrictUndefined, TemplateError, Undefined
from jinja2 import Template as JinjaTemplate

from page_templates.exceptions import (
    PatternException,
    TemplateCompileException,
    TemplateExecutionException,
    TemplateNotFoundException,
)
from page_templates.filesystem import TemplateFS
from page_templates.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

TemplateFuncs = Mapping[str, Callable[..., Any]]


def get_time() -> str:
    """Return the current wall clock time as HH:MM:SS."""
    return datetime.now().strftime("%H:%M:%S")


DEFAULT_TEMPLATE_FUNCS: TemplateFuncs = MappingProxyType({"get_time": get_time})


class CompiledTemplate:
    """Opaque handle to the templates parsed together for one unit.

    Templates are held in parse order. Never mutated after construction, so a
    single instance can be executed from many threads at once.
    """

    __slots__ = ("_templates",)

    def __init__(self, templates: Mapping[str, JinjaTemplate]):
        self._templates = MappingProxyType(dict(templates))

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __repr__(self) -> str:
        return f"CompiledTemplate({list(self._templates)!r})"

    def generate(self, entry: str, data: Any) -> Iterator[str]:
        """Yield rendered chunks, starting execution from the template named ``entry``.

        Args:
            entry: Name of the template to start from
            data: Value exposed as ``data``; string keys of a mapping also become variables

        Raises:
            KeyError: If ``entry`` is not part of this compiled set
        """
        template = self._templates[entry]

        variables: dict[str, Any] = {"data": data}
        if isinstance(data, Mapping):
            variables.update({key: value for key, value in data.items() if isinstance(key, str)})

        context = template.new_context(variables)

        # Same block resolution as {% extends %} in jinja2/compiler.py: the last parsed
        # definition wins, earlier ones stay reachable through super(). Relies on
        # Context.blocks and Template.root_render_func; recheck on jinja2 upgrades.
        for other_name, other in self._templates.items():
            if other_name == entry:
                continue
            for block_name, block in other.blocks.items():
                context.blocks.setdefault(block_name, []).insert(0, block)

        try:
            yield from template.root_render_func(context)
        except Exception:
            template.environment.handle_exception()


@dataclass(frozen=True)
class TemplateUnit:
    """A compiled template registered under its base filename.

    Attributes:
        name: Base filename of the page file, extension included
        template: Compiled templates of the unit
        layout: Base filename of the layout, or None when compiled standalone
    """

    name: str
    template: CompiledTemplate
    layout: str | None = None

    @property
    def entry_point(self) -> str:
        """Name execution starts from: the layout when present, otherwise the unit itself."""
        return self.layout or self.name


def read_file_names(fsys: TemplateFS, *patterns: str) -> list[str]:
    """Return the files matching every pattern, in pattern order.

    Raises:
        PatternException: On the first pattern that matches no files
    """
    filenames: list[str] = []
    for pattern in patterns:
        filenames.extend(_glob(fsys, pattern))
    return filenames


def _glob(fsys: TemplateFS, pattern: str) -> list[str]:
    matches = fsys.glob(pattern)
    if not matches:
        log_with_context(
            logger,
            "warning",
            "Template pattern matches no files",
            pattern=pattern,
            event_type="template_pattern_empty",
        )
        raise PatternException(pattern)
    return matches


class TemplateRegistry:
    """Registry of named template units compiled from a virtual filesystem.

    Registration mutates the registry without locking and must finish before
    units are executed concurrently.
    """

    def __init__(
        self,
        template_funcs: TemplateFuncs | None = None,
        *,
        autoescape: bool = True,
        strict_undefined: bool = True,
    ):
        """Initialize an empty registry.

        Args:
            template_funcs: Functions callable from every template compiled by this
                registry. Replaces DEFAULT_TEMPLATE_FUNCS entirely when given.
            autoescape: Escape expression output in every template, whatever its extension
            strict_undefined: Raise on undefined variables and attributes at render time
        """
        funcs = DEFAULT_TEMPLATE_FUNCS if template_funcs is None else template_funcs
        self._template_funcs: TemplateFuncs = MappingProxyType(dict(funcs))
        self._units: dict[str, TemplateUnit] = {}
        self._environment = Environment(
            autoescape=autoescape,
            undefined=StrictUndefined if strict_undefined else Undefined,
        )
        self._environment.globals.update(self._template_funcs)

    @property
    def template_funcs(self) -> TemplateFuncs:
        """Read-only view of the functions available inside templates."""
        return self._template_funcs

    def __contains__(self, name: object) -> bool:
        return name in self._units

    def __len__(self) -> int:
        return len(self._units)

    def get(self, name: str) -> TemplateUnit | None:
        """Return the unit registered under ``name``, or None."""
        return self._units.get(name)

    def names(self) -> list[str]:
        """Return the sorted names of all registered units."""
        return sorted(self._units)

    def add(self, fsys: TemplateFS, *patterns: str) -> None:
        """Register every file matching ``patterns`` as a standalone template.

        Raises:
            PatternException: If a pattern matches no files. Units registered for
                earlier patterns of the same call are kept.
            TemplateCompileException: If a matched file cannot be read or parsed
        """
        self._register(fsys, patterns, layout=None, includes=[])

    def add_with_layout(self, fsys: TemplateFS, layout: str, *patterns: str) -> None:
        """Register every file matching ``patterns`` compiled together with ``layout``.

        Raises:
            PatternException: If a pattern matches no files
            TemplateCompileException: If the layout or a matched file cannot be read or parsed
        """
        self._register(fsys, patterns, layout=layout, includes=[])

    def add_with_layout_and_includes(self, fsys: TemplateFS, layout: str, includes: str, *patterns: str) -> None:
        """Register every file matching ``patterns`` compiled with ``layout`` and the ``includes`` files.

        Raises:
            PatternException: If ``includes`` or a pattern matches no files
            TemplateCompileException: If any involved file cannot be read or parsed
        """
        include_files = _glob(fsys, includes)
        self._register(fsys, patterns, layout=layout, includes=include_files)

    def execute(self, output: TextIO, name: str, data: Any = None) -> None:
        """Render the unit registered under ``name`` into ``output``.

        Chunks are written as they are produced, so ``output`` may hold partial
        content when rendering fails.

        Raises:
            TemplateNotFoundException: If no unit is registered under ``name``
            TemplateExecutionException: If the template fails while rendering
        """
        unit = self._units.get(name)
        if unit is None:
            raise TemplateNotFoundException(name)

        start = time.perf_counter()
        try:
            for chunk in unit.template.generate(unit.entry_point, data):
                output.write(chunk)
        except TemplateError as e:
            raise TemplateExecutionException(unit.name, unit.layout, str(e)) from e
        except Exception as e:
            raise TemplateExecutionException(unit.name, unit.layout, f"{type(e).__name__}: {e}") from e

        log_with_context(
            logger,
            "debug",
            "Executed template",
            template=unit.name,
            layout=unit.layout,
            duration_ms=round((time.perf_counter() - start) * 1000, 3),
            event_type="template_render",
        )

    def _register(
        self,
        fsys: TemplateFS,
        patterns: tuple[str, ...],
        layout: str | None,
        includes: list[str],
    ) -> None:
        if not patterns:
            raise ValueError("at least one template pattern is required")

        for pattern in patterns:
            for filename in _glob(fsys, pattern):
                unit = self._compile(fsys, filename, layout, includes)
                self._units[unit.name] = unit

    def _compile(self, fsys: TemplateFS, filename: str, layout: str | None, includes: list[str]) -> TemplateUnit:
        name = posixpath.basename(filename)
        layout_name = posixpath.basename(layout) if layout else None

        log_with_context(
            logger,
            "debug",
            "Register template",
            template=name,
            template_file=filename,
            layout=layout,
            event_type="template_register",
        )

        files = ([layout] if layout else []) + includes + [filename]
        sources: dict[str, str] = {}
        for path in files:
            try:
                sources[posixpath.basename(path)] = fsys.read_text(path)
            except OSError as e:
                raise self._compile_failed(filename, path, e) from e

        environment = self._environment.overlay(loader=DictLoader(sources))
        templates: dict[str, JinjaTemplate] = {}
        for path in files:
            base = posixpath.basename(path)
            try:
                templates[base] = environment.get_template(base)
            except TemplateError as e:
                raise self._compile_failed(filename, path, e) from e

        return TemplateUnit(name=name, template=CompiledTemplate(templates), layout=layout_name)

    @staticmethod
    def _compile_failed(filename: str, path: str, error: Exception) -> TemplateCompileException:
        log_with_context(
            logger,
            "error",
            "Failed to parse template",
            template_file=filename,
            source_file=path,
            error=str(error),
            error_type=type(error).__name__,
            event_type="template_compile_failed",
        )
        return TemplateCompileException(path, f"{type(error).__name__}: {error}", details={"template_file": filename})
