"""Markdown extension keeping the full fence info string as an annotation.

Python-Markdown's fenced code support only keeps the first word of the info
string. Annotated fences such as::

    ```python hl:1-3 title:"Example" fold
    ...
    ```

need the whole string, so this preprocessor replaces them with

    <pre><code class="language-python" data-annotation="python hl:1-3 ...">

stashed as raw HTML before any other block processor sees the fence.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
import re
from typing import TYPE_CHECKING

from markdown import Markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

from codesmith.core.parser import split_annotation


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .processor import CodeProcessor


FENCE_OPEN = re.compile(
    r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>[^\n]*?)[ \t]*$"
)
DEFAULT_EXTENSIONS = ("tables", "attr_list", "md_in_html")


@dataclass(slots=True)
class _Fence:
    indent: str
    char: str
    length: int
    info: str


class _AnnotatedFencePreprocessor(Preprocessor):
    """Stash fenced code blocks together with their annotation."""

    def run(self, lines: list[str]) -> list[str]:  # type: ignore[override]
        result: list[str] = []
        index = 0
        length = len(lines)

        while index < length:
            fence = self._open_fence(lines[index])
            if fence is None:
                result.append(lines[index])
                index += 1
                continue

            end = self._find_close(lines, index + 1, fence)
            if end is None:
                result.append(lines[index])
                index += 1
                continue

            body = [self._dedent(line, fence.indent) for line in lines[index + 1 : end]]
            placeholder = self.md.htmlStash.store(self._render(fence.info, body))
            result.extend(["", placeholder, ""])
            index = end + 1

        return result

    def _open_fence(self, line: str) -> _Fence | None:
        match = FENCE_OPEN.match(line)
        if match is None:
            return None
        marker = match.group("fence")
        info = match.group("info")
        if marker[0] == "`" and "`" in info:
            return None
        return _Fence(match.group("indent"), marker[0], len(marker), info)

    def _find_close(self, lines: list[str], start: int, fence: _Fence) -> int | None:
        for index in range(start, len(lines)):
            stripped = lines[index].strip()
            if (
                stripped
                and set(stripped) == {fence.char}
                and len(stripped) >= fence.length
                and len(lines[index]) - len(lines[index].lstrip(" ")) <= 3
            ):
                return index
        return None

    @staticmethod
    def _dedent(line: str, indent: str) -> str:
        if line.startswith(indent):
            return line[len(indent) :]
        return line.lstrip(" ")

    @staticmethod
    def _render(info: str, body: list[str]) -> str:
        tokens = split_annotation(info)
        code = "\n".join(body)
        if body:
            code += "\n"
        attributes = ""
        if tokens:
            attributes = (
                f' class="language-{escape(tokens[0])}"'
                f' data-annotation="{escape(info, quote=True)}"'
            )
        return f"<pre><code{attributes}>{escape(code, quote=False)}</code></pre>"


class AnnotatedFenceExtension(Extension):
    """Register the annotated fence preprocessor."""

    def extendMarkdown(self, md: Markdown) -> None:  # noqa: N802
        processor = _AnnotatedFencePreprocessor(md)
        # Same slot as the built-in fenced_code preprocessor.
        md.preprocessors.register(processor, "codesmith_fences", 25)


def makeExtension(  # noqa: N802
    **kwargs: object,
) -> AnnotatedFenceExtension:  # pragma: no cover - Markdown hook
    return AnnotatedFenceExtension(**kwargs)


def markdown_to_html(text: str, *, extensions: tuple[str, ...] = DEFAULT_EXTENSIONS) -> str:
    """Render ``text`` with the annotated fence extension enabled."""
    md = Markdown(extensions=[AnnotatedFenceExtension(), *extensions])
    return md.convert(text)


async def render_markdown(
    text: str,
    processor: CodeProcessor,
    *,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
) -> str:
    """Render ``text`` to HTML and highlight every code fragment in it."""
    html = markdown_to_html(text, extensions=extensions)
    return await processor.process_html(html)


__all__ = [
    "AnnotatedFenceExtension",
    "DEFAULT_EXTENSIONS",
    "makeExtension",
    "markdown_to_html",
    "render_markdown",
]
