"""Markdown → HTML rendering for block previews, the preview pane and export."""
from __future__ import annotations

import html
import logging
import re
from functools import lru_cache
from typing import Callable, Optional

import markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor
from markdown.preprocessors import Preprocessor
from pygments.formatters.html import HtmlFormatter
from pygments.util import ClassNotFound

from recordnow.app import config

logger = logging.getLogger(__name__)

DiagramRenderer = Callable[[str], str]

MERMAID_FENCE = re.compile(
    r"^[ \t]*```[ \t]*mermaid[ \t]*\n(?P<code>.*?)(?<=\n)[ \t]*```[ \t]*$",
    re.MULTILINE | re.DOTALL,
)


def placeholder_diagram(source: str) -> str:
    """Default diagram collaborator: keep the definition visible, tagged for a renderer."""
    return f'<div class="mermaid"><pre>{html.escape(source.rstrip())}</pre></div>'


class MathProcessor(InlineProcessor):
    def __init__(self, pattern, md, mode):
        super().__init__(pattern, md)
        self.mode = mode

    def handleMatch(self, m, data):  # type: ignore[override]
        tex = html.escape(m.group(1))
        if self.mode == "block":
            placeholder = self.md.htmlStash.store(f'<div class="math" data-display="true">{tex}</div>')
        else:
            placeholder = self.md.htmlStash.store(f'<span class="math" data-display="false">{tex}</span>')
        return placeholder, m.start(0), m.end(0)


class MathExtension(Extension):
    """Keep ``$…$`` and ``$$…$$`` spans verbatim so emphasis rules never touch TeX."""

    def extendMarkdown(self, md):  # type: ignore[override]
        md.inlinePatterns.register(
            MathProcessor(r"(?<!\\)\$\$([\s\S]+?)(?<!\\)\$\$", md, "block"), "math_block", 185
        )
        md.inlinePatterns.register(
            MathProcessor(r"(?<!\\)\$([^$\n]+?)(?<!\\)\$", md, "inline"), "math_inline", 184
        )


class MermaidPreprocessor(Preprocessor):
    def __init__(self, md, renderer: DiagramRenderer):
        super().__init__(md)
        self.renderer = renderer

    def run(self, lines):  # type: ignore[override]
        text = "\n".join(lines)

        def repl(match: re.Match[str]) -> str:
            placeholder = self.md.htmlStash.store(self.renderer(match.group("code")))
            return f"\n{placeholder}\n"

        return MERMAID_FENCE.sub(repl, text).split("\n")


class MermaidExtension(Extension):
    """Route ```` ```mermaid ```` fences to a diagram renderer instead of highlighting."""

    def __init__(self, renderer: Optional[DiagramRenderer] = None, **kwargs):
        self.renderer = renderer or placeholder_diagram
        super().__init__(**kwargs)

    def extendMarkdown(self, md):  # type: ignore[override]
        # after whitespace normalization (30), before fenced_code (25) claims the fence
        md.preprocessors.register(MermaidPreprocessor(md, self.renderer), "mermaid_fence", 28)


def build_markdown(diagram_renderer: Optional[DiagramRenderer] = None) -> markdown.Markdown:
    return markdown.Markdown(
        extensions=[
            MermaidExtension(diagram_renderer),
            "fenced_code",
            "tables",
            "codehilite",
            "sane_lists",
            MathExtension(),
        ],
        extension_configs={"codehilite": {"guess_lang": False, "css_class": "codehilite"}},
    )


def render_markdown(text: str, diagram_renderer: Optional[DiagramRenderer] = None) -> str:
    """Render a Markdown fragment to an HTML body fragment. Pure; no shared state."""
    return build_markdown(diagram_renderer).convert(text or "")


@lru_cache(maxsize=8)
def _style_defs(style_name: str) -> str:
    try:
        formatter = HtmlFormatter(style=style_name)
    except ClassNotFound:
        logger.warning("Unknown Pygments style %s; using default", style_name)
        formatter = HtmlFormatter(style="default")
    return formatter.get_style_defs(".codehilite")


def pygments_css(style_name: Optional[str] = None) -> str:
    """Stylesheet for highlighted code; built once per style name."""
    return _style_defs(style_name or config.load_pygments_style())
