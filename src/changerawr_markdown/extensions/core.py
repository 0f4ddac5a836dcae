"""Built-in markdown grammar, expressed as extensions.

Block extensions: heading, thematic-break, code-block, blockquote, list.
Inline extensions: escape, code-span, line-break, html, image, link,
emphasis, strikethrough.

Each extension pairs its parse rules with the render rules for the token
kinds it produces, so the built-in grammar registers exactly like a custom
extension does.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from changerawr_markdown.lexer.classifiers import calc_indent, closes_fence, parse_fence
from changerawr_markdown.lexer.modes import BlockState
from changerawr_markdown.renderers.html import attributes, safe_href
from changerawr_markdown.rules import (
    PRIORITY_CONTAINER,
    PRIORITY_DEFAULT,
    PRIORITY_HIGH,
    Extension,
    ParseRule,
    ProduceFn,
    RenderRule,
    RuleLevel,
)
from changerawr_markdown.tokens import (
    CodeBlockAttrs,
    HeadingAttrs,
    ImageAttrs,
    LinkAttrs,
    ListAttrs,
    ListItemAttrs,
    Token,
    TokenKind,
    text_token,
)
from changerawr_markdown.utils.text import html_escape

if TYPE_CHECKING:
    from changerawr_markdown.parser import Parser

_NONE = frozenset({BlockState.NONE})


# =============================================================================
# Headings and thematic breaks
# =============================================================================

_HEADING = re.compile(r"[ \t]{0,3}(#{1,6})(?:[ \t]+([^\n]*?))?(?:[ \t]+#+)?[ \t]*(?:\n|$)")
_THEMATIC_BREAK = re.compile(
    r"[ \t]{0,3}(?:(?:\*[ \t]*){3,}|(?:-[ \t]*){3,}|(?:_[ \t]*){3,})(?:\n|$)"
)


def _produce_heading(match: re.Match[str], parser: Parser) -> Token:
    level = len(match.group(1))
    content = (match.group(2) or "").strip()
    return Token(
        TokenKind.HEADING,
        match.group(0),
        content,
        children=parser.parse_inline(content),
        attrs=HeadingAttrs(level=level, slug=parser.unique_slug(content)),
    )


def _render_heading(token: Token, child_html: str) -> str:
    attrs = token.attrs
    if not isinstance(attrs, HeadingAttrs):
        return html_escape(token.raw)
    return f'<h{attrs.level} id="{html_escape(attrs.slug)}">{child_html}</h{attrs.level}>\n'


def heading_extension() -> Extension:
    return Extension(
        name="heading",
        parse_rules=(
            ParseRule("heading", _HEADING, _produce_heading, PRIORITY_DEFAULT, states=_NONE),
        ),
        render_rules=(RenderRule(TokenKind.HEADING, _render_heading),),
    )


def thematic_break_extension() -> Extension:
    return Extension(
        name="thematic-break",
        parse_rules=(
            ParseRule(
                "thematic_break",
                _THEMATIC_BREAK,
                lambda match, parser: Token(TokenKind.THEMATIC_BREAK, match.group(0)),
                PRIORITY_DEFAULT,
                states=_NONE,
            ),
        ),
        render_rules=(RenderRule(TokenKind.THEMATIC_BREAK, lambda token, _: "<hr />\n"),),
    )


# =============================================================================
# Fenced code
# =============================================================================

# A fence candidate runs from the opening line to the closing line, or to
# the end of input when the fence is never closed.
_FENCE_CANDIDATE = re.compile(r"[^\n]*\n?[\s\S]*")


def _produce_code_block(match: re.Match[str], parser: Parser) -> Token | None:
    raw = match.group(0)
    first, _, rest = raw.partition("\n")
    fence = parse_fence(first)
    if fence is None:
        return None
    fence_char, fence_count, info = fence

    body = rest.splitlines(keepends=True)
    closed = bool(body) and closes_fence(body[-1].rstrip("\n"), fence_char, fence_count)
    if closed:
        body.pop()

    # Content lines lose up to the opening fence's indentation.
    fence_indent = calc_indent(first)[0]
    if fence_indent:
        body = [_strip_columns(line, fence_indent) for line in body]

    language = info.split()[0] if info else None
    return Token(
        TokenKind.CODE_BLOCK,
        raw,
        "".join(body),
        attrs=CodeBlockAttrs(language=language, closed=closed),
    )


def _strip_columns(line: str, count: int) -> str:
    indent, start = calc_indent(line)
    if indent <= count:
        return line[start:]
    stripped = 0
    pos = 0
    while stripped < count and line[pos] in " \t":
        stripped += 1 if line[pos] == " " else 4 - (stripped % 4)
        pos += 1
    return line[pos:]


def _render_code_block(token: Token, child_html: str) -> str:
    attrs = token.attrs
    if not isinstance(attrs, CodeBlockAttrs):
        return html_escape(token.raw)
    css = f' class="language-{html_escape(attrs.language)}"' if attrs.language else ""
    code = token.content
    if code and not code.endswith("\n"):
        code += "\n"
    return f"<pre><code{css}>{html_escape(code)}</code></pre>\n"


def code_block_extension() -> Extension:
    return Extension(
        name="code-block",
        parse_rules=(
            ParseRule(
                "code_block",
                _FENCE_CANDIDATE,
                _produce_code_block,
                PRIORITY_HIGH,
                states=frozenset({BlockState.IN_CODE_FENCE}),
            ),
        ),
        render_rules=(RenderRule(TokenKind.CODE_BLOCK, _render_code_block),),
    )


# =============================================================================
# Block quotes
# =============================================================================

_QUOTE_CANDIDATE = re.compile(r"[ \t]{0,3}>[\s\S]*")
_QUOTE_PREFIX = re.compile(r"[ \t]{0,3}> ?")


def _strip_quote_marker(line: str) -> str:
    marker = _QUOTE_PREFIX.match(line)
    return line[marker.end() :] if marker is not None else line


def _produce_blockquote(match: re.Match[str], parser: Parser) -> Token:
    raw = match.group(0)
    inner = "\n".join(_strip_quote_marker(line) for line in raw.split("\n"))
    return Token(TokenKind.BLOCKQUOTE, raw, children=parser.parse_blocks(inner))


def blockquote_extension() -> Extension:
    return Extension(
        name="blockquote",
        parse_rules=(
            ParseRule(
                "blockquote",
                _QUOTE_CANDIDATE,
                _produce_blockquote,
                PRIORITY_CONTAINER,
                states=frozenset({BlockState.IN_BLOCKQUOTE}),
            ),
        ),
        render_rules=(
            RenderRule(
                TokenKind.BLOCKQUOTE,
                lambda token, child_html: f"<blockquote>\n{child_html}</blockquote>\n",
            ),
        ),
    )


# =============================================================================
# Lists
# =============================================================================

_LIST_CANDIDATE = re.compile(r"[ \t]{0,3}(?:[-*+]|\d{1,9}[.)])(?=[ \t\n]|$)[\s\S]*")
_ITEM_MARKER = re.compile(r"([ \t]*)(?:([-*+])|(\d{1,9})([.)]))(?:([ \t]+)|$)")
_TASK_MARKER = re.compile(r"\[([ xX])\](?:[ \t]+|$)")


def _produce_list(match: re.Match[str], parser: Parser) -> Token | None:
    """Group list lines into items, then parse each item's body as blocks.

    A marker indented less than two columns past the first marker starts a
    sibling item; deeper markers belong to the current item and become a
    nested list when its body is parsed. A change of marker type ends the
    list; the rest of the candidate starts a new one.
    """
    raw = match.group(0)
    lines = raw.split("\n")
    first = _ITEM_MARKER.match(lines[0])
    if first is None:
        return None

    base_indent = calc_indent(first.group(1))[0]
    ordered = first.group(3) is not None
    marker = first.group(4) if ordered else first.group(2)

    items: list[list[str]] = []
    content_indent = 0
    consumed = 0

    for line in lines:
        item = _ITEM_MARKER.match(line)
        indent = calc_indent(line)[0]
        if item is not None and indent < base_indent + 2 and line.strip():
            item_ordered = item.group(3) is not None
            item_marker = item.group(4) if item_ordered else item.group(2)
            if items and (item_ordered != ordered or item_marker != marker):
                break
            spacing = item.group(5)
            marker_end = item.start(5) if spacing else item.end()
            gap = len(spacing.expandtabs(4)) if spacing else 1
            # Five or more spaces after the marker: content starts one column after it.
            content_indent = len(line[:marker_end].expandtabs(4)) + (gap if gap <= 4 else 1)
            items.append([line[item.end() :]])
        elif items:
            items[-1].append(_strip_columns(line, content_indent) if line.strip() else "")
        consumed += len(line) + 1

    consumed = min(consumed, len(raw))
    if not items or consumed == 0:
        return None

    tight = _is_tight(items)
    children = tuple(_list_item(parser, item_lines, tight) for item_lines in items)
    start = int(first.group(3)) if ordered else 1
    return Token(
        TokenKind.LIST,
        raw[:consumed],
        children=children,
        attrs=ListAttrs(ordered=ordered, start=start, tight=tight),
    )


def _is_tight(items: list[list[str]]) -> bool:
    last = len(items) - 1
    for index, item_lines in enumerate(items):
        lines = list(item_lines)
        trailing_blank = False
        while lines and not lines[-1].strip():
            lines.pop()
            trailing_blank = True
        if trailing_blank and index != last:
            return False
        if any(not line.strip() for line in lines):
            return False
    return True


def _list_item(parser: Parser, item_lines: list[str], tight: bool) -> Token:
    body = "\n".join(item_lines)
    checked: bool | None = None
    task = _TASK_MARKER.match(body)
    if task is not None:
        checked = task.group(1) in "xX"
        body = body[task.end() :]

    children = parser.parse_blocks(body)
    if tight:
        flat: list[Token] = []
        for child in children:
            if child.kind == TokenKind.PARAGRAPH:
                flat.extend(child.children)
            else:
                flat.append(child)
        children = tuple(flat)

    return Token(
        TokenKind.LIST_ITEM,
        "\n".join(item_lines),
        children=children,
        attrs=ListItemAttrs(checked=checked),
    )


def _render_list(token: Token, child_html: str) -> str:
    attrs = token.attrs
    if not isinstance(attrs, ListAttrs):
        return html_escape(token.raw)
    if not attrs.ordered:
        return f"<ul>\n{child_html}</ul>\n"
    start = f' start="{attrs.start}"' if attrs.start != 1 else ""
    return f"<ol{start}>\n{child_html}</ol>\n"


def _render_list_item(token: Token, child_html: str) -> str:
    attrs = token.attrs
    checked = attrs.checked if isinstance(attrs, ListItemAttrs) else None
    if checked is None:
        return f"<li>{child_html}</li>\n"
    box = '<input type="checkbox" disabled checked /> ' if checked else (
        '<input type="checkbox" disabled /> '
    )
    return f'<li class="task-list-item">{box}{child_html}</li>\n'


def list_extension() -> Extension:
    return Extension(
        name="list",
        parse_rules=(
            ParseRule(
                "list",
                _LIST_CANDIDATE,
                _produce_list,
                PRIORITY_CONTAINER,
                states=frozenset({BlockState.IN_LIST}),
            ),
        ),
        render_rules=(
            RenderRule(TokenKind.LIST, _render_list),
            RenderRule(TokenKind.LIST_ITEM, _render_list_item),
        ),
    )


# =============================================================================
# Inline: escapes, code spans, line breaks, raw HTML
# =============================================================================

_ESCAPE = re.compile(r"\\([!-/:-@\[-`{-~])")
# Only the first space of a run can start a break, so runs are scanned once.
_LINE_BREAK = re.compile(r"(?:\\|(?<! ) {2,})\n")
_CODE_SPAN_OPEN = re.compile(r"`+(?!`)")
# A closing run must have exactly the opener's length.
_BACKTICK_RUN = re.compile(r"(?<!`)`+(?!`)")
_INLINE_HTML = re.compile(
    r"<(?:[A-Za-z][A-Za-z0-9-]*(?:\s[^<>]*)?/?|/[A-Za-z][A-Za-z0-9-]*\s*"
    # Comments stop at the next opener, so unclosed ones are scanned once.
    r"|!--(?:(?!<!--)[\s\S])*?--)>"
)


def _produce_code_span(match: re.Match[str], parser: Parser) -> Token | None:
    text = match.string
    length = match.end() - match.start()
    close = parser.delimiters(text).next_closer(_BACKTICK_RUN, match.end() + 1, length)
    if close is None:
        return None
    code = text[match.end() : close].replace("\n", " ")
    if len(code) > 2 and code[0] == " " and code[-1] == " " and code.strip():
        code = code[1:-1]
    return Token(TokenKind.CODE_SPAN, text[match.start() : close + length], code)


def escape_extension() -> Extension:
    return Extension(
        name="escape",
        parse_rules=(
            ParseRule(
                "escape",
                _ESCAPE,
                lambda match, parser: text_token(match.group(1), raw=match.group(0)),
                PRIORITY_HIGH,
                level=RuleLevel.INLINE,
                triggers=frozenset("\\"),
            ),
        ),
    )


def code_span_extension() -> Extension:
    return Extension(
        name="code-span",
        parse_rules=(
            ParseRule(
                "code_span",
                _CODE_SPAN_OPEN,
                _produce_code_span,
                PRIORITY_HIGH,
                level=RuleLevel.INLINE,
                triggers=frozenset("`"),
            ),
        ),
        render_rules=(
            RenderRule(
                TokenKind.CODE_SPAN,
                lambda token, _: f"<code>{html_escape(token.content)}</code>",
            ),
        ),
    )


def line_break_extension() -> Extension:
    return Extension(
        name="line-break",
        parse_rules=(
            ParseRule(
                "line_break",
                _LINE_BREAK,
                lambda match, parser: Token(TokenKind.LINE_BREAK, match.group(0)),
                PRIORITY_HIGH,
                level=RuleLevel.INLINE,
                triggers=frozenset("\\ "),
            ),
        ),
        render_rules=(RenderRule(TokenKind.LINE_BREAK, lambda token, _: "<br />\n"),),
    )


def html_extension() -> Extension:
    """Raw inline HTML, passed through for the sanitizer to judge."""
    return Extension(
        name="html",
        parse_rules=(
            ParseRule(
                "html",
                _INLINE_HTML,
                lambda match, parser: Token(TokenKind.HTML, match.group(0), match.group(0)),
                PRIORITY_DEFAULT,
                level=RuleLevel.INLINE,
                triggers=frozenset("<"),
            ),
        ),
        render_rules=(RenderRule(TokenKind.HTML, lambda token, _: token.content),),
    )


# =============================================================================
# Inline: links and images
# =============================================================================

# Destinations allow one level of balanced parentheses and stop at any
# other parenthesis, so an unclosed link fails before the next one starts.
_DESTINATION = (
    r"\(\s*(<[^<>\n]*>|(?:[^\s()]|\([^\s()]*\))*)(?:\s+\"([^\"\n]*)\")?\s*\)"
)
_IMAGE = re.compile(r"!\[([^\[\]\n]*)\]" + _DESTINATION)
# Labels starting with a directive keyword are never links; with CUM
# disabled they stay literal text.
_LINK = re.compile(
    r"\[(?!button:|embed:)((?:\\[\[\]]|[^\[\]\n]|\[[^\[\]\n]*\])*)\]" + _DESTINATION
)


def _destination(value: str) -> str:
    if value.startswith("<") and value.endswith(">"):
        return value[1:-1]
    return value


def _produce_link(match: re.Match[str], parser: Parser) -> Token:
    label = match.group(1)
    return Token(
        TokenKind.LINK,
        match.group(0),
        label,
        children=parser.parse_inline(label),
        attrs=LinkAttrs(url=_destination(match.group(2)), title=match.group(3)),
    )


def _render_link(token: Token, child_html: str) -> str:
    attrs = token.attrs
    if not isinstance(attrs, LinkAttrs):
        return html_escape(token.raw)
    href = safe_href(attrs.url)
    if href is None:
        return child_html
    title = html_escape(attrs.title) if attrs.title else None
    return f"<a{attributes((('href', href), ('title', title)))}>{child_html}</a>"


def _produce_image(match: re.Match[str], parser: Parser) -> Token:
    alt = match.group(1)
    return Token(
        TokenKind.IMAGE,
        match.group(0),
        alt,
        attrs=ImageAttrs(url=_destination(match.group(2)), alt=alt, title=match.group(3)),
    )


def _render_image(token: Token, child_html: str) -> str:
    attrs = token.attrs
    if not isinstance(attrs, ImageAttrs):
        return html_escape(token.raw)
    src = safe_href(attrs.url)
    if src is None:
        return html_escape(attrs.alt)
    title = html_escape(attrs.title) if attrs.title else None
    pairs = (("src", src), ("alt", html_escape(attrs.alt)), ("title", title))
    return f"<img{attributes(pairs)} />"


def link_extension() -> Extension:
    return Extension(
        name="link",
        parse_rules=(
            ParseRule(
                "link",
                _LINK,
                _produce_link,
                PRIORITY_DEFAULT,
                level=RuleLevel.INLINE,
                triggers=frozenset("["),
            ),
        ),
        render_rules=(RenderRule(TokenKind.LINK, _render_link),),
    )


def image_extension() -> Extension:
    return Extension(
        name="image",
        parse_rules=(
            ParseRule(
                "image",
                _IMAGE,
                _produce_image,
                PRIORITY_DEFAULT,
                level=RuleLevel.INLINE,
                triggers=frozenset("!"),
            ),
        ),
        render_rules=(RenderRule(TokenKind.IMAGE, _render_image),),
    )


# =============================================================================
# Inline: emphasis and strikethrough
# =============================================================================

# Openers carry the flanking checks; closers are found through the parser's
# DelimiterIndex so each opener costs a binary search, not a rescan.
_STRONG_EMPHASIS_OPEN = re.compile(r"\*\*\*(?![\s*])|(?<!\w)___(?![\s_])")
_STRONG_OPEN = re.compile(r"\*\*(?![\s*])|(?<!\w)__(?![\s_])")
_EMPHASIS_OPEN = re.compile(r"\*(?![\s*])|(?<!\w)_(?![\s_])")
_STRIKETHROUGH_OPEN = re.compile(r"~~(?![\s~])")

# A closer is a whole delimiter run of the opener's length that does not
# follow whitespace.
_CLOSERS: dict[str, re.Pattern[str]] = {
    "*": re.compile(r"(?<![\s*])\*+(?!\*)"),
    "_": re.compile(r"(?<![\s_])_+(?!\w)"),
}
_STRIKETHROUGH_CLOSE = re.compile(r"(?<![\s~])~~")


def _closed_span(
    match: re.Match[str],
    parser: Parser,
    closer: re.Pattern[str],
    length: int | None,
) -> tuple[str, str] | None:
    """Return (raw, inner) up to the first closer, or None if unclosed."""
    text = match.string
    close = parser.delimiters(text).next_closer(closer, match.end() + 1, length)
    if close is None:
        return None
    end = close + (length if length is not None else len(match.group(0)))
    return text[match.start() : end], text[match.end() : close]


def _emphasis_span(match: re.Match[str], parser: Parser) -> tuple[str, str] | None:
    opener = match.group(0)
    return _closed_span(match, parser, _CLOSERS[opener[0]], len(opener))


def _delimited(kind: TokenKind) -> ProduceFn:
    def produce(match: re.Match[str], parser: Parser) -> Token | None:
        span = _emphasis_span(match, parser)
        if span is None:
            return None
        raw, inner = span
        return Token(kind, raw, inner, children=parser.parse_inline(inner))

    return produce


def _produce_strong_emphasis(match: re.Match[str], parser: Parser) -> Token | None:
    span = _emphasis_span(match, parser)
    if span is None:
        return None
    raw, inner = span
    emphasis = Token(TokenKind.EMPHASIS, raw[2:-2], inner, children=parser.parse_inline(inner))
    return Token(TokenKind.STRONG, raw, inner, children=(emphasis,))


def _produce_strikethrough(match: re.Match[str], parser: Parser) -> Token | None:
    span = _closed_span(match, parser, _STRIKETHROUGH_CLOSE, None)
    if span is None:
        return None
    raw, inner = span
    return Token(TokenKind.STRIKETHROUGH, raw, inner, children=parser.parse_inline(inner))


def emphasis_extension() -> Extension:
    triggers = frozenset("*_")
    return Extension(
        name="emphasis",
        parse_rules=(
            ParseRule(
                "strong_emphasis",
                _STRONG_EMPHASIS_OPEN,
                _produce_strong_emphasis,
                PRIORITY_DEFAULT,
                level=RuleLevel.INLINE,
                triggers=triggers,
            ),
            ParseRule(
                "strong",
                _STRONG_OPEN,
                _delimited(TokenKind.STRONG),
                PRIORITY_DEFAULT,
                level=RuleLevel.INLINE,
                triggers=triggers,
            ),
            ParseRule(
                "emphasis",
                _EMPHASIS_OPEN,
                _delimited(TokenKind.EMPHASIS),
                PRIORITY_DEFAULT,
                level=RuleLevel.INLINE,
                triggers=triggers,
            ),
        ),
        render_rules=(
            RenderRule(TokenKind.STRONG, lambda token, html: f"<strong>{html}</strong>"),
            RenderRule(TokenKind.EMPHASIS, lambda token, html: f"<em>{html}</em>"),
        ),
    )


def strikethrough_extension() -> Extension:
    return Extension(
        name="strikethrough",
        parse_rules=(
            ParseRule(
                "strikethrough",
                _STRIKETHROUGH_OPEN,
                _produce_strikethrough,
                PRIORITY_DEFAULT,
                level=RuleLevel.INLINE,
                triggers=frozenset("~"),
            ),
        ),
        render_rules=(
            RenderRule(TokenKind.STRIKETHROUGH, lambda token, html: f"<del>{html}</del>"),
        ),
    )


def core_extensions() -> tuple[Extension, ...]:
    """Built-in grammar in registration order."""
    return (
        code_block_extension(),
        heading_extension(),
        thematic_break_extension(),
        blockquote_extension(),
        list_extension(),
        escape_extension(),
        code_span_extension(),
        line_break_extension(),
        html_extension(),
        image_extension(),
        link_extension(),
        emphasis_extension(),
        strikethrough_extension(),
    )


__all__ = [
    "blockquote_extension",
    "code_block_extension",
    "code_span_extension",
    "core_extensions",
    "emphasis_extension",
    "escape_extension",
    "heading_extension",
    "html_extension",
    "image_extension",
    "line_break_extension",
    "link_extension",
    "list_extension",
    "strikethrough_extension",
    "thematic_break_extension",
]
