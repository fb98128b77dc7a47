"""Markdown to HTML conversion for chat display."""

import re
from collections.abc import Callable

CODE_BLOCK_RE = re.compile(r"```([\w+-]*)[^\S\n]*\n?([\s\S]*?)```")
INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
SAFE_HREF_RE = re.compile(r"^(https?:|mailto:)", re.IGNORECASE)
PLACEHOLDER = "\x00{}\x00"

HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
}


def _escape(text: str) -> str:
    return "".join(HTML_ESCAPES.get(char, char) for char in text)


def _render_code_block(match: re.Match[str]) -> str:
    language = match.group(1)
    body = match.group(2).rstrip("\n")
    css = f' class="language-{language}"' if language else ""
    return (
        '<pre class="my-4 overflow-x-auto rounded-xl border border-[#3A3A3A] bg-[#1B1B1B]">'
        f'<code{css} style="display:block;padding:1rem;white-space:pre">{body}</code></pre>'
    )


def _render_inline_code(match: re.Match[str]) -> str:
    return (
        '<code class="px-1 py-0.5 rounded bg-[#1E1E1E] border border-[#3A3A3A]">'
        f"{match.group(1)}</code>"
    )


def _render_link(match: re.Match[str]) -> str:
    label, href = match.group(1), match.group(2)
    # Only web and mail links become anchors; anything else stays as its label
    if not SAFE_HREF_RE.match(href):
        return label
    return (
        f'<a href="{href}" class="underline" target="_blank" '
        f'rel="noopener noreferrer">{label}</a>'
    )


def _render_lists(text: str, pattern: str, tag: str, css: str) -> str:
    lines = text.split("\n")
    in_list = False
    result = []
    for line in lines:
        stripped = line.strip()
        if re.match(pattern, stripped):
            if not in_list:
                result.append(f'<{tag} class="{css}">')
                in_list = True
            item = re.sub(pattern, "", stripped)
            result.append(f"<li>{item}</li>")
        else:
            if in_list:
                result.append(f"</{tag}>")
                in_list = False
            result.append(line)
    if in_list:
        result.append(f"</{tag}>")
    return "\n".join(result)


def _render_blockquotes(text: str) -> str:
    lines = text.split("\n")
    quoted: list[str] = []
    result = []

    def close() -> None:
        if quoted:
            result.append(
                '<blockquote class="border-l-4 border-[#3A3A3A] pl-4 my-3 text-[#D6D6D6]">'
                + "<br>".join(quoted)
                + "</blockquote>"
            )
            quoted.clear()

    for line in lines:
        # ">" was escaped to "&gt;" before this pass
        match = re.match(r"^\s*&gt;\s?(.*)$", line)
        if match:
            quoted.append(match.group(1))
        else:
            close()
            result.append(line)
    close()
    return "\n".join(result)


def markdown_to_html(text: str) -> str:
    """Convert markdown to HTML for chat display.

    Supports: fenced code blocks, inline code, bold, italic, links,
    block quotes, unordered and ordered lists. An unterminated code fence
    (common mid-stream) is rendered as plain text until it closes.
    """
    # Escape HTML entities first, quotes included so nothing leaves an attribute
    text = _escape(text)

    # Code and links are rendered first and kept out of the emphasis passes
    blocks: list[str] = []

    def stasher(render: Callable[[re.Match[str]], str]) -> Callable[[re.Match[str]], str]:
        def stash(match: re.Match[str]) -> str:
            blocks.append(render(match))
            return PLACEHOLDER.format(len(blocks) - 1)

        return stash

    text = CODE_BLOCK_RE.sub(stasher(_render_code_block), text)
    text = INLINE_CODE_RE.sub(stasher(_render_inline_code), text)
    text = LINK_RE.sub(stasher(_render_link), text)

    # Bold (**text** or __text__)
    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"__(.+?)__", r"<strong>\1</strong>", text)

    # Italic (*text* or _text_), not inside words
    text = re.sub(r"(?<![\w*])\*([^*\n]+)\*(?![\w*])", r"<em>\1</em>", text)
    text = re.sub(r"(?<!\w)_([^_\n]+)_(?!\w)", r"<em>\1</em>", text)

    text = _render_blockquotes(text)
    text = _render_lists(text, r"^[-*]\s+", "ul", "list-disc list-inside my-2 space-y-1")
    text = _render_lists(text, r"^\d+\.\s+", "ol", "list-decimal list-inside my-2 space-y-1")

    # Line breaks (preserve newlines as <br>)
    text = text.replace("\n", "<br>")

    # Later blocks may hold placeholders of earlier ones (code inside a link label)
    for index in reversed(range(len(blocks))):
        text = text.replace(PLACEHOLDER.format(index), blocks[index])

    return text
