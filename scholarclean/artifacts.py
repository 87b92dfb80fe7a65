"""
Pattern-based cleanup of page furniture and inline artifacts.

None of these passes needs a boundary decision. Page numbers and running
headers/footers are removed as whole lines when the trimmed line matches
a pattern in full; blank lines are always kept. Citations and special
characters are removed inside lines, and lines that look like
bibliography entries are left alone by citation removal.

Usage:
    >>> result = remove_page_numbers(text)
    >>> result.changes
    12
    >>> clean_special_characters(result.text).text
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class ArtifactResult:
    """Text after one artifact pass."""

    text: str
    changes: int = 0  # Lines removed, or artifacts removed inside lines

    @property
    def changed(self) -> bool:
        return self.changes > 0


# ============================================================================
# Whole-line removal
# ============================================================================

# At least one numeral, then a well-formed roman number
_ROMAN = r"(?=[ivxlcdm])m{0,3}(?:cm|cd|d?c{0,3})(?:xc|xl|l?x{0,3})(?:ix|iv|v?i{0,3})"

DEFAULT_PAGE_NUMBER_PATTERNS: tuple[str, ...] = (
    r"^\d+$",  # 42
    rf"^{_ROMAN}$",  # xvii
    r"^page\s+\d+$",  # Page 42
    r"^p\.?\s*\d+$",  # p. 42
    r"^\d+\s+of\s+\d+$",  # 42 of 100
    rf"^[-\u2014]\s*(?:\d+|{_ROMAN})\s*[-\u2014]$",  # - 42 -
    r"^\[\d+\]$",  # [42]
    # Broken dividers left between pages
    r"^---?$",
    r"^--\s*-$",
    r"^-\s*--$",
    r"^\u2014\s*-$",
    r"^-\s*\u2014$",
    r"^\u2014$",
)


def compile_line_patterns(patterns: Iterable[str | re.Pattern]) -> tuple[re.Pattern, ...]:
    """Compile patterns for whole-line matching (case-insensitive)."""
    return tuple(
        p if isinstance(p, re.Pattern) else re.compile(p, re.IGNORECASE) for p in patterns
    )


_PAGE_NUMBER_REGEXES = compile_line_patterns(DEFAULT_PAGE_NUMBER_PATTERNS)


def remove_matching_lines(text: str, patterns: Iterable[str | re.Pattern]) -> ArtifactResult:
    """Remove every non-blank line whose trimmed form fully matches a pattern."""
    regexes = compile_line_patterns(patterns)
    if not regexes:
        return ArtifactResult(text)

    kept: list[str] = []
    removed = 0
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped and any(regex.fullmatch(stripped) for regex in regexes):
            removed += 1
            continue
        kept.append(line)

    if removed:
        logger.debug(f"Removed {removed} line(s) matching {len(regexes)} pattern(s)")
    return ArtifactResult("\n".join(kept), removed)


def remove_page_numbers(
    text: str, patterns: Iterable[str | re.Pattern] | None = None
) -> ArtifactResult:
    """Remove standalone page number lines."""
    return remove_matching_lines(text, _PAGE_NUMBER_REGEXES if patterns is None else patterns)


def remove_headers_footers(
    text: str,
    header_patterns: Iterable[str | re.Pattern] = (),
    footer_patterns: Iterable[str | re.Pattern] = (),
) -> ArtifactResult:
    """Remove running header and footer lines.

    Running heads are specific to each book, so nothing is removed unless
    patterns are given.
    """
    return remove_matching_lines(text, [*header_patterns, *footer_patterns])


# ============================================================================
# Citations
# ============================================================================

_NAME = r"[A-ZÀ-ÖØ-Þ][A-Za-zÀ-ÖØ-öø-ÿĀ-žḀ-ỿ'\-]+"
_AUTHORS = rf"{_NAME}(?:\s+(?:&|and)\s+{_NAME})*"
_YEAR = r"\d{4}[a-z]?"
_PAGES = r"(?:,\s*pp?\.?\s*\d+(?:[–\-]\d+)?)?"
_INTRO = r"(?:[Ss]ee|[Cc]f\.?|e\.g\.?|i\.e\.?)"
_CITED = rf"{_NAME}(?:\s+et\s+al\.?)?(?:,\s*|\s+){_YEAR}"

CITATION_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(p)
    for p in [
        # (Smith, 2020), (Smith & Jones, 2019, p. 4)
        rf"\({_AUTHORS},\s*{_YEAR}{_PAGES}\)",
        # (Smith et al., 2020)
        rf"\({_NAME}\s+et\s+al\.?,\s*{_YEAR}{_PAGES}\)",
        # (Smith 2020), (Smith 2020, p. 42)
        rf"\({_AUTHORS}\s+{_YEAR}{_PAGES}\)",
        # (Smith 2020, 42), (Smith 2020: 42-45)
        rf"\({_NAME}\s+{_YEAR}[,:]\s*\d{{1,4}}(?:[–\-]\d{{1,4}})?\)",
        # (see Smith, 2020; cf. Jones 2017)
        rf"\((?:{_INTRO}\s+)?{_CITED}(?:;\s*(?:{_INTRO}\s+)?{_CITED})*{_PAGES}\)",
        # (Lefevre 1756, as cited in Dubois, 2019)
        rf"\({_NAME}\s+{_YEAR},?\s+as\s+cited\s+in\s+{_NAME},?\s*{_YEAR}{_PAGES}\)",
        # (ibid., p. 45)
        r"\((?:ibid\.?|op\.?\s*cit\.?|loc\.?\s*cit\.?)(?:,?\s*pp?\.?\s*\d+(?:[–\-]\d+)?)?\)",
        # [1], [2, 3], [4-6] inside running text
        r"(?<=[\s(,;])\[\d+(?:[–\-,]\s*\d+)*\](?=[\s.,;:)\]]|$)",
        # Superscript note markers after a word
        r"(?<=[^\W\d_]{2})[\u00b9\u00b2\u00b3\u2070-\u2079]+(?=[\s.,;:)\]\u201d]|$)",
    ]
)

_BIB_AUTHOR = re.compile(r"^[A-Z][a-zA-Z'\-]+,\s+[A-Z]")
_BIB_APA_YEAR = re.compile(r"\(\d{4}\)\s*\.")
_BIB_END_YEAR = re.compile(r"\d{4}\s*[.,]?\s*$")
_BIB_MARKERS = (
    "Press",
    "Publisher",
    "Journal",
    "University",
    "Vol.",
    "pp.",
    "doi:",
    "Retrieved from",
    "http://",
    "https://",
    "ISBN",
)

_EMPTY_BRACKETS = re.compile(r"\(\s*\)|\[\s*\]")
_INNER_SPACES = re.compile(r"(?<=\S) {2,}")
_SPACE_BEFORE_PUNCT = re.compile(r"(?<=\S)\s+(?=[.,;:!?])")


def is_bibliography_line(line: str) -> bool:
    """Whether line reads like a reference list entry ("Smith, J. (2020). Title.")."""
    stripped = line.strip()
    if len(stripped) <= 20 or not _BIB_AUTHOR.match(stripped):
        return False
    if _BIB_APA_YEAR.search(stripped) or _BIB_END_YEAR.search(stripped):
        return True
    if any(marker in stripped for marker in _BIB_MARKERS):
        return True
    if "_" in stripped and "." in stripped:
        return True
    return stripped.count(".") >= 3


def _tidy_line(line: str) -> str:
    line = _EMPTY_BRACKETS.sub("", line)
    line = _INNER_SPACES.sub(" ", line)
    line = _SPACE_BEFORE_PUNCT.sub("", line)
    return line.rstrip()


def remove_citations(text: str) -> ArtifactResult:
    """Remove in-text citations, leaving bibliography entries untouched.

    Returns:
        ArtifactResult whose changes count the citations removed.
    """
    lines: list[str] = []
    removed = 0
    for line in text.split("\n"):
        if is_bibliography_line(line):
            lines.append(line)
            continue

        updated = line
        for regex in CITATION_PATTERNS:
            updated, count = regex.subn("", updated)
            removed += count
        lines.append(_tidy_line(updated) if updated != line else line)

    if removed:
        logger.info(f"Removed {removed} citation(s)")
    return ArtifactResult("\n".join(lines), removed)


# ============================================================================
# Special characters
# ============================================================================

DEFAULT_SPECIAL_CHARACTERS: tuple[str, ...] = ("[", "]", "*", "_")

LIGATURES = {
    "ﬀ": "ff",
    "ﬁ": "fi",
    "ﬂ": "fl",
    "ﬃ": "ffi",
    "ﬄ": "ffl",
    "ﬅ": "st",
    "ﬆ": "st",
    "Ĳ": "IJ",
    "ĳ": "ij",
}

INVISIBLE_CHARACTERS = ("\u200b", "\u200c", "\u200d", "\ufeff", "\u00ad", "\u2060", "\u180e")

QUOTES = {
    "\u201c": "\"",
    "\u201d": "\"",
    "\u201e": "\"",
    "\u2018": "'",
    "\u2019": "'",
    "\u201a": "'",
}

_IMAGE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_EMPHASIS = (
    re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*"),
    re.compile(r"__(?=\S)(.+?)(?<=\S)__"),
    re.compile(r"(?<![\w*])\*(?=\S)([^*]+?)(?<=\S)\*(?![\w*])"),
    re.compile(r"(?<![\w_])_(?=\S)([^_]+?)(?<=\S)_(?![\w_])"),
)
_EMPTY_PARENS = re.compile(r"\(\s*\)")
_CODE_FENCE = re.compile(r"^\s*(```|~~~)")

# Markdown prefixes kept as written: headings, bullets, numbered items, quotes
_LINE_PREFIX = re.compile(r"^(\s*(?:#{1,6}\s+|[-*+]\s+|\d+[.)]\s+|>\s*)?)")


def _clean_line(line: str, removals: tuple[re.Pattern, ...]) -> str:
    prefix = _LINE_PREFIX.match(line).group(1)
    body = line[len(prefix):]

    for ligature, expansion in LIGATURES.items():
        body = body.replace(ligature, expansion)
    for char in INVISIBLE_CHARACTERS:
        body = body.replace(char, "")
    for curly, straight in QUOTES.items():
        body = body.replace(curly, straight)

    body = _IMAGE.sub("", body)
    for regex in _EMPHASIS:
        body = regex.sub(r"\1", body)
    body = body.replace("[", "(").replace("]", ")")
    for regex in removals:
        body = regex.sub("", body)

    body = _EMPTY_PARENS.sub("", body)
    body = _INNER_SPACES.sub(" ", body)
    cleaned = prefix + body
    return cleaned.rstrip() if cleaned != line else line


def clean_special_characters(
    text: str, characters: Iterable[str] = DEFAULT_SPECIAL_CHARACTERS
) -> ArtifactResult:
    """Normalize OCR typography and strip markdown artifacts.

    Ligatures are expanded, invisible characters dropped, curly quotes
    straightened, emphasis markers and images removed, and square
    brackets turned into parentheses. The remaining configured characters
    are then deleted. Fenced code blocks and line prefixes such as
    headings and list bullets are left as they are.

    Returns:
        ArtifactResult whose changes count the modified lines.
    """
    removals = tuple(re.compile(re.escape(c)) for c in characters if c not in ("[", "]"))
    lines: list[str] = []
    changed = 0
    in_code = False
    for line in text.split("\n"):
        if _CODE_FENCE.match(line):
            in_code = not in_code
            lines.append(line)
            continue
        if in_code:
            lines.append(line)
            continue
        cleaned = _clean_line(line, removals)
        if cleaned != line:
            changed += 1
        lines.append(cleaned)

    if changed:
        logger.debug(f"Cleaned special characters on {changed} line(s)")
    return ArtifactResult("\n".join(lines), changed)
