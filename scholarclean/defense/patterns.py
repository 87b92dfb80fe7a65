"""
Pattern tables for content verification and heuristic detection.

Everything section-specific about matching lives here as literal data:
header vocabularies (substring matched, upper-cased), regex lists, and
weighted regex tables. The verifier and detector consume them through
the small generic routines at the bottom of the module, so adding a
pattern never means adding matching code.

Usage:
    >>> matches = scan_weighted(lines, BACK_MATTER_HEADERS, start=250, stop=500)
    >>> first = earliest(matches)
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class WeightedPattern:
    """A regex with the confidence it contributes when it matches."""

    pattern: str
    weight: float
    flags: int = 0
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "regex", re.compile(self.pattern, self.flags))


@dataclass(frozen=True)
class PatternMatch:
    """One weighted pattern matching one line."""

    line_index: int
    pattern: str
    weight: float


def _weighted(entries: Iterable[tuple[str, float]], flags: int = 0) -> tuple[WeightedPattern, ...]:
    return tuple(WeightedPattern(pattern, weight, flags) for pattern, weight in entries)


def _compile(patterns: Iterable[str], flags: int = 0) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, flags) for p in patterns)


# ============================================================================
# Shared negative evidence
# ============================================================================

CHAPTER_PATTERNS = _compile(
    [
        r"^#{1,2}\s*Chapter\s+\d",
        r"^#{1,2}\s*CHAPTER\s+\d",
        r"^#{1,2}\s*Chapter\s+[IVXLC]+",
        r"^#{1,2}\s*\d+\.\s+[A-Z]",
        r"^CHAPTER\s+(ONE|TWO|THREE|FOUR|FIVE|SIX|SEVEN|EIGHT|NINE|TEN)",
        r"^Part\s+[IVXLC]+",
        r"^PART\s+[IVXLC]+",
    ],
    re.IGNORECASE,
)

# Long line without list punctuation
NARRATIVE_MIN_LENGTH = 100


def is_narrative_line(line: str) -> bool:
    stripped = line.strip()
    return len(stripped) > NARRATIVE_MIN_LENGTH and "..." not in stripped and "\t" not in stripped


# ============================================================================
# Content verification vocabulary
# ============================================================================

BACK_MATTER_HEADER_WORDS = (
    # English
    "NOTES",
    "ENDNOTES",
    "FOOTNOTES",
    "APPENDIX",
    "APPENDICES",
    "GLOSSARY",
    "BIBLIOGRAPHY",
    "REFERENCES",
    "WORKS CITED",
    "SOURCES",
    "ABOUT THE AUTHOR",
    "ABOUT THE AUTHORS",
    "ACKNOWLEDGMENTS",
    "ACKNOWLEDGEMENTS",
    "COLOPHON",
    "AFTERWORD",
    # Spanish
    "NOTAS",
    "APÉNDICE",
    "GLOSARIO",
    "BIBLIOGRAFÍA",
    "SOBRE EL AUTOR",
    "AGRADECIMIENTOS",
    # French
    "ANNEXE",
    "ANNEXES",
    "GLOSSAIRE",
    "BIBLIOGRAPHIE",
    "À PROPOS DE L'AUTEUR",
    "REMERCIEMENTS",
    # German
    "ANHANG",
    "GLOSSAR",
    "LITERATURVERZEICHNIS",
    "ÜBER DEN AUTOR",
    "DANKSAGUNG",
    # Portuguese
    "APÊNDICE",
    "GLOSSÁRIO",
    "BIBLIOGRAFIA",
    "SOBRE O AUTOR",
    "AGRADECIMENTOS",
)

BACK_MATTER_MARKDOWN_PATTERNS = _compile(
    [
        r"^#{1,3}\s*(NOTES|Notes|Endnotes|ENDNOTES)",
        r"^#{1,3}\s*(APPENDIX|Appendix|APPENDICES|Appendices)",
        r"^#{1,3}\s*(GLOSSARY|Glossary)",
        r"^#{1,3}\s*(BIBLIOGRAPHY|Bibliography|REFERENCES|References)",
        r"^#{1,3}\s*(ABOUT THE AUTHOR|About the Author)",
        r"^#{1,3}\s*(ACKNOWLEDGMENTS|Acknowledgments|ACKNOWLEDGEMENTS|Acknowledgements)",
        r"^#{1,3}\s*(COLOPHON|Colophon)",
        r"^#{1,3}\s*(AFTERWORD|Afterword)",
    ]
)

INDEX_HEADER_WORDS = (
    "INDEX",
    "SUBJECT INDEX",
    "NAME INDEX",
    "AUTHOR INDEX",
    "GENERAL INDEX",
    "COMBINED INDEX",
    "ÍNDICE",
    "ÍNDICE ALFABÉTICO",
    "ÍNDICE ONOMÁSTICO",
    "INDEX ALPHABÉTIQUE",
    "REGISTER",
    "SACHREGISTER",
    "NAMENSREGISTER",
)

# "Aristotle, 12, 45-47"
INDEX_ENTRY_PATTERN = re.compile(r"^\s*[A-Za-z].+,\s*\d+(-\d+)?(,\s*\d+(-\d+)?)*\s*$")

# Single-letter alphabet divider
INDEX_DIVIDER_PATTERN = re.compile(r"^\s*[A-Z]\s*$")

FRONT_MATTER_INDICATORS = (
    "©",
    "Copyright",
    "All rights reserved",
    "ISBN",
    "Library of Congress",
    "First published",
    "First edition",
    "Published by",
    "Printed in",
    "Dedication",
    "For ",
    "To my ",
    "PREFACE",
    "Preface",
    "FOREWORD",
    "Foreword",
    "INTRODUCTION",
    "Introduction",
    "TABLE OF CONTENTS",
    "CONTENTS",
)

TOC_HEADER_WORDS = (
    "TABLE OF CONTENTS",
    "CONTENTS",
    "TABLA DE CONTENIDOS",
    "CONTENIDO",
    "TABLE DES MATIÈRES",
    "SOMMAIRE",
    "INHALTSVERZEICHNIS",
)

# Dotted leader or wide gap before the page number
TOC_ENTRY_PATTERN = re.compile(r"^.+\s{2,}\.{2,}\s*\d+$|^.+\s{3,}\d+$")

TOC_LISTING_PATTERN = re.compile(r"^.*(Chapter|CHAPTER|Part|PART|\d+\.).*\d+\s*$")

AUXILIARY_HEADER_WORDS = (
    "LIST OF FIGURES",
    "FIGURES",
    "LIST OF ILLUSTRATIONS",
    "ILLUSTRATIONS",
    "LIST OF TABLES",
    "TABLES",
    "LIST OF PLATES",
    "PLATES",
    "LIST OF MAPS",
    "MAPS",
    "LIST OF CHARTS",
    "LIST OF GRAPHS",
    "LIST OF ABBREVIATIONS",
    "ABBREVIATIONS",
    "LIST OF SYMBOLS",
    "SYMBOLS",
    "LIST OF ACRONYMS",
    "ACRONYMS",
    "LISTA DE FIGURAS",
    "LISTA DE TABLAS",
    "LISTE DES FIGURES",
    "LISTE DES TABLEAUX",
    "ABBILDUNGSVERZEICHNIS",
    "TABELLENVERZEICHNIS",
    "ABKÜRZUNGSVERZEICHNIS",
    "LIST OF CONTRIBUTORS",
)

AUXILIARY_MARKDOWN_PATTERNS = _compile(
    [
        r"^#{1,3}\s*(LIST OF FIGURES|List of Figures|Figures|FIGURES)",
        r"^#{1,3}\s*(LIST OF TABLES|List of Tables|Tables|TABLES)",
        r"^#{1,3}\s*(LIST OF ILLUSTRATIONS|List of Illustrations|Illustrations|ILLUSTRATIONS)",
        r"^#{1,3}\s*(LIST OF MAPS|List of Maps|Maps|MAPS)",
        r"^#{1,3}\s*(LIST OF ABBREVIATIONS|List of Abbreviations|Abbreviations|ABBREVIATIONS)",
        r"^#{1,3}\s*(LIST OF SYMBOLS|List of Symbols|Symbols|SYMBOLS)",
    ]
)

AUXILIARY_ENTRY_PATTERNS = _compile(
    [
        r"^\s*(Figure|Fig\.|FIGURE|FIG\.)\s*\d+",
        r"^\s*(Table|Tab\.|TABLE|TAB\.)\s*\d+",
        r"^\s*(Illustration|Plate|Map|Chart|Graph)\s*\d+",
        r"^\s*[A-Z]{2,}\s*[-–:]\s*[A-Z]",
        r"^.+\.{3,}\s*\d+\s*$",
    ],
    re.IGNORECASE,
)

FOOTNOTE_HEADER_WORDS = (
    "NOTES",
    "ENDNOTES",
    "FOOTNOTES",
    "CHAPTER NOTES",
    "NOTES TO CHAPTER",
    "NOTES AND REFERENCES",
    "NOTES AND SOURCES",
    "NOTAS",
    "NOTAS FINALES",
    "NOTAS AL PIE",
    "NOTES DE FIN",
    "NOTES DE BAS DE PAGE",
    "ANMERKUNGEN",
    "ENDNOTEN",
    "FUSSNOTEN",
    "NOTAS DE RODAPÉ",
    "NOTAS FINAIS",
)

FOOTNOTE_MARKDOWN_PATTERNS = _compile(
    [
        r"^#{1,3}\s*(NOTES|Notes|Endnotes|ENDNOTES|Footnotes|FOOTNOTES)",
        r"^#{1,3}\s*(Chapter\s+\d+\s+Notes|Notes\s+to\s+Chapter)",
        r"^#{1,3}\s*(Notes\s+and\s+References|Notes\s+and\s+Sources)",
    ]
)

FOOTNOTE_ENTRY_PATTERNS = _compile(
    [
        r"^\s*\d{1,3}[.:]\s+[A-Z]",
        r"^\s*[\[\(]\d{1,3}[\]\)]\s+",
        r"^\s*(Chapter|Ch\.)\s*\d+.*note\s*\d+",
        r"\bp{1,2}\.\s*\d+",
        r"^\s*(See|Cf\.|Compare|Note|Ibid|Op\.\s*cit)",
    ],
    re.IGNORECASE,
)

FOOTNOTE_NARRATIVE_PATTERNS = _compile(
    [
        r'"[A-Z][^"]{20,}"',
        r"[A-Z][^.!?]{100,}[.!?]",
    ]
)


# ============================================================================
# Heuristic detection tables
# ============================================================================

BACK_MATTER_HEADERS = _weighted(
    [
        # Markdown headers
        (r"^#{1,3}\s*NOTES\s*$", 1.0),
        (r"^#{1,3}\s*Notes\s*$", 1.0),
        (r"^#{1,3}\s*ENDNOTES\s*$", 1.0),
        (r"^#{1,3}\s*Endnotes\s*$", 1.0),
        (r"^#{1,3}\s*APPENDIX\s*$", 0.9),
        (r"^#{1,3}\s*Appendix\s*$", 0.9),
        (r"^#{1,3}\s*APPENDIX\s+[A-Z]\s*$", 0.9),
        (r"^#{1,3}\s*Appendix\s+[A-Z]\s*$", 0.9),
        (r"^#{1,3}\s*GLOSSARY\s*$", 0.95),
        (r"^#{1,3}\s*Glossary\s*$", 0.95),
        (r"^#{1,3}\s*BIBLIOGRAPHY\s*$", 0.95),
        (r"^#{1,3}\s*Bibliography\s*$", 0.95),
        (r"^#{1,3}\s*REFERENCES\s*$", 0.9),
        (r"^#{1,3}\s*References\s*$", 0.9),
        (r"^#{1,3}\s*WORKS CITED\s*$", 0.95),
        (r"^#{1,3}\s*Works Cited\s*$", 0.95),
        (r"^#{1,3}\s*ACKNOWLEDGMENTS\s*$", 0.8),
        (r"^#{1,3}\s*Acknowledgments\s*$", 0.8),
        (r"^#{1,3}\s*ACKNOWLEDGEMENTS\s*$", 0.8),
        (r"^#{1,3}\s*Acknowledgements\s*$", 0.8),
        (r"^#{1,3}\s*ABOUT THE AUTHORS?\s*$", 0.85),
        (r"^#{1,3}\s*About the Authors?\s*$", 0.85),
        (r"^#{1,3}\s*COLOPHON\s*$", 0.9),
        (r"^#{1,3}\s*Colophon\s*$", 0.9),
        (r"^#{1,3}\s*AFTERWORD\s*$", 0.7),
        (r"^#{1,3}\s*Afterword\s*$", 0.7),
        # Localized markdown headers
        (r"^#{1,3}\s*NOTAS\s*$", 0.9),
        (r"^#{1,3}\s*BIBLIOGRAFÍA\s*$", 0.9),
        (r"^#{1,3}\s*GLOSARIO\s*$", 0.9),
        (r"^#{1,3}\s*ANNEXE\s*$", 0.9),
        (r"^#{1,3}\s*GLOSSAIRE\s*$", 0.9),
        (r"^#{1,3}\s*ANHANG\s*$", 0.9),
        (r"^#{1,3}\s*GLOSSAR\s*$", 0.9),
        # Plain all-caps headers
        (r"^NOTES$", 0.9),
        (r"^ENDNOTES$", 0.9),
        (r"^APPENDIX$", 0.85),
        (r"^APPENDIX [A-Z]$", 0.85),
        (r"^GLOSSARY$", 0.9),
        (r"^BIBLIOGRAPHY$", 0.9),
        (r"^REFERENCES$", 0.85),
        (r"^WORKS CITED$", 0.9),
        (r"^ACKNOWLEDGMENTS$", 0.75),
        (r"^ACKNOWLEDGEMENTS$", 0.75),
        (r"^ABOUT THE AUTHOR$", 0.8),
    ]
)

INDEX_HEADERS = _weighted(
    [
        (r"^#{1,3}\s*INDEX\s*$", 1.0),
        (r"^#{1,3}\s*Index\s*$", 1.0),
        (r"^#{1,3}\s*SUBJECT INDEX\s*$", 1.0),
        (r"^#{1,3}\s*Subject Index\s*$", 1.0),
        (r"^#{1,3}\s*NAME INDEX\s*$", 1.0),
        (r"^#{1,3}\s*Name Index\s*$", 1.0),
        (r"^#{1,3}\s*GENERAL INDEX\s*$", 1.0),
        (r"^#{1,3}\s*General Index\s*$", 1.0),
        (r"^INDEX$", 0.9),
        (r"^SUBJECT INDEX$", 0.9),
        (r"^#{1,3}\s*ÍNDICE\s*$", 0.9),
        (r"^#{1,3}\s*REGISTER\s*$", 0.9),
    ]
)

# Stricter than INDEX_ENTRY_PATTERN: terms are words, not arbitrary text
HEURISTIC_INDEX_ENTRY_PATTERN = re.compile(
    r"^\s*[A-Za-z][A-Za-z\s,'-]*,\s*\d+(-\d+)?(,\s*\d+(-\d+)?)*\s*$"
)

MAIN_CONTENT_HEADERS = _weighted(
    [
        (r"^#{1,2}\s*Chapter\s+\d", 1.0),
        (r"^#{1,2}\s*CHAPTER\s+\d", 1.0),
        (r"^#{1,2}\s*Chapter\s+One", 1.0),
        (r"^#{1,2}\s*CHAPTER\s+ONE", 1.0),
        (r"^#{1,2}\s*Part\s+[IVXLC]+", 0.9),
        (r"^#{1,2}\s*PART\s+[IVXLC]+", 0.9),
        (r"^#{1,2}\s*1\.\s+[A-Z]", 0.8),
        (r"^#{1,2}\s*Prologue\s*$", 0.9),
        (r"^#{1,2}\s*PROLOGUE\s*$", 0.9),
    ]
)

FRONT_MATTER_INDICATOR_PATTERNS = _weighted(
    [
        (r"©\s*\d{4}", 1.0),
        (r"Copyright\s*©?\s*\d{4}", 1.0),
        (r"All rights reserved", 0.9),
        (r"ISBN\s*[-:\s]?\s*\d", 1.0),
        (r"Library of Congress", 0.95),
        (r"First published", 0.85),
        (r"First edition", 0.85),
        (r"Published by", 0.8),
        (r"Printed in", 0.75),
    ],
    re.IGNORECASE,
)

TOC_HEADERS = _weighted(
    [
        (r"^#{1,3}\s*TABLE OF CONTENTS\s*$", 1.0),
        (r"^#{1,3}\s*Table of Contents\s*$", 1.0),
        (r"^#{1,3}\s*CONTENTS\s*$", 1.0),
        (r"^#{1,3}\s*Contents\s*$", 1.0),
        (r"^TABLE OF CONTENTS$", 0.9),
        (r"^CONTENTS$", 0.9),
        (r"^#{1,3}\s*TABLA DE CONTENIDOS\s*$", 0.9),
        (r"^#{1,3}\s*TABLE DES MATIÈRES\s*$", 0.9),
        (r"^#{1,3}\s*INHALTSVERZEICHNIS\s*$", 0.9),
    ]
)

HEURISTIC_TOC_ENTRY_PATTERN = re.compile(r"^.+\s{2,}\.{2,}\s*\d+\s*$|^.+\s{4,}\d+\s*$")

HEURISTIC_TOC_SIMPLE_ENTRY_PATTERN = re.compile(r"^.{5,}\s+\d{1,4}\s*$")

AUXILIARY_HEADERS = _weighted(
    [
        # Figures
        (r"^#{1,3}\s*LIST OF FIGURES\s*$", 1.0),
        (r"^#{1,3}\s*List of Figures\s*$", 1.0),
        (r"^#{1,3}\s*FIGURES\s*$", 0.85),
        (r"^#{1,3}\s*Figures\s*$", 0.85),
        (r"^LIST OF FIGURES$", 0.9),
        (r"^FIGURES$", 0.8),
        # Tables
        (r"^#{1,3}\s*LIST OF TABLES\s*$", 1.0),
        (r"^#{1,3}\s*List of Tables\s*$", 1.0),
        (r"^#{1,3}\s*TABLES\s*$", 0.85),
        (r"^#{1,3}\s*Tables\s*$", 0.85),
        (r"^LIST OF TABLES$", 0.9),
        (r"^TABLES$", 0.8),
        # Illustrations, plates, maps, charts
        (r"^#{1,3}\s*LIST OF ILLUSTRATIONS\s*$", 1.0),
        (r"^#{1,3}\s*List of Illustrations\s*$", 1.0),
        (r"^#{1,3}\s*LIST OF PLATES\s*$", 1.0),
        (r"^#{1,3}\s*LIST OF MAPS\s*$", 1.0),
        (r"^#{1,3}\s*LIST OF CHARTS\s*$", 1.0),
        (r"^#{1,3}\s*LIST OF GRAPHS\s*$", 1.0),
        (r"^LIST OF ILLUSTRATIONS$", 0.9),
        (r"^LIST OF PLATES$", 0.9),
        (r"^LIST OF MAPS$", 0.9),
        # Abbreviations and symbols
        (r"^#{1,3}\s*LIST OF ABBREVIATIONS\s*$", 1.0),
        (r"^#{1,3}\s*List of Abbreviations\s*$", 1.0),
        (r"^#{1,3}\s*ABBREVIATIONS\s*$", 0.9),
        (r"^#{1,3}\s*Abbreviations\s*$", 0.9),
        (r"^#{1,3}\s*LIST OF SYMBOLS\s*$", 1.0),
        (r"^#{1,3}\s*LIST OF ACRONYMS\s*$", 1.0),
        (r"^LIST OF ABBREVIATIONS$", 0.9),
        (r"^ABBREVIATIONS$", 0.85),
        (r"^LIST OF SYMBOLS$", 0.9),
        (r"^SYMBOLS$", 0.8),
        # Localized
        (r"^#{1,3}\s*LISTA DE FIGURAS\s*$", 0.9),
        (r"^#{1,3}\s*LISTA DE TABLAS\s*$", 0.9),
        (r"^#{1,3}\s*LISTE DES FIGURES\s*$", 0.9),
        (r"^#{1,3}\s*LISTE DES TABLEAUX\s*$", 0.9),
        (r"^#{1,3}\s*ABBILDUNGSVERZEICHNIS\s*$", 0.9),
        (r"^#{1,3}\s*TABELLENVERZEICHNIS\s*$", 0.9),
    ]
)

# Keyword found in a header pattern -> list category
AUXILIARY_CATEGORIES = (
    (("FIGURE", "ABBILDUNG"), "List of Figures"),
    (("TABLE", "TABELLE"), "List of Tables"),
    (("ILLUSTRATION",), "List of Illustrations"),
    (("PLATE",), "List of Plates"),
    (("MAP",), "List of Maps"),
    (("CHART",), "List of Charts"),
    (("GRAPH",), "List of Graphs"),
    (("ABBREVIATION", "ABK"), "List of Abbreviations"),
    (("SYMBOL",), "List of Symbols"),
    (("ACRONYM",), "List of Acronyms"),
)


def auxiliary_category(pattern: str) -> str:
    """Category name for an auxiliary list header pattern."""
    upper = pattern.upper()
    for keywords, category in AUXILIARY_CATEGORIES:
        if any(keyword in upper for keyword in keywords):
            return category
    return "Auxiliary List"


NOTES_SECTION_HEADERS = _compile(
    [
        r"^#{1,2}\s*(NOTES|Notes|ENDNOTES|Endnotes|END NOTES|End Notes)\s*$",
        r"^(NOTES|ENDNOTES)\s*$",
    ]
)

NOTES_SECTION_TERMINATORS = _compile(
    [
        r"^#{1,2}\s*(INDEX|Index|APPENDIX|Appendix|GLOSSARY|Glossary|BIBLIOGRAPHY|Bibliography"
        r"|REFERENCES|References|ACKNOWLEDGMENTS|Acknowledgments|ABOUT THE AUTHOR|About the Author)",
    ]
)

MAJOR_SECTION_PREFIXES = ("CHAPTER ", "PART ", "PROLOGUE", "INTRODUCTION")


# ============================================================================
# Generic matching routines
# ============================================================================


def find_header_words(lines: Sequence[str], words: Iterable[str]) -> list[str]:
    """Header words occurring (upper-cased substring match) in lines."""
    haystack = "\n".join(lines).upper()
    return [word for word in words if word in haystack]


def any_line_matches(lines: Iterable[str], regexes: Iterable[re.Pattern]) -> bool:
    regexes = tuple(regexes)
    return any(regex.search(line) for line in lines for regex in regexes)


def count_pattern_matches(lines: Iterable[str], regexes: Iterable[re.Pattern]) -> int:
    """Total matches of every regex over every line."""
    regexes = tuple(regexes)
    return sum(len(regex.findall(line)) for line in lines for regex in regexes)


def count_matching_lines(lines: Iterable[str], regexes: Iterable[re.Pattern]) -> int:
    """Number of lines matched by at least one regex."""
    regexes = tuple(regexes)
    return sum(1 for line in lines if any(regex.search(line) for regex in regexes))


def scan_weighted(
    lines: Sequence[str],
    table: Iterable[WeightedPattern],
    start: int = 0,
    stop: int | None = None,
) -> list[PatternMatch]:
    """Every (line, pattern) match inside lines[start:stop], in line order.

    Lines are stripped before matching.
    """
    table = tuple(table)
    stop = len(lines) if stop is None else min(stop, len(lines))
    matches = []
    for index in range(max(0, start), stop):
        stripped = lines[index].strip()
        if not stripped:
            continue
        for entry in table:
            if entry.regex.search(stripped):
                matches.append(PatternMatch(index, entry.pattern, entry.weight))
    return matches


def first_by_priority(
    lines: Sequence[str],
    table: Iterable[WeightedPattern],
    start: int = 0,
    stop: int | None = None,
) -> PatternMatch | None:
    """First line matched by the highest-priority pattern that matches at all.

    Patterns are tried in table order; the earliest line for the first
    pattern with any match wins, even if a later pattern matches earlier.
    """
    stop = len(lines) if stop is None else min(stop, len(lines))
    for entry in table:
        for index in range(max(0, start), stop):
            if entry.regex.search(lines[index].strip()):
                return PatternMatch(index, entry.pattern, entry.weight)
    return None


def earliest(matches: Sequence[PatternMatch]) -> PatternMatch | None:
    """Match on the lowest line, keeping table order among ties."""
    if not matches:
        return None
    return min(matches, key=lambda m: m.line_index)


def longest_run(
    lines: Sequence[str],
    is_entry: Callable[[str], bool],
    start: int = 0,
    stop: int | None = None,
    max_blank_gap: int | None = None,
) -> tuple[int, int]:
    """Longest run of entry lines.

    Blank lines never count as entries. With max_blank_gap=None they never
    break a run; otherwise more than max_blank_gap consecutive blanks do.
    Any other non-entry line ends the run.

    Returns:
        (first line of the best run, number of entries in it); (-1, 0) if none.
    """
    stop = len(lines) if stop is None else min(stop, len(lines))
    best_start, best_count = -1, 0
    run_start, run_count, blanks = -1, 0, 0

    for index in range(max(0, start), stop):
        line = lines[index]
        if not line.strip():
            blanks += 1
            if max_blank_gap is not None and blanks > max_blank_gap:
                run_start, run_count = -1, 0
            continue
        if is_entry(line):
            if run_count == 0:
                run_start = index
            run_count += 1
            blanks = 0
            if run_count > best_count:
                best_start, best_count = run_start, run_count
        else:
            run_start, run_count, blanks = -1, 0, 0

    return best_start, best_count
