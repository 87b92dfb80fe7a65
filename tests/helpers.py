"""
Synthetic book builders shared by the test modules.

Documents are built from plain body sentences that match none of the
section patterns, so each test controls exactly which sections exist.
"""

BODY_SENTENCES = [
    "The river ran quietly past the old mill while the town slept",
    "She had never trusted the ledger kept by her uncle's clerk",
    "Rain came in from the west and settled over the valley for days",
    "Nobody at the inn remembered when the road had last been mended",
    "He wrote slowly and crossed out more than he ever kept",
    "In the spring the fields flooded and the school closed early",
    "Letters arrived rarely and were read aloud in the kitchen",
    "The argument about the bridge lasted most of that winter",
]

INDEX_TERMS = [
    "Aristotle",
    "Bacon",
    "Calvin",
    "Descartes",
    "Erasmus",
    "Fichte",
    "Galen",
    "Hobbes",
]

FRONT_MATTER = [
    "THE QUIET VALLEY",
    "A Novel",
    "",
    "Copyright © 1998 Jane Author",
    "All rights reserved.",
    "ISBN 978-0-00-000000-0",
    "First published in 1998 by Harbor Press",
    "",
]


def body_lines(count: int, offset: int = 0) -> list[str]:
    """Lines of plain narrative text."""
    return [BODY_SENTENCES[(offset + i) % len(BODY_SENTENCES)] for i in range(count)]


def note_entries(count: int, first: int = 1) -> list[str]:
    """Numbered endnote lines."""
    return [
        f"{n}. See the letter of {1800 + n}, held in the county archive."
        for n in range(first, first + count)
    ]


def index_entries(count: int) -> list[str]:
    """Alphabetical 'term, page' index lines."""
    entries = []
    for i in range(count):
        term = f"{INDEX_TERMS[i % len(INDEX_TERMS)]} {INDEX_TERMS[(i // len(INDEX_TERMS)) % len(INDEX_TERMS)]}"
        entries.append(f"{term}, {10 + i}, {40 + 2 * i}")
    return entries


def toc_entries(count: int) -> list[str]:
    """Dotted-leader contents lines."""
    return [f"Chapter {k}  The Road Home  ........  {k * 20}" for k in range(1, count + 1)]


def figure_entries(count: int) -> list[str]:
    """List-of-figures lines."""
    return [f"Figure {k}. The mill at dawn  ........  {k * 7}" for k in range(1, count + 1)]


def book_body(length: int, chapter_every: int = 100, first_chapter: int = 1) -> list[str]:
    """Body text with a '# Chapter N' heading every chapter_every lines."""
    lines = []
    chapter = first_chapter
    for i in range(length):
        if i % chapter_every == 0:
            lines.append(f"# Chapter {chapter}")
            chapter += 1
        else:
            lines.append(BODY_SENTENCES[i % len(BODY_SENTENCES)])
    return lines


def join(lines: list[str]) -> str:
    return "\n".join(lines)


def plain_book(length: int = 500) -> str:
    """A book with chapters only: nothing removable."""
    return join(book_body(length))


def book_with_notes(length: int = 500, notes_at: int = 410) -> str:
    """Body, then '# NOTES' at notes_at followed by note entries to the end."""
    lines = book_body(notes_at)
    lines.append("# NOTES")
    lines.extend(note_entries(length - notes_at - 1))
    return join(lines)


def book_with_headerless_index(length: int = 500, index_at: int = 460, entries: int = 35) -> str:
    """Body, then a run of index entries with no header, then blank lines."""
    lines = book_body(index_at)
    lines.extend(index_entries(entries))
    lines.extend([""] * (length - len(lines)))
    return join(lines)


def book_with_front_matter(length: int = 300) -> str:
    """Copyright block followed by chapters."""
    lines = list(FRONT_MATTER)
    lines.extend(book_body(length - len(lines)))
    return join(lines)


def book_with_contents(length: int = 300) -> str:
    """Title, '# Contents' with 12 entries, then chapters."""
    lines = ["THE QUIET VALLEY", "", "# Contents"]
    lines.extend(toc_entries(12))
    lines.append("")
    lines.extend(book_body(length - len(lines)))
    return join(lines)


def book_with_figures(length: int = 300) -> str:
    """Title, '# List of Figures' with 8 entries, then chapters."""
    lines = ["THE QUIET VALLEY", "", "# List of Figures"]
    lines.extend(figure_entries(8))
    lines.append("")
    lines.extend(book_body(length - len(lines)))
    return join(lines)


def book_with_chapter_notes(length: int = 500) -> str:
    """Two chapters each followed by a short '## Notes' block."""
    lines = book_body(150)
    lines.append("## Notes")
    lines.extend(note_entries(12))
    lines.extend(book_body(150, first_chapter=3))
    lines.append("## Notes")
    lines.extend(note_entries(12, first=13))
    lines.extend(book_body(length - len(lines), first_chapter=5))
    return join(lines)
