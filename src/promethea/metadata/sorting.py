# ABOUTME: Derives collation keys for titles and personal names.
# ABOUTME: "The Hobbit" sorts as "Hobbit, The"; "J. R. R. Tolkien" sorts as "Tolkien, J. R. R.".

import re

_LEADING_ARTICLES = ("the", "a", "an")

# Surname particles that stay attached to the family name ("Le Guin", "van Gogh").
_NAME_PARTICLES = frozenset(
    {
        "da",
        "de",
        "del",
        "della",
        "der",
        "di",
        "du",
        "la",
        "le",
        "st.",
        "van",
        "von",
    }
)

_NAME_SUFFIXES = frozenset({"jr.", "jr", "sr.", "sr", "ii", "iii", "iv"})

_INITIAL_RE = re.compile(r"^[A-Za-z]\.?$|^(?:[A-Za-z]\.){2,}$")
_WHITESPACE_RE = re.compile(r"\s+")


def _is_initial(token: str) -> bool:
    """Whether a name token is an initial ("J.", "R", "J.R.")."""
    return bool(_INITIAL_RE.match(token))


def title_sort(title: str) -> str:
    """Build the sort key for a book or series title.

    A leading English article is moved to the end, separated by a comma.
    Titles consisting only of an article are returned unchanged.
    """
    cleaned = _WHITESPACE_RE.sub(" ", title).strip()
    head, _, rest = cleaned.partition(" ")
    if rest and head.lower() in _LEADING_ARTICLES:
        return f"{rest}, {head}"
    return cleaned


def name_sort(name: str) -> str:
    """Build the "Surname, Given names" sort key for a personal name.

    Handles the shapes catalogued in the library:

        Brandon Sanderson       -> Sanderson, Brandon
        Peter V. Brett          -> Brett, Peter V.
        Robert Louis Stevenson  -> Stevenson, Robert Louis
        J. R. R. Tolkien        -> Tolkien, J. R. R.
        R. Scott Bakker         -> Scott Bakker, R.
        Ursula K. Le Guin       -> Le Guin, Ursula K.
        Baosu                   -> Baosu

    A trailing generational suffix is kept after the given names.
    """
    tokens = _WHITESPACE_RE.sub(" ", name).strip().split(" ")
    if len(tokens) <= 1:
        return tokens[0] if tokens else ""

    suffix = None
    if tokens[-1].lower().rstrip(",") in _NAME_SUFFIXES and len(tokens) > 2:
        suffix = tokens.pop().rstrip(",")
        tokens[-1] = tokens[-1].rstrip(",")

    if _is_initial(tokens[0]):
        split = 0
        while split < len(tokens) and _is_initial(tokens[split]):
            split += 1
        if split == len(tokens):
            split = len(tokens) - 1
    else:
        split = len(tokens) - 1
        while split > 1 and tokens[split - 1].lower() in _NAME_PARTICLES:
            split -= 1

    given = " ".join(tokens[:split])
    surname = " ".join(tokens[split:])
    key = f"{surname}, {given}"
    if suffix:
        key = f"{key}, {suffix}"
    return key
