import re

LEGAL_SUFFIXES = [
    "inc",
    "inc.",
    "corporation",
    "corp",
    "corp.",
    "company",
    "co",
    "co.",
    "ltd",
    "ltd.",
    "limited",
    "llc",
    "l.l.c.",
    "llp",
    "l.l.p.",
    "enterprises",
    "group",
    "holdings",
    "international",
    "intl",
]

# Longest first so "inc." wins over "inc" and "l.l.c." is never split.
_SUFFIX_RE = re.compile(
    r"\b(?:"
    + "|".join(re.escape(s) for s in sorted(LEGAL_SUFFIXES, key=len, reverse=True))
    + r")$",
    re.IGNORECASE,
)


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def normalize_company_name(name: str | None) -> str:
    """Canonical comparison form of a company name.

    Lowercased, whitespace collapsed, trailing legal-entity suffixes stripped
    until none remain. "Acme Corp." and "acme corp" both become "acme".
    """
    if not name:
        return ""
    normalized = normalize_text(name)
    while True:
        stripped = _SUFFIX_RE.sub("", normalized).strip()
        if stripped == normalized:
            return normalized
        normalized = stripped


def normalize_email(email: str) -> str:
    return email.strip().lower()


def mask_email(email: str | None) -> str | None:
    """Keep the first three characters of an address for logs."""
    if not email:
        return None
    return email[:3] + "***"
