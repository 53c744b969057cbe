"""
detection/patterns.py

Pattern library: the fixed detection rules as pure lookup tables.

Every helper takes a cell string (and sometimes its lower-cased header) and
returns the name of what matched, or None. No state, no side effects.
"""

from __future__ import annotations

import re
from typing import Sequence

# ---------------------------------------------------------------------------
# Sensitive data
# ---------------------------------------------------------------------------

SENSITIVE_PATTERNS: dict[str, re.Pattern[str]] = {
    "credit_card": re.compile(r"\b(?:\d[ -]*?){13,16}\b"),
    "email":       re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
    "ssn":         re.compile(r"\b\d{3}[-.]?\d{2}[-.]?\d{4}\b"),
    "secret":      re.compile(r"password|passwd|pwd|secret|credential", re.IGNORECASE),
}

# Headers that name personal data even when the value itself looks harmless
PERSONAL_HEADER_RE = re.compile(
    r"email|e_mail|name|dob|birth|phone|mobile|address|ssn|passport|salary",
    re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Phishing
# ---------------------------------------------------------------------------

PHISHING_PATTERNS: dict[str, re.Pattern[str]] = {
    "url_shortener":  re.compile(r"bit\.ly|goo\.gl|tinyurl\.com|t\.co|is\.gd", re.IGNORECASE),
    "keyword":        re.compile(r"login|verify|secure|account|update|confirm", re.IGNORECASE),
    "suspicious_tld": re.compile(r"\.(ru|cn|tk|pw|top|xyz|ga)\b", re.IGNORECASE),
}

URL_RE = re.compile(r"https?://", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Unauthorized access
# ---------------------------------------------------------------------------

UNAUTHORIZED_DOMAINS: tuple[str, ...] = (
    "suspicious-domain.com",
    "not-authorized.net",
    "data-exfil.org",
    "malicious-site.ru",
)

ACCESS_FAILURE_RE = re.compile(
    r"(?:access[ _-]?)?(?:failed|failure|denied|unauthori[sz]ed|forbidden|blocked|rejected)",
    re.IGNORECASE,
)

PRINCIPAL_HEADERS: frozenset[str] = frozenset({
    "user", "username", "user_name", "user_id", "userid",
    "email", "account", "principal", "actor", "login_id",
})

# ---------------------------------------------------------------------------
# File access
# ---------------------------------------------------------------------------

FILE_HEADER_RE = re.compile(r"file|path", re.IGNORECASE)

SUSPICIOUS_FILE_RE = re.compile(
    r"\.pem\b|\.key\b|id_rsa|\.kdbx\b|/etc/shadow|\.ssh/|\.aws/credentials"
    r"|system32\\config\\sam",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------

def match_sensitive(cell: str) -> str | None:
    """Return the first sensitive-data kind found in cell."""
    for kind, pattern in SENSITIVE_PATTERNS.items():
        if pattern.search(cell):
            return kind
    return None


def match_phishing(cell: str) -> str | None:
    for kind, pattern in PHISHING_PATTERNS.items():
        if pattern.search(cell):
            return kind
    return None


def match_unauthorized_domain(cell: str) -> str | None:
    for domain in UNAUTHORIZED_DOMAINS:
        if domain in cell:
            return domain
    return None


def is_access_failure(cell: str) -> bool:
    """Whole-value match only: 'failed' yes, 'failed_over_to_backup' no."""
    return ACCESS_FAILURE_RE.fullmatch(cell.strip()) is not None


def find_principal(row: Sequence[str], headers: Sequence[str]) -> str | None:
    """Value of the first non-empty column whose header names a user."""
    for index, header in enumerate(headers):
        if header.strip().lower() in PRINCIPAL_HEADERS and index < len(row):
            value = row[index].strip()
            if value:
                return value
    return None


def is_potential_exfiltration(cell: str, header: str) -> bool:
    cell = cell.lower()
    return (
        ("file" in header and "transfer" in cell)
        or ("data" in header and "download" in cell)
        or ("export" in cell and "data" in cell)
    )


def is_suspicious_file_access(cell: str, header: str) -> bool:
    return bool(FILE_HEADER_RE.search(header)) and bool(SUSPICIOUS_FILE_RE.search(cell))


def is_external_reference(cell: str) -> bool:
    return bool(URL_RE.search(cell)) or match_unauthorized_domain(cell) is not None
