"""Regular expressions shared by the ranker, snippet builder and composer."""
import re

URL_RE = re.compile(r"\bhttps?://[^\s)]+", re.IGNORECASE)
IPV4_RE = re.compile(
    r"\b(?:(?:25[0-5]|2[0-4]\d|1?\d?\d)\.){3}(?:25[0-5]|2[0-4]\d|1?\d?\d)\b"
)
HOST_RE = re.compile(r"\b[a-z0-9.-]+\.[a-z]{2,}\b", re.IGNORECASE)
NAME_LINE_RE = re.compile(r"^[A-Za-z][A-Za-z0-9() /_.-]{2,80}$")

# Questions asking for an address rather than an explanation.
URL_INTENT_RE = re.compile(
    r"\b(?:urls?|links?|endpoints?|ips?|hosts?|hostnames?|address(?:es)?)\b",
    re.IGNORECASE,
)

# Issue-tracker permalinks: <host>/browse/<PROJECT>-<number>
TRACKER_RE = re.compile(r"\b[a-z0-9.-]+\.[a-z]{2,}/browse/[A-Z][A-Z0-9]{1,9}-\d+\b")
WIKI_RE = re.compile(r"(?:confluence|\bwiki\b|/wiki/|wiki[-_ ]?export)", re.IGNORECASE)

POLICY_RES = (
    re.compile(r"^\s*(?:\d+(?:\.\d+)+|\d+[.)])\s+[A-Za-z]", re.MULTILINE),
    re.compile(r"\bentitled to \d+", re.IGNORECASE),
    re.compile(r"\beffective date\b", re.IGNORECASE),
    re.compile(r"\beligible for\b", re.IGNORECASE),
    re.compile(r"\b(?:employees?|staff) (?:shall|must|may)\b", re.IGNORECASE),
)

DOWNLOAD_RE = re.compile(r"\bdownload(?:s|ed|ing)?\b", re.IGNORECASE)
WORD_RE = re.compile(r"\S+")


def has_url(text: str) -> bool:
    return bool(URL_RE.search(text or ""))


def has_ip(text: str) -> bool:
    return bool(IPV4_RE.search(text or ""))


def has_endpoint(text: str) -> bool:
    """True when text carries a URL or an IPv4 literal."""
    return has_url(text) or has_ip(text)


def is_url_question(question: str) -> bool:
    return bool(URL_INTENT_RE.search(question or ""))


def looks_like_policy(text: str) -> bool:
    return any(rx.search(text or "") for rx in POLICY_RES)
