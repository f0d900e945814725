"""Service cards: "name -> endpoint" records pulled from reference-style text."""
import re
from dataclasses import dataclass
from typing import Optional

from .patterns import HOST_RE, IPV4_RE, NAME_LINE_RE, URL_RE

SECTION_RE = re.compile(
    r"^(customer facing|internal applications|services/console|application list)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ServiceCard:
    """Service name paired with the first endpoint found below it."""
    name: str
    url: Optional[str] = None
    ip: Optional[str] = None
    host: Optional[str] = None
    section: Optional[str] = None

    @property
    def endpoint(self) -> str:
        return self.url or self.ip or self.host or ""

    @property
    def key(self) -> str:
        return "|".join(
            [self.name, self.url or "", self.ip or "", self.host or ""]
        ).lower()


def cardize(text: str, window: int = 5) -> list[ServiceCard]:
    """Extract service cards by line adjacency.

    A name-like line followed within `window` lines by a URL, IPv4
    literal or hostname becomes a card. Scanning for a name stops at the
    next name-like line.
    """
    lines = [line.strip() for line in str(text).splitlines()]
    section: Optional[str] = None
    cards: list[ServiceCard] = []

    for i, line in enumerate(lines):
        if SECTION_RE.match(line):
            section = line
        if not NAME_LINE_RE.match(line):
            continue

        url = ip = host = None
        for j in range(1, window + 1):
            if i + j >= len(lines):
                break
            nxt = lines[i + j]
            if m := URL_RE.search(nxt):
                url = m.group(0)
            if m := IPV4_RE.search(nxt):
                ip = m.group(0)
            if not url and (m := HOST_RE.search(nxt)):
                host = m.group(0)
            if url or ip or host:
                break
            if NAME_LINE_RE.match(nxt):
                break

        if url or ip or host:
            cards.append(ServiceCard(name=line, url=url, ip=ip, host=host, section=section))

    seen: set[str] = set()
    unique = []
    for card in cards:
        if card.key in seen:
            continue
        seen.add(card.key)
        unique.append(card)
    return unique


def should_cardize(text: str) -> bool:
    """Density heuristic: is this chunk a reference card / endpoint list?"""
    if not text:
        return False
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if len(lines) < 5:
        return False

    endpoints = len(URL_RE.findall(text)) + len(IPV4_RE.findall(text))
    short_ratio = sum(1 for line in lines if len(line) <= 35) / len(lines)

    pairs = 0
    for i, line in enumerate(lines):
        if not NAME_LINE_RE.match(line):
            continue
        for j in range(1, 6):
            if i + j >= len(lines):
                break
            if URL_RE.search(lines[i + j]) or IPV4_RE.search(lines[i + j]):
                pairs += 1
                break

    return endpoints >= 3 or (short_ratio >= 0.3 and pairs >= 3)
