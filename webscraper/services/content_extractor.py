import logging
import re
from typing import Callable, Dict, Iterable, List, Optional, Set
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
TEXT_TAGS = ["p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote"]
NOISE_TAGS = ["script", "style", "noscript", "template"]
WEB_SCHEMES = ("http", "https")


class ContentExtractor:
    """Turn raw HTML into links and typed content sets.

    Content types are looked up by name in `_rules`; every rule receives the
    parsed soup and the page URL and returns a set of strings. When language
    restriction is requested, text-like content is only returned for pages
    whose ``<html lang>`` matches `language`.
    """

    def __init__(
        self,
        language: Optional[str] = None,
        soup_factory: Optional[Callable[[str], BeautifulSoup]] = None,
    ):
        self.language = language.lower() if language else None
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))
        self._rules: Dict[str, Callable[[BeautifulSoup, str], Set[str]]] = {
            "links": self._links_from_soup,
            "text": self._text,
            "images": lambda soup, base: self._sources(soup, base, ["img"]),
            "videos": lambda soup, base: self._sources(soup, base, ["video"]),
            "audio": lambda soup, base: self._sources(soup, base, ["audio"]),
            "emails": self._emails,
        }
        self._language_sensitive = {"text", "emails"}

    def supported_types(self) -> List[str]:
        return sorted(self._rules)

    def validate_types(self, names: Iterable[str]) -> None:
        unknown = [n for n in names if n not in self._rules]
        if unknown:
            raise ValueError(f"unsupported content types: {', '.join(unknown)}")

    def extract_links(self, base_url: str, html: str) -> Set[str]:
        if not html:
            return set()
        return self._links_from_soup(self._soup_factory(html), base_url)

    def extract_content(self, base_url: str, html: str, content_type: str, restrict_language: bool = False) -> Set[str]:
        rule = self._rules.get(content_type)
        if rule is None:
            raise ValueError(f"unsupported content type: {content_type}")
        if not html:
            return set()
        soup = self._soup_factory(html)
        if restrict_language and content_type in self._language_sensitive and not self._language_matches(soup):
            logger.debug("Skipping %s content on %s: language mismatch", content_type, base_url)
            return set()
        return rule(soup, base_url)

    def _language_matches(self, soup: BeautifulSoup) -> bool:
        if not self.language:
            return True
        html_tag = soup.find("html")
        lang = (html_tag.get("lang") or "") if html_tag else ""
        return lang.strip().lower().startswith(self.language)

    def _absolute(self, base_url: str, ref: str) -> Optional[str]:
        if not ref:
            return None
        try:
            url, _ = urldefrag(urljoin(base_url, ref.strip()))
            scheme = urlparse(url).scheme
        except ValueError:
            # e.g. an unterminated IPv6 host such as "http://[oops/"
            logger.debug("Skipping malformed reference %r on %s", ref, base_url)
            return None
        if scheme not in WEB_SCHEMES:
            return None
        return url

    def _links_from_soup(self, soup: BeautifulSoup, base_url: str) -> Set[str]:
        links = set()
        for a in soup.find_all("a", href=True):
            url = self._absolute(base_url, a.get("href"))
            if url:
                links.add(url)
        return links

    def _text(self, soup: BeautifulSoup, base_url: str) -> Set[str]:
        for tag in soup.find_all(NOISE_TAGS):
            tag.decompose()
        texts = set()
        for element in soup.find_all(TEXT_TAGS):
            text = element.get_text(separator=" ", strip=True)
            if text:
                texts.add(" ".join(text.split()))
        return texts

    def _sources(self, soup: BeautifulSoup, base_url: str, tags: List[str]) -> Set[str]:
        found = set()
        for element in soup.find_all(tags):
            candidates = [element.get("src")]
            candidates.extend(source.get("src") for source in element.find_all("source"))
            for ref in candidates:
                url = self._absolute(base_url, ref) if ref else None
                if url:
                    found.add(url)
        return found

    def _emails(self, soup: BeautifulSoup, base_url: str) -> Set[str]:
        emails = set()
        for a in soup.find_all("a", href=True):
            href = a.get("href", "")
            if href.lower().startswith("mailto:"):
                address = href[len("mailto:"):].split("?", 1)[0].strip()
                if EMAIL_RE.fullmatch(address):
                    emails.add(address.lower())
        for match in EMAIL_RE.findall(soup.get_text(separator=" ")):
            emails.add(match.lower())
        return emails
