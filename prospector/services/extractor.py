"""Contact extraction over fetched HTML.

Everything here is pure: no network access, no shared state. The scraper
service feeds page HTML in and gets ``ScrapedContact`` entries back.
"""

import json
import logging
import re
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

from prospector.exceptions.custom import ExtractionError
from prospector.schemas.scraper import ScrapedContact

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}\b")

# US formats: (555) 123-4567, 555-123-4567, 555.123.4567, 5551234567, +1 555 123 4567
_PHONE_RE = re.compile(r"(?<!\d)(?:\+?1[-.\s]?)?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}(?!\d)")

# Obfuscations decoded before email matching
_EMAIL_DECODINGS = (
    (re.compile(r"\\?u003e", re.IGNORECASE), ">"),
    (re.compile(r"\\?u003c", re.IGNORECASE), "<"),
    (re.compile(r"%40"), "@"),
    (re.compile(r"%2E", re.IGNORECASE), "."),
    (re.compile(r"\s*[\[({]at[\])}]\s*", re.IGNORECASE), "@"),
    (re.compile(r"\s*[\[({]dot[\])}]\s*", re.IGNORECASE), "."),
)

# Image/asset names that look like emails (logo@2x.png)
_BLOCKED_FILE_EXTENSIONS = (
    ".webp", ".jpg", ".jpeg", ".png", ".gif", ".svg", ".ico", ".bmp", ".tiff",
    ".mp4", ".webm", ".avi", ".mov", ".wmv", ".mp3", ".wav", ".ogg",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".zip", ".rar", ".7z", ".tar", ".gz",
    ".js", ".css", ".html", ".htm", ".xml", ".json",
    ".woff", ".woff2", ".ttf", ".eot",
)

_BLOCKED_EMAIL_PREFIXES = frozenset({
    "noreply", "no-reply", "no_reply", "donotreply", "do-not-reply", "do_not_reply",
    "mailer-daemon", "postmaster", "webmaster", "hostmaster",
    "root", "abuse", "spam", "unsubscribe", "bounce", "null",
})

_BLOCKED_EMAIL_DOMAINS = frozenset({
    "test.com", "test.org", "localhost", "localhost.localdomain",
    "domain.com", "email.com", "yourcompany.com", "yourdomain.com",
    "company.com", "acme.com", "foo.com", "bar.com",
    "mailinator.com", "tempmail.com", "throwaway.com",
    "sentry.io", "wixpress.com",
})

# platform -> profile URL pattern
_SOCIAL_PATTERNS = {
    "linkedin": re.compile(r"^https?://(?:[a-z]{2,3}\.)?linkedin\.com/(?:company|in|school)/[^/?#\s]+", re.IGNORECASE),
    "twitter": re.compile(r"^https?://(?:www\.|mobile\.)?(?:twitter|x)\.com/(?!intent|share|home|search)[A-Za-z0-9_]{1,15}\b", re.IGNORECASE),
    "facebook": re.compile(r"^https?://(?:www\.|m\.)?facebook\.com/(?!sharer|share|dialog|plugins|tr\b)[^/?#\s]+", re.IGNORECASE),
    "instagram": re.compile(r"^https?://(?:www\.)?instagram\.com/(?!p/|reel/|stories/|explore/|accounts/)[A-Za-z0-9_.]+", re.IGNORECASE),
    "youtube": re.compile(r"^https?://(?:www\.)?youtube\.com/(?:@[^/?#\s]+|c/[^/?#\s]+|channel/[^/?#\s]+|user/[^/?#\s]+)", re.IGNORECASE),
    "tiktok": re.compile(r"^https?://(?:www\.)?tiktok\.com/@[^/?#\s]+", re.IGNORECASE),
    "github": re.compile(r"^https?://(?:www\.)?github\.com/(?!features|about|pricing|login|sponsors)[A-Za-z0-9\-]+/?$", re.IGNORECASE),
}

_CONTACT_HREF_TOKENS = ("contact", "about", "team")
_CONTACT_TEXT_TOKENS = ("contact", "about us", "our team", "get in touch", "reach us")
_SKIPPED_SCHEMES = ("mailto:", "tel:", "javascript:")


def decode_obfuscated(text: str) -> str:
    for pattern, replacement in _EMAIL_DECODINGS:
        text = pattern.sub(replacement, text)
    return text


def _is_valid_email(email: str) -> bool:
    local, _, domain = email.partition("@")
    if not local or not domain:
        return False
    if any(domain.endswith(ext) or local.endswith(ext) for ext in _BLOCKED_FILE_EXTENSIONS):
        return False
    if any(local == p or local.startswith(p + ".") for p in _BLOCKED_EMAIL_PREFIXES):
        return False
    if any(domain == d or domain.endswith("." + d) for d in _BLOCKED_EMAIL_DOMAINS):
        return False

    tld = domain.rsplit(".", 1)[-1]
    if not 2 <= len(tld) <= 10 or not tld.isalpha():
        return False
    if local.isdigit():
        return False
    # Retina asset names (icon-150x150@...) and template ids
    if "-150x150" in local or (local.startswith("group-") and any(c.isdigit() for c in local)):
        return False
    return True


def extract_emails(text: str) -> list[str]:
    """Return unique, filtered, lower-cased emails in order of first appearance."""
    decoded = decode_obfuscated(text)
    found: dict[str, None] = {}
    for match in _EMAIL_RE.findall(decoded):
        email = match.lower().strip(".")
        if email not in found and _is_valid_email(email):
            found[email] = None
    return list(found)


def normalize_phone(phone: str) -> str | None:
    """Digits only; None unless 10 digits or 11 digits with a leading 1."""
    digits = "".join(c for c in phone if c.isdigit())
    if len(digits) == 10 or (len(digits) == 11 and digits.startswith("1")):
        return digits
    return None


def extract_phones(text: str) -> list[str]:
    found: dict[str, None] = {}
    for match in _PHONE_RE.findall(text):
        phone = normalize_phone(match)
        if phone and phone not in found:
            found[phone] = None
    return list(found)


def extract_tel_links(soup: BeautifulSoup) -> list[str]:
    """Normalized phones from tel: hrefs, document order."""
    found: dict[str, None] = {}
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href.lower().startswith("tel:"):
            continue
        phone = normalize_phone(href[4:])
        if phone:
            found.setdefault(phone, None)
    return list(found)


def extract_social_links(soup: BeautifulSoup) -> dict[str, str]:
    """First profile link per platform, in document order."""
    links: dict[str, str] = {}
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        for platform, pattern in _SOCIAL_PATTERNS.items():
            if platform in links:
                continue
            m = pattern.match(href)
            if m:
                links[platform] = m.group(0).rstrip("/")
                break
    return links


def _json_ld_objects(soup: BeautifulSoup) -> list[dict]:
    objects: list[dict] = []
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or "")
        except (json.JSONDecodeError, ValueError):
            continue
        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                continue
            objects.append(item)
            graph = item.get("@graph")
            if isinstance(graph, list):
                objects.extend(g for g in graph if isinstance(g, dict))
    return objects


def extract_company_name(soup: BeautifulSoup) -> str | None:
    org_objects = [o for o in _json_ld_objects(soup) if o.get("@type") != "Person"]
    if org_objects:
        obj = org_objects[0]
        if isinstance(obj.get("name"), str):
            return obj["name"]
        org = obj.get("organization")
        if isinstance(org, dict) and isinstance(org.get("name"), str):
            return org["name"]

    for prop in ("og:site_name", "og:title"):
        meta = soup.find("meta", property=prop)
        if meta and meta.get("content"):
            return meta["content"].strip()

    if soup.title and soup.title.string:
        title = soup.title.string.split("|")[0].split("-")[0].strip()
        if title and len(title) < 50:
            return title
    return None


def _extract_people(soup: BeautifulSoup, source_url: str, company: str | None) -> list[ScrapedContact]:
    """Contacts from JSON-LD Person objects."""
    people: list[ScrapedContact] = []
    for obj in _json_ld_objects(soup):
        if obj.get("@type") != "Person" or not isinstance(obj.get("name"), str):
            continue
        email = obj.get("email")
        if isinstance(email, str):
            email = email.removeprefix("mailto:").lower()
            if not _is_valid_email(email):
                email = None
        else:
            email = None
        phone = obj.get("telephone")
        people.append(ScrapedContact(
            name=obj["name"].strip(),
            title=obj.get("jobTitle") if isinstance(obj.get("jobTitle"), str) else None,
            email=email,
            phone=normalize_phone(phone) if isinstance(phone, str) else None,
            company=company,
            source_url=source_url,
        ))
    return people


def page_text(soup: BeautifulSoup) -> str:
    """Visible text with a space between elements, whitespace collapsed."""
    body = soup.body or soup
    return " ".join(body.get_text(separator=" ").split())


def extract_contacts(html: str, source_url: str) -> list[ScrapedContact]:
    """Extract contact candidates from one page.

    Emails and phones found several times on the page collapse into one entry.
    Phones are paired with the first contact that has no phone yet; social
    links go on the first contact. Every entry is attributed to ``source_url``.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as exc:
        raise ExtractionError(f"Could not parse HTML: {exc}", source_url=source_url) from exc

    company = extract_company_name(soup)
    socials = extract_social_links(soup)
    text = page_text(soup)

    contacts = _extract_people(soup, source_url, company)
    known_emails = {c.email for c in contacts if c.email}
    known_phones = {c.phone[-10:] for c in contacts if c.phone}

    for email in extract_emails(html + " " + text):
        if email not in known_emails:
            contacts.append(ScrapedContact(email=email, company=company, source_url=source_url))

    # tel: links first, then phones written in the text; +1 and bare forms are one number
    phones: dict[str, str] = {}
    for phone in extract_tel_links(soup) + extract_phones(text):
        phones.setdefault(phone[-10:], phone)
    for phone in phones.values():
        if phone[-10:] in known_phones:
            continue
        existing = next((c for c in contacts if not c.phone), None)
        if existing:
            existing.phone = phone
        else:
            contacts.append(ScrapedContact(phone=phone, company=company, source_url=source_url))

    if socials:
        if contacts:
            contacts[0].social_links = socials
        else:
            contacts.append(ScrapedContact(social_links=socials, company=company, source_url=source_url))

    logger.debug("Extracted %d contacts from %s", len(contacts), source_url)
    return contacts


def find_contact_page_urls(html: str, base_url: str, limit: int = 5) -> list[str]:
    """Same-host links that look like contact/about/team pages, document order."""
    soup = BeautifulSoup(html, "html.parser")
    base_host = urlparse(base_url).hostname
    urls: dict[str, None] = {}

    for a in soup.find_all("a", href=True):
        if len(urls) >= limit:
            break
        href = a["href"].strip()
        if not href or href.lower().startswith(_SKIPPED_SCHEMES):
            continue

        href_lower = href.lower()
        text = a.get_text(" ").lower()
        if not (
            any(token in href_lower for token in _CONTACT_HREF_TOKENS)
            or any(token in text for token in _CONTACT_TEXT_TOKENS)
        ):
            continue

        full_url, _ = urldefrag(urljoin(base_url, href))
        parsed = urlparse(full_url)
        if parsed.scheme not in ("http", "https") or parsed.hostname != base_host:
            continue
        urls.setdefault(full_url, None)

    return list(urls)


def dedupe_contacts(contacts: list[ScrapedContact]) -> list[ScrapedContact]:
    """Keep the first contact per email (or phone when there is no email)."""
    seen: set[str] = set()
    unique: list[ScrapedContact] = []
    for contact in contacts:
        key = contact.email or contact.phone or ""
        if key and key in seen:
            continue
        if key:
            seen.add(key)
        unique.append(contact)
    return unique
