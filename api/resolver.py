import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Optional

import requests

from . import config
from .cdn import CANONICAL_PATH_RE, PROBE_SIZE_TOKENS, strip_size_tokens
from .netguard import BlockedURL, follow_redirects, is_allowed_url

logger = logging.getLogger(__name__)

TRAILING_EXT_RE = re.compile(r"\.[a-z]+$", re.IGNORECASE)

# Some hosts reject HEAD outright; these get a GET instead.
HEAD_REJECTED_STATUSES = (403, 405)

ACCEPT_IMAGE = "image/avif,image/webp,image/apng,image/*,*/*;q=0.8"


@dataclass(frozen=True)
class ProbeOutcome:
    url: str
    method: str
    status: Optional[int] = None
    content_type: str = ""
    error: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return (
            self.error is None
            and self.status is not None
            and 200 <= self.status < 300
            and self.content_type.lower().startswith("image/")
        )


def split_base_and_extension(url: str) -> tuple[str, str]:
    # CDN URLs lose their size token so every probe token lands on the bare id
    m = CANONICAL_PATH_RE.match(strip_size_tokens(url))
    if m:
        return m.group(1), m.group(2)
    ext_match = TRAILING_EXT_RE.search(url)
    if ext_match:
        return url[: ext_match.start()], ext_match.group(0)
    return url, ".jpg"


def make_variants(url: str) -> list[str]:
    """
    Candidate URLs for one image, in the order they should be probed.
    The untouched input always comes first.
    """
    base, ext = split_base_and_extension(url)
    variants = [f"{base}{token}{ext}" for token in PROBE_SIZE_TOKENS]
    if url not in variants:
        variants.insert(0, url)
    return list(dict.fromkeys(variants))


def _probe_headers() -> dict:
    return {"User-Agent": config.USER_AGENT, "Accept": ACCEPT_IMAGE}


def _request(session, method: str, url: str) -> ProbeOutcome:
    def send(target):
        # stream=True so a GET fallback never downloads the image body
        return session.request(
            method,
            target,
            headers=_probe_headers(),
            timeout=config.PROBE_TIMEOUT,
            allow_redirects=False,
            stream=True,
        )

    try:
        with follow_redirects(send, url) as r:
            return ProbeOutcome(
                url=url,
                method=method,
                status=r.status_code,
                content_type=r.headers.get("content-type") or "",
            )
    except (BlockedURL, requests.RequestException) as e:
        return ProbeOutcome(url=url, method=method, error=str(e) or e.__class__.__name__)


def probe(session, url: str) -> list[ProbeOutcome]:
    """HEAD the URL, falling back to GET when the host refuses HEAD."""
    head = _request(session, "HEAD", url)
    if head.accepted or head.status not in HEAD_REJECTED_STATUSES:
        return [head]
    return [head, _request(session, "GET", url)]


def first_success(outcomes: Iterable[ProbeOutcome]) -> Optional[str]:
    """URL of the first accepted outcome. Consumes lazily so later probes are never sent."""
    for outcome in outcomes:
        if outcome.accepted:
            return outcome.url
        if outcome.error:
            logger.debug("%s %s failed: %s", outcome.method, outcome.url, outcome.error)
        else:
            logger.debug("%s %s -> %s %s", outcome.method, outcome.url, outcome.status, outcome.content_type)
    return None


def _probe_all(session, variants: list[str]) -> Iterable[ProbeOutcome]:
    for variant in variants:
        yield from probe(session, variant)


def resolve_url(url: str, session_factory=None) -> Optional[str]:
    """First variant of `url` that serves an image, or None."""
    if not is_allowed_url(url):
        return None
    if session_factory is None:
        session_factory = requests.Session

    variants = make_variants(url)
    with session_factory() as session:
        found = first_success(_probe_all(session, variants))

    if found is None:
        logger.info("No live image among %d variant(s) of %s", len(variants), url)
    return found


def resolve_images(urls: list[str], session_factory=None, max_workers: Optional[int] = None) -> list[str]:
    """
    Resolves every input URL and returns the ones that worked, in input order.
    URLs are resolved in parallel; variants of one URL are probed in priority order.
    """
    if not urls:
        return []
    if max_workers is None:
        max_workers = config.RESOLVE_MAX_WORKERS

    workers = min(max_workers, len(urls))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(lambda u: resolve_url(u, session_factory), urls))

    valid = [r for r in results if r]
    logger.info("Resolved %d of %d image URL(s)", len(valid), len(urls))
    return valid
