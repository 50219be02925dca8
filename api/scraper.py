import json
import logging
import re
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from . import config
from .cdn import is_cdn_image_url, is_primary_image_url, normalize_amazon_url
from .errors import InvalidInput, UpstreamFetchError, error_details
from .netguard import BlockedURL, UnresolvableHost, check_url, follow_redirects

logger = logging.getLogger(__name__)

_IMAGE_EXT = r"\.(?:jpe?g|png|webp)(?![A-Za-z0-9])"
# Host, then a lazy path up to an image extension. An extension only ends the
# match when no further one follows before the next quote, space, "&" or ",",
# so "a.jpg?v=2.png" stays whole while "x.jpg&quot;,&quot;https://..." splits.
IMAGE_URL_RE = re.compile(
    rf"https?://[^\s\"'<>/]+/[^\s\"'<>]*?{_IMAGE_EXT}(?![^\s\"'<>&,]*{_IMAGE_EXT})",
    re.IGNORECASE,
)
HI_RES_RE = re.compile(r"\"hiRes\"\s*:\s*\"(https?:\\?/\\?/[^\"]+?\.(?:jpe?g|png|webp))\"", re.IGNORECASE)

# UI chrome rather than product photos, matched against the file name only
DENYLIST_RE = re.compile(r"sprite|icon|logo|transparent|placeholder", re.IGNORECASE)


def filename(url):
    return urlparse(url).path.rsplit("/", 1)[-1]


def is_ui_chrome(url):
    return bool(DENYLIST_RE.search(filename(url)))


def _old_hires_urls(soup):
    for tag in soup.find_all(attrs={"data-old-hires": True}):
        value = tag.get("data-old-hires", "").strip()
        if IMAGE_URL_RE.fullmatch(value):
            yield value


def _dynamic_image_urls(soup):
    # data-a-dynamic-image='{"https://...jpg":[500,500], ...}'
    for tag in soup.find_all(attrs={"data-a-dynamic-image": True}):
        try:
            data = json.loads(tag["data-a-dynamic-image"])
        except (TypeError, ValueError):
            continue
        if isinstance(data, dict):
            yield from data.keys()


def collect_image_urls(html):
    """
    Every image URL found in the page, in first-seen order.

    Amazon's dedicated attributes and embedded gallery JSON are read first;
    a plain textual scan then picks up anything else (img src, srcset, JSON blobs).
    """
    found = []
    soup = BeautifulSoup(html, "html.parser")
    found.extend(_old_hires_urls(soup))
    found.extend(_dynamic_image_urls(soup))
    found.extend(m.group(1).replace("\\/", "/") for m in HI_RES_RE.finditer(html))
    found.extend(m.group(0) for m in IMAGE_URL_RE.finditer(html))
    return list(dict.fromkeys(found))


def extract_images_from_html(html, limit=None):
    """Turns raw page HTML into at most `limit` candidate product image URLs."""
    if limit is None:
        limit = config.MAX_EXTRACTED_IMAGES

    urls = collect_image_urls(html)
    primary = [u for u in urls if is_primary_image_url(u)]
    secondary = [u for u in urls if not is_primary_image_url(u)]

    images = []
    for url in primary + secondary:
        if is_cdn_image_url(url):
            images.extend(normalize_amazon_url(url))
        elif not is_ui_chrome(url):
            images.append(url)

    # Cleanup and deduplicate
    return list(dict.fromkeys(images))[:limit]


def fetch_html(url):
    headers = {"User-Agent": config.USER_AGENT}

    def send(target):
        return requests.get(target, headers=headers, timeout=config.REQUEST_TIMEOUT, allow_redirects=False)

    response = follow_redirects(send, url)
    if not response.ok:
        logger.info("Product page %s answered %s, scanning body anyway", url, response.status_code)
    return response.text


def extract_images_from_url(product_url):
    """
    Fetches a product page and returns candidate product image URLs.
    Raises InvalidInput for a missing or disallowed URL and
    UpstreamFetchError when the page cannot be fetched at all.
    """
    if not isinstance(product_url, str) or not product_url.strip():
        raise InvalidInput("productUrl is required")
    product_url = product_url.strip()

    try:
        check_url(product_url)
        html = fetch_html(product_url)
    except (UnresolvableHost, requests.RequestException) as e:
        logger.warning("Fetching %s failed: %s", product_url, e)
        raise UpstreamFetchError("failed to extract images", details=error_details(e)) from e
    except BlockedURL as e:
        raise InvalidInput("productUrl is not allowed", details=str(e)) from e

    images = extract_images_from_html(html)
    logger.info("Extracted %d image(s) from %s", len(images), product_url)
    return images
