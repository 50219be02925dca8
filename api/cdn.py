"""
Amazon image CDN naming.

Product photos live at https://m.media-amazon.com/images/I/<id>.<ext>; a size
token between the id and the extension asks the CDN for a resized copy, e.g.
<id>._AC_SL1500_.jpg (long edge 1500px) or <id>._SX679_.jpg (width 679px).
"""
import re

# Hosts we treat as the primary product gallery
PRIMARY_RE = re.compile(r"(?:media-amazon\.com|ssl-images-amazon\.com)/images/I/", re.IGNORECASE)
IMAGE_PATH_RE = re.compile(r"amazon\.com/images/I/", re.IGNORECASE)

# .../images/I/<id>.<ext> with no size token
CANONICAL_PATH_RE = re.compile(r"^(.*/images/I/[^.]+)(\.[a-z]+)$", re.IGNORECASE)

# (pattern, max replacements; 0 = all)
SIZE_TOKEN_PATTERNS = [
    (re.compile(r"\._AC_[A-Z]{2}\d+_,?", re.IGNORECASE), 0),  # auto-crop + size
    (re.compile(r"\._AC_SL\d+_", re.IGNORECASE), 1),
    (re.compile(r"\._SL\d+_", re.IGNORECASE), 1),  # long edge
    (re.compile(r"\._SX\d+_", re.IGNORECASE), 1),  # width
    (re.compile(r"\._SY\d+_", re.IGNORECASE), 1),  # height
    (re.compile(r"\._UX\d+_", re.IGNORECASE), 1),
    (re.compile(r"\._UY\d+_", re.IGNORECASE), 1),
    (re.compile(r"\._SS\d+_", re.IGNORECASE), 1),  # square
    (re.compile(r"\._SR\d+,\d+_", re.IGNORECASE), 1),  # region crop
    (re.compile(r"\._CR\d+,\d+,\d+,\d+_", re.IGNORECASE), 1),  # crop
]

# Long-edge sizes synthesized next to every normalized image
SYNTHESIZED_SIZES = (1000, 500)

# Probe order for the resolver, highest fidelity first. "" rebuilds <id>.<ext>.
PROBE_SIZE_TOKENS = (
    "",
    "._AC_SX679_",
    "._AC_SL1500_",
    "._AC_SL1000_",
    "._SL1500_",
    "._SL1200_",
    "._SL1000_",
    "._SL800_",
    "._SL500_",
    "._SY879_",
    "._SX522_",
)

_EXTENSION_RE = re.compile(r"(\.[a-z]+)$", re.IGNORECASE)


def is_cdn_image_url(url):
    return bool(IMAGE_PATH_RE.search(url))


def is_primary_image_url(url):
    return bool(PRIMARY_RE.search(url))


def strip_size_tokens(url):
    for pattern, count in SIZE_TOKEN_PATTERNS:
        url = pattern.sub("", url, count=count)
    return url


def with_long_edge(url, size):
    return _EXTENSION_RE.sub(rf"._SL{size}_\1", url)


def normalize_amazon_url(url):
    """
    Returns the undecorated CDN URL followed by explicit long-edge variants.

    https://m.media-amazon.com/images/I/abc123._AC_SL1500_.jpg ->
        .../I/abc123.jpg, .../I/abc123._SL1000_.jpg, .../I/abc123._SL500_.jpg
    """
    base = strip_size_tokens(url)
    variants = [base] + [with_long_edge(base, size) for size in SYNTHESIZED_SIZES]
    return list(dict.fromkeys(variants))
