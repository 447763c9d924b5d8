"""Canonicalize bookmark URLs by stripping tracking parameters."""
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

# Exact query parameter names removed from every URL
TRACKING_PARAMS = frozenset({
    "fbclid",
    "gclid",
    "gclsrc",
    "dclid",
    "msclkid",
    "yclid",
    "igshid",
    "mc_cid",
    "mc_eid",
    "_hsenc",
    "_hsmi",
    "mkt_tok",
    "oly_anon_id",
    "oly_enc_id",
    "vero_id",
    "wickedid",
    "ref_src",
    "ref_url",
    "si",
    "s_cid",
    "__twitter_impression",
})

# Query parameter prefixes removed from every URL
TRACKING_PREFIXES = ("utm_", "pk_", "mtm_", "hsa_", "ga_")


def is_tracking_param(name: str) -> bool:
    """Return True if a query parameter name is a known tracking parameter."""
    lowered = name.lower()
    return lowered in TRACKING_PARAMS or lowered.startswith(TRACKING_PREFIXES)


def clean_url(url: str) -> str:
    """
    Remove tracking parameters from a URL.

    Remaining query parameters keep their order and values. An empty
    trailing '?' or '#' is dropped. Anything that does not look like an
    absolute http(s) URL is returned unchanged.

    Examples:
        clean_url("https://a.test/p?utm_source=x&id=3") -> "https://a.test/p?id=3"
        clean_url("https://a.test/p?fbclid=abc#") -> "https://a.test/p"
    """
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return url

    params = parse_qsl(parts.query, keep_blank_values=True)
    kept = [(k, v) for k, v in params if not is_tracking_param(k)]
    query = urlencode(kept, doseq=True) if len(kept) != len(params) else parts.query

    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))
