from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple
from urllib.parse import urlencode

from .command import run_cmd

logger = logging.getLogger(__name__)


MIRRORLIST_URL = "https://archlinux.org/mirrorlist/"

_COUNTRY_SELECT_RE = re.compile(r'<select[^>]*name="country"[^>]*>(.*?)</select>', re.DOTALL)
_OPTION_RE = re.compile(r'<option[^>]*value="([^"]+)"[^>]*>([^<]*)<')


def parse_countries(html: str) -> List[Tuple[str, str]]:
    """Extract (code, name) pairs from the generator form's country options."""

    select = _COUNTRY_SELECT_RE.search(html)
    scope = select.group(1) if select else html
    return [(code, name.strip()) for code, name in _OPTION_RE.findall(scope) if name.strip()]


def fetch_countries(url: str = MIRRORLIST_URL) -> List[Tuple[str, str]]:
    r = run_cmd(["curl", "-s", url], check=False)
    if r.returncode != 0:
        logger.warning("Fetching %s failed (%s)", url, r.returncode)
        return []
    return parse_countries(r.stdout)


def match_country(countries: List[Tuple[str, str]], text: str) -> Optional[Tuple[str, str]]:
    """Find a country by exact code or exact name."""

    for code, name in countries:
        if text in (code, name):
            return code, name
    return None


def format_countries(countries: List[Tuple[str, str]]) -> str:
    return "\n".join(f"{code}\t{name}" for code, name in countries)


def build_request_url(
    country_code: str,
    *,
    http: bool = True,
    https: bool = True,
    ipv4: bool = True,
    ipv6: bool = True,
    use_mirror_status: bool = True,
    base_url: str = MIRRORLIST_URL,
) -> str:
    params: List[Tuple[str, str]] = [("country", country_code)]
    if http:
        params.append(("protocol", "http"))
    if https:
        params.append(("protocol", "https"))
    if ipv4:
        params.append(("ip_version", "4"))
    if ipv6:
        params.append(("ip_version", "6"))
    if use_mirror_status:
        params.append(("use_mirror_status", "on"))
    return f"{base_url}?{urlencode(params)}"
