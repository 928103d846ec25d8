"""Knowledge-base searchers: Wikipedia page summaries (primary) and Wikidata entity search (fallback).

Each searcher owns a pooled requests.Session that is safe to share across request
threads. Network, HTTP and parse failures never escape search(); they are logged and
returned as SearchResult(status=error).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import requests

from landmark_lens.core.config import (
    DEFAULT_USER_AGENT,
    DEFAULT_WIKIDATA_ENDPOINT,
    DEFAULT_WIKIPEDIA_ENDPOINT,
)
from landmark_lens.enrichment.schema import LocationInfo, SearchResult

_log = logging.getLogger(__name__)

WIKIPEDIA_SOURCE = "Wikipedia"
WIKIDATA_SOURCE = "Wikidata"


def _pooled_session(user_agent: str) -> requests.Session:
    session = requests.Session()
    adapter = requests.adapters.HTTPAdapter(pool_connections=10, pool_maxsize=20)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"User-Agent": user_agent, "Accept": "application/json"})
    return session


class LocationSearcher(ABC):
    """Term-keyed lookup against one knowledge source."""

    source: str = ""

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout = timeout
        self._session = session if session is not None else _pooled_session(user_agent)

    @abstractmethod
    def _lookup(self, term: str) -> LocationInfo | None:
        """Query the source; return None when nothing usable was found. May raise."""
        ...

    def search(self, term: str) -> SearchResult:
        try:
            location = self._lookup(term)
        except (requests.RequestException, ValueError, TypeError, AttributeError) as e:
            _log.warning("%s search failed for %r: %s", self.source, term, e)
            return SearchResult.failed(str(e))
        if location is None:
            _log.debug("%s: no match for %r", self.source, term)
            return SearchResult.miss()
        _log.info("%s: matched %r -> %s", self.source, term, location.name)
        return SearchResult.hit(location)

    def _get_json(self, url: str, params: dict | None = None) -> Any:
        """GET url; None for non-2xx responses, parsed JSON otherwise."""
        resp = self._session.get(url, params=params, timeout=self._timeout)
        if not resp.ok:
            _log.debug("%s returned HTTP %s for %s", self.source, resp.status_code, url)
            return None
        return resp.json()

    def close(self) -> None:
        self._session.close()


class WikipediaSearcher(LocationSearcher):
    """Page-summary lookup by exact title; only standard pages with coordinates count."""

    source = WIKIPEDIA_SOURCE

    def __init__(self, endpoint: str = DEFAULT_WIKIPEDIA_ENDPOINT, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._endpoint = endpoint.rstrip("/")

    def _lookup(self, term: str) -> LocationInfo | None:
        page = self._get_json(f"{self._endpoint}/{quote(term, safe='')}")
        if not isinstance(page, dict):
            return None
        coordinates = page.get("coordinates")
        # Disambiguation pages and pages without coordinates are not locations.
        if page.get("type") != "standard" or not coordinates:
            return None
        return LocationInfo(
            name=page.get("title") or term,
            description=page.get("extract"),
            latitude=coordinates.get("lat"),
            longitude=coordinates.get("lon"),
            source=self.source,
            url=((page.get("content_urls") or {}).get("desktop") or {}).get("page"),
            thumbnail_url=(page.get("thumbnail") or {}).get("source"),
        )


class WikidataSearcher(LocationSearcher):
    """Entity search (limit 1); any returned entity counts, with or without coordinates."""

    source = WIKIDATA_SOURCE

    def __init__(
        self,
        endpoint: str = DEFAULT_WIKIDATA_ENDPOINT,
        language: str = "en",
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._endpoint = endpoint
        self._language = language

    def _lookup(self, term: str) -> LocationInfo | None:
        data = self._get_json(
            self._endpoint,
            params={
                "action": "wbsearchentities",
                "search": term,
                "language": self._language,
                "format": "json",
                "limit": 1,
            },
        )
        if not isinstance(data, dict):
            return None
        results = data.get("search") or []
        if not results:
            return None
        item = results[0]
        return LocationInfo(
            name=item.get("label") or term,
            description=item.get("description"),
            source=self.source,
            url=item.get("concepturi"),
        )
