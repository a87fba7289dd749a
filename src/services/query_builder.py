"""Translate a SearchRequest into YouTube search parameters.

Country selectors map to region codes and relevance languages through static
tables. When the user gives no keyword, a filler term is drawn from a small
per-country vocabulary to approximate "popular" results: the search endpoint
requires some query text, and a broad term ordered by view count (or by
relevance inside a region) is the closest stand-in for a trending listing.
This is a heuristic, not a guarantee about what YouTube returns.
"""

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from models.video import SearchQuery, SearchRequest

logger = logging.getLogger(__name__)

WORLDWIDE = "worldwide"

MAX_PAGE_SIZE = 50  # YouTube API limit

# None = searched worldwide on purpose (service restrictions in that market)
COUNTRY_REGION_CODES = {
    "worldwide": None,
    "korea": "KR",
    "usa": "US",
    "japan": "JP",
    "china": None,
    "uk": "GB",
    "germany": "DE",
    "france": "FR",
    "canada": "CA",
    "australia": "AU",
    "india": "IN",
    "brazil": "BR",
    "mexico": "MX",
    "russia": None,
    "italy": "IT",
    "spain": "ES",
}

COUNTRY_LANGUAGES = {
    "worldwide": "en",
    "korea": "ko",
    "usa": "en",
    "japan": "ja",
    "china": "zh",
    "uk": "en",
    "germany": "de",
    "france": "fr",
    "canada": "en",
    "australia": "en",
    "india": "en",
    "brazil": "pt",
    "mexico": "es",
    "russia": "en",
    "italy": "it",
    "spain": "es",
}
DEFAULT_LANGUAGE = "en"

# ISO 3166-1 alpha-2 codes accepted as YouTube regionCode values
VALID_REGION_CODES = frozenset("""
    AD AE AF AG AI AL AM AO AQ AR AS AT AU AW AX AZ BA BB BD BE BF BG BH BI
    BJ BL BM BN BO BQ BR BS BT BV BW BY BZ CA CC CD CF CG CH CI CK CL CM CN
    CO CR CU CV CW CX CY CZ DE DJ DK DM DO DZ EC EE EG EH ER ES ET FI FJ FK
    FM FO FR GA GB GD GE GF GG GH GI GL GM GN GP GQ GR GS GT GU GW GY HK HM
    HN HR HT HU ID IE IL IM IN IO IQ IR IS IT JE JM JO JP KE KG KH KI KM KN
    KP KR KW KY KZ LA LB LC LI LK LR LS LT LU LV LY MA MC MD ME MF MG MH MK
    ML MM MN MO MP MQ MR MS MT MU MV MW MX MY MZ NA NC NE NF NG NI NL NO NP
    NR NU NZ OM PA PE PF PG PH PK PL PM PN PR PS PT PW PY QA RE RO RS RU RW
    SA SB SC SD SE SG SH SI SJ SK SL SM SN SO SR SS ST SV SX SY SZ TC TD TF
    TG TH TJ TK TL TM TN TO TR TT TV TW TZ UA UG UM US UY UZ VA VC VE VG VI
    VN VU WF WS YE YT ZA ZM ZW
""".split())

COUNTRY_FILLER_TERMS = {
    "korea": ["한국", "korean", "korea", "한국어"],
    "usa": ["america", "usa", "american", "english"],
    "japan": ["japan", "japanese", "日本", "日本語"],
    "uk": ["britain", "uk", "british", "english"],
    "germany": ["germany", "german", "deutsch"],
    "france": ["france", "french", "français"],
    "canada": ["canada", "canadian", "english", "french"],
    "australia": ["australia", "australian", "english"],
    "india": ["india", "indian", "hindi", "english"],
    "brazil": ["brazil", "brazilian", "portuguese", "português"],
    "mexico": ["mexico", "mexican", "spanish", "español"],
    "italy": ["italy", "italian", "italiano"],
    "spain": ["spain", "spanish", "español"],
}
DEFAULT_COUNTRY_TERMS = ["video", "popular"]
WORLDWIDE_FILLER_TERMS = ["a", "the", "and", "or", "video", "youtube"]

PERIOD_DAYS = {
    "1day": 1,
    "1week": 7,
    "1month": 30,
    "3months": 90,
    "6months": 180,
    "1year": 365,
    **{f"{n}years": n * 365 for n in range(2, 11)},
}


def get_region_code(country: str) -> Optional[str]:
    """Resolve a country selector to a validated region code (or None)."""
    code = COUNTRY_REGION_CODES.get((country or "").lower())
    return code if code and code in VALID_REGION_CODES else None


def get_language_code(country: str) -> str:
    """Resolve a country selector to a relevance language."""
    return COUNTRY_LANGUAGES.get((country or "").lower(), DEFAULT_LANGUAGE)


def _to_rfc3339(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def get_period_range(period: Optional[str], now: Optional[datetime] = None) -> Optional[str]:
    """Return the publishedAfter bound for a relative upload period."""
    days = PERIOD_DAYS.get(period or "")
    if days is None:
        return None
    now = now or datetime.now(timezone.utc)
    return _to_rfc3339(now - timedelta(days=days))


def parse_explicit_date(value: Optional[str], end_of_day: bool = False) -> Optional[str]:
    """Parse a YYYY-MM-DD date into an RFC 3339 bound.

    Invalid dates are logged and ignored rather than failing the search.
    """
    if not value:
        return None
    try:
        day = datetime.strptime(value.strip(), "%Y-%m-%d")
    except ValueError:
        logger.error(f"Ignoring invalid {'end' if end_of_day else 'start'} date: {value!r}")
        return None

    if end_of_day:
        day = day.replace(hour=23, minute=59, second=59)
    return day.strftime("%Y-%m-%dT%H:%M:%SZ")


class QueryBuilder:
    """Builds provider queries from search requests.

    Args:
        rng: Random source for filler terms. Pass a seeded ``random.Random``
            for reproducible queries.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def pick_filler_term(self, country: str) -> str:
        """Pick a filler query term for keyword-less searches."""
        country = (country or WORLDWIDE).lower()
        if country == WORLDWIDE:
            terms = WORLDWIDE_FILLER_TERMS
        else:
            terms = COUNTRY_FILLER_TERMS.get(country, DEFAULT_COUNTRY_TERMS)
        return self.rng.choice(terms)

    def resolve_time_window(
        self, request: SearchRequest, now: Optional[datetime] = None
    ) -> Tuple[Optional[str], Optional[str]]:
        """Return (published_after, published_before).

        Explicit start/end dates override the relative period bound they
        replace; an invalid explicit date leaves the period bound in place.
        """
        published_after = get_period_range(request.upload_period, now)
        published_before = None

        start = parse_explicit_date(request.start_date)
        if start:
            published_after = start
        end = parse_explicit_date(request.end_date, end_of_day=True)
        if end:
            published_before = end

        return published_after, published_before

    def build(self, request: SearchRequest, now: Optional[datetime] = None) -> SearchQuery:
        """Build the provider query for ``request``."""
        country = (request.country or WORLDWIDE).lower()
        region_code = get_region_code(country) if country != WORLDWIDE else None
        if country != WORLDWIDE and region_code is None:
            logger.warning(f"No region code for '{country}', searching worldwide")

        if request.has_keyword:
            q = request.keyword.strip()
            order = "viewCount"
        else:
            q = self.pick_filler_term(country)
            order = "viewCount" if country == WORLDWIDE else "relevance"
            logger.info(f"No keyword: using filler term {q!r} for {country}")

        published_after, published_before = self.resolve_time_window(request, now)

        return SearchQuery(
            q=q,
            order=order,
            region_code=region_code,
            relevance_language=get_language_code(country),
            published_after=published_after,
            published_before=published_before,
            page_size=min(request.max_results, MAX_PAGE_SIZE),
        )
