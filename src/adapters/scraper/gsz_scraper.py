from typing import List, Optional, Tuple
import requests
from bs4 import BeautifulSoup
from urllib.parse import urljoin
from ...domain.models import Listing
from ...domain.ports import ListingsScraperPort
from ...infrastructure.config import settings

SEARCH_PATH = "/registration/vacancy-search/"
TITLE_SELECTOR = "h4.job-title a"
COMPANY_SELECTOR = "#vacancy-detail h5"
PHONE_SELECTOR = "a[href^='tel:']"

LABEL_SALARY = "Заработная плата"
LABEL_ADDRESS = "Адрес рабочего места"
LABEL_EDUCATION = "Образование"
LABEL_CONTACT = "ФИО"


class GszScraper(ListingsScraperPort):
    def __init__(
        self,
        base_url: str = settings.base_url,
        search_url: str = settings.search_url,
        max_items: int = settings.max_items,
        user_agent: str = settings.user_agent,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.search_url = search_url
        self.max_items = max_items
        self.headers = {"User-Agent": user_agent}
        self._session = session

    def _get(self, session: requests.Session, url: str, params: Optional[dict] = None) -> str:
        print(f"[scraper] GET {url}")
        resp = session.get(url, params=params, headers=self.headers, timeout=30)
        print(f"[scraper] Status: {resp.status_code}")
        resp.raise_for_status()
        return resp.text

    def _parse_candidates(self, html: str) -> List[Tuple[str, str]]:
        soup = BeautifulSoup(html, "lxml")
        candidates: List[Tuple[str, str]] = []
        for link in soup.select(TITLE_SELECTOR):
            href = link.get("href")
            if not href:
                continue
            candidates.append((link.get_text().strip(), urljoin(self.base_url, href)))
        return candidates

    def _parse_detail(self, html: str, url: str, title: str) -> Listing:
        soup = BeautifulSoup(html, "lxml")

        def labeled(label: str) -> str:
            # <div><p>label</p></div><div>value</div>
            p = soup.select_one(f'p:-soup-contains("{label}")')
            if p is None or p.parent is None:
                return ""
            value = p.parent.find_next_sibling()
            return value.get_text().strip() if value is not None else ""

        def first_text(selector: str) -> str:
            el = soup.select_one(selector)
            return el.get_text().strip() if el is not None else ""

        return Listing(
            url=url,
            title=title,
            salary=labeled(LABEL_SALARY),
            company=first_text(COMPANY_SELECTOR),
            address=labeled(LABEL_ADDRESS),
            education=labeled(LABEL_EDUCATION),
            contact_name=labeled(LABEL_CONTACT),
            contact_phone=first_text(PHONE_SELECTOR),
        )

    def fetch(self, query: Optional[str] = None) -> List[Listing]:
        session = self._session or requests.Session()
        try:
            if query:
                html = self._get(session, urljoin(self.base_url, SEARCH_PATH), params={"profession": query, "paginate_by": 10})
            else:
                html = self._get(session, self.search_url)
        except Exception as e:
            print(f"[scraper] Search page error: {e}")
            return []

        candidates = self._parse_candidates(html)
        print(f"[scraper] Found {len(candidates)} candidate links")

        listings: List[Listing] = []
        for title, url in candidates:
            if len(listings) >= self.max_items:
                break
            try:
                listings.append(self._parse_detail(self._get(session, url), url, title))
            except Exception as e:
                print(f"[scraper] Skipping {url}: {e}")
        print(f"[scraper] Parsed {len(listings)} listings")
        return listings
