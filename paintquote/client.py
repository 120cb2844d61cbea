"""
HTTP client for the PaintQuote API.

Contractor sessions and customer magic-link sessions talk to different route
prefixes with different credentials; pick the adapter once, when the client is
built, with client_for_session().
"""

import logging
from typing import Any, Callable, Dict, Optional

import requests

from paintquote.services.events import RequestFinished, RequestStarted, next_request_id

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class ApiError(Exception):
    """A failed API call. `status` is 0 when the server was never reached."""

    def __init__(self, status: int, message: str, payload: Optional[Dict] = None):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message
        self.payload = payload or {}


class QuoteApiClient:
    """Thin REST client; returns decoded JSON (or bytes for PDFs)."""

    url_prefix = '/api'
    token_header = 'Authorization'

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        refresh_token: Optional[Callable[[], Optional[str]]] = None,
        session: Optional[requests.Session] = None,
        event_bus=None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.refresh_token = refresh_token
        self.event_bus = event_bus
        self.timeout = timeout
        self.session = session or self._build_session()

    # ---------- session setup ----------
    def _build_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        return s

    def _auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {self.token_header: f"Bearer {self.token}"}

    def _url(self, path: str) -> str:
        return f"{self.base_url}{self.url_prefix}/{path.lstrip('/')}"

    def _publish(self, event):
        if self.event_bus is not None:
            self.event_bus.publish(event)

    def _send(self, method: str, url: str, payload: Optional[Any], params: Optional[Dict]):
        return self.session.request(
            method,
            url,
            json=payload,
            params=params,
            headers=self._auth_headers(),
            timeout=self.timeout,
        )

    def _decode(self, response):
        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {'detail': body}
            message = body.get('error') or body.get('message') or response.reason or 'Request failed'
            raise ApiError(response.status_code, message, body)

        if response.headers.get('Content-Type', '').startswith('application/pdf'):
            return response.content
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning("Non-JSON response body (status %s)", response.status_code)
            raise ApiError(response.status_code, 'Invalid JSON response')

    def request(self, method: str, path: str, payload: Optional[Any] = None, params: Optional[Dict] = None):
        """
        Send one request. A 401 triggers a single token refresh and retry
        when a `refresh_token` callable was given.
        """
        method = method.upper()
        url = self._url(path)
        request_id = next_request_id()
        status = None
        self._publish(RequestStarted(request_id=request_id, method=method, path=path))

        try:
            logger.info("%s %s", method, url)
            response = self._send(method, url, payload, params)

            if response.status_code == 401 and self.refresh_token is not None:
                new_token = self.refresh_token()
                if new_token:
                    logger.info("Token refreshed, retrying %s %s", method, url)
                    self.token = new_token
                    response = self._send(method, url, payload, params)

            status = response.status_code
            return self._decode(response)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ApiError(0, f"Could not reach the server: {e}") from e
        finally:
            self._publish(RequestFinished(
                request_id=request_id,
                method=method,
                path=path,
                status=status,
                ok=status is not None and 200 <= status < 300,
            ))

    def get(self, path: str, params: Optional[Dict] = None):
        return self.request('GET', path, params=params)

    def post(self, path: str, payload: Optional[Any] = None):
        return self.request('POST', path, payload=payload)

    def put(self, path: str, payload: Optional[Any] = None):
        return self.request('PUT', path, payload=payload)

    def delete(self, path: str):
        return self.request('DELETE', path)


class ContractorApiClient(QuoteApiClient):
    """Logged-in contractor staff: /api routes, bearer token or session cookie."""

    url_prefix = '/api'

    def login(self, email: str, password: str) -> Dict:
        """Start a cookie session; the session keeps the cookie for later calls."""
        return self.post('/auth/login', {'email': email, 'password': password})

    def logout(self) -> Dict:
        return self.post('/auth/logout')

    # ---------- Pricing schemes ----------
    def list_pricing_schemes(self):
        return self.get('/pricing-schemes')

    def get_pricing_scheme(self, scheme_id: int) -> Dict:
        return self.get(f'/pricing-schemes/{scheme_id}')

    def calculate_with_scheme(self, scheme_id: int, quote_input: Dict) -> Dict:
        return self.post(f'/pricing-schemes/{scheme_id}/calculate', quote_input)

    # ---------- Quotes ----------
    def calculate_quote(self, quote_input: Dict) -> Dict:
        return self.post('/quotes/calculate', quote_input)

    def calculate_tiers(self, quote_input: Dict) -> Dict:
        return self.post('/quotes/calculate-tiers', quote_input)

    def list_quotes(self, status: Optional[str] = None):
        params = {'status': status} if status else None
        return self.get('/quotes', params)

    def create_quote(self, data: Optional[Dict] = None) -> Dict:
        return self.post('/quotes', data or {})

    def get_quote(self, quote_id: int) -> Dict:
        return self.get(f'/quotes/{quote_id}')

    def update_quote(self, quote_id: int, data: Dict) -> Dict:
        return self.put(f'/quotes/{quote_id}', data)

    def update_quote_status(self, quote_id: int, status: str) -> Dict:
        return self.put(f'/quotes/{quote_id}/status', {'status': status})

    def recalculate_quote(self, quote_id: int, tier: Optional[str] = None) -> Dict:
        return self.post(f'/quotes/{quote_id}/calculate', {'tier': tier} if tier else {})

    def get_proposal_pdf(self, quote_id: int) -> bytes:
        return self.get(f'/quotes/{quote_id}/proposal')

    def delete_quote(self, quote_id: int) -> Dict:
        return self.delete(f'/quotes/{quote_id}')


class MagicLinkApiClient(QuoteApiClient):
    """Customers opening a quote from an emailed link: portal routes, link token header."""

    url_prefix = '/api/customer-portal'
    token_header = 'X-Magic-Link-Token'

    def _auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {self.token_header: self.token}


SESSION_CLIENTS = {
    'contractor': ContractorApiClient,
    'magic_link': MagicLinkApiClient,
}


def client_for_session(session_type: str, base_url: str, **kwargs) -> QuoteApiClient:
    """Build the client for a session type ('contractor' or 'magic_link')."""
    try:
        client_class = SESSION_CLIENTS[session_type]
    except KeyError:
        raise ValueError(
            f"Unknown session type '{session_type}'. Must be one of: {', '.join(SESSION_CLIENTS)}"
        )
    return client_class(base_url, **kwargs)
