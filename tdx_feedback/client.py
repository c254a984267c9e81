# TDX Feedback Client
# OAuth2 client-credentials auth and JSON REST calls against the TDX gateway

import time
import logging
import threading

import httpx

from .config import DEFAULT_OAUTH_SCOPE
from .errors import HttpError
from .helpers import parse_json_body

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 5.0
READ_TIMEOUT = 15.0

# Refresh tokens this many seconds before they expire
TOKEN_EXPIRY_MARGIN = 60
DEFAULT_TOKEN_LIFETIME = 3600


class TdxApiClient:
    """Authenticated client for the TDX ticket API.

    Fetches an OAuth2 token with the client-credentials grant on first use and
    reuses it until it is within a minute of expiring. Non-2xx responses raise
    HttpError; connection problems and timeouts propagate as httpx.TransportError.
    Nothing is retried here.
    """

    def __init__(self, base_url, token_url, client_id, client_secret,
                 scope=DEFAULT_OAUTH_SCOPE, http_client=None, clock=time.time):
        self.base_url = base_url.rstrip('/') if base_url else None
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope or DEFAULT_OAUTH_SCOPE

        self._clock = clock
        self._token = None
        self._token_expires_at = 0
        self._token_lock = threading.Lock()

        self._http = http_client or httpx.Client(
            timeout=httpx.Timeout(READ_TIMEOUT, connect=CONNECT_TIMEOUT)
        )

    @classmethod
    def from_config(cls, config, **kwargs):
        """Build a client from a Configuration"""
        return cls(
            base_url=config.tdx_base_url,
            token_url=config.oauth_token_url,
            client_id=config.client_id,
            client_secret=config.client_secret,
            scope=config.oauth_scope,
            **kwargs
        )

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # ===================
    # TICKET OPERATIONS
    # ===================

    def create_ticket(self, app_id, payload=None, params=None):
        """Create a ticket in the given TDX application.

        Returns the parsed response body (the new ticket as a dict).
        """
        return self._post_json(f"/{app_id}/tickets", payload or {}, params=params)

    def post_feed(self, app_id, ticket_id, payload=None):
        """Add a feed entry (comment or update) to an existing ticket"""
        return self._post_json(f"/{app_id}/tickets/{ticket_id}/feed", payload or {})

    # ===================
    # AUTHENTICATION
    # ===================

    def _token_is_valid(self):
        return bool(self._token) and self._clock() < self._token_expires_at - TOKEN_EXPIRY_MARGIN

    def _ensure_token(self):
        """Fetch a new access token unless the cached one is still fresh"""
        if self._token_is_valid():
            return

        with self._token_lock:
            # Another thread may have refreshed while we waited
            if self._token_is_valid():
                return

            logger.info(f"Requesting TDX access token from {self.token_url}")
            response = self._request(
                'POST',
                self.token_url,
                auth=(self.client_id, self.client_secret),
                data={'grant_type': 'client_credentials', 'scope': self.scope},
                headers={'Accept': 'application/json'}
            )

            try:
                data = response.json()
            except ValueError:
                data = {}
            if not isinstance(data, dict):
                data = {}

            token = data.get('access_token')
            if not token:
                raise HttpError('OAuth token missing', status=response.status_code, body=response.text)

            expires_in = token_lifetime(data.get('expires_in'))

            self._token = token
            self._token_expires_at = self._clock() + expires_in
            logger.debug(f"TDX access token valid for {expires_in}s")

    # ===================
    # HTTP
    # ===================

    def _build_url(self, path, params=None):
        if not self.base_url:
            raise ValueError('base_url is missing')

        url = httpx.URL(self.base_url + path)
        if params:
            # Append so keys already in the base URL query are kept
            pairs = list(url.params.multi_items()) + [(str(key), str(value)) for key, value in params.items()]
            url = url.copy_with(params=pairs)
        return url

    def _post_json(self, path, body, params=None):
        self._ensure_token()
        url = self._build_url(path, params)
        response = self._request(
            'POST',
            url,
            json=body,
            headers={
                'Authorization': f'Bearer {self._token}',
                'Content-Type': 'application/json',
                'Accept': 'application/json'
            }
        )
        return parse_json_body(response.text)

    def _request(self, method, url, **kwargs):
        logger.info(f"{method} {url}")
        response = self._http.request(method, url, **kwargs)
        logger.info(f"Status {response.status_code} for {url}")

        if not response.is_success:
            raise HttpError(f"HTTP {response.status_code}", status=response.status_code, body=response.text)
        return response


def token_lifetime(expires_in):
    """Seconds an access token lives, from the OAuth 'expires_in' value.

    Gateways send ints, floats or numeric strings; anything else falls back
    to an hour.
    """
    if expires_in is None:
        return DEFAULT_TOKEN_LIFETIME
    try:
        return int(float(expires_in))
    except (TypeError, ValueError):
        logger.warning(f"Unusable expires_in {expires_in!r} in TDX token response, assuming {DEFAULT_TOKEN_LIFETIME}s")
        return DEFAULT_TOKEN_LIFETIME
