import json

import httpx
import pytest

from tdx_feedback import Configuration, Feedback, TdxApiClient

BASE_URL = 'https://tdx.example.test/um/it'
TOKEN_URL = 'https://tdx.example.test/um/oauth2/token'


class FakeClock:
    """Settable replacement for time.time"""

    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeGateway:
    """Records requests and answers them like the TDX gateway"""

    def __init__(self):
        self.requests = []
        self.token_responses = []
        self.ticket_responses = []

    def __call__(self, request):
        self.requests.append(request)
        if str(request.url) == TOKEN_URL:
            queue = self.token_responses
            default = httpx.Response(200, json={'access_token': 'token-1', 'expires_in': 3600})
        else:
            queue = self.ticket_responses
            default = httpx.Response(201, json={'ID': 12345})

        response = queue.pop(0) if queue else default
        if isinstance(response, Exception):
            raise response
        return response

    def token_requests(self):
        return [r for r in self.requests if str(r.url) == TOKEN_URL]

    def api_requests(self):
        return [r for r in self.requests if str(r.url) != TOKEN_URL]

    def last_json(self):
        return json.loads(self.api_requests()[-1].content)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def tdx_client(gateway, clock):
    client = TdxApiClient(
        base_url=BASE_URL + '/',
        token_url=TOKEN_URL,
        client_id='id',
        client_secret='secret',
        http_client=httpx.Client(transport=httpx.MockTransport(gateway)),
        clock=clock
    )
    yield client
    client.close()


@pytest.fixture
def config():
    return Configuration(
        enable_ticket_creation=True,
        tdx_base_url=BASE_URL,
        oauth_token_url=TOKEN_URL,
        client_id='id',
        client_secret='secret',
        app_id=31,
        type_id=12,
        form_id=45,
        service_offering_id=89,
        status_id=77,
        source_id=8,
        service_id=67,
        responsible_group_id=631,
        account_id=2,
        title_prefix='[Feedback]',
        default_requestor_email='noreply@example.com'
    )


@pytest.fixture
def feedback():
    return Feedback(message='Hello world', context='ctx')
