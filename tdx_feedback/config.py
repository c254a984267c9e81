# TDX Feedback Config
# Settings for the TDX ticket integration, resolved from the environment

import os
import logging
from dataclasses import dataclass, fields, replace

logger = logging.getLogger(__name__)

# Environment selection
ENVIRONMENT_VARIABLES = ['TDX_FEEDBACK_ENV', 'FLASK_ENV']
DEFAULT_ENVIRONMENT = 'development'

# Environment name -> key used in TDX_<KEY>_* variables
ENVIRONMENT_KEYS = {
    'production': 'PRODUCTION',
    'staging': 'STAGING',
    'test': 'STAGING',
    'development': 'DEVELOPMENT'
}

# TDX gateway
PRODUCTION_BASE_URL = 'https://gw.api.it.umich.edu/um/it'
PRODUCTION_OAUTH_TOKEN_URL = 'https://gw.api.it.umich.edu/um/oauth2/token'
TEST_BASE_URL = 'https://gw-test.api.it.umich.edu/um/it'
TEST_OAUTH_TOKEN_URL = 'https://gw-test.api.it.umich.edu/um/oauth2/token'
DEFAULT_OAUTH_SCOPE = 'tdxticket'

DEFAULT_TITLE_PREFIX = '[Feedback]'

TRUTHY_VALUES = ['1', 'true', 'yes', 'on']

# Config field -> variable suffix, read as TDX_<ENV>_<SUFFIX> then TDX_<SUFFIX>
STRING_SETTINGS = {
    'tdx_base_url': 'BASE_URL',
    'oauth_token_url': 'OAUTH_TOKEN_URL',
    'client_id': 'CLIENT_ID',
    'client_secret': 'CLIENT_SECRET',
    'oauth_scope': 'OAUTH_SCOPE',
    'title_prefix': 'TITLE_PREFIX',
    'default_requestor_email': 'DEFAULT_REQUESTOR_EMAIL'
}

INTEGER_SETTINGS = {
    'app_id': 'APP_ID',
    'type_id': 'TYPE_ID',
    'form_id': 'FORM_ID',
    'service_offering_id': 'SERVICE_OFFERING_ID',
    'status_id': 'STATUS_ID',
    'source_id': 'SOURCE_ID',
    'service_id': 'SERVICE_ID',
    'responsible_group_id': 'RESPONSIBLE_GROUP_ID',
    'account_id': 'ACCOUNT_ID'
}

BOOLEAN_SETTINGS = {
    'enable_ticket_creation': 'ENABLE_TICKET_CREATION',
    'require_authentication': 'REQUIRE_AUTHENTICATION'
}

# IDs TDX needs before it will accept a ticket. FormID, ServiceOfferingID and
# AccountID are left off the payload when unset, so they are not checked here.
REQUIRED_TICKET_IDS = [
    'app_id', 'type_id', 'status_id', 'source_id', 'service_id', 'responsible_group_id'
]


def truthy(value):
    """Interpret a config value as a boolean"""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY_VALUES


@dataclass(frozen=True)
class Configuration:
    """Settings consumed by the ticket creator and the feedback app.

    Build one with from_env() at startup and pass it in explicitly; use
    with_overrides() to derive a variant instead of mutating it.
    """

    enable_ticket_creation: bool = False
    require_authentication: bool = False

    # Gateway and OAuth credentials
    tdx_base_url: str = None
    oauth_token_url: str = None
    client_id: str = None
    client_secret: str = None
    oauth_scope: str = DEFAULT_OAUTH_SCOPE

    # Ticket defaults
    app_id: int = None
    type_id: int = None
    form_id: int = None
    service_offering_id: int = None
    status_id: int = None
    source_id: int = None
    service_id: int = None
    responsible_group_id: int = None
    account_id: int = None
    title_prefix: str = DEFAULT_TITLE_PREFIX
    default_requestor_email: str = None

    @classmethod
    def from_env(cls, environ=None, environment=None):
        """Resolve settings from environment variables.

        Each setting takes the first non-empty value of:
        TDX_<ENV>_<KEY>, TDX_<KEY>, then the built-in default.
        """
        environ = os.environ if environ is None else environ
        environment = environment or resolve_environment(environ)
        providers = build_providers(environ, environment)

        values = {}
        for name, suffix in STRING_SETTINGS.items():
            value = resolve(providers, suffix)
            if value is not None:
                values[name] = value

        for name, suffix in INTEGER_SETTINGS.items():
            value = resolve(providers, suffix)
            if value is not None:
                try:
                    values[name] = int(value)
                except ValueError:
                    logger.warning(f"Ignoring non-integer TDX setting {suffix}={value!r}")

        for name, suffix in BOOLEAN_SETTINGS.items():
            value = resolve(providers, suffix)
            if value is not None:
                values[name] = truthy(value)

        production = environment == 'production'
        values.setdefault('tdx_base_url', PRODUCTION_BASE_URL if production else TEST_BASE_URL)
        values.setdefault('oauth_token_url', PRODUCTION_OAUTH_TOKEN_URL if production else TEST_OAUTH_TOKEN_URL)

        return cls(**values)

    def with_overrides(self, **changes):
        """Copy of this configuration with some fields replaced"""
        return replace(self, **changes)

    def validate(self):
        """Return a list of warnings about the configuration. Never raises."""
        warnings = []
        if not self.enable_ticket_creation:
            return warnings

        missing_credentials = [
            name for name in ['tdx_base_url', 'oauth_token_url', 'client_id', 'client_secret']
            if not getattr(self, name)
        ]
        if missing_credentials:
            warnings.append(
                f"Ticket creation enabled but TDX credentials are missing: {', '.join(missing_credentials)}"
            )

        missing_ids = [name for name in REQUIRED_TICKET_IDS if getattr(self, name) is None]
        if missing_ids:
            warnings.append(
                f"Ticket creation enabled but ticket IDs are not set: {', '.join(missing_ids)}"
            )

        for warning in warnings:
            logger.warning(warning)
        return warnings

    def to_dict(self, redact=True):
        """Settings as a dict, with the client secret masked by default"""
        data = {field.name: getattr(self, field.name) for field in fields(self)}
        if redact and data.get('client_secret'):
            data['client_secret'] = '********'
        return data


# ===================
# PROVIDERS
# ===================

def resolve_environment(environ):
    """Name of the running environment (production, staging, test, development)"""
    for variable in ENVIRONMENT_VARIABLES:
        value = environ.get(variable)
        if value:
            return value.strip().lower()
    return DEFAULT_ENVIRONMENT


def build_providers(environ, environment):
    """Ordered lookups for a setting suffix, most specific first.

    Defaults are applied by the caller once every provider comes back empty.
    """
    providers = []

    env_key = ENVIRONMENT_KEYS.get(environment)
    if env_key:
        providers.append(lambda suffix: environ.get(f"TDX_{env_key}_{suffix}"))

    providers.append(lambda suffix: environ.get(f"TDX_{suffix}"))
    return providers


def resolve(providers, suffix):
    """First non-empty value any provider returns for the suffix"""
    for provider in providers:
        value = provider(suffix)
        if value is not None and str(value).strip():
            return value
    return None
