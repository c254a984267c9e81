# TDX Feedback
# Feedback collection with TeamDynamix ticket creation

from .config import (
    Configuration,
    DEFAULT_OAUTH_SCOPE,
    DEFAULT_TITLE_PREFIX
)

from .errors import (
    TdxFeedbackError,
    HttpError
)

from .client import TdxApiClient

from .ticket_creator import (
    TicketCreator,
    TicketResult
)

from .models import (
    Feedback,
    FeedbackStore,
    MAX_CONTEXT_LENGTH
)

__version__ = '0.2.0'
