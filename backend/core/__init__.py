# Core module exports
from core.config import settings, get_settings, Settings
from core.logging import (
    configure_logging,
    configure_from_settings,
    get_logger,
    bind_context,
    unbind_context,
    clear_context,
    generate_correlation_id,
    engine_logger,
    session_logger,
    reward_logger,
    content_logger,
)
