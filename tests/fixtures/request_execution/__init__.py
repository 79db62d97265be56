from .middleware import (
    base_request,
    terminal_handler_ok,
    terminal_handler_fail,
    RecordingTerminal,
)
from .transport import (
    FakeTransportEngine,
    pool_config_no_tls,
    tls_config_disabled,
    sample_response,
)


__all__ = [
    'base_request',
    'terminal_handler_ok',
    'terminal_handler_fail',
    'RecordingTerminal',
    'FakeTransportEngine',
    'pool_config_no_tls',
    'tls_config_disabled',
    'sample_response',
]
