from .app import LocalServer, create_test_app, decode_echo

__all__ = [
    'LocalServer',
    'create_test_app',
    'decode_echo',
]
