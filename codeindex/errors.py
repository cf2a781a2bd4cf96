"""
Exception types for codeindex.
"""


class CodeindexError(Exception):
    """Base error for codeindex."""
    pass


class ConfigError(CodeindexError):
    """Raised when the project config file is malformed."""
    pass
