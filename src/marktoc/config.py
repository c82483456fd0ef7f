"""ContextVar-based parse configuration for marktoc.

Config is set once per ``Markdown`` instance (or per ``parse()`` call) and
read by the block and inline parsers in the same context.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed.

Usage:
    with parse_config_context(ParseConfig(strikethrough=True)):
        doc = Parser(source).parse()

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ParseConfig:
    """Immutable parse configuration.

    Attributes:
        title_block: Treat leading ``% `` lines as a title-block heading
        heading_ids: Parse ``{#custom-id}`` suffixes on ATX headings
        strikethrough: Enable ``~~strikethrough~~`` syntax
        autolinks: Enable ``<https://...>`` autolinks
        inline_html: Pass inline HTML tags through untouched

    """

    title_block: bool = True
    heading_ids: bool = True
    strikethrough: bool = True
    autolinks: bool = True
    inline_html: bool = True

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ParseConfig":
        """Create ParseConfig from dictionary.

        Unknown keys are ignored, so a larger application config can be
        passed straight through.

        Example:
            >>> ParseConfig.from_dict({"title_block": False, "theme": "dark"}).title_block
            False

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: ParseConfig = ParseConfig()

_parse_config: ContextVar[ParseConfig] = ContextVar(
    "parse_config",
    default=_DEFAULT_CONFIG,
)


def get_parse_config() -> ParseConfig:
    """Get current parse configuration (thread-local)."""
    return _parse_config.get()


def set_parse_config(config: ParseConfig) -> None:
    """Set parse configuration for current context."""
    _parse_config.set(config)


def reset_parse_config() -> None:
    """Reset to the module-level default configuration."""
    _parse_config.set(_DEFAULT_CONFIG)


@contextmanager
def parse_config_context(config: ParseConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with parse_config_context(ParseConfig(title_block=False)):
        ...     get_parse_config().title_block
        False

    """
    previous = _parse_config.get()
    _parse_config.set(config)
    try:
        yield
    finally:
        _parse_config.set(previous)


__all__ = [
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
]
