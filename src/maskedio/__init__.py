"""maskedio — stream writers that redact sensitive keywords on the way out."""

from .rule import Rule
from .writer import MaskedWriter, new_writer
from .text import TextWriter, masking_handler
from .config import create_rule, create_writer, load_config, load_from_yaml
from .errors import ConfigError, MaskedIOError
from .types import DEFAULT_FLUSH_DELAY, DEFAULT_MASK_TOKEN, RuleSnapshot

__all__ = [
    "Rule", "RuleSnapshot",
    "MaskedWriter", "new_writer",
    "TextWriter", "masking_handler",
    "create_rule", "create_writer", "load_config", "load_from_yaml",
    "MaskedIOError", "ConfigError",
    "DEFAULT_MASK_TOKEN", "DEFAULT_FLUSH_DELAY",
]
__version__ = "0.1.0"
