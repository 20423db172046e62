from .logger import configure_logging, get_logger
from .tokenizer import TinySegmenterTokenizer, Tokenizer, count_tokens, tokenize_text

__all__ = [
    "TinySegmenterTokenizer",
    "Tokenizer",
    "configure_logging",
    "count_tokens",
    "get_logger",
    "tokenize_text",
]
