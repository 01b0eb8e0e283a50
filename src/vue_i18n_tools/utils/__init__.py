from .common import (
    QUOTE_CHARS,
    decode_js_string,
    escape_template_text,
    is_quoted,
    quote_js_string,
)
from .config import ConfigManager, ExtractorConfig
from .io import collect_source_files, ensure_parent_dir, read_text_file, write_json_file, write_text_file
from .logger import (
    ExtractorLogger,
    FileOperationError,
    I18nToolsError,
    MalformedStructureError,
    ParseError,
    get_logger,
    log_exceptions,
    setup_logger,
)
from .ui import BilingualMessage, confirm_operation, show_extracted_strings, show_file_summary

__all__ = [
    # common utilities
    "QUOTE_CHARS",
    "decode_js_string",
    "escape_template_text",
    "is_quoted",
    "quote_js_string",
    # config
    "ExtractorConfig",
    "ConfigManager",
    # io
    "collect_source_files",
    "ensure_parent_dir",
    "read_text_file",
    "write_json_file",
    "write_text_file",
    # logger
    "ExtractorLogger",
    "get_logger",
    "setup_logger",
    "log_exceptions",
    # errors
    "I18nToolsError",
    "FileOperationError",
    "ParseError",
    "MalformedStructureError",
    # ui
    "BilingualMessage",
    "confirm_operation",
    "show_extracted_strings",
    "show_file_summary",
]
