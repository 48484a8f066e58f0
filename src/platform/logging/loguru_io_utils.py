from inspect import getfile, getsourcelines
from os.path import basename
from re import IGNORECASE, compile as re_compile
from time import time
from typing import Any, Callable

from src.platform.logging.loguru_io_config import (
    SENSITIVE_KEYWORDS,
    call_depth_var,
    chain_start_time_var,
)


MASK = '********'
MAX_CONTENT_LENGTH = 1000

# Matches `password='...'` style fragments inside reprs and DSN credentials
_SENSITIVE_PATTERN = re_compile(
    rf"({'|'.join(sorted(SENSITIVE_KEYWORDS))})(=|:\s*)'[^']*'", IGNORECASE
)
_DSN_CREDENTIALS_PATTERN = re_compile(r'(://[^:/@]+:)[^@]+(@)')


def get_chain_start_time() -> float:
    if not (start_time := chain_start_time_var.get()):
        start_time = time()
        chain_start_time_var.set(start_time)
    return start_time


def increase_call_depth() -> None:
    call_depth_var.set(call_depth_var.get() + 1)


def reset_call_depth() -> None:
    layer = call_depth_var.get() - 1
    call_depth_var.set(layer)
    if layer <= 0:
        chain_start_time_var.set(0)


def build_call_target_func_path(func: Callable[..., Any]) -> str:
    target = getattr(func, '__func__', func)
    try:
        lineno = getsourcelines(target)[1]
    except (OSError, TypeError):
        lineno = 0
    return f'{basename(getfile(target))}::{func.__qualname__}:{lineno}'


def mask_sensitive(data: Any) -> Any:
    if isinstance(data, dict):
        return {
            key: MASK if str(key).lower() in SENSITIVE_KEYWORDS else mask_sensitive(value)
            for key, value in data.items()
        }
    if isinstance(data, list | tuple):
        return type(data)(mask_sensitive(item) for item in data)

    text = str(data)
    masked = _SENSITIVE_PATTERN.sub(rf"\1\2'{MASK}'", text)
    masked = _DSN_CREDENTIALS_PATTERN.sub(rf'\1{MASK}\2', masked)
    return data if masked == text else masked


def truncate_content(data: Any) -> Any:
    text = str(data)
    if len(text) <= MAX_CONTENT_LENGTH:
        return data
    return f'{text[:MAX_CONTENT_LENGTH]}...(truncated {len(text) - MAX_CONTENT_LENGTH} chars)'
