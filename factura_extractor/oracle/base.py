"""
Oracle Integration Boundary.

An oracle is any external extractor (typically LLM-backed) that answers
with a mapping of invoice fields:

    {"provider": "...", "customerName": "...", "amount": 0.0,
     "dueDate": "YYYY-MM-DD", "barcode": "..."}

It can be an object exposing ``extract(text)`` or a plain callable. The
call itself is owned by the caller; this module only guarantees that an
oracle failure or a hung oracle never reaches the caller of the pipeline.
Several oracles can be chained; the first one that answers wins.
"""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Dict, Optional, Sequence

from factura_extractor.config import get_config
from factura_extractor.utils.exceptions import (
    OracleError,
    OracleResponseError,
    OracleUnavailableError,
)
from factura_extractor.utils.logger import get_logger

logger = get_logger(__name__)

ORACLE_FIELDS = ('provider', 'customerName', 'amount', 'dueDate', 'barcode')

# Oracle calls are I/O bound; a timed-out call keeps its worker until it returns
_oracle_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="oracle_")


def _oracle_name(oracle: Any) -> str:
    return getattr(oracle, 'name', None) or type(oracle).__name__


def _call(oracle: Any, text: str) -> Any:
    if hasattr(oracle, 'extract'):
        return oracle.extract(text)
    if callable(oracle):
        return oracle(text)
    raise OracleResponseError(_oracle_name(oracle), "object is neither callable nor has extract()")


def _call_with_timeout(oracle: Any, text: str, timeout: Optional[float]) -> Any:
    if not timeout or timeout <= 0:
        return _call(oracle, text)

    future = _oracle_executor.submit(_call, oracle, text)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        future.cancel()
        raise OracleUnavailableError(_oracle_name(oracle), f"no answer within {timeout}s")


def query_oracle(
    oracle: Any,
    text: str,
    timeout: Optional[float] = None
) -> Optional[Dict[str, Any]]:
    """
    Ask an oracle for invoice fields.

    Every failure counts as "oracle unavailable" and yields None, so the
    pipeline falls back to the heuristic result.

    Args:
        oracle: Object with ``extract(text)`` or a callable.
        text: Raw invoice text.
        timeout: Seconds to wait for the answer. Defaults to
                 ``oracle.timeout_seconds``; 0 waits without limit.

    Returns:
        The oracle's field mapping, or None.
    """
    if oracle is None:
        return None

    if timeout is None:
        timeout = get_config("oracle.timeout_seconds", 30)

    name = _oracle_name(oracle)
    try:
        answer = _call_with_timeout(oracle, text, timeout)
        if answer is None:
            logger.info(f"Oracle {name} returned no answer")
            return None
        if not isinstance(answer, dict):
            raise OracleResponseError(name, f"expected a mapping, got {type(answer).__name__}")
        return answer

    except OracleError as e:
        logger.warning(f"Oracle unavailable, using heuristic result: {e}")
        return None
    except Exception as e:
        logger.warning(f"Oracle {name} failed ({type(e).__name__}: {e}), using heuristic result")
        return None


def query_oracles(
    oracles: Sequence[Any],
    text: str,
    timeout: Optional[float] = None
) -> Optional[Dict[str, Any]]:
    """
    Ask oracles in order and return the first non-empty answer.

    Args:
        oracles: Oracles in preference order.
        text: Raw invoice text.
        timeout: Per-oracle timeout, see query_oracle().

    Returns:
        The first usable field mapping, or None when every oracle failed.
    """
    for oracle in oracles:
        answer = query_oracle(oracle, text, timeout=timeout)
        if answer:
            logger.info(f"Oracle {_oracle_name(oracle)} answered")
            return answer
    return None
