import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

from loguru import logger


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def request_context(request_id: Optional[str] = None) -> Iterator[str]:
    """Bind ``request_id`` to every log record emitted inside the block.

    The binding lives in a context variable, so tasks spawned from the block
    (the concurrent sentiment and summary calls) carry it too.
    """
    request_id = request_id or new_request_id()
    with logger.contextualize(request_id=request_id):
        yield request_id
