# sitewright/core/profiling.py
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger("sitewright.profile")


@contextmanager
def profile(name: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    except BaseException:
        logger.info("%s failed after %.2fms", name, (time.perf_counter() - start) * 1000)
        raise
    logger.info("%s took %.2fms", name, (time.perf_counter() - start) * 1000)
