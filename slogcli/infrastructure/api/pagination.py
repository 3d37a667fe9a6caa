"""Cursor pagination over the request executor."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from slogcli.infrastructure.resilience.request_executor import RequestExecutor

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 25


class PaginationDriver:
    """Follows `next` cursors until enough records are collected.

    Pages are fetched one at a time. If any page fails, the error
    propagates and the records collected so far are discarded.
    """

    def __init__(self, executor: RequestExecutor, default_max_results: int = DEFAULT_MAX_RESULTS):
        self.executor = executor
        self.default_max_results = default_max_results

    async def list_all(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        max_results: Optional[int] = None,
    ) -> List[Any]:
        """Collects records from `path` in server order, at most `max_results` of them.

        Raises:
            ValueError: If `max_results` is below 1.
            ApiError: If any page request fails.
        """
        cap = max_results if max_results is not None else self.default_max_results
        if cap < 1:
            raise ValueError(f"max_results must be at least 1, got {cap}")
        records: List[Any] = []
        cursor: Optional[str] = None
        pages = 0

        while True:
            page_params: Dict[str, Any] = dict(params or {})
            if cursor:
                page_params["cursor"] = cursor

            page = await self.executor.execute(path, params=page_params)
            pages += 1
            records.extend(page.records)

            if len(records) >= cap:
                break
            cursor = page.links.next_cursor()
            if cursor is None:
                break

        logger.debug(f"Listed {len(records)} records from {path} in {pages} page(s), cap={cap}")
        return records[:cap]
