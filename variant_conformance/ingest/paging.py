"""
Windowed delivery of table rows.

Hosts that page their data deliver rows in windows and need to decide
after each window whether to request more. RowWindowBuffer accumulates the
windows and answers that question; analysis runs once over the buffered
rows when no more data is coming.
"""

import logging
from typing import Any, List, Optional, Sequence

logger = logging.getLogger(__name__)


class RowWindowBuffer:
    """
    Accumulates row windows up to an optional row limit.

    Example:
        buffer = RowWindowBuffer(max_rows=30000)
        while buffer.add_window(source.next_window(), source.has_more()):
            pass
        result = checker.check_rows(buffer.rows)
    """

    def __init__(self, max_rows: Optional[int] = None):
        """
        Initialize the buffer.

        Args:
            max_rows: Maximum number of rows to keep (None for no limit)

        Raises:
            ValueError: If max_rows is not positive
        """
        if max_rows is not None and max_rows <= 0:
            raise ValueError(f"max_rows must be positive, got {max_rows}")

        self.max_rows = max_rows
        self.windows_loaded = 0
        self.limit_reached = False
        self.complete = False
        self._rows: List[Sequence[Any]] = []

    @property
    def rows(self) -> List[Sequence[Any]]:
        """Rows buffered so far."""
        return list(self._rows)

    @property
    def row_count(self) -> int:
        return len(self._rows)

    def add_window(self, rows: Sequence[Sequence[Any]], more_available: bool) -> bool:
        """
        Add one window of rows.

        Args:
            rows: Rows of the window
            more_available: Whether the source has further windows

        Returns:
            True if another window should be requested
        """
        if self.complete:
            logger.warning("Window added after delivery was complete, ignoring")
            return False

        self.windows_loaded += 1
        incoming = list(rows)

        if self.max_rows is not None:
            room = self.max_rows - len(self._rows)
            if len(incoming) >= room and (more_available or len(incoming) > room):
                dropped = len(incoming) - room
                incoming = incoming[:room]
                self.limit_reached = True
                if dropped:
                    logger.warning(f"Row limit {self.max_rows} reached, dropped {dropped} rows")

        self._rows.extend(incoming)

        if self.limit_reached or not more_available:
            self.complete = True
            logger.info(self.status_message())
            return False

        logger.debug(self.status_message())
        return True

    def status_message(self) -> str:
        """Describe the loading progress."""
        if self.limit_reached:
            return (
                f"Memory limit hit after {self.windows_loaded} fetches. "
                f"We managed to get {self.row_count} rows."
            )
        if self.complete:
            return (
                f"We have all the data we can get "
                f"({self.row_count} rows over {self.windows_loaded} fetches)!"
            )
        return (
            f"Loading more data. {self.row_count} rows loaded so far "
            f"(over {self.windows_loaded} fetches)..."
        )
