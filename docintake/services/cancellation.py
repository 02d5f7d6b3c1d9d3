"""
Cooperative cancellation for an ingestion batch. Checked at file start and page start.
"""
from docintake.services.errors import IngestionCancelled


class CancelToken:
    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise IngestionCancelled("batch cancelled")
