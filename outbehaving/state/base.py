"""Loading/error flags shared by every state container"""

import logging
from typing import Any, Optional


class StatusFlags:
    """UI status flags; `error` is always a user-facing message"""

    def __init__(self) -> None:
        self.is_loading = False
        self.error: Optional[str] = None
        self.error_type: Optional[Any] = None

    def set_loading(self, is_loading: bool) -> None:
        self.is_loading = is_loading

    def set_error(self, error: Optional[str], error_type: Optional[Any] = None) -> None:
        if error:
            logging.getLogger(type(self).__module__).warning(
                f"{type(self).__name__} error set", extra={"error": error}
            )
        self.error = error
        self.error_type = error_type if error else None

    def _reset_status(self) -> None:
        self.is_loading = False
        self.error = None
        self.error_type = None
