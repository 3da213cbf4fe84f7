"""Common failure handling for services"""

from contextlib import contextmanager
from typing import Iterator, Optional

from outbehaving.domain.exceptions import BackendError, FormValidationError, InvalidRecordError
from outbehaving.infrastructure.errors import AppError, ErrorHandler
from outbehaving.state.app import AppState
from outbehaving.state.base import StatusFlags

# Failures a service absorbs: each ends the operation and is surfaced via the container
SERVICE_ERRORS = (BackendError, InvalidRecordError, FormValidationError)


class Service:
    """
    Services mirror UI hooks: they drive gateway calls and mutate state
    containers. Failures never propagate; they are classified, logged,
    notified and stored on the container, and the operation returns a
    falsy result. Nothing is retried.
    """

    def __init__(self, state: AppState, error_handler: Optional[ErrorHandler] = None):
        self.state = state
        self.errors = error_handler or ErrorHandler(state.notifications)

    def _fail(self, container: StatusFlags, exc: BaseException, context: str) -> AppError:
        app_error = self.errors.handle(exc, context)
        container.set_error(app_error.message, app_error.type)
        return app_error

    @contextmanager
    def _operation(self, container: StatusFlags) -> Iterator[None]:
        container.set_loading(True)
        container.set_error(None)
        try:
            yield
        finally:
            container.set_loading(False)
