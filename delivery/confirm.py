"""
Confirmation dialog that resolves to True or False.

A request hands back a future-like ConfirmRequest. Whoever presents the dialog
later calls accept(), reject() or dismiss() on the dialog, and the waiting code
gets True (confirmed) or False (cancelled or dismissed).

Design decisions:
- One dialog is pending at a time; a new request resolves the previous one
  as False before taking its place
- Results are carried by concurrent.futures.Future so callers can block with a
  timeout or attach callbacks
"""

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger("confirm_dialog")


@dataclass(frozen=True)
class ConfirmPrompt:
    title: str = "Confirm"
    message: str = "Are you sure?"
    confirm_text: str = "Yes"
    cancel_text: str = "Cancel"
    kind: str = "warning"


class ConfirmRequest:
    """Handle for one shown dialog."""

    def __init__(self, prompt: ConfirmPrompt):
        self.prompt = prompt
        self._future: Future = Future()

    def result(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the user's answer.

        Raises:
            concurrent.futures.TimeoutError: No answer within timeout
        """
        return self._future.result(timeout)

    def done(self) -> bool:
        return self._future.done()

    def add_done_callback(self, callback: Callable[[bool], None]) -> None:
        self._future.add_done_callback(lambda f: callback(f.result()))

    def _resolve(self, confirmed: bool) -> bool:
        if self._future.done():
            return False
        self._future.set_result(confirmed)
        return True


class ConfirmDialog:
    """
    Asks yes/no questions one at a time.

    Example:
        dialog = ConfirmDialog()
        request = dialog.request("Cancel order?", "This cannot be undone.")
        ...                      # UI shows request.prompt
        dialog.accept()          # user clicked the confirm button
        request.result()         # True
    """

    def __init__(self, presenter: Optional[Callable[[ConfirmRequest], None]] = None):
        self.presenter = presenter
        self._lock = threading.Lock()
        self._pending: Optional[ConfirmRequest] = None

    @property
    def pending(self) -> Optional[ConfirmRequest]:
        with self._lock:
            return self._pending

    def request(
        self,
        title: str = "Confirm",
        message: str = "Are you sure?",
        confirm_text: str = "Yes",
        cancel_text: str = "Cancel",
        kind: str = "warning",
    ) -> ConfirmRequest:
        request = ConfirmRequest(ConfirmPrompt(title, message, confirm_text, cancel_text, kind))
        with self._lock:
            previous, self._pending = self._pending, request
        if previous is not None and previous._resolve(False):
            logger.info(f"Confirm '{previous.prompt.title}' superseded by '{title}'")
        if self.presenter:
            self.presenter(request)
        return request

    def confirm(self, title: str = "Confirm", message: str = "Are you sure?",
                timeout: Optional[float] = None, **options) -> bool:
        """Show a dialog and block until it is answered."""
        return self.request(title, message, **options).result(timeout)

    def accept(self) -> bool:
        """Confirm button. Returns False if nothing was pending."""
        return self._answer(True)

    def reject(self) -> bool:
        """Cancel button."""
        return self._answer(False)

    def dismiss(self) -> bool:
        """Click outside the dialog; same answer as cancel."""
        return self._answer(False)

    def _answer(self, confirmed: bool) -> bool:
        with self._lock:
            request, self._pending = self._pending, None
        if request is None:
            return False
        return request._resolve(confirmed)
