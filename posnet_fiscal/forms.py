"""
Non-fiscal form printout.

Form 200 prints free text between formstart and formend. Text values are
encoded with the session encoding; each command waits for its response.
"""

import logging
from typing import Optional

from . import commands
from .constants import FORM_NUMBER
from .exceptions import TransactionStateError
from .fiscal import READY_PHASES, FiscalSession


logger = logging.getLogger(__name__)


class NonFiscalForm:
    """
    Open non-fiscal form.

    Use ``await NonFiscalForm.start(session, ...)`` and finish with ``end()``.
    """

    def __init__(self, session: FiscalSession, form: int = FORM_NUMBER) -> None:
        self._session = session
        self._form = form
        self._open = False

    @classmethod
    async def start(
        cls,
        session: FiscalSession,
        header: Optional[int] = None,
        title: str = "",
        form: int = FORM_NUMBER,
    ) -> "NonFiscalForm":
        """
        Start a form.

        Args:
            session: Fiscal session with no open transaction.
            header: Form header number, None or negative to omit.
            title: Optional title text (al field).
            form: Form number.

        Returns:
            Started form.
        """
        if session.phase not in READY_PHASES:
            raise TransactionStateError("form_start", session.phase.name)

        text = session.encode(title) if title else None
        form_obj = cls(session, form)
        await session.execute(commands.formstart(form, header, text))
        form_obj._open = True
        logger.debug(f"Form {form} started")
        return form_obj

    @property
    def is_open(self) -> bool:
        """Check if the form is still open."""
        return self._open

    def _require_open(self, operation: str) -> None:
        if not self._open:
            raise TransactionStateError(operation, "FORM_CLOSED")

    async def formatted_line(self, text: str, mask: str = "") -> None:
        """Print a formatted line with an optional mask."""
        self._require_open("formatted_line")
        line = self._session.encode(text)
        mask_bytes = self._session.encode(mask) if mask else None
        await self._session.execute(commands.formformattedline(self._form, line, mask_bytes))

    async def tiny_line(self, text: str) -> None:
        """Print a line in small font."""
        self._require_open("tiny_line")
        await self._session.execute(
            commands.formtinyline(self._form, self._session.encode(text))
        )

    async def command(self, code: int) -> None:
        """Send a form control command."""
        self._require_open("command")
        await self._session.execute(commands.formcmd(self._form, code))

    async def end(self) -> None:
        """Finish the form."""
        self._require_open("end")
        await self._session.execute(commands.formend(self._form))
        self._open = False
        logger.debug(f"Form {self._form} ended")
