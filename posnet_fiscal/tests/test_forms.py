"""
Tests for non-fiscal form printouts.
"""

import pytest

from posnet_fiscal.encoding import TextEncoding
from posnet_fiscal.exceptions import DeviceResponseError, TransactionStateError
from posnet_fiscal.fiscal import FiscalSession
from posnet_fiscal.forms import NonFiscalForm


class TestNonFiscalForm:
    """Tests for form 200."""

    @pytest.mark.asyncio
    async def test_full_form(self, session, transport):
        form = await NonFiscalForm.start(session, header=1, title="Tytuł")
        await form.formatted_line("Linia 1")
        await form.tiny_line("drobny druk")
        await form.command(3)
        await form.end()

        assert transport.sent == [
            b"formstart\tfn200\tfh1\talTytu\xb3\t",
            b"formformattedline\ts1Linia 1\tfn200\t",
            b"formtinyline\tfn200\ts1drobny druk\t",
            b"formcmd\tfn200\tcm3\t",
            b"formend\tfn200\t",
        ]
        assert not form.is_open

    @pytest.mark.asyncio
    async def test_start_without_title(self, session, transport):
        form = await NonFiscalForm.start(session)

        assert transport.sent == [b"formstart\tfn200\t"]
        assert form.is_open

    @pytest.mark.asyncio
    async def test_mask_encoded(self, transport):
        session = FiscalSession(transport, encoding=TextEncoding.MAZOVIA)
        form = await NonFiscalForm.start(session)

        await form.formatted_line("Łódź", mask="ż")

        assert transport.sent[-1] == b"formformattedline\ts1\x9c\xa2d\xa6\tfn200\tma\xa7\t"

    @pytest.mark.asyncio
    async def test_closed_form_rejects_lines(self, session, transport):
        form = await NonFiscalForm.start(session)
        await form.end()

        with pytest.raises(TransactionStateError):
            await form.formatted_line("late")

        assert transport.commands == [b"formstart", b"formend"]

    @pytest.mark.asyncio
    async def test_not_during_transaction(self, session, transport):
        await session.open_transaction()

        with pytest.raises(TransactionStateError):
            await NonFiscalForm.start(session)

        assert transport.commands == [b"trinit"]

    @pytest.mark.asyncio
    async def test_device_error(self, scripted_transport):
        session = FiscalSession(scripted_transport([b"ERR\t"]))

        with pytest.raises(DeviceResponseError):
            await NonFiscalForm.start(session)
