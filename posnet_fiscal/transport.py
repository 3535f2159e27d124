"""
POSNET Transport Layer.

Owns the TCP stream to the printer, frames outgoing payloads and reads
incoming frames with deadlines. Exactly one request is in flight at any
time; the fiscal layer sends a command and then waits for its response.
"""

import asyncio
import logging
from typing import Optional

from .constants import DEFAULT_TIMEOUT_S, ETX, LF, STX, TAB
from .exceptions import ConnectError, ReadError, WriteError
from .frame import decode_frame, encode_frame


logger = logging.getLogger(__name__)


def escape_control(payload: bytes) -> str:
    """Render a payload for logs with TAB and LF escaped."""
    text = payload.decode("latin-1")
    return text.replace(chr(TAB), "\\t").replace(chr(LF), "\\n")


class PosnetTransport:
    """
    Transport layer for the POSNET protocol.

    Attributes:
        reader: Async stream reader for the printer socket.
        writer: Async stream writer for the printer socket.
        timeout: Default write/read deadline in seconds.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        timeout: float = DEFAULT_TIMEOUT_S,
        log_tx: bool = False,
        log_rx: bool = False,
    ) -> None:
        """
        Initialize transport layer.

        Args:
            reader: Async stream reader.
            writer: Async stream writer.
            timeout: Default deadline for writes and reads, in seconds.
            log_tx: Log every sent payload at INFO level.
            log_rx: Log every received payload at INFO level.
        """
        self._reader = reader
        self._writer = writer
        self._timeout = timeout
        self._log_tx = log_tx
        self._log_rx = log_rx

    @classmethod
    async def connect(
        cls,
        host: str,
        port: int,
        timeout: float = DEFAULT_TIMEOUT_S,
        log_tx: bool = False,
        log_rx: bool = False,
    ) -> "PosnetTransport":
        """
        Open a TCP connection to the printer.

        Args:
            host: Printer address.
            port: Printer TCP port.
            timeout: Connect deadline, also used as default I/O deadline.
            log_tx: Log sent payloads.
            log_rx: Log received payloads.

        Returns:
            Connected transport.

        Raises:
            ConnectError: Connection refused, unreachable or timed out.
        """
        logger.info(f"Connecting to {host}:{port}")
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise ConnectError(
                f"connection to {host}:{port} timed out after {timeout}s",
                details={"host": host, "port": port},
            ) from e
        except OSError as e:
            raise ConnectError(
                f"connection to {host}:{port} failed: {e}",
                details={"host": host, "port": port},
            ) from e

        return cls(reader, writer, timeout=timeout, log_tx=log_tx, log_rx=log_rx)

    @property
    def timeout(self) -> float:
        """Get default deadline in seconds."""
        return self._timeout

    async def send(self, payload: str) -> None:
        """
        Send an ASCII payload as a frame.

        Args:
            payload: Payload text, commands and ASCII values only.
        """
        data = payload.encode("ascii")
        if self._log_tx:
            logger.info(f"TX: {escape_control(data)}")
        await self._write_frame(data)

    async def send_bytes(self, payload: bytes) -> None:
        """
        Send an already encoded payload as a frame.

        Args:
            payload: Payload bytes, may contain codepage-encoded text.
        """
        if self._log_tx:
            logger.info(f"TX(bytes): {payload.hex()}")
        await self._write_frame(payload)

    async def _write_frame(self, payload: bytes) -> None:
        frame = encode_frame(payload)
        logger.debug(f"TX frame: {frame.hex(' ')}")
        try:
            self._writer.write(frame)
            await asyncio.wait_for(self._writer.drain(), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise WriteError(f"write timed out after {self._timeout}s") from e
        except (OSError, RuntimeError) as e:
            raise WriteError(f"write failed: {e}") from e

    async def receive(self, timeout: Optional[float] = None) -> bytes:
        """
        Receive the next frame and return its payload.

        Bytes before STX are discarded. The deadline covers the whole frame.

        Args:
            timeout: Deadline in seconds, defaults to the transport timeout.

        Returns:
            Verified payload bytes.

        Raises:
            ReadError: Socket error, EOF or deadline expired.
            FrameError: Received frame is malformed.
        """
        deadline = self._timeout if timeout is None else timeout
        try:
            raw = await asyncio.wait_for(self._read_raw_frame(), timeout=deadline)
        except asyncio.TimeoutError as e:
            raise ReadError(f"read timed out after {deadline}s") from e
        except asyncio.IncompleteReadError as e:
            raise ReadError(
                f"connection closed after {len(e.partial)} bytes of frame"
            ) from e
        except (OSError, asyncio.LimitOverrunError) as e:
            raise ReadError(f"read failed: {e}") from e

        logger.debug(f"RX frame: {raw.hex(' ')}")
        payload = decode_frame(raw)

        if self._log_rx:
            logger.info(f"RX: {escape_control(payload)}")
        return payload

    async def _read_raw_frame(self) -> bytes:
        """Read from STX through ETX inclusive."""
        while True:
            byte_data = await self._reader.read(1)
            if not byte_data:
                raise asyncio.IncompleteReadError(b"", None)
            if byte_data[0] == STX:
                break
            logger.debug(f"Skipping byte: 0x{byte_data[0]:02X}")

        body = await self._reader.readuntil(bytes([ETX]))
        return bytes([STX]) + body

    async def close(self) -> None:
        """Close the connection."""
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError as e:
            logger.debug(f"Close error (ignored): {e}")
