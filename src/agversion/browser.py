"""Browser process lifecycle and CDP message routing."""

import asyncio
import json

import cdp

from .cdp_pipe import launch_chrome_with_pipe
from .config import Config
from .logger import logger
from .page import Page

CLOSE_GRACE = 3.0


class Browser:
    """Headless Chrome driven over the DevTools pipe.

    Owns the Chrome process, routes CDP responses to waiting senders and
    CDP events to the page whose session they belong to. Use it as an
    async context manager so the process is released on every path::

        async with Browser(config) as browser:
            page = await browser.new_page()

    Attributes:
        config: Configuration object for browser launch.
        proc: The browser subprocess.
        reader: Stream reader for CDP pipe communication.
        writer: Stream writer for CDP pipe communication.
        pages: Mapping of target IDs to open Page instances.
    """

    def __init__(
        self,
        config=None,
        **kwargs,
    ):
        """Initialize Browser instance.

        Args:
            config: Pre-configured Config instance. If None, a new
                Config is created from the keyword arguments.
            **kwargs: Arguments to pass to Config if config is None.
        """
        self.config = config or Config(**kwargs)
        self.proc = None
        self.reader = None
        self.writer = None
        self.pages = {}
        self._msg_id = 0
        self._pending = {}
        self._recv_task = None
        self._session_to_page = {}
        self._pipe_closed = False
        self._closed = False

    # Lifecycle --------------------------------------------------------------

    @classmethod
    async def start(
        cls,
        config=None,
        **kwargs,
    ):
        """Create and launch a Browser.

        The caller owns the result and must ``close()`` it.

        Returns:
            Browser: A launched Browser instance.
        """
        browser = cls(config=config, **kwargs)
        await browser._launch()
        return browser

    async def _launch(
        self,
    ):
        """Start Chrome and the background CDP receive task."""
        try:
            self.proc, self.reader, self.writer = await launch_chrome_with_pipe(
                self.config
            )
        except BaseException:
            self.config.cleanup_user_data_dir()
            raise
        self._recv_task = asyncio.create_task(self._recv_loop())

    async def __aenter__(self):
        await self._launch()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(
        self,
    ):
        """Close the browser and clean up resources.

        Closes all pages, terminates the browser process, cancels the
        receive task and removes a temporary profile directory. Safe to
        call more than once; cleanup failures are logged, not raised.
        """
        if self._closed:
            return
        self._closed = True
        try:
            for page in list(self.pages.values()):
                try:
                    await asyncio.wait_for(page.close(), timeout=CLOSE_GRACE)
                except asyncio.TimeoutError:
                    logger.debug("Timed out closing page %s", page.target_id)
        finally:
            if self.writer:
                try:
                    self.writer.close()
                except (OSError, RuntimeError):
                    logger.debug("Error closing writer")
            if self.proc and self.proc.returncode is None:
                try:
                    self.proc.terminate()
                    try:
                        await asyncio.wait_for(
                            self.proc.wait(), timeout=CLOSE_GRACE
                        )
                    except asyncio.TimeoutError:
                        self.proc.kill()
                        await self.proc.wait()
                except ProcessLookupError:
                    logger.debug("Browser process already exited")
            if self._recv_task:
                self._recv_task.cancel()
                try:
                    await self._recv_task
                except asyncio.CancelledError:
                    pass
            self.config.cleanup_user_data_dir()
            logger.debug("Browser closed")

    # Messaging --------------------------------------------------------------

    async def send(
        self,
        cmd,
        *,
        session_id=None,
    ):
        """Send a CDP command and await its response.

        Args:
            cmd: CDP command generator to send.
            session_id: Optional session ID for page-level commands.

        Returns:
            The parsed response from the CDP command.

        Raises:
            RuntimeError: If the CDP command returns an error.
            ConnectionError: If the browser is not running or the CDP
                pipe is closed.
        """
        if self.writer is None:
            raise ConnectionError("Browser not launched")
        if self._pipe_closed:
            raise ConnectionError("CDP pipe closed")

        request = next(cmd)
        self._msg_id += 1
        msg_id = self._msg_id
        msg = {"id": msg_id, "method": request["method"]}
        if request.get("params"):
            msg["params"] = request["params"]
        if session_id:
            msg["sessionId"] = str(session_id)

        fut = asyncio.get_running_loop().create_future()
        self._pending[msg_id] = fut

        raw = (json.dumps(msg, separators=(",", ":")) + "\0").encode("utf-8")
        self.writer.write(raw)
        await self.writer.drain()

        try:
            resp = await fut
        finally:
            self._pending.pop(msg_id, None)
        if "error" in resp:
            err = resp["error"]
            raise RuntimeError(
                f"CDP error {err.get('code')} in {msg['method']}: "
                f"{err.get('message')}"
            )

        # Feed the result back to the generator for typed parsing
        try:
            cmd.send(resp.get("result", {}))
        except StopIteration as e:
            return e.value
        raise RuntimeError("CDP generator did not exit as expected")

    def _fail_pending(
        self,
        exc,
    ):
        self._pipe_closed = True
        for fut in self._pending.values():
            if not fut.done():
                fut.set_exception(exc)
        self._pending.clear()

    async def _recv_loop(
        self,
    ):
        """Receive and dispatch CDP messages from the browser.

        Resolves pending command futures and hands events to the page
        owning their session. When the loop stops for any reason other
        than cancellation, every pending command fails with
        ConnectionError.
        """
        try:
            await self._dispatch_messages()
        except Exception as exc:
            logger.exception("CDP receive loop failed")
            self._fail_pending(ConnectionError(f"CDP receive loop failed: {exc}"))

    async def _dispatch_messages(
        self,
    ):
        while True:
            try:
                line = await self.reader.readuntil(separator=b"\0")
            except asyncio.IncompleteReadError:
                logger.debug("CDP pipe closed by browser")
                self._fail_pending(ConnectionError("CDP pipe closed"))
                return
            except asyncio.LimitOverrunError as exc:
                logger.error("CDP message exceeds pipe read limit: %s", exc)
                self._fail_pending(ConnectionError(f"CDP message too large: {exc}"))
                return

            try:
                msg = json.loads(line[:-1])
            except ValueError as exc:
                logger.exception("JSON parse error in CDP recv: %s", exc)
                continue

            if "id" in msg:
                fut = self._pending.pop(msg["id"], None)
                if fut and not fut.done():
                    fut.set_result(msg)
                continue

            try:
                event = cdp.util.parse_json_event(msg)
            except (KeyError, AttributeError, ValueError) as exc:
                # Event type or enum value not known to the CDP bindings
                logger.debug("Ignoring event %s: %s", msg.get("method"), exc)
                continue

            session_id = msg.get("sessionId")
            if session_id:
                page = self._session_to_page.get(session_id)
                if page:
                    await page.handle_event(event)
            else:
                self._handle_browser_event(event)

    def _handle_browser_event(
        self,
        event,
    ):
        """Track detach and destroy events for known pages."""
        if isinstance(event, cdp.target.DetachedFromTarget):
            page = self._session_to_page.pop(str(event.session_id), None)
            if page:
                page.session_id = None
        elif isinstance(event, cdp.target.TargetDestroyed):
            page = self.pages.pop(str(event.target_id), None)
            if page and page.session_id:
                self._session_to_page.pop(str(page.session_id), None)

    # User API ---------------------------------------------------------------

    async def new_page(
        self,
    ):
        """Open a blank page and attach a CDP session to it.

        Returns:
            Page: The attached and initialized page.
        """
        target_id = await self.send(
            cdp.target.create_target(url="about:blank")
        )
        session_id = await self.send(
            cdp.target.attach_to_target(target_id=target_id, flatten=True)
        )
        page = Page(self, target_id, session_id)
        self.pages[str(target_id)] = page
        self._session_to_page[str(session_id)] = page
        await page.init()
        logger.debug("Opened %r", page)
        return page


__all__ = ["Browser"]
