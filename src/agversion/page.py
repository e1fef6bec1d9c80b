"""Page session: navigation, lifecycle waits and script evaluation."""

from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any, Callable

import cdp

from .errors import EvaluationError, NavigationError, NavigationTimeout
from .logger import logger

if TYPE_CHECKING:
    from .browser import Browser


class Page:
    """A browser page with an attached CDP session.

    Attributes:
        browser: The parent Browser instance.
        target_id: CDP target identifier.
        session_id: CDP session ID for this page, None once detached.
        frame_id: Main frame of the last navigation.
    """

    def __init__(
        self,
        browser: Browser,
        target_id: cdp.target.TargetID,
        session_id: cdp.target.SessionID | None = None,
    ) -> None:
        self.browser: Browser = browser
        self.target_id: cdp.target.TargetID = target_id
        self.session_id: cdp.target.SessionID | None = session_id
        self.frame_id: cdp.page.FrameId | None = None
        self._handlers: dict[type[Any], list[Callable[[Any], Any]]] = {}

    async def init(
        self,
    ) -> None:
        """Enable the Page domain and lifecycle events for this session."""
        await self.send(cdp.page.enable())
        await self.send(cdp.page.set_lifecycle_events_enabled(enabled=True))

    async def send(
        self,
        cmd: Any,
    ) -> Any:
        """Send a CDP command within this page's session.

        Raises:
            RuntimeError: If the page is not attached or the command fails.
        """
        if not self.session_id:
            raise RuntimeError(f"Page {self.target_id} not attached")
        return await self.browser.send(cmd, session_id=self.session_id)

    # Events -----------------------------------------------------------------

    def on(
        self,
        event_name: type[Any],
        handler: Callable[[Any], Any],
    ) -> None:
        """Register a handler for a CDP event type on this page."""
        self._handlers.setdefault(event_name, []).append(handler)

    def off(
        self,
        event_name: type[Any],
        handler: Callable[[Any], Any],
    ) -> None:
        """Remove a previously registered handler, if present."""
        handlers = self._handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    async def handle_event(
        self,
        event: Any,
    ) -> None:
        """Dispatch a CDP event to registered handlers.

        Handler exceptions are logged and do not stop dispatching.
        """
        method: type[Any] = type(event)
        for h in list(self._handlers.get(method, [])):
            try:
                result = h(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Page handler error for %s", method.__name__)

    # Navigation & evaluation ------------------------------------------------

    async def navigate(
        self,
        url: str,
        timeout: float = 30.0,
        wait_until: str = "networkIdle",
    ) -> None:
        """Navigate to a URL and wait for a lifecycle event.

        Args:
            url: The URL to navigate to.
            timeout: Maximum seconds for the whole navigation.
            wait_until: Lifecycle event name to wait for, such as
                ``"load"``, ``"DOMContentLoaded"`` or ``"networkIdle"``.

        Raises:
            NavigationTimeout: If the lifecycle event does not arrive in
                time.
            NavigationError: If Chrome reports a load error.
        """
        loop = asyncio.get_running_loop()
        reached: asyncio.Future[None] = loop.create_future()
        # Events can arrive before Page.navigate returns the loader id.
        early: set[str] = set()
        current: dict[str, str] = {}

        def on_lifecycle(event: cdp.page.LifecycleEvent) -> None:
            if event.name != wait_until:
                return
            loader_id = str(event.loader_id)
            if "loader" not in current:
                early.add(loader_id)
            elif loader_id == current["loader"] and not reached.done():
                reached.set_result(None)

        async def run() -> None:
            result = await self.send(cdp.page.navigate(url=url))
            frame_id, loader_id, error_text = (tuple(result) + (None,) * 3)[:3]
            self.frame_id = frame_id
            if error_text:
                raise NavigationError(url, error_text)
            if loader_id is None:
                # Same-document navigation, no new lifecycle
                return
            current["loader"] = str(loader_id)
            if current["loader"] in early:
                return
            await reached

        self.on(cdp.page.LifecycleEvent, on_lifecycle)
        try:
            await asyncio.wait_for(run(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise NavigationTimeout(url, timeout, wait_until) from exc
        finally:
            self.off(cdp.page.LifecycleEvent, on_lifecycle)
        logger.debug("Reached %s on %s", wait_until, url)

    async def eval(
        self,
        expression: str,
        await_promise: bool = True,
    ) -> Any:
        """Evaluate a JavaScript expression and return its value.

        The result is serialized by value, so objects and arrays come
        back as plain Python dicts and lists.

        Raises:
            EvaluationError: If the expression throws.
        """
        result: cdp.runtime.RemoteObject
        result, details = await self.send(
            cdp.runtime.evaluate(
                expression=expression,
                await_promise=await_promise,
                return_by_value=True,
            )
        )
        if details is not None:
            message = details.text
            if details.exception is not None and details.exception.description:
                message = details.exception.description
            raise EvaluationError(message)
        return result.value

    async def close(
        self,
    ) -> None:
        """Close this page.

        Errors are suppressed if the page is already gone or the
        connection is lost.
        """
        self.browser.pages.pop(str(self.target_id), None)
        try:
            await self.browser.send(
                cdp.target.close_target(target_id=self.target_id)
            )
        except (RuntimeError, ConnectionError):
            logger.debug("Could not close page %s", self.target_id)

    def __repr__(
        self,
    ) -> str:
        attrs = [f"id={self.target_id}"]
        if self.session_id:
            attrs.append(f"session={self.session_id}")
        return f"<Page {' '.join(attrs)}>"


__all__ = ["Page"]
