"""
Diagram rendering session as an explicit state machine.

States:
- IDLE: nothing rendered yet (or reset)
- RENDERING: a render pass is running
- RETRYING: a diagram failed and is waiting for its next attempt
- DONE: the last pass rendered every diagram
- ERROR: at least one diagram exhausted its attempts

The renderer object is owned by the caller; initialize() is idempotent.
Actual diagram rendering is delegated to render_func(source) -> svg.
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .logger import get_logger
from .retry import RetryError, RetryPolicy, linear, retry_call

logger = get_logger()

DEFAULT_RENDER_POLICY = RetryPolicy(max_attempts=3, backoff=linear(0.5))


class RenderState(str, Enum):
    IDLE = "idle"
    RENDERING = "rendering"
    RETRYING = "retrying"
    DONE = "done"
    ERROR = "error"


class RenderEvent(str, Enum):
    START = "start"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    GAVE_UP = "gave_up"
    RESET = "reset"


TRANSITIONS = {
    (RenderState.IDLE, RenderEvent.START): RenderState.RENDERING,
    (RenderState.DONE, RenderEvent.START): RenderState.RENDERING,
    (RenderState.ERROR, RenderEvent.START): RenderState.RENDERING,
    (RenderState.RETRYING, RenderEvent.START): RenderState.RENDERING,
    (RenderState.RENDERING, RenderEvent.SUCCEEDED): RenderState.DONE,
    (RenderState.RENDERING, RenderEvent.FAILED): RenderState.RETRYING,
    (RenderState.RENDERING, RenderEvent.GAVE_UP): RenderState.ERROR,
    (RenderState.RETRYING, RenderEvent.GAVE_UP): RenderState.ERROR,
}


class InvalidTransition(Exception):
    def __init__(self, state: RenderState, event: RenderEvent):
        super().__init__(f"No transition from {state.value!r} on {event.value!r}")
        self.state = state
        self.event = event


@dataclass(frozen=True)
class RenderResult:
    index: int
    ok: bool
    output: str
    attempts: int


def failure_placeholder(attempts: int) -> str:
    return (
        '<div class="diagram-error">'
        f"<p>Failed to render diagram after {attempts} attempts.</p>"
        "</div>"
    )


class DiagramRenderer:
    def __init__(
        self,
        render_func: Callable[[str], str],
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.render_func = render_func
        self.policy = policy or DEFAULT_RENDER_POLICY
        self.state = RenderState.IDLE
        self.initialized = False
        self.theme: Optional[str] = None
        self._sleep = sleep
        self._lock = threading.Lock()
        self._attempts = 0

    def initialize(self, theme: str = "default") -> bool:
        """Set up the renderer. Returns False if it was already initialized."""
        if self.initialized:
            return False
        self.theme = theme
        self.initialized = True
        logger.debug("Diagram renderer initialized", theme=theme)
        return True

    def set_theme(self, theme: str) -> bool:
        """Switch theme; True if it changed and diagrams need re-rendering."""
        if theme == self.theme:
            return False
        self.theme = theme
        return True

    def dispatch(self, event: RenderEvent) -> RenderState:
        if event is RenderEvent.RESET:
            self.state = RenderState.IDLE
            return self.state
        target = TRANSITIONS.get((self.state, event))
        if target is None:
            raise InvalidTransition(self.state, event)
        self.state = target
        return self.state

    def _attempt(self, source: str) -> str:
        if self.state is RenderState.RETRYING:
            self.dispatch(RenderEvent.START)
        self._attempts += 1
        return self.render_func(source)

    def _on_retry(self, attempt: int, exc: BaseException, delay: float) -> None:
        logger.warning("Diagram render attempt failed", attempt=attempt, delay=delay, error=str(exc))
        self.dispatch(RenderEvent.FAILED)

    def _render_one(self, index: int, source: str) -> RenderResult:
        self._attempts = 0
        try:
            svg = retry_call(self.policy, self._attempt, source, sleep=self._sleep, on_retry=self._on_retry)
        except RetryError as e:
            logger.error("Diagram render gave up", index=index, attempts=e.attempts, error=str(e.__cause__))
            return RenderResult(index=index, ok=False, output=failure_placeholder(e.attempts), attempts=e.attempts)
        return RenderResult(index=index, ok=True, output=svg, attempts=self._attempts)

    def render_all(self, sources: Sequence[str]) -> List[RenderResult]:
        """
        Render every non-empty diagram source.

        Returns an empty list without rendering if another pass is already
        running. Blank sources are skipped.
        """
        if not self._lock.acquire(blocking=False):
            logger.debug("Render pass already running, skipping")
            return []
        try:
            self.initialize()
            self.dispatch(RenderEvent.START)
            results = [
                self._render_one(i, source)
                for i, source in enumerate(sources)
                if source and source.strip()
            ]
        except BaseException:
            if self.state in (RenderState.RENDERING, RenderState.RETRYING):
                self.dispatch(RenderEvent.GAVE_UP)
            raise
        else:
            if all(r.ok for r in results):
                self.dispatch(RenderEvent.SUCCEEDED)
            else:
                self.dispatch(RenderEvent.GAVE_UP)
            return results
        finally:
            self._lock.release()
