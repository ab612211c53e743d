"""
Quote lifecycle state machine.

Tracks one quote from request to expiry:

    Idle|Error|Expired --request--> Loading
    Loading --quote_arrived--> Success(quote, expires_at)
    Loading --quote_failed--> Error(message)
    Success --expiry_reached--> Expired(quote, expires_at)
    Success|Expired|Error|Loading --reset--> Idle

All changes go through ``QuoteLifecycle._transition``. Responses to a
request that was superseded (by a newer request or a reset) are dropped,
so the latest request always wins.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, ClassVar

import httpx

from openfx.config import settings
from openfx.core.clock import Clock, is_expired, system_clock, to_epoch_ms
from openfx.core.timer import IntervalTimer
from openfx.errors import InvalidTransition, OpenFXError
from openfx.schemas.quote import Quote

logger = logging.getLogger(__name__)

QUOTE_ERROR_MESSAGE = "Failed to fetch quote. Please try again."


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    status: ClassVar[str] = "idle"


@dataclass(frozen=True)
class Loading:
    status: ClassVar[str] = "loading"


@dataclass(frozen=True)
class Success:
    quote: Quote
    expires_at: int
    status: ClassVar[str] = "success"


@dataclass(frozen=True)
class Expired:
    quote: Quote
    expires_at: int
    status: ClassVar[str] = "expired"


@dataclass(frozen=True)
class Error:
    message: str
    status: ClassVar[str] = "error"


QuoteState = Idle | Loading | Success | Expired | Error

IDLE = Idle()
LOADING = Loading()


def quote_of(state: QuoteState) -> Quote | None:
    """The quote held by *state*, if any."""
    if isinstance(state, (Success, Expired)):
        return state.quote
    if isinstance(state, (Idle, Loading, Error)):
        return None
    raise AssertionError(f"Unhandled quote state: {state!r}")


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

Listener = Callable[[QuoteState, QuoteState], None]


class QuoteLifecycle:
    """Single-writer holder of the current :data:`QuoteState`."""

    def __init__(
        self,
        clock: Clock = system_clock,
        check_interval_ms: int = settings.QUOTE_EXPIRY_CHECK_INTERVAL_MS,
    ):
        self.clock = clock
        self.check_interval_ms = check_interval_ms
        self._state: QuoteState = IDLE
        self._generation = 0
        self._listeners: list[Listener] = []
        self._expiry_timer: IntervalTimer | None = None

    @property
    def state(self) -> QuoteState:
        return self._state

    @property
    def generation(self) -> int:
        """Id of the most recent request; bumped by every request and reset."""
        return self._generation

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(old, new)`` after every transition. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Transitions ---

    def _transition(self, new_state: QuoteState, allowed_from: tuple[type, ...]) -> None:
        old_state = self._state
        if not isinstance(old_state, allowed_from):
            raise InvalidTransition(
                f"Invalid transition: {old_state.status} -> {new_state.status}"
            )
        self._state = new_state
        logger.debug("Quote state %s -> %s", old_state.status, new_state.status)
        for listener in list(self._listeners):
            try:
                listener(old_state, new_state)
            except Exception:
                logger.exception("Quote state listener failed")

    def begin_request(self) -> int:
        """Enter Loading. Returns the request generation to pass to the outcome calls."""
        self._transition(LOADING, (Idle, Error, Expired))
        self._generation += 1
        return self._generation

    def quote_arrived(self, quote: Quote, generation: int | None = None) -> bool:
        """Loading → Success. Returns False if the response belongs to a superseded request."""
        if self._is_stale(generation):
            logger.debug("Dropping stale quote %s", quote.id)
            return False
        self._transition(Success(quote, quote.expires_at), (Loading,))
        return True

    def quote_failed(self, message: str, generation: int | None = None) -> bool:
        """Loading → Error. Returns False if the failure belongs to a superseded request."""
        if self._is_stale(generation):
            return False
        self._transition(Error(message), (Loading,))
        return True

    def expiry_reached(self) -> None:
        """Success → Expired, keeping the quote."""
        state = self._state
        if not isinstance(state, Success):
            raise InvalidTransition(f"Invalid transition: {state.status} -> expired")
        self._transition(Expired(state.quote, state.expires_at), (Success,))
        self.stop_expiry_watch()

    def reset(self) -> None:
        """Return to Idle from any state. In-flight responses are discarded."""
        self._generation += 1
        self.stop_expiry_watch()
        if isinstance(self._state, Idle):
            return
        self._transition(IDLE, (Success, Expired, Error, Loading))

    def clear_error(self) -> None:
        """Error → Idle; no-op in any other state."""
        if isinstance(self._state, Error):
            self._transition(IDLE, (Error,))

    def _is_stale(self, generation: int | None) -> bool:
        return generation is not None and generation != self._generation

    # --- Expiry ---

    def check_expiry(self, now=None) -> bool:
        """
        Expire a Success state whose ``expires_at`` has been reached.

        Returns True if the state is Expired after the check. Independent of
        how often it is called.
        """
        state = self._state
        if isinstance(state, Success) and is_expired(state.expires_at, now or self.clock.now()):
            self.expiry_reached()
        return isinstance(self._state, Expired)

    def seconds_left(self, now=None) -> int:
        """Whole seconds until expiry; 0 when expired or when no live quote is held."""
        state = self._state
        if not isinstance(state, Success):
            return 0
        remaining_ms = state.expires_at - to_epoch_ms(now or self.clock.now())
        return max(0, remaining_ms // 1000)

    def start_expiry_watch(self) -> None:
        """Run ``check_expiry`` every ``check_interval_ms`` while in Success."""
        if self._expiry_timer is not None and self._expiry_timer.running:
            return
        self._expiry_timer = IntervalTimer(
            self.check_interval_ms / 1000, self.check_expiry, name="quote-expiry-watch",
        ).start()

    def stop_expiry_watch(self) -> None:
        if self._expiry_timer is not None:
            self._expiry_timer.cancel()
            self._expiry_timer = None

    # --- Driving a request ---

    async def request_quote(
        self,
        fetch: Callable[[], Awaitable[Quote]],
        *,
        watch_expiry: bool = True,
    ) -> QuoteState:
        """
        Reset, enter Loading, await *fetch* and apply its outcome.

        Fetch errors end in the Error state; nothing is raised. If a newer
        request or a reset happens while *fetch* is pending, its result is
        ignored.
        """
        self.reset()
        generation = self.begin_request()
        try:
            quote = await fetch()
        except OpenFXError as exc:
            self.quote_failed(exc.message, generation)
            return self._state
        except httpx.HTTPError as exc:
            logger.warning("Quote request failed: %s", exc)
            self.quote_failed(QUOTE_ERROR_MESSAGE, generation)
            return self._state
        except Exception:
            logger.exception("Quote request failed unexpectedly")
            self.quote_failed(QUOTE_ERROR_MESSAGE, generation)
            return self._state

        if self.quote_arrived(quote, generation):
            if not self.check_expiry() and watch_expiry:
                self.start_expiry_watch()
        return self._state

    async def close(self) -> None:
        """Stop all timers. The state is kept as is."""
        timer = self._expiry_timer
        self._expiry_timer = None
        if timer is not None:
            await timer.stop()
