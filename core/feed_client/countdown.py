import threading

# Matches the code lifetime the server announces; purely a UI hint.
DEFAULT_RESEND_COUNTDOWN_SECONDS = 300


class ResendCountdown:
    """
    One-second countdown shown next to the "resend code" button.

    The countdown only decides whether the button is enabled. Reaching zero
    says nothing about whether the emailed code still works; the server's
    ``expires_at`` is the only expiry that counts.

    ``tick()`` can be driven by the caller's own loop, or ``start(...,
    auto=True)`` runs a background timer that ticks every ``interval``
    seconds until zero or ``cancel()``.
    """

    def __init__(self, on_tick=None, interval=1.0):
        self.on_tick = on_tick
        self.interval = interval
        self._remaining = 0
        self._timer = None
        self._lock = threading.Lock()

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._remaining > 0

    def can_resend(self) -> bool:
        return self._remaining == 0

    def start(self, seconds=DEFAULT_RESEND_COUNTDOWN_SECONDS, auto=False):
        """Restarts the countdown; a running one is replaced."""
        self.cancel()
        with self._lock:
            self._remaining = max(0, int(seconds))
        if auto and self._remaining:
            self._schedule()

    def tick(self) -> int:
        with self._lock:
            if self._remaining > 0:
                self._remaining -= 1
            remaining = self._remaining
        if self.on_tick is not None:
            self.on_tick(remaining)
        return remaining

    def cancel(self):
        with self._lock:
            timer, self._timer = self._timer, None
            self._remaining = 0
        if timer is not None:
            timer.cancel()

    def format(self) -> str:
        minutes, seconds = divmod(self._remaining, 60)
        return f"{minutes}:{seconds:02d}"

    def _new_timer(self):
        timer = threading.Timer(self.interval, self._run)
        timer.args = (timer,)
        timer.daemon = True
        return timer

    def _schedule(self):
        with self._lock:
            timer = self._timer = self._new_timer()
        timer.start()

    def _run(self, timer):
        # Only the current timer ticks; it hands over to the next one under the lock
        with self._lock:
            if self._timer is not timer:
                return
            if self._remaining > 0:
                self._remaining -= 1
            remaining = self._remaining
            next_timer = self._timer = self._new_timer() if remaining > 0 else None

        if self.on_tick is not None:
            self.on_tick(remaining)
        if next_timer is not None:
            next_timer.start()
