"""US equity market session resolution on Eastern time."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from tradedesk.signals.schemas import MarketSession, SessionInfo

EASTERN = ZoneInfo("America/New_York")

PRE_MARKET_START = 4 * 60  # 04:00
MARKET_OPEN_START = 9 * 60 + 30  # 09:30
MARKET_CLOSE = 16 * 60  # 16:00
AFTER_HOURS_END = 20 * 60  # 20:00
FUTURES_REOPEN = 18 * 60  # Sunday 18:00

# datetime.weekday(): Monday is 0, Sunday is 6
FRIDAY = 4
SATURDAY = 5
SUNDAY = 6

REFRESH_SECONDS: dict[MarketSession, int] = {
    MarketSession.MARKET_OPEN: 30,
    MarketSession.PRE_MARKET: 60,
    MarketSession.AFTER_HOURS: 60,
    MarketSession.FUTURES_OPEN: 120,
}
DEFAULT_REFRESH_SECONDS = 300


def resolve_session(day_of_week: int, hour: int, minute: int) -> MarketSession:
    """Map an Eastern wall-clock time to its trading session.

    Weekday evenings after 20:00 and early mornings before 04:00 belong to the
    overnight futures session, except Friday evening which closes the week.
    """
    minutes = hour * 60 + minute

    if day_of_week == SATURDAY:
        return MarketSession.WEEKEND
    if day_of_week == SUNDAY:
        return MarketSession.FUTURES_OPEN if minutes >= FUTURES_REOPEN else MarketSession.WEEKEND

    if PRE_MARKET_START <= minutes < MARKET_OPEN_START:
        return MarketSession.PRE_MARKET
    if MARKET_OPEN_START <= minutes < MARKET_CLOSE:
        return MarketSession.MARKET_OPEN
    if MARKET_CLOSE <= minutes < AFTER_HOURS_END:
        return MarketSession.AFTER_HOURS
    if day_of_week == FRIDAY and minutes >= AFTER_HOURS_END:
        return MarketSession.MARKET_CLOSED
    return MarketSession.FUTURES_OPEN


def eastern_now(now: datetime | None = None) -> datetime:
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(EASTERN)


def current_session(now: datetime | None = None) -> MarketSession:
    eastern = eastern_now(now)
    return resolve_session(eastern.weekday(), eastern.hour, eastern.minute)


def refresh_seconds(session: MarketSession) -> int:
    return REFRESH_SECONDS.get(session, DEFAULT_REFRESH_SECONDS)


def update_frequency(session: MarketSession) -> str:
    seconds = refresh_seconds(session)
    if seconds < 60:
        return f"Updates every {seconds} seconds"
    minutes = seconds // 60
    return f"Updates every {minutes} minute{'s' if minutes > 1 else ''}"


def session_info(now: datetime | None = None) -> SessionInfo:
    eastern = eastern_now(now)
    session = resolve_session(eastern.weekday(), eastern.hour, eastern.minute)
    return SessionInfo(
        session=session,
        refresh_seconds=refresh_seconds(session),
        update_frequency=update_frequency(session),
        eastern_time=eastern.isoformat(timespec="seconds"),
    )


def minutes_since_open(now: datetime | None = None) -> int:
    eastern = eastern_now(now)
    return eastern.hour * 60 + eastern.minute - MARKET_OPEN_START


def minutes_until_close(now: datetime | None = None) -> int:
    eastern = eastern_now(now)
    return MARKET_CLOSE - (eastern.hour * 60 + eastern.minute)
