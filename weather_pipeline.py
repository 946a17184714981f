import logging
from datetime import date, datetime, timedelta

from dice import DiceRoller
from event_ledger import (
    EventLedger,
    InMemoryEventStore,
    JsonFileEventStore,
    MySQLEventStore,
    SQLiteEventStore,
)
from weather_generator import WeatherGenerator
from weather_report import render_help, render_report

logger = logging.getLogger(__name__)

POST_WINDOW = timedelta(minutes=15)


class WeatherPipeline:
    """Roll, collect ongoing events, render. Shared by the daily post and the !weather command."""

    def __init__(self, generator, ledger, guard_daily_decay=True, clock=date.today,
                 post_time=None, command_prefix="!"):
        self.generator = generator
        self.ledger = ledger
        self.guard_daily_decay = guard_daily_decay
        self.clock = clock
        self.post_time = post_time
        self.command_prefix = command_prefix

    def run_daily_report(self, today=None):
        today = today or self.clock()
        outcome = self.generator.generate(today)
        if self.guard_daily_decay:
            active_events = self.ledger.fetch_active_for_day(today)
        else:
            active_events = self.ledger.fetch_active_and_decay()
        report = render_report(outcome, active_events, today)
        logger.info(f"Rendered weather report for {today}: {outcome.condition} with {len(active_events)} ongoing event(s)")
        logger.debug(report.to_text())
        return report

    def help_report(self):
        return render_help(self.post_time, self.command_prefix)


def is_post_due(now, post_time, last_posted=None, window=POST_WINDOW):
    """
    True when ``now`` falls inside the posting window that opens at ``post_time``
    and nothing has been posted yet on that date.
    """
    if last_posted == now.date():
        return False
    # Compare local wall-clock times
    wall_clock = now.replace(tzinfo=None)
    scheduled = datetime.combine(now.date(), post_time)
    return scheduled <= wall_clock < scheduled + window


def build_event_store(settings):
    backend = settings.ledger_backend
    if backend == "json":
        return JsonFileEventStore(settings.ledger_path)
    if backend == "sqlite":
        return SQLiteEventStore(settings.ledger_path)
    if backend == "mysql":
        return MySQLEventStore(
            host=settings.mysql_host,
            port=settings.mysql_port,
            user=settings.mysql_user,
            password=settings.mysql_password,
            database=settings.mysql_database,
        )
    if backend == "memory":
        return InMemoryEventStore()
    raise ValueError(f"Unknown ledger backend: {backend}")


def build_pipeline(settings, roller=None, store=None):
    """Wire the ledger, generator and renderer from settings."""
    store = store or build_event_store(settings)
    ledger = EventLedger(store, clock=settings.today)
    generator = WeatherGenerator(ledger=ledger, roller=roller or DiceRoller(), clock=settings.today)
    logger.info(f"Weather pipeline ready ({settings.ledger_backend} ledger, decay guard {'on' if settings.decay_guard else 'off'})")
    return WeatherPipeline(
        generator,
        ledger,
        guard_daily_decay=settings.decay_guard,
        clock=settings.today,
        post_time=settings.post_time,
        command_prefix=settings.command_prefix,
    )
