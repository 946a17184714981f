import json
import logging
import math
import os
import sqlite3
import threading
from copy import deepcopy
from dataclasses import dataclass, replace
from datetime import date, datetime

import mysql.connector

logger = logging.getLogger(__name__)

# Same format as JavaScript Date.toDateString(), e.g. "Sun Oct 18 2026"
START_DATE_FORMAT = "%a %b %d %Y"
STAMP_DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class OngoingEvent:
    """A strange weather condition that spans several calendar days."""

    condition: str
    original_duration: str
    days_remaining: int
    start_date: date

    def to_record(self) -> dict:
        return {
            "condition": self.condition,
            "originalDuration": self.original_duration,
            "daysRemaining": self.days_remaining,
            "startDate": self.start_date.strftime(START_DATE_FORMAT),
        }

    @classmethod
    def from_record(cls, record: dict) -> "OngoingEvent":
        return cls(
            condition=record["condition"],
            original_duration=record["originalDuration"],
            days_remaining=int(record["daysRemaining"]),
            start_date=datetime.strptime(record["startDate"], START_DATE_FORMAT).date(),
        )


def parse_duration_days(label) -> int:
    """
    Convert a rolled duration such as "3 Days" or "20 Hours" into whole days.
    Anything shorter than a day counts as one day; unknown units count as zero.
    """
    if not label:
        return 0
    try:
        amount = int(label.split(" ")[0])
    except ValueError:
        logger.debug(f"Duration '{label}' has no leading number")
        return 0

    if "Days" in label:
        return amount
    if "Hours" in label:
        return 1 if amount < 24 else math.ceil(amount / 24)
    if "Minutes" in label:
        return 1
    logger.debug(f"Duration '{label}' has no known unit")
    return 0


# Storage backends: each one reads and rewrites the whole event collection

class EventStore:
    """Read-all/write-all storage for ongoing event records."""

    def load_events(self) -> list:
        raise NotImplementedError

    def save_events(self, records: list) -> None:
        raise NotImplementedError

    def load_decay_stamp(self):
        """Return the last decay stamp ``{"date": ..., "snapshot": [...]}`` or None."""
        raise NotImplementedError

    def save_decay_stamp(self, stamp: dict) -> None:
        raise NotImplementedError


class InMemoryEventStore(EventStore):
    def __init__(self, records=None):
        self.records = deepcopy(records) if records else []
        self.stamp = None

    def load_events(self):
        return deepcopy(self.records)

    def save_events(self, records):
        self.records = deepcopy(records)

    def load_decay_stamp(self):
        return deepcopy(self.stamp)

    def save_decay_stamp(self, stamp):
        self.stamp = deepcopy(stamp)


class JsonFileEventStore(EventStore):
    """Stores events as a JSON array; the decay stamp lives in a sidecar file."""

    def __init__(self, path):
        self.path = os.fspath(path)
        root, _ = os.path.splitext(self.path)
        self.stamp_path = f"{root}.decay.json"

    def _read(self, path, default):
        try:
            if os.path.exists(path):
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error loading {path}: {e}")
        return default

    def _write(self, path, data):
        try:
            payload = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Error saving {path}: {e}")
            return
        # Write beside the target and swap it in, so a failed write keeps the old file
        tmp_path = f"{path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Error saving {path}: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def load_events(self):
        data = self._read(self.path, [])
        if not isinstance(data, list):
            logger.error(f"Expected a list of events in {self.path}, got {type(data).__name__}")
            return []
        return data

    def save_events(self, records):
        self._write(self.path, records)

    def load_decay_stamp(self):
        return self._read(self.stamp_path, None)

    def save_decay_stamp(self, stamp):
        self._write(self.stamp_path, stamp)


def _rows_to_records(rows):
    return [
        {
            "condition": row[0],
            "originalDuration": row[1],
            "daysRemaining": row[2],
            "startDate": row[3],
        }
        for row in rows
    ]


def _records_to_rows(records):
    return [
        (r["condition"], r["originalDuration"], r["daysRemaining"], r["startDate"])
        for r in records
    ]


class SQLiteEventStore(EventStore):
    def __init__(self, path="weather_bot.db"):
        self.path = os.fspath(path)
        self.initialize_database()

    def initialize_database(self):
        try:
            with sqlite3.connect(self.path) as conn:
                c = conn.cursor()
                c.execute('''CREATE TABLE IF NOT EXISTS ongoing_events (
                            id INTEGER PRIMARY KEY AUTOINCREMENT,
                            event_condition TEXT NOT NULL,
                            original_duration TEXT NOT NULL,
                            days_remaining INTEGER NOT NULL,
                            start_date TEXT NOT NULL)''')
                c.execute('''CREATE TABLE IF NOT EXISTS ledger_meta (
                            meta_key TEXT PRIMARY KEY,
                            meta_value TEXT NOT NULL)''')
                conn.commit()
            logger.info(f"Event ledger database ready at {self.path}")
        except sqlite3.Error as e:
            logger.error(f"Database error: {e}")

    def load_events(self):
        try:
            with sqlite3.connect(self.path) as conn:
                c = conn.cursor()
                c.execute('''SELECT event_condition, original_duration, days_remaining, start_date
                             FROM ongoing_events ORDER BY id''')
                return _rows_to_records(c.fetchall())
        except sqlite3.Error as e:
            logger.error(f"Database error loading ongoing events: {e}")
            return []

    def save_events(self, records):
        try:
            with sqlite3.connect(self.path) as conn:
                c = conn.cursor()
                c.execute("DELETE FROM ongoing_events")
                c.executemany(
                    '''INSERT INTO ongoing_events (event_condition, original_duration, days_remaining, start_date)
                       VALUES (?, ?, ?, ?)''',
                    _records_to_rows(records),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Database error saving ongoing events: {e}")

    def load_decay_stamp(self):
        try:
            with sqlite3.connect(self.path) as conn:
                c = conn.cursor()
                c.execute("SELECT meta_value FROM ledger_meta WHERE meta_key=?", ("decay_stamp",))
                row = c.fetchone()
                return json.loads(row[0]) if row else None
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Database error loading decay stamp: {e}")
            return None

    def save_decay_stamp(self, stamp):
        try:
            with sqlite3.connect(self.path) as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO ledger_meta (meta_key, meta_value) VALUES (?, ?)",
                    ("decay_stamp", json.dumps(stamp)),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Database error saving decay stamp: {e}")


class MySQLEventStore(EventStore):
    def __init__(self, host, port, user, password, database):
        self.params = {
            "host": host,
            "port": int(port),
            "user": user,
            "password": password,
            "database": database,
        }
        self._schema_ready = False

    def get_mysql_connection(self):
        return mysql.connector.connect(**self.params)

    def _ensure_schema(self, cursor):
        if self._schema_ready:
            return
        cursor.execute('''CREATE TABLE IF NOT EXISTS ongoing_events (
                          id INT AUTO_INCREMENT PRIMARY KEY,
                          event_condition VARCHAR(255) NOT NULL,
                          original_duration VARCHAR(255) NOT NULL,
                          days_remaining INT NOT NULL,
                          start_date VARCHAR(32) NOT NULL)''')
        cursor.execute('''CREATE TABLE IF NOT EXISTS ledger_meta (
                          meta_key VARCHAR(64) PRIMARY KEY,
                          meta_value TEXT NOT NULL)''')
        self._schema_ready = True

    def _run(self, action, default=None):
        conn = cursor = None
        try:
            conn = self.get_mysql_connection()
            cursor = conn.cursor()
            self._ensure_schema(cursor)
            result = action(cursor)
            conn.commit()
            return result
        except (mysql.connector.Error, ValueError) as e:
            logger.error(f"MySQL error in event ledger: {e}")
            return default
        finally:
            if cursor:
                cursor.close()
            if conn:
                conn.close()

    def load_events(self):
        def action(cursor):
            cursor.execute('''SELECT event_condition, original_duration, days_remaining, start_date
                              FROM ongoing_events ORDER BY id''')
            return _rows_to_records(cursor.fetchall())

        return self._run(action, default=[])

    def save_events(self, records):
        def action(cursor):
            cursor.execute("DELETE FROM ongoing_events")
            if records:
                cursor.executemany(
                    '''INSERT INTO ongoing_events (event_condition, original_duration, days_remaining, start_date)
                       VALUES (%s, %s, %s, %s)''',
                    _records_to_rows(records),
                )

        self._run(action)

    def load_decay_stamp(self):
        def action(cursor):
            cursor.execute("SELECT meta_value FROM ledger_meta WHERE meta_key=%s", ("decay_stamp",))
            row = cursor.fetchone()
            return json.loads(row[0]) if row else None

        return self._run(action)

    def save_decay_stamp(self, stamp):
        def action(cursor):
            cursor.execute(
                "REPLACE INTO ledger_meta (meta_key, meta_value) VALUES (%s, %s)",
                ("decay_stamp", json.dumps(stamp)),
            )

        self._run(action)


class EventLedger:
    """
    Owns the persisted collection of ongoing weather events.

    Events are added when a multi-day strange weather condition is rolled and
    decremented once per decay pass until they run out.
    """

    def __init__(self, store: EventStore, clock=date.today):
        self.store = store
        self.clock = clock
        self._lock = threading.Lock()

    def _load(self):
        events = []
        for record in self.store.load_events():
            try:
                events.append(OngoingEvent.from_record(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Dropping malformed ongoing event {record!r}, it will not be written back: {e}")
        return events

    def _save(self, events):
        self.store.save_events([event.to_record() for event in events])

    def active_events(self):
        """Return the persisted events without decaying them."""
        return [event for event in self._load() if event.days_remaining > 0]

    def add_event(self, condition, duration_label, today=None):
        days = parse_duration_days(duration_label)
        if days <= 1:
            logger.debug(f"{condition} ({duration_label}) resolves today, not tracking it")
            return None

        # Today is day one
        today = today or self.clock()
        event = OngoingEvent(
            condition=condition,
            original_duration=duration_label,
            days_remaining=days - 1,
            start_date=today,
        )
        with self._lock:
            events = self._load()
            stamp = self.store.load_decay_stamp()
            if isinstance(stamp, dict) and stamp.get("date") == today.strftime(STAMP_DATE_FORMAT):
                # Today's decay pass already ran: show the event in today's
                # snapshot and persist it as already decayed
                stamp["snapshot"] = list(stamp.get("snapshot", [])) + [event.to_record()]
                self.store.save_decay_stamp(stamp)
                if event.days_remaining - 1 > 0:
                    events.append(replace(event, days_remaining=event.days_remaining - 1))
            else:
                events.append(event)
            self._save(events)
        logger.info(f"Tracking ongoing event {condition} for {event.days_remaining} more day(s)")
        return event

    def fetch_active_and_decay(self):
        """
        Return active events as of today, then persist them one day shorter.

        Every call is a decay pass, so calling this twice on the same day
        decrements the ledger twice.
        """
        with self._lock:
            return self._decay()

    def _decay(self):
        active = [event for event in self._load() if event.days_remaining > 0]
        remaining = [
            replace(event, days_remaining=event.days_remaining - 1)
            for event in active
            if event.days_remaining - 1 > 0
        ]
        self._save(remaining)
        expired = len(active) - len(remaining)
        if expired:
            logger.info(f"{expired} ongoing event(s) expired")
        return active

    def fetch_active_for_day(self, today=None):
        """
        Decay at most once per calendar day.

        The first call on a day runs a decay pass and stamps it with the date;
        later calls that day return the same snapshot without decaying again.
        """
        today = today or self.clock()
        day_key = today.strftime(STAMP_DATE_FORMAT)
        with self._lock:
            stamp = self.store.load_decay_stamp()
            if isinstance(stamp, dict) and stamp.get("date") == day_key:
                logger.info(f"Decay pass already ran on {day_key}, reusing its snapshot")
                try:
                    return [OngoingEvent.from_record(r) for r in stamp.get("snapshot", [])]
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Ignoring malformed decay stamp for {day_key}: {e}")
                    return []

            active = self._decay()
            self.store.save_decay_stamp({
                "date": day_key,
                "snapshot": [event.to_record() for event in active],
            })
            return active
