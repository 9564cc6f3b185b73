"""
Scheduled content generation.

The hourly run only looks at couples whose timezone can be at its local
trigger hour during the current UTC hour, instead of scanning every couple
every hour. TIMEZONE_BUCKETS lists, per UTC hour, the zones whose local
midnight can fall in that hour; zones observing DST are listed under both
offsets and the exact local-hour check filters out the wrong one. Zones absent
from the table are only served by the once-daily run.

The local hour only decides when a couple is processed. The generated item is
still keyed by the UTC date, like every other caller of the generator.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo

from firebase_admin import firestore

from love2love_api.core.config import settings as app_settings
from love2love_api.crud import crud_content, crud_responses, crud_settings
from love2love_api.models.content_kind import ContentKind
from love2love_api.models.scheduler import ReminderRunSummary, SchedulerRunSummary
from love2love_api.models.settings import CoupleContentSettings
from love2love_api.services import notification_service
from love2love_api.services.content_generator import generate_daily_content
from love2love_api.services.day_calculator import to_utc, utc_date_string

logger = logging.getLogger(__name__)

GENERATED = "generated"
SKIPPED = "skipped"
ERROR = "error"

# UTC hour -> zones whose local midnight can occur during that hour
TIMEZONE_BUCKETS: Dict[int, List[str]] = {
    0: ["UTC", "Europe/London", "Europe/Dublin", "Europe/Lisbon", "Atlantic/Azores"],
    1: ["Atlantic/Azores"],
    2: [],
    3: ["America/Sao_Paulo", "America/Argentina/Buenos_Aires", "America/Halifax"],
    4: ["America/Halifax", "America/New_York", "America/Toronto"],
    5: ["America/New_York", "America/Toronto", "America/Chicago"],
    6: ["America/Chicago", "America/Mexico_City", "America/Denver"],
    7: ["America/Denver", "America/Phoenix", "America/Los_Angeles", "America/Vancouver"],
    8: ["America/Los_Angeles", "America/Vancouver", "America/Anchorage"],
    9: ["America/Anchorage"],
    10: ["Pacific/Honolulu"],
    11: ["Pacific/Auckland"],
    12: ["Pacific/Auckland"],
    13: ["Australia/Sydney", "Australia/Melbourne"],
    14: ["Australia/Sydney", "Australia/Melbourne", "Australia/Brisbane"],
    15: ["Asia/Tokyo", "Asia/Seoul"],
    16: ["Asia/Shanghai", "Asia/Hong_Kong", "Asia/Singapore", "Australia/Perth"],
    17: ["Asia/Bangkok", "Asia/Jakarta", "Asia/Ho_Chi_Minh"],
    18: ["Asia/Dhaka"],
    19: ["Asia/Karachi", "Asia/Kolkata"],
    20: ["Asia/Dubai"],
    21: [
        "Europe/Moscow",
        "Europe/Istanbul",
        "Asia/Riyadh",
        "Asia/Tehran",
        "Europe/Athens",
        "Europe/Helsinki",
        "Europe/Kyiv",
        "Europe/Bucharest",
        "Africa/Cairo",
    ],
    22: [
        "Europe/Athens",
        "Europe/Helsinki",
        "Europe/Kyiv",
        "Europe/Bucharest",
        "Africa/Cairo",
        "Africa/Johannesburg",
        "Europe/Paris",
        "Europe/Berlin",
        "Europe/Madrid",
        "Europe/Rome",
        "Europe/Brussels",
        "Europe/Amsterdam",
        "Europe/Zurich",
        "Europe/Vienna",
        "Europe/Stockholm",
        "Europe/Warsaw",
    ],
    23: [
        "Europe/Paris",
        "Europe/Berlin",
        "Europe/Madrid",
        "Europe/Rome",
        "Europe/Brussels",
        "Europe/Amsterdam",
        "Europe/Zurich",
        "Europe/Vienna",
        "Europe/Stockholm",
        "Europe/Warsaw",
        "Africa/Lagos",
        "Africa/Casablanca",
        "Europe/London",
        "Europe/Dublin",
        "Europe/Lisbon",
    ],
}


def timezones_for_utc_hour(utc_hour: int, trigger_hour: Optional[int] = None) -> List[str]:
    if trigger_hour is None:
        trigger_hour = app_settings.LOCAL_TRIGGER_HOUR
    # Local trigger hour T at UTC hour h <=> local midnight at UTC hour h - T
    return list(TIMEZONE_BUCKETS.get((utc_hour - trigger_hour) % 24, []))


def is_local_trigger_hour(now: datetime, timezone_name: str, trigger_hour: Optional[int] = None) -> bool:
    if trigger_hour is None:
        trigger_hour = app_settings.LOCAL_TRIGGER_HOUR
    local_time = to_utc(now).astimezone(ZoneInfo(timezone_name))
    return local_time.hour == trigger_hour


def _tally(summary: SchedulerRunSummary, outcomes: Iterable[str]) -> SchedulerRunSummary:
    for outcome in outcomes:
        summary.processed += 1
        if outcome == GENERATED:
            summary.generated += 1
        elif outcome == SKIPPED:
            summary.skipped += 1
        else:
            summary.errors += 1
    return summary


async def _generate_at_local_trigger(
    db: firestore.AsyncClient,
    kind: ContentKind,
    couple_settings: CoupleContentSettings,
    now: datetime,
) -> str:
    couple_id = couple_settings.couple_id
    try:
        if not is_local_trigger_hour(now, couple_settings.timezone):
            return SKIPPED

        result = await generate_daily_content(
            db, kind, couple_id, couple_settings.timezone, now=now
        )
        return SKIPPED if result.already_exists else GENERATED
    except Exception as e:
        logger.error(
            f"Hourly {kind.value} generation failed for couple {couple_id}: {e}",
            exc_info=True,
        )
        return ERROR


async def run_hourly_generation(
    db: firestore.AsyncClient, kind: ContentKind, now: Optional[datetime] = None
) -> SchedulerRunSummary:
    now = to_utc(now or datetime.now(timezone.utc))
    zones = timezones_for_utc_hour(now.hour)
    summary = SchedulerRunSummary(utc_hour=now.hour, timezones=zones)

    if not zones:
        logger.info(f"No timezone reaches its trigger hour at {now.hour:02d}:00 UTC")
        return summary

    candidates = await crud_settings.list_settings_by_timezones(db, kind, zones)
    logger.info(
        f"Hourly {kind.value} run at {now.hour:02d}:00 UTC: {len(candidates)} couples in {len(zones)} timezones"
    )

    outcomes = await asyncio.gather(
        *(_generate_at_local_trigger(db, kind, s, now) for s in candidates)
    )
    _tally(summary, outcomes)

    logger.info(
        f"Hourly {kind.value} run done: {summary.generated} generated, "
        f"{summary.skipped} skipped, {summary.errors} errors"
    )
    return summary


async def _generate_for_today(
    db: firestore.AsyncClient,
    kind: ContentKind,
    couple_settings: CoupleContentSettings,
    now: datetime,
) -> str:
    try:
        result = await generate_daily_content(
            db, kind, couple_settings.couple_id, couple_settings.timezone, now=now
        )
        return SKIPPED if result.already_exists else GENERATED
    except Exception as e:
        logger.error(
            f"Daily {kind.value} generation failed for couple {couple_settings.couple_id}: {e}",
            exc_info=True,
        )
        return ERROR


async def run_due_generation(
    db: firestore.AsyncClient, kind: ContentKind, now: Optional[datetime] = None
) -> SchedulerRunSummary:
    """Once-daily run over the couples whose nextScheduledDate is today (UTC)."""
    now = to_utc(now or datetime.now(timezone.utc))
    today = utc_date_string(now)
    summary = SchedulerRunSummary(utc_hour=now.hour)

    due = await crud_settings.list_due_settings(db, kind, today)
    logger.info(f"Daily {kind.value} run for {today}: {len(due)} couples due")
    if not due:
        return summary

    outcomes = await asyncio.gather(*(_generate_for_today(db, kind, s, now) for s in due))
    _tally(summary, outcomes)

    logger.info(
        f"Daily {kind.value} run done: {summary.generated} generated, "
        f"{summary.skipped} skipped, {summary.errors} errors"
    )
    return summary


async def run_daily_reminders(
    db: firestore.AsyncClient, now: Optional[datetime] = None
) -> ReminderRunSummary:
    """Reminds both partners about today's questions that nobody answered yet."""
    now = to_utc(now or datetime.now(timezone.utc))
    today = utc_date_string(now)
    summary = ReminderRunSummary()

    questions = await crud_content.list_content_for_date(db, ContentKind.QUESTION, today)
    for question in questions:
        summary.questions_checked += 1
        if await crud_responses.has_responses(db, question.id):
            continue
        try:
            summary.notifications_sent += await notification_service.send_daily_reminder(
                db, question
            )
        except Exception as e:
            logger.error(f"Reminder failed for question {question.id}: {e}", exc_info=True)

    logger.info(
        f"Daily reminders for {today}: {summary.notifications_sent} notifications "
        f"for {summary.questions_checked} questions"
    )
    return summary
