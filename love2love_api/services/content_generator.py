"""
Idempotent generation of the daily question or challenge for a couple.

The document id `{coupleId}_{yyyy-MM-dd}` is the idempotency key. An existing
document always wins, even if its day disagrees with a freshly computed one.
Creation goes through Firestore's create-if-absent write, so two racing
invocations cannot both write the day's item. Items are keyed by the UTC date of
`now` on every path; a couple's timezone only decides when the scheduler runs.

Callers are responsible for authenticating the request.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from firebase_admin import firestore
from google.api_core.exceptions import GoogleAPICallError

from love2love_api.crud import crud_content, crud_settings
from love2love_api.models.content_kind import ContentKind
from love2love_api.models.daily_content import (
    ContentStatus,
    DailyContentItem,
    GenerationResult,
)
from love2love_api.services.day_calculator import (
    calculate_content_day,
    content_key,
    cycle_day,
    expected_day,
    next_date_string,
    utc_date,
    utc_date_string,
)
from love2love_api.services.retention import cleanup_previous_day

logger = logging.getLogger(__name__)


async def generate_daily_content(
    db: firestore.AsyncClient,
    kind: ContentKind,
    couple_id: str,
    timezone_name: Optional[str] = None,
    explicit_day: Optional[int] = None,
    now: Optional[datetime] = None,
) -> GenerationResult:
    now = now or datetime.now(timezone.utc)
    target_date = utc_date(now)
    target_date_string = utc_date_string(target_date)
    content_id = crud_content.content_document_id(couple_id, target_date)

    settings = await crud_settings.get_or_create_settings(
        db, kind, couple_id, timezone_name, now
    )
    if explicit_day:
        day = explicit_day
        cycled_day = cycle_day(explicit_day, kind.catalog_size)
    else:
        day = max(expected_day(settings.start_date, now), 1)
        cycled_day = calculate_content_day(settings, now, kind.catalog_size)

    existing = await crud_content.get_content(db, kind, content_id)
    if existing is not None:
        logger.info(
            f"{kind.content_collection}/{content_id} already exists "
            f"({existing.content_key}, day {existing.content_day})"
        )
        return GenerationResult(content=existing, already_exists=True)

    await cleanup_previous_day(db, kind, couple_id, target_date)

    item = DailyContentItem(
        id=content_id,
        couple_id=couple_id,
        content_key=content_key(kind, cycled_day),
        content_day=cycled_day,
        scheduled_date=target_date_string,
        scheduled_date_time=now,
        status=ContentStatus.PENDING,
        timezone=timezone_name or settings.timezone,
        is_completed=False if kind is ContentKind.CHALLENGE else None,
    )

    created = await crud_content.create_content_if_absent(db, kind, item)
    if not created:
        winner = await crud_content.get_content(db, kind, content_id)
        if winner is not None:
            return GenerationResult(content=winner, already_exists=True)
        # Created and cleaned up again between our calls; report our own view.
        return GenerationResult(content=item, already_exists=True)

    logger.info(
        f"Generated {kind.content_collection}/{content_id}: {item.content_key} "
        f"(day {day}, cycled {item.content_day}/{kind.catalog_size})"
    )

    try:
        await crud_settings.record_generation(
            db, kind, couple_id, day, next_date_string(target_date)
        )
    except GoogleAPICallError as e:
        # The item exists; the next run recomputes the day from startDate anyway.
        logger.error(
            f"Failed to update {kind.settings_collection}/{couple_id} after generation: {e}",
            exc_info=True,
        )

    return GenerationResult(content=item, already_exists=False)
