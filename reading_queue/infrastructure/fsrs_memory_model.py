"""
FSRS implementation of the MemoryModel port.

Wraps ``fsrs.Scheduler`` (py-fsrs). The library owns the stability and
difficulty formulas; this adapter translates between its ``Card`` and the
persisted ``MemoryState``, and keeps the review counters the library does not
track (reps, lapses).
"""

import logging
import random
from datetime import datetime, timedelta
from typing import Optional, Tuple

from fsrs import Card, Scheduler, State
from fsrs import Rating as FsrsRating

from ..domain.models import (
    CardState,
    MemoryState,
    Rating,
    ReviewLogRecord,
    SchedulingOutcome,
    SchedulingTable,
    to_utc,
)

logger = logging.getLogger(__name__)

# Tuned for reading comprehension rather than rote memorisation
DEFAULT_DESIRED_RETENTION = 0.85
DEFAULT_MAXIMUM_INTERVAL = 365
DEFAULT_LEARNING_STEPS: Tuple[timedelta, ...] = (
    timedelta(minutes=1),
    timedelta(minutes=10),
)
DEFAULT_RELEARNING_STEPS: Tuple[timedelta, ...] = (timedelta(minutes=10),)


class FsrsMemoryModel:
    """MemoryModel backed by the FSRS scheduler.

    Args:
        desired_retention: Target recall probability at review time.
        maximum_interval: Cap on the scheduled interval, in days.
        enable_fuzz: Spread due dates slightly so reviews do not cluster.
        enable_short_term: Use minute-scale learning steps for new and lapsed
            cards. When off, cards go straight to day-scale review.
    """

    def __init__(
        self,
        desired_retention: float = DEFAULT_DESIRED_RETENTION,
        maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL,
        enable_fuzz: bool = True,
        enable_short_term: bool = True,
    ):
        self.desired_retention = desired_retention
        self.maximum_interval = maximum_interval
        self.enable_fuzz = enable_fuzz
        self.enable_short_term = enable_short_term

        self._scheduler = Scheduler(
            desired_retention=desired_retention,
            learning_steps=DEFAULT_LEARNING_STEPS if enable_short_term else (),
            relearning_steps=DEFAULT_RELEARNING_STEPS if enable_short_term else (),
            maximum_interval=maximum_interval,
            enable_fuzzing=enable_fuzz,
        )

    def initialize_new_state(self, due: datetime) -> MemoryState:
        return MemoryState(due=to_utc(due), state=CardState.NEW)

    def compute_next_states(self, state: MemoryState, now: datetime) -> SchedulingTable:
        """Rate ``state`` with every rating at ``now``; nothing is persisted.

        Fuzz is drawn from a generator seeded by the card and ``now``, so the
        same inputs always produce the same table.
        """
        now = to_utc(now)

        saved_random_state = random.getstate()
        try:
            table = {}
            for rating in Rating:
                random.seed(self._fuzz_seed(state, now))
                reviewed, _ = self._scheduler.review_card(
                    self._to_fsrs_card(state), FsrsRating(int(rating)), review_datetime=now
                )
                table[rating] = self._to_outcome(state, reviewed, rating, now)
        finally:
            random.setstate(saved_random_state)

        logger.debug(
            f"Computed next states for {state.state.name} card due {state.due.isoformat()}"
        )
        return table

    @staticmethod
    def _fuzz_seed(state: MemoryState, now: datetime) -> str:
        return (
            f"{now.isoformat()}|{state.reps}|{state.lapses}|"
            f"{state.stability:.6f}|{state.difficulty:.6f}"
        )

    @staticmethod
    def _to_fsrs_card(state: MemoryState) -> Card:
        if state.state == CardState.NEW:
            return Card(
                card_id=0,
                state=State.Learning,
                step=0,
                due=state.due,
            )

        return Card(
            card_id=0,
            state=State(int(state.state)),
            step=state.step,
            stability=state.stability or None,
            difficulty=state.difficulty or None,
            due=state.due,
            last_review=state.last_review,
        )

    @staticmethod
    def _to_outcome(
        prior: MemoryState, reviewed: Card, rating: Rating, now: datetime
    ) -> SchedulingOutcome:
        due = to_utc(reviewed.due)
        elapsed_days = _whole_days(prior.last_review, now)
        scheduled_days = max(0, (due - now).days)

        lapsed = prior.state == CardState.REVIEW and rating == Rating.AGAIN

        next_state = MemoryState(
            due=due,
            stability=reviewed.stability or 0.0,
            difficulty=reviewed.difficulty or 0.0,
            elapsed_days=elapsed_days,
            scheduled_days=scheduled_days,
            reps=prior.reps + 1,
            lapses=prior.lapses + (1 if lapsed else 0),
            state=CardState(int(reviewed.state)),
            step=reviewed.step,
            last_review=now,
        )

        # the log captures the card as it was when the rating was given
        log = ReviewLogRecord(
            rating=rating,
            state=prior.state,
            due=prior.due,
            stability=prior.stability,
            difficulty=prior.difficulty,
            elapsed_days=elapsed_days,
            scheduled_days=prior.scheduled_days,
            review=now,
        )

        return SchedulingOutcome(state=next_state, due=due, log=log)


def _whole_days(since: Optional[datetime], now: datetime) -> int:
    if since is None:
        return 0
    return max(0, (now - since).days)
