from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

import structlog

from topgamescore.core.config import get_settings
from topgamescore.game.errors import GameError, InvalidStateError, StorageFailureError
from topgamescore.game.groups.constants import GROUP_STATUS_FINISHED, GROUP_STATUS_OPEN
from topgamescore.game.leaderboard.types import LeaderboardEntry
from topgamescore.game.players.types import PlayerProgress, QuestionRound
from topgamescore.game.players.validation import normalize_player_handle, normalize_player_name
from topgamescore.game.scoring.types import SubmitAnswerResult
from topgamescore.game.sessions.backend import GroupWatch, QuizBackend
from topgamescore.game.sessions.constants import (
    SESSION_STATE_ADVANCING,
    SESSION_STATE_ANSWERED,
    SESSION_STATE_ANSWERING,
    SESSION_STATE_JOINED_WAITING,
    SESSION_STATE_NOT_JOINED,
    SESSION_STATE_RANKING,
)
from topgamescore.realtime.events import GroupEvent

logger = structlog.get_logger(__name__)


class PlayerSession:
    """One player's walk through a group's questions.

    The session is self-paced: each question is stamped on the server by
    ``begin_question`` and the local deadline is derived from that stamp.
    A tick loop polls the deadline and submits a timeout at most once per
    question. A ``finished`` group moves the session to ranking from any
    state.

    ``clock`` returns monotonic seconds and ``sleep`` suspends for seconds;
    both are injectable so tests can drive time by hand.
    """

    def __init__(
        self,
        backend: QuizBackend,
        *,
        group_id: str,
        player_id: str,
        tick_interval_sec: float | None = None,
        settle_delay_sec: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        settings = get_settings()
        self._backend = backend
        self.group_id = group_id
        self.player_id = player_id
        self._tick_interval_sec = (
            tick_interval_sec
            if tick_interval_sec is not None
            else settings.player_tick_interval_ms / 1000
        )
        self._settle_delay_sec = (
            settle_delay_sec
            if settle_delay_sec is not None
            else settings.player_settle_delay_ms / 1000
        )
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()

        self._state = SESSION_STATE_NOT_JOINED
        self._group_status: str | None = None
        self._round: QuestionRound | None = None
        self._deadline: float | None = None
        self._answered = False
        self._timeout_handled = False
        self._chosen_index: int | None = None
        self._last_result: SubmitAnswerResult | None = None
        self._total_score = 0
        self._watch: GroupWatch | None = None
        self._tick_task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def state(self) -> str:
        return self._state

    @property
    def current_round(self) -> QuestionRound | None:
        return self._round

    @property
    def answered(self) -> bool:
        return self._answered

    @property
    def chosen_index(self) -> int | None:
        return self._chosen_index

    @property
    def last_result(self) -> SubmitAnswerResult | None:
        return self._last_result

    @property
    def total_score(self) -> int:
        return self._total_score

    def remaining_ms(self) -> int:
        if self._deadline is None:
            return 0
        return max(0, int((self._deadline - self._clock()) * 1000))

    async def __aenter__(self) -> PlayerSession:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def join(self, *, name: str, handle: str) -> str:
        # Invalid input never reaches the backend.
        cleaned_name = normalize_player_name(name)
        cleaned_handle = normalize_player_handle(handle)
        await self._backend.join_group(
            group_id=self.group_id,
            player_id=self.player_id,
            name=cleaned_name,
            handle=cleaned_handle,
        )
        logger.info("player_session_joined", group_id=self.group_id, player_id=self.player_id)
        return await self.resume()

    async def resume(self) -> str:
        """Rebuild session state from the server, e.g. after a reconnect."""
        await self._ensure_watch()
        async with self._lock:
            group = await self._backend.get_group(self.group_id)
            self._group_status = group.status
            progress = await self._backend.get_progress(
                group_id=self.group_id,
                player_id=self.player_id,
            )
            self._total_score = progress.total_score
            await self._route_from_progress(progress)
        return self._state

    async def choose(self, option_index: int) -> SubmitAnswerResult:
        async with self._lock:
            if self._state != SESSION_STATE_ANSWERING or self._answered or self._round is None:
                raise InvalidStateError
            try:
                result = await self._submit(option_index)
            except InvalidStateError:
                await self._refresh_group_status()
                raise
        await self._advance()
        return result

    async def tick(self) -> None:
        """Evaluate the deadline once; submits a timeout when it has passed."""
        async with self._lock:
            if self._state != SESSION_STATE_ANSWERING or self._round is None:
                return
            if self._answered or self._timeout_handled:
                return
            if self._group_status != GROUP_STATUS_OPEN:
                return
            if self.remaining_ms() > 0:
                return
            self._timeout_handled = True
            try:
                await self._submit(None)
            except StorageFailureError:
                # The next tick retries the whole submission.
                self._timeout_handled = False
                raise
            except InvalidStateError:
                await self._refresh_group_status()
                return
        await self._advance()

    async def run(self) -> None:
        while not self._closed and self._state != SESSION_STATE_RANKING:
            try:
                await self.tick()
            except StorageFailureError:
                logger.warning(
                    "player_session_timeout_submit_failed",
                    group_id=self.group_id,
                    player_id=self.player_id,
                )
            except GameError as exc:
                logger.warning(
                    "player_session_tick_aborted",
                    group_id=self.group_id,
                    player_id=self.player_id,
                    error_type=type(exc).__name__,
                )
                self._enter_ranking()
                return
            await self._sleep(self._tick_interval_sec)

    def start(self) -> asyncio.Task[None]:
        if self._tick_task is None or self._tick_task.done():
            self._tick_task = asyncio.create_task(self.run())
        return self._tick_task

    async def on_group_event(self, event: GroupEvent) -> None:
        if event.status is None:
            return
        if event.status == GROUP_STATUS_FINISHED:
            # Preempts whatever question is in flight.
            self._group_status = GROUP_STATUS_FINISHED
            self._enter_ranking()
            return
        async with self._lock:
            self._group_status = event.status
            if event.status == GROUP_STATUS_OPEN and self._state == SESSION_STATE_JOINED_WAITING:
                progress = await self._backend.get_progress(
                    group_id=self.group_id,
                    player_id=self.player_id,
                )
                await self._route_from_progress(progress)

    async def leaderboard(self) -> list[LeaderboardEntry]:
        return await self._backend.get_leaderboard(self.group_id)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._tick_task is not None:
            self._tick_task.cancel()
            try:
                await self._tick_task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception(
                    "player_session_tick_task_failed",
                    group_id=self.group_id,
                    player_id=self.player_id,
                )
        if self._watch is not None:
            watch, self._watch = self._watch, None
            await watch.close()

    async def _ensure_watch(self) -> None:
        if self._watch is None and not self._closed:
            self._watch = await self._backend.watch_group(self.group_id, self.on_group_event)

    async def _refresh_group_status(self) -> None:
        group = await self._backend.get_group(self.group_id)
        self._group_status = group.status
        if group.status == GROUP_STATUS_FINISHED:
            self._enter_ranking()

    async def _route_from_progress(self, progress: PlayerProgress) -> None:
        if self._group_status == GROUP_STATUS_FINISHED or progress.completed:
            self._enter_ranking()
            return
        if self._group_status != GROUP_STATUS_OPEN:
            self._state = SESSION_STATE_JOINED_WAITING
            return
        await self._begin(progress.next_question_index)

    async def _begin(self, q_index: int | None) -> None:
        if q_index is None:
            self._enter_ranking()
            return
        question_round = await self._backend.begin_question(
            group_id=self.group_id,
            player_id=self.player_id,
            q_index=q_index,
        )
        if self._state == SESSION_STATE_RANKING:
            return
        self._round = question_round
        # Server elapsed time counts against the deadline after a reconnect.
        reference = self._clock() - question_round.elapsed_ms / 1000
        self._deadline = reference + question_round.max_time_sec
        self._answered = question_round.already_answered
        self._timeout_handled = False
        self._chosen_index = None
        self._state = SESSION_STATE_ANSWERING
        logger.info(
            "player_session_question_started",
            group_id=self.group_id,
            player_id=self.player_id,
            q_index=q_index,
            elapsed_ms=question_round.elapsed_ms,
        )

    async def _submit(self, chosen_index: int | None) -> SubmitAnswerResult:
        if self._round is None:
            raise InvalidStateError
        q_index = self._round.question.index
        self._answered = True
        self._chosen_index = chosen_index
        try:
            result = await self._backend.submit_answer(
                group_id=self.group_id,
                player_id=self.player_id,
                q_index=q_index,
                chosen_index=chosen_index,
            )
        except GameError:
            self._answered = False
            self._chosen_index = None
            raise
        self._last_result = result
        if result.total_score is not None:
            self._total_score = result.total_score
        elif not result.duplicate:
            self._total_score += result.score_awarded
        if self._state == SESSION_STATE_ANSWERING:
            self._state = SESSION_STATE_ANSWERED
        logger.info(
            "player_session_answer_submitted",
            group_id=self.group_id,
            player_id=self.player_id,
            q_index=q_index,
            timed_out=chosen_index is None,
            duplicate=result.duplicate,
            score_awarded=result.score_awarded,
        )
        return result

    async def _advance(self) -> None:
        if self._state != SESSION_STATE_ANSWERED:
            return
        self._state = SESSION_STATE_ADVANCING
        await self._sleep(self._settle_delay_sec)
        async with self._lock:
            if self._state != SESSION_STATE_ADVANCING:
                return
            self._deadline = None
            progress = await self._backend.get_progress(
                group_id=self.group_id,
                player_id=self.player_id,
            )
            self._group_status = progress.group_status
            await self._route_from_progress(progress)

    def _enter_ranking(self) -> None:
        if self._state == SESSION_STATE_RANKING:
            return
        self._state = SESSION_STATE_RANKING
        self._deadline = None
        logger.info("player_session_ranking", group_id=self.group_id, player_id=self.player_id)
