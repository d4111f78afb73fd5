from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from topgamescore.db.repo.answers_repo import AnswersRepo
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.repo.host_accounts_repo import HostAccountsRepo
from topgamescore.db.repo.players_repo import PlayersRepo
from topgamescore.db.repo.questions_repo import QuestionsRepo

UTC = timezone.utc
T0 = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


@dataclass
class FakeStore:
    groups: dict[str, SimpleNamespace] = field(default_factory=dict)
    questions: dict[tuple[str, int], SimpleNamespace] = field(default_factory=dict)
    players: dict[tuple[str, str], SimpleNamespace] = field(default_factory=dict)
    answers: dict[tuple[str, str, int], SimpleNamespace] = field(default_factory=dict)
    accounts: dict[str, SimpleNamespace] = field(default_factory=dict)

    def add_group(
        self,
        group_id: str = "G1",
        *,
        host_id: str | None = "host-1",
        status: str = "draft",
        max_time_sec: int = 20,
        plan: str = "free",
        expires_at: datetime | None = None,
        round_started_at: datetime | None = None,
        questions: int = 0,
    ) -> SimpleNamespace:
        group = SimpleNamespace(
            id=group_id,
            host_id=host_id,
            title="Quiz",
            locale="en",
            status=status,
            current_question_index=-1 if status == "draft" else 0,
            round_started_at=round_started_at,
            max_time_sec=max_time_sec,
            plan=plan,
            expires_at=expires_at,
            question_count=0,
            created_at=T0,
            updated_at=T0,
        )
        self.groups[group_id] = group
        for index in range(questions):
            self.add_question(group_id, text=f"Q{index}", options=["a", "b", "c", "d"], correct_index=0)
        return group

    def add_question(self, group_id: str, *, text: str, options: list[str], correct_index: int) -> SimpleNamespace:
        group = self.groups[group_id]
        question = SimpleNamespace(
            group_id=group_id,
            index=group.question_count,
            text=text,
            options=list(options),
            correct_index=correct_index,
        )
        self.questions[(group_id, question.index)] = question
        group.question_count += 1
        return question

    def add_player(
        self,
        group_id: str,
        player_id: str,
        *,
        name: str | None = None,
        total_score: int = 0,
    ) -> SimpleNamespace:
        player = SimpleNamespace(
            group_id=group_id,
            player_id=player_id,
            name=name or player_id,
            handle=f"@{player_id}",
            total_score=total_score,
            joined_at=T0,
            current_question_index=-1,
            question_started_at=None,
        )
        self.players[(group_id, player_id)] = player
        return player


def _install(monkeypatch: pytest.MonkeyPatch, store: FakeStore) -> None:
    async def groups_get_by_id(session, group_id):  # noqa: ANN001
        del session
        return store.groups.get(group_id)

    async def groups_create(session, *, group):  # noqa: ANN001
        del session
        store.groups[group.id] = group
        return group

    async def questions_get_by_index(session, *, group_id, index):  # noqa: ANN001
        del session
        return store.questions.get((group_id, index))

    async def questions_count(session, *, group_id):  # noqa: ANN001
        del session
        return sum(1 for key in store.questions if key[0] == group_id)

    async def questions_list(session, *, group_id):  # noqa: ANN001
        del session
        return [store.questions[key] for key in sorted(store.questions) if key[0] == group_id]

    async def questions_create(session, *, question):  # noqa: ANN001
        del session
        store.questions[(question.group_id, question.index)] = question
        return question

    async def questions_delete_and_reindex(session, *, group_id, index):  # noqa: ANN001
        del session
        if (group_id, index) not in store.questions:
            return False
        del store.questions[(group_id, index)]
        later = sorted(key[1] for key in store.questions if key[0] == group_id and key[1] > index)
        for old_index in later:
            question = store.questions.pop((group_id, old_index))
            question.index = old_index - 1
            store.questions[(group_id, old_index - 1)] = question
        return True

    async def players_get(session, *, group_id, player_id):  # noqa: ANN001
        del session
        return store.players.get((group_id, player_id))

    async def players_create_once(session, *, group_id, player_id, name, handle, joined_at):  # noqa: ANN001
        del session
        if (group_id, player_id) in store.players:
            return False
        player = store.add_player(group_id, player_id, name=name)
        player.handle = handle
        player.joined_at = joined_at
        return True

    async def players_update_display(session, *, group_id, player_id, name, handle):  # noqa: ANN001
        del session
        player = store.players.get((group_id, player_id))
        if player is None:
            return 0
        player.name = name
        player.handle = handle
        return 1

    async def players_increment(session, *, group_id, player_id, delta):  # noqa: ANN001
        del session
        player = store.players.get((group_id, player_id))
        if player is None:
            return None
        player.total_score += delta
        return player.total_score

    async def players_raise_to(session, *, group_id, player_id, total_score):  # noqa: ANN001
        del session
        player = store.players.get((group_id, player_id))
        if player is None or player.total_score >= total_score:
            return 0
        player.total_score = total_score
        return 1

    async def players_set_current(session, *, group_id, player_id, q_index, started_at):  # noqa: ANN001
        del session
        player = store.players[(group_id, player_id)]
        player.current_question_index = q_index
        player.question_started_at = started_at

    async def players_list(session, *, group_id):  # noqa: ANN001
        del session
        items = [item for key, item in store.players.items() if key[0] == group_id]
        return sorted(items, key=lambda item: (-item.total_score, item.name, item.player_id))

    async def answers_get(session, *, group_id, player_id, q_index):  # noqa: ANN001
        del session
        return store.answers.get((group_id, player_id, q_index))

    async def answers_create_once(session, **kwargs):  # noqa: ANN001
        del session
        key = (kwargs["group_id"], kwargs["player_id"], kwargs["q_index"])
        if key in store.answers:
            return False
        store.answers[key] = SimpleNamespace(**kwargs)
        return True

    async def answers_list_indexes(session, *, group_id, player_id):  # noqa: ANN001
        del session
        return sorted(key[2] for key in store.answers if key[0] == group_id and key[1] == player_id)

    async def answers_sum(session, *, group_id):  # noqa: ANN001
        del session
        totals: dict[str, int] = {}
        for key, answer in store.answers.items():
            if key[0] == group_id:
                totals[key[1]] = totals.get(key[1], 0) + answer.score_awarded
        return totals

    async def accounts_get(session, account_id):  # noqa: ANN001
        del session
        return store.accounts.get(account_id)

    monkeypatch.setattr(GroupsRepo, "get_by_id", groups_get_by_id)
    monkeypatch.setattr(GroupsRepo, "get_by_id_for_update", groups_get_by_id)
    monkeypatch.setattr(GroupsRepo, "create", groups_create)
    monkeypatch.setattr(QuestionsRepo, "get_by_index", questions_get_by_index)
    monkeypatch.setattr(QuestionsRepo, "count_for_group", questions_count)
    monkeypatch.setattr(QuestionsRepo, "list_for_group", questions_list)
    monkeypatch.setattr(QuestionsRepo, "create", questions_create)
    monkeypatch.setattr(QuestionsRepo, "delete_and_reindex", questions_delete_and_reindex)
    monkeypatch.setattr(PlayersRepo, "get", players_get)
    monkeypatch.setattr(PlayersRepo, "get_for_update", players_get)
    monkeypatch.setattr(PlayersRepo, "create_once", players_create_once)
    monkeypatch.setattr(PlayersRepo, "update_display", players_update_display)
    monkeypatch.setattr(PlayersRepo, "increment_total_score", players_increment)
    monkeypatch.setattr(PlayersRepo, "raise_total_score_to", players_raise_to)
    monkeypatch.setattr(PlayersRepo, "set_current_question", players_set_current)
    monkeypatch.setattr(PlayersRepo, "list_for_group", players_list)
    monkeypatch.setattr(AnswersRepo, "get", answers_get)
    monkeypatch.setattr(AnswersRepo, "create_once", answers_create_once)
    monkeypatch.setattr(AnswersRepo, "list_answered_indexes", answers_list_indexes)
    monkeypatch.setattr(AnswersRepo, "sum_scores_by_player", answers_sum)
    monkeypatch.setattr(HostAccountsRepo, "get_by_id", accounts_get)


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> FakeStore:
    fake_store = FakeStore()
    _install(monkeypatch, fake_store)
    return fake_store
