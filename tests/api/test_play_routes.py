from __future__ import annotations

from datetime import datetime, timezone

from topgamescore.api.routes import play as play_routes
from topgamescore.game.errors import (
    GroupNotOpenError,
    GroupNotOpenForJoinError,
    InvalidAnswerOptionError,
    PlayerValidationError,
    StorageFailureError,
    ValidationError,
)
from topgamescore.game.groups.types import QuestionView
from topgamescore.game.leaderboard.types import LeaderboardEntry
from topgamescore.game.players.types import JoinResult, PlayerProgress, PlayerSnapshot, QuestionRound
from topgamescore.game.scoring.types import SubmitAnswerResult

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _player() -> PlayerSnapshot:
    return PlayerSnapshot(
        group_id="G1",
        player_id="p1",
        name="Pat",
        handle="@pat",
        total_score=0,
        joined_at=NOW,
        current_question_index=-1,
    )


def _answer(*, duplicate: bool = False) -> SubmitAnswerResult:
    return SubmitAnswerResult(
        group_id="G1",
        player_id="p1",
        q_index=0,
        chosen_index=1,
        correct=True,
        score_awarded=950,
        elapsed_ms=2000,
        duplicate=duplicate,
        total_score=950,
    )


def test_play_routes_require_principal(client) -> None:
    assert client.post("/groups/G1/join", json={"name": "Pat", "handle": "@pat"}).status_code == 403
    assert client.get("/groups/G1/progress").status_code == 403
    assert client.post("/groups/G1/questions/0/begin").status_code == 403

    response = client.post("/groups/G1/answers", json={"q_index": 0, "chosen_index": 1}, headers={"X-Principal-Id": " "})
    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_FORBIDDEN"}}


def test_join_announces_new_player(monkeypatch, client, notifications) -> None:
    async def _join_group(session, **kwargs):  # noqa: ANN001
        del session
        assert kwargs["player_id"] == "p1"
        assert kwargs["now_utc"] == NOW
        return JoinResult(player=_player(), group_status="draft", created=True)

    monkeypatch.setattr(play_routes, "join_group", _join_group)

    response = client.post(
        "/groups/G1/join",
        json={"name": "Pat", "handle": "@pat"},
        headers={"X-Principal-Id": "p1"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["created"] is True
    assert body["player"]["handle"] == "@pat"
    assert notifications == [
        {"group_id": "G1", "event_type": "player_joined", "status": None, "payload": {"player_id": "p1"}},
    ]


def test_rejoin_is_not_announced(monkeypatch, client, notifications) -> None:
    async def _join_group(session, **kwargs):  # noqa: ANN001
        del session, kwargs
        return JoinResult(player=_player(), group_status="open", created=False)

    monkeypatch.setattr(play_routes, "join_group", _join_group)

    response = client.post(
        "/groups/G1/join",
        json={"name": "Pat", "handle": "@pat"},
        headers={"X-Principal-Id": "p1"},
    )

    assert response.status_code == 200
    assert notifications == []


def test_join_maps_validation_and_closed_group(monkeypatch, client) -> None:
    errors = [PlayerValidationError("handle_prefix"), GroupNotOpenForJoinError()]

    async def _join_group(session, **kwargs):  # noqa: ANN001
        del session, kwargs
        raise errors.pop(0)

    monkeypatch.setattr(play_routes, "join_group", _join_group)
    headers = {"X-Principal-Id": "p1"}

    invalid = client.post("/groups/G1/join", json={"name": "Pat", "handle": "pat"}, headers=headers)
    closed = client.post("/groups/G1/join", json={"name": "Pat", "handle": "@pat"}, headers=headers)

    assert invalid.status_code == 422
    assert invalid.json() == {"detail": {"code": "E_PLAYER_INVALID", "reason": "handle_prefix"}}
    assert closed.status_code == 409
    assert closed.json() == {"detail": {"code": "E_GROUP_NOT_OPEN_FOR_JOIN"}}


def test_progress_reports_next_question(monkeypatch, client) -> None:
    async def _progress(session, *, group_id, player_id):  # noqa: ANN001
        del session
        return PlayerProgress(
            group_id=group_id,
            player_id=player_id,
            group_status="open",
            question_count=3,
            answered_indexes=(0,),
            next_question_index=1,
            total_score=950,
        )

    monkeypatch.setattr(play_routes, "get_player_progress", _progress)

    response = client.get("/groups/G1/progress", headers={"X-Principal-Id": "p1"})

    assert response.status_code == 200
    assert response.json() == {
        "group_status": "open",
        "question_count": 3,
        "answered_indexes": [0],
        "next_question_index": 1,
        "completed": False,
        "total_score": 950,
    }


def test_begin_question_hides_correct_option(monkeypatch, client) -> None:
    async def _begin(session, *, group_id, player_id, q_index, now_utc):  # noqa: ANN001
        del session, player_id, now_utc
        return QuestionRound(
            question=QuestionView(group_id=group_id, index=q_index, text="2+2?", options=("3", "4")),
            max_time_sec=20,
            started_at=NOW,
            elapsed_ms=0,
            already_answered=False,
        )

    monkeypatch.setattr(play_routes, "begin_question", _begin)

    response = client.post("/groups/G1/questions/1/begin", headers={"X-Principal-Id": "p1"})

    assert response.status_code == 200
    body = response.json()
    assert body["question"]["index"] == 1
    assert body["question"]["correct_index"] is None
    assert body["max_time_sec"] == 20


def test_submit_answer_notifies_once(monkeypatch, client, notifications) -> None:
    results = [_answer(), _answer(duplicate=True)]

    async def _submit(session, **kwargs):  # noqa: ANN001
        del session
        assert kwargs["chosen_index"] == 1
        return results.pop(0)

    monkeypatch.setattr(play_routes, "submit_answer", _submit)
    headers = {"X-Principal-Id": "p1"}

    first = client.post("/groups/G1/answers", json={"q_index": 0, "chosen_index": 1}, headers=headers)
    second = client.post("/groups/G1/answers", json={"q_index": 0, "chosen_index": 1}, headers=headers)

    assert first.json()["score_awarded"] == 950
    assert first.json()["duplicate"] is False
    assert second.json()["duplicate"] is True
    assert [item["event_type"] for item in notifications] == ["answer_recorded"]


def test_submit_answer_timeout_omits_choice(monkeypatch, client) -> None:
    captured: dict[str, object] = {}

    async def _submit(session, **kwargs):  # noqa: ANN001
        del session
        captured.update(kwargs)
        return SubmitAnswerResult(
            group_id="G1",
            player_id="p1",
            q_index=0,
            chosen_index=None,
            correct=False,
            score_awarded=0,
            elapsed_ms=None,
            duplicate=False,
            total_score=0,
        )

    monkeypatch.setattr(play_routes, "submit_answer", _submit)

    response = client.post("/groups/G1/answers", json={"q_index": 0}, headers={"X-Principal-Id": "p1"})

    assert response.status_code == 200
    assert captured["chosen_index"] is None
    assert response.json()["elapsed_ms"] is None


def test_submit_answer_rejects_negative_indexes(client) -> None:
    headers = {"X-Principal-Id": "p1"}
    assert client.post("/groups/G1/answers", json={"q_index": -1}, headers=headers).status_code == 422
    assert (
        client.post("/groups/G1/answers", json={"q_index": 0, "chosen_index": -1}, headers=headers).status_code
        == 422
    )


def test_submit_answer_maps_domain_errors(monkeypatch, client, notifications) -> None:
    errors = [GroupNotOpenError(), InvalidAnswerOptionError(), StorageFailureError()]

    async def _submit(session, **kwargs):  # noqa: ANN001
        del session, kwargs
        raise errors.pop(0)

    monkeypatch.setattr(play_routes, "submit_answer", _submit)
    headers = {"X-Principal-Id": "p1"}

    responses = [
        client.post("/groups/G1/answers", json={"q_index": 0, "chosen_index": 9}, headers=headers)
        for _ in range(3)
    ]

    assert [(item.status_code, item.json()["detail"]["code"]) for item in responses] == [
        (409, "E_GROUP_NOT_OPEN"),
        (422, "E_ANSWER_OPTION_INVALID"),
        (503, "E_STORAGE_UNAVAILABLE"),
    ]
    assert notifications == []


def test_leaderboard_passes_source(monkeypatch, client) -> None:
    async def _leaderboard(session, *, group_id, source):  # noqa: ANN001
        del session, group_id
        if source not in {"players", "answers"}:
            raise ValidationError("unknown leaderboard source")
        return [
            LeaderboardEntry(rank=1, player_id="p2", name="Ana", handle="@ana", total_score=1000),
            LeaderboardEntry(rank=2, player_id="p1", name="Pat", handle="@pat", total_score=950),
        ]

    monkeypatch.setattr(play_routes, "get_leaderboard", _leaderboard)

    response = client.get("/groups/G1/leaderboard", params={"source": "answers"})
    bad = client.get("/groups/G1/leaderboard", params={"source": "cache"})

    assert response.status_code == 200
    assert response.json()["source"] == "answers"
    assert [item["player_id"] for item in response.json()["items"]] == ["p2", "p1"]
    assert bad.status_code == 422
    assert bad.json() == {"detail": {"code": "E_VALIDATION"}}
