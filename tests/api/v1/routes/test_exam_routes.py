from __future__ import annotations

import pytest
from sqlalchemy import func, select

from estrategia_enem.models.exam_result import ExamResult
from estrategia_enem.models.question import Question

pytestmark = pytest.mark.anyio

EXAMS_URL = "/api/v1/exams"


async def _answer_key(db_session) -> dict:
    rows = (await db_session.execute(select(Question))).scalars().all()
    return {str(row.id): row.correct_option for row in rows}


def _wrong(option: str) -> str:
    return "B" if option == "A" else "A"


async def _start(client, user, subject=None):
    payload = {"userId": str(user.id)}
    if subject is not None:
        payload["subject"] = subject
    response = await client.post(f"{EXAMS_URL}/start", json=payload)
    assert response.status_code == 200, response.text
    return response.json()


async def _answer(client, state, question_id, option):
    response = await client.post(
        f"{EXAMS_URL}/answer",
        json={"session": state, "questionId": question_id, "option": option},
    )
    assert response.status_code == 200, response.text
    return response.json()


async def test_full_exam_with_seven_correct(client, db_session, free_user, question_factory):
    await question_factory(count=10)
    key = await _answer_key(db_session)

    state = await _start(client, free_user)
    assert len(state["questionIds"]) == 10
    assert state["status"] == "in_progress"
    assert all("correctOption" not in q for q in state["questions"])

    for position in range(10):
        question_id = state["questionIds"][state["cursor"]]
        option = key[question_id] if position < 7 else _wrong(key[question_id])
        state = await _answer(client, state, question_id, option)
        response = await client.post(f"{EXAMS_URL}/advance", json={"session": state})
        assert response.status_code == 200, response.text
        state = response.json()

    assert state["status"] == "completed"
    assert state["result"]["questionCount"] == 10
    assert state["result"]["correctCount"] == 7
    assert state["result"]["percentCorrect"] == 70
    assert state["resultId"]

    saved = (await db_session.execute(select(ExamResult))).scalar_one()
    assert str(saved.id) == state["resultId"]
    assert saved.type == "geral"
    assert saved.percent_correct == 70


async def test_advance_without_answer_is_refused(client, free_user, question_factory):
    await question_factory(count=3)
    state = await _start(client, free_user)

    response = await client.post(f"{EXAMS_URL}/advance", json={"session": state})

    assert response.status_code == 400
    assert response.json()["error"] == "Selecione uma alternativa antes de avançar"


async def test_subject_without_questions_is_refused(client, free_user, question_factory):
    await question_factory(count=3, subject="matematica")

    response = await client.post(f"{EXAMS_URL}/start", json={"userId": str(free_user.id), "subject": "artes"})

    assert response.status_code == 400
    assert response.json()["error"] == "Não há questões disponíveis para esta matéria."


async def test_abandon_persists_partial_summary(client, db_session, free_user, question_factory):
    await question_factory(count=4, subject="fisica")
    key = await _answer_key(db_session)
    state = await _start(client, free_user, subject="fisica")
    first = state["questionIds"][0]
    state = await _answer(client, state, first, key[first])

    response = await client.post(f"{EXAMS_URL}/abandon", json={"session": state})

    assert response.status_code == 200
    state = response.json()
    assert state["status"] == "abandoned"
    assert state["result"]["correctCount"] == 1
    assert state["result"]["percentCorrect"] == 25
    saved = (await db_session.execute(select(ExamResult))).scalar_one()
    assert saved.type == "materia"
    assert saved.subject == "fisica"


async def test_finished_session_cannot_be_resumed(client, free_user, question_factory):
    await question_factory(count=2)
    state = await _start(client, free_user)
    finished = (await client.post(f"{EXAMS_URL}/abandon", json={"session": state})).json()

    response = await client.post(f"{EXAMS_URL}/abandon", json={"session": finished})

    assert response.status_code == 400
    assert "encerrado" in response.json()["error"]


async def test_answer_for_foreign_question_is_refused(client, free_user, question_factory):
    await question_factory(count=2)
    state = await _start(client, free_user)

    response = await client.post(
        f"{EXAMS_URL}/answer",
        json={"session": state, "questionId": "00000000-0000-0000-0000-000000000999", "option": "A"},
    )

    assert response.status_code == 400


async def test_history_lists_results(client, free_user, question_factory):
    await question_factory(count=2)
    state = await _start(client, free_user)
    await client.post(f"{EXAMS_URL}/abandon", json={"session": state})

    response = await client.get(f"{EXAMS_URL}/history", params={"userId": str(free_user.id)})

    assert response.status_code == 200
    [item] = response.json()
    assert item["questionCount"] == 2
    assert item["correctCount"] == 0


async def test_replaying_last_advance_does_not_store_a_second_result(client, db_session, free_user, question_factory):
    await question_factory(count=2)
    key = await _answer_key(db_session)
    state = await _start(client, free_user)
    for question_id in state["questionIds"]:
        state = await _answer(client, state, question_id, key[question_id])
    state = (await client.post(f"{EXAMS_URL}/advance", json={"session": state})).json()
    before_last = state

    finished = await client.post(f"{EXAMS_URL}/advance", json={"session": before_last})
    assert finished.json()["status"] == "completed"

    for path in ("advance", "abandon"):
        replay = await client.post(f"{EXAMS_URL}/{path}", json={"session": before_last})
        assert replay.status_code == 400
        assert "encerrado" in replay.json()["error"]

    count = await db_session.scalar(select(func.count(ExamResult.id)))
    assert count == 1
