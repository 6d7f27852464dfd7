from __future__ import annotations

import random
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from estrategia_enem.core.exceptions import NoQuestionsError, SessionStateError, ValidationError
from estrategia_enem.models.exam_result import ExamResult
from estrategia_enem.services import exam_session
from estrategia_enem.services.exam_service import (
    load_question_batch,
    normalize_subject,
    record_exam_result,
    restore_session,
    start_exam,
)
from estrategia_enem.utils.enums import ExamStatus

pytestmark = pytest.mark.anyio

NOW = datetime(2026, 5, 2, 9, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "raw, expected",
    [(None, None), ("", None), ("  ", None), ("todas", None), ("Todas", None), (" fisica ", "fisica")],
)
def test_normalize_subject(raw, expected):
    assert normalize_subject(raw) == expected


async def test_batch_is_limited_and_filtered(db_session, question_factory):
    await question_factory(count=12, subject="matematica")
    await question_factory(count=3, subject="historia")

    assert len(await load_question_batch(db_session)) == 10
    history = await load_question_batch(db_session, "historia")
    assert len(history) == 3
    assert {q.subject for q in history} == {"historia"}
    assert len(await load_question_batch(db_session, "todas")) == 10


async def test_start_exam_opens_session_for_subject(db_session, free_user, question_factory):
    await question_factory(count=4, subject="quimica")

    session = await start_exam(db_session, free_user.id, "quimica", rng=random.Random(3), now=NOW)

    assert len(session.questions) == 4
    assert session.subject == "quimica"
    assert session.started_at == NOW


async def test_start_exam_without_questions(db_session, free_user):
    with pytest.raises(NoQuestionsError):
        await start_exam(db_session, free_user.id, "filosofia")


async def test_start_exam_for_unknown_user(db_session, question_factory):
    await question_factory(count=2)

    with pytest.raises(ValidationError, match="Usuário não encontrado"):
        await start_exam(db_session, uuid.uuid4())


async def test_restore_rebuilds_answer_key_from_datastore(db_session, free_user, question_factory):
    await question_factory(count=5)
    session = await start_exam(db_session, free_user.id, now=NOW)
    first = session.questions[0]
    session = exam_session.select_answer(session, first.id, first.correct_option)

    restored = await restore_session(
        db_session,
        session_id=session.session_id,
        user_id=session.user_id,
        subject=session.subject,
        question_ids=[q.id for q in session.questions],
        answers=session.answers,
        cursor=session.cursor,
        status=session.status,
        started_at=session.started_at,
    )

    assert restored == session


async def _restore(db_session, session, **overrides):
    state = dict(
        session_id=session.session_id,
        user_id=session.user_id,
        subject=session.subject,
        question_ids=[q.id for q in session.questions],
        answers=dict(session.answers),
        cursor=session.cursor,
        status=session.status,
        started_at=session.started_at,
    )
    state.update(overrides)
    return await restore_session(db_session, **state)


async def test_restore_rejects_tampered_state(db_session, free_user, question_factory):
    await question_factory(count=3)
    session = await start_exam(db_session, free_user.id, now=NOW)
    ids = [q.id for q in session.questions]

    with pytest.raises(ValidationError):
        await _restore(db_session, session, question_ids=ids + [uuid.uuid4()])
    with pytest.raises(ValidationError):
        await _restore(db_session, session, question_ids=ids + ids[:1])
    with pytest.raises(ValidationError):
        await _restore(db_session, session, question_ids=[])
    with pytest.raises(ValidationError):
        await _restore(db_session, session, cursor=3)
    with pytest.raises(ValidationError):
        await _restore(db_session, session, answers={uuid.uuid4(): "A"})
    with pytest.raises(SessionStateError):
        await _restore(db_session, session, status=ExamStatus.completed)


async def test_record_exam_result_saves_summary(db_session, free_user, question_factory):
    await question_factory(count=2, subject="biologia")
    session = await start_exam(db_session, free_user.id, "biologia", now=NOW)
    finished = exam_session.abandon(session, now=NOW)

    result_id = await record_exam_result(db_session, finished)

    saved = (await db_session.execute(select(ExamResult))).scalar_one()
    assert saved.id == result_id
    assert saved.type == "materia"
    assert saved.subject == "biologia"
    assert saved.question_count == 2
    assert saved.correct_count == 0


async def test_record_exam_result_requires_finished_session(db_session, free_user, question_factory):
    await question_factory(count=2)
    session = await start_exam(db_session, free_user.id, now=NOW)

    with pytest.raises(SessionStateError):
        await record_exam_result(db_session, session)


async def test_finished_session_is_recorded_once(db_session, free_user, question_factory):
    await question_factory(count=2)
    session = await start_exam(db_session, free_user.id, now=NOW)
    await record_exam_result(db_session, exam_session.abandon(session, now=NOW))

    with pytest.raises(SessionStateError):
        await record_exam_result(db_session, exam_session.abandon(session, now=NOW))
    # the in-progress state handed out earlier cannot be resumed either
    with pytest.raises(SessionStateError):
        await _restore(db_session, session)

    saved = (await db_session.execute(select(ExamResult))).scalars().all()
    assert [row.session_id for row in saved] == [session.session_id]
