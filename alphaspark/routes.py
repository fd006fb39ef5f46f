"""
JSON API routes.

Every endpoint answers HTTP 200; the ``success`` flag in the body carries the
outcome, with a ``message`` (and ``error`` for exceptions) on failure.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from alphaspark.auth import end_session, require_user, start_session
from alphaspark.db import DocumentStore
from alphaspark.dependencies import get_document_store
from alphaspark.firebase_constants import (
    GROUPS_COLLECTION,
    QUESTIONS_COLLECTION,
    RESPONSES_COLLECTION,
    TEST_COLLECTION,
    USERS_COLLECTION,
)
from alphaspark.schemas import LoginRequest, SessionUser
from alphaspark.shaping import group_comments, select_question, sort_responses

logger = logging.getLogger(__name__)

router = APIRouter()

DEBUG_SAMPLE_SIZE = 3


def _failure(message: str, exc: Exception | None = None) -> dict:
    payload = {"success": False, "message": message}
    if exc is not None:
        payload["error"] = str(exc)
    return payload


async def _read_login_request(request: Request) -> LoginRequest:
    try:
        body = await request.json()
    except ValueError:
        return LoginRequest()
    if not isinstance(body, dict):
        return LoginRequest()
    try:
        return LoginRequest.model_validate(body)
    except ValidationError:
        return LoginRequest()


@router.post("/login")
async def login(request: Request, store: DocumentStore = Depends(get_document_store)):
    payload = await _read_login_request(request)
    user_id = payload.userId
    if not user_id:
        return _failure("User ID is required")

    try:
        user = await run_in_threadpool(store.get_user, user_id)
        if user is None:
            return _failure("User not found")
        if user.is_active is not True:
            return _failure("User account is not active")

        await run_in_threadpool(store.mark_user_login, user_id)
        session_user = SessionUser.model_validate(user.session_payload())
    except Exception as exc:
        logger.exception("Login error for %s", user_id)
        return _failure("An error occurred during login", exc)

    start_session(request, session_user)
    logger.info("User %s logged in (group %s)", user_id, session_user.groupId)
    return {
        "success": True,
        "message": "Login successful",
        "user": session_user.model_dump(mode="json"),
    }


@router.get("/user")
def current_user(user: SessionUser = Depends(require_user)):
    return {"success": True, "user": user.model_dump(mode="json")}


@router.post("/logout")
def logout(request: Request):
    try:
        end_session(request)
    except Exception as exc:
        logger.exception("Logout error")
        return _failure("Logout failed", exc)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/question", dependencies=[Depends(require_user)])
def get_question(
    store: DocumentStore = Depends(get_document_store),
):
    """Serve a random active question, or any question if none are active."""
    try:
        questions = store.list_questions()
        logger.info("Found %d questions", len(questions))

        selected = select_question(questions)
        if selected is None:
            logger.warning(
                "No questions found - please run: python scripts/upload_test_data.py"
            )
            return _failure(
                "No questions available. Please run: python scripts/upload_test_data.py"
            )

        logger.info(
            "Selected %s question: %s",
            "active" if selected.is_active is True else "random",
            selected.id,
        )
        return {"success": True, "question": selected.to_dict()}
    except Exception as exc:
        logger.exception("Error fetching question")
        return _failure("Error fetching question", exc)


@router.get("/responses/{question_id}")
def get_responses(
    question_id: str,
    user: SessionUser = Depends(require_user),
    store: DocumentStore = Depends(get_document_store),
):
    """Responses to a question from the caller's group, newest first."""
    try:
        logger.info(
            "Fetching responses for question: %s, group: %s", question_id, user.groupId
        )
        responses = store.list_responses(question_id, user.groupId)
        logger.info("Found %d responses", len(responses))
        return {
            "success": True,
            "responses": [r.to_dict() for r in sort_responses(responses)],
        }
    except Exception as exc:
        logger.exception("Error fetching responses")
        return _failure("Error fetching responses", exc)


@router.get("/comments/{question_id}")
def get_comments(
    question_id: str,
    user: SessionUser = Depends(require_user),
    store: DocumentStore = Depends(get_document_store),
):
    """Comments on a question's responses from the caller's group, keyed by response id."""
    try:
        logger.info(
            "Fetching comments for question: %s, group: %s", question_id, user.groupId
        )
        comments = store.list_comments(question_id, user.groupId)
        logger.info("Found %d comments", len(comments))
        grouped = group_comments(comments)
        return {
            "success": True,
            "comments": {
                response_id: [c.to_dict() for c in thread]
                for response_id, thread in grouped.items()
            },
        }
    except Exception as exc:
        logger.exception("Error fetching comments")
        return _failure("Error fetching comments", exc)


@router.get("/debug")
def debug(store: DocumentStore = Depends(get_document_store)):
    """Census of the collections the service reads."""
    try:
        users = store.list_documents(USERS_COLLECTION)
        groups = store.list_documents(GROUPS_COLLECTION)
        questions = store.list_documents(QUESTIONS_COLLECTION)
        responses = store.list_documents(RESPONSES_COLLECTION)
    except Exception as exc:
        logger.exception("Debug census failed")
        return {"success": False, "error": str(exc)}

    data = {
        USERS_COLLECTION: {
            "count": len(users),
            "ids": [doc_id for doc_id, _ in users],
        },
        GROUPS_COLLECTION: {
            "count": len(groups),
            "ids": [doc_id for doc_id, _ in groups],
        },
        QUESTIONS_COLLECTION: {
            "count": len(questions),
            "questions": [
                {
                    "id": doc_id,
                    "question": doc.get("question"),
                    "isActive": doc.get("isActive"),
                }
                for doc_id, doc in questions
            ],
        },
        RESPONSES_COLLECTION: {
            "count": len(responses),
            "sample": [
                {
                    "id": doc_id,
                    "questionId": doc.get("questionId"),
                    "groupId": doc.get("groupId"),
                }
                for doc_id, doc in responses[:DEBUG_SAMPLE_SIZE]
            ],
        },
    }
    return {"success": True, "message": "Firestore data check", "data": data}


@router.get("/test")
def connection_test(store: DocumentStore = Depends(get_document_store)):
    """Write then read back a fixed document to prove the store is reachable."""
    try:
        store.set_document(
            TEST_COLLECTION,
            "hello",
            {
                "message": "Hello from Firestore!",
                "timestamp": store.server_timestamp(),
                "createdAt": datetime.now(timezone.utc).isoformat(),
            },
        )
        data = store.get_document(TEST_COLLECTION, "hello")
    except Exception as exc:
        logger.exception("Firestore connection test failed")
        return {
            "success": False,
            "error": str(exc),
            "note": "Please check Firebase credentials and Firestore setup",
        }
    return {
        "success": True,
        "data": data,
        "message": "Firestore connection successful!",
    }
