from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Query

from servicehub.auth import assert_actor_authorized
from servicehub.models import ChatMessage, ChatSendRequest, ChatThread, Conversation, PublicUser
from servicehub.services.chat_store import chat_store
from servicehub.services.marketplace_store import marketplace_store

router = APIRouter(prefix="/chat", tags=["chat"])


def _counterpart(user_id: str, counterpart_id: str) -> PublicUser:
    if marketplace_store.get_user(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    if counterpart_id not in marketplace_store.counterpart_ids(user_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    counterpart = marketplace_store.public_user(marketplace_store.get_user(counterpart_id))
    if counterpart is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return counterpart


@router.get("/conversations", response_model=list[Conversation])
def list_conversations(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    authorization: Optional[str] = Header(default=None),
):
    assert_actor_authorized(actor_user_id=user_id, authorization=authorization)
    if marketplace_store.get_user(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    term = (q or "").strip().lower()
    conversations: list[Conversation] = []
    for counterpart_id in marketplace_store.counterpart_ids(user_id):
        counterpart = marketplace_store.public_user(marketplace_store.get_user(counterpart_id))
        if counterpart is None:
            continue
        if term and term not in counterpart.full_name.lower():
            continue
        conversations.append(
            Conversation(
                counterpart=counterpart,
                last_message=chat_store.last_message(user_id, counterpart_id),
                unread_count=chat_store.unread_count(user_id, counterpart_id),
            )
        )
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    conversations.sort(key=lambda c: c.last_message.created_at if c.last_message else epoch, reverse=True)
    return conversations


@router.get("/conversations/{counterpart_id}", response_model=ChatThread)
def open_conversation(
    counterpart_id: str,
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    assert_actor_authorized(actor_user_id=user_id, authorization=authorization)
    counterpart = _counterpart(user_id, counterpart_id)
    chat_store.mark_thread_read(user_id, counterpart_id)
    return ChatThread(counterpart=counterpart, messages=chat_store.thread(user_id, counterpart_id))


@router.post("/conversations/{counterpart_id}/messages", response_model=ChatMessage)
def send_message(
    counterpart_id: str,
    payload: ChatSendRequest,
    authorization: Optional[str] = Header(default=None),
):
    assert_actor_authorized(actor_user_id=payload.user_id, authorization=authorization)
    _counterpart(payload.user_id, counterpart_id)
    try:
        return chat_store.send(payload.user_id, counterpart_id, payload.message)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
