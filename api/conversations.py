"""
api/conversations.py
Conversation and message endpoints under /api/conversations.

Posting a user message runs the whole chat pipeline:
  classify → dispatch (deterministic tool or generative fallback) → store reply
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from api.models import ConversationCreate, MessageCreate
from api.services import Services, get_services
from monitoring import get_logger
from query_processor.models import Query, Turn

router = APIRouter()
log = get_logger(__name__)


@router.get("", summary="List conversations, most recently updated first")
async def list_conversations(services: Services = Depends(get_services)) -> list[dict]:
    return [c.to_dict() for c in services.conversations.list_conversations()]


@router.post("", summary="Start a conversation")
async def create_conversation(request: ConversationCreate, services: Services = Depends(get_services)) -> dict:
    return services.conversations.create_conversation(request.title).to_dict()


@router.get("/{conversation_id}", summary="Get a conversation")
async def get_conversation(conversation_id: str, services: Services = Depends(get_services)) -> dict:
    conversation = services.conversations.get_conversation(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation.to_dict()


@router.delete("/{conversation_id}", summary="Delete a conversation and its messages")
async def delete_conversation(conversation_id: str, services: Services = Depends(get_services)) -> dict:
    if not services.conversations.delete_conversation(conversation_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {"success": True}


@router.get("/{conversation_id}/messages", summary="Messages in a conversation, oldest first")
async def list_messages(conversation_id: str, services: Services = Depends(get_services)) -> list[dict]:
    return [m.to_dict() for m in services.conversations.get_messages_by_conversation(conversation_id)]


@router.post("/{conversation_id}/messages", summary="Send a message and get the assistant reply")
async def create_message(
    conversation_id: str,
    request: MessageCreate,
    services: Services = Depends(get_services),
) -> dict:
    store = services.conversations
    if store.get_conversation(conversation_id) is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    history = tuple(
        Turn(role=m.role, content=m.content)
        for m in store.get_messages_by_conversation(conversation_id)
    )
    try:
        user_message = store.create_message(conversation_id, request.role, request.content)
    except KeyError:
        raise HTTPException(status_code=404, detail="Conversation not found")

    query = Query(raw_text=request.content, conversation_context=history)
    # Classification and generation may call the provider; both run in the thread pool
    classification = await run_in_threadpool(services.classifier.classify, query.raw_text)
    reply = await run_in_threadpool(services.dispatcher.respond, query, classification)

    try:
        ai_message = store.create_message(
            conversation_id,
            "assistant",
            reply,
            metadata={"classification": classification.to_dict()},
        )
    except KeyError:
        log.info("Conversation deleted before the reply was stored", conversation_id=conversation_id)
        raise HTTPException(status_code=404, detail="Conversation not found")
    log.info(
        "Chat message answered",
        conversation_id=conversation_id,
        category=classification.category.value,
    )
    return {"userMessage": user_message.to_dict(), "aiMessage": ai_message.to_dict()}
