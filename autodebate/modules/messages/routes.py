from fastapi import APIRouter, Depends
from autodebate.database.supabase_client import get_supabase
from autodebate.modules.messages.schemas import (
    ConversationCreate, ConversationResponse, MessageCreate, MessageResponse, MarkReadResponse
)
from autodebate.modules.messages.service import MessageService
from autodebate.core.dependencies import get_viewer
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/messages", tags=["messages"])


def get_message_service(supabase: Client = Depends(get_supabase)) -> MessageService:
    return MessageService(supabase)


@router.get("/conversations", response_model=List[ConversationResponse])
async def list_conversations(
    viewer: Dict = Depends(get_viewer),
    service: MessageService = Depends(get_message_service)
):
    """The caller's conversations, most recent activity first"""
    return service.list_conversations(viewer["id"])


@router.post("/conversations", response_model=ConversationResponse)
async def open_conversation(
    conversation: ConversationCreate,
    viewer: Dict = Depends(get_viewer),
    service: MessageService = Depends(get_message_service)
):
    """Find or create the conversation with another user"""
    return service.get_or_create_conversation(viewer["id"], conversation.user_id)


@router.get("/conversations/{conversation_id}", response_model=List[MessageResponse])
async def list_messages(
    conversation_id: str,
    since: Optional[str] = None,
    limit: int = 100,
    viewer: Dict = Depends(get_viewer),
    service: MessageService = Depends(get_message_service)
):
    service.get_conversation_for(conversation_id, viewer["id"])
    return service.list_messages(conversation_id, since=since, limit=limit)


@router.post("/conversations/{conversation_id}", response_model=MessageResponse, status_code=201)
async def send_message(
    conversation_id: str,
    message: MessageCreate,
    viewer: Dict = Depends(get_viewer),
    service: MessageService = Depends(get_message_service)
):
    service.get_conversation_for(conversation_id, viewer["id"])
    return service.send_message(conversation_id, message, viewer["id"])


@router.post("/conversations/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_read(
    conversation_id: str,
    viewer: Dict = Depends(get_viewer),
    service: MessageService = Depends(get_message_service)
):
    service.get_conversation_for(conversation_id, viewer["id"])
    return service.mark_read(conversation_id, viewer["id"])
