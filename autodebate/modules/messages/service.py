from supabase import Client
from autodebate.core.realtime import channel_name
from autodebate.modules.messages.schemas import (
    ConversationResponse, MessageCreate, MessageResponse, MarkReadResponse
)
from autodebate.modules.profiles.service import fetch_display_info
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException


def other_participant(conversation: Dict[str, Any], user_id: str) -> str:
    if conversation["participant_1"] == user_id:
        return conversation["participant_2"]
    return conversation["participant_1"]


class MessageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _to_response(self, conversation: Dict[str, Any], user_id: str, others: Dict[str, Dict[str, Any]], **extra) -> ConversationResponse:
        return ConversationResponse(
            **conversation,
            other_user=others.get(other_participant(conversation, user_id)),
            channel=channel_name("conversation", conversation["id"]),
            **extra
        )

    def get_conversation_for(self, conversation_id: str, user_id: str) -> Dict[str, Any]:
        """Conversation row; 403 for anyone but its two participants"""
        result = self.supabase.table("conversations")\
            .select("*")\
            .eq("id", conversation_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Conversation not found")
        if user_id not in (result.data["participant_1"], result.data["participant_2"]):
            raise HTTPException(status_code=403, detail="You are not part of this conversation")
        return result.data

    def list_conversations(self, user_id: str) -> List[ConversationResponse]:
        try:
            conversations = self.supabase.table("conversations")\
                .select("*")\
                .or_(f"participant_1.eq.{user_id},participant_2.eq.{user_id}")\
                .order("last_message_at", desc=True)\
                .execute().data or []
            if not conversations:
                return []

            others = fetch_display_info(self.supabase, [other_participant(c, user_id) for c in conversations])
            messages = self.supabase.table("messages")\
                .select("conversation_id, sender_id, content, read_at, created_at")\
                .in_("conversation_id", [c["id"] for c in conversations])\
                .order("created_at", desc=True)\
                .execute().data or []

            last_message: Dict[str, str] = {}
            unread: Dict[str, int] = {}
            for message in messages:
                cid = message["conversation_id"]
                last_message.setdefault(cid, message["content"])
                if message["sender_id"] != user_id and not message.get("read_at"):
                    unread[cid] = unread.get(cid, 0) + 1

            return [
                self._to_response(
                    c, user_id, others,
                    last_message=last_message.get(c["id"]),
                    unread_count=unread.get(c["id"], 0)
                )
                for c in conversations
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_or_create_conversation(self, user_id: str, other_user_id: str) -> ConversationResponse:
        """The single conversation between two users, created on first contact"""
        if user_id == other_user_id:
            raise HTTPException(status_code=400, detail="Cannot start a conversation with yourself")
        try:
            other = self.supabase.table("profiles")\
                .select("id")\
                .eq("id", other_user_id)\
                .maybe_single()\
                .execute()
            if not other or not other.data:
                raise HTTPException(status_code=404, detail="User not found")

            existing = self.supabase.table("conversations")\
                .select("*")\
                .or_(
                    f"and(participant_1.eq.{user_id},participant_2.eq.{other_user_id}),"
                    f"and(participant_1.eq.{other_user_id},participant_2.eq.{user_id})"
                )\
                .execute()
            if existing.data:
                conversation = existing.data[0]
            else:
                result = self.supabase.table("conversations").insert({
                    "participant_1": user_id,
                    "participant_2": other_user_id,
                    "last_message_at": datetime.now(timezone.utc).isoformat()
                }).execute()
                if not result.data:
                    raise HTTPException(status_code=500, detail="Failed to create conversation")
                conversation = result.data[0]

            others = fetch_display_info(self.supabase, [other_user_id])
            return self._to_response(conversation, user_id, others)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_messages(self, conversation_id: str, since: Optional[str] = None, limit: int = 100) -> List[MessageResponse]:
        """Oldest first; with since, only newer rows (reconnect backfill)"""
        try:
            query = self.supabase.table("messages").select("*").eq("conversation_id", conversation_id)
            if since:
                query = query.gt("created_at", since)
            rows = query.order("created_at", desc=False).limit(limit).execute().data or []
            return [MessageResponse(**r) for r in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def send_message(self, conversation_id: str, message: MessageCreate, sender_id: str) -> MessageResponse:
        try:
            result = self.supabase.table("messages").insert({
                "conversation_id": conversation_id,
                "sender_id": sender_id,
                "content": message.content.strip(),
                "message_type": message.message_type
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to send message")

            self.supabase.table("conversations")\
                .update({"last_message_at": result.data[0].get("created_at") or datetime.now(timezone.utc).isoformat()})\
                .eq("id", conversation_id)\
                .execute()
            return MessageResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_read(self, conversation_id: str, user_id: str) -> MarkReadResponse:
        """Stamp read_at on the other participant's unread messages"""
        try:
            result = self.supabase.table("messages")\
                .update({"read_at": datetime.now(timezone.utc).isoformat()})\
                .eq("conversation_id", conversation_id)\
                .neq("sender_id", user_id)\
                .is_("read_at", "null")\
                .execute()
            return MarkReadResponse(conversation_id=conversation_id, marked=len(result.data or []))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
