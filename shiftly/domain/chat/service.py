"""Chat service - Business logic for rooms, encrypted messages and unread counts"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...chat_crypto import decrypt_message, encrypt_message, generate_chat_key
from ...exceptions import ChatCryptoError, QueueError
from ...message_queue import MessageQueue, enqueue_message
from ...models import Employee, Store
from ...models_chat import (
    ROOM_TYPE_GROUP,
    ROOM_TYPE_PRIVATE,
    ROOM_TYPE_STORE,
    ChatRoom,
    ChatRoomParticipant,
    ContentSafetyEvent,
)
from ...shared.photos import get_profile_photo_url
from .repository import ChatRepository

logger = logging.getLogger(__name__)

UNDECRYPTABLE_TEXT = "[🔒 Unable to decrypt]"


class ChatService:
    """Service layer for chat business logic"""

    def __init__(self, db: Session, queue: Optional[MessageQueue] = None):
        self.db = db
        self.queue = queue
        self.repo = ChatRepository()

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------

    def get_room(self, room_id: int) -> ChatRoom:
        room = self.repo.get_room(self.db, room_id)
        if not room:
            raise HTTPException(status_code=404, detail="Room not found")
        return room

    def require_participant(self, room_id: int, employee_id: int) -> ChatRoomParticipant:
        participant = self.repo.get_participant(self.db, room_id, employee_id)
        if not participant:
            raise HTTPException(status_code=403, detail="You are not a participant of this room")
        return participant

    def require_admin(self, room_id: int, employee_id: int) -> ChatRoomParticipant:
        participant = self.require_participant(room_id, employee_id)
        if not participant.is_admin:
            raise HTTPException(status_code=403, detail="Only group admins can do this")
        return participant

    def create_chat_room(
        self,
        participant_ids: list[int],
        room_type: str,
        name: Optional[str] = None,
        store_id: Optional[int] = None,
        creator_id: Optional[int] = None,
    ) -> ChatRoom:
        """
        Create a room with a fresh encryption key and its participants.
        A private room between the same two employees is reused.
        """
        members = list(dict.fromkeys(([creator_id] if creator_id else []) + list(participant_ids)))

        if room_type == ROOM_TYPE_PRIVATE:
            if len(members) != 2:
                raise HTTPException(
                    status_code=400, detail="A private chat needs exactly one other participant"
                )
            existing = self.repo.find_private_room(self.db, members[0], members[1])
            if existing:
                if creator_id:
                    participant = self.repo.get_participant(self.db, existing.id, creator_id)
                    if participant and participant.deleted_at:
                        participant.deleted_at = None
                        self.db.commit()
                logger.info(f"♻️ Reusing private room {existing.id} for {members}")
                return existing
        elif room_type == ROOM_TYPE_GROUP:
            if not name or not name.strip():
                raise HTTPException(status_code=400, detail="Group name is required")
            if not members:
                raise HTTPException(status_code=400, detail="A group needs at least one member")
        elif room_type == ROOM_TYPE_STORE:
            if not store_id:
                raise HTTPException(status_code=400, detail="Store rooms need a store_id")
        else:
            raise HTTPException(status_code=400, detail=f"Unknown room type: {room_type}")

        found = {e.employee_id for e in self.repo.get_employees(self.db, members)}
        missing = [m for m in members if m not in found]
        if missing:
            raise HTTPException(status_code=404, detail=f"Employees not found: {missing}")

        room = ChatRoom(
            type=room_type,
            name=name.strip() if name else None,
            store_id=store_id,
            encryption_key=generate_chat_key(),
            created_at=datetime.utcnow(),
        )
        self.db.add(room)
        self.db.flush()

        for employee_id in members:
            self.db.add(
                ChatRoomParticipant(
                    room_id=room.id,
                    employee_id=employee_id,
                    is_admin=room_type == ROOM_TYPE_GROUP and employee_id == creator_id,
                    joined_at=datetime.utcnow(),
                )
            )

        self.db.commit()
        self.db.refresh(room)
        logger.info(f"✅ Created {room_type} room {room.id} with {len(members)} participants")
        return room

    def ensure_store_room(self, employee: Employee) -> ChatRoom:
        """Find or create the employee's store room and make sure they are in it"""
        if not employee.store_id:
            raise HTTPException(status_code=400, detail="Employee is not assigned to a store")

        room = self.repo.get_store_room(self.db, employee.store_id)
        if not room:
            store = self.db.query(Store).filter(Store.store_id == employee.store_id).first()
            room = ChatRoom(
                type=ROOM_TYPE_STORE,
                name=store.store_name if store else f"Store {employee.store_id}",
                store_id=employee.store_id,
                encryption_key=generate_chat_key(),
                created_at=datetime.utcnow(),
            )
            self.db.add(room)
            self.db.flush()
            logger.info(f"🏪 Created store room {room.id} for store {employee.store_id}")

        # Upsert without touching last_read
        if not self.repo.get_participant(self.db, room.id, employee.employee_id):
            self.db.add(
                ChatRoomParticipant(
                    room_id=room.id,
                    employee_id=employee.employee_id,
                    joined_at=datetime.utcnow(),
                )
            )

        self.db.commit()
        self.db.refresh(room)
        return room

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def send_message(self, room_id: int, plain_text: str, sender_id: int) -> dict:
        """
        Encrypt and queue a message. The worker inserts it after moderation,
        so the returned message has no id yet.
        """
        self.require_participant(room_id, sender_id)
        room = self.get_room(room_id)

        if self.queue is None:
            raise HTTPException(status_code=503, detail="Message queue not configured")

        content = encrypt_message(plain_text, room.encryption_key)
        sent_at = datetime.utcnow()
        try:
            enqueue_message(self.queue, room_id, sender_id, content, sent_at.isoformat() + "Z")
        except QueueError as e:
            logger.error(f"❌ Failed to queue message for room {room_id}: {e}")
            raise HTTPException(status_code=503, detail="Message could not be queued") from e

        return {"id": None, "senderId": sender_id, "text": plain_text, "sentAt": sent_at}

    def load_messages(self, room_id: int, employee_id: Optional[int] = None) -> list[dict]:
        """Decrypted messages, oldest first"""
        if employee_id is not None:
            self.require_participant(room_id, employee_id)
        room = self.get_room(room_id)

        messages = []
        for m in self.repo.get_messages(self.db, room_id):
            try:
                text = decrypt_message(m.iv, m.ciphertext, room.encryption_key)
            except ChatCryptoError as e:
                logger.error(f"Decrypt failed for {m.id}: {e}")
                text = UNDECRYPTABLE_TEXT
            messages.append(
                {"id": m.id, "senderId": m.sender_id, "text": text, "sentAt": m.created_at}
            )
        return messages

    # ------------------------------------------------------------------
    # Room list and read state
    # ------------------------------------------------------------------

    def list_rooms(self, employee_id: int) -> dict:
        """
        Rooms visible to an employee with unread counts.

        Store room first, then group rooms; private rooms one per peer.
        A hidden room comes back once someone posts after it was hidden.
        """
        memberships = self.repo.get_memberships(self.db, employee_id)
        after_deletion = self.repo.count_messages_after_deletion(self.db, employee_id)
        unread = self.repo.count_unread(self.db, employee_id)

        visible = []
        for p in memberships:
            if p.deleted_at and not after_deletion.get(p.room_id):
                continue
            visible.append(
                {
                    "id": p.room.id,
                    "type": p.room.type,
                    "name": p.room.name,
                    "store_id": p.room.store_id,
                    "last_read": p.last_read,
                    "deleted_at": p.deleted_at,
                    "unread_count": unread.get(p.room_id, 0),
                }
            )

        store_room = next((r for r in visible if r["type"] == ROOM_TYPE_STORE), None)
        group_chats = ([store_room] if store_room else []) + [
            r for r in visible if r["type"] == ROOM_TYPE_GROUP
        ]

        private = [r for r in visible if r["type"] == ROOM_TYPE_PRIVATE]
        peers = self.repo.get_peers(self.db, [r["id"] for r in private], employee_id)
        peer_by_room: dict[int, Employee] = {}
        for peer in peers:
            peer_by_room.setdefault(peer.room_id, peer.employee)

        unique: dict[int, dict] = {}
        for r in private:
            emp = peer_by_room.get(r["id"])
            if emp is None or emp.employee_id in unique:
                continue
            unique[emp.employee_id] = {
                "roomId": r["id"],
                "participantId": emp.employee_id,
                "name": f"{emp.first_name or ''} {emp.last_name or ''}".strip(),
                "avatar": get_profile_photo_url(emp.profile_photo_path),
                "unread_count": r["unread_count"],
            }
        private_chats = list(unique.values())

        return {
            "groupChats": group_chats,
            "privateChats": private_chats,
            "totalGroupUnread": sum(r["unread_count"] for r in group_chats),
            "totalPrivateUnread": sum(r["unread_count"] for r in private_chats),
        }

    def mark_read(self, room_id: int, employee_id: int) -> ChatRoomParticipant:
        participant = self.require_participant(room_id, employee_id)
        participant.last_read = datetime.utcnow()
        self.db.commit()
        self.db.refresh(participant)
        return participant

    def hide_room(self, room_id: int, employee_id: int) -> ChatRoomParticipant:
        """Delete for me: hidden until a newer message arrives"""
        participant = self.require_participant(room_id, employee_id)
        participant.deleted_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(participant)
        return participant

    # ------------------------------------------------------------------
    # Group management
    # ------------------------------------------------------------------

    def _get_group(self, room_id: int) -> ChatRoom:
        room = self.get_room(room_id)
        if room.type != ROOM_TYPE_GROUP:
            raise HTTPException(status_code=400, detail="Only group rooms can be managed")
        return room

    def get_participants(self, room_id: int, employee_id: int) -> list[dict]:
        self.require_participant(room_id, employee_id)
        return [
            {
                "employeeId": p.employee_id,
                "name": p.employee.full_name if p.employee else "",
                "avatar": get_profile_photo_url(p.employee.profile_photo_path if p.employee else None),
                "isAdmin": bool(p.is_admin),
            }
            for p in self.repo.get_participants(self.db, room_id)
        ]

    def rename_group(self, room_id: int, actor_id: int, name: str) -> ChatRoom:
        room = self._get_group(room_id)
        self.require_participant(room_id, actor_id)
        room.name = name.strip()
        self.db.commit()
        self.db.refresh(room)
        return room

    def add_members(self, room_id: int, actor_id: int, employee_ids: list[int]) -> list[int]:
        """Add employees to a group, returning the ids actually added"""
        self._get_group(room_id)
        self.require_participant(room_id, actor_id)

        found = {e.employee_id for e in self.repo.get_employees(self.db, employee_ids)}
        added = []
        for employee_id in dict.fromkeys(employee_ids):
            if employee_id not in found:
                raise HTTPException(status_code=404, detail=f"Employee {employee_id} not found")
            if self.repo.get_participant(self.db, room_id, employee_id):
                continue
            self.db.add(
                ChatRoomParticipant(
                    room_id=room_id,
                    employee_id=employee_id,
                    is_admin=False,
                    joined_at=datetime.utcnow(),
                )
            )
            added.append(employee_id)
        self.db.commit()
        return added

    def remove_member(self, room_id: int, actor_id: int, employee_id: int) -> None:
        self._get_group(room_id)
        self.require_admin(room_id, actor_id)
        participant = self.repo.get_participant(self.db, room_id, employee_id)
        if not participant:
            raise HTTPException(status_code=404, detail="Member not found in this group")
        self.db.delete(participant)
        self.db.commit()

    def set_admin(self, room_id: int, actor_id: int, employee_id: int, is_admin: bool) -> None:
        self._get_group(room_id)
        self.require_admin(room_id, actor_id)
        participant = self.repo.get_participant(self.db, room_id, employee_id)
        if not participant:
            raise HTTPException(status_code=404, detail="Member not found in this group")
        participant.is_admin = is_admin
        self.db.commit()

    def leave_group(self, room_id: int, employee_id: int) -> dict:
        """Leave a group. The last one out deletes the room and its messages."""
        room = self._get_group(room_id)
        participant = self.require_participant(room_id, employee_id)
        self.db.delete(participant)
        self.db.commit()

        if self.repo.count_participants(self.db, room_id) == 0:
            self.db.refresh(room)
            self.repo.delete_room(self.db, room)
            logger.info(f"🗑️ Group {room_id} deleted after last member left")
            return {"left": True, "room_deleted": True}
        return {"left": True, "room_deleted": False}

    def delete_group(self, room_id: int, actor_id: int) -> None:
        room = self._get_group(room_id)
        self.require_admin(room_id, actor_id)
        self.repo.delete_room(self.db, room)
        logger.info(f"🗑️ Group {room_id} deleted by employee {actor_id}")

    # ------------------------------------------------------------------
    # Moderation feedback
    # ------------------------------------------------------------------

    def recent_safety_alert(self, employee_id: int, minutes: int = 5) -> Optional[ContentSafetyEvent]:
        since = datetime.utcnow() - timedelta(minutes=minutes)
        return self.repo.latest_safety_event(self.db, employee_id, since)
