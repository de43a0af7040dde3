from __future__ import annotations

import threading
import time as time_mod
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.committee_shifts.committee_shifts.activities.model import MemberActivity
from src.committee_shifts.committee_shifts.attendance.model import Attendance, AttendanceReportRow, AttendanceWithSlot
from src.committee_shifts.committee_shifts.committees.model import CommitteeShiftConfig
from src.committee_shifts.committee_shifts.container import assemble
from src.committee_shifts.committee_shifts.core.enums import AttendanceStatus, ShiftKind
from src.committee_shifts.committee_shifts.core.exceptions import DuplicateSlotError, NotFoundError
from src.committee_shifts.committee_shifts.notifications.model import NotificationPreferences
from src.committee_shifts.committee_shifts.slots.model import Slot


class InMemoryCommittees:
    def __init__(self):
        self.committees: dict[int, CommitteeShiftConfig] = {}
        self.members: set[tuple[int, int]] = set()
        self.admins: set[tuple[int, int]] = set()

    def add(self, committee: CommitteeShiftConfig) -> CommitteeShiftConfig:
        self.committees[committee.committee_id] = committee
        return committee

    def join(self, user_id: int, committee_id: int, *, admin: bool = False) -> None:
        self.members.add((user_id, committee_id))
        if admin:
            self.admins.add((user_id, committee_id))

    def is_member(self, user_id: int, committee_id: int) -> bool:
        return (int(user_id), int(committee_id)) in self.members

    def is_admin(self, user_id: int, committee_id: int) -> bool:
        return (int(user_id), int(committee_id)) in self.admins

    def list_committee_ids_for_member(self, user_id: int):
        return sorted(cid for uid, cid in self.members if uid == int(user_id))

    def get_committee(self, committee_id: int) -> Optional[CommitteeShiftConfig]:
        return self.committees.get(int(committee_id))


class InMemorySlots:
    def __init__(self, *, lookup_delay: float = 0.0):
        self._by_id: dict[int, Slot] = {}
        self._id = 0
        self._lock = threading.Lock()
        self._lookup_delay = lookup_delay

    def get_slot(self, committee_id: int, slot_date: date, shift: ShiftKind) -> Optional[Slot]:
        with self._lock:
            found = next(
                (s for s in self._by_id.values() if (s.committee_id, s.slot_date, s.shift) == (committee_id, slot_date, shift)),
                None,
            )
        if found is None and self._lookup_delay:
            time_mod.sleep(self._lookup_delay)
        return found

    def get_by_id(self, slot_id: int) -> Optional[Slot]:
        with self._lock:
            return self._by_id.get(int(slot_id))

    def create_slot(self, *, committee_id, slot_date, shift, max_capacity, is_blocked=False, notes=None) -> Slot:
        with self._lock:
            for s in self._by_id.values():
                if (s.committee_id, s.slot_date, s.shift) == (committee_id, slot_date, shift):
                    raise DuplicateSlotError("Slot already exists")
            self._id += 1
            slot = Slot(
                slot_id=self._id,
                committee_id=committee_id,
                slot_date=slot_date,
                shift=shift,
                max_capacity=max_capacity,
                is_blocked=is_blocked,
                notes=notes,
            )
            self._by_id[slot.slot_id] = slot
            return slot

    def update_slot(self, slot_id: int, *, max_capacity=None, is_blocked=None, notes=None) -> Optional[Slot]:
        with self._lock:
            slot = self._by_id.get(int(slot_id))
            if not slot:
                return None
            changes = {}
            if max_capacity is not None:
                changes["max_capacity"] = max_capacity
            if is_blocked is not None:
                changes["is_blocked"] = is_blocked
            if notes is not None:
                changes["notes"] = notes
            slot = replace(slot, **changes)
            self._by_id[slot.slot_id] = slot
            return slot

    def list_range(self, committee_id: int, start: date, end: date):
        with self._lock:
            items = [s for s in self._by_id.values() if s.committee_id == committee_id and start <= s.slot_date <= end]
        return sorted(items, key=lambda s: (s.slot_date, s.shift.value))

    def list_open_between(self, committee_ids, start: date, end: date):
        with self._lock:
            items = [
                s
                for s in self._by_id.values()
                if s.committee_id in committee_ids and start <= s.slot_date <= end and not s.is_blocked
            ]
        return sorted(items, key=lambda s: s.slot_date)

    def count(self) -> int:
        with self._lock:
            return len(self._by_id)


class InMemoryLedger:
    def __init__(self, repo: "InMemoryAttendance", slot: Slot):
        self._repo = repo
        self.slot = slot

    def count_confirmed(self) -> int:
        n = sum(
            1
            for a in list(self._repo.rows.values())
            if a.slot_id == self.slot.slot_id and a.status == AttendanceStatus.CONFIRMED
        )
        # Give competing threads a chance to run between the count and the write.
        time_mod.sleep(0.001)
        return n

    def find_for_user(self, user_id: int) -> Optional[Attendance]:
        return next(
            (a for a in list(self._repo.rows.values()) if a.slot_id == self.slot.slot_id and a.user_id == int(user_id)),
            None,
        )

    def insert_confirmed(self, *, user_id: int, registered_at: datetime) -> Attendance:
        with self._repo.guard:
            self._repo.next_id += 1
            a = Attendance(
                attendance_id=self._repo.next_id,
                slot_id=self.slot.slot_id,
                user_id=int(user_id),
                status=AttendanceStatus.CONFIRMED,
                registered_at=registered_at,
            )
            self._repo.rows[a.attendance_id] = a
            return a

    def reactivate(self, *, attendance_id: int, registered_at: datetime) -> Attendance:
        with self._repo.guard:
            a = replace(
                self._repo.rows[attendance_id],
                status=AttendanceStatus.CONFIRMED,
                registered_at=registered_at,
                cancelled_at=None,
            )
            self._repo.rows[attendance_id] = a
            return a


class InMemoryAttendance:
    def __init__(self, slots: InMemorySlots, committees: InMemoryCommittees, users: Optional[dict] = None):
        self._slots = slots
        self._committees = committees
        self.users: dict[int, tuple[str, str, str]] = users if users is not None else {}
        self.rows: dict[int, Attendance] = {}
        self.next_id = 0
        self.guard = threading.Lock()
        self._slot_locks: dict[int, threading.Lock] = {}

    def _slot_lock(self, slot_id: int) -> threading.Lock:
        with self.guard:
            return self._slot_locks.setdefault(slot_id, threading.Lock())

    @contextmanager
    def lock_slot(self, slot_id: int):
        with self._slot_lock(slot_id):
            slot = self._slots.get_by_id(slot_id)
            if not slot:
                raise NotFoundError("Slot not found")
            yield InMemoryLedger(self, slot)

    def get_by_id(self, attendance_id: int) -> Optional[Attendance]:
        with self.guard:
            return self.rows.get(int(attendance_id))

    def transition(self, *, attendance_id, expected, new_status, cancelled_at=None) -> bool:
        with self.guard:
            a = self.rows.get(int(attendance_id))
            if not a or a.status != expected:
                return False
            changes = {"status": new_status}
            if cancelled_at is not None:
                changes["cancelled_at"] = cancelled_at
            self.rows[a.attendance_id] = replace(a, **changes)
            return True

    def list_for_user(self, user_id: int, *, since: Optional[date] = None):
        out = []
        for a in list(self.rows.values()):
            if a.user_id != int(user_id):
                continue
            slot = self._slots.get_by_id(a.slot_id)
            if since is not None and slot.slot_date < since:
                continue
            committee = self._committees.get_committee(slot.committee_id)
            out.append(
                AttendanceWithSlot(
                    attendance=a,
                    committee_id=slot.committee_id,
                    committee_name=committee.name if committee else "",
                    slot_date=slot.slot_date,
                    shift=slot.shift,
                )
            )
        return sorted(out, key=lambda r: (r.slot_date, r.shift.value), reverse=True)

    def count_confirmed_by_slot(self, slot_ids):
        counts: dict[int, int] = {}
        for a in list(self.rows.values()):
            if a.slot_id in slot_ids and a.status == AttendanceStatus.CONFIRMED:
                counts[a.slot_id] = counts.get(a.slot_id, 0) + 1
        return counts

    def list_confirmed_in_range(self, *, committee_id: int, start_date: date, end_date: date):
        out = []
        for a in list(self.rows.values()):
            slot = self._slots.get_by_id(a.slot_id)
            if a.status != AttendanceStatus.CONFIRMED or slot.committee_id != committee_id:
                continue
            if not (start_date <= slot.slot_date <= end_date):
                continue
            first, last, email = self.users.get(a.user_id, (None, None, None))
            out.append(
                AttendanceReportRow(
                    attendance_id=a.attendance_id,
                    slot_date=slot.slot_date,
                    shift=slot.shift,
                    user_id=a.user_id,
                    first_name=first,
                    last_name=last,
                    email=email,
                    registered_at=a.registered_at,
                )
            )
        return out

    def confirmed_count(self, slot_id: int) -> int:
        return sum(1 for a in self.rows.values() if a.slot_id == slot_id and a.status == AttendanceStatus.CONFIRMED)


class InMemoryActivities:
    def __init__(self):
        self.items: list[MemberActivity] = []

    def list_pending_for_user(self, user_id: int, *, since: date):
        return [a for a in self.items if a.user_id == user_id and not a.is_completed and a.activity_date >= since]


class InMemoryPreferences:
    def __init__(self):
        self.by_user: dict[int, NotificationPreferences] = {}

    def get(self, user_id: int) -> Optional[NotificationPreferences]:
        return self.by_user.get(int(user_id))

    def upsert(self, prefs: NotificationPreferences) -> NotificationPreferences:
        self.by_user[prefs.user_id] = prefs
        return prefs

    def list_push_enabled(self):
        return [p for p in self.by_user.values() if p.push_enabled and p.push_subscription]


class FakePushSender:
    def __init__(self):
        self.sent: list[tuple[str, object]] = []
        self.failing: set[str] = set()
        self.raising: set[str] = set()

    def send(self, subscription, payload) -> bool:
        endpoint = subscription.get("endpoint", "")
        if endpoint in self.raising:
            raise RuntimeError("push service exploded")
        if endpoint in self.failing:
            return False
        self.sent.append((endpoint, payload))
        return True


def subscription_for(user_id: int) -> dict:
    return {"endpoint": f"https://push.example.org/{user_id}", "keys": {"p256dh": "p", "auth": "a"}}


@pytest.fixture
def subscribe(preferences):
    """Enable push for a user with a fake subscription."""

    def _subscribe(user_id: int, **changes) -> NotificationPreferences:
        prefs = NotificationPreferences(user_id=user_id, push_enabled=True, push_subscription=subscription_for(user_id))
        return preferences.upsert(replace(prefs, **changes))

    return _subscribe


@pytest.fixture
def fixed_now() -> datetime:
    # Monday
    return datetime(2026, 3, 2, 10, 0)


@pytest.fixture
def committees() -> InMemoryCommittees:
    repo = InMemoryCommittees()
    repo.add(CommitteeShiftConfig(committee_id=1, name="District Outreach", max_per_shift=2))
    repo.add(CommitteeShiftConfig(committee_id=2, name="Youth Council", max_per_shift=3))
    repo.join(1, 1, admin=True)
    for uid in (2, 3, 4):
        repo.join(uid, 1)
    repo.join(2, 2)
    return repo


@pytest.fixture
def slots() -> InMemorySlots:
    return InMemorySlots()


@pytest.fixture
def attendance(slots, committees) -> InMemoryAttendance:
    users = {
        1: ("Ana", "Admin", "ana@example.org"),
        2: ("Ben", "Okafor", "ben@example.org"),
        3: ("Chloe", "Ruiz", "chloe@example.org"),
    }
    return InMemoryAttendance(slots, committees, users)


@pytest.fixture
def activities() -> InMemoryActivities:
    return InMemoryActivities()


@pytest.fixture
def preferences() -> InMemoryPreferences:
    return InMemoryPreferences()


@pytest.fixture
def sender() -> FakePushSender:
    return FakePushSender()


@pytest.fixture
def container(committees, slots, attendance, activities, preferences, sender, fixed_now):
    return assemble(
        committees=committees,
        slots=slots,
        attendance=attendance,
        activities=activities,
        preferences=preferences,
        sender=sender,
        clock=lambda: fixed_now,
    )
