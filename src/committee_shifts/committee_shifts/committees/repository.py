from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import CommitteeShiftConfig


class MembershipOracle(Protocol):
    def is_member(self, user_id: int, committee_id: int) -> bool:
        raise NotImplementedError

    def is_admin(self, user_id: int, committee_id: int) -> bool:
        raise NotImplementedError

    def list_committee_ids_for_member(self, user_id: int) -> Sequence[int]:
        raise NotImplementedError


class CommitteeConfigProvider(Protocol):
    def get_committee(self, committee_id: int) -> Optional[CommitteeShiftConfig]:
        raise NotImplementedError


class CommitteeRepository(MembershipOracle, CommitteeConfigProvider, Protocol):
    """Both collaborator views are backed by the same committee tables."""
