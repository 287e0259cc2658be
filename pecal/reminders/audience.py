"""
Audience resolution for due reminders.

The audience is always resolved at dispatch time, never cached in the job, so
membership changes between compile and dispatch are honoured.
"""
from typing import Dict, List, Type

from sqlalchemy.orm import Session

from pecal.crud.workspace import get_workspace, list_team_member_ids
from pecal.models.workspace import Workspace


class AudienceResolver:
    """Resolves the member ids that should receive a workspace's reminders."""

    def resolve(self, db: Session, workspace: Workspace) -> List[int]:
        raise NotImplementedError


class PersonalAudience(AudienceResolver):
    def resolve(self, db: Session, workspace: Workspace) -> List[int]:
        owner_id = int(workspace.owner_id or 0)
        return [owner_id] if owner_id > 0 else []


class TeamAudience(AudienceResolver):
    """Current team roster; a team workspace's owner_id is the team id."""

    def resolve(self, db: Session, workspace: Workspace) -> List[int]:
        member_ids = list_team_member_ids(db, team_id=int(workspace.owner_id))
        return list(dict.fromkeys(member_ids))


AUDIENCE_RESOLVERS: Dict[str, Type[AudienceResolver]] = {
    "personal": PersonalAudience,
    "team": TeamAudience,
}


def resolve_audience(db: Session, workspace_id: int) -> List[int]:
    workspace = get_workspace(db, workspace_id)
    if workspace is None:
        return []
    resolver_cls = AUDIENCE_RESOLVERS.get(workspace.type, TeamAudience)
    return resolver_cls().resolve(db, workspace)
