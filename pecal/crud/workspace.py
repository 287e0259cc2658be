from typing import List, Optional
from sqlalchemy.orm import Session

from pecal.models.workspace import Workspace, TeamMember


def get_workspace(db: Session, workspace_id: int) -> Optional[Workspace]:
    return db.get(Workspace, workspace_id)


def list_team_member_ids(db: Session, *, team_id: int) -> List[int]:
    rows = db.query(TeamMember.member_id).filter(TeamMember.team_id == team_id).all()
    return [int(r[0]) for r in rows if r[0] is not None and int(r[0]) > 0]
