from sqlalchemy import Column, Integer, String, UniqueConstraint

from pecal.db.base import Base


class Workspace(Base):
    """Workspace owned either by a member (personal) or by a team (team).

    For team workspaces `owner_id` holds the team id.
    """
    __tablename__ = "workspaces"

    workspace_id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(20), nullable=False, default="personal")  # personal, team
    owner_id = Column(Integer, nullable=False, index=True)
    name = Column(String(100), nullable=True)


class TeamMember(Base):
    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, nullable=False, index=True)
    member_id = Column(Integer, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("team_id", "member_id", name="uq_team_members_team_member"),
    )
