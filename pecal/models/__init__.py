from .task import Task
from .workspace import Workspace, TeamMember
from .notification import Notification
from .push_token import MemberPushToken

__all__ = ["Task", "Workspace", "TeamMember", "Notification", "MemberPushToken"]
