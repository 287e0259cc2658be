from datetime import datetime
from typing import Dict, List
from sqlalchemy.orm import Session
from sqlalchemy import update

from pecal.models.push_token import MemberPushToken


def get_active_push_tokens_by_member_ids(db: Session, member_ids: List[int]) -> List[Dict[str, object]]:
    if not member_ids:
        return []
    rows = (
        db.query(MemberPushToken)
        .filter(MemberPushToken.is_active.is_(True), MemberPushToken.member_id.in_(member_ids))
        .all()
    )
    return [
        {"member_id": int(r.member_id), "token": r.token, "platform": r.platform or "ios"}
        for r in rows
        if r.member_id and r.member_id > 0 and r.token
    ]


def deactivate_push_tokens(db: Session, tokens: List[str]) -> int:
    unique_tokens = sorted({t.strip() for t in tokens if t and t.strip()})
    if not unique_tokens:
        return 0
    result = db.execute(
        update(MemberPushToken)
        .where(MemberPushToken.token.in_(unique_tokens))
        .values(is_active=False, updated_at=datetime.utcnow())
    )
    db.commit()
    return max(0, result.rowcount or 0)
