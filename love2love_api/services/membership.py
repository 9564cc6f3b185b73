from typing import List, Optional

COUPLE_ID_SEPARATOR = "_"


def couple_member_ids(couple_id: str) -> List[str]:
    # Firebase uids are alphanumeric, so the separator never appears inside one
    return [part for part in couple_id.split(COUPLE_ID_SEPARATOR) if part]


def is_couple_member(couple_id: str, user_id: str) -> bool:
    if not couple_id or not user_id:
        return False
    return user_id in couple_member_ids(couple_id)


def partner_of(couple_id: str, user_id: str) -> Optional[str]:
    for member_id in couple_member_ids(couple_id):
        if member_id != user_id:
            return member_id
    return None
