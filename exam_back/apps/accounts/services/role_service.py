# 역할 할당 / 역할별 메뉴 권한 변경 로직
import logging

from django.db import transaction

from apps.accounts.models import Role, User, UserRole, RolePermission, RolePermissionHistory
from apps.common.utils import parse_positive_int
from apps.menus.models import Menu
from utils.exceptions import (
    BusinessLogicException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from .permission_service import notify_permission_changed_on_commit

logger = logging.getLogger(__name__)


def _get_user_or_404(user_id):
    user_id = parse_positive_int(user_id, field="user_id")
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise ResourceNotFoundException("사용자를 찾을 수 없습니다.", detail={"user_id": user_id})
    return user


def _get_role_or_404(role_id):
    role_id = parse_positive_int(role_id, field="role_id")
    role = Role.objects.filter(pk=role_id).first()
    if role is None:
        raise ResourceNotFoundException("역할을 찾을 수 없습니다.", detail={"role_id": role_id})
    return role


def normalize_role_refs(role_refs):
    """
    여러 형태의 역할 참조 → Role 목록 (입력 순서 유지, 중복 제거)

    허용 형태: 1, "1", "ADMIN", {"id": 1}, {"code": "ADMIN"}, Role 객체
    """
    if role_refs is None:
        role_refs = []
    if not isinstance(role_refs, (list, tuple)):
        raise ValidationException("역할 목록 형식이 올바르지 않습니다.", field="roles")

    ids, codes, refs = set(), set(), []
    for ref in role_refs:
        if isinstance(ref, Role):
            ref = ref.id
        elif isinstance(ref, dict):
            if ref.get("id") is not None:
                ref = ref["id"]
            elif ref.get("code"):
                ref = ref["code"]
            else:
                raise ValidationException("역할 참조에 id 또는 code 가 필요합니다.", field="roles")

        if isinstance(ref, bool):
            raise ValidationException("역할 참조 형식이 올바르지 않습니다.", field="roles")
        if isinstance(ref, int):
            ref = parse_positive_int(ref, field="roles")
            ids.add(ref)
            refs.append(("id", ref))
        elif isinstance(ref, str) and ref.strip():
            ref = ref.strip()
            if ref.isdigit():
                ref = parse_positive_int(int(ref), field="roles")
                ids.add(ref)
                refs.append(("id", ref))
            else:
                codes.add(ref)
                refs.append(("code", ref))
        else:
            raise ValidationException("역할 참조 형식이 올바르지 않습니다.", field="roles")

    by_id, by_code = {}, {}
    for role in Role.objects.filter(id__in=ids) | Role.objects.filter(code__in=codes):
        by_id[role.id] = role
        by_code[role.code] = role

    roles, seen, missing = [], set(), []
    for kind, value in refs:
        role = by_id.get(value) if kind == "id" else by_code.get(value)
        if role is None:
            missing.append(value)
            continue
        if role.id not in seen:
            seen.add(role.id)
            roles.append(role)

    if missing:
        raise ValidationException(
            "존재하지 않는 역할이 포함되어 있습니다.",
            field="roles",
            detail={"missing": missing},
        )
    return roles


def normalize_role_ids(role_refs):
    return {role.id for role in normalize_role_refs(role_refs)}


# ========== 사용자 역할 ==========

def get_user_roles(user_id):
    user = _get_user_or_404(user_id)
    return list(user.roles.filter(is_active=True).order_by("sort_order", "id"))


@transaction.atomic
def assign_user_roles(user_id, role_refs):
    """사용자 역할을 전달된 목록으로 교체"""
    user = _get_user_or_404(user_id)
    new_ids = normalize_role_ids(role_refs)
    roles = list(Role.objects.filter(id__in=new_ids).order_by("sort_order", "id"))
    current_ids = set(UserRole.objects.filter(user=user).values_list("role_id", flat=True))

    removed = current_ids - new_ids
    added = new_ids - current_ids

    if removed:
        UserRole.objects.filter(user=user, role_id__in=removed).delete()
    if added:
        UserRole.objects.bulk_create(
            [UserRole(user=user, role_id=role_id) for role_id in sorted(added)]
        )

    if added or removed:
        logger.info(
            f"사용자 역할 변경: user_id={user.id}, added={sorted(added)}, removed={sorted(removed)}"
        )
        notify_permission_changed_on_commit([user.id])

    return roles


# ========== 역할별 메뉴 권한 ==========

def get_role_menus(role_id):
    role = _get_role_or_404(role_id)
    return sorted(
        RolePermission.objects.filter(role=role).values_list("menu_id", flat=True)
    )


def _role_member_ids(role):
    return list(UserRole.objects.filter(role=role).values_list("user_id", flat=True))


@transaction.atomic
def assign_role_menus(role_id, menu_ids, changed_by=None, reason=""):
    """
    역할의 메뉴 권한을 전달된 목록으로 교체

    추가/제거된 메뉴마다 RolePermissionHistory 를 남기고,
    커밋 후 해당 역할 사용자에게 권한 변경 알림을 보낸다.
    """
    role = _get_role_or_404(role_id)
    if not isinstance(menu_ids, (list, tuple)):
        raise ValidationException("메뉴 목록 형식이 올바르지 않습니다.", field="menu_ids")

    new_ids = {parse_positive_int(menu_id, field="menu_ids") for menu_id in menu_ids}
    existing = set(Menu.objects.filter(id__in=new_ids).values_list("id", flat=True))
    if existing != new_ids:
        raise ValidationException(
            "존재하지 않는 메뉴가 포함되어 있습니다.",
            field="menu_ids",
            detail={"missing": sorted(new_ids - existing)},
        )

    current_ids = set(RolePermission.objects.filter(role=role).values_list("menu_id", flat=True))
    added = sorted(new_ids - current_ids)
    removed = sorted(current_ids - new_ids)

    if removed:
        RolePermission.objects.filter(role=role, menu_id__in=removed).delete()
    if added:
        RolePermission.objects.bulk_create(
            [RolePermission(role=role, menu_id=menu_id) for menu_id in added]
        )

    history = [
        RolePermissionHistory(role=role, menu_id=menu_id, action="ADD", changed_by=changed_by, reason=reason)
        for menu_id in added
    ] + [
        RolePermissionHistory(role=role, menu_id=menu_id, action="REMOVE", changed_by=changed_by, reason=reason)
        for menu_id in removed
    ]
    if history:
        RolePermissionHistory.objects.bulk_create(history)
        logger.info(f"역할 메뉴 권한 변경: role={role.code}, added={added}, removed={removed}")
        notify_permission_changed_on_commit(_role_member_ids(role))

    return {"added": added, "removed": removed}


# ========== 역할 관리 ==========

def notify_role_members(role):
    notify_permission_changed_on_commit(_role_member_ids(role))


def ensure_role_deletable(role):
    if role.is_system:
        raise BusinessLogicException(
            "시스템 역할은 삭제할 수 없습니다.",
            detail={"role": role.code},
        )
    if UserRole.objects.filter(role=role).exists():
        raise ConflictException(
            "사용 중인 역할은 삭제할 수 없습니다.",
            detail={"role": role.code},
        )
