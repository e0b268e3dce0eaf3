import logging
from dataclasses import dataclass

from django.db import models, transaction

from apps.accounts.models import User
from apps.accounts.services.permission_service import notify_permission_changed_on_commit
from apps.common.utils import parse_positive_int
from utils.exceptions import ResourceNotFoundException, ValidationException
from .directory import MenuDirectory
from .models import Menu, UserMenuOverride
from .utils import build_menu_tree, get_max_menu_depth, menu_to_node

logger = logging.getLogger(__name__)


# 권한 판정 근거
class PermissionSource(models.TextChoices):
    ADMIN = "admin", "플랫폼 관리자"
    DENY = "deny", "사용자 거부"
    USER = "user", "사용자 허용"
    ROLE = "role", "역할 권한"
    NONE = "none", "권한 없음"


@dataclass(frozen=True)
class EffectivePermission:
    menu: dict
    has_permission: bool
    source: str

    @property
    def menu_id(self):
        return self.menu["id"]

    def as_dict(self):
        return {
            **self.menu,
            "has_permission": self.has_permission,
            "source": str(self.source),
        }


class PermissionResolver:
    """
    사용자별 메뉴 권한 계산기

    판정 우선순위 (메뉴마다 위에서부터 적용):
      1. 플랫폼 관리자(is_superuser) → 전체 허용, 역할/예외 권한은 조회하지 않음
      2. 사용자 deny 예외 → 거부
      3. 사용자 grant 예외 → 허용
      4. 활성 역할 중 하나라도 메뉴 권한 보유 → 허용
      5. 그 외 → 거부

    비활성 메뉴는 결과에 포함되지 않는다. 읽기 전용이며 캐시하지 않는다.
    """

    def __init__(self, directory=None):
        self.directory = directory or MenuDirectory()

    def resolve(self, user_id):
        user_id = parse_positive_int(user_id, field="user_id")
        user = self.directory.get_user(user_id)
        menus = self.directory.get_enabled_menus()

        if user.is_platform_admin:
            return [
                EffectivePermission(menu, True, PermissionSource.ADMIN)
                for menu in menus
            ]

        role_ids = self.directory.get_active_role_ids_for_user(user.id)
        granted_menu_ids = self.directory.get_menu_ids_granted_to_roles(role_ids)
        overrides = self.directory.get_user_overrides(user.id)

        return [self._decide(menu, granted_menu_ids, overrides) for menu in menus]

    @staticmethod
    def _decide(menu, granted_menu_ids, overrides):
        override = overrides.get(menu["id"])
        if override == UserMenuOverride.PermissionType.DENY:
            return EffectivePermission(menu, False, PermissionSource.DENY)
        if override == UserMenuOverride.PermissionType.GRANT:
            return EffectivePermission(menu, True, PermissionSource.USER)
        if menu["id"] in granted_menu_ids:
            return EffectivePermission(menu, True, PermissionSource.ROLE)
        return EffectivePermission(menu, False, PermissionSource.NONE)


def resolve_permissions(user_id, directory=None):
    return PermissionResolver(directory).resolve(user_id)


# 특정 유저가 접근 가능한 메뉴 트리를 반환하는 함수.
def get_user_menu_tree(user_id, directory=None):
    permissions = resolve_permissions(user_id, directory)
    return build_menu_tree([p.menu for p in permissions if p.has_permission])


def check_menu_permission(user_id, menu_id, directory=None):
    """단일 메뉴 권한 확인 (전체 조회와 같은 우선순위 사용)"""
    directory = directory or MenuDirectory()
    menu_id = parse_positive_int(menu_id, field="menu_id")

    for permission in resolve_permissions(user_id, directory):
        if permission.menu_id == menu_id:
            return permission.has_permission

    # 결과에 없으면 비활성 메뉴이거나 존재하지 않는 메뉴
    if not directory.menu_exists(menu_id):
        raise ResourceNotFoundException("메뉴를 찾을 수 없습니다.", detail={"menu_id": menu_id})
    return False


# 프론트 동적 라우팅용 (활성 메뉴 전체)
def get_route_tree(directory=None):
    directory = directory or MenuDirectory()
    return build_menu_tree(directory.get_enabled_menus())


# 메뉴 관리 화면용 (비활성 메뉴 포함)
def get_full_menu_tree():
    nodes = []
    for menu in Menu.objects.order_by("order", "id"):
        node = menu_to_node(menu)
        node["is_active"] = menu.is_active
        node["is_system"] = menu.is_system
        nodes.append(node)
    return build_menu_tree(nodes)


# ========== 사용자별 예외 권한 ==========

@transaction.atomic
def set_user_menu_override(user_id, menu_id, permission_type):
    user_id = parse_positive_int(user_id, field="user_id")
    menu_id = parse_positive_int(menu_id, field="menu_id")

    if permission_type not in UserMenuOverride.PermissionType.values:
        raise ValidationException(
            "권한 유형은 grant 또는 deny 이어야 합니다.",
            field="permission_type",
        )
    if not User.objects.filter(pk=user_id).exists():
        raise ResourceNotFoundException("사용자를 찾을 수 없습니다.", detail={"user_id": user_id})
    if not Menu.objects.filter(pk=menu_id).exists():
        raise ResourceNotFoundException("메뉴를 찾을 수 없습니다.", detail={"menu_id": menu_id})

    override, created = UserMenuOverride.objects.update_or_create(
        user_id=user_id,
        menu_id=menu_id,
        defaults={"permission_type": permission_type},
    )
    logger.info(f"사용자 메뉴 권한 설정: user_id={user_id}, menu_id={menu_id}, type={permission_type}")

    notify_permission_changed_on_commit([user_id])
    return override, created


@transaction.atomic
def remove_user_menu_override(user_id, menu_id):
    user_id = parse_positive_int(user_id, field="user_id")
    menu_id = parse_positive_int(menu_id, field="menu_id")

    deleted, _ = UserMenuOverride.objects.filter(user_id=user_id, menu_id=menu_id).delete()
    if not deleted:
        raise ResourceNotFoundException(
            "해당 사용자 메뉴 권한이 없습니다.",
            detail={"user_id": user_id, "menu_id": menu_id},
        )
    logger.info(f"사용자 메뉴 권한 제거: user_id={user_id}, menu_id={menu_id}")

    notify_permission_changed_on_commit([user_id])


# ========== 메뉴 정렬 / 이동 ==========

def _normalize_order_updates(updates):
    if not isinstance(updates, (list, tuple)):
        raise ValidationException("메뉴 정렬 데이터 형식이 올바르지 않습니다.", field="menuUpdates")

    normalized = []
    for item in updates:
        if not isinstance(item, dict):
            raise ValidationException("메뉴 정렬 데이터 형식이 올바르지 않습니다.", field="menuUpdates")

        menu_id = parse_positive_int(item.get("id"), field="id")
        entry = {"id": menu_id}

        if "parent_id" in item:
            parent_id = item["parent_id"]
            if parent_id is not None:
                parse_positive_int(parent_id, field="parent_id")
            if parent_id == menu_id:
                raise ValidationException(
                    "메뉴를 자기 자신의 하위로 지정할 수 없습니다.",
                    detail={"menu_id": menu_id},
                )
            entry["parent_id"] = parent_id

        if "order" in item:
            order = item["order"]
            if isinstance(order, bool) or not isinstance(order, int):
                raise ValidationException("order 는 정수여야 합니다.", field="order")
            entry["order"] = order

        normalized.append(entry)
    return normalized


def compute_menu_levels(parents, max_depth=None):
    """
    parent 매핑(id → parent_id)으로 각 메뉴의 level 계산

    순환 참조이거나 level 이 max_depth 를 넘으면 ValidationException
    """
    if max_depth is None:
        max_depth = get_max_menu_depth()

    def too_deep(menu_id):
        return ValidationException(
            f"메뉴 계층 깊이는 {max_depth}단계를 넘을 수 없습니다.",
            detail={"menu_id": menu_id},
        )

    levels = {}
    for menu_id in parents:
        chain = []
        current = menu_id
        while current is not None and current not in levels:
            if current in chain:
                raise ValidationException(
                    "메뉴를 자신의 하위 메뉴 아래로 이동할 수 없습니다.",
                    detail={"menu_id": menu_id},
                )
            if len(chain) >= max_depth:
                raise too_deep(menu_id)
            chain.append(current)
            current = parents.get(current)

        # 이미 계산된 조상에서 이어 붙이므로 전체 깊이로 검사
        base = levels[current] if current is not None else 0
        if base + len(chain) > max_depth:
            raise too_deep(menu_id)
        for offset, node_id in enumerate(reversed(chain), start=1):
            levels[node_id] = base + offset
    return levels


@transaction.atomic
def batch_update_menu_order(updates):
    """
    메뉴 정렬/부모 일괄 변경

    updates: [{"id": 3, "parent_id": 1, "order": 2}, ...]
    전달된 필드만 변경하고, 변경 후 전체 level 을 다시 계산한다.
    """
    normalized = _normalize_order_updates(updates)
    if not normalized:
        return 0

    menus = {menu.id: menu for menu in Menu.objects.select_for_update()}
    parents = {menu_id: menu.parent_id for menu_id, menu in menus.items()}

    for entry in normalized:
        if entry["id"] not in menus:
            raise ResourceNotFoundException("메뉴를 찾을 수 없습니다.", detail={"menu_id": entry["id"]})
        parent_id = entry.get("parent_id")
        if parent_id is not None and parent_id not in menus:
            raise ResourceNotFoundException("상위 메뉴를 찾을 수 없습니다.", detail={"menu_id": parent_id})
        if "parent_id" in entry:
            parents[entry["id"]] = parent_id

    # 변경 후 구조 기준으로 순환 여부 검사 + level 재계산
    levels = compute_menu_levels(parents)

    changed = {}
    for entry in normalized:
        menu = menus[entry["id"]]
        if "parent_id" in entry:
            menu.parent_id = entry["parent_id"]
        if "order" in entry:
            menu.order = entry["order"]
        changed[menu.id] = menu

    for menu_id, menu in menus.items():
        if menu.level != levels[menu_id]:
            menu.level = levels[menu_id]
            changed[menu_id] = menu

    Menu.objects.bulk_update(list(changed.values()), ["parent", "order", "level"])
    logger.info(f"메뉴 정렬 일괄 변경: {len(normalized)}건 요청, {len(changed)}건 반영")
    return len(changed)
