"""
메뉴 권한 계산에 필요한 조회 함수 모음

PermissionResolver 는 이 객체만 통해 DB 를 읽는다.
테스트에서는 같은 메서드를 가진 인메모리 객체로 교체할 수 있다.
"""
import functools
import logging
from dataclasses import dataclass

from django.db import DatabaseError

from apps.accounts.models import User, UserRole, RolePermission
from utils.exceptions import (
    DataIntegrityException,
    ResourceNotFoundException,
    UpstreamUnavailableException,
)
from .models import Menu, UserMenuOverride
from .utils import get_max_menu_depth, menu_to_node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserIdentity:
    id: int
    is_platform_admin: bool


def _upstream(func):
    """DB 조회 실패를 UpstreamUnavailableException 으로 변환 (재시도 없음)"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as e:
            logger.error(f"메뉴 권한 데이터 조회 실패: {func.__name__} - {e}")
            raise UpstreamUnavailableException(detail={"lookup": func.__name__}) from e
    return wrapper


def effective_enabled_states(menus, max_depth=None):
    """
    메뉴별 실제 활성 여부 계산

    자신 또는 상위 메뉴 중 하나라도 비활성이면 비활성으로 본다.
    """
    if max_depth is None:
        max_depth = get_max_menu_depth()
    by_id = {menu.id: menu for menu in menus}
    state = {}

    for menu in menus:
        chain = []
        current = menu
        result = True
        while current is not None:
            if current.id in state:
                result = state[current.id]
                break
            chain.append(current.id)
            if not current.is_active:
                result = False
                break
            if len(chain) > max_depth:
                raise DataIntegrityException(
                    "메뉴 계층에 순환 참조가 있습니다.",
                    detail={"menu_id": menu.id},
                )
            current = by_id.get(current.parent_id)

        for menu_id in chain:
            state[menu_id] = result

    return state


class MenuDirectory:
    """ORM 기반 조회 구현"""

    @_upstream
    def get_user(self, user_id):
        row = User.objects.filter(pk=user_id).values("id", "is_superuser").first()
        if row is None:
            raise ResourceNotFoundException(
                "사용자를 찾을 수 없습니다.",
                detail={"user_id": user_id},
            )
        return UserIdentity(id=row["id"], is_platform_admin=row["is_superuser"])

    @_upstream
    def get_active_role_ids_for_user(self, user_id):
        return set(
            UserRole.objects
            .filter(user_id=user_id, role__is_active=True)
            .values_list("role_id", flat=True)
        )

    @_upstream
    def get_menu_ids_granted_to_roles(self, role_ids):
        if not role_ids:
            return set()
        return set(
            RolePermission.objects
            .filter(role_id__in=role_ids)
            .values_list("menu_id", flat=True)
        )

    @_upstream
    def get_user_overrides(self, user_id):
        return dict(
            UserMenuOverride.objects
            .filter(user_id=user_id)
            .values_list("menu_id", "permission_type")
        )

    @_upstream
    def get_enabled_menus(self):
        menus = list(Menu.objects.order_by("order", "id"))
        state = effective_enabled_states(menus)
        return [menu_to_node(menu) for menu in menus if state[menu.id]]

    @_upstream
    def menu_exists(self, menu_id):
        return Menu.objects.filter(pk=menu_id).exists()
