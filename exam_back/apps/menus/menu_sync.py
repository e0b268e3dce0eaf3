"""
메뉴 카탈로그 동기화 (seed 트리 → DB)

mode
  patch       : 기존 메뉴는 표시 정보만 갱신, 부모/정렬/level 은 유지 (기본값)
  force       : 기존 메뉴의 구조까지 seed 기준으로 덮어씀
  insert-only : 없는 메뉴만 추가, 기존 메뉴는 건드리지 않음

기존 메뉴는 code 로 먼저 찾고, 없으면 path 로 찾는다.
"""
import logging
from dataclasses import dataclass, field
from itertools import count

from django.db import transaction

from utils.exceptions import ValidationException
from .menu_seed import MENU_TREE
from .models import Menu
from .services import compute_menu_levels

logger = logging.getLogger(__name__)

SYNC_MODES = ("patch", "force", "insert-only")


@dataclass
class MenuSyncResult:
    mode: str
    created: list = field(default_factory=list)
    updated: list = field(default_factory=list)
    skipped: list = field(default_factory=list)
    removed: list = field(default_factory=list)

    @property
    def synced(self):
        return len(self.created) + len(self.updated) + len(self.skipped)


def _normalize_menu_type(value):
    value = (value or Menu.MenuType.MENU).lower()
    return value if value in Menu.MenuType.values else Menu.MenuType.MENU


def _display_fields(node):
    # 구조(parent/order/level)를 제외한 표시 정보
    return {
        "title": node["title"],
        "path": node.get("path"),
        "component": node.get("component"),
        "icon": node.get("icon"),
        "menu_type": _normalize_menu_type(node.get("menu_type")),
        "is_hidden": bool(node.get("is_hidden", False)),
        "is_active": not node.get("is_disabled", False),
        "is_system": bool(node.get("is_system", False)),
        "permission_code": node.get("permission_code"),
        "redirect": node.get("redirect"),
        "meta": node.get("meta"),
    }


@transaction.atomic
def sync_menus(tree=None, mode="patch", remove_orphans=False):
    if mode not in SYNC_MODES:
        raise ValidationException(
            f"지원하지 않는 동기화 모드입니다: {mode}",
            field="mode",
            detail={"allowed": list(SYNC_MODES)},
        )
    tree = MENU_TREE if tree is None else tree

    existing = list(Menu.objects.all())
    by_code = {menu.code: menu for menu in existing}
    by_path = {menu.path: menu for menu in existing if menu.path}

    result = MenuSyncResult(mode=mode)
    seen_ids = set()
    auto_order = count(1)

    def upsert(node, parent):
        code = node["code"]
        path = node.get("path")
        menu = by_code.get(code) or (by_path.get(path) if path else None)

        fields = _display_fields(node)
        order = node["order"] if node.get("order") is not None else next(auto_order)

        if menu is None:
            menu = Menu.objects.create(
                code=code,
                parent=parent,
                order=order,
                level=parent.level + 1 if parent else 1,
                **fields,
            )
            result.created.append(code)
        elif mode == "insert-only":
            result.skipped.append(code)
        else:
            menu.code = code
            for name, value in fields.items():
                setattr(menu, name, value)
            if mode == "force":
                menu.parent = parent
                menu.order = order
            menu.save()
            result.updated.append(code)

        seen_ids.add(menu.id)
        by_code[menu.code] = menu
        if menu.path:
            by_path[menu.path] = menu
        return menu

    def walk(nodes, parent):
        for node in sorted(nodes, key=lambda n: n.get("order") or 0):
            menu = upsert(node, parent)
            if node.get("children"):
                walk(node["children"], menu)

    walk(tree, None)

    if remove_orphans:
        orphans = [menu for menu in existing if menu.id not in seen_ids]
        orphan_ids = {menu.id for menu in orphans}
        # 유지되는 메뉴가 삭제 대상 아래에 있으면 루트로 올림
        Menu.objects.filter(id__in=seen_ids, parent_id__in=orphan_ids).update(parent=None)
        Menu.objects.filter(id__in=orphan_ids).delete()
        result.removed = sorted(menu.code for menu in orphans)

    _refresh_levels()

    logger.info(
        f"메뉴 동기화 완료 (mode={mode}): 추가 {len(result.created)}, "
        f"갱신 {len(result.updated)}, 유지 {len(result.skipped)}, 삭제 {len(result.removed)}"
    )
    return result


def _refresh_levels():
    menus = list(Menu.objects.all())
    levels = compute_menu_levels({menu.id: menu.parent_id for menu in menus})

    changed = []
    for menu in menus:
        if menu.level != levels[menu.id]:
            menu.level = levels[menu.id]
            changed.append(menu)
    if changed:
        Menu.objects.bulk_update(changed, ["level"])
