from collections import defaultdict

from django.conf import settings

from utils.exceptions import DataIntegrityException

# 메뉴 계층 최대 깊이 (초과 시 손상된 데이터로 간주)
MAX_MENU_DEPTH = 64


def menu_to_node(menu):
    """Menu 모델 → 트리/권한 응답용 dict"""
    return {
        "id": menu.id,      # 숫자 PK
        "code": menu.code,  # 문자열 코드도 내려주면 프론트에서 쓰기 편함
        "title": menu.title,
        "path": menu.path,
        "component": menu.component,
        "icon": menu.icon,
        "parent_id": menu.parent_id,
        "order": menu.order,
        "level": menu.level,
        "menu_type": menu.menu_type,
        "is_hidden": menu.is_hidden,
        "permission_code": menu.permission_code,
        "redirect": menu.redirect,
        "meta": menu.meta,
    }


def get_max_menu_depth():
    return getattr(settings, "MENU_TREE_MAX_DEPTH", MAX_MENU_DEPTH)


def _sibling_key(node):
    # order 오름차순, 동률이면 id 오름차순 (order 없는 노드는 맨 뒤)
    order = node.get("order")
    return (order is None, order or 0, node["id"])


def build_menu_tree(nodes, max_depth=None):
    """
    평면 메뉴 목록 → 트리

    - 부모가 입력에 없는 노드(부모 권한 없음)는 루트로 승격
    - 형제 노드는 (order, id) 순으로 정렬되므로 입력 순서와 무관하게 같은 결과
    - 순환 참조 또는 max_depth 초과 시 DataIntegrityException
    - 입력 dict 는 수정하지 않음 (얕은 복사 후 children 부여)
    """
    if max_depth is None:
        max_depth = get_max_menu_depth()

    menu_map = {}

    # 모든 메뉴 노드 생성
    for node in nodes:
        menu_id = node["id"]
        if menu_id in menu_map:
            raise DataIntegrityException(
                f"중복된 메뉴 ID가 있습니다: {menu_id}",
                detail={"menu_id": menu_id},
            )
        menu_map[menu_id] = {**node, "children": []}

    # 부모 ID → 자식 목록 인덱스 (한 번만 구성)
    children_index = defaultdict(list)
    roots = []
    for node in menu_map.values():
        parent_id = node.get("parent_id")
        if parent_id is None or parent_id not in menu_map:
            roots.append(node)
        else:
            children_index[parent_id].append(node)

    roots.sort(key=_sibling_key)

    # 루트부터 깊이 제한을 두고 순회
    visited = set()
    stack = [(node, 1) for node in roots]
    while stack:
        node, depth = stack.pop()
        if depth > max_depth:
            raise DataIntegrityException(
                f"메뉴 계층 깊이가 {max_depth}단계를 초과했습니다.",
                detail={"menu_id": node["id"]},
            )
        visited.add(node["id"])
        node["children"] = sorted(children_index.get(node["id"], ()), key=_sibling_key)
        stack.extend((child, depth + 1) for child in node["children"])

    # 루트에서 도달하지 못한 노드 = 순환 참조
    if len(visited) != len(menu_map):
        cyclic_ids = sorted(set(menu_map) - visited)
        raise DataIntegrityException(
            "메뉴 계층에 순환 참조가 있습니다.",
            detail={"menu_ids": cyclic_ids},
        )

    return roots
