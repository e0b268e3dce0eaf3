import copy
import itertools
from io import StringIO
from types import SimpleNamespace
from unittest import mock

from django.core.management import call_command
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from apps.accounts.models import User, Role, UserRole, RolePermission
from utils.exceptions import (
    DataIntegrityException,
    ResourceNotFoundException,
    UpstreamUnavailableException,
    ValidationException,
)
from .directory import MenuDirectory, UserIdentity, effective_enabled_states
from .menu_seed import MENU_TREE
from .menu_sync import sync_menus
from .models import Menu, UserMenuOverride
from .services import (
    PermissionResolver,
    PermissionSource,
    batch_update_menu_order,
    check_menu_permission,
    compute_menu_levels,
    get_user_menu_tree,
    remove_user_menu_override,
    resolve_permissions,
    set_user_menu_override,
)
from .utils import build_menu_tree


def node(menu_id, parent_id=None, order=0, **extra):
    return {"id": menu_id, "parent_id": parent_id, "order": order, "title": f"menu-{menu_id}", **extra}


def shape(tree):
    """트리 → (id, [자식 shape]) 형태 (구조 비교용)"""
    return [(item["id"], shape(item["children"])) for item in tree]


class FakeDirectory:
    """인메모리 조회 객체 (MenuDirectory 와 같은 메서드)"""

    def __init__(self, users, menus, memberships=None, grants=None, overrides=None, disabled_menu_ids=()):
        self.users = users
        self.menus = menus
        self.disabled_menu_ids = set(disabled_menu_ids)
        self.memberships = memberships or {}
        self.grants = grants or {}
        self.overrides = overrides or {}
        self.calls = []

    def get_user(self, user_id):
        self.calls.append("get_user")
        if user_id not in self.users:
            raise ResourceNotFoundException("사용자를 찾을 수 없습니다.")
        return UserIdentity(id=user_id, is_platform_admin=self.users[user_id])

    def get_active_role_ids_for_user(self, user_id):
        self.calls.append("get_active_role_ids_for_user")
        return set(self.memberships.get(user_id, ()))

    def get_menu_ids_granted_to_roles(self, role_ids):
        self.calls.append("get_menu_ids_granted_to_roles")
        return set().union(*(self.grants.get(role_id, ()) for role_id in role_ids))

    def get_user_overrides(self, user_id):
        self.calls.append("get_user_overrides")
        return dict(self.overrides.get(user_id, {}))

    def get_enabled_menus(self):
        self.calls.append("get_enabled_menus")
        return [dict(menu) for menu in self.menus]

    def menu_exists(self, menu_id):
        self.calls.append("menu_exists")
        return menu_id in self.disabled_menu_ids or any(menu["id"] == menu_id for menu in self.menus)


# ========== 메뉴 트리 ==========

class BuildMenuTreeTest(SimpleTestCase):
    """평면 목록 → 트리 변환 테스트"""

    def test_children_sorted_by_order(self):
        """형제는 order 오름차순 (3 이 2 보다 먼저)"""
        nodes = [node(1, None, 1), node(2, 1, 2), node(3, 1, 1)]

        self.assertEqual(shape(build_menu_tree(nodes)), [(1, [(3, []), (2, [])])])

    def test_orphan_promoted_to_root(self):
        """부모가 입력에 없으면 루트로 승격"""
        tree = build_menu_tree([node(5, 3)])

        self.assertEqual(len(tree), 1)
        self.assertEqual(tree[0]["id"], 5)
        self.assertEqual(tree[0]["children"], [])

    def test_input_order_does_not_change_result(self):
        nodes = [node(1, None, 2), node(2, None, 1), node(3, 1, 1), node(4, 1, 1), node(5, 3, 0)]
        expected = shape(build_menu_tree(nodes))

        for permutation in itertools.permutations(nodes):
            self.assertEqual(shape(build_menu_tree(list(permutation))), expected)

        self.assertEqual(expected, [(2, []), (1, [(3, [(5, [])]), (4, [])])])

    def test_same_order_sorted_by_id(self):
        nodes = [node(9, None, 1), node(4, None, 1), node(7, None, 1)]

        self.assertEqual([item["id"] for item in build_menu_tree(nodes)], [4, 7, 9])

    def test_missing_order_sorted_last(self):
        nodes = [node(1, None, None), node(2, None, 5), node(3, None, -1)]

        self.assertEqual([item["id"] for item in build_menu_tree(nodes)], [3, 2, 1])

    def test_input_not_mutated(self):
        nodes = [node(1), node(2, 1), node(3, 2)]
        before = copy.deepcopy(nodes)

        build_menu_tree(nodes)

        self.assertEqual(nodes, before)
        self.assertNotIn("children", nodes[0])

    def test_empty_input(self):
        self.assertEqual(build_menu_tree([]), [])

    def test_cycle_raises_data_integrity(self):
        nodes = [node(1, 2), node(2, 1), node(3)]

        with self.assertRaises(DataIntegrityException) as ctx:
            build_menu_tree(nodes)
        self.assertEqual(ctx.exception.detail_info, {"menu_ids": [1, 2]})

    def test_self_parent_raises_data_integrity(self):
        with self.assertRaises(DataIntegrityException):
            build_menu_tree([node(1), node(4, 4)])

    def test_depth_limit(self):
        chain = [node(1)] + [node(i, i - 1) for i in range(2, 6)]

        self.assertEqual(len(build_menu_tree(chain, max_depth=5)), 1)
        with self.assertRaises(DataIntegrityException):
            build_menu_tree(chain, max_depth=4)

    @override_settings(MENU_TREE_MAX_DEPTH=2)
    def test_depth_limit_from_settings(self):
        with self.assertRaises(DataIntegrityException):
            build_menu_tree([node(1), node(2, 1), node(3, 2)])

    def test_duplicate_id_raises(self):
        with self.assertRaises(DataIntegrityException):
            build_menu_tree([node(1), node(1)])


class EffectiveEnabledStatesTest(SimpleTestCase):
    """상위 메뉴 비활성 → 하위 메뉴도 비활성"""

    def menu(self, menu_id, parent_id=None, is_active=True):
        return SimpleNamespace(id=menu_id, parent_id=parent_id, is_active=is_active)

    def test_disabled_ancestor_disables_subtree(self):
        menus = [
            self.menu(1),
            self.menu(2, 1, is_active=False),
            self.menu(3, 2),
            self.menu(4, 3),
            self.menu(5, 1),
        ]

        state = effective_enabled_states(menus)

        self.assertEqual(state, {1: True, 2: False, 3: False, 4: False, 5: True})

    def test_cycle_raises(self):
        with self.assertRaises(DataIntegrityException):
            effective_enabled_states([self.menu(1, 2), self.menu(2, 1)], max_depth=10)


# ========== 권한 계산 ==========

class PermissionResolverTest(SimpleTestCase):
    """우선순위 테스트 (인메모리 조회 객체 사용)"""

    def setUp(self):
        self.menus = [node(1), node(2), node(3), node(4)]
        self.directory = FakeDirectory(
            users={10: False, 20: True},
            menus=self.menus,
            memberships={10: {100}},
            grants={100: {1, 2}},
            overrides={
                10: {2: "deny", 3: "grant"},
                20: {1: "deny"},
            },
        )

    def resolve(self, user_id):
        return {
            p.menu_id: (p.has_permission, p.source)
            for p in PermissionResolver(self.directory).resolve(user_id)
        }

    def test_end_to_end_scenario(self):
        """역할 허용 1,2 + 2 거부 + 3 사용자 허용"""
        self.assertEqual(self.resolve(10), {
            1: (True, PermissionSource.ROLE),
            2: (False, PermissionSource.DENY),
            3: (True, PermissionSource.USER),
            4: (False, PermissionSource.NONE),
        })

    def test_admin_gets_every_menu(self):
        result = self.resolve(20)

        self.assertEqual(set(result), {1, 2, 3, 4})
        for has_permission, source in result.values():
            self.assertTrue(has_permission)
            self.assertEqual(source, PermissionSource.ADMIN)

    def test_admin_skips_role_and_override_lookups(self):
        self.resolve(20)

        self.assertEqual(self.directory.calls, ["get_user", "get_enabled_menus"])

    def test_permission_is_or_of_roles(self):
        self.directory.memberships[10] = {100, 200}
        self.directory.grants[200] = {4}

        result = self.resolve(10)

        self.assertEqual(result[4], (True, PermissionSource.ROLE))
        self.assertEqual(result[1], (True, PermissionSource.ROLE))

    def test_no_roles(self):
        self.directory.memberships = {}
        self.directory.overrides = {}

        result = self.resolve(10)

        self.assertTrue(all(value == (False, PermissionSource.NONE) for value in result.values()))

    def test_only_enabled_menus_returned(self):
        self.directory.menus = [node(1), node(3)]

        self.assertEqual(set(self.resolve(10)), {1, 3})

    def test_invalid_user_id(self):
        for value in ["10", 0, -1, True, None, 1.5]:
            with self.subTest(value=value):
                with self.assertRaises(ValidationException):
                    PermissionResolver(self.directory).resolve(value)
        self.assertEqual(self.directory.calls, [])

    def test_unknown_user(self):
        with self.assertRaises(ResourceNotFoundException):
            self.resolve(999)

    def test_upstream_failure_propagates(self):
        self.directory.get_enabled_menus = mock.Mock(side_effect=UpstreamUnavailableException())

        with self.assertRaises(UpstreamUnavailableException):
            self.resolve(10)

    def test_as_dict(self):
        permission = PermissionResolver(self.directory).resolve(10)[0]

        self.assertEqual(permission.as_dict(), {
            **self.menus[0],
            "has_permission": True,
            "source": "role",
        })

    def test_user_menu_tree_keeps_permitted_only(self):
        self.directory.menus = [node(1), node(2, 1), node(3, 1, 1), node(4, 3)]

        tree = get_user_menu_tree(10, directory=self.directory)

        # 2 거부, 4 권한 없음
        self.assertEqual(shape(tree), [(1, [(3, [])])])

    def test_check_menu_permission_reads_through_directory(self):
        self.directory.disabled_menu_ids = {9}

        self.assertFalse(check_menu_permission(10, 2, directory=self.directory))
        self.assertFalse(check_menu_permission(10, 9, directory=self.directory))
        with self.assertRaises(ResourceNotFoundException):
            check_menu_permission(10, 99, directory=self.directory)
        self.assertIn("menu_exists", self.directory.calls)


class MenuDirectoryTest(TestCase):
    """ORM 조회 테스트"""

    def setUp(self):
        self.user = User.objects.create_user(login_id="student1", password="testpass123", name="학생")
        self.active_role = Role.objects.create(code="STUDENT", name="학생")
        self.inactive_role = Role.objects.create(code="OLD", name="사용 안 함", is_active=False)
        UserRole.objects.create(user=self.user, role=self.active_role)
        UserRole.objects.create(user=self.user, role=self.inactive_role)

        self.root = Menu.objects.create(code="root", title="루트", order=1)
        self.disabled = Menu.objects.create(code="disabled", title="비활성", parent=self.root, is_active=False)
        self.under_disabled = Menu.objects.create(code="under", title="하위", parent=self.disabled, level=3)

        RolePermission.objects.create(role=self.active_role, menu=self.root)
        RolePermission.objects.create(role=self.inactive_role, menu=self.under_disabled)

        self.directory = MenuDirectory()

    def test_get_user(self):
        identity = self.directory.get_user(self.user.id)

        self.assertEqual(identity, UserIdentity(id=self.user.id, is_platform_admin=False))

    def test_get_user_not_found(self):
        with self.assertRaises(ResourceNotFoundException):
            self.directory.get_user(99999)

    def test_inactive_roles_excluded(self):
        self.assertEqual(self.directory.get_active_role_ids_for_user(self.user.id), {self.active_role.id})

    def test_grants_for_no_roles(self):
        self.assertEqual(self.directory.get_menu_ids_granted_to_roles(set()), set())

    def test_enabled_menus_exclude_disabled_subtree(self):
        ids = [menu["id"] for menu in self.directory.get_enabled_menus()]

        self.assertEqual(ids, [self.root.id])

    def test_database_error_becomes_upstream_unavailable(self):
        with mock.patch("apps.menus.directory.Menu") as menu_model:
            menu_model.objects.order_by.side_effect = DatabaseError("connection lost")

            with self.assertRaises(UpstreamUnavailableException):
                self.directory.get_enabled_menus()

    def test_menu_exists_includes_disabled(self):
        self.assertTrue(self.directory.menu_exists(self.disabled.id))
        self.assertFalse(self.directory.menu_exists(99999))

    def test_menu_exists_database_error(self):
        with mock.patch("apps.menus.directory.Menu") as menu_model:
            menu_model.objects.filter.side_effect = DatabaseError("connection lost")

            with self.assertRaises(UpstreamUnavailableException):
                self.directory.menu_exists(1)


class ResolvePermissionsIntegrationTest(TestCase):
    """DB 기반 권한 계산 테스트"""

    def setUp(self):
        self.user = User.objects.create_user(login_id="user1", password="testpass123", name="사용자")
        self.admin = User.objects.create_superuser(login_id="admin", password="testpass123", name="관리자")
        self.role = Role.objects.create(code="TEACHER", name="교사")
        UserRole.objects.create(user=self.user, role=self.role)

        self.menu1 = Menu.objects.create(code="m1", title="메뉴1", order=1)
        self.menu2 = Menu.objects.create(code="m2", title="메뉴2", order=2)
        self.menu3 = Menu.objects.create(code="m3", title="메뉴3", order=3)
        self.menu4 = Menu.objects.create(code="m4", title="메뉴4", order=4)
        self.disabled = Menu.objects.create(code="off", title="비활성", order=5, is_active=False)

        for menu in (self.menu1, self.menu2, self.disabled):
            RolePermission.objects.create(role=self.role, menu=menu)

        UserMenuOverride.objects.create(user=self.user, menu=self.menu2, permission_type="deny")
        UserMenuOverride.objects.create(user=self.user, menu=self.menu3, permission_type="grant")

    def test_end_to_end(self):
        result = {p.menu_id: (p.has_permission, p.source) for p in resolve_permissions(self.user.id)}

        self.assertEqual(result, {
            self.menu1.id: (True, "role"),
            self.menu2.id: (False, "deny"),
            self.menu3.id: (True, "user"),
            self.menu4.id: (False, "none"),
        })

    def test_admin_beats_deny(self):
        UserMenuOverride.objects.create(user=self.admin, menu=self.menu1, permission_type="deny")

        result = {p.menu_id: (p.has_permission, p.source) for p in resolve_permissions(self.admin.id)}

        self.assertEqual(result[self.menu1.id], (True, "admin"))
        self.assertNotIn(self.disabled.id, result)

    def test_disabled_role_grants_nothing(self):
        self.role.is_active = False
        self.role.save()

        result = {p.menu_id: p.source for p in resolve_permissions(self.user.id)}

        self.assertEqual(result[self.menu1.id], "none")
        self.assertEqual(result[self.menu3.id], "user")

    def test_user_menu_tree(self):
        tree = get_user_menu_tree(self.user.id)

        self.assertEqual([item["id"] for item in tree], [self.menu1.id, self.menu3.id])

    def test_check_menu_permission_uses_same_precedence(self):
        self.assertTrue(check_menu_permission(self.user.id, self.menu1.id))
        # 역할 권한이 있어도 deny 가 우선
        self.assertFalse(check_menu_permission(self.user.id, self.menu2.id))
        self.assertTrue(check_menu_permission(self.user.id, self.menu3.id))
        self.assertFalse(check_menu_permission(self.user.id, self.menu4.id))

    def test_check_menu_permission_disabled_menu(self):
        self.assertFalse(check_menu_permission(self.user.id, self.disabled.id))

    def test_check_menu_permission_unknown_menu(self):
        with self.assertRaises(ResourceNotFoundException):
            check_menu_permission(self.user.id, 99999)


# ========== 사용자 예외 권한 ==========

class UserMenuOverrideServiceTest(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(login_id="user1", password="testpass123", name="사용자")
        self.menu = Menu.objects.create(code="m1", title="메뉴1")

    def test_set_creates_then_updates(self):
        override, created = set_user_menu_override(self.user.id, self.menu.id, "grant")
        self.assertTrue(created)

        override, created = set_user_menu_override(self.user.id, self.menu.id, "deny")
        self.assertFalse(created)
        self.assertEqual(override.permission_type, "deny")
        self.assertEqual(UserMenuOverride.objects.count(), 1)

    def test_set_invalid_type(self):
        with self.assertRaises(ValidationException) as ctx:
            set_user_menu_override(self.user.id, self.menu.id, "allow")
        self.assertEqual(ctx.exception.field, "permission_type")

    def test_set_unknown_user_or_menu(self):
        with self.assertRaises(ResourceNotFoundException):
            set_user_menu_override(99999, self.menu.id, "grant")
        with self.assertRaises(ResourceNotFoundException):
            set_user_menu_override(self.user.id, 99999, "grant")

    def test_remove(self):
        set_user_menu_override(self.user.id, self.menu.id, "grant")

        remove_user_menu_override(self.user.id, self.menu.id)

        self.assertFalse(UserMenuOverride.objects.exists())
        with self.assertRaises(ResourceNotFoundException):
            remove_user_menu_override(self.user.id, self.menu.id)

    def test_notifies_after_commit(self):
        with mock.patch("apps.accounts.services.permission_service.notify_permission_changed") as notify:
            with self.captureOnCommitCallbacks(execute=True):
                set_user_menu_override(self.user.id, self.menu.id, "deny")

        notify.assert_called_once_with(self.user.id)

    def test_no_notification_on_failure(self):
        with mock.patch("apps.accounts.services.permission_service.notify_permission_changed") as notify:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                with self.assertRaises(ValidationException):
                    set_user_menu_override(self.user.id, self.menu.id, "maybe")

        self.assertEqual(callbacks, [])
        notify.assert_not_called()


# ========== 메뉴 정렬 / 이동 ==========

class BatchUpdateMenuOrderTest(TestCase):

    def setUp(self):
        self.a = Menu.objects.create(code="a", title="A", order=1, level=1)
        self.b = Menu.objects.create(code="b", title="B", order=1, parent=self.a, level=2)
        self.c = Menu.objects.create(code="c", title="C", order=1, parent=self.b, level=3)
        self.d = Menu.objects.create(code="d", title="D", order=2, level=1)

    def test_reorder_and_move(self):
        updated = batch_update_menu_order([
            {"id": self.d.id, "parent_id": self.c.id, "order": 5},
            {"id": self.a.id, "order": 9},
        ])

        self.d.refresh_from_db()
        self.a.refresh_from_db()
        self.assertEqual(updated, 2)
        self.assertEqual(self.d.parent_id, self.c.id)
        self.assertEqual(self.d.order, 5)
        self.assertEqual(self.d.level, 4)
        self.assertEqual(self.a.order, 9)

    def test_move_to_root_recomputes_subtree_levels(self):
        batch_update_menu_order([{"id": self.b.id, "parent_id": None}])

        self.b.refresh_from_db()
        self.c.refresh_from_db()
        self.assertIsNone(self.b.parent_id)
        self.assertEqual(self.b.level, 1)
        self.assertEqual(self.c.level, 2)

    def test_self_parent_rejected(self):
        with self.assertRaises(ValidationException):
            batch_update_menu_order([{"id": self.a.id, "parent_id": self.a.id}])

    def test_move_under_own_descendant_rejected(self):
        with self.assertRaises(ValidationException):
            batch_update_menu_order([{"id": self.a.id, "parent_id": self.c.id}])

        self.a.refresh_from_db()
        self.assertIsNone(self.a.parent_id)

    def test_swap_creating_cycle_rejected(self):
        with self.assertRaises(ValidationException):
            batch_update_menu_order([
                {"id": self.d.id, "parent_id": self.a.id},
                {"id": self.a.id, "parent_id": self.d.id},
            ])

    def test_unknown_menu(self):
        with self.assertRaises(ResourceNotFoundException):
            batch_update_menu_order([{"id": 99999, "order": 1}])
        with self.assertRaises(ResourceNotFoundException):
            batch_update_menu_order([{"id": self.a.id, "parent_id": 99999}])

    def test_invalid_payload(self):
        for payload in [None, "a", [1], [{"id": True}], [{"id": self.a.id, "order": "1"}]]:
            with self.subTest(payload=payload):
                with self.assertRaises(ValidationException):
                    batch_update_menu_order(payload)

    def test_empty_updates(self):
        self.assertEqual(batch_update_menu_order([]), 0)

    def test_chain_beyond_depth_limit_rejected(self):
        chain = [Menu.objects.create(code=f"chain-{i}", title=f"체인{i}", order=i) for i in range(70)]
        updates = [
            {"id": child.id, "parent_id": parent.id}
            for parent, child in zip(chain, chain[1:])
        ]

        with self.assertRaises(ValidationException):
            batch_update_menu_order(updates)

        self.assertFalse(Menu.objects.filter(code__startswith="chain-", parent__isnull=False).exists())
        self.assertEqual(
            set(Menu.objects.filter(code__startswith="chain-").values_list("level", flat=True)),
            {1},
        )

    @override_settings(MENU_TREE_MAX_DEPTH=3)
    def test_depth_limit_from_settings(self):
        # c 가 3단계이므로 그 아래는 4단계
        with self.assertRaises(ValidationException):
            batch_update_menu_order([{"id": self.d.id, "parent_id": self.c.id}])

        self.d.refresh_from_db()
        self.assertIsNone(self.d.parent_id)


class ComputeMenuLevelsTest(SimpleTestCase):

    def chain(self, length):
        return {menu_id: (menu_id - 1 if menu_id > 1 else None) for menu_id in range(1, length + 1)}

    def test_levels(self):
        self.assertEqual(compute_menu_levels({3: 2, 2: 1, 1: None, 4: None}), {1: 1, 2: 2, 3: 3, 4: 1})

    def test_parent_first_chain_over_limit(self):
        with self.assertRaises(ValidationException):
            compute_menu_levels(self.chain(70), max_depth=64)

    def test_child_first_chain_over_limit(self):
        parents = dict(reversed(list(self.chain(70).items())))

        with self.assertRaises(ValidationException):
            compute_menu_levels(parents, max_depth=64)

    def test_chain_at_limit(self):
        levels = compute_menu_levels(self.chain(64), max_depth=64)

        self.assertEqual(max(levels.values()), 64)


# ========== 메뉴 동기화 ==========

def seed_codes(nodes):
    codes = []
    for item in nodes:
        codes.append(item["code"])
        codes.extend(seed_codes(item.get("children", [])))
    return codes


class SyncMenusCommandTest(TestCase):

    def sync(self, *args):
        out = StringIO()
        call_command("sync_menus", *args, stdout=out)
        return out.getvalue()

    def test_initial_sync_creates_seed_tree(self):
        output = self.sync()

        self.assertEqual(
            set(Menu.objects.values_list("code", flat=True)),
            set(seed_codes(MENU_TREE)),
        )
        task_my = Menu.objects.get(code="task-my")
        self.assertEqual(task_my.parent.code, "system-tasks")
        self.assertEqual(task_my.level, 3)
        self.assertIn("메뉴 동기화 완료", output)

    def test_patch_keeps_structure_but_refreshes_display(self):
        self.sync()
        Menu.objects.filter(code="exam-list").update(parent=None, order=99, title="수정됨")

        self.sync("--mode", "patch")

        menu = Menu.objects.get(code="exam-list")
        self.assertIsNone(menu.parent_id)
        self.assertEqual(menu.order, 99)
        self.assertEqual(menu.level, 1)
        self.assertEqual(menu.title, "시험 목록")

    def test_force_restores_structure(self):
        self.sync()
        Menu.objects.filter(code="exam-list").update(parent=None, order=99)

        self.sync("--mode", "force")

        menu = Menu.objects.get(code="exam-list")
        self.assertEqual(menu.parent.code, "exam")
        self.assertEqual(menu.order, 2)
        self.assertEqual(menu.level, 2)

    def test_insert_only_leaves_existing_rows(self):
        self.sync()
        Menu.objects.filter(code="profile").update(title="수정됨")
        Menu.objects.filter(code="analytics").delete()

        self.sync("--mode", "insert-only")

        self.assertEqual(Menu.objects.get(code="profile").title, "수정됨")
        self.assertTrue(Menu.objects.filter(code="analytics").exists())

    def test_matches_existing_menu_by_path(self):
        legacy = Menu.objects.create(code="old-dashboard", title="옛 대시보드", path="/dashboard")

        self.sync()

        legacy.refresh_from_db()
        self.assertEqual(legacy.code, "dashboard")
        self.assertEqual(Menu.objects.filter(path="/dashboard").count(), 1)

    def test_remove_orphans(self):
        Menu.objects.create(code="legacy", title="레거시")

        self.sync()
        self.assertTrue(Menu.objects.filter(code="legacy").exists())

        self.sync("--remove-orphans")
        self.assertFalse(Menu.objects.filter(code="legacy").exists())

    def test_with_roles(self):
        self.sync("--with-roles")

        self.assertEqual(
            set(Role.objects.values_list("code", flat=True)),
            {"SUPER_ADMIN", "ADMIN", "TEACHER", "STUDENT"},
        )

    def test_invalid_mode(self):
        with self.assertRaises(ValidationException):
            sync_menus(mode="overwrite")


# ========== API ==========

class MenuAPITest(APITestCase):
    """메뉴 / 사용자 메뉴 권한 API 테스트"""

    def setUp(self):
        self.admin = User.objects.create_superuser(login_id="admin", password="testpass123", name="관리자")
        self.user = User.objects.create_user(login_id="user1", password="testpass123", name="사용자")
        self.other = User.objects.create_user(login_id="user2", password="testpass123", name="다른 사용자")

        self.role = Role.objects.create(code="STUDENT", name="학생")
        UserRole.objects.create(user=self.user, role=self.role)

        self.menu1 = Menu.objects.create(code="m1", title="메뉴1", order=1)
        self.menu2 = Menu.objects.create(code="m2", title="메뉴2", order=2)
        self.menu3 = Menu.objects.create(code="m3", title="메뉴3", order=3, parent=self.menu1, level=2)
        self.disabled = Menu.objects.create(code="off", title="비활성", order=4, is_active=False)

        RolePermission.objects.create(role=self.role, menu=self.menu1)
        RolePermission.objects.create(role=self.role, menu=self.menu2)
        UserMenuOverride.objects.create(user=self.user, menu=self.menu2, permission_type="deny")
        UserMenuOverride.objects.create(user=self.user, menu=self.menu3, permission_type="grant")

    def permission_url(self, user_id, menu_id):
        return f"/api/users/{user_id}/menus/{menu_id}/permission/"

    def test_unauthenticated(self):
        response = self.client.get("/api/menus/current-user/")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["error"]["code"], "ERR_001")

    def test_current_user_menu_tree(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get("/api/menus/current-user/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(shape(response.data["data"]), [(self.menu1.id, [(self.menu3.id, [])])])

    def test_self_permissions(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get(f"/api/users/{self.user.id}/permissions/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        result = {item["id"]: item["source"] for item in response.data["data"]}
        self.assertEqual(result, {
            self.menu1.id: "role",
            self.menu2.id: "deny",
            self.menu3.id: "user",
        })

    def test_permission_item_shape(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get(f"/api/users/{self.user.id}/permissions/")

        item = next(i for i in response.data["data"] if i["id"] == self.menu3.id)
        self.assertEqual(item["code"], "m3")
        self.assertEqual(item["parent_id"], self.menu1.id)
        self.assertEqual(item["level"], 2)
        self.assertEqual(item["menu_type"], Menu.MenuType.MENU)
        self.assertTrue(item["has_permission"])
        self.assertEqual(item["source"], "user")

    def test_self_with_zero_padded_id(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get(f"/api/users/00{self.user.id}/permissions/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["data"]), 3)

    def test_self_invalid_user_id(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get("/api/users/abc/menus/")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["field"], "user_id")

    def test_other_user_permissions_forbidden(self):
        self.client.force_authenticate(user=self.other)

        response = self.client.get(f"/api/users/{self.user.id}/permissions/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["error"]["code"], "ERR_002")

    def test_admin_reads_any_user(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(f"/api/users/{self.user.id}/menus/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(shape(response.data["data"]), [(self.menu1.id, [(self.menu3.id, [])])])

    def test_invalid_user_id(self):
        self.client.force_authenticate(user=self.admin)

        for value in ["abc", "0", "-1"]:
            with self.subTest(value=value):
                response = self.client.get(f"/api/users/{value}/permissions/")
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.data["error"]["code"], "ERR_101")
                self.assertEqual(response.data["error"]["field"], "user_id")

    def test_unknown_user(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/users/99999/permissions/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["error"]["code"], "ERR_201")

    def test_corrupted_tree_returns_500(self):
        Menu.objects.filter(pk=self.menu1.pk).update(parent=self.menu3)
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(f"/api/users/{self.user.id}/menus/")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"]["code"], "ERR_601")

    def test_check_single_menu(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get(self.permission_url(self.user.id, self.menu2.id))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["data"]["has_permission"])

    def test_set_and_remove_override(self):
        self.client.force_authenticate(user=self.admin)
        url = self.permission_url(self.other.id, self.menu1.id)

        response = self.client.post(url, {"permission_type": "grant"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post(url, {"permission_type": "deny"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["permission_type"], "deny")

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_set_override_invalid_type(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            self.permission_url(self.other.id, self.menu1.id),
            {"permission_type": "allow"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["field"], "permission_type")

    def test_set_override_requires_admin(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post(
            self.permission_url(self.user.id, self.menu2.id),
            {"permission_type": "grant"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_route_tree(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get("/api/menus/route-tree/")

        self.assertEqual(
            shape(response.data["data"]),
            [(self.menu1.id, [(self.menu3.id, [])]), (self.menu2.id, [])],
        )

    def test_full_tree_includes_disabled(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/menus/tree/")

        disabled = [item for item in response.data["data"] if item["id"] == self.disabled.id]
        self.assertEqual(len(disabled), 1)
        self.assertFalse(disabled[0]["is_active"])

    def test_full_tree_requires_admin(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get("/api/menus/tree/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_batch_sort(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/menus/batch-sort/",
            {"menuUpdates": [{"id": self.menu2.id, "parent_id": self.menu3.id, "order": 1}]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.menu2.refresh_from_db()
        self.assertEqual(self.menu2.parent_id, self.menu3.id)
        self.assertEqual(self.menu2.level, 3)

    def test_batch_sort_cycle_rejected(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/menus/batch-sort/",
            {"menuUpdates": [{"id": self.menu1.id, "parent_id": self.menu3.id}]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])

    @override_settings(MENU_TREE_MAX_DEPTH=2)
    def test_batch_sort_too_deep_rejected(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/menus/batch-sort/",
            {"menuUpdates": [{"id": self.menu2.id, "parent_id": self.menu3.id}]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "ERR_101")
        self.menu2.refresh_from_db()
        self.assertIsNone(self.menu2.parent_id)

        # 저장된 트리는 그대로 조회 가능
        response = self.client.get("/api/menus/route-tree/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_health_check(self):
        response = self.client.get("/health/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["database"], "connected")
