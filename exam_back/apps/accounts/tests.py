from types import SimpleNamespace
from unittest import mock

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth import authenticate
from django.contrib.auth.models import AnonymousUser
from django.test import SimpleTestCase, TestCase, TransactionTestCase
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import AccessToken

from apps.common.middleware import get_user_from_token
from apps.menus.models import Menu
from utils.exceptions import (
    BusinessLogicException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from .consumers import UserPermissionConsumer
from .models import User, Role, UserRole, RolePermission, RolePermissionHistory
from .services.permission_service import notify_permission_changed
from .services.role_service import (
    assign_role_menus,
    assign_user_roles,
    ensure_role_deletable,
    get_role_menus,
    get_user_roles,
    normalize_role_ids,
    normalize_role_refs,
)


class UserModelTest(TestCase):
    """User 모델 테스트"""

    def test_superuser_is_platform_admin(self):
        admin = User.objects.create_superuser(login_id="admin", password="testpass123", name="관리자")
        user = User.objects.create_user(login_id="user1", password="testpass123", name="사용자")

        self.assertTrue(admin.is_platform_admin)
        self.assertFalse(user.is_platform_admin)

    def test_login_id_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(login_id="", password="testpass123", name="사용자")

    def test_login_backend(self):
        user = User.objects.create_user(login_id="user1", password="testpass123", name="사용자")

        self.assertEqual(authenticate(login_id="user1", password="testpass123"), user)
        self.assertIsNone(authenticate(login_id="user1", password="wrong"))
        self.assertIsNone(authenticate(login_id="nobody", password="testpass123"))

        user.is_active = False
        user.save()
        self.assertIsNone(authenticate(login_id="user1", password="testpass123"))


class NormalizeRoleRefsTest(TestCase):
    """역할 참조 정규화 테스트"""

    def setUp(self):
        self.admin_role = Role.objects.create(code="ADMIN", name="관리자", sort_order=2)
        self.teacher_role = Role.objects.create(code="TEACHER", name="교사", sort_order=3)

    def test_mixed_shapes(self):
        refs = [
            self.admin_role.id,
            str(self.teacher_role.id),
            "ADMIN",
            {"id": self.teacher_role.id},
            {"code": "TEACHER"},
            self.admin_role,
        ]

        roles = normalize_role_refs(refs)

        self.assertEqual([role.code for role in roles], ["ADMIN", "TEACHER"])
        self.assertEqual(normalize_role_ids(refs), {self.admin_role.id, self.teacher_role.id})

    def test_empty(self):
        self.assertEqual(normalize_role_refs([]), [])
        self.assertEqual(normalize_role_refs(None), [])

    def test_invalid_shapes(self):
        for refs in ["ADMIN", [True], [0], ["0"], [-3], [1.5], [""], [{}], [{"name": "ADMIN"}]]:
            with self.subTest(refs=refs):
                with self.assertRaises(ValidationException):
                    normalize_role_refs(refs)

    def test_unknown_role(self):
        with self.assertRaises(ValidationException) as ctx:
            normalize_role_refs(["ADMIN", "NOPE", 99999])

        self.assertEqual(ctx.exception.detail_info, {"missing": ["NOPE", 99999]})


class UserRoleServiceTest(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(login_id="user1", password="testpass123", name="사용자")
        self.admin_role = Role.objects.create(code="ADMIN", name="관리자", sort_order=2)
        self.teacher_role = Role.objects.create(code="TEACHER", name="교사", sort_order=3)
        self.old_role = Role.objects.create(code="OLD", name="구 역할", sort_order=9, is_active=False)

    def test_assign_replaces_roles(self):
        assign_user_roles(self.user.id, ["ADMIN", "TEACHER"])
        roles = assign_user_roles(self.user.id, [{"code": "TEACHER"}])

        self.assertEqual([role.code for role in roles], ["TEACHER"])
        self.assertEqual(
            list(UserRole.objects.filter(user=self.user).values_list("role__code", flat=True)),
            ["TEACHER"],
        )

    def test_get_user_roles_active_only(self):
        assign_user_roles(self.user.id, ["TEACHER", "OLD", "ADMIN"])

        self.assertEqual([role.code for role in get_user_roles(self.user.id)], ["ADMIN", "TEACHER"])

    def test_unknown_user(self):
        with self.assertRaises(ResourceNotFoundException):
            assign_user_roles(99999, ["ADMIN"])
        with self.assertRaises(ResourceNotFoundException):
            get_user_roles(99999)

    def test_invalid_ref_keeps_existing_roles(self):
        assign_user_roles(self.user.id, ["ADMIN"])

        with self.assertRaises(ValidationException):
            assign_user_roles(self.user.id, ["TEACHER", "NOPE"])

        self.assertEqual([role.code for role in get_user_roles(self.user.id)], ["ADMIN"])

    def test_notifies_when_changed(self):
        with mock.patch("apps.accounts.services.permission_service.notify_permission_changed") as notify:
            with self.captureOnCommitCallbacks(execute=True):
                assign_user_roles(self.user.id, ["ADMIN"])
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                assign_user_roles(self.user.id, ["ADMIN"])

        notify.assert_called_once_with(self.user.id)
        self.assertEqual(callbacks, [])


class RoleMenuServiceTest(TestCase):

    def setUp(self):
        self.operator = User.objects.create_superuser(login_id="admin", password="testpass123", name="관리자")
        self.member = User.objects.create_user(login_id="user1", password="testpass123", name="사용자")
        self.role = Role.objects.create(code="TEACHER", name="교사")
        UserRole.objects.create(user=self.member, role=self.role)

        self.menu1 = Menu.objects.create(code="m1", title="메뉴1")
        self.menu2 = Menu.objects.create(code="m2", title="메뉴2")
        self.menu3 = Menu.objects.create(code="m3", title="메뉴3")

    def test_assign_and_history(self):
        assign_role_menus(self.role.id, [self.menu1.id, self.menu2.id], changed_by=self.operator)
        result = assign_role_menus(self.role.id, [self.menu2.id, self.menu3.id], reason="개편")

        self.assertEqual(result, {"added": [self.menu3.id], "removed": [self.menu1.id]})
        self.assertEqual(get_role_menus(self.role.id), [self.menu2.id, self.menu3.id])

        actions = sorted(
            RolePermissionHistory.objects.filter(role=self.role).values_list("menu_id", "action")
        )
        self.assertEqual(actions, sorted([
            (self.menu1.id, "ADD"),
            (self.menu2.id, "ADD"),
            (self.menu3.id, "ADD"),
            (self.menu1.id, "REMOVE"),
        ]))
        self.assertEqual(
            RolePermissionHistory.objects.filter(changed_by=self.operator).count(),
            2,
        )

    def test_unknown_menu_rolls_back(self):
        assign_role_menus(self.role.id, [self.menu1.id])

        with self.assertRaises(ValidationException):
            assign_role_menus(self.role.id, [self.menu2.id, 99999])

        self.assertEqual(get_role_menus(self.role.id), [self.menu1.id])

    def test_invalid_input(self):
        with self.assertRaises(ValidationException):
            assign_role_menus(self.role.id, "1,2")
        with self.assertRaises(ValidationException):
            assign_role_menus(self.role.id, ["1"])
        with self.assertRaises(ResourceNotFoundException):
            assign_role_menus(99999, [])

    def test_notifies_role_members(self):
        with mock.patch("apps.accounts.services.permission_service.notify_permission_changed") as notify:
            with self.captureOnCommitCallbacks(execute=True):
                assign_role_menus(self.role.id, [self.menu1.id])

        notify.assert_called_once_with(self.member.id)


class RoleDeleteGuardTest(TestCase):

    def test_system_role(self):
        role = Role.objects.create(code="ADMIN", name="관리자", is_system=True)

        with self.assertRaises(BusinessLogicException):
            ensure_role_deletable(role)

    def test_role_in_use(self):
        role = Role.objects.create(code="TEACHER", name="교사")
        user = User.objects.create_user(login_id="user1", password="testpass123", name="사용자")
        UserRole.objects.create(user=user, role=role)

        with self.assertRaises(ConflictException):
            ensure_role_deletable(role)


class NotifyPermissionChangedTest(SimpleTestCase):

    def test_sends_group_event(self):
        layer = mock.Mock()
        layer.group_send = mock.AsyncMock()

        with mock.patch("apps.accounts.services.permission_service.get_channel_layer", return_value=layer):
            notify_permission_changed(7)

        layer.group_send.assert_awaited_once_with("user_7", {"type": "permission_changed"})

    def test_send_failure_is_logged(self):
        layer = mock.Mock()
        layer.group_send = mock.AsyncMock(side_effect=ConnectionError("redis down"))

        with mock.patch("apps.accounts.services.permission_service.get_channel_layer", return_value=layer):
            with self.assertLogs("apps.accounts.services.permission_service", level="WARNING"):
                notify_permission_changed(7)


class UserPermissionConsumerTest(SimpleTestCase):
    """권한 변경 WebSocket 테스트"""

    databases = {"default"}

    async def test_forwards_permission_changed(self):
        communicator = WebsocketCommunicator(UserPermissionConsumer.as_asgi(), "/ws/user-permissions/")
        communicator.scope["user"] = SimpleNamespace(id=7, is_anonymous=False)

        connected, _ = await communicator.connect()
        self.assertTrue(connected)

        await get_channel_layer().group_send("user_7", {"type": "permission_changed"})

        message = await communicator.receive_json_from()
        self.assertEqual(message, {"type": "PERMISSION_CHANGED"})
        await communicator.disconnect()

    async def test_anonymous_rejected(self):
        communicator = WebsocketCommunicator(UserPermissionConsumer.as_asgi(), "/ws/user-permissions/")
        communicator.scope["user"] = AnonymousUser()

        connected, _ = await communicator.connect()

        self.assertFalse(connected)


class JwtAuthMiddlewareTest(TransactionTestCase):

    async def test_invalid_token(self):
        user = await get_user_from_token("not-a-token")

        self.assertTrue(user.is_anonymous)

    def test_valid_token(self):
        member = User.objects.create_user(login_id="user1", password="testpass123", name="사용자")
        token = str(AccessToken.for_user(member))

        user = async_to_sync(get_user_from_token)(token)

        self.assertEqual(user.id, member.id)


# ========== API ==========

class RoleAPITest(APITestCase):
    """역할 관리 API 테스트"""

    def setUp(self):
        self.admin = User.objects.create_superuser(login_id="admin", password="testpass123", name="관리자")
        self.user = User.objects.create_user(login_id="user1", password="testpass123", name="사용자")
        self.system_role = Role.objects.create(code="STUDENT", name="학생", is_system=True, sort_order=4)
        self.role = Role.objects.create(code="TUTOR", name="튜터", sort_order=5)
        self.menu = Menu.objects.create(code="m1", title="메뉴1")
        self.client.force_authenticate(user=self.admin)

    def test_requires_admin(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get("/api/roles/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data["success"])

    def test_list_and_filter(self):
        response = self.client.get("/api/roles/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([role["code"] for role in response.data["data"]], ["STUDENT", "TUTOR"])

        response = self.client.get("/api/roles/", {"is_system": "false"})
        self.assertEqual([role["code"] for role in response.data["data"]], ["TUTOR"])

        response = self.client.get("/api/roles/", {"search": "튜터"})
        self.assertEqual([role["code"] for role in response.data["data"]], ["TUTOR"])

    def test_create(self):
        response = self.client.post(
            "/api/roles/",
            {"code": "GRADER", "name": "채점자"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        self.assertFalse(response.data["data"]["is_system"])

    def test_create_invalid_code(self):
        response = self.client.post("/api/roles/", {"code": "grader", "name": "채점자"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["field"], "code")

    def test_update_active_flag_notifies_members(self):
        UserRole.objects.create(user=self.user, role=self.role)

        with mock.patch("apps.accounts.services.permission_service.notify_permission_changed") as notify:
            with self.captureOnCommitCallbacks(execute=True):
                response = self.client.patch(f"/api/roles/{self.role.id}/", {"is_active": False}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["data"]["is_active"])
        notify.assert_called_once_with(self.user.id)

    def test_delete(self):
        response = self.client.delete(f"/api/roles/{self.role.id}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Role.objects.filter(pk=self.role.id).exists())

    def test_delete_system_role(self):
        response = self.client.delete(f"/api/roles/{self.system_role.id}/")

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertEqual(response.data["error"]["code"], "ERR_401")

    def test_delete_role_in_use(self):
        UserRole.objects.create(user=self.user, role=self.role)

        response = self.client.delete(f"/api/roles/{self.role.id}/")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "ERR_301")

    def test_unknown_role(self):
        response = self.client.get("/api/roles/99999/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data["success"])

    def test_role_menus(self):
        url = f"/api/roles/{self.role.id}/menus/"

        response = self.client.post(url, {"menu_ids": [self.menu.id], "reason": "초기 설정"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["added"], [self.menu.id])

        response = self.client.get(url)
        self.assertEqual(response.data["data"]["menu_ids"], [self.menu.id])
        self.assertTrue(RolePermission.objects.filter(role=self.role, menu=self.menu).exists())

        response = self.client.get(f"/api/roles/{self.role.id}/history/")
        self.assertEqual(response.data["data"][0]["action"], "ADD")
        self.assertEqual(response.data["data"][0]["changed_by_name"], "admin")

    def test_role_menus_invalid_role_id(self):
        response = self.client.get("/api/roles/abc/menus/")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["field"], "role_id")

    def test_user_roles(self):
        url = f"/api/users/{self.user.id}/roles/"

        response = self.client.post(url, {"roles": ["TUTOR", str(self.system_role.id)]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([role["code"] for role in response.data["data"]], ["STUDENT", "TUTOR"])

        response = self.client.get(url)
        self.assertEqual([role["code"] for role in response.data["data"]], ["STUDENT", "TUTOR"])

    def test_user_roles_unknown_role(self):
        response = self.client.post(
            f"/api/users/{self.user.id}/roles/",
            {"roles": ["NOPE"]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["field"], "roles")
