# Generated manually - RolePermission (Role - Menu) / RolePermissionHistory

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ("accounts", "0001_initial"),
        ("menus", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="RolePermission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("menu", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="role_permissions",
                    to="menus.menu",
                )),
                ("role", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="menu_permissions",
                    to="accounts.role",
                )),
            ],
            options={
                "db_table": "accounts_role_permissions",
                "unique_together": {("role", "menu")},
            },
        ),
        migrations.CreateModel(
            name="RolePermissionHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(choices=[("ADD", "권한 추가"), ("REMOVE", "권한 제거")], max_length=10)),
                ("changed_at", models.DateTimeField(auto_now_add=True)),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("changed_by", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="permission_changes",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("menu", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="menus.menu")),
                ("role", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="accounts.role")),
            ],
            options={
                "ordering": ["-changed_at", "-id"],
            },
        ),
    ]
