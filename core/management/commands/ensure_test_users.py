# core/management/commands/ensure_test_users.py
from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password
from core.models import Project, User

DEFAULT_PROJECT = {"abbr": "HSP", "name": "Test Hospital"}

TEST_SET = [
    ("cashier1", "Cashier One", False),
    ("accountant1", "Accountant One", False),
    ("superuser", "Super User", True),
]


class Command(BaseCommand):
    help = "Ensure the default project and test users exist, password=123456 (idempotent)."

    def handle(self, *args, **opts):
        project, _ = Project.objects.get_or_create(
            abbr=DEFAULT_PROJECT["abbr"], defaults={"name": DEFAULT_PROJECT["name"]}
        )
        for username, display_name, is_super in TEST_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={
                    "display_name": display_name,
                    "password": make_password("123456"),
                    "is_active": True,
                    "is_superuser": is_super,
                    "is_staff": is_super,
                },
            )
            if not created:
                u.password = make_password("123456")
                u.is_active = True
                u.save(update_fields=["password", "is_active"])
            u.projects.add(project)
            self.stdout.write(self.style.SUCCESS(f"ok: {username} -> {project.abbr}"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
