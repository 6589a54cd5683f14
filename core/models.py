"""
Database models for the hospital finance backend.

Only identity and bookkeeping live here: projects (hospital sites),
users, the per-login session tokens and the audit trail. Cash
payments and cash items are written by the database's own stored
procedures and have no Django model.
"""
from __future__ import annotations

import secrets

from django.contrib.auth.models import AbstractUser
from django.db import models


class Project(models.Model):
    """A hospital site that payments, invoices and cashboxes belong to."""
    name = models.CharField(max_length=100)
    abbr = models.CharField(max_length=10, unique=True)
    locked = models.BooleanField(default=False)

    def __str__(self) -> str:
        return f"{self.name} ({self.abbr})"


class User(AbstractUser):
    """Custom user with a display name and the projects it may log into."""
    display_name = models.CharField(max_length=100, blank=True)
    projects = models.ManyToManyField(Project, blank=True, related_name='users')

    def get_display_name(self) -> str:
        return self.display_name or self.get_full_name() or self.username

    def __str__(self) -> str:
        return self.get_display_name()


class SessionToken(models.Model):
    """An API token issued by one login and bound to its project.

    Each login gets its own key, so logging into another project never
    changes the project of a token handed out earlier.
    """
    key = models.CharField(max_length=40, primary_key=True)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='session_tokens')
    project = models.ForeignKey(Project, null=True, blank=True, on_delete=models.CASCADE, related_name='session_tokens')
    created = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        if not self.key:
            self.key = secrets.token_hex(20)
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.user_id}@{self.project_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    # uuids for finance records, so stored as text
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='core_audite_action_4b6a1e_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='core_audite_object__9c2f7d_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.object_type}:{self.object_id}"
