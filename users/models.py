# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models

from core.constants import (
    ROLE_ADMIN,
    ROLE_CHOICES,
    ROLE_CO_OPERATOR,
    ROLE_MANAGER,
    ROLE_MEMBER,
    ROLE_TEAM_LEADER,
)


class User(AbstractUser):
    """
    Account with a single, flat role.

    The role is assigned at creation (registration or the user
    directory) and is never changed by the project/task workflow.
    """
    ROLE_MANAGER = ROLE_MANAGER
    ROLE_TEAM_LEADER = ROLE_TEAM_LEADER
    ROLE_CO_OPERATOR = ROLE_CO_OPERATOR
    ROLE_ADMIN = ROLE_ADMIN
    ROLE_MEMBER = ROLE_MEMBER

    name = models.CharField(max_length=150, blank=True, default="")
    email = models.EmailField(unique=True)

    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        default=ROLE_MEMBER,
    )

    def save(self, *args, **kwargs):
        # Login is by e-mail; username only has to be unique
        if not self.username:
            self.username = self.email
        super().save(*args, **kwargs)

    @property
    def display_name(self):
        return self.name or self.username

    def __str__(self):
        return f"{self.display_name} <{self.email}>"
