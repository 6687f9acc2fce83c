"""
Authentication models.

This module defines the identity the chat subsystem reads but never mutates:
- User: Custom user model with email-based authentication and a role

Related files:
    - managers.py: Custom user manager for email-based creation
    - services.py: TokenAuthService resolves bearer tokens to users

Security:
    - User passwords hashed with Django's PBKDF2
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        first_name / last_name: Display name parts shown in chats
        role: admin, tutor or student; admins are privileged in chats
        profile_image: Optional avatar URL
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        tutor = User.objects.create_user(
            email="tutor@example.com",
            password="securepassword",
            first_name="Ada",
            role=User.Role.TUTOR,
        )
    """

    class Role(models.TextChoices):
        ADMIN = "admin", "Admin"
        TUTOR = "tutor", "Tutor"
        STUDENT = "student", "Student"

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.STUDENT,
        db_index=True,
    )
    profile_image = models.URLField(
        max_length=500,
        blank=True,
        null=True,
        help_text="Avatar URL shown next to the user's messages",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        """Return "first last", or the email when no name is set."""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.email

    def get_short_name(self):
        return self.first_name or self.email.split("@")[0]

    @property
    def display_name(self):
        return self.get_full_name()
