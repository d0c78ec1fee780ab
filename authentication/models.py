"""
Authentication models for CivicPulse Backend.

Contains:
- UserRole / UserStatus constants
- UserManager handling email-based account creation
- User, the custom auth model (email login, role, optional department/region)
"""

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models

from core.models import BaseModel


class UserRole:
    """
    User role constants.

    CITIZEN: files reports and follows them through to closure
    OFFICER: works assigned reports and posts status updates
    ADMIN:   manages users, catalogue and analytics
    """
    CITIZEN = 'citizen'
    OFFICER = 'officer'
    ADMIN = 'admin'

    CHOICES = [
        (CITIZEN, 'Citizen'),
        (OFFICER, 'Officer'),
        (ADMIN, 'Admin'),
    ]

    STAFF_ROLES = [OFFICER, ADMIN]


class UserStatus:
    """User account status constants."""
    ACTIVE = 'active'
    INACTIVE = 'inactive'

    CHOICES = [
        (ACTIVE, 'Active'),
        (INACTIVE, 'Inactive'),
    ]


class UserManager(BaseUserManager):
    """
    Manager for the email-keyed User model.
    Soft-deleted users are hidden like every other BaseModel row.
    """

    use_in_migrations = True

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)

    def all_with_deleted(self):
        return super().get_queryset()

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('User must have an email address')

        email = self.normalize_email(email).lower()
        extra_fields.setdefault('role', UserRole.CITIZEN)
        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields['role'] = UserRole.ADMIN
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('name', 'Administrator')
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin, BaseModel):
    """
    CivicPulse account.

    Email is the login identifier. ``status`` drives whether the account
    may log in or use a token; ``is_active`` mirrors it for Django auth.
    """

    name = models.CharField(
        max_length=100,
        help_text="Display name"
    )

    email = models.EmailField(
        max_length=255,
        unique=True,
        help_text="Login identifier"
    )

    role = models.CharField(
        max_length=20,
        choices=UserRole.CHOICES,
        default=UserRole.CITIZEN,
        db_index=True
    )

    status = models.CharField(
        max_length=20,
        choices=UserStatus.CHOICES,
        default=UserStatus.ACTIVE,
        db_index=True
    )

    phone = models.CharField(
        max_length=30,
        blank=True
    )

    department = models.ForeignKey(
        'organization.Department',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='users'
    )

    region = models.ForeignKey(
        'organization.Region',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='users'
    )

    # Django admin site access
    is_staff = models.BooleanField(default=False)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['role', 'status'], name='users_role_status_idx'),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}> ({self.role})"

    @property
    def is_active(self):
        return self.status == UserStatus.ACTIVE and not self.is_deleted
