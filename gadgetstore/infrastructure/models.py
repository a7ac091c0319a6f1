# Database models of the infrastructure layer (authentication only).
import uuid

from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager

# ====================================================================
# ACCOUNT MANAGER (email is the login identifier)
# ====================================================================

class AccountManager(BaseUserManager):
    """
    Manager where the email is the unique identifier for authentication
    instead of the username.
    """
    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('The email must be set')
        email = self.normalize_email(email).lower()
        extra_fields.setdefault('role', 'user')
        extra_fields.setdefault('username', email.split('@')[0])
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Superusers are store administrators."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', 'admin')

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


# ====================================================================
# ACCOUNT MODEL
# ====================================================================

class Account(AbstractUser):
    """
    Store account. Logs in with 'email'; 'username' is a display name and is
    not unique.
    """
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('user', 'User'),
    ]
    AUTH_PROVIDER_CHOICES = [
        ('jwt', 'Email and password'),
        ('google', 'Google'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField('username', max_length=150)
    email = models.EmailField('email address', unique=True)

    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='user')
    phone_number = models.CharField(max_length=30, blank=True, null=True)
    auth_provider = models.CharField(max_length=10, choices=AUTH_PROVIDER_CHOICES, default='jwt')

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    objects = AccountManager()

    class Meta:
        verbose_name = 'Account'
        verbose_name_plural = 'Accounts'
        db_table = 'infra_account'

    def __str__(self):
        return self.email

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'
