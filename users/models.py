"""User model for storefront accounts.

Extends Django's `AbstractUser` so the email address is unique and stored
normalized; sign-in is by email.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user with a unique, lowercase email."""

    email = models.EmailField(unique=True)

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)
