"""Django project package for the digest queue service."""
