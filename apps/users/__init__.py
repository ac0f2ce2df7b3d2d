"""Users app package.

Defines the custom user model (email login, ``user``/``owner``/``admin``
roles), JWT based authentication flows, password reset tokens and the
role permission classes used by the other apps. Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout the
project.
"""
