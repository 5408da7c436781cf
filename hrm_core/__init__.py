"""
HRM Core: tenant lifecycle, registration, sessions and role-scoped
authorization for a multi-tenant HR platform.
"""

__version__ = "0.1.0"
