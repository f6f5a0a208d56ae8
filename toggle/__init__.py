"""Feature flags: tenant-scoped storage, rule evaluation, rollouts and Flask views."""

__version__ = "0.1.0"