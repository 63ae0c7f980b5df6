"""Identity context: profiles, roles and the explicit session context."""
