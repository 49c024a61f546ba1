"""TeamSync API: multi-tenant workspaces, members, projects and tasks."""
