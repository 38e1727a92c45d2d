"""Service layer: project-local helpers and release orchestration."""
