"""Logging and health plumbing. Import from the submodules directly."""
