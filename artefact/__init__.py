"""Artefact: team bookmark workspaces."""
