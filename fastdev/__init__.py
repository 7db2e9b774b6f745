"""create-fast-dev: scaffold projects from remote templates.

Downloads a template, merges its ``fast-dev.config.json`` into the template
descriptor, and reshapes the project tree through an ordered pipeline of
transformers (package rename, ``.env`` setup, README personalisation,
feature pruning and Turborepo adaptation).
"""

__version__ = "0.0.1"
