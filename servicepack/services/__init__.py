"""Service layer package.

Contains the HTTP collaborator, the bundled country reference dataset and the
two remote lookup services built on top of them.
"""
