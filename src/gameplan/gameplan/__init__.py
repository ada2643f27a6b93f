"""GamePlan package.

Feature modules (users, attendance, progress, geo) hold the domain logic,
with a thin Flask controller layer on top and repository protocols below
that hide the hosted backend.
"""
