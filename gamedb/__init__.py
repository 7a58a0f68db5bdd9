"""
Database migrations and seed loading for the RPG game backend.

The game server owns runtime DB access. This package is for repo-level DB operations:
- an ordered, ledger-tracked list of migration steps
- idempotent seeding of reference data (materials, items, skills, quests, admin account)
"""
