"""JSON API for accounts, roles and shared to-do lists."""
