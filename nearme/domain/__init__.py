"""Domain layer - core directory logic and interfaces.

This layer contains:
- Domain entities (subdomain intent, business records, worlds)
- Data provider interfaces (Strategy Pattern)
- World handler interface
- Domain exceptions
"""
