"""
Session Service - JSON Session Store

Clients persist arbitrary JSON documents ("session data") under a
two-level namespace of source and type, and retrieve them by id or by
field-level query.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- All communication through defined interfaces

Modules:
- identity: Content-addressed session identifiers
- query: Field path validation and filter matching
- storage: Document persistence abstraction
- session: Session repository and error taxonomy
- api: REST API models
- config: Environment configuration
"""

__version__ = "1.0.0"
