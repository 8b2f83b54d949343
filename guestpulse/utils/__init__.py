"""
Utility modules for GuestPulse.

Cross-cutting concerns:
- Storage: Firestore reads and writes
- Filtering: Client-side feedback list filters
- Export: CSV trend tables
"""
