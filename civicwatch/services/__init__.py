"""
Services layer - Business logic goes here.
Keep services focused on specific domains (ingestion, escalation, analytics).

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Services receive their store, clock and providers explicitly
- build_container() in container.py is the only place they are wired
"""
