"""
Generated Schedules Domain

Review workflow for weekly schedules produced by the generation engine:
listing drafts, editing their time slots, and approving or rejecting them.

STRUCTURE:
- schemas.py: request/response models
- repository.py: database access, conditional status transitions
- service.py: role scoping and the draft -> approved/rejected state machine
- router.py: FastAPI endpoints under /generated-schedules
"""

from .router import router

__all__ = ["router"]
