"""
Service layer package.

Each service module encapsulates one concern of the department
hierarchy engine.  Services are the only layer that interacts with
models; CLI commands never access the database directly.

Import services as needed::

    from app.services import hierarchy_service
    hierarchy_service.move_department(9, new_parent_id=4)
"""
