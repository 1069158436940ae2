"""Core Object-Operation Module

This module holds the resource-operation contract, independent of the
HTTP framework (Flask).

Architecture:
    - Pure Python (no Flask dependencies in core logic)
    - Testable without HTTP mocking
    - Reusable from the Flask blueprint and the admin CLI

Module Structure:
    - models.py          : User domain object (Principal alias)
    - db.py              : sqlite3 connection helpers and schema
    - repository.py      : UserRepository (load/create/update/delete) + factory lookup
    - cache.py           : MemoryCache used by the repository
    - hooks.py           : HookRegistry (events and filters)
    - audit.py           : Signed JSONL audit trail for user writes
    - request_context.py : ParsedRequest, RequestContext, field extraction
    - metadata.py        : Metadata validator and application
    - authorization.py   : Authorization policy for the user resource
    - operations.py      : Generic object operation (gates, routing, default handlers)
    - user_operation.py  : UserOperation (the user resource)

Usage Pattern:
    Import explicitly when needed:
        from objectapi.core.request_context import ParsedRequest, RequestContext
        from objectapi.core.user_operation import UserOperation
        from objectapi.core.operations import run_operation

        context = RequestContext.build(ParsedRequest("POST", "/api/user", params))
        response = run_operation(UserOperation(context, settings, hooks), principal, db, cache)
"""
