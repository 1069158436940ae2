"""objectapi: user resource on a generic object-operation framework.

To use the Flask app:
    from objectapi.flask_app import create_app

To run an operation without Flask:
    from objectapi.core.user_operation import UserOperation
    from objectapi.core.operations import run_operation
"""
# Note: flask_app is not imported by default so the core and the admin CLI
# can be used without building an application
