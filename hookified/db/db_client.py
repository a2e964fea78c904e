from hookified.db.hook_client import HookClient
from hookified.db.hook_run_client import HookRunClient
from hookified.db.user_client import UserClient


class DBClient(
    HookClient,
    HookRunClient,
    UserClient,
):
    """
    Unified database client that combines all specialized database operations.

    This client inherits from:
    - HookClient: handles hook definitions and lifecycle fields
    - HookRunClient: handles hook run audit records
    - UserClient: handles user operations
    """

    pass
