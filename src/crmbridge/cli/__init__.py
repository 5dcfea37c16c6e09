"""CLI package for crmbridge.

The main Typer app is created in app.py and commands are registered from
each module on import.
"""

import crmbridge.cli.commands_records  # noqa: F401, E402
import crmbridge.cli.commands_token  # noqa: F401, E402
from crmbridge.cli.app import CLIState, app

__all__ = ["app", "CLIState"]
