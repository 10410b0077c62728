from dbfskit.cli.core import (  # noqa: F401
    get_client,
    print_table,
    raise_error,
    warn,
)
