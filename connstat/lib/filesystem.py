"""Source access for socket and ASN tables."""

from typing import TYPE_CHECKING

from connstat.lib.errors import SourceUnavailable

if TYPE_CHECKING:
    from connstat.core.context import Context


def read_source(
    path: str,
    context: "Context | None" = None,
) -> str:
    """
    Read a table source.

    Args:
        path: Path to file
        context: Execution context (for testing)

    Returns:
        File contents

    Raises:
        SourceUnavailable: If the file can't be opened or read
    """
    if context is None:
        from connstat.core.context import Context
        context = Context()

    try:
        return context.read_file(path)
    except FileNotFoundError:
        raise SourceUnavailable(path, "file not found")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnavailable(path, str(e)) from e
