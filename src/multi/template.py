"""Per-job command template substitution.

Supported tokens:

    %t  the job's thread id
    %i  the job's input item (empty when no input line exists)
    %%  a literal percent sign

A ``%`` followed by any other character is dropped together with that
character, and a trailing lone ``%`` is dropped as well.  The scanner never
raises on malformed templates.
"""

from __future__ import annotations

THREAD_ID_TOKEN = "t"
ITEM_TOKEN = "i"
ESCAPE = "%"


def format_template(template: str, thread_id: int, item: str) -> str:
    """Substitute ``%t``, ``%i`` and ``%%`` in *template*.

    Args:
        template: Template string (operated on per code point).
        thread_id: Zero-based job index.
        item: Input item for the job, or ``""``.

    Returns:
        The formatted string.
    """
    out: list[str] = []
    pending = False

    for ch in template:
        if not pending:
            if ch == ESCAPE:
                pending = True
            else:
                out.append(ch)
            continue

        pending = False
        if ch == THREAD_ID_TOKEN:
            out.append(str(thread_id))
        elif ch == ITEM_TOKEN:
            out.append(item)
        elif ch == ESCAPE:
            out.append(ESCAPE)
        # anything else: dropped along with the escape

    return "".join(out)


def format_argv(argv: list[str] | tuple[str, ...], thread_id: int, item: str) -> list[str]:
    """Format every argument of *argv* independently."""
    return [format_template(arg, thread_id, item) for arg in argv]
