"""Text-run codec: join consecutive 401 lines, split them back on injection.

Extraction merges every maximal stretch of Show Text (401) commands on a
page into one string so translators edit a whole message box at a time.
Injection cannot change how many live commands exist, so the split side
never writes past the span the run was built from.
"""

import copy
import logging

from . import CODE_SHOW_CHOICES, CODE_SHOW_TEXT, LINE_SEPARATOR, is_text_code
from .document import Anchor, TextRun
from .errors import AnchorOutOfBoundsError

log = logging.getLogger(__name__)


def walk_text_commands(cmd_list):
    """Yield ``(index, command)`` for each text-bearing command, in list order.

    Null slots and every other opcode are skipped; callers detect them as a
    gap in the yielded indices.
    """
    if not isinstance(cmd_list, list):
        return
    for index, cmd in enumerate(cmd_list):
        if isinstance(cmd, dict) and is_text_code(cmd.get("code")):
            yield index, cmd


def _first_param(cmd: dict):
    params = cmd.get("parameters")
    if isinstance(params, list) and params:
        return copy.deepcopy(params[0])
    return ""


def _line_text(cmd: dict) -> str:
    text = _first_param(cmd)
    return "" if text is None else str(text)


def join_text_runs(cmd_list, container: int, page: int = 0,
                   join_lines: bool = True) -> list:
    """Build the text runs of one page.

    Args:
        cmd_list: The page's live command list.
        container: Event / troop / common event id recorded in each anchor.
        page: Page index recorded in each anchor.
        join_lines: False keeps every 401 as its own run (run length 1).

    Returns:
        List of TextRun in page order.
    """
    runs = []
    lines = []
    anchor = None
    last_index = None

    def close():
        nonlocal anchor
        if lines:
            runs.append(TextRun(anchor, [LINE_SEPARATOR.join(lines)],
                                len(lines)))
            lines.clear()
        anchor = None

    for index, cmd in walk_text_commands(cmd_list):
        # Anything between two text commands (other opcode, null) ends a run
        if last_index is not None and index != last_index + 1:
            close()
        last_index = index

        code = cmd.get("code")
        if code == CODE_SHOW_TEXT and join_lines:
            if not lines:
                anchor = Anchor(container, page, index)
            lines.append(_line_text(cmd))
            continue

        close()
        if code == CODE_SHOW_TEXT:
            runs.append(TextRun(Anchor(container, page, index),
                                [_line_text(cmd)], 1))
        else:
            # 102 / 405 are never merged with neighbours
            runs.append(TextRun(Anchor(container, page, index),
                                [_first_param(cmd)]))
    close()
    return runs


def _resolve(run: TextRun, cmd_list) -> dict:
    """Return the live command at the run's anchor or raise."""
    size = len(cmd_list) if isinstance(cmd_list, list) else 0
    index = run.anchor.index
    if index < 0 or index >= size:
        raise AnchorOutOfBoundsError(run.anchor, size)
    cmd = cmd_list[index]
    if not isinstance(cmd, dict) or not is_text_code(cmd.get("code")):
        raise AnchorOutOfBoundsError(run.anchor, size)
    return cmd


def _set_first_param(cmd: dict, value):
    params = cmd.get("parameters")
    if not isinstance(params, list):
        params = cmd["parameters"] = []
    if params:
        params[0] = copy.deepcopy(value)
    else:
        params.append(copy.deepcopy(value))


def _fits(cmd: dict, value) -> bool:
    """Choice commands take a list, line commands take a string."""
    if cmd.get("code") == CODE_SHOW_CHOICES:
        return isinstance(value, list)
    return isinstance(value, str)


def split_text_run(run: TextRun, cmd_list) -> int:
    """Write a run back onto the live command list.

    A run without a run length overwrites parameters[0] of its anchor
    command verbatim, provided the value is a list for a choice command
    and a string otherwise.  A joined run is split on newlines: line *n* goes to
    slot ``anchor.index + n``; blank lines keep the live slot's old text and
    lines past the original span are dropped.

    Returns:
        Number of commands written.

    Raises:
        AnchorOutOfBoundsError: The anchor no longer points at a live text
            command (the data shrank since extraction).
    """
    text = run.text
    if run.is_joined and (not run.run_length or not isinstance(text, str)
                          or not text):
        return 0

    cmd = _resolve(run, cmd_list)
    if not run.is_joined:
        if not run.parameters:
            return 0
        value = run.parameters[0]
        if not _fits(cmd, value):
            log.warning("Run at %s: %s does not fit code %s, skipped",
                        run.anchor, type(value).__name__, cmd.get("code"))
            return 0
        _set_first_param(cmd, value)
        return 1

    start = run.anchor.index
    span = min(run.run_length, len(cmd_list) - start)
    if span < run.run_length:
        log.warning("Run at %s expects %d lines but only %d commands remain",
                    run.anchor, run.run_length, span)

    written = 0
    for position, line in enumerate(text.split(LINE_SEPARATOR)):
        if not line.strip():
            continue
        if position >= span:
            break
        target = cmd_list[start + position]
        if not isinstance(target, dict) or target.get("code") != CODE_SHOW_TEXT:
            log.warning("Run at %s: slot %d is no longer a text line, "
                        "stopping", run.anchor, start + position)
            break
        _set_first_param(target, line)
        written += 1
    return written
