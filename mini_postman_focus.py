"""Focus engine for the request form.

Fields are addressed by small integer ids: the method selector, URL and body
take 0, 1 and 2, header pair ``i`` takes ``3 + 2*i`` (name) and ``4 + 2*i``
(value), and the submit action sits on a sentinel outside that range.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple
METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]
METHOD_FIELD_ID = 0
URL_FIELD_ID = 1
BODY_FIELD_ID = 2
FIXED_FIELD_COUNT = 3
# negative so no header id can ever reach it
SUBMIT_FIELD_ID = -1
NAME_SLOT = 0
VALUE_SLOT = 1
SUBMIT_KEY = "ctrl+s"
ADD_HEADER_KEY = "ctrl+n"
REMOVE_HEADER_KEY = "ctrl+r"
class Action(Enum):
    FOCUS = "focus"
    DELEGATE = "delegate"
    SELECT = "select"
    INDENT = "indent"
    SUBMIT = "submit"
    QUIT = "quit"
    ADD_HEADER = "add_header"
    REMOVE_HEADER = "remove_header"
    NOOP = "noop"
@dataclass(frozen=True)
class BodyCursor:
    line: int = 0
    line_count: int = 1
    @property
    def on_first_line(self) -> bool: return self.line <= 0
    @property
    def on_last_line(self) -> bool: return self.line >= self.line_count - 1
@dataclass(frozen=True)
class Transition:
    action: Action
    focus: int
    selected_index: int
def field_count(header_count: int) -> int:
    return FIXED_FIELD_COUNT + 2 * header_count
def header_field_id(index: int, slot: int = NAME_SLOT) -> int:
    return FIXED_FIELD_COUNT + 2 * index + slot
def header_slot(field_id: int, header_count: int) -> Optional[Tuple[int, int]]:
    """Inverse of header_field_id; None when the id is not a live header field."""
    if field_id < FIXED_FIELD_COUNT or field_id >= field_count(header_count):
        return None
    return divmod(field_id - FIXED_FIELD_COUNT, 2)
def is_header_id(field_id: int, header_count: int) -> bool:
    return header_slot(field_id, header_count) is not None
def is_valid_field_id(field_id: int, header_count: int) -> bool:
    return field_id == SUBMIT_FIELD_ID or 0 <= field_id < field_count(header_count)
def is_text_field(field_id: int, header_count: int) -> bool:
    return field_id in (URL_FIELD_ID, BODY_FIELD_ID) or is_header_id(field_id, header_count)
def clamp_focus(field_id: int, header_count: int) -> int:
    """Stale ids (e.g. a removed header) collapse onto the submit action."""
    return field_id if is_valid_field_id(field_id, header_count) else SUBMIT_FIELD_ID
def first_header_or_submit(header_count: int) -> int:
    return header_field_id(0) if header_count > 0 else SUBMIT_FIELD_ID
def _advance(field_id: int, header_count: int) -> int:
    if field_id < field_count(header_count) - 1:
        return field_id + 1
    return SUBMIT_FIELD_ID
def focus_projection(current: int, header_count: int) -> Iterator[Tuple[int, bool]]:
    """Yield (field_id, focused) for every field, submit action last."""
    for field_id in range(FIXED_FIELD_COUNT):
        yield field_id, field_id == current
    for index in range(header_count):
        for slot in (NAME_SLOT, VALUE_SLOT):
            field_id = header_field_id(index, slot)
            yield field_id, field_id == current
    yield SUBMIT_FIELD_ID, current == SUBMIT_FIELD_ID
def transition(current: int, header_count: int, key: str, body: BodyCursor = BodyCursor(),
               selected_index: int = 0, choice_count: int = len(METHODS)) -> Transition:
    """Map one key press on the focused field to the next form transition.

    ``body`` is only consulted while the body field is focused, to decide
    whether up/down move the text cursor or leave the field.
    """
    def to(action, focus=current, index=selected_index):
        return Transition(action, focus, index)
    on_header = is_header_id(current, header_count)
    if key == "escape":
        return to(Action.QUIT)
    if key == SUBMIT_KEY:
        return to(Action.SUBMIT)
    if key == ADD_HEADER_KEY:
        return to(Action.ADD_HEADER)
    if key == REMOVE_HEADER_KEY:
        return to(Action.REMOVE_HEADER if header_count > 0 else Action.NOOP)
    if key == "enter":
        if current == METHOD_FIELD_ID:
            return to(Action.FOCUS, URL_FIELD_ID)
        if current == URL_FIELD_ID:
            return to(Action.FOCUS, BODY_FIELD_ID)
        if current == BODY_FIELD_ID:
            return to(Action.DELEGATE)
        if current == SUBMIT_FIELD_ID:
            return to(Action.SUBMIT)
        return to(Action.FOCUS, _advance(current, header_count))
    if key == "down":
        if current == METHOD_FIELD_ID:
            return to(Action.FOCUS, URL_FIELD_ID)
        if current == URL_FIELD_ID:
            return to(Action.FOCUS, BODY_FIELD_ID)
        if current == BODY_FIELD_ID:
            if not body.on_last_line:
                return to(Action.DELEGATE)
            return to(Action.FOCUS, first_header_or_submit(header_count))
        if current == SUBMIT_FIELD_ID:
            return to(Action.NOOP)
        return to(Action.FOCUS, _advance(current, header_count))
    if key == "up":
        if current == METHOD_FIELD_ID:
            return to(Action.NOOP)
        if current == URL_FIELD_ID:
            return to(Action.FOCUS, METHOD_FIELD_ID)
        if current == BODY_FIELD_ID:
            if not body.on_first_line:
                return to(Action.DELEGATE)
            return to(Action.FOCUS, URL_FIELD_ID)
        if current == SUBMIT_FIELD_ID:
            if header_count > 0:
                return to(Action.FOCUS, header_field_id(header_count - 1))
            return to(Action.FOCUS, BODY_FIELD_ID)
        # step by two so name stays on name and value on value
        if current <= header_field_id(0, VALUE_SLOT):
            return to(Action.FOCUS, BODY_FIELD_ID)
        return to(Action.FOCUS, current - 2)
    if key in ("left", "right"):
        if current == METHOD_FIELD_ID:
            step = -1 if key == "left" else 1
            index = min(max(selected_index + step, 0), choice_count - 1)
            return to(Action.SELECT, index=index)
        if current in (URL_FIELD_ID, BODY_FIELD_ID):
            return to(Action.DELEGATE)
        if on_header:
            if key == "right":
                return to(Action.FOCUS, _advance(current, header_count))
            return to(Action.FOCUS, max(current - 1, BODY_FIELD_ID + 1))
        return to(Action.NOOP)
    if key == "tab":
        return to(Action.INDENT if current == BODY_FIELD_ID else Action.NOOP)
    if key == "shift+tab":
        return to(Action.NOOP)
    if key == "ctrl+up":
        return to(Action.FOCUS, URL_FIELD_ID) if current == BODY_FIELD_ID else to(Action.NOOP)
    if key == "ctrl+down":
        if current == BODY_FIELD_ID:
            return to(Action.FOCUS, first_header_or_submit(header_count))
        return to(Action.NOOP)
    if is_text_field(current, header_count):
        return to(Action.DELEGATE)
    if key == "q":
        return to(Action.QUIT)
    return to(Action.NOOP)
class FocusEngine:
    """Holds the focus state and the method selector, and applies transitions.

    The header count is passed in on every call rather than stored, so the
    engine can never hold on to an id addressing a header that was removed.
    """
    def __init__(self, choices: Optional[List[str]] = None):
        self.choices = list(choices or METHODS)
        self.current = METHOD_FIELD_ID
        self.selected_index = 0
    @property
    def method(self) -> str:
        return self.choices[self.selected_index]
    def handle_key(self, key: str, header_count: int, body: BodyCursor = BodyCursor()) -> Transition:
        t = transition(self.current, header_count, key, body, self.selected_index, len(self.choices))
        if t.focus != self.current:
            logging.debug(f"Focus {self.current} -> {t.focus} on {key!r}")
        self.current = t.focus
        self.selected_index = t.selected_index
        return t
    def focus_field(self, field_id: int, header_count: int) -> int:
        if not is_valid_field_id(field_id, header_count):
            raise ValueError(f"No field with id {field_id} among {header_count} header pairs")
        self.current = field_id
        return self.current
    def header_added(self, header_count: int) -> int:
        """Move focus to the name field of the pair that was just appended."""
        return self.focus_field(header_field_id(header_count - 1), header_count)
    def removal_index(self, header_count: int) -> Optional[int]:
        """Pair to drop on a remove request: the focused one, else the last."""
        if header_count <= 0:
            return None
        slot = header_slot(self.current, header_count)
        return slot[0] if slot else header_count - 1
    def clamp(self, header_count: int) -> int:
        clamped = clamp_focus(self.current, header_count)
        if clamped != self.current:
            logging.info(f"Focus {self.current} no longer exists; moved to submit")
        self.current = clamped
        return self.current
    def projection(self, header_count: int) -> List[Tuple[int, bool]]:
        return list(focus_projection(self.current, header_count))
